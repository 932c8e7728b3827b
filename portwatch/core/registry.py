"""Immutable registry of ports: live scan results plus overlay placeholders."""

from dataclasses import dataclass
from types import MappingProxyType
from typing import Iterable, Iterator, Mapping, Optional, Union

from .models import PortRecord


@dataclass(frozen=True)
class ActiveEntry:
    """A port backed by a process from the latest scan."""
    record: PortRecord

    @property
    def port(self) -> int:
        return self.record.port

    @property
    def is_active(self) -> bool:
        return True


@dataclass(frozen=True)
class Placeholder:
    """A favorited or watched port that is not listening right now."""
    port: int
    favorited: bool = False
    watched: bool = False

    @property
    def record(self) -> PortRecord:
        return PortRecord.inactive(self.port)

    @property
    def is_active(self) -> bool:
        return False


Entry = Union[ActiveEntry, Placeholder]


class Registry:
    """
    Read-only union of the latest scan and the favorite/watched placeholders,
    keyed by port. Never modified after construction; the engine replaces it
    wholesale on every merge.
    """

    __slots__ = ("_entries", "_records")

    def __init__(self, entries: Iterable[Entry] = ()):
        by_port: dict[int, Entry] = {}
        for entry in entries:
            if entry.port in by_port:
                raise ValueError(f"Duplicate registry entry for port {entry.port}")
            by_port[entry.port] = entry
        ordered = {port: by_port[port] for port in sorted(by_port)}
        self._entries: Mapping[int, Entry] = MappingProxyType(ordered)
        self._records: tuple[PortRecord, ...] = tuple(e.record for e in ordered.values())

    @classmethod
    def build(cls, scan: Iterable[PortRecord], favorites: Iterable[int],
              watched: Iterable[int]) -> "Registry":
        """
        Build a registry from one scan and the current overlays.

        The first record seen for a port wins; later records for the same port
        in the same scan are dropped.
        """
        entries: dict[int, Entry] = {}
        for record in scan:
            if record.port not in entries:
                entries[record.port] = ActiveEntry(record)

        favorite_set = frozenset(favorites)
        watched_set = frozenset(watched)
        for port in favorite_set | watched_set:
            if port not in entries:
                entries[port] = Placeholder(
                    port,
                    favorited=port in favorite_set,
                    watched=port in watched_set,
                )
        return cls(entries.values())

    @property
    def entries(self) -> Mapping[int, Entry]:
        return self._entries

    @property
    def records(self) -> tuple[PortRecord, ...]:
        return self._records

    @property
    def active_ports(self) -> frozenset[int]:
        return frozenset(p for p, e in self._entries.items() if e.is_active)

    def get(self, port: int) -> Optional[Entry]:
        return self._entries.get(port)

    def record_for(self, port: int) -> Optional[PortRecord]:
        entry = self._entries.get(port)
        return entry.record if entry else None

    def is_active(self, port: int) -> bool:
        entry = self._entries.get(port)
        return entry is not None and entry.is_active

    def __contains__(self, port: int) -> bool:
        return port in self._entries

    def __iter__(self) -> Iterator[PortRecord]:
        return iter(self._records)

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        active = len(self.active_ports)
        return f"Registry(active={active}, placeholders={len(self) - active})"


EMPTY_REGISTRY = Registry()
