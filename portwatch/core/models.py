"""Data models for PortWatch."""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional

from .classifier import ProcessType, classify

MIN_PORT = 1
MAX_PORT = 65535

PLACEHOLDER_PROCESS_NAME = "Not running"
PLACEHOLDER_FIELD = "-"


class Protocol(Enum):
    TCP = "TCP"
    UDP = "UDP"


@dataclass(frozen=True)
class PortRecord:
    """One row of the registry: a listening socket or an inactive placeholder."""
    port: int
    pid: int
    process_name: str
    address: str
    user: str
    command: str = ""
    file_descriptor: str = ""
    is_active: bool = True
    protocol: Protocol = Protocol.TCP

    @classmethod
    def active(cls, port: int, pid: int, process_name: str, address: str, user: str,
               command: str = "", file_descriptor: str = "",
               protocol: Protocol = Protocol.TCP) -> "PortRecord":
        """Create an active record from scan results."""
        return cls(
            port=port,
            pid=pid,
            process_name=process_name,
            address=address,
            user=user,
            command=command,
            file_descriptor=file_descriptor,
            is_active=True,
            protocol=protocol,
        )

    @classmethod
    def inactive(cls, port: int) -> "PortRecord":
        """Create an inactive placeholder for a favorited/watched port."""
        return cls(
            port=port,
            pid=0,
            process_name=PLACEHOLDER_PROCESS_NAME,
            address=PLACEHOLDER_FIELD,
            user=PLACEHOLDER_FIELD,
            is_active=False,
        )

    @property
    def process_type(self) -> ProcessType:
        return classify(self.process_name)

    @property
    def display_port(self) -> str:
        return f":{self.port}"

    @property
    def url(self) -> str:
        return f"http://localhost:{self.port}"

    @property
    def can_terminate(self) -> bool:
        return self.is_active and self.pid != 0


def _new_watch_id() -> str:
    return uuid.uuid4().hex


@dataclass(frozen=True)
class WatchedPort:
    """A port the user wants start/stop notifications for."""
    port: int
    notify_on_start: bool = True
    notify_on_stop: bool = True
    id: str = field(default_factory=_new_watch_id)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "port": self.port,
            "notify_on_start": self.notify_on_start,
            "notify_on_stop": self.notify_on_stop,
        }


ALL_PROCESS_TYPES: frozenset[ProcessType] = frozenset(ProcessType)


@dataclass(frozen=True)
class FilterSpec:
    """What the port list should show. The default instance shows everything."""
    search_text: str = ""
    min_port: Optional[int] = None
    max_port: Optional[int] = None
    process_types: frozenset[ProcessType] = ALL_PROCESS_TYPES
    show_only_favorites: bool = False
    show_only_watched: bool = False

    @property
    def is_active(self) -> bool:
        return (
            bool(self.search_text)
            or self.min_port is not None
            or self.max_port is not None
            or len(self.process_types) < len(ALL_PROCESS_TYPES)
            or self.show_only_favorites
            or self.show_only_watched
        )

    @staticmethod
    def reset() -> "FilterSpec":
        return FilterSpec()


class Direction(Enum):
    STARTED = "started"
    STOPPED = "stopped"


@dataclass(frozen=True)
class TransitionEvent:
    """A watched port went from inactive to active or back between two scans."""
    port: int
    process_name: str
    direction: Direction
    timestamp: datetime = field(default_factory=datetime.now, compare=False)
