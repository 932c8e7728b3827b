"""Sorted, filtered projection of the registry for presentation."""

import locale
from enum import Enum
from typing import Callable, Collection, Iterable, Union

from .filters import filter_records, watched_ports
from .models import FilterSpec, PortRecord, WatchedPort


class SortKey(Enum):
    PORT = "Port"
    PROCESS = "Process"
    PID = "PID"
    TYPE = "Type"
    ADDRESS = "Address"
    USER = "User"
    ACTIONS = "Actions"


# Favorites rank above watched ports, which rank above everything else
FAVORITE_PRIORITY = 2
WATCHED_PRIORITY = 1
NO_PRIORITY = 0


def collate(text: str) -> str:
    """Locale-aware, case-insensitive sort key for a string."""
    return locale.strxfrm(text.casefold())


def action_priority(port: int, favorites: Collection[int], watched: Collection[int]) -> int:
    if port in favorites:
        return FAVORITE_PRIORITY
    if port in watched:
        return WATCHED_PRIORITY
    return NO_PRIORITY


def sort_key_func(sort_key: SortKey, favorites: Collection[int],
                  watched: Collection[int]) -> Callable[[PortRecord], object]:
    if sort_key == SortKey.PORT:
        return lambda r: r.port
    if sort_key == SortKey.PID:
        return lambda r: r.pid
    if sort_key == SortKey.PROCESS:
        return lambda r: collate(r.process_name)
    if sort_key == SortKey.ADDRESS:
        return lambda r: collate(r.address)
    if sort_key == SortKey.USER:
        return lambda r: collate(r.user)
    if sort_key == SortKey.TYPE:
        return lambda r: r.process_type.label
    if sort_key == SortKey.ACTIONS:
        return lambda r: (-action_priority(r.port, favorites, watched), r.port)
    raise ValueError(f"Unknown sort key: {sort_key}")


def present(records: Iterable[PortRecord], spec: FilterSpec,
            sort_key: SortKey = SortKey.PORT, ascending: bool = True,
            favorites: Collection[int] = frozenset(),
            watched: Collection[Union[int, WatchedPort]] = frozenset()) -> list[PortRecord]:
    """
    Filter records, then order them for display.

    Args:
        records: Registry records (any order).
        spec: Filter to apply first.
        sort_key: Column to order by. ACTIONS orders by favorite/watched
            priority (highest first), then by port.
        ascending: False reverses the complete ordering for every key,
            including the ACTIONS tie-break.
        favorites: Favorited port numbers.
        watched: Watched ports, as port numbers or WatchedPort objects.

    Returns:
        A new list of the matching records in display order.
    """
    watched_set = watched_ports(watched)
    favorite_set = frozenset(favorites)
    visible = filter_records(records, spec, favorite_set, watched_set)
    key = sort_key_func(sort_key, favorite_set, watched_set)
    return sorted(visible, key=key, reverse=not ascending)
