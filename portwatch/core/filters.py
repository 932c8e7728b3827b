"""Filter predicate for the port list."""

from typing import Collection, Union

from .models import FilterSpec, PortRecord, WatchedPort


def watched_ports(watched: Collection[Union[int, WatchedPort]]) -> frozenset[int]:
    """Normalize a collection of ports or WatchedPorts to a set of port numbers."""
    return frozenset(w.port if isinstance(w, WatchedPort) else w for w in watched)


def matches_search(record: PortRecord, search_text: str) -> bool:
    """Case-insensitive substring match against the searchable fields."""
    if not search_text:
        return True
    query = search_text.lower()
    return (
        query in record.process_name.lower()
        or query in str(record.port)
        or query in str(record.pid)
        or query in record.address.lower()
        or query in record.user.lower()
        or query in record.command.lower()
    )


def matches(record: PortRecord, spec: FilterSpec, favorites: Collection[int],
            watched: Collection[Union[int, WatchedPort]]) -> bool:
    """
    Check one record against a filter.

    Args:
        record: The row to test.
        spec: Filter to apply; unset dimensions always pass.
        favorites: Favorited port numbers.
        watched: Watched ports, as port numbers or WatchedPort objects.

    Returns:
        True if every clause of the filter accepts the record.
    """
    if not matches_search(record, spec.search_text):
        return False

    # Port range, both bounds inclusive
    if spec.min_port is not None and record.port < spec.min_port:
        return False
    if spec.max_port is not None and record.port > spec.max_port:
        return False

    if record.process_type not in spec.process_types:
        return False

    if spec.show_only_favorites and record.port not in favorites:
        return False

    if spec.show_only_watched and record.port not in watched_ports(watched):
        return False

    return True


def filter_records(records, spec: FilterSpec, favorites: Collection[int],
                   watched: Collection[Union[int, WatchedPort]]) -> list[PortRecord]:
    """Keep the records accepted by spec, in their input order."""
    watched_set = watched_ports(watched)
    return [r for r in records if matches(r, spec, favorites, watched_set)]
