from portwatch.core import FilterSpec, PortRecord, ProcessType, WatchedPort, matches
from portwatch.core.filters import filter_records, matches_search, watched_ports

from conftest import make_record


def test_default_spec_matches_everything() -> None:
    spec = FilterSpec()
    assert not spec.is_active
    assert matches(make_record(1), spec, set(), set())
    assert matches(PortRecord.inactive(65535), spec, set(), set())


def test_reset_returns_default_spec() -> None:
    assert FilterSpec.reset() == FilterSpec()
    assert FilterSpec(search_text="x").is_active


def test_port_range_and_favorites_only() -> None:
    spec = FilterSpec(min_port=3000, max_port=9000, show_only_favorites=True)
    favorites = {8080}
    favorite_active = make_record(8080)
    other_active = make_record(8081)
    placeholder = PortRecord.inactive(8080)
    out_of_range = make_record(22, process_name="sshd")

    assert matches(favorite_active, spec, favorites, set())
    assert matches(placeholder, spec, favorites, set())
    assert not matches(other_active, spec, favorites, set())
    assert not matches(out_of_range, spec, favorites | {22}, set())


def test_range_bounds_are_inclusive() -> None:
    spec = FilterSpec(min_port=3000, max_port=3000)
    assert matches(make_record(3000), spec, set(), set())
    assert not matches(make_record(2999), spec, set(), set())
    assert not matches(make_record(3001), spec, set(), set())


def test_search_fields() -> None:
    record = make_record(5432, process_name="Postgres", pid=4242, address="0.0.0.0",
                         user="postgres_admin", command="/usr/lib/postgresql/bin/postmaster -D /data")
    assert matches_search(record, "")
    assert matches_search(record, "postgres")
    assert matches_search(record, "543")
    assert matches_search(record, "4242")
    assert matches_search(record, "0.0.0")
    assert matches_search(record, "ADMIN")
    assert matches_search(record, "postmaster")
    assert not matches_search(record, "mysql")


def test_search_matches_placeholder_name() -> None:
    assert matches_search(PortRecord.inactive(6379), "not run")


def test_process_type_filter() -> None:
    spec = FilterSpec(process_types=frozenset({ProcessType.DATABASE}))
    assert spec.is_active
    assert matches(make_record(5432, process_name="postgres"), spec, set(), set())
    assert not matches(make_record(3000, process_name="node"), spec, set(), set())
    # Placeholders are "Not running", which classifies as OTHER
    assert not matches(PortRecord.inactive(5432), spec, {5432}, set())


def test_empty_process_types_hides_everything() -> None:
    spec = FilterSpec(process_types=frozenset())
    assert not matches(make_record(80, process_name="nginx"), spec, set(), set())


def test_watched_only_accepts_watched_port_objects() -> None:
    spec = FilterSpec(show_only_watched=True)
    watched = [WatchedPort(3000)]
    assert matches(make_record(3000), spec, set(), watched)
    assert not matches(make_record(3001), spec, set(), watched)


def test_watched_ports_normalizes_mixed_input() -> None:
    assert watched_ports([WatchedPort(1), 2]) == frozenset({1, 2})


def test_filter_records_keeps_order() -> None:
    records = [make_record(9000), make_record(80, process_name="nginx"), make_record(3000)]
    spec = FilterSpec(min_port=1000)
    assert [r.port for r in filter_records(records, spec, set(), set())] == [9000, 3000]
