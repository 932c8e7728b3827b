import pytest

from portwatch.core import FilterSpec, PortRecord, SortKey, WatchedPort, present
from portwatch.core.view import action_priority, collate

from conftest import make_record


def _ports(records) -> list:
    return [r.port for r in records]


def test_actions_sort_highest_priority_first() -> None:
    favorite_inactive = PortRecord.inactive(9000)
    watched_active = make_record(5000)
    plain_active = make_record(3000)
    records = [plain_active, watched_active, favorite_inactive]

    ordered = present(records, FilterSpec(), SortKey.ACTIONS, favorites={9000}, watched={5000})
    assert _ports(ordered) == [9000, 5000, 3000]


def test_actions_sort_ties_by_port() -> None:
    records = [make_record(p) for p in (8080, 22, 443, 3000)]
    ordered = present(records, FilterSpec(), SortKey.ACTIONS, favorites={8080, 443}, watched=set())
    assert _ports(ordered) == [443, 8080, 22, 3000]


def test_descending_reverses_whole_order() -> None:
    records = [make_record(p) for p in (8080, 22, 443, 3000)]
    ascending = present(records, FilterSpec(), SortKey.ACTIONS, True, {8080, 443}, set())
    descending = present(records, FilterSpec(), SortKey.ACTIONS, False, {8080, 443}, set())
    assert _ports(descending) == list(reversed(_ports(ascending)))


def test_action_priority_prefers_favorite() -> None:
    assert action_priority(1, {1}, {1}) == 2
    assert action_priority(1, set(), {1}) == 1
    assert action_priority(1, set(), set()) == 0


def test_watched_port_objects_accepted() -> None:
    records = [make_record(3000), make_record(5000)]
    ordered = present(records, FilterSpec(), SortKey.ACTIONS, watched=[WatchedPort(5000)])
    assert _ports(ordered) == [5000, 3000]


@pytest.mark.parametrize("ascending, expected", [(True, [22, 80, 3000]), (False, [3000, 80, 22])])
def test_port_sort(ascending, expected) -> None:
    records = [make_record(80), make_record(3000), make_record(22)]
    assert _ports(present(records, FilterSpec(), SortKey.PORT, ascending)) == expected


def test_pid_sort_is_numeric() -> None:
    records = [make_record(1, pid=900), make_record(2, pid=10000), make_record(3, pid=81)]
    assert [r.pid for r in present(records, FilterSpec(), SortKey.PID)] == [81, 900, 10000]


def test_process_sort_ignores_case() -> None:
    records = [
        make_record(1, process_name="redis"),
        make_record(2, process_name="Node"),
        make_record(3, process_name="apache"),
    ]
    ordered = present(records, FilterSpec(), SortKey.PROCESS)
    assert [r.process_name for r in ordered] == ["apache", "Node", "redis"]


def test_user_and_address_sort() -> None:
    records = [
        make_record(1, user="root", address="::1"),
        make_record(2, user="Alice", address="0.0.0.0"),
    ]
    assert [r.user for r in present(records, FilterSpec(), SortKey.USER)] == ["Alice", "root"]
    assert [r.address for r in present(records, FilterSpec(), SortKey.ADDRESS)] == ["0.0.0.0", "::1"]


def test_type_sort_by_label() -> None:
    records = [
        make_record(1, process_name="node"),
        make_record(2, process_name="postgres"),
        make_record(3, process_name="nginx"),
    ]
    ordered = present(records, FilterSpec(), SortKey.TYPE)
    assert [r.process_type.label for r in ordered] == ["Database", "Development", "Web Server"]


def test_present_filters_before_sorting() -> None:
    records = [make_record(80, process_name="nginx"), make_record(3000), make_record(8080)]
    ordered = present(records, FilterSpec(search_text="node"), SortKey.PORT, False)
    assert _ports(ordered) == [8080, 3000]


def test_present_returns_new_list() -> None:
    records = [make_record(2), make_record(1)]
    ordered = present(records, FilterSpec())
    assert ordered is not records
    assert _ports(records) == [2, 1]


def test_collate_is_case_insensitive() -> None:
    assert collate("Node") == collate("node")
