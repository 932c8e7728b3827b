import json

import pytest

from portwatch.core import OverlayStore, WatchedPort


def _write(path, payload) -> None:
    path.write_text(json.dumps(payload) if not isinstance(payload, str) else payload, encoding="utf-8")


def test_missing_file_is_empty_state(tmp_path) -> None:
    state = OverlayStore(tmp_path / "state.json").load()
    assert state.favorites == frozenset()
    assert state.watched == ()


def test_default_path_in_data_dir(portwatch_home) -> None:
    assert OverlayStore().path == portwatch_home / "state.json"


def test_save_then_load(tmp_path) -> None:
    path = tmp_path / "nested" / "state.json"
    store = OverlayStore(path)
    watched = [WatchedPort(5432, notify_on_start=False, id="abc"), WatchedPort(3000)]
    store.save({8080, 22}, watched)

    payload = json.loads(path.read_text(encoding="utf-8"))
    assert payload["version"] == 1
    assert payload["favorites"] == [22, 8080]
    assert [w["port"] for w in payload["watched"]] == [3000, 5432]

    state = store.load()
    assert state.favorites == frozenset({22, 8080})
    by_port = {w.port: w for w in state.watched}
    assert by_port[5432] == WatchedPort(5432, notify_on_start=False, notify_on_stop=True, id="abc")
    assert by_port[3000].id == watched[1].id


def test_save_leaves_no_temp_files(tmp_path) -> None:
    store = OverlayStore(tmp_path / "state.json")
    store.save({1}, [])
    store.save({2}, [])
    assert [p.name for p in tmp_path.iterdir()] == ["state.json"]


def test_bad_json_is_empty_state(tmp_path) -> None:
    path = tmp_path / "state.json"
    _write(path, "{not json")
    state = OverlayStore(path).load()
    assert state.favorites == frozenset()


def test_non_object_payload_is_empty_state(tmp_path) -> None:
    path = tmp_path / "state.json"
    _write(path, [8080])
    assert OverlayStore(path).load().favorites == frozenset()


def test_invalid_entries_skipped(tmp_path) -> None:
    path = tmp_path / "state.json"
    _write(path, {
        "favorites": [8080, 0, 70000, "3000", True, 443],
        "watched": [
            {"port": 3000},
            {"port": "5000"},
            {"port": 6000, "notify_on_start": "yes"},
            "7000",
            {"port": 3000, "notify_on_start": False},
        ],
    })
    state = OverlayStore(path).load()
    assert state.favorites == frozenset({8080, 443})
    assert len(state.watched) == 1
    watch = state.watched[0]
    assert watch.port == 3000
    assert watch.notify_on_start is True
    assert watch.id


def test_save_failure_raises_and_cleans_up(tmp_path, monkeypatch) -> None:
    store = OverlayStore(tmp_path / "state.json")

    def _fail(src, dst):
        raise OSError("read-only")

    monkeypatch.setattr("portwatch.core.store.os.replace", _fail)
    with pytest.raises(OSError):
        store.save({8080}, [])
    assert list(tmp_path.iterdir()) == []
