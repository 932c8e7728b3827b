import pytest

from portwatch.core import PortRecord


@pytest.fixture(autouse=True)
def portwatch_home(tmp_path, monkeypatch):
    """Keep state, settings and logs out of the real home directory."""
    home = tmp_path / "portwatch-home"
    monkeypatch.setenv("PORTWATCH_HOME", str(home))
    return home


def make_record(port: int, process_name: str = "node", pid: int = 1000, address: str = "127.0.0.1",
                user: str = "dev", command: str = "") -> PortRecord:
    return PortRecord.active(port=port, pid=pid, process_name=process_name, address=address,
                             user=user, command=command)


class FakeExecutor:
    def __init__(self, result=(True, "Terminated process node (PID: 1000)")) -> None:
        self.result = result
        self.calls = []

    def kill_process(self, pid: int, force: bool = False):
        self.calls.append((pid, force))
        return self.result


class FakeSource:
    """Scan source returning queued results; an exception instance is raised instead."""

    def __init__(self, *results) -> None:
        self.results = list(results)
        self.calls = 0

    def scan(self):
        self.calls += 1
        result = self.results.pop(0) if len(self.results) > 1 else self.results[0]
        if isinstance(result, Exception):
            raise result
        return list(result)


class RecordingNotifier:
    def __init__(self) -> None:
        self.events = []

    def notify(self, event) -> None:
        self.events.append(event)
