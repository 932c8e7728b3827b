"""Reconciliation engine: owns the registry and the favorite/watched overlays."""

import threading
from dataclasses import dataclass, field, replace
from typing import Callable, Iterable, Optional

from .errors import ExecutorError, InvalidTarget
from .filters import filter_records
from .models import MAX_PORT, MIN_PORT, Direction, FilterSpec, PortRecord, TransitionEvent, WatchedPort
from .process_manager import ProcessManager
from .registry import Registry
from .store import OverlayState, OverlayStore
from .view import SortKey, present
from ..utils.logging_config import get_logger, timed

logger = get_logger('engine')


@dataclass(frozen=True)
class Snapshot:
    """
    A consistent read of the registry and both overlays.

    version grows with every engine mutation; of two snapshots from the same
    engine, the one with the higher version reflects the later state.
    """
    registry: Registry
    favorites: frozenset[int]
    watched: tuple[WatchedPort, ...]
    version: int = 0
    watched_ports: frozenset[int] = field(init=False)

    def __post_init__(self):
        object.__setattr__(self, "watched_ports", frozenset(w.port for w in self.watched))

    def is_newer_than(self, other: Optional["Snapshot"]) -> bool:
        return other is None or self.version > other.version

    def is_favorite(self, port: int) -> bool:
        return port in self.favorites

    def is_watching(self, port: int) -> bool:
        return port in self.watched_ports

    def query(self, spec: FilterSpec) -> list[PortRecord]:
        return filter_records(self.registry.records, spec, self.favorites, self.watched_ports)

    def present(self, spec: FilterSpec, sort_key: SortKey = SortKey.PORT,
                ascending: bool = True) -> list[PortRecord]:
        return present(self.registry.records, spec, sort_key, ascending,
                       self.favorites, self.watched_ports)


@dataclass(frozen=True)
class MergeResult:
    registry: Registry
    transitions: tuple[TransitionEvent, ...] = ()


Listener = Callable[[Snapshot], None]


def _check_port(port: int) -> None:
    if not MIN_PORT <= port <= MAX_PORT:
        raise ValueError(f"Port out of range: {port}")


class ReconciliationEngine:
    """
    Merges port scans with the user's favorite and watched ports.

    The registry is an immutable value replaced on every merge, so readers
    never see a partially updated registry. One lock serializes merges with
    overlay mutations; terminate() runs the kill executor outside of it.
    """

    def __init__(self, executor=None, store: Optional[OverlayStore] = None):
        """
        Args:
            executor: Kill executor with kill_process(pid, force) -> (ok, message).
                Defaults to a psutil-backed ProcessManager.
            store: Persistence for favorites/watched. None keeps them in memory only.
        """
        self._executor = executor if executor is not None else ProcessManager()
        self._store = store
        self._lock = threading.Lock()
        self._listeners: list[Listener] = []

        state = store.load() if store else OverlayState()
        self._favorites: frozenset[int] = state.favorites
        self._watched: dict[int, WatchedPort] = {w.port: w for w in state.watched}
        self._registry = Registry.build((), self._favorites, self._watched)
        self._version = 0
        logger.debug(f"ReconciliationEngine initialized ({self._registry!r})")

    # Read side

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def favorites(self) -> frozenset[int]:
        return self._favorites

    @property
    def watched(self) -> tuple[WatchedPort, ...]:
        with self._lock:
            return tuple(self._watched[p] for p in sorted(self._watched))

    def snapshot(self) -> Snapshot:
        with self._lock:
            return self._snapshot_locked()

    def is_favorite(self, port: int) -> bool:
        return port in self._favorites

    def is_watching(self, port: int) -> bool:
        with self._lock:
            return port in self._watched

    def watched_port(self, port: int) -> Optional[WatchedPort]:
        with self._lock:
            return self._watched.get(port)

    def query(self, spec: FilterSpec) -> list[PortRecord]:
        """Records accepted by spec. Order is not meaningful here, see present()."""
        return self.snapshot().query(spec)

    def present(self, spec: FilterSpec, sort_key: SortKey = SortKey.PORT,
                ascending: bool = True) -> list[PortRecord]:
        return self.snapshot().present(spec, sort_key, ascending)

    # Listeners

    def subscribe(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def unsubscribe(self, listener: Listener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    # Write side

    @timed
    def merge(self, scan: Iterable[PortRecord]) -> MergeResult:
        """
        Replace the registry with a fresh scan plus overlay placeholders.

        Args:
            scan: Records from the snapshot source. An empty scan means nothing
                is listening; a failed scan must not reach this method.

        Returns:
            The new registry and the start/stop transitions of watched ports
            relative to the registry it replaced.
        """
        records = list(scan)
        with self._lock:
            previous = self._registry
            registry = Registry.build(records, self._favorites, self._watched)
            transitions = self._diff_locked(previous, registry)
            self._registry = registry
            snapshot = self._commit_locked()

        active = len(registry.active_ports)
        if active < len(records):
            logger.debug(f"Dropped {len(records) - active} duplicate record(s) from scan")
        logger.debug(f"Merged scan: {registry!r}, {len(transitions)} transition(s)")
        for event in transitions:
            logger.info(f"Port {event.port} {event.direction.value} ({event.process_name})")

        self._publish(snapshot)
        return MergeResult(registry, transitions)

    def toggle_favorite(self, port: int) -> bool:
        """Flip favorite status. Returns True if the port is now a favorite."""
        _check_port(port)
        with self._lock:
            if port in self._favorites:
                self._favorites = self._favorites - {port}
                favorited = False
            else:
                self._favorites = self._favorites | {port}
                favorited = True
            self._persist_locked()
            snapshot = self._commit_locked()
        logger.info(f"Port {port} {'added to' if favorited else 'removed from'} favorites")
        self._publish(snapshot)
        return favorited

    def toggle_watch(self, port: int) -> bool:
        """Start or stop watching a port. Returns True if the port is now watched."""
        _check_port(port)
        with self._lock:
            if port in self._watched:
                del self._watched[port]
                watching = False
            else:
                self._watched[port] = WatchedPort(port)
                watching = True
            self._persist_locked()
            snapshot = self._commit_locked()
        logger.info(f"{'Watching' if watching else 'Stopped watching'} port {port}")
        self._publish(snapshot)
        return watching

    def set_watch_options(self, port: int, notify_on_start: Optional[bool] = None,
                          notify_on_stop: Optional[bool] = None) -> WatchedPort:
        """Change the notification flags of a watched port, keeping its id."""
        with self._lock:
            current = self._watched.get(port)
            if current is None:
                raise KeyError(f"Port {port} is not watched")
            updated = replace(
                current,
                notify_on_start=current.notify_on_start if notify_on_start is None else notify_on_start,
                notify_on_stop=current.notify_on_stop if notify_on_stop is None else notify_on_stop,
            )
            self._watched[port] = updated
            self._persist_locked()
            snapshot = self._commit_locked()
        logger.debug(f"Watch options for port {port}: start={updated.notify_on_start}, stop={updated.notify_on_stop}")
        self._publish(snapshot)
        return updated

    def remove(self, port: int) -> None:
        """Drop a port from both favorites and watched."""
        with self._lock:
            changed = port in self._favorites or port in self._watched
            if not changed:
                return
            self._favorites = self._favorites - {port}
            self._watched.pop(port, None)
            self._persist_locked()
            snapshot = self._commit_locked()
        logger.info(f"Removed port {port} from favorites and watched")
        self._publish(snapshot)

    def terminate(self, record: PortRecord, force: bool = False) -> str:
        """
        Send a termination signal to the process behind a record.

        The registry is not touched; the next merge reflects the process's
        absence once the OS has released the port.

        Args:
            record: An active record with a real PID.
            force: Kill instead of a graceful terminate.

        Returns:
            The executor's success message.

        Raises:
            InvalidTarget: record is a placeholder or has no PID.
            ExecutorError: the executor failed; carries its message unchanged.
        """
        if not record.can_terminate:
            logger.warning(f"Refusing to terminate port {record.port}: no running process")
            raise InvalidTarget(record.port, record.pid)

        logger.info(f"Terminating {record.process_name} (PID {record.pid}) on port {record.port} (force={force})")
        success, message = self._executor.kill_process(record.pid, force)
        if not success:
            logger.warning(f"Terminate failed for PID {record.pid}: {message}")
            raise ExecutorError(record.pid, message)
        return message

    # Internals

    def _diff_locked(self, previous: Registry, current: Registry) -> tuple[TransitionEvent, ...]:
        events = []
        for port in sorted(self._watched):
            watch = self._watched[port]
            was_active = previous.is_active(port)
            is_active = current.is_active(port)
            if not was_active and is_active and watch.notify_on_start:
                events.append(TransitionEvent(port, current.record_for(port).process_name, Direction.STARTED))
            elif was_active and not is_active and watch.notify_on_stop:
                events.append(TransitionEvent(port, previous.record_for(port).process_name, Direction.STOPPED))
        return tuple(events)

    def _snapshot_locked(self) -> Snapshot:
        watched = tuple(self._watched[p] for p in sorted(self._watched))
        return Snapshot(self._registry, self._favorites, watched, self._version)

    def _commit_locked(self) -> Snapshot:
        """Mark a mutation and capture the resulting state."""
        self._version += 1
        return self._snapshot_locked()

    def _persist_locked(self) -> None:
        if self._store is None:
            return
        try:
            self._store.save(self._favorites, self._watched.values())
        except OSError as e:
            logger.error(f"Failed to save favorites/watched to {self._store.path}: {e}")

    def _publish(self, snapshot: Snapshot) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(snapshot)
            except Exception:
                logger.exception(f"Snapshot listener {listener!r} failed")
