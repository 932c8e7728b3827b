"""Exceptions raised by the PortWatch core."""


class PortWatchError(Exception):
    """Base class for PortWatch errors."""


class ScanFailure(PortWatchError):
    """The port snapshot source could not complete a scan."""


class KillError(PortWatchError):
    """A terminate request failed."""


class InvalidTarget(KillError):
    """Terminate was requested for an inactive record or one without a PID."""

    def __init__(self, port: int, pid: int):
        self.port = port
        self.pid = pid
        super().__init__(f"Port {port} has no running process to terminate (PID {pid})")


class ExecutorError(KillError):
    """The kill executor reported a failure; message is passed through as-is."""

    def __init__(self, pid: int, message: str):
        self.pid = pid
        self.message = message
        super().__init__(message)
