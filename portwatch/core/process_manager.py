"""Process termination: the kill executor behind the engine's terminate()."""

import psutil

from ..config import KILL_WAIT_SECONDS
from ..utils.logging_config import get_logger

logger = get_logger('process_manager')


class ProcessManager:
    """Signals a process and waits briefly to confirm it exited."""

    def __init__(self, wait_timeout: float = KILL_WAIT_SECONDS):
        self.wait_timeout = wait_timeout
        logger.debug(f"ProcessManager initialized (wait_timeout={wait_timeout}s)")

    def kill_process(self, pid: int, force: bool = False) -> tuple[bool, str]:
        """
        Terminate a process by PID.

        A graceful terminate that is delivered but not yet honoured within the
        wait timeout still counts as success: the port scan decides when the
        port is actually free.

        Args:
            pid: Process ID to signal.
            force: SIGKILL instead of SIGTERM.

        Returns:
            Tuple of (success, message).
        """
        verb = "Force killed" if force else "Terminated"
        logger.info(f"Sending {'SIGKILL' if force else 'SIGTERM'} to PID={pid}")
        try:
            proc = psutil.Process(pid)
            name = proc.name()
            if force:
                proc.kill()
            else:
                proc.terminate()
        except psutil.ZombieProcess:
            logger.warning(f"PID={pid} is a zombie, nothing to signal")
            return False, f"Process {pid} has already exited (zombie)"
        except psutil.NoSuchProcess:
            logger.warning(f"PID={pid} not found")
            return False, f"Process with PID {pid} not found"
        except psutil.AccessDenied:
            logger.error(f"Access denied when signalling PID={pid}")
            return False, f"Permission denied - cannot kill PID {pid}. Try running with elevated privileges."
        except OSError as e:
            logger.exception(f"Error signalling PID={pid}")
            return False, f"Error killing process {pid}: {e}"

        try:
            proc.wait(timeout=self.wait_timeout)
        except psutil.TimeoutExpired:
            if force:
                logger.error(f"{name} (PID: {pid}) survived SIGKILL for {self.wait_timeout}s")
                return False, f"Process {name} (PID: {pid}) did not terminate"
            logger.warning(f"{name} (PID: {pid}) still running after SIGTERM")
            return True, f"{verb} process {name} (PID: {pid}) - still running, may need force kill"
        except psutil.NoSuchProcess:
            pass

        logger.info(f"{verb} {name} (PID: {pid})")
        return True, f"{verb} process {name} (PID: {pid})"
