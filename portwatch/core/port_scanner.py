"""Port scanning functionality using psutil."""

import socket
from dataclasses import dataclass
from typing import Any, Iterable, NamedTuple

import psutil

from .errors import ScanFailure
from .models import PortRecord, Protocol
from ..utils.logging_config import get_logger, timed, PerfTimer

logger = get_logger('port_scanner')

UNKNOWN_PROCESS = "<unknown>"


class Connection(NamedTuple):
    """Same shape as the entries of psutil.net_connections()."""
    fd: int
    family: int
    type: int
    laddr: Any
    raddr: Any
    status: str
    pid: int


@dataclass(frozen=True)
class ProcessDetails:
    """Per-process attributes shared by all sockets of a PID."""
    name: str
    user: str
    command: str


class PortScanner:
    """Lists locally listening TCP/UDP sockets and the processes that own them."""

    def __init__(self):
        self._details_cache: dict[int, ProcessDetails] = {}

    @timed
    def scan(self) -> list[PortRecord]:
        """
        Get all listening ports.

        TCP sockets in LISTEN state and bound UDP sockets are reported.
        Sockets without an attributable PID are skipped.

        Returns:
            Active PortRecords sorted by port, one per (port, protocol, address).

        Raises:
            ScanFailure: the OS refused or failed to list sockets.
        """
        connections = self._list_connections()
        logger.debug(f"Found {len(connections)} total connections")

        # Process details are resolved once per PID per scan
        self._details_cache = {}
        records: list[PortRecord] = []
        seen = set()
        unattributed = 0

        for conn in connections:
            if not conn.laddr or not self._is_listening(conn):
                continue
            if not conn.pid:
                unattributed += 1
                continue

            protocol = Protocol.TCP if conn.type == socket.SOCK_STREAM else Protocol.UDP
            port = conn.laddr.port

            # Skip duplicates
            key = (port, protocol, conn.laddr.ip)
            if key in seen:
                continue
            seen.add(key)

            details = self._get_process_details(conn.pid)
            records.append(PortRecord.active(
                port=port,
                pid=conn.pid,
                process_name=details.name,
                address=conn.laddr.ip,
                user=details.user,
                command=details.command,
                file_descriptor=str(conn.fd) if conn.fd is not None and conn.fd >= 0 else "",
                protocol=protocol,
            ))

        if unattributed:
            logger.debug(f"Skipped {unattributed} listening socket(s) without a PID")
        logger.info(f"Found {len(records)} listening sockets (from {len(connections)} connections)")
        # TCP before UDP so the TCP listener represents a port shared by both
        return sorted(records, key=lambda r: (r.port, r.protocol.value, r.address))

    @staticmethod
    def _is_listening(conn) -> bool:
        if conn.type == socket.SOCK_STREAM:
            return conn.status == psutil.CONN_LISTEN
        # UDP has no LISTEN state: a bound socket without a peer is listening
        return conn.type == socket.SOCK_DGRAM and not conn.raddr

    def _list_connections(self) -> list:
        try:
            with PerfTimer("psutil.net_connections", logger):
                return psutil.net_connections(kind='inet')
        except psutil.AccessDenied:
            logger.warning("AccessDenied when listing connections system-wide, falling back to per-process scan")
        except OSError as e:
            raise ScanFailure(f"Could not list network connections: {e}") from e

        try:
            with PerfTimer("per-process net_connections", logger):
                return list(self._per_process_connections())
        except OSError as e:
            raise ScanFailure(f"Could not list network connections: {e}") from e

    def _per_process_connections(self) -> Iterable:
        """Connections of every process we are allowed to inspect, with pid filled in."""
        denied = 0
        for proc in psutil.process_iter(['pid']):
            try:
                conns = proc.net_connections(kind='inet')
            except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                denied += 1
                continue
            for conn in conns:
                yield Connection(conn.fd, conn.family, conn.type, conn.laddr, conn.raddr, conn.status, proc.pid)
        if denied:
            logger.debug(f"Could not inspect {denied} process(es)")

    def _get_process_details(self, pid: int) -> ProcessDetails:
        """Get name, user and command line of a process."""
        cached = self._details_cache.get(pid)
        if cached is not None:
            return cached

        name, user, command = UNKNOWN_PROCESS, "", ""
        try:
            proc = psutil.Process(pid)
            with proc.oneshot():
                try:
                    name = proc.name()
                except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                    pass

                try:
                    user = proc.username()
                except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess, KeyError):
                    pass

                try:
                    command = " ".join(proc.cmdline())
                except (psutil.NoSuchProcess, psutil.AccessDenied, psutil.ZombieProcess):
                    pass
        except (psutil.NoSuchProcess, psutil.AccessDenied):
            logger.debug(f"Process {pid} vanished or is not accessible")

        details = ProcessDetails(name=name, user=user, command=command)
        self._details_cache[pid] = details
        return details
