"""
Device state queries.

These are the read-only OS queries the engine needs: Wi-Fi status and signal,
mobile data state, active network transports and installed packages. They
also cover the non-root mobile data toggle. None of them need elevation, and they
do not go through the remediation command allow-list.

DeviceState is the contract. AndroidDeviceState answers it from dumpsys,
pm and svc output.
"""

import logging
import re
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Set, Tuple, Union

from netfix.models import DeviceQueryError, PermissionRequired

# Android TelephonyManager network type constants
NETWORK_TYPE_LABELS = {
    13: "4G LTE",
    10: "3G",
    15: "3G",
    2: "2G",
    1: "2G",
}

MIN_RSSI = -100
MAX_RSSI = -55


def signal_level(rssi: int, num_levels: int = 5) -> int:
    """Bucket an RSSI value into 0..num_levels-1"""
    if rssi <= MIN_RSSI:
        return 0
    if rssi >= MAX_RSSI:
        return num_levels - 1
    return int((rssi - MIN_RSSI) * (num_levels - 1) / (MAX_RSSI - MIN_RSSI))


class DataState(Enum):
    """Mobile data connection state"""
    DISCONNECTED = 0
    CONNECTING = 1
    CONNECTED = 2
    SUSPENDED = 3
    UNKNOWN = -1


@dataclass
class WifiConnection:
    """Current Wi-Fi association"""
    ssid: str
    supplicant_state: str
    rssi: int

    def is_connected(self, signal_floor: int = MIN_RSSI) -> bool:
        return self.supplicant_state == "COMPLETED" and self.rssi > signal_floor


@dataclass
class PackageInfo:
    """Installed package with its owning UID"""
    name: str
    uid: Optional[int] = None
    label: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.label or self.name


class DeviceState(ABC):
    """Read access to network-related device state"""

    @abstractmethod
    def wifi_enabled(self) -> bool:
        """Return True if the Wi-Fi radio is on"""

    @abstractmethod
    def wifi_connection(self) -> Optional[WifiConnection]:
        """Return the current association, or None"""

    @abstractmethod
    def mobile_data_state(self) -> DataState:
        """Return the mobile data connection state"""

    @abstractmethod
    def mobile_network_type(self) -> str:
        """Return a label such as '4G LTE' for the data network"""

    @abstractmethod
    def active_transports(self) -> Set[str]:
        """Return transport flags (WIFI, CELLULAR, VPN) of the active network"""

    @abstractmethod
    def installed_packages(self) -> List[PackageInfo]:
        """Enumerate installed packages"""

    def packages_for_uid(self, uid: int) -> List[PackageInfo]:
        return [pkg for pkg in self.installed_packages() if pkg.uid == uid]

    @abstractmethod
    def set_mobile_data(self, enabled: bool) -> bool:
        """Toggle mobile data without root; True if the request was accepted"""

    def open_network_settings(self) -> bool:
        """Bring up the system wireless settings screen"""
        return False


class AndroidDeviceState(DeviceState):
    """Device state read from the Android shell tools"""

    def __init__(self, timeout: float = 5.0, logger: Optional[logging.Logger] = None):
        self.timeout = timeout
        self.logger = logger or logging.getLogger('netfix')

    def _run_command(self, cmd: Union[str, List[str]]) -> Tuple[int, str, str]:
        """Execute a query command with timeout and error handling"""
        if isinstance(cmd, str):
            cmd = cmd.split()
        self.logger.debug(f"Querying device: {' '.join(cmd)}")
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self.timeout)
            return result.returncode, result.stdout, result.stderr
        except subprocess.TimeoutExpired:
            self.logger.error(f"Device query timed out after {self.timeout:g}s: {' '.join(cmd)}")
            return -1, "", f"Command timed out after {self.timeout:g}s"
        except FileNotFoundError as e:
            self.logger.debug(f"Device tool not found: {' '.join(cmd)}")
            return -1, "", str(e)
        except OSError as e:
            self.logger.error(f"Unexpected error querying device: {e}")
            return -1, "", str(e)

    def _query(self, cmd: str) -> str:
        """Run a query, mapping denials and failures to exceptions"""
        code, stdout, stderr = self._run_command(cmd)
        combined = f"{stdout}\n{stderr}"
        if 'Permission Denial' in combined or 'SecurityException' in combined:
            raise PermissionRequired(f"{cmd}: permission denied")
        if code != 0:
            raise DeviceQueryError(f"{cmd} failed: {stderr.strip() or f'exit {code}'}")
        return stdout

    def wifi_enabled(self) -> bool:
        output = self._query("dumpsys wifi")
        if re.search(r'Wi-?Fi is enabled', output, re.I):
            return True
        if re.search(r'Wi-?Fi is disabled', output, re.I):
            return False
        raise DeviceQueryError("Wi-Fi state not reported by dumpsys wifi")

    def wifi_connection(self) -> Optional[WifiConnection]:
        output = self._query("dumpsys wifi")
        for line in output.split('\n'):
            if 'mWifiInfo' not in line:
                continue
            state = re.search(r'Supplicant state:\s*(\w+)', line)
            rssi = re.search(r'RSSI:\s*(-?\d+)', line)
            if not state or not rssi:
                continue
            ssid = re.search(r'SSID:\s*"?([^",]*)"?', line)
            return WifiConnection(
                ssid=ssid.group(1) if ssid else "",
                supplicant_state=state.group(1),
                rssi=int(rssi.group(1)),
            )
        return None

    def _telephony_fields(self) -> Dict[str, str]:
        output = self._query("dumpsys telephony.registry")
        values = {}
        for key, value in re.findall(r'(mDataConnection\w+)=(-?\w+)', output):
            values.setdefault(key, value)
        return values

    def mobile_data_state(self) -> DataState:
        raw = self._telephony_fields().get('mDataConnectionState')
        try:
            return DataState(int(raw))
        except (TypeError, ValueError):
            return DataState.UNKNOWN

    def mobile_network_type(self) -> str:
        raw = self._telephony_fields().get('mDataConnectionNetworkType')
        try:
            return NETWORK_TYPE_LABELS.get(int(raw), "Unknown")
        except (TypeError, ValueError):
            return "Unknown"

    def active_transports(self) -> Set[str]:
        output = self._query("dumpsys connectivity")
        active = re.search(r'Active default network:\s*(\d+)', output)
        if not active:
            return set()

        marker = f"network{{{active.group(1)}}}"
        for line in output.split('\n'):
            if marker in line:
                transports = re.search(r'Transports:\s*([A-Z_|]+)', line)
                if transports:
                    return set(transports.group(1).split('|'))
        return set()

    def installed_packages(self) -> List[PackageInfo]:
        output = self._query("pm list packages -U")
        packages = []
        for line in output.split('\n'):
            match = re.match(r'\s*package:(\S+)(?:\s+uid:(\d+))?', line)
            if match:
                uid = int(match.group(2)) if match.group(2) else None
                packages.append(PackageInfo(name=match.group(1), uid=uid))
        return packages

    def set_mobile_data(self, enabled: bool) -> bool:
        code, _, stderr = self._run_command(['svc', 'data', 'enable' if enabled else 'disable'])
        if code != 0:
            self.logger.warning(f"Mobile data toggle failed: {stderr.strip()}")
        return code == 0

    def open_network_settings(self) -> bool:
        code, _, _ = self._run_command(
            ['am', 'start', '-a', 'android.settings.WIRELESS_SETTINGS', '-f', '0x10000000'])
        return code == 0
