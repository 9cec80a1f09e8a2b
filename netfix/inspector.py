"""
State inspection: which network is active and how it currently looks.

Only non-privileged device queries are used here, except for adapter name
discovery which runs iwconfig when root is available.
"""

import logging
from enum import Enum
from typing import Optional

from netfix.config import Settings
from netfix.device import DeviceState, signal_level
from netfix.models import NetFixError, NetworkKind, PermissionRequired


class VpnStatus(Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    UNKNOWN = "Unknown (Permission required)"


class StateInspector:
    """Read current Wi-Fi, mobile and VPN state"""

    def __init__(self, device: DeviceState, executor=None, settings: Optional[Settings] = None,
                 logger: Optional[logging.Logger] = None):
        self.device = device
        self.executor = executor
        self.settings = settings or Settings()
        self.logger = logger or logging.getLogger('netfix')

    def wifi_connected(self) -> bool:
        """Direct Wi-Fi status: associated with a signal above the floor

        Raises:
            PermissionRequired: the Wi-Fi state could not be read
        """
        connection = self.device.wifi_connection()
        return connection is not None and connection.is_connected(self.settings.signal_floor)

    def active_network_kind(self) -> NetworkKind:
        """Determine the active network kind, Wi-Fi status first"""
        try:
            if self.wifi_connected():
                return NetworkKind.WIFI
        except NetFixError as e:
            self.logger.debug(f"Direct Wi-Fi status unavailable, using capabilities: {e}")

        try:
            transports = self.device.active_transports()
        except NetFixError as e:
            self.logger.debug(f"Network capabilities unavailable: {e}")
            return NetworkKind.MOBILE

        self.logger.debug(f"Active network transports: {sorted(transports)}")
        return NetworkKind.WIFI if 'WIFI' in transports else NetworkKind.MOBILE

    def vpn_status(self) -> VpnStatus:
        try:
            transports = self.device.active_transports()
        except NetFixError as e:
            self.logger.debug(f"VPN status unavailable: {e}")
            return VpnStatus.UNKNOWN
        return VpnStatus.ACTIVE if 'VPN' in transports else VpnStatus.INACTIVE

    def wifi_adapter(self, elevated: bool) -> str:
        """Find the Wi-Fi interface name, falling back to the configured default"""
        default = self.settings.default_adapter
        if not elevated or self.executor is None:
            return default

        result = self.executor.execute("iwconfig", elevate=True)
        if not result.ok:
            return default
        for line in result.text.split('\n'):
            if 'wlan' in line:
                tokens = line.split()
                if tokens:
                    return tokens[0]
        return default

    def describe_state(self) -> str:
        """Render Wi-Fi, mobile and VPN state as a text block"""
        lines = [self._describe_wifi(), self._describe_mobile(), f"VPN: {self.vpn_status().value}"]
        text = '\n'.join(lines) + '\n'
        self.logger.debug(f"Network state: {text.strip()}")
        return text

    def _describe_wifi(self) -> str:
        try:
            connection = self.device.wifi_connection()
            if connection is not None and connection.is_connected(self.settings.signal_floor):
                return f"Wi-Fi: Connected (Signal: {signal_level(connection.rssi)}/5)"
            if self.device.wifi_enabled():
                return "Wi-Fi: Enabled but not connected"
            return "Wi-Fi: Disabled"
        except PermissionRequired as e:
            self.logger.error(f"Wi-Fi state: {e}")
            return "Wi-Fi: Unable to access info (Permission denied)"
        except Exception as e:
            self.logger.error(f"Wi-Fi state unavailable: {e}")
            return "Wi-Fi: Disabled"

    def _describe_mobile(self) -> str:
        try:
            return f"Mobile: {self.device.mobile_network_type()}"
        except PermissionRequired:
            return "Mobile: Permission required for info"
        except Exception as e:
            self.logger.error(f"Mobile state unavailable: {e}")
            return "Mobile: Unknown"
