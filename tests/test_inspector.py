"""Tests for the state inspector."""

from netfix.device import WifiConnection
from netfix.inspector import StateInspector, VpnStatus
from netfix.models import ExecutionResult, NetworkKind
from tests.fakes import IWCONFIG, FakeDevice, FakeExecutor


class TestActiveNetworkKind:
    def test_direct_wifi_status_wins(self, settings):
        device = FakeDevice(transports={"CELLULAR"})
        assert StateInspector(device, settings=settings).active_network_kind() is NetworkKind.WIFI

    def test_weak_signal_falls_back_to_capabilities(self, settings):
        device = FakeDevice(connection=WifiConnection("HomeNet", "COMPLETED", -100),
                            transports={"CELLULAR"})
        assert StateInspector(device, settings=settings).active_network_kind() is NetworkKind.MOBILE

    def test_permission_denied_uses_capabilities(self, settings):
        device = FakeDevice(wifi_denied=True, transports={"WIFI"})
        assert StateInspector(device, settings=settings).active_network_kind() is NetworkKind.WIFI

    def test_nothing_readable_means_mobile(self, settings):
        device = FakeDevice(wifi_denied=True, connectivity_denied=True)
        assert StateInspector(device, settings=settings).active_network_kind() is NetworkKind.MOBILE


class TestVpnStatus:
    def test_tri_state(self, settings):
        assert StateInspector(FakeDevice(transports={"WIFI", "VPN"})).vpn_status() is VpnStatus.ACTIVE
        assert StateInspector(FakeDevice(transports={"WIFI"})).vpn_status() is VpnStatus.INACTIVE
        assert StateInspector(FakeDevice(connectivity_denied=True)).vpn_status() is VpnStatus.UNKNOWN


class TestDescribeState:
    def test_connected(self, settings):
        device = FakeDevice(connection=WifiConnection("HomeNet", "COMPLETED", -60),
                            transports={"WIFI", "VPN"})
        text = StateInspector(device, settings=settings).describe_state()
        assert text == "Wi-Fi: Connected (Signal: 3/5)\nMobile: 4G LTE\nVPN: Active\n"

    def test_enabled_but_not_connected(self, settings):
        device = FakeDevice(connection=None)
        assert "Wi-Fi: Enabled but not connected" in StateInspector(device, settings=settings).describe_state()

    def test_disabled(self, settings):
        device = FakeDevice(wifi_on=False, connection=None)
        assert "Wi-Fi: Disabled" in StateInspector(device, settings=settings).describe_state()

    def test_permissions_degrade_to_text(self, settings):
        device = FakeDevice(wifi_denied=True, telephony_denied=True, connectivity_denied=True)
        lines = StateInspector(device, settings=settings).describe_state().splitlines()
        assert lines == [
            "Wi-Fi: Unable to access info (Permission denied)",
            "Mobile: Permission required for info",
            "VPN: Unknown (Permission required)",
        ]


class TestWifiAdapter:
    def test_default_without_root(self, settings):
        executor = FakeExecutor({"iwconfig": IWCONFIG.replace("wlan0", "wlan1")})
        inspector = StateInspector(FakeDevice(), executor, settings)
        assert inspector.wifi_adapter(elevated=False) == "wlan0"
        assert executor.calls == []

    def test_parsed_from_iwconfig(self, settings):
        executor = FakeExecutor({"iwconfig": IWCONFIG.replace("wlan0", "wlan1")})
        inspector = StateInspector(FakeDevice(), executor, settings)
        assert inspector.wifi_adapter(elevated=True) == "wlan1"
        assert executor.calls == [("iwconfig", True)]

    def test_default_when_command_fails(self, settings):
        executor = FakeExecutor({"iwconfig": ExecutionResult.timeout("iwconfig", 5)})
        inspector = StateInspector(FakeDevice(), executor, settings)
        assert inspector.wifi_adapter(elevated=True) == "wlan0"
