"""Tests for the remediation runner."""

import threading

from netfix.config import Settings
from netfix.models import MANUAL_RESET_PHRASE, NetworkKind, RunOutcome, Severity
from tests.fakes import FakeDevice, FakeExecutor, FakePrivilege, FakeProber


def results(events):
    return [event for event in events if event.text.startswith("  Result:")]


class CancellingExecutor(FakeExecutor):
    """Sets the cancel event once a given command has run"""

    def __init__(self, trigger, cancel):
        super().__init__()
        self.trigger = trigger
        self.cancel = cancel

    def execute(self, command, elevate=True, timeout=None, cancel=None):
        result = super().execute(command, elevate, timeout, cancel)
        if command == self.trigger:
            self.cancel.set()
        return result


class TestWifiReset:
    def test_stops_at_first_fixing_step(self, build):
        executor = FakeExecutor()
        _, runner = build(prober=FakeProber(False, False, True), executor=executor)
        result = runner.run(NetworkKind.WIFI)

        assert result.outcome is RunOutcome.FIXED
        assert [step.name for step in result.executed_steps] == [
            "Checking adapter status", "Disabling adapter", "Enabling adapter"]
        assert "ip neigh flush all" not in executor.commands
        assert result.events[-1].text == "[+] Wi-Fi Network Fixed!"
        assert result.events[-1].severity is Severity.SUCCESS

    def test_log_starts_with_reset_then_diagnosis(self, build):
        _, runner = build()
        events = runner.run(NetworkKind.WIFI).events
        assert events[0].text == "[*] Starting Wi-Fi Network Reset..."
        assert events[1].text == "[*] Starting diagnostics..."

    def test_exhausted_plan(self, build):
        _, runner = build(prober=FakeProber(False))
        result = runner.run(NetworkKind.WIFI)

        assert result.outcome is RunOutcome.EXHAUSTED
        # connectivity failure plus lost pings adds the DNS flush step
        assert len(result.executed_steps) == 7
        assert len(results(result.events)) == 7
        last = result.events[-1]
        assert last.severity is Severity.ERROR
        assert last.text.startswith("[!] Could not fix Wi-Fi network.")
        assert MANUAL_RESET_PHRASE in last.text

    def test_step_results_carry_command_output(self, build):
        executor = FakeExecutor({"ip link show": "3: wlan0: <UP> state UP"})
        _, runner = build(prober=FakeProber(False, True), executor=executor)
        result = runner.run(NetworkKind.WIFI)
        assert results(result.events)[0].text == "  Result: 3: wlan0: <UP> state UP"

    def test_discovered_adapter_used(self, build):
        executor = FakeExecutor({"iwconfig": "wlan1     IEEE 802.11  ESSID:off/any"})
        _, runner = build(prober=FakeProber(False, True), executor=executor)
        result = runner.run(NetworkKind.WIFI)
        assert result.executed_steps[0].command == "ip link show wlan1"

    def test_privilege_resolved_once_per_run(self, build):
        privilege = FakePrivilege(True)
        _, runner = build(privilege=privilege)
        runner.run(NetworkKind.WIFI)
        assert privilege.calls == 1


class TestMobileReset:
    def test_status_step_is_not_retested(self, build):
        prober = FakeProber(False, True)
        _, runner = build(prober=prober)
        result = runner.run(NetworkKind.MOBILE)

        assert result.outcome is RunOutcome.FIXED
        assert [step.command for step in result.executed_steps] == ["getprop | grep gsm", "svc data disable"]
        assert prober.calls == 2

    def test_toggle_without_root(self, build):
        device = FakeDevice()
        executor = FakeExecutor()
        _, runner = build(privilege=FakePrivilege(False), device=device, executor=executor)
        result = runner.run(NetworkKind.MOBILE)

        assert result.outcome is RunOutcome.TOGGLED
        assert device.toggles == [False, True]
        assert executor.calls == []
        assert results(result.events) == []
        assert result.events[-1].text == "[+] Mobile data toggled successfully!"

    def test_cancel_during_pause_still_reenables_data(self, build):
        cancel = threading.Event()

        class CancellingDevice(FakeDevice):
            def set_mobile_data(self, enabled):
                if not enabled:
                    cancel.set()
                return super().set_mobile_data(enabled)

        device = CancellingDevice()
        _, runner = build(privilege=FakePrivilege(False), device=device)
        result = runner.run(NetworkKind.MOBILE, cancel)

        assert result.outcome is RunOutcome.CANCELLED
        assert device.toggles == [False, True]
        assert result.events[-1].text == "[!] Reset cancelled"

    def test_toggle_raising(self, build):
        device = FakeDevice(toggle_results=(RuntimeError("svc not found"), True))
        _, runner = build(privilege=FakePrivilege(False), device=device)
        result = runner.run(NetworkKind.MOBILE)

        assert result.outcome is RunOutcome.TOGGLE_FAILED
        last = result.events[-1]
        assert last.severity is Severity.ERROR
        assert last.text.startswith("[!] Error toggling mobile data: svc not found.")
        assert MANUAL_RESET_PHRASE in last.text

    def test_toggle_failure(self, build):
        device = FakeDevice(toggle_results=(True, False))
        _, runner = build(privilege=FakePrivilege(False), device=device)
        result = runner.run(NetworkKind.MOBILE)

        assert result.outcome is RunOutcome.TOGGLE_FAILED
        last = result.events[-1]
        assert last.severity is Severity.ERROR
        assert "Please toggle manually" in last.text
        assert MANUAL_RESET_PHRASE in last.text


class TestInterruption:
    def test_cancel_before_plan(self, build):
        cancel = threading.Event()
        cancel.set()
        _, runner = build()
        result = runner.run(NetworkKind.WIFI, cancel)

        assert result.outcome is RunOutcome.CANCELLED
        assert result.executed_steps == []
        assert result.events[-1].text == "[!] Reset cancelled"

    def test_cancel_between_steps(self, build):
        cancel = threading.Event()
        executor = CancellingExecutor("ip link set wlan0 down", cancel)
        _, runner = build(prober=FakeProber(False), executor=executor)
        result = runner.run(NetworkKind.WIFI, cancel)

        assert result.outcome is RunOutcome.CANCELLED
        assert [step.name for step in result.executed_steps] == ["Checking adapter status", "Disabling adapter"]
        assert "ip link set wlan0 up" not in executor.commands

    def test_unexpected_failure_is_logged(self, build):
        executor = FakeExecutor({"iwconfig": RuntimeError("adapter lookup exploded")})
        _, runner = build(prober=FakeProber(False), executor=executor)
        result = runner.run(NetworkKind.WIFI)

        assert result.outcome is RunOutcome.FAILED
        assert result.events[-1].text == "[!] Reset failed: adapter lookup exploded"
        assert result.events[-1].severity is Severity.ERROR


def test_default_settle_delay():
    assert Settings().settle_delay == 2.0
    assert Settings().toggle_delay == 2.0
