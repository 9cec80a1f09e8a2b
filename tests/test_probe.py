"""Tests for the connectivity prober and ping helpers."""

import subprocess

import netfix.probe as probe_module
from netfix.executor import is_valid_command
from netfix.probe import ConnectivityProber, dotless_address, ping_command, received_count


class TestPingHelpers:
    def test_dotless_address(self):
        assert dotless_address("8.8.8.8") == "134744072"
        assert dotless_address("1.1.1.1") == "16843009"

    def test_hostname_left_alone(self):
        assert dotless_address("example") == "example"

    def test_ping_command_fits_allow_list(self):
        command = ping_command("8.8.8.8", 4)
        assert command == "ping -c 4 134744072"
        assert is_valid_command(command)

    def test_received_count_iputils(self):
        output = "4 packets transmitted, 4 received, 0% packet loss, time 3004ms"
        assert received_count(output) == 4

    def test_received_count_busybox(self):
        output = "4 packets transmitted, 2 packets received, 50% packet loss"
        assert received_count(output) == 2

    def test_received_count_missing(self):
        assert received_count("Invalid command: ping") == 0


class _Connection:
    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


class TestConnectivityProber:
    def test_reachable_over_socket(self, monkeypatch):
        calls = []

        def connect(address, timeout):
            calls.append((address, timeout))
            return _Connection()

        monkeypatch.setattr(probe_module.socket, "create_connection", connect)
        assert ConnectivityProber().is_reachable() is True
        assert calls == [(("8.8.8.8", 53), 5.0)]

    def test_ping_fallback(self, monkeypatch):
        def refuse(address, timeout):
            raise ConnectionRefusedError("refused")

        def ping(cmd, **kwargs):
            assert cmd[:3] == ['ping', '-c', '1']
            return subprocess.CompletedProcess(cmd, 0, "1 received", "")

        monkeypatch.setattr(probe_module.socket, "create_connection", refuse)
        monkeypatch.setattr(probe_module.subprocess, "run", ping)
        assert ConnectivityProber().is_reachable() is True

    def test_every_failure_is_unreachable(self, monkeypatch):
        def refuse(address, timeout):
            raise OSError("Network is unreachable")

        def ping(cmd, **kwargs):
            raise subprocess.TimeoutExpired(cmd, kwargs.get('timeout'))

        monkeypatch.setattr(probe_module.socket, "create_connection", refuse)
        monkeypatch.setattr(probe_module.subprocess, "run", ping)
        assert ConnectivityProber().is_reachable() is False

    def test_failed_ping_is_unreachable(self, monkeypatch):
        def refuse(address, timeout):
            raise OSError("down")

        monkeypatch.setattr(probe_module.socket, "create_connection", refuse)
        monkeypatch.setattr(probe_module.subprocess, "run",
                            lambda cmd, **kwargs: subprocess.CompletedProcess(cmd, 1, "", ""))
        assert ConnectivityProber().is_reachable() is False
