"""Tests for settings loading."""

from netfix.config import Settings, load_settings


def test_defaults():
    settings = Settings()
    assert settings.probe_host == "8.8.8.8"
    assert settings.probe_port == 53
    assert settings.command_timeout == 5.0
    assert settings.ping_count == 4
    assert settings.vpn_fragments == ["vpn", "openvpn", "invi"]
    assert settings.disabled_checks == []


def test_no_path_returns_defaults():
    assert load_settings(None) == Settings()


def test_yaml_overrides(tmp_path):
    path = tmp_path / "netfix.yaml"
    path.write_text("probe_host: 1.1.1.1\nsettle_delay: 0.5\ndisabled_checks:\n  - vpn\n")
    settings = load_settings(str(path))
    assert settings.probe_host == "1.1.1.1"
    assert settings.settle_delay == 0.5
    assert settings.disabled_checks == ["vpn"]
    assert settings.command_timeout == 5.0


def test_unknown_keys_ignored(tmp_path, caplog):
    path = tmp_path / "netfix.yaml"
    path.write_text("colour: blue\nping_count: 2\n")
    settings = load_settings(str(path))
    assert settings.ping_count == 2
    assert not hasattr(settings, "colour")
    assert "Ignoring unknown config key: colour" in caplog.text


def test_missing_file(tmp_path):
    assert load_settings(str(tmp_path / "absent.yaml")) == Settings()


def test_invalid_yaml(tmp_path):
    path = tmp_path / "broken.yaml"
    path.write_text("probe_host: [unterminated\n")
    assert load_settings(str(path)) == Settings()


def test_non_mapping(tmp_path):
    path = tmp_path / "list.yaml"
    path.write_text("- probe_host\n")
    assert load_settings(str(path)) == Settings()


def test_single_string_becomes_list(tmp_path):
    path = tmp_path / "netfix.yaml"
    path.write_text("disabled_checks: vpn\nvpn_fragments: wireguard\n")
    settings = load_settings(str(path))
    assert settings.disabled_checks == ["vpn"]
    assert settings.vpn_fragments == ["wireguard"]


def test_mistyped_values_keep_defaults(tmp_path, caplog):
    path = tmp_path / "netfix.yaml"
    path.write_text("ping_count: four\ncommand_timeout: 3\nsignal_floor: true\ndisabled_checks: [1, 2]\n")
    settings = load_settings(str(path))
    assert settings.ping_count == 4
    assert settings.command_timeout == 3
    assert settings.signal_floor == -100
    assert settings.disabled_checks == []
    assert "Ignoring config key ping_count: expected int, got str" in caplog.text
