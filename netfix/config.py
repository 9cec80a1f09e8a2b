"""
Runtime settings for netfix.

Defaults match the behaviour of the device tool; any field may be overridden
from a YAML file passed with --config.
"""

import logging
from dataclasses import dataclass, field, fields
from typing import List, Optional

import yaml


@dataclass
class Settings:
    """Tunable constants of the engine"""
    probe_host: str = "8.8.8.8"
    probe_port: int = 53
    probe_timeout: float = 5.0
    command_timeout: float = 5.0
    privilege_timeout: float = 5.0
    settle_delay: float = 2.0
    toggle_delay: float = 2.0
    elevation_shell: str = "su"
    identity_command: str = "whoami"
    identity_marker: str = "root"
    ping_count: int = 4
    default_adapter: str = "wlan0"
    mobile_interface: str = "rmnet0"
    signal_floor: int = -100
    vpn_fragments: List[str] = field(default_factory=lambda: ["vpn", "openvpn", "invi"])
    firewall_app_fragment: str = "afwall"
    firewall_app_label: str = "AFWall+"
    system_uid_limit: int = 1000
    disabled_checks: List[str] = field(default_factory=list)


def _matches_type(default, value) -> bool:
    """Check a config value against the type of the field default"""
    if isinstance(value, bool) != isinstance(default, bool):
        return False
    if isinstance(default, list):
        return isinstance(value, list) and all(isinstance(item, str) for item in value)
    if isinstance(default, float):
        return isinstance(value, (int, float))
    return isinstance(value, type(default))


def load_settings(config_path: Optional[str] = None,
                  logger: Optional[logging.Logger] = None) -> Settings:
    """Load settings from a YAML file, falling back to defaults"""
    logger = logger or logging.getLogger('netfix')
    settings = Settings()
    if not config_path:
        return settings

    try:
        with open(config_path, 'r') as f:
            config = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.debug(f"No config file found at {config_path}")
        return settings
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse config {config_path}: {e}")
        return settings

    if not isinstance(config, dict):
        logger.error(f"Config {config_path} must be a mapping, got {type(config).__name__}")
        return settings

    known = {f.name for f in fields(Settings)}
    for key, value in config.items():
        if key not in known:
            logger.warning(f"Ignoring unknown config key: {key}")
            continue

        default = getattr(settings, key)
        # A single string is accepted where a list is expected
        if isinstance(default, list) and isinstance(value, str):
            value = [value]
        if not _matches_type(default, value):
            logger.warning(f"Ignoring config key {key}: expected {type(default).__name__}, "
                           f"got {type(value).__name__}")
            continue
        setattr(settings, key, value)

    logger.info(f"Loaded configuration from {config_path}")
    return settings
