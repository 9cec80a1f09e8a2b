"""
Terminal rendering of log events.
"""

import os
import sys

from netfix.models import LogEvent, Severity


class Colors:
    RED = '\033[91m'
    GREEN = '\033[92m'
    YELLOW = '\033[93m'
    CYAN = '\033[96m'
    WHITE = '\033[97m'
    BOLD = '\033[1m'
    RESET = '\033[0m'

    BRIGHT_RED = '\033[1;31m'
    BRIGHT_GREEN = '\033[1;32m'
    BRIGHT_YELLOW = '\033[1;33m'
    BRIGHT_CYAN = '\033[1;36m'


class ColorManager:
    """Manages color output based on terminal capabilities and user preferences"""

    def __init__(self, stream=None):
        self.stream = stream or sys.stdout
        self.colors_enabled = self._should_use_colors()

    def _should_use_colors(self) -> bool:
        # NO_COLOR convention, see no-color.org
        if os.environ.get('NO_COLOR'):
            return False
        if not hasattr(self.stream, 'isatty') or not self.stream.isatty():
            return False
        return os.environ.get('TERM', '') not in ('dumb', 'unknown')

    def set_colors_enabled(self, enabled: bool):
        """Override color settings (for --no-color flag)"""
        self.colors_enabled = enabled

    def colorize(self, text: str, severity: Severity) -> str:
        """Apply color coding based on severity"""
        if not self.colors_enabled:
            return text

        color_map = {
            Severity.ERROR: f"{Colors.BRIGHT_RED}{Colors.BOLD}",
            Severity.WARNING: f"{Colors.BRIGHT_YELLOW}",
            Severity.INFO: f"{Colors.WHITE}",
            Severity.SUCCESS: f"{Colors.BRIGHT_GREEN}{Colors.BOLD}",
        }
        return f"{color_map.get(severity, Colors.WHITE)}{text}{Colors.RESET}"

    def color(self, color_code: str, text: str) -> str:
        """Apply specific color if colors are enabled"""
        if not self.colors_enabled:
            return text
        return f"{color_code}{text}{Colors.RESET}"

    def render(self, event: LogEvent) -> str:
        return self.colorize(event.text, event.severity)
