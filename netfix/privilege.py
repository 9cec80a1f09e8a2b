"""
Privilege resolution.

Root availability is checked by actually starting the elevation shell every
time. Nothing is cached: root can be revoked between two passes.
"""

import logging
import subprocess
from typing import Optional

from netfix.executor import terminate_process


class PrivilegeResolver:
    """Check whether elevated execution is available right now"""

    def __init__(self, shell: str = "su", identity_command: str = "whoami",
                 marker: str = "root", timeout: float = 5.0,
                 logger: Optional[logging.Logger] = None):
        self.shell = shell
        self.identity_command = identity_command
        self.marker = marker
        self.timeout = timeout
        self.logger = logger or logging.getLogger('netfix')

    @classmethod
    def from_settings(cls, settings, logger: Optional[logging.Logger] = None) -> 'PrivilegeResolver':
        return cls(
            shell=settings.elevation_shell,
            identity_command=settings.identity_command,
            marker=settings.identity_marker,
            timeout=settings.privilege_timeout,
            logger=logger,
        )

    def is_elevated(self) -> bool:
        """Spawn the elevation shell and confirm its identity"""
        process = None
        try:
            process = subprocess.Popen(
                self.shell.split(),
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                start_new_session=True,
            )
            stdout, _ = process.communicate(
                input=f"{self.identity_command}\nexit\n",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            self.logger.debug(f"Elevation shell '{self.shell}' did not answer within {self.timeout:g}s")
            terminate_process(process)
            return False
        except Exception as e:
            self.logger.debug(f"Elevation shell '{self.shell}' unavailable: {e}")
            if process is not None:
                terminate_process(process)
            return False

        elevated = self.marker.lower() in (stdout or "").lower()
        self.logger.debug(f"Privilege check via '{self.shell}': {'elevated' if elevated else 'not elevated'}")
        return elevated
