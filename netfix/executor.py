"""
Command execution with allow-list validation, optional elevation and timeout.

Only the fixed catalog of network-administration commands chosen by the
planner and checks goes through here. Every failure mode comes back as an
ExecutionResult; nothing is raised to the caller.
"""

import logging
import os
import re
import signal
import subprocess
import threading
import time
from typing import Optional

from netfix.models import ExecutionResult

# Letters, digits, whitespace and - _ / | & ; only
ALLOWED_COMMAND = re.compile(r"[a-zA-Z0-9\s\-_/|&;]*")

NO_OUTPUT = "No output from command"

# Granularity of the wait loop when a cancellation event is supplied
POLL_INTERVAL = 0.1


def is_valid_command(command: str) -> bool:
    """Check a command string against the allow-list"""
    return bool(command.strip()) and ALLOWED_COMMAND.fullmatch(command) is not None


def terminate_process(process: subprocess.Popen):
    """Kill a spawned process together with anything it started"""
    if process.poll() is not None:
        return
    try:
        os.killpg(os.getpgid(process.pid), signal.SIGKILL)
    except (ProcessLookupError, PermissionError, OSError):
        process.kill()
    try:
        process.communicate(timeout=1)
    except subprocess.TimeoutExpired:
        pass


class CommandExecutor:
    """Run single commands, optionally through the elevation shell"""

    def __init__(self, privilege=None, shell: str = "su", timeout: float = 5.0,
                 logger: Optional[logging.Logger] = None):
        self.privilege = privilege
        self.shell = shell
        self.timeout = timeout
        self.logger = logger or logging.getLogger('netfix')

    @classmethod
    def from_settings(cls, settings, privilege=None,
                      logger: Optional[logging.Logger] = None) -> 'CommandExecutor':
        return cls(privilege=privilege, shell=settings.elevation_shell,
                   timeout=settings.command_timeout, logger=logger)

    def execute(self, command: str, elevate: bool = True,
                timeout: Optional[float] = None,
                cancel: Optional[threading.Event] = None) -> ExecutionResult:
        """Execute a command and capture its output

        Returns:
            ExecutionResult: output text, or a timeout/error/invalid/denied/cancelled marker
        """
        timeout = self.timeout if timeout is None else timeout

        if not is_valid_command(command):
            self.logger.warning(f"Rejected command outside allow-list: {command!r}")
            return ExecutionResult.invalid(command)

        if elevate and not self._elevated():
            self.logger.debug(f"Elevation unavailable for: {command}")
            return ExecutionResult.privilege_denied(command)

        if cancel is not None and cancel.is_set():
            return ExecutionResult.cancelled(command)

        if elevate:
            argv = self.shell.split()
            payload = f"{command}\nexit\n"
        else:
            argv = command.split()
            payload = None

        self.logger.debug(f"Executing command{' (elevated)' if elevate else ''}: {command}")

        process = None
        try:
            process = subprocess.Popen(
                argv,
                stdin=subprocess.PIPE if payload is not None else subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                start_new_session=True,
            )
            outcome = self._wait(process, payload, timeout, cancel)
            if outcome == "timeout":
                self.logger.error(f"Command timed out after {timeout:g}s: {command}")
                return ExecutionResult.timeout(command, timeout)
            if outcome == "cancelled":
                self.logger.info(f"Command cancelled: {command}")
                return ExecutionResult.cancelled(command)
            stdout, stderr = outcome
        except Exception as e:
            self.logger.error(f"Unexpected error running command '{command}': {e}")
            return ExecutionResult.error(command, str(e))
        finally:
            if process is not None:
                terminate_process(process)

        self.logger.debug(f"Command exit code: {process.returncode}")
        if stdout:
            self.logger.debug(f"Command stdout: {stdout[:500]}")
        if stderr:
            self.logger.debug(f"Command stderr: {stderr[:500]}")

        return ExecutionResult.output(command, stdout or stderr or NO_OUTPUT)

    def _elevated(self) -> bool:
        if self.privilege is None:
            return False
        return self.privilege.is_elevated()

    def _wait(self, process: subprocess.Popen, payload: Optional[str], timeout: float,
              cancel: Optional[threading.Event]):
        """Wait for exit, honouring the deadline and the cancellation event"""
        if cancel is None:
            try:
                return process.communicate(input=payload, timeout=timeout)
            except subprocess.TimeoutExpired:
                terminate_process(process)
                return "timeout"

        deadline = time.monotonic() + timeout
        while True:
            remaining = deadline - time.monotonic()
            try:
                return process.communicate(input=payload, timeout=max(0.0, min(POLL_INTERVAL, remaining)))
            except subprocess.TimeoutExpired:
                # input can only be sent on the first call
                payload = None
                if cancel.is_set():
                    terminate_process(process)
                    return "cancelled"
                if time.monotonic() >= deadline:
                    terminate_process(process)
                    return "timeout"
