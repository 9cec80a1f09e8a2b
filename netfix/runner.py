"""
Remediation runner.

Diagnoses, plans and executes steps strictly in sequence. After each
state-changing step it waits for the network stack to settle and retests
connectivity, stopping at the first success. Each run produces a complete
event log, also when it is cancelled or fails unexpectedly.
"""

import logging
import threading
from typing import List, Optional

from netfix.config import Settings
from netfix.models import (
    MANUAL_RESET_PHRASE,
    EventLog,
    ExecutionStatus,
    NetworkKind,
    RunOutcome,
    RunResult,
    Severity,
    Step,
)
from netfix.planner import RemediationPlanner


class RemediationRunner:
    """Execute the remediation plan for one network kind"""

    def __init__(self, engine, executor, prober, inspector, device,
                 settings: Optional[Settings] = None,
                 logger: Optional[logging.Logger] = None):
        self.engine = engine
        self.executor = executor
        self.prober = prober
        self.inspector = inspector
        self.device = device
        self.settings = settings or Settings()
        self.logger = logger or logging.getLogger('netfix')

    def run(self, kind: NetworkKind, cancel: Optional[threading.Event] = None) -> RunResult:
        """Reset the given network and report what happened"""
        cancel = cancel or threading.Event()
        log = EventLog(self.logger)
        executed: List[Step] = []

        try:
            log.warning(f"[*] Starting {kind.label} Network Reset...")

            elevated = self.engine.privilege.is_elevated()
            report = self.engine.diagnose(kind, elevated=elevated, cancel=cancel)
            log.extend(report.events)

            if cancel.is_set():
                return self._cancelled(kind, log, executed)

            if kind is NetworkKind.MOBILE and not elevated:
                return self._toggle_mobile_data(log, cancel)

            adapter = self.inspector.wifi_adapter(elevated) if kind is NetworkKind.WIFI \
                else self.settings.default_adapter
            planner = RemediationPlanner(adapter, self.settings.mobile_interface, self.logger)
            steps = planner.plan(kind, report.issues, elevated)
            return self._execute_plan(kind, steps, log, executed, cancel)
        except Exception as e:
            self.logger.exception(f"{kind.label} reset failed")
            log.error(f"[!] Reset failed: {e}")
            return RunResult(kind, RunOutcome.FAILED, log.events, executed)

    def _execute_plan(self, kind: NetworkKind, steps: List[Step], log: EventLog,
                      executed: List[Step], cancel: threading.Event) -> RunResult:
        for step in steps:
            if cancel.is_set():
                return self._cancelled(kind, log, executed)

            log.warning(f"[*] {step.name}...")
            result = self.executor.execute(step.command, elevate=step.requires_root,
                                           timeout=self.settings.command_timeout, cancel=cancel)
            executed.append(step)
            log.add(f"  Result: {result.text.strip()}", Severity.INFO if result.ok else Severity.ERROR)

            if result.status is ExecutionStatus.CANCELLED:
                return self._cancelled(kind, log, executed)
            if not step.state_changing:
                continue

            if cancel.wait(self.settings.settle_delay):
                return self._cancelled(kind, log, executed)
            if self.prober.is_reachable():
                log.success(f"[+] {kind.label} Network Fixed!")
                self.logger.info(f"{kind.label} fixed after step '{step.name}'")
                return RunResult(kind, RunOutcome.FIXED, log.events, executed)

        log.error(f"[!] Could not fix {kind.label} network. Try restarting device. "
                  f"{MANUAL_RESET_PHRASE} to reset network settings.")
        self.logger.info(f"{kind.label} remediation exhausted after {len(executed)} step(s)")
        return RunResult(kind, RunOutcome.EXHAUSTED, log.events, executed)

    def _toggle_mobile_data(self, log: EventLog, cancel: threading.Event) -> RunResult:
        """Non-root path: switch mobile data off and on again"""
        kind = NetworkKind.MOBILE
        log.warning("[*] Attempting non-root mobile reset...")
        try:
            disabled = self.device.set_mobile_data(False)
            cancelled = cancel.wait(self.settings.toggle_delay)
            # Data is switched back on even when cancelled
            enabled = self.device.set_mobile_data(True)
            if cancelled:
                return self._cancelled(kind, log, [])
        except Exception as e:
            self.logger.error(f"Mobile data toggle raised: {e}")
            log.error(f"[!] Error toggling mobile data: {e}. Please toggle manually. "
                      f"{MANUAL_RESET_PHRASE} to change mobile data.")
            return RunResult(kind, RunOutcome.TOGGLE_FAILED, log.events)

        if disabled and enabled:
            log.success("[+] Mobile data toggled successfully!")
            return RunResult(kind, RunOutcome.TOGGLED, log.events)

        log.error(f"[!] Error toggling mobile data. Please toggle manually. "
                  f"{MANUAL_RESET_PHRASE} to change mobile data.")
        return RunResult(kind, RunOutcome.TOGGLE_FAILED, log.events)

    def _cancelled(self, kind: NetworkKind, log: EventLog, executed: List[Step]) -> RunResult:
        log.warning("[!] Reset cancelled")
        self.logger.info(f"{kind.label} reset cancelled after {len(executed)} step(s)")
        return RunResult(kind, RunOutcome.CANCELLED, log.events, executed)
