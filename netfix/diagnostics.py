"""
Diagnostic engine.

Resolves privilege once, then runs the registered checks in their fixed
order against a shared context. The result is an ordered issue list and
a narrated event log.
"""

import importlib
import logging
import threading
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from netfix.checks import CHECK_ORDER
from netfix.config import Settings
from netfix.models import (
    DiagnosisReport,
    EventLog,
    ExecutionResult,
    Issue,
    IssueCategory,
    NetworkKind,
)


@dataclass
class DiagnosticContext:
    """Shared state handed to every check during one diagnostic pass"""
    kind: NetworkKind
    elevated: bool
    settings: Settings
    device: object
    inspector: object
    executor: object
    prober: object
    log: EventLog
    logger: logging.Logger
    issues: List[Issue] = field(default_factory=list)
    cancel: Optional[threading.Event] = None

    _cached_adapter: Optional[str] = None

    def run_command(self, command: str, elevate: bool = True,
                    timeout: Optional[float] = None) -> ExecutionResult:
        """Run a command through the executor"""
        return self.executor.execute(command, elevate=elevate, timeout=timeout, cancel=self.cancel)

    def has_issue(self, category: IssueCategory) -> bool:
        return any(issue.category is category for issue in self.issues)

    def cancelled(self) -> bool:
        return self.cancel is not None and self.cancel.is_set()

    def wifi_adapter(self) -> str:
        """Wi-Fi adapter name, looked up once per pass"""
        if self._cached_adapter is None:
            self._cached_adapter = self.inspector.wifi_adapter(self.elevated)
        return self._cached_adapter

    def record(self, issue: Issue):
        self.issues.append(issue)
        self.log.error(f"[-] {issue.description}")


class CheckRegistry:
    """Registry of diagnostic check modules"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('netfix')
        self.checks: Dict[str, object] = {}
        self.disabled_checks = set()

    def load_checks(self, package: str = "netfix.checks"):
        """Import every check module listed in CHECK_ORDER"""
        for name in CHECK_ORDER:
            try:
                module = importlib.import_module(f"{package}.{name}")
            except ImportError as e:
                self.logger.error(f"Failed to load check module {name}: {e}")
                continue

            if callable(getattr(module, 'analyze', None)):
                self.checks[name] = module
                self.logger.debug(f"Loaded check module: {name}")
            else:
                self.logger.warning(f"Check module {name} missing analyze() function")

    def register(self, name: str, module):
        """Add or replace a check module"""
        self.checks[name] = module

    def disable_check(self, name: str):
        self.disabled_checks.add(name)
        self.logger.info(f"Disabled check: {name}")

    def enable_check(self, name: str):
        self.disabled_checks.discard(name)
        self.logger.info(f"Enabled check: {name}")

    def get_available_checks(self) -> List[str]:
        return list(self.checks.keys())

    def get_enabled_checks(self) -> List[str]:
        return [name for name in self.checks if name not in self.disabled_checks]

    def applies(self, module, context: DiagnosticContext) -> bool:
        """True if the module handles this network kind and privilege level"""
        kinds = getattr(module, 'KINDS', tuple(NetworkKind))
        if context.kind not in kinds:
            return False
        return context.elevated or not getattr(module, 'REQUIRES_ROOT', False)

    def analyze_all(self, context: DiagnosticContext):
        """Run enabled checks in order, recording each issue as it is found"""
        for name, module in self.checks.items():
            if context.cancelled():
                self.logger.info(f"Diagnostics cancelled before check {name}")
                break
            if name in self.disabled_checks:
                self.logger.debug(f"Skipping disabled check: {name}")
                continue
            if not self.applies(module, context):
                continue

            try:
                issues = module.analyze(context)
            except Exception as e:
                self.logger.error(f"Check {name} failed: {e}")
                context.log.warning(f"[!] Check {name} failed: {e}")
                continue

            for issue in issues:
                context.record(issue)
            self.logger.debug(f"Check {name} reported {len(issues)} issue(s)")


class DiagnosticEngine:
    """Classify the current network state into issues"""

    def __init__(self, privilege, prober, inspector, executor, device,
                 settings: Optional[Settings] = None,
                 registry: Optional[CheckRegistry] = None,
                 logger: Optional[logging.Logger] = None):
        self.privilege = privilege
        self.prober = prober
        self.inspector = inspector
        self.executor = executor
        self.device = device
        self.settings = settings or Settings()
        self.logger = logger or logging.getLogger('netfix')

        if registry is None:
            registry = CheckRegistry(self.logger)
            registry.load_checks()
        for name in self.settings.disabled_checks:
            registry.disable_check(name)
        self.registry = registry

    def diagnose(self, kind: NetworkKind,
                 elevated: Optional[bool] = None,
                 cancel: Optional[threading.Event] = None) -> DiagnosisReport:
        """Run one diagnostic pass for the given network kind

        Privilege is resolved here unless the caller already did it for
        the same pass.
        """
        log = EventLog(self.logger)
        log.warning("[*] Starting diagnostics...")

        if elevated is None:
            elevated = self.privilege.is_elevated()
        if not elevated:
            log.warning("[!] Limited diagnostics without root access")

        context = DiagnosticContext(
            kind=kind,
            elevated=elevated,
            settings=self.settings,
            device=self.device,
            inspector=self.inspector,
            executor=self.executor,
            prober=self.prober,
            log=log,
            logger=self.logger,
            cancel=cancel,
        )
        self.registry.analyze_all(context)

        if context.cancelled():
            log.warning("[!] Diagnostics cancelled")
        elif not context.issues:
            log.success("[+] No issues detected")

        self.logger.info(f"{kind.label} diagnostics finished with {len(context.issues)} issue(s)")
        return DiagnosisReport(kind=kind, elevated=elevated,
                               issues=list(context.issues), events=log.events)
