"""
Data model shared by the diagnostic and remediation engine.

Everything here lives for the duration of one diagnose or reset invocation;
nothing is persisted.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


# Phrase the presentation layer watches for to offer the system settings screen
MANUAL_RESET_PHRASE = "Navigate to Settings"


class NetFixError(Exception):
    """Base class for engine errors"""


class PermissionRequired(NetFixError):
    """An OS query was blocked by a missing permission"""


class DeviceQueryError(NetFixError):
    """A device state query could not be answered"""


class NetworkKind(Enum):
    """Network branch a diagnose/reset operation targets"""
    WIFI = "wifi"
    MOBILE = "mobile"

    @property
    def label(self) -> str:
        return "Wi-Fi" if self is NetworkKind.WIFI else "Mobile"


class Severity(Enum):
    """Severity levels for log events"""
    ERROR = "ERROR"
    WARNING = "WARNING"
    INFO = "INFO"
    SUCCESS = "SUCCESS"


class IssueCategory(Enum):
    """Category tag set by the check that detected an issue"""
    CONNECTIVITY = "connectivity"
    WIFI_DISABLED = "wifi_disabled"
    WIFI_DISCONNECTED = "wifi_disconnected"
    MOBILE_DATA_DISABLED = "mobile_data_disabled"
    PERMISSION = "permission"
    FIREWALL = "firewall"
    ADAPTER_DOWN = "adapter_down"
    DNS = "dns"
    TRAFFIC = "traffic"


@dataclass(frozen=True)
class Issue:
    """A discrete detected symptom"""
    description: str
    category: Optional[IssueCategory] = None

    def __str__(self) -> str:
        return self.description


@dataclass(frozen=True)
class Step:
    """One remediation action in a plan"""
    name: str
    command: str
    requires_root: bool = True
    # Pure status queries are not followed by a connectivity retest
    state_changing: bool = True


class ExecutionStatus(Enum):
    OUTPUT = "output"
    TIMEOUT = "timeout"
    ERROR = "error"
    INVALID_COMMAND = "invalid_command"
    PRIVILEGE_DENIED = "privilege_denied"
    CANCELLED = "cancelled"


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of running one command"""
    command: str
    status: ExecutionStatus
    text: str

    @property
    def ok(self) -> bool:
        return self.status is ExecutionStatus.OUTPUT

    @classmethod
    def output(cls, command: str, text: str) -> 'ExecutionResult':
        return cls(command, ExecutionStatus.OUTPUT, text)

    @classmethod
    def timeout(cls, command: str, seconds: float) -> 'ExecutionResult':
        return cls(command, ExecutionStatus.TIMEOUT,
                   f"Command '{command}' timed out after {seconds:g}s")

    @classmethod
    def error(cls, command: str, message: str) -> 'ExecutionResult':
        return cls(command, ExecutionStatus.ERROR, f"Error: {message}")

    @classmethod
    def invalid(cls, command: str) -> 'ExecutionResult':
        return cls(command, ExecutionStatus.INVALID_COMMAND, f"Invalid command: {command}")

    @classmethod
    def privilege_denied(cls, command: str) -> 'ExecutionResult':
        return cls(command, ExecutionStatus.PRIVILEGE_DENIED,
                   f"Root access required for command: {command}")

    @classmethod
    def cancelled(cls, command: str) -> 'ExecutionResult':
        return cls(command, ExecutionStatus.CANCELLED, f"Command '{command}' cancelled")


@dataclass(frozen=True)
class LogEvent:
    """A (text, severity) entry of a run log"""
    text: str
    severity: Severity


class EventLog:
    """Append-only sequence of log events for one run"""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger('netfix')
        self._events: List[LogEvent] = []

    def add(self, text: str, severity: Severity = Severity.INFO) -> LogEvent:
        event = LogEvent(text, severity)
        self._events.append(event)
        self.logger.debug(f"[{severity.value}] {text}")
        return event

    def info(self, text: str) -> LogEvent:
        return self.add(text, Severity.INFO)

    def warning(self, text: str) -> LogEvent:
        return self.add(text, Severity.WARNING)

    def error(self, text: str) -> LogEvent:
        return self.add(text, Severity.ERROR)

    def success(self, text: str) -> LogEvent:
        return self.add(text, Severity.SUCCESS)

    def extend(self, events: List[LogEvent]):
        """Append events produced elsewhere, keeping their order"""
        for event in events:
            self.add(event.text, event.severity)

    @property
    def events(self) -> List[LogEvent]:
        return list(self._events)

    def __len__(self) -> int:
        return len(self._events)

    def __iter__(self):
        return iter(list(self._events))


@dataclass
class DiagnosisReport:
    """Result of one diagnostic pass"""
    kind: NetworkKind
    elevated: bool
    issues: List[Issue] = field(default_factory=list)
    events: List[LogEvent] = field(default_factory=list)

    def has_category(self, category: IssueCategory) -> bool:
        return any(issue.category is category for issue in self.issues)


class RunOutcome(Enum):
    """Terminal state of a remediation run"""
    FIXED = "fixed"
    EXHAUSTED = "exhausted"
    TOGGLED = "toggled"
    TOGGLE_FAILED = "toggle_failed"
    CANCELLED = "cancelled"
    FAILED = "failed"


@dataclass
class RunResult:
    """Log and terminal outcome of one remediation run"""
    kind: NetworkKind
    outcome: RunOutcome
    events: List[LogEvent]
    executed_steps: List[Step] = field(default_factory=list)
