"""
Remediation planning.

A plan is an ordered list of steps: coarse resets first, then one step per
detected issue in detection order, then service-level restarts. The order
is the remediation strategy, so steps are never re-sorted.
"""

import logging
from typing import List, Optional, Sequence

from netfix.models import Issue, IssueCategory, NetworkKind, Step


class RemediationPlanner:
    """Build the step list for a network kind and its issues"""

    def __init__(self, adapter: str = "wlan0", mobile_interface: str = "rmnet0",
                 logger: Optional[logging.Logger] = None):
        self.adapter = adapter
        self.mobile_interface = mobile_interface
        self.logger = logger or logging.getLogger('netfix')

    def plan(self, kind: NetworkKind, issues: Sequence[Issue], elevated: bool) -> List[Step]:
        """Return the ordered steps; empty when no plan applies

        Mobile without root has no plan at all: the runner toggles data
        through the device API instead.
        """
        if kind is NetworkKind.WIFI:
            steps = self._wifi_plan(issues)
        elif elevated:
            steps = self._mobile_plan(issues)
        else:
            steps = []

        self.logger.debug(f"Planned {len(steps)} {kind.label} step(s): {[step.name for step in steps]}")
        return steps

    def _wifi_plan(self, issues: Sequence[Issue]) -> List[Step]:
        adapter = self.adapter
        steps = [
            Step("Checking adapter status", f"ip link show {adapter}", state_changing=False),
            Step("Disabling adapter", f"ip link set {adapter} down"),
            Step("Enabling adapter", f"ip link set {adapter} up"),
            Step("Resetting ARP table", "ip neigh flush all"),
        ]

        for issue in issues:
            if issue.category is IssueCategory.FIREWALL:
                steps.append(Step("Clearing firewall rules", "iptables -F"))
            elif issue.category is IssueCategory.DNS:
                steps.append(Step("Flushing DNS cache", f"ndc resolver flushnet {adapter}"))
            elif issue.category is IssueCategory.TRAFFIC:
                steps.append(Step("Resetting network interfaces",
                                  f"ip link set {adapter} down && ip link set {adapter} up"))

        steps.extend([
            Step("Restarting network service", "service network restart"),
            Step("Setting adapter to Managed Mode",
                 f"iwconfig {adapter} mode managed && ifconfig {adapter} up"),
        ])
        return steps

    def _mobile_plan(self, issues: Sequence[Issue]) -> List[Step]:
        iface = self.mobile_interface
        steps = [
            Step("Checking mobile data status", "getprop | grep gsm", state_changing=False),
            Step("Disabling mobile data", "svc data disable"),
            Step("Enabling mobile data", "svc data enable"),
        ]

        for issue in issues:
            if issue.category is IssueCategory.FIREWALL:
                steps.append(Step("Clearing firewall rules", "iptables -F"))
            elif issue.category is IssueCategory.DNS:
                steps.append(Step("Flushing DNS cache", "ndc resolver flushdefaultif"))
            elif issue.category is IssueCategory.TRAFFIC:
                steps.append(Step("Resetting mobile interface", f"ndc interface clearaddrs {iface}"))

        steps.append(Step("Resetting mobile network", f"ndc interface clearaddrs {iface}"))
        return steps
