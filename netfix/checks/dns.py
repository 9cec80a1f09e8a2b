"""
Multi-packet ping test (root only).

Runs only after a connectivity issue was recorded. Losing replies is
reported as a resolution failure, separate from the plain connectivity
issue because it leads to a different remediation step.
"""

from typing import List

from netfix.models import Issue, IssueCategory, NetworkKind
from netfix.probe import ping_command, received_count

KINDS = (NetworkKind.WIFI, NetworkKind.MOBILE)
REQUIRES_ROOT = True


def analyze(context) -> List[Issue]:
    if not context.has_issue(IssueCategory.CONNECTIVITY):
        return []

    count = context.settings.ping_count
    timeout = max(context.settings.command_timeout, count + 1)
    result = context.run_command(ping_command(context.settings.probe_host, count),
                                 elevate=False, timeout=timeout)
    received = received_count(result.text) if result.ok else 0
    context.logger.debug(f"Ping test: {received}/{count} replies")

    if received < count:
        return [Issue("DNS resolution failure.", IssueCategory.DNS)]
    return []
