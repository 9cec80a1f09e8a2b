"""
Internet reachability check.
"""

from typing import List

from netfix.models import Issue, IssueCategory, NetworkKind

KINDS = (NetworkKind.WIFI, NetworkKind.MOBILE)
REQUIRES_ROOT = False

NO_CONNECTION = "No internet connection detected."


def analyze(context) -> List[Issue]:
    """Probe the well-known host once"""
    if not context.prober.is_reachable():
        return [Issue(NO_CONNECTION, IssueCategory.CONNECTIVITY)]

    context.log.success("[+] Internet connection is active")
    return []
