"""
Wi-Fi adapter link state (root only).
"""

import re
from typing import List

from netfix.models import Issue, IssueCategory, NetworkKind

KINDS = (NetworkKind.WIFI,)
REQUIRES_ROOT = True


def analyze(context) -> List[Issue]:
    adapter = context.wifi_adapter()
    result = context.run_command(f"ip link show {adapter}")
    if not result.ok:
        context.log.warning(f"[!] Adapter state unavailable: {result.text}")
        return []

    if re.search(r'\bstate DOWN\b', result.text):
        return [Issue(f"Wi-Fi adapter ({adapter}) is down.", IssueCategory.ADAPTER_DOWN)]
    return []
