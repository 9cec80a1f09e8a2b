"""
Firewall rule inspection (root only).

Blocking rules are attributed to the apps owning the matched UIDs. All
blocking apps end up in one aggregated issue.
"""

import re
from typing import List

from netfix.models import Issue, IssueCategory, NetFixError, NetworkKind

KINDS = (NetworkKind.WIFI, NetworkKind.MOBILE)
REQUIRES_ROOT = True

UID_MATCH = re.compile(r'owner UID match (\d+)')


def blocked_uids(rules: str) -> List[int]:
    """UIDs named in owner matches, in first-seen order"""
    return list(dict.fromkeys(int(uid) for uid in UID_MATCH.findall(rules)))


def _label_for_uid(context, uid: int) -> str:
    try:
        packages = context.device.packages_for_uid(uid)
    except NetFixError as e:
        context.logger.debug(f"Could not resolve UID {uid}: {e}")
        packages = []
    if packages and packages[0].display_name:
        return packages[0].display_name
    return f"Unknown app (UID {uid})"


def analyze(context) -> List[Issue]:
    """Look for DROP/REJECT rules and name the apps behind them"""
    result = context.run_command("iptables -L -n")
    if not result.ok:
        context.log.warning(f"[!] Firewall rules unavailable: {result.text}")
        return []

    rules = result.text
    if 'DROP' not in rules and 'REJECT' not in rules:
        return []

    blocking_apps = []
    for uid in blocked_uids(rules):
        if uid < context.settings.system_uid_limit:
            continue
        label = _label_for_uid(context, uid)
        if label not in blocking_apps:
            blocking_apps.append(label)

    if context.settings.firewall_app_fragment.lower() in rules.lower():
        if context.settings.firewall_app_label not in blocking_apps:
            blocking_apps.append(context.settings.firewall_app_label)

    if not blocking_apps:
        return []

    return [Issue(f"Firewall rules blocking traffic by: {', '.join(blocking_apps)}",
                  IssueCategory.FIREWALL)]
