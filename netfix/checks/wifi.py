"""
Wi-Fi radio and association checks.
"""

from typing import List

from netfix.models import DeviceQueryError, Issue, IssueCategory, NetworkKind, PermissionRequired

KINDS = (NetworkKind.WIFI,)
REQUIRES_ROOT = False


def analyze(context) -> List[Issue]:
    """Report a disabled radio or a missing association"""
    try:
        if not context.device.wifi_enabled():
            return [Issue("Wi-Fi is disabled.", IssueCategory.WIFI_DISABLED)]
        if not context.inspector.wifi_connected():
            return [Issue("Wi-Fi is enabled but not connected.", IssueCategory.WIFI_DISCONNECTED)]
    except PermissionRequired as e:
        context.logger.debug(f"Wi-Fi diagnostics blocked: {e}")
        return [Issue("Wi-Fi: Permission required for diagnostics", IssueCategory.PERMISSION)]
    except DeviceQueryError as e:
        context.logger.warning(f"Wi-Fi state unavailable: {e}")
        context.log.warning("[!] Wi-Fi: Unable to read adapter state")
        return []

    context.log.success("[+] Wi-Fi is connected")
    return []
