"""
Mobile data connection check.
"""

from typing import List

from netfix.device import DataState
from netfix.models import DeviceQueryError, Issue, IssueCategory, NetworkKind, PermissionRequired

KINDS = (NetworkKind.MOBILE,)
REQUIRES_ROOT = False


def analyze(context) -> List[Issue]:
    try:
        state = context.device.mobile_data_state()
    except PermissionRequired:
        return [Issue("Mobile data: Permission required for diagnostics", IssueCategory.PERMISSION)]
    except DeviceQueryError as e:
        context.logger.warning(f"Mobile data state unavailable: {e}")
        context.log.warning("[!] Mobile data: Unable to read connection state")
        return []

    if state is DataState.DISCONNECTED:
        return [Issue("Mobile data is disabled.", IssueCategory.MOBILE_DATA_DISABLED)]

    context.log.success("[+] Mobile data is enabled")
    return []
