"""
VPN detection.

An active VPN is informational only: it is reported in the log together
with any installed VPN apps, but never becomes an issue.
"""

from typing import List

from netfix.inspector import VpnStatus
from netfix.models import Issue, NetFixError, NetworkKind

KINDS = (NetworkKind.WIFI, NetworkKind.MOBILE)
REQUIRES_ROOT = False


def analyze(context) -> List[Issue]:
    status = context.inspector.vpn_status()
    if status is VpnStatus.UNKNOWN:
        context.log.warning("[!] VPN: Unknown (Permission required)")
        return []
    if status is VpnStatus.INACTIVE:
        return []

    context.log.info("[+] VPN is active")

    fragments = [fragment.lower() for fragment in context.settings.vpn_fragments]
    try:
        packages = context.device.installed_packages()
    except NetFixError as e:
        context.logger.debug(f"Package enumeration failed: {e}")
        context.log.warning("[!] VPN app(s): Permission required for info")
        return []

    vpn_apps = []
    for package in packages:
        name = package.name.lower()
        if any(fragment in name for fragment in fragments) and package.display_name not in vpn_apps:
            vpn_apps.append(package.display_name)

    if vpn_apps:
        context.log.info(f"[+] VPN app(s): {', '.join(vpn_apps)}")
    return []
