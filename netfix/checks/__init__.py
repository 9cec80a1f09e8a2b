"""
Diagnostic checks package.

Each check module exports KINDS (the network kinds it applies to),
REQUIRES_ROOT, and an analyze() function that takes a DiagnosticContext
and returns a list of Issue objects.
"""

# Checks run in this order; later checks may look at issues found earlier
CHECK_ORDER = (
    "connectivity",
    "wifi",
    "mobile",
    "vpn",
    "firewall",
    "adapter",
    "dns",
)
