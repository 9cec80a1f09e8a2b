"""
netfix: diagnose and repair Wi-Fi and mobile data connectivity.

Inspects the current network state, classifies symptoms into issues,
plans an ordered set of corrective commands and runs them through a
privilege-aware executor, retesting connectivity after each step.
"""

VERSION = "1.0.0"
__version__ = VERSION
