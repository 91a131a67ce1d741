"""Ranger Policy Sync - declarative Apache Ranger policy reconciliation.

This package translates declared access-control policies to and from the
Ranger Admin wire format and drives the remote service towards the declared
state.
"""

__version__ = "0.1.0"

from ranger_policy_sync.config import Settings, get_settings

__all__ = ["Settings", "get_settings", "__version__"]
