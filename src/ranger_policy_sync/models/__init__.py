"""Data models for Ranger policy reconciliation.

``wire`` holds the JSON shapes used by the Ranger Admin API, ``declarative``
holds the state exchanged with the caller.
"""

from ranger_policy_sync.models.declarative import (
    PolicyState,
    PolicyType,
    ResourceDeclaration,
    RuleDeclaration,
)
from ranger_policy_sync.models.wire import WireAccess, WirePolicy, WireResourceSpec, WireRuleItem

__all__ = [
    "PolicyState",
    "PolicyType",
    "ResourceDeclaration",
    "RuleDeclaration",
    "WireAccess",
    "WirePolicy",
    "WireResourceSpec",
    "WireRuleItem",
]
