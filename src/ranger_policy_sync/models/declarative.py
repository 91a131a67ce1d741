"""Declarative policy model.

This is the desired/observed state handed to and from the caller. Resources
are an ordered list here and a key-unique mapping on the wire.
"""

from __future__ import annotations

from enum import IntEnum

from pydantic import BaseModel, Field


class PolicyType(IntEnum):
    """Ranger policy kind."""

    ACCESS = 0
    DATA_MASK = 1
    ROW_FILTER = 2


class ResourceDeclaration(BaseModel):
    """One resource component the policy protects."""

    type: str = Field(description="Resource component name, e.g. database, table, path")
    values: list[str] = Field(description="Resource values or patterns for this component")
    is_exclude: bool = Field(
        default=False,
        description="Match everything except these values",
    )
    is_recursive: bool = Field(
        default=False,
        description="Match resources under the given values hierarchically",
    )


class RuleDeclaration(BaseModel):
    """An allow or deny rule entry."""

    users: list[str] = Field(default_factory=list, description="Users the rule applies to")
    groups: list[str] = Field(default_factory=list, description="Groups the rule applies to")
    roles: list[str] = Field(default_factory=list, description="Ranger roles the rule applies to")
    permissions: list[str] = Field(default_factory=list, description="Access actions")
    delegate_admin: bool = Field(
        default=False,
        description="Whether grantees may delegate this permission to others",
    )
    conditions: dict[str, list[str]] = Field(
        default_factory=dict,
        description="Condition type to condition values (advanced use)",
    )


class PolicyState(BaseModel):
    """Declared or refreshed state of a single Ranger policy."""

    id: str | None = Field(default=None, description="Ranger policy id (computed)")
    name: str = Field(default="", description="Policy name, unique within the service")
    service: str = Field(
        default="",
        description="Ranger service the policy belongs to; changing it recreates the policy",
    )
    # None means "not declared"; a refresh reports a missing wire value as "".
    description: str | None = Field(default=None, description="Human-readable purpose")
    is_enabled: bool = Field(default=True, description="Whether the policy is enabled")
    is_audit_enabled: bool = Field(default=True, description="Whether access audits are enabled")
    policy_type: PolicyType = Field(default=PolicyType.ACCESS, description="Policy kind")
    resources: list[ResourceDeclaration] = Field(default_factory=list)
    policy_items: list[RuleDeclaration] = Field(default_factory=list, description="Allow rules")
    deny_items: list[RuleDeclaration] = Field(default_factory=list, description="Deny rules")
