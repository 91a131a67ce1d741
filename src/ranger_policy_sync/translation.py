"""Conversion between the declarative policy model and the Ranger wire model.

Everything in this module is pure: no I/O, no logging side effects on the
inputs, and the same input always yields the same output.
"""

from __future__ import annotations

from typing import Any

from ranger_policy_sync.exceptions import ResponseDecodeError, ValidationError
from ranger_policy_sync.models import (
    PolicyState,
    PolicyType,
    ResourceDeclaration,
    RuleDeclaration,
    WireAccess,
    WirePolicy,
    WireResourceSpec,
    WireRuleItem,
)


def rule_to_wire(rule: RuleDeclaration) -> WireRuleItem:
    """Convert a declared rule into a wire rule item.

    Every permission becomes an access with ``isAllowed`` set; whether the
    rule allows or denies is decided by the list it is placed in.
    """
    return WireRuleItem(
        users=list(rule.users),
        groups=list(rule.groups),
        roles=list(rule.roles),
        accesses=[WireAccess(type=permission, is_allowed=True) for permission in rule.permissions],
        delegate_admin=rule.delegate_admin,
        conditions=[
            {"type": cond_type, "values": list(values)}
            for cond_type, values in rule.conditions.items()
        ],
    )


def _conditions_from_wire(conditions: list[Any]) -> dict[str, list[str]]:
    result: dict[str, list[str]] = {}
    for condition in conditions:
        if not isinstance(condition, dict):
            continue
        cond_type = condition.get("type")
        if not isinstance(cond_type, str):
            continue
        values = condition.get("values")
        if not isinstance(values, list) or not all(isinstance(value, str) for value in values):
            continue
        # A repeated condition type collapses onto the last occurrence.
        result[cond_type] = list(values)
    return result


def rule_from_wire(item: WireRuleItem) -> RuleDeclaration:
    """Convert a wire rule item into a declared rule.

    Accesses with ``isAllowed=false`` are never written by this package but
    Ranger permits them, so they are dropped rather than rejected.
    """
    return RuleDeclaration(
        users=list(item.users),
        groups=list(item.groups),
        roles=list(item.roles),
        permissions=[access.type for access in item.accesses if access.is_allowed],
        delegate_admin=item.delegate_admin,
        conditions=_conditions_from_wire(item.conditions),
    )


def _resources_to_wire(resources: list[ResourceDeclaration]) -> dict[str, WireResourceSpec]:
    result: dict[str, WireResourceSpec] = {}
    for resource in resources:
        if resource.type in result:
            raise ValidationError(
                f"Resource component {resource.type!r} is declared more than once"
            )
        result[resource.type] = WireResourceSpec(
            values=list(resource.values),
            is_exclude=resource.is_exclude,
            is_recursive=resource.is_recursive,
        )
    return result


def declarative_to_wire(state: PolicyState) -> WirePolicy:
    """Convert declared state into a wire policy (without an id).

    Args:
        state: Declared policy.

    Returns:
        WirePolicy ready to be sent to Ranger.

    Raises:
        ValidationError: If name or service is missing, or a resource
            component is declared twice.
    """
    if not state.name:
        raise ValidationError("Policy name is required")
    if not state.service:
        raise ValidationError("Policy service is required")

    return WirePolicy(
        name=state.name,
        service=state.service,
        description=state.description,
        is_enabled=state.is_enabled,
        is_audit_enabled=state.is_audit_enabled,
        policy_type=int(state.policy_type),
        resources=_resources_to_wire(state.resources),
        policy_items=[rule_to_wire(rule) for rule in state.policy_items],
        deny_policy_items=[rule_to_wire(rule) for rule in state.deny_items],
    )


def wire_to_declarative(policy: WirePolicy) -> PolicyState:
    """Convert a wire policy into declarative state.

    A missing wire description becomes ``""``; the wire format cannot tell
    "unset" apart from "empty".

    Raises:
        ResponseDecodeError: If the policy type is not one this package models.
    """
    try:
        policy_type = PolicyType(policy.policy_type)
    except ValueError as exc:
        raise ResponseDecodeError(f"Unsupported policyType: {policy.policy_type}") from exc

    return PolicyState(
        id=None if policy.id is None else str(policy.id),
        name=policy.name,
        service=policy.service,
        description=policy.description or "",
        is_enabled=policy.is_enabled,
        is_audit_enabled=policy.is_audit_enabled,
        policy_type=policy_type,
        resources=[
            ResourceDeclaration(
                type=res_type,
                values=list(spec.values),
                is_exclude=spec.is_exclude,
                is_recursive=spec.is_recursive,
            )
            for res_type, spec in policy.resources.items()
        ],
        policy_items=[rule_from_wire(item) for item in policy.policy_items],
        deny_items=[rule_from_wire(item) for item in policy.deny_policy_items],
    )


def _canonical_rule(rule: RuleDeclaration) -> tuple:
    return (
        frozenset(rule.users),
        frozenset(rule.groups),
        frozenset(rule.roles),
        frozenset(rule.permissions),
        rule.delegate_admin,
        frozenset((key, tuple(values)) for key, values in rule.conditions.items()),
    )


def canonical_form(state: PolicyState) -> dict[str, Any]:
    """Order-insensitive view of a policy, used to detect drift.

    Principal, permission, condition and resource collections compare as
    sets; the order of rule items is significant. ``None`` and ``""``
    descriptions compare equal. The id is not part of the comparison.
    """
    return {
        "name": state.name,
        "service": state.service,
        "description": state.description or "",
        "is_enabled": state.is_enabled,
        "is_audit_enabled": state.is_audit_enabled,
        "policy_type": int(state.policy_type),
        "resources": frozenset(
            (res.type, tuple(res.values), res.is_exclude, res.is_recursive)
            for res in state.resources
        ),
        "policy_items": [_canonical_rule(rule) for rule in state.policy_items],
        "deny_items": [_canonical_rule(rule) for rule in state.deny_items],
    }


def has_drifted(desired: PolicyState, observed: PolicyState) -> bool:
    """Return True when the two states differ beyond ordering."""
    return canonical_form(desired) != canonical_form(observed)
