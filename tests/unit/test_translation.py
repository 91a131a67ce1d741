"""Unit tests for declarative/wire translation."""

import pytest

from ranger_policy_sync.exceptions import ResponseDecodeError, ValidationError
from ranger_policy_sync.models import (
    PolicyState,
    PolicyType,
    ResourceDeclaration,
    RuleDeclaration,
    WireAccess,
    WirePolicy,
    WireRuleItem,
)
from ranger_policy_sync.translation import (
    canonical_form,
    declarative_to_wire,
    has_drifted,
    rule_from_wire,
    rule_to_wire,
    wire_to_declarative,
)


class TestDeclarativeToWire:
    """Test suite for declarative -> wire conversion."""

    def test_permissions_become_allowed_accesses(self) -> None:
        item = rule_to_wire(RuleDeclaration(users=["alice"], permissions=["read", "write"]))

        assert [(a.type, a.is_allowed) for a in item.accesses] == [
            ("read", True),
            ("write", True),
        ]

    def test_deny_items_are_separate_list_with_allowed_accesses(
        self, sample_policy_state: PolicyState
    ) -> None:
        """Deny polarity comes only from the list the item lives in."""
        wire = declarative_to_wire(sample_policy_state)

        assert len(wire.policy_items) == 1
        assert len(wire.deny_policy_items) == 1
        assert wire.deny_policy_items[0].users == ["mallory"]
        assert all(a.is_allowed for a in wire.deny_policy_items[0].accesses)

    def test_resources_keyed_by_type(self, sample_policy_state: PolicyState) -> None:
        wire = declarative_to_wire(sample_policy_state)

        assert set(wire.resources) == {"database", "table"}
        assert wire.resources["table"].values == ["orders", "customers"]

    def test_duplicate_resource_type_rejected(self) -> None:
        state = PolicyState(
            name="p",
            service="s",
            resources=[
                ResourceDeclaration(type="database", values=["a"]),
                ResourceDeclaration(type="database", values=["b"]),
            ],
        )

        with pytest.raises(ValidationError, match="database"):
            declarative_to_wire(state)

    def test_conditions_emitted_as_type_value_pairs(self) -> None:
        item = rule_to_wire(
            RuleDeclaration(
                permissions=["read"],
                conditions={"ip-range": ["10.0.0.0/8"], "expression": ["true"]},
            )
        )

        as_set = {(c["type"], tuple(c["values"])) for c in item.conditions}
        assert as_set == {("ip-range", ("10.0.0.0/8",)), ("expression", ("true",))}

    def test_no_id_and_policy_type(self, sample_policy_state: PolicyState) -> None:
        state = sample_policy_state.model_copy(
            update={"id": "12", "policy_type": PolicyType.DATA_MASK}
        )

        wire = declarative_to_wire(state)

        assert wire.id is None
        assert wire.policy_type == 1

    @pytest.mark.parametrize("field", ["name", "service"])
    def test_name_and_service_required(self, field: str) -> None:
        state = PolicyState(name="p", service="s").model_copy(update={field: ""})

        with pytest.raises(ValidationError):
            declarative_to_wire(state)


class TestWireToDeclarative:
    """Test suite for wire -> declarative conversion."""

    def test_full_policy(self, sample_wire_policy: dict) -> None:
        state = wire_to_declarative(WirePolicy.model_validate(sample_wire_policy))

        assert state.id == "42"
        assert state.name == "sales_read"
        assert state.policy_type is PolicyType.ACCESS
        assert {r.type for r in state.resources} == {"database", "table", "column"}
        assert state.policy_items[0].permissions == ["select", "read"]
        assert state.policy_items[0].conditions == {"ip-range": ["10.0.0.0/8"]}
        assert state.deny_items[0].users == ["mallory"]

    def test_disallowed_accesses_are_dropped(self) -> None:
        item = WireRuleItem(
            accesses=[
                WireAccess(type="read", is_allowed=True),
                WireAccess(type="write", is_allowed=False),
            ]
        )

        assert rule_from_wire(item).permissions == ["read"]

    def test_permissions_recovered_regardless_of_order(self) -> None:
        item = WireRuleItem.model_validate(
            {
                "accesses": [
                    {"type": "write", "isAllowed": True},
                    {"type": "read", "isAllowed": True},
                ]
            }
        )

        assert set(rule_from_wire(item).permissions) == {"read", "write"}

    def test_malformed_conditions_are_skipped(self) -> None:
        item = WireRuleItem(
            conditions=[
                {"type": "ip-range", "values": ["10.0.0.0/8"]},
                {"type": 5, "values": ["x"]},
                {"type": "expression", "values": "not-a-list"},
                {"type": "hours", "values": [9, 17]},
                {"type": "days", "values": ["mon", 2]},
                "garbage",
            ]
        )

        assert rule_from_wire(item).conditions == {"ip-range": ["10.0.0.0/8"]}

    def test_repeated_condition_type_collapses(self) -> None:
        item = WireRuleItem(
            conditions=[
                {"type": "ip-range", "values": ["10.0.0.0/8"]},
                {"type": "ip-range", "values": ["192.168.0.0/16"]},
            ]
        )

        assert rule_from_wire(item).conditions == {"ip-range": ["192.168.0.0/16"]}

    def test_empty_lists_and_missing_description(self) -> None:
        state = wire_to_declarative(WirePolicy(name="p", service="s"))

        assert state.description == ""
        assert state.policy_items == []
        assert state.deny_items == []
        assert state.resources == []
        assert state.id is None

    def test_unknown_policy_type(self) -> None:
        with pytest.raises(ResponseDecodeError):
            wire_to_declarative(WirePolicy(name="p", service="s", policy_type=9))


class TestRoundTrip:
    """Translation in both directions preserves meaning."""

    def test_declarative_round_trip(self, sample_policy_state: PolicyState) -> None:
        restored = wire_to_declarative(declarative_to_wire(sample_policy_state))

        assert canonical_form(restored) == canonical_form(sample_policy_state)
        assert restored.policy_items[0].conditions == {"ip-range": ["10.0.0.0/8"]}

    def test_wire_round_trip(self, sample_wire_policy: dict) -> None:
        wire = WirePolicy.model_validate(sample_wire_policy)

        again = declarative_to_wire(wire_to_declarative(wire))
        again.id = wire.id

        assert again.to_payload() == wire.to_payload()


class TestDrift:
    """Test suite for order-insensitive comparison."""

    def test_reordered_principals_are_not_drift(self, sample_policy_state: PolicyState) -> None:
        reordered = sample_policy_state.model_copy(deep=True)
        reordered.policy_items[0].users = ["bob", "alice"]
        reordered.resources = list(reversed(reordered.resources))
        reordered.id = "99"

        assert not has_drifted(sample_policy_state, reordered)

    def test_changed_permissions_are_drift(self, sample_policy_state: PolicyState) -> None:
        changed = sample_policy_state.model_copy(deep=True)
        changed.policy_items[0].permissions = ["select"]

        assert has_drifted(sample_policy_state, changed)

    def test_none_and_empty_description_match(self) -> None:
        assert not has_drifted(
            PolicyState(name="p", service="s", description=None),
            PolicyState(name="p", service="s", description=""),
        )
