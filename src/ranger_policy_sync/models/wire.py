"""Wire representation of Apache Ranger policies.

These models mirror the JSON exchanged with the Ranger Admin public v2 API.
Field names are snake_case in Python and camelCase on the wire.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

_WIRE_CONFIG = ConfigDict(populate_by_name=True, extra="ignore")


class WireAccess(BaseModel):
    """A single access action inside a rule item."""

    model_config = _WIRE_CONFIG

    type: str = Field(description="Access action name, e.g. select or read")
    is_allowed: bool = Field(default=False, alias="isAllowed")


class WireResourceSpec(BaseModel):
    """Resource component specification (values plus match flags)."""

    model_config = _WIRE_CONFIG

    values: list[str] = Field(default_factory=list)
    # Ranger itself spells this isExcludes; accept both on read.
    is_exclude: bool = Field(
        default=False,
        validation_alias=AliasChoices("isExclude", "isExcludes"),
        serialization_alias="isExclude",
    )
    is_recursive: bool = Field(default=False, alias="isRecursive")

    @field_validator("values", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def to_payload(self) -> dict[str, Any]:
        return {
            "values": list(self.values),
            "isExclude": self.is_exclude,
            "isRecursive": self.is_recursive,
        }


class WireRuleItem(BaseModel):
    """Allow or deny rule item.

    Polarity is not stored on the item: it is given by whether the item sits
    in ``policyItems`` or ``denyPolicyItems``.
    """

    model_config = _WIRE_CONFIG

    users: list[str] = Field(default_factory=list)
    groups: list[str] = Field(default_factory=list)
    roles: list[str] = Field(default_factory=list)
    accesses: list[WireAccess] = Field(default_factory=list)
    delegate_admin: bool = Field(default=False, alias="delegateAdmin")
    # Kept raw so malformed entries can be skipped during translation
    # instead of failing the whole decode.
    conditions: list[Any] = Field(default_factory=list)

    @field_validator("users", "groups", "roles", "accesses", "conditions", mode="before")
    @classmethod
    def _none_as_empty(cls, value: Any) -> Any:
        return [] if value is None else value

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for key in ("users", "groups", "roles"):
            values = getattr(self, key)
            if values:
                payload[key] = list(values)
        payload["accesses"] = [
            {"type": access.type, "isAllowed": access.is_allowed} for access in self.accesses
        ]
        payload["delegateAdmin"] = self.delegate_admin
        if self.conditions:
            payload["conditions"] = list(self.conditions)
        return payload


class WirePolicy(BaseModel):
    """A Ranger policy as returned by or sent to the Admin API."""

    model_config = _WIRE_CONFIG

    id: int | None = Field(default=None, description="Server-assigned policy id")
    name: str
    service: str
    description: str | None = None
    is_enabled: bool = Field(default=False, alias="isEnabled")
    is_audit_enabled: bool = Field(default=False, alias="isAuditEnabled")
    policy_type: int = Field(default=0, alias="policyType")
    resources: dict[str, WireResourceSpec] = Field(default_factory=dict)
    policy_items: list[WireRuleItem] = Field(default_factory=list, alias="policyItems")
    deny_policy_items: list[WireRuleItem] = Field(default_factory=list, alias="denyPolicyItems")

    @field_validator("resources", mode="before")
    @classmethod
    def _null_resources(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("policy_items", "deny_policy_items", mode="before")
    @classmethod
    def _null_items(cls, value: Any) -> Any:
        return [] if value is None else value

    def to_payload(self) -> dict[str, Any]:
        """Serialize to the JSON body Ranger expects.

        ``id`` and an empty ``description`` are omitted, as are empty
        item lists.
        """
        payload: dict[str, Any] = {}
        if self.id is not None:
            payload["id"] = self.id
        payload["name"] = self.name
        payload["service"] = self.service
        if self.description:
            payload["description"] = self.description
        payload["isEnabled"] = self.is_enabled
        payload["isAuditEnabled"] = self.is_audit_enabled
        payload["resources"] = {key: spec.to_payload() for key, spec in self.resources.items()}
        if self.policy_items:
            payload["policyItems"] = [item.to_payload() for item in self.policy_items]
        if self.deny_policy_items:
            payload["denyPolicyItems"] = [item.to_payload() for item in self.deny_policy_items]
        payload["policyType"] = self.policy_type
        return payload
