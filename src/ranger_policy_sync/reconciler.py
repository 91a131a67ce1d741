"""Policy reconciliation lifecycle.

``PolicyReconciler`` drives a declared policy towards convergence with Ranger
through create, read, update, delete and import. Every operation makes at
most one request per step and returns new state; inputs are never mutated.
"""

from __future__ import annotations

import structlog

from ranger_policy_sync.exceptions import (
    PolicyNotFoundError,
    RangerPolicyError,
    ReconcileError,
    ReplacementRequiredError,
    ResponseDecodeError,
    ValidationError,
)
from ranger_policy_sync.models import PolicyState
from ranger_policy_sync.ranger.client import RangerClient
from ranger_policy_sync.translation import declarative_to_wire, has_drifted, wire_to_declarative

logger = structlog.get_logger()


def parse_policy_id(value: str | None) -> int:
    """Parse a stored policy id.

    Raises:
        ValidationError: If the id is missing or not a decimal integer.
    """
    if value is None:
        raise ValidationError("Policy id is not set")
    digits = value.strip()
    if not (digits.isascii() and digits.isdigit()):
        raise ValidationError(f"Could not parse policy ID: {value!r}")
    return int(digits)


class PolicyReconciler:
    """Reconciles declared policy state against Ranger."""

    def __init__(self, client: RangerClient) -> None:
        """Initialize the reconciler.

        Args:
            client: Ranger gateway used for every remote call.
        """
        self.client = client

    def create(self, plan: PolicyState) -> PolicyState:
        """Create the planned policy and return the plan with its new id.

        Only the id is taken from Ranger's response; every other field is
        returned exactly as planned.
        """
        summary = "Error Creating Ranger Policy"
        if plan.id is not None:
            raise ReconcileError(
                "create", summary, ValidationError(f"Policy already has id {plan.id}")
            )
        try:
            created = self.client.create_policy(declarative_to_wire(plan))
        except RangerPolicyError as exc:
            raise ReconcileError("create", summary, exc) from exc
        if created.id is None:
            raise ReconcileError(
                "create", summary, ResponseDecodeError("Ranger did not return a policy id")
            )

        logger.info("ranger_policy_created", id=created.id, name=created.name)
        return plan.model_copy(update={"id": str(created.id)}, deep=True)

    def read(self, state: PolicyState) -> PolicyState | None:
        """Refresh state from Ranger.

        Returns:
            The full remote policy as declarative state, or None when the
            policy is absent and local state should be removed.
        """
        if state.id is None:
            logger.info("ranger_policy_removed", reason="no_id")
            return None

        summary = "Error Reading Ranger Policy"
        try:
            policy = self.client.get_policy(parse_policy_id(state.id))
        except PolicyNotFoundError:
            logger.info("ranger_policy_removed", id=state.id, reason="not_found")
            return None
        except RangerPolicyError as exc:
            raise ReconcileError("read", summary, exc) from exc

        try:
            return wire_to_declarative(policy)
        except RangerPolicyError as exc:
            raise ReconcileError("read", summary, exc) from exc

    def update(self, plan: PolicyState, prior: PolicyState) -> PolicyState:
        """Replace the remote policy in place and return the plan.

        The response is decoded only to confirm success.

        Raises:
            ReconcileError: Wrapping ``ReplacementRequiredError`` when the
                service differs from the prior state.
            ReconcileError: Wrapping ``ValidationError`` when the plan and
                prior ids are missing or differ.
        """
        summary = "Error Updating Ranger Policy"
        if plan.service != prior.service:
            raise ReconcileError(
                "update",
                summary,
                ReplacementRequiredError(
                    f"Service cannot change from {prior.service!r} to {plan.service!r} "
                    "without recreating the policy"
                ),
            )

        try:
            policy_id = parse_policy_id(plan.id)
            if prior.id is None or parse_policy_id(prior.id) != policy_id:
                raise ValidationError(
                    f"Policy id cannot change from {prior.id!r} to {plan.id!r}"
                )
            updated = self.client.update_policy(policy_id, declarative_to_wire(plan))
        except RangerPolicyError as exc:
            raise ReconcileError("update", summary, exc) from exc

        logger.info("ranger_policy_updated", id=updated.id, name=updated.name)
        return plan.model_copy(update={"id": str(policy_id)}, deep=True)

    def delete(self, state: PolicyState) -> None:
        """Delete the remote policy by id."""
        summary = "Error Deleting Ranger Policy"
        try:
            policy_id = parse_policy_id(state.id)
            self.client.delete_policy(policy_id)
        except RangerPolicyError as exc:
            raise ReconcileError("delete", summary, exc) from exc

        logger.info("ranger_policy_deleted", id=policy_id)

    def import_state(self, identifier: str) -> PolicyState:
        """Start tracking an existing policy by id.

        Existence is not checked here; the caller is expected to ``read``
        right after importing.
        """
        logger.info("ranger_policy_imported", id=identifier)
        return PolicyState(id=identifier)

    def lookup(
        self,
        service: str | None = None,
        name: str | None = None,
        policy_id: str | None = None,
    ) -> PolicyState:
        """Look up an existing policy without managing it.

        Uses the id when given, otherwise service plus exact name. A missing
        policy is an error here.
        """
        summary = "Error Reading Ranger Policy"
        try:
            numeric_id = parse_policy_id(policy_id) if policy_id is not None else None
            policy = self.client.lookup_policy(numeric_id, service=service, name=name)
            return wire_to_declarative(policy)
        except RangerPolicyError as exc:
            raise ReconcileError("lookup", summary, exc) from exc

    def apply(self, desired: PolicyState, prior: PolicyState | None) -> PolicyState:
        """Converge Ranger onto ``desired``.

        Args:
            desired: Declared policy; its id, if any, is ignored.
            prior: Last known state, or None if the policy is not tracked yet.

        Returns:
            The new state to record.
        """
        plan = desired.model_copy(update={"id": None}, deep=True)

        try:
            declarative_to_wire(plan)
        except RangerPolicyError as exc:
            raise ReconcileError("apply", "Error Applying Ranger Policy", exc) from exc

        if prior is None or prior.id is None:
            return self.create(plan)

        if plan.service != prior.service:
            logger.info(
                "ranger_policy_replacing",
                id=prior.id,
                old_service=prior.service,
                new_service=plan.service,
            )
            self.delete(prior)
            return self.create(plan)

        if not has_drifted(plan, prior):
            logger.info("ranger_policy_unchanged", id=prior.id)
            return prior

        return self.update(plan.model_copy(update={"id": prior.id}), prior)
