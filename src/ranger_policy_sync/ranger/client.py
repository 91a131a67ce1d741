"""Ranger Admin API client implementation.

This module provides the gateway to the Ranger public v2 policy API. Each
public method performs exactly one HTTP request and returns a decoded wire
policy or raises a typed error. Nothing is retried.
"""

from __future__ import annotations

from types import TracebackType
from typing import Any
from urllib.parse import quote

import httpx
import structlog
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from ranger_policy_sync.config import Settings, build_auth_header
from ranger_policy_sync.exceptions import (
    ConfigurationError,
    PolicyNotFoundError,
    RangerAPIError,
    RangerUnreachableError,
    ResponseDecodeError,
    ValidationError,
)
from ranger_policy_sync.models import WirePolicy

logger = structlog.get_logger()

API_BASE_PATH = "/service/public/v2/api"

_POLICY_LIST = TypeAdapter(list[WirePolicy])


class RangerClient:
    """Gateway for Ranger policy CRUD and lookup.

    The client does not own transport configuration: it is handed an
    ``httpx.Client`` already bound to the Ranger endpoint and a precomputed
    ``Authorization`` header value.
    """

    def __init__(self, http_client: httpx.Client, auth_header: str) -> None:
        """Initialize the Ranger client.

        Args:
            http_client: HTTP client whose ``base_url`` is the Ranger endpoint.
            auth_header: Value sent in the ``Authorization`` header.
        """
        self._http = http_client
        self._auth_header = auth_header
        logger.info("ranger_client_initialized", endpoint=str(http_client.base_url))

    def __enter__(self) -> RangerClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying HTTP client."""
        self._http.close()

    def get_policy(self, policy_id: int) -> WirePolicy:
        """Fetch a policy by id.

        Raises:
            PolicyNotFoundError: If Ranger answers 404.
            RangerAPIError: For any other non-success status.
            RangerUnreachableError: On transport failure.
            ResponseDecodeError: If the body is not a policy.
        """
        logger.debug("getting_policy", policy_id=policy_id)
        response = self._send("GET", f"{API_BASE_PATH}/policy/{policy_id}")
        return _decode_policy(response)

    def find_policy(self, service: str, name: str) -> WirePolicy:
        """Find a policy by service and exact name.

        Ranger's ``policyName`` filter is not an exact match, so the returned
        list is filtered here and only a policy whose name equals ``name`` is
        accepted.

        Raises:
            PolicyNotFoundError: If no policy in the service has exactly this name.
        """
        logger.debug("finding_policy", service=service, name=name)
        response = self._send(
            "GET",
            f"{API_BASE_PATH}/service/{quote(service, safe='')}/policy",
            params={"policyName": name},
        )
        try:
            policies = _POLICY_LIST.validate_json(response.content)
        except PydanticValidationError as exc:
            raise ResponseDecodeError(f"Could not decode API response: {exc}") from exc

        for policy in policies:
            if policy.name == name:
                return policy

        logger.info(
            "policy_name_not_matched",
            service=service,
            name=name,
            candidates=[policy.name for policy in policies],
        )
        raise PolicyNotFoundError(f"No policy named {name!r} found in service {service!r}")

    def lookup_policy(
        self,
        policy_id: int | None = None,
        service: str | None = None,
        name: str | None = None,
    ) -> WirePolicy:
        """Look a policy up by id when given, otherwise by service and name."""
        if policy_id is not None:
            return self.get_policy(policy_id)
        if not service or not name:
            raise ValidationError("Either a policy id or both service and name are required")
        return self.find_policy(service, name)

    def create_policy(self, policy: WirePolicy) -> WirePolicy:
        """Create a policy. Any id on ``policy`` is not sent."""
        body = policy.to_payload()
        body.pop("id", None)
        response = self._send("POST", f"{API_BASE_PATH}/policy", json_body=body)
        return _decode_policy(response)

    def update_policy(self, policy_id: int, policy: WirePolicy) -> WirePolicy:
        """Replace the policy stored under ``policy_id``."""
        body = policy.to_payload()
        body["id"] = policy_id
        response = self._send("PUT", f"{API_BASE_PATH}/policy/{policy_id}", json_body=body)
        return _decode_policy(response)

    def delete_policy(self, policy_id: int) -> None:
        """Delete the policy stored under ``policy_id``."""
        self._send("DELETE", f"{API_BASE_PATH}/policy/{policy_id}", expected=(200, 204))

    def _send(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        expected: tuple[int, ...] = (200, 201),
    ) -> httpx.Response:
        headers = {"Authorization": self._auth_header, "Accept": "application/json"}
        if json_body is not None:
            headers["Content-Type"] = "application/json"

        try:
            response = self._http.request(
                method,
                path,
                params=params,
                headers=headers,
                json=json_body,
            )
        except httpx.RequestError as exc:
            logger.error("ranger_request_unreachable", method=method, path=path, error=str(exc))
            raise RangerUnreachableError(f"Could not execute API request: {exc}") from exc

        if response.status_code == 404:
            raise PolicyNotFoundError(f"{method} {path} returned 404")
        if response.status_code not in expected:
            logger.warning(
                "ranger_request_failed",
                method=method,
                path=path,
                status_code=response.status_code,
            )
            raise RangerAPIError(response.status_code, response.text)
        return response


def _decode_policy(response: httpx.Response) -> WirePolicy:
    try:
        return WirePolicy.model_validate_json(response.content)
    except PydanticValidationError as exc:
        raise ResponseDecodeError(f"Could not decode API response: {exc}") from exc


def create_client(settings: Settings) -> RangerClient:
    """Build a RangerClient from settings.

    Raises:
        ConfigurationError: If the endpoint or credentials are missing.
    """
    password = settings.password.get_secret_value() if settings.password is not None else ""
    missing = [
        field
        for field, value in (
            ("endpoint", settings.endpoint),
            ("username", settings.username),
            ("password", password),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(
            "Missing Ranger configuration: "
            + ", ".join(missing)
            + ". Set RANGER_ENDPOINT, RANGER_USERNAME and RANGER_PASSWORD."
        )

    assert settings.endpoint is not None and settings.username is not None
    http_client = httpx.Client(
        base_url=settings.endpoint,
        verify=not settings.insecure,
        timeout=settings.timeout,
    )
    return RangerClient(http_client, build_auth_header(settings.username, password))
