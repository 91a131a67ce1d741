"""Pytest configuration and shared fixtures."""

from collections.abc import Callable

import httpx
import pytest
import structlog

from ranger_policy_sync.config import build_auth_header, get_settings
from ranger_policy_sync.models import PolicyState, ResourceDeclaration, RuleDeclaration
from ranger_policy_sync.ranger.client import RangerClient

AUTH_HEADER = build_auth_header("admin", "secret")


@pytest.fixture(autouse=True)
def _reset_global_state():
    """Keep settings cache and structlog configuration test-local."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
    structlog.reset_defaults()


@pytest.fixture
def mock_settings():
    """Provide mock settings for testing."""
    from ranger_policy_sync.config import Settings

    return Settings(
        endpoint="http://ranger.test:6080/",
        username="admin",
        password="secret",
        log_level="DEBUG",
        debug=True,
    )


class RecordingTransport:
    """Mock transport that records requests and answers from a handler."""

    def __init__(self, handler: Callable[[httpx.Request], httpx.Response]) -> None:
        self.handler = handler
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.handler(request)


@pytest.fixture
def make_client():
    """Build a RangerClient whose HTTP traffic is answered by ``handler``."""

    def _make(handler: Callable[[httpx.Request], httpx.Response]):
        transport = RecordingTransport(handler)
        http_client = httpx.Client(
            base_url="http://ranger.test:6080",
            transport=httpx.MockTransport(transport),
        )
        return RangerClient(http_client, AUTH_HEADER), transport

    return _make


@pytest.fixture
def sample_wire_policy() -> dict:
    """Provide a policy payload shaped like a Ranger Admin response."""
    return {
        "id": 42,
        "guid": "0d047247-bafe-4cf8-8e9b-d5d377284b2d",
        "version": 3,
        "name": "sales_read",
        "service": "hive_prod",
        "description": "Read access to the sales database",
        "isEnabled": True,
        "isAuditEnabled": True,
        "policyType": 0,
        "resources": {
            "database": {"values": ["sales"], "isExcludes": False, "isRecursive": False},
            "table": {"values": ["orders", "customers"], "isExcludes": False, "isRecursive": False},
            "column": {"values": ["*"], "isExcludes": False, "isRecursive": False},
        },
        "policyItems": [
            {
                "users": ["alice"],
                "groups": ["analysts"],
                "roles": [],
                "accesses": [
                    {"type": "select", "isAllowed": True},
                    {"type": "read", "isAllowed": True},
                ],
                "delegateAdmin": False,
                "conditions": [{"type": "ip-range", "values": ["10.0.0.0/8"]}],
            }
        ],
        "denyPolicyItems": [
            {
                "users": ["mallory"],
                "accesses": [{"type": "select", "isAllowed": True}],
                "delegateAdmin": False,
            }
        ],
        "allowExceptions": [],
        "denyExceptions": [],
    }


@pytest.fixture
def sample_policy_state() -> PolicyState:
    """Provide a declared policy."""
    return PolicyState(
        name="sales_read",
        service="hive_prod",
        description="Read access to the sales database",
        resources=[
            ResourceDeclaration(type="database", values=["sales"]),
            ResourceDeclaration(type="table", values=["orders", "customers"]),
        ],
        policy_items=[
            RuleDeclaration(
                users=["alice", "bob"],
                groups=["analysts"],
                permissions=["select", "read"],
                conditions={"ip-range": ["10.0.0.0/8"]},
            )
        ],
        deny_items=[RuleDeclaration(users=["mallory"], permissions=["select"])],
    )
