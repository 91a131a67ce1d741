"""Ranger Admin REST API access."""

from .client import API_BASE_PATH, RangerClient, create_client

__all__ = ["API_BASE_PATH", "RangerClient", "create_client"]
