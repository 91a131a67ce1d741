"""Declared-state documents stored as JSON files.

A state file holds exactly one ``PolicyState``. A missing file means the
policy is not tracked.
"""

from __future__ import annotations

from pathlib import Path

import structlog
from pydantic import ValidationError as PydanticValidationError

from ranger_policy_sync.exceptions import ValidationError
from ranger_policy_sync.models import PolicyState

logger = structlog.get_logger()


def load_state(path: Path) -> PolicyState | None:
    """Load a policy document.

    Args:
        path: JSON file to read.

    Returns:
        The parsed state, or None if the file is missing or empty.

    Raises:
        ValidationError: If the file does not hold a valid policy document.
    """
    if not path.exists():
        return None
    raw = path.read_text(encoding="utf-8")
    if not raw.strip():
        return None
    try:
        return PolicyState.model_validate_json(raw)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid policy document {path}: {exc}") from exc


def save_state(path: Path, state: PolicyState | None) -> None:
    """Write a policy document, or remove it when ``state`` is None."""
    if state is None:
        if path.exists():
            path.unlink()
            logger.info("state_removed", path=str(path))
        return

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(state.model_dump_json(indent=2) + "\n", encoding="utf-8")
    logger.info("state_saved", path=str(path), id=state.id)
