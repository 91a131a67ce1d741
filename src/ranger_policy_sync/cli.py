"""Command-line interface for Ranger Policy Sync.

This module provides the main entry point for the CLI application. Each
command reads or writes a JSON state document and runs one reconciliation
operation against Ranger.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import structlog

from ranger_policy_sync import __version__
from ranger_policy_sync.config import get_settings
from ranger_policy_sync.exceptions import RangerPolicyError, ValidationError
from ranger_policy_sync.ranger.client import create_client
from ranger_policy_sync.reconciler import PolicyReconciler
from ranger_policy_sync.state import load_state, save_state

logger = structlog.get_logger()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ranger-policy", description="Ranger Policy Sync")
    subparsers = parser.add_subparsers(dest="command", required=True)

    apply_parser = subparsers.add_parser(
        "apply",
        help="Create, update or replace a Ranger policy to match a declared document",
    )
    apply_parser.add_argument("desired", type=Path, help="Declared policy document (JSON)")
    apply_parser.add_argument("--state", type=Path, required=True, help="State file to read and write")

    refresh_parser = subparsers.add_parser("refresh", help="Refresh the state file from Ranger")
    refresh_parser.add_argument("--state", type=Path, required=True, help="State file to refresh")

    destroy_parser = subparsers.add_parser("destroy", help="Delete the tracked Ranger policy")
    destroy_parser.add_argument("--state", type=Path, required=True, help="State file of the policy")

    import_parser = subparsers.add_parser("import", help="Start tracking an existing policy by id")
    import_parser.add_argument("id", help="Ranger policy id")
    import_parser.add_argument("--state", type=Path, required=True, help="State file to write")

    show_parser = subparsers.add_parser("show", help="Print an existing policy as JSON")
    show_parser.add_argument("--id", dest="policy_id", default=None, help="Ranger policy id")
    show_parser.add_argument("--service", default=None, help="Ranger service name")
    show_parser.add_argument("--name", default=None, help="Exact policy name")

    return parser


def _cmd_apply(reconciler: PolicyReconciler, args: argparse.Namespace) -> int:
    desired = load_state(args.desired)
    if desired is None:
        raise ValidationError(f"Declared policy document is missing or empty: {args.desired}")

    prior = load_state(args.state)
    if prior is not None:
        prior = reconciler.read(prior)

    state = reconciler.apply(desired, prior)
    save_state(args.state, state)
    print(f"Policy {state.name!r} in service {state.service!r} is up to date (id {state.id})")
    return 0


def _cmd_refresh(reconciler: PolicyReconciler, args: argparse.Namespace) -> int:
    prior = load_state(args.state)
    if prior is None:
        print("No tracked policy")
        return 0

    state = reconciler.read(prior)
    save_state(args.state, state)
    if state is None:
        print("Policy no longer exists in Ranger; state removed")
    else:
        print(f"Refreshed policy {state.name!r} (id {state.id})")
    return 0


def _cmd_destroy(reconciler: PolicyReconciler, args: argparse.Namespace) -> int:
    prior = load_state(args.state)
    if prior is None or prior.id is None:
        print("No tracked policy")
        return 0

    reconciler.delete(prior)
    save_state(args.state, None)
    print(f"Deleted policy {prior.id}")
    return 0


def _cmd_import(reconciler: PolicyReconciler, args: argparse.Namespace) -> int:
    imported = reconciler.import_state(args.id)
    state = reconciler.read(imported)
    if state is None:
        print(f"Policy {args.id} does not exist in Ranger", file=sys.stderr)
        return 1

    save_state(args.state, state)
    print(f"Imported policy {state.name!r} (id {state.id})")
    return 0


def _cmd_show(reconciler: PolicyReconciler, args: argparse.Namespace) -> int:
    state = reconciler.lookup(service=args.service, name=args.name, policy_id=args.policy_id)
    print(state.model_dump_json(indent=2))
    return 0


_COMMANDS = {
    "apply": _cmd_apply,
    "refresh": _cmd_refresh,
    "destroy": _cmd_destroy,
    "import": _cmd_import,
    "show": _cmd_show,
}


def main(args: list[str] | None = None) -> int:
    """Main entry point for the Ranger Policy Sync CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    if args is None:
        args = sys.argv[1:]

    settings = get_settings()

    # Configure logging; stdout is reserved for command output.
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    if settings.debug:
        level = logging.DEBUG
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )

    logger.info("ranger_policy_sync_started", version=__version__, debug=settings.debug)

    parser = _build_parser()
    parsed = parser.parse_args(args)

    command = _COMMANDS.get(parsed.command)
    if command is None:
        logger.error("unknown_command", command=parsed.command)
        return 2

    try:
        with create_client(settings) as client:
            return command(PolicyReconciler(client), parsed)
    except RangerPolicyError as exc:
        logger.error("command_failed", command=parsed.command, error=str(exc))
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
