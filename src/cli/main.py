"""localpersist CLI entry points.
This module boots a driver from config and runs one lifecycle operation.
It maps argparse commands onto plugin lifecycle requests.
"""

from __future__ import annotations

import argparse
from dataclasses import replace
from pathlib import Path
from typing import Any, Sequence

from core.config import LocalPersistConfig, validate_driver_name
from core.logging_config import configure_logging
from core.types import VolumeRequest
from driver.volume_driver import Response, VolumeDriver, build_driver
from registry.live_source import StaticLiveSource


def build_parser() -> argparse.ArgumentParser:
    """Build the top-level CLI parser.

    Returns:
        Configured argument parser.
    """
    parser = argparse.ArgumentParser(
        prog="localpersist",
        description="Persistent named volume registry",
    )
    parser.add_argument("--name", help="Override LOCAL_PERSIST_NAME for this command")
    parser.add_argument("--base-dir", help="Override LOCAL_PERSIST_BASE_DIR for this command")
    parser.add_argument("--state-dir", help="Override LOCAL_PERSIST_STATE_DIR for this command")
    parser.add_argument("--debug", action="store_true", help="Emit debug-level log events")
    parser.add_argument(
        "--no-live",
        action="store_true",
        help="Skip the container engine and reconcile from the snapshot only",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)
    _add_list_command(subparsers)
    _add_inspect_command(subparsers)
    _add_create_command(subparsers)
    _add_remove_command(subparsers)
    _add_path_command(subparsers)
    _add_reconcile_command(subparsers)
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the localpersist CLI.

    Args:
        argv: Optional argument vector.

    Returns:
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    config = _build_config(args)
    configure_logging(config.debug)
    live_source = StaticLiveSource() if args.no_live else None
    driver = build_driver(config, live_source=live_source)
    if args.command == "list":
        return _run_list_command(driver)
    if args.command == "inspect":
        return _print_response(driver.get(VolumeRequest(name=args.volume)))
    if args.command == "create":
        request = VolumeRequest(name=args.volume, options=_create_options(args))
        return _print_response(driver.create(request))
    if args.command == "remove":
        return _print_response(driver.remove(VolumeRequest(name=args.volume)))
    if args.command == "path":
        return _print_response(driver.path(VolumeRequest(name=args.volume)))
    if args.command == "reconcile":
        return _run_reconcile_command(driver)
    parser.error(f"Unsupported command: {args.command}")
    return 2


def _build_config(args: argparse.Namespace) -> LocalPersistConfig:
    """Build config with optional command-line overrides.

    Args:
        args: Parsed CLI args.

    Returns:
        Validated config.
    """
    config = LocalPersistConfig.from_env()
    if args.name:
        config = replace(config, driver_name=validate_driver_name(args.name))
    if args.base_dir:
        config = replace(config, base_dir=Path(args.base_dir).expanduser().resolve())
    if args.state_dir:
        config = replace(config, state_dir=Path(args.state_dir).expanduser().resolve())
    if args.debug:
        config = replace(config, debug=True)
    return config


def _create_options(args: argparse.Namespace) -> dict[str, str]:
    options = dict(_parse_option(item) for item in args.opt or [])
    if args.mountpoint is not None:
        options["mountpoint"] = args.mountpoint
    return options


def _parse_option(raw_value: str) -> tuple[str, str]:
    key, _, value = raw_value.partition("=")
    return key, value


def _run_list_command(driver: VolumeDriver) -> int:
    """Print one tab-separated line per volume, sorted by name."""
    response = driver.list(VolumeRequest(name=""))
    for payload in sorted(response["Volumes"], key=lambda item: item["Name"]):
        print(f"{payload['Name']}\t{payload['Mountpoint']}")
    return 0


def _run_reconcile_command(driver: VolumeDriver) -> int:
    """Print the startup state source and the reconciled volumes."""
    result = driver.reconcile_result
    source = result.source if result is not None else "-"
    print(f"source={source}")
    return _run_list_command(driver)


def _print_response(response: Response) -> int:
    """Render a lifecycle response and map it onto an exit code."""
    if "Err" in response:
        print(f"error={response['Err']}")
        return 1
    if "Volume" in response:
        print(f"{response['Volume']['Name']}\t{response['Volume']['Mountpoint']}")
    if "Mountpoint" in response:
        print(response["Mountpoint"])
    return 0


def _add_list_command(subparsers: Any) -> None:
    """Register list subcommand."""
    subparsers.add_parser("list", help="List registered volumes")


def _add_inspect_command(subparsers: Any) -> None:
    """Register inspect subcommand."""
    parser = subparsers.add_parser("inspect", help="Show one registered volume")
    parser.add_argument("volume", help="Volume name")


def _add_create_command(subparsers: Any) -> None:
    """Register create subcommand."""
    parser = subparsers.add_parser("create", help="Register a volume and create its directory")
    parser.add_argument("volume", help="Volume name")
    parser.add_argument("--mountpoint", help="Mountpoint relative to the base directory")
    parser.add_argument(
        "--opt",
        action="append",
        help="Extra driver option as key=value, may be repeated",
    )


def _add_remove_command(subparsers: Any) -> None:
    """Register remove subcommand."""
    parser = subparsers.add_parser("remove", help="Forget a volume, keeping its data")
    parser.add_argument("volume", help="Volume name")


def _add_path_command(subparsers: Any) -> None:
    """Register path subcommand."""
    parser = subparsers.add_parser("path", help="Print the resolved volume path")
    parser.add_argument("volume", help="Volume name")


def _add_reconcile_command(subparsers: Any) -> None:
    """Register reconcile subcommand."""
    subparsers.add_parser("reconcile", help="Show the reconciled startup state")
