"""
Stake CLI - Main Entry Point

Parses command-line arguments and dispatches to subcommands.

Usage:
    python -m stake_cli leaf <asset> [--json]
    python -m stake_cli tree <asset_file> [--out PATH] [--json]
    python -m stake_cli proof <asset_file> <asset> [--json]
    python -m stake_cli verify --root R --asset A [--proof P ...] [--json]
    python -m stake_cli quote --stake-time T --locked-period D [--now N] [--json]
    python -m stake_cli config --init | --show [--path PATH]

Environment Variables:
    STAKE_CUTOFF_TIMESTAMP      Unix time after which staking closes
    STAKE_FEE_AMOUNT            Fee per operation
    STAKE_REWARD_RATE_PER_DAY   Reward units per staked day
    STAKE_DOMAIN_SEPARATOR      Allowlist leaf domain separator
    STAKE_HASH_FUNCTION         keccak256 or sha256
    STAKE_LOG_LEVEL             Log level (default: INFO)
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
import traceback
from pathlib import Path
from typing import Sequence

from stake_cli.commands import allowlist, rewards
from stake_cli.config import DEFAULT_CONFIG_FILE, get_default_config_template, load_config


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def setup_logging(level: str = "INFO", log_file: str | None = None) -> None:
    """Configure logging for the CLI."""
    log_level = getattr(logging, level.upper(), logging.INFO)

    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stderr)]

    if log_file:
        handlers.append(logging.FileHandler(log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        handlers=handlers,
        force=True,
    )


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with all subcommands."""
    parser = argparse.ArgumentParser(
        prog="stake-cli",
        description="Staking campaign tooling - build allowlist trees, check proofs, preview rewards.",
    )
    parser.add_argument(
        "--version", action="version", version="%(prog)s 0.1.0"
    )
    parser.add_argument(
        "--config", "-c",
        type=Path,
        default=None,
        help=f"Path to YAML configuration file (default: ./{DEFAULT_CONFIG_FILE} if present)",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (overrides config)",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Output machine-readable JSON",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        default=False,
        help="Print tracebacks on errors",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # --- leaf command ---
    leaf_parser = subparsers.add_parser(
        "leaf",
        help="Print the allowlist leaf for an asset id",
    )
    leaf_parser.add_argument("asset", type=str, help="0x-prefixed 32-byte asset id")
    leaf_parser.set_defaults(func=allowlist.leaf_cmd)

    # --- tree command ---
    tree_parser = subparsers.add_parser(
        "tree",
        help="Build the allowlist tree from a file of asset ids",
        description="Compute the allowlist root and every asset's proof.",
    )
    tree_parser.add_argument("asset_file", type=str, help="File with one asset id per line")
    tree_parser.add_argument(
        "--out", "-o",
        type=str,
        default=None,
        help="Write root and proofs as JSON to this path",
    )
    tree_parser.set_defaults(func=allowlist.tree_cmd)

    # --- proof command ---
    proof_parser = subparsers.add_parser(
        "proof",
        help="Print the proof for one asset",
    )
    proof_parser.add_argument("asset_file", type=str, help="File with one asset id per line")
    proof_parser.add_argument("asset", type=str, help="0x-prefixed 32-byte asset id")
    proof_parser.set_defaults(func=allowlist.proof_cmd)

    # --- verify command ---
    verify_parser = subparsers.add_parser(
        "verify",
        help="Verify an allowlist proof",
        description="Exit code 0 if the proof holds, 2 if it does not.",
    )
    verify_parser.add_argument("--root", type=str, required=True, help="Allowlist root (hex)")
    verify_parser.add_argument("--asset", type=str, required=True, help="Asset id (hex)")
    verify_parser.add_argument(
        "--proof",
        type=str,
        action="append",
        default=None,
        help="Sibling hash (hex); repeat in proof order",
    )
    verify_parser.set_defaults(func=allowlist.verify_cmd)

    # --- quote command ---
    quote_parser = subparsers.add_parser(
        "quote",
        help="Preview the claimable reward of a stake",
    )
    quote_parser.add_argument("--stake-time", type=int, required=True, help="Stake (or last claim) time")
    quote_parser.add_argument("--locked-period", type=int, required=True, help="Lock period in days")
    quote_parser.add_argument("--now", type=int, default=None, help="Evaluation time (default: now)")
    quote_parser.add_argument(
        "--unstaked",
        action="store_true",
        default=False,
        help="The asset has been withdrawn; use --reward-amount as the frozen reward",
    )
    quote_parser.add_argument("--reward-amount", type=int, default=0, help="Frozen reward amount")
    quote_parser.set_defaults(func=rewards.quote_cmd)

    # --- config command ---
    config_parser = subparsers.add_parser(
        "config",
        help="Manage configuration",
        description="Initialize or display configuration.",
    )
    config_parser.add_argument(
        "--init",
        action="store_true",
        default=False,
        help="Create a template configuration file",
    )
    config_parser.add_argument(
        "--show",
        action="store_true",
        default=False,
        help="Show the effective configuration",
    )
    config_parser.add_argument(
        "--path",
        type=str,
        default=DEFAULT_CONFIG_FILE,
        help=f"Path for config file (default: {DEFAULT_CONFIG_FILE})",
    )
    config_parser.set_defaults(func=config_cmd)

    return parser


def config_cmd(args: argparse.Namespace) -> int:
    """Handle config command."""
    if args.init:
        config_path = Path(args.path)
        if config_path.exists():
            print(f"Error: Config file already exists: {config_path}", file=sys.stderr)
            return EXIT_RUNTIME_ERROR

        config_path.write_text(get_default_config_template())
        print(f"Created configuration file: {config_path}")
        print("You can also use environment variables (STAKE_* prefix).")
        return EXIT_SUCCESS

    if args.show:
        print(json.dumps(args.runtime_config.to_dict(), indent=2))
        return EXIT_SUCCESS

    print("Usage: stake-cli config [--init|--show]")
    print("  --init  Create a template configuration file")
    print("  --show  Show the effective configuration")
    return EXIT_SUCCESS


def main(argv: Sequence[str] | None = None) -> int:
    """
    Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code (0=success, 1=error, 2=verification failed)
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return EXIT_RUNTIME_ERROR

    try:
        config = load_config(args.config)
    except Exception as e:
        print(f"Error loading configuration: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    setup_logging(level=args.log_level or config.log_level, log_file=config.log_file)

    args.runtime_config = config

    try:
        return args.func(args)
    except KeyboardInterrupt:
        print("\nInterrupted.", file=sys.stderr)
        return EXIT_RUNTIME_ERROR
    except Exception as e:
        if args.debug:
            traceback.print_exc()
        else:
            print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR


if __name__ == "__main__":
    sys.exit(main())
