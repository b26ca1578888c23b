"""
CLI Allowlist Commands

Build allowlist Merkle trees offline and produce or check proofs.

Usage:
    stake-cli leaf <asset>
    stake-cli tree <asset_file> [--out PATH] [--json]
    stake-cli proof <asset_file> <asset> [--json]
    stake-cli verify --root R --asset A [--proof P ...] [--json]

Asset files hold one 0x-prefixed 32-byte id per line; blank lines and
`#` comments are ignored.
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from pathlib import Path

from core.config import CampaignConfig
from core.crypto.hashing import from_hex32, to_hex
from core.merkle import AllowlistTree, AllowlistVerifier


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


def read_asset_file(path: Path) -> list[bytes]:
    """
    Parse an asset id file.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: On a malformed line (the message names the line number)
    """
    if not path.exists():
        raise FileNotFoundError(f"Asset file not found: {path}")

    assets: list[bytes] = []
    for lineno, raw in enumerate(path.read_text().splitlines(), start=1):
        line = raw.split("#", 1)[0].strip()
        if not line:
            continue
        try:
            assets.append(from_hex32(line))
        except ValueError as e:
            raise ValueError(f"{path}:{lineno}: {e}") from e
    logger.debug(f"Read {len(assets)} asset ids from {path}")
    return assets


def _campaign(args: Namespace) -> CampaignConfig:
    return args.runtime_config.campaign


def build_tree(args: Namespace) -> AllowlistTree:
    campaign = _campaign(args)
    assets = read_asset_file(Path(args.asset_file))
    return AllowlistTree(
        assets,
        domain_separator=campaign.hash_domain_separator,
        hash_function=campaign.hash_function,
    )


def leaf_cmd(args: Namespace) -> int:
    """Print the allowlist leaf of one asset."""
    campaign = _campaign(args)
    asset = from_hex32(args.asset)
    verifier = AllowlistVerifier(
        bytes(32),
        domain_separator=campaign.hash_domain_separator,
        hash_function=campaign.hash_function,
    )
    leaf = to_hex(verifier.leaf_for(asset))
    if args.json:
        print(json.dumps({"asset": to_hex(asset), "leaf": leaf}, indent=2))
    else:
        print(leaf)
    return EXIT_SUCCESS


def tree_cmd(args: Namespace) -> int:
    """Build the allowlist tree and print or write root and proofs."""
    tree = build_tree(args)
    data = tree.to_dict()

    if args.out:
        out_path = Path(args.out)
        out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(json.dumps(data, indent=2) + "\n")
        logger.info(f"Wrote allowlist tree with {len(tree)} assets to {out_path}")

    if args.json:
        print(json.dumps(data, indent=2))
    else:
        print(f"Root:   {data['root']}")
        print(f"Assets: {data['count']}")
        print(f"Depth:  {tree.depth}")
        if args.out:
            print(f"Proofs: {args.out}")
    return EXIT_SUCCESS


def proof_cmd(args: Namespace) -> int:
    """Print the proof of one asset."""
    tree = build_tree(args)
    asset = from_hex32(args.asset)
    if not tree.contains(asset):
        print(f"Error: asset {to_hex(asset)} is not in the allowlist", file=sys.stderr)
        return EXIT_VERIFICATION_FAILED

    proof = [to_hex(s) for s in tree.proof_for(asset)]
    if args.json:
        print(json.dumps({"asset": to_hex(asset), "root": to_hex(tree.root), "proof": proof}, indent=2))
    else:
        for sibling in proof:
            print(sibling)
    return EXIT_SUCCESS


def verify_cmd(args: Namespace) -> int:
    """Verify a proof against a root. Exit code 2 when it does not hold."""
    campaign = _campaign(args)
    root = from_hex32(args.root)
    asset = from_hex32(args.asset)
    proof = [from_hex32(p) for p in (args.proof or [])]

    verifier = AllowlistVerifier(
        root,
        domain_separator=campaign.hash_domain_separator,
        hash_function=campaign.hash_function,
    )
    ok = verifier.verify_asset(asset, proof)

    if args.json:
        print(json.dumps({"asset": to_hex(asset), "root": to_hex(root), "valid": ok}, indent=2))
    else:
        print("VALID" if ok else "INVALID")
    return EXIT_SUCCESS if ok else EXIT_VERIFICATION_FAILED
