"""
CLI Unit Tests
Tests for stake_cli/main.py and stake_cli/commands/
"""
import json

import pytest

from core.crypto.hashing import to_hex
from core.merkle import AllowlistTree, allowlist_leaf
from stake_cli.commands.allowlist import read_asset_file
from stake_cli.main import (
    EXIT_RUNTIME_ERROR,
    EXIT_SUCCESS,
    EXIT_VERIFICATION_FAILED,
    create_parser,
    main,
)
from fixtures import make_asset_id


ASSETS = [make_asset_id(i) for i in range(1, 6)]


@pytest.fixture
def asset_file(tmp_path):
    path = tmp_path / "assets.txt"
    lines = ["# campaign allowlist", ""]
    lines += [f"{to_hex(a)}  # asset {i}" for i, a in enumerate(ASSETS)]
    path.write_text("\n".join(lines) + "\n")
    return path


@pytest.fixture(autouse=True)
def _isolated_cwd(tmp_path, monkeypatch):
    """Keep a stray ./stake.yaml from being picked up."""
    monkeypatch.chdir(tmp_path)


class TestParser:
    def test_no_command(self, capsys):
        assert main([]) == EXIT_RUNTIME_ERROR

    def test_subcommands_registered(self):
        parser = create_parser()
        args = parser.parse_args(["verify", "--root", "0x00", "--asset", "0x00"])
        assert args.command == "verify"
        assert args.proof is None


class TestReadAssetFile:
    def test_comments_and_blanks(self, asset_file):
        assert read_asset_file(asset_file) == ASSETS

    def test_bad_line_reports_position(self, tmp_path):
        path = tmp_path / "bad.txt"
        path.write_text(to_hex(ASSETS[0]) + "\n0x1234\n")
        with pytest.raises(ValueError, match="bad.txt:2"):
            read_asset_file(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            read_asset_file(tmp_path / "nope.txt")


class TestAllowlistCommands:
    def test_leaf(self, capsys):
        assert main(["leaf", to_hex(ASSETS[0])]) == EXIT_SUCCESS
        assert capsys.readouterr().out.strip() == to_hex(allowlist_leaf(ASSETS[0]))

    def test_tree_json(self, asset_file, capsys):
        assert main(["--json", "tree", str(asset_file)]) == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data["root"] == to_hex(AllowlistTree(ASSETS).root)
        assert data["count"] == len(ASSETS)

    def test_tree_writes_file(self, asset_file, tmp_path, capsys):
        out = tmp_path / "out" / "tree.json"
        assert main(["tree", str(asset_file), "--out", str(out)]) == EXIT_SUCCESS
        data = json.loads(out.read_text())
        assert len(data["proofs"]) == len(ASSETS)
        assert "Root:" in capsys.readouterr().out

    def test_proof_then_verify(self, asset_file, capsys):
        assert main(["--json", "proof", str(asset_file), to_hex(ASSETS[2])]) == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)

        argv = ["verify", "--root", data["root"], "--asset", data["asset"]]
        for sibling in data["proof"]:
            argv += ["--proof", sibling]
        assert main(argv) == EXIT_SUCCESS
        assert capsys.readouterr().out.strip() == "VALID"

    def test_proof_unknown_asset(self, asset_file):
        assert main(["proof", str(asset_file), to_hex(make_asset_id(99))]) == EXIT_VERIFICATION_FAILED

    def test_verify_rejects_wrong_proof(self, capsys):
        tree = AllowlistTree(ASSETS)
        argv = ["verify", "--root", to_hex(tree.root), "--asset", to_hex(ASSETS[0])]
        for sibling in tree.proof_for(ASSETS[1]):
            argv += ["--proof", to_hex(sibling)]
        assert main(argv) == EXIT_VERIFICATION_FAILED
        assert capsys.readouterr().out.strip() == "INVALID"

    def test_malformed_hex_is_runtime_error(self):
        assert main(["leaf", "not-hex"]) == EXIT_RUNTIME_ERROR


class TestQuoteCommand:
    def test_locked(self, capsys):
        argv = ["--json", "quote", "--stake-time", "0", "--locked-period", "7", "--now", str(3 * 86_400)]
        assert main(argv) == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data["entitlement"] == 0
        assert data["lock_elapsed"] is False

    def test_unlocked(self, capsys):
        argv = ["--json", "quote", "--stake-time", "0", "--locked-period", "7", "--now", str(10 * 86_400)]
        assert main(argv) == EXIT_SUCCESS
        assert json.loads(capsys.readouterr().out)["entitlement"] == 100_000_000

    def test_unstaked_reads_frozen_amount(self, capsys):
        argv = [
            "--json", "quote", "--stake-time", "0", "--locked-period", "7",
            "--now", "1", "--unstaked", "--reward-amount", "55",
        ]
        assert main(argv) == EXIT_SUCCESS
        assert json.loads(capsys.readouterr().out)["entitlement"] == 55

    def test_uses_configured_rate(self, tmp_path, capsys):
        config = tmp_path / "custom.yaml"
        config.write_text("campaign:\n  reward_rate_per_day: 3\n")
        argv = [
            "--config", str(config), "--json", "quote",
            "--stake-time", "0", "--locked-period", "0", "--now", str(2 * 86_400),
        ]
        assert main(argv) == EXIT_SUCCESS
        assert json.loads(capsys.readouterr().out)["entitlement"] == 6


class TestConfigCommand:
    def test_init_then_show(self, tmp_path, capsys):
        path = tmp_path / "stake.yaml"
        assert main(["config", "--init", "--path", str(path)]) == EXIT_SUCCESS
        assert path.exists()
        assert main(["config", "--init", "--path", str(path)]) == EXIT_RUNTIME_ERROR
        capsys.readouterr()

        assert main(["--config", str(path), "config", "--show"]) == EXIT_SUCCESS
        data = json.loads(capsys.readouterr().out)
        assert data["campaign"]["cutoff_timestamp"] == 1_645_203_600

    def test_missing_config_file(self, tmp_path):
        assert main(["--config", str(tmp_path / "none.yaml"), "config", "--show"]) == EXIT_RUNTIME_ERROR
