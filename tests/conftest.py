"""
Pytest configuration and shared fixtures for staking core tests.

This conftest.py:
1. Adds project root to sys.path for imports
2. Provides commonly-used fixtures via pytest's autodiscovery
3. Configures pytest markers and settings
"""

import os
import sys
from pathlib import Path

import pytest

# =============================================================================
# Path Setup - Must happen before any local imports
# =============================================================================

# Get the project root (parent of tests/)
_PROJECT_ROOT = Path(__file__).resolve().parent.parent
_TESTS_ROOT = Path(__file__).resolve().parent

# Add both project root and tests root to sys.path
for _path in [str(_PROJECT_ROOT), str(_TESTS_ROOT)]:
    if _path not in sys.path:
        sys.path.insert(0, _path)

# =============================================================================
# Import fixtures using importlib (more robust for pytest loading)
# =============================================================================

import importlib

_common = importlib.import_module("fixtures.common")

make_campaign_config = _common.make_campaign_config
make_stake_record = _common.make_stake_record
make_staking_env = _common.make_staking_env


# =============================================================================
# Pytest Fixtures (autodiscovered by pytest)
# =============================================================================

@pytest.fixture
def campaign_config():
    """Provide a default CampaignConfig for tests."""
    return make_campaign_config()


@pytest.fixture
def staked_record():
    """Provide a record staked at t=0 with a 7-day lock."""
    return make_stake_record()


@pytest.fixture
def env():
    """Provide an initialized in-memory campaign with the clock at t=0."""
    return make_staking_env()


@pytest.fixture
def uninitialized_env():
    """Provide an in-memory campaign whose allowlist root is not yet written."""
    return make_staking_env(initialize=False)


@pytest.fixture(autouse=True, scope="session")
def _isolate_stake_env():
    """Keep STAKE_* variables from the developer's shell out of every test."""
    saved = {name: os.environ.pop(name) for name in list(os.environ) if name.startswith("STAKE_")}
    yield
    os.environ.update(saved)


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
    config.addinivalue_line(
        "markers", "integration: marks tests as integration tests"
    )
    config.addinivalue_line(
        "markers", "unit: marks tests as unit tests"
    )
    config.addinivalue_line(
        "markers", "property: marks hypothesis property tests"
    )


# =============================================================================
# Test Helpers (available to all tests via fixtures)
# =============================================================================

@pytest.fixture
def assert_no_state_change():
    """
    Helper asserting a rejected operation left the campaign untouched.

    Usage:
        snapshot = assert_no_state_change.snapshot(env, asset, owner)
        ... failing call ...
        assert_no_state_change.check(env, snapshot, asset, owner)
    """
    class _Helper:
        @staticmethod
        def snapshot(env, asset, owner):
            return (
                env.orchestrator.get_record(asset, owner),
                env.orchestrator.get_allowlist(),
                env.custody.holder_of(asset),
                {a: env.fee_balance(a) for a in [owner, env.config.treasury]},
                env.reward_balance(owner),
            )

        @staticmethod
        def check(env, snapshot, asset, owner):
            assert _Helper.snapshot(env, asset, owner) == snapshot

    return _Helper
