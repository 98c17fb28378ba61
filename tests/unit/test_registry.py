"""Unit tests for the deployment registry."""

import json
from pathlib import Path
from typing import Any, Dict

import pytest

from stader_deployments.exceptions import (
    RegistryConflictError,
    RegistryNotFoundError,
    UnresolvedReference,
)
from stader_deployments.references import Ref
from stader_deployments.registry import DeploymentRegistry
from stader_deployments.types import DeploymentRecord

REWARD = DeploymentRecord("reward", 21012, "terra15dwd5mj8v59wpj0wvt233mf5efdff808c5tkal")
STAKING = DeploymentRecord("staking", 21013, "terra1ajt556dpzvjwl0kl5tzku3fc3p3knkg9mkv8jl")


class TestRecording:
    """Test adding and reading records."""

    def test_preserves_insertion_order(self):
        """Test that names come back in deployment order."""
        registry = DeploymentRegistry()
        registry.record(STAKING)
        registry.record(REWARD)

        assert registry.names() == ["staking", "reward"]
        assert list(registry) == ["staking", "reward"]
        assert registry.records() == [STAKING, REWARD]

    def test_lookup(self):
        """Test mapping-style access."""
        registry = DeploymentRegistry()
        registry.record(REWARD)

        assert "reward" in registry
        assert "staking" not in registry
        assert registry["reward"] == REWARD
        assert registry.get("staking") is None
        assert len(registry) == 1

    def test_getitem_missing_raises_key_error(self):
        """Test that indexing a missing name raises KeyError."""
        with pytest.raises(KeyError):
            DeploymentRegistry()["reward"]

    def test_entries_are_never_replaced(self):
        """Test that recording a name twice raises and keeps the first record."""
        registry = DeploymentRegistry()
        registry.record(REWARD)

        with pytest.raises(RegistryConflictError):
            registry.record(DeploymentRecord("reward", 99, STAKING.address))

        assert registry["reward"] == REWARD

    def test_resolve(self):
        """Test that a Ref resolves through the registry."""
        registry = DeploymentRegistry()
        registry.record(REWARD)

        assert registry.resolve(Ref("reward")) == REWARD.address
        assert registry.resolve(Ref("reward", "code_id")) == 21012
        with pytest.raises(UnresolvedReference):
            registry.resolve(Ref("staking"))


class TestPersistence:
    """Test saving and loading registry files."""

    def test_to_dict_shape(self):
        """Test the serialized layout."""
        registry = DeploymentRegistry("bombay-12")
        registry.record(REWARD)

        data = registry.to_dict()

        assert data["metadata"]["chain_id"] == "bombay-12"
        assert "updated_at" in data["metadata"]
        assert data["contracts"] == {"reward": {"code_id": 21012, "address": REWARD.address}}

    def test_save_and_load(self, tmp_path: Path):
        """Test that a saved registry loads with the same records and order."""
        path = tmp_path / "nested" / "dir" / "bombay-12.json"
        registry = DeploymentRegistry("bombay-12")
        registry.record(STAKING)
        registry.record(REWARD)

        registry.save(path)
        loaded = DeploymentRegistry.load(path)

        assert loaded.chain_id == "bombay-12"
        assert loaded.records() == [STAKING, REWARD]

    def test_load_fixture(self, temp_registry_file: Path, sample_registry_json: Dict[str, Any]):
        """Test loading a registry written by an earlier run."""
        registry = DeploymentRegistry.load(temp_registry_file)

        assert registry.names() == list(sample_registry_json["contracts"])
        assert registry["reward"].code_id == 21012

    def test_load_missing_file(self, tmp_path: Path):
        """Test that loading a missing file raises RegistryNotFoundError."""
        with pytest.raises(RegistryNotFoundError):
            DeploymentRegistry.load(tmp_path / "missing.json")

    def test_load_or_create_missing_file(self, tmp_path: Path):
        """Test that a missing file yields an empty registry for the chain."""
        registry = DeploymentRegistry.load_or_create(tmp_path / "missing.json", "localterra")

        assert len(registry) == 0
        assert registry.chain_id == "localterra"

    def test_load_or_create_rejects_other_chain(self, temp_registry_file: Path):
        """Test that a registry from another chain is not reused."""
        with pytest.raises(RegistryConflictError):
            DeploymentRegistry.load_or_create(temp_registry_file, "columbus-5")

    def test_load_or_create_adopts_chain_id(self, tmp_path: Path):
        """Test that a registry without chain metadata takes the requested chain."""
        path = tmp_path / "registry.json"
        with open(path, "w") as f:
            json.dump({"contracts": {"reward": REWARD.to_dict()}}, f)

        registry = DeploymentRegistry.load_or_create(path, "bombay-12")

        assert registry.chain_id == "bombay-12"
        assert registry.names() == ["reward"]


class TestSummary:
    """Test the operator-facing table."""

    def test_empty(self):
        """Test the summary of an empty registry."""
        assert DeploymentRegistry().summary() == "No contracts deployed."

    def test_lists_every_contract(self):
        """Test that each record appears on its own line with code id and address."""
        registry = DeploymentRegistry()
        registry.record(REWARD)
        registry.record(STAKING)

        lines = registry.summary().splitlines()

        assert lines[0].split() == ["contract", "code", "id", "address"]
        assert lines[1].split() == ["reward", "21012", REWARD.address]
        assert lines[2].split() == ["staking", "21013", STAKING.address]
