"""Integration tests for the stader-deploy command."""

from pathlib import Path

import pytest
import responses
from terra_sdk.core.wasm import MsgExecuteContract, MsgStoreCode

from stader_deployments import cli
from stader_deployments.registry import DeploymentRegistry

from conftest import FakeChainClient

MNEMONIC = "notice oak worry limit wrap speak medal online prefer cluster roof addict"


@pytest.fixture
def use_chain(monkeypatch):
    """Make the CLI sign with the given fake client instead of a real wallet."""

    def install(chain: FakeChainClient) -> FakeChainClient:
        monkeypatch.setattr(cli, "_make_client", lambda args: chain)
        return chain

    return install


@pytest.fixture
def registry_path(tmp_path: Path) -> Path:
    return tmp_path / "registries" / "localterra.json"


def deploy_args(registry_path: Path, artifacts_dir: Path, *extra: str):
    return [
        "--chain-id",
        "localterra",
        "--registry",
        str(registry_path),
        "deploy",
        "--artifacts",
        str(artifacts_dir),
        *extra,
    ]


class TestShowCommand:
    """Test printing a registry."""

    def test_prints_registry(self, temp_registry_file: Path, capsys):
        """Test that show prints each recorded contract."""
        assert cli.main(["--registry", str(temp_registry_file), "show"]) == 0

        out = capsys.readouterr().out
        assert "airdrops_registry" in out
        assert "terra15dwd5mj8v59wpj0wvt233mf5efdff808c5tkal" in out

    def test_missing_registry(self, tmp_path: Path):
        """Test that show fails cleanly when no registry exists."""
        assert cli.main(["--registry", str(tmp_path / "none.json"), "show"]) == 1


class TestDeployCommand:
    """Test the deploy subcommand."""

    def test_deploys_and_configures(self, use_chain, registry_path: Path, artifacts_dir: Path, capsys):
        """Test a full run: four contracts recorded and both updates applied."""
        chain = use_chain(FakeChainClient())

        assert cli.main(deploy_args(registry_path, artifacts_dir)) == 0

        registry = DeploymentRegistry.load(registry_path)
        assert registry.names() == ["airdrops_registry", "reward", "staking", "cw20_token"]
        assert registry.chain_id == "localterra"
        assert len(chain.calls(MsgExecuteContract)) == 2
        out = capsys.readouterr().out
        assert "reward.update_config: ok" in out
        assert "staking.update_config: ok" in out

    def test_failed_deployment_keeps_partial_registry(
        self, use_chain, registry_path: Path, artifacts_dir: Path, capsys
    ):
        """Test that a halted run exits nonzero after saving and printing what it recorded."""
        chain = use_chain(FakeChainClient(fail_instantiates={2}))

        assert cli.main(deploy_args(registry_path, artifacts_dir)) == 1

        assert DeploymentRegistry.load(registry_path).names() == ["airdrops_registry"]
        assert chain.calls(MsgExecuteContract) == []
        assert "airdrops_registry" in capsys.readouterr().out

    def test_rerun_resumes(self, use_chain, registry_path: Path, artifacts_dir: Path):
        """Test that a second run deploys only the contracts the first one missed."""
        first = use_chain(FakeChainClient(fail_uploads={3}))
        assert cli.main(deploy_args(registry_path, artifacts_dir)) == 1

        second = FakeChainClient()
        second.contracts = dict(first.contracts)
        use_chain(second)
        assert cli.main(deploy_args(registry_path, artifacts_dir)) == 0

        assert len(second.calls(MsgStoreCode)) == 2
        assert len(DeploymentRegistry.load(registry_path)) == 4

    def test_failed_update_exits_nonzero(self, use_chain, registry_path: Path, artifacts_dir: Path, capsys):
        """Test that a rejected update is reported and fails the run."""
        use_chain(FakeChainClient(fail_executes={2}))

        assert cli.main(deploy_args(registry_path, artifacts_dir)) == 1

        out = capsys.readouterr().out
        assert "reward.update_config: ok" in out
        assert "staking.update_config: FAILED" in out
        assert "raw_log: Unauthorized" in out

    def test_registry_from_other_chain(self, use_chain, temp_registry_file: Path, artifacts_dir: Path):
        """Test that a registry recorded on another chain is refused."""
        chain = use_chain(FakeChainClient())

        assert cli.main(deploy_args(temp_registry_file, artifacts_dir)) == 1
        assert chain.broadcasts == []

    def test_plan_file(self, use_chain, registry_path: Path, artifacts_dir: Path, sample_plan_path: Path):
        """Test that a plan file replaces the standard sequence."""
        use_chain(FakeChainClient())

        assert cli.main(deploy_args(registry_path, artifacts_dir, "--plan", str(sample_plan_path))) == 0

        assert DeploymentRegistry.load(registry_path).names() == ["airdrops_registry", "reward", "staking"]

    def test_missing_artifact(self, use_chain, registry_path: Path, artifacts_dir: Path):
        """Test that a missing wasm file stops the run at that contract."""
        (artifacts_dir / "staking.wasm").unlink()
        use_chain(FakeChainClient())

        assert cli.main(deploy_args(registry_path, artifacts_dir)) == 1
        assert DeploymentRegistry.load(registry_path).names() == ["airdrops_registry", "reward"]

    def test_missing_mnemonic(self, registry_path: Path, artifacts_dir: Path, monkeypatch):
        """Test that a run without a mnemonic fails before touching the chain."""
        monkeypatch.delenv("TERRA_MNEMONIC", raising=False)

        assert cli.main(deploy_args(registry_path, artifacts_dir)) == 1
        assert not registry_path.exists()

    @responses.activate
    def test_fetch_gas_prices(self, registry_path: Path, artifacts_dir: Path, monkeypatch):
        """Test that --fetch-gas-prices configures the client with FCD prices."""
        monkeypatch.setenv("TERRA_MNEMONIC", MNEMONIC)
        monkeypatch.delenv("TERRA_LCD_URL", raising=False)
        monkeypatch.delenv("TERRA_GAS_PRICES", raising=False)
        responses.add(
            responses.GET,
            "http://localhost:3060/v1/txs/gas_prices",
            json={"uluna": "0.01133"},
            status=200,
        )
        configs = []

        def fake_client(config):
            configs.append(config)
            return FakeChainClient()

        monkeypatch.setattr(cli, "TerraChainClient", fake_client)

        assert cli.main(["--fetch-gas-prices", *deploy_args(registry_path, artifacts_dir)]) == 0

        assert configs[0].gas_prices == {"uluna": "0.01133"}
        assert configs[0].lcd_url == "http://localhost:1317"


class TestConfigureCommand:
    """Test the configure subcommand."""

    def test_reapplies_updates(self, use_chain, registry_path: Path, artifacts_dir: Path):
        """Test that configure re-sends only the configuration updates."""
        first = use_chain(FakeChainClient(fail_executes={1}))
        assert cli.main(deploy_args(registry_path, artifacts_dir)) == 1

        second = FakeChainClient()
        second.contracts = dict(first.contracts)
        use_chain(second)
        args = ["--chain-id", "localterra", "--registry", str(registry_path), "configure"]
        assert cli.main(args) == 0

        assert second.calls(MsgStoreCode) == []
        assert len(second.calls(MsgExecuteContract)) == 2

    def test_requires_registry(self, use_chain, tmp_path: Path):
        """Test that configure fails when nothing has been deployed."""
        use_chain(FakeChainClient())
        args = ["--registry", str(tmp_path / "none.json"), "configure"]

        assert cli.main(args) == 1


def test_parser_requires_command():
    """Test that a subcommand is mandatory."""
    with pytest.raises(SystemExit):
        cli.build_parser().parse_args([])
