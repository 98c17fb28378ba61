"""Shared pytest fixtures for stader-deployments tests."""

import json
from pathlib import Path
from typing import Any, Dict, Iterable, List, Sequence, Type

import pytest
from terra_sdk.core.wasm import MsgExecuteContract, MsgInstantiateContract, MsgStoreCode

from stader_deployments.constants import DEFAULT_ARTIFACTS
from stader_deployments.types import TxOutcome

DEPLOYER = "terra1f6nthhyvtjalucnzdwwajp7mnhm5tpn5l46sed"

# Addresses handed out to instantiated contracts, in order
CONTRACT_ADDRESSES = [
    "terra10lm49e6ufm8cfpwcmcltvxkv3s6cqeunyjhaj5",
    "terra1khmttxmtsmt0983ggwcufalxkn07l4yj5thu3h",
    "terra1jc9sxkxcrmmgeak6wmn44403la3paz60v3n7fa",
    "terra14uqjlrg5efah459xkstxavf3wr7ku8s0j5h328",
    "terra1y2e2qdgkysnl3z020lkzdsxdkkc6wwqd4r5u6f",
    "terra17fvgcyj0n92px30xt0qdhmnhjmuj6wyuya9tzd",
    "terra1gdj4adgs90avvrddf4v4ft2zj526y3uwn4flrt",
    "terra1438rqfx8r8y3kxrqhpr7le4ewppdssn0x593k0",
]

WASM_BYTES = b"\x00asm\x01\x00\x00\x00"


class FakeChainClient:
    """
    In-memory chain client.

    Records every broadcast, assigns sequential code ids and addresses, and
    keeps each contract's init message as its stored config so update_config
    messages can be observed. ``fail_*`` hold 1-based call numbers that should
    be rejected.
    """

    def __init__(
        self,
        fail_uploads: Iterable[int] = (),
        fail_instantiates: Iterable[int] = (),
        fail_executes: Iterable[int] = (),
    ):
        self.address = DEPLOYER
        self.fail_uploads = set(fail_uploads)
        self.fail_instantiates = set(fail_instantiates)
        self.fail_executes = set(fail_executes)
        self.broadcasts: List[List[Any]] = []
        self.contracts: Dict[str, Dict[str, Any]] = {}
        self._next_code_id = 101

    def calls(self, msg_type: Type) -> List[Any]:
        return [msg for batch in self.broadcasts for msg in batch if isinstance(msg, msg_type)]

    def sign_and_broadcast(self, messages: Sequence[Any]) -> TxOutcome:
        self.broadcasts.append(list(messages))
        msg = messages[0]

        if isinstance(msg, MsgStoreCode):
            if len(self.calls(MsgStoreCode)) in self.fail_uploads:
                return TxOutcome(is_error=True, code=5, codespace="sdk", raw_log="insufficient funds")
            code_id = self._next_code_id
            self._next_code_id += 1
            return TxOutcome(is_error=False, txhash=f"STORE{code_id}", code_id=code_id)

        if isinstance(msg, MsgInstantiateContract):
            if len(self.calls(MsgInstantiateContract)) in self.fail_instantiates:
                return TxOutcome(
                    is_error=True, code=4, codespace="wasm", raw_log="instantiate wasm contract failed"
                )
            address = CONTRACT_ADDRESSES[len(self.contracts)]
            self.contracts[address] = json.loads(json.dumps(msg.init_msg))
            return TxOutcome(is_error=False, txhash=f"INIT{len(self.contracts)}", contract_address=address)

        if isinstance(msg, MsgExecuteContract):
            if len(self.calls(MsgExecuteContract)) in self.fail_executes:
                return TxOutcome(is_error=True, code=4, codespace="wasm", raw_log="Unauthorized")
            (variant, body), = msg.execute_msg.items()
            if variant == "update_config":
                self.contracts[msg.contract].update(body.get("config_request", body))
            return TxOutcome(is_error=False, txhash=f"EXEC{len(self.broadcasts)}")

        raise AssertionError(f"Unexpected message {msg!r}")


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the fixtures directory."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def chain() -> FakeChainClient:
    """A chain client that accepts every transaction."""
    return FakeChainClient()


@pytest.fixture
def artifacts_dir(tmp_path: Path) -> Path:
    """Create an artifacts directory with a stub wasm file per standard contract."""
    artifacts = tmp_path / "artifacts"
    artifacts.mkdir()
    for file_name in DEFAULT_ARTIFACTS.values():
        (artifacts / file_name).write_bytes(WASM_BYTES)
    return artifacts


@pytest.fixture
def wasm_file(tmp_path: Path) -> Path:
    """Create a single stub wasm file."""
    path = tmp_path / "contract.wasm"
    path.write_bytes(WASM_BYTES)
    return path


@pytest.fixture
def sample_registry_json(fixtures_dir: Path) -> Dict[str, Any]:
    """Load and return the sample registry fixture."""
    with open(fixtures_dir / "sample_registry.json") as f:
        return json.load(f)


@pytest.fixture
def temp_registry_file(tmp_path: Path, sample_registry_json: Dict[str, Any]) -> Path:
    """Write the sample registry to a temporary file."""
    path = tmp_path / ".stader-deployments" / "bombay-12.json"
    path.parent.mkdir(parents=True)
    with open(path, "w") as f:
        json.dump(sample_registry_json, f, indent=2)
    return path


@pytest.fixture
def sample_plan_path(fixtures_dir: Path) -> Path:
    """Return path to the sample plan file."""
    return fixtures_dir / "sample_plan.json"
