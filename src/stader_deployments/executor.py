"""Upload and instantiate a single contract."""

import dataclasses
import logging
from pathlib import Path
from typing import Optional

from terra_sdk.core.coins import Coins
from terra_sdk.core.wasm import MsgInstantiateContract, MsgStoreCode
from terra_sdk.util.contract import read_file_as_b64

from .catalog import MessageCatalog, ValueKind, check_value, default_catalog
from .chain import ChainClient
from .exceptions import (
    BytecodeNotFoundError,
    CodeUploadFailed,
    InstantiationFailed,
    UnresolvedReference,
)
from .references import has_unresolved, iter_references
from .types import ContractDescriptor, DeploymentRecord

logger = logging.getLogger(__name__)


def _read_bytecode(descriptor: ContractDescriptor) -> str:
    path = Path(descriptor.bytecode_path)
    if not path.is_file():
        raise BytecodeNotFoundError(f"Bytecode for '{descriptor.name}' not found at {path}")
    try:
        return read_file_as_b64(str(path))
    except OSError as e:
        raise BytecodeNotFoundError(
            f"Cannot read bytecode for '{descriptor.name}' at {path}: {e}"
        ) from e


def deploy_contract(
    client: ChainClient,
    descriptor: ContractDescriptor,
    catalog: Optional[MessageCatalog] = None,
) -> DeploymentRecord:
    """
    Upload a contract's code and instantiate it.

    The init message must already be free of references. It is validated
    before anything is broadcast. Neither transaction is retried: upload and
    instantiate failures are not transient.

    Args:
        client: Chain client signing as the deployer
        descriptor: Contract to deploy
        catalog: Message catalog to validate against (defaults to the standard one)

    Returns:
        DeploymentRecord with the chain-assigned code id and address

    Raises:
        UnresolvedReference: If the init message still contains a reference
        InvalidMessageError: If the init message violates the contract schema
        BytecodeNotFoundError: If the wasm file cannot be read
        CodeUploadFailed: If the store code transaction is rejected
        InstantiationFailed: If the instantiate transaction is rejected or its
            result carries no valid contract address
    """
    if catalog is None:
        catalog = default_catalog()

    if has_unresolved(descriptor.init_message):
        missing = next(iter_references(descriptor.init_message), None)
        raise UnresolvedReference(missing.name if missing else "<placeholder>", descriptor.name)
    catalog.validate_instantiate(descriptor.schema_name, descriptor.init_message)

    wasm = _read_bytecode(descriptor)

    logger.info("Storing code for %s from %s", descriptor.name, descriptor.bytecode_path)
    store_outcome = client.sign_and_broadcast(
        [MsgStoreCode(sender=client.address, wasm_byte_code=wasm)]
    )
    if store_outcome.is_error:
        raise CodeUploadFailed(descriptor.name, store_outcome)
    code_id = store_outcome.code_id
    logger.info("Stored %s as code id %s (tx %s)", descriptor.name, code_id, store_outcome.txhash)

    instantiate = MsgInstantiateContract(
        sender=client.address,
        admin=descriptor.admin or client.address,
        code_id=code_id,
        init_msg=descriptor.init_message,
        init_coins=Coins(descriptor.init_coins or {}),
    )
    logger.info("Instantiating %s from code id %s", descriptor.name, code_id)
    instantiate_outcome = client.sign_and_broadcast([instantiate])
    if instantiate_outcome.is_error:
        raise InstantiationFailed(descriptor.name, instantiate_outcome, code_id)

    # Recorded addresses must be real: later Refs resolve to them
    problem = check_value(ValueKind.ADDR, instantiate_outcome.contract_address, catalog.prefix)
    if problem is not None:
        invalid = dataclasses.replace(
            instantiate_outcome,
            is_error=True,
            codespace="client",
            raw_log=f"instantiate result has no usable contract address: {problem}",
        )
        raise InstantiationFailed(descriptor.name, invalid, code_id)

    record = DeploymentRecord(
        contract_name=descriptor.name,
        code_id=code_id,
        address=instantiate_outcome.contract_address,
    )
    logger.info("Instantiated %s at %s", descriptor.name, record.address)
    return record
