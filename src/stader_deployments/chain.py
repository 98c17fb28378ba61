"""Chain client boundary and its terra_sdk implementation."""

import logging
from typing import Any, List, Protocol, Sequence

from terra_sdk.client.lcd import LCDClient
from terra_sdk.client.lcd.api.tx import CreateTxOptions
from terra_sdk.core.coins import Coins
from terra_sdk.core.wasm import MsgInstantiateContract, MsgStoreCode
from terra_sdk.exceptions import LCDResponseError
from terra_sdk.key.mnemonic import MnemonicKey
from terra_sdk.util.contract import get_code_id, get_contract_address

from .config import ChainConfig
from .types import TxOutcome

logger = logging.getLogger(__name__)


class ChainClient(Protocol):
    """Signs and broadcasts transactions for a single deployer identity."""

    @property
    def address(self) -> str:
        """Account address of the signing identity."""
        ...

    def sign_and_broadcast(self, messages: Sequence[Any]) -> TxOutcome:
        """Sign the messages as one transaction, broadcast it and wait for the result."""
        ...


def outcome_from_broadcast(result: Any, messages: Sequence[Any]) -> TxOutcome:
    """
    Convert a terra_sdk BlockTxBroadcastResult into a TxOutcome.

    On success the code id of the first MsgStoreCode and the address of the
    first MsgInstantiateContract in the transaction are extracted from its logs.
    """
    code = result.code or 0
    if code != 0:
        return TxOutcome(
            is_error=True,
            code=code,
            codespace=result.codespace or "",
            raw_log=result.raw_log or "",
            txhash=result.txhash,
        )

    code_id = None
    contract_address = None
    for index, msg in enumerate(messages):
        if isinstance(msg, MsgStoreCode) and code_id is None:
            code_id = int(get_code_id(result, msg_index=index))
        elif isinstance(msg, MsgInstantiateContract) and contract_address is None:
            contract_address = get_contract_address(result, msg_index=index)

    return TxOutcome(
        is_error=False,
        raw_log=result.raw_log or "",
        txhash=result.txhash,
        code_id=code_id,
        contract_address=contract_address,
    )


class TerraChainClient:
    """ChainClient backed by a Terra LCD endpoint and a mnemonic wallet."""

    def __init__(self, config: ChainConfig):
        self.config = config
        self.lcd = LCDClient(
            url=config.lcd_url,
            chain_id=config.chain_id,
            gas_prices=Coins(config.gas_prices),
            gas_adjustment=config.gas_adjustment,
        )
        self.wallet = self.lcd.wallet(MnemonicKey(mnemonic=config.mnemonic))

    @property
    def address(self) -> str:
        return self.wallet.key.acc_address

    def sign_and_broadcast(self, messages: Sequence[Any]) -> TxOutcome:
        """
        Sign and broadcast messages in one transaction.

        Fee estimation simulates the transaction, so a contract that rejects a
        message fails here with an LCD error rather than in the broadcast
        result. Both cases are reported as an error TxOutcome.

        Args:
            messages: terra_sdk messages, all sent from this client's address

        Returns:
            TxOutcome of the transaction
        """
        msgs: List[Any] = list(messages)
        try:
            tx = self.wallet.create_and_sign_tx(CreateTxOptions(msgs=msgs))
            result = self.lcd.tx.broadcast(tx)
        except LCDResponseError as e:
            logger.warning("LCD rejected transaction: %s", e.message)
            return TxOutcome(
                is_error=True,
                code=getattr(e.response, "status", -1),
                codespace="lcd",
                raw_log=str(e.message),
            )

        outcome = outcome_from_broadcast(result, msgs)
        logger.debug("Broadcast %s: code=%s", outcome.txhash, outcome.code)
        return outcome
