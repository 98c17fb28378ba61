"""Run configuration for stader-deployments library."""

import os
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, Optional

from .constants import DEFAULT_CHAIN_ID, NETWORK_CONFIG
from .gas import parse_gas_prices


@dataclass
class ChainConfig:
    """Network endpoint, gas pricing and signing identity of a run."""

    chain_id: str
    lcd_url: str
    mnemonic: str = field(repr=False)
    gas_prices: Dict[str, str] = field(default_factory=dict)
    gas_adjustment: float = 1.4
    fcd_url: Optional[str] = None

    @classmethod
    def from_env(
        cls,
        chain_id: Optional[str] = None,
        lcd_url: Optional[str] = None,
        mnemonic: Optional[str] = None,
        gas_prices: Optional[Dict[str, str]] = None,
        gas_adjustment: Optional[float] = None,
    ) -> "ChainConfig":
        """
        Build a configuration from arguments, falling back to the environment.

        Args:
            chain_id: Chain identifier (defaults to $TERRA_CHAIN_ID, then bombay-12)
            lcd_url: LCD endpoint (defaults to $TERRA_LCD_URL, then the known network URL)
            mnemonic: Deployer mnemonic (defaults to $TERRA_MNEMONIC)
            gas_prices: denom -> price (defaults to $TERRA_GAS_PRICES, then network defaults)
            gas_adjustment: Gas estimate multiplier (defaults to $TERRA_GAS_ADJUSTMENT)

        Returns:
            ChainConfig for the run

        Raises:
            ValueError: If the mnemonic is missing, or the chain is unknown and
                no LCD URL was given
        """
        if chain_id is None:
            chain_id = os.environ.get("TERRA_CHAIN_ID", DEFAULT_CHAIN_ID)
        if lcd_url is None:
            lcd_url = os.environ.get("TERRA_LCD_URL")
        if mnemonic is None:
            mnemonic = os.environ.get("TERRA_MNEMONIC")
        if gas_prices is None and os.environ.get("TERRA_GAS_PRICES"):
            gas_prices = parse_gas_prices(os.environ["TERRA_GAS_PRICES"])
        if gas_adjustment is None and os.environ.get("TERRA_GAS_ADJUSTMENT"):
            gas_adjustment = float(os.environ["TERRA_GAS_ADJUSTMENT"])

        if not mnemonic:
            raise ValueError(
                "Deployer mnemonic required: set $TERRA_MNEMONIC or pass mnemonic parameter"
            )

        network = NETWORK_CONFIG.get(chain_id, {})
        if lcd_url is None:
            if not network:
                raise ValueError(
                    f"Unknown chain '{chain_id}': set $TERRA_LCD_URL or pass lcd_url parameter"
                )
            lcd_url = network["lcd_url"]

        return cls(
            chain_id=chain_id,
            lcd_url=lcd_url,
            mnemonic=mnemonic,
            gas_prices=gas_prices if gas_prices is not None else dict(network.get("gas_prices", {})),
            gas_adjustment=gas_adjustment if gas_adjustment is not None else network.get("gas_adjustment", 1.4),
            fcd_url=network.get("fcd_url"),
        )


@dataclass
class StakingParams:
    """Instantiate parameters for the standard Stader deployment."""

    # Staking contract
    min_deposit: int = 10_000
    max_deposit: int = 15_000_000
    protocol_reward_fee: Decimal = Decimal("0.01")
    protocol_deposit_fee: Decimal = Decimal("0")
    protocol_withdraw_fee: Decimal = Decimal("0")
    unbonding_period: int = 21 * 24 * 60 * 60 + 3600  # 21 days plus an hour of buffer
    undelegation_cooldown: int = 3 * 24 * 60 * 60
    # Default to the deployer wallet when unset
    protocol_fee_contract: Optional[str] = None
    airdrop_withdrawal_contract: Optional[str] = None

    # Reward contract
    reward_denom: str = "uluna"

    # cw20 liquid staking token
    token_name: str = "Stader Luna Token"
    token_symbol: str = "SLUNA"
    token_decimals: int = 6
