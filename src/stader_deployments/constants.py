"""Configuration constants for stader-deployments library."""

# Registry keys of the contracts in the standard deployment
AIRDROPS_REGISTRY = "airdrops_registry"
REWARD = "reward"
STAKING = "staking"
CW20_TOKEN = "cw20_token"

# Compiled artifact file names, relative to the artifacts directory
DEFAULT_ARTIFACTS = {
    AIRDROPS_REGISTRY: "airdrops_registry.wasm",
    REWARD: "reward.wasm",
    STAKING: "staking.wasm",
    CW20_TOKEN: "cw20_base.wasm",
}

# Bech32 human readable parts
ACCOUNT_PREFIX = "terra"
VALOPER_PREFIX = "terravaloper"

# Terra networks keyed by chain id
NETWORK_CONFIG = {
    "columbus-5": {
        "chain_name": "Terra Classic",
        "lcd_url": "https://lcd.terra.dev",
        "fcd_url": "https://fcd.terra.dev",
        "gas_prices": {"uusd": "0.15"},
        "gas_adjustment": 1.4,
    },
    "bombay-12": {
        "chain_name": "Terra Bombay Testnet",
        "lcd_url": "https://bombay-lcd.terra.dev",
        "fcd_url": "https://bombay-fcd.terra.dev",
        "gas_prices": {"uusd": "0.15"},
        "gas_adjustment": 1.4,
    },
    "localterra": {
        "chain_name": "LocalTerra",
        "lcd_url": "http://localhost:1317",
        "fcd_url": "http://localhost:3060",
        "gas_prices": {"uluna": "0.015"},
        "gas_adjustment": 1.4,
    },
}

DEFAULT_CHAIN_ID = "bombay-12"
