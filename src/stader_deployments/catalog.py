"""
Message catalog for the deployed contracts.

Describes the instantiate and execute messages each contract accepts and the
JSON encoding of the CosmWasm value types they use:

- Addr: bech32 string with the network prefix
- Uint128 / Uint64: decimal string, so JSON number precision never applies
- Decimal: decimal string with at most 18 fractional digits
- Binary: base64 string
- Timestamp: nanoseconds since the epoch as a decimal string
- u8 / u32 / u64: JSON integers

Messages are checked here before they are broadcast so a malformed message
never costs a transaction.
"""

import base64
import binascii
import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal, InvalidOperation
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .constants import (
    ACCOUNT_PREFIX,
    AIRDROPS_REGISTRY,
    CW20_TOKEN,
    REWARD,
    STAKING,
    VALOPER_PREFIX,
)
from .exceptions import InvalidMessageError

BECH32_CHARSET = set("qpzry9x8gf2tvdw0s3jn54khce6mua7l")

# Data part lengths (payload + 6 char checksum) for 20 and 32 byte addresses
BECH32_DATA_LENGTHS = (38, 58)

UINT64_MAX = 2**64 - 1
UINT128_MAX = 2**128 - 1
DECIMAL_FRACTIONAL_DIGITS = 18

_UINT_STRING = re.compile(r"^[0-9]+$")
_DECIMAL_STRING = re.compile(r"^[0-9]+(\.[0-9]{1,18})?$")


class ValueKind(Enum):
    """
    CosmWasm value types.

    Value strings match the type names used in contract JSON schemas.
    """

    ADDR = "Addr"
    VALOPER = "ValidatorAddr"
    UINT128 = "Uint128"
    UINT64 = "Uint64"
    DECIMAL = "Decimal"
    BINARY = "Binary"
    TIMESTAMP = "Timestamp"
    STRING = "string"
    BOOL = "bool"
    U8 = "u8"
    U32 = "u32"
    U64 = "u64"


_INT_LIMITS = {
    ValueKind.U8: 2**8 - 1,
    ValueKind.U32: 2**32 - 1,
    ValueKind.U64: UINT64_MAX,
}


def _is_bech32(value: str, prefix: str) -> bool:
    hrp = prefix + "1"
    if not value.startswith(hrp):
        return False
    data = value[len(hrp):]
    return len(data) in BECH32_DATA_LENGTHS and set(data) <= BECH32_CHARSET


def check_value(kind: ValueKind, value: Any, prefix: str = ACCOUNT_PREFIX) -> Optional[str]:
    """
    Check a single value against a CosmWasm value type.

    Args:
        kind: Expected value type
        value: JSON value to check
        prefix: Bech32 account prefix of the network

    Returns:
        A description of the problem, or None if the value is valid
    """
    match kind:
        case ValueKind.ADDR | ValueKind.VALOPER:
            expected_prefix = prefix if kind is ValueKind.ADDR else VALOPER_PREFIX
            if not isinstance(value, str) or not _is_bech32(value, expected_prefix):
                return f"expected a '{expected_prefix}' address, got {value!r}"
        case ValueKind.UINT128 | ValueKind.UINT64 | ValueKind.TIMESTAMP:
            limit = UINT128_MAX if kind is ValueKind.UINT128 else UINT64_MAX
            if not isinstance(value, str) or not _UINT_STRING.match(value):
                return f"expected {kind.value} as a decimal string, got {value!r}"
            if int(value) > limit:
                return f"{kind.value} out of range: {value}"
        case ValueKind.DECIMAL:
            if not isinstance(value, str) or not _DECIMAL_STRING.match(value):
                return f"expected Decimal as a string with at most 18 fractional digits, got {value!r}"
            if Decimal(value).scaleb(DECIMAL_FRACTIONAL_DIGITS) > UINT128_MAX:
                return f"Decimal out of range: {value}"
        case ValueKind.BINARY:
            if not isinstance(value, str):
                return f"expected Binary as a base64 string, got {value!r}"
            try:
                base64.b64decode(value, validate=True)
            except binascii.Error:
                return f"expected Binary as a base64 string, got {value!r}"
        case ValueKind.STRING:
            if not isinstance(value, str):
                return f"expected a string, got {value!r}"
        case ValueKind.BOOL:
            if not isinstance(value, bool):
                return f"expected a boolean, got {value!r}"
        case ValueKind.U8 | ValueKind.U32 | ValueKind.U64:
            # bool is an int subclass but serializes as true/false
            if not isinstance(value, int) or isinstance(value, bool):
                return f"expected {kind.value} as an integer, got {value!r}"
            if not 0 <= value <= _INT_LIMITS[kind]:
                return f"{kind.value} out of range: {value}"
    return None


@dataclass(frozen=True)
class ListOf:
    """A JSON array whose items all have the same type."""

    item: "FieldType"


@dataclass(frozen=True)
class Struct:
    """A JSON object with required and optional fields. Unknown fields are rejected."""

    required: Dict[str, "FieldType"] = field(default_factory=dict)
    optional: Dict[str, "FieldType"] = field(default_factory=dict)


FieldType = Union[ValueKind, ListOf, Struct]


def _check(field_type: FieldType, value: Any, path: str, prefix: str, problems: List[str]) -> None:
    if isinstance(field_type, ValueKind):
        problem = check_value(field_type, value, prefix)
        if problem is not None:
            problems.append(f"{path}: {problem}")
    elif isinstance(field_type, ListOf):
        if not isinstance(value, list):
            problems.append(f"{path}: expected a list, got {value!r}")
            return
        for index, item in enumerate(value):
            _check(field_type.item, item, f"{path}[{index}]", prefix, problems)
    else:
        if not isinstance(value, dict):
            problems.append(f"{path}: expected an object, got {value!r}")
            return
        for name, sub_type in field_type.required.items():
            if name not in value:
                problems.append(f"{path}.{name}: required field missing")
            else:
                _check(sub_type, value[name], f"{path}.{name}", prefix, problems)
        for name, sub_type in field_type.optional.items():
            # Option<T> fields may be omitted or null
            if value.get(name) is not None:
                _check(sub_type, value[name], f"{path}.{name}", prefix, problems)
        for name in value:
            if name not in field_type.required and name not in field_type.optional:
                problems.append(f"{path}.{name}: unknown field")


@dataclass(frozen=True)
class ContractSchema:
    """Instantiate message and execute variants of one contract."""

    name: str
    instantiate: Struct
    execute: Dict[str, Struct]


class MessageCatalog:
    """Validates messages against a set of contract schemas."""

    def __init__(self, schemas: List[ContractSchema], prefix: str = ACCOUNT_PREFIX):
        self._schemas = {schema.name: schema for schema in schemas}
        self.prefix = prefix

    def __contains__(self, name: object) -> bool:
        return name in self._schemas

    def schema(self, name: str) -> ContractSchema:
        return self._schemas[name]

    def instantiate_problems(self, name: str, message: Dict[str, Any]) -> List[str]:
        problems: List[str] = []
        _check(self.schema(name).instantiate, message, "instantiate", self.prefix, problems)
        return problems

    def execute_problems(self, name: str, message: Dict[str, Any]) -> List[str]:
        # Execute messages are externally tagged enums: {"variant": {...}}
        if not isinstance(message, dict) or len(message) != 1:
            return [f"execute: expected exactly one variant, got {message!r}"]

        variant, body = next(iter(message.items()))
        variants = self.schema(name).execute
        if variant not in variants:
            return [f"execute: unknown variant '{variant}'"]

        problems: List[str] = []
        _check(variants[variant], body, variant, self.prefix, problems)
        return problems

    def validate_instantiate(self, name: str, message: Dict[str, Any]) -> None:
        """
        Check an instantiate message.

        Contracts without a schema in the catalog are not checked.

        Raises:
            InvalidMessageError: If the message violates the schema
        """
        if name not in self._schemas:
            return
        problems = self.instantiate_problems(name, message)
        if problems:
            raise InvalidMessageError(name, "instantiate", problems)

    def validate_execute(self, name: str, message: Dict[str, Any]) -> None:
        """
        Check an execute message.

        Contracts without a schema in the catalog are not checked.

        Raises:
            InvalidMessageError: If the message violates the schema
        """
        if name not in self._schemas:
            return
        problems = self.execute_problems(name, message)
        if problems:
            raise InvalidMessageError(name, "execute", problems)


def encode_uint128(value: int) -> str:
    """Encode an integer as a Uint128 string."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Uint128 requires an int, got {type(value).__name__}")
    if not 0 <= value <= UINT128_MAX:
        raise ValueError(f"Uint128 out of range: {value}")
    return str(value)


def encode_decimal(value: Union[Decimal, int, str]) -> str:
    """
    Encode a fixed-point amount as a CosmWasm Decimal string.

    Floats are refused; pass a string or decimal.Decimal to keep every digit.
    """
    if isinstance(value, (float, bool)):
        raise TypeError(f"Decimal requires str, int or decimal.Decimal, got {type(value).__name__}")
    try:
        amount = Decimal(value)
    except InvalidOperation as e:
        raise ValueError(f"Invalid decimal value: {value!r}") from e

    if not amount.is_finite() or amount < 0:
        raise ValueError(f"Decimal must be finite and non-negative: {value!r}")
    if amount.normalize().as_tuple().exponent < -DECIMAL_FRACTIONAL_DIGITS:
        raise ValueError(f"Decimal has more than 18 fractional digits: {value!r}")

    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if Decimal(text).scaleb(DECIMAL_FRACTIONAL_DIGITS) > UINT128_MAX:
        raise ValueError(f"Decimal out of range: {value!r}")
    return text


def encode_binary(value: Union[bytes, Dict[str, Any]]) -> str:
    """Encode bytes, or a JSON message for a hook, as a Binary string."""
    if isinstance(value, dict):
        value = json.dumps(value, separators=(",", ":")).encode()
    return base64.b64encode(value).decode()


def encode_timestamp(moment: datetime) -> str:
    """
    Encode a datetime as a Timestamp string (nanoseconds since the epoch).

    Naive datetimes are taken to be UTC.
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    delta = moment - datetime(1970, 1, 1, tzinfo=timezone.utc)
    nanos = (delta.days * 86_400 + delta.seconds) * 10**9 + delta.microseconds * 1_000
    if nanos < 0:
        raise ValueError(f"Timestamp before the epoch: {moment}")
    return str(nanos)


_CW20_COIN = Struct(required={"address": ValueKind.ADDR, "amount": ValueKind.UINT128})

_STAKING_CONFIG_REQUEST = Struct(
    optional={
        "active": ValueKind.BOOL,
        "min_deposit": ValueKind.UINT128,
        "max_deposit": ValueKind.UINT128,
        "cw20_token_contract": ValueKind.ADDR,
        "protocol_fee_contract": ValueKind.ADDR,
        "protocol_reward_fee": ValueKind.DECIMAL,
        "protocol_withdraw_fee": ValueKind.DECIMAL,
        "protocol_deposit_fee": ValueKind.DECIMAL,
        "airdrop_withdrawal_contract": ValueKind.ADDR,
        "airdrop_registry_contract": ValueKind.ADDR,
        "unbonding_period": ValueKind.U64,
        "undelegation_cooldown": ValueKind.U64,
    }
)

STAKING_SCHEMA = ContractSchema(
    name=STAKING,
    instantiate=Struct(
        required={
            "min_deposit": ValueKind.UINT128,
            "max_deposit": ValueKind.UINT128,
            "reward_contract": ValueKind.ADDR,
            "airdrops_registry_contract": ValueKind.ADDR,
            "airdrop_withdrawal_contract": ValueKind.ADDR,
            "protocol_fee_contract": ValueKind.ADDR,
            "protocol_reward_fee": ValueKind.DECIMAL,
            "protocol_deposit_fee": ValueKind.DECIMAL,
            "protocol_withdraw_fee": ValueKind.DECIMAL,
            "unbonding_period": ValueKind.U64,
            "undelegation_cooldown": ValueKind.U64,
        }
    ),
    execute={
        "add_validator": Struct(required={"val_addr": ValueKind.VALOPER}),
        "remove_validator": Struct(
            required={"val_addr": ValueKind.VALOPER, "redel_addr": ValueKind.VALOPER}
        ),
        "rebalance_pool": Struct(
            required={
                "amount": ValueKind.UINT128,
                "val_addr": ValueKind.VALOPER,
                "redel_addr": ValueKind.VALOPER,
            }
        ),
        "deposit": Struct(),
        "redeem_rewards": Struct(),
        "swap": Struct(),
        "undelegate": Struct(),
        "reconcile_funds": Struct(),
        "withdraw_funds_to_wallet": Struct(required={"batch_id": ValueKind.U64}),
        "update_config": Struct(required={"config_request": _STAKING_CONFIG_REQUEST}),
    },
)

REWARD_SCHEMA = ContractSchema(
    name=REWARD,
    instantiate=Struct(
        required={"reward_denom": ValueKind.STRING, "staking_contract": ValueKind.ADDR}
    ),
    execute={
        "swap": Struct(),
        "transfer": Struct(required={"amount": ValueKind.UINT128}),
        "update_config": Struct(optional={"staking_contract": ValueKind.ADDR}),
    },
)

AIRDROPS_REGISTRY_SCHEMA = ContractSchema(
    name=AIRDROPS_REGISTRY,
    instantiate=Struct(),
    execute={
        "update_airdrop_registry": Struct(
            required={
                "airdrop_token": ValueKind.STRING,
                "airdrop_contract": ValueKind.ADDR,
                "cw20_contract": ValueKind.ADDR,
            }
        ),
        "set_manager": Struct(required={"manager": ValueKind.ADDR}),
        "accept_manager": Struct(),
    },
)

CW20_SCHEMA = ContractSchema(
    name=CW20_TOKEN,
    instantiate=Struct(
        required={
            "name": ValueKind.STRING,
            "symbol": ValueKind.STRING,
            "decimals": ValueKind.U8,
            "initial_balances": ListOf(_CW20_COIN),
        },
        optional={
            "mint": Struct(required={"minter": ValueKind.ADDR}, optional={"cap": ValueKind.UINT128}),
        },
    ),
    execute={
        "transfer": Struct(required={"recipient": ValueKind.ADDR, "amount": ValueKind.UINT128}),
        "burn": Struct(required={"amount": ValueKind.UINT128}),
        "mint": Struct(required={"recipient": ValueKind.ADDR, "amount": ValueKind.UINT128}),
        "send": Struct(
            required={
                "contract": ValueKind.ADDR,
                "amount": ValueKind.UINT128,
                "msg": ValueKind.BINARY,
            }
        ),
    },
)


def default_catalog(prefix: str = ACCOUNT_PREFIX) -> MessageCatalog:
    """Catalog of the four contracts in the standard deployment."""
    return MessageCatalog(
        [STAKING_SCHEMA, REWARD_SCHEMA, AIRDROPS_REGISTRY_SCHEMA, CW20_SCHEMA],
        prefix=prefix,
    )
