"""
JSON value handling for the wire.

Request params and results are plain JSON.  Numeric chain values stay as hex
quantity strings; Python ints only appear where the protocol expects a native
JSON number (e.g. evm_increaseTime) or in caller-supplied transaction fields,
which ``tx_to_wire`` converts.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Union

from ..utils import bytes_to_hex, to_quantity

JsonValue = Union[None, bool, int, float, str, list["JsonValue"], dict[str, "JsonValue"]]

# Transaction object fields carried as quantities (eth_call, eth_estimateGas,
# eth_sendTransaction).
QUANTITY_FIELDS = frozenset(
    {
        "gas",
        "gasPrice",
        "maxFeePerGas",
        "maxPriorityFeePerGas",
        "value",
        "nonce",
        "chainId",
        "type",
    }
)


def to_json_value(value: Any) -> JsonValue:
    """Convert decoded ABI values into JSON-safe values.

    bytes become 0x-hex, tuples become lists; everything else must already
    be a JSON type.
    """
    if value is None or isinstance(value, (bool, int, float, str)):
        return value
    if isinstance(value, (bytes, bytearray)):
        return bytes_to_hex(bytes(value))
    if isinstance(value, (list, tuple)):
        return [to_json_value(item) for item in value]
    if isinstance(value, Mapping):
        return {str(k): to_json_value(v) for k, v in value.items()}
    raise TypeError(f"Value of type {type(value).__name__} is not JSON-serialisable")


def tx_to_wire(tx: Mapping[str, Any]) -> dict[str, JsonValue]:
    """Normalise a transaction object for the node.

    Int quantity fields are hex-encoded and bytes payloads become 0x-hex.
    Hex strings given by the caller are passed through untouched.
    """
    wire: dict[str, JsonValue] = {}
    for key, value in tx.items():
        if value is None:
            continue
        if key in QUANTITY_FIELDS and isinstance(value, int) and not isinstance(value, bool):
            wire[key] = to_quantity(value)
        elif isinstance(value, (bytes, bytearray)):
            wire[key] = bytes_to_hex(bytes(value))
        else:
            wire[key] = to_json_value(value)
    return wire
