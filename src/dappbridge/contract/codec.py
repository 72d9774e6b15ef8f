"""
ABI codec - call data encoding and return data decoding.

Thin layer over eth-abi.  Arguments may arrive as JSON values (from the CLI
or a tool protocol), so integers given as decimal/hex strings, bytes given
as 0x-hex and tuples given as lists are coerced before encoding.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_abi.grammar import ABIType, TupleType, parse
from eth_utils import to_checksum_address

from ..errors import DecodeError, EncodeError
from ..utils import bytes_to_hex, hex_to_bytes
from .catalog import CatalogEntry


def encode_arguments(entry: CatalogEntry, params: Sequence[Any]) -> bytes:
    """ABI-encode ``params`` for the entry's input types (no selector)."""
    if len(params) != len(entry.inputs):
        raise EncodeError(
            f"{entry.signature} expects {len(entry.inputs)} argument(s), got {len(params)}"
        )
    if not entry.inputs:
        return b""

    types = entry.input_types
    try:
        values = [_coerce(parse(t), value) for t, value in zip(types, params)]
        return encode(types, values)
    except EncodeError:
        raise
    except (EncodingError, TypeError, ValueError, OverflowError) as exc:
        raise EncodeError(f"Cannot encode arguments for {entry.signature}: {exc}") from exc


def encode_call(entry: CatalogEntry, params: Sequence[Any]) -> str:
    """
    Build call data for a function call.

    Returns:
        0x-prefixed hex: 4-byte selector followed by the encoded arguments
    """
    return bytes_to_hex(entry.selector + encode_arguments(entry, params))


def decode_result(entry: CatalogEntry, data: str | bytes) -> tuple[Any, ...]:
    """
    Decode return data against the entry's output types.

    Returns:
        One value per declared output (empty tuple when none are declared)

    Raises:
        DecodeError: If the data is empty, malformed, or does not match
    """
    if isinstance(data, str):
        try:
            raw = hex_to_bytes(data)
        except ValueError as exc:
            raise DecodeError(f"Return data for {entry.signature} is not hex: {data!r}") from exc
    elif isinstance(data, (bytes, bytearray)):
        raw = bytes(data)
    else:
        raise DecodeError(
            f"Return data for {entry.signature} must be hex or bytes, "
            f"got {type(data).__name__}: {data!r}"
        )

    if not entry.outputs:
        return ()
    if not raw:
        raise DecodeError(
            f"Empty return data for {entry.signature}; "
            f"expected ({','.join(entry.output_types)}). "
            "Is there a contract at this address implementing it?"
        )

    types = entry.output_types
    try:
        values = decode(types, raw)
    except (DecodingError, ValueError, OverflowError) as exc:
        raise DecodeError(
            f"Cannot decode return data for {entry.signature} as ({','.join(types)}): {exc}"
        ) from exc
    return tuple(_normalize(parse(t), value) for t, value in zip(types, values))


def _coerce(abi_type: ABIType, value: Any) -> Any:
    if abi_type.is_array:
        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
            raise EncodeError(f"Expected a list for {abi_type.to_type_str()}, got {value!r}")
        return [_coerce(abi_type.item_type, item) for item in value]

    if isinstance(abi_type, TupleType):
        if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
            raise EncodeError(f"Expected a list for {abi_type.to_type_str()}, got {value!r}")
        if len(value) != len(abi_type.components):
            raise EncodeError(
                f"{abi_type.to_type_str()} needs {len(abi_type.components)} values, got {len(value)}"
            )
        return tuple(_coerce(c, item) for c, item in zip(abi_type.components, value))

    base = abi_type.base
    if base in ("uint", "int") and isinstance(value, str):
        text = value.strip()
        try:
            if text.lower().startswith(("0x", "-0x")):
                return int(text, 16)
            return int(text)
        except ValueError:
            raise EncodeError(f"Not an integer for {abi_type.to_type_str()}: {value!r}") from None
    if base == "bytes" and isinstance(value, str):
        try:
            return hex_to_bytes(value)
        except ValueError:
            raise EncodeError(f"Not hex for {abi_type.to_type_str()}: {value!r}") from None
    if base == "bool" and isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in ("true", "false"):
            return lowered == "true"
        raise EncodeError(f"Not a boolean: {value!r}")
    return value


def _normalize(abi_type: ABIType, value: Any) -> Any:
    if abi_type.is_array:
        return tuple(_normalize(abi_type.item_type, item) for item in value)
    if isinstance(abi_type, TupleType):
        return tuple(_normalize(c, item) for c, item in zip(abi_type.components, value))
    if abi_type.base == "address":
        return to_checksum_address(value)
    return value
