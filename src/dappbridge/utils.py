from __future__ import annotations

from typing import Union

BLOCK_TAGS = frozenset({"latest", "earliest", "pending", "safe", "finalized"})

BlockIdentifier = Union[int, str]


def to_quantity(value: int) -> str:
    if isinstance(value, bool) or not isinstance(value, int):
        raise TypeError(f"Quantity must be an int, got {type(value).__name__}")
    if value < 0:
        raise ValueError(f"Quantity must be non-negative: {value}")
    return hex(value)


def from_quantity(value: str) -> int:
    if not isinstance(value, str) or not value.startswith(("0x", "0X")):
        raise ValueError(f"Not a hex quantity: {value!r}")
    return int(value, 16)


def is_quantity(value: object) -> bool:
    if not isinstance(value, str) or not value.startswith(("0x", "0X")):
        return False
    digits = value[2:]
    return bool(digits) and all(c in "0123456789abcdefABCDEF" for c in digits)


def block_identifier(block: BlockIdentifier) -> str:
    """Normalise a block number or tag to its wire form.

    Ints become quantities, decimal strings are converted, hex quantities and
    named tags pass through unchanged.
    """
    if isinstance(block, int) and not isinstance(block, bool):
        return to_quantity(block)
    if isinstance(block, str):
        if block in BLOCK_TAGS or is_quantity(block):
            return block
        if block.isdigit():
            return to_quantity(int(block))
    raise ValueError(f"Invalid block number or tag: {block!r}")


def hex_to_bytes(value: str) -> bytes:
    raw = value[2:] if value.startswith(("0x", "0X")) else value
    return bytes.fromhex(raw)


def bytes_to_hex(data: bytes) -> str:
    return "0x" + data.hex()
