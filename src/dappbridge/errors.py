"""
Error taxonomy for the chain interaction layer.

Every failure raised by the transport, the catalog, or the ABI codec is a
``BridgeError``.  Each subclass carries an ``exit_code`` so the CLI can
terminate with a distinguishable status.
"""

from __future__ import annotations

from typing import Any, Optional


class BridgeError(RuntimeError):
    exit_code: int = 1


class TransportFailure(BridgeError):
    """The HTTP round trip to the node could not complete."""

    exit_code = 2

    def __init__(self, message: str, method: Optional[str] = None) -> None:
        super().__init__(message)
        self.method = method


class InvalidResponse(TransportFailure):
    """The node answered, but not with a well-formed, correlated envelope."""

    exit_code = 3


class RpcError(BridgeError):
    """The node returned a JSON-RPC error envelope."""

    exit_code = 4

    def __init__(
        self,
        code: int,
        message: str,
        method: str,
        data: Any = None,
    ) -> None:
        super().__init__(f"{method} failed: [{code}] {message}")
        self.code = code
        self.message = message
        self.method = method
        self.data = data


class UnknownFunction(BridgeError):
    exit_code = 5

    def __init__(self, function_name: str, available: tuple[str, ...] = ()) -> None:
        detail = f" (catalog has: {', '.join(available)})" if available else ""
        super().__init__(f"Function {function_name} not found in catalog{detail}")
        self.function_name = function_name


class EncodeError(BridgeError):
    exit_code = 6


class DecodeError(BridgeError):
    exit_code = 7


class CatalogError(BridgeError):
    """A catalog signature could not be parsed."""

    exit_code = 8


__all__ = [
    "BridgeError",
    "CatalogError",
    "DecodeError",
    "EncodeError",
    "InvalidResponse",
    "RpcError",
    "TransportFailure",
    "UnknownFunction",
]
