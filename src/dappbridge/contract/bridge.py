"""
Contract Bridge - read-only contract calls through a signature catalog.

``call`` resolves the function in the catalog, encodes the arguments, runs
``eth_call`` against "latest" and decodes the returned bytes.  The bridge
keeps no state between calls apart from the transport it wraps.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Optional

from ..errors import BridgeError
from ..transport.rpc import RpcTransport
from .catalog import Catalog, CatalogLike, as_catalog
from .codec import decode_result, encode_call

logger = logging.getLogger(__name__)

ERC20_BALANCE_CATALOG = Catalog.parse(
    ["function balanceOf(address owner) view returns (uint256)"]
)

ERC20_METADATA_CATALOG = Catalog.parse(
    [
        "function name() view returns (string)",
        "function symbol() view returns (string)",
        "function decimals() view returns (uint8)",
        "function totalSupply() view returns (uint256)",
    ]
)

METADATA_FIELDS = ("name", "symbol", "decimals", "totalSupply")


@dataclass(frozen=True)
class TokenMetadata:
    """ERC-20 metadata.  ``errors`` maps field name to failure text."""

    name: Optional[str]
    symbol: Optional[str]
    decimals: Optional[int]
    total_supply: Optional[int]
    errors: dict[str, str]

    @property
    def complete(self) -> bool:
        return not self.errors

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "name": self.name,
            "symbol": self.symbol,
            "decimals": self.decimals,
            "totalSupply": self.total_supply,
        }
        if self.errors:
            result["errors"] = dict(self.errors)
        return result


class ContractBridge:
    """
    Encode, call and decode contract functions over an RpcTransport.

    Args:
        transport: The JSON-RPC transport used for ``eth_call``
    """

    def __init__(self, transport: RpcTransport) -> None:
        self._transport = transport

    def encode_call(
        self, catalog: CatalogLike, function_name: str, params: Sequence[Any] = ()
    ) -> str:
        """
        ABI-encode a function call without touching the network.

        Returns:
            0x-prefixed hex calldata
        """
        entry = as_catalog(catalog).lookup(function_name, len(params))
        return encode_call(entry, params)

    def decode_result(
        self, catalog: CatalogLike, function_name: str, data: str | bytes
    ) -> tuple[Any, ...]:
        """ABI-decode return data for a function without touching the network."""
        entry = as_catalog(catalog).lookup(function_name)
        return decode_result(entry, data)

    def call(
        self,
        address: str,
        catalog: CatalogLike,
        function_name: str,
        params: Sequence[Any] = (),
    ) -> tuple[Any, ...]:
        """
        Call a read-only contract function (eth_call at "latest").

        Args:
            address: 0x-prefixed contract address
            catalog: Interface catalog (signatures or a parsed Catalog)
            function_name: Function name or full signature
            params: Positional arguments

        Returns:
            One decoded value per declared return type

        Raises:
            UnknownFunction: Before any request, if the function is not in the catalog
            EncodeError: If the arguments do not fit the parameter types
            RpcError / TransportFailure: From the node round trip
            DecodeError: If the returned data does not match the return types
        """
        entry = as_catalog(catalog).lookup(function_name, len(params))
        data = encode_call(entry, params)
        result = self._transport.call({"to": address, "data": data}, "latest")
        return decode_result(entry, result)

    def token_balance(self, token_address: str, account: str) -> int:
        """Raw ERC-20 balance of ``account`` (no decimal scaling)."""
        (balance,) = self.call(token_address, ERC20_BALANCE_CATALOG, "balanceOf", [account])
        return balance

    def token_metadata(self, token_address: str) -> TokenMetadata:
        """
        Read name, symbol, decimals and totalSupply as four concurrent calls.

        Any failing field fails the whole operation; the first failure in
        field order is raised.
        """
        results = fetch_metadata_fields(self, token_address)
        for field in METADATA_FIELDS:
            error = results[field][1]
            if error is not None:
                raise error
        return TokenMetadata(
            name=results["name"][0],
            symbol=results["symbol"][0],
            decimals=results["decimals"][0],
            total_supply=results["totalSupply"][0],
            errors={},
        )


def fetch_metadata_fields(
    bridge: ContractBridge, token_address: str
) -> dict[str, tuple[Any, Optional[BridgeError]]]:
    """
    Run the four metadata calls concurrently.

    Returns:
        Mapping of field name to (value, None) or (None, exception)
    """

    def fetch(field: str) -> tuple[Any, Optional[BridgeError]]:
        try:
            (value,) = bridge.call(token_address, ERC20_METADATA_CATALOG, field)
        except BridgeError as exc:
            return None, exc
        return value, None

    logger.debug("fetching token metadata for %s", token_address)
    with ThreadPoolExecutor(max_workers=len(METADATA_FIELDS)) as pool:
        outcomes = list(pool.map(fetch, METADATA_FIELDS))
    return dict(zip(METADATA_FIELDS, outcomes))
