"""
JSON-RPC 2.0 client for Ethereum-compatible nodes.

Uses httpx for HTTP.  Each request is a single POST on a short-lived client;
nothing is pooled or retried.  Results are returned exactly as the node sent
them (quantities stay hex strings).
"""

from __future__ import annotations

import itertools
import logging
import threading
from collections.abc import Mapping, Sequence
from typing import Any, Optional

import httpx

from ..errors import InvalidResponse, RpcError, TransportFailure
from ..utils import BlockIdentifier, block_identifier
from ..wire.schemas import SchemaValidationError, validate_response
from ..wire.values import JsonValue, tx_to_wire

logger = logging.getLogger(__name__)


class RpcTransport:
    """
    JSON-RPC 2.0 transport bound to one endpoint.

    Request ids start at 1 and increase by one per request issued through
    this instance, including requests that later fail.

    Args:
        endpoint: Node URL (e.g., "http://127.0.0.1:8545")
        timeout: Per-request HTTP timeout in seconds (None disables it)
        transport: Optional httpx transport (e.g. httpx.MockTransport)
    """

    def __init__(
        self,
        endpoint: str,
        *,
        timeout: Optional[float] = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._endpoint = endpoint
        self._timeout = timeout
        self._transport = transport
        self._ids = itertools.count(1)
        self._id_lock = threading.Lock()

    @property
    def endpoint(self) -> str:
        return self._endpoint

    @property
    def timeout(self) -> Optional[float]:
        return self._timeout

    def _next_id(self) -> int:
        with self._id_lock:
            return next(self._ids)

    def send(self, method: str, params: Sequence[JsonValue] = ()) -> Any:
        """
        Make a JSON-RPC call.

        Args:
            method: RPC method name (e.g., "eth_call")
            params: Positional parameters

        Returns:
            The ``result`` field, unmodified

        Raises:
            TransportFailure: If the HTTP exchange fails
            InvalidResponse: If the reply is not a matching JSON-RPC envelope
            RpcError: If the node returns an error envelope
        """
        request_id = self._next_id()
        payload = {
            "jsonrpc": "2.0",
            "method": method,
            "params": list(params),
            "id": request_id,
        }
        logger.info("-> %s id=%d", method, request_id)
        logger.debug("   params=%s", payload["params"])

        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                response = client.post(self._endpoint, json=payload)
        except httpx.HTTPError as exc:
            raise TransportFailure(f"Failed to call {method}: {exc}", method=method) from exc

        # Gateways may wrap a JSON-RPC error envelope in a 4xx/5xx status.
        try:
            data = response.json()
        except ValueError as exc:
            if response.is_error:
                raise self._status_failure(method, response) from exc
            raise TransportFailure(
                f"Failed to call {method}: response is not JSON", method=method
            ) from exc

        try:
            validate_response(data)
        except SchemaValidationError as exc:
            if response.is_error:
                raise self._status_failure(method, response) from exc
            raise InvalidResponse(
                f"Malformed response to {method}: {'; '.join(exc.errors)}", method=method
            ) from exc

        # Parse and invalid-request errors are answered with a null id.
        if "error" in data and data["id"] in (request_id, None):
            error = data["error"]
            logger.info("<- %s id=%d error %s", method, request_id, error["code"])
            raise RpcError(
                code=error["code"],
                message=error["message"],
                method=method,
                data=error.get("data"),
            )

        if response.is_error:
            raise self._status_failure(method, response)

        if data["id"] != request_id:
            raise InvalidResponse(
                f"Response id {data['id']!r} does not match request id {request_id} ({method})",
                method=method,
            )

        return data["result"]

    @staticmethod
    def _status_failure(method: str, response: httpx.Response) -> TransportFailure:
        return TransportFailure(
            f"Failed to call {method}: HTTP {response.status_code} {response.reason_phrase}",
            method=method,
        )

    # ------------------------------------------------------------------
    # Network
    # ------------------------------------------------------------------

    def chain_id(self) -> str:
        return self.send("eth_chainId")

    def network_version(self) -> str:
        return self.send("net_version")

    def gas_price(self) -> str:
        return self.send("eth_gasPrice")

    def block_number(self) -> str:
        return self.send("eth_blockNumber")

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def get_balance(self, address: str, block: BlockIdentifier = "latest") -> str:
        return self.send("eth_getBalance", [address, block_identifier(block)])

    def get_transaction_count(self, address: str, block: BlockIdentifier = "latest") -> str:
        return self.send("eth_getTransactionCount", [address, block_identifier(block)])

    def get_code(self, address: str, block: BlockIdentifier = "latest") -> str:
        return self.send("eth_getCode", [address, block_identifier(block)])

    # ------------------------------------------------------------------
    # Blocks
    # ------------------------------------------------------------------

    def get_block(
        self, block: BlockIdentifier = "latest", full_transactions: bool = False
    ) -> Optional[dict[str, Any]]:
        return self.send("eth_getBlockByNumber", [block_identifier(block), full_transactions])

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    def send_transaction(self, tx: Mapping[str, Any]) -> str:
        return self.send("eth_sendTransaction", [tx_to_wire(tx)])

    def send_raw_transaction(self, signed_tx: str) -> str:
        return self.send("eth_sendRawTransaction", [signed_tx])

    def get_transaction(self, tx_hash: str) -> Optional[dict[str, Any]]:
        return self.send("eth_getTransactionByHash", [tx_hash])

    def get_transaction_receipt(self, tx_hash: str) -> Optional[dict[str, Any]]:
        return self.send("eth_getTransactionReceipt", [tx_hash])

    # ------------------------------------------------------------------
    # Calls & storage
    # ------------------------------------------------------------------

    def call(self, tx: Mapping[str, Any], block: BlockIdentifier = "latest") -> str:
        return self.send("eth_call", [tx_to_wire(tx), block_identifier(block)])

    def estimate_gas(self, tx: Mapping[str, Any]) -> str:
        return self.send("eth_estimateGas", [tx_to_wire(tx)])

    def get_storage_at(
        self, address: str, position: str, block: BlockIdentifier = "latest"
    ) -> str:
        return self.send("eth_getStorageAt", [address, position, block_identifier(block)])

    # ------------------------------------------------------------------
    # Node
    # ------------------------------------------------------------------

    def accounts(self) -> list[str]:
        return self.send("eth_accounts")

    def coinbase(self) -> str:
        return self.send("eth_coinbase")

    def mining(self) -> bool:
        return self.send("eth_mining")

    def hashrate(self) -> str:
        return self.send("eth_hashrate")

    # ------------------------------------------------------------------
    # Development node (Hardhat / Anvil)
    # ------------------------------------------------------------------

    def impersonate_account(self, address: str) -> None:
        self.send("hardhat_impersonateAccount", [address])

    def stop_impersonating_account(self, address: str) -> None:
        self.send("hardhat_stopImpersonatingAccount", [address])

    def set_balance(self, address: str, balance: str) -> None:
        self.send("hardhat_setBalance", [address, balance])

    def set_code(self, address: str, code: str) -> None:
        self.send("hardhat_setCode", [address, code])

    def set_storage_at(self, address: str, position: str, value: str) -> None:
        self.send("hardhat_setStorageAt", [address, position, value])

    def mine(self, blocks: int = 1) -> None:
        if blocks < 1:
            raise ValueError(f"Block count must be positive: {blocks}")
        self.send("hardhat_mine", [str(blocks)])

    def mine_up_to(self, block_number: int) -> int:
        """Mine until the head reaches ``block_number``; returns blocks mined."""
        current = int(self.block_number(), 16)
        if block_number <= current:
            raise ValueError(
                f"Target block {block_number} is not above current block {current}"
            )
        blocks = block_number - current
        self.mine(blocks)
        return blocks

    def increase_time(self, seconds: int) -> None:
        self.send("evm_increaseTime", [seconds])
        self.mine(1)

    def set_next_block_timestamp(self, timestamp: int) -> None:
        self.send("evm_setNextBlockTimestamp", [timestamp])

    def snapshot(self) -> str:
        return self.send("evm_snapshot")

    def revert(self, snapshot_id: str) -> bool:
        return self.send("evm_revert", [snapshot_id])
