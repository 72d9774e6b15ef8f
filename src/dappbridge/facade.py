"""
Chain Facade - named operations over the transport and the contract bridge.

This is the surface consumed by the CLI (and any UI or tool-protocol
server).  The facade owns one RpcTransport and is otherwise stateless.
Queries made of several independent requests fan out on a thread pool;
result order never depends on completion order.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Optional

import httpx

from .config import BridgeConfig, load_config
from .contract.bridge import (
    ContractBridge,
    TokenMetadata,
    fetch_metadata_fields,
)
from .contract.catalog import CatalogLike
from .transport.rpc import RpcTransport
from .utils import BlockIdentifier, to_quantity

logger = logging.getLogger(__name__)

DEFAULT_DECIMALS = 18


@dataclass(frozen=True)
class NetworkInfo:
    chain_id: str
    block_number: str
    gas_price: str

    def to_dict(self) -> dict[str, str]:
        return {
            "chainId": self.chain_id,
            "blockNumber": self.block_number,
            "gasPrice": self.gas_price,
        }


@dataclass(frozen=True)
class AccountInfo:
    balance: str
    nonce: str
    code: str

    @property
    def is_contract(self) -> bool:
        return self.code not in ("", "0x", "0x0")

    def to_dict(self) -> dict[str, str]:
        return {"balance": self.balance, "nonce": self.nonce, "code": self.code}


@dataclass(frozen=True)
class TransactionDetails:
    transaction: Optional[dict[str, Any]]
    receipt: Optional[dict[str, Any]]

    def to_dict(self) -> dict[str, Any]:
        return {"transaction": self.transaction, "receipt": self.receipt}


def _gather(*calls: Callable[[], Any]) -> list[Any]:
    """Run independent calls concurrently; results keep argument order."""
    with ThreadPoolExecutor(max_workers=len(calls)) as pool:
        futures = [pool.submit(call) for call in calls]
        return [future.result() for future in futures]


class ChainFacade:
    """
    Account, network, token and transaction queries plus dev-node utilities.

    Args:
        rpc_url: Node URL
        timeout: Per-request HTTP timeout in seconds (None disables it)
        transport: Optional httpx transport, mainly for tests
    """

    def __init__(
        self,
        rpc_url: str,
        *,
        timeout: Optional[float] = 30.0,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self.rpc = RpcTransport(rpc_url, timeout=timeout, transport=transport)
        self.contracts = ContractBridge(self.rpc)

    @classmethod
    def from_config(cls, config: Optional[BridgeConfig] = None) -> "ChainFacade":
        config = config or load_config()
        return cls(config.rpc_url, timeout=config.timeout)

    # ============ Chain queries ============

    def get_network_info(self) -> NetworkInfo:
        chain_id, block_number, gas_price = _gather(
            self.rpc.chain_id, self.rpc.block_number, self.rpc.gas_price
        )
        return NetworkInfo(chain_id=chain_id, block_number=block_number, gas_price=gas_price)

    def get_account_info(self, address: str) -> AccountInfo:
        balance, nonce, code = _gather(
            lambda: self.rpc.get_balance(address),
            lambda: self.rpc.get_transaction_count(address),
            lambda: self.rpc.get_code(address),
        )
        return AccountInfo(balance=balance, nonce=nonce, code=code)

    def get_transaction_details(self, tx_hash: str) -> TransactionDetails:
        transaction, receipt = _gather(
            lambda: self.rpc.get_transaction(tx_hash),
            lambda: self.rpc.get_transaction_receipt(tx_hash),
        )
        return TransactionDetails(transaction=transaction, receipt=receipt)

    def get_block_info(
        self, block: BlockIdentifier = "latest", full_transactions: bool = False
    ) -> Optional[dict[str, Any]]:
        return self.rpc.get_block(block, full_transactions)

    def get_accounts(self) -> list[str]:
        return self.rpc.accounts()

    def get_contract_code(self, address: str, block: BlockIdentifier = "latest") -> str:
        return self.rpc.get_code(address, block)

    def get_storage_value(
        self, address: str, position: str, block: BlockIdentifier = "latest"
    ) -> str:
        return self.rpc.get_storage_at(address, position, block)

    def estimate_gas(self, tx: Mapping[str, Any]) -> str:
        return self.rpc.estimate_gas(tx)

    # ============ Transactions ============

    def send_transaction(self, tx: Mapping[str, Any]) -> str:
        """Submit an unsigned transaction for a node-managed account."""
        return self.rpc.send_transaction(tx)

    def send_raw_transaction(self, signed_tx: str) -> str:
        return self.rpc.send_raw_transaction(signed_tx)

    def wait_for_receipt(
        self,
        tx_hash: str,
        timeout: float = 120,
        poll_interval: float = 2.0,
    ) -> dict[str, Any]:
        """
        Wait for a transaction receipt.

        Args:
            tx_hash: Transaction hash
            timeout: Maximum wait time in seconds
            poll_interval: Polling interval in seconds

        Returns:
            Transaction receipt dict

        Raises:
            TimeoutError: If receipt not found within timeout
        """
        start = time.monotonic()
        while True:
            receipt = self.rpc.get_transaction_receipt(tx_hash)
            if receipt is not None:
                return receipt
            if time.monotonic() - start >= timeout:
                break
            time.sleep(poll_interval)

        raise TimeoutError(f"Transaction {tx_hash} not confirmed within {timeout}s")

    # ============ Contracts ============

    def call_function(
        self,
        address: str,
        catalog: CatalogLike,
        function_name: str,
        params: Sequence[Any] = (),
    ) -> tuple[Any, ...]:
        return self.contracts.call(address, catalog, function_name, params)

    def encode_call(
        self, catalog: CatalogLike, function_name: str, params: Sequence[Any] = ()
    ) -> str:
        return self.contracts.encode_call(catalog, function_name, params)

    def decode_result(
        self, catalog: CatalogLike, function_name: str, data: str | bytes
    ) -> tuple[Any, ...]:
        return self.contracts.decode_result(catalog, function_name, data)

    def get_token_balance(self, token_address: str, account: str) -> int:
        return self.contracts.token_balance(token_address, account)

    def get_token_metadata(self, token_address: str) -> TokenMetadata:
        """
        Read ERC-20 metadata, tolerating per-field failures.

        Each field is fetched independently.  A field whose call fails is
        reported as None (``decimals`` falls back to 18) and the failure text
        is kept in ``TokenMetadata.errors``.  Use
        ``ContractBridge.token_metadata`` for the all-or-nothing variant.
        """
        results = fetch_metadata_fields(self.contracts, token_address)
        errors = {
            field: str(error) for field, (_, error) in results.items() if error is not None
        }
        for field, message in errors.items():
            logger.warning("token %s: %s unavailable (%s)", token_address, field, message)

        decimals = results["decimals"][0]
        return TokenMetadata(
            name=results["name"][0],
            symbol=results["symbol"][0],
            decimals=DEFAULT_DECIMALS if decimals is None else decimals,
            total_supply=results["totalSupply"][0],
            errors=errors,
        )

    # ============ Development node utilities ============

    def impersonate(self, address: str) -> None:
        self.rpc.impersonate_account(address)

    def stop_impersonating(self, address: str) -> None:
        self.rpc.stop_impersonating_account(address)

    def set_balance(self, address: str, balance: int | str) -> None:
        """Force an account balance; ints are converted to a hex quantity."""
        if isinstance(balance, int):
            balance = to_quantity(balance)
        self.rpc.set_balance(address, balance)

    def set_code(self, address: str, code: str) -> None:
        self.rpc.set_code(address, code)

    def set_storage_at(self, address: str, position: str, value: str) -> None:
        self.rpc.set_storage_at(address, position, value)

    def mine_blocks(self, count: int = 1) -> None:
        self.rpc.mine(count)

    def mine_up_to(self, block_number: int) -> int:
        return self.rpc.mine_up_to(block_number)

    def increase_time(self, seconds: int) -> None:
        self.rpc.increase_time(seconds)

    def set_next_block_timestamp(self, timestamp: int) -> None:
        self.rpc.set_next_block_timestamp(timestamp)

    def create_snapshot(self) -> str:
        return self.rpc.snapshot()

    def revert_snapshot(self, snapshot_id: str) -> bool:
        return self.rpc.revert(snapshot_id)
