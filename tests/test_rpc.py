"""Tests for the JSON-RPC transport."""

from __future__ import annotations

import json
import logging
from concurrent.futures import ThreadPoolExecutor

import httpx
import pytest

from dappbridge.errors import InvalidResponse, RpcError, TransportFailure
from dappbridge.transport.rpc import RpcTransport
from dappbridge.wire.schemas import validate_request

from conftest import ALICE, NODE_URL, FakeNode


class TestRequestIds:
    """Request ids are per-instance, start at 1 and strictly increase."""

    def test_ids_start_at_one_and_increase(self, rpc: RpcTransport, node: FakeNode) -> None:
        node.reply("eth_blockNumber", "0x10")
        for _ in range(5):
            rpc.block_number()
        assert [r["id"] for r in node.requests] == [1, 2, 3, 4, 5]

    def test_ids_distinct_under_concurrency(self, rpc: RpcTransport, node: FakeNode) -> None:
        node.reply("eth_chainId", "0x7a69")
        with ThreadPoolExecutor(max_workers=8) as pool:
            list(pool.map(lambda _: rpc.chain_id(), range(40)))
        ids = [r["id"] for r in node.requests]
        assert len(set(ids)) == 40
        assert sorted(ids) == list(range(1, 41))

    def test_failed_call_consumes_its_id(self, rpc: RpcTransport, node: FakeNode) -> None:
        node.fail("eth_gasPrice", -32000, "boom")
        node.reply("eth_blockNumber", "0x1")
        with pytest.raises(RpcError):
            rpc.gas_price()
        rpc.block_number()
        assert [r["id"] for r in node.requests] == [1, 2]

    def test_instances_do_not_share_counters(self, node: FakeNode) -> None:
        node.reply("eth_chainId", "0x1")
        first = RpcTransport(NODE_URL, transport=httpx.MockTransport(node))
        second = RpcTransport(NODE_URL, transport=httpx.MockTransport(node))
        first.chain_id()
        first.chain_id()
        second.chain_id()
        assert [r["id"] for r in node.requests] == [1, 2, 1]


class TestEnvelope:
    def test_request_envelope_is_valid_json_rpc(self, rpc: RpcTransport, node: FakeNode) -> None:
        node.reply("eth_getBalance", "0x0")
        rpc.get_balance(ALICE)
        request = node.requests[0]
        validate_request(request)
        assert request["jsonrpc"] == "2.0"
        assert request["method"] == "eth_getBalance"

    def test_result_returned_unmodified(self, rpc: RpcTransport, node: FakeNode) -> None:
        # Larger than a float can hold exactly.
        node.reply("eth_getBalance", "0x1bc16d674ec80001")
        assert rpc.get_balance(ALICE) == "0x1bc16d674ec80001"

    def test_null_result_is_returned(self, rpc: RpcTransport, node: FakeNode) -> None:
        node.reply("eth_getTransactionReceipt", None)
        assert rpc.get_transaction_receipt("0x" + "ab" * 32) is None


class TestErrors:
    def test_error_envelope_raises_rpc_error(self, rpc: RpcTransport, node: FakeNode) -> None:
        node.fail("eth_call", -32000, "execution reverted")
        with pytest.raises(RpcError) as excinfo:
            rpc.call({"to": ALICE, "data": "0x"})
        assert excinfo.value.code == -32000
        assert excinfo.value.message == "execution reverted"
        assert excinfo.value.method == "eth_call"
        assert "eth_call" in str(excinfo.value)

    def test_unknown_method_is_rpc_error(self, rpc: RpcTransport, node: FakeNode) -> None:
        with pytest.raises(RpcError) as excinfo:
            rpc.snapshot()
        assert excinfo.value.code == -32601

    def test_connection_refused_is_transport_failure(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        rpc = RpcTransport(NODE_URL, transport=httpx.MockTransport(refuse))
        with pytest.raises(TransportFailure) as excinfo:
            rpc.chain_id()
        assert excinfo.value.method == "eth_chainId"
        assert not isinstance(excinfo.value, InvalidResponse)

    def test_http_error_status_is_transport_failure(self) -> None:
        rpc = RpcTransport(
            NODE_URL,
            transport=httpx.MockTransport(lambda request: httpx.Response(502, text="bad gateway")),
        )
        with pytest.raises(TransportFailure):
            rpc.chain_id()

    def test_error_envelope_on_http_error_status_is_rpc_error(self) -> None:
        def reverted(request: httpx.Request) -> httpx.Response:
            request_id = json.loads(request.content)["id"]
            return httpx.Response(
                500,
                json={
                    "jsonrpc": "2.0",
                    "id": request_id,
                    "error": {"code": -32000, "message": "execution reverted"},
                },
            )

        rpc = RpcTransport(NODE_URL, transport=httpx.MockTransport(reverted))
        with pytest.raises(RpcError) as excinfo:
            rpc.call({"to": ALICE, "data": "0x"})
        assert excinfo.value.code == -32000
        assert excinfo.value.message == "execution reverted"

    def test_result_envelope_on_http_error_status_is_transport_failure(self) -> None:
        rpc = RpcTransport(
            NODE_URL,
            transport=httpx.MockTransport(
                lambda request: httpx.Response(503, json={"jsonrpc": "2.0", "id": 1, "result": "0x1"})
            ),
        )
        with pytest.raises(TransportFailure, match="HTTP 503"):
            rpc.chain_id()

    def test_error_envelope_with_null_id_is_rpc_error(self) -> None:
        body = {"jsonrpc": "2.0", "id": None, "error": {"code": -32700, "message": "Parse error"}}
        rpc = RpcTransport(
            NODE_URL, transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body))
        )
        with pytest.raises(RpcError) as excinfo:
            rpc.chain_id()
        assert excinfo.value.code == -32700

    def test_error_envelope_with_foreign_id_is_invalid(self) -> None:
        body = {"jsonrpc": "2.0", "id": 42, "error": {"code": -32000, "message": "x"}}
        rpc = RpcTransport(
            NODE_URL, transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body))
        )
        with pytest.raises(InvalidResponse):
            rpc.chain_id()

    def test_non_json_body_is_transport_failure(self) -> None:
        rpc = RpcTransport(
            NODE_URL,
            transport=httpx.MockTransport(lambda request: httpx.Response(200, text="<html>")),
        )
        with pytest.raises(TransportFailure):
            rpc.chain_id()

    def test_mismatched_id_is_invalid_response(self) -> None:
        rpc = RpcTransport(
            NODE_URL,
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 99, "result": "0x1"})
            ),
        )
        with pytest.raises(InvalidResponse, match="does not match"):
            rpc.chain_id()

    def test_envelope_without_result_or_error_is_invalid(self) -> None:
        rpc = RpcTransport(
            NODE_URL,
            transport=httpx.MockTransport(
                lambda request: httpx.Response(200, json={"jsonrpc": "2.0", "id": 1})
            ),
        )
        with pytest.raises(InvalidResponse):
            rpc.chain_id()

    def test_envelope_with_both_result_and_error_is_invalid(self) -> None:
        body = {
            "jsonrpc": "2.0",
            "id": 1,
            "result": "0x1",
            "error": {"code": -1, "message": "x"},
        }
        rpc = RpcTransport(
            NODE_URL, transport=httpx.MockTransport(lambda request: httpx.Response(200, json=body))
        )
        with pytest.raises(InvalidResponse):
            rpc.chain_id()


class TestTypedWrappers:
    def test_account_queries_default_to_latest(self, rpc: RpcTransport, node: FakeNode) -> None:
        for method in ("eth_getBalance", "eth_getTransactionCount", "eth_getCode"):
            node.reply(method, "0x0")
        rpc.get_balance(ALICE)
        rpc.get_transaction_count(ALICE)
        rpc.get_code(ALICE)
        assert [r["params"] for r in node.requests] == [[ALICE, "latest"]] * 3

    def test_block_number_is_sent_as_quantity(self, rpc: RpcTransport, node: FakeNode) -> None:
        node.reply("eth_getBlockByNumber", {"number": "0x10"})
        rpc.get_block(16)
        rpc.get_block("latest", full_transactions=True)
        assert node.params_for("eth_getBlockByNumber") == [["0x10", False], ["latest", True]]

    def test_invalid_block_tag_rejected_before_sending(self, rpc: RpcTransport, node: FakeNode) -> None:
        with pytest.raises(ValueError):
            rpc.get_balance(ALICE, "newest")
        assert node.requests == []

    def test_call_normalises_transaction_fields(self, rpc: RpcTransport, node: FakeNode) -> None:
        node.reply("eth_call", "0x")
        rpc.call({"to": ALICE, "value": 10, "data": b"\x01\x02"})
        assert node.params_for("eth_call") == [[{"to": ALICE, "value": "0xa", "data": "0x0102"}, "latest"]]

    def test_storage_read(self, rpc: RpcTransport, node: FakeNode) -> None:
        node.reply("eth_getStorageAt", "0x" + "0" * 63 + "1")
        assert rpc.get_storage_at(ALICE, "0x0").endswith("1")
        assert node.params_for("eth_getStorageAt") == [[ALICE, "0x0", "latest"]]

    def test_accounts(self, rpc: RpcTransport, node: FakeNode) -> None:
        node.reply("eth_accounts", [ALICE])
        assert rpc.accounts() == [ALICE]

    def test_node_status(self, rpc: RpcTransport, node: FakeNode) -> None:
        node.reply("net_version", "31337")
        node.reply("eth_coinbase", ALICE)
        node.reply("eth_mining", False)
        node.reply("eth_hashrate", "0x0")
        assert rpc.network_version() == "31337"
        assert rpc.coinbase() == ALICE
        assert rpc.mining() is False
        assert rpc.hashrate() == "0x0"
        assert all(params == [] for params in (r["params"] for r in node.requests))


class TestDevNodeUtilities:
    def test_mine_sends_block_count_as_string(self, rpc: RpcTransport, node: FakeNode) -> None:
        node.reply("hardhat_mine", True)
        rpc.mine(5)
        assert node.params_for("hardhat_mine") == [["5"]]

    def test_mine_rejects_non_positive_count(self, rpc: RpcTransport, node: FakeNode) -> None:
        with pytest.raises(ValueError):
            rpc.mine(0)
        assert node.requests == []

    def test_increase_time_then_mines_exactly_one_block(
        self, rpc: RpcTransport, node: FakeNode
    ) -> None:
        node.reply("evm_increaseTime", 3600)
        node.reply("hardhat_mine", True)
        rpc.increase_time(3600)
        assert node.methods == ["evm_increaseTime", "hardhat_mine"]
        assert node.requests[0]["params"] == [3600]
        assert node.requests[1]["params"] == ["1"]

    def test_mine_up_to_mines_the_difference(self, rpc: RpcTransport, node: FakeNode) -> None:
        node.reply("eth_blockNumber", "0xa")
        node.reply("hardhat_mine", True)
        assert rpc.mine_up_to(15) == 5
        assert node.params_for("hardhat_mine") == [["5"]]

    def test_mine_up_to_rejects_past_target(self, rpc: RpcTransport, node: FakeNode) -> None:
        node.reply("eth_blockNumber", "0xa")
        with pytest.raises(ValueError):
            rpc.mine_up_to(10)
        assert "hardhat_mine" not in node.methods

    def test_snapshot_and_revert(self, rpc: RpcTransport, node: FakeNode) -> None:
        node.reply("evm_snapshot", "0x1")
        node.reply("evm_revert", True)
        snapshot_id = rpc.snapshot()
        assert rpc.revert(snapshot_id) is True
        assert node.params_for("evm_revert") == [["0x1"]]

    def test_state_overrides(self, rpc: RpcTransport, node: FakeNode) -> None:
        for method in (
            "hardhat_impersonateAccount",
            "hardhat_stopImpersonatingAccount",
            "hardhat_setBalance",
            "hardhat_setCode",
            "hardhat_setStorageAt",
            "evm_setNextBlockTimestamp",
        ):
            node.reply(method, True)
        rpc.impersonate_account(ALICE)
        rpc.set_balance(ALICE, "0x56bc75e2d63100000")
        rpc.set_code(ALICE, "0x6000")
        rpc.set_storage_at(ALICE, "0x0", "0x" + "0" * 64)
        rpc.set_next_block_timestamp(1_900_000_000)
        rpc.stop_impersonating_account(ALICE)
        assert node.methods == [
            "hardhat_impersonateAccount",
            "hardhat_setBalance",
            "hardhat_setCode",
            "hardhat_setStorageAt",
            "evm_setNextBlockTimestamp",
            "hardhat_stopImpersonatingAccount",
        ]
        assert node.params_for("evm_setNextBlockTimestamp") == [[1_900_000_000]]


class TestLogging:
    def test_requests_are_logged_at_info(
        self, rpc: RpcTransport, node: FakeNode, caplog: pytest.LogCaptureFixture
    ) -> None:
        node.reply("eth_chainId", "0x1")
        with caplog.at_level(logging.INFO, logger="dappbridge"):
            rpc.chain_id()
        assert any("eth_chainId" in record.getMessage() for record in caplog.records)
        assert all(record.levelno >= logging.INFO for record in caplog.records)
