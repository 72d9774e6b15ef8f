"""Shared fixtures: an in-process fake JSON-RPC node on httpx.MockTransport."""

from __future__ import annotations

import json
import threading
from collections.abc import Callable
from typing import Any

import httpx
import pytest
from eth_abi import encode

from dappbridge.facade import ChainFacade
from dappbridge.transport.rpc import RpcTransport

NODE_URL = "http://fake-node:8545"

ALICE = "0x" + "1" * 40
BOB = "0x" + "2" * 40
TOKEN = "0x" + "3" * 40


class NodeFault(Exception):
    """Raised by a handler to make the fake node answer with an error envelope."""

    def __init__(self, code: int, message: str) -> None:
        super().__init__(message)
        self.code = code
        self.message = message


class FakeNode:
    """Records every JSON-RPC request and answers from per-method handlers."""

    def __init__(self) -> None:
        self.requests: list[dict[str, Any]] = []
        self._handlers: dict[str, Callable[[list[Any]], Any]] = {}
        self._lock = threading.Lock()

    def reply(self, method: str, result: Any) -> None:
        self._handlers[method] = lambda params: result

    def fail(self, method: str, code: int, message: str) -> None:
        def handler(params: list[Any]) -> Any:
            raise NodeFault(code, message)

        self._handlers[method] = handler

    def handle(self, method: str, handler: Callable[[list[Any]], Any]) -> None:
        self._handlers[method] = handler

    @property
    def methods(self) -> list[str]:
        return [request["method"] for request in self.requests]

    def params_for(self, method: str) -> list[list[Any]]:
        return [r["params"] for r in self.requests if r["method"] == method]

    def __call__(self, request: httpx.Request) -> httpx.Response:
        payload = json.loads(request.content)
        with self._lock:
            self.requests.append(payload)

        envelope: dict[str, Any] = {"jsonrpc": "2.0", "id": payload["id"]}
        handler = self._handlers.get(payload["method"])
        if handler is None:
            envelope["error"] = {"code": -32601, "message": "Method not found"}
            return httpx.Response(200, json=envelope)
        try:
            envelope["result"] = handler(payload["params"])
        except NodeFault as fault:
            envelope["error"] = {"code": fault.code, "message": fault.message}
        return httpx.Response(200, json=envelope)


def abi_hex(types: list[str], values: list[Any]) -> str:
    return "0x" + encode(types, values).hex()


def erc20_handler(
    name: str = "Test Token",
    symbol: str = "TST",
    decimals: int = 18,
    total_supply: int = 1_000_000 * 10**18,
    balances: dict[str, int] | None = None,
    failing: dict[str, NodeFault] | None = None,
) -> Callable[[list[Any]], Any]:
    """An eth_call handler emulating an ERC-20 contract, dispatching on selector."""
    balances = {k.lower(): v for k, v in (balances or {}).items()}
    failing = failing or {}
    results = {
        "0x06fdde03": ("name", lambda data: abi_hex(["string"], [name])),
        "0x95d89b41": ("symbol", lambda data: abi_hex(["string"], [symbol])),
        "0x313ce567": ("decimals", lambda data: abi_hex(["uint8"], [decimals])),
        "0x18160ddd": ("totalSupply", lambda data: abi_hex(["uint256"], [total_supply])),
        "0x70a08231": (
            "balanceOf",
            lambda data: abi_hex(["uint256"], [balances.get("0x" + data[-40:], 0)]),
        ),
    }

    def handler(params: list[Any]) -> Any:
        data = params[0]["data"]
        entry = results.get(data[:10])
        if entry is None:
            return "0x"
        field, produce = entry
        if field in failing:
            raise failing[field]
        return produce(data)

    return handler


@pytest.fixture()
def node() -> FakeNode:
    return FakeNode()


@pytest.fixture()
def rpc(node: FakeNode) -> RpcTransport:
    return RpcTransport(NODE_URL, transport=httpx.MockTransport(node))


@pytest.fixture()
def facade(node: FakeNode) -> ChainFacade:
    return ChainFacade(NODE_URL, transport=httpx.MockTransport(node))
