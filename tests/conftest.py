"""
Pytest fixtures for the Starknet RPC SDK tests.
"""
import time
from typing import Any, Dict, List

import pytest

from starknet_rpc_sdk import Account, CallableSigner, RpcProvider

# Constants for testing
TEST_RPC_URL = "https://rpc.example.com"
TEST_ACCOUNT_ADDRESS = "0x7e00d496e324876bbc8531f2d9a82bf154d1a04a50218ee74cdd372f75a551a"
TEST_PUBLIC_KEY = "0x7e52885445756b313ea16849145363ccb73fb4ab0440dbac333cf9d13de82b9"
TEST_CLASS_HASH = "0x3fcbf77b28c96f4f2fb5bd2d176ab083a12a5e123adeb0de955d7ee228c9854"
TEST_DECLARE_TX = "0x1a2b3c"
TEST_DEPLOY_TX = "0x4d5e6f"
TEST_CONTRACT_ADDRESS = "0x5c6f1a8b3e0d7a4f2c1b9e8d7c6b5a4f3e2d1c0b9a8f7e6d5c4b3a2f1e0d9c8"
TEST_SIGNATURE = ["0x1234", "0x5678"]

TEST_CONTRACT = {
    "abi": [{"type": "function", "name": "transfer", "inputs": [], "outputs": []}],
    "entry_points_by_type": {"CONSTRUCTOR": [], "EXTERNAL": [], "L1_HANDLER": []},
    "program": {"builtins": ["pedersen", "range_check"], "data": ["0x1", "0x2"]},
}


# Make time.sleep instantaneous so polling doesn't slow the suite down
@pytest.fixture
def fast_sleep(monkeypatch):
    monkeypatch.setattr(time, "sleep", lambda *_a, **_kw: None)


class RpcFailure(Exception):
    """Raised by a reply callable to answer with a JSON-RPC error object"""

    def __init__(self, code: int, message: str):
        self.code = code
        self.message = message
        super().__init__(message)


class FakeNode:
    """
    Dispatches mocked JSON-RPC requests to per-method handlers.

    A reply is either a result value or a callable taking the request
    params; the callable may raise RpcFailure. Methods registered with
    `fail` always answer with an error object.
    """

    def __init__(self):
        self.results: Dict[str, Any] = {}
        self.errors: Dict[str, Dict[str, Any]] = {}
        self.requests: List[Dict[str, Any]] = []

    def reply(self, method: str, result: Any) -> None:
        self.results[method] = result

    def fail(self, method: str, code: int, message: str, data: Any = None) -> None:
        error = {"code": code, "message": message}
        if data is not None:
            error["data"] = data
        self.errors[method] = error

    def calls(self, method: str) -> List[Dict[str, Any]]:
        return [r for r in self.requests if r["method"] == method]

    def __call__(self, request, context):
        body = request.json()
        self.requests.append(body)
        context.headers["Content-Type"] = "application/json"
        method = body["method"]

        if method in self.errors:
            return {"jsonrpc": "2.0", "id": body["id"], "error": self.errors[method]}
        if method in self.results:
            result = self.results[method]
            if callable(result):
                try:
                    result = result(body["params"])
                except RpcFailure as failure:
                    error = {"code": failure.code, "message": failure.message}
                    return {"jsonrpc": "2.0", "id": body["id"], "error": error}
            return {"jsonrpc": "2.0", "id": body["id"], "result": result}

        return {
            "jsonrpc": "2.0",
            "id": body["id"],
            "error": {"code": -32601, "message": f"Method not found: {method}"},
        }


@pytest.fixture
def node(requests_mock):
    """Mocked Starknet node answering on TEST_RPC_URL"""
    fake = FakeNode()
    requests_mock.post(TEST_RPC_URL, json=fake)
    return fake


@pytest.fixture
def provider(fast_sleep):
    with RpcProvider(TEST_RPC_URL) as rpc:
        yield rpc


@pytest.fixture
def signed_transactions():
    """Transactions passed to the test signer, in order"""
    return []


@pytest.fixture
def signer(signed_transactions):
    def sign(transaction: Dict[str, Any]) -> List[str]:
        signed_transactions.append(transaction)
        return TEST_SIGNATURE

    return CallableSigner(TEST_PUBLIC_KEY, sign)


@pytest.fixture
def account(provider, signer):
    return Account(provider, TEST_ACCOUNT_ADDRESS, signer)


@pytest.fixture
def deploy_node(node):
    """Node accepting declare and deploy transactions"""
    node.reply("starknet_getNonce", "0x3")
    node.reply("starknet_addDeclareTransaction", {
        "transaction_hash": TEST_DECLARE_TX,
        "class_hash": TEST_CLASS_HASH,
    })
    node.reply("starknet_addDeployTransaction", {
        "transaction_hash": TEST_DEPLOY_TX,
        "contract_address": TEST_CONTRACT_ADDRESS,
    })
    return node
