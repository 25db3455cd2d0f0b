"""
RpcProvider - JSON-RPC client for Starknet nodes.
"""
import base64
import gzip
import json
import logging
import time
import urllib.parse
from itertools import count
from typing import Any, Dict, List, Mapping, Optional, Protocol, Sequence, Union

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .config import NetworkConfig
from .exceptions import MalformedResponseError, NodeError, RpcErrorCode, TransactionRejectedError
from .hash import get_selector_from_name
from .models import BlockHashAndNumber, Call, FeeEstimate, Invocation, StateUpdate
from .utils import BlockIdentifier, FeltLike, block_identifier_param, to_hex
from .version import __version__

ContractDefinition = Union[str, Mapping[str, Any]]

ACCEPTED_STATUSES = ("ACCEPTED_ON_L2", "ACCEPTED_ON_L1")
REJECTED_STATUSES = ("REJECTED",)

DECLARE_VERSION = "0x1"
DEPLOY_VERSION = "0x0"
INVOKE_VERSION = "0x1"


class NodeClient(Protocol):
    """The node operations the account orchestrator depends on"""

    def declare_class(
        self,
        contract: ContractDefinition,
        class_hash: FeltLike,
        sender_address: Optional[FeltLike] = None,
        signature: Sequence[FeltLike] = (),
        nonce: Optional[FeltLike] = None,
        max_fee: FeltLike = 0,
    ) -> Dict[str, Any]:
        ...

    def deploy_contract(
        self,
        class_hash: FeltLike,
        constructor_calldata: Sequence[FeltLike],
        salt: FeltLike,
        contract: Optional[ContractDefinition] = None,
    ) -> Dict[str, Any]:
        ...

    def estimate_fee(
        self, transaction: Dict[str, Any], block_identifier: BlockIdentifier = "latest"
    ) -> FeeEstimate:
        ...

    def get_transaction_by_hash(self, transaction_hash: FeltLike) -> Dict[str, Any]:
        ...

    def get_class_hash_at(
        self, contract_address: FeltLike, block_identifier: BlockIdentifier = "latest"
    ) -> str:
        ...

    def get_nonce(
        self, contract_address: FeltLike, block_identifier: BlockIdentifier = "latest"
    ) -> int:
        ...

    def invoke_function(
        self,
        invocation: Invocation,
        max_fee: FeltLike = 0,
        nonce: Optional[FeltLike] = None,
    ) -> Dict[str, Any]:
        ...


def compress_program(program: Union[str, Mapping[str, Any]]) -> str:
    """
    Gzip and base64 encode a compiled Cairo program, as the node expects

    Args:
        program: Program as a JSON string or a dict

    Returns:
        Base64 string of the gzipped program JSON
    """
    if not isinstance(program, str):
        program = json.dumps(program, separators=(",", ":"))
    return base64.b64encode(gzip.compress(program.encode("utf-8"))).decode("ascii")


def contract_class_param(contract: ContractDefinition) -> Dict[str, Any]:
    """
    Build the contract_class object of a declare or deploy transaction

    Args:
        contract: Compiled contract as JSON text or a dict with "program",
            "entry_points_by_type" and optionally "abi"

    Raises:
        ValueError: If the contract definition is missing required fields
    """
    if isinstance(contract, str):
        contract = json.loads(contract)

    missing = [key for key in ("program", "entry_points_by_type") if key not in contract]
    if missing:
        raise ValueError(f"Contract definition missing required fields: {', '.join(missing)}")

    program = contract["program"]
    # Already-compressed programs are passed as a base64 string
    if isinstance(program, Mapping):
        program = compress_program(program)

    contract_class = {
        "program": program,
        "entry_points_by_type": contract["entry_points_by_type"],
    }
    if contract.get("abi") is not None:
        contract_class["abi"] = contract["abi"]
    return contract_class


class RpcProvider:
    """
    Client for the JSON-RPC API of a Starknet node.

    Every method maps to one node method and returns the node's result,
    parsed into a model where the SDK defines one. Node errors are raised as
    NodeError. Transient HTTP failures (5xx, connection errors) are retried by
    the underlying session.
    """

    def __init__(
        self,
        node_url: str,
        retry_count: int = 3,
        timeout: int = 30,
        headers: Optional[Mapping[str, str]] = None,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the RpcProvider

        Args:
            node_url: JSON-RPC endpoint of the node
            retry_count: Number of retries for HTTP requests
            timeout: Timeout for HTTP requests in seconds
            headers: Extra HTTP headers, e.g. an API key
            logger: Optional logger instance to use for debug/info logging

        Raises:
            ValueError: If the URL doesn't use https (unless it's localhost/127.0.0.1)
        """
        parsed = urllib.parse.urlparse(node_url)
        host = parsed.hostname or ''
        is_local = host in ('localhost', '127.0.0.1')
        if parsed.scheme != 'https' and not is_local:
            raise ValueError(f"node_url must use https:// for security (got: {parsed.scheme}://)")

        self.node_url = node_url
        self.timeout = timeout
        self.logger = logger or logging.getLogger(__name__)
        self._ids = count(1)

        # Setup HTTP session with retries
        self.session = requests.Session()
        self.session.headers.update({
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": f"starknet-rpc-sdk-python/{__version__}",
        })
        if headers:
            self.session.headers.update(dict(headers))
        retries = Retry(
            total=retry_count,
            backoff_factor=0.5,
            status_forcelist=[500, 502, 503, 504],
            allowed_methods=["POST"],
            raise_on_status=False,
            connect=retry_count,
            read=retry_count,
            other=retry_count
        )
        self.session.mount("http://", HTTPAdapter(max_retries=retries))
        self.session.mount("https://", HTTPAdapter(max_retries=retries))

    @classmethod
    def from_network(cls, network: str, node_url: Optional[str] = None, **kwargs: Any) -> "RpcProvider":
        """
        Create a provider for a bundled network, e.g. "testnet2"

        Args:
            network: Network name from networks.json
            node_url: URL overriding the configured endpoint
            **kwargs: Passed to the constructor
        """
        return cls(NetworkConfig.get_rpc_url(network, override=node_url), **kwargs)

    def __enter__(self) -> "RpcProvider":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def close(self) -> None:
        self.session.close()

    def request(self, method: str, params: Union[Sequence[Any], Mapping[str, Any], None] = None) -> Any:
        """
        Perform a single JSON-RPC request

        Args:
            method: Node method, e.g. "starknet_chainId"
            params: Positional or named parameters

        Returns:
            The "result" member of the response

        Raises:
            NodeError: If the request fails or the node returns an error object
        """
        request_id = next(self._ids)
        payload = {
            "jsonrpc": "2.0",
            "id": request_id,
            "method": method,
            "params": dict(params) if isinstance(params, Mapping) else list(params or []),
        }
        self.logger.debug(f"RPC request {request_id}: {method}")

        try:
            response = self.session.post(self.node_url, json=payload, timeout=self.timeout)
        except requests.RequestException as e:
            self.logger.error(f"RPC request {method} failed: {e}")
            raise NodeError(
                f"Request to node failed: {e}",
                code=RpcErrorCode.TRANSPORT_ERROR,
                method=method
            ) from e

        try:
            body = response.json()
        except ValueError as e:
            # Non-JSON bodies come with HTTP errors (proxies, gateways)
            raise NodeError(
                f"Non-JSON response from node (HTTP {response.status_code})",
                code=RpcErrorCode.TRANSPORT_ERROR,
                data=response.text[:256],
                method=method
            ) from e

        if not isinstance(body, dict):
            raise NodeError("Invalid JSON-RPC response type", data=body, method=method)

        if body.get("error") is not None:
            error = body["error"]
            self.logger.debug(f"RPC error for {method}: {error}")
            if not isinstance(error, dict):
                raise NodeError(str(error), data=error, method=method)
            raise NodeError(
                str(error.get("message", "Unknown error")),
                code=error.get("code", RpcErrorCode.INTERNAL_ERROR),
                data=error.get("data"),
                method=method
            )

        if "result" not in body:
            raise NodeError("Malformed JSON-RPC response", data=body, method=method)

        return body["result"]

    # --- chain and blocks ---------------------------------------------------

    def get_chain_id(self) -> str:
        return self.request("starknet_chainId")

    def get_protocol_version(self) -> str:
        return self.request("starknet_protocolVersion")

    def get_block_number(self) -> int:
        return self.request("starknet_blockNumber")

    def get_block_hash_and_number(self) -> BlockHashAndNumber:
        return BlockHashAndNumber.model_validate(self.request("starknet_blockHashAndNumber"))

    def get_block(self, block_identifier: BlockIdentifier = "pending") -> Dict[str, Any]:
        """Alias of get_block_with_tx_hashes."""
        return self.get_block_with_tx_hashes(block_identifier)

    def get_block_with_tx_hashes(self, block_identifier: BlockIdentifier = "pending") -> Dict[str, Any]:
        return self.request(
            "starknet_getBlockWithTxHashes",
            {"block_id": block_identifier_param(block_identifier)}
        )

    def get_block_with_txs(self, block_identifier: BlockIdentifier = "pending") -> Dict[str, Any]:
        return self.request(
            "starknet_getBlockWithTxs",
            {"block_id": block_identifier_param(block_identifier)}
        )

    def get_transaction_count(self, block_identifier: BlockIdentifier = "pending") -> int:
        """Number of transactions in a block."""
        return self.request(
            "starknet_getBlockTransactionCount",
            {"block_id": block_identifier_param(block_identifier)}
        )

    def get_state_update(self, block_identifier: BlockIdentifier = "latest") -> StateUpdate:
        result = self.request(
            "starknet_getStateUpdate",
            {"block_id": block_identifier_param(block_identifier)}
        )
        return StateUpdate.model_validate(result)

    def get_pending_transactions(self) -> List[Dict[str, Any]]:
        return self.request("starknet_pendingTransactions")

    # --- state ----------------------------------------------------------------

    def get_storage_at(
        self,
        contract_address: FeltLike,
        key: FeltLike,
        block_identifier: BlockIdentifier = "pending"
    ) -> str:
        return self.request("starknet_getStorageAt", {
            "contract_address": to_hex(contract_address),
            "key": to_hex(key),
            "block_id": block_identifier_param(block_identifier),
        })

    def get_nonce(self, contract_address: FeltLike, block_identifier: BlockIdentifier = "latest") -> int:
        result = self.request("starknet_getNonce", {
            "contract_address": to_hex(contract_address),
            "block_id": block_identifier_param(block_identifier),
        })
        return int(result, 16) if isinstance(result, str) else int(result)

    def get_class(self, class_hash: FeltLike, block_identifier: BlockIdentifier = "latest") -> Dict[str, Any]:
        return self.request("starknet_getClass", {
            "class_hash": to_hex(class_hash),
            "block_id": block_identifier_param(block_identifier),
        })

    def get_class_at(self, contract_address: FeltLike, block_identifier: BlockIdentifier = "latest") -> Dict[str, Any]:
        return self.request("starknet_getClassAt", {
            "contract_address": to_hex(contract_address),
            "block_id": block_identifier_param(block_identifier),
        })

    def get_class_hash_at(self, contract_address: FeltLike, block_identifier: BlockIdentifier = "latest") -> str:
        return self.request("starknet_getClassHashAt", {
            "contract_address": to_hex(contract_address),
            "block_id": block_identifier_param(block_identifier),
        })

    def call_contract(self, call: Call, block_identifier: BlockIdentifier = "pending") -> List[str]:
        """
        Execute a view call without creating a transaction

        Args:
            call: Target contract, entry point and calldata
            block_identifier: Block to execute against

        Returns:
            Felts returned by the entry point
        """
        return self.request("starknet_call", {
            "request": {
                "contract_address": to_hex(call.contract_address),
                "entry_point_selector": hex(get_selector_from_name(call.entrypoint)),
                "calldata": [to_hex(item) for item in call.calldata],
            },
            "block_id": block_identifier_param(block_identifier),
        })

    # --- transactions ---------------------------------------------------------

    def get_transaction_by_hash(self, transaction_hash: FeltLike) -> Dict[str, Any]:
        return self.request(
            "starknet_getTransactionByHash",
            {"transaction_hash": to_hex(transaction_hash)}
        )

    def get_transaction_by_block_id_and_index(self, block_identifier: BlockIdentifier, index: int) -> Dict[str, Any]:
        return self.request("starknet_getTransactionByBlockIdAndIndex", {
            "block_id": block_identifier_param(block_identifier),
            "index": index,
        })

    def get_transaction_receipt(self, transaction_hash: FeltLike) -> Dict[str, Any]:
        return self.request(
            "starknet_getTransactionReceipt",
            {"transaction_hash": to_hex(transaction_hash)}
        )

    def trace_transaction(self, transaction_hash: FeltLike) -> Dict[str, Any]:
        return self.request(
            "starknet_traceTransaction",
            {"transaction_hash": to_hex(transaction_hash)}
        )

    def trace_block_transactions(self, block_hash: FeltLike) -> List[Dict[str, Any]]:
        return self.request(
            "starknet_traceBlockTransactions",
            {"block_hash": to_hex(block_hash)}
        )

    def estimate_fee(self, transaction: Dict[str, Any], block_identifier: BlockIdentifier = "latest") -> FeeEstimate:
        """
        Estimate the fee of a transaction without submitting it

        Args:
            transaction: Broadcasted transaction payload
            block_identifier: Block to estimate against

        Returns:
            FeeEstimate with overall_fee, gas_consumed and gas_price

        Raises:
            NodeError: If the node rejects the transaction
            MalformedResponseError: If the estimate lacks required fields
        """
        result = self.request("starknet_estimateFee", {
            "request": transaction,
            "block_id": block_identifier_param(block_identifier),
        })
        missing = [key for key in FeeEstimate.model_fields if key not in (result or {})]
        if missing:
            raise MalformedResponseError(
                f"Fee estimate missing fields: {', '.join(missing)}", response=result
            )
        return FeeEstimate.model_validate(result)

    def declare_class(
        self,
        contract: ContractDefinition,
        class_hash: FeltLike,
        sender_address: Optional[FeltLike] = None,
        signature: Sequence[FeltLike] = (),
        nonce: Optional[FeltLike] = None,
        max_fee: FeltLike = 0,
    ) -> Dict[str, Any]:
        """
        Submit a declare transaction

        Args:
            contract: Compiled contract definition
            class_hash: Hash of the class being declared
            sender_address: Declaring account
            signature: Account signature over the transaction
            nonce: Account nonce
            max_fee: Maximum fee the account pays

        Returns:
            Node result with transaction_hash and class_hash
        """
        transaction: Dict[str, Any] = {
            "type": "DECLARE",
            "contract_class": contract_class_param(contract),
            "version": DECLARE_VERSION,
            "max_fee": to_hex(max_fee),
            "signature": [to_hex(item) for item in signature],
            "class_hash": to_hex(class_hash),
        }
        if sender_address is not None:
            transaction["sender_address"] = to_hex(sender_address)
        if nonce is not None:
            transaction["nonce"] = to_hex(nonce)

        result = self.request("starknet_addDeclareTransaction", {"declare_transaction": transaction})
        self.logger.info(f"Declare transaction sent: {result.get('transaction_hash') if isinstance(result, dict) else result}")
        return result

    def deploy_contract(
        self,
        class_hash: FeltLike,
        constructor_calldata: Sequence[FeltLike],
        salt: FeltLike,
        contract: Optional[ContractDefinition] = None,
    ) -> Dict[str, Any]:
        """
        Submit a deploy transaction for a declared class

        Args:
            class_hash: Class to instantiate
            constructor_calldata: Constructor arguments
            salt: Contract address salt
            contract: Contract definition, for nodes that require it

        Returns:
            Node result with transaction_hash and contract_address
        """
        transaction: Dict[str, Any] = {
            "type": "DEPLOY",
            "version": DEPLOY_VERSION,
            "class_hash": to_hex(class_hash),
            "contract_address_salt": to_hex(salt),
            "constructor_calldata": [to_hex(item) for item in constructor_calldata],
        }
        if contract is not None:
            transaction["contract_class"] = contract_class_param(contract)

        result = self.request("starknet_addDeployTransaction", {"deploy_transaction": transaction})
        self.logger.info(f"Deploy transaction sent: {result.get('transaction_hash') if isinstance(result, dict) else result}")
        return result

    def invoke_function(
        self,
        invocation: Invocation,
        max_fee: FeltLike = 0,
        nonce: Optional[FeltLike] = None,
    ) -> Dict[str, Any]:
        """Submit a signed invoke transaction built from an Invocation."""
        transaction: Dict[str, Any] = {
            "type": "INVOKE",
            "sender_address": to_hex(invocation.contract_address),
            "calldata": [to_hex(item) for item in invocation.calldata],
            "signature": [to_hex(item) for item in invocation.signature],
            "max_fee": to_hex(max_fee),
            "version": INVOKE_VERSION,
        }
        if nonce is not None:
            transaction["nonce"] = to_hex(nonce)

        result = self.request("starknet_addInvokeTransaction", {"invoke_transaction": transaction})
        self.logger.info(f"Invoke transaction sent: {result.get('transaction_hash') if isinstance(result, dict) else result}")
        return result

    def wait_for_transaction(
        self,
        transaction_hash: FeltLike,
        poll_interval: float = 5.0,
        timeout: int = 300
    ) -> Dict[str, Any]:
        """
        Poll the receipt of a transaction until the node accepts or rejects it

        Args:
            transaction_hash: Transaction to wait for
            poll_interval: Seconds between polls
            timeout: Maximum wait time in seconds

        Returns:
            Transaction receipt

        Raises:
            TransactionRejectedError: If the transaction is rejected
            TimeoutError: If the transaction is not accepted within timeout
        """
        tx_hash = to_hex(transaction_hash)
        start = time.time()
        while time.time() - start < timeout:
            try:
                receipt = self.get_transaction_receipt(tx_hash)
            except NodeError as e:
                # Receipts are unknown until the node has picked the transaction up
                if e.code != RpcErrorCode.TXN_HASH_NOT_FOUND:
                    raise
                receipt = None

            if receipt:
                status = receipt.get("status")
                if status in ACCEPTED_STATUSES:
                    return receipt
                if status in REJECTED_STATUSES:
                    raise TransactionRejectedError(
                        f"Transaction {tx_hash} was rejected: {receipt.get('status_data', status)}",
                        transaction_hash=tx_hash,
                        receipt=receipt
                    )
            time.sleep(poll_interval)

        raise TimeoutError(f"Transaction {tx_hash} not accepted within {timeout}s")
