"""
Exceptions for the Starknet RPC SDK.
"""
from enum import IntEnum
from typing import Any, Optional, TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover
    from .account import DeclareDeployFlow


class RpcErrorCode(IntEnum):
    """
    Error codes returned by Starknet nodes.

    The first block are JSON-RPC 2.0 codes, the rest are Starknet
    application codes.
    """
    PARSE_ERROR = -32700
    INVALID_REQUEST = -32600
    METHOD_NOT_FOUND = -32601
    INVALID_PARAMS = -32602
    INTERNAL_ERROR = -32603

    # Raised locally when the transport gives up
    TRANSPORT_ERROR = -32098

    FAILED_TO_RECEIVE_TXN = 1
    CONTRACT_NOT_FOUND = 20
    INVALID_MESSAGE_SELECTOR = 21
    INVALID_CALL_DATA = 22
    BLOCK_NOT_FOUND = 24
    TXN_HASH_NOT_FOUND = 25
    INVALID_TXN_INDEX = 27
    CLASS_HASH_NOT_FOUND = 28
    PAGE_SIZE_TOO_BIG = 31
    NO_BLOCKS = 32
    CONTRACT_ERROR = 40
    CLASS_ALREADY_DECLARED = 51


class StarknetSdkError(Exception):
    """Base exception for all SDK errors."""
    pass


class NodeError(StarknetSdkError):
    """
    Raised when the node returns a JSON-RPC error or cannot be reached.

    Attributes:
        code: JSON-RPC or Starknet error code
        message: Message reported by the node
        data: Optional extra error data from the node
        method: RPC method that failed, if known
    """

    def __init__(
        self,
        message: str,
        code: int = RpcErrorCode.INTERNAL_ERROR,
        data: Optional[Any] = None,
        method: Optional[str] = None
    ):
        self.code = int(code)
        self.message = message
        self.data = data
        self.method = method
        super().__init__(message)

    def __str__(self) -> str:
        text = f"RPC[{self.method or '-'}] code={self.code}: {self.message}"
        if self.data is not None:
            text += f" data={self.data!r}"
        return text


class InputTooLongError(StarknetSdkError, ValueError):
    """Raised when a value does not fit into a single field element."""
    pass


class DeclareRejectedError(StarknetSdkError):
    """Raised when the node rejects a declare transaction."""

    def __init__(self, message: str, node_error: Optional[NodeError] = None):
        self.node_error = node_error
        super().__init__(message)


class MalformedResponseError(StarknetSdkError):
    """Raised when a successful node response is missing expected fields."""

    def __init__(self, message: str, response: Optional[Any] = None):
        self.response = response
        super().__init__(message)


class DeployFailedError(StarknetSdkError):
    """
    Raised when a declare-and-deploy flow fails after the declare step.

    The flow keeps the declare result so callers can still find the declare
    transaction hash.
    """

    def __init__(self, message: str, flow: "DeclareDeployFlow"):
        self.flow = flow
        super().__init__(message)

    @property
    def declare(self):
        return self.flow.declare_result


class TransactionRejectedError(StarknetSdkError):
    """Raised when the node reports a submitted transaction as rejected."""

    def __init__(self, message: str, transaction_hash: str, receipt: Optional[Any] = None):
        self.transaction_hash = transaction_hash
        self.receipt = receipt
        super().__init__(message)


class FeeEstimationError(StarknetSdkError):
    """Raised when the node refuses to estimate the fee of a transaction."""

    def __init__(self, reason: str, node_error: Optional[NodeError] = None):
        self.reason = reason
        self.node_error = node_error
        super().__init__(f"Fee estimation failed: {reason}")
