"""
Starknet RPC SDK - client library for the JSON-RPC API of Starknet nodes.
"""
from .account import Account, DeclareDeployFlow, FlowState, is_class_already_declared
from .config import NetworkConfig, StarknetChainId
from .exceptions import (
    DeclareRejectedError,
    DeployFailedError,
    FeeEstimationError,
    InputTooLongError,
    MalformedResponseError,
    NodeError,
    RpcErrorCode,
    StarknetSdkError,
    TransactionRejectedError,
)
from .hash import get_selector_from_name, starknet_keccak
from .models import (
    BlockHashAndNumber,
    Call,
    DeclareDeployResponse,
    DeclareDeployResult,
    DeclareResult,
    FeeEstimate,
    Invocation,
    StateUpdate,
)
from .provider import NodeClient, RpcProvider
from .short_string import decode_short_string, encode_short_string
from .signer import CallableSigner, Signer
from .transaction import from_calls_to_execute_calldata, transform_calls_to_multicall_arrays
from .version import __version__

__all__ = [
    "Account",
    "DeclareDeployFlow",
    "FlowState",
    "is_class_already_declared",
    "NetworkConfig",
    "StarknetChainId",
    "StarknetSdkError",
    "NodeError",
    "RpcErrorCode",
    "InputTooLongError",
    "DeclareRejectedError",
    "DeployFailedError",
    "MalformedResponseError",
    "FeeEstimationError",
    "TransactionRejectedError",
    "get_selector_from_name",
    "starknet_keccak",
    "Call",
    "Invocation",
    "FeeEstimate",
    "DeclareResult",
    "DeclareDeployResult",
    "DeclareDeployResponse",
    "BlockHashAndNumber",
    "StateUpdate",
    "NodeClient",
    "RpcProvider",
    "encode_short_string",
    "decode_short_string",
    "Signer",
    "CallableSigner",
    "from_calls_to_execute_calldata",
    "transform_calls_to_multicall_arrays",
    "__version__",
]
