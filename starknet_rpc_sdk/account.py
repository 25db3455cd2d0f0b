"""
Account - declares, deploys and estimates transactions for a Starknet account.
"""
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Union

from .exceptions import (
    DeclareRejectedError,
    DeployFailedError,
    FeeEstimationError,
    MalformedResponseError,
    NodeError,
    RpcErrorCode,
    StarknetSdkError,
)
from .models import (
    Call,
    DeclareDeployResponse,
    DeclareDeployResult,
    DeclareResult,
    FeeEstimate,
    Invocation,
)
from .provider import ContractDefinition, INVOKE_VERSION, NodeClient
from .signer import Signer, placeholder_signature
from .transaction import CallLike, from_calls_to_execute_calldata
from .utils import BlockIdentifier, FeltLike, random_felt, to_hex

ALREADY_DECLARED_MESSAGES = ("already declared", "already exists")

Estimable = Union[Call, Invocation, Sequence[CallLike]]


def is_class_already_declared(error: NodeError) -> bool:
    """
    Default check for a declare rejected because the class is already known

    Args:
        error: Error returned by the node for the declare transaction

    Returns:
        True if the node reported the class as already declared
    """
    if error.code == RpcErrorCode.CLASS_ALREADY_DECLARED:
        return True
    text = f"{error.message} {error.data or ''}".lower()
    return any(phrase in text for phrase in ALREADY_DECLARED_MESSAGES)


class FlowState(str, Enum):
    """States of a declare-and-deploy flow"""
    PENDING = "PENDING"
    DECLARED = "DECLARED"
    DEPLOYED = "DEPLOYED"
    FAILED = "FAILED"


@dataclass
class DeclareDeployFlow:
    """
    Progress of a declare-and-deploy flow.

    PENDING -> DECLARED -> DEPLOYED, or FAILED from PENDING or DECLARED.
    A flow that failed while DECLARED still holds the declare result.
    """
    class_hash: str
    state: FlowState = FlowState.PENDING
    declare_result: Optional[DeclareResult] = None
    deploy_result: Optional[DeclareDeployResult] = None
    failed_step: Optional[str] = None
    error: Optional[Exception] = None

    def _require(self, *states: FlowState) -> None:
        if self.state not in states:
            raise RuntimeError(f"Invalid transition from {self.state.value}")

    def mark_declared(self, result: DeclareResult) -> None:
        self._require(FlowState.PENDING)
        self.declare_result = result
        self.state = FlowState.DECLARED

    def mark_deployed(self, result: DeclareDeployResult) -> None:
        self._require(FlowState.DECLARED)
        self.deploy_result = result
        self.state = FlowState.DEPLOYED

    def mark_failed(self, step: str, error: Exception) -> None:
        self._require(FlowState.PENDING, FlowState.DECLARED)
        self.failed_step = step
        self.error = error
        self.state = FlowState.FAILED

    @property
    def declared(self) -> bool:
        return self.declare_result is not None

    def response(self) -> DeclareDeployResponse:
        self._require(FlowState.DEPLOYED)
        return DeclareDeployResponse(declare=self.declare_result, deploy=self.deploy_result)


class Account:
    """
    A Starknet account bound to a node client and a signer.

    The account keeps no state between calls beyond these references, so
    operations can run concurrently from several threads.
    """

    def __init__(
        self,
        provider: NodeClient,
        address: FeltLike,
        signer: Signer,
        is_already_declared: Callable[[NodeError], bool] = is_class_already_declared,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize the Account

        Args:
            provider: Node client used for every request
            address: Account contract address
            signer: Signer for the account's transactions
            is_already_declared: Predicate deciding whether a declare error
                means the class is already declared
            logger: Optional logger instance to use for debug/info logging
        """
        if signer is None:
            raise ValueError("signer must be provided")

        self.provider = provider
        self.address = to_hex(address)
        self.signer = signer
        self.is_already_declared = is_already_declared
        self.logger = logger or logging.getLogger(__name__)

    def declare(
        self,
        contract: ContractDefinition,
        class_hash: FeltLike,
        nonce: Optional[FeltLike] = None,
        max_fee: FeltLike = 0
    ) -> DeclareResult:
        """
        Declare a contract class

        Args:
            contract: Compiled contract definition
            class_hash: Hash of the class
            nonce: Account nonce (fetched from the node if None)
            max_fee: Maximum fee for the transaction

        Returns:
            DeclareResult; already_declared is set when the node reported the
            class as known and no transaction was created

        Raises:
            DeclareRejectedError: If the node rejects the declare
            NodeError: If the node cannot be reached
        """
        class_hash = to_hex(class_hash)
        if nonce is None:
            nonce = self.provider.get_nonce(self.address)

        transaction = {
            "type": "DECLARE",
            "sender_address": self.address,
            "class_hash": class_hash,
            "max_fee": to_hex(max_fee),
            "nonce": to_hex(nonce),
        }
        signature = self.signer.sign_transaction(transaction)

        try:
            result = self.provider.declare_class(
                contract,
                class_hash,
                sender_address=self.address,
                signature=signature,
                nonce=nonce,
                max_fee=max_fee,
            )
        except NodeError as e:
            if e.code == RpcErrorCode.TRANSPORT_ERROR:
                raise
            if self.is_already_declared(e):
                self.logger.warning(f"Class {class_hash} already declared, continuing")
                return DeclareResult(class_hash=class_hash, already_declared=True)
            self.logger.error(f"Declare of class {class_hash} rejected: {e}")
            raise DeclareRejectedError(f"Declare rejected: {e.message}", node_error=e) from e

        if not isinstance(result, dict) or not result.get("transaction_hash"):
            raise MalformedResponseError("Declare response missing transaction_hash", response=result)

        self.logger.info(f"Class {class_hash} declared in {result['transaction_hash']}")
        return DeclareResult(
            transaction_hash=result["transaction_hash"],
            class_hash=result.get("class_hash") or class_hash,
        )

    def deploy(
        self,
        class_hash: FeltLike,
        constructor_calldata: Optional[Sequence[FeltLike]] = None,
        salt: Optional[FeltLike] = None,
        contract: Optional[ContractDefinition] = None
    ) -> DeclareDeployResult:
        """
        Deploy an instance of a declared class

        Args:
            class_hash: Declared class to deploy
            constructor_calldata: Constructor arguments (default: none)
            salt: Address salt (default: random, so repeated deploys get new addresses)
            contract: Contract definition, for nodes that require it

        Returns:
            DeclareDeployResult with transaction_hash and contract_address

        Raises:
            MalformedResponseError: If the node omits the address or hash
            NodeError: If the node rejects the deploy
        """
        class_hash = to_hex(class_hash)
        if constructor_calldata is None:
            constructor_calldata = []
        if salt is None:
            salt = random_felt()

        result = self.provider.deploy_contract(class_hash, constructor_calldata, salt, contract=contract)

        if not isinstance(result, dict):
            raise MalformedResponseError("Deploy response is not an object", response=result)
        if not result.get("contract_address"):
            raise MalformedResponseError("Deploy response missing contract_address", response=result)
        if not result.get("transaction_hash"):
            raise MalformedResponseError("Deploy response missing transaction_hash", response=result)

        self.logger.info(f"Contract {result['contract_address']} deployed in {result['transaction_hash']}")
        return DeclareDeployResult(
            transaction_hash=result["transaction_hash"],
            contract_address=result["contract_address"],
            class_hash=class_hash,
        )

    def declare_deploy(
        self,
        contract: ContractDefinition,
        class_hash: FeltLike,
        constructor_calldata: Optional[Sequence[FeltLike]] = None,
        salt: Optional[FeltLike] = None
    ) -> DeclareDeployResponse:
        """
        Declare a class and deploy an instance of it

        A class that is already declared does not stop the deploy.

        Args:
            contract: Compiled contract definition
            class_hash: Hash of the class
            constructor_calldata: Constructor arguments (default: none)
            salt: Address salt (default: random)

        Returns:
            DeclareDeployResponse with the declare and deploy results

        Raises:
            DeclareRejectedError: If the declare is rejected
            DeployFailedError: If the deploy fails after the declare; the
                error's flow holds the declare result
            NodeError: If the node cannot be reached during the declare
            ValueError: If salt or constructor_calldata are not felts; raised
                before the declare is sent
        """
        # Bad deploy arguments must fail before anything is submitted
        if salt is not None:
            salt = to_hex(salt)
        if constructor_calldata is not None:
            constructor_calldata = [to_hex(item) for item in constructor_calldata]

        flow = DeclareDeployFlow(class_hash=to_hex(class_hash))

        try:
            declare_result = self.declare(contract, class_hash)
        except StarknetSdkError as e:
            flow.mark_failed("declare", e)
            raise
        flow.mark_declared(declare_result)

        try:
            deploy_result = self.deploy(
                class_hash,
                constructor_calldata=constructor_calldata,
                salt=salt,
                contract=contract,
            )
        except StarknetSdkError as e:
            flow.mark_failed("deploy", e)
            self.logger.error(f"Deploy of class {flow.class_hash} failed after declare: {e}")
            raise DeployFailedError(f"Deploy failed after declare: {e}", flow=flow) from e
        flow.mark_deployed(deploy_result)

        return flow.response()

    def _invocation(self, call: Estimable) -> Invocation:
        if isinstance(call, Invocation):
            return call
        if isinstance(call, Mapping) and "entrypoint" not in call:
            # Raw {contractAddress, calldata} with calldata already encoded
            return Invocation.model_validate(call)
        calls = [call] if isinstance(call, (Call, Mapping)) else list(call)
        return Invocation(
            contract_address=self.address,
            calldata=from_calls_to_execute_calldata(calls),
        )

    def get_estimate_fee(
        self,
        call: Estimable,
        nonce: FeltLike,
        block_identifier: BlockIdentifier = "latest"
    ) -> FeeEstimate:
        """
        Estimate the fee of an invoke transaction before submitting it

        Args:
            call: A Call, a sequence of calls (sent through the account's
                __execute__), or an already-encoded Invocation or
                {contractAddress, calldata} mapping
            nonce: Account nonce for the transaction
            block_identifier: Block to estimate against

        Returns:
            FeeEstimate

        Raises:
            FeeEstimationError: If the node rejects the transaction
        """
        invocation = self._invocation(call)
        transaction: Dict[str, Any] = {
            "type": "INVOKE",
            "sender_address": to_hex(invocation.contract_address),
            "calldata": [to_hex(item) for item in invocation.calldata],
            "signature": placeholder_signature(),
            "max_fee": "0x0",
            "version": INVOKE_VERSION,
            "nonce": to_hex(nonce),
        }

        try:
            return self.provider.estimate_fee(transaction, block_identifier)
        except NodeError as e:
            self.logger.error(f"Fee estimation failed: {e}")
            raise FeeEstimationError(e.message, node_error=e) from e

    def execute(
        self,
        calls: Union[CallLike, Sequence[CallLike]],
        max_fee: Optional[FeltLike] = None,
        nonce: Optional[FeltLike] = None
    ) -> Dict[str, Any]:
        """
        Sign and submit an invoke transaction for one or more calls

        Args:
            calls: Call or ordered calls to execute
            max_fee: Maximum fee (estimated when None)
            nonce: Account nonce (fetched from the node if None)

        Returns:
            Node result with transaction_hash
        """
        if nonce is None:
            nonce = self.provider.get_nonce(self.address)
        invocation = self._invocation(calls)

        if max_fee is None:
            estimate = self.get_estimate_fee(invocation, nonce)
            # 50% buffer over the estimate
            max_fee = estimate.overall_fee * 3 // 2
            self.logger.debug(f"Estimated max fee: {max_fee}")

        transaction = {
            "type": "INVOKE",
            "sender_address": self.address,
            "calldata": list(invocation.calldata),
            "max_fee": to_hex(max_fee),
            "version": INVOKE_VERSION,
            "nonce": to_hex(nonce),
        }
        signed = Invocation(
            contract_address=self.address,
            calldata=invocation.calldata,
            signature=self.signer.sign_transaction(transaction),
        )
        return self.provider.invoke_function(signed, max_fee=max_fee, nonce=nonce)
