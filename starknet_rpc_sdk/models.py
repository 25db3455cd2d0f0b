"""
Data models for the Starknet RPC SDK.
"""
from typing import Any, Dict, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .utils import to_felt, to_int


def _felt_string(value: Any) -> str:
    """Validate a felt and return it as a string, keeping the caller's notation."""
    try:
        to_felt(value)
    except TypeError as e:
        # pydantic only reports ValueError as a validation error
        raise ValueError(str(e)) from e
    return value if isinstance(value, str) else str(value)


class Call(BaseModel):
    """A single contract call: target, entry point name and raw calldata"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    contract_address: str = Field(..., alias="contractAddress")
    entrypoint: str
    calldata: Tuple[str, ...] = ()

    @field_validator("contract_address", mode="before")
    @classmethod
    def _check_address(cls, value: Any) -> str:
        return _felt_string(value)

    @field_validator("entrypoint")
    @classmethod
    def _check_entrypoint(cls, value: str) -> str:
        if not value:
            raise ValueError("entrypoint must not be empty")
        return value

    @field_validator("calldata", mode="before")
    @classmethod
    def _check_calldata(cls, value: Any) -> Tuple[str, ...]:
        if isinstance(value, (str, bytes)):
            raise ValueError("calldata must be a sequence of felts")
        return tuple(_felt_string(item) for item in value)


class Invocation(BaseModel):
    """A call whose calldata is already encoded, e.g. an account __execute__ payload"""
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    contract_address: str = Field(..., alias="contractAddress")
    calldata: Tuple[str, ...] = ()
    signature: Tuple[str, ...] = ()

    @field_validator("contract_address", mode="before")
    @classmethod
    def _check_address(cls, value: Any) -> str:
        return _felt_string(value)

    @field_validator("calldata", "signature", mode="before")
    @classmethod
    def _check_felts(cls, value: Any) -> Tuple[str, ...]:
        return tuple(_felt_string(item) for item in value)


class FeeEstimate(BaseModel):
    """Fee estimate returned by starknet_estimateFee"""
    model_config = ConfigDict(frozen=True)

    overall_fee: int
    gas_consumed: int
    gas_price: int

    @field_validator("overall_fee", "gas_consumed", "gas_price", mode="before")
    @classmethod
    def _parse_number(cls, value: Union[int, str]) -> int:
        return to_int(value)


class DeclareResult(BaseModel):
    """
    Outcome of the declare step.

    transaction_hash is None when the class was already declared and no new
    transaction was accepted by the node.
    """
    model_config = ConfigDict(frozen=True)

    transaction_hash: Optional[str] = None
    class_hash: str
    already_declared: bool = False


class DeclareDeployResult(BaseModel):
    """Outcome of the deploy step"""
    model_config = ConfigDict(frozen=True)

    transaction_hash: str
    contract_address: str
    class_hash: str


class DeclareDeployResponse(BaseModel):
    """Results of both steps of Account.declare_deploy"""
    model_config = ConfigDict(frozen=True)

    declare: DeclareResult
    deploy: DeclareDeployResult


class BlockHashAndNumber(BaseModel):
    """Result of starknet_blockHashAndNumber"""
    block_hash: str
    block_number: int


class StateUpdate(BaseModel):
    """Result of starknet_getStateUpdate"""
    model_config = ConfigDict(extra="allow")

    block_hash: Optional[str] = None
    new_root: Optional[str] = None
    old_root: str
    state_diff: Dict[str, Any]
