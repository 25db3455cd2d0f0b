"""
Calldata encoding for account multicalls.

An account's __execute__ entry point receives every call of a multicall as
one flat felt array:

    [call_count,
     to_1, selector_1, data_offset_1, data_len_1,
     ...
     to_n, selector_n, data_offset_n, data_len_n,
     data_1..., data_n...]

The node walks the headers and slices the trailing data region by offset and
length, so headers and data must stay in call order.
"""
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple, Union

from .hash import get_selector_from_name
from .models import Call

CallLike = Union[Call, Mapping[str, Any]]


def _as_call(call: CallLike) -> Call:
    if isinstance(call, Call):
        return call
    return Call.model_validate(call)


def transform_calls_to_multicall_arrays(
    calls: Iterable[CallLike]
) -> Tuple[List[Dict[str, str]], List[str]]:
    """
    Split calls into per-call headers and one concatenated data segment

    Args:
        calls: Ordered calls

    Returns:
        Tuple of (call_array, calldata). Each call_array entry holds "to",
        "selector", "data_offset" and "data_len".
    """
    call_array: List[Dict[str, str]] = []
    calldata: List[str] = []
    for call in map(_as_call, calls):
        call_array.append({
            "to": call.contract_address,
            "selector": hex(get_selector_from_name(call.entrypoint)),
            "data_offset": str(len(calldata)),
            "data_len": str(len(call.calldata)),
        })
        calldata.extend(call.calldata)
    return call_array, calldata


def from_calls_to_execute_calldata(calls: Sequence[CallLike]) -> List[str]:
    """
    Flatten calls into the calldata of an account __execute__ transaction

    Args:
        calls: Ordered calls; an empty sequence encodes to ["0"]

    Returns:
        Flat list of felts (as strings)
    """
    call_array, calldata = transform_calls_to_multicall_arrays(calls)
    execute_calldata = [str(len(call_array))]
    for header in call_array:
        execute_calldata.extend(
            (header["to"], header["selector"], header["data_offset"], header["data_len"])
        )
    execute_calldata.extend(calldata)
    return execute_calldata
