"""
Tests for multicall calldata encoding.
"""
import pytest
from hypothesis import given, settings, strategies as st

from starknet_rpc_sdk import Call, from_calls_to_execute_calldata, get_selector_from_name
from starknet_rpc_sdk.transaction import transform_calls_to_multicall_arrays
from starknet_rpc_sdk.utils import to_int

TRANSFER_SELECTOR = "0x83afd3f4caedc6eebf44246fe54e38c95e3179a5ec9ea81740eca5b482d12e"


def test_single_call_layout():
    call = Call(contract_address="0xA", entrypoint="transfer", calldata=["0xB", "10", "0"])

    calldata = from_calls_to_execute_calldata([call])

    assert calldata == ["1", "0xA", TRANSFER_SELECTOR, "0", "3", "0xB", "10", "0"]


def test_empty_call_list():
    assert from_calls_to_execute_calldata([]) == ["0"]


def test_accepts_camel_case_dicts():
    calldata = from_calls_to_execute_calldata([
        {"contractAddress": "0xA", "entrypoint": "transfer", "calldata": ["0xB", "10", "0"]},
    ])
    assert calldata[:5] == ["1", "0xA", TRANSFER_SELECTOR, "0", "3"]


def test_two_calls_offsets_accumulate():
    calls = [
        Call(contract_address="0x1", entrypoint="approve", calldata=["0x2", "5", "0"]),
        Call(contract_address="0x3", entrypoint="swap", calldata=["7", "8"]),
    ]

    calldata = from_calls_to_execute_calldata(calls)

    assert calldata == [
        "2",
        "0x1", hex(get_selector_from_name("approve")), "0", "3",
        "0x3", hex(get_selector_from_name("swap")), "3", "2",
        "0x2", "5", "0", "7", "8",
    ]


def test_call_without_calldata():
    calls = [
        Call(contract_address="0x1", entrypoint="increase"),
        Call(contract_address="0x1", entrypoint="set", calldata=["4"]),
    ]

    calldata = from_calls_to_execute_calldata(calls)

    # The first call has no data, so the second one also starts at offset 0
    assert calldata[3:5] == ["0", "0"]
    assert calldata[7:9] == ["0", "1"]
    assert calldata[9:] == ["4"]


def test_multicall_arrays():
    call_array, data = transform_calls_to_multicall_arrays([
        Call(contract_address="0x1", entrypoint="a", calldata=["1"]),
        Call(contract_address="0x2", entrypoint="b", calldata=["2", "3"]),
    ])

    assert [entry["data_offset"] for entry in call_array] == ["0", "1"]
    assert [entry["data_len"] for entry in call_array] == ["1", "2"]
    assert data == ["1", "2", "3"]


def test_invalid_call_rejected():
    with pytest.raises(ValueError):
        from_calls_to_execute_calldata([{"contractAddress": "0xA", "entrypoint": "", "calldata": []}])


felts = st.integers(min_value=0, max_value=2**251).map(str)
calls_strategy = st.lists(
    st.builds(
        Call,
        contractAddress=st.integers(min_value=1, max_value=2**251).map(hex),
        entrypoint=st.sampled_from(["transfer", "approve", "mint", "burn"]),
        calldata=st.lists(felts, max_size=6),
    ),
    max_size=6,
)


@settings(max_examples=100)
@given(calls=calls_strategy)
def test_layout_properties(calls):
    calldata = from_calls_to_execute_calldata(calls)

    assert to_int(calldata[0]) == len(calls)

    headers = calldata[1:1 + 4 * len(calls)]
    data = calldata[1 + 4 * len(calls):]
    expected_offset = 0
    for index, call in enumerate(calls):
        address, selector, offset, length = headers[4 * index:4 * index + 4]
        assert address == call.contract_address
        assert to_int(selector) == get_selector_from_name(call.entrypoint)
        assert to_int(offset) == expected_offset
        assert to_int(length) == len(call.calldata)
        assert data[to_int(offset):to_int(offset) + to_int(length)] == list(call.calldata)
        expected_offset += len(call.calldata)

    assert len(data) == expected_offset
