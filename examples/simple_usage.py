#!/usr/bin/env python3
"""
Simple example of querying a Starknet node with the SDK.
"""
import os

from starknet_rpc_sdk import Call, RpcProvider, decode_short_string

# ETH token contract on Starknet
ETH_ADDRESS = "0x49d36570d4e46f48e99674bd3fcc84644ddd6b96f7c741b1562b82f9e004dc7"


def main():
    """
    Demonstrate basic usage of the RpcProvider.

    This example shows how to:
    1. Connect to a node
    2. Read chain and block information
    3. Call a view function of a contract
    """
    RPC_URL = os.environ.get("RPC_URL", "https://starknet-goerli.public.blastapi.io")
    HOLDER = os.environ.get("HOLDER_ADDRESS")

    with RpcProvider(RPC_URL) as provider:
        chain_id = provider.get_chain_id()
        print(f"Chain: {decode_short_string(chain_id)} ({chain_id})")

        head = provider.get_block_hash_and_number()
        print(f"Latest block: {head.block_number} {head.block_hash}")
        print(f"Transactions in latest block: {provider.get_transaction_count('latest')}")

        if not HOLDER:
            print("Set HOLDER_ADDRESS to query an ETH balance")
            return

        low, high = provider.call_contract(
            Call(contract_address=ETH_ADDRESS, entrypoint="balanceOf", calldata=[HOLDER]),
            block_identifier="latest",
        )
        # Uint256 is returned as (low, high)
        balance = int(low, 16) + (int(high, 16) << 128)
        print(f"ETH balance of {HOLDER}: {balance / 10**18}")


if __name__ == "__main__":
    main()
