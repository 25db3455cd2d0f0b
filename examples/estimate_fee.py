#!/usr/bin/env python3
"""
Example of estimating the fee of a multicall before sending it.
"""
import os

from starknet_rpc_sdk import (
    Account,
    Call,
    CallableSigner,
    FeeEstimationError,
    NetworkConfig,
    RpcProvider,
)
from starknet_rpc_sdk.signer import placeholder_signature

ETH_ADDRESS = "0x49d36570d4e46f48e99674bd3fcc84644ddd6b96f7c741b1562b82f9e004dc7"


def main():
    """
    Estimate an approve + transfer multicall on a configured network.

    The network is chosen with NETWORK (default: testnet); its RPC URL can be
    overridden with <NETWORK>_RPC_URL.
    """
    NETWORK = os.environ.get("NETWORK", "testnet")
    ACCOUNT_ADDRESS = os.environ.get("ACCOUNT_ADDRESS")
    RECIPIENT = os.environ.get("RECIPIENT", "0x1")

    if not ACCOUNT_ADDRESS:
        print("ERROR: ACCOUNT_ADDRESS environment variable is required")
        return

    print("Available networks:")
    for network_name in NetworkConfig.load_networks():
        print(f"  - {network_name}")

    with RpcProvider.from_network(NETWORK) as provider:
        # Estimates are sent with a placeholder signature, no key is needed
        account = Account(provider, ACCOUNT_ADDRESS, CallableSigner("0x0", lambda tx: placeholder_signature()))
        calls = [
            Call(contract_address=ETH_ADDRESS, entrypoint="approve", calldata=[RECIPIENT, "1000", "0"]),
            Call(contract_address=ETH_ADDRESS, entrypoint="transfer", calldata=[RECIPIENT, "1000", "0"]),
        ]

        nonce = provider.get_nonce(ACCOUNT_ADDRESS)
        try:
            estimate = account.get_estimate_fee(calls, nonce)
        except FeeEstimationError as e:
            print(f"Estimation failed: {e}")
            return

        print(f"Overall fee: {estimate.overall_fee} wei")
        print(f"Gas consumed: {estimate.gas_consumed} at {estimate.gas_price} wei")


if __name__ == "__main__":
    main()
