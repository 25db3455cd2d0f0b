#!/usr/bin/env python3
"""
Example of declaring a contract class and deploying it on a local devnet.
"""
import json
import logging
import os
import sys

from starknet_rpc_sdk import (
    Account,
    CallableSigner,
    DeclareRejectedError,
    DeployFailedError,
    RpcProvider,
)
from starknet_rpc_sdk.signer import placeholder_signature


def sign(transaction):
    # Devnet accounts created without validation accept any signature.
    # Plug in a Stark-curve signer for other networks.
    return placeholder_signature()


def main():
    """
    Demonstrate the declare-and-deploy flow.

    Usage: declare_deploy.py <compiled_contract.json> <class_hash> [constructor args...]
    """
    logging.basicConfig(level=logging.INFO)

    if len(sys.argv) < 3:
        print(main.__doc__)
        return

    contract_path, class_hash, *constructor_args = sys.argv[1:]
    ACCOUNT_ADDRESS = os.environ.get("ACCOUNT_ADDRESS")
    PUBLIC_KEY = os.environ.get("PUBLIC_KEY", "0x0")

    if not ACCOUNT_ADDRESS:
        print("ERROR: ACCOUNT_ADDRESS environment variable is required")
        return

    with open(contract_path) as f:
        contract = json.load(f)

    with RpcProvider.from_network("devnet") as provider:
        account = Account(provider, ACCOUNT_ADDRESS, CallableSigner(PUBLIC_KEY, sign))

        try:
            response = account.declare_deploy(contract, class_hash, constructor_calldata=constructor_args)
        except DeclareRejectedError as e:
            print(f"Declare rejected: {e}")
            return
        except DeployFailedError as e:
            print(f"Deploy failed after declare {e.declare.transaction_hash}: {e}")
            return

        if response.declare.already_declared:
            print(f"Class {response.declare.class_hash} was already declared")
        else:
            print(f"Declare transaction: {response.declare.transaction_hash}")
        print(f"Deploy transaction: {response.deploy.transaction_hash}")
        print(f"Contract address: {response.deploy.contract_address}")

        receipt = provider.wait_for_transaction(response.deploy.transaction_hash, poll_interval=1)
        print(f"Deploy status: {receipt['status']}")


if __name__ == "__main__":
    main()
