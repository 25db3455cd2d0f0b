"""
Signer abstraction for Starknet accounts.

The SDK never handles private keys itself. Accounts sign through any object
that satisfies the Signer protocol, e.g. a wrapper around a hardware wallet,
a remote signing service or a local Stark-curve key pair.
"""
from typing import Any, Callable, Dict, List, Protocol, Sequence

from .utils import FeltLike, to_hex

# Signature sent with estimate-only transactions; the node skips validation
PLACEHOLDER_SIGNATURE = ("0x0", "0x0")


class Signer(Protocol):
    """Protocol for custom signers"""
    public_key: str

    def sign_transaction(self, transaction: Dict[str, Any]) -> List[str]:
        """Sign a transaction payload and return the signature felts"""
        ...


def placeholder_signature() -> List[str]:
    return list(PLACEHOLDER_SIGNATURE)


class CallableSigner:
    """
    Signer backed by a signing function.

    Args:
        public_key: Stark public key of the account
        sign: Function taking the transaction payload and returning the
            signature felts, typically (r, s)
    """

    def __init__(self, public_key: FeltLike, sign: Callable[[Dict[str, Any]], Sequence[FeltLike]]):
        self.public_key = to_hex(public_key)
        self._sign = sign

    def sign_transaction(self, transaction: Dict[str, Any]) -> List[str]:
        return [to_hex(part) for part in self._sign(transaction)]
