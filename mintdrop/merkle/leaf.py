"""
Claim leaf encoding shared with the on-chain verifier:

    keccak256(abi.encodePacked(address account, uint256 amount, uint64 round))

20 + 32 + 8 bytes, no padding. Changing the order, a width or the hash
invalidates every proof ever issued and needs a contract upgrade.
"""

from eth_abi.packed import encode_packed
from eth_utils import keccak, to_checksum_address

from mintdrop.models import EthereumAddress

LEAF_TYPES = ["address", "uint256", "uint64"]


def encode_leaf(account: EthereumAddress, amount: int, round: int) -> bytes:
    """The 60 byte packed preimage of a leaf"""
    if not 0 <= amount < 2**256:
        raise ValueError(f"amount out of uint256 range: {amount}")
    if not 0 <= round < 2**64:
        raise ValueError(f"round out of uint64 range: {round}")
    return encode_packed(LEAF_TYPES, [to_checksum_address(account), amount, round])


def leaf_hash(account: EthereumAddress, amount: int, round: int) -> bytes:
    return keccak(encode_leaf(account, amount, round))
