from itertools import zip_longest
from typing import Optional

from eth_utils import encode_hex, keccak

from mintdrop.models import EMPTY_ROOT, HexBytes32


def combined_hash(a: Optional[bytes], b: Optional[bytes]) -> bytes:
    """
    Sorted-pair combine. An unmatched node (`None` sibling) is carried up as is,
    never duplicated, which is the `merkletreejs` `sortPairs: true` layout the
    distributor's proofs are checked against.
    """
    if a is None:
        return b
    if b is None:
        return a
    return keccak(b"".join(sorted([a, b])))


class MerkleTree:
    """
    Binary keccak256 tree over leaves in the order given.
    Leaves are not sorted here, callers pass them in eligible-set order.
    """

    def __init__(self, leaves: list[bytes]):
        for leaf in leaves:
            if len(leaf) != 32:
                raise ValueError(f"leaf must be 32 bytes, got {len(leaf)}")
        self.leaves = list(leaves)
        self.layers = MerkleTree.get_layers(self.leaves) if self.leaves else []

    @property
    def root(self) -> HexBytes32:
        if not self.layers:
            return EMPTY_ROOT
        return encode_hex(self.layers[-1][0])

    def __len__(self) -> int:
        return len(self.leaves)

    def get_proof(self, index: int) -> list[HexBytes32]:
        """Sibling hashes from leaf `index` to the root"""
        if not 0 <= index < len(self.leaves):
            raise IndexError(f"no leaf at index {index}")
        proof = []
        for layer in self.layers[:-1]:
            pair_idx = index + 1 if index % 2 == 0 else index - 1
            # last node of an odd layer has no sibling at this level
            if pair_idx < len(layer):
                proof.append(encode_hex(layer[pair_idx]))
            index //= 2
        return proof

    def get_proofs(self) -> list[list[HexBytes32]]:
        return [self.get_proof(i) for i in range(len(self.leaves))]

    @staticmethod
    def get_layers(leaves: list[bytes]) -> list[list[bytes]]:
        layers = [leaves]
        while len(layers[-1]) > 1:
            layers.append(MerkleTree.get_next_layer(layers[-1]))
        return layers

    @staticmethod
    def get_next_layer(nodes: list[bytes]) -> list[bytes]:
        return [
            combined_hash(a, b) for a, b in zip_longest(nodes[::2], nodes[1::2])
        ]


def verify_proof(leaf: bytes, proof: list[HexBytes32], root: HexBytes32) -> bool:
    """Re-derive the root from a leaf and its proof, as the distributor does"""
    computed = leaf
    for sibling in proof:
        computed = combined_hash(computed, bytes.fromhex(sibling[2:]))
    return encode_hex(computed) == root.lower()
