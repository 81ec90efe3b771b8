from __future__ import annotations

import re

import eth_utils as eth
from pydantic import BaseModel, field_validator

from mintdrop.models.types import BigNumber, EthereumAddress, HexBytes32, EMPTY_ROOT

_BYTES32 = re.compile(r"^0x[0-9a-f]{64}$")
_UINT = re.compile(r"^[0-9]+$")


def to_bytes32_hex(value: str | bytes) -> HexBytes32:
    """Normalize a 32 byte hash (hex string or raw bytes) to lowercase 0x-hex"""
    if isinstance(value, (bytes, bytearray)):
        value = eth.encode_hex(value)
    value = eth.add_0x_prefix(value.lower())
    if not _BYTES32.fullmatch(value):
        raise ValueError(f"Not a 32 byte hash: {value}")
    return value


class ClaimEntry(BaseModel):
    """
    A single claim in the published artifact
    :param `account`: checksummed recipient
    :param `amount`: reward in wei, as a decimal string
    :param `proof`: sibling hashes from the leaf up to the root
    """

    account: EthereumAddress
    amount: BigNumber
    proof: list[HexBytes32] = []

    @field_validator("account")
    @classmethod
    def checksum_address(cls, input: str):
        return eth.to_checksum_address(input)

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, amount: str):
        if not _UINT.fullmatch(amount) or int(amount) >= 2**256:
            raise ValueError(f"Amount must be a uint256 decimal string, got {amount}")
        return str(int(amount))

    @field_validator("proof")
    @classmethod
    def normalize_proof(cls, proof: list[str]):
        return [to_bytes32_hex(p) for p in proof]


class ProofsPayload(BaseModel):
    """
    The artifact served to claimants. Immutable once published under a (round, root) pair.
    """

    round: int
    root: HexBytes32
    claims: list[ClaimEntry] = []

    @field_validator("round")
    @classmethod
    def validate_round(cls, round: int):
        if round < 0 or round >= 2**64:
            raise ValueError(f"Round out of uint64 range: {round}")
        return round

    @field_validator("root")
    @classmethod
    def normalize_root(cls, root: str):
        return to_bytes32_hex(root)

    @field_validator("claims")
    @classmethod
    def unique_accounts(cls, claims: list[ClaimEntry]):
        accounts = [c.account for c in claims]
        if len(set(accounts)) != len(accounts):
            raise ValueError("Duplicate account in claims")
        return claims

    @property
    def is_empty(self) -> bool:
        return len(self.claims) == 0

    def same_as(self, other: ProofsPayload | None) -> bool:
        """True if `other` was published under the same (round, root) pair"""
        return (
            other is not None and other.round == self.round and other.root == self.root
        )

    def to_json(self) -> str:
        return self.model_dump_json(indent=2)

    @staticmethod
    def empty(round: int) -> ProofsPayload:
        return ProofsPayload(round=round, root=EMPTY_ROOT, claims=[])
