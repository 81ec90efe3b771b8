from pydantic import BaseModel, field_validator
import eth_utils as eth

from mintdrop.models.types import BigNumber, EthereumAddress, HexBytes32
from mintdrop.models.Claim import to_bytes32_hex


class DistributorState(BaseModel):
    """
    Read-only snapshot of the distributor contract.
    Owned by the contract, this code only ever asks for a `setRoot`.
    """

    merkleRoot: HexBytes32
    round: int
    rewardAmount: int
    token: EthereumAddress | None = None

    @field_validator("merkleRoot", mode="before")
    @classmethod
    def normalize_root(cls, root):
        return to_bytes32_hex(root)

    @field_validator("token")
    @classmethod
    def checksum_token(cls, addr):
        return eth.to_checksum_address(addr) if addr else None

    def needs_push(self, root: HexBytes32, round: int) -> bool:
        """
        Root changes always push. Round alone only pushes when strictly newer,
        so a recomputation inside the same round never re-sends an identical root.
        """
        return root.lower() != self.merkleRoot.lower() or round > self.round

    @property
    def reward(self) -> BigNumber:
        return str(self.rewardAmount)
