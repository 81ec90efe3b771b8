from __future__ import annotations

from decimal import Decimal, InvalidOperation, localcontext
from typing import Literal, Optional, Union

import eth_utils as eth
from eth_account import Account as EthAccount
from eth_keys.exceptions import ValidationError as KeyValidationError
from pydantic import BaseModel, SecretStr, field_validator, model_validator

from mintdrop.errors import BadConfigException
from mintdrop.models.types import EthereumAddress


class ERROR_MESSAGES:
    BAD_ADDRESS = "Not a valid contract address"
    MISSING_RPC = "Missing RPC endpoint"
    BAD_WINDOW = "Block window must be positive"
    BAD_RANGE = "Max block range must be positive"
    BAD_REWARD = "Fallback reward amount is not a positive number"
    BAD_KEY = "Private key is not a valid secp256k1 key"
    NO_STORAGE = "Blob store needs a key to write to"
    NO_CLAIMS_URL = "Blob store needs CLAIMS_URL to read back the live artifact"


class NoSigner(BaseModel):
    """Report-only mode: proofs are written but the root is never pushed"""

    kind: Literal["none"] = "none"


class Signer(BaseModel):
    """An account allowed to call `setRoot` on the distributor"""

    kind: Literal["key"] = "key"
    private_key: SecretStr

    @field_validator("private_key")
    @classmethod
    def validate_key(cls, key: SecretStr) -> SecretStr:
        try:
            EthAccount.from_key(key.get_secret_value())
        except (ValueError, TypeError, KeyValidationError):
            # never echo the key itself
            raise BadConfigException(ERROR_MESSAGES.BAD_KEY) from None
        return key

    @property
    def account(self):
        return EthAccount.from_key(self.private_key.get_secret_value())

    @property
    def address(self) -> EthereumAddress:
        return self.account.address


SignerConfig = Union[NoSigner, Signer]


def to_signer(private_key: Optional[str]) -> SignerConfig:
    if not private_key:
        return NoSigner()
    return Signer(private_key=private_key)


class RebuildConfig(BaseModel):
    """
    Everything one rebuild needs. Passed explicitly to `rebuild_and_push`.

    :param `blocks_per_window`: trailing window scanned for mints (~1h on Sepolia at 12s blocks)
    :param `max_block_range`: largest inclusive block span sent in a single eth_getLogs
    :param `round_seconds`: a round is `unix_time // round_seconds`
    :param `reward_amount`: human-unit reward used only when the distributor reports 0
    :param `local_path`: write the artifact here, None disables the local store
    :param `blob_token`: enables the remote blob store
    :param `claims_url`: public URL the remote artifact is read back from
    """

    rpc_url: str
    nft_address: EthereumAddress
    distributor_address: EthereumAddress

    blocks_per_window: int = 300
    max_block_range: int = 500
    scan_retries: int = 2
    round_seconds: int = 3600

    reward_amount: str = "5"
    reward_decimals: int = 18

    signer: SignerConfig = NoSigner()

    local_path: Optional[str] = "public/claims/current.json"
    blob_token: Optional[SecretStr] = None
    blob_key: str = "claims/current.json"
    blob_api_url: str = "https://blob.vercel-storage.com"
    claims_url: Optional[str] = None

    receipt_timeout: int = 120

    @field_validator("rpc_url")
    @classmethod
    def validate_rpc(cls, url: str) -> str:
        if not url:
            raise BadConfigException(ERROR_MESSAGES.MISSING_RPC)
        return url

    @field_validator("nft_address", "distributor_address")
    @classmethod
    def checksum_contract(cls, addr: str) -> EthereumAddress:
        if not addr or not eth.is_address(addr):
            raise BadConfigException(f"{ERROR_MESSAGES.BAD_ADDRESS}: {addr!r}")
        return eth.to_checksum_address(addr)

    @field_validator("blocks_per_window")
    @classmethod
    def validate_window(cls, window: int) -> int:
        if window <= 0:
            raise BadConfigException(ERROR_MESSAGES.BAD_WINDOW)
        return window

    @field_validator("max_block_range")
    @classmethod
    def validate_range(cls, max_range: int) -> int:
        if max_range <= 0:
            raise BadConfigException(ERROR_MESSAGES.BAD_RANGE)
        return max_range

    @field_validator("reward_amount")
    @classmethod
    def validate_reward(cls, reward: str) -> str:
        try:
            amount = Decimal(reward)
            valid = amount.is_finite() and amount > 0
        except InvalidOperation:
            valid = False
        if not valid:
            raise BadConfigException(f"{ERROR_MESSAGES.BAD_REWARD}: {reward!r}")
        return reward

    @model_validator(mode="after")
    def ensure_blob_key(self) -> RebuildConfig:
        if self.blob_token is not None and not self.blob_key:
            raise BadConfigException(ERROR_MESSAGES.NO_STORAGE)
        if self.blob_token is not None and not self.claims_url:
            raise BadConfigException(ERROR_MESSAGES.NO_CLAIMS_URL)
        return self

    @property
    def fallback_reward_wei(self) -> int:
        # uint256 needs 78 significant digits
        with localcontext() as ctx:
            ctx.prec = 78
            return int(Decimal(self.reward_amount) * Decimal(10) ** self.reward_decimals)

    @property
    def can_push(self) -> bool:
        return isinstance(self.signer, Signer)
