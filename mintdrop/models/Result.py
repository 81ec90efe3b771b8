from typing import Optional
from pydantic import BaseModel

from mintdrop.models.types import HexBytes32, Reason, EMPTY_ROOT


class RebuildResult(BaseModel):
    """
    The only value handed back to the trigger (CLI, HTTP handler).
    :param `ok`: false only for a hard failure caught by the caller
    :param `updated`: whether the on-chain root was changed by this run
    :param `storageLocations`: destinations actually written this run
    :param `error`: why the push failed (`reason` is "push-failed") or why the run aborted
    """

    ok: bool
    updated: bool
    reason: Optional[Reason] = None
    count: int = 0
    round: int = 0
    fileRoot: HexBytes32 = EMPTY_ROOT
    onchainRoot: Optional[HexBytes32] = None
    txHash: Optional[str] = None
    storageLocations: list[str] = []
    warnings: list[str] = []
    error: Optional[str] = None
