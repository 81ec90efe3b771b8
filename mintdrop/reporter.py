import logging
from dataclasses import dataclass, field
from typing import Optional

from mintdrop.models import (
    DistributorState,
    ProofsPayload,
    Reason,
    RebuildResult,
)

logger = logging.getLogger(__name__)


@dataclass
class RunReport:
    """
    Collects what happened during one rebuild: non-fatal warnings and the
    storage locations actually written. Turned into the `RebuildResult` at the end.
    """

    warnings: list[str] = field(default_factory=list)
    locations: list[str] = field(default_factory=list)

    def warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

    def wrote(self, location: str) -> None:
        self.locations.append(location)

    def finish(
        self,
        payload: ProofsPayload,
        onchain: Optional[DistributorState],
        reason: Reason,
        updated: bool = False,
        tx_hash: Optional[str] = None,
        error: Optional[str] = None,
    ) -> RebuildResult:
        return RebuildResult(
            ok=True,
            updated=updated,
            reason=reason,
            count=len(payload.claims),
            round=payload.round,
            fileRoot=payload.root,
            onchainRoot=onchain.merkleRoot if onchain else None,
            txHash=tx_hash,
            storageLocations=list(self.locations),
            warnings=list(self.warnings),
            error=error,
        )


def failure(error: Exception) -> RebuildResult:
    """Shape a hard failure the same way as a normal result, for the trigger layer"""
    return RebuildResult(ok=False, updated=False, error=f"{type(error).__name__}: {error}")
