import logging
from dataclasses import dataclass
from typing import Optional

import requests
from web3.exceptions import Web3Exception

from mintdrop.models import (
    NoSigner,
    ProofsPayload,
    Reason,
    Signer,
    SignerConfig,
)
from mintdrop.queries import Distributor
from mintdrop.reconcile import Decision
from mintdrop.reporter import RunReport
from mintdrop.storage import ArtifactStore

logger = logging.getLogger(__name__)

STORAGE_ERRORS = (requests.RequestException, OSError, ValueError)
TX_ERRORS = (Web3Exception, requests.RequestException, OSError, ValueError)


@dataclass
class PushOutcome:
    reason: Reason
    tx_hash: Optional[str] = None
    error: Optional[str] = None

    @property
    def updated(self) -> bool:
        return self.reason == "pushed"


class Publisher:
    """
    Side effects of a rebuild: artifact writes and the `setRoot` transaction.
    Nothing here raises for a failed destination, failures land in the report.
    """

    def __init__(
        self,
        stores: list[ArtifactStore],
        distributor: Distributor,
        signer: SignerConfig,
        report: RunReport,
    ):
        self.stores = stores
        self.distributor = distributor
        self.signer = signer
        self.report = report

    def read_published(self) -> dict[str, Optional[ProofsPayload]]:
        """
        What each store serves right now. An unreadable store counts as empty,
        which forces a rewrite rather than silently skipping one.
        """
        published: dict[str, Optional[ProofsPayload]] = {}
        for store in self.stores:
            try:
                published[store.name] = store.read()
            except STORAGE_ERRORS as e:
                self.report.warn(f"Reading current {store.name} artifact failed: {e}")
                published[store.name] = None
        return published

    def publish_artifact(self, payload: ProofsPayload, decision: Decision) -> None:
        for store in self.stores:
            if store.name not in decision.stale_stores:
                logger.info("%s already serves round %s", store.name, payload.round)
                continue
            try:
                self.report.wrote(store.write(payload))
            except STORAGE_ERRORS as e:
                self.report.warn(f"{store.name.capitalize()} write failed: {e}")

    def push_root(self, payload: ProofsPayload) -> PushOutcome:
        if isinstance(self.signer, NoSigner):
            self.report.warn("No signer configured; wrote proofs but skipped setRoot")
            return PushOutcome("no-signer")
        if isinstance(self.signer, Signer):
            return self._push_with(self.signer, payload)
        raise TypeError(f"Unknown signer type {type(self.signer).__name__}")

    def _push_with(self, signer: Signer, payload: ProofsPayload) -> PushOutcome:
        # a concurrent rebuild may have pushed since we first read the chain
        try:
            current = self.distributor.read_state()
        except TX_ERRORS as e:
            self.report.warn(f"Re-reading distributor before setRoot failed: {e}")
        else:
            if not current.needs_push(payload.root, payload.round):
                self.report.warn(
                    f"Distributor already holds root {payload.root} for round "
                    f"{current.round}; skipped setRoot"
                )
                return PushOutcome("unchanged")

        try:
            tx = self.distributor.set_root(signer, payload.root, payload.round)
        except TX_ERRORS as e:
            logger.error("setRoot failed: %s", e)
            return PushOutcome("push-failed", error=f"setRoot failed: {e}")

        if not tx.success:
            return PushOutcome("push-failed", tx.tx_hash, tx.error)
        return PushOutcome("pushed", tx.tx_hash)
