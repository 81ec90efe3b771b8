"""
One rebuild, start to finish:
    - check both contracts are deployed
    - read root, round and reward from the distributor
    - scan the trailing block window for mints
    - build the claims tree for the current round
    - compare against what the stores serve and what the chain holds
    - write stale stores, push the root if the chain needs it
    - report
Safe to trigger as often as you like: every step re-reads the chain and the stores.
"""

import logging
import time
from typing import Optional

from mintdrop.merkle import build_payload
from mintdrop.models import DistributorState, RebuildConfig, RebuildResult
from mintdrop.publisher import Publisher
from mintdrop.queries import Chain, Distributor, ensure_deployed, get_minters
from mintdrop.reconcile import Action, decide
from mintdrop.reporter import RunReport
from mintdrop.storage import ArtifactStore, stores_from_config

logger = logging.getLogger(__name__)


def current_round(round_seconds: int, now: Optional[float] = None) -> int:
    """Rounds are consecutive `round_seconds` buckets of unix time"""
    now = time.time() if now is None else now
    return int(now // round_seconds)


def reward_for_round(
    onchain: DistributorState, config: RebuildConfig, report: RunReport
) -> int:
    if onchain.rewardAmount > 0:
        return onchain.rewardAmount
    fallback = config.fallback_reward_wei
    report.warn(
        f"On-chain rewardAmount is 0; using fallback {fallback} wei from REWARD_AMOUNT "
        "(claims will only succeed if the contract expects the same amount)"
    )
    return fallback


def rebuild_and_push(
    config: RebuildConfig,
    chain: Optional[Chain] = None,
    distributor: Optional[Distributor] = None,
    stores: Optional[list[ArtifactStore]] = None,
    now: Optional[float] = None,
    backoff: float = 1.0,
) -> RebuildResult:
    """
    Raises only for hard failures: a contract missing at its address or a failed log scan.
    Everything else, including a failed push, is reported in the returned result.
    """
    chain = chain or Chain.from_url(config.rpc_url)
    distributor = distributor or Distributor(
        chain.w3, config.distributor_address, config.receipt_timeout
    )
    stores = stores_from_config(config) if stores is None else stores
    report = RunReport()

    ensure_deployed(chain, config.distributor_address, "distributor")
    onchain = distributor.read_state()
    amount = reward_for_round(onchain, config, report)

    minters = get_minters(
        chain,
        config.nft_address,
        config.blocks_per_window,
        config.max_block_range,
        config.scan_retries,
        backoff,
    )
    payload = build_payload(minters, amount, current_round(config.round_seconds, now))
    logger.info(
        "round %s: %s claims, root %s", payload.round, len(payload.claims), payload.root
    )

    publisher = Publisher(stores, distributor, config.signer, report)
    if not stores:
        report.warn("No storage destination configured; artifact was not published")

    decision = decide(payload, publisher.read_published(), onchain)
    logger.info(
        "decision: %s, stale stores: %s", decision.action.value, decision.stale_stores
    )
    publisher.publish_artifact(payload, decision)

    if decision.action == Action.EMPTY:
        return report.finish(payload, onchain, "empty")
    if not decision.push:
        return report.finish(payload, onchain, "unchanged")

    outcome = publisher.push_root(payload)
    return report.finish(
        payload,
        onchain,
        outcome.reason,
        updated=outcome.updated,
        tx_hash=outcome.tx_hash,
        error=outcome.error,
    )
