from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from mintdrop.models import DistributorState, ProofsPayload


class Action(str, Enum):
    """
    :state EMPTY: nobody minted this window, the distributor is never touched
    :state UNCHANGED: every store already holds this (round, root) and the chain agrees
    :state NEEDS_ARTIFACT_UPDATE: at least one store is missing or stale
    :state NEEDS_ONCHAIN_PUSH: the distributor root differs, or its round is older
    """

    EMPTY = "empty"
    UNCHANGED = "unchanged"
    NEEDS_ARTIFACT_UPDATE = "needs_artifact_update"
    NEEDS_ONCHAIN_PUSH = "needs_onchain_push"


@dataclass
class Decision:
    action: Action
    stale_stores: list[str] = field(default_factory=list)
    push: bool = False

    @property
    def write_artifact(self) -> bool:
        return len(self.stale_stores) > 0


def stale_stores(
    payload: ProofsPayload, published: dict[str, Optional[ProofsPayload]]
) -> list[str]:
    """Stores whose artifact is unknown or was published under another (round, root)"""
    return [name for name, current in published.items() if not payload.same_as(current)]


def decide(
    payload: ProofsPayload,
    published: dict[str, Optional[ProofsPayload]],
    onchain: DistributorState,
) -> Decision:
    """
    Classify what this rebuild has to do. Storage and chain are compared separately,
    so an artifact that is already live never blocks a push the chain still needs.

    :param `published`: store name -> artifact read from it, None when unknown or unreadable
    """
    stale = stale_stores(payload, published)

    if payload.is_empty:
        # an empty round must never overwrite a populated on-chain root
        return Decision(Action.EMPTY, stale, push=False)

    if onchain.needs_push(payload.root, payload.round):
        return Decision(Action.NEEDS_ONCHAIN_PUSH, stale, push=True)

    if stale:
        return Decision(Action.NEEDS_ARTIFACT_UPDATE, stale, push=False)

    return Decision(Action.UNCHANGED)
