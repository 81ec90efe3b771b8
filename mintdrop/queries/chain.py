from __future__ import annotations

import logging
from typing import Any

from web3 import Web3

from mintdrop.errors import TargetNotFoundError
from mintdrop.models import EthereumAddress

logger = logging.getLogger(__name__)


class Chain:
    """Thin read surface over a node, swapped for a fake in tests"""

    def __init__(self, w3: Web3):
        self.w3 = w3

    @staticmethod
    def from_url(rpc_url: str) -> Chain:
        return Chain(Web3(Web3.HTTPProvider(rpc_url)))

    def block_number(self) -> int:
        return self.w3.eth.block_number

    def has_code(self, address: EthereumAddress) -> bool:
        return len(self.w3.eth.get_code(address)) > 0

    def get_logs(self, params: dict[str, Any]) -> list[Any]:
        return list(self.w3.eth.get_logs(params))  # type: ignore


def ensure_deployed(chain: Chain, address: EthereumAddress, label: str) -> None:
    """
    An address without bytecode would otherwise look exactly like a contract
    nobody interacted with, so fail before scanning anything.
    """
    if not chain.has_code(address):
        raise TargetNotFoundError(f"No contract bytecode for {label} at {address}")
    logger.debug("found %s bytecode at %s", label, address)
