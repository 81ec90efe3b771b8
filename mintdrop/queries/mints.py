import logging
import time
from typing import Any, Callable, TypeVar

import requests
from eth_utils import encode_hex, keccak, to_checksum_address
from hexbytes import HexBytes
from web3.exceptions import Web3Exception

from mintdrop.errors import ScanError, TooManyLoopsError
from mintdrop.models import EthereumAddress
from mintdrop.queries.chain import Chain, ensure_deployed

"""
A mint is an ERC-721 `Transfer` whose indexed `from` is the zero address.
We filter on the topics instead of fetching transactions, then read the
recipient out of the third topic.
"""

logger = logging.getLogger(__name__)

TRANSFER_TOPIC = encode_hex(keccak(text="Transfer(address,address,uint256)"))
ZERO_TOPIC = "0x" + "00" * 32

# errors a node or its transport can raise for a single eth_getLogs
RETRYABLE_ERRORS = (Web3Exception, requests.RequestException, ValueError, OSError)

# python insantiates generics separate to function definition
T = TypeVar("T")


def block_ranges(
    from_block: int, to_block: int, max_range: int, max_loops: int = 100_000
) -> list[tuple[int, int]]:
    """
    Split the inclusive range [from_block, to_block] into consecutive inclusive
    sub-ranges spanning at most `max_range` blocks each.
    """
    if max_range <= 0:
        raise ValueError("max_range must be positive")
    ranges = []
    start = from_block
    while start <= to_block:
        if len(ranges) >= max_loops:
            raise TooManyLoopsError("block_ranges")
        end = min(start + max_range - 1, to_block)
        ranges.append((start, end))
        start = end + 1
    return ranges


def fetch_chunked(
    fetch: Callable[[int, int], list[T]],
    from_block: int,
    to_block: int,
    max_range: int,
    retries: int = 2,
    backoff: float = 1.0,
) -> list[T]:
    """
    Providers cap the block span of a log query, so fetch each sub-range separately
    and concatenate. Each sub-range gets `retries` extra attempts; if it still fails
    the whole fetch raises, a partial result is never returned.
    """
    results: list[T] = []
    for start, end in block_ranges(from_block, to_block, max_range):
        attempt = 0
        while True:
            try:
                results += fetch(start, end)
                break
            except RETRYABLE_ERRORS as e:
                if attempt >= retries:
                    raise ScanError(
                        f"Log query for blocks {start}-{end} failed "
                        f"after {attempt + 1} attempts: {e}"
                    ) from e
                attempt += 1
                logger.warning(
                    "log query %s-%s failed (%s), retry %s/%s",
                    start,
                    end,
                    e,
                    attempt,
                    retries,
                )
                time.sleep(backoff * attempt)
    return results


def recipient_from_log(log: Any) -> EthereumAddress:
    """topics = [signature, from, to], the address is the low 20 bytes of `to`"""
    topics = log["topics"]
    if len(topics) < 3:
        raise ValueError(f"Transfer log without an indexed recipient: {topics}")
    return to_checksum_address(HexBytes(topics[2])[-20:])


def get_mint_logs(
    chain: Chain,
    nft: EthereumAddress,
    from_block: int,
    to_block: int,
    max_range: int,
    retries: int = 2,
    backoff: float = 1.0,
) -> list[Any]:
    def fetch(start: int, end: int) -> list[Any]:
        return chain.get_logs(
            {
                "address": nft,
                "fromBlock": start,
                "toBlock": end,
                "topics": [TRANSFER_TOPIC, ZERO_TOPIC],
            }
        )

    return fetch_chunked(fetch, from_block, to_block, max_range, retries, backoff)


def unique_sorted(addresses: list[EthereumAddress]) -> list[EthereumAddress]:
    """Checksum, dedupe and order by numeric address value"""
    checksummed = {to_checksum_address(a) for a in addresses}
    return sorted(checksummed, key=lambda a: int(a, 16))


def get_minters(
    chain: Chain,
    nft: EthereumAddress,
    window: int,
    max_range: int = 500,
    retries: int = 2,
    backoff: float = 1.0,
) -> list[EthereumAddress]:
    """
    Recipients of every mint in the trailing `window` blocks up to the current head,
    deduplicated and sorted so the tree does not depend on log delivery order.
    """
    ensure_deployed(chain, nft, "NFT")

    to_block = chain.block_number()
    from_block = max(0, to_block - window)
    logger.info("scanning mints on %s from block %s to %s", nft, from_block, to_block)

    logs = get_mint_logs(
        chain, nft, from_block, to_block, max_range, retries, backoff
    )

    minters = unique_sorted([recipient_from_log(log) for log in logs])
    logger.info("found %s logs, %s unique minters", len(logs), len(minters))
    return minters
