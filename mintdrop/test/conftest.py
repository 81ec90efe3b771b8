import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import pytest
from eth_utils import to_checksum_address
from web3.exceptions import Web3RPCError

from mintdrop.models import (
    DistributorState,
    NoSigner,
    ProofsPayload,
    RebuildConfig,
    Signer,
    EMPTY_ROOT,
)
from mintdrop.queries import TRANSFER_TOPIC, ZERO_TOPIC, TxOutcome
from mintdrop.storage import ArtifactStore

STUBS = Path(__file__).parent / "stubs"

NFT = "0x5FbDB2315678afecb367f032d93F642f64180aa3"
DISTRIBUTOR = "0xe7f1725E7734CE288F8367e1Bb143E90bb3F0512"

# hardhat's first dev account, never holds real funds
DEV_KEY = "0xac0974bec39a17e36ba4a6b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"

ONE_TOKEN = 10**18
ROUND = 500_000
# any timestamp inside round 500000 of one hour
NOW = ROUND * 3600 + 1234


@pytest.fixture()
def ADDRESSES():
    return [
        to_checksum_address(a)
        for a in [
            "0x9bc33f6155eFAcc290c3C50E9B5b24b668562732",
            "0xfDe38ad4bBbeC867e6cb4Bb31FbFB2074c959A83",
            "0x8BB4C0b502f869af3B25166930507a6E8c3038D4",
            "0x7Ac54A0406FA2B465E0D57C66597BE83A4b149fC",
            "0xdeA708968f8dd520f5e2F0aB6785F28c98521ca8",
        ]
    ]


def mint_log(to: str, block: int, token_id: int = 1) -> dict[str, Any]:
    return {
        "blockNumber": block,
        "topics": [
            TRANSFER_TOPIC,
            ZERO_TOPIC,
            "0x" + "00" * 12 + to[2:].lower(),
            "0x" + hex(token_id)[2:].rjust(64, "0"),
        ],
    }


def load_mint_logs() -> tuple[int, list[dict[str, Any]]]:
    with open(STUBS / "mint-logs.json") as j:
        stub = json.load(j)
    return stub["head"], stub["logs"]


@dataclass
class FakeChain:
    """Stands in for `Chain`: serves logs from memory and records every query"""

    head: int = 1000
    logs: list[dict[str, Any]] = field(default_factory=list)
    deployed: set[str] = field(
        default_factory=lambda: {NFT.lower(), DISTRIBUTOR.lower()}
    )
    # (fromBlock, toBlock) -> number of times the query fails before answering
    failures: dict[tuple[int, int], int] = field(default_factory=dict)
    queries: list[tuple[int, int]] = field(default_factory=list)

    def block_number(self) -> int:
        return self.head

    def has_code(self, address: str) -> bool:
        return address.lower() in self.deployed

    def get_logs(self, params: dict[str, Any]) -> list[Any]:
        span = (params["fromBlock"], params["toBlock"])
        self.queries.append(span)
        if self.failures.get(span, 0) > 0:
            self.failures[span] -= 1
            raise Web3RPCError("query returned more than 10000 results")
        return [
            log
            for log in self.logs
            if span[0] <= log["blockNumber"] <= span[1]
            and log["topics"][:2] == params["topics"]
        ]


@dataclass
class FakeDistributor:
    """Stands in for `Distributor`: `setRoot` just updates the in-memory state"""

    state: DistributorState
    revert: bool = False
    raises: Optional[Exception] = None
    pushes: list[tuple[str, int]] = field(default_factory=list)
    reads: int = 0

    def read_state(self) -> DistributorState:
        self.reads += 1
        return self.state.model_copy()

    def set_root(self, signer: Signer, root: str, round: int) -> TxOutcome:
        if self.raises is not None:
            raise self.raises
        tx_hash = "0x" + f"{len(self.pushes) + 1:064x}"
        if self.revert:
            return TxOutcome(tx_hash, False, f"setRoot reverted in {tx_hash}")
        self.pushes.append((root, round))
        self.state = self.state.model_copy(update={"merkleRoot": root, "round": round})
        return TxOutcome(tx_hash, True)


@dataclass
class MemoryStore(ArtifactStore):
    name: str = "memory"
    current: Optional[ProofsPayload] = None
    fail_read: bool = False
    fail_write: bool = False
    writes: int = 0

    def read(self) -> Optional[ProofsPayload]:
        if self.fail_read:
            raise OSError("store unreachable")
        return self.current

    def write(self, payload: ProofsPayload) -> str:
        if self.fail_write:
            raise OSError("store is read only")
        self.writes += 1
        self.current = payload
        return f"memory://{self.name}"


@pytest.fixture
def chain() -> FakeChain:
    head, logs = load_mint_logs()
    return FakeChain(head=head, logs=logs)


@pytest.fixture
def onchain() -> DistributorState:
    return DistributorState(merkleRoot=EMPTY_ROOT, round=0, rewardAmount=ONE_TOKEN)


@pytest.fixture
def distributor(onchain: DistributorState) -> FakeDistributor:
    return FakeDistributor(onchain)


@pytest.fixture
def config() -> RebuildConfig:
    return RebuildConfig(
        rpc_url="http://localhost:8545",
        nft_address=NFT,
        distributor_address=DISTRIBUTOR,
        local_path=None,
        signer=Signer(private_key=DEV_KEY),
    )


@pytest.fixture
def config_no_signer(config: RebuildConfig) -> RebuildConfig:
    return config.model_copy(update={"signer": NoSigner()})
