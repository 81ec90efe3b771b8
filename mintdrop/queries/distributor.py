from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from eth_utils import encode_hex, to_bytes
from multicall import Call, Multicall  # type: ignore
from web3 import Web3

from mintdrop.models import DistributorState, EthereumAddress, HexBytes32, Signer

logger = logging.getLogger(__name__)

# simplified ABI containing just the fragments we use
DISTRIBUTOR_ABI = [
    {
        "inputs": [],
        "name": "token",
        "outputs": [{"internalType": "address", "name": "", "type": "address"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "merkleRoot",
        "outputs": [{"internalType": "bytes32", "name": "", "type": "bytes32"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "round",
        "outputs": [{"internalType": "uint64", "name": "", "type": "uint64"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [],
        "name": "rewardAmount",
        "outputs": [{"internalType": "uint256", "name": "", "type": "uint256"}],
        "stateMutability": "view",
        "type": "function",
    },
    {
        "inputs": [
            {"internalType": "bytes32", "name": "newRoot", "type": "bytes32"},
            {"internalType": "uint64", "name": "newRound", "type": "uint64"},
        ],
        "name": "setRoot",
        "outputs": [],
        "stateMutability": "nonpayable",
        "type": "function",
    },
]


@dataclass
class TxOutcome:
    """What came back from a single `setRoot` submission"""

    tx_hash: Optional[str]
    success: bool
    error: Optional[str] = None


class Distributor:
    def __init__(self, w3: Web3, address: EthereumAddress, receipt_timeout: int = 120):
        self.w3 = w3
        self.address = address
        self.receipt_timeout = receipt_timeout
        self.contract = w3.eth.contract(address=address, abi=DISTRIBUTOR_ABI)  # type: ignore

    def read_state(self) -> DistributorState:
        """
        The reads have no ordering dependency on each other,
        so they go out as a single multicall
        """
        calls = [
            Call(self.address, ["token()(address)"], [["token", None]]),
            Call(self.address, ["merkleRoot()(bytes32)"], [["merkleRoot", None]]),
            Call(self.address, ["round()(uint64)"], [["round", None]]),
            Call(self.address, ["rewardAmount()(uint256)"], [["rewardAmount", None]]),
        ]

        # Immediately execute the multicall
        state = DistributorState(**Multicall(calls, _w3=self.w3)())
        logger.info(
            "distributor %s: root=%s round=%s reward=%s",
            self.address,
            state.merkleRoot,
            state.round,
            state.rewardAmount,
        )
        return state

    def set_root(self, signer: Signer, root: HexBytes32, round: int) -> TxOutcome:
        """
        Submit `setRoot` and wait for the receipt. Never retried here:
        the next rebuild re-reads the chain and decides again.
        """
        account = signer.account
        tx = self.contract.functions.setRoot(
            to_bytes(hexstr=root), round
        ).build_transaction(
            {
                "from": account.address,
                "nonce": self.w3.eth.get_transaction_count(account.address),
            }
        )
        signed = account.sign_transaction(tx)
        tx_hash = encode_hex(self.w3.eth.send_raw_transaction(signed.raw_transaction))
        logger.info("setRoot(%s, %s) sent in %s", root, round, tx_hash)

        receipt = self.w3.eth.wait_for_transaction_receipt(
            tx_hash, timeout=self.receipt_timeout  # type: ignore
        )
        if receipt["status"] != 1:
            return TxOutcome(tx_hash, False, f"setRoot reverted in {tx_hash}")
        return TxOutcome(tx_hash, True)
