from unittest.mock import MagicMock

import pytest
from web3.exceptions import TimeExhausted

from mintdrop.merkle import build_payload
from mintdrop.models import Signer
from mintdrop.publisher import Publisher
from mintdrop.queries import Distributor
from mintdrop.queries.distributor import TxOutcome
from mintdrop.reporter import RunReport
from mintdrop.test.conftest import DEV_KEY, DISTRIBUTOR, NFT, ONE_TOKEN, ROUND

ROOT = "0x" + "ab" * 32
TX_HASH = "0x" + "12" * 32


class FakeMulticall:
    """Answers every read from `state`, records the calls it was given"""

    state: dict = {}
    calls: list = []

    def __init__(self, calls, _w3):
        FakeMulticall.calls = calls

    def __call__(self):
        return dict(FakeMulticall.state)


@pytest.fixture
def multicall(monkeypatch):
    FakeMulticall.state = {
        "token": NFT.lower(),
        "merkleRoot": bytes.fromhex("00" * 32),
        "round": 0,
        "rewardAmount": ONE_TOKEN,
    }
    monkeypatch.setattr("mintdrop.queries.distributor.Multicall", FakeMulticall)
    return FakeMulticall


@pytest.fixture
def w3():
    w3 = MagicMock()
    w3.eth.get_transaction_count.return_value = 0
    w3.eth.send_raw_transaction.return_value = bytes.fromhex(TX_HASH[2:])
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 1}
    return w3


@pytest.fixture
def contract(w3):
    contract = w3.eth.contract.return_value
    contract.functions.setRoot.return_value.build_transaction.return_value = {
        "to": DISTRIBUTOR,
        "value": 0,
        "gas": 100_000,
        "gasPrice": 10**9,
        "nonce": 0,
        "chainId": 11155111,
        "data": "0x",
    }
    return contract


@pytest.fixture
def signer():
    return Signer(private_key=DEV_KEY)


def test_read_state_maps_multicall_result(w3, multicall):
    multicall.state["merkleRoot"] = bytes.fromhex("ab" * 32)
    multicall.state["round"] = 7

    state = Distributor(w3, DISTRIBUTOR).read_state()

    assert state.merkleRoot == ROOT
    assert state.round == 7
    assert state.rewardAmount == ONE_TOKEN
    assert state.token == NFT
    assert [c.returns[0][0] for c in multicall.calls] == [
        "token",
        "merkleRoot",
        "round",
        "rewardAmount",
    ]


def test_set_root_sends_signed_tx(w3, contract, signer):
    outcome = Distributor(w3, DISTRIBUTOR).set_root(signer, ROOT, ROUND)

    assert outcome == TxOutcome(TX_HASH, True)
    contract.functions.setRoot.assert_called_once_with(bytes.fromhex("ab" * 32), ROUND)
    tx_params = contract.functions.setRoot.return_value.build_transaction.call_args[0][0]
    assert tx_params["from"] == signer.address
    w3.eth.send_raw_transaction.assert_called_once()
    assert w3.eth.wait_for_transaction_receipt.call_args.kwargs["timeout"] == 120


def test_set_root_reverted_receipt(w3, contract, signer):
    w3.eth.wait_for_transaction_receipt.return_value = {"status": 0}

    outcome = Distributor(w3, DISTRIBUTOR, receipt_timeout=5).set_root(
        signer, ROOT, ROUND
    )

    assert not outcome.success
    assert outcome.tx_hash == TX_HASH
    assert "reverted" in outcome.error
    assert w3.eth.wait_for_transaction_receipt.call_args.kwargs["timeout"] == 5


def test_receipt_timeout_is_a_failed_push(w3, contract, signer, multicall, ADDRESSES):
    w3.eth.wait_for_transaction_receipt.side_effect = TimeExhausted(
        "Transaction is not in the chain after 120 seconds"
    )
    payload = build_payload(sorted(ADDRESSES, key=lambda a: int(a, 16)), ONE_TOKEN, ROUND)
    report = RunReport()

    outcome = Publisher([], Distributor(w3, DISTRIBUTOR), signer, report).push_root(
        payload
    )

    assert outcome.reason == "push-failed"
    assert "setRoot failed" in outcome.error
    w3.eth.send_raw_transaction.assert_called_once()
