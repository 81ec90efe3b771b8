from mintdrop.models import ClaimEntry, EthereumAddress, ProofsPayload
from mintdrop.merkle.leaf import leaf_hash
from mintdrop.merkle.tree import MerkleTree, verify_proof


def build_payload(
    addresses: list[EthereumAddress], amount: int, round: int
) -> ProofsPayload:
    """
    Every eligible account gets the same `amount` for this `round`.
    `addresses` must already be the sorted eligible set; no tree is built for an empty set.
    """
    if not addresses:
        return ProofsPayload.empty(round)

    leaves = [leaf_hash(a, amount, round) for a in addresses]
    tree = MerkleTree(leaves)

    claims = [
        ClaimEntry(account=account, amount=str(amount), proof=tree.get_proof(idx))
        for idx, account in enumerate(addresses)
    ]
    return ProofsPayload(round=round, root=tree.root, claims=claims)


def verify_payload(payload: ProofsPayload) -> list[EthereumAddress]:
    """Accounts whose proof does not re-derive the payload root"""
    return [
        c.account
        for c in payload.claims
        if not verify_proof(
            leaf_hash(c.account, int(c.amount), payload.round), c.proof, payload.root
        )
    ]
