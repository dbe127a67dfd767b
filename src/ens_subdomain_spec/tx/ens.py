"""Name registry transitions (ENS: setSubnodeOwner, setOwner, setResolver).

Only the node owner may mutate a node. Ownership of a parent node confers
the right to (re)assign any of its subnodes.
"""

from __future__ import annotations

from ..crypto.hash_algorithms import subnode
from ..errors import ErrorCode, err
from ..types import ChainState, Transaction, TransactionType
from .common import (
    node_owner,
    node_record,
    payload_dict,
    require_address,
    require_ens,
    require_hash,
)


def verify(state: ChainState, tx: Transaction) -> None:
    p = payload_dict(tx.payload, "name registry")
    require_ens(state, tx.to)

    node = require_hash(p, "node")
    tt = tx.tx_type
    if tt == TransactionType.SET_SUBNODE_OWNER:
        require_hash(p, "label")
        require_address(p, "owner")
    elif tt == TransactionType.SET_OWNER:
        require_address(p, "owner")
    elif tt == TransactionType.SET_RESOLVER:
        require_address(p, "resolver")
    else:
        raise err(ErrorCode.INVALID_TYPE, f"unsupported name registry tx type: {tt}")
    _require_node_owner(state, tx.source, node)


def apply(state: ChainState, tx: Transaction) -> ChainState:
    p = tx.payload
    tt = tx.tx_type
    if tt == TransactionType.SET_SUBNODE_OWNER:
        set_subnode_owner(state, tx.source, p["node"], p["label"], p["owner"])
    elif tt == TransactionType.SET_OWNER:
        set_owner(state, tx.source, p["node"], p["owner"])
    elif tt == TransactionType.SET_RESOLVER:
        set_resolver(state, tx.source, p["node"], p["resolver"])
    else:
        raise err(ErrorCode.INVALID_TYPE, f"unsupported name registry tx type: {tt}")
    return state


def _require_node_owner(state: ChainState, caller: bytes, node: bytes) -> None:
    if node_owner(state, node) != caller:
        raise err(ErrorCode.NODE_NOT_OWNED, f"caller does not own node {node.hex()}")


def set_subnode_owner(
    state: ChainState, caller: bytes, node: bytes, label: bytes, owner: bytes
) -> bytes:
    _require_node_owner(state, caller, node)
    child = subnode(node, label)
    node_record(state, child).owner = owner
    state.emit(state.ens_address, "NewOwner", node=node, label=label, owner=owner)
    return child


def set_owner(state: ChainState, caller: bytes, node: bytes, owner: bytes) -> None:
    _require_node_owner(state, caller, node)
    node_record(state, node).owner = owner
    state.emit(state.ens_address, "Transfer", node=node, owner=owner)


def set_resolver(state: ChainState, caller: bytes, node: bytes, resolver: bytes) -> None:
    _require_node_owner(state, caller, node)
    node_record(state, node).resolver = resolver
    state.emit(state.ens_address, "NewResolver", node=node, resolver=resolver)
