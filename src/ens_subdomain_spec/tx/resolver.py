"""Public resolver transitions (setAddr, setPubkey)."""

from __future__ import annotations

from ..errors import ErrorCode, err
from ..types import ChainState, ResolverRecord, Transaction, TransactionType
from .common import (
    node_owner,
    payload_dict,
    require_address,
    require_hash,
    resolver_at,
)


def verify(state: ChainState, tx: Transaction) -> None:
    p = payload_dict(tx.payload, "resolver")
    resolver_at(state, tx.to)

    node = require_hash(p, "node")
    tt = tx.tx_type
    if tt == TransactionType.SET_ADDR:
        require_address(p, "addr")
    elif tt == TransactionType.SET_PUBKEY:
        require_hash(p, "x")
        require_hash(p, "y")
    else:
        raise err(ErrorCode.INVALID_TYPE, f"unsupported resolver tx type: {tt}")
    _require_authorised(state, tx.source, node)


def apply(state: ChainState, tx: Transaction) -> ChainState:
    p = tx.payload
    tt = tx.tx_type
    if tt == TransactionType.SET_ADDR:
        set_addr(state, tx.to, tx.source, p["node"], p["addr"])
    elif tt == TransactionType.SET_PUBKEY:
        set_pubkey(state, tx.to, tx.source, p["node"], p["x"], p["y"])
    else:
        raise err(ErrorCode.INVALID_TYPE, f"unsupported resolver tx type: {tt}")
    return state


def _require_authorised(state: ChainState, caller: bytes, node: bytes) -> None:
    # The resolver defers to the name registry for write access.
    if node_owner(state, node) != caller:
        raise err(ErrorCode.NODE_NOT_OWNED, f"caller does not own node {node.hex()}")


def set_addr(state: ChainState, resolver: bytes, caller: bytes, node: bytes, addr: bytes) -> None:
    res = resolver_at(state, resolver)
    _require_authorised(state, caller, node)
    res.records.setdefault(node, ResolverRecord()).addr = addr
    state.emit(res.address, "AddrChanged", node=node, addr=addr)


def set_pubkey(
    state: ChainState, resolver: bytes, caller: bytes, node: bytes, x: bytes, y: bytes
) -> None:
    res = resolver_at(state, resolver)
    _require_authorised(state, caller, node)
    rec = res.records.setdefault(node, ResolverRecord())
    rec.pubkey_x = x
    rec.pubkey_y = y
    state.emit(res.address, "PubkeyChanged", node=node, x=x, y=y)
