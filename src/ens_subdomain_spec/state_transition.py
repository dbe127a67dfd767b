"""State transition entrypoints for the ENS subdomain registry."""

from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import replace
from typing import Optional

from .config import ADDRESS_SIZE
from .errors import ErrorCode, SpecError, err
from .types import ChainState, Event, Transaction, TransactionType
from .tx import domain as tx_domain
from .tx import ens as tx_ens
from .tx import resolver as tx_resolver
from .tx import subdomain as tx_subdomain
from .tx import token as tx_token

logger = logging.getLogger(__name__)

_TOKEN_TYPES = frozenset({
    TransactionType.MINT,
    TransactionType.TRANSFER,
    TransactionType.APPROVE,
    TransactionType.TRANSFER_FROM,
})

_ENS_TYPES = frozenset({
    TransactionType.SET_SUBNODE_OWNER,
    TransactionType.SET_OWNER,
    TransactionType.SET_RESOLVER,
})

_RESOLVER_TYPES = frozenset({
    TransactionType.SET_ADDR,
    TransactionType.SET_PUBKEY,
})

_DOMAIN_TYPES = frozenset({
    TransactionType.ADD_DOMAIN,
    TransactionType.SET_DOMAIN_PRICE,
    TransactionType.MOVE_DOMAIN,
    TransactionType.MIGRATE_DOMAIN,
})

_SUBDOMAIN_TYPES = frozenset({
    TransactionType.REGISTER,
    TransactionType.RELEASE,
    TransactionType.UPDATE_FUNDS_OWNER,
})


class TransitionResult:
    """Thin wrapper for verify/apply results."""

    def __init__(
        self,
        ok: bool,
        error: Optional[SpecError] = None,
        events: Optional[list[Event]] = None,
    ):
        self.ok = ok
        self.error = error
        self.events = events or []

    @classmethod
    def success(cls, events: Optional[list[Event]] = None) -> "TransitionResult":
        return cls(True, None, events)

    @classmethod
    def failure(cls, error: SpecError) -> "TransitionResult":
        return cls(False, error)


def _module_for(tx: Transaction):
    tt = tx.tx_type
    if tt in _TOKEN_TYPES:
        return tx_token
    if tt in _ENS_TYPES:
        return tx_ens
    if tt in _RESOLVER_TYPES:
        return tx_resolver
    if tt in _DOMAIN_TYPES:
        return tx_domain
    if tt in _SUBDOMAIN_TYPES:
        return tx_subdomain
    raise err(ErrorCode.NOT_IMPLEMENTED, f"no handler for {tx.tx_type}")


def _dispatch_verify(state: ChainState, tx: Transaction) -> None:
    _module_for(tx).verify(state, tx)


def _dispatch_apply(state: ChainState, tx: Transaction) -> ChainState:
    return _module_for(tx).apply(state, tx)


def _verify_common(state: ChainState, tx: Transaction) -> None:
    if tx.chain_id != state.network_chain_id:
        raise err(ErrorCode.CHAIN_ID_MISMATCH, "chain_id mismatch")

    if not isinstance(tx.source, bytes) or len(tx.source) != ADDRESS_SIZE:
        raise err(ErrorCode.INVALID_ADDRESS, "source must be a 20-byte address")

    if not isinstance(tx.to, bytes) or len(tx.to) != ADDRESS_SIZE:
        raise err(ErrorCode.INVALID_ADDRESS, "to must be a 20-byte address")


def verify_tx(state: ChainState, tx: Transaction) -> TransitionResult:
    """Stateless + stateful verification for a single tx."""
    try:
        _verify_common(state, tx)
        _dispatch_verify(state, tx)
        return TransitionResult.success()
    except SpecError as exc:
        return TransitionResult.failure(exc)


def apply_tx(state: ChainState, tx: Transaction) -> tuple[ChainState, TransitionResult]:
    """Apply tx to state after verification.

    Every entry point is atomic: on any failure, in verification or midway
    through execution (including calls into the token, name registry or
    resolver), the pre-state is returned unchanged with no events.
    """
    try:
        _verify_common(state, tx)
        _dispatch_verify(state, tx)
    except SpecError as exc:
        logger.debug("rejected %s: %s", tx.tx_type, exc)
        return state, TransitionResult.failure(exc)

    working = deepcopy(state)
    try:
        working = _dispatch_apply(working, tx)
    except SpecError as exc:
        logger.debug("reverted %s: %s", tx.tx_type, exc)
        return state, TransitionResult.failure(exc)

    return working, TransitionResult.success(working.logs[len(state.logs):])


def apply_block(state: ChainState, txs: list[Transaction]) -> tuple[ChainState, TransitionResult]:
    """Apply a block worth of transactions in order (block-atomic semantics).

    If any transaction fails, the entire block is rejected and the state is
    unchanged.
    """
    working = state
    for tx in txs:
        working, result = apply_tx(working, tx)
        if not result.ok:
            return state, result

    working = replace(
        working,
        global_state=replace(
            working.global_state, block_height=working.global_state.block_height + 1
        ),
    )
    return working, TransitionResult.success(working.logs[len(state.logs):])


def advance_time(state: ChainState, seconds: int) -> ChainState:
    """Return a copy of ``state`` with the clock moved forward."""
    if seconds < 0:
        raise ValueError("time only moves forward")
    return replace(
        state,
        global_state=replace(
            state.global_state, timestamp=state.global_state.timestamp + seconds
        ),
    )
