"""Canonical state digest implementation (v1)."""
from __future__ import annotations

from .config import ZERO_ADDRESS
from .crypto.hash_algorithms import blake3_hash
from .types import ChainState, NameRecord, ResolverRecord


def _u8(value: int) -> bytes:
    return int(value).to_bytes(1, "big", signed=False)


def _u64_be(value: int) -> bytes:
    if value < 0:
        raise ValueError("u64 must be non-negative")
    return int(value).to_bytes(8, "big", signed=False)


def _u256_be(value: int) -> bytes:
    if value < 0:
        raise ValueError("u256 must be non-negative")
    return int(value).to_bytes(32, "big", signed=False)


def _section(buf: bytearray, entries: list[bytes]) -> None:
    buf += _u64_be(len(entries))
    for entry in sorted(entries):
        buf += entry


def encode_state(state: ChainState) -> bytes:
    """Encode state in canonical order.

    Zero balances, zero allowances and empty name/resolver records are
    omitted so that "never set" and "reset to zero" encode identically.
    The event log is not part of the encoding.
    """
    gs = state.global_state
    buf = bytearray()
    buf += _u64_be(gs.block_height)
    buf += _u64_be(gs.timestamp)
    buf += _u64_be(state.network_chain_id)

    token = state.token
    if token is None:
        buf += ZERO_ADDRESS
    else:
        buf += token.address
        buf += _u256_be(token.total_supply)
        _section(buf, [
            addr + _u256_be(bal) for addr, bal in token.balances.items() if bal
        ])
        _section(buf, [
            owner + spender + _u256_be(amount)
            for owner, spenders in token.allowances.items()
            for spender, amount in spenders.items()
            if amount
        ])

    buf += state.ens_address
    _section(buf, [
        node + rec.owner + rec.resolver
        for node, rec in state.ens.items()
        if rec != NameRecord()
    ])

    res = state.resolver
    if res is None:
        buf += ZERO_ADDRESS
    else:
        buf += res.address
        _section(buf, [
            node + rec.addr + rec.pubkey_x + rec.pubkey_y
            for node, rec in res.records.items()
            if rec != ResolverRecord()
        ])

    buf += _u64_be(len(state.registries))
    for address in sorted(state.registries):
        reg = state.registries[address]
        buf += reg.address + reg.controller + reg.token + reg.ens + reg.resolver
        buf += reg.parent_registry
        buf += _u64_be(reg.release_delay)
        _section(buf, [
            node + _u256_be(cfg.price) + _u8(cfg.state)
            for node, cfg in reg.domains.items()
        ])
        _section(buf, [
            node + _u256_be(acct.balance) + acct.funds_owner + _u64_be(acct.created_at)
            for node, acct in reg.accounts.items()
        ])

    return bytes(buf)


def compute_state_digest(state: ChainState) -> str:
    """Compute state digest v1: BLAKE3-256 over the canonical encoding."""
    return blake3_hash(encode_state(state)).hex()

