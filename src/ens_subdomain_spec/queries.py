"""Read-only views over ChainState (contract getters)."""

from __future__ import annotations

from .config import ZERO_ADDRESS, ZERO_BYTES32
from .tx.common import node_owner, registry_at, resolver_at, token_at
from .types import ChainState


# --- Subdomain registry ---


def get_price(state: ChainState, registry: bytes, domain: bytes) -> int:
    """Price per subdomain; 0 both for free and for unconfigured domains."""
    config = registry_at(state, registry).domains.get(domain)
    return config.price if config is not None else 0


def get_account_balance(state: ChainState, registry: bytes, node: bytes) -> int:
    account = registry_at(state, registry).accounts.get(node)
    return account.balance if account is not None else 0


def get_funds_owner(state: ChainState, registry: bytes, node: bytes) -> bytes:
    account = registry_at(state, registry).accounts.get(node)
    return account.funds_owner if account is not None else ZERO_ADDRESS


def get_creation_time(state: ChainState, registry: bytes, node: bytes) -> int:
    account = registry_at(state, registry).accounts.get(node)
    return account.created_at if account is not None else 0


def release_delay(state: ChainState, registry: bytes) -> int:
    return registry_at(state, registry).release_delay


# --- Name registry ---


def owner(state: ChainState, node: bytes) -> bytes:
    return node_owner(state, node)


def resolver(state: ChainState, node: bytes) -> bytes:
    rec = state.ens.get(node)
    return rec.resolver if rec is not None else ZERO_ADDRESS


# --- Resolver ---


def addr(state: ChainState, resolver_address: bytes, node: bytes) -> bytes:
    rec = resolver_at(state, resolver_address).records.get(node)
    return rec.addr if rec is not None else ZERO_ADDRESS


def pubkey(state: ChainState, resolver_address: bytes, node: bytes) -> tuple[bytes, bytes]:
    rec = resolver_at(state, resolver_address).records.get(node)
    if rec is None:
        return ZERO_BYTES32, ZERO_BYTES32
    return rec.pubkey_x, rec.pubkey_y


# --- Token ledger ---


def balance_of(state: ChainState, token_address: bytes, account: bytes) -> int:
    return token_at(state, token_address).balance_of(account)


def allowance(state: ChainState, token_address: bytes, account: bytes, spender: bytes) -> int:
    return token_at(state, token_address).allowance(account, spender)
