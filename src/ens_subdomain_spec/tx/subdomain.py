"""Subdomain account transitions (register, release, updateFundsOwner).

Each registered subdomain gets an escrow account holding the price paid at
registration. Once the release delay has passed since registration, the
current name registry owner of the subdomain may release it, which clears the
name and refunds the escrow to them. When the registry no longer controls the
parent domain, or the name was abandoned, the account's funds owner claims
the escrow instead.
"""

from __future__ import annotations

from ..config import ZERO_ADDRESS, ZERO_BYTES32
from ..crypto.hash_algorithms import subnode
from ..errors import ErrorCode, err
from ..types import (
    ChainState,
    RegistryState,
    SubdomainAccount,
    Transaction,
    TransactionType,
)
from . import ens, resolver, token
from .common import (
    node_owner,
    payload_dict,
    registry_at,
    require_address,
    require_hash,
    token_at,
)
from .domain import require_active_domain


def verify(state: ChainState, tx: Transaction) -> None:
    p = payload_dict(tx.payload, "subdomain")
    reg = registry_at(state, tx.to)
    label = require_hash(p, "label")
    domain = require_hash(p, "namehash")
    node = subnode(domain, label)

    tt = tx.tx_type
    if tt == TransactionType.REGISTER:
        require_address(p, "addr")
        require_hash(p, "pubkey_x")
        require_hash(p, "pubkey_y")
        _verify_register(state, reg, tx.source, domain, node)
    elif tt == TransactionType.RELEASE:
        _verify_release(state, reg, tx.source, domain, node)
    elif tt == TransactionType.UPDATE_FUNDS_OWNER:
        _require_account(reg, node)
        _require_node_owner(state, tx.source, node)
    else:
        raise err(ErrorCode.INVALID_TYPE, f"unsupported subdomain tx type: {tt}")


def apply(state: ChainState, tx: Transaction) -> ChainState:
    p = tx.payload
    tt = tx.tx_type
    if tt == TransactionType.REGISTER:
        register(
            state, tx.to, tx.source, p["label"], p["namehash"],
            p["addr"], p["pubkey_x"], p["pubkey_y"],
        )
    elif tt == TransactionType.RELEASE:
        release(state, tx.to, tx.source, p["label"], p["namehash"])
    elif tt == TransactionType.UPDATE_FUNDS_OWNER:
        update_funds_owner(state, tx.to, tx.source, p["label"], p["namehash"])
    else:
        raise err(ErrorCode.INVALID_TYPE, f"unsupported subdomain tx type: {tt}")
    return state


# --- REGISTER ---


def _verify_register(
    state: ChainState, reg: RegistryState, registrant: bytes, domain: bytes, node: bytes
) -> None:
    config = require_active_domain(reg, domain)
    if node_owner(state, domain) != reg.address:
        raise err(ErrorCode.DOMAIN_NOT_OWNED, "registry does not own domain in name registry")
    if node_owner(state, node) != ZERO_ADDRESS:
        raise err(ErrorCode.SUBDOMAIN_TAKEN, "subdomain already owned")
    previous = reg.accounts.get(node)
    if previous is not None and previous.balance > 0:
        raise err(ErrorCode.ESCROW_NOT_RELEASED, "previous escrow must be released first")
    if config.price > 0:
        ledger = token_at(state, reg.token)
        if ledger.allowance(registrant, reg.address) < config.price:
            raise err(ErrorCode.INSUFFICIENT_ALLOWANCE, "registry allowance below domain price")
        if ledger.balance_of(registrant) < config.price:
            raise err(ErrorCode.INSUFFICIENT_BALANCE, "insufficient token balance for domain price")


def register(
    state: ChainState,
    registry: bytes,
    registrant: bytes,
    label: bytes,
    domain: bytes,
    addr: bytes,
    pubkey_x: bytes,
    pubkey_y: bytes,
) -> bytes:
    reg = registry_at(state, registry)
    _verify_register(state, reg, registrant, domain, subnode(domain, label))
    price = reg.domains[domain].price

    if price > 0:
        token.transfer_from(state, reg.token, reg.address, registrant, reg.address, price)

    has_addr = addr != ZERO_ADDRESS
    has_pubkey = pubkey_x != ZERO_BYTES32 or pubkey_y != ZERO_BYTES32
    if has_addr or has_pubkey:
        # Hold the node long enough to write resolver records, then hand it over.
        node = ens.set_subnode_owner(state, reg.address, domain, label, reg.address)
        ens.set_resolver(state, reg.address, node, reg.resolver)
        if has_addr:
            resolver.set_addr(state, reg.resolver, reg.address, node, addr)
        if has_pubkey:
            resolver.set_pubkey(state, reg.resolver, reg.address, node, pubkey_x, pubkey_y)
        ens.set_owner(state, reg.address, node, registrant)
    else:
        node = ens.set_subnode_owner(state, reg.address, domain, label, registrant)

    reg.accounts[node] = SubdomainAccount(
        balance=price,
        funds_owner=registrant,
        created_at=state.global_state.timestamp,
    )
    state.emit(reg.address, "SubdomainRegistered", namehash=node, owner=registrant, price=price)
    return node


# --- RELEASE ---


def _require_account(reg: RegistryState, node: bytes) -> SubdomainAccount:
    account = reg.accounts.get(node)
    if account is None:
        raise err(ErrorCode.ACCOUNT_NOT_FOUND, "subdomain account not found")
    return account


def _verify_release(
    state: ChainState, reg: RegistryState, caller: bytes, domain: bytes, node: bytes
) -> None:
    account = _require_account(reg, node)
    holder = node_owner(state, node)
    if node_owner(state, domain) != reg.address or holder == ZERO_ADDRESS:
        # Moved domain or abandoned name: only the escrow is left to claim.
        if caller != account.funds_owner:
            raise err(ErrorCode.NOT_FUNDS_OWNER, "caller is not the funds owner")
    elif caller != holder:
        raise err(ErrorCode.NOT_NODE_OWNER, "caller does not own the subdomain")
    release_at = account.created_at + reg.release_delay
    if state.global_state.timestamp < release_at:
        raise err(
            ErrorCode.RELEASE_DELAY_NOT_ELAPSED,
            f"release not allowed before {release_at} (now {state.global_state.timestamp})",
        )


def release(state: ChainState, registry: bytes, caller: bytes, label: bytes, domain: bytes) -> int:
    reg = registry_at(state, registry)
    node = subnode(domain, label)
    _verify_release(state, reg, caller, domain, node)
    account = reg.accounts[node]
    amount = account.balance

    # After a move the successor registry owns the parent; only the escrow is ours.
    if node_owner(state, domain) == reg.address:
        ens.set_subnode_owner(state, reg.address, domain, label, reg.address)
        ens.set_resolver(state, reg.address, node, ZERO_ADDRESS)
        ens.set_owner(state, reg.address, node, ZERO_ADDRESS)

    account.balance = 0
    if amount > 0:
        token.transfer(state, reg.token, reg.address, caller, amount)
    state.emit(reg.address, "SubdomainReleased", namehash=node, funds_owner=caller, amount=amount)
    return amount


# --- UPDATE_FUNDS_OWNER ---


def _require_node_owner(state: ChainState, caller: bytes, node: bytes) -> None:
    if node_owner(state, node) != caller:
        raise err(ErrorCode.NOT_NODE_OWNER, "caller does not own the subdomain")


def update_funds_owner(
    state: ChainState, registry: bytes, caller: bytes, label: bytes, domain: bytes
) -> None:
    reg = registry_at(state, registry)
    node = subnode(domain, label)
    account = _require_account(reg, node)
    _require_node_owner(state, caller, node)
    account.funds_owner = caller
    state.emit(reg.address, "FundsOwnerChanged", namehash=node, funds_owner=caller)
