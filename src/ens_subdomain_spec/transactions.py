"""Transaction constructors, one per contract entry point."""

from __future__ import annotations

from .config import CHAIN_ID_DEVNET, ZERO_ADDRESS, ZERO_BYTES32
from .genesis import ENS_REGISTRY, PUBLIC_RESOLVER, SUBDOMAIN_REGISTRY, TOKEN
from .types import Transaction, TransactionType


def _mk(source: bytes, to: bytes, tx_type: TransactionType, payload: dict,
        chain_id: int = CHAIN_ID_DEVNET) -> Transaction:
    return Transaction(chain_id=chain_id, source=source, to=to, tx_type=tx_type, payload=payload)


# --- Token ledger ---


def mint(source: bytes, amount: int, token: bytes = TOKEN) -> Transaction:
    return _mk(source, token, TransactionType.MINT, {"amount": amount})


def transfer(source: bytes, recipient: bytes, amount: int, token: bytes = TOKEN) -> Transaction:
    return _mk(source, token, TransactionType.TRANSFER, {"recipient": recipient, "amount": amount})


def approve(source: bytes, spender: bytes, amount: int, token: bytes = TOKEN) -> Transaction:
    return _mk(source, token, TransactionType.APPROVE, {"spender": spender, "amount": amount})


def transfer_from(
    source: bytes, owner: bytes, recipient: bytes, amount: int, token: bytes = TOKEN
) -> Transaction:
    return _mk(
        source, token, TransactionType.TRANSFER_FROM,
        {"owner": owner, "recipient": recipient, "amount": amount},
    )


# --- Name registry ---


def set_subnode_owner(source: bytes, node: bytes, label: bytes, owner: bytes) -> Transaction:
    return _mk(
        source, ENS_REGISTRY, TransactionType.SET_SUBNODE_OWNER,
        {"node": node, "label": label, "owner": owner},
    )


def set_owner(source: bytes, node: bytes, owner: bytes) -> Transaction:
    return _mk(source, ENS_REGISTRY, TransactionType.SET_OWNER, {"node": node, "owner": owner})


def set_resolver(source: bytes, node: bytes, resolver: bytes) -> Transaction:
    return _mk(
        source, ENS_REGISTRY, TransactionType.SET_RESOLVER, {"node": node, "resolver": resolver}
    )


# --- Resolver ---


def set_addr(source: bytes, node: bytes, addr: bytes) -> Transaction:
    return _mk(source, PUBLIC_RESOLVER, TransactionType.SET_ADDR, {"node": node, "addr": addr})


def set_pubkey(source: bytes, node: bytes, x: bytes, y: bytes) -> Transaction:
    return _mk(source, PUBLIC_RESOLVER, TransactionType.SET_PUBKEY, {"node": node, "x": x, "y": y})


# --- Subdomain registry ---


def add_domain(
    source: bytes, namehash: bytes, price: int, registry: bytes = SUBDOMAIN_REGISTRY
) -> Transaction:
    return _mk(source, registry, TransactionType.ADD_DOMAIN, {"namehash": namehash, "price": price})


def set_domain_price(
    source: bytes, namehash: bytes, price: int, registry: bytes = SUBDOMAIN_REGISTRY
) -> Transaction:
    return _mk(
        source, registry, TransactionType.SET_DOMAIN_PRICE, {"namehash": namehash, "price": price}
    )


def move_domain(
    source: bytes, new_registry: bytes, namehash: bytes, registry: bytes = SUBDOMAIN_REGISTRY
) -> Transaction:
    return _mk(
        source, registry, TransactionType.MOVE_DOMAIN,
        {"new_registry": new_registry, "namehash": namehash},
    )


def migrate_domain(source: bytes, namehash: bytes, price: int, registry: bytes) -> Transaction:
    return _mk(
        source, registry, TransactionType.MIGRATE_DOMAIN, {"namehash": namehash, "price": price}
    )


def register(
    source: bytes,
    label: bytes,
    namehash: bytes,
    addr: bytes = ZERO_ADDRESS,
    pubkey_x: bytes = ZERO_BYTES32,
    pubkey_y: bytes = ZERO_BYTES32,
    registry: bytes = SUBDOMAIN_REGISTRY,
) -> Transaction:
    return _mk(
        source, registry, TransactionType.REGISTER,
        {
            "label": label,
            "namehash": namehash,
            "addr": addr,
            "pubkey_x": pubkey_x,
            "pubkey_y": pubkey_y,
        },
    )


def release(
    source: bytes, label: bytes, namehash: bytes, registry: bytes = SUBDOMAIN_REGISTRY
) -> Transaction:
    return _mk(source, registry, TransactionType.RELEASE, {"label": label, "namehash": namehash})


def update_funds_owner(
    source: bytes, label: bytes, namehash: bytes, registry: bytes = SUBDOMAIN_REGISTRY
) -> Transaction:
    return _mk(
        source, registry, TransactionType.UPDATE_FUNDS_OWNER, {"label": label, "namehash": namehash}
    )
