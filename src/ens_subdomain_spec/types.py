"""Core types for the ENS subdomain registry.

The state tracks the subdomain registry contracts together with the three
collaborators they drive: the fee token, the ENS registry and the public
resolver. Every contract lives at a 20-byte address; nodes and labels are
32-byte keccak hashes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any, Optional

from .config import DEFAULT_RELEASE_DELAY, ZERO_ADDRESS, ZERO_BYTES32


class TransactionType(Enum):
    # Token ledger
    MINT = "mint"
    TRANSFER = "transfer"
    APPROVE = "approve"
    TRANSFER_FROM = "transfer_from"
    # Name registry
    SET_SUBNODE_OWNER = "set_subnode_owner"
    SET_OWNER = "set_owner"
    SET_RESOLVER = "set_resolver"
    # Resolver
    SET_ADDR = "set_addr"
    SET_PUBKEY = "set_pubkey"
    # Subdomain registry: domains
    ADD_DOMAIN = "add_domain"
    SET_DOMAIN_PRICE = "set_domain_price"
    MOVE_DOMAIN = "move_domain"
    MIGRATE_DOMAIN = "migrate_domain"
    # Subdomain registry: accounts
    REGISTER = "register"
    RELEASE = "release"
    UPDATE_FUNDS_OWNER = "update_funds_owner"


class DomainState(IntEnum):
    ACTIVE = 0x01
    MOVED = 0x02


@dataclass
class Transaction:
    chain_id: int
    source: bytes
    to: bytes
    tx_type: TransactionType
    payload: Any


@dataclass
class Event:
    emitter: bytes
    name: str
    args: dict[str, Any] = field(default_factory=dict)


@dataclass
class GlobalState:
    block_height: int = 0
    timestamp: int = 0


# --- Token ledger ---


@dataclass
class TokenLedger:
    address: bytes
    balances: dict[bytes, int] = field(default_factory=dict)
    # owner -> spender -> amount
    allowances: dict[bytes, dict[bytes, int]] = field(default_factory=dict)
    total_supply: int = 0

    def balance_of(self, owner: bytes) -> int:
        return self.balances.get(owner, 0)

    def allowance(self, owner: bytes, spender: bytes) -> int:
        return self.allowances.get(owner, {}).get(spender, 0)


# --- Name registry ---


@dataclass
class NameRecord:
    owner: bytes = ZERO_ADDRESS
    resolver: bytes = ZERO_ADDRESS


# --- Resolver ---


@dataclass
class ResolverRecord:
    addr: bytes = ZERO_ADDRESS
    pubkey_x: bytes = ZERO_BYTES32
    pubkey_y: bytes = ZERO_BYTES32


@dataclass
class ResolverState:
    address: bytes
    records: dict[bytes, ResolverRecord] = field(default_factory=dict)


# --- Subdomain registry ---


@dataclass
class DomainConfig:
    price: int = 0
    state: DomainState = DomainState.ACTIVE


@dataclass
class SubdomainAccount:
    balance: int
    funds_owner: bytes
    created_at: int = 0


@dataclass
class RegistryState:
    address: bytes
    controller: bytes
    token: bytes
    ens: bytes
    resolver: bytes
    parent_registry: bytes = ZERO_ADDRESS
    release_delay: int = DEFAULT_RELEASE_DELAY
    domains: dict[bytes, DomainConfig] = field(default_factory=dict)
    accounts: dict[bytes, SubdomainAccount] = field(default_factory=dict)


# --- ChainState ---


@dataclass
class ChainState:
    global_state: GlobalState = field(default_factory=GlobalState)
    network_chain_id: int = 0
    token: Optional[TokenLedger] = None
    ens_address: bytes = ZERO_ADDRESS
    ens: dict[bytes, NameRecord] = field(default_factory=dict)
    resolver: Optional[ResolverState] = None
    registries: dict[bytes, RegistryState] = field(default_factory=dict)
    # Append-only event log. Not part of the state digest.
    logs: list[Event] = field(default_factory=list)

    def emit(self, emitter: bytes, name: str, **args: Any) -> None:
        self.logs.append(Event(emitter=emitter, name=name, args=args))
