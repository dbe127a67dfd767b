"""Subdomain registry domain transitions (addDomain, setDomainPrice, moveDomain).

A registry only sells subdomains of domains it has been configured for and
still owns in the name registry. Moving a domain hands the name registry
node and its price over to a successor registry; escrowed subdomain
accounts stay behind.
"""

from __future__ import annotations

from ..config import ZERO_ADDRESS
from ..errors import ErrorCode, err
from ..types import (
    ChainState,
    DomainConfig,
    DomainState,
    RegistryState,
    Transaction,
    TransactionType,
)
from . import ens
from .common import (
    node_owner,
    payload_dict,
    registry_at,
    require_address,
    require_amount,
    require_hash,
)


def verify(state: ChainState, tx: Transaction) -> None:
    p = payload_dict(tx.payload, "domain")
    reg = registry_at(state, tx.to)
    domain = require_hash(p, "namehash")

    tt = tx.tx_type
    if tt == TransactionType.ADD_DOMAIN:
        require_amount(p, "price")
        _require_controller(reg, tx.source)
        _require_domain_owned(state, reg, domain)
    elif tt == TransactionType.SET_DOMAIN_PRICE:
        require_amount(p, "price")
        _require_controller(reg, tx.source)
        require_active_domain(reg, domain)
    elif tt == TransactionType.MOVE_DOMAIN:
        target = require_address(p, "new_registry")
        _require_controller(reg, tx.source)
        require_active_domain(reg, domain)
        _require_domain_owned(state, reg, domain)
        if target == reg.address:
            raise err(ErrorCode.INVALID_ADDRESS, "cannot move domain to the same registry")
        registry_at(state, target)
    elif tt == TransactionType.MIGRATE_DOMAIN:
        require_amount(p, "price")
        _require_parent_registry(reg, tx.source)
    else:
        raise err(ErrorCode.INVALID_TYPE, f"unsupported domain tx type: {tt}")


def apply(state: ChainState, tx: Transaction) -> ChainState:
    p = tx.payload
    tt = tx.tx_type
    if tt == TransactionType.ADD_DOMAIN:
        add_domain(state, tx.to, tx.source, p["namehash"], p["price"])
    elif tt == TransactionType.SET_DOMAIN_PRICE:
        set_domain_price(state, tx.to, tx.source, p["namehash"], p["price"])
    elif tt == TransactionType.MOVE_DOMAIN:
        move_domain(state, tx.to, tx.source, p["new_registry"], p["namehash"])
    elif tt == TransactionType.MIGRATE_DOMAIN:
        migrate_domain(state, tx.to, tx.source, p["namehash"], p["price"])
    else:
        raise err(ErrorCode.INVALID_TYPE, f"unsupported domain tx type: {tt}")
    return state


def _require_controller(reg: RegistryState, caller: bytes) -> None:
    if caller != reg.controller:
        raise err(ErrorCode.NOT_CONTROLLER, "caller is not the registry controller")


def _require_domain_owned(state: ChainState, reg: RegistryState, domain: bytes) -> None:
    if node_owner(state, domain) != reg.address:
        raise err(ErrorCode.DOMAIN_NOT_OWNED, "registry does not own domain in name registry")


def _require_parent_registry(reg: RegistryState, caller: bytes) -> None:
    if reg.parent_registry == ZERO_ADDRESS or caller != reg.parent_registry:
        raise err(ErrorCode.NOT_PARENT_REGISTRY, "caller is not the parent registry")


def require_active_domain(reg: RegistryState, domain: bytes) -> DomainConfig:
    config = reg.domains.get(domain)
    if config is None:
        raise err(ErrorCode.DOMAIN_NOT_FOUND, "domain not added")
    if config.state != DomainState.ACTIVE:
        raise err(ErrorCode.DOMAIN_MOVED, "domain moved to another registry")
    return config


def migrated_config(old: DomainConfig) -> DomainConfig:
    """Config a successor registry adopts for a moved domain."""
    return DomainConfig(price=old.price, state=DomainState.ACTIVE)


def add_domain(
    state: ChainState, registry: bytes, caller: bytes, domain: bytes, price: int
) -> None:
    reg = registry_at(state, registry)
    _require_controller(reg, caller)
    _require_domain_owned(state, reg, domain)
    # Re-adding an existing domain overwrites its price.
    reg.domains[domain] = DomainConfig(price=price, state=DomainState.ACTIVE)
    state.emit(reg.address, "DomainPrice", namehash=domain, price=price)


def set_domain_price(
    state: ChainState, registry: bytes, caller: bytes, domain: bytes, price: int
) -> None:
    reg = registry_at(state, registry)
    _require_controller(reg, caller)
    config = require_active_domain(reg, domain)
    config.price = price
    state.emit(reg.address, "DomainPrice", namehash=domain, price=price)


def move_domain(
    state: ChainState, registry: bytes, caller: bytes, new_registry: bytes, domain: bytes
) -> None:
    reg = registry_at(state, registry)
    _require_controller(reg, caller)
    config = require_active_domain(reg, domain)
    registry_at(state, new_registry)

    ens.set_owner(state, reg.address, domain, new_registry)
    migrate_domain(state, new_registry, reg.address, domain, config.price)
    config.state = DomainState.MOVED
    state.emit(reg.address, "DomainMoved", namehash=domain, new_registry=new_registry)


def migrate_domain(
    state: ChainState, registry: bytes, caller: bytes, domain: bytes, price: int
) -> None:
    reg = registry_at(state, registry)
    _require_parent_registry(reg, caller)
    reg.domains[domain] = migrated_config(DomainConfig(price=price))
    state.emit(reg.address, "DomainPrice", namehash=domain, price=price)
