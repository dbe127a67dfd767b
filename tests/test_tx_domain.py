"""Domain tx fixtures (add_domain, set_domain_price)."""

from __future__ import annotations

from ens_subdomain_spec import queries
from ens_subdomain_spec import transactions as txs
from ens_subdomain_spec.crypto.hash_algorithms import namehash
from ens_subdomain_spec.errors import ErrorCategory, ErrorCode
from ens_subdomain_spec.genesis import SUBDOMAIN_REGISTRY, build_genesis, seed_name
from ens_subdomain_spec.state_transition import apply_tx
from ens_subdomain_spec.test_accounts import ALICE, DEPLOYER
from ens_subdomain_spec.types import ChainState, DomainState

FREE_NODE = namehash("freedomain.eth")
PAID_NODE = namehash("stateofus.eth")

ADD = "transactions/domain/add_domain.json"
PRICE = "transactions/domain/set_domain_price.json"


def _base_state() -> ChainState:
    """Domains handed to the registry in the name registry, not yet added."""
    state = build_genesis()
    seed_name(state, "eth", DEPLOYER)
    seed_name(state, "freedomain.eth", SUBDOMAIN_REGISTRY)
    seed_name(state, "stateofus.eth", SUBDOMAIN_REGISTRY)
    return state


def _added(state: ChainState, node: bytes, price: int) -> ChainState:
    post, result = apply_tx(state, txs.add_domain(DEPLOYER, node, price))
    assert result.ok, result.error
    return post


def test_add_free_domain(state_test_group) -> None:
    tx = txs.add_domain(DEPLOYER, FREE_NODE, 0)
    post, result = state_test_group(ADD, "add_free_domain", _base_state(), tx)

    assert result.ok
    assert [(e.name, e.args) for e in result.events] == [
        ("DomainPrice", {"namehash": FREE_NODE, "price": 0}),
    ]
    assert queries.get_price(post, SUBDOMAIN_REGISTRY, FREE_NODE) == 0
    assert post.registries[SUBDOMAIN_REGISTRY].domains[FREE_NODE].state == DomainState.ACTIVE


def test_add_paid_domain(state_test_group) -> None:
    tx = txs.add_domain(DEPLOYER, PAID_NODE, 100)
    post, result = state_test_group(ADD, "add_paid_domain", _base_state(), tx)

    assert result.ok
    assert result.events[0].args == {"namehash": PAID_NODE, "price": 100}
    assert queries.get_price(post, SUBDOMAIN_REGISTRY, PAID_NODE) == 100


def test_add_domain_again_updates_price(state_test_group) -> None:
    state = _added(_base_state(), PAID_NODE, 100)
    tx = txs.add_domain(DEPLOYER, PAID_NODE, 250)
    post, result = state_test_group(ADD, "add_domain_again_updates_price", state, tx)

    assert result.ok
    assert queries.get_price(post, SUBDOMAIN_REGISTRY, PAID_NODE) == 250
    assert len(post.registries[SUBDOMAIN_REGISTRY].domains) == 1


def test_add_domain_not_controller(state_test_group) -> None:
    tx = txs.add_domain(ALICE, PAID_NODE, 100)
    post, result = state_test_group(ADD, "add_domain_not_controller", _base_state(), tx)

    assert result.error.code == ErrorCode.NOT_CONTROLLER
    assert result.error.category == ErrorCategory.AUTHORIZATION
    assert PAID_NODE not in post.registries[SUBDOMAIN_REGISTRY].domains


def test_add_domain_not_owned_by_registry(state_test_group) -> None:
    state = _base_state()
    seed_name(state, "elsewhere.eth", ALICE)
    tx = txs.add_domain(DEPLOYER, namehash("elsewhere.eth"), 100)
    _, result = state_test_group(ADD, "add_domain_not_owned_by_registry", state, tx)

    assert result.error.code == ErrorCode.DOMAIN_NOT_OWNED
    assert result.error.category == ErrorCategory.PRECONDITION


def test_add_domain_negative_price(state_test_group) -> None:
    tx = txs.add_domain(DEPLOYER, PAID_NODE, -1)
    _, result = state_test_group(ADD, "add_domain_negative_price", _base_state(), tx)

    assert result.error.code == ErrorCode.INVALID_AMOUNT


def test_add_domain_unknown_registry(state_test_group) -> None:
    tx = txs.add_domain(DEPLOYER, PAID_NODE, 100, registry=b"\x42" * 20)
    _, result = state_test_group(ADD, "add_domain_unknown_registry", _base_state(), tx)

    assert result.error.code == ErrorCode.CONTRACT_NOT_FOUND
    assert result.error.category == ErrorCategory.COLLABORATOR


def test_set_domain_price(state_test_group) -> None:
    state = _added(_base_state(), PAID_NODE, 100)
    tx = txs.set_domain_price(DEPLOYER, PAID_NODE, 100_000_000)
    post, result = state_test_group(PRICE, "set_domain_price", state, tx)

    assert result.ok
    assert result.events[0].name == "DomainPrice"
    assert result.events[0].args == {"namehash": PAID_NODE, "price": 100_000_000}
    assert queries.get_price(post, SUBDOMAIN_REGISTRY, PAID_NODE) == 100_000_000


def test_set_domain_price_not_controller(state_test_group) -> None:
    state = _added(_base_state(), PAID_NODE, 100)
    tx = txs.set_domain_price(ALICE, PAID_NODE, 1)
    post, result = state_test_group(PRICE, "set_domain_price_not_controller", state, tx)

    assert result.error.code == ErrorCode.NOT_CONTROLLER
    assert queries.get_price(post, SUBDOMAIN_REGISTRY, PAID_NODE) == 100


def test_set_domain_price_unconfigured(state_test_group) -> None:
    tx = txs.set_domain_price(DEPLOYER, PAID_NODE, 100)
    _, result = state_test_group(PRICE, "set_domain_price_unconfigured", _base_state(), tx)

    assert result.error.code == ErrorCode.DOMAIN_NOT_FOUND


def test_get_price_cannot_tell_free_from_unconfigured() -> None:
    state = _added(_base_state(), FREE_NODE, 0)

    assert queries.get_price(state, SUBDOMAIN_REGISTRY, FREE_NODE) == 0
    assert queries.get_price(state, SUBDOMAIN_REGISTRY, namehash("nothing.eth")) == 0
