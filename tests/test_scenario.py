"""End-to-end registry lifecycle: one chain driven through every entry point."""

from __future__ import annotations

from ens_subdomain_spec import queries
from ens_subdomain_spec import transactions as txs
from ens_subdomain_spec.config import (
    DEFAULT_RELEASE_DELAY,
    GENESIS_TIMESTAMP,
    ROOT_NODE,
    ZERO_ADDRESS,
)
from ens_subdomain_spec.crypto.hash_algorithms import keccak256, label_hash, namehash
from ens_subdomain_spec.errors import ErrorCode
from ens_subdomain_spec.genesis import (
    PUBLIC_RESOLVER,
    SUBDOMAIN_REGISTRY,
    TOKEN,
    UPDATED_SUBDOMAIN_REGISTRY,
    build_genesis,
)
from ens_subdomain_spec.state_transition import advance_time, apply_tx
from ens_subdomain_spec.test_accounts import (
    ALICE,
    BOB,
    CAROL,
    DAVE,
    DEPLOYER,
    ERIN,
    FRANK,
    GRACE,
    HEIDI,
)
from ens_subdomain_spec.types import ChainState, DomainState, Transaction

FREE = namehash("freedomain.eth")
PAID = namehash("stateofus.eth")
PRICE = 100_000_000


class Chain:
    """Thin driver that threads state through successive transactions."""

    def __init__(self, state: ChainState):
        self.state = state

    def ok(self, tx: Transaction):
        self.state, result = apply_tx(self.state, tx)
        assert result.ok, result.error
        return result.events

    def fails(self, tx: Transaction) -> ErrorCode:
        post, result = apply_tx(self.state, tx)
        assert post is self.state
        assert not result.ok
        return result.error.code

    def wait(self, seconds: int) -> None:
        self.state = advance_time(self.state, seconds)


def _sub(label: str, domain: str) -> bytes:
    return namehash(f"{label}.{domain}")


def _pay(chain: Chain, who: bytes, amount: int = PRICE) -> None:
    chain.ok(txs.mint(who, amount))
    chain.ok(txs.approve(who, SUBDOMAIN_REGISTRY, amount))


def test_registry_lifecycle() -> None:
    chain = Chain(build_genesis())

    # Domains are handed to the registry before it can sell them.
    chain.ok(txs.set_subnode_owner(DEPLOYER, ROOT_NODE, label_hash("eth"), DEPLOYER))
    eth = namehash("eth")
    chain.ok(txs.set_subnode_owner(DEPLOYER, eth, label_hash("freedomain"), SUBDOMAIN_REGISTRY))
    chain.ok(txs.set_subnode_owner(DEPLOYER, eth, label_hash("stateofus"), SUBDOMAIN_REGISTRY))

    events = chain.ok(txs.add_domain(DEPLOYER, FREE, 0))
    assert events[-1].args == {"namehash": FREE, "price": 0}
    chain.ok(txs.add_domain(DEPLOYER, PAID, 100))
    events = chain.ok(txs.set_domain_price(DEPLOYER, PAID, PRICE))
    assert events[-1].args == {"namehash": PAID, "price": PRICE}
    assert queries.get_price(chain.state, SUBDOMAIN_REGISTRY, PAID) == PRICE
    assert chain.fails(txs.set_domain_price(ALICE, PAID, 1)) == ErrorCode.NOT_CONTROLLER

    # Free subdomains, with and without resolver records.
    chain.ok(txs.register(ALICE, label_hash("alice"), FREE))
    alice_node = _sub("alice", "freedomain.eth")
    assert queries.owner(chain.state, alice_node) == ALICE
    assert queries.resolver(chain.state, alice_node) == ZERO_ADDRESS
    assert queries.get_account_balance(chain.state, SUBDOMAIN_REGISTRY, alice_node) == 0
    assert queries.get_funds_owner(chain.state, SUBDOMAIN_REGISTRY, alice_node) == ALICE
    assert queries.get_creation_time(chain.state, SUBDOMAIN_REGISTRY, alice_node) == GENESIS_TIMESTAMP

    chain.ok(txs.register(BOB, label_hash("bob"), FREE, addr=BOB))
    bob_node = _sub("bob", "freedomain.eth")
    assert queries.owner(chain.state, bob_node) == BOB
    assert queries.resolver(chain.state, bob_node) == PUBLIC_RESOLVER
    assert queries.addr(chain.state, PUBLIC_RESOLVER, bob_node) == BOB

    x, y = keccak256(b"carol-x"), keccak256(b"carol-y")
    chain.ok(txs.register(CAROL, label_hash("carol"), FREE, pubkey_x=x, pubkey_y=y))
    carol_node = _sub("carol", "freedomain.eth")
    assert queries.pubkey(chain.state, PUBLIC_RESOLVER, carol_node) == (x, y)
    assert queries.addr(chain.state, PUBLIC_RESOLVER, carol_node) == ZERO_ADDRESS

    chain.ok(txs.register(DAVE, label_hash("dave"), FREE, addr=DAVE, pubkey_x=x, pubkey_y=y))
    dave_node = _sub("dave", "freedomain.eth")
    assert queries.addr(chain.state, PUBLIC_RESOLVER, dave_node) == DAVE
    assert queries.owner(chain.state, dave_node) == DAVE

    assert chain.fails(txs.register(ERIN, label_hash("alice"), FREE)) == ErrorCode.SUBDOMAIN_TAKEN

    # Paid subdomains escrow the price in the registry.
    _pay(chain, ERIN)
    chain.ok(txs.register(ERIN, label_hash("erin"), PAID))
    erin_node = _sub("erin", "stateofus.eth")
    assert queries.get_account_balance(chain.state, SUBDOMAIN_REGISTRY, erin_node) == PRICE
    assert queries.balance_of(chain.state, TOKEN, ERIN) == 0
    assert queries.balance_of(chain.state, TOKEN, SUBDOMAIN_REGISTRY) == PRICE

    _pay(chain, GRACE)
    chain.ok(txs.register(GRACE, label_hash("grace"), PAID))
    grace_node = _sub("grace", "stateofus.eth")
    chain.ok(txs.set_owner(GRACE, grace_node, HEIDI))

    _pay(chain, FRANK)
    chain.ok(txs.register(FRANK, label_hash("frank"), PAID))
    frank_node = _sub("frank", "stateofus.eth")

    # Nothing is released before the delay has run.
    for who, label, domain in [(ALICE, "alice", FREE), (ERIN, "erin", PAID)]:
        code = chain.fails(txs.release(who, label_hash(label), domain))
        assert code == ErrorCode.RELEASE_DELAY_NOT_ELAPSED

    chain.wait(DEFAULT_RELEASE_DELAY)

    events = chain.ok(txs.release(ALICE, label_hash("alice"), FREE))
    assert events[-1].args == {"namehash": alice_node, "funds_owner": ALICE, "amount": 0}
    assert queries.owner(chain.state, alice_node) == ZERO_ADDRESS

    chain.ok(txs.release(ERIN, label_hash("erin"), PAID))
    assert queries.balance_of(chain.state, TOKEN, ERIN) == PRICE
    assert queries.get_account_balance(chain.state, SUBDOMAIN_REGISTRY, erin_node) == 0
    assert queries.owner(chain.state, erin_node) == ZERO_ADDRESS

    # A transferred name is released by whoever holds it now.
    code = chain.fails(txs.release(GRACE, label_hash("grace"), PAID))
    assert code == ErrorCode.NOT_NODE_OWNER
    chain.ok(txs.release(HEIDI, label_hash("grace"), PAID))
    assert queries.balance_of(chain.state, TOKEN, HEIDI) == PRICE
    assert queries.balance_of(chain.state, TOKEN, GRACE) == 0
    assert queries.owner(chain.state, grace_node) == ZERO_ADDRESS

    # Frank hands his name to Dave, who takes over the escrow as well.
    chain.ok(txs.set_owner(FRANK, frank_node, DAVE))
    code = chain.fails(txs.update_funds_owner(FRANK, label_hash("frank"), PAID))
    assert code == ErrorCode.NOT_NODE_OWNER
    chain.ok(txs.update_funds_owner(DAVE, label_hash("frank"), PAID))
    assert queries.get_funds_owner(chain.state, SUBDOMAIN_REGISTRY, frank_node) == DAVE

    # Moving the paid domain hands it and its price to the updated registry.
    chain.ok(txs.move_domain(DEPLOYER, UPDATED_SUBDOMAIN_REGISTRY, PAID))
    assert queries.owner(chain.state, PAID) == UPDATED_SUBDOMAIN_REGISTRY
    assert queries.get_price(chain.state, UPDATED_SUBDOMAIN_REGISTRY, PAID) == PRICE
    old = chain.state.registries[SUBDOMAIN_REGISTRY].domains[PAID]
    assert old.state == DomainState.MOVED

    _pay(chain, BOB)
    assert chain.fails(txs.register(BOB, label_hash("bob"), PAID)) == ErrorCode.DOMAIN_MOVED

    # Escrow left behind in the old registry is still returned to its funds owner.
    assert queries.get_account_balance(chain.state, SUBDOMAIN_REGISTRY, frank_node) == PRICE
    code = chain.fails(txs.release(FRANK, label_hash("frank"), PAID))
    assert code == ErrorCode.NOT_FUNDS_OWNER
    chain.ok(txs.release(DAVE, label_hash("frank"), PAID))
    assert queries.balance_of(chain.state, TOKEN, DAVE) == PRICE
    assert queries.balance_of(chain.state, TOKEN, FRANK) == 0
    assert queries.owner(chain.state, frank_node) == DAVE

    # The released accounts persist with a zero balance.
    assert queries.get_funds_owner(chain.state, SUBDOMAIN_REGISTRY, erin_node) == ERIN
    assert queries.get_account_balance(chain.state, SUBDOMAIN_REGISTRY, grace_node) == 0
