"""Transition-level properties: atomicity, blocks, time, digests."""

from __future__ import annotations

import pytest

from ens_subdomain_spec import queries
from ens_subdomain_spec import transactions as txs
from ens_subdomain_spec.config import CHAIN_ID_MAINNET, GENESIS_TIMESTAMP
from ens_subdomain_spec.crypto.hash_algorithms import label_hash, namehash
from ens_subdomain_spec.errors import ErrorCode
from ens_subdomain_spec.genesis import SUBDOMAIN_REGISTRY, TOKEN, build_genesis, seed_name
from ens_subdomain_spec.state_digest import compute_state_digest
from ens_subdomain_spec.state_transition import (
    advance_time,
    apply_block,
    apply_tx,
    verify_tx,
)
from ens_subdomain_spec.test_accounts import ALICE, BOB, DEPLOYER
from ens_subdomain_spec.types import ChainState, DomainConfig, Transaction, TransactionType

PAID_NODE = namehash("stateofus.eth")


def _base_state() -> ChainState:
    state = build_genesis()
    seed_name(state, "stateofus.eth", SUBDOMAIN_REGISTRY)
    state.registries[SUBDOMAIN_REGISTRY].domains[PAID_NODE] = DomainConfig(price=100)
    return state


def test_chain_id_mismatch() -> None:
    tx = txs.mint(ALICE, 1)
    tx.chain_id = CHAIN_ID_MAINNET
    post, result = apply_tx(_base_state(), tx)

    assert result.error.code == ErrorCode.CHAIN_ID_MISMATCH


def test_malformed_source() -> None:
    tx = txs.mint(b"\x01" * 19, 1)
    _, result = apply_tx(_base_state(), tx)

    assert result.error.code == ErrorCode.INVALID_ADDRESS


def test_non_dict_payload() -> None:
    tx = Transaction(
        chain_id=_base_state().network_chain_id,
        source=ALICE,
        to=SUBDOMAIN_REGISTRY,
        tx_type=TransactionType.REGISTER,
        payload=[1, 2, 3],
    )
    _, result = apply_tx(_base_state(), tx)

    assert result.error.code == ErrorCode.INVALID_PAYLOAD


def test_failed_tx_leaves_state_and_log_untouched() -> None:
    state = _base_state()
    state, _ = apply_tx(state, txs.mint(ALICE, 100))
    digest = compute_state_digest(state)
    log_len = len(state.logs)

    post, result = apply_tx(state, txs.register(ALICE, label_hash("alice"), PAID_NODE))

    assert not result.ok
    assert result.events == []
    assert post is state
    assert compute_state_digest(post) == digest
    assert len(post.logs) == log_len


def test_success_does_not_mutate_pre_state() -> None:
    state = _base_state()
    before = compute_state_digest(state)
    post, result = apply_tx(state, txs.mint(ALICE, 100))

    assert result.ok
    assert compute_state_digest(state) == before
    assert compute_state_digest(post) != before
    assert queries.balance_of(state, TOKEN, ALICE) == 0


def test_verify_tx_does_not_apply() -> None:
    state = _base_state()
    before = compute_state_digest(state)

    assert verify_tx(state, txs.mint(ALICE, 100)).ok
    assert compute_state_digest(state) == before
    assert verify_tx(state, txs.transfer(ALICE, BOB, 1)).error.code == (
        ErrorCode.INSUFFICIENT_BALANCE
    )


def test_apply_block_success() -> None:
    state = _base_state()
    block = [
        txs.mint(ALICE, 100),
        txs.approve(ALICE, SUBDOMAIN_REGISTRY, 100),
        txs.register(ALICE, label_hash("alice"), PAID_NODE),
    ]
    post, result = apply_block(state, block)

    assert result.ok
    assert post.global_state.block_height == state.global_state.block_height + 1
    assert queries.owner(post, namehash("alice.stateofus.eth")) == ALICE
    assert result.events[-1].name == "SubdomainRegistered"


def test_apply_block_is_atomic() -> None:
    state = _base_state()
    block = [
        txs.mint(ALICE, 100),
        txs.register(ALICE, label_hash("alice"), PAID_NODE),
    ]
    post, result = apply_block(state, block)

    assert result.error.code == ErrorCode.INSUFFICIENT_ALLOWANCE
    assert post is state
    assert queries.balance_of(post, TOKEN, ALICE) == 0


def test_advance_time() -> None:
    state = build_genesis()
    later = advance_time(state, 10)

    assert later.global_state.timestamp == GENESIS_TIMESTAMP + 10
    assert state.global_state.timestamp == GENESIS_TIMESTAMP
    with pytest.raises(ValueError):
        advance_time(state, -1)


def test_digest_ignores_zeroed_entries() -> None:
    state = build_genesis()
    touched = build_genesis()
    touched.token.balances[ALICE] = 0
    touched.token.allowances[ALICE] = {BOB: 0}

    assert compute_state_digest(state) == compute_state_digest(touched)


def test_digest_tracks_registry_state() -> None:
    state = _base_state()
    moved = _base_state()
    moved.registries[SUBDOMAIN_REGISTRY].domains[PAID_NODE].price = 101

    assert compute_state_digest(state) != compute_state_digest(moved)
    assert compute_state_digest(state) == compute_state_digest(_base_state())
    assert len(compute_state_digest(state)) == 64


def test_controller_is_deployer() -> None:
    assert build_genesis().registries[SUBDOMAIN_REGISTRY].controller == DEPLOYER
