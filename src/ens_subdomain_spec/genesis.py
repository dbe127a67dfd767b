"""Genesis state: the token, name registry, resolver and two registries.

Mirrors the deployment the registry is tested against: a test token, an ENS
registry whose root is owned by the deployer, a public resolver, the
subdomain registry, and an updated registry that names the first one as its
parent so domains can be moved into it.
"""

from __future__ import annotations

from .config import (
    ADDRESS_SIZE,
    CHAIN_ID_DEVNET,
    DEFAULT_RELEASE_DELAY,
    GENESIS_TIMESTAMP,
    ROOT_NODE,
    ZERO_ADDRESS,
)
from .crypto.hash_algorithms import keccak256, namehash
from .test_accounts import DEPLOYER
from .types import (
    ChainState,
    GlobalState,
    NameRecord,
    RegistryState,
    ResolverState,
    TokenLedger,
)


def contract_address(deployer: bytes, nonce: int) -> bytes:
    return keccak256(deployer + nonce.to_bytes(8, "big"))[-ADDRESS_SIZE:]


TOKEN = contract_address(DEPLOYER, 0)
ENS_REGISTRY = contract_address(DEPLOYER, 1)
PUBLIC_RESOLVER = contract_address(DEPLOYER, 2)
SUBDOMAIN_REGISTRY = contract_address(DEPLOYER, 3)
UPDATED_SUBDOMAIN_REGISTRY = contract_address(DEPLOYER, 4)


def deploy_registry(
    state: ChainState,
    address: bytes,
    controller: bytes = DEPLOYER,
    parent_registry: bytes = ZERO_ADDRESS,
    release_delay: int = DEFAULT_RELEASE_DELAY,
) -> RegistryState:
    """Add a registry wired to the state's token, name registry and resolver."""
    if state.token is None or state.resolver is None:
        raise ValueError("collaborators must be deployed before a registry")
    if address in state.registries:
        raise ValueError(f"registry already deployed at {address.hex()}")
    reg = RegistryState(
        address=address,
        controller=controller,
        token=state.token.address,
        ens=state.ens_address,
        resolver=state.resolver.address,
        parent_registry=parent_registry,
        release_delay=release_delay,
    )
    state.registries[address] = reg
    return reg


def seed_name(state: ChainState, name: str, owner: bytes) -> bytes:
    """Record ``owner`` for ``name`` in the name registry without a transaction."""
    node = namehash(name)
    state.ens.setdefault(node, NameRecord()).owner = owner
    return node


def build_genesis(
    chain_id: int = CHAIN_ID_DEVNET,
    deployer: bytes = DEPLOYER,
    release_delay: int = DEFAULT_RELEASE_DELAY,
    timestamp: int = GENESIS_TIMESTAMP,
) -> ChainState:
    state = ChainState(
        global_state=GlobalState(block_height=0, timestamp=timestamp),
        network_chain_id=chain_id,
        token=TokenLedger(address=TOKEN),
        ens_address=ENS_REGISTRY,
        resolver=ResolverState(address=PUBLIC_RESOLVER),
    )
    state.ens[ROOT_NODE] = NameRecord(owner=deployer)
    deploy_registry(state, SUBDOMAIN_REGISTRY, deployer, release_delay=release_delay)
    deploy_registry(
        state,
        UPDATED_SUBDOMAIN_REGISTRY,
        deployer,
        parent_registry=SUBDOMAIN_REGISTRY,
        release_delay=release_delay,
    )
    return state
