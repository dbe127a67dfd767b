"""Payload and state lookups shared by the tx handlers."""

from __future__ import annotations

from ..config import ADDRESS_SIZE, HASH_SIZE, UINT256_MAX, ZERO_ADDRESS
from ..errors import ErrorCode, err
from ..types import ChainState, NameRecord, RegistryState, ResolverState, TokenLedger


def payload_dict(payload: object, what: str) -> dict:
    if not isinstance(payload, dict):
        raise err(ErrorCode.INVALID_PAYLOAD, f"{what} payload must be dict")
    return payload


def require_address(p: dict, key: str) -> bytes:
    v = p.get(key)
    if not isinstance(v, bytes) or len(v) != ADDRESS_SIZE:
        raise err(ErrorCode.INVALID_ADDRESS, f"{key} must be a {ADDRESS_SIZE}-byte address")
    return v


def require_hash(p: dict, key: str) -> bytes:
    v = p.get(key)
    if not isinstance(v, bytes) or len(v) != HASH_SIZE:
        raise err(ErrorCode.INVALID_HASH, f"{key} must be {HASH_SIZE} bytes")
    return v


def require_amount(p: dict, key: str) -> int:
    v = p.get(key)
    if isinstance(v, bool) or not isinstance(v, int):
        raise err(ErrorCode.INVALID_AMOUNT, f"{key} must be an integer")
    if v < 0 or v > UINT256_MAX:
        raise err(ErrorCode.INVALID_AMOUNT, f"{key} out of uint256 range")
    return v


def token_at(state: ChainState, address: bytes) -> TokenLedger:
    if state.token is None or state.token.address != address:
        raise err(ErrorCode.CONTRACT_NOT_FOUND, "token not deployed at address")
    return state.token


def resolver_at(state: ChainState, address: bytes) -> ResolverState:
    if state.resolver is None or state.resolver.address != address:
        raise err(ErrorCode.CONTRACT_NOT_FOUND, "resolver not deployed at address")
    return state.resolver


def registry_at(state: ChainState, address: bytes) -> RegistryState:
    reg = state.registries.get(address)
    if reg is None:
        raise err(ErrorCode.CONTRACT_NOT_FOUND, "registry not deployed at address")
    return reg


def require_ens(state: ChainState, address: bytes) -> None:
    if address == ZERO_ADDRESS or address != state.ens_address:
        raise err(ErrorCode.CONTRACT_NOT_FOUND, "name registry not deployed at address")


def node_owner(state: ChainState, node: bytes) -> bytes:
    rec = state.ens.get(node)
    return rec.owner if rec is not None else ZERO_ADDRESS


def node_record(state: ChainState, node: bytes) -> NameRecord:
    return state.ens.setdefault(node, NameRecord())
