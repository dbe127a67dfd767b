"""Fee token transitions (ERC20 test token: mint, transfer, approve, transferFrom)."""

from __future__ import annotations

from ..config import UINT256_MAX, ZERO_ADDRESS
from ..errors import ErrorCode, err
from ..types import ChainState, TokenLedger, Transaction, TransactionType
from .common import payload_dict, require_address, require_amount, token_at


def verify(state: ChainState, tx: Transaction) -> None:
    p = payload_dict(tx.payload, "token")
    token = token_at(state, tx.to)

    tt = tx.tx_type
    if tt == TransactionType.MINT:
        amount = require_amount(p, "amount")
        if token.total_supply + amount > UINT256_MAX:
            raise err(ErrorCode.OVERFLOW, "total supply overflow")
    elif tt == TransactionType.TRANSFER:
        require_address(p, "recipient")
        amount = require_amount(p, "amount")
        if token.balance_of(tx.source) < amount:
            raise err(ErrorCode.INSUFFICIENT_BALANCE, "insufficient token balance")
    elif tt == TransactionType.APPROVE:
        require_address(p, "spender")
        require_amount(p, "amount")
    elif tt == TransactionType.TRANSFER_FROM:
        owner = require_address(p, "owner")
        require_address(p, "recipient")
        amount = require_amount(p, "amount")
        _check_pull(token, owner, tx.source, amount)
    else:
        raise err(ErrorCode.INVALID_TYPE, f"unsupported token tx type: {tt}")


def apply(state: ChainState, tx: Transaction) -> ChainState:
    p = tx.payload
    tt = tx.tx_type
    if tt == TransactionType.MINT:
        mint(state, tx.to, tx.source, p["amount"])
    elif tt == TransactionType.TRANSFER:
        transfer(state, tx.to, tx.source, p["recipient"], p["amount"])
    elif tt == TransactionType.APPROVE:
        approve(state, tx.to, tx.source, p["spender"], p["amount"])
    elif tt == TransactionType.TRANSFER_FROM:
        transfer_from(state, tx.to, tx.source, p["owner"], p["recipient"], p["amount"])
    else:
        raise err(ErrorCode.INVALID_TYPE, f"unsupported token tx type: {tt}")
    return state


def _check_pull(token: TokenLedger, owner: bytes, spender: bytes, amount: int) -> None:
    if token.allowance(owner, spender) < amount:
        raise err(ErrorCode.INSUFFICIENT_ALLOWANCE, "allowance below amount")
    if token.balance_of(owner) < amount:
        raise err(ErrorCode.INSUFFICIENT_BALANCE, "insufficient token balance")


def _move(token: TokenLedger, src: bytes, dst: bytes, amount: int) -> None:
    if token.balance_of(src) < amount:
        raise err(ErrorCode.INSUFFICIENT_BALANCE, "insufficient token balance")
    token.balances[src] = token.balance_of(src) - amount
    token.balances[dst] = token.balance_of(dst) + amount


# The helpers below are also the entry points other contracts call into.
# They mutate `state` in place; callers run on a private copy.


def mint(state: ChainState, token_address: bytes, to: bytes, amount: int) -> None:
    token = token_at(state, token_address)
    if token.total_supply + amount > UINT256_MAX:
        raise err(ErrorCode.OVERFLOW, "total supply overflow")
    token.total_supply += amount
    token.balances[to] = token.balance_of(to) + amount
    state.emit(token.address, "Transfer", sender=ZERO_ADDRESS, recipient=to, value=amount)


def transfer(state: ChainState, token_address: bytes, sender: bytes, to: bytes, amount: int) -> None:
    token = token_at(state, token_address)
    _move(token, sender, to, amount)
    state.emit(token.address, "Transfer", sender=sender, recipient=to, value=amount)


def approve(state: ChainState, token_address: bytes, owner: bytes, spender: bytes, amount: int) -> None:
    token = token_at(state, token_address)
    token.allowances.setdefault(owner, {})[spender] = amount
    state.emit(token.address, "Approval", owner=owner, spender=spender, value=amount)


def transfer_from(
    state: ChainState,
    token_address: bytes,
    spender: bytes,
    owner: bytes,
    to: bytes,
    amount: int,
) -> None:
    token = token_at(state, token_address)
    _check_pull(token, owner, spender, amount)
    allowances = token.allowances.setdefault(owner, {})
    allowances[spender] = allowances.get(spender, 0) - amount
    _move(token, owner, to, amount)
    state.emit(token.address, "Transfer", sender=owner, recipient=to, value=amount)
