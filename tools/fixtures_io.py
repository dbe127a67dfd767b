"""Helpers to serialize/deserialize fixtures for the ENS subdomain registry."""

from __future__ import annotations

from typing import Any

from ens_subdomain_spec.types import (
    ChainState,
    DomainConfig,
    DomainState,
    Event,
    GlobalState,
    NameRecord,
    RegistryState,
    ResolverRecord,
    ResolverState,
    SubdomainAccount,
    TokenLedger,
    Transaction,
    TransactionType,
)


def _hex_to_bytes(v: str) -> bytes:
    return bytes.fromhex(v[2:] if v.startswith(("0x", "0X")) else v)


def _bytes_to_hex(v: bytes) -> str:
    return "0x" + v.hex()


def state_to_json(state: ChainState) -> dict[str, Any]:
    result: dict[str, Any] = {
        "network_chain_id": state.network_chain_id,
        "global_state": {
            "block_height": state.global_state.block_height,
            "timestamp": state.global_state.timestamp,
        },
        "ens": {
            "address": _bytes_to_hex(state.ens_address),
            "records": [
                {
                    "node": _bytes_to_hex(node),
                    "owner": _bytes_to_hex(rec.owner),
                    "resolver": _bytes_to_hex(rec.resolver),
                }
                for node, rec in state.ens.items()
            ],
        },
    }

    if state.token is not None:
        t = state.token
        result["token"] = {
            "address": _bytes_to_hex(t.address),
            "total_supply": t.total_supply,
            "balances": [
                {"address": _bytes_to_hex(a), "balance": b}
                for a, b in t.balances.items()
            ],
            "allowances": [
                {
                    "owner": _bytes_to_hex(owner),
                    "spender": _bytes_to_hex(spender),
                    "amount": amount,
                }
                for owner, spenders in t.allowances.items()
                for spender, amount in spenders.items()
            ],
        }

    if state.resolver is not None:
        result["resolver"] = {
            "address": _bytes_to_hex(state.resolver.address),
            "records": [
                {
                    "node": _bytes_to_hex(node),
                    "addr": _bytes_to_hex(rec.addr),
                    "pubkey": [_bytes_to_hex(rec.pubkey_x), _bytes_to_hex(rec.pubkey_y)],
                }
                for node, rec in state.resolver.records.items()
            ],
        }

    result["registries"] = [_registry_to_json(reg) for reg in state.registries.values()]
    return result


def _registry_to_json(reg: RegistryState) -> dict[str, Any]:
    return {
        "address": _bytes_to_hex(reg.address),
        "controller": _bytes_to_hex(reg.controller),
        "token": _bytes_to_hex(reg.token),
        "ens": _bytes_to_hex(reg.ens),
        "resolver": _bytes_to_hex(reg.resolver),
        "parent_registry": _bytes_to_hex(reg.parent_registry),
        "release_delay": reg.release_delay,
        "domains": [
            {
                "namehash": _bytes_to_hex(node),
                "price": cfg.price,
                "state": cfg.state.name.lower(),
            }
            for node, cfg in reg.domains.items()
        ],
        "accounts": [
            {
                "namehash": _bytes_to_hex(node),
                "balance": acct.balance,
                "funds_owner": _bytes_to_hex(acct.funds_owner),
                "created_at": acct.created_at,
            }
            for node, acct in reg.accounts.items()
        ],
    }


def state_from_json(data: dict[str, Any]) -> ChainState:
    gs = data.get("global_state", {})
    ens = data.get("ens", {})
    state = ChainState(
        global_state=GlobalState(
            block_height=gs.get("block_height", 0),
            timestamp=gs.get("timestamp", 0),
        ),
        network_chain_id=data["network_chain_id"],
        ens_address=_hex_to_bytes(ens.get("address", "00" * 20)),
    )

    for r in ens.get("records", []):
        state.ens[_hex_to_bytes(r["node"])] = NameRecord(
            owner=_hex_to_bytes(r["owner"]),
            resolver=_hex_to_bytes(r["resolver"]),
        )

    t = data.get("token")
    if t is not None:
        ledger = TokenLedger(
            address=_hex_to_bytes(t["address"]),
            total_supply=t.get("total_supply", 0),
        )
        for b in t.get("balances", []):
            ledger.balances[_hex_to_bytes(b["address"])] = b["balance"]
        for a in t.get("allowances", []):
            owner = _hex_to_bytes(a["owner"])
            ledger.allowances.setdefault(owner, {})[_hex_to_bytes(a["spender"])] = a["amount"]
        state.token = ledger

    res = data.get("resolver")
    if res is not None:
        resolver = ResolverState(address=_hex_to_bytes(res["address"]))
        for r in res.get("records", []):
            x, y = r.get("pubkey", ["00" * 32, "00" * 32])
            resolver.records[_hex_to_bytes(r["node"])] = ResolverRecord(
                addr=_hex_to_bytes(r["addr"]),
                pubkey_x=_hex_to_bytes(x),
                pubkey_y=_hex_to_bytes(y),
            )
        state.resolver = resolver

    for r in data.get("registries", []):
        reg = RegistryState(
            address=_hex_to_bytes(r["address"]),
            controller=_hex_to_bytes(r["controller"]),
            token=_hex_to_bytes(r["token"]),
            ens=_hex_to_bytes(r["ens"]),
            resolver=_hex_to_bytes(r["resolver"]),
            parent_registry=_hex_to_bytes(r["parent_registry"]),
            release_delay=r["release_delay"],
        )
        for d in r.get("domains", []):
            reg.domains[_hex_to_bytes(d["namehash"])] = DomainConfig(
                price=d["price"],
                state=DomainState[d.get("state", "active").upper()],
            )
        for a in r.get("accounts", []):
            reg.accounts[_hex_to_bytes(a["namehash"])] = SubdomainAccount(
                balance=a["balance"],
                funds_owner=_hex_to_bytes(a["funds_owner"]),
                created_at=a.get("created_at", 0),
            )
        state.registries[reg.address] = reg

    return state


def _value_to_json(value: Any) -> Any:
    """Recursively convert a value, turning bytes into hex strings."""
    if isinstance(value, (bytes, bytearray)):
        return _bytes_to_hex(bytes(value))
    if isinstance(value, dict):
        return {k: _value_to_json(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_value_to_json(item) for item in value]
    return value


def event_to_json(event: Event) -> dict[str, Any]:
    return {
        "emitter": _bytes_to_hex(event.emitter),
        "name": event.name,
        "args": _value_to_json(event.args),
    }


def tx_to_json(tx: Transaction) -> dict[str, Any]:
    return {
        "chain_id": tx.chain_id,
        "source": _bytes_to_hex(tx.source),
        "to": _bytes_to_hex(tx.to),
        "tx_type": tx.tx_type.value,
        "payload": _value_to_json(tx.payload),
    }


# Payload fields that carry addresses or hashes; everything else is an int.
_BYTES_FIELDS: set[str] = {
    "recipient", "spender", "owner",
    "node", "label", "resolver", "addr", "x", "y",
    "namehash", "new_registry", "pubkey_x", "pubkey_y",
}


def _json_to_bytes_payload(payload: Any) -> Any:
    """Convert hex string fields to bytes in a JSON payload."""
    if not isinstance(payload, dict):
        return payload
    result: dict[str, Any] = {}
    for key, value in payload.items():
        if key in _BYTES_FIELDS and isinstance(value, str):
            result[key] = _hex_to_bytes(value)
        else:
            result[key] = value
    return result


def tx_from_json(data: dict[str, Any]) -> Transaction:
    return Transaction(
        chain_id=data["chain_id"],
        source=_hex_to_bytes(data["source"]),
        to=_hex_to_bytes(data["to"]),
        tx_type=TransactionType(data["tx_type"]),
        payload=_json_to_bytes_payload(data.get("payload")),
    )
