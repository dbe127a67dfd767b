"""Pytest hooks to generate fixtures (EEST-style)."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from ens_subdomain_spec.state_digest import compute_state_digest
from ens_subdomain_spec.state_transition import TransitionResult, apply_tx
from ens_subdomain_spec.types import ChainState, Transaction
from tools.fixtures_io import event_to_json, state_to_json, tx_to_json

_STATE_CASES: dict[str, list[dict[str, Any]]] = {}
_VECTOR_CASES: dict[str, list[dict[str, Any]]] = {}

StateTest = Callable[[str, str, ChainState, Transaction], tuple[ChainState, TransitionResult]]


def pytest_addoption(parser: pytest.Parser) -> None:
    parser.addoption(
        "--output",
        action="store",
        default=None,
        help="Output directory for generated fixtures",
    )


@pytest.fixture
def state_test_group() -> StateTest:
    """Run a transaction, collect it as a fixture case, and hand back the outcome."""

    def _state_test_group(
        rel_path: str, name: str, pre_state: ChainState, tx: Transaction
    ) -> tuple[ChainState, TransitionResult]:
        post_state, result = apply_tx(pre_state, tx)
        _STATE_CASES.setdefault(rel_path, []).append(
            {
                "name": name,
                "pre_state": state_to_json(pre_state),
                "tx": tx_to_json(tx),
                "expected": {
                    "ok": result.ok,
                    "error": result.error.code.name if result.error else None,
                    "events": [event_to_json(e) for e in result.events],
                    "state_digest": compute_state_digest(post_state),
                    "post_state": state_to_json(post_state),
                },
            }
        )
        return post_state, result

    return _state_test_group


@pytest.fixture
def vector_test_group() -> Callable[[str, dict[str, Any]], None]:
    """Collect pre-built test_vectors under a specific fixture path."""

    def _vector_test_group(rel_path: str, vector: dict[str, Any]) -> None:
        _VECTOR_CASES.setdefault(rel_path, []).append(vector)

    return _vector_test_group


def pytest_sessionfinish(session: pytest.Session, exitstatus: int) -> None:
    output_dir = session.config.getoption("--output")
    if not output_dir:
        return

    out = Path(output_dir)
    for rel_path, cases in _STATE_CASES.items():
        _write_group(out / rel_path, "cases", cases)
    for rel_path, vectors in _VECTOR_CASES.items():
        _write_group(out / rel_path, "test_vectors", vectors)


def _write_group(target: Path, key: str, items: list[dict[str, Any]]) -> None:
    if not items:
        return
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps({key: items}, indent=2))
