"""Consume fixtures and validate them against the Python state transition."""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(ROOT))

from ens_subdomain_spec.state_digest import compute_state_digest  # noqa: E402
from ens_subdomain_spec.state_transition import apply_tx  # noqa: E402
from tools.fixtures_io import event_to_json, state_from_json, tx_from_json  # noqa: E402


def _check_state_cases(path: Path) -> list[str]:
    failures: list[str] = []
    data = json.loads(path.read_text())

    for case in data.get("cases", []):
        pre_state = state_from_json(case["pre_state"])
        tx = tx_from_json(case["tx"])
        post_state, result = apply_tx(pre_state, tx)

        expected = case["expected"]
        if result.ok != expected["ok"]:
            failures.append(f"{case['name']}: ok_mismatch")
            continue

        actual_err = result.error.code.name if result.error else None
        if actual_err != expected["error"]:
            failures.append(f"{case['name']}: error_mismatch ({actual_err} != {expected['error']})")
            continue

        if compute_state_digest(post_state) != expected["state_digest"]:
            failures.append(f"{case['name']}: state_digest_mismatch")
            continue

        events = [event_to_json(e) for e in result.events]
        if events != expected.get("events", []):
            failures.append(f"{case['name']}: events_mismatch")

    return failures


def main() -> None:
    parser = argparse.ArgumentParser(description="Replay registry fixtures")
    parser.add_argument("--fixtures", default=str(ROOT / "fixtures"))
    args = parser.parse_args()

    fixtures = Path(args.fixtures)
    if not fixtures.exists():
        raise SystemExit(f"fixtures dir not found: {fixtures}")

    failures: list[str] = []
    checked = 0
    for path in sorted(fixtures.rglob("*.json")):
        data = json.loads(path.read_text())
        if "cases" not in data:
            continue
        checked += 1
        failures.extend(f"{path.relative_to(fixtures)}: {f}" for f in _check_state_cases(path))

    if failures:
        for f in failures:
            print("FAIL", f)
        raise SystemExit(1)

    print(f"All fixtures passed ({checked} files)")


if __name__ == "__main__":
    main()
