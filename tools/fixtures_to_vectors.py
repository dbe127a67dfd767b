#!/usr/bin/env python3
"""Convert generated fixtures into client-consumable YAML vectors.

State cases become runnable vectors carrying the pre-state, the transaction
and the expected outcome. Plain test vectors are mirrored as-is.
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import Any

import yaml

ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(ROOT))

from ens_subdomain_spec.errors import ErrorCode  # noqa: E402

MAPPING = {
    "crypto": "execution/crypto",
    "transactions": "execution/transactions",
}


def map_dest(rel: Path) -> Path:
    if not rel.parts:
        return Path("unmapped")
    mapped = MAPPING.get(rel.parts[0])
    if not mapped:
        return Path("unmapped") / rel
    return Path(mapped) / Path(*rel.parts[1:])


def write_yaml(path: Path, data: dict) -> None:
    path.write_text(yaml.safe_dump(data, sort_keys=False, width=4096))


def _map_error_code(name: str | None) -> int:
    if not name:
        return int(ErrorCode.SUCCESS)
    try:
        return int(ErrorCode[name])
    except KeyError:
        return int(ErrorCode.UNKNOWN)


def case_to_vector(case: dict[str, Any]) -> dict[str, Any]:
    expected = case.get("expected", {})
    vector: dict[str, Any] = {
        "name": case.get("name", ""),
        "description": case.get("description", ""),
        "pre_state": case.get("pre_state"),
        "input": {"kind": "tx", "tx": case.get("tx")},
        "expected": {
            "success": bool(expected.get("ok", False)),
            "error_code": _map_error_code(expected.get("error")),
            "state_digest": expected.get("state_digest", ""),
            "events": expected.get("events", []),
            "post_state": expected.get("post_state"),
        },
    }
    if case.get("runnable") is False:
        vector["runnable"] = False
    return vector


def main() -> None:
    parser = argparse.ArgumentParser(description="Convert fixtures to vectors")
    parser.add_argument("--fixtures", default=str(ROOT / "fixtures"))
    parser.add_argument("--vectors", default=str(ROOT / "vectors"))
    args = parser.parse_args()

    fixtures = Path(args.fixtures).resolve()
    vectors = Path(args.vectors).resolve()
    if not fixtures.exists():
        raise SystemExit(f"fixtures dir not found: {fixtures}")

    count = 0
    for path in sorted(fixtures.rglob("*.json")):
        rel = path.relative_to(fixtures)
        dest = (vectors / map_dest(rel)).with_suffix(".yaml")
        dest.parent.mkdir(parents=True, exist_ok=True)

        data = json.loads(path.read_text())
        if isinstance(data, dict) and isinstance(data.get("cases"), list):
            data = {"test_vectors": [case_to_vector(c) for c in data["cases"]]}
        write_yaml(dest, data)
        count += 1

    print(f"Written {count} vector files into {vectors}")


if __name__ == "__main__":
    main()
