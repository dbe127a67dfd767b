"""
Outcome comparison for registry conformance vectors.

A client outcome is the JSON body returned by ``POST /tx/execute``:
``{"success": bool, "error_code": int, "state_digest": str, "events": [...]}``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

COMPARED_FIELDS = ("success", "error_code", "state_digest", "events")

# Marker used as the "client" of an expectation recorded in the vector itself.
EXPECTED = "expected"


@dataclass
class Divergence:
    """One field on which a client disagrees with its baseline."""
    field: str
    expected: Any
    actual: Any
    client: str
    baseline: str
    vector_name: str
    details: Optional[str] = None


@dataclass
class ComparisonResult:
    divergences: List[Divergence] = field(default_factory=list)
    clients_compared: List[str] = field(default_factory=list)

    @property
    def has_divergences(self) -> bool:
        return bool(self.divergences)


def _normalize_events(events: Any) -> Any:
    if not isinstance(events, list):
        return events
    return [(e.get("emitter"), e.get("name"), e.get("args")) for e in events]


def _details(name: str, expected: Any, actual: Any) -> Optional[str]:
    if name == "error_code" and isinstance(expected, int) and isinstance(actual, int):
        return f"expected 0x{expected:04x}, got 0x{actual:04x}"
    if name == "events" and isinstance(expected, list) and isinstance(actual, list):
        return f"expected {len(expected)} events, got {len(actual)}"
    return None


class ResultComparator:
    """Compares client outcomes against a reference client and the vector."""

    def __init__(self, reference_client: str = "reference"):
        self.reference_client = reference_client

    def diff(
        self,
        baseline: Dict[str, Any],
        actual: Dict[str, Any],
        client: str,
        baseline_name: str,
        vector_name: str,
    ) -> List[Divergence]:
        """Fields present in both outcomes that disagree.

        A field missing on either side is not compared, so clients that do
        not report events are still checked on the remaining fields.
        """
        divergences = []
        for name in COMPARED_FIELDS:
            if name not in baseline or name not in actual:
                continue
            want, got = baseline[name], actual[name]
            if name == "events":
                want, got = _normalize_events(want), _normalize_events(got)
            if want != got:
                divergences.append(Divergence(
                    field=name,
                    expected=baseline[name],
                    actual=actual[name],
                    client=client,
                    baseline=baseline_name,
                    vector_name=vector_name,
                    details=_details(name, baseline[name], actual[name]),
                ))
        return divergences

    def compare_results(
        self,
        results: Dict[str, Dict[str, Any]],
        vector_name: str,
        expected: Optional[Dict[str, Any]] = None,
    ) -> ComparisonResult:
        divergences: List[Divergence] = []
        clients = list(results)

        if expected is not None:
            for client, outcome in results.items():
                divergences.extend(
                    self.diff(expected, outcome, client, EXPECTED, vector_name)
                )

        if len(clients) > 1:
            if self.reference_client not in results:
                raise ValueError(
                    f"Reference client '{self.reference_client}' not in results"
                )
            reference = results[self.reference_client]
            for client, outcome in results.items():
                if client == self.reference_client:
                    continue
                divergences.extend(self.diff(
                    reference, outcome, client, self.reference_client, vector_name
                ))

        return ComparisonResult(divergences=divergences, clients_compared=clients)

    def compare_state_digests(
        self,
        digests: Dict[str, str],
        vector_name: str,
    ) -> ComparisonResult:
        """Check that every client loaded the same pre-state."""
        results = {client: {"state_digest": d} for client, d in digests.items()}
        return self.compare_results(results, vector_name)
