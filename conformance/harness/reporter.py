"""
Report generation for registry conformance runs.
"""

import json
import os
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from .comparator import ComparisonResult, Divergence

TITLE = "ENS Subdomain Registry Conformance"


@dataclass
class VectorResult:
    vector_name: str
    suite_name: str
    passed: bool
    execution_time_ms: float
    skipped: bool = False
    comparison: Optional[ComparisonResult] = None
    error: Optional[str] = None


@dataclass
class SuiteResult:
    suite_name: str
    execution_time_ms: float
    results: List[VectorResult] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(1 for r in self.results if not r.skipped)

    @property
    def passed(self) -> int:
        return sum(1 for r in self.results if r.passed and not r.skipped)

    @property
    def failed(self) -> int:
        return self.total - self.passed

    @property
    def skipped(self) -> int:
        return sum(1 for r in self.results if r.skipped)

    @property
    def pass_rate(self) -> float:
        if self.total == 0:
            return 0.0
        return self.passed / self.total * 100


@dataclass
class ConformanceReport:
    timestamp: str
    clients: List[str]
    reference_client: str
    execution_time_ms: float
    suites: List[SuiteResult]

    @property
    def total(self) -> int:
        return sum(s.total for s in self.suites)

    @property
    def passed(self) -> int:
        return sum(s.passed for s in self.suites)

    @property
    def failed(self) -> int:
        return sum(s.failed for s in self.suites)

    @property
    def divergences(self) -> List[Divergence]:
        return [
            d
            for s in self.suites
            for r in s.results
            if r.comparison
            for d in r.comparison.divergences
        ]


class ReportGenerator:
    """Writes JSON and text summaries of a run into ``result_dir``."""

    def __init__(self, result_dir: str):
        self.result_dir = result_dir
        os.makedirs(result_dir, exist_ok=True)

    def generate_report(
        self,
        suites: List[SuiteResult],
        clients: List[str],
        reference_client: str,
        execution_time_ms: float,
    ) -> ConformanceReport:
        return ConformanceReport(
            timestamp=datetime.now(timezone.utc).isoformat(),
            clients=clients,
            reference_client=reference_client,
            execution_time_ms=execution_time_ms,
            suites=suites,
        )

    def write_json_report(
        self,
        report: ConformanceReport,
        filename: str = "conformance-report.json",
    ) -> str:
        path = os.path.join(self.result_dir, filename)
        with open(path, "w") as f:
            json.dump(self.report_to_dict(report), f, indent=2)
        return path

    def summary_lines(self, report: ConformanceReport) -> List[str]:
        divergences = report.divergences
        lines = [
            "=" * 60,
            TITLE,
            "=" * 60,
            f"Timestamp: {report.timestamp}",
            f"Clients: {', '.join(report.clients)}",
            f"Reference: {report.reference_client}",
            "",
            f"  Total:        {report.total}",
            f"  Passed:       {report.passed}",
            f"  Failed:       {report.failed}",
            f"  Divergences:  {len(divergences)}",
            f"  Pass Rate:    {report.passed / max(report.total, 1) * 100:.1f}%",
            f"  Duration:     {report.execution_time_ms:.2f}ms",
            "",
            "Suites:",
        ]
        for suite in report.suites:
            status = "PASS" if suite.failed == 0 else "FAIL"
            lines.append(
                f"  [{status}] {suite.suite_name}: {suite.passed}/{suite.total}"
                f" ({suite.pass_rate:.1f}%, {suite.skipped} skipped)"
            )

        if divergences:
            lines += ["", "Divergences:"]
            for div in divergences:
                lines.append(f"  - {div.vector_name} ({div.field}):")
                lines.append(f"      {div.baseline}: {div.expected}")
                lines.append(f"      {div.client}: {div.actual}")
                if div.details:
                    lines.append(f"      {div.details}")

        lines += ["", "=" * 60]
        return lines

    def write_summary(
        self,
        report: ConformanceReport,
        filename: str = "conformance-summary.txt",
    ) -> str:
        path = os.path.join(self.result_dir, filename)
        with open(path, "w") as f:
            f.write("\n".join(self.summary_lines(report)))
        return path

    def print_summary(self, report: ConformanceReport) -> None:
        print("\n".join(self.summary_lines(report)))
        print(f"Overall: {'PASSED' if report.failed == 0 else 'FAILED'}")

    def report_to_dict(self, report: ConformanceReport) -> Dict[str, Any]:
        return {
            "timestamp": report.timestamp,
            "clients": report.clients,
            "reference_client": report.reference_client,
            "total": report.total,
            "passed": report.passed,
            "failed": report.failed,
            "execution_time_ms": report.execution_time_ms,
            "suites": [
                {
                    "suite_name": s.suite_name,
                    "total": s.total,
                    "passed": s.passed,
                    "failed": s.failed,
                    "skipped": s.skipped,
                    "pass_rate": s.pass_rate,
                    "execution_time_ms": s.execution_time_ms,
                    "failures": [
                        {"vector_name": r.vector_name, "error": r.error}
                        for r in s.results
                        if not r.passed and not r.skipped
                    ],
                }
                for s in report.suites
            ],
            "divergences": [
                {k: str(v) if k in ("expected", "actual") else v for k, v in asdict(d).items()}
                for d in report.divergences
            ],
        }
