#!/usr/bin/env python3
"""
Registry conformance runner.

Loads each vector's pre-state into every configured client, executes the
vector's transaction, and compares the outcomes with the reference client and
with the expectations recorded in the vector.

Run as ``python -m conformance.harness.runner`` from the repository root.
"""

import asyncio
import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import aiohttp
import click
import yaml

from .comparator import ComparisonResult, ResultComparator
from .config import ClientConfig, HarnessConfig
from .reporter import ConformanceReport, ReportGenerator, SuiteResult, VectorResult

logger = logging.getLogger(__name__)


class ConformanceClient:
    """HTTP client for a single implementation."""

    def __init__(self, config: ClientConfig):
        self.config = config
        self.session: Optional[aiohttp.ClientSession] = None

    @property
    def name(self) -> str:
        return self.config.name

    async def connect(self) -> None:
        timeout = aiohttp.ClientTimeout(total=self.config.timeout)
        self.session = aiohttp.ClientSession(timeout=timeout)

    async def close(self) -> None:
        if self.session:
            await self.session.close()

    async def _post(self, path: str, body: Dict[str, Any]) -> Dict[str, Any]:
        async with self.session.post(f"{self.config.endpoint}{path}", json=body) as resp:
            resp.raise_for_status()
            return await resp.json()

    async def load_state(self, state: Dict[str, Any]) -> Optional[str]:
        """Replace the client's state; returns its digest, or None on failure."""
        try:
            data = await self._post("/state/load", state)
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("[%s] load state failed: %s", self.name, e)
            return None
        if not data.get("success"):
            logger.error("[%s] load state rejected: %s", self.name, data.get("error"))
            return None
        return data.get("state_digest")

    async def execute_tx(self, tx: Dict[str, Any]) -> Dict[str, Any]:
        try:
            return await self._post("/tx/execute", {"tx": tx})
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            logger.error("[%s] execute tx failed: %s", self.name, e)
            return {"success": False, "error": str(e)}


class ConformanceHarness:

    def __init__(self, config: HarnessConfig, clients: Optional[Dict[str, Any]] = None):
        self.config = config
        self.clients: Dict[str, Any] = clients or {}
        self.comparator = ResultComparator(reference_client=config.reference_client)
        self.reporter = ReportGenerator(config.result_dir)

    async def setup(self) -> None:
        for key, client_config in self.config.get_enabled_clients().items():
            client = ConformanceClient(client_config)
            await client.connect()
            self.clients[key] = client
            logger.info("Connected to %s at %s", client_config.name, client_config.endpoint)

    async def teardown(self) -> None:
        for client in self.clients.values():
            await client.close()

    async def load_state_all(self, state: Dict[str, Any], vector_name: str) -> Optional[ComparisonResult]:
        """Load ``state`` everywhere; None if any client failed to load it."""
        digests = await asyncio.gather(*[c.load_state(state) for c in self.clients.values()])
        if any(d is None for d in digests):
            return None
        return self.comparator.compare_state_digests(
            dict(zip(self.clients, digests)), f"{vector_name}:pre_state"
        )

    async def run_vector(self, vector: Dict[str, Any]) -> VectorResult:
        name = vector.get("name", "unknown")
        start = time.monotonic()

        def result(passed: bool, **kwargs: Any) -> VectorResult:
            return VectorResult(
                vector_name=name,
                suite_name="",
                passed=passed,
                execution_time_ms=(time.monotonic() - start) * 1000,
                **kwargs,
            )

        if vector.get("runnable") is False:
            return result(True, skipped=True)

        tx = (vector.get("input") or {}).get("tx")
        if not tx:
            return result(True, skipped=True)

        if "pre_state" in vector:
            loaded = await self.load_state_all(vector["pre_state"], name)
            if loaded is None:
                return result(False, error="state load failed")
            if loaded.has_divergences:
                return result(False, comparison=loaded, error="pre-state divergence")

        outcomes = dict(zip(
            self.clients,
            await asyncio.gather(*[c.execute_tx(tx) for c in self.clients.values()]),
        ))
        expected = vector.get("expected") if self.config.check_expected else None
        comparison = self.comparator.compare_results(outcomes, name, expected)
        return result(not comparison.has_divergences, comparison=comparison)

    async def run_suite(self, path: Path) -> SuiteResult:
        logger.info("Running suite: %s", path.stem)
        start = time.monotonic()
        suite = yaml.safe_load(path.read_text()) or {}

        results: List[VectorResult] = []
        for vector in suite.get("test_vectors", []):
            vr = await self.run_vector(vector)
            vr.suite_name = path.stem
            results.append(vr)
            status = "SKIP" if vr.skipped else ("PASS" if vr.passed else "FAIL")
            logger.info("  [%s] %s", status, vr.vector_name)
            if not vr.passed and self.config.stop_on_first_failure:
                break

        return SuiteResult(
            suite_name=path.stem,
            execution_time_ms=(time.monotonic() - start) * 1000,
            results=results,
        )

    async def run_all(self, paths: List[Path]) -> ConformanceReport:
        start = time.monotonic()
        suites = []
        for path in paths:
            suite = await self.run_suite(path)
            suites.append(suite)
            if suite.failed and self.config.stop_on_first_failure:
                break
        return self.reporter.generate_report(
            suites=suites,
            clients=list(self.clients),
            reference_client=self.comparator.reference_client,
            execution_time_ms=(time.monotonic() - start) * 1000,
        )


def find_vector_files(vector_dir: Path) -> List[Path]:
    return sorted(p for p in vector_dir.rglob("*") if p.suffix in (".yaml", ".yml"))


@click.command()
@click.option("--vectors", default=None, help="Vectors directory or a single YAML file")
@click.option("--reference-endpoint", default=None, help="Reference registry endpoint URL")
@click.option("--indexer-endpoint", default=None, help="Indexer endpoint URL")
@click.option("--result-dir", default=None, help="Directory to write results")
@click.option("--no-expected", is_flag=True, help="Only compare clients with each other")
@click.option("--verbose", is_flag=True, help="Enable debug logging")
@click.option("--stop-on-failure", is_flag=True, help="Stop on first failing vector")
def main(
    vectors: Optional[str],
    reference_endpoint: Optional[str],
    indexer_endpoint: Optional[str],
    result_dir: Optional[str],
    no_expected: bool,
    verbose: bool,
    stop_on_failure: bool,
) -> None:
    """Run registry conformance vectors against live clients."""
    config = HarnessConfig.from_env()

    if reference_endpoint:
        config.clients["reference"].endpoint = reference_endpoint
    if indexer_endpoint:
        config.clients["indexer"] = ClientConfig(
            name="Registry indexer",
            endpoint=indexer_endpoint,
            timeout=config.request_timeout,
        )
    if result_dir:
        config.result_dir = result_dir
    if no_expected:
        config.check_expected = False
    config.verbose = config.verbose or verbose
    config.stop_on_first_failure = config.stop_on_first_failure or stop_on_failure

    logging.basicConfig(
        level=logging.DEBUG if config.verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
    )

    source = Path(vectors or config.vector_dir)
    vector_files = [source] if source.is_file() else find_vector_files(source)
    if not vector_files:
        logger.error("No vector files found in %s", source)
        sys.exit(1)
    logger.info("Found %d vector files", len(vector_files))

    async def run() -> int:
        harness = ConformanceHarness(config)
        try:
            await harness.setup()
            report = await harness.run_all(vector_files)
            harness.reporter.write_json_report(report)
            harness.reporter.write_summary(report)
            harness.reporter.print_summary(report)
            return 0 if report.failed == 0 else 1
        finally:
            await harness.teardown()

    sys.exit(asyncio.run(run()))


if __name__ == "__main__":
    main()
