"""
Configuration for the registry conformance harness.
"""

import os
from dataclasses import dataclass, field
from typing import Dict

_TRUE = ("true", "1", "yes")


@dataclass
class ClientConfig:
    """A single implementation exposing the conformance HTTP API."""
    name: str
    endpoint: str
    enabled: bool = True
    timeout: float = 30.0


@dataclass
class HarnessConfig:
    """Harness settings, loaded from the environment and overridden by CLI flags."""
    clients: Dict[str, ClientConfig] = field(default_factory=dict)
    reference_client: str = "reference"

    vector_dir: str = "/vectors"
    result_dir: str = "/results"

    stop_on_first_failure: bool = False
    verbose: bool = False
    # Compare every client against the expectations recorded in the vector.
    check_expected: bool = True

    request_timeout: float = 30.0

    @classmethod
    def from_env(cls) -> "HarnessConfig":
        config = cls()
        config.request_timeout = float(os.environ.get("REQUEST_TIMEOUT", "30"))

        config.clients = {
            "reference": ClientConfig(
                name="Reference registry",
                endpoint=os.environ.get("REFERENCE_ENDPOINT", "http://localhost:8081"),
                timeout=config.request_timeout,
            ),
        }
        indexer = os.environ.get("INDEXER_ENDPOINT")
        if indexer:
            config.clients["indexer"] = ClientConfig(
                name="Registry indexer",
                endpoint=indexer,
                timeout=config.request_timeout,
            )

        config.vector_dir = os.environ.get("VECTOR_DIR", config.vector_dir)
        config.result_dir = os.environ.get("RESULT_DIR", config.result_dir)
        config.verbose = os.environ.get("VERBOSE", "").lower() in _TRUE
        config.stop_on_first_failure = (
            os.environ.get("STOP_ON_FIRST_FAILURE", "").lower() in _TRUE
        )
        return config

    def get_enabled_clients(self) -> Dict[str, ClientConfig]:
        return {name: c for name, c in self.clients.items() if c.enabled}
