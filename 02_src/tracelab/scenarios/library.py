"""Scenario registry: id -> document factory."""

from dataclasses import dataclass
from typing import Any, Callable

from ..errors import UnknownScenarioError
from ..logging_config import get_logger
from ..models import Trace
from ..trace import load_trace
from . import attacks, resolution, security

logger = get_logger(__name__)

ScenarioFactory = Callable[[str], dict[str, Any]]

DEFAULT_DOMAIN = "example.com"


@dataclass(frozen=True)
class ScenarioInfo:
    """Library entry as listed to clients."""

    id: str
    category: str
    summary: str


SCENARIOS: dict[str, tuple[ScenarioFactory, ScenarioInfo]] = {
    info.id: (factory, info)
    for factory, info in [
        (
            resolution.recursive_resolution,
            ScenarioInfo("recursive_resolution", "resolution", "Full recursive lookup through the DNS hierarchy"),
        ),
        (
            resolution.iterative_resolution,
            ScenarioInfo("iterative_resolution", "resolution", "The client walks root, TLD and authoritative servers itself"),
        ),
        (
            resolution.cache_hit,
            ScenarioInfo("cache_hit", "resolution", "Answer served straight from the browser cache"),
        ),
        (
            resolution.packet_loss_retry,
            ScenarioInfo("packet_loss_retry", "resolution", "Lost queries retried with exponential backoff"),
        ),
        (
            resolution.dnssec_chain,
            ScenarioInfo("dnssec_chain", "dnssec", "Chain of trust validated from the root key down"),
        ),
        (
            resolution.dnssec_failure,
            ScenarioInfo("dnssec_failure", "dnssec", "A bogus signature breaks the chain of trust"),
        ),
        (
            security.dns_over_tls,
            ScenarioInfo("dns_over_tls", "encryption", "Query carried inside TLS on port 853"),
        ),
        (
            security.dns_over_https,
            ScenarioInfo("dns_over_https", "encryption", "Query carried as HTTPS on port 443"),
        ),
        (
            attacks.cache_poisoning,
            ScenarioInfo("cache_poisoning", "attack", "A forged response wins the race and poisons the cache"),
        ),
        (
            attacks.cache_poisoning_defended,
            ScenarioInfo("cache_poisoning_defended", "attack", "Forged responses lose the race to the real answer"),
        ),
        (
            attacks.dns_amplification,
            ScenarioInfo("dns_amplification", "attack", "Open resolvers amplify spoofed queries at a victim"),
        ),
        (
            attacks.mitm_attack,
            ScenarioInfo("mitm_attack", "attack", "An on-path attacker answers a plaintext query"),
        ),
        (
            attacks.dns_tunneling,
            ScenarioInfo("dns_tunneling", "attack", "Stolen data leaves a firewalled network as DNS queries"),
        ),
        (
            attacks.nxdomain_flood,
            ScenarioInfo("nxdomain_flood", "attack", "Random nonexistent names exhaust a resolver"),
        ),
        (
            attacks.subdomain_takeover,
            ScenarioInfo("subdomain_takeover", "attack", "A dangling CNAME is claimed to serve phishing"),
        ),
        (
            resolution.delegation_trace,
            ScenarioInfo("ipv6_fallback", "resolution", "Recorded delegation chain with an IPv6 to IPv4 fallback"),
        ),
    ]
}


def list_scenarios() -> list[ScenarioInfo]:
    return [info for _, info in SCENARIOS.values()]


def build_scenario(scenario_id: str, domain: str = DEFAULT_DOMAIN) -> dict[str, Any]:
    """
    Build the scenario document for ``domain``.

    Raises:
        UnknownScenarioError: if ``scenario_id`` is not in the library.
    """
    try:
        factory, _ = SCENARIOS[scenario_id]
    except KeyError:
        raise UnknownScenarioError(f"Unknown scenario: {scenario_id}") from None
    return factory(domain or DEFAULT_DOMAIN)


def load_scenario(scenario_id: str, domain: str = DEFAULT_DOMAIN) -> Trace:
    """Build and load a library scenario."""
    trace = load_trace(build_scenario(scenario_id, domain))
    logger.debug("Built library scenario %s for %s", scenario_id, domain)
    return trace
