"""DNS resolution scenarios: hierarchy walk, caches, packet loss, DNSSEC, live traces."""

from typing import Any

from ..models import DnssecOutcome, FlowKind, Role
from .builder import ScenarioBuilder, flow

ROOT_NAMESERVERS = [f"{letter}.root-servers.net" for letter in "abcdefghijklm"]
EXAMPLE_ADDRESS = "93.184.216.34"


def _tld(domain: str) -> str:
    return domain.rsplit(".", 1)[-1]


def _tld_nameservers(domain: str) -> list[str]:
    tld = _tld(domain)
    if tld in ("com", "net"):
        return [f"{letter}.gtld-servers.net" for letter in "abcd"]
    return [f"ns{i}.nic.{tld}" for i in range(1, 5)]


def _hierarchy_actors(builder: ScenarioBuilder, querier_role: Role) -> None:
    builder.actor("client", Role.CLIENT, address="192.168.1.105")
    if querier_role == Role.RECURSIVE_RESOLVER:
        builder.actor("resolver", Role.RECURSIVE_RESOLVER, address="8.8.8.8")
    builder.actor("root", Role.ROOT_SERVER, "a.root-servers.net", "198.41.0.4")
    builder.actor("tld", Role.TLD_SERVER, address="192.5.6.30")
    builder.actor("auth", Role.AUTHORITATIVE_SERVER, address="199.43.135.53")


def _hierarchy_steps(builder: ScenarioBuilder, domain: str, querier: str) -> None:
    """Root referral, TLD referral and the authoritative answer, asked by ``querier``."""
    tld = _tld(domain)
    builder.step(
        "root_referral",
        "Root Server Referral",
        f"The root server refers the query to the .{tld} TLD servers",
        [querier, "root"],
        flows=[
            flow(querier, "root", f"A? {domain}"),
            flow("root", querier, f"NS .{tld}", FlowKind.REFERRAL),
        ],
        latency_ms=28,
        zone=tld,
        nameservers=_tld_nameservers(domain),
    )
    builder.step(
        "tld_referral",
        "TLD Server Referral",
        f"The .{tld} server refers the query to the nameservers of {domain}",
        [querier, "tld"],
        flows=[
            flow(querier, "tld", f"A? {domain}"),
            flow("tld", querier, f"NS {domain}", FlowKind.REFERRAL),
        ],
        latency_ms=42,
        zone=domain,
        nameservers=[f"a.iana-servers.{tld}", f"b.iana-servers.{tld}"],
    )
    builder.step(
        "authoritative_answer",
        "Authoritative Answer",
        f"The authoritative server answers with the address of {domain}",
        [querier, "auth"],
        flows=[
            flow(querier, "auth", f"A? {domain}"),
            flow(
                "auth",
                querier,
                f"A {EXAMPLE_ADDRESS}",
                FlowKind.RESPONSE,
                before_state={"cache": {}},
                after_state={"cache": {domain: EXAMPLE_ADDRESS}},
            ),
        ],
        latency_ms=65,
    )


def _cache_misses(builder: ScenarioBuilder, domain: str) -> None:
    builder.actor("browser_cache", Role.BROWSER_CACHE)
    builder.actor("os_cache", Role.OS_CACHE)
    builder.step(
        "browser_cache_miss",
        "Browser Cache Lookup",
        f"The browser has no cached record for {domain}",
        ["client", "browser_cache"],
        flows=[flow("client", "browser_cache", f"lookup {domain}", FlowKind.INTERNAL)],
        latency_ms=1,
    )
    builder.step(
        "os_cache_miss",
        "Operating System Cache Lookup",
        f"The OS resolver cache has no valid record for {domain}",
        ["client", "os_cache"],
        flows=[flow("client", "os_cache", f"lookup {domain}", FlowKind.INTERNAL)],
        latency_ms=2,
    )


def recursive_resolution(domain: str = "example.com") -> dict[str, Any]:
    builder = ScenarioBuilder("recursive_resolution", f"Recursive resolution of {domain}")
    _hierarchy_actors(builder, Role.RECURSIVE_RESOLVER)
    _cache_misses(builder, domain)
    builder.step(
        "forward_to_resolver",
        "Query Recursive Resolver",
        "The stub resolver forwards the query to the recursive resolver",
        ["client", "resolver"],
        flows=[flow("client", "resolver", f"A? {domain}")],
        latency_ms=18,
    )
    _hierarchy_steps(builder, domain, "resolver")
    builder.step(
        "final_response",
        "Answer Returned to Client",
        f"The resolver caches the answer and returns {EXAMPLE_ADDRESS} to the client",
        ["resolver", "client"],
        flows=[
            flow(
                "resolver",
                "client",
                f"A {EXAMPLE_ADDRESS}",
                FlowKind.RESPONSE,
                after_state={"cache": {domain: EXAMPLE_ADDRESS}},
            )
        ],
        latency_ms=12,
    )
    return builder.build()


def iterative_resolution(domain: str = "example.com") -> dict[str, Any]:
    builder = ScenarioBuilder("iterative_resolution", f"Iterative resolution of {domain}")
    _hierarchy_actors(builder, Role.CLIENT)
    _cache_misses(builder, domain)
    _hierarchy_steps(builder, domain, "client")
    return builder.build()


def cache_hit(domain: str = "example.com") -> dict[str, Any]:
    builder = ScenarioBuilder("cache_hit", f"Browser cache hit for {domain}")
    builder.actor("client", Role.CLIENT).actor("browser_cache", Role.BROWSER_CACHE)
    builder.step(
        "browser_cache_hit",
        "Browser Cache Hit",
        f"The browser still holds a record for {domain}",
        ["client", "browser_cache"],
        flows=[
            flow("client", "browser_cache", f"lookup {domain}", FlowKind.INTERNAL),
            flow("browser_cache", "client", f"A {EXAMPLE_ADDRESS}", FlowKind.RESPONSE),
        ],
        latency_ms=1,
    )
    builder.step(
        "connection_ready",
        "Address Available",
        "The application connects using the cached address",
        ["client"],
        flows=[flow("client", "client", "connect", FlowKind.INTERNAL)],
    )
    return builder.build()


def packet_loss_retry(domain: str = "example.com") -> dict[str, Any]:
    """Two lost queries, then a retry that gets through (exponential backoff)."""
    builder = ScenarioBuilder("packet_loss_retry", f"Packet loss while resolving {domain}")
    builder.actor("client", Role.CLIENT).actor("resolver", Role.RECURSIVE_RESOLVER, address="8.8.8.8")
    for attempt, backoff in ((1, 1000), (2, 2000)):
        builder.step(
            "packet_loss",
            f"Packet Lost (attempt {attempt})",
            f"The query was dropped in transit; retrying after {backoff}ms",
            ["client", "resolver"],
            flows=[flow("client", "resolver", f"A? {domain}", delivered=False)],
            latency_ms=backoff,
            flags={"has_packet_loss": True},
        )
    builder.step(
        "packet_retry_success",
        "Retry Succeeded",
        "The third attempt reaches the resolver",
        ["client", "resolver"],
        flows=[flow("client", "resolver", f"A? {domain}")],
        latency_ms=24,
    )
    builder.step(
        "final_response",
        "Answer Returned to Client",
        f"The resolver answers with {EXAMPLE_ADDRESS}",
        ["resolver", "client"],
        flows=[flow("resolver", "client", f"A {EXAMPLE_ADDRESS}", FlowKind.RESPONSE)],
        latency_ms=30,
    )
    return builder.build()


def dnssec_chain(domain: str = "example.com", fail: bool = False) -> dict[str, Any]:
    """Chain of trust from the root trust anchor down to the answer's RRSIG."""
    tld = _tld(domain)
    scenario_id = "dnssec_failure" if fail else "dnssec_chain"
    builder = ScenarioBuilder(scenario_id, f"DNSSEC chain of trust for {domain}")
    builder.actor("resolver", Role.RECURSIVE_RESOLVER, address="8.8.8.8")
    builder.actor("root", Role.ROOT_SERVER, "a.root-servers.net", "198.41.0.4")
    builder.actor("tld", Role.TLD_SERVER, address="192.5.6.30")
    builder.actor("auth", Role.AUTHORITATIVE_SERVER, address="199.43.135.53")

    links = [
        ("dnssec_root_dnskey", "Root DNSKEY", "root", ".", "DNSKEY ."),
        ("dnssec_root_ds", f"Root DS for .{tld}", "root", tld, f"DS {tld}."),
        ("dnssec_tld_dnskey", f".{tld} DNSKEY", "tld", tld, f"DNSKEY {tld}."),
        ("dnssec_tld_ds", f"DS for {domain}", "tld", domain, f"DS {domain}."),
        ("dnssec_domain_dnskey", f"{domain} DNSKEY", "auth", domain, f"DNSKEY {domain}."),
    ]
    for stage, title, server, zone, label in links:
        builder.step(
            stage,
            f"DNSSEC: {title}",
            f"The resolver fetches and verifies {label}",
            ["resolver", server],
            flows=[
                flow("resolver", server, f"{label.split()[0]}? {zone}"),
                flow(server, "resolver", label, FlowKind.RESPONSE, validated=True),
            ],
            latency_ms=20,
            flags={"dnssec": DnssecOutcome.VALIDATED.value},
            zone=zone,
        )

    if fail:
        builder.step(
            "dnssec_validation_failed",
            "DNSSEC: Signature Verification Failed",
            f"The RRSIG over the A record of {domain} does not verify",
            ["resolver", "auth"],
            flows=[
                flow("resolver", "auth", f"A? {domain}"),
                flow("auth", "resolver", "A + RRSIG (bogus)", FlowKind.RESPONSE),
            ],
            latency_ms=25,
            flags={"dnssec": DnssecOutcome.FAILED.value},
            zone=domain,
        )
    else:
        builder.step(
            "dnssec_answer_rrsig",
            "DNSSEC: Answer Validated",
            f"The RRSIG over the A record of {domain} verifies against the zone key",
            ["resolver", "auth"],
            flows=[
                flow("resolver", "auth", f"A? {domain}"),
                flow(
                    "auth",
                    "resolver",
                    f"A {EXAMPLE_ADDRESS} + RRSIG",
                    FlowKind.RESPONSE,
                    validated=True,
                    after_state={"cache": {domain: EXAMPLE_ADDRESS}, "ad": True},
                ),
            ],
            latency_ms=25,
            flags={"dnssec": DnssecOutcome.VALIDATED.value},
            zone=domain,
        )
    return builder.build()


def dnssec_failure(domain: str = "example.com") -> dict[str, Any]:
    return dnssec_chain(domain, fail=True)


def delegation_trace(
    domain: str = "example.com", live: bool = False, single_nameserver: bool = True
) -> dict[str, Any]:
    """
    Delegation chain as recorded by a trace tool (the shape a live source supplies).

    The host has no IPv6 connectivity, so the first attempt to the root falls
    back to IPv4.
    """
    tld = _tld(domain)
    builder = ScenarioBuilder(
        "ipv6_fallback", f"Delegation trace for {domain}", live=live
    )
    builder.actor("client", Role.STUB_RESOLVER, "dig +trace")
    builder.actor("root", Role.ROOT_SERVER, "a.root-servers.net", "198.41.0.4")
    builder.actor("tld", Role.TLD_SERVER, address="192.5.6.30")
    builder.actor("auth", Role.AUTHORITATIVE_SERVER, address="199.43.135.53")

    builder.step(
        "root_delegation",
        "Root Delegation",
        f"Root servers delegate .{tld}",
        ["client", "root"],
        flows=[
            flow("client", "root", f"NS? {tld}.", address_family="ipv6", delivered=False),
            flow("client", "root", f"NS? {tld}.", address_family="ipv4"),
            flow("root", "client", f"NS {tld}.", FlowKind.REFERRAL, address_family="ipv4"),
        ],
        latency_ms=31,
        zone=".",
        nameservers=ROOT_NAMESERVERS,
    )
    builder.step(
        "tld_delegation",
        f".{tld} Delegation",
        f"The .{tld} servers delegate {domain}",
        ["client", "tld"],
        flows=[
            flow("client", "tld", f"NS? {domain}.", address_family="ipv4"),
            flow("tld", "client", f"NS {domain}.", FlowKind.REFERRAL, address_family="ipv4"),
        ],
        latency_ms=48,
        zone=tld,
        nameservers=_tld_nameservers(domain),
    )
    nameservers = [f"ns1.{domain}"] if single_nameserver else [f"ns1.{domain}", f"ns2.{domain}"]
    builder.step(
        "domain_delegation",
        f"{domain} Nameservers",
        f"{domain} is served by {len(nameservers)} nameserver(s)",
        ["client", "auth"],
        flows=[
            flow("client", "auth", f"A? {domain}.", address_family="ipv4"),
            flow("auth", "client", f"A {EXAMPLE_ADDRESS}", FlowKind.RESPONSE, address_family="ipv4"),
        ],
        latency_ms=230,
        zone=domain,
        nameservers=nameservers,
    )
    return builder.build()
