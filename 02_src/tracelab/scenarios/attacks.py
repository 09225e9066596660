"""Attack scenarios: forged-response races and other named DNS attacks."""

from typing import Any

from ..models import FlowKind, Role
from .builder import ScenarioBuilder, flow
from .resolution import EXAMPLE_ADDRESS

ATTACKER_ADDRESS = "198.51.100.66"
TRANSACTION_KEY = "txid-0x4a2f"


def _forged(rank: int, match_key: str, domain: str) -> dict[str, Any]:
    return flow(
        "attacker",
        "resolver",
        f"A {ATTACKER_ADDRESS} ({match_key})",
        FlowKind.RESPONSE,
        malicious=True,
        race_group_id="race-1",
        arrival_rank=rank,
        match_key=match_key,
        after_state={"cache": {domain: ATTACKER_ADDRESS}, "poisoned": True},
    )


def _legitimate(rank: int, domain: str) -> dict[str, Any]:
    return flow(
        "auth",
        "resolver",
        f"A {EXAMPLE_ADDRESS} ({TRANSACTION_KEY})",
        FlowKind.RESPONSE,
        race_group_id="race-1",
        arrival_rank=rank,
        match_key=TRANSACTION_KEY,
        after_state={"cache": {domain: EXAMPLE_ADDRESS}, "poisoned": False},
    )


def cache_poisoning(domain: str = "example.com", defended: bool = False) -> dict[str, Any]:
    """
    Kaminsky-style race between forged answers and the real one.

    Undefended: the third forged answer guesses the transaction id and
    arrives before the legitimate response. Defended: the legitimate
    response arrives second and every forged answer is discarded.
    """
    scenario_id = "cache_poisoning_defended" if defended else "cache_poisoning"
    builder = ScenarioBuilder(scenario_id, f"Cache poisoning attempt against {domain}")
    builder.actor("client", Role.CLIENT, address="192.168.1.105")
    builder.actor("resolver", Role.RECURSIVE_RESOLVER, address="10.0.0.53")
    builder.actor("auth", Role.AUTHORITATIVE_SERVER, address="199.43.135.53")
    builder.actor("attacker", Role.ATTACKER, address="203.0.113.13")

    builder.step(
        "resolver_query",
        "Resolver Queries Authoritative Server",
        f"The resolver asks for {domain} with transaction id 0x4a2f",
        ["resolver", "auth"],
        flows=[flow("resolver", "auth", f"A? {domain} ({TRANSACTION_KEY})")],
        latency_ms=20,
    )

    if defended:
        race = [
            _forged(1, "txid-0x1111", domain),
            _legitimate(2, domain),
            _forged(3, "txid-0x2222", domain),
        ]
        description = "Forged answers carry the wrong transaction id; the real answer wins"
    else:
        race = [
            _forged(1, "txid-0x1111", domain),
            _forged(2, "txid-0x2222", domain),
            _forged(3, TRANSACTION_KEY, domain),
            _legitimate(4, domain),
        ]
        description = "A forged answer guesses the transaction id before the real answer arrives"
    builder.step(
        "response_race",
        "Forged Responses Race the Real Answer",
        description,
        ["attacker", "auth", "resolver"],
        flows=race,
        latency_ms=35,
        flags={"is_attack": True},
        expected_match_keys={"resolver": TRANSACTION_KEY},
        highlight_actor_id="resolver",
    )

    served = EXAMPLE_ADDRESS if defended else ATTACKER_ADDRESS
    builder.step(
        "resolver_cache_hit",
        "Client Served From Cache",
        f"A client asks for {domain} and gets {served} from the resolver cache",
        ["client", "resolver"],
        flows=[
            flow("client", "resolver", f"A? {domain}"),
            flow("resolver", "client", f"A {served}", FlowKind.RESPONSE),
        ],
        latency_ms=3,
    )
    return builder.build()


def cache_poisoning_defended(domain: str = "example.com") -> dict[str, Any]:
    return cache_poisoning(domain, defended=True)


def dns_amplification(domain: str = "example.com") -> dict[str, Any]:
    builder = ScenarioBuilder("dns_amplification", f"DNS amplification using {domain}")
    builder.actor("botnet", Role.BOTNET)
    builder.actor("resolver", Role.RECURSIVE_RESOLVER, "Open Resolver", "198.18.0.53")
    builder.actor("victim", Role.VICTIM, address="192.0.2.10")

    builder.step(
        "spoofed_queries",
        "Spoofed Queries",
        f"Bots send small ANY queries for {domain} with the victim's address as source",
        ["botnet", "resolver"],
        flows=[flow("botnet", "resolver", f"ANY? {domain} (60 bytes, src=192.0.2.10)", malicious=True)],
        latency_ms=10,
        flags={"is_attack": True},
    )
    builder.step(
        "amplified_responses",
        "Amplified Responses",
        "The open resolver sends responses about 50 times larger to the victim",
        ["resolver", "victim"],
        flows=[flow("resolver", "victim", "ANY (3,000 bytes)", FlowKind.RESPONSE)],
        latency_ms=15,
        flags={"is_attack": True},
        highlight_actor_id="victim",
    )
    builder.step(
        "victim_saturated",
        "Victim Link Saturated",
        "The combined response volume exhausts the victim's bandwidth",
        ["victim"],
        flows=[flow("victim", "victim", "link saturated", FlowKind.INTERNAL)],
        flags={"is_attack": True},
    )
    builder.step(
        "rate_limiting",
        "Response Rate Limiting",
        "The resolver operator enables response rate limiting and closes recursion to outsiders",
        ["resolver"],
        flows=[flow("resolver", "resolver", "RRL enabled", FlowKind.INTERNAL)],
    )
    return builder.build()


def mitm_attack(domain: str = "example.com") -> dict[str, Any]:
    builder = ScenarioBuilder("mitm_attack", f"Man-in-the-middle on a lookup of {domain}")
    builder.actor("client", Role.CLIENT, address="192.168.1.105")
    builder.actor("attacker", Role.ATTACKER, "On-path Attacker", "192.168.1.66")
    builder.actor("resolver", Role.RECURSIVE_RESOLVER, address="8.8.8.8")

    builder.step(
        "plaintext_query",
        "Plaintext Query Intercepted",
        "The unencrypted query is captured by a device on the local network",
        ["client", "attacker", "resolver"],
        flows=[flow("client", "attacker", f"A? {domain}")],
        latency_ms=2,
        flags={"is_attack": True},
    )
    builder.step(
        "forged_response",
        "Forged Response",
        f"The attacker answers first with {ATTACKER_ADDRESS}",
        ["attacker", "client"],
        flows=[
            flow(
                "attacker",
                "client",
                f"A {ATTACKER_ADDRESS}",
                FlowKind.RESPONSE,
                malicious=True,
                after_state={"cache": {domain: ATTACKER_ADDRESS}, "poisoned": True},
            )
        ],
        latency_ms=4,
        flags={"is_attack": True},
    )
    builder.step(
        "client_redirected",
        "Client Redirected",
        "The client connects to the attacker's server believing it is the real site",
        ["client", "attacker"],
        flows=[flow("client", "attacker", f"HTTPS {ATTACKER_ADDRESS}:443")],
        latency_ms=12,
    )
    return builder.build()


TUNNEL_ZONE = "tunnel.attacker.example"
TUNNEL_LABELS = ("52JXYQZU4O", "IOWCAMDH5X", "H7ZJWA")


def dns_tunneling(domain: str = "example.com") -> dict[str, Any]:
    """Stolen data smuggled out through a firewall as DNS query names."""
    builder = ScenarioBuilder("dns_tunneling", f"DNS tunneling out of the {domain} network")
    builder.actor("host", Role.CLIENT, "Compromised Host", "10.1.4.22")
    builder.actor("firewall", Role.FIREWALL, "Corporate Firewall", "10.1.0.1")
    builder.actor("resolver", Role.RECURSIVE_RESOLVER, "Corporate Resolver", "10.1.0.53")
    builder.actor("tunnel_ns", Role.ATTACKER, "Attacker Nameserver", "203.0.113.53")

    builder.step(
        "data_encoding",
        "Encoding Stolen Data",
        "Malware base32-encodes stolen credentials and splits them into subdomain labels",
        ["host"],
        flows=[
            flow(
                "host",
                "host",
                f"base32 -> {len(TUNNEL_LABELS)} labels under {TUNNEL_ZONE}",
                FlowKind.INTERNAL,
                malicious=True,
            )
        ],
        latency_ms=50,
        flags={"is_attack": True},
    )
    builder.step(
        "exfiltration_queries",
        "Data Leaves as DNS Queries",
        "Only port 53 is open, so the firewall lets the encoded queries through",
        ["host", "firewall", "resolver", "tunnel_ns"],
        flows=[
            *(
                flow("host", "firewall", f"TXT? {label}.{TUNNEL_ZONE}", malicious=True)
                for label in TUNNEL_LABELS
            ),
            flow("firewall", "resolver", f"TXT? {TUNNEL_LABELS[0]}.{TUNNEL_ZONE} (allowed)"),
            flow("resolver", "tunnel_ns", f"TXT? {TUNNEL_LABELS[0]}.{TUNNEL_ZONE}"),
        ],
        latency_ms=100,
        flags={"is_attack": True},
        highlight_actor_id="firewall",
    )
    builder.step(
        "c2_reply",
        "Command Channel Reply",
        "The attacker's nameserver reassembles the data and answers with the next command",
        ["tunnel_ns", "resolver", "host"],
        flows=[
            flow("tunnel_ns", "resolver", 'TXT "ack;next=upload"', FlowKind.RESPONSE, malicious=True),
            flow("resolver", "host", 'TXT "ack;next=upload"', FlowKind.RESPONSE),
        ],
        latency_ms=60,
        flags={"is_attack": True},
    )
    builder.step(
        "tunnel_detection",
        "Tunnel Detected",
        "Long high-entropy labels and a flood of unique names to one zone trip the DNS firewall",
        ["firewall", "resolver"],
        flows=[
            flow("firewall", "firewall", f"entropy alert for {TUNNEL_ZONE}", FlowKind.INTERNAL),
            flow("firewall", "resolver", f"block zone {TUNNEL_ZONE}", FlowKind.INTERNAL),
        ],
        latency_ms=20,
    )
    return builder.build()


FLOOD_LABELS = ("xj3kd92", "ql8ms44", "pd9fn21")


def nxdomain_flood(domain: str = "example.com") -> dict[str, Any]:
    """Random nonexistent names that can never be answered from cache."""
    builder = ScenarioBuilder("nxdomain_flood", f"NXDOMAIN flood against resolvers of {domain}")
    builder.actor("botnet", Role.BOTNET)
    builder.actor("resolver", Role.RECURSIVE_RESOLVER, "Corporate Resolver", "10.0.0.53")
    builder.actor("auth", Role.AUTHORITATIVE_SERVER, f"{domain} Nameserver", "199.43.135.53")
    builder.actor("client", Role.CLIENT, "Legitimate User", "10.0.8.14")

    builder.step(
        "flood_queries",
        "Flood of Random Names",
        f"Bots send a million queries per second for random subdomains of {domain}",
        ["botnet", "resolver"],
        flows=[
            flow("botnet", "resolver", f"A? {label}.{domain}", malicious=True)
            for label in FLOOD_LABELS
        ],
        latency_ms=10,
        flags={"is_attack": True},
    )
    builder.step(
        "upstream_nxdomain",
        "Every Query Goes Upstream",
        "Each name is unique, so the resolver must ask the authoritative server every time",
        ["resolver", "auth"],
        flows=[
            *(flow("resolver", "auth", f"A? {label}.{domain}") for label in FLOOD_LABELS),
            *(
                flow("auth", "resolver", f"NXDOMAIN {label}.{domain}", FlowKind.RESPONSE)
                for label in FLOOD_LABELS
            ),
        ],
        latency_ms=120,
        flags={"is_attack": True},
        highlight_actor_id="resolver",
    )
    builder.step(
        "service_degraded",
        "Legitimate Lookups Time Out",
        "The overloaded resolver drops or delays queries from real users",
        ["client", "resolver"],
        flows=[
            flow("client", "resolver", f"A? www.{domain}"),
            flow("resolver", "client", "SERVFAIL (timeout)", FlowKind.RESPONSE),
        ],
        latency_ms=3000,
        flags={"is_attack": True},
        highlight_actor_id="client",
    )
    builder.step(
        "rate_limiting",
        "Rate Limiting Deployed",
        "Per-client rate limits and aggressive negative answers filter the flood",
        ["resolver"],
        flows=[flow("resolver", "resolver", "per-client RRL + aggressive NSEC", FlowKind.INTERNAL)],
        latency_ms=50,
    )
    return builder.build()


CLOUD_APP = "my-app.cloudhost.example"
PHISHING_ADDRESS = "198.51.100.99"


def subdomain_takeover(domain: str = "example.com") -> dict[str, Any]:
    """A dangling CNAME to a deleted cloud app claimed by an attacker."""
    subdomain = f"old-service.{domain}"
    builder = ScenarioBuilder("subdomain_takeover", f"Takeover of {subdomain}")
    builder.actor("attacker", Role.ATTACKER, address="203.0.113.13")
    builder.actor("resolver", Role.RECURSIVE_RESOLVER, address="8.8.8.8")
    builder.actor("auth", Role.AUTHORITATIVE_SERVER, f"{domain} Nameserver", "199.43.135.53")
    builder.actor("cloud", Role.GENERIC, "Cloud Hosting", PHISHING_ADDRESS)
    builder.actor("client", Role.CLIENT, "Employee", "192.168.1.105")

    builder.step(
        "dangling_record",
        "Dangling CNAME Found",
        f"{subdomain} still points at {CLOUD_APP}, an app that no longer exists",
        ["attacker", "resolver", "auth"],
        flows=[
            flow("attacker", "resolver", f"CNAME? {subdomain}"),
            flow("auth", "resolver", f"CNAME {CLOUD_APP}", FlowKind.RESPONSE),
        ],
        latency_ms=100,
        flags={"is_attack": True},
    )
    builder.step(
        "app_claimed",
        "Attacker Claims the App Name",
        f"The attacker registers {CLOUD_APP} and deploys a phishing page behind valid HTTPS",
        ["attacker", "cloud"],
        flows=[
            flow(
                "attacker",
                "cloud",
                f"create app {CLOUD_APP.split('.')[0]}",
                malicious=True,
                after_state={"apps": {CLOUD_APP: "attacker"}, "poisoned": True},
            )
        ],
        latency_ms=30,
        flags={"is_attack": True},
        highlight_actor_id="cloud",
    )
    builder.step(
        "phishing_served",
        "Phishing Page Served",
        f"Employees follow a link to {subdomain} and land on the attacker's page",
        ["client", "resolver", "cloud"],
        flows=[
            flow("client", "resolver", f"A? {subdomain}"),
            flow("resolver", "client", f"CNAME {CLOUD_APP} -> A {PHISHING_ADDRESS}", FlowKind.RESPONSE),
            flow("client", "cloud", f"HTTPS GET https://{subdomain}/login"),
            flow("cloud", "client", "200 OK (phishing login form)", FlowKind.RESPONSE),
        ],
        latency_ms=500,
        flags={"is_attack": True},
    )
    builder.step(
        "dangling_record_removed",
        "Dangling Record Removed",
        f"A DNS audit finds the stale CNAME and deletes it from the {domain} zone",
        ["auth"],
        flows=[flow("auth", "auth", f"delete CNAME {subdomain}", FlowKind.INTERNAL)],
        latency_ms=10,
    )
    return builder.build()
