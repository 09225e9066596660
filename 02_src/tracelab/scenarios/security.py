"""Encrypted transport scenarios: DNS over TLS and DNS over HTTPS."""

from typing import Any

from ..models import FlowKind, Role
from .builder import ScenarioBuilder, flow
from .resolution import EXAMPLE_ADDRESS


def _encrypted(
    scenario_id: str, title: str, domain: str, protocol: str, port: int, handshake: list[str]
) -> dict[str, Any]:
    builder = ScenarioBuilder(scenario_id, title)
    builder.actor("client", Role.CLIENT, address="192.168.1.105")
    builder.actor("resolver", Role.ENCRYPTED_RESOLVER, f"{protocol} Resolver", "1.1.1.1")

    builder.step(
        "tcp_handshake",
        "TCP Connection",
        f"The client opens a TCP connection to port {port}",
        ["client", "resolver"],
        flows=[
            flow("client", "resolver", "SYN"),
            flow("resolver", "client", "SYN-ACK", FlowKind.RESPONSE),
            flow("client", "resolver", "ACK"),
        ],
        latency_ms=15,
    )
    builder.step(
        "tls_handshake",
        "TLS Handshake",
        f"TLS 1.3 handshake with the resolver on port {port}",
        ["client", "resolver"],
        flows=[
            flow("client", "resolver", "ClientHello"),
            flow("resolver", "client", "ServerHello + Certificate", FlowKind.RESPONSE),
            flow("client", "resolver", "Finished", encrypted=True),
        ],
        latency_ms=32,
    )
    builder.step(
        "encrypted_query",
        "Encrypted Query",
        handshake[0],
        ["client", "resolver"],
        flows=[flow("client", "resolver", f"A? {domain}", encrypted=True)],
        latency_ms=8,
    )
    builder.step(
        "encrypted_response",
        "Encrypted Response",
        handshake[1],
        ["resolver", "client"],
        flows=[
            flow(
                "resolver",
                "client",
                f"A {EXAMPLE_ADDRESS}",
                FlowKind.RESPONSE,
                encrypted=True,
                after_state={"cache": {domain: EXAMPLE_ADDRESS}},
            )
        ],
        latency_ms=21,
    )
    return builder.build()


def dns_over_tls(domain: str = "example.com") -> dict[str, Any]:
    return _encrypted(
        "dns_over_tls",
        f"DNS over TLS lookup of {domain}",
        domain,
        "DoT",
        853,
        [
            "The DNS message travels inside the TLS session; on-path observers see only port 853",
            "The answer returns over the same TLS session",
        ],
    )


def dns_over_https(domain: str = "example.com") -> dict[str, Any]:
    return _encrypted(
        "dns_over_https",
        f"DNS over HTTPS lookup of {domain}",
        domain,
        "DoH",
        443,
        [
            "The query is sent as an HTTP/2 POST to /dns-query, indistinguishable from web traffic",
            "The answer arrives as an application/dns-message HTTP response",
        ],
    )
