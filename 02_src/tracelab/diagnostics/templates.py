"""Text templates for each step category.

Templates use ``str.format_map`` fields. Any field without a value renders
as PLACEHOLDER and is reported in ``Diagnostic.degraded_fields``.
"""

from typing import Any

from ..models import StepCategory

PLACEHOLDER = "(not specified)"


class TemplateValues(dict):
    """Mapping that substitutes PLACEHOLDER for absent fields and remembers them."""

    def __init__(self, values: dict[str, Any]):
        super().__init__({k: v for k, v in values.items() if v is not None})
        self.missing: set[str] = set()

    def __missing__(self, key: str) -> str:
        self.missing.add(key)
        return PLACEHOLDER


def render(template: str, values: TemplateValues) -> str:
    return template.format_map(values)


TEMPLATES: dict[StepCategory, dict[str, str]] = {
    StepCategory.CACHE_HIT: {
        "overview": "Cache hit: {target} already holds an answer for {domain}",
        "what_happened": (
            "{target} checked its cache for \"{domain}\" and found a record that "
            "is still within its TTL. No network request was needed."
        ),
        "technical_notes": (
            "Caches store recently resolved names together with a Time-To-Live. "
            "Stage: {stage}. Record type: {record_type}."
        ),
        "why_it_matters": (
            "Cache hits eliminate all network round trips and are the fastest "
            "possible resolution."
        ),
        "next_steps": "The cached address is returned to the application immediately.",
    },
    StepCategory.CACHE_MISS: {
        "overview": "Cache miss: {target} has no valid record for {domain}",
        "what_happened": (
            "{target} searched its cache for \"{domain}\" but the entry was absent "
            "or expired, so the query is forwarded."
        ),
        "technical_notes": (
            "Typical causes: first lookup of the name, TTL expiry, a flushed cache "
            "or a recent restart. Resolver in use: {resolver}."
        ),
        "why_it_matters": (
            "Each miss moves the query one level further down the hierarchy and "
            "adds latency."
        ),
        "next_steps": "The query proceeds to the next resolver in the chain.",
    },
    StepCategory.REFERRAL: {
        "overview": "Referral from {source}",
        "what_happened": (
            "{source} does not hold the answer for \"{domain}\" and refers {target} "
            "to the nameservers responsible for {zone}."
        ),
        "technical_notes": (
            "A referral carries NS records (and glue addresses) for the next zone "
            "instead of a final answer. Resolution mode: {mode}."
        ),
        "why_it_matters": (
            "Referrals are how the hierarchy is walked: root, then TLD, then the "
            "domain's own nameservers."
        ),
        "next_steps": "{target} queries one of the referred nameservers next.",
    },
    StepCategory.DELEGATION: {
        "overview": "Delegation of {zone} to {nameserver_count} nameservers",
        "what_happened": (
            "The parent zone delegates {zone} to {nameserver_count} nameservers: "
            "{nameserver_list}."
        ),
        "technical_notes": (
            "Delegations are NS records published in the parent zone. Queries for "
            "\"{domain}\" ({record_type}) continue with any of these servers."
        ),
        "why_it_matters": (
            "Several independent nameservers keep the domain reachable when one of "
            "them fails."
        ),
        "next_steps": "The resolver picks one of the delegated nameservers to query.",
    },
    StepCategory.AUTHORITATIVE_ANSWER: {
        "overview": "Authoritative answer from {source}",
        "what_happened": (
            "{source} holds the zone data for \"{domain}\" and returns the "
            "definitive {record_type} answer to {target}."
        ),
        "technical_notes": (
            "Authoritative servers answer from their own zone data, not from a cache. "
            "Resolution mode: {mode}."
        ),
        "why_it_matters": (
            "The authoritative response is the source of truth for the domain; every "
            "cache downstream will reuse it until the TTL expires."
        ),
        "next_steps": "The answer travels back to the client and is cached along the way.",
    },
    StepCategory.DNSSEC_VALIDATION: {
        "overview": "DNSSEC validation: {dnssec_outcome}",
        "what_happened": (
            "{target} checks the signatures on the records for {zone} while "
            "resolving \"{domain}\"."
        ),
        "technical_notes": (
            "Validation walks the chain of trust from the root trust anchor through "
            "DS and DNSKEY records down to the RRSIG of the answer. Outcome: "
            "{dnssec_outcome}."
        ),
        "why_it_matters": (
            "A valid chain proves the answer was not forged or altered in transit."
        ),
        "next_steps": "Validated data is passed on; bogus data is rejected with SERVFAIL.",
    },
    StepCategory.PACKET_LOSS: {
        "overview": "Packet loss on the path {source} -> {target}",
        "what_happened": (
            "A packet for \"{domain}\" did not arrive at {target}. The sender waits "
            "for its timeout and retransmits."
        ),
        "technical_notes": (
            "DNS over UDP has no delivery guarantee. Clients retry with exponential "
            "backoff, so every loss adds a timeout to the total resolution time."
        ),
        "why_it_matters": (
            "Loss is invisible to the user except as delay; repeated loss ends in a "
            "resolution timeout."
        ),
        "next_steps": "The query is retransmitted until it succeeds or retries run out.",
    },
    StepCategory.RACE_OUTCOME: {
        "overview": "Response race at {race_target}",
        "what_happened": (
            "Several responses competed to answer {race_target}'s query for "
            "\"{domain}\". {race_summary}"
        ),
        "technical_notes": (
            "A resolver accepts only the first response whose transaction id and "
            "port match its outstanding query; everything that arrives afterwards "
            "is dropped as a duplicate."
        ),
        "why_it_matters": (
            "Whichever response is accepted is cached and served to every client of "
            "the resolver until its TTL expires."
        ),
        "next_steps": "{race_next_steps}",
    },
    StepCategory.GENERIC: {
        "overview": "{title}",
        "what_happened": "{description}",
        "technical_notes": "Stage: {stage}. Participants: {participants}.",
        "why_it_matters": (
            "Every step of \"{domain}\" contributes to the overall resolution time "
            "and to the security of the answer."
        ),
        "next_steps": "Continue to the next step of the scenario.",
    },
}

FIELDS = ("overview", "what_happened", "technical_notes", "why_it_matters", "next_steps")
