"""Independent issue rules.

Each rule looks at the current step and the visible prefix of the trace and
returns zero or more issues. Rules never depend on each other; all of them
run for every step.
"""

from dataclasses import dataclass
from typing import Callable

from ..config import (
    FAST_LATENCY_MS,
    GOOD_REDUNDANT_NAMESERVERS,
    MIN_REDUNDANT_NAMESERVERS,
    SLOW_LATENCY_MS,
)
from ..models import DnssecOutcome, Issue, RaceResolution, Severity, Step, Trace
from ..trace import poisoned_actors


@dataclass(frozen=True)
class RuleContext:
    """Inputs of a rule: the trace, the current step and the visible prefix."""

    trace: Trace
    step: Step
    prefix: tuple[Step, ...]

    @property
    def earlier(self) -> tuple[Step, ...]:
        return self.prefix[:-1]

    def name(self, actor_id: str) -> str:
        return self.trace.actors.display_name(actor_id)


IssueRule = Callable[[RuleContext], list[Issue]]


def latency_rule(ctx: RuleContext) -> list[Issue]:
    latency = ctx.step.latency_ms
    if latency is None:
        return []
    if latency < FAST_LATENCY_MS:
        return [
            Issue(
                kind="fast_response",
                description=f"Response arrived in {latency}ms",
                impact="Negligible delay; likely a nearby or well-optimized path",
                severity=Severity.INFO,
            )
        ]
    if latency > SLOW_LATENCY_MS:
        return [
            Issue(
                kind="slow_response",
                description=f"Latency of {latency}ms exceeds {SLOW_LATENCY_MS}ms",
                impact="Every query on this path slows down page loads",
                cause="Geographic distance, congestion or an overloaded server",
                remediation="Use a closer resolver or an anycast DNS provider",
                severity=Severity.WARNING,
            )
        ]
    return []


def nameserver_redundancy_rule(ctx: RuleContext) -> list[Issue]:
    step = ctx.step
    if not step.nameservers:
        return []

    known: set[str] = set()
    for earlier in ctx.prefix:
        if earlier.zone == step.zone:
            known.update(earlier.nameservers)

    zone = step.zone or "this zone"
    count = len(known)
    if count < MIN_REDUNDANT_NAMESERVERS:
        return [
            Issue(
                kind="low_nameserver_redundancy",
                description=f"Only {count} nameserver known for {zone}",
                impact="A single server failure makes the zone unresolvable",
                remediation=(
                    f"Publish at least {MIN_REDUNDANT_NAMESERVERS} nameservers on "
                    "separate networks"
                ),
                severity=Severity.WARNING,
            )
        ]
    if count >= GOOD_REDUNDANT_NAMESERVERS:
        return [
            Issue(
                kind="good_nameserver_redundancy",
                description=f"{count} nameservers serve {zone}",
                impact="The zone survives the loss of several servers",
                severity=Severity.INFO,
            )
        ]
    return []


def dnssec_rule(ctx: RuleContext) -> list[Issue]:
    outcome = ctx.step.flags.dnssec
    if outcome == DnssecOutcome.FAILED:
        return [
            Issue(
                kind="dnssec_validation_failed",
                description="Signature verification failed for this response",
                impact="Response authenticity cannot be guaranteed; the answer is bogus",
                cause="Forged data, a man-in-the-middle or a broken zone signature",
                remediation="Verify DS and DNSKEY records with the registrar; re-sign the zone",
                severity=Severity.CRITICAL,
            )
        ]
    if outcome == DnssecOutcome.INSECURE:
        return [
            Issue(
                kind="dnssec_unsigned",
                description="The zone is not signed",
                impact="Responses for this zone cannot be authenticated",
                remediation="Enable DNSSEC signing and publish a DS record in the parent",
                severity=Severity.WARNING,
            )
        ]
    return []


def _paths(step: Step) -> set[tuple[str, str]]:
    lost = {
        (f.source_actor_id, f.target_actor_id) for f in step.flows if not f.delivered
    }
    if lost:
        return lost
    return {
        (f.source_actor_id, f.target_actor_id)
        for f in step.flows
        if not f.is_self_flow
    }


def _delivered_paths(step: Step) -> set[tuple[str, str]]:
    return {
        (f.source_actor_id, f.target_actor_id)
        for f in step.flows
        if f.delivered and not f.is_self_flow
    }


def packet_loss_rule(ctx: RuleContext) -> list[Issue]:
    step = ctx.step
    if step.flags.has_packet_loss:
        paths = _paths(step)
        attempt = 1 + sum(
            1
            for earlier in ctx.earlier
            if earlier.flags.has_packet_loss and _paths(earlier) & paths
        )
        return [
            Issue(
                kind="packet_loss",
                description=f"Packet lost in transit (attempt {attempt})",
                impact="The query must be retransmitted after a timeout",
                cause="Congestion, a failing router or poor connectivity",
                remediation="Check network stability; repeated loss indicates a faulty link",
                severity=Severity.WARNING,
            )
        ]

    delivered = _delivered_paths(step)
    if not delivered:
        return []

    retries = 0
    for earlier in reversed(ctx.earlier):
        if earlier.flags.has_packet_loss and _paths(earlier) & delivered:
            retries += 1
        elif _delivered_paths(earlier) & delivered:
            break
    if retries == 0:
        return []
    noun = "retry" if retries == 1 else "retries"
    return [
        Issue(
            kind="retry_succeeded",
            description=f"Delivered after {retries} {noun}",
            impact="Exponential backoff added delay but resolution continues",
            severity=Severity.INFO,
        )
    ]


def ipv6_fallback_rule(ctx: RuleContext) -> list[Issue]:
    failed_v6: set[tuple[str, str]] = set()
    for earlier in ctx.earlier:
        for flow in earlier.flows:
            if flow.address_family == "ipv6" and not flow.delivered:
                failed_v6.add((flow.source_actor_id, flow.target_actor_id))

    for flow in ctx.step.flows:
        path = (flow.source_actor_id, flow.target_actor_id)
        if flow.address_family == "ipv6" and not flow.delivered:
            failed_v6.add(path)
        elif flow.address_family == "ipv4" and flow.delivered and path in failed_v6:
            return [
                Issue(
                    kind="ipv6_fallback",
                    description=(
                        f"IPv6 to {ctx.name(flow.target_actor_id)} was unreachable; "
                        "the query fell back to IPv4"
                    ),
                    impact="One timeout of extra delay; resolution is unaffected",
                    cause="The local network has no IPv6 connectivity",
                    severity=Severity.INFO,
                )
            ]
    return []


def _malicious_discards(resolution: RaceResolution) -> int:
    return sum(1 for o in resolution.discarded if o.flow.malicious)


def race_rule(ctx: RuleContext) -> list[Issue]:
    issues: list[Issue] = []
    for resolution in ctx.step.races:
        target = ctx.name(resolution.target_actor_id)
        if resolution.poisoned:
            issues.append(
                Issue(
                    kind="cache_poisoned",
                    description=(
                        f"{target} accepted a forged response from "
                        f"{ctx.name(resolution.winner.source_actor_id)}"
                    ),
                    impact="Every client of this resolver is sent to the attacker until the TTL expires",
                    cause="Transaction id and source port were guessed before the real answer arrived",
                    remediation=(
                        "Validate with DNSSEC, randomize source ports, use DNS cookies "
                        "or encrypted transport"
                    ),
                    severity=Severity.CRITICAL,
                )
            )
        elif resolution.has_winner and _malicious_discards(resolution):
            issues.append(
                Issue(
                    kind="spoofed_responses_rejected",
                    description=(
                        f"{target} discarded {_malicious_discards(resolution)} forged "
                        "responses and accepted the legitimate answer"
                    ),
                    impact="The cache holds the correct record",
                    severity=Severity.INFO,
                )
            )
        if resolution.ambiguous:
            issues.append(
                Issue(
                    kind="race_ambiguity",
                    description=(
                        f"Race {resolution.race_group_id} at {target}: "
                        f"{resolution.ambiguity_reason}"
                    ),
                    impact="The scenario outcome depends on a tie-break or has no accepted answer",
                    remediation="Review arrival ranks and match keys in the scenario",
                    severity=Severity.WARNING,
                )
            )
    return issues


def poisoned_state_rule(ctx: RuleContext) -> list[Issue]:
    step = ctx.step
    if step.races:
        return []

    poisoned = poisoned_actors(ctx.trace, step.index - 1) if step.index > 0 else {}
    for flow in step.flows:
        if flow.source_actor_id in poisoned and not flow.is_self_flow:
            since = poisoned[flow.source_actor_id]
            return [
                Issue(
                    kind="poisoned_record_served",
                    description=(
                        f"{ctx.name(flow.source_actor_id)} answers from state "
                        f"poisoned at step {since}"
                    ),
                    impact=f"{ctx.name(flow.target_actor_id)} receives the attacker's address",
                    remediation="Flush the poisoned cache entry and enable DNSSEC validation",
                    severity=Severity.CRITICAL,
                )
            ]
    if step.flags.is_poisoned:
        return [
            Issue(
                kind="poisoned_state",
                description="This step operates on poisoned DNS data",
                impact="Users are redirected to attacker-controlled servers",
                remediation="Flush the poisoned cache entry and enable DNSSEC validation",
                severity=Severity.CRITICAL,
            )
        ]
    return []


def attack_rule(ctx: RuleContext) -> list[Issue]:
    step = ctx.step
    if not step.flags.is_attack or step.races:
        return []
    attackers = sorted(
        {ctx.name(f.source_actor_id) for f in step.flows if f.malicious}
    )
    return [
        Issue(
            kind="attack_in_progress",
            description=step.title,
            impact="Malicious traffic is part of this step",
            cause=", ".join(attackers) if attackers else None,
            severity=Severity.WARNING,
        )
    ]


ISSUE_RULES: tuple[IssueRule, ...] = (
    latency_rule,
    nameserver_redundancy_rule,
    dnssec_rule,
    packet_loss_rule,
    ipv6_fallback_rule,
    race_rule,
    poisoned_state_rule,
    attack_rule,
)


def completed_normally() -> Issue:
    return Issue(
        kind="completed_normally",
        description="This step completed normally with no notable issues",
        impact="None",
        severity=Severity.INFO,
    )
