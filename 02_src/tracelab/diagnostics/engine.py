"""DiagnosticEngine: rule-based explanation of a step.

``explain`` is a pure function of (trace, index, config). It reads only the
visible prefix ``steps_up_to(trace, index)``, so the result for a step never
changes when later steps are added, and repeated calls return equal results.

Evaluation order:
    1. classify the step into one primary category (first match wins);
    2. render the category's text templates;
    3. run every issue rule against the step and its prefix;
    4. fall back to a single informational issue when no rule fired.
"""

from dataclasses import dataclass, fields
from typing import Any, Mapping, Protocol

from ..actors import ActorRegistry
from ..config import RATING_BANDS_MS
from ..logging_config import get_logger
from ..models import (
    Capability,
    Diagnostic,
    FlowKind,
    PacketFlow,
    PerformanceRating,
    Step,
    StepCategory,
    Trace,
    Verdict,
)
from ..trace import steps_up_to
from .rules import ISSUE_RULES, RuleContext, completed_normally
from .templates import FIELDS, TEMPLATES, TemplateValues, render

logger = get_logger(__name__)


@dataclass(frozen=True)
class DiagnosticConfig:
    """Query context the templates are parameterized with. Every field is optional."""

    domain: str | None = None
    record_type: str | None = None
    mode: str | None = None  # "recursive" / "iterative"
    resolver: str | None = None

    @classmethod
    def from_mapping(cls, values: Any) -> "DiagnosticConfig":
        """
        Build a config from loosely typed input.

        Anything that is not a mapping counts as empty; unknown keys and
        values that are not strings are dropped, so those fields degrade to
        the placeholder.
        """
        if not isinstance(values, Mapping):
            if values is not None:
                logger.warning("Ignoring diagnostic config of type %s", type(values).__name__)
            return cls()
        known = {f.name for f in fields(cls)}
        accepted = {}
        for key, value in values.items():
            if key not in known:
                continue
            if value is not None and not isinstance(value, str):
                logger.warning("Ignoring non-string diagnostic config field %s", key)
                continue
            accepted[key] = value
        return cls(**accepted)


ConfigLike = DiagnosticConfig | Mapping[str, Any] | None


class IDiagnosticEngine(Protocol):
    """Derives per-step analysis."""

    def explain(self, trace: Trace, index: int, config: ConfigLike = None) -> Diagnostic:
        """Explain the step at ``index``."""
        ...


def classify(step: Step, actors: ActorRegistry) -> StepCategory:
    """Primary category of a step. First matching test wins."""
    stage = step.stage.lower()

    if step.races or step.flags.is_poisoned:
        return StepCategory.RACE_OUTCOME
    if step.flags.has_packet_loss or "packet_loss" in stage or "retry" in stage:
        return StepCategory.PACKET_LOSS
    if step.flags.dnssec is not None or "dnssec" in stage:
        return StepCategory.DNSSEC_VALIDATION
    if "cache" in stage:
        if "miss" in stage:
            return StepCategory.CACHE_MISS
        return StepCategory.CACHE_HIT
    if "forward" in stage:
        return StepCategory.CACHE_MISS
    if "delegation" in stage:
        return StepCategory.DELEGATION
    if step.flows_of_kind(FlowKind.REFERRAL):
        return StepCategory.REFERRAL
    for flow in step.flows_of_kind(FlowKind.RESPONSE):
        if actors.has_capability(flow.source_actor_id, Capability.IS_AUTHORITATIVE):
            return StepCategory.AUTHORITATIVE_ANSWER
    return StepCategory.GENERIC


def performance_rating(latency_ms: int | None) -> PerformanceRating | None:
    if latency_ms is None:
        return None
    excellent, good, moderate = RATING_BANDS_MS
    if latency_ms < excellent:
        return PerformanceRating.EXCELLENT
    if latency_ms < good:
        return PerformanceRating.GOOD
    if latency_ms < moderate:
        return PerformanceRating.MODERATE
    return PerformanceRating.POOR


def _primary_flow(step: Step) -> PacketFlow | None:
    """The flow the step is mostly about: first non-self flow, else the first flow."""
    for flow in step.flows:
        if not flow.is_self_flow:
            return flow
    return step.flows[0] if step.flows else None


def _race_text(step: Step, actors: ActorRegistry) -> tuple[str | None, str | None, str | None]:
    if not step.races:
        return None, None, None

    resolution = step.races[0]
    target = actors.display_name(resolution.target_actor_id)
    total = len(resolution.outcomes)
    too_late = sum(1 for o in resolution.outcomes if o.verdict == Verdict.TOO_LATE)
    non_matching = sum(
        1 for o in resolution.outcomes if o.verdict == Verdict.NON_MATCHING
    )

    if resolution.winner is None:
        summary = (
            f"None of the {total} candidates matched the expected key, so nothing "
            f"was accepted and {target}'s state is unchanged."
        )
        next_steps = f"{target} keeps waiting for a valid answer or times out."
    else:
        origin = "a forged" if resolution.winner.malicious else "the legitimate"
        summary = (
            f"{target} accepted {origin} response from "
            f"{actors.display_name(resolution.winner.source_actor_id)}; "
            f"{non_matching} earlier non-matching and {too_late} late "
            f"responses were discarded."
        )
        if resolution.winner.malicious:
            next_steps = (
                f"{target} now serves the forged record to every client that asks."
            )
        else:
            next_steps = f"{target} caches the correct record and answers the client."
    return target, summary, next_steps


def _template_values(
    step: Step, actors: ActorRegistry, config: DiagnosticConfig
) -> TemplateValues:
    flow = _primary_flow(step)
    race_target, race_summary, race_next = _race_text(step, actors)
    domain = config.domain
    zone = step.zone or (domain.rsplit(".", 1)[-1] if domain else None)
    return TemplateValues(
        {
            "domain": domain,
            "record_type": config.record_type,
            "mode": config.mode,
            "resolver": config.resolver,
            "title": step.title,
            "stage": step.stage,
            "description": step.description or None,
            "latency_ms": step.latency_ms,
            "source": actors.display_name(flow.source_actor_id) if flow else None,
            "target": actors.display_name(flow.target_actor_id) if flow else None,
            "participants": ", ".join(
                actors.display_name(a) for a in step.participant_ids
            )
            or None,
            "zone": zone,
            "nameserver_count": len(step.nameservers) if step.nameservers else None,
            "nameserver_list": ", ".join(step.nameservers) or None,
            "dnssec_outcome": step.flags.dnssec.value if step.flags.dnssec else None,
            "race_target": race_target,
            "race_summary": race_summary,
            "race_next_steps": race_next,
        }
    )


class DiagnosticEngine:
    """Stateless rule evaluator."""

    def explain(self, trace: Trace, index: int, config: ConfigLike = None) -> Diagnostic:
        """Explain the step at ``index``."""
        return explain(trace, index, config)


def explain(trace: Trace, index: int, config: ConfigLike = None) -> Diagnostic:
    """
    Explain the step at ``index`` of ``trace``.

    Args:
        trace: A validated trace.
        index: Step index; clamped to the trace.
        config: Query context (domain, record type, mode, resolver).

    Returns:
        Diagnostic with a non-empty issue list.
    """
    if not isinstance(config, DiagnosticConfig):
        config = DiagnosticConfig.from_mapping(config)
    elif not all(isinstance(v, (str, type(None))) for v in vars(config).values()):
        config = DiagnosticConfig.from_mapping(vars(config))

    prefix = steps_up_to(trace, index)
    step = prefix[-1]
    category = classify(step, trace.actors)

    values = _template_values(step, trace.actors, config)
    text = {name: render(TEMPLATES[category][name], values) for name in FIELDS}
    if values.missing:
        logger.debug(
            "Diagnostic for %s step %s degraded, missing: %s",
            trace.scenario_id,
            step.index,
            sorted(values.missing),
        )

    context = RuleContext(trace=trace, step=step, prefix=prefix)
    issues = [issue for rule in ISSUE_RULES for issue in rule(context)]
    if not issues:
        issues = [completed_normally()]

    return Diagnostic(
        step_index=step.index,
        category=category,
        overview=text["overview"],
        what_happened=text["what_happened"],
        technical_notes=text["technical_notes"],
        why_it_matters=text["why_it_matters"],
        issues=tuple(issues),
        next_steps=text["next_steps"],
        performance_rating=performance_rating(step.latency_ms),
        degraded_fields=tuple(sorted(values.missing)),
    )
