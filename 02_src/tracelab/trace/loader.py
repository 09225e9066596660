"""Scenario document parsing: document -> validated, race-resolved Trace."""

import dataclasses
from typing import Any, Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from ..actors import ActorRegistry, make_actor
from ..errors import StructuralError, StructuralErrorKind
from ..logging_config import get_logger, trace_context
from ..models import (
    Capability,
    DnssecOutcome,
    FlowKind,
    PacketFlow,
    Role,
    Step,
    StepFlags,
    Trace,
)
from ..race import IRaceResolver, RaceResolver
from .model import validate

logger = get_logger(__name__)


class _Document(BaseModel):
    """Base for scenario document parts: camelCase keys, extra keys ignored."""

    model_config = ConfigDict(
        extra="ignore",
        alias_generator=to_camel,
        populate_by_name=True,
    )


class ActorDocument(_Document):
    id: str
    display_name: str | None = None
    role: Role = Role.GENERIC
    capabilities: list[Capability] | None = None
    address: str | None = None


class FlowDocument(_Document):
    source_actor_id: str
    target_actor_id: str
    label: str = ""
    kind: FlowKind = FlowKind.QUERY
    malicious: bool = False
    encrypted: bool = False
    validated: bool = False
    race_group_id: str | None = None
    arrival_rank: int | None = None
    match_key: str | None = None
    address_family: str | None = None
    delivered: bool = True
    before_state: dict[str, Any] | None = None
    after_state: dict[str, Any] | None = None


class FlagsDocument(_Document):
    is_attack: bool = False
    is_poisoned: bool = False
    has_packet_loss: bool = False
    dnssec: DnssecOutcome | None = None


class StepDocument(_Document):
    index: int
    stage: str
    participant_ids: list[str]
    title: str = ""
    description: str = ""
    timing_offset_ms: int = 0
    latency_ms: int | None = None
    flows: list[FlowDocument] = Field(default_factory=list)
    flags: FlagsDocument = Field(default_factory=FlagsDocument)
    highlight_actor_id: str | None = None
    expected_match_keys: dict[str, str] = Field(default_factory=dict)
    zone: str | None = None
    nameservers: list[str] = Field(default_factory=list)


class ScenarioDocument(_Document):
    scenario_id: str
    steps: list[StepDocument]
    title: str = ""
    live: bool = False
    actors: list[ActorDocument] = Field(default_factory=list)


def parse_document(document: Mapping[str, Any] | str | bytes) -> ScenarioDocument:
    """
    Parse a scenario document.

    Raises:
        StructuralError: MISSING_FIELD for absent required fields,
            INVALID_FIELD for anything else pydantic rejects.
    """
    try:
        if isinstance(document, (str, bytes)):
            return ScenarioDocument.model_validate_json(document)
        return ScenarioDocument.model_validate(document)
    except ValidationError as e:
        error = e.errors()[0]
        location = ".".join(str(part) for part in error["loc"])
        kind = (
            StructuralErrorKind.MISSING_FIELD
            if error["type"] == "missing"
            else StructuralErrorKind.INVALID_FIELD
        )
        raise StructuralError(kind, f"{location}: {error['msg']}") from e


def _build_registry(
    parsed: ScenarioDocument, base: ActorRegistry | None
) -> ActorRegistry:
    actors = {actor.id: actor for actor in base} if base is not None else {}
    declared: set[str] = set()
    for doc in parsed.actors:
        if doc.id in declared:
            raise StructuralError(
                StructuralErrorKind.INVALID_FIELD, f"actor {doc.id!r} declared twice"
            )
        declared.add(doc.id)
        actors[doc.id] = make_actor(
            doc.id,
            doc.role,
            display_name=doc.display_name,
            capabilities=doc.capabilities,
            address=doc.address,
        )
    return ActorRegistry(actors.values())


def _build_step(doc: StepDocument) -> Step:
    return Step(
        index=doc.index,
        stage=doc.stage,
        title=doc.title or doc.stage.replace("_", " ").title(),
        description=doc.description,
        participant_ids=tuple(doc.participant_ids),
        timing_offset_ms=doc.timing_offset_ms,
        latency_ms=doc.latency_ms,
        flows=tuple(PacketFlow(**flow.model_dump()) for flow in doc.flows),
        flags=StepFlags(**doc.flags.model_dump()),
        highlight_actor_id=doc.highlight_actor_id,
        expected_match_keys=tuple(doc.expected_match_keys.items()),
        zone=doc.zone,
        nameservers=tuple(doc.nameservers),
    )


def resolve_races(trace: Trace, resolver: IRaceResolver | None = None) -> Trace:
    """Copy of the trace with every step's race groups resolved into ``Step.races``."""
    resolver = resolver or RaceResolver()
    return dataclasses.replace(
        trace,
        steps=tuple(
            dataclasses.replace(step, races=resolver.resolve_step(step))
            for step in trace.steps
        ),
    )


def load_trace(
    document: Mapping[str, Any] | str | bytes,
    registry: ActorRegistry | None = None,
    resolver: IRaceResolver | None = None,
) -> Trace:
    """
    Build an immutable Trace from a scenario document.

    Actors declared in the document are added to ``registry`` (if given).
    Race groups are resolved once here and the result is validated, so a
    malformed scenario never reaches playback.

    Raises:
        StructuralError: if the document or the resulting trace is malformed.
    """
    parsed = parse_document(document)
    trace = Trace(
        scenario_id=parsed.scenario_id,
        steps=tuple(_build_step(step) for step in parsed.steps),
        actors=_build_registry(parsed, registry),
        title=parsed.title,
        is_live=parsed.live,
    )
    trace = resolve_races(trace, resolver)

    try:
        validate(trace)
    except StructuralError as e:
        logger.error(
            "Rejected scenario %s: %s",
            parsed.scenario_id,
            e,
            extra=trace_context(scenario_id=parsed.scenario_id),
        )
        raise

    logger.info(
        "Loaded scenario %s: %s steps, %s actors",
        trace.scenario_id,
        len(trace),
        len(trace.actors),
    )
    return trace
