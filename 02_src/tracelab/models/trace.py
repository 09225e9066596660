"""Trace data models: flows, steps and the trace itself."""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..actors import ActorRegistry
    from .race import RaceResolution


class FlowKind(str, Enum):
    """Kind of packet exchange."""

    QUERY = "query"
    RESPONSE = "response"
    REFERRAL = "referral"
    INTERNAL = "internal"


class DnssecOutcome(str, Enum):
    """Result of a DNSSEC validation step."""

    VALIDATED = "validated"
    FAILED = "failed"
    INSECURE = "insecure"


@dataclass(frozen=True)
class PacketFlow:
    """One packet exchange (or internal processing event) within a step."""

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
    address_family: str | None = None  # "ipv4" / "ipv6"
    delivered: bool = True
    before_state: dict[str, Any] | None = None
    after_state: dict[str, Any] | None = None

    @property
    def is_self_flow(self) -> bool:
        return self.source_actor_id == self.target_actor_id


@dataclass(frozen=True)
class StepFlags:
    """Diagnostic flags of a step."""

    is_attack: bool = False
    is_poisoned: bool = False
    has_packet_loss: bool = False
    dnssec: DnssecOutcome | None = None


@dataclass(frozen=True)
class Step:
    """One discrete moment in a trace."""

    index: int
    stage: str
    title: str
    description: str
    participant_ids: tuple[str, ...]
    timing_offset_ms: int = 0
    latency_ms: int | None = None
    flows: tuple[PacketFlow, ...] = ()
    flags: StepFlags = field(default_factory=StepFlags)
    highlight_actor_id: str | None = None
    expected_match_keys: tuple[tuple[str, str], ...] = ()
    zone: str | None = None
    nameservers: tuple[str, ...] = ()
    races: tuple["RaceResolution", ...] = ()

    def flows_of_kind(self, kind: FlowKind) -> list[PacketFlow]:
        return [flow for flow in self.flows if flow.kind == kind]

    def expected_key(self, actor_id: str) -> str | None:
        """Match key the actor expects in this step's races, if any."""
        return dict(self.expected_match_keys).get(actor_id)

    @property
    def race_group_ids(self) -> list[str]:
        """Race group ids in order of first appearance."""
        seen: list[str] = []
        for flow in self.flows:
            if flow.race_group_id is not None and flow.race_group_id not in seen:
                seen.append(flow.race_group_id)
        return seen


@dataclass(frozen=True)
class Trace:
    """An immutable, ordered sequence of steps for one scenario run."""

    scenario_id: str
    steps: tuple[Step, ...]
    actors: "ActorRegistry"
    title: str = ""
    is_live: bool = False

    def __len__(self) -> int:
        return len(self.steps)

    @property
    def last_index(self) -> int:
        return len(self.steps) - 1
