"""Race resolution data models."""

from dataclasses import dataclass
from enum import Enum
from typing import Any

from .trace import PacketFlow


class Verdict(str, Enum):
    """Fate of a single race candidate."""

    ACCEPTED = "accepted"
    NON_MATCHING = "non_matching"
    TOO_LATE = "too_late"


@dataclass(frozen=True)
class RaceOutcome:
    """A candidate flow and what happened to it."""

    flow: PacketFlow
    position: int  # position in the step's flows list
    verdict: Verdict


@dataclass(frozen=True)
class RaceResolution:
    """Resolved race group within one step."""

    race_group_id: str
    target_actor_id: str
    expected_key: str | None
    winner: PacketFlow | None
    outcomes: tuple[RaceOutcome, ...]
    target_state: dict[str, Any] | None = None
    ambiguous: bool = False
    ambiguity_reason: str | None = None

    @property
    def has_winner(self) -> bool:
        return self.winner is not None

    @property
    def poisoned(self) -> bool:
        return self.winner is not None and self.winner.malicious

    @property
    def discarded(self) -> list[RaceOutcome]:
        return [o for o in self.outcomes if o.verdict != Verdict.ACCEPTED]
