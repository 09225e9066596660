"""RaceResolver: deterministic resolution of competing flows.

A resolver accepts only the first correctly-matching answer for a query and
ignores everything that arrives after it. Within a race group, candidates are
ordered by ``arrival_rank`` (lower arrives first, ``None`` last, equal ranks in
flow-list order). The first candidate whose ``match_key`` equals the target's
expected key wins; earlier candidates are discarded as non-matching, later ones
as too late without being checked.
"""

import copy
from typing import Protocol, Sequence

from ..logging_config import get_logger
from ..models import PacketFlow, RaceOutcome, RaceResolution, Step, Verdict

logger = get_logger(__name__)


class IRaceResolver(Protocol):
    """Decides the accepted flow of each race group in a step."""

    def resolve_step(self, step: Step) -> tuple[RaceResolution, ...]:
        """Resolve every race group of the step, in order of first appearance."""
        ...


def _arrival_order(candidates: Sequence[tuple[int, PacketFlow]]) -> list[tuple[int, PacketFlow]]:
    # sorted() is stable, so equal ranks keep flow-list order
    return sorted(
        candidates,
        key=lambda item: (
            item[1].arrival_rank is None,
            item[1].arrival_rank if item[1].arrival_rank is not None else 0,
        ),
    )


def resolve_group(
    race_group_id: str,
    candidates: Sequence[tuple[int, PacketFlow]],
    expected_key: str | None,
) -> RaceResolution:
    """
    Resolve one race group.

    Args:
        race_group_id: Group identifier.
        candidates: (position in the step's flows, flow) pairs of the group.
        expected_key: The key the target expects; None means nothing can match.

    Returns:
        RaceResolution with a verdict for every candidate.
    """
    if not candidates:
        raise ValueError(f"Race group {race_group_id} has no candidates")

    target = candidates[0][1].target_actor_id
    ordered = _arrival_order(candidates)

    winner_at: int | None = None
    for i, (_, flow) in enumerate(ordered):
        if expected_key is not None and flow.match_key == expected_key:
            winner_at = i
            break

    outcomes: list[RaceOutcome] = []
    for i, (position, flow) in enumerate(ordered):
        if winner_at is None or i < winner_at:
            verdict = Verdict.NON_MATCHING
        elif i == winner_at:
            verdict = Verdict.ACCEPTED
        else:
            verdict = Verdict.TOO_LATE
        outcomes.append(RaceOutcome(flow=flow, position=position, verdict=verdict))

    if winner_at is None:
        logger.info(
            "Race group %s toward %s resolved with no winner", race_group_id, target
        )
        return RaceResolution(
            race_group_id=race_group_id,
            target_actor_id=target,
            expected_key=expected_key,
            winner=None,
            outcomes=tuple(outcomes),
            target_state=None,
            ambiguous=True,
            ambiguity_reason="no candidate matched the expected key",
        )

    winner = ordered[winner_at][1]
    tied = [
        flow
        for _, flow in ordered[winner_at + 1 :]
        if flow.arrival_rank == winner.arrival_rank and flow.match_key == expected_key
    ]
    reason = None
    if tied:
        reason = (
            f"{len(tied) + 1} matching candidates share arrival rank "
            f"{winner.arrival_rank}; earliest in flow order accepted"
        )
        logger.warning("Race group %s: %s", race_group_id, reason)

    return RaceResolution(
        race_group_id=race_group_id,
        target_actor_id=target,
        expected_key=expected_key,
        winner=winner,
        outcomes=tuple(outcomes),
        target_state=copy.deepcopy(winner.after_state) if winner.after_state else None,
        ambiguous=bool(tied),
        ambiguity_reason=reason,
    )


class RaceResolver:
    """Resolves all race groups of a step."""

    def resolve_step(self, step: Step) -> tuple[RaceResolution, ...]:
        """Resolve every race group of the step, in order of first appearance."""
        resolutions = []
        for group_id in step.race_group_ids:
            candidates = [
                (position, flow)
                for position, flow in enumerate(step.flows)
                if flow.race_group_id == group_id
            ]
            target = candidates[0][1].target_actor_id
            resolutions.append(
                resolve_group(group_id, candidates, step.expected_key(target))
            )
        return tuple(resolutions)


def resolve_step(step: Step) -> tuple[RaceResolution, ...]:
    """Resolve every race group of the step with the default resolver."""
    return RaceResolver().resolve_step(step)
