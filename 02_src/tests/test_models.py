"""Tests for data models."""

import pytest

from tracelab.models import (
    Actor,
    Capability,
    Diagnostic,
    FlowKind,
    Issue,
    PacketFlow,
    PlaybackState,
    RaceOutcome,
    RaceResolution,
    Role,
    Severity,
    Step,
    StepCategory,
    Verdict,
)


class TestActor:
    """Tests for Actor model."""

    def test_actor_can(self):
        """Test capability lookup."""
        actor = Actor(
            id="resolver",
            display_name="Recursive Resolver",
            role=Role.RECURSIVE_RESOLVER,
            capabilities=frozenset({Capability.IS_RECURSIVE}),
        )

        assert actor.can(Capability.IS_RECURSIVE)
        assert not actor.can(Capability.CAN_SPOOF_SOURCE)

    def test_actor_is_frozen(self):
        """Test that actors are immutable."""
        actor = Actor(id="a", display_name="A", role=Role.GENERIC)

        with pytest.raises(AttributeError):
            actor.id = "b"


class TestStep:
    """Tests for Step model."""

    def test_race_group_ids_in_order_of_appearance(self):
        """Test race groups are listed once, first appearance first."""
        step = Step(
            index=0,
            stage="race",
            title="Race",
            description="",
            participant_ids=("a", "b"),
            flows=(
                PacketFlow("a", "b", race_group_id="g2"),
                PacketFlow("a", "b"),
                PacketFlow("a", "b", race_group_id="g1"),
                PacketFlow("a", "b", race_group_id="g2"),
            ),
        )

        assert step.race_group_ids == ["g2", "g1"]

    def test_flows_of_kind(self):
        """Test filtering flows by kind."""
        step = Step(
            index=0,
            stage="x",
            title="X",
            description="",
            participant_ids=("a", "b"),
            flows=(
                PacketFlow("a", "b"),
                PacketFlow("b", "a", kind=FlowKind.RESPONSE),
            ),
        )

        assert len(step.flows_of_kind(FlowKind.RESPONSE)) == 1
        assert step.flows_of_kind(FlowKind.REFERRAL) == []

    def test_self_flow(self):
        """Test internal processing flows."""
        assert PacketFlow("a", "a", kind=FlowKind.INTERNAL).is_self_flow
        assert not PacketFlow("a", "b").is_self_flow


class TestRaceResolution:
    """Tests for RaceResolution model."""

    def test_poisoned_when_winner_malicious(self):
        """Test poisoned property."""
        forged = PacketFlow("attacker", "resolver", malicious=True)
        resolution = RaceResolution(
            race_group_id="g",
            target_actor_id="resolver",
            expected_key="k",
            winner=forged,
            outcomes=(RaceOutcome(forged, 0, Verdict.ACCEPTED),),
        )

        assert resolution.has_winner
        assert resolution.poisoned
        assert resolution.discarded == []

    def test_no_winner(self):
        """Test a resolution with no accepted candidate."""
        flow = PacketFlow("attacker", "resolver")
        resolution = RaceResolution(
            race_group_id="g",
            target_actor_id="resolver",
            expected_key="k",
            winner=None,
            outcomes=(RaceOutcome(flow, 0, Verdict.NON_MATCHING),),
        )

        assert not resolution.has_winner
        assert not resolution.poisoned
        assert len(resolution.discarded) == 1


class TestDiagnostic:
    """Tests for Diagnostic model."""

    def test_worst_severity(self):
        """Test the most severe issue wins."""
        issues = (
            Issue("a", "a", "a", Severity.INFO),
            Issue("b", "b", "b", Severity.CRITICAL),
            Issue("c", "c", "c", Severity.WARNING),
        )
        diagnostic = Diagnostic(
            step_index=0,
            category=StepCategory.GENERIC,
            overview="",
            what_happened="",
            technical_notes="",
            why_it_matters="",
            issues=issues,
            next_steps="",
        )

        assert diagnostic.worst_severity == Severity.CRITICAL


class TestPlaybackState:
    """Tests for PlaybackState model."""

    def test_at_end(self):
        """Test end detection."""
        state = PlaybackState(
            trace_id="t", current_index=2, is_playing=False, auto_advance_ms=10, length=3
        )
        assert state.at_end

        state = PlaybackState(
            trace_id="t", current_index=1, is_playing=False, auto_advance_ms=10, length=3
        )
        assert not state.at_end

    def test_enums_are_strings(self):
        """Test enum values serialize as plain strings."""
        assert Role.ROOT_SERVER == "root_server"
        assert Verdict.TOO_LATE.value == "too_late"
