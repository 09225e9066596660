"""Tests for scenario document loading."""

import json

import pytest

from tracelab.actors import ActorRegistry
from tracelab.errors import StructuralError, StructuralErrorKind
from tracelab.models import Capability, DnssecOutcome, FlowKind, Role, Verdict
from tracelab.trace import load_trace, parse_document


class TestParseDocument:
    """Tests for parse_document."""

    def test_camel_case_fields(self, race_document):
        """Test camelCase keys map to model fields."""
        parsed = parse_document(race_document)

        assert parsed.scenario_id == "four_flow_race"
        assert parsed.steps[1].expected_match_keys == {"resolver": "txid-3"}
        assert parsed.steps[1].flows[2].arrival_rank == 3

    def test_json_input(self, plain_document):
        """Test JSON text is accepted."""
        parsed = parse_document(json.dumps(plain_document))

        assert len(parsed.steps) == 3

    def test_extra_keys_ignored(self, plain_document):
        """Test unknown keys do not fail parsing."""
        plain_document["renderHints"] = {"color": "blue"}
        plain_document["steps"][0]["animation"] = "bounce"

        assert parse_document(plain_document).scenario_id == "plain"

    def test_missing_field(self, plain_document):
        """Test absent required fields."""
        del plain_document["steps"][1]["participantIds"]

        with pytest.raises(StructuralError) as exc_info:
            parse_document(plain_document)

        assert exc_info.value.kind == StructuralErrorKind.MISSING_FIELD
        assert "participantIds" in exc_info.value.detail

    def test_invalid_field(self, plain_document):
        """Test wrongly typed fields."""
        plain_document["steps"][0]["index"] = "first"

        with pytest.raises(StructuralError) as exc_info:
            parse_document(plain_document)

        assert exc_info.value.kind == StructuralErrorKind.INVALID_FIELD

    def test_invalid_flow_kind(self, plain_document):
        """Test enum fields are checked."""
        plain_document["steps"][0]["flows"][0]["kind"] = "telepathy"

        with pytest.raises(StructuralError) as exc_info:
            parse_document(plain_document)

        assert exc_info.value.kind == StructuralErrorKind.INVALID_FIELD


class TestLoadTrace:
    """Tests for load_trace."""

    def test_builds_models(self, race_document):
        """Test steps, flows and flags are converted."""
        trace = load_trace(race_document)

        assert len(trace) == 3
        assert trace.title == "Four-flow race"
        assert trace.steps[1].flags.is_attack
        assert trace.steps[1].flows[3].kind == FlowKind.RESPONSE
        assert trace.steps[0].participant_ids == ("resolver", "auth")

    def test_races_resolved_at_load(self, race_trace):
        """Test race groups are resolved once, at load."""
        races = race_trace.steps[1].races

        assert len(races) == 1
        assert races[0].winner.arrival_rank == 3
        assert race_trace.steps[0].races == ()

    def test_actor_defaults_from_role(self, race_trace):
        """Test actors without capabilities get the role defaults."""
        resolver = race_trace.actors.require("resolver")

        assert resolver.role == Role.RECURSIVE_RESOLVER
        assert resolver.display_name == "Recursive Resolver"
        assert resolver.can(Capability.IS_RECURSIVE)

    def test_title_defaults_from_stage(self, plain_document):
        """Test a missing step title is derived from the stage."""
        del plain_document["steps"][0]["title"]

        trace = load_trace(plain_document)

        assert trace.steps[0].title == "Exchange"

    def test_dnssec_flag(self, plain_document):
        """Test DNSSEC outcomes parse."""
        plain_document["steps"][0]["flags"] = {"dnssec": "failed"}

        trace = load_trace(plain_document)

        assert trace.steps[0].flags.dnssec == DnssecOutcome.FAILED

    def test_unknown_actor_rejected(self, race_document):
        """Test an undeclared flow target."""
        race_document["steps"][2]["flows"][0]["targetActorId"] = "nobody"

        with pytest.raises(StructuralError) as exc_info:
            load_trace(race_document)

        assert exc_info.value.kind == StructuralErrorKind.UNKNOWN_ACTOR

    def test_duplicate_actor_rejected(self, plain_document):
        """Test an actor declared twice."""
        plain_document["actors"].append({"id": "a", "role": "client"})

        with pytest.raises(StructuralError) as exc_info:
            load_trace(plain_document)

        assert exc_info.value.kind == StructuralErrorKind.INVALID_FIELD

    def test_base_registry_extended(self, plain_document):
        """Test document actors are added to a given registry."""
        base = ActorRegistry.from_roles({"observer": Role.FIREWALL})

        trace = load_trace(plain_document, registry=base)

        assert "observer" in trace.actors
        assert "a" in trace.actors
        assert "a" not in base

    def test_custom_resolver(self, race_document):
        """Test an injected race resolver is used."""

        class NoRaces:
            def resolve_step(self, step):
                return ()

        trace = load_trace(race_document, resolver=NoRaces())

        assert trace.steps[1].races == ()

    def test_live_flag(self, plain_document):
        """Test live documents produce live traces."""
        plain_document["live"] = True

        assert load_trace(plain_document).is_live

    def test_verdicts_for_every_candidate(self, race_trace):
        """Test every race candidate gets a verdict."""
        outcomes = race_trace.steps[1].races[0].outcomes

        assert [o.verdict for o in outcomes] == [
            Verdict.NON_MATCHING,
            Verdict.NON_MATCHING,
            Verdict.ACCEPTED,
            Verdict.TOO_LATE,
        ]
