"""Tests for DiagnosticEngine and its issue rules."""

import pytest

from tracelab.diagnostics import (
    PLACEHOLDER,
    DiagnosticConfig,
    DiagnosticEngine,
    classify,
    explain,
    performance_rating,
)
from tracelab.models import PerformanceRating, Severity, StepCategory
from tracelab.scenarios import SCENARIOS, load_scenario
from tracelab.trace import load_trace, truncated

CONFIG = DiagnosticConfig(
    domain="example.com", record_type="A", mode="recursive", resolver="8.8.8.8"
)


def issue_kinds(diagnostic):
    return [issue.kind for issue in diagnostic.issues]


class TestProperties:
    """Properties that hold for every scenario."""

    @pytest.mark.parametrize("scenario_id", sorted(SCENARIOS))
    def test_deterministic(self, scenario_id):
        """Test repeated calls return equal diagnostics."""
        trace = load_scenario(scenario_id)

        for index in range(len(trace)):
            assert explain(trace, index, CONFIG) == explain(trace, index, CONFIG)

    @pytest.mark.parametrize("scenario_id", sorted(SCENARIOS))
    def test_prefix_isolation(self, scenario_id):
        """Test later steps never change the explanation of an earlier one."""
        trace = load_scenario(scenario_id)

        for index in range(len(trace)):
            prefix_only = truncated(trace, index + 1)
            assert explain(prefix_only, index, CONFIG) == explain(trace, index, CONFIG)

    @pytest.mark.parametrize("scenario_id", sorted(SCENARIOS))
    def test_issues_never_empty(self, scenario_id):
        """Test every step has at least one issue."""
        trace = load_scenario(scenario_id)

        for index in range(len(trace)):
            assert explain(trace, index, CONFIG).issues

    def test_engine_matches_function(self, recursive_trace):
        """Test the engine class delegates to explain."""
        assert DiagnosticEngine().explain(recursive_trace, 3, CONFIG) == explain(
            recursive_trace, 3, CONFIG
        )


class TestFallbackAndPlaceholders:
    """Tests for the empty-issue fallback and degraded text."""

    def test_completed_normally(self, plain_trace):
        """Test a step with no triggered rule yields one info issue."""
        diagnostic = explain(plain_trace, 1, CONFIG)

        assert len(diagnostic.issues) == 1
        assert diagnostic.issues[0].kind == "completed_normally"
        assert diagnostic.issues[0].severity == Severity.INFO

    def test_missing_config_uses_placeholder(self, recursive_trace):
        """Test absent query context degrades instead of failing."""
        diagnostic = explain(recursive_trace, 0)

        assert "domain" in diagnostic.degraded_fields
        assert PLACEHOLDER in diagnostic.overview

    def test_full_config_fills_domain(self, recursive_trace):
        """Test provided context appears in the text."""
        diagnostic = explain(recursive_trace, 0, CONFIG)

        assert "domain" not in diagnostic.degraded_fields
        assert "example.com" in diagnostic.overview

    def test_config_from_mapping(self, recursive_trace):
        """Test a plain mapping is accepted and unknown keys ignored."""
        config = {"domain": "example.com", "color": "red"}

        assert explain(recursive_trace, 0, config).overview == explain(
            recursive_trace, 0, DiagnosticConfig(domain="example.com")
        ).overview

    def test_index_clamped(self, plain_trace):
        """Test out-of-range indices explain the nearest step."""
        assert explain(plain_trace, 99, CONFIG).step_index == 2

    def test_non_string_field_degrades(self, recursive_trace):
        """Test a wrongly typed config value becomes a placeholder."""
        diagnostic = explain(recursive_trace, 0, {"domain": 123, "mode": "recursive"})

        assert "domain" in diagnostic.degraded_fields
        assert PLACEHOLDER in diagnostic.overview

    def test_non_mapping_config_is_empty(self, plain_trace):
        """Test a config that is not a mapping is treated as absent."""
        diagnostic = explain(plain_trace, 0, ["domain"])

        assert diagnostic == explain(plain_trace, 0)
        assert "domain" in diagnostic.degraded_fields

    def test_wrongly_typed_dataclass_config(self, plain_trace):
        """Test a DiagnosticConfig built with bad values still explains."""
        diagnostic = explain(plain_trace, 0, DiagnosticConfig(domain=5))

        assert "domain" in diagnostic.degraded_fields

    def test_from_mapping(self):
        """Test config parsing drops unusable input."""
        assert DiagnosticConfig.from_mapping(None) == DiagnosticConfig()
        assert DiagnosticConfig.from_mapping("example.com") == DiagnosticConfig()
        assert DiagnosticConfig.from_mapping(
            {"domain": 5, "mode": "iterative"}
        ) == DiagnosticConfig(mode="iterative")


class TestClassify:
    """Tests for step classification."""

    def test_recursive_categories(self, recursive_trace):
        """Test the categories along a recursive resolution."""
        categories = [classify(step, recursive_trace.actors) for step in recursive_trace.steps]

        assert categories == [
            StepCategory.CACHE_MISS,
            StepCategory.CACHE_MISS,
            StepCategory.CACHE_MISS,
            StepCategory.REFERRAL,
            StepCategory.REFERRAL,
            StepCategory.AUTHORITATIVE_ANSWER,
            StepCategory.GENERIC,
        ]

    def test_race_first(self, race_trace):
        """Test races outrank every other category."""
        assert classify(race_trace.steps[1], race_trace.actors) == StepCategory.RACE_OUTCOME

    def test_cache_hit(self):
        """Test cache hits."""
        trace = load_scenario("cache_hit")

        assert classify(trace.steps[0], trace.actors) == StepCategory.CACHE_HIT

    def test_dnssec_and_delegation(self):
        """Test DNSSEC and delegation stages."""
        dnssec = load_scenario("dnssec_chain")
        delegation = load_scenario("ipv6_fallback")

        assert classify(dnssec.steps[0], dnssec.actors) == StepCategory.DNSSEC_VALIDATION
        assert classify(delegation.steps[0], delegation.actors) == StepCategory.DELEGATION


class TestPerformanceRating:
    """Tests for latency bands."""

    @pytest.mark.parametrize(
        "latency, rating",
        [
            (10, PerformanceRating.EXCELLENT),
            (100, PerformanceRating.GOOD),
            (200, PerformanceRating.MODERATE),
            (300, PerformanceRating.POOR),
            (None, None),
        ],
    )
    def test_bands(self, latency, rating):
        """Test each band boundary."""
        assert performance_rating(latency) == rating


class TestRules:
    """Tests for individual issue rules."""

    def test_packet_loss_attempts_and_retry(self):
        """Test attempts are counted and the retry is recognized."""
        trace = load_scenario("packet_loss_retry")

        first = explain(trace, 0, CONFIG)
        second = explain(trace, 1, CONFIG)
        retry = explain(trace, 2, CONFIG)

        assert "slow_response" in issue_kinds(first)
        assert "attempt 1" in first.issues[issue_kinds(first).index("packet_loss")].description
        assert "attempt 2" in second.issues[issue_kinds(second).index("packet_loss")].description
        assert "retry_succeeded" in issue_kinds(retry)
        assert "retry_succeeded" not in issue_kinds(explain(trace, 3, CONFIG))

    def test_dnssec_failure_is_critical(self):
        """Test a bogus signature."""
        trace = load_scenario("dnssec_failure")
        diagnostic = explain(trace, trace.last_index, CONFIG)

        assert "dnssec_validation_failed" in issue_kinds(diagnostic)
        assert diagnostic.worst_severity == Severity.CRITICAL

    def test_dnssec_chain_validates(self):
        """Test a valid chain raises no DNSSEC issue."""
        trace = load_scenario("dnssec_chain")

        for index in range(len(trace)):
            assert "dnssec_validation_failed" not in issue_kinds(explain(trace, index, CONFIG))

    def test_nameserver_redundancy(self):
        """Test good and low redundancy."""
        trace = load_scenario("ipv6_fallback")

        assert "good_nameserver_redundancy" in issue_kinds(explain(trace, 0, CONFIG))
        low = explain(trace, 2, CONFIG)
        assert "low_nameserver_redundancy" in issue_kinds(low)
        assert "slow_response" in issue_kinds(low)

    def test_ipv6_fallback(self):
        """Test an unreachable IPv6 path followed by IPv4."""
        trace = load_scenario("ipv6_fallback")

        assert "ipv6_fallback" in issue_kinds(explain(trace, 0, CONFIG))
        assert "ipv6_fallback" not in issue_kinds(explain(trace, 1, CONFIG))

    def test_cache_poisoned(self, race_trace):
        """Test a forged winner is critical and explained."""
        diagnostic = explain(race_trace, 1, CONFIG)

        assert "cache_poisoned" in issue_kinds(diagnostic)
        assert diagnostic.category == StepCategory.RACE_OUTCOME
        assert "forged" in diagnostic.what_happened

    def test_poisoned_record_served(self, race_trace):
        """Test the poisoned resolver is flagged when it answers later."""
        diagnostic = explain(race_trace, 2, CONFIG)

        assert "poisoned_record_served" in issue_kinds(diagnostic)
        assert diagnostic.worst_severity == Severity.CRITICAL

    def test_poisoned_state_not_visible_before_race(self, race_trace):
        """Test step 0 knows nothing about the later race."""
        assert issue_kinds(explain(race_trace, 0, CONFIG)) == ["completed_normally"]

    def test_defended_race(self):
        """Test rejected forgeries are reported and nothing is poisoned."""
        trace = load_scenario("cache_poisoning_defended")

        race = explain(trace, 1, CONFIG)
        served = explain(trace, 2, CONFIG)

        assert "spoofed_responses_rejected" in issue_kinds(race)
        assert "cache_poisoned" not in issue_kinds(race)
        assert "poisoned_record_served" not in issue_kinds(served)

    def test_race_without_winner(self, race_document):
        """Test a race nobody wins is flagged as ambiguous."""
        race_document["steps"][1]["expectedMatchKeys"] = {"resolver": "txid-9"}
        trace = load_trace(race_document)

        diagnostic = explain(trace, 1, CONFIG)

        assert "race_ambiguity" in issue_kinds(diagnostic)
        assert "poisoned_record_served" not in issue_kinds(explain(trace, 2, CONFIG))

    def test_attack_in_progress(self):
        """Test attack steps name the attacker."""
        trace = load_scenario("dns_amplification")
        diagnostic = explain(trace, 0, CONFIG)

        attack = diagnostic.issues[issue_kinds(diagnostic).index("attack_in_progress")]
        assert attack.severity == Severity.WARNING
        assert attack.cause == "Botnet"
