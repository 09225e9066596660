"""Diagnostic data models."""

from dataclasses import dataclass
from enum import Enum


class Severity(str, Enum):
    """Issue severity."""

    INFO = "info"
    WARNING = "warning"
    CRITICAL = "critical"


class PerformanceRating(str, Enum):
    """Latency-based rating of a step."""

    EXCELLENT = "excellent"
    GOOD = "good"
    MODERATE = "moderate"
    POOR = "poor"


class StepCategory(str, Enum):
    """Primary classification of a step."""

    CACHE_HIT = "cache_hit"
    CACHE_MISS = "cache_miss"
    REFERRAL = "referral"
    AUTHORITATIVE_ANSWER = "authoritative_answer"
    DELEGATION = "delegation"
    DNSSEC_VALIDATION = "dnssec_validation"
    PACKET_LOSS = "packet_loss"
    RACE_OUTCOME = "race_outcome"
    GENERIC = "generic"


@dataclass(frozen=True)
class Issue:
    """A single finding about a step."""

    kind: str
    description: str
    impact: str
    severity: Severity
    cause: str | None = None
    remediation: str | None = None


@dataclass(frozen=True)
class Diagnostic:
    """Derived explanation of one step. Never stored, never mutates the trace."""

    step_index: int
    category: StepCategory
    overview: str
    what_happened: str
    technical_notes: str
    why_it_matters: str
    issues: tuple[Issue, ...]
    next_steps: str
    performance_rating: PerformanceRating | None = None
    degraded_fields: tuple[str, ...] = ()

    @property
    def worst_severity(self) -> Severity:
        order = [Severity.INFO, Severity.WARNING, Severity.CRITICAL]
        return max(
            (issue.severity for issue in self.issues), key=order.index, default=Severity.INFO
        )
