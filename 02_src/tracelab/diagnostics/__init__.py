"""DiagnosticEngine module."""

from .engine import (
    DiagnosticConfig,
    DiagnosticEngine,
    IDiagnosticEngine,
    classify,
    explain,
    performance_rating,
)
from .rules import ISSUE_RULES, RuleContext
from .templates import PLACEHOLDER

__all__ = [
    "DiagnosticConfig",
    "DiagnosticEngine",
    "IDiagnosticEngine",
    "classify",
    "explain",
    "performance_rating",
    "ISSUE_RULES",
    "RuleContext",
    "PLACEHOLDER",
]
