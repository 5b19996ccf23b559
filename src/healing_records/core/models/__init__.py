"""Core data models for the healing record service."""

from .healing_models import (
    Locator,
    Selector,
    CandidateResult,
    HealingResult,
    Healing,
    RankedResult,
    HealingView,
    HealingQuery,
    HealingRequest,
    ReportRecord,
    RecordConfiguration,
    ResultState,
    MetricsBucket
)

__all__ = [
    "Locator",
    "Selector",
    "CandidateResult",
    "HealingResult",
    "Healing",
    "RankedResult",
    "HealingView",
    "HealingQuery",
    "HealingRequest",
    "ReportRecord",
    "RecordConfiguration",
    "ResultState",
    "MetricsBucket"
]
