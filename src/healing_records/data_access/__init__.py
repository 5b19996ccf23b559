"""Data access layer for healing records."""

from .repository import (
    Database,
    SelectorRepository,
    HealingRepository,
    HealingResultRepository,
    ReportRepository,
)

__all__ = [
    "Database",
    "SelectorRepository",
    "HealingRepository",
    "HealingResultRepository",
    "ReportRepository",
]
