"""
Services module for healing records, ranking, reports and metrics.
"""

from .healing_service import HealingService, reconcile_selection
from .metrics_gateway import MetricsDispatcher, MetricsGateway
from .ranking import rank_healings
from .report_service import ReportService
from .selector_service import SelectorService

__all__ = [
    "HealingService",
    "reconcile_selection",
    "MetricsDispatcher",
    "MetricsGateway",
    "rank_healings",
    "ReportService",
    "SelectorService"
]
