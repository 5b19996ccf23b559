"""
Healing record service.

Resolves healing records by deterministic identity, persists candidate
results, reconciles the result the client actually used, and applies
feedback about whether a healing was correct. Metrics traffic is dispatched
after the owning transaction commits and never affects its outcome.
"""

import logging
import sqlite3
import time
from contextlib import contextmanager
from typing import Iterator, List, Mapping, Optional, Sequence

from ..core.exceptions import DuplicateIdentityError, InternalConsistencyError, MissingSelectorError
from ..core.healing_utils import build_healing_key, get_session_key, resolve_project
from ..core.logging_config import get_healing_logger
from ..core.models import (
    CandidateResult, Healing, HealingQuery, HealingRequest, HealingResult,
    HealingView, Locator, MetricsBucket, RecordConfiguration
)
from ..data_access import Database, HealingRepository, HealingResultRepository, SelectorRepository
from .metrics_gateway import MetricsDispatcher, MetricsGateway
from .ranking import rank_healings
from .report_service import ReportService
from .selector_service import SelectorService

logger = logging.getLogger(__name__)


def reconcile_selection(results: Sequence[HealingResult], used_locator_value: str) -> HealingResult:
    """Find the persisted result whose locator value equals the used one.

    Raises:
        InternalConsistencyError: If no persisted result carries that value
    """
    for result in results:
        if result.locator.value == used_locator_value:
            return result
    raise InternalConsistencyError(
        "[Save Healing] Internal exception! Somehow we lost selected healing result on save: "
        f"'{used_locator_value}' is not among {len(results)} persisted results"
    )


class HealingService:
    """Coordinates healing records, their results and their metrics mirror."""

    def __init__(
        self,
        database: Database,
        config: RecordConfiguration,
        metrics_gateway: Optional[MetricsGateway] = None,
        dispatcher: Optional[MetricsDispatcher] = None,
        selector_service: Optional[SelectorService] = None,
        report_service: Optional[ReportService] = None
    ):
        self.database = database
        self.config = config
        self.metrics_gateway = metrics_gateway
        self.dispatcher = dispatcher or MetricsDispatcher(max_workers=config.metrics_max_workers)
        self.selector_service = selector_service or SelectorService(database)
        self.report_service = report_service or ReportService(database)

    def save_healing(self, request: HealingRequest, headers: Mapping[str, str]) -> HealingResult:
        """Persist a healing attempt and return the result the client used.

        Resolving the healing, persisting its results, reconciling the used
        result and writing the report record form one transaction. The
        metrics upload runs afterwards as a best-effort task.

        Args:
            request: Healing attempt reported by the automation client
            headers: Request headers carrying session key and project

        Returns:
            HealingResult: The persisted result matching the used locator

        Raises:
            MissingSelectorError: If the selector was never registered
            InternalConsistencyError: If the used locator was not persisted
        """
        started = time.time()
        selector_id = self.selector_service.get_selector_id(
            request.locator, request.url, request.command, self.config.url_for_key)
        log = get_healing_logger(__name__, selector_id=selector_id)

        try:
            with self.database.transaction() as conn:
                healing = self.resolve_or_create(selector_id, request.page_content, conn=conn)
                results = self.persist_results(request.results, healing, conn=conn)
                selected = reconcile_selection(results, request.used_result.locator.value)
                self.report_service.create_report_record(
                    conn, selected, healing, get_session_key(headers), request.screenshot)
        except (MissingSelectorError, InternalConsistencyError) as e:
            log.log_operation_failure(
                "save_healing", time.time() - started, str(e), error_code=type(e).__name__)
            raise

        log.log_operation_success(
            "save_healing", time.time() - started,
            healing_id=healing.uid, results=len(results), selected=selected.id)

        if self.config.allow_metrics:
            self._push_metrics(request.metrics, headers, selected, request.url)
        return selected

    def resolve_or_create(self, selector_id: str, page_content: str,
                          conn: Optional[sqlite3.Connection] = None) -> Healing:
        """Return the healing for a selector and page snapshot, creating it once.

        Raises:
            MissingSelectorError: If no healing exists and the selector is unknown
        """
        healing_id = build_healing_key(selector_id, page_content)
        with self._connection(conn) as active:
            healings = HealingRepository(active)
            healing = healings.find_by_id(healing_id)
            if healing is not None:
                return healing

            selector = SelectorRepository(active).find_by_id(selector_id)
            if selector is None:
                raise MissingSelectorError(selector_id)

            try:
                healing = healings.create(healing_id, selector, page_content)
            except DuplicateIdentityError:
                # a concurrent first writer won; use its row
                logger.debug(f"[Save Healing] Healing {healing_id} created concurrently, re-reading")
                healing = healings.find_by_id(healing_id)
                if healing is None:
                    raise
                return healing

        logger.debug(f"[Save Healing] Created healing {healing_id} for selector {selector_id}")
        return healing

    def persist_results(self, candidates: Sequence[CandidateResult], healing: Healing,
                        conn: Optional[sqlite3.Connection] = None) -> List[HealingResult]:
        """Persist every candidate as a result owned by the healing."""
        with self._connection(conn) as active:
            results = HealingResultRepository(active)
            if self.config.replace_previous_results and healing.active_results:
                superseded = results.mark_superseded(healing.uid)
                logger.debug(f"[Save Healing] Superseded {superseded} previous results of {healing.uid}")
                for previous in healing.results:
                    previous.superseded = True
            saved = results.save_all(candidates, healing)
        healing.results.extend(saved)
        return saved

    def get_healings(self, query: HealingQuery) -> List[HealingView]:
        """Return ranked candidate views grouped by selector."""
        with self.database.transaction(read_only=True) as conn:
            healings = HealingRepository(conn).find_all(query)
        return rank_healings(healings)

    def get_healing_results(self, locator: Locator, url: Optional[str], command: str) -> List[HealingResult]:
        """Return every active result recorded for the selector of a lookup."""
        selector_id = self.selector_service.get_selector_id(locator, url, command, self.config.url_for_key)
        logger.debug(f"[Get Healing Result] Selector ID: {selector_id}")
        with self.database.transaction(read_only=True) as conn:
            return HealingResultRepository(conn).find_active_by_selector_id(selector_id)

    def apply_feedback(self, result_id: int, is_success: bool) -> Optional[HealingResult]:
        """Record whether a healing result turned out to be correct.

        Feedback for an unknown result is dropped. The stored flag is the
        source of truth; the metrics move that follows is best-effort.

        Returns:
            The updated result, or None when the result is unknown
        """
        with self.database.transaction() as conn:
            results = HealingResultRepository(conn)
            result = results.find_by_id(result_id)
            if result is None:
                logger.debug(f"[Set Healing Status] Healing result {result_id} not found, feedback dropped")
                return None
            result.success_healing = is_success
            results.update_success(result)

        if self.config.allow_metrics:
            self._move_metrics(result, is_success)
        return result

    def _push_metrics(self, metrics: Optional[str], headers: Mapping[str, str],
                      selected: HealingResult, url: Optional[str]) -> None:
        if metrics is None or self.metrics_gateway is None:
            return
        logger.debug(f"[Save Healing] Push Metrics: {selected.id}")
        project = resolve_project(headers, self.config.default_project)
        self.dispatcher.submit(
            "[Save Healing]", self.metrics_gateway.upload_metrics, metrics, selected, project, url)

    def _move_metrics(self, result: HealingResult, is_success: bool) -> None:
        if self.metrics_gateway is None:
            return
        target = MetricsBucket.for_outcome(is_success)
        logger.debug(f"[Set Healing Status] Set '{target.value}' status")
        self.dispatcher.submit(
            "[Set Healing Status]", self.metrics_gateway.move_metrics, target.opposite, target, result)

    @contextmanager
    def _connection(self, conn: Optional[sqlite3.Connection]) -> Iterator[sqlite3.Connection]:
        # join the caller's transaction when one is given
        if conn is not None:
            yield conn
        else:
            with self.database.transaction() as own:
                yield own
