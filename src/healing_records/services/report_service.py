"""Report records pointing at the healing result used in a test session."""

import logging
import sqlite3
from typing import List, Optional

from ..core.models import Healing, HealingResult, ReportRecord
from ..data_access import Database, ReportRepository

logger = logging.getLogger(__name__)


class ReportService:
    """Creates and reads report records."""

    def __init__(self, database: Database):
        self.database = database

    def create_report_record(
        self,
        conn: sqlite3.Connection,
        result: HealingResult,
        healing: Healing,
        session_key: Optional[str],
        screenshot: Optional[str]
    ) -> ReportRecord:
        """Create a report record inside the caller's transaction."""
        record = ReportRepository(conn).create(session_key, result, healing, screenshot)
        logger.debug(f"[Save Healing] Report record {record.id} created for session {session_key}")
        return record

    def get_report(self, session_key: str) -> List[ReportRecord]:
        with self.database.transaction(read_only=True) as conn:
            return ReportRepository(conn).find_by_session_key(session_key)
