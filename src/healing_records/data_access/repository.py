"""Repository pattern for healing record storage."""

import sqlite3
import logging
from contextlib import contextmanager
from datetime import datetime
from typing import Dict, Iterator, List, Optional, Sequence
from pathlib import Path

from ..core.exceptions import DuplicateIdentityError
from ..core.models import (
    CandidateResult, Healing, HealingQuery, HealingResult, Locator, ReportRecord, Selector
)
from .queries import (
    CREATE_SELECTOR_TABLE,
    CREATE_HEALING_TABLE,
    CREATE_HEALING_RESULT_TABLE,
    CREATE_REPORT_RECORD_TABLE,
    CREATE_INDEXES,
    INSERT_SELECTOR,
    SELECT_SELECTOR_BY_ID,
    INSERT_HEALING,
    SELECT_HEALINGS,
    HEALING_ORDER,
    INSERT_HEALING_RESULT,
    SELECT_HEALING_RESULTS,
    SELECT_ACTIVE_RESULTS_BY_SELECTOR,
    UPDATE_HEALING_RESULT_SUCCESS,
    MARK_RESULTS_SUPERSEDED,
    INSERT_REPORT_RECORD,
    SELECT_REPORT_RECORDS_BY_SESSION,
)

logger = logging.getLogger(__name__)


class Database:
    """SQLite database holding selectors, healings, results and reports."""

    def __init__(self, db_path: str, timeout: float = 10.0):
        """
        Initialize database with its file path.

        Args:
            db_path: Path to SQLite database file
            timeout: Seconds to wait for a competing writer to release its lock
        """
        self.db_path = db_path
        self.timeout = timeout
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

    def connect(self) -> sqlite3.Connection:
        # autocommit mode; transaction() issues BEGIN/COMMIT itself
        conn = sqlite3.connect(self.db_path, timeout=self.timeout, isolation_level=None)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA foreign_keys = ON")
        return conn

    def initialize_schema(self) -> None:
        """Create database schema if it doesn't exist."""
        with self.transaction() as conn:
            conn.execute(CREATE_SELECTOR_TABLE)
            conn.execute(CREATE_HEALING_TABLE)
            conn.execute(CREATE_HEALING_RESULT_TABLE)
            conn.execute(CREATE_REPORT_RECORD_TABLE)
            for statement in CREATE_INDEXES:
                conn.execute(statement)

        logger.info("Database schema initialized successfully")

    @contextmanager
    def transaction(self, read_only: bool = False) -> Iterator[sqlite3.Connection]:
        """Run the enclosed block as one atomic unit.

        Commits when the block exits normally and rolls back on any exception,
        which is re-raised. Write transactions take the write lock up front;
        read-only ones use a deferred BEGIN and do not queue for that lock.
        """
        conn = self.connect()
        try:
            conn.execute("BEGIN" if read_only else "BEGIN IMMEDIATE")
            try:
                yield conn
            except BaseException:
                conn.execute("ROLLBACK")
                raise
            conn.execute("COMMIT")
        finally:
            conn.close()


def _timestamp() -> str:
    return datetime.now().isoformat()


def _row_to_result(row: sqlite3.Row) -> HealingResult:
    return HealingResult(
        id=row["id"],
        healing_id=row["healing_id"],
        locator=Locator(value=row["locator_value"], type=row["locator_type"]),
        score=row["score"],
        success_healing=None if row["success_healing"] is None else bool(row["success_healing"]),
        superseded=bool(row["superseded"]),
        created_at=datetime.fromisoformat(row["created_at"])
    )


class SelectorRepository:
    """Repository for selector rows."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def find_by_id(self, uid: str) -> Optional[Selector]:
        row = self.conn.execute(SELECT_SELECTOR_BY_ID, (uid,)).fetchone()
        if row is None:
            return None
        return Selector(
            uid=row["uid"],
            class_name=row["class_name"],
            method_name=row["method_name"],
            locator=Locator(value=row["locator_value"], type=row["locator_type"]),
            command=row["command"],
            url=row["url"],
            created_at=datetime.fromisoformat(row["created_at"])
        )

    def save(self, selector: Selector) -> Selector:
        """
        Insert a selector.

        Raises:
            DuplicateIdentityError: If a selector with the same uid exists
        """
        try:
            self.conn.execute(INSERT_SELECTOR, (
                selector.uid,
                selector.class_name,
                selector.method_name,
                selector.locator.type,
                selector.locator.value,
                selector.command,
                selector.url,
                selector.created_at.isoformat()
            ))
        except sqlite3.IntegrityError as e:
            if "UNIQUE" in str(e):
                raise DuplicateIdentityError(selector.uid) from e
            raise
        return selector


class HealingRepository:
    """Repository for healing rows and their owned results."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def find_by_id(self, uid: str) -> Optional[Healing]:
        healings = self._select("h.uid = ?", [uid])
        return healings[0] if healings else None

    def find_all(self, query: HealingQuery) -> List[Healing]:
        """
        Find healings whose selector matches every criterion that is set.

        Args:
            query: Filter criteria over selector attributes

        Returns:
            Healings in creation order, with their results loaded
        """
        clauses = []
        params = []
        if query.class_name:
            clauses.append("s.class_name = ?")
            params.append(query.class_name)
        if query.method_name:
            clauses.append("s.method_name = ?")
            params.append(query.method_name)
        if query.locator:
            clauses.append("s.locator_value = ?")
            params.append(query.locator)
        if query.url:
            clauses.append("s.url = ?")
            params.append(query.url)
        return self._select(" AND ".join(clauses), params)

    def create(self, uid: str, selector: Selector, page_content: str) -> Healing:
        """
        Insert a new healing row.

        Raises:
            DuplicateIdentityError: If a healing with the same uid exists
        """
        healing = Healing(uid=uid, selector=selector, page_content=page_content)
        try:
            self.conn.execute(INSERT_HEALING, (
                uid, selector.uid, page_content, healing.created_at.isoformat()
            ))
        except sqlite3.IntegrityError as e:
            if "UNIQUE" in str(e):
                raise DuplicateIdentityError(uid) from e
            raise
        return healing

    def _select(self, where: str, params: Sequence) -> List[Healing]:
        sql = SELECT_HEALINGS + (f" WHERE {where}" if where else "") + HEALING_ORDER
        healings = []
        for row in self.conn.execute(sql, params).fetchall():
            selector = Selector(
                uid=row["selector_uid"],
                class_name=row["class_name"],
                method_name=row["method_name"],
                locator=Locator(value=row["locator_value"], type=row["locator_type"]),
                command=row["command"],
                url=row["url"],
                created_at=datetime.fromisoformat(row["selector_created_at"])
            )
            healings.append(Healing(
                uid=row["uid"],
                selector=selector,
                page_content=row["page_content"],
                created_at=datetime.fromisoformat(row["created_at"])
            ))

        results = HealingResultRepository(self.conn).find_by_healing_ids([h.uid for h in healings])
        for healing in healings:
            healing.results = results.get(healing.uid, [])
        return healings


class HealingResultRepository:
    """Repository for healing result rows."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def save_all(self, candidates: Sequence[CandidateResult], healing: Healing) -> List[HealingResult]:
        """
        Insert one result per candidate, owned by the given healing.

        Returns:
            The persisted results with their assigned ids, in input order
        """
        saved = []
        for candidate in candidates:
            created_at = _timestamp()
            cursor = self.conn.execute(INSERT_HEALING_RESULT, (
                healing.uid,
                candidate.locator.type,
                candidate.locator.value,
                float(candidate.score),
                created_at
            ))
            saved.append(HealingResult(
                id=cursor.lastrowid,
                healing_id=healing.uid,
                locator=candidate.locator,
                score=float(candidate.score),
                created_at=datetime.fromisoformat(created_at)
            ))
        return saved

    def find_by_id(self, result_id: int) -> Optional[HealingResult]:
        row = self.conn.execute(SELECT_HEALING_RESULTS + " WHERE id = ?", (result_id,)).fetchone()
        return _row_to_result(row) if row is not None else None

    def find_by_healing_ids(self, healing_ids: Sequence[str]) -> Dict[str, List[HealingResult]]:
        grouped: Dict[str, List[HealingResult]] = {}
        if not healing_ids:
            return grouped
        placeholders = ", ".join("?" for _ in healing_ids)
        sql = SELECT_HEALING_RESULTS + f" WHERE healing_id IN ({placeholders}) ORDER BY id"
        for row in self.conn.execute(sql, list(healing_ids)).fetchall():
            result = _row_to_result(row)
            grouped.setdefault(result.healing_id, []).append(result)
        return grouped

    def find_active_by_selector_id(self, selector_id: str) -> List[HealingResult]:
        rows = self.conn.execute(SELECT_ACTIVE_RESULTS_BY_SELECTOR, (selector_id,)).fetchall()
        return [_row_to_result(row) for row in rows]

    def update_success(self, result: HealingResult) -> HealingResult:
        flag = None if result.success_healing is None else int(result.success_healing)
        self.conn.execute(UPDATE_HEALING_RESULT_SUCCESS, (flag, result.id))
        return result

    def mark_superseded(self, healing_id: str) -> int:
        """Mark every active result of a healing as superseded; returns the count."""
        cursor = self.conn.execute(MARK_RESULTS_SUPERSEDED, (healing_id,))
        return cursor.rowcount


class ReportRepository:
    """Repository for report records."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn

    def create(self, session_key: Optional[str], result: HealingResult, healing: Healing,
               screenshot: Optional[str]) -> ReportRecord:
        record = ReportRecord(
            id=0,
            session_key=session_key,
            healing_result_id=result.id,
            healing_id=healing.uid,
            selector_id=healing.selector.uid,
            screenshot=screenshot
        )
        cursor = self.conn.execute(INSERT_REPORT_RECORD, (
            record.session_key,
            record.healing_result_id,
            record.healing_id,
            record.selector_id,
            record.screenshot,
            record.created_at.isoformat()
        ))
        record.id = cursor.lastrowid
        return record

    def find_by_session_key(self, session_key: str) -> List[ReportRecord]:
        rows = self.conn.execute(SELECT_REPORT_RECORDS_BY_SESSION, (session_key,)).fetchall()
        return [
            ReportRecord(
                id=row["id"],
                session_key=row["session_key"],
                healing_result_id=row["healing_result_id"],
                healing_id=row["healing_id"],
                selector_id=row["selector_id"],
                screenshot=row["screenshot"],
                created_at=datetime.fromisoformat(row["created_at"])
            )
            for row in rows
        ]
