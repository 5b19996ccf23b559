"""SQL queries for the healing record store."""

# Schema queries
CREATE_SELECTOR_TABLE = """
    CREATE TABLE IF NOT EXISTS selector (
        uid TEXT PRIMARY KEY,
        class_name TEXT NOT NULL,
        method_name TEXT NOT NULL,
        locator_type TEXT NOT NULL,
        locator_value TEXT NOT NULL,
        command TEXT NOT NULL,
        url TEXT,
        created_at TEXT NOT NULL
    )
"""

CREATE_HEALING_TABLE = """
    CREATE TABLE IF NOT EXISTS healing (
        uid TEXT PRIMARY KEY,
        selector_id TEXT NOT NULL REFERENCES selector(uid),
        page_content TEXT,
        created_at TEXT NOT NULL
    )
"""

CREATE_HEALING_RESULT_TABLE = """
    CREATE TABLE IF NOT EXISTS healing_result (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        healing_id TEXT NOT NULL REFERENCES healing(uid),
        locator_type TEXT NOT NULL,
        locator_value TEXT NOT NULL,
        score REAL NOT NULL,
        success_healing INTEGER,
        superseded INTEGER NOT NULL DEFAULT 0,
        created_at TEXT NOT NULL
    )
"""

CREATE_REPORT_RECORD_TABLE = """
    CREATE TABLE IF NOT EXISTS report_record (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        session_key TEXT,
        healing_result_id INTEGER NOT NULL REFERENCES healing_result(id),
        healing_id TEXT NOT NULL,
        selector_id TEXT NOT NULL,
        screenshot TEXT,
        created_at TEXT NOT NULL
    )
"""

CREATE_INDEXES = (
    "CREATE INDEX IF NOT EXISTS idx_healing_selector ON healing(selector_id)",
    "CREATE INDEX IF NOT EXISTS idx_healing_result_healing ON healing_result(healing_id)",
    "CREATE INDEX IF NOT EXISTS idx_report_record_session ON report_record(session_key)",
)

# Selector queries
INSERT_SELECTOR = """
    INSERT INTO selector (uid, class_name, method_name, locator_type, locator_value, command, url, created_at)
    VALUES (?, ?, ?, ?, ?, ?, ?, ?)
"""

SELECT_SELECTOR_BY_ID = """
    SELECT uid, class_name, method_name, locator_type, locator_value, command, url, created_at
    FROM selector
    WHERE uid = ?
"""

# Healing queries
INSERT_HEALING = """
    INSERT INTO healing (uid, selector_id, page_content, created_at)
    VALUES (?, ?, ?, ?)
"""

SELECT_HEALINGS = """
    SELECT h.uid, h.page_content, h.created_at,
           s.uid AS selector_uid, s.class_name, s.method_name, s.locator_type,
           s.locator_value, s.command, s.url, s.created_at AS selector_created_at
    FROM healing h
    JOIN selector s ON s.uid = h.selector_id
"""

HEALING_ORDER = " ORDER BY h.created_at, h.rowid"

# Healing result queries
INSERT_HEALING_RESULT = """
    INSERT INTO healing_result (healing_id, locator_type, locator_value, score, success_healing, superseded, created_at)
    VALUES (?, ?, ?, ?, NULL, 0, ?)
"""

SELECT_HEALING_RESULTS = """
    SELECT id, healing_id, locator_type, locator_value, score, success_healing, superseded, created_at
    FROM healing_result
"""

SELECT_ACTIVE_RESULTS_BY_SELECTOR = """
    SELECT r.id, r.healing_id, r.locator_type, r.locator_value, r.score,
           r.success_healing, r.superseded, r.created_at
    FROM healing_result r
    JOIN healing h ON h.uid = r.healing_id
    WHERE h.selector_id = ? AND r.superseded = 0
    ORDER BY r.score DESC, r.id
"""

UPDATE_HEALING_RESULT_SUCCESS = """
    UPDATE healing_result SET success_healing = ? WHERE id = ?
"""

MARK_RESULTS_SUPERSEDED = """
    UPDATE healing_result SET superseded = 1 WHERE healing_id = ? AND superseded = 0
"""

# Report queries
INSERT_REPORT_RECORD = """
    INSERT INTO report_record (session_key, healing_result_id, healing_id, selector_id, screenshot, created_at)
    VALUES (?, ?, ?, ?, ?, ?)
"""

SELECT_REPORT_RECORDS_BY_SESSION = """
    SELECT id, session_key, healing_result_id, healing_id, selector_id, screenshot, created_at
    FROM report_record
    WHERE session_key = ?
    ORDER BY id
"""
