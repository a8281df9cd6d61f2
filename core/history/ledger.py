"""Job History Ledger.

Append-only SQLite log of processed jobs. The dispatch loop appends one
record per job; the API reads recent entries and counts.
"""

import json
import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from core.history.models import ExecutionRecord, JobStatus
from records.db import DEFAULT_DB_PATH


logger = logging.getLogger(__name__)


def init_history_db(db_path: Path = DEFAULT_DB_PATH) -> None:
    """Create the job_history table and its indexes."""
    conn = sqlite3.connect(db_path)
    try:
        cursor = conn.cursor()

        cursor.execute("""
            CREATE TABLE IF NOT EXISTS job_history (
                id INTEGER PRIMARY KEY AUTOINCREMENT,
                job_type TEXT NOT NULL,
                job_key TEXT NOT NULL,
                status TEXT NOT NULL,
                variables TEXT,
                result TEXT,
                error_message TEXT,
                execution_time TEXT NOT NULL,
                execution_time_ms INTEGER
            )
        """)

        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_job_history_time
            ON job_history(execution_time)
        """)
        cursor.execute("""
            CREATE INDEX IF NOT EXISTS idx_job_history_type
            ON job_history(job_type)
        """)

        conn.commit()
    finally:
        conn.close()


def _row_to_record(row: sqlite3.Row) -> ExecutionRecord:
    return ExecutionRecord(
        id=row["id"],
        job_type=row["job_type"],
        job_key=row["job_key"],
        status=JobStatus(row["status"]),
        variables=row["variables"],
        result=row["result"],
        error_message=row["error_message"],
        execution_time=datetime.fromisoformat(row["execution_time"]),
        execution_time_ms=row["execution_time_ms"],
    )


def _to_json(value: Optional[Dict[str, Any]]) -> Optional[str]:
    if value is None:
        return None
    return json.dumps(value, default=str)


class JobHistoryLedger:
    """Append-only execution history backed by SQLite.

    Example:
        ledger = JobHistoryLedger(db_path)
        ledger.record_success("search-employee", "42", {"department": "Sales"},
                              {"searchStatus": "SUCCESS"}, 12)
        for record in ledger.recent(10):
            print(record.job_key, record.status)
    """

    def __init__(self, db_path: Path = DEFAULT_DB_PATH, initialize: bool = True):
        self.db_path = db_path
        if initialize:
            init_history_db(db_path)

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    # =========================================================================
    # Writes
    # =========================================================================

    def append(self, record: ExecutionRecord) -> ExecutionRecord:
        """Store a record and return a copy carrying the assigned id."""
        conn = self._connect()
        try:
            cursor = conn.cursor()
            cursor.execute("""
                INSERT INTO job_history
                (job_type, job_key, status, variables, result, error_message,
                 execution_time, execution_time_ms)
                VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """, (
                record.job_type,
                record.job_key,
                record.status.value,
                record.variables,
                record.result,
                record.error_message,
                record.execution_time.isoformat(),
                record.execution_time_ms,
            ))
            conn.commit()
            stored = record.model_copy(update={"id": cursor.lastrowid})
        finally:
            conn.close()

        logger.debug(
            f"Recorded job execution: type={record.job_type}, key={record.job_key}, "
            f"status={record.status.value}"
        )
        return stored

    def record_success(
        self,
        job_type: str,
        job_key: str,
        variables: Optional[Dict[str, Any]],
        result: Optional[Dict[str, Any]],
        execution_time_ms: int,
    ) -> ExecutionRecord:
        """Append a COMPLETED record."""
        return self.append(ExecutionRecord(
            job_type=job_type,
            job_key=job_key,
            status=JobStatus.COMPLETED,
            variables=_to_json(variables),
            result=_to_json(result),
            execution_time_ms=execution_time_ms,
        ))

    def record_failure(
        self,
        job_type: str,
        job_key: str,
        variables: Optional[Dict[str, Any]],
        error_message: str,
        execution_time_ms: int,
    ) -> ExecutionRecord:
        """Append a FAILED record."""
        return self.append(ExecutionRecord(
            job_type=job_type,
            job_key=job_key,
            status=JobStatus.FAILED,
            variables=_to_json(variables),
            error_message=error_message,
            execution_time_ms=execution_time_ms,
        ))

    # =========================================================================
    # Reads
    # =========================================================================

    def recent(self, limit: int = 50) -> List[ExecutionRecord]:
        """Most recent records, newest first."""
        conn = self._connect()
        try:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT * FROM job_history
                ORDER BY execution_time DESC, id DESC
                LIMIT ?
            """, (limit,))
            return [_row_to_record(row) for row in cursor.fetchall()]
        finally:
            conn.close()

    def count_since(self, timestamp: datetime) -> int:
        """Number of records executed after the given time."""
        conn = self._connect()
        try:
            cursor = conn.cursor()
            cursor.execute(
                "SELECT COUNT(*) AS n FROM job_history WHERE execution_time > ?",
                (timestamp.isoformat(),),
            )
            return cursor.fetchone()["n"]
        finally:
            conn.close()

    def count_by_type(self) -> Dict[str, int]:
        """Number of records per job type."""
        conn = self._connect()
        try:
            cursor = conn.cursor()
            cursor.execute("""
                SELECT job_type, COUNT(*) AS n FROM job_history
                GROUP BY job_type
                ORDER BY job_type
            """)
            return {row["job_type"]: row["n"] for row in cursor.fetchall()}
        finally:
            conn.close()

    def total_count(self) -> int:
        """Total number of records."""
        conn = self._connect()
        try:
            cursor = conn.cursor()
            cursor.execute("SELECT COUNT(*) AS n FROM job_history")
            return cursor.fetchone()["n"]
        finally:
            conn.close()

    def count_today(self) -> int:
        """Records executed since local midnight."""
        start_of_day = datetime.now().replace(hour=0, minute=0, second=0, microsecond=0)
        return self.count_since(start_of_day)
