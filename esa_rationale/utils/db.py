import os
import sqlite3

import aiosqlite

from esa_rationale.config.logger import get_logger
from esa_rationale.errors import PersistenceError
from esa_rationale.pipeline.state import ExtraIdentity, PatientInputs, RuleOutput

logger = get_logger(__name__)

MAX_HISTORY_ROWS = 50

_CREATE_HISTORY = """
    CREATE TABLE IF NOT EXISTS history (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        timestamp TEXT NOT NULL DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now')),
        patient_name TEXT,
        age INTEGER,
        sex TEXT,
        hemoglobin REAL,
        weight REAL,
        esa_agent TEXT,
        current_dose REAL,
        recommended_dose TEXT,
        note TEXT,
        ai_explanation TEXT
    )
"""

_INSERT_HISTORY = """
    INSERT INTO history (
        patient_name, age, sex, hemoglobin, weight, esa_agent,
        current_dose, recommended_dose, note, ai_explanation
    ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""


class AuditStore:
    """Append-only audit trail of generated rationales.

    Each operation opens its own connection, so no handle is shared across
    requests. Rows are inserted once and never updated or deleted here.
    """

    def __init__(self, db_path: str):
        self.db_path = db_path

    async def init(self) -> None:
        directory = os.path.dirname(self.db_path)
        try:
            if directory:
                os.makedirs(directory, exist_ok=True)
            async with aiosqlite.connect(self.db_path) as db:
                await db.execute(_CREATE_HISTORY)
                await db.commit()
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(f"Failed to initialise audit store: {exc}") from exc

    async def record(
        self,
        inputs: PatientInputs,
        rule_output: RuleOutput,
        extra: ExtraIdentity | None,
        explanation: str,
    ) -> int:
        extra = extra or ExtraIdentity()
        row = (
            extra.patient_name or "Anonymous",
            extra.age or None,
            extra.sex or "N/A",
            inputs.hemoglobin,
            inputs.weight,
            inputs.esa_agent,
            inputs.current_dose or 0,
            rule_output.dose_text(),
            rule_output.note,
            explanation,
        )
        try:
            async with aiosqlite.connect(self.db_path) as db:
                cursor = await db.execute(_INSERT_HISTORY, row)
                await db.commit()
                return cursor.lastrowid
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(f"Failed to write audit record: {exc}") from exc

    async def history(self, limit: int = MAX_HISTORY_ROWS) -> list[dict]:
        limit = max(0, min(limit, MAX_HISTORY_ROWS))
        try:
            async with aiosqlite.connect(self.db_path) as db:
                db.row_factory = aiosqlite.Row
                cursor = await db.execute(
                    "SELECT * FROM history ORDER BY timestamp DESC, id DESC LIMIT ?",
                    (limit,),
                )
                return [dict(r) for r in await cursor.fetchall()]
        except (sqlite3.Error, OSError) as exc:
            raise PersistenceError(f"Failed to read audit history: {exc}") from exc
