# recurring_tracker/stores/sqlite.py
from __future__ import annotations

import logging
import sqlite3
from pathlib import Path
from typing import List, Optional

from recurring_tracker.core.models import GeneratedTransaction, RecurringTemplate
from recurring_tracker.recurring import epoch_millis
from recurring_tracker.stores.base import TemplateStore

logger = logging.getLogger(__name__)

_TEMPLATE_COLUMNS = (
    "id", "amount", "type", "description", "category", "account",
    "frequency", "original_target_day", "next_execution_date", "start_date",
    "end_date", "max_occurrences", "current_occurrences", "is_active",
    "created_at", "updated_at",
)
_TRANSACTION_COLUMNS = (
    "id", "amount", "type", "description", "category", "account", "date",
    "recurring_frequency", "parent_recurring_id", "max_occurrences",
    "is_recurring", "created_at", "updated_at",
)


def _init_db(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS recurring_templates (
            id TEXT PRIMARY KEY,
            amount REAL NOT NULL,
            type TEXT NOT NULL,
            description TEXT NOT NULL,
            category TEXT NOT NULL,
            account TEXT NOT NULL,
            frequency TEXT NOT NULL,
            original_target_day INTEGER,
            next_execution_date TEXT NOT NULL,
            start_date TEXT,
            end_date TEXT,
            max_occurrences INTEGER,
            current_occurrences INTEGER NOT NULL DEFAULT 0,
            is_active INTEGER NOT NULL DEFAULT 1,
            created_at TEXT,
            updated_at TEXT
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS transactions (
            id TEXT PRIMARY KEY,
            amount REAL NOT NULL,
            type TEXT NOT NULL,
            description TEXT NOT NULL,
            category TEXT NOT NULL,
            account TEXT NOT NULL,
            date TEXT NOT NULL,
            recurring_frequency TEXT NOT NULL,
            parent_recurring_id TEXT NOT NULL,
            max_occurrences INTEGER,
            is_recurring INTEGER NOT NULL DEFAULT 1,
            created_at TEXT,
            updated_at TEXT
        )
        """
    )
    conn.commit()


def _template_row(template: RecurringTemplate) -> tuple:
    data = template.to_dict()
    data["is_active"] = int(template.is_active)
    return tuple(data[c] for c in _TEMPLATE_COLUMNS)


def _transaction_row(tx: GeneratedTransaction) -> tuple:
    data = tx.to_dict()
    data["is_recurring"] = int(tx.is_recurring)
    return tuple(data[c] for c in _TRANSACTION_COLUMNS)


def _placeholders(columns) -> str:
    return ", ".join("?" for _ in columns)


class SQLiteStore(TemplateStore):
    """
    Stores templates and generated transactions in a SQLite file.
    The path comes from ``config['db_path']``.
    """

    def __init__(self, config):
        self.db_path = Path(config.get('db_path', 'recurbook.db'))
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = self._connect()
        try:
            _init_db(conn)
        finally:
            conn.close()

    def _connect(self) -> sqlite3.Connection:
        conn = sqlite3.connect(self.db_path)
        conn.row_factory = sqlite3.Row
        return conn

    def list_templates(self) -> List[RecurringTemplate]:
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT * FROM recurring_templates"
            ).fetchall()
            templates = [RecurringTemplate.from_dict(dict(r)) for r in rows]
            return sorted(
                templates, key=lambda t: (epoch_millis(t.next_execution_date), t.id)
            )
        finally:
            conn.close()

    def get_template(self, template_id: str) -> Optional[RecurringTemplate]:
        conn = self._connect()
        try:
            row = conn.execute(
                "SELECT * FROM recurring_templates WHERE id = ?", (template_id,)
            ).fetchone()
            return RecurringTemplate.from_dict(dict(row)) if row else None
        finally:
            conn.close()

    def add_template(self, template: RecurringTemplate) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    f"INSERT INTO recurring_templates ({', '.join(_TEMPLATE_COLUMNS)}) "
                    f"VALUES ({_placeholders(_TEMPLATE_COLUMNS)})",
                    _template_row(template),
                )
        except sqlite3.IntegrityError:
            raise ValueError(f"Template '{template.id}' already exists.") from None
        finally:
            conn.close()

    def _update(self, conn: sqlite3.Connection, template: RecurringTemplate) -> None:
        assignments = ", ".join(f"{c} = ?" for c in _TEMPLATE_COLUMNS[1:])
        row = _template_row(template)
        cur = conn.execute(
            f"UPDATE recurring_templates SET {assignments} WHERE id = ?",
            row[1:] + row[:1],
        )
        if cur.rowcount == 0:
            raise KeyError(template.id)

    def update_template(self, template: RecurringTemplate) -> None:
        conn = self._connect()
        try:
            with conn:
                self._update(conn, template)
        finally:
            conn.close()

    def delete_template(self, template_id: str) -> None:
        conn = self._connect()
        try:
            with conn:
                conn.execute(
                    "DELETE FROM recurring_templates WHERE id = ?", (template_id,)
                )
        finally:
            conn.close()

    def record_occurrence(
        self, transaction: GeneratedTransaction, template: RecurringTemplate
    ) -> None:
        conn = self._connect()
        try:
            with conn:
                cur = conn.execute(
                    f"INSERT OR IGNORE INTO transactions ({', '.join(_TRANSACTION_COLUMNS)}) "
                    f"VALUES ({_placeholders(_TRANSACTION_COLUMNS)})",
                    _transaction_row(transaction),
                )
                if cur.rowcount == 0:
                    logger.info("Transaction %s already recorded", transaction.id)
                self._update(conn, template)
        finally:
            conn.close()

    def list_transactions(self) -> List[GeneratedTransaction]:
        conn = self._connect()
        try:
            rows = conn.execute(
                "SELECT * FROM transactions"
            ).fetchall()
            txs = [GeneratedTransaction.from_dict(dict(r)) for r in rows]
            return sorted(txs, key=lambda tx: (epoch_millis(tx.date), tx.id))
        finally:
            conn.close()
