# recurring_tracker/core/models.py
from __future__ import annotations

from dataclasses import asdict, dataclass
from datetime import datetime
from enum import Enum
from typing import Optional


class Frequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


def _iso(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value is not None else None


def _from_iso(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


@dataclass(frozen=True)
class RecurringTemplate:
    """A user's intent to repeat a transaction on a schedule.

    ``original_target_day`` is the day of month captured when the template
    was created. Monthly advances always start from it, never from a date
    that was clamped to a short month.

    ``amount`` is a float, as stored in SQLite; generated transactions copy
    it unchanged.
    """

    id: str
    amount: float
    type: TransactionType
    description: str
    category: str
    account: str
    frequency: Frequency
    original_target_day: Optional[int]
    next_execution_date: datetime
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    max_occurrences: Optional[int] = None
    current_occurrences: int = 0
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["type"] = self.type.value
        data["frequency"] = self.frequency.value
        for key in ("next_execution_date", "start_date", "end_date",
                    "created_at", "updated_at"):
            data[key] = _iso(data[key])
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "RecurringTemplate":
        return cls(
            id=data["id"],
            amount=float(data["amount"]),
            type=TransactionType(data["type"]),
            description=data.get("description") or "",
            category=data.get("category") or "",
            account=data.get("account") or "",
            frequency=Frequency(data["frequency"]),
            original_target_day=data.get("original_target_day"),
            next_execution_date=_from_iso(data["next_execution_date"]),
            start_date=_from_iso(data.get("start_date")),
            end_date=_from_iso(data.get("end_date")),
            max_occurrences=data.get("max_occurrences"),
            current_occurrences=int(data.get("current_occurrences") or 0),
            is_active=bool(data.get("is_active", True)),
            created_at=_from_iso(data.get("created_at")),
            updated_at=_from_iso(data.get("updated_at")),
        )


@dataclass(frozen=True)
class GeneratedTransaction:
    id: str
    amount: float
    type: TransactionType
    description: str
    category: str
    account: str
    date: datetime
    recurring_frequency: Frequency
    parent_recurring_id: str
    max_occurrences: Optional[int] = None
    is_recurring: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        data = asdict(self)
        data["type"] = self.type.value
        data["recurring_frequency"] = self.recurring_frequency.value
        for key in ("date", "created_at", "updated_at"):
            data[key] = _iso(data[key])
        return data

    @classmethod
    def from_dict(cls, data: dict) -> "GeneratedTransaction":
        return cls(
            id=data["id"],
            amount=float(data["amount"]),
            type=TransactionType(data["type"]),
            description=data.get("description") or "",
            category=data.get("category") or "",
            account=data.get("account") or "",
            date=_from_iso(data["date"]),
            recurring_frequency=Frequency(data["recurring_frequency"]),
            parent_recurring_id=data["parent_recurring_id"],
            max_occurrences=data.get("max_occurrences"),
            is_recurring=bool(data.get("is_recurring", True)),
            created_at=_from_iso(data.get("created_at")),
            updated_at=_from_iso(data.get("updated_at")),
        )
