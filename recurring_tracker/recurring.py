# recurring_tracker/recurring.py
from __future__ import annotations

import logging
import uuid
from calendar import monthrange
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Iterable, Iterator, List, Optional, Tuple

from recurring_tracker.clock import resolve_now
from recurring_tracker.core.models import (
    Frequency,
    GeneratedTransaction,
    RecurringTemplate,
    TransactionType,
)

logger = logging.getLogger(__name__)

_EPOCH = datetime(1970, 1, 1)
_EPOCH_UTC = datetime(1970, 1, 1, tzinfo=timezone.utc)

FREQUENCY_LABELS = {
    "en": {
        Frequency.DAILY: "Daily",
        Frequency.WEEKLY: "Weekly",
        Frequency.MONTHLY: "Monthly",
        Frequency.YEARLY: "Yearly",
    },
    "zh-TW": {
        Frequency.DAILY: "每日",
        Frequency.WEEKLY: "每週",
        Frequency.MONTHLY: "每月",
        Frequency.YEARLY: "每年",
    },
}
UNKNOWN_LABELS = {"en": "Unknown", "zh-TW": "未知"}
DEFAULT_LOCALE = "en"


def _coerce_frequency(value) -> Frequency:
    if isinstance(value, Frequency):
        return value
    try:
        return Frequency(value)
    except ValueError:
        raise ValueError(f"Unsupported frequency '{value}'.") from None


def _check_target_day(original_target_day: Optional[int]) -> None:
    if original_target_day is None:
        return
    if (
        isinstance(original_target_day, bool)
        or not isinstance(original_target_day, int)
        or not 0 <= original_target_day <= 31
    ):
        raise ValueError(
            f"original_target_day must be between 1 and 31, got {original_target_day!r}."
        )


def _same_awareness(moment: datetime, reference: datetime) -> datetime:
    """Read *moment* as wall-clock time in *reference*'s zone when only one is aware."""
    if reference.tzinfo is not None and moment.tzinfo is None:
        return moment.replace(tzinfo=reference.tzinfo)
    if reference.tzinfo is None and moment.tzinfo is not None:
        return moment.replace(tzinfo=None)
    return moment


def _shift_months(
    current: datetime, months: int, target_day: Optional[int] = None
) -> datetime:
    month_index = current.month - 1 + months
    year = current.year + month_index // 12
    month = month_index % 12 + 1
    wanted = target_day or current.day
    last_day = monthrange(year, month)[1]
    day = min(wanted, last_day)
    if day != wanted:
        logger.debug(
            "Clamped day %d to %d for %04d-%02d", wanted, day, year, month
        )
    return current.replace(year=year, month=month, day=day)


def advance(
    current: datetime,
    frequency: Frequency,
    original_target_day: Optional[int] = None,
) -> datetime:
    """Return the occurrence that follows *current*.

    Monthly and yearly steps aim for *original_target_day* (or the current
    day of month when it is missing) and clamp it down to the last day of a
    shorter month. Time of day and tzinfo are preserved.
    """
    frequency = _coerce_frequency(frequency)
    _check_target_day(original_target_day)

    if frequency is Frequency.DAILY:
        return current + timedelta(days=1)
    if frequency is Frequency.WEEKLY:
        return current + timedelta(weeks=1)
    if frequency is Frequency.MONTHLY:
        return _shift_months(current, 1, original_target_day)
    if frequency is Frequency.YEARLY:
        return _shift_months(current, 12, original_target_day)
    raise ValueError(f"Unsupported frequency '{frequency}'.")


def epoch_millis(moment: datetime) -> int:
    """Milliseconds since the Unix epoch; naive values are read as UTC."""
    epoch = _EPOCH if moment.tzinfo is None else _EPOCH_UTC
    return (moment - epoch) // timedelta(milliseconds=1)


def occurrence_id(template_id: str, occurrence: datetime) -> str:
    return f"{template_id}_{epoch_millis(occurrence)}"


def materialize(
    template: RecurringTemplate,
    occurrence: datetime,
    now: Optional[datetime] = None,
) -> GeneratedTransaction:
    stamp = resolve_now(now)
    return GeneratedTransaction(
        id=occurrence_id(template.id, occurrence),
        amount=template.amount,
        type=template.type,
        description=template.description,
        category=template.category,
        account=template.account,
        date=occurrence,
        recurring_frequency=template.frequency,
        parent_recurring_id=template.id,
        max_occurrences=template.max_occurrences,
        is_recurring=True,
        created_at=stamp,
        updated_at=stamp,
    )


def is_due(template: RecurringTemplate, now: Optional[datetime] = None) -> bool:
    """Whether the template's next occurrence has arrived as of *now*.

    Only calendar dates are compared. A template past its end date is never
    due, however overdue it is.
    """
    if not template.is_active:
        return False
    today = resolve_now(now).date()
    if today < template.next_execution_date.date():
        return False
    if template.end_date is not None:
        return today <= template.end_date.date()
    return True


def advance_template(
    template: RecurringTemplate, now: Optional[datetime] = None
) -> RecurringTemplate:
    next_date = advance(
        template.next_execution_date,
        template.frequency,
        template.original_target_day,
    )
    return replace(
        template, next_execution_date=next_date, updated_at=resolve_now(now)
    )


def iter_future(
    template: RecurringTemplate,
    horizon_months: int = 12,
    now: Optional[datetime] = None,
) -> Iterator[GeneratedTransaction]:
    stamp = resolve_now(now)
    horizon = _shift_months(
        _same_awareness(stamp, template.next_execution_date), horizon_months
    )
    end_day = template.end_date.date() if template.end_date is not None else None

    current = template.next_execution_date
    while current <= horizon:
        if end_day is not None and current.date() > end_day:
            break
        yield materialize(template, current, now=stamp)
        current = advance(current, template.frequency, template.original_target_day)


def generate_future(
    template: RecurringTemplate,
    horizon_months: int = 12,
    now: Optional[datetime] = None,
) -> Tuple[GeneratedTransaction, ...]:
    """Preview upcoming occurrences without touching the template.

    Stops at ``now + horizon_months`` or the end date, whichever comes
    first. ``max_occurrences`` is not a stop condition here.
    """
    return tuple(iter_future(template, horizon_months, now))


def frequency_display_name(frequency, locale: str = DEFAULT_LOCALE) -> str:
    labels = FREQUENCY_LABELS.get(locale, FREQUENCY_LABELS[DEFAULT_LOCALE])
    unknown = UNKNOWN_LABELS.get(locale, UNKNOWN_LABELS[DEFAULT_LOCALE])
    try:
        return labels[Frequency(frequency)]
    except ValueError:
        return unknown


def create_template(
    amount: float,
    type: TransactionType,
    category: str,
    account: str,
    frequency: Frequency,
    description: str = "",
    start_date: Optional[datetime] = None,
    end_date: Optional[datetime] = None,
    max_occurrences: Optional[int] = None,
    original_target_day: Optional[int] = None,
    include_start: bool = False,
    template_id: Optional[str] = None,
    now: Optional[datetime] = None,
) -> RecurringTemplate:
    """Build a new active template.

    By default the start date counts as the first occurrence, recorded by
    the caller, so the template is due next one period later. Pass
    ``include_start=True`` to make the start date itself the first due
    occurrence.
    """
    frequency = _coerce_frequency(frequency)
    stamp = resolve_now(now)
    start = start_date or stamp
    target_day = original_target_day or start.day
    _check_target_day(target_day)
    if max_occurrences is not None:
        max_occurrences = int(max_occurrences)
        if max_occurrences <= 0:
            raise ValueError("max_occurrences must be greater than 0.")

    next_date = start if include_start else advance(start, frequency, target_day)
    return RecurringTemplate(
        id=template_id or f"recurring_{uuid.uuid4().hex}",
        amount=float(amount),
        type=TransactionType(type),
        description=description or "",
        category=category,
        account=account,
        frequency=frequency,
        original_target_day=target_day,
        next_execution_date=next_date,
        start_date=start,
        end_date=end_date,
        max_occurrences=max_occurrences,
        current_occurrences=0,
        is_active=True,
        created_at=stamp,
        updated_at=stamp,
    )


def upcoming(
    templates: Iterable[RecurringTemplate],
    now: Optional[datetime] = None,
    days: int = 7,
) -> List[RecurringTemplate]:
    """Active templates whose next occurrence falls within *days* of now."""
    start = resolve_now(now)
    found = []
    for t in templates:
        if not t.is_active:
            continue
        since = _same_awareness(start, t.next_execution_date)
        if since <= t.next_execution_date <= since + timedelta(days=days):
            found.append(t)
    return sorted(found, key=lambda t: epoch_millis(t.next_execution_date))
