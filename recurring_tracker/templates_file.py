# recurring_tracker/templates_file.py
from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

import yaml

from recurring_tracker.core.models import RecurringTemplate
from recurring_tracker.recurring import create_template


def _parse_datetime(value, field_name, entry):
    if value is None:
        return None
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value)
        except ValueError:
            pass
    raise ValueError(f"Unrecognized {field_name} in recurring entry: {entry}")


def _build_template(entry, now) -> RecurringTemplate:
    frequency = entry.get("frequency")
    if frequency is None:
        raise ValueError(f"Missing 'frequency' in recurring entry: {entry}")

    start_date = _parse_datetime(entry.get("start_date"), "start_date", entry)
    if start_date is None:
        raise ValueError(f"Missing 'start_date' in recurring entry: {entry}")

    return create_template(
        amount=float(entry.get("amount", 0.0)),
        type=entry.get("type", "expense"),
        category=entry.get("category", ""),
        account=entry.get("account", ""),
        frequency=frequency,
        description=entry.get("description", ""),
        start_date=start_date,
        end_date=_parse_datetime(entry.get("end_date"), "end_date", entry),
        max_occurrences=entry.get("max_occurrences"),
        original_target_day=entry.get("target_day"),
        include_start=bool(entry.get("include_start", False)),
        template_id=entry.get("id"),
        now=now,
    )


def load_templates(path, now: Optional[datetime] = None) -> List[RecurringTemplate]:
    """Load recurring templates from a YAML file."""
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f) or []
    return [_build_template(entry, now) for entry in data]
