# recurring_tracker/scheduler.py
from __future__ import annotations

import logging
from dataclasses import replace
from datetime import datetime
from typing import List, Optional

from recurring_tracker.clock import resolve_now
from recurring_tracker.core.models import GeneratedTransaction
from recurring_tracker.recurring import advance_template, is_due, materialize
from recurring_tracker.stores.base import TemplateStore

logger = logging.getLogger(__name__)


def process_due(
    store: TemplateStore,
    now: Optional[datetime] = None,
    enforce_max_occurrences: bool = False,
) -> List[GeneratedTransaction]:
    """Fire every due template once and persist the results.

    Each due template yields at most one transaction per call; an overdue
    template catches up one step at a time on later calls. When
    *enforce_max_occurrences* is set, a template that already reached its
    cap is deactivated instead of firing.
    """
    stamp = resolve_now(now)
    generated = []
    for template in store.list_templates():
        if not is_due(template, stamp):
            continue

        if (
            enforce_max_occurrences
            and template.max_occurrences
            and template.current_occurrences >= template.max_occurrences
        ):
            logger.info(
                "Template %s reached %d occurrence(s); deactivating",
                template.id, template.max_occurrences,
            )
            store.update_template(replace(template, is_active=False, updated_at=stamp))
            continue

        tx = materialize(template, template.next_execution_date, now=stamp)
        advanced = replace(
            advance_template(template, now=stamp),
            current_occurrences=template.current_occurrences + 1,
        )
        store.record_occurrence(tx, advanced)
        logger.info(
            "Generated %s for template %s; next due %s",
            tx.id, template.id, advanced.next_execution_date.isoformat(),
        )
        generated.append(tx)
    return generated


def set_active(
    store: TemplateStore,
    template_id: str,
    active: bool,
    now: Optional[datetime] = None,
):
    template = store.get_template(template_id)
    if template is None:
        raise KeyError(template_id)
    updated = replace(template, is_active=active, updated_at=resolve_now(now))
    store.update_template(updated)
    return updated
