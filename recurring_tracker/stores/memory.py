# recurring_tracker/stores/memory.py
from recurring_tracker.recurring import epoch_millis
from recurring_tracker.stores.base import TemplateStore


class MemoryStore(TemplateStore):
    """Keeps everything in process memory, in insertion order."""

    def __init__(self, config=None):
        self.config = config or {}
        self._templates = {}
        self._transactions = {}

    def list_templates(self):
        return list(self._templates.values())

    def get_template(self, template_id):
        return self._templates.get(template_id)

    def add_template(self, template):
        if template.id in self._templates:
            raise ValueError(f"Template '{template.id}' already exists.")
        self._templates[template.id] = template

    def update_template(self, template):
        if template.id not in self._templates:
            raise KeyError(template.id)
        self._templates[template.id] = template

    def delete_template(self, template_id):
        self._templates.pop(template_id, None)

    def record_occurrence(self, transaction, template):
        if template.id not in self._templates:
            raise KeyError(template.id)
        self._transactions.setdefault(transaction.id, transaction)
        self._templates[template.id] = template

    def list_transactions(self):
        return sorted(self._transactions.values(), key=lambda tx: epoch_millis(tx.date))
