# recurring_tracker/stores/base.py
from abc import ABC, abstractmethod


class TemplateStore(ABC):
    """Persistence for templates and the transactions generated from them."""

    @abstractmethod
    def list_templates(self):
        pass

    @abstractmethod
    def get_template(self, template_id):
        """Return the template with *template_id*, or None."""
        pass

    @abstractmethod
    def add_template(self, template):
        pass

    @abstractmethod
    def update_template(self, template):
        """Replace a stored template. Raises KeyError when it is unknown."""
        pass

    @abstractmethod
    def delete_template(self, template_id):
        pass

    @abstractmethod
    def record_occurrence(self, transaction, template):
        """
        Save a generated transaction together with the advanced template.
        Both writes land or neither does. A transaction whose id is already
        stored is ignored, so retrying after a crash cannot duplicate it.
        """
        pass

    @abstractmethod
    def list_transactions(self):
        pass
