# recurring_tracker/outputs/console_output.py
import click

from recurring_tracker.outputs.base import BaseOutput
from recurring_tracker.recurring import epoch_millis, frequency_display_name


class ConsoleOutput(BaseOutput):
    """Echo one line per transaction, oldest first."""

    def __init__(self, config):
        self.locale = config.get('locale', 'en')

    def write(self, transactions):
        if not transactions:
            click.echo("No upcoming occurrences.")
            return None
        for tx in sorted(transactions, key=lambda t: epoch_millis(t.date)):
            label = frequency_display_name(tx.recurring_frequency, self.locale)
            click.echo(
                f"{tx.date.date().isoformat()}  {tx.type.value:<7} "
                f"{tx.amount:>10.2f}  {label:<8} {tx.description}"
            )
        return None
