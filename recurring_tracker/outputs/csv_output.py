# recurring_tracker/outputs/csv_output.py

import os
import csv
from decimal import Decimal
from recurring_tracker.outputs.base import BaseOutput
from recurring_tracker.recurring import epoch_millis
from recurring_tracker.utils import dedupe_transactions


class CSVOutput(BaseOutput):
    """
    Writes transactions to <output_dir>/<filename>, de-duplicated by id and
    sorted by occurrence date (oldest to latest).
    """
    HEADER = ['id', 'date', 'description', 'category', 'account', 'type',
              'amount', 'frequency']

    def __init__(self, config):
        self.config     = config
        self.output_dir = config.get('output_dir', 'data')
        self.filename   = config.get('csv_filename', 'recurring_preview.csv')
        os.makedirs(self.output_dir, exist_ok=True)

    def write(self, transactions):
        if not transactions:
            print("No transactions to write.")
            return None

        rows = sorted(
            dedupe_transactions(transactions), key=lambda tx: epoch_millis(tx.date)
        )
        out_path = os.path.join(self.output_dir, self.filename)

        with open(out_path, 'w', newline='', encoding='utf-8') as f:
            writer = csv.writer(f)
            writer.writerow(self.HEADER)
            for tx in rows:
                writer.writerow([
                    tx.id,
                    tx.date.isoformat(),
                    tx.description.strip(),
                    tx.category,
                    tx.account,
                    tx.type.value,
                    f"{Decimal(str(tx.amount)):.2f}",
                    tx.recurring_frequency.value,
                ])

        print(f"Written {len(rows)} transactions to {out_path}")
        return out_path
