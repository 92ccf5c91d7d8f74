"""
CSV Export Module
Writes stored transactions ({id, amount, description, category, date, type})
to a CSV file. Every text column is quoted; the amount stays bare.
"""

import csv
import io
import logging
from datetime import date
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

CSV_HEADER = ["ID", "Amount", "Description", "Category", "Date", "Type"]


def export_filename(today: Optional[date] = None) -> str:
    """Default export file name, e.g. finance-export-2025-01-31.csv."""
    return f"finance-export-{(today or date.today()).isoformat()}.csv"


def _amount_value(amount: float) -> Union[int, float]:
    # 5000.0 -> 5000, 120.5 -> 120.5
    amount = float(amount)
    return int(amount) if amount.is_integer() else amount


def transactions_to_csv(transactions: list[dict]) -> str:
    """Render transactions as CSV text, header first."""
    buf = io.StringIO()
    csv.writer(buf, lineterminator="\n").writerow(CSV_HEADER)

    w = csv.writer(buf, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    for txn in transactions:
        w.writerow([
            str(txn.get("id", "")),
            _amount_value(txn["amount"]),
            txn["description"],
            txn["category"],
            txn["date"],
            txn["type"],
        ])
    return buf.getvalue()


def export_to_csv(transactions: list[dict], output_path: Union[str, Path]) -> Path:
    """
    Write transactions to a CSV file.

    Args:
        transactions: Stored transactions (with ids)
        output_path: File or directory; a directory gets the default file name

    Returns:
        Path of the written file
    """
    path = Path(output_path)
    if path.is_dir():
        path = path / export_filename()

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(transactions_to_csv(transactions), encoding="utf-8", newline="")

    logger.info(f"Exported {len(transactions)} transactions to {path}")
    return path
