"""Service for exporting filtered examiner records as delimited text."""

import csv
from typing import Any

import pandas as pd

from app.services.examiner_columns import EXAMINER_COLUMNS


def _cell(value: Any) -> str:
    if value is None or value is False:
        return ""
    return str(value)


def export_csv(records: list[dict[str, Any]], columns: list[str] | None = None) -> str:
    """
    Render records as CSV with every value quoted and embedded quotes doubled.

    Args:
        records: Records in output order
        columns: Column labels to include, kept in sheet order; all columns when None

    Raises:
        ValueError: If columns is given but names no known column
    """
    selected = [(label, field) for label, field in EXAMINER_COLUMNS if columns is None or label in columns]
    if not selected:
        raise ValueError("No known columns selected for export")

    df = pd.DataFrame(
        [[_cell(record.get(field)) for _, field in selected] for record in records],
        columns=[label for label, _ in selected],
    )
    return df.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")
