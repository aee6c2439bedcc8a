from __future__ import annotations

from datetime import date
from typing import Iterable, Optional

from core.records import DISPLAY_COLUMNS, MaintenanceRecord


def to_csv(records: Iterable[MaintenanceRecord]) -> str:
    """Header line plus one line per record, every value wrapped in quotes.

    Values are not escaped: embedded quotes, commas or newlines end up
    verbatim in the output.
    """
    lines = [",".join(DISPLAY_COLUMNS.values())]
    for record in records:
        values = record.display_values()
        lines.append(",".join(f'"{values[key]}"' for key in DISPLAY_COLUMNS))
    return "\n".join(lines)


def export_filename(sheet_name: str, day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"maintenance_{sheet_name}_{day.isoformat()}.csv"
