from __future__ import annotations

import math
from typing import Dict, Optional, Sequence, Tuple

from core.records import CellValue, RawRow

# Canonical field -> column spellings seen in the maintenance workbooks, tried in order.
# No implicit case/accent folding: every accepted variant is listed here.
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "equipment": ("équipement", "Équipement", "Equipement", "EQUIPEMENT", "ÉQUIPEMENT", "equipement"),
    "brand": ("marque", "Marque", "MARQUE"),
    "inventory_id": ("inventaire", "Inventaire", "INVENTAIRE"),
    "serial_number": ("n° série", "N° série", "N° Série", "N° SÉRIE", "N° SERIE", "serie", "série", "Série"),
    "facility": ("établissement", "Établissement", "Etablissement", "ETABLISSEMENT", "ÉTABLISSEMENT"),
    "fault": ("panne", "Panne", "PANNE"),
    "technician": ("technicien", "Technicien", "TECHNICIEN"),
    "date": ("date", "Date", "DATE"),
}


def cell_to_text(value: Optional[CellValue]) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        if value.is_integer():
            return str(int(value))
    return str(value)


def resolve_field(row: RawRow, aliases: Sequence[str]) -> str:
    """Return the first non-empty value found under `aliases`, or ""."""
    for alias in aliases:
        if alias not in row:
            continue
        text = cell_to_text(row[alias])
        if text != "":
            return text
    return ""
