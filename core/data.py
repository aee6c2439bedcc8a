from __future__ import annotations

import io
import logging
import math
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Tuple

import pandas as pd

from core.classify import classify_facility_type, classify_status
from core.errors import WorkbookError
from core.fields import FIELD_ALIASES, resolve_field
from core.records import DISPLAY_COLUMNS, CellValue, MaintenanceRecord, RawRow

logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1] / "data"
# The historical deployment shipped the misspelt name; both are accepted.
DEFAULT_WORKBOOK_NAMES = ("gestion-maintenance.xlsx", "gestion-maintenace.xlsx")

Workbook = Dict[str, List[RawRow]]


def normalize_cell(value: object) -> CellValue:
    """Collapse a parsed cell into str/int/float; empty cells become ""."""
    if value is None:
        return ""
    if isinstance(value, (pd.Timestamp, datetime)):
        ts = pd.Timestamp(value)
        if pd.isna(ts):
            return ""
        if ts.hour == 0 and ts.minute == 0 and ts.second == 0:
            return ts.strftime("%Y-%m-%d")
        return ts.isoformat()
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isnan(value):
            return ""
        return int(value) if value.is_integer() else value
    try:
        if pd.isna(value):
            return ""
    except (TypeError, ValueError):
        pass
    if hasattr(value, "item"):
        # numpy scalars
        return normalize_cell(value.item())
    return str(value)


def sheet_rows(frame: pd.DataFrame) -> List[RawRow]:
    columns = [str(c) for c in frame.columns]
    rows: List[RawRow] = []
    for values in frame.itertuples(index=False, name=None):
        rows.append({col: normalize_cell(v) for col, v in zip(columns, values)})
    return rows


def read_workbook(content: bytes) -> Workbook:
    """Parse workbook bytes into ordered sheets of raw rows."""
    if not content:
        raise WorkbookError("Erreur lors de la lecture du fichier Excel: fichier vide")
    try:
        frames = pd.read_excel(io.BytesIO(content), sheet_name=None, dtype=object, keep_default_na=False)
    except Exception as exc:
        raise WorkbookError(f"Erreur lors de la lecture du fichier Excel: {exc}") from exc
    workbook: Workbook = {}
    for name, frame in frames.items():
        workbook[str(name)] = sheet_rows(frame)
    logger.info("Parsed workbook with sheets %s", list(workbook))
    return workbook


def find_default_workbook(data_dir: Optional[Path] = None) -> Optional[Path]:
    base = data_dir or DATA_DIR
    for name in DEFAULT_WORKBOOK_NAMES:
        path = base / name
        if path.is_file():
            return path
    return None


def load_default_workbook(data_dir: Optional[Path] = None) -> Optional[Tuple[str, bytes]]:
    """Return (file name, bytes) of the default workbook, or None when absent."""
    path = find_default_workbook(data_dir)
    if path is None:
        logger.info("No default workbook in %s; load a file manually", data_dir or DATA_DIR)
        return None
    return path.name, path.read_bytes()


def normalize_row(row: RawRow) -> Optional[MaintenanceRecord]:
    equipment = resolve_field(row, FIELD_ALIASES["equipment"])
    if not equipment.strip():
        return None
    facility = resolve_field(row, FIELD_ALIASES["facility"])
    return MaintenanceRecord(
        equipment=equipment,
        brand=resolve_field(row, FIELD_ALIASES["brand"]),
        inventory_id=resolve_field(row, FIELD_ALIASES["inventory_id"]),
        serial_number=resolve_field(row, FIELD_ALIASES["serial_number"]),
        facility=facility,
        facility_type=classify_facility_type(facility),
        fault=resolve_field(row, FIELD_ALIASES["fault"]),
        technician=resolve_field(row, FIELD_ALIASES["technician"]),
        # Status columns are read from the raw row; they have no canonical field.
        status=classify_status(row),
        date=resolve_field(row, FIELD_ALIASES["date"]),
    )


def normalize_rows(rows: Iterable[RawRow]) -> List[MaintenanceRecord]:
    records: List[MaintenanceRecord] = []
    skipped = 0
    for row in rows:
        record = normalize_row(row)
        if record is None:
            skipped += 1
            continue
        records.append(record)
    if skipped:
        logger.debug("Skipped %d rows without equipment", skipped)
    return records


def _parse_dates(values: pd.Series) -> pd.Series:
    iso = pd.to_datetime(values, errors="coerce", format="ISO8601")
    other = pd.to_datetime(values.where(iso.isna()), errors="coerce", dayfirst=True, format="mixed")
    return iso.fillna(other)


def sort_by_date(records: List[MaintenanceRecord]) -> List[MaintenanceRecord]:
    """Most recent first; empty or unparseable dates go last, in input order."""
    if not records:
        return []
    dates = _parse_dates(pd.Series([r.date for r in records], dtype=object))
    order = (
        pd.DataFrame({"pos": range(len(records)), "date": dates})
        .sort_values(["date", "pos"], ascending=[False, True], na_position="last", kind="mergesort")
        ["pos"]
        .tolist()
    )
    return [records[i] for i in order]


def records_to_frame(records: List[MaintenanceRecord], *, labels: bool = True, sort: bool = True) -> pd.DataFrame:
    """Table view: ten display columns, French headers and status labels."""
    ordered = sort_by_date(records) if sort else list(records)
    rows = []
    for r in ordered:
        values = r.display_values()
        if labels:
            values["status"] = r.status.label
        rows.append(values)
    df = pd.DataFrame(rows, columns=list(DISPLAY_COLUMNS))
    return df.rename(columns=DISPLAY_COLUMNS)
