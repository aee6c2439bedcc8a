"""Facility-type and repair-status inference for raw maintenance rows."""

from __future__ import annotations

from typing import List, Optional, Tuple

from core.fields import cell_to_text
from core.records import FacilityType, RawRow, Status

# First match wins; "EP" is a plain substring test, so it is checked before CEM.
FACILITY_TYPE_KEYWORDS: List[Tuple[FacilityType, Tuple[str, ...]]] = [
    (FacilityType.EP, ("EP", "PRIMAIRE")),
    (FacilityType.CEM, ("CEM",)),
    (FacilityType.LYCEE, ("LYCEE", "LYCÉE")),
    (FacilityType.DIRECTION, ("DIRECTION",)),
]

# Boolean-like status columns (cell value 1 marks the state).
STATUS_FLAG_COLUMNS: List[Tuple[Status, Tuple[str, ...]]] = [
    (Status.RECEIVED, ("rec", "REC", "Reçu")),
    (Status.REPAIRED, ("re", "RE", "Réparé")),
    (Status.UNREPAIRED, ("nr", "NR", "Non réparé")),
]

# Free-text columns searched when no flag column is set.
STATUS_TEXT_COLUMNS: Tuple[str, ...] = (
    "statut", "Statut", "STATUT",
    "état", "État", "etat", "Etat", "ETAT",
    "observation", "Observation", "OBSERVATION",
    "remarque", "Remarque", "REMARQUE",
)

STATUS_KEYWORDS: List[Tuple[Status, Tuple[str, ...]]] = [
    (Status.RECEIVED, ("reçu", "recu")),
    (Status.REPAIRED, ("réparé", "reparé", "repar")),
    (Status.UNREPAIRED, ("non réparé", "non reparé", "nr")),
]

DEFAULT_STATUS = Status.RECEIVED


def classify_facility_type(facility_name: str) -> FacilityType:
    name = (facility_name or "").upper()
    for facility_type, keywords in FACILITY_TYPE_KEYWORDS:
        if any(k in name for k in keywords):
            return facility_type
    return FacilityType.OTHER


def _flag_is_set(value: object) -> bool:
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, float)) and value == 1


def status_from_flags(row: RawRow) -> Optional[Status]:
    for status, columns in STATUS_FLAG_COLUMNS:
        if any(_flag_is_set(row.get(c)) for c in columns):
            return status
    return None


def status_text(row: RawRow) -> str:
    parts = [cell_to_text(row[c]) for c in STATUS_TEXT_COLUMNS if c in row]
    return " ".join(p for p in parts if p).lower()


def status_from_text(row: RawRow) -> Optional[Status]:
    text = status_text(row)
    if not text:
        return None
    for status, keywords in STATUS_KEYWORDS:
        if any(k in text for k in keywords):
            return status
    return None


def classify_status(row: RawRow) -> Status:
    """Resolve the repair status of a raw row.

    Flag columns (rec/re/nr) win; otherwise the designated status text
    columns are searched for keywords; otherwise the row is Received.
    The keyword pass is an approximation: groups are tried in the order
    Received, Repaired, Unrepaired, so "non réparé" reads as Repaired.
    """
    return status_from_flags(row) or status_from_text(row) or DEFAULT_STATUS
