from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Type, TypeVar

from core.records import DEFAULT_REGION, FacilityType, MaintenanceRecord, Status

MATCH_ALL = "all"
REGIONS = [DEFAULT_REGION]

E = TypeVar("E", bound=Enum)


@dataclass(frozen=True)
class FilterSelection:
    """Four independent equality constraints; None means match-all."""

    region: Optional[str] = None
    facility_type: Optional[FacilityType] = None
    technician: Optional[str] = None
    status: Optional[Status] = None

    def matches(self, record: MaintenanceRecord) -> bool:
        if self.region is not None and record.region != self.region:
            return False
        if self.facility_type is not None and record.facility_type != self.facility_type:
            return False
        if self.technician is not None and record.technician != self.technician:
            return False
        if self.status is not None and record.status != self.status:
            return False
        return True

    def as_dict(self) -> Dict[str, str]:
        return {
            "region": self.region or MATCH_ALL,
            "facility_type": self.facility_type.value if self.facility_type else MATCH_ALL,
            "technician": self.technician if self.technician is not None else MATCH_ALL,
            "status": self.status.value if self.status else MATCH_ALL,
        }


DEFAULT_SELECTION = FilterSelection(region=DEFAULT_REGION)


def _is_match_all(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() in ("", MATCH_ALL))


def _as_enum(enum_cls: Type[E], value: Any) -> Optional[E]:
    if _is_match_all(value):
        return None
    if isinstance(value, enum_cls):
        return value
    text = str(value).strip()
    for member in enum_cls:
        if text == member.value or text.upper() == member.name:
            return member
    raise ValueError(f"unknown {enum_cls.__name__} filter value: {value!r}")


def normalize_filters(raw: Optional[Dict[str, Any]]) -> FilterSelection:
    raw = raw or {}
    region = raw.get("region")
    technician = raw.get("technician")
    return FilterSelection(
        region=None if _is_match_all(region) else str(region),
        facility_type=_as_enum(FacilityType, raw.get("facility_type")),
        technician=None if _is_match_all(technician) else str(technician),
        status=_as_enum(Status, raw.get("status")),
    )


def apply_filters(records: Iterable[MaintenanceRecord], selection: FilterSelection) -> List[MaintenanceRecord]:
    return [r for r in records if selection.matches(r)]


def filter_options(records: Iterable[MaintenanceRecord]) -> Dict[str, List[str]]:
    technicians = sorted({r.technician for r in records if r.technician})
    return {
        "region": list(REGIONS),
        "facility_type": [t.value for t in FacilityType],
        "technician": technicians,
        "status": [s.value for s in Status],
    }
