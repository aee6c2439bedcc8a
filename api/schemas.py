from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from core.records import DEFAULT_REGION, FacilityType, Status


class FilterSelectionModel(BaseModel):
    region: Optional[str] = DEFAULT_REGION
    # Enum value, enum name, "all" or "" (see core.filters.normalize_filters).
    facility_type: Optional[str] = None
    technician: Optional[str] = None
    status: Optional[str] = None


class SheetsResponse(BaseModel):
    sheets: List[str] = Field(default_factory=list)
    selected_sheet: Optional[str] = None
    source_name: Optional[str] = None
    record_count: int = 0


class FilterOptionsResponse(BaseModel):
    options: Dict[str, List[str]]


class MaintenanceRecordModel(BaseModel):
    equipment: str
    brand: str = ""
    inventory_id: str = ""
    serial_number: str = ""
    facility: str = ""
    facility_type: FacilityType
    fault: str = ""
    technician: str = ""
    status: Status
    date: str = ""


class RecordsResponse(BaseModel):
    total: int
    records: List[MaintenanceRecordModel]
