from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Union

# Cell values handed over by the spreadsheet boundary (see core.data.sheet_rows).
CellValue = Union[str, int, float]
RawRow = Dict[str, CellValue]

DEFAULT_REGION = "El Bayadh"


class FacilityType(str, Enum):
    EP = "EP"
    CEM = "CEM"
    LYCEE = "Lycée"
    DIRECTION = "Direction"
    OTHER = "Autre"


class Status(str, Enum):
    RECEIVED = "rec"
    REPAIRED = "re"
    UNREPAIRED = "nr"

    @property
    def label(self) -> str:
        return STATUS_LABELS[self]

    @property
    def chart_label(self) -> str:
        return STATUS_CHART_LABELS[self]


STATUS_LABELS: Dict[Status, str] = {
    Status.RECEIVED: "Reçu",
    Status.REPAIRED: "Réparé",
    Status.UNREPAIRED: "Non réparé",
}

STATUS_CHART_LABELS: Dict[Status, str] = {
    Status.RECEIVED: "Reçus",
    Status.REPAIRED: "Réparés",
    Status.UNREPAIRED: "Non réparés",
}


@dataclass(frozen=True)
class MaintenanceRecord:
    """One canonical maintenance row.

    `equipment` is always non-empty; `facility_type` and `status` are always
    resolved. `region` is internal only and never exported.
    """

    equipment: str
    brand: str = ""
    inventory_id: str = ""
    serial_number: str = ""
    facility: str = ""
    facility_type: FacilityType = FacilityType.OTHER
    fault: str = ""
    technician: str = ""
    status: Status = Status.RECEIVED
    date: str = ""
    region: str = DEFAULT_REGION

    def display_values(self) -> Dict[str, str]:
        return {
            "equipment": self.equipment,
            "brand": self.brand,
            "inventory_id": self.inventory_id,
            "serial_number": self.serial_number,
            "facility": self.facility,
            "facility_type": self.facility_type.value,
            "fault": self.fault,
            "technician": self.technician,
            "status": self.status.value,
            "date": self.date,
        }


# Display column order shared by the table view and the CSV export.
DISPLAY_COLUMNS: Dict[str, str] = {
    "equipment": "Équipement",
    "brand": "Marque",
    "inventory_id": "Inventaire",
    "serial_number": "N° Série",
    "facility": "Établissement",
    "facility_type": "Type",
    "fault": "Panne",
    "technician": "Technicien",
    "status": "Statut",
    "date": "Date",
}
