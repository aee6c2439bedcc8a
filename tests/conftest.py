# Shared pytest fixtures
from __future__ import annotations

import io
from typing import Callable, Dict, List

import pandas as pd
import pytest

from core.records import FacilityType, MaintenanceRecord, Status


def build_workbook(sheets: Dict[str, List[dict]]) -> bytes:
    buf = io.BytesIO()
    with pd.ExcelWriter(buf, engine="openpyxl") as writer:
        for name, rows in sheets.items():
            pd.DataFrame(rows).to_excel(writer, sheet_name=name, index=False)
    return buf.getvalue()


@pytest.fixture()
def make_workbook() -> Callable[[Dict[str, List[dict]]], bytes]:
    return build_workbook


@pytest.fixture()
def sample_sheets() -> Dict[str, List[dict]]:
    return {
        "Janvier": [
            {"équipement": "PC-01", "Marque": "Dell", "établissement": "CEM Ibn Khaldoun",
             "technicien": "Karim", "date": "2024-01-10", "rec": 1, "re": 0, "nr": 0},
            {"équipement": "Imprimante", "Marque": "HP", "établissement": "Lycée Ahmed",
             "technicien": "Samir", "date": "2024-01-12", "rec": 0, "re": 1, "nr": 0},
            {"équipement": "", "Marque": "Canon", "établissement": "EP El Amir",
             "technicien": "Karim", "date": "", "rec": 0, "re": 0, "nr": 1},
            {"équipement": "Onduleur", "Marque": "APC", "établissement": "Direction de l'éducation",
             "technicien": "Karim", "date": "", "rec": 0, "re": 0, "nr": 1},
        ],
        "Février": [
            {"Equipement": "Scanner", "Marque": "Epson", "Etablissement": "Ecole primaire 2",
             "Technicien": "Samir", "Date": "2024-02-01"},
        ],
    }


@pytest.fixture()
def sample_workbook(make_workbook, sample_sheets) -> bytes:
    return make_workbook(sample_sheets)


@pytest.fixture()
def records() -> List[MaintenanceRecord]:
    return [
        MaintenanceRecord(equipment="PC-01", facility="CEM A", facility_type=FacilityType.CEM,
                          technician="Karim", status=Status.RECEIVED, date="2024-01-10"),
        MaintenanceRecord(equipment="PC-02", facility="Lycée B", facility_type=FacilityType.LYCEE,
                          technician="Samir", status=Status.REPAIRED, date="2024-03-02"),
        MaintenanceRecord(equipment="PC-03", facility="EP C", facility_type=FacilityType.EP,
                          technician="Karim", status=Status.UNREPAIRED, date=""),
        MaintenanceRecord(equipment="PC-04", facility="CEM D", facility_type=FacilityType.CEM,
                          technician="Samir", status=Status.REPAIRED, date="2023-12-31"),
    ]
