from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from core.charts import facility_type_bar_chart, status_doughnut_chart, to_vega_spec
from core.filters import FilterSelection
from core.records import FacilityType, MaintenanceRecord, Status


def _count_by(values: List[str], domain: List[str]) -> Dict[str, int]:
    counts = pd.Series(values, dtype=object).value_counts().reindex(domain, fill_value=0)
    return {key: int(counts[key]) for key in domain}


def count_by_status(records: List[MaintenanceRecord]) -> Dict[Status, int]:
    """Counts for every status, zero entries included."""
    counts = _count_by([r.status.value for r in records], [s.value for s in Status])
    return {Status(k): n for k, n in counts.items()}


def count_by_facility_type(records: List[MaintenanceRecord]) -> Dict[FacilityType, int]:
    """Counts for every facility type, zero entries included."""
    counts = _count_by([r.facility_type.value for r in records], [t.value for t in FacilityType])
    return {FacilityType(k): n for k, n in counts.items()}


def compute_overview(selection: FilterSelection, records: List[MaintenanceRecord]) -> Dict[str, Any]:
    """Stat tiles and chart payloads for an already filtered view."""
    by_status = count_by_status(records)
    by_type = count_by_facility_type(records)

    status_chart_counts = {s.chart_label: n for s, n in by_status.items()}
    type_chart_counts = {t.value: n for t, n in by_type.items()}

    return {
        "filters": selection.as_dict(),
        "kpis": {
            "total": len(records),
            "received": by_status[Status.RECEIVED],
            "repaired": by_status[Status.REPAIRED],
            "unrepaired": by_status[Status.UNREPAIRED],
        },
        "counts": {
            "status": {s.value: n for s, n in by_status.items()},
            "facility_type": type_chart_counts,
        },
        "charts": {
            "status": to_vega_spec(status_doughnut_chart(status_chart_counts)),
            "facility_type": to_vega_spec(facility_type_bar_chart(type_chart_counts)),
        },
    }
