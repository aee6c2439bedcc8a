from __future__ import annotations

from typing import Any, Dict, Mapping

import altair as alt
import pandas as pd

alt.data_transformers.disable_max_rows()

STATUS_COLORS = ["#4299e1", "#48bb78", "#f56565"]
FACILITY_TYPE_COLORS = ["#667eea", "#764ba2", "#f687b3", "#f6ad55", "#cbd5e0"]


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def _counts_frame(counts: Mapping[str, int]) -> pd.DataFrame:
    return pd.DataFrame(
        {
            "label": list(counts.keys()),
            "count": [int(v) for v in counts.values()],
            "order": list(range(len(counts))),
        }
    )


def status_doughnut_chart(counts: Mapping[str, int]) -> alt.Chart:
    labels = list(counts.keys())
    return (
        alt.Chart(_counts_frame(counts), title="Répartition par Statut")
        .mark_arc(innerRadius=60, stroke="#fff", strokeWidth=2)
        .encode(
            theta=alt.Theta("count:Q"),
            color=alt.Color(
                "label:N",
                title=None,
                sort=labels,
                scale=alt.Scale(domain=labels, range=STATUS_COLORS[: len(labels)]),
                legend=alt.Legend(orient="bottom"),
            ),
            order=alt.Order("order:Q"),
            tooltip=[alt.Tooltip("label:N", title="Statut"), alt.Tooltip("count:Q", title="Équipements")],
        )
    )


def facility_type_bar_chart(counts: Mapping[str, int]) -> alt.Chart:
    labels = list(counts.keys())
    return (
        alt.Chart(_counts_frame(counts), title="Répartition par Type d'Établissement")
        .mark_bar()
        .encode(
            x=alt.X("label:N", title="Type d'établissement", sort=labels, axis=alt.Axis(labelAngle=0)),
            y=alt.Y("count:Q", title="Nombre d'équipements", axis=alt.Axis(tickMinStep=1)),
            color=alt.Color(
                "label:N",
                scale=alt.Scale(domain=labels, range=FACILITY_TYPE_COLORS[: len(labels)]),
                legend=None,
            ),
            tooltip=[alt.Tooltip("label:N", title="Type"), alt.Tooltip("count:Q", title="Équipements")],
        )
    )
