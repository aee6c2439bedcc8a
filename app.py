import logging
from contextlib import contextmanager
from typing import Dict, List, Optional

import streamlit as st

from core.charts import facility_type_bar_chart, status_doughnut_chart
from core.data import records_to_frame
from core.errors import EmptyExportError, SheetNotFoundError, WorkbookError
from core.filters import MATCH_ALL, FilterSelection, normalize_filters
from core.metrics_overview import count_by_facility_type, count_by_status
from core.records import DEFAULT_REGION, STATUS_LABELS, Status
from core.session import DashboardSession

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #111827;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_filter_summary(selection: FilterSelection) -> str:
    values = selection.as_dict()
    status = STATUS_LABELS[selection.status] if selection.status else "Tous"
    chips = [
        f"Wilaya: {values['region'] if selection.region else 'Toutes'}",
        f"Type: {values['facility_type'] if selection.facility_type else 'Tous'}",
        f"Technicien: {values['technician'] if selection.technician is not None else 'Tous'}",
        f"Statut: {status}",
    ]
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def get_session() -> DashboardSession:
    if "dashboard_session" not in st.session_state:
        session = DashboardSession()
        session.load_default()
        st.session_state["dashboard_session"] = session
    return st.session_state["dashboard_session"]


def handle_upload(session: DashboardSession, uploaded) -> None:
    # Streamlit re-runs the script on every interaction; only load a file once.
    upload_key = (uploaded.name, uploaded.size)
    if st.session_state.get("_last_upload") == upload_key:
        return
    try:
        session.load_bytes(uploaded.getvalue(), source_name=uploaded.name)
    except WorkbookError as exc:
        logger.warning("Upload %s rejected: %s", uploaded.name, exc)
        st.error(str(exc))
        return
    st.session_state["_last_upload"] = upload_key
    st.session_state.pop("sheet_select", None)
    st.session_state.pop("f_technician", None)


def _select(label: str, options: List[str], current: Optional[str], key: str, fmt=None) -> str:
    choices = [MATCH_ALL] + options
    index = choices.index(current) if current in choices else 0
    return st.selectbox(label, choices, index=index, key=key, format_func=fmt or (lambda v: "Tous" if v == MATCH_ALL else v))


def render_sidebar(session: DashboardSession) -> None:
    with st.sidebar:
        st.markdown("### Fichier")
        uploaded = st.file_uploader("Charger un fichier Excel", type=["xlsx", "xls"])
        if uploaded is not None:
            handle_upload(session, uploaded)
        if session.workbook.source_name:
            st.caption(f"Fichier: {session.workbook.source_name}")

        if session.workbook.loaded:
            names = session.workbook.sheet_names
            current = session.workbook.selected_sheet
            chosen = st.selectbox("Feuille", names, index=names.index(current) if current in names else 0, key="sheet_select")
            if chosen != current:
                try:
                    session.select_sheet(chosen)
                    st.session_state.pop("f_technician", None)
                except SheetNotFoundError as exc:
                    st.error(str(exc))

        st.markdown("---")
        st.markdown("### Filtres")
        if st.button("Réinitialiser les filtres"):
            session.reset_filters()
            for key in ("f_region", "f_type", "f_technician", "f_status"):
                st.session_state.pop(key, None)

        options = session.filter_options()
        values = session.selection.as_dict()
        status_labels: Dict[str, str] = {s.value: s.label for s in Status}
        raw = {
            "region": _select("Wilaya", options["region"], values["region"], "f_region",
                              fmt=lambda v: "Toutes" if v == MATCH_ALL else v),
            "facility_type": _select("Type d'établissement", options["facility_type"], values["facility_type"], "f_type"),
            "technician": _select("Technicien", options["technician"], values["technician"], "f_technician"),
            "status": _select("Statut", options["status"], values["status"], "f_status",
                              fmt=lambda v: "Tous" if v == MATCH_ALL else status_labels.get(v, v)),
        }
        session.set_filters(normalize_filters(raw))


def render_stats(records) -> None:
    by_status = count_by_status(records)
    cols = st.columns(4)
    cols[0].metric("Total équipements", len(records))
    cols[1].metric("Reçus", by_status[Status.RECEIVED])
    cols[2].metric("Réparés", by_status[Status.REPAIRED])
    cols[3].metric("Non réparés", by_status[Status.UNREPAIRED])


def render_charts(records) -> None:
    status_counts = {s.chart_label: n for s, n in count_by_status(records).items()}
    type_counts = {t.value: n for t, n in count_by_facility_type(records).items()}
    left, right = st.columns(2)
    with left:
        with card("Répartition par statut"):
            st.altair_chart(status_doughnut_chart(status_counts).properties(height=300), use_container_width=True)
    with right:
        with card("Répartition par type d'établissement"):
            st.altair_chart(facility_type_bar_chart(type_counts).properties(height=300), use_container_width=True)


def render_table(session: DashboardSession, records) -> None:
    with card("Équipements"):
        if not records:
            st.info("Aucun équipement ne correspond aux filtres.")
        else:
            st.dataframe(records_to_frame(records), use_container_width=True, hide_index=True)
        try:
            filename, csv_text = session.export_csv()
        except EmptyExportError as exc:
            st.warning(str(exc))
            st.button("Exporter CSV", disabled=True, help=str(exc))
        else:
            st.download_button("Exporter CSV", data=csv_text.encode("utf-8"), file_name=filename, mime="text/csv")


# ---------- UI setup ----------
st.set_page_config(page_title="Gestion de Maintenance", layout="wide")
inject_base_styles()

session = get_session()
render_sidebar(session)

sheet_title = f" - {session.workbook.selected_sheet}" if session.workbook.selected_sheet else ""
st.markdown(
    f"<div class='app-top-bar'><div class='breadcrumb'>Wilaya {DEFAULT_REGION}</div>"
    f"<div class='page-title'>📊 Système de Gestion de Maintenance{sheet_title}</div></div>",
    unsafe_allow_html=True,
)
st.markdown(f"<div class='chip-row'>{format_filter_summary(session.selection)}</div>", unsafe_allow_html=True)

if not session.workbook.loaded:
    st.info("Chargez un fichier Excel de maintenance pour commencer.")
    st.stop()

view = session.filtered_records()
render_stats(view)
render_charts(view)
render_table(session, view)
st.caption(f"{len(view)} / {len(session.records)} équipements affichés")
