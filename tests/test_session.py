from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from core.errors import EmptyExportError, SheetNotFoundError, WorkbookError
from core.filters import DEFAULT_SELECTION, FilterSelection
from core.records import Status
from core.session import DashboardSession


def test_new_session_is_empty():
    session = DashboardSession()
    assert not session.workbook.loaded
    assert session.records == []
    assert session.selection == DEFAULT_SELECTION


def test_load_selects_first_sheet(sample_workbook):
    session = DashboardSession()
    assert session.load_bytes(sample_workbook, source_name="maint.xlsx") is True
    assert session.workbook.sheet_names == ["Janvier", "Février"]
    assert session.workbook.selected_sheet == "Janvier"
    assert session.workbook.source_name == "maint.xlsx"
    assert [r.equipment for r in session.records] == ["PC-01", "Imprimante", "Onduleur"]


def test_load_honours_requested_sheet(sample_workbook):
    session = DashboardSession()
    session.load_bytes(sample_workbook, sheet="Février")
    assert session.workbook.selected_sheet == "Février"
    assert [r.equipment for r in session.records] == ["Scanner"]


def test_reload_keeps_previous_sheet_name(sample_workbook):
    session = DashboardSession()
    session.load_bytes(sample_workbook, sheet="Février")
    session.load_bytes(sample_workbook)
    assert session.workbook.selected_sheet == "Février"


def test_failed_load_preserves_state(sample_workbook):
    session = DashboardSession()
    session.load_bytes(sample_workbook)
    workbook, records = session.workbook, session.records
    with pytest.raises(WorkbookError):
        session.load_bytes(b"not a workbook")
    assert session.workbook is workbook
    assert session.records is records


def test_stale_load_is_discarded(make_workbook, sample_workbook):
    session = DashboardSession()
    first = session.begin_load()
    second = session.begin_load()
    newer = make_workbook({"Mars": [{"équipement": "Routeur"}]})
    assert session.finish_load(second, newer) is True
    assert session.finish_load(first, sample_workbook) is False
    assert session.workbook.sheet_names == ["Mars"]
    assert [r.equipment for r in session.records] == ["Routeur"]


def test_select_sheet_replaces_records(sample_workbook):
    session = DashboardSession()
    session.load_bytes(sample_workbook)
    session.select_sheet("Février")
    assert session.workbook.selected_sheet == "Février"
    assert [r.equipment for r in session.records] == ["Scanner"]


def test_select_unknown_sheet_changes_nothing(sample_workbook):
    session = DashboardSession()
    session.load_bytes(sample_workbook)
    records = session.records
    with pytest.raises(SheetNotFoundError):
        session.select_sheet("Décembre")
    assert session.workbook.selected_sheet == "Janvier"
    assert session.records is records


def test_select_sheet_without_workbook():
    with pytest.raises(SheetNotFoundError):
        DashboardSession().select_sheet("Janvier")


def test_filters_and_reset(sample_workbook):
    session = DashboardSession()
    session.load_bytes(sample_workbook)
    session.set_filters({"status": "re", "region": "all"})
    assert [r.equipment for r in session.filtered_records()] == ["Imprimante"]
    assert session.overview()["kpis"]["total"] == 1
    session.reset_filters()
    assert session.selection == DEFAULT_SELECTION
    assert len(session.filtered_records()) == 3


def test_filtered_records_sorted(sample_workbook):
    session = DashboardSession()
    session.load_bytes(sample_workbook)
    assert [r.equipment for r in session.filtered_records(sort=True)] == ["Imprimante", "PC-01", "Onduleur"]


def test_export_csv(sample_workbook):
    session = DashboardSession()
    session.load_bytes(sample_workbook)
    session.set_filters(FilterSelection(status=Status.RECEIVED))
    filename, csv_text = session.export_csv(date(2024, 4, 1))
    assert filename == "maintenance_Janvier_2024-04-01.csv"
    assert csv_text.split("\n")[1].startswith('"PC-01","Dell"')


def test_export_refuses_empty_view(sample_workbook):
    session = DashboardSession()
    session.load_bytes(sample_workbook)
    session.set_filters(FilterSelection(region="Oran"))
    with pytest.raises(EmptyExportError):
        session.export_csv()


def test_load_default_missing_is_not_an_error(tmp_path: Path):
    session = DashboardSession()
    assert session.load_default(tmp_path) is False
    assert not session.workbook.loaded


def test_load_default_unreadable_is_skipped(tmp_path: Path):
    (tmp_path / "gestion-maintenance.xlsx").write_bytes(b"corrupt")
    session = DashboardSession()
    assert session.load_default(tmp_path) is False


def test_load_default(tmp_path: Path, sample_workbook):
    (tmp_path / "gestion-maintenance.xlsx").write_bytes(sample_workbook)
    session = DashboardSession()
    assert session.load_default(tmp_path) is True
    assert session.workbook.source_name == "gestion-maintenance.xlsx"


def test_explicit_selection_leaves_stored_one_untouched(sample_workbook):
    session = DashboardSession()
    session.load_bytes(sample_workbook)
    selection = FilterSelection(status=Status.REPAIRED)
    assert [r.equipment for r in session.filtered_records(selection)] == ["Imprimante"]
    assert session.overview(selection)["kpis"]["total"] == 1
    filename, csv_text = session.export_csv(date(2024, 4, 1), selection=selection)
    assert csv_text.count("\n") == 1
    assert session.selection == DEFAULT_SELECTION
