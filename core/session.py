"""Dashboard session state.

One `DashboardSession` per user: it owns the loaded workbook, the canonical
records of the selected sheet and the active filter selection. Every load or
sheet switch replaces the derived state wholesale.

Loads are tagged with a generation token (`begin_load`); a result whose token
is no longer the latest is dropped, so the last *requested* load wins even if
an older one finishes later.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from core.data import Workbook, load_default_workbook, normalize_rows, read_workbook, sort_by_date
from core.errors import EmptyExportError, SheetNotFoundError, WorkbookError
from core.export import export_filename, to_csv
from core.filters import DEFAULT_SELECTION, FilterSelection, apply_filters, filter_options, normalize_filters
from core.metrics_overview import compute_overview
from core.records import MaintenanceRecord

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkbookState:
    sheets: Workbook = field(default_factory=dict)
    selected_sheet: Optional[str] = None
    source_name: Optional[str] = None

    @property
    def sheet_names(self) -> List[str]:
        return list(self.sheets)

    @property
    def loaded(self) -> bool:
        return bool(self.sheets)


class DashboardSession:
    def __init__(self, selection: FilterSelection = DEFAULT_SELECTION):
        self.workbook = WorkbookState()
        self.records: List[MaintenanceRecord] = []
        self.selection = selection
        self._generation = 0

    # ----- loading -----

    def begin_load(self) -> int:
        self._generation += 1
        return self._generation

    def is_current(self, token: int) -> bool:
        return token == self._generation

    def finish_load(
        self,
        token: int,
        content: bytes,
        *,
        source_name: Optional[str] = None,
        sheet: Optional[str] = None,
    ) -> bool:
        """Adopt a loaded workbook if `token` is still the latest load.

        Raises WorkbookError on unreadable bytes; the previous workbook,
        records and filters are kept in that case.
        """
        if not self.is_current(token):
            logger.info("Discarding stale workbook load %s (latest is %s)", token, self._generation)
            return False
        sheets = read_workbook(content)
        if not sheets:
            raise WorkbookError("Erreur lors de la lecture du fichier Excel: aucune feuille")
        if not self.is_current(token):
            logger.info("Discarding stale workbook load %s (latest is %s)", token, self._generation)
            return False

        if sheet in sheets:
            selected = sheet
        elif self.workbook.selected_sheet in sheets:
            selected = self.workbook.selected_sheet
        else:
            selected = next(iter(sheets))
        if sheet is not None and sheet not in sheets:
            logger.warning("Requested sheet %r not in workbook; using %r", sheet, selected)

        self.workbook = WorkbookState(sheets=sheets, selected_sheet=selected, source_name=source_name)
        self.records = normalize_rows(sheets[selected])
        logger.info("Loaded %s: sheet %r, %d records", source_name or "workbook", selected, len(self.records))
        return True

    def load_bytes(self, content: bytes, *, source_name: Optional[str] = None, sheet: Optional[str] = None) -> bool:
        return self.finish_load(self.begin_load(), content, source_name=source_name, sheet=sheet)

    def load_default(self, data_dir: Optional[Path] = None) -> bool:
        """Best-effort load of the bundled workbook; False when absent or unreadable."""
        found = load_default_workbook(data_dir)
        if found is None:
            return False
        name, content = found
        try:
            return self.load_bytes(content, source_name=name)
        except WorkbookError:
            logger.exception("Default workbook %s could not be read", name)
            return False

    def select_sheet(self, sheet_name: str) -> None:
        if sheet_name not in self.workbook.sheets:
            raise SheetNotFoundError(sheet_name)
        self.workbook = replace(self.workbook, selected_sheet=sheet_name)
        self.records = normalize_rows(self.workbook.sheets[sheet_name])
        logger.info("Switched to sheet %r: %d records", sheet_name, len(self.records))

    # ----- filtering -----

    def set_filters(self, selection: FilterSelection | Dict[str, Any]) -> FilterSelection:
        self.selection = selection if isinstance(selection, FilterSelection) else normalize_filters(selection)
        return self.selection

    def reset_filters(self) -> FilterSelection:
        self.selection = DEFAULT_SELECTION
        return self.selection

    def filtered_records(
        self, selection: Optional[FilterSelection] = None, *, sort: bool = False
    ) -> List[MaintenanceRecord]:
        """Filtered view of the current records; `selection` overrides the stored one."""
        view = apply_filters(self.records, selection or self.selection)
        return sort_by_date(view) if sort else view

    def filter_options(self) -> Dict[str, List[str]]:
        return filter_options(self.records)

    # ----- outputs -----

    def overview(self, selection: Optional[FilterSelection] = None) -> Dict[str, Any]:
        selection = selection or self.selection
        return compute_overview(selection, self.filtered_records(selection))

    def export_csv(self, day: Optional[date] = None, selection: Optional[FilterSelection] = None) -> Tuple[str, str]:
        """Return (file name, CSV text) for the filtered view."""
        view = self.filtered_records(selection)
        if not view:
            raise EmptyExportError()
        sheet = self.workbook.selected_sheet or "export"
        return export_filename(sheet, day), to_csv(view)
