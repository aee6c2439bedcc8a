from __future__ import annotations


class DashboardError(Exception):
    """Base class for errors surfaced to the dashboard user."""


class WorkbookError(DashboardError):
    pass


class SheetNotFoundError(DashboardError):
    def __init__(self, sheet_name: str):
        super().__init__(f"Feuille non trouvée: {sheet_name}")
        self.sheet_name = sheet_name


class EmptyExportError(DashboardError):
    def __init__(self) -> None:
        super().__init__("Aucune donnée à exporter")
