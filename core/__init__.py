"""Core (UI-agnostic) maintenance dashboard logic.

This package contains:
- workbook loading (XLSX -> raw rows) and normalization into canonical records
- facility-type / repair-status classification
- filter selection and filtering
- overview counts and chart helpers (Altair -> Vega-Lite spec dict)
- CSV export and the per-user session state
"""
