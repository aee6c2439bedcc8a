from __future__ import annotations

import logging
from typing import Optional
from urllib.parse import quote

from fastapi import FastAPI, Query, Request
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.concurrency import run_in_threadpool

from api.schemas import (
    FilterOptionsResponse,
    FilterSelectionModel,
    MaintenanceRecordModel,
    RecordsResponse,
    SheetsResponse,
)
from core.errors import EmptyExportError, SheetNotFoundError, WorkbookError
from core.filters import FilterSelection, normalize_filters
from core.session import DashboardSession


app = FastAPI(title="Maintenance Dashboard API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000", "http://127.0.0.1:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_session: Optional[DashboardSession] = None


def get_session() -> DashboardSession:
    global _session
    if _session is None:
        _session = DashboardSession()
        _session.load_default()
    return _session


def reset_session(session: Optional[DashboardSession] = None) -> None:
    global _session
    _session = session


def _error(exc: Exception, status_code: int) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": str(exc), "type": type(exc).__name__})


def _selection(filters: FilterSelectionModel) -> FilterSelection:
    # Request-local: the shared session selection is never written by the API.
    return normalize_filters(filters.model_dump())


def _sheets(session: DashboardSession) -> SheetsResponse:
    return SheetsResponse(
        sheets=session.workbook.sheet_names,
        selected_sheet=session.workbook.selected_sheet,
        source_name=session.workbook.source_name,
        record_count=len(session.records),
    )


@app.post("/workbook")
async def upload_workbook(
    request: Request,
    filename: Optional[str] = Query(default=None),
    sheet: Optional[str] = Query(default=None),
):
    session = get_session()
    token = session.begin_load()
    content = await request.body()
    try:
        loaded = await run_in_threadpool(session.finish_load, token, content, source_name=filename, sheet=sheet)
        if not loaded:
            return JSONResponse(status_code=409, content={"error": "superseded by a newer upload", "type": "StaleLoad"})
        return JSONResponse(content=jsonable_encoder(_sheets(session)))
    except WorkbookError as exc:
        logger.warning("upload_workbook rejected: %s", exc)
        return _error(exc, 400)
    except Exception as exc:
        logger.exception("upload_workbook failed")
        return _error(exc, 500)


@app.get("/meta/sheets")
def meta_sheets():
    return JSONResponse(content=jsonable_encoder(_sheets(get_session())))


@app.post("/workbook/sheet")
def select_sheet(name: str = Query(...)):
    session = get_session()
    try:
        session.select_sheet(name)
        return JSONResponse(content=jsonable_encoder(_sheets(session)))
    except SheetNotFoundError as exc:
        return _error(exc, 404)
    except Exception as exc:
        logger.exception("select_sheet failed")
        return _error(exc, 500)


@app.get("/meta/filters")
def meta_filters():
    return JSONResponse(content=jsonable_encoder(FilterOptionsResponse(options=get_session().filter_options())))


@app.post("/records")
def records(filters: FilterSelectionModel):
    session = get_session()
    try:
        selection = _selection(filters)
    except ValueError as exc:
        return _error(exc, 422)
    try:
        view = session.filtered_records(selection, sort=True)
        payload = RecordsResponse(
            total=len(view),
            records=[MaintenanceRecordModel(**r.display_values()) for r in view],
        )
        return JSONResponse(content=jsonable_encoder(payload))
    except Exception as exc:
        logger.exception("records failed")
        return _error(exc, 500)


@app.post("/overview")
def overview(filters: FilterSelectionModel):
    session = get_session()
    try:
        selection = _selection(filters)
    except ValueError as exc:
        return _error(exc, 422)
    try:
        return JSONResponse(content=jsonable_encoder(session.overview(selection)))
    except Exception as exc:
        logger.exception("overview failed")
        return _error(exc, 500)


@app.post("/export")
def export(filters: FilterSelectionModel):
    session = get_session()
    try:
        selection = _selection(filters)
    except ValueError as exc:
        return _error(exc, 422)
    try:
        filename, csv_text = session.export_csv(selection=selection)
    except EmptyExportError as exc:
        return _error(exc, 400)
    return Response(
        content=csv_text.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": f"attachment; filename*=UTF-8''{quote(filename)}"},
    )
