from __future__ import annotations

import logging
import time
from typing import Optional

from fastapi import APIRouter, HTTPException
from fastapi.responses import PlainTextResponse, Response

from models.errors import SessionNotFound
from reporting import ReportFormat, render_report, report_filename
from scoring import compute_integrity_score

from ..api_models import (
    AppendEventsRequest,
    AppendEventsResponse,
    CreateSessionRequest,
    CreateSessionResponse,
    SessionSummaryResponse,
)
from ..services.health_service import HealthService
from ..state import state

router = APIRouter()
router_v1 = APIRouter(prefix="/api/v1")

NOT_FOUND_TEXT = "Session not found"


@router.post("/session", response_model=CreateSessionResponse)
def create_session(body: Optional[CreateSessionRequest] = None):
    candidate_name = body.candidateName if body is not None else None
    if not isinstance(candidate_name, str):
        candidate_name = None
    return {"sessionId": state.store.create_session(candidate_name)}


@router.post("/session/{session_id}/events", response_model=AppendEventsResponse)
def append_events(session_id: str, body: Optional[AppendEventsRequest] = None):
    raw = body.events if body is not None else None
    events = raw if isinstance(raw, list) else []
    try:
        count = state.store.append_events(session_id, events)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail=NOT_FOUND_TEXT)
    return {"ok": True, "count": count}


def _report(session_id: str, fmt: ReportFormat) -> Response:
    try:
        session = state.store.get_session(session_id)
    except SessionNotFound:
        return PlainTextResponse(NOT_FOUND_TEXT, status_code=404)

    server_cfg = state.get_config().server
    body = render_report(
        fmt,
        session,
        max_rows=server_cfg.report_max_rows,
        line_chars=server_cfg.report_line_chars,
    )
    logging.info(f"Rendered {fmt.value} report for {session_id} ({len(body)} bytes)")

    filename = report_filename(session_id, fmt)
    return Response(
        content=body,
        media_type=fmt.media_type,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.get("/session/{session_id}/report.csv")
def report_csv(session_id: str):
    return _report(session_id, ReportFormat.CSV)


@router.get("/session/{session_id}/report.pdf")
def report_pdf(session_id: str):
    return _report(session_id, ReportFormat.PDF)


@router.get("/session/{session_id}/summary", response_model=SessionSummaryResponse)
def session_summary(session_id: str):
    try:
        session = state.store.get_session(session_id)
    except SessionNotFound:
        raise HTTPException(status_code=404, detail=NOT_FOUND_TEXT)

    events = session.events_snapshot()
    result = compute_integrity_score(events)
    return {
        "sessionId": session.id,
        "candidateName": session.candidate_name,
        "createdAt": session.created_at,
        "durationMinutes": session.duration_minutes(time.time()),
        "eventCount": len(events),
        "score": result.score,
        "counts": result.to_dict()["counts"],
    }


@router_v1.get("/healthz", response_model=dict)
def healthz():
    return HealthService(
        cfg=state.get_config(), store=state.store, start_time=state.start_time
    ).get_health_summary()
