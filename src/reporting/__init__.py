"""
Report rendering: formats a session's event log and score as CSV or PDF.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from models.session import Session
from scoring.integrity import IntegrityResult, compute_integrity_score

from .csv_report import CSV_COLUMNS, render_rows_csv, render_session_csv
from .pdf_report import log_window, render_session_pdf


class ReportFormat(str, Enum):
    CSV = "csv"
    PDF = "pdf"

    @property
    def media_type(self) -> str:
        return "text/csv" if self is ReportFormat.CSV else "application/pdf"


def report_filename(session_id: str, fmt: ReportFormat) -> str:
    return f"report-{session_id}.{fmt.value}"


def render_report(
    fmt: ReportFormat,
    session: Session,
    result: Optional[IntegrityResult] = None,
    max_rows: int = 30,
    line_chars: int = 90,
) -> bytes:
    """Render a session in the requested format. Scores the log when no result is given."""
    if fmt is ReportFormat.CSV:
        return render_session_csv(session)
    if result is None:
        result = compute_integrity_score(session.events_snapshot())
    return render_session_pdf(session, result, max_rows=max_rows, line_chars=line_chars)


__all__ = [
    "CSV_COLUMNS",
    "ReportFormat",
    "log_window",
    "render_report",
    "render_rows_csv",
    "render_session_csv",
    "render_session_pdf",
    "report_filename",
]
