"""
PDF report rendering with reportlab.

Layout (A4 portrait): title, session facts, integrity score, per-type summary,
then the most recent log lines. The stored event log is never modified; only
a window of it is drawn.
"""

from __future__ import annotations

import io
import time
from typing import List, Optional, Sequence

from reportlab.lib.pagesizes import A4
from reportlab.pdfgen import canvas

from models.event import Event, EventType
from models.session import Session
from scoring.integrity import IntegrityResult

DEFAULT_MAX_ROWS = 30
DEFAULT_LINE_CHARS = 90
BOTTOM_MARGIN = 60

SUMMARY_LABELS = [
    (EventType.FACE_FOUND, "Face-found events"),
    (EventType.MULTIPLE_FACES, "Multiple faces"),
    (EventType.ABSENCE, "Absence >10s"),
    (EventType.FOCUS_AWAY, "Focus away >5s"),
    (EventType.OBJECT_DETECTED, "Objects detected"),
]

# Base-14 fonts are WinAnsi encoded.
_REPLACEMENTS = {"≈": "~"}


def sanitize(text: str) -> str:
    for src, dst in _REPLACEMENTS.items():
        text = text.replace(src, dst)
    return text


def format_log_line(event: Event, line_chars: int = DEFAULT_LINE_CHARS) -> str:
    line = f"{event.time}  |  {event.type.value}"
    if event.detail:
        line += f"  |  {event.detail}"
    return line[:line_chars]


def log_window(
    events: Sequence[Event],
    max_rows: int = DEFAULT_MAX_ROWS,
    line_chars: int = DEFAULT_LINE_CHARS,
) -> List[str]:
    """The most recent `max_rows` events as truncated display lines."""
    recent = list(events)[-max_rows:] if max_rows > 0 else []
    return [format_log_line(e, line_chars) for e in recent]


def render_session_pdf(
    session: Session,
    result: IntegrityResult,
    now: Optional[float] = None,
    max_rows: int = DEFAULT_MAX_ROWS,
    line_chars: int = DEFAULT_LINE_CHARS,
) -> bytes:
    """Render the session report as PDF bytes."""
    now = time.time() if now is None else now
    buf = io.BytesIO()
    pdf = canvas.Canvas(buf, pagesize=A4, pageCompression=0)
    pdf.setTitle(f"Proctoring Report {session.id}")

    def draw(text: str, x: float, y: float, size: int = 12) -> None:
        pdf.setFont("Helvetica", size)
        pdf.drawString(x, y, sanitize(text))

    y = 800
    draw("Proctoring Report", 50, y, 20)
    y -= 30
    draw(f"Session ID: {session.id}", 50, y)
    y -= 16
    draw(f"Candidate: {session.candidate_name or 'N/A'}", 50, y)
    y -= 16
    draw(f"Duration: {session.duration_minutes(now)} min", 50, y)
    y -= 16
    draw(f"Integrity Score: {result.score}/100", 50, y)
    y -= 24

    draw("Summary", 50, y, 14)
    y -= 18
    for event_type, label in SUMMARY_LABELS:
        draw(f"{label}: {result.count(event_type)}", 60, y)
        y -= 14
    y -= 10

    draw("Event Log (time, type, detail)", 50, y, 14)
    y -= 18
    for line in log_window(session.events_snapshot(), max_rows, line_chars):
        draw(line, 60, y)
        y -= 14
        if y < BOTTOM_MARGIN:
            break

    pdf.showPage()
    pdf.save()
    return buf.getvalue()
