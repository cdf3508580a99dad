"""
CSV report rendering.
"""

from __future__ import annotations

import csv
import io
from typing import Iterable, Sequence

from models.session import Session

CSV_COLUMNS = ("time", "type", "detail")


def render_rows_csv(rows: Iterable[Sequence[str]]) -> bytes:
    """Render (time, type, detail) rows under the fixed header."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_COLUMNS)
    writer.writerows(rows)
    return buf.getvalue().encode("utf-8")


def render_session_csv(session: Session) -> bytes:
    """All events of a session in log order. Header row is always present."""
    return render_rows_csv(
        (e.time, e.type.value, e.detail or "") for e in session.events_snapshot()
    )
