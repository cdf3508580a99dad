"""
Tests for CSV and PDF report rendering.
"""

from models.event import Event, EventType
from models.session import Session
from reporting import ReportFormat, log_window, render_report, report_filename
from reporting.pdf_report import format_log_line, render_session_pdf, sanitize
from scoring import compute_integrity_score


def make_session(events=(), candidate_name="Ada", created_at=0.0):
    session = Session(id="abc-123", created_at=created_at, candidate_name=candidate_name)
    session.append(events)
    return session


class TestCsvReport:
    def test_header_and_rows_in_log_order(self):
        events = [
            Event("2024-01-01T00:00:00.000Z", EventType.SESSION_START),
            Event("2024-01-01T00:00:05.000Z", EventType.OBJECT_DETECTED, "book, cell phone"),
            Event("2024-01-01T00:00:01.000Z", EventType.FACE_FOUND),
        ]

        text = render_report(ReportFormat.CSV, make_session(events)).decode("utf-8")

        lines = text.strip().split("\n")
        assert lines[0] == "time,type,detail"
        assert lines[1] == "2024-01-01T00:00:00.000Z,session-start,"
        assert lines[2] == '2024-01-01T00:00:05.000Z,object-detected,"book, cell phone"'
        assert lines[3] == "2024-01-01T00:00:01.000Z,face-found,"

    def test_empty_session_has_header(self):
        text = render_report(ReportFormat.CSV, make_session()).decode("utf-8")

        assert text == "time,type,detail\n"


class TestPdfReport:
    def test_renders_pdf_with_title(self):
        session = make_session([Event("t", EventType.FOCUS_AWAY, "eye-offset≈18%")])

        body = render_report(ReportFormat.PDF, session)

        assert body.startswith(b"%PDF")
        assert b"Proctoring Report" in body
        assert b"Integrity Score: 95/100" in body
        assert b"Candidate: Ada" in body
        assert b"eye-offset~18%" in body

    def test_missing_candidate_shows_na(self):
        session = make_session(candidate_name=None)

        body = render_session_pdf(session, compute_integrity_score([]), now=0.0)

        assert b"Candidate: N/A" in body
        assert b"Duration: 0 min" in body

    def test_duration_rounded_minutes(self):
        session = make_session(created_at=1000.0)

        body = render_session_pdf(session, compute_integrity_score([]), now=1000.0 + 170)

        assert b"Duration: 3 min" in body

    def test_rendering_does_not_mutate_log(self):
        events = [Event(f"t{i}", EventType.FACE_FOUND) for i in range(45)]
        session = make_session(events)

        render_report(ReportFormat.PDF, session)

        assert session.event_count == 45


class TestLogWindow:
    def test_most_recent_rows(self):
        events = [Event(f"t{i}", EventType.FACE_FOUND) for i in range(40)]

        lines = log_window(events, max_rows=30)

        assert len(lines) == 30
        assert lines[0].startswith("t10")
        assert lines[-1].startswith("t39")

    def test_truncates_lines(self):
        event = Event("2024-01-01T00:00:00.000Z", EventType.OBJECT_DETECTED, "x" * 200)

        assert len(format_log_line(event, 90)) == 90

    def test_line_format(self):
        event = Event("t", EventType.ABSENCE, "No face for >10s")

        assert format_log_line(event) == "t  |  absence-10s  |  No face for >10s"
        assert format_log_line(Event("t", EventType.FACE_FOUND)) == "t  |  face-found"

    def test_sanitize(self):
        assert sanitize("eye-offset≈20%") == "eye-offset~20%"


class TestReportNaming:
    def test_filename_and_media_type(self):
        assert report_filename("abc", ReportFormat.CSV) == "report-abc.csv"
        assert report_filename("abc", ReportFormat.PDF) == "report-abc.pdf"
        assert ReportFormat.CSV.media_type == "text/csv"
        assert ReportFormat.PDF.media_type == "application/pdf"
