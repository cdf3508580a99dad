"""
Tests for the session store HTTP API.
"""

import pytest
from fastapi.testclient import TestClient

from models.config import Config
from web.app import create_app
from web.state import state


@pytest.fixture
def api(store):
    state.set_store(store)
    return TestClient(create_app(Config()))


def create(api, name=None):
    body = {"candidateName": name} if name else {}
    resp = api.post("/api/session", json=body)
    assert resp.status_code == 200
    return resp.json()["sessionId"]


class TestHealth:
    def test_static_health(self, api):
        resp = api.get("/health")

        assert resp.status_code == 200
        assert resp.json() == {"ok": True}

    def test_healthz_reports_sessions(self, api):
        create(api)

        data = api.get("/api/v1/healthz").json()

        assert data["ok"] is True
        assert data["session_count"] == 1
        assert "uptime_seconds" in data


class TestSessions:
    def test_create_session(self, api, store):
        sid = create(api, "Ada")

        assert store.get_session(sid).candidate_name == "Ada"

    def test_create_session_without_body(self, api, store):
        resp = api.post("/api/session")

        assert resp.status_code == 200
        assert store.get_session(resp.json()["sessionId"]).candidate_name is None

    def test_append_events(self, api, store):
        sid = create(api)
        events = [
            {"time": "2024-01-01T00:00:00.000Z", "type": "session-start"},
            {"time": "2024-01-01T00:00:01.000Z", "type": "face-found"},
            {"time": "2024-01-01T00:00:02.000Z"},
        ]

        resp = api.post(f"/api/session/{sid}/events", json={"events": events})

        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "count": 2}
        assert store.get_session(sid).event_count == 2

    def test_non_string_candidate_name_ignored(self, api, store):
        resp = api.post("/api/session", json={"candidateName": 5})

        assert resp.status_code == 200
        assert store.get_session(resp.json()["sessionId"]).candidate_name is None

    @pytest.mark.parametrize("body", [{"events": None}, {"events": "nope"}, {}])
    def test_non_list_events_append_nothing(self, api, store, body):
        sid = create(api)

        resp = api.post(f"/api/session/{sid}/events", json=body)

        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "count": 0}
        assert store.get_session(sid).event_count == 0

    def test_append_to_unknown_session(self, api):
        resp = api.post("/api/session/missing/events", json={"events": []})

        assert resp.status_code == 404

    def test_summary(self, api):
        sid = create(api, "Ada")
        events = [
            {"time": "t1", "type": "absence-10s", "detail": "No face for >10s"},
            {"time": "t2", "type": "object-detected", "detail": "book"},
        ]
        api.post(f"/api/session/{sid}/events", json={"events": events})

        data = api.get(f"/api/session/{sid}/summary").json()

        assert data["score"] == 85
        assert data["eventCount"] == 2
        assert data["counts"]["absence-10s"] == 1
        assert data["candidateName"] == "Ada"

    def test_summary_unknown_session(self, api):
        assert api.get("/api/session/missing/summary").status_code == 404


class TestReports:
    def test_csv_report(self, api):
        sid = create(api)
        api.post(f"/api/session/{sid}/events", json={"events": [
            {"time": "t1", "type": "face-found"},
            {"time": "t2", "type": "focus-away-5s", "detail": "eye-offset≈20%"},
        ]})

        resp = api.get(f"/api/session/{sid}/report.csv")

        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert resp.headers["content-disposition"] == f'attachment; filename="report-{sid}.csv"'
        lines = resp.text.strip().split("\n")
        assert lines == ["time,type,detail", "t1,face-found,", "t2,focus-away-5s,eye-offset≈20%"]

    def test_pdf_report(self, api):
        sid = create(api, "Ada")

        resp = api.get(f"/api/session/{sid}/report.pdf")

        assert resp.status_code == 200
        assert resp.headers["content-type"] == "application/pdf"
        assert resp.headers["content-disposition"] == f'attachment; filename="report-{sid}.pdf"'
        assert resp.content.startswith(b"%PDF")

    @pytest.mark.parametrize("ext", ["csv", "pdf"])
    def test_report_unknown_session(self, api, ext):
        resp = api.get(f"/api/session/missing/report.{ext}")

        assert resp.status_code == 404
        assert resp.text == "Session not found"
