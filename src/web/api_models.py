from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class CreateSessionRequest(BaseModel):
    """Non-string names are ignored rather than rejected."""
    candidateName: Any = None


class CreateSessionResponse(BaseModel):
    sessionId: str


class AppendEventsRequest(BaseModel):
    """Raw entries; each one is validated individually by the store."""
    events: Any = None


class AppendEventsResponse(BaseModel):
    ok: bool = True
    count: int = Field(..., description="Number of events actually appended")


class SessionSummaryResponse(BaseModel):
    sessionId: str
    candidateName: Optional[str] = None
    createdAt: float
    durationMinutes: int
    eventCount: int
    score: int
    counts: Dict[str, int]
