"""
Integrity scorer: maps an event log to a 0-100 score and per-type counts.

Formula:
    score = 100
        - 10 * absence-10s
        - 10 * multiple-faces
        -  5 * object-detected
        -  5 * focus-away-5s
    clamped at 0.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable

from models.event import Event, EventType

MAX_SCORE = 100

PENALTIES: Dict[EventType, int] = {
    EventType.ABSENCE: 10,
    EventType.MULTIPLE_FACES: 10,
    EventType.OBJECT_DETECTED: 5,
    EventType.FOCUS_AWAY: 5,
}


@dataclass(frozen=True)
class IntegrityResult:
    """Score plus occurrence counts for every event type."""
    score: int
    counts: Dict[EventType, int]

    def count(self, event_type: EventType) -> int:
        return self.counts.get(event_type, 0)

    def to_dict(self) -> Dict[str, object]:
        return {
            "score": self.score,
            "counts": {t.value: n for t, n in self.counts.items()},
        }


def score_from_counts(counts: Dict[EventType, int]) -> int:
    score = MAX_SCORE
    for event_type, penalty in PENALTIES.items():
        score -= penalty * counts.get(event_type, 0)
    return max(0, score)


def compute_integrity_score(events: Iterable[Event]) -> IntegrityResult:
    """Tally events per type and derive the integrity score. Pure and deterministic."""
    tally = Counter(event.type for event in events)
    counts = {event_type: tally.get(event_type, 0) for event_type in EventType}
    return IntegrityResult(score=score_from_counts(counts), counts=counts)
