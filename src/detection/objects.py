"""
Suspicious object filtering for object-recognition results.
"""

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Sequence

from models.detection import ObjectDetection


def filter_suspicious(
    objects: Iterable[ObjectDetection],
    allowed_classes: Sequence[str],
    min_confidence: float,
) -> List[ObjectDetection]:
    """Keep detections whose label is on the allow-list and whose confidence exceeds the threshold."""
    allowed = set(allowed_classes)
    return [o for o in objects if o.label in allowed and o.confidence > min_confidence]


def label_set(objects: Iterable[ObjectDetection]) -> FrozenSet[str]:
    return frozenset(o.label for o in objects)


def format_labels(labels: Iterable[str]) -> str:
    """Sorted unique labels joined into a single detail string."""
    return ", ".join(sorted(set(labels)))
