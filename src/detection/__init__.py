"""
Detection layer: turns per-frame inference results into integrity events.
"""

from .state import DetectionState
from .rules import advance, object_sampling_due
from .machine import DetectionStateMachine, DisplayEntry

__all__ = [
    "DetectionState",
    "advance",
    "object_sampling_due",
    "DetectionStateMachine",
    "DisplayEntry",
]
