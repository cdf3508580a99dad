"""
Pipeline module for the proctoring client.

The engine drives the capture loop: frame acquisition, inference, detection
state machine and event delivery.
"""

from .engine import MonitorEngine, MonitorConfig, create_engine_from_config

__all__ = [
    "MonitorEngine",
    "MonitorConfig",
    "create_engine_from_config",
]
