"""
Core module for the city telemetry simulation.
Contains data models, update rules, the state store, and the engine.
"""

from core.models import (
    Dam, Bridge, Transformer, TrafficZone, AQIZone, Weather, TransitRoute,
    Alert, Prediction, SystemMetrics, CitySnapshot,
)
from core.config import SimulationSettings
from core.state import StateStore
from core.merger import MergeReport, apply_external_update
from core.scheduler import Scheduler, Cadence, CancellationToken
from core.engine import SimulationEngine

__all__ = [
    # Models
    "Dam",
    "Bridge",
    "Transformer",
    "TrafficZone",
    "AQIZone",
    "Weather",
    "TransitRoute",
    "Alert",
    "Prediction",
    "SystemMetrics",
    "CitySnapshot",
    # Engine
    "SimulationSettings",
    "StateStore",
    "MergeReport",
    "apply_external_update",
    "Scheduler",
    "Cadence",
    "CancellationToken",
    "SimulationEngine",
]
