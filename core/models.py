"""
Core data models for the city telemetry simulation.

Every entity is a plain dataclass. The engine never mutates a record in place;
each tick builds a new record with dataclasses.replace() and swaps the whole
collection.
"""

import re
from dataclasses import dataclass, field, fields, asdict
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple


def to_camel(name: str) -> str:
    """snake_case -> camelCase, the key style of the dashboard wire format."""
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def to_snake(name: str) -> str:
    """camelCase -> snake_case. Already-snake names pass through."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _camel_dict(record) -> Dict[str, Any]:
    out = {}
    for key, value in asdict(record).items():
        if isinstance(value, datetime):
            value = value.isoformat()
        out[to_camel(key)] = value
    return out


@dataclass
class Dam:
    """A reservoir dam with hydrological risk metrics."""
    id: str
    name: str
    lat: float
    lng: float
    water_level: float            # 0-100 %
    stress_index: float           # 0-1
    rainfall_forecast: float      # mm, 0-100
    overflow_risk: float          # 0-1
    prediction_confidence: float  # 0.5-0.99
    status: str = "normal"        # normal | warning | critical


@dataclass
class Bridge:
    """
    A monitored bridge.

    status follows load_percent, risk_severity follows vibration_index.
    The two are allowed to disagree.
    """
    id: str
    name: str
    lat: float
    lng: float
    load_percent: float           # 0-100
    vibration_index: float        # 0-1
    risk_severity: str = "low"    # low | medium | high
    prediction_confidence: float = 0.8
    status: str = "normal"


@dataclass
class Transformer:
    """A grid transformer / substation."""
    id: str
    name: str
    lat: float
    lng: float
    load_percent: float
    failure_probability: float    # 0-1
    temperature_celsius: float    # 20-120
    prediction_confidence: float = 0.8
    status: str = "normal"


@dataclass
class TrafficZone:
    id: str
    name: str
    lat: float
    lng: float
    intensity: float              # 0-100
    congestion_level: str = "low"  # low | moderate | high | severe


@dataclass
class AQIZone:
    id: str
    name: str
    lat: float
    lng: float
    aqi: int                      # 0-500
    category: str = "Good"
    pm25: int = 0


@dataclass
class Weather:
    """City-wide weather. condition is descriptive and never derived."""
    temperature: float
    humidity: float
    wind_speed: float
    rainfall: float
    feels_like: float
    condition: str = "Clear"


@dataclass
class TransitRoute:
    """
    A bus or train route.

    mode selects the perturbation bounds. route_no/origin/destination are bus
    metadata, color is train metadata; either may be empty.
    """
    id: str
    mode: str                     # "bus" | "train"
    name: str
    active_units: int
    delay_percent: int
    efficiency: int
    waypoints: List[Tuple[float, float]] = field(default_factory=list)
    route_no: str = ""
    origin: str = ""
    destination: str = ""
    color: str = ""


@dataclass
class Alert:
    id: str
    severity: str                 # info | warning | critical
    message: str
    source: str
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        return _camel_dict(self)


@dataclass
class Prediction:
    """A forward-looking finding. Derived on every query, never stored."""
    id: str
    title: str
    statement: str
    confidence: float
    severity: str                 # low | medium | high | critical
    time_to_impact: str
    source: str

    def to_dict(self) -> Dict[str, Any]:
        return _camel_dict(self)


@dataclass
class SystemMetrics:
    """
    City-wide summaries. aqi_overall and traffic_index are None when there
    are no zones to average over.
    """
    aqi_overall: Optional[int]
    traffic_index: Optional[int]
    alert_count: int
    weather: Weather


@dataclass
class CitySnapshot:
    """Point-in-time view of every collection held by the state store."""
    dams: List[Dam]
    bridges: List[Bridge]
    transformers: List[Transformer]
    traffic_zones: List[TrafficZone]
    aqi_zones: List[AQIZone]
    weather: Weather
    transit_routes: List[TransitRoute]
    alerts: List[Alert]
    metrics: SystemMetrics
    fast_ticks: int = 0
    slow_ticks: int = 0

    @property
    def bus_routes(self) -> List[TransitRoute]:
        return [r for r in self.transit_routes if r.mode == "bus"]

    @property
    def train_routes(self) -> List[TransitRoute]:
        return [r for r in self.transit_routes if r.mode == "train"]

    def to_dict(self) -> Dict[str, Any]:
        """JSON-friendly rendering with camelCase keys."""
        metrics = self.metrics
        return {
            "dams": [_camel_dict(d) for d in self.dams],
            "bridges": [_camel_dict(b) for b in self.bridges],
            "transformers": [_camel_dict(t) for t in self.transformers],
            "trafficZones": [_camel_dict(z) for z in self.traffic_zones],
            "aqiZones": [_camel_dict(z) for z in self.aqi_zones],
            "weather": _camel_dict(self.weather),
            "transitRoutes": [_camel_dict(r) for r in self.transit_routes],
            "alerts": [a.to_dict() for a in self.alerts],
            "metrics": {
                "aqiOverall": metrics.aqi_overall,
                "trafficIndex": metrics.traffic_index,
                "alertCount": metrics.alert_count,
            },
            "fastTicks": self.fast_ticks,
            "slowTicks": self.slow_ticks,
        }


def field_names(record_type) -> List[str]:
    """Dataclass field names of an entity type."""
    return [f.name for f in fields(record_type)]
