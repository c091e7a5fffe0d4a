"""
Entity update rules.

Each rule is a pure transform (previous record, rng) -> new record. Coupling
between metrics is a fixed heuristic:

- Dam: rainfall forecast above 20mm nudges overflow risk up, otherwise down.
- Bridge: load above 85% adds to the vibration index.
- Transformer: load above 85% nudges failure probability up, otherwise down.

The fast cadence drives dams, bridges and transformers; the slow cadence drives
traffic, air quality, weather and transit.
"""

import random
from dataclasses import replace
from typing import Callable, Dict, Optional

from core.classifiers import (
    derive_aqi_category,
    derive_congestion,
    derive_risk_severity,
    derive_status,
)
from core.models import AQIZone, Bridge, Dam, TrafficZone, Transformer, TransitRoute, Weather
from core.random_walk import fluctuate, fluctuate_float, round_half_up

# Coupling constants
RAINFALL_TRIGGER_MM = 20
OVERFLOW_NUDGE_UP = 0.01
OVERFLOW_NUDGE_DOWN = -0.005
HIGH_LOAD_PERCENT = 85
VIBRATION_LOAD_INCREMENT = 0.02
FAILURE_NUDGE_UP = 0.02
FAILURE_NUDGE_DOWN = -0.01

# Classifier thresholds (warning, critical)
DAM_STATUS_THRESHOLDS = (35, 65)          # overflow risk as percent
BRIDGE_STATUS_THRESHOLDS = (75, 90)       # load percent
TRANSFORMER_STATUS_THRESHOLDS = (0.45, 0.75)

# (delay magnitude, delay bounds, efficiency magnitude, efficiency bounds)
TRANSIT_BOUNDS = {
    "bus": (2, (0, 60), 1, (40, 100)),
    "train": (1.5, (0, 50), 1, (50, 100)),
}


def dam_status(overflow_risk: float) -> str:
    """Status of a dam from its overflow risk (0-1)."""
    warn_at, crit_at = DAM_STATUS_THRESHOLDS
    return derive_status(round(overflow_risk * 100, 6), warn_at, crit_at)


def update_dam(dam: Dam, rng: Optional[random.Random] = None) -> Dam:
    water_level = fluctuate(dam.water_level, 1.2, 0, 100, rng=rng)
    rainfall_forecast = fluctuate(dam.rainfall_forecast, 1, 0, 100, rng=rng)
    stress_index = fluctuate_float(dam.stress_index, 0.02, 0, 1, rng=rng)

    nudge = OVERFLOW_NUDGE_UP if rainfall_forecast > RAINFALL_TRIGGER_MM else OVERFLOW_NUDGE_DOWN
    overflow_risk = min(1, fluctuate_float(dam.overflow_risk + nudge, 0.02, 0, 1, rng=rng))
    confidence = fluctuate_float(dam.prediction_confidence, 0.01, 0.5, 0.99, rng=rng)

    return replace(
        dam,
        water_level=water_level,
        stress_index=stress_index,
        rainfall_forecast=rainfall_forecast,
        overflow_risk=overflow_risk,
        prediction_confidence=confidence,
        status=dam_status(overflow_risk),
    )


def update_bridge(bridge: Bridge, rng: Optional[random.Random] = None) -> Bridge:
    load_percent = fluctuate(bridge.load_percent, 2, 0, 100, rng=rng)
    vibration = fluctuate_float(bridge.vibration_index, 0.03, 0, 1, rng=rng)
    if load_percent > HIGH_LOAD_PERCENT:
        vibration += VIBRATION_LOAD_INCREMENT
    # Severity reads the vibration before the final clamp
    risk_severity = derive_risk_severity(vibration)
    confidence = fluctuate_float(bridge.prediction_confidence, 0.01, 0.6, 0.99, rng=rng)

    warn_at, crit_at = BRIDGE_STATUS_THRESHOLDS
    return replace(
        bridge,
        load_percent=load_percent,
        vibration_index=min(1, vibration),
        risk_severity=risk_severity,
        prediction_confidence=confidence,
        status=derive_status(load_percent, warn_at, crit_at),
    )


def update_transformer(tf: Transformer, rng: Optional[random.Random] = None) -> Transformer:
    load_percent = fluctuate(tf.load_percent, 1.5, 0, 100, rng=rng)
    temperature = fluctuate(tf.temperature_celsius, 1.5, 20, 120, rng=rng)

    nudge = FAILURE_NUDGE_UP if load_percent > HIGH_LOAD_PERCENT else FAILURE_NUDGE_DOWN
    failure_probability = fluctuate_float(tf.failure_probability + nudge, 0.02, 0, 1, rng=rng)
    confidence = fluctuate_float(tf.prediction_confidence, 0.01, 0.6, 0.99, rng=rng)

    warn_at, crit_at = TRANSFORMER_STATUS_THRESHOLDS
    return replace(
        tf,
        load_percent=load_percent,
        temperature_celsius=temperature,
        failure_probability=failure_probability,
        prediction_confidence=confidence,
        status=derive_status(failure_probability, warn_at, crit_at),
    )


def update_traffic_zone(zone: TrafficZone, rng: Optional[random.Random] = None) -> TrafficZone:
    intensity = fluctuate(zone.intensity, 3, 0, 100, rng=rng)
    return replace(zone, intensity=intensity, congestion_level=derive_congestion(intensity))


def update_aqi_zone(zone: AQIZone, rng: Optional[random.Random] = None) -> AQIZone:
    aqi = int(round_half_up(fluctuate(zone.aqi, 4, 0, 500, rng=rng)))
    pm25 = int(round_half_up(fluctuate(zone.pm25, 2, 0, 300, rng=rng)))
    return replace(zone, aqi=aqi, pm25=pm25, category=derive_aqi_category(aqi))


def update_weather(weather: Weather, rng: Optional[random.Random] = None) -> Weather:
    return replace(
        weather,
        temperature=round_half_up(fluctuate(weather.temperature, 0.3, 15, 45, rng=rng)),
        humidity=round_half_up(fluctuate(weather.humidity, 1, 20, 100, rng=rng)),
        wind_speed=round_half_up(fluctuate(weather.wind_speed, 0.5, 0, 80, rng=rng)),
        rainfall=round_half_up(fluctuate(weather.rainfall, 0.2, 0, 50, rng=rng), 1),
        feels_like=round_half_up(fluctuate(weather.feels_like, 0.3, 15, 50, rng=rng)),
    )


def update_transit_route(route: TransitRoute, rng: Optional[random.Random] = None) -> TransitRoute:
    delay_step, (delay_lo, delay_hi), eff_step, (eff_lo, eff_hi) = TRANSIT_BOUNDS.get(
        route.mode, TRANSIT_BOUNDS["bus"]
    )
    return replace(
        route,
        delay_percent=int(round_half_up(fluctuate(route.delay_percent, delay_step, delay_lo, delay_hi, rng=rng))),
        efficiency=int(round_half_up(fluctuate(route.efficiency, eff_step, eff_lo, eff_hi, rng=rng))),
    )


# Collection name -> per-record rule, grouped by cadence
FAST_RULES: Dict[str, Callable] = {
    "dams": update_dam,
    "bridges": update_bridge,
    "transformers": update_transformer,
}

SLOW_RULES: Dict[str, Callable] = {
    "traffic_zones": update_traffic_zone,
    "aqi_zones": update_aqi_zone,
    "weather": update_weather,
    "transit_routes": update_transit_route,
}
