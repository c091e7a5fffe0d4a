"""
City-wide summary metrics. Recomputed from the collections on every read.
"""

import logging
from typing import Iterable, List, Optional

import numpy as np

from core.models import AQIZone, Alert, SystemMetrics, TrafficZone, Weather
from core.random_walk import round_half_up

log = logging.getLogger("core.metrics")


def _rounded_mean(values: List[float]) -> Optional[int]:
    """Mean rounded to an integer, or None when there is nothing to average."""
    if not values:
        return None
    return int(round_half_up(float(np.mean(values))))


def overall_aqi(zones: Iterable[AQIZone]) -> Optional[int]:
    return _rounded_mean([z.aqi for z in zones])


def traffic_index(zones: Iterable[TrafficZone]) -> Optional[int]:
    return _rounded_mean([z.intensity for z in zones])


def active_alert_count(alerts: Iterable[Alert]) -> int:
    """Alerts that are not purely informational."""
    return sum(1 for a in alerts if a.severity != "info")


def compute_system_metrics(
    aqi_zones: List[AQIZone],
    traffic_zones: List[TrafficZone],
    alerts: List[Alert],
    weather: Weather,
) -> SystemMetrics:
    metrics = SystemMetrics(
        aqi_overall=overall_aqi(aqi_zones),
        traffic_index=traffic_index(traffic_zones),
        alert_count=active_alert_count(alerts),
        weather=weather,
    )
    if metrics.aqi_overall is None or metrics.traffic_index is None:
        log.debug("No zone data for one or more aggregates")
    return metrics
