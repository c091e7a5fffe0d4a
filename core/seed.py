"""
Fixed seed set for the Mumbai simulation.

Factory functions return fresh records on every call so independent engines
never share state.
"""

from datetime import datetime, timedelta
from typing import List

from core.models import AQIZone, Alert, Bridge, Dam, TrafficZone, Transformer, TransitRoute, Weather

MUMBAI_CENTER = (19.076, 72.877)


def initial_dams() -> List[Dam]:
    return [
        Dam("dam_01", "Vihar Lake Dam", 19.132, 72.921, water_level=72, stress_index=0.63,
            rainfall_forecast=18, overflow_risk=0.42, prediction_confidence=0.81, status="warning"),
        Dam("dam_02", "Tulsi Reservoir", 19.097, 72.895, water_level=45, stress_index=0.31,
            rainfall_forecast=8, overflow_risk=0.15, prediction_confidence=0.88, status="normal"),
        Dam("dam_03", "Powai Lake", 19.12, 72.908, water_level=88, stress_index=0.82,
            rainfall_forecast=24, overflow_risk=0.71, prediction_confidence=0.76, status="critical"),
    ]


def initial_bridges() -> List[Bridge]:
    return [
        Bridge("bridge_01", "Bandra-Worli Sea Link", 19.04, 72.818, load_percent=67,
               vibration_index=0.34, risk_severity="low", prediction_confidence=0.85, status="normal"),
        Bridge("bridge_02", "Mahim Causeway", 19.044, 72.842, load_percent=91,
               vibration_index=0.78, risk_severity="high", prediction_confidence=0.79, status="critical"),
        Bridge("bridge_03", "Vashi Bridge", 19.076, 73.0, load_percent=52,
               vibration_index=0.21, risk_severity="low", prediction_confidence=0.92, status="normal"),
    ]


def initial_transformers() -> List[Transformer]:
    return [
        Transformer("tf_01", "Dharavi Grid Station", 19.047, 72.857, load_percent=88,
                    failure_probability=0.67, temperature_celsius=78, prediction_confidence=0.83,
                    status="warning"),
        Transformer("tf_02", "BKC Substation", 19.066, 72.866, load_percent=61,
                    failure_probability=0.22, temperature_celsius=54, prediction_confidence=0.91,
                    status="normal"),
        Transformer("tf_03", "Kurla Power Hub", 19.072, 72.879, load_percent=95,
                    failure_probability=0.89, temperature_celsius=94, prediction_confidence=0.77,
                    status="critical"),
    ]


def initial_traffic_zones() -> List[TrafficZone]:
    return [
        TrafficZone("tz_01", "Western Express Highway", 19.113, 72.862, 82, "severe"),
        TrafficZone("tz_02", "Eastern Express Highway", 19.09, 72.893, 65, "high"),
        TrafficZone("tz_03", "SV Road - Bandra", 19.054, 72.835, 55, "high"),
        TrafficZone("tz_04", "LBS Marg", 19.072, 72.874, 41, "moderate"),
        TrafficZone("tz_05", "Marine Drive", 18.944, 72.824, 28, "low"),
        TrafficZone("tz_06", "Dadar TT", 19.019, 72.843, 76, "severe"),
    ]


def initial_aqi_zones() -> List[AQIZone]:
    return [
        AQIZone("aq_01", "Andheri", 19.119, 72.847, 163, "Very Unhealthy", 68),
        AQIZone("aq_02", "Bandra", 19.054, 72.840, 112, "Unhealthy", 45),
        AQIZone("aq_03", "Colaba", 18.906, 72.815, 87, "Moderate", 34),
        AQIZone("aq_04", "Kurla", 19.072, 72.879, 198, "Very Unhealthy", 89),
        AQIZone("aq_05", "Borivali", 19.228, 72.859, 74, "Moderate", 28),
        AQIZone("aq_06", "Thane", 19.218, 72.978, 145, "Unhealthy", 62),
    ]


def initial_weather() -> Weather:
    return Weather(temperature=31, humidity=78, wind_speed=14, rainfall=3.2,
                   feels_like=36, condition="Partly Cloudy")


def initial_transit_routes() -> List[TransitRoute]:
    return [
        TransitRoute(
            "bus_01", "bus", "BEST-312 Borivali - Churchgate", active_units=14,
            delay_percent=18, efficiency=76, route_no="BEST-312",
            origin="Borivali", destination="Churchgate",
            waypoints=[(19.228, 72.859), (19.17, 72.855), (19.119, 72.847),
                       (19.054, 72.840), (18.944, 72.824), (18.921, 72.831)],
        ),
        TransitRoute(
            "bus_02", "bus", "BEST-451 Kurla - BKC", active_units=8,
            delay_percent=7, efficiency=89, route_no="BEST-451",
            origin="Kurla", destination="BKC",
            waypoints=[(19.072, 72.879), (19.066, 72.866), (19.06, 72.855)],
        ),
        TransitRoute(
            "train_wr", "train", "Western Railway", active_units=42,
            delay_percent=12, efficiency=84, color="#06b6d4",
            waypoints=[(19.228, 72.859), (19.197, 72.854), (19.17, 72.855),
                       (19.139, 72.849), (19.119, 72.847), (19.082, 72.838),
                       (19.054, 72.840), (19.028, 72.836), (18.944, 72.824)],
        ),
        TransitRoute(
            "train_cr", "train", "Central Railway", active_units=38,
            delay_percent=9, efficiency=88, color="#f59e0b",
            waypoints=[(19.218, 72.978), (19.17, 72.941), (19.12, 72.908),
                       (19.072, 72.879), (19.04, 72.856), (18.979, 72.834),
                       (18.944, 72.824)],
        ),
    ]


def initial_alerts(now: datetime = None) -> List[Alert]:
    """Seed alerts, newest first."""
    now = now or datetime.now()
    return [
        Alert("alt_01", "critical", "Powai Lake overflow risk elevated to 71%",
              "Dam Monitoring", now),
        Alert("alt_02", "critical", "Kurla Power Hub at 95% load - failure imminent",
              "Transformer Grid", now - timedelta(minutes=2)),
        Alert("alt_03", "warning", "Mahim Causeway vibration index elevated",
              "Bridge Monitoring", now - timedelta(minutes=5)),
        Alert("alt_04", "warning", "AQI in Andheri & Kurla exceed safe limits",
              "Air Quality", now - timedelta(minutes=10)),
        Alert("alt_05", "info", "Western Railway delay tracking active",
              "Transport", now - timedelta(minutes=15)),
    ]
