import pytest
from core.classifiers import (
    derive_status,
    derive_congestion,
    derive_aqi_category,
    derive_risk_severity,
)
from core.rules import dam_status


@pytest.mark.parametrize("value,expected", [
    (34.9, "normal"),
    (35.0, "warning"),
    (64.9, "warning"),
    (65.0, "critical"),
    (100.0, "critical"),
    (0.0, "normal"),
])
def test_derive_status_boundaries(value, expected):
    assert derive_status(value, 35, 65) == expected


def test_derive_status_checks_critical_first():
    """A value past both thresholds is critical, not warning."""
    assert derive_status(0.9, 0.45, 0.75) == "critical"


@pytest.mark.parametrize("risk,expected", [
    (0.349, "normal"),
    (0.35, "warning"),
    (0.649, "warning"),
    (0.65, "critical"),
])
def test_dam_status_from_overflow_risk(risk, expected):
    assert dam_status(risk) == expected


@pytest.mark.parametrize("intensity,expected", [
    (0, "low"),
    (29.9, "low"),
    (30, "moderate"),
    (54.9, "moderate"),
    (55, "high"),
    (74.9, "high"),
    (75, "severe"),
    (100, "severe"),
])
def test_congestion_breakpoints(intensity, expected):
    assert derive_congestion(intensity) == expected


@pytest.mark.parametrize("aqi,expected", [
    (0, "Good"),
    (50, "Good"),
    (51, "Moderate"),
    (100, "Moderate"),
    (101, "Unhealthy"),
    (150, "Unhealthy"),
    (151, "Very Unhealthy"),
    (200, "Very Unhealthy"),
    (201, "Hazardous"),
    (500, "Hazardous"),
])
def test_aqi_category_breakpoints(aqi, expected):
    assert derive_aqi_category(aqi) == expected


@pytest.mark.parametrize("vibration,expected", [
    (0.2, "low"),
    (0.45, "low"),
    (0.46, "medium"),
    (0.7, "medium"),
    (0.71, "high"),
])
def test_risk_severity_breakpoints(vibration, expected):
    assert derive_risk_severity(vibration) == expected
