"""
Threshold classifiers that turn metrics into ordinal labels.
"""

NORMAL = "normal"
WARNING = "warning"
CRITICAL = "critical"


def derive_status(value: float, warn_at: float, crit_at: float) -> str:
    """
    Map a value to normal / warning / critical.

    Both thresholds are inclusive. Critical is checked first since a value
    past crit_at is also past warn_at.
    """
    if value >= crit_at:
        return CRITICAL
    if value >= warn_at:
        return WARNING
    return NORMAL


def derive_congestion(intensity: float) -> str:
    """Traffic intensity (0-100) -> congestion level. Breakpoints 30/55/75."""
    if intensity < 30:
        return "low"
    if intensity < 55:
        return "moderate"
    if intensity < 75:
        return "high"
    return "severe"


def derive_aqi_category(aqi: float) -> str:
    """AQI -> category. Upper bounds 50/100/150/200 belong to the lower band."""
    if aqi <= 50:
        return "Good"
    if aqi <= 100:
        return "Moderate"
    if aqi <= 150:
        return "Unhealthy"
    if aqi <= 200:
        return "Very Unhealthy"
    return "Hazardous"


def derive_risk_severity(vibration_index: float) -> str:
    """Bridge vibration (0-1) -> risk severity. Strictly above 0.45 / 0.7."""
    if vibration_index > 0.7:
        return "high"
    if vibration_index > 0.45:
        return "medium"
    return "low"
