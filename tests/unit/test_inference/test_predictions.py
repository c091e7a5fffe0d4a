from dataclasses import replace

import pytest
from core.models import Bridge, Dam, Transformer
from inference.predictions import derive_predictions


def dam(dam_id, risk, **kw):
    base = Dam(dam_id, f"Dam {dam_id}", 19.0, 72.9, water_level=70, stress_index=0.5,
               rainfall_forecast=22, overflow_risk=risk, prediction_confidence=0.8)
    return replace(base, **kw)


def bridge(bridge_id, load):
    return Bridge(bridge_id, f"Bridge {bridge_id}", 19.0, 72.9, load_percent=load,
                  vibration_index=0.5, prediction_confidence=0.85)


def transformer(tf_id, fp):
    return Transformer(tf_id, f"TF {tf_id}", 19.0, 72.9, load_percent=80,
                       failure_probability=fp, temperature_celsius=70, prediction_confidence=0.9)


def test_mixed_scenario_ordering():
    """Dams at 0.80/0.10/0.40, bridge at 95%, transformer at 0.50."""
    preds = derive_predictions(
        [dam("d1", 0.80), dam("d2", 0.10), dam("d3", 0.40)],
        [bridge("b1", 95)],
        [transformer("t1", 0.50)],
    )

    assert [(p.id, p.severity) for p in preds] == [
        ("dam_pred_d1", "critical"),
        ("bridge_pred_b1", "critical"),
        ("dam_pred_d3", "high"),
        ("tf_pred_t1", "high"),
    ]
    assert "dam_pred_d2" not in {p.id for p in preds}


def test_empty_inputs():
    assert derive_predictions([], [], []) == []


@pytest.mark.parametrize("risk,severity,impact", [
    (0.80, "critical", "~3h"),   # round(6 - 3.2) = 3
    (0.66, "critical", "~3h"),   # round(6 - 2.64) = 3
    (0.65, "high", "~11h"),      # round(24 - 13) = 11
    (0.40, "high", "~16h"),      # round(24 - 8) = 16
    (0.36, "high", "~17h"),      # round(24 - 7.2) = 17
])
def test_dam_severity_and_time_to_impact(risk, severity, impact):
    [pred] = derive_predictions([dam("d", risk)], [], [])
    assert pred.severity == severity
    assert pred.time_to_impact == impact
    assert pred.source == "Hydrological Model"


def test_dam_trigger_is_strict():
    assert derive_predictions([dam("d", 0.35)], [], []) == []


@pytest.mark.parametrize("load,expected", [
    (75, None),
    (76, ("medium", "~12-24h")),
    (90, ("medium", "~12-24h")),
    (91, ("critical", "~2-4h")),
])
def test_bridge_rule(load, expected):
    preds = derive_predictions([], [bridge("b", load)], [])
    if expected is None:
        assert preds == []
    else:
        assert (preds[0].severity, preds[0].time_to_impact) == expected


@pytest.mark.parametrize("fp,expected", [
    (0.45, None),
    (0.46, ("high", "~8-12h")),
    (0.75, ("high", "~8-12h")),
    (0.76, ("critical", "~1-3h")),
])
def test_transformer_rule(fp, expected):
    preds = derive_predictions([], [], [transformer("t", fp)])
    if expected is None:
        assert preds == []
    else:
        assert (preds[0].severity, preds[0].time_to_impact) == expected


def test_prediction_carries_entity_confidence_and_text():
    [pred] = derive_predictions([], [bridge("b", 80)], [])
    assert pred.confidence == 0.85
    assert pred.title == "Bridge b Load Stress"
    assert "80%" in pred.statement
    assert "50%" in pred.statement  # vibration index as percent


def test_ties_keep_generation_order():
    preds = derive_predictions(
        [dam("d1", 0.70)],
        [bridge("b1", 95)],
        [transformer("t1", 0.90)],
    )
    assert [p.id for p in preds] == ["dam_pred_d1", "bridge_pred_b1", "tf_pred_t1"]
