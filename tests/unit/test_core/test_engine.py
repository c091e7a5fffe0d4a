import asyncio
import time
from unittest.mock import MagicMock

import pytest
from core.config import SimulationSettings
from core.engine import SimulationEngine
from inference.document_analyzer import AnalysisResult


def fast_settings(**overrides):
    params = dict(fast_interval=1, slow_interval=1.6, time_unit_seconds=0.01, seed=1)
    params.update(overrides)
    return SimulationSettings(**params)


@pytest.fixture
def engine():
    return SimulationEngine(SimulationSettings(seed=7))


def test_tick_fast_only_touches_fast_collections(engine):
    before = engine.snapshot()
    engine.tick("fast")
    after = engine.snapshot()

    assert after.fast_ticks == 1
    assert after.slow_ticks == 0
    assert after.dams != before.dams
    assert after.traffic_zones == before.traffic_zones
    assert after.weather == before.weather


def test_tick_slow(engine):
    before = engine.snapshot()
    engine.tick("slow")
    after = engine.snapshot()
    assert after.slow_ticks == 1
    assert after.traffic_zones != before.traffic_zones
    assert after.dams == before.dams


def test_unknown_cadence_is_noop(engine):
    before = engine.snapshot()
    engine.tick("hourly")
    assert engine.snapshot() == before


def test_seeded_engines_are_reproducible():
    a = SimulationEngine(SimulationSettings(seed=42))
    b = SimulationEngine(SimulationSettings(seed=42))
    for _ in range(10):
        a.tick("fast")
        b.tick("fast")
        a.tick("slow")
        b.tick("slow")
    assert a.snapshot().dams == b.snapshot().dams
    assert a.snapshot().aqi_zones == b.snapshot().aqi_zones


def test_listeners_called_and_failures_contained(engine):
    good = MagicMock()
    bad = MagicMock(side_effect=RuntimeError("listener broke"))
    engine.add_listener(bad)
    engine.add_listener(good)

    engine.tick("fast")

    bad.assert_called_once_with("fast")
    good.assert_called_once_with("fast")


def test_apply_external_update(engine):
    report = engine.apply_external_update({"dams": [{"id": "dam_03", "waterLevel": 99}]})
    assert report.updated == {"dams": ["dam_03"]}
    assert engine.snapshot().dams[2].water_level == 99


def test_predictions_from_seed_state(engine):
    preds = engine.predictions()
    assert [p.id for p in preds] == [
        "dam_pred_dam_03",
        "bridge_pred_bridge_02",
        "tf_pred_tf_03",
        "dam_pred_dam_01",
        "tf_pred_tf_01",
    ]


def test_running_engine_ticks_and_stops_cleanly():
    async def scenario():
        engine = SimulationEngine(fast_settings())
        engine.start()
        await asyncio.sleep(0.1)
        engine.stop()
        frozen = engine.snapshot()
        # Wait past two slow intervals
        await asyncio.sleep(2 * engine.settings.slow_period_seconds + 0.05)
        await engine.wait_closed()
        return frozen, engine.snapshot()

    frozen, later = asyncio.run(scenario())
    assert frozen.fast_ticks > 0
    assert frozen.slow_ticks > 0
    assert later == frozen


def test_external_update_routed_through_queue_while_running():
    async def scenario():
        engine = SimulationEngine(fast_settings(fast_interval=100, slow_interval=100))
        engine.start()
        report = await asyncio.wait_for(
            engine.submit_external_update({"bridges": [{"id": "bridge_01", "loadPercent": 88}]}), 1
        )
        engine.stop()
        await engine.wait_closed()
        return engine, report

    engine, report = asyncio.run(scenario())
    assert report.updated == {"bridges": ["bridge_01"]}
    assert engine.snapshot().bridges[0].load_percent == 88


def test_submit_external_update_when_idle_applies_directly(engine):
    report = asyncio.run(engine.submit_external_update({"weather": {"humidity": 90}}))
    assert report.weather_fields == ["humidity"]
    assert engine.snapshot().weather.humidity == 90


def test_ingest_document_merges_analysis(engine):
    analyzer = MagicMock()
    analyzer.analyze.return_value = AnalysisResult(
        update={"transformers": [{"id": "tf_02", "loadPercent": 97}],
                "alerts": [{"id": "new_01", "severity": "critical", "message": "Overload"}]},
        explanation="Overload found",
        raw_text="{}",
    )

    report = asyncio.run(engine.ingest_document(analyzer, "grid_report.pdf"))

    assert report.updated == {"transformers": ["tf_02"]}
    assert engine.snapshot().transformers[1].load_percent == 97
    assert engine.snapshot().alerts[0].id == "new_01"
    file_name, snapshot = analyzer.analyze.call_args.args
    assert file_name == "grid_report.pdf"
    assert len(snapshot.dams) == 3


def test_ingest_document_without_result(engine):
    analyzer = MagicMock()
    analyzer.analyze.return_value = None
    before = engine.snapshot()
    assert asyncio.run(engine.ingest_document(analyzer, "blank.pdf")) is None
    assert engine.snapshot() == before


class SlowAnalyzer:
    def __init__(self, delay):
        self.delay = delay

    def analyze(self, file_name, snapshot):
        time.sleep(self.delay)
        return AnalysisResult(update={"dams": [{"id": "dam_01", "waterLevel": 1}]},
                              explanation="", raw_text="")


def test_ticks_continue_while_analysis_outstanding():
    async def scenario():
        engine = SimulationEngine(fast_settings(slow_interval=100))
        engine.start()
        ticks_before = engine.snapshot().fast_ticks
        report = await engine.ingest_document(SlowAnalyzer(0.1), "flood.pdf")
        ticks_after = engine.snapshot().fast_ticks
        engine.stop()
        await engine.wait_closed()
        return ticks_before, ticks_after, report

    before, after, report = asyncio.run(scenario())
    assert after > before
    assert report.updated == {"dams": ["dam_01"]}


def test_analysis_finishing_after_stop_is_discarded():
    async def scenario():
        engine = SimulationEngine(fast_settings(fast_interval=100, slow_interval=100))
        engine.start()
        pending = asyncio.ensure_future(engine.ingest_document(SlowAnalyzer(0.1), "flood.pdf"))
        await asyncio.sleep(0.02)
        engine.stop()
        report = await pending
        await engine.wait_closed()
        return engine, report

    engine, report = asyncio.run(scenario())
    assert report is None
    assert engine.snapshot().dams[0].water_level == 72
