"""
SimulationEngine: the explicit object that owns a simulated city.

It wires the state store, the update rules and the scheduler together and is
the only surface external consumers talk to:

- snapshot()                    read accessor (collections, alerts, metrics)
- start() / stop()              scheduler lifecycle, both idempotent
- apply_external_update(patch)  synchronous merge of a partial update
- ingest_document(...)          async path from the document-analysis pipeline
- predictions()                 derived findings over the current state

Engines are independent; two engines never share state.
"""

import asyncio
import logging
import random
from typing import Any, Callable, Dict, List, Optional

from core.config import SimulationSettings
from core.merger import MergeReport, apply_external_update
from core.models import CitySnapshot, Prediction
from core.rules import FAST_RULES, SLOW_RULES
from core.scheduler import MERGE, TICK, Cadence, Command, Scheduler
from core.state import StateStore

log = logging.getLogger("core.engine")


class SimulationEngine:
    """
    Owns a StateStore and drives it on a fast and a slow cadence.

    Usage:
        engine = SimulationEngine(SimulationSettings(seed=7))
        engine.start()               # inside a running event loop
        snap = engine.snapshot()
        engine.apply_external_update({"dams": [{"id": "dam_03", "waterLevel": 99}]})
        engine.stop()
        await engine.wait_closed()
    """

    def __init__(
        self,
        settings: Optional[SimulationSettings] = None,
        store: Optional[StateStore] = None,
        rng: Optional[random.Random] = None,
    ):
        self.settings = settings or SimulationSettings()
        self.store = store or StateStore.from_seed(alert_log_size=self.settings.alert_log_size)
        self.rng = rng or random.Random(self.settings.seed)

        self.cadence_rules: Dict[str, Dict[str, Callable]] = {
            "fast": FAST_RULES,
            "slow": SLOW_RULES,
        }
        self.scheduler = Scheduler(
            self._handle,
            [
                Cadence("fast", self.settings.fast_period_seconds),
                Cadence("slow", self.settings.slow_period_seconds),
            ],
        )
        self._listeners: List[Callable[[str], None]] = []

    # ── Lifecycle ────────────────────────────────────────────────────────

    @property
    def running(self) -> bool:
        return self.scheduler.running

    def start(self) -> None:
        """Start both cadences. Must be called from a running event loop."""
        self.scheduler.start()

    def stop(self) -> None:
        """Stop both cadences. No state changes are applied afterwards."""
        self.scheduler.stop()

    async def wait_closed(self) -> None:
        await self.scheduler.wait_closed()

    # ── Reads ────────────────────────────────────────────────────────────

    def snapshot(self) -> CitySnapshot:
        return self.store.snapshot()

    def predictions(self) -> List[Prediction]:
        from inference.predictions import derive_predictions

        snap = self.snapshot()
        return derive_predictions(snap.dams, snap.bridges, snap.transformers)

    def add_listener(self, callback: Callable[[str], None]) -> None:
        """Register callback(cadence_name), called after every applied tick."""
        self._listeners.append(callback)

    # ── Writes ───────────────────────────────────────────────────────────

    def tick(self, cadence: str) -> None:
        """Run one cadence's rules immediately."""
        rules = self.cadence_rules.get(cadence)
        if rules is None:
            log.warning(f"Unknown cadence {cadence!r}, ignoring tick")
            return
        self.store.apply_rules(rules, self.rng, cadence=cadence)
        for listener in list(self._listeners):
            try:
                listener(cadence)
            except Exception as e:
                log.warning(f"Tick listener failed: {e}")

    def apply_external_update(self, update: Dict[str, Any]) -> MergeReport:
        """Merge a partial update now. Unknown ids and fields are ignored."""
        return apply_external_update(self.store, update)

    async def submit_external_update(self, update: Dict[str, Any]) -> Optional[MergeReport]:
        """
        Merge through the command queue when running, directly when idle.

        Returns None if the engine was stopped before the merge was applied.
        """
        token = self.scheduler.token
        if token is None:
            return self.apply_external_update(update)

        future = asyncio.get_running_loop().create_future()
        self.scheduler.submit(Command(MERGE, token, payload=update, future=future))
        return await future

    async def ingest_document(self, analyzer, file_name: str) -> Optional[MergeReport]:
        """
        Run the document analyzer off the event loop and merge its update.

        Ticks keep running while the analysis is outstanding. If the engine
        is stopped before the analysis returns, the result is discarded.

        Args:
            analyzer: Object with analyze(file_name, snapshot) -> AnalysisResult | None
            file_name: Name of the uploaded document

        Returns:
            MergeReport, or None when nothing was merged
        """
        token = self.scheduler.token
        result = await asyncio.to_thread(analyzer.analyze, file_name, self.snapshot())
        if result is None:
            log.info(f"No structured update produced for {file_name}")
            return None

        if token is not None and token.cancelled:
            log.info(f"Engine stopped during analysis of {file_name}; discarding update")
            return None
        return await self.submit_external_update(result.update)

    # ── Command handling ─────────────────────────────────────────────────

    def _handle(self, command: Command):
        if command.kind == TICK:
            self.tick(command.cadence)
            return None
        if command.kind == MERGE:
            return self.apply_external_update(command.payload)
        log.warning(f"Unknown command kind {command.kind!r}")
        return None
