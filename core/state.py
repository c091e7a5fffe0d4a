"""
State Store: the single owner of every entity collection and the alert log.

Collections are replaced wholesale, never edited in place, so a reader always
sees either the previous or the next version of a collection. The alert log is
a bounded deque, newest first.
"""

import logging
import random
import threading
from collections import deque
from typing import Callable, Dict, Iterable, List, Optional

from core import seed
from core.metrics import compute_system_metrics
from core.models import Alert, CitySnapshot

log = logging.getLogger("core.state")

COLLECTIONS = (
    "dams",
    "bridges",
    "transformers",
    "traffic_zones",
    "aqi_zones",
    "weather",
    "transit_routes",
)


class StateStore:
    """
    Holds the latest version of every collection.

    Usage:
        store = StateStore.from_seed()
        store.apply_rules({"dams": update_dam}, rng)
        store.push_alerts([alert])
        snap = store.snapshot()
    """

    DEFAULT_ALERT_LOG_SIZE = 15

    def __init__(
        self,
        dams=None,
        bridges=None,
        transformers=None,
        traffic_zones=None,
        aqi_zones=None,
        weather=None,
        transit_routes=None,
        alerts: Optional[Iterable[Alert]] = None,
        alert_log_size: int = DEFAULT_ALERT_LOG_SIZE,
    ):
        self._lock = threading.RLock()
        self.dams = list(dams or [])
        self.bridges = list(bridges or [])
        self.transformers = list(transformers or [])
        self.traffic_zones = list(traffic_zones or [])
        self.aqi_zones = list(aqi_zones or [])
        self.weather = weather if weather is not None else seed.initial_weather()
        self.transit_routes = list(transit_routes or [])

        # Newest first; appendleft drops the oldest once full
        self._alerts: deque = deque(maxlen=alert_log_size)
        self._alerts.extend(list(alerts or [])[:alert_log_size])

        self.tick_counts: Dict[str, int] = {"fast": 0, "slow": 0}

    @classmethod
    def from_seed(cls, alert_log_size: int = DEFAULT_ALERT_LOG_SIZE) -> "StateStore":
        """Build a store holding a fresh copy of the fixed seed set."""
        return cls(
            dams=seed.initial_dams(),
            bridges=seed.initial_bridges(),
            transformers=seed.initial_transformers(),
            traffic_zones=seed.initial_traffic_zones(),
            aqi_zones=seed.initial_aqi_zones(),
            weather=seed.initial_weather(),
            transit_routes=seed.initial_transit_routes(),
            alerts=seed.initial_alerts(),
            alert_log_size=alert_log_size,
        )

    @property
    def lock(self) -> threading.RLock:
        """Held across a multi-collection write so readers see it whole."""
        return self._lock

    @property
    def alerts(self) -> List[Alert]:
        with self._lock:
            return list(self._alerts)

    @property
    def alert_log_size(self) -> int:
        return self._alerts.maxlen

    def apply_rules(
        self,
        rules: Dict[str, Callable],
        rng: Optional[random.Random] = None,
        cadence: Optional[str] = None,
    ) -> None:
        """
        Run one tick: compute every next collection, then swap them all in.

        Args:
            rules: Collection name -> per-record rule
            rng: Random source handed to each rule
            cadence: Tick counter to bump ("fast" / "slow"), if any
        """
        with self._lock:
            updated = {}
            for name, rule in rules.items():
                current = getattr(self, name)
                if isinstance(current, list):
                    updated[name] = [rule(record, rng) for record in current]
                else:
                    updated[name] = rule(current, rng)

            for name, value in updated.items():
                setattr(self, name, value)

            if cadence is not None:
                self.tick_counts[cadence] = self.tick_counts.get(cadence, 0) + 1

        log.debug(f"Tick {cadence or '-'} updated {', '.join(updated)}")

    def replace_collection(self, name: str, records) -> None:
        """Swap in a whole new collection (or the weather record)."""
        if name not in COLLECTIONS:
            raise KeyError(f"Unknown collection: {name}")
        with self._lock:
            setattr(self, name, list(records) if name != "weather" else records)

    def push_alerts(self, alerts: List[Alert]) -> None:
        """
        Prepend alerts to the log, keeping their given order at the front.

        The log keeps only the most recent alert_log_size entries.
        """
        with self._lock:
            self._alerts.extendleft(reversed(list(alerts)))

    def snapshot(self) -> CitySnapshot:
        """Consistent view of all collections with freshly computed metrics."""
        with self._lock:
            alerts = list(self._alerts)
            return CitySnapshot(
                dams=list(self.dams),
                bridges=list(self.bridges),
                transformers=list(self.transformers),
                traffic_zones=list(self.traffic_zones),
                aqi_zones=list(self.aqi_zones),
                weather=self.weather,
                transit_routes=list(self.transit_routes),
                alerts=alerts,
                metrics=compute_system_metrics(
                    self.aqi_zones, self.traffic_zones, alerts, self.weather
                ),
                fast_ticks=self.tick_counts.get("fast", 0),
                slow_ticks=self.tick_counts.get("slow", 0),
            )
