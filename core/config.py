"""
Simulation settings.

Defaults reproduce the dashboard's cadences: fast every 5 time units, slow
every 8. time_unit_seconds scales both (tests shrink it).
"""

import logging
import os
from dataclasses import dataclass, asdict
from typing import Dict, Optional

log = logging.getLogger("core.config")

ENV_PREFIX = "CITY_SIM_"


@dataclass
class SimulationSettings:
    """
    Runtime knobs for a SimulationEngine.

    Attributes:
        fast_interval: Time units between dam/bridge/transformer ticks
        slow_interval: Time units between traffic/AQI/weather/transit ticks
        time_unit_seconds: Wall-clock seconds per time unit
        alert_log_size: Maximum alerts retained, newest first
        seed: RNG seed; None for a nondeterministic run
        status_path: Where the daemon writes its JSON status, if anywhere
    """
    fast_interval: float = 5.0
    slow_interval: float = 8.0
    time_unit_seconds: float = 1.0
    alert_log_size: int = 15
    seed: Optional[int] = None
    status_path: Optional[str] = None

    @property
    def fast_period_seconds(self) -> float:
        return self.fast_interval * self.time_unit_seconds

    @property
    def slow_period_seconds(self) -> float:
        return self.slow_interval * self.time_unit_seconds

    def to_dict(self) -> Dict:
        return asdict(self)

    @classmethod
    def from_env(cls, environ: Optional[Dict[str, str]] = None) -> "SimulationSettings":
        """
        Build settings from CITY_SIM_* environment variables.

        Unparseable values are logged and the default is kept.
        """
        environ = os.environ if environ is None else environ
        settings = cls()
        casts = {
            "fast_interval": float,
            "slow_interval": float,
            "time_unit_seconds": float,
            "alert_log_size": int,
            "seed": int,
            "status_path": str,
        }
        env_names = {"time_unit_seconds": "TIME_UNIT"}

        for attr, cast in casts.items():
            name = ENV_PREFIX + env_names.get(attr, attr.upper())
            raw = environ.get(name)
            if raw is None or raw == "":
                continue
            try:
                value = cast(raw)
            except ValueError:
                log.warning(f"Ignoring invalid {name}={raw!r}")
                continue
            if attr == "alert_log_size" and value < 0:
                log.warning(f"Ignoring negative {name}={raw!r}")
                continue
            setattr(settings, attr, value)
        return settings
