"""
City Telemetry Daemon: runs the simulation engine until interrupted.

Features:
- Fast (dams, bridges, transformers) and slow (traffic, AQI, weather, transit)
  cadences on one event loop
- One-line summary per tick
- Optional JSON status file for external readers
- Optional one-shot document analysis at startup
- Graceful shutdown on SIGINT/SIGTERM
"""

import argparse
import asyncio
import json
import logging
import os
import signal
import time
from typing import List, Optional

from core import SimulationEngine, SimulationSettings

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s │ %(name)-20s │ %(levelname)-8s │ %(message)s',
    datefmt='%H:%M:%S',
    handlers=[
        logging.StreamHandler()
    ]
)
log = logging.getLogger("daemon")


class DaemonState:
    """Uptime bookkeeping for the summary line."""

    def __init__(self):
        self.start_time = time.time()

    def get_uptime_str(self) -> str:
        elapsed = time.time() - self.start_time
        hours, remainder = divmod(int(elapsed), 3600)
        minutes, seconds = divmod(remainder, 60)
        return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def write_status(engine: SimulationEngine, path: str, state: DaemonState) -> None:
    """Write snapshot + predictions as JSON. Failures are logged, not raised."""
    status = engine.snapshot().to_dict()
    status["predictions"] = [p.to_dict() for p in engine.predictions()]
    status["running"] = engine.running
    status["uptime"] = state.get_uptime_str()

    tmp_path = f"{path}.tmp"
    try:
        with open(tmp_path, "w") as f:
            json.dump(status, f, indent=2)
        os.replace(tmp_path, path)
    except OSError as e:
        log.debug(f"Failed to write status file: {e}")


def make_tick_logger(engine: SimulationEngine, state: DaemonState, status_path: Optional[str]):
    def on_tick(cadence: str) -> None:
        snap = engine.snapshot()
        metrics = snap.metrics
        critical = sum(1 for p in engine.predictions() if p.severity == "critical")
        log.info(
            f"[{cadence:<4}] fast={snap.fast_ticks} slow={snap.slow_ticks} │ "
            f"AQI={metrics.aqi_overall} traffic={metrics.traffic_index} │ "
            f"alerts={metrics.alert_count} critical_predictions={critical} │ "
            f"up {state.get_uptime_str()}"
        )
        if status_path:
            write_status(engine, status_path, state)
    return on_tick


async def run_daemon(settings: SimulationSettings, analyze: Optional[str] = None) -> None:
    """Run the engine until a shutdown signal arrives."""
    log.info("┌────────────────────────────────────────────────────────────┐")
    log.info("│        CITY TELEMETRY DAEMON - LIVE SIMULATION MODE        │")
    log.info("└────────────────────────────────────────────────────────────┘")

    state = DaemonState()
    engine = SimulationEngine(settings)
    engine.add_listener(make_tick_logger(engine, state, settings.status_path))

    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, shutdown.set)
        except NotImplementedError:
            # Windows event loops have no signal handlers
            pass

    engine.start()
    log.info(
        f"Cadences: fast every {settings.fast_period_seconds:g}s, "
        f"slow every {settings.slow_period_seconds:g}s"
    )

    if analyze:
        from inference.document_analyzer import DocumentAnalyzer

        report = await engine.ingest_document(DocumentAnalyzer(), analyze)
        if report is not None:
            log.info(f"Document {analyze} merged: {report.updated or 'no entity changes'}")

    try:
        await shutdown.wait()
    finally:
        log.info("┌────────────────────────────────────────┐")
        log.info("│      SHUTDOWN SIGNAL RECEIVED          │")
        log.info("└────────────────────────────────────────┘")
        engine.stop()
        await engine.wait_closed()

        snap = engine.snapshot()
        log.info("Final Statistics:")
        log.info(f"  • Fast ticks: {snap.fast_ticks}")
        log.info(f"  • Slow ticks: {snap.slow_ticks}")
        log.info(f"  • Active alerts: {snap.metrics.alert_count}")
        log.info(f"  • Uptime: {state.get_uptime_str()}")
        if settings.status_path:
            write_status(engine, settings.status_path, state)
        log.info("Daemon shutdown complete.")


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="City telemetry simulation daemon")
    parser.add_argument("--fast-interval", type=float, help="Time units between fast ticks")
    parser.add_argument("--slow-interval", type=float, help="Time units between slow ticks")
    parser.add_argument("--time-unit", type=float, help="Seconds per time unit")
    parser.add_argument("--seed", type=int, help="RNG seed for a reproducible run")
    parser.add_argument("--status-path", help="Write JSON status here after every tick")
    parser.add_argument("--analyze", metavar="FILE", help="Analyze a document at startup")
    parser.add_argument("--debug", action="store_true", help="Log every tick at DEBUG")
    return parser.parse_args(argv)


def settings_from_args(args: argparse.Namespace) -> SimulationSettings:
    """Environment settings overridden by any flags given."""
    settings = SimulationSettings.from_env()
    overrides = {
        "fast_interval": args.fast_interval,
        "slow_interval": args.slow_interval,
        "time_unit_seconds": args.time_unit,
        "seed": args.seed,
        "status_path": args.status_path,
    }
    for attr, value in overrides.items():
        if value is not None:
            setattr(settings, attr, value)
    return settings


def main(argv: Optional[List[str]] = None) -> None:
    args = parse_args(argv)
    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        asyncio.run(run_daemon(settings_from_args(args), analyze=args.analyze))
    except KeyboardInterrupt:
        pass  # Handled by the shutdown path


if __name__ == "__main__":
    main()
