"""
Scheduler: independent periodic cadences feeding one serialized command queue.

Each cadence runs as its own asyncio task that sleeps for its period and then
enqueues a tick command. A single consumer task applies commands one at a time,
so ticks from different cadences (and external merges) never overlap. A slow
or stalled cadence only delays its own ticks.

Every run owns a CancellationToken. Commands carry the token they were issued
under; once stop() cancels it, nothing issued under that run is applied.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

log = logging.getLogger("core.scheduler")

TICK = "tick"
MERGE = "merge"


class CancellationToken:
    """One-shot cancellation marker shared by everything a run issues."""

    def __init__(self):
        self._cancelled = False

    def cancel(self) -> None:
        self._cancelled = True

    @property
    def cancelled(self) -> bool:
        return self._cancelled


@dataclass
class Cadence:
    """A named periodic schedule."""
    name: str
    period_seconds: float


@dataclass
class Command:
    """A unit of work for the consumer. future is resolved with the handler's result."""
    kind: str
    token: CancellationToken
    cadence: Optional[str] = None
    payload: Any = None
    future: Optional[asyncio.Future] = None

    def resolve(self, result: Any) -> None:
        if self.future is not None and not self.future.done():
            self.future.set_result(result)


class Scheduler:
    """
    Runs cadence timers and the command consumer.

    Usage:
        scheduler = Scheduler(handler, [Cadence("fast", 5), Cadence("slow", 8)])
        scheduler.start()       # inside a running event loop
        ...
        scheduler.stop()
        await scheduler.wait_closed()
    """

    def __init__(self, handler: Callable[[Command], Any], cadences: List[Cadence]):
        self._handler = handler
        self.cadences = list(cadences)
        self._token: Optional[CancellationToken] = None
        self._queue: Optional[asyncio.Queue] = None
        self._tasks: List[asyncio.Task] = []
        self._closing: List[asyncio.Task] = []

    @property
    def running(self) -> bool:
        return self._token is not None and not self._token.cancelled

    @property
    def token(self) -> Optional[CancellationToken]:
        """Token of the current run, or None when stopped."""
        return self._token if self.running else None

    def start(self) -> None:
        """Start all cadences. Calling start() on a running scheduler is a no-op."""
        if self.running:
            log.debug("Scheduler already running")
            return

        loop = asyncio.get_running_loop()
        token = CancellationToken()
        queue: asyncio.Queue = asyncio.Queue()
        self._token = token
        self._queue = queue

        self._tasks = [
            loop.create_task(self._timer(cadence, token, queue), name=f"cadence-{cadence.name}")
            for cadence in self.cadences
        ]
        self._tasks.append(loop.create_task(self._consume(queue), name="command-consumer"))

        periods = ", ".join(f"{c.name}={c.period_seconds:g}s" for c in self.cadences)
        log.info(f"Scheduler started ({periods})")

    def stop(self) -> None:
        """
        Cancel the current run. Idempotent.

        Pending commands are discarded and any waiting merge futures resolve
        to None.
        """
        if not self.running:
            log.debug("Scheduler already stopped")
            return

        self._token.cancel()
        for task in self._tasks:
            task.cancel()
        self._closing.extend(self._tasks)
        self._tasks = []

        dropped = 0
        while self._queue is not None and not self._queue.empty():
            command = self._queue.get_nowait()
            command.resolve(None)
            dropped += 1

        log.info(f"Scheduler stopped ({dropped} pending commands dropped)")

    async def wait_closed(self) -> None:
        """Wait for cancelled tasks to unwind."""
        closing, self._closing = self._closing, []
        if closing:
            await asyncio.gather(*closing, return_exceptions=True)

    def submit(self, command: Command) -> bool:
        """
        Enqueue a command for the current run.

        Returns:
            False (and resolves the command to None) if the scheduler is not
            running or the command belongs to a cancelled run
        """
        if not self.running or command.token.cancelled:
            command.resolve(None)
            return False
        self._queue.put_nowait(command)
        return True

    async def _timer(self, cadence: Cadence, token: CancellationToken, queue: asyncio.Queue) -> None:
        while True:
            await asyncio.sleep(cadence.period_seconds)
            if token.cancelled:
                return
            queue.put_nowait(Command(TICK, token, cadence=cadence.name))

    async def _consume(self, queue: asyncio.Queue) -> None:
        while True:
            command = await queue.get()
            try:
                if command.token.cancelled:
                    log.debug(f"Dropping {command.kind} command from a cancelled run")
                    command.resolve(None)
                    continue
                command.resolve(self._handler(command))
            except Exception:
                log.exception(f"Command {command.kind} failed")
                command.resolve(None)
            finally:
                queue.task_done()
