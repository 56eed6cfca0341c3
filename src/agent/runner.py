"""
Agent Runner.

Perpetual driver around AgentOrchestrator.step():

- Ticks every `tick_interval` seconds
- Ticks with per-learner errors count as degraded; once `max_consecutive_errors`
  degraded ticks accumulate, pause for `error_pause` and reset the counter
- Ticks where step() itself raises count the same way but pause for
  twice `error_pause`
- stop() interrupts any sleep immediately and gives the in-flight tick
  `shutdown_grace` seconds to finish before cancelling it

Usage:
    runner = AgentRunner(orchestrator, tick_interval=30)
    await runner.serve()  # until SIGINT/SIGTERM
"""

from __future__ import annotations

import asyncio
import signal
import time
from dataclasses import dataclass, replace
from datetime import datetime

from loguru import logger

from config import Settings, get_settings
from src.agent.orchestrator import AgentOrchestrator
from src.core.types import TickResult, utcnow


@dataclass
class RunnerStatus:
    """Snapshot of the runner's state."""

    running: bool = False
    tick_count: int = 0
    consecutive_errors: int = 0
    started_at: datetime | None = None
    last_tick_at: datetime | None = None
    last_result: TickResult | None = None

    @property
    def uptime_seconds(self) -> float:
        if self.started_at is None:
            return 0.0
        return (utcnow() - self.started_at).total_seconds()


class AgentRunner:
    """Runs the orchestrator on a fixed cadence until stopped."""

    def __init__(
        self,
        orchestrator: AgentOrchestrator,
        tick_interval: float = 30.0,
        max_consecutive_errors: int = 5,
        error_pause: float = 60.0,
        shutdown_grace: float = 5.0,
    ):
        self.orchestrator = orchestrator
        self.tick_interval = tick_interval
        self.max_consecutive_errors = max_consecutive_errors
        self.error_pause = error_pause
        self.shutdown_grace = shutdown_grace

        self._status = RunnerStatus()
        self._stop_event = asyncio.Event()
        self._task: asyncio.Task | None = None
        self._stop_task: asyncio.Task | None = None

    @property
    def status(self) -> RunnerStatus:
        """Copy of the current status."""
        return replace(self._status)

    @property
    def is_running(self) -> bool:
        return self._status.running

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Run the tick loop until stop() is called."""
        if self._status.running:
            logger.warning("Agent runner already running")
            return

        self._status.running = True
        self._status.started_at = utcnow()
        self._stop_event.clear()
        self._task = asyncio.current_task()

        logger.info(
            "🤖 Agent runner started (tick: {}s, max errors: {}, error pause: {}s)",
            self.tick_interval,
            self.max_consecutive_errors,
            self.error_pause,
        )

        try:
            while self._status.running:
                await self._tick()
                if not self._status.running:
                    break
                await self._sleep(self.tick_interval)
        finally:
            self._status.running = False
            self._task = None
            logger.info(
                "Agent runner stopped after {} tick(s), uptime {:.0f}s",
                self._status.tick_count,
                self._status.uptime_seconds,
            )

    async def stop(self) -> None:
        """Stop the loop, waiting up to `shutdown_grace` for the current tick."""
        if not self._status.running:
            return

        logger.info("🛑 Stopping agent runner...")
        self._status.running = False
        self._stop_event.set()

        task = self._task
        if task is None or task is asyncio.current_task() or task.done():
            return

        done, _ = await asyncio.wait({task}, timeout=self.shutdown_grace)
        if not done:
            logger.warning("In-flight tick did not finish within {}s, cancelling", self.shutdown_grace)
            task.cancel()

    async def serve(self) -> None:
        """start() with SIGINT/SIGTERM and uncaught loop errors wired to stop()."""
        loop = asyncio.get_running_loop()

        def _request_stop(reason: str) -> None:
            logger.info("Received {}, shutting down", reason)
            if self._stop_task is None or self._stop_task.done():
                self._stop_task = loop.create_task(self.stop())

        for sig in (signal.SIGINT, signal.SIGTERM):
            try:
                loop.add_signal_handler(sig, _request_stop, sig.name)
            except NotImplementedError:
                # Windows event loops have no signal handler support
                logger.debug("Signal handlers unavailable for {}", sig.name)

        def _handle_exception(_loop: asyncio.AbstractEventLoop, context: dict) -> None:
            logger.error("Uncaught exception in event loop: {}", context.get("exception") or context.get("message"))
            _request_stop("uncaught exception")

        loop.set_exception_handler(_handle_exception)

        try:
            await self.start()
        except asyncio.CancelledError:
            logger.info("Agent runner cancelled")
        finally:
            for sig in (signal.SIGINT, signal.SIGTERM):
                try:
                    loop.remove_signal_handler(sig)
                except NotImplementedError:
                    pass
            loop.set_exception_handler(None)

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def _tick(self) -> None:
        self._status.tick_count += 1
        tick_number = self._status.tick_count
        started = time.perf_counter()
        logger.info("⏱️  Tick #{} starting", tick_number)

        try:
            result = await self.orchestrator.step()
        except Exception as e:
            logger.error("Tick #{} failed: {}", tick_number, e)
            self._status.last_tick_at = utcnow()
            await self._record_failure(pause=self.error_pause * 2)
            return

        elapsed_ms = (time.perf_counter() - started) * 1000
        self._status.last_tick_at = utcnow()
        self._status.last_result = result
        logger.info(
            "Tick #{} finished in {:.0f}ms: {} processed, {} error(s)",
            tick_number,
            elapsed_ms,
            result.processed,
            len(result.errors),
        )

        if not result.errors:
            self._status.consecutive_errors = 0
            return

        for error in result.errors:
            logger.warning("  - {}", error)
        await self._record_failure(pause=self.error_pause)

    async def _record_failure(self, pause: float) -> None:
        self._status.consecutive_errors += 1
        if self._status.consecutive_errors < self.max_consecutive_errors:
            return
        logger.warning(
            "{} consecutive failing ticks, pausing for {}s",
            self._status.consecutive_errors,
            pause,
        )
        await self._sleep(pause)
        self._status.consecutive_errors = 0

    async def _sleep(self, seconds: float) -> None:
        """Sleep that returns early when stop() is requested."""
        if seconds <= 0 or self._stop_event.is_set():
            return
        try:
            await asyncio.wait_for(self._stop_event.wait(), timeout=seconds)
        except asyncio.TimeoutError:
            pass


# =============================================================================
# Entry Point
# =============================================================================


def build_runner(orchestrator: AgentOrchestrator, settings: Settings | None = None) -> AgentRunner:
    """AgentRunner configured from settings."""
    settings = settings or get_settings()
    config = settings.get_agent_config()
    return AgentRunner(
        orchestrator,
        tick_interval=config["tick_interval"],
        max_consecutive_errors=config["max_consecutive_errors"],
        error_pause=config["error_pause"],
        shutdown_grace=config["shutdown_grace"],
    )


def run_agent(settings: Settings | None = None) -> None:
    """Build the agent from settings and run it until interrupted."""
    from src.agent.bootstrap import build_agent

    settings = settings or get_settings()

    async def _main() -> None:
        orchestrator, close = build_agent(settings)
        try:
            await build_runner(orchestrator, settings).serve()
        finally:
            await close()

    asyncio.run(_main())
