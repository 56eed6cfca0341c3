"""
Unit tests for AgentRunner: tick loop, error backoff and shutdown.
"""

import asyncio

import pytest

from src.agent.runner import AgentRunner, build_runner
from src.core.types import TickResult


class StubOrchestrator:
    """Returns scripted tick outcomes; an Exception entry is raised."""

    def __init__(self, outcomes=None, delay=0.0):
        self.outcomes = list(outcomes or [])
        self.delay = delay
        self.calls = 0

    async def step(self):
        self.calls += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        outcome = self.outcomes.pop(0) if self.outcomes else TickResult()
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


def failing_tick():
    return TickResult(errors=["Error processing learner x: boom"])


@pytest.fixture
def sleeps(monkeypatch):
    """Record runner sleeps instead of waiting."""
    recorded = []

    async def fake_sleep(self, seconds):
        recorded.append(seconds)
        await asyncio.sleep(0)

    monkeypatch.setattr(AgentRunner, "_sleep", fake_sleep)
    return recorded


class TestTick:
    """Consecutive-error accounting for single ticks."""

    @pytest.mark.asyncio
    async def test_clean_tick_resets_counter(self, sleeps):
        runner = AgentRunner(StubOrchestrator([failing_tick(), TickResult()]))

        await runner._tick()
        assert runner.status.consecutive_errors == 1

        await runner._tick()
        assert runner.status.consecutive_errors == 0
        assert runner.status.tick_count == 2

    @pytest.mark.asyncio
    async def test_backoff_after_max_degraded_ticks(self, sleeps):
        runner = AgentRunner(
            StubOrchestrator([failing_tick() for _ in range(3)]),
            max_consecutive_errors=3,
            error_pause=60,
        )

        for _ in range(3):
            await runner._tick()

        assert sleeps == [60]
        assert runner.status.consecutive_errors == 0

    @pytest.mark.asyncio
    async def test_systemic_failure_pauses_twice_as_long(self, sleeps):
        runner = AgentRunner(
            StubOrchestrator([RuntimeError("db down"), RuntimeError("db down")]),
            max_consecutive_errors=2,
            error_pause=10,
        )

        await runner._tick()
        await runner._tick()

        assert sleeps == [20]

    @pytest.mark.asyncio
    async def test_step_exception_does_not_escape(self, sleeps):
        runner = AgentRunner(StubOrchestrator([RuntimeError("db down")]))

        await runner._tick()

        assert runner.status.consecutive_errors == 1
        assert runner.status.last_tick_at is not None

    @pytest.mark.asyncio
    async def test_last_result_recorded(self, sleeps):
        result = TickResult(processed=2, tick_id="t-1")
        runner = AgentRunner(StubOrchestrator([result]))

        await runner._tick()

        assert runner.status.last_result is result


class TestLifecycle:
    """start()/stop() behaviour."""

    @pytest.mark.asyncio
    async def test_stop_interrupts_sleep(self):
        orchestrator = StubOrchestrator()
        runner = AgentRunner(orchestrator, tick_interval=3600)

        task = asyncio.create_task(runner.start())
        await asyncio.sleep(0.05)
        assert runner.is_running

        await runner.stop()
        await asyncio.wait_for(task, timeout=1)

        assert not runner.is_running
        assert orchestrator.calls == 1

    @pytest.mark.asyncio
    async def test_stop_waits_for_in_flight_tick(self):
        orchestrator = StubOrchestrator(delay=0.1)
        runner = AgentRunner(orchestrator, tick_interval=3600, shutdown_grace=2)

        task = asyncio.create_task(runner.start())
        await asyncio.sleep(0.02)
        await runner.stop()

        assert task.done()
        assert not task.cancelled()
        assert runner.status.tick_count == 1
        assert runner.status.last_result is not None

    @pytest.mark.asyncio
    async def test_stop_cancels_after_grace_period(self):
        orchestrator = StubOrchestrator(delay=10)
        runner = AgentRunner(orchestrator, tick_interval=3600, shutdown_grace=0.05)

        task = asyncio.create_task(runner.start())
        await asyncio.sleep(0.02)
        await runner.stop()

        with pytest.raises(asyncio.CancelledError):
            await task
        assert not runner.is_running

    @pytest.mark.asyncio
    async def test_loops_until_stopped(self):
        orchestrator = StubOrchestrator()
        runner = AgentRunner(orchestrator, tick_interval=0.01)

        task = asyncio.create_task(runner.start())
        await asyncio.sleep(0.1)
        await runner.stop()
        await asyncio.wait_for(task, timeout=1)

        assert orchestrator.calls >= 2

    @pytest.mark.asyncio
    async def test_second_start_is_ignored(self):
        orchestrator = StubOrchestrator()
        runner = AgentRunner(orchestrator, tick_interval=3600)

        task = asyncio.create_task(runner.start())
        await asyncio.sleep(0.02)
        await runner.start()
        await runner.stop()
        await asyncio.wait_for(task, timeout=1)

        assert orchestrator.calls == 1

    @pytest.mark.asyncio
    async def test_uncaught_loop_error_stops_serve(self):
        orchestrator = StubOrchestrator()
        runner = AgentRunner(orchestrator, tick_interval=3600)

        task = asyncio.create_task(runner.serve())
        await asyncio.sleep(0.05)
        asyncio.get_running_loop().call_exception_handler({"message": "boom"})
        await asyncio.wait_for(task, timeout=1)

        assert not runner.is_running
        assert runner._stop_task is not None
        await runner._stop_task

    @pytest.mark.asyncio
    async def test_stop_when_not_running_is_noop(self):
        runner = AgentRunner(StubOrchestrator())

        await runner.stop()

        assert not runner.is_running


def test_build_runner_from_settings():
    from config import Settings

    settings = Settings(
        agent_tick_interval_seconds=5,
        agent_max_consecutive_errors=2,
        agent_error_pause_seconds=7,
        agent_shutdown_grace_seconds=1,
    )

    runner = build_runner(StubOrchestrator(), settings)

    assert runner.tick_interval == 5
    assert runner.max_consecutive_errors == 2
    assert runner.error_pause == 7
    assert runner.shutdown_grace == 1
