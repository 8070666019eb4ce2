import asyncio
import logging

import pytest
from fastapi import FastAPI

from drugreminder.core.scheduler import (
    RunResult,
    run_periodically,
    start_periodic_task,
    stop_periodic_tasks,
)

logger = logging.getLogger("tests.scheduler")


class _Stop(Exception):
    pass


class RecordingSleep:
    """Registra las esperas y corta el bucle tras max_sleeps"""

    def __init__(self, max_sleeps):
        self.calls = []
        self.max_sleeps = max_sleeps

    async def __call__(self, seconds):
        self.calls.append(seconds)
        if len(self.calls) >= self.max_sleeps:
            raise _Stop()


def scripted_handler(results):
    results = list(results)

    async def handler():
        result = results.pop(0)
        if isinstance(result, BaseException):
            raise result
        return result

    return handler


def run_loop(handler, sleep, **kwargs):
    options = dict(
        name="test",
        interval_minutes=15,
        handler=handler,
        logger=logger,
        retry_backoff_seconds=60.0,
        sleep=sleep,
    )
    options.update(kwargs)
    with pytest.raises(_Stop):
        asyncio.run(run_periodically(**options))


def test_interval_below_minimum_is_rejected():
    with pytest.raises(ValueError):
        asyncio.run(run_periodically(
            name="test", interval_minutes=5, handler=scripted_handler([]), logger=logger
        ))


def test_success_waits_full_interval():
    sleep = RecordingSleep(max_sleeps=2)

    run_loop(scripted_handler([RunResult.SUCCESS, RunResult.SUCCESS]), sleep)

    assert sleep.calls == [900.0, 900.0]


def test_retry_backoff_doubles_and_resets():
    sleep = RecordingSleep(max_sleeps=6)
    handler = scripted_handler([
        RunResult.RETRY, RunResult.RETRY, RunResult.RETRY, RunResult.RETRY,
        RunResult.SUCCESS, RunResult.RETRY,
    ])

    run_loop(handler, sleep, retry_backoff_seconds=300.0)

    assert sleep.calls == [300.0, 600.0, 900.0, 900.0, 900.0, 300.0]


def test_unexpected_exception_is_retried():
    sleep = RecordingSleep(max_sleeps=2)

    run_loop(scripted_handler([RuntimeError("boom"), RunResult.SUCCESS]), sleep)

    assert sleep.calls == [60.0, 900.0]


def test_timeout_is_retried():
    sleep = RecordingSleep(max_sleeps=1)

    async def slow_handler():
        await asyncio.sleep(1)
        return RunResult.SUCCESS

    run_loop(slow_handler, sleep, run_timeout_seconds=0.01)

    assert sleep.calls == [60.0]


def test_wait_first_sleeps_before_first_run():
    sleep = RecordingSleep(max_sleeps=1)
    calls = []

    async def handler():
        calls.append(1)
        return RunResult.SUCCESS

    run_loop(handler, sleep, wait_first=True)

    assert sleep.calls == [900.0]
    assert calls == []


def test_start_and_stop_registered_tasks():
    app = FastAPI()
    runs = []

    async def handler():
        runs.append(1)
        return RunResult.SUCCESS

    async def scenario():
        task = start_periodic_task(app, name="reminders", interval_minutes=15, handler=handler, logger=logger)
        await asyncio.sleep(0.05)
        await stop_periodic_tasks(app, logger=logger)
        return task

    task = asyncio.run(scenario())

    assert runs == [1]
    assert task.cancelled()
    assert app.state._drugreminder_periodic_tasks == []


def test_retry_is_logged(caplog):
    sleep = RecordingSleep(max_sleeps=1)

    with caplog.at_level(logging.WARNING, logger="tests.scheduler"):
        run_loop(scripted_handler([RunResult.RETRY]), sleep)

    assert "Tarea periódica test: reintento en 60.0s" in caplog.text
