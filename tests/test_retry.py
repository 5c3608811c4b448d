"""Tests for the retry-once helper."""

import pytest

from cdtool.services.retry import retry_once


class Flaky:
    def __init__(self, failures: int) -> None:
        self.failures = failures
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise RuntimeError(f"failure {self.calls}")
        return "ok"


@pytest.mark.asyncio
async def test_success_runs_once():
    op = Flaky(failures=0)

    assert await retry_once(op, delay_seconds=0) == "ok"
    assert op.calls == 1


@pytest.mark.asyncio
async def test_failure_reissues_the_operation():
    op = Flaky(failures=1)

    assert await retry_once(op, delay_seconds=0) == "ok"
    assert op.calls == 2


@pytest.mark.asyncio
async def test_second_failure_propagates():
    op = Flaky(failures=2)

    with pytest.raises(RuntimeError, match="failure 2"):
        await retry_once(op, delay_seconds=0)
    assert op.calls == 2


@pytest.mark.asyncio
async def test_waits_before_retrying(monkeypatch):
    delays = []

    async def fake_sleep(seconds):
        delays.append(seconds)

    monkeypatch.setattr("cdtool.services.retry.asyncio.sleep", fake_sleep)

    await retry_once(Flaky(failures=1), delay_seconds=0.5)

    assert delays == [0.5]
