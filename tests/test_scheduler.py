import asyncio
import os
import time
from pathlib import Path

import pytest

from conftest import FakeVisionClient, write_images
from image_batch_analyzer.core.aggregator import ProgressAggregator, RunState
from image_batch_analyzer.core.models import Failure, Outcome, Success
from image_batch_analyzer.core.retry import RetryingAnalyzer
from image_batch_analyzer.core.scheduler import BatchScheduler


def _scheduler(
    client: FakeVisionClient,
    total: int,
    concurrency: int,
    batch_delay: int = 0,
    max_retries: int = 0,
    retry_delay: int = 0,
    on_window_complete=None,
) -> tuple[BatchScheduler, RunState]:
    state = RunState(total_count=total)
    analyzer = RetryingAnalyzer(client, prompt="describe", max_retries=max_retries, retry_delay=retry_delay)
    scheduler = BatchScheduler(
        analyzer,
        ProgressAggregator(state),
        concurrency=concurrency,
        batch_delay=batch_delay,
        on_window_complete=on_window_complete,
    )
    return scheduler, state


def _names(count: int) -> list[str]:
    return [f"img{i:02d}.jpg" for i in range(count)]


class TestWindows:
    def test_splits_into_fixed_size_windows(self, tmp_path: Path) -> None:
        items = write_images(tmp_path, _names(7))
        scheduler, _ = _scheduler(FakeVisionClient(), total=7, concurrency=3)

        windows = scheduler.windows(items)

        assert [len(w) for w in windows] == [3, 3, 1]
        assert [i for w in windows for i in w] == items

    def test_rejects_zero_concurrency(self) -> None:
        with pytest.raises(ValueError):
            _scheduler(FakeVisionClient(), total=1, concurrency=0)


class TestRun:
    def test_every_item_settles_exactly_once(self, tmp_path: Path) -> None:
        items = write_images(tmp_path, _names(10))
        client = FakeVisionClient(fail_always={"img03.jpg", "img07.jpg"})
        scheduler, state = _scheduler(client, total=10, concurrency=4)

        asyncio.run(scheduler.run(items))

        assert state.processed_count == 10
        assert len(state.results) + len(state.errors) == 10
        paths = [o.path for o in state.results] + [o.path for o in state.errors]
        assert sorted(paths) == sorted(str(i.path) for i in items)
        assert {e.image for e in state.errors} == {"img03.jpg", "img07.jpg"}

    def test_never_exceeds_concurrency(self, tmp_path: Path) -> None:
        items = write_images(tmp_path, _names(10))
        client = FakeVisionClient(delay=0.05)
        scheduler, _ = _scheduler(client, total=10, concurrency=3)

        asyncio.run(scheduler.run(items))

        assert client.max_in_flight == 3
        assert len(client.calls) == 10

    def test_full_window_runs_in_parallel_beyond_default_pool(self, tmp_path: Path) -> None:
        default_pool = min(32, (os.cpu_count() or 1) + 4)
        concurrency = default_pool + 8
        items = write_images(tmp_path, _names(concurrency))
        client = FakeVisionClient(delay=0.3)
        scheduler, state = _scheduler(client, total=concurrency, concurrency=concurrency)

        asyncio.run(scheduler.run(items))

        assert client.max_in_flight == concurrency
        assert len(state.results) == concurrency

    def test_next_window_waits_for_slow_failing_item(self, tmp_path: Path) -> None:
        items = write_images(tmp_path, ["bad.jpg", "ok1.jpg", "ok2.jpg", "next1.jpg", "next2.jpg"])
        client = FakeVisionClient(fail_always={"bad.jpg"})
        scheduler, state = _scheduler(client, total=5, concurrency=3, max_retries=2, retry_delay=50)

        asyncio.run(scheduler.run(items))

        first_window_end = max(end for name, _, end in client.calls if name in {"bad.jpg", "ok1.jpg", "ok2.jpg"})
        second_window_start = min(start for name, start, _ in client.calls if name.startswith("next"))
        assert second_window_start >= first_window_end
        assert client.attempts["bad.jpg"] == 3
        assert [e.image for e in state.errors] == ["bad.jpg"]

    def test_outcomes_recorded_in_settlement_order(self, tmp_path: Path) -> None:
        items = write_images(tmp_path, ["slow.jpg", "fast.jpg"])
        client = FakeVisionClient(delays={"slow.jpg": 0.1, "fast.jpg": 0.0})
        scheduler, state = _scheduler(client, total=2, concurrency=2)

        asyncio.run(scheduler.run(items))

        assert [r.image for r in state.results] == ["fast.jpg", "slow.jpg"]

    def test_empty_item_list_does_nothing(self) -> None:
        client = FakeVisionClient()
        scheduler, state = _scheduler(client, total=0, concurrency=3)

        asyncio.run(scheduler.run([]))

        assert state.processed_count == 0
        assert client.calls == []


class TestInterWindowDelay:
    def test_seven_items_three_windows_two_delays(self, tmp_path: Path) -> None:
        items = write_images(tmp_path, _names(7))
        client = FakeVisionClient()
        completed: list[tuple[int, int, float]] = []

        def on_window_complete(index: int, outcomes: list[Outcome]) -> None:
            completed.append((index, len(outcomes), time.monotonic()))

        scheduler, state = _scheduler(
            client, total=7, concurrency=3, batch_delay=100, on_window_complete=on_window_complete
        )

        started = time.monotonic()
        asyncio.run(scheduler.run(items))
        elapsed = time.monotonic() - started

        assert [(i, n) for i, n, _ in completed] == [(1, 3), (2, 3), (3, 1)]
        assert elapsed >= 0.19
        window_starts = {}
        for name, start, _ in client.calls:
            window = int(name[3:5]) // 3 + 1
            window_starts[window] = min(start, window_starts.get(window, start))
        assert window_starts[2] - completed[0][2] >= 0.095
        assert window_starts[3] - completed[1][2] >= 0.095
        assert len(state.results) == 7
        assert all(isinstance(o, Success) for o in state.results)

    def test_no_delay_after_last_window(self, tmp_path: Path) -> None:
        items = write_images(tmp_path, _names(2))
        scheduler, _ = _scheduler(FakeVisionClient(), total=2, concurrency=5, batch_delay=500)

        started = time.monotonic()
        asyncio.run(scheduler.run(items))

        assert time.monotonic() - started < 0.4


class TestWindowHook:
    def test_hook_receives_each_window_outcomes(self, tmp_path: Path) -> None:
        items = write_images(tmp_path, _names(5))
        seen: list[list[str]] = []
        last_window: list[Outcome] = []
        client = FakeVisionClient(fail_always={"img04.jpg"})

        def on_window_complete(index: int, outcomes: list[Outcome]) -> None:
            seen.append(sorted(o.image for o in outcomes))
            last_window[:] = outcomes

        scheduler, _ = _scheduler(client, total=5, concurrency=2, on_window_complete=on_window_complete)

        asyncio.run(scheduler.run(items))

        assert seen == [["img00.jpg", "img01.jpg"], ["img02.jpg", "img03.jpg"], ["img04.jpg"]]
        assert isinstance(last_window[0], Failure)
