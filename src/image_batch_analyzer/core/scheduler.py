"""
Window-based batch scheduler.

Items are dispatched in consecutive windows of `concurrency` items. All items of
a window run concurrently and the scheduler waits for every one of them to settle
before sleeping `batch_delay` milliseconds and opening the next window. Blocking
work runs on a thread pool with one worker per window slot, so a full window is in
flight at once and no more than `concurrency` remote calls ever are. A single slow
item holds back its whole window.
"""

import asyncio
from concurrent.futures import Executor, ThreadPoolExecutor
from typing import Callable, List, Optional, Sequence

from .aggregator import ProgressAggregator
from .models import ItemDescriptor, Outcome
from .retry import RetryingAnalyzer
from ..utils.log_utils import get_logger

logger = get_logger(__name__)


class BatchScheduler:
    """Dispatch items window by window through a RetryingAnalyzer."""

    def __init__(
        self,
        analyzer: RetryingAnalyzer,
        aggregator: ProgressAggregator,
        concurrency: int = 5,
        batch_delay: int = 1000,
        on_window_complete: Optional[Callable[[int, List[Outcome]], None]] = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.analyzer = analyzer
        self.aggregator = aggregator
        self.concurrency = concurrency
        # milliseconds
        self.batch_delay = batch_delay
        self.on_window_complete = on_window_complete

    def windows(self, items: Sequence[ItemDescriptor]) -> List[List[ItemDescriptor]]:
        """Split items into consecutive windows of at most `concurrency` items."""
        return [list(items[i:i + self.concurrency]) for i in range(0, len(items), self.concurrency)]

    async def _process_item(self, item: ItemDescriptor, settled: List[Outcome], executor: Executor) -> Outcome:
        outcome = await self.analyzer.analyze(item, executor)
        settled.append(outcome)
        self.aggregator.record(outcome)
        return outcome

    async def _run_window(self, window: List[ItemDescriptor], executor: Executor) -> List[Outcome]:
        settled: List[Outcome] = []
        await asyncio.gather(*(self._process_item(item, settled, executor) for item in window))
        return settled

    async def run(self, items: Sequence[ItemDescriptor]) -> None:
        windows = self.windows(items)
        if not windows:
            return
        # One worker thread per window slot so a full window runs in parallel
        executor = ThreadPoolExecutor(max_workers=self.concurrency, thread_name_prefix="analyze")
        try:
            for index, window in enumerate(windows, start=1):
                logger.debug("Dispatching window %d/%d (%d items)", index, len(windows), len(window))
                settled = await self._run_window(window, executor)

                if self.on_window_complete:
                    self.on_window_complete(index, settled)

                if index < len(windows) and self.batch_delay > 0:
                    await asyncio.sleep(self.batch_delay / 1000)
        finally:
            executor.shutdown(wait=True)
