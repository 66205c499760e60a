from dataclasses import dataclass, field
from typing import Callable, List, Optional

from .models import Failure, Outcome, Success
from ..utils.log_utils import get_logger

logger = get_logger(__name__)


@dataclass
class RunState:
    """Counters and outcome collections for one run."""
    total_count: int
    processed_count: int = 0
    results: List[Success] = field(default_factory=list)
    errors: List[Failure] = field(default_factory=list)

    @property
    def total_tokens(self) -> int:
        return sum(r.usage.total_tokens for r in self.results if r.usage)


class ProgressAggregator:
    """
    Single writer of a RunState: records each settled outcome, in settlement order,
    and reports progress.
    """

    def __init__(self, state: RunState) -> None:
        self.state = state
        # on_progress(outcome, processed_count, total_count)
        self.on_progress: Optional[Callable[[Outcome, int, int], None]] = None

    def record(self, outcome: Outcome) -> None:
        state = self.state
        state.processed_count += 1
        percentage = state.processed_count / state.total_count * 100 if state.total_count else 100.0
        logger.info(
            "[%d/%d] (%.1f%%) Processed: %s",
            state.processed_count, state.total_count, percentage, outcome.image,
        )

        if isinstance(outcome, Success):
            state.results.append(outcome)
        else:
            state.errors.append(outcome)
            logger.error("   Error: %s", outcome.error_message)

        if self.on_progress:
            self.on_progress(outcome, state.processed_count, state.total_count)
