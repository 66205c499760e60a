import asyncio
from concurrent.futures import Executor
from typing import TYPE_CHECKING, Callable, Optional

from tenacity import AsyncRetrying, RetryCallState, retry_if_exception_type, stop_after_attempt, wait_fixed

from .image_encoder import encode_image
from .models import AnalysisResponse, Failure, ItemDescriptor, Outcome, Success, utc_timestamp
from ..utils.log_utils import get_logger

if TYPE_CHECKING:
    from ..api.base import VisionClient

logger = get_logger(__name__)


class RetryingAnalyzer:
    """
    Encode and analyze one image, retrying failed attempts after a fixed delay.

    `analyze` always resolves to an Outcome: a Success on the first good attempt,
    or a Failure carrying the last attempt's error once `max_retries` retries
    are used up.
    """

    def __init__(
        self,
        client: "VisionClient",
        prompt: str,
        max_tokens: int = 500,
        max_retries: int = 3,
        retry_delay: int = 2000,
        image_max_size: int = 0,
    ) -> None:
        self.client = client
        self.prompt = prompt
        self.max_tokens = max_tokens
        self.max_retries = max_retries
        # milliseconds
        self.retry_delay = retry_delay
        self.image_max_size = image_max_size

    def _attempt_sync(self, item: ItemDescriptor) -> AnalysisResponse:
        payload = encode_image(item.path, self.image_max_size)
        return self.client.analyze(payload, self.prompt, self.max_tokens)

    async def _attempt(self, item: ItemDescriptor, executor: Optional[Executor] = None) -> AnalysisResponse:
        # File I/O and the SDK call are blocking; None means the loop's default thread pool
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(executor, self._attempt_sync, item)

    def _announce_retry(self, item: ItemDescriptor) -> Callable[[RetryCallState], None]:
        def before_sleep(retry_state: RetryCallState) -> None:
            err = retry_state.outcome.exception() if retry_state.outcome else None
            logger.warning(
                "Retrying %s (attempt %d/%d)... last error: %s",
                item.display_name, retry_state.attempt_number, self.max_retries, err,
            )
        return before_sleep

    async def analyze(self, item: ItemDescriptor, executor: Optional[Executor] = None) -> Outcome:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries + 1),
            wait=wait_fixed(self.retry_delay / 1000),
            retry=retry_if_exception_type(Exception),
            before_sleep=self._announce_retry(item),
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    response = await self._attempt(item, executor)
        except Exception as err:
            message = str(err) or type(err).__name__
            return Failure(
                image=item.display_name,
                path=str(item.path),
                error_message=message,
                completed_at=utc_timestamp(),
            )

        return Success(
            image=item.display_name,
            path=str(item.path),
            description=response.description,
            model_used=response.model_used,
            usage=response.usage,
            completed_at=utc_timestamp(),
        )
