from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from .aggregator import ProgressAggregator, RunState
from .exceptions import ConfigurationError, PersistFailure
from .image_source import list_images
from .models import Outcome
from .persister import CheckpointWriter, build_artifact, save_artifact
from .retry import RetryingAnalyzer
from .scheduler import BatchScheduler
from ..api.base import VisionClient
from ..api.clients import get_client
from ..config import Settings
from ..ui.rich_ui import print_run_header, print_summary
from ..utils.log_utils import get_logger

logger = get_logger(__name__)


@dataclass
class RunReport:
    """What a run produced: the final state and where the artifact went (None if nothing was written)."""
    state: RunState
    output_file: Optional[Path] = None


class BatchProcessor:
    """Orchestrates one batch run.

    Pipeline: list images -> windowed analysis with retries -> persist -> summary.
    """

    def __init__(
        self,
        settings: Settings,
        client: VisionClient,
        console: Optional[Console] = None,
    ) -> None:
        self.settings = settings
        self.client = client
        self.console = console or Console()

    def _checkpoint_hook(self, writer: CheckpointWriter):
        def on_window_complete(window_index: int, outcomes: List[Outcome]) -> None:
            try:
                writer.write_window(window_index, outcomes)
            except PersistFailure as err:
                logger.error("Checkpoint for window %d not saved: %s", window_index, err)
        return on_window_complete

    async def run(self) -> RunReport:
        """Run the batch.

        Raises:
            ConfigurationError: if the API key is missing.
            DirectoryUnreadable: if the images directory cannot be listed.
            PersistFailure: if the final artifact cannot be written.
        """
        settings = self.settings
        if not settings.api_key:
            raise ConfigurationError(f"API key for provider '{settings.provider}' is not set in environment variables")

        logger.info("Reading images from: %s", settings.images_dir)
        items = list_images(settings.images_dir)
        state = RunState(total_count=len(items))

        if not items:
            logger.warning("No images found in the directory")
            return RunReport(state=state)

        print_run_header(self.console, settings.images_dir, len(items), self.client.model,
                         settings.prompt, settings.concurrency)

        analyzer = RetryingAnalyzer(
            client=self.client,
            prompt=settings.prompt,
            max_tokens=settings.max_tokens,
            max_retries=settings.max_retries,
            retry_delay=settings.retry_delay,
            image_max_size=settings.image_max_size,
        )
        writer = None
        if settings.checkpoint_dir is not None:
            writer = CheckpointWriter(settings.checkpoint_dir, self.client.model, settings.prompt)
            logger.info("Checkpointing each batch to: %s", writer.directory)
        scheduler = BatchScheduler(
            analyzer=analyzer,
            aggregator=ProgressAggregator(state),
            concurrency=settings.concurrency,
            batch_delay=settings.batch_delay,
            on_window_complete=self._checkpoint_hook(writer) if writer else None,
        )

        await scheduler.run(items)

        save_artifact(settings.output_file, build_artifact(state, self.client.model, settings.prompt))
        logger.info("Results saved to: %s", settings.output_file)
        if writer is not None:
            try:
                writer.write_summary(state)
            except PersistFailure as err:
                logger.error("Checkpoint summary not saved: %s", err)

        print_summary(self.console, state, settings.output_file)
        return RunReport(state=state, output_file=settings.output_file)


def build_processor(settings: Settings, console: Optional[Console] = None) -> BatchProcessor:
    """Build a BatchProcessor with the configured vision client."""
    client = get_client(
        settings.provider,
        api_key=settings.api_key,
        model=settings.model,
        timeout=settings.request_timeout,
    )
    return BatchProcessor(settings=settings, client=client, console=console)
