import io
import threading
import time
from collections import Counter
from pathlib import Path

import pytest
from rich.console import Console

from image_batch_analyzer.api.base import VisionClient
from image_batch_analyzer.config import Settings
from image_batch_analyzer.core.models import AnalysisResponse, EncodedPayload, ItemDescriptor, TokenUsage


class FakeVisionClient(VisionClient):
    """Scripted vision client.

    Each test image file contains its own name as bytes, so the client can tell
    which image a payload belongs to. `failures[name] = n` makes the first n
    attempts for that image fail; names in `fail_always` never succeed.
    """

    default_model = "fake-vision"

    def __init__(
        self,
        failures: dict[str, int] | None = None,
        fail_always: set[str] | None = None,
        delay: float = 0.0,
        delays: dict[str, float] | None = None,
    ) -> None:
        self.failures = dict(failures or {})
        self.fail_always = set(fail_always or ())
        self.delay = delay
        self.delays = dict(delays or {})
        self.attempts: Counter[str] = Counter()
        self.calls: list[tuple[str, float, float]] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()
        super().__init__(api_key="test-key")

    def _validate_api_key(self) -> None:
        pass

    def _call_api(self, payload: EncodedPayload, prompt: str, max_tokens: int) -> AnalysisResponse:
        name = payload.raw_bytes().decode("utf-8")
        start = time.monotonic()
        with self._lock:
            self.attempts[name] += 1
            attempt = self.attempts[name]
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            time.sleep(self.delays.get(name, self.delay))
            if name in self.fail_always or attempt <= self.failures.get(name, 0):
                raise RuntimeError(f"{name} failed on attempt {attempt}")
            return AnalysisResponse(
                description=f"A picture called {name}",
                model_used=self.model,
                usage=TokenUsage(prompt_tokens=10, completion_tokens=5, total_tokens=15),
            )
        finally:
            with self._lock:
                self.in_flight -= 1
                self.calls.append((name, start, time.monotonic()))


def write_images(directory: Path, names: list[str]) -> list[ItemDescriptor]:
    """Create one small file per name (content = name) and return descriptors in the given order."""
    directory.mkdir(parents=True, exist_ok=True)
    items = []
    for name in names:
        path = directory / name
        path.write_bytes(name.encode("utf-8"))
        items.append(ItemDescriptor.from_path(path))
    return items


@pytest.fixture()
def quiet_console() -> Console:
    return Console(file=io.StringIO(), width=120)


@pytest.fixture()
def make_settings(tmp_path: Path):
    """Build Settings that ignore the process environment's .env file."""

    def _make(**overrides: object) -> Settings:
        values: dict[str, object] = {
            "openai_api_key": "test-key",
            "images_dir": tmp_path / "images",
            "output_file": tmp_path / "results.json",
            "batch_delay": 0,
            "retry_delay": 0,
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make
