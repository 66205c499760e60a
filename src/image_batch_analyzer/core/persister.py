"""
persister.py - write run results as JSON artifacts.

The artifact layout is read by downstream tools (description extraction, the
result viewer), so the key names below must not change:

    {"metadata": {"processedAt", "totalImages", "successfulCount",
                  "errorCount", "model", "prompt"},
     "results": [...], "errors": [...]}
"""

import json
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

from .aggregator import RunState
from .exceptions import PersistFailure
from .models import Failure, Outcome, Success, utc_timestamp
from ..utils.log_utils import get_logger

logger = get_logger(__name__)

SUMMARY_FILE = "summary.json"


def build_artifact(
    state: RunState,
    model: str,
    prompt: str,
    processed_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    """Build the result artifact for a run from its state and metadata."""
    return _artifact(state.results, state.errors, state.total_count, model, prompt, processed_at)


def _artifact(
    results: Sequence[Success],
    errors: Sequence[Failure],
    total: int,
    model: str,
    prompt: str,
    processed_at: Optional[datetime] = None,
) -> Dict[str, Any]:
    return {
        "metadata": {
            "processedAt": utc_timestamp(processed_at),
            "totalImages": total,
            "successfulCount": len(results),
            "errorCount": len(errors),
            "model": model,
            "prompt": prompt,
        },
        "results": [r.to_dict() for r in results],
        "errors": [e.to_dict() for e in errors],
    }


def save_artifact(path: Union[str, Path], artifact: Dict[str, Any]) -> None:
    """Write `artifact` to `path` as indented JSON, replacing any previous content.

    Raises:
        PersistFailure: if the file cannot be written.
    """
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(artifact, ensure_ascii=False, indent=2), encoding="utf-8")
    except (OSError, TypeError, ValueError) as err:
        raise PersistFailure(f"Failed to write results to {path}: {err}") from err
    logger.debug("Wrote artifact %s", path)


def load_artifact(path: Union[str, Path]) -> Dict[str, Any]:
    """Read a previously saved artifact back into a dict."""
    return json.loads(Path(path).read_text(encoding="utf-8"))


class CheckpointWriter:
    """
    Flushes each settled window to its own artifact file under `directory`
    (batch_0001.json, batch_0002.json, ...) and writes summary.json at the end,
    so partial progress survives a crash.
    """

    def __init__(self, directory: Union[str, Path], model: str, prompt: str) -> None:
        self.directory = Path(directory)
        self.model = model
        self.prompt = prompt
        self.written: List[Path] = []

    def batch_path(self, window_index: int) -> Path:
        return self.directory / f"batch_{window_index:04d}.json"

    def write_window(self, window_index: int, outcomes: List[Outcome]) -> Path:
        results = [o for o in outcomes if isinstance(o, Success)]
        errors = [o for o in outcomes if isinstance(o, Failure)]
        path = self.batch_path(window_index)
        save_artifact(path, _artifact(results, errors, len(outcomes), self.model, self.prompt))
        self.written.append(path)
        logger.debug("Checkpoint for window %d saved to %s", window_index, path)
        return path

    def write_summary(self, state: RunState) -> Path:
        summary = build_artifact(state, self.model, self.prompt)
        summary.pop("results")
        summary.pop("errors")
        summary["metadata"]["totalTokens"] = state.total_tokens
        summary["batchFiles"] = [p.name for p in self.written]
        path = self.directory / SUMMARY_FILE
        save_artifact(path, summary)
        return path
