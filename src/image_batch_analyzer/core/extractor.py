"""
extractor.py: Collect the descriptions from a directory of result artifacts.

Writes two files: `<output>` with a plain list of description texts, and
`<output stem>-detailed.json` with image name, timestamp and token count per
description. Both carry the same metadata block.
"""

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .exceptions import DirectoryUnreadable
from .models import utc_timestamp
from .persister import load_artifact, save_artifact
from ..utils.log_utils import get_logger

logger = get_logger(__name__)


@dataclass
class ExtractionReport:
    total_files: int = 0
    total_images: int = 0
    successful_descriptions: int = 0
    failed_images: int = 0
    descriptions: List[Dict[str, Any]] = field(default_factory=list)
    output_file: Optional[Path] = None
    detailed_output_file: Optional[Path] = None

    def metadata(self) -> Dict[str, Any]:
        return {
            "extractedAt": utc_timestamp(),
            "totalFiles": self.total_files,
            "totalImages": self.total_images,
            "successfulDescriptions": self.successful_descriptions,
            "failedImages": self.failed_images,
        }


def find_result_files(results_dir: Union[str, Path]) -> List[Path]:
    """Return the artifact files in `results_dir`, skipping summary files."""
    root = Path(results_dir)
    try:
        names = sorted(p for p in root.iterdir() if p.is_file())
    except OSError as err:
        raise DirectoryUnreadable(f"Failed to read results directory: {err}") from err
    return [p for p in names if p.suffix == ".json" and "summary" not in p.name]


def detailed_path(output_file: Path) -> Path:
    return output_file.with_name(f"{output_file.stem}-detailed{output_file.suffix}")


def _collect(data: Dict[str, Any], report: ExtractionReport) -> None:
    results = data.get("results")
    if isinstance(results, list):
        for result in results:
            report.total_images += 1
            if not isinstance(result, dict):
                continue
            if result.get("success") and result.get("description"):
                usage = result.get("usage") or {}
                report.descriptions.append({
                    "image": result.get("image"),
                    "description": result["description"],
                    "timestamp": result.get("timestamp"),
                    "tokens": usage.get("total_tokens") or None,
                })
                report.successful_descriptions += 1

    errors = data.get("errors")
    if isinstance(errors, list):
        report.failed_images += len(errors)
        report.total_images += len(errors)


def extract_descriptions(results_dir: Union[str, Path], output_file: Union[str, Path]) -> ExtractionReport:
    """
    Gather descriptions from every result artifact under `results_dir` and write
    the simple and detailed outputs. Files that cannot be parsed are logged and skipped.
    """
    output_file = Path(output_file)
    files = find_result_files(results_dir)
    report = ExtractionReport(total_files=len(files))
    if not files:
        logger.warning("No result files found in %s", results_dir)
        return report

    logger.info("Found %d result files in %s", len(files), results_dir)
    for path in files:
        try:
            data = load_artifact(path)
        except (OSError, json.JSONDecodeError) as err:
            logger.error("Error reading %s: %s", path.name, err)
            continue
        if isinstance(data, dict):
            _collect(data, report)

    metadata = report.metadata()
    save_artifact(output_file, {
        "metadata": metadata,
        "descriptions": [d["description"] for d in report.descriptions],
    })
    report.output_file = output_file
    report.detailed_output_file = detailed_path(output_file)
    save_artifact(report.detailed_output_file, {
        "metadata": metadata,
        "descriptions": report.descriptions,
    })
    return report
