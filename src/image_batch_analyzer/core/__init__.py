"""
Core functionality: image discovery, encoding, retries, windowed scheduling and persistence.
"""

from .exceptions import (
    AnalyzerError,
    ConfigurationError,
    DirectoryUnreadable,
    EncodingFailure,
    AnalysisError,
    PersistFailure,
)
from .models import ItemDescriptor, EncodedPayload, TokenUsage, AnalysisResponse, Success, Failure, Outcome
from .image_source import list_images, IMAGE_EXTS
from .image_encoder import encode_image, media_type_for
from .aggregator import RunState, ProgressAggregator
from .retry import RetryingAnalyzer
from .scheduler import BatchScheduler
from .persister import build_artifact, save_artifact, load_artifact, CheckpointWriter
from .extractor import extract_descriptions, ExtractionReport

__all__ = [
    "AnalyzerError",
    "ConfigurationError",
    "DirectoryUnreadable",
    "EncodingFailure",
    "AnalysisError",
    "PersistFailure",
    "ItemDescriptor",
    "EncodedPayload",
    "TokenUsage",
    "AnalysisResponse",
    "Success",
    "Failure",
    "Outcome",
    "list_images",
    "IMAGE_EXTS",
    "encode_image",
    "media_type_for",
    "RunState",
    "ProgressAggregator",
    "RetryingAnalyzer",
    "BatchScheduler",
    "build_artifact",
    "save_artifact",
    "load_artifact",
    "CheckpointWriter",
    "extract_descriptions",
    "ExtractionReport",
]
