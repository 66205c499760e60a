"""
Image Batch Analyzer

Describe a directory of images with a remote vision model, in rate-limited
windows with retries, and save the results as one JSON artifact.
"""

__version__ = "0.1.0"

from .config import Settings
from .core.processor import BatchProcessor, RunReport, build_processor
from .api import VisionClient, OpenAIClient, ClaudeClient, GeminiClient, get_client
from .cli import main

__all__ = [
    "Settings",
    "BatchProcessor",
    "RunReport",
    "build_processor",
    "VisionClient",
    "OpenAIClient",
    "ClaudeClient",
    "GeminiClient",
    "get_client",
    "main",
]
