"""
API integrations for remote vision services.

Provides a unified client interface over OpenAI, Claude and Gemini.
"""

from .base import VisionClient
from .clients import ClaudeClient, OpenAIClient, GeminiClient, get_client
from .prompt import DEFAULT_PROMPT

__all__ = [
    "VisionClient",
    "ClaudeClient",
    "OpenAIClient",
    "GeminiClient",
    "get_client",
    "DEFAULT_PROMPT",
]
