"""
API client implementations for various vision services.

This module provides concrete implementations of vision clients for different AI services,
all inheriting from the base VisionClient class for a unified interface.
"""

from typing import Optional

import anthropic
from openai import OpenAI
import google.generativeai as genai

from ..core.exceptions import AnalysisError, ConfigurationError
from ..core.models import AnalysisResponse, EncodedPayload, TokenUsage
from ..utils.log_utils import get_logger
from .base import VisionClient

logger = get_logger(__name__)


class OpenAIClient(VisionClient):
    """Client for OpenAI's chat completions API with image input."""

    api_key_env = "OPENAI_API_KEY"
    default_model = "gpt-4o"

    def _validate_api_key(self) -> None:
        if not self.api_key:
            raise ConfigurationError("OPENAI_API_KEY is not set in environment variables")
        self.client = OpenAI(api_key=self.api_key, timeout=self.timeout)

    def _call_api(self, payload: EncodedPayload, prompt: str, max_tokens: int) -> AnalysisResponse:
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": prompt},
                            {"type": "image_url", "image_url": {"url": payload.data_url}},
                        ],
                    }
                ],
                max_tokens=max_tokens,
            )
        except Exception as err:
            logger.debug("OpenAI API request failed: %s", err)
            raise AnalysisError(f"OpenAI API error: {err}") from err

        if not response.choices:
            raise AnalysisError("OpenAI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise AnalysisError("OpenAI returned empty response")

        usage = None
        if response.usage is not None:
            usage = TokenUsage(
                prompt_tokens=response.usage.prompt_tokens,
                completion_tokens=response.usage.completion_tokens,
                total_tokens=response.usage.total_tokens,
            )
        return AnalysisResponse(description=content, model_used=response.model, usage=usage)


class ClaudeClient(VisionClient):
    """Client for Anthropic's Claude messages API."""

    api_key_env = "ANTHROPIC_API_KEY"
    default_model = "claude-3-5-haiku-latest"

    def _validate_api_key(self) -> None:
        if not self.api_key:
            raise ConfigurationError("ANTHROPIC_API_KEY is not set in environment variables")
        self.client = anthropic.Anthropic(api_key=self.api_key, timeout=self.timeout)

    def _call_api(self, payload: EncodedPayload, prompt: str, max_tokens: int) -> AnalysisResponse:
        try:
            response = self.client.messages.create(
                model=self.model,
                max_tokens=max_tokens,
                messages=[
                    {
                        "role": "user",
                        "content": [
                            {"type": "text", "text": prompt},
                            {
                                "type": "image",
                                "source": {
                                    "type": "base64",
                                    "media_type": payload.media_type,
                                    "data": payload.data,
                                },
                            },
                        ],
                    }
                ],
            )
        except Exception as err:
            logger.debug("Claude API request failed: %s", err)
            raise AnalysisError(f"Claude API error: {err}") from err

        text = "".join(block.text for block in response.content if block.type == "text")
        if not text:
            raise AnalysisError("Claude returned empty response")

        usage = response.usage
        token_usage = TokenUsage(
            prompt_tokens=usage.input_tokens,
            completion_tokens=usage.output_tokens,
            total_tokens=usage.input_tokens + usage.output_tokens,
        )
        return AnalysisResponse(description=text, model_used=response.model, usage=token_usage)


class GeminiClient(VisionClient):
    """Client for Google's Gemini API."""

    api_key_env = "GOOGLE_API_KEY"
    default_model = "gemini-1.5-flash"

    def _validate_api_key(self) -> None:
        if not self.api_key:
            raise ConfigurationError("GOOGLE_API_KEY is not set in environment variables")
        genai.configure(api_key=self.api_key)

    def _call_api(self, payload: EncodedPayload, prompt: str, max_tokens: int) -> AnalysisResponse:
        try:
            model = genai.GenerativeModel(
                self.model,
                generation_config={"max_output_tokens": max_tokens},
            )
            response = model.generate_content(
                [prompt, {"mime_type": payload.media_type, "data": payload.raw_bytes()}],
                request_options={"timeout": self.timeout},
            )
            text = response.text
        except Exception as err:
            logger.debug("Gemini API request failed: %s", err)
            raise AnalysisError(f"Gemini API error: {err}") from err

        if not text:
            raise AnalysisError("Gemini returned empty response")

        token_usage = None
        meta = getattr(response, "usage_metadata", None)
        if meta is not None:
            token_usage = TokenUsage(
                prompt_tokens=meta.prompt_token_count,
                completion_tokens=meta.candidates_token_count,
                total_tokens=meta.total_token_count,
            )
        return AnalysisResponse(description=text.strip(), model_used=self.model, usage=token_usage)


CLIENTS = {
    "openai": OpenAIClient,
    "claude": ClaudeClient,
    "gemini": GeminiClient,
}


def get_client(provider: str, api_key: Optional[str] = None, model: Optional[str] = None,
               timeout: float = 60.0) -> VisionClient:
    """Factory function to create vision client instances.

    Args:
        provider: Name of the API ('openai', 'claude', 'gemini')
        api_key: API key for the provider
        model: Model name (provider default if empty)
        timeout: Per-request timeout in seconds

    Returns:
        Configured vision client instance
    """
    client_cls = CLIENTS.get(provider.lower())
    if client_cls is None:
        raise ConfigurationError(
            f"Unsupported provider '{provider}'. Choose from: {sorted(CLIENTS)}"
        )
    return client_cls(api_key=api_key, model=model, timeout=timeout)
