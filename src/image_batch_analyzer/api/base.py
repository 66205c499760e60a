"""
Base functionality for remote image analysis.

Every provider client turns an encoded image plus a prompt into an
AnalysisResponse (description text, model name, token usage) and reports
failures as AnalysisError with a readable message.
"""

from typing import Optional
from abc import ABC, abstractmethod

from ..core.exceptions import AnalysisError
from ..core.models import AnalysisResponse, EncodedPayload
from ..utils.log_utils import get_logger

logger = get_logger(__name__)


class VisionClient(ABC):
    """Abstract base class for vision API clients."""

    api_key_env: str = ""
    default_model: str = ""

    def __init__(self, api_key: Optional[str] = None, model: Optional[str] = None, timeout: float = 60.0):
        """Initialize the API client.

        Args:
            api_key: API key for the service.
            model: Model name; falls back to the client's default model.
            timeout: Per-request timeout in seconds.
        """
        self.api_key = api_key
        self.model = model or self.default_model
        self.timeout = timeout
        self._validate_api_key()

    @abstractmethod
    def _validate_api_key(self) -> None:
        """Validate the API key and build the SDK client.

        Raises:
            ConfigurationError: If no API key is available.
        """

    @abstractmethod
    def _call_api(self, payload: EncodedPayload, prompt: str, max_tokens: int) -> AnalysisResponse:
        """Make the actual API call and return the parsed response."""

    def analyze(self, payload: EncodedPayload, prompt: str, max_tokens: int) -> AnalysisResponse:
        """Analyze one encoded image.

        Args:
            payload: Encoded image with its media type
            prompt: Instruction text sent alongside the image
            max_tokens: Upper bound on response tokens

        Returns:
            AnalysisResponse with description, model used and token usage

        Raises:
            AnalysisError: If the API call fails or returns no text
        """
        try:
            return self._call_api(payload, prompt, max_tokens)
        except AnalysisError:
            raise
        except Exception as err:
            logger.debug("%s request failed: %s", type(self).__name__, err)
            raise AnalysisError(str(err)) from err
