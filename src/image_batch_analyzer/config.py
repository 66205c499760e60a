from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .api.prompt import DEFAULT_PROMPT


class Settings(BaseSettings):
    """Run configuration loaded from environment variables (and a local .env file)."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    log_level: str = "INFO"

    provider: str = "openai"
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    google_api_key: str = ""
    # None selects the provider's default model
    model: Optional[str] = None
    prompt: str = DEFAULT_PROMPT
    max_tokens: int = Field(default=500, ge=1)
    request_timeout: float = Field(default=60.0, gt=0)

    images_dir: Path = Path("./images")
    output_file: Path = Path("./results.json")
    checkpoint_dir: Optional[Path] = None
    image_max_size: int = Field(default=0, ge=0)

    concurrency: int = Field(default=5, ge=1)
    # Delays are in milliseconds.
    batch_delay: int = Field(default=1000, ge=0)
    max_retries: int = Field(default=3, ge=0)
    retry_delay: int = Field(default=2000, ge=0)

    @property
    def api_key(self) -> str:
        """API key of the selected provider ('' when unset)."""
        keys = {
            "openai": self.openai_api_key,
            "claude": self.anthropic_api_key,
            "gemini": self.google_api_key,
        }
        return keys.get(self.provider.lower(), "")

    @field_validator("checkpoint_dir", mode="before")
    @classmethod
    def _blank_disables_checkpoints(cls, value: object) -> object:
        if isinstance(value, str) and not value.strip():
            return None
        return value
