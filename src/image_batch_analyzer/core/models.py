"""
Data model shared by the batch pipeline: item descriptors, encoded payloads,
token usage and the per-image outcomes written to the result artifact.
"""

import base64
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional, Union


def utc_timestamp(moment: Optional[datetime] = None) -> str:
    """Return an ISO-8601 UTC timestamp with millisecond precision and a 'Z' suffix."""
    moment = moment or datetime.now(timezone.utc)
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(frozen=True)
class ItemDescriptor:
    """One image file to be analyzed."""
    path: Path
    display_name: str

    @classmethod
    def from_path(cls, path: Path) -> "ItemDescriptor":
        return cls(path=path, display_name=path.name)


@dataclass(frozen=True)
class EncodedPayload:
    """Image content ready to embed in a request body (base64 text plus media type)."""
    media_type: str
    data: str

    @property
    def data_url(self) -> str:
        return f"data:{self.media_type};base64,{self.data}"

    def raw_bytes(self) -> bytes:
        return base64.b64decode(self.data)


@dataclass(frozen=True)
class TokenUsage:
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int

    def to_dict(self) -> Dict[str, int]:
        return {
            "prompt_tokens": self.prompt_tokens,
            "completion_tokens": self.completion_tokens,
            "total_tokens": self.total_tokens,
        }


@dataclass(frozen=True)
class AnalysisResponse:
    """Successful response of the remote vision service."""
    description: str
    model_used: str
    usage: Optional[TokenUsage] = None


@dataclass(frozen=True)
class Success:
    image: str
    path: str
    description: str
    model_used: str
    usage: Optional[TokenUsage]
    completed_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "image": self.image,
            "path": self.path,
            "success": True,
            "description": self.description,
            "model": self.model_used,
            "usage": self.usage.to_dict() if self.usage else None,
            "timestamp": self.completed_at,
        }


@dataclass(frozen=True)
class Failure:
    image: str
    path: str
    error_message: str
    completed_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "image": self.image,
            "path": self.path,
            "success": False,
            "error": self.error_message,
            "timestamp": self.completed_at,
        }


Outcome = Union[Success, Failure]
