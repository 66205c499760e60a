"""
image_encoder.py: Turn an image file into a base64 payload for the vision API.

Files are sent byte-for-byte by default. With a positive `max_size` the image is
downscaled with Pillow so its longer side fits the bound, and re-encoded as JPEG.
"""

import base64
import io
from pathlib import Path
from typing import Union

from PIL import Image, UnidentifiedImageError

from .exceptions import EncodingFailure
from .models import EncodedPayload
from ..utils.log_utils import get_logger

logger = get_logger(__name__)

MIME_TYPES = {
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.png': 'image/png',
    '.gif': 'image/gif',
    '.webp': 'image/webp',
}
DEFAULT_MIME_TYPE = 'image/jpeg'


def media_type_for(path: Union[str, Path]) -> str:
    return MIME_TYPES.get(Path(path).suffix.lower(), DEFAULT_MIME_TYPE)


def _downscale_to_jpeg(raw: bytes, max_size: int) -> bytes:
    """Resize so the longer side is at most `max_size` and return JPEG bytes.

    Returns the input unchanged if the image already fits.
    """
    with Image.open(io.BytesIO(raw)) as img:
        w, h = img.size
        if max(w, h) <= max_size:
            return raw
        scale = max_size / max(w, h)
        new_w, new_h = max(1, int(round(w * scale))), max(1, int(round(h * scale)))

        try:
            resample_filter = Image.Resampling.LANCZOS
        except AttributeError:
            resample_filter = Image.LANCZOS

        img_resized = img.resize((new_w, new_h), resample=resample_filter)
        if img_resized.mode != "RGB":
            img_resized = img_resized.convert("RGB")
        buffer = io.BytesIO()
        img_resized.save(buffer, format="JPEG")
        return buffer.getvalue()


def encode_image(path: Union[str, Path], max_size: int = 0) -> EncodedPayload:
    """
    Read the image at `path` and return its base64 payload and media type.

    Raises EncodingFailure if the file cannot be read or decoded.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except OSError as err:
        raise EncodingFailure(f"Failed to read image '{path}': {err}") from err

    media_type = media_type_for(path)
    if max_size > 0:
        try:
            resized = _downscale_to_jpeg(raw, max_size)
        except (UnidentifiedImageError, OSError) as err:
            raise EncodingFailure(f"Failed to decode image '{path}': {err}") from err
        if resized is not raw:
            logger.debug("Downscaled %s to fit %dpx", path.name, max_size)
            raw, media_type = resized, 'image/jpeg'

    return EncodedPayload(
        media_type=media_type,
        data=base64.b64encode(raw).decode("utf-8"),
    )
