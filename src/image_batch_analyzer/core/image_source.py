import os
from pathlib import Path
from typing import Iterable, List, Union

from .exceptions import DirectoryUnreadable
from .models import ItemDescriptor
from ..utils.log_utils import get_logger

logger = get_logger(__name__)

IMAGE_EXTS = {'.jpg', '.jpeg', '.png', '.gif', '.webp'}


def list_images(images_dir: Union[str, Path], extensions: Iterable[str] = IMAGE_EXTS) -> List[ItemDescriptor]:
    """
    Return the image files directly under `images_dir`, in directory-iteration order.

    Only regular files whose lower-cased suffix is in `extensions` are kept.
    Raises DirectoryUnreadable if the directory cannot be listed.
    """
    root = Path(images_dir)
    allowed = {ext.lower() for ext in extensions}
    items: List[ItemDescriptor] = []
    try:
        with os.scandir(root) as it:
            for entry in it:
                if not entry.is_file():
                    continue
                path = Path(entry.path)
                if path.suffix.lower() in allowed:
                    items.append(ItemDescriptor.from_path(path))
    except OSError as err:
        raise DirectoryUnreadable(f"Failed to read images directory: {err}") from err
    logger.debug("Found %d image(s) under %s", len(items), root)
    return items
