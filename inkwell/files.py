"""Image file storage and best-effort cleanup."""

import os
import shutil
import uuid
from pathlib import Path
from typing import BinaryIO, Optional

from .logger import get_logger

# URL prefix under which stored images are served and referenced.
IMAGES_PREFIX = "images"

ALLOWED_IMAGE_TYPES = frozenset({"image/png", "image/jpg", "image/jpeg"})

_EXTENSIONS = {"image/png": ".png", "image/jpg": ".jpg", "image/jpeg": ".jpg"}

logger = get_logger("files")


def is_allowed_image(content_type: Optional[str]) -> bool:
    return content_type in ALLOWED_IMAGE_TYPES


def _resolve_in_upload_dir(file_path: str, upload_dir: str | Path) -> Optional[Path]:
    """Map a stored ``images/<name>`` reference onto a file inside ``upload_dir``.

    Returns None for references that would land outside the upload directory.
    """
    root = Path(upload_dir).resolve()
    relative = Path(file_path.replace("\\", "/"))
    if relative.parts and relative.parts[0] == IMAGES_PREFIX:
        relative = Path(*relative.parts[1:]) if len(relative.parts) > 1 else Path()
    target = (root / relative).resolve()
    if target == root or root not in target.parents:
        return None
    return target


def clear_image(file_path: Optional[str], upload_dir: str | Path) -> None:
    """Delete a stored image. Failures are logged and never raised."""
    if not file_path:
        return
    target = _resolve_in_upload_dir(file_path, upload_dir)
    if target is None:
        logger.warning("refusing to clear image outside upload dir", file_path=file_path)
        return
    try:
        target.unlink()
        logger.info("image cleared", file_path=file_path)
    except OSError as e:
        logger.warning("failed to clear image", file_path=file_path, error=str(e))


def store_image(source: BinaryIO, content_type: str, upload_dir: str | Path) -> str:
    """Copy an uploaded image into ``upload_dir`` under a fresh name.

    Returns:
        The stored reference, ``images/<uuid><ext>``.
    """
    os.makedirs(upload_dir, exist_ok=True)
    filename = f"{uuid.uuid4().hex}{_EXTENSIONS.get(content_type, '')}"
    with open(Path(upload_dir) / filename, "wb") as out:
        shutil.copyfileobj(source, out)
    logger.info("image stored", filename=filename, content_type=content_type)
    return f"{IMAGES_PREFIX}/{filename}"
