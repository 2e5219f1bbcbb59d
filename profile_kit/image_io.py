from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Sequence, Union

import cv2
import numpy as np

from .errors import InvalidImage

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

IMAGE_EXTENSIONS = (".jpg", ".jpeg", ".png")


def read_image(path: PathLike) -> np.ndarray:
    """Read an image from disk as a BGR array. Raises InvalidImage if it can't be decoded."""
    img = cv2.imread(str(path))
    if img is None or img.size == 0:
        logger.error("Could not load image from path: %s", path)
        raise InvalidImage(f"Could not load image from path: {path}")
    return img


def write_image(path: PathLike, image: np.ndarray) -> None:
    ok = cv2.imwrite(str(path), image)
    if not ok:
        logger.error("Failed to save image to %s. Check the file path and permissions.", path)
        raise OSError(f"Failed to write image: {path}")
    logger.info("Image saved at: %s", path)


def list_images(folder: PathLike, extensions: Sequence[str] = IMAGE_EXTENSIONS) -> List[Path]:
    """Image files directly inside `folder`, sorted by name. Extension match is case-insensitive."""
    root = Path(folder)
    if not root.is_dir():
        raise NotADirectoryError(str(root))
    exts = {e.lower() for e in extensions}
    return sorted(p for p in root.iterdir() if p.is_file() and p.suffix.lower() in exts)
