import logging
from typing import Tuple

import cv2
import numpy as np

from .errors import InvalidImage

logger = logging.getLogger(__name__)

DEFAULT_INPUT_SIZE: Tuple[int, int] = (416, 416)


def preprocess(
    image: np.ndarray,
    size: Tuple[int, int] = DEFAULT_INPUT_SIZE,
    swap_rb: bool = True,
) -> np.ndarray:
    """
    Turn an OpenCV image into the NCHW blob a YOLO network consumes.

    The image is stretched to `size` (width, height) without letterboxing, so
    non-square inputs are distorted on purpose. Pixel values are scaled into
    [0, 1].

    Args:
        image: (H, W, 3) array in BGR order (as returned by cv2.imread).
        size: target (width, height) of the network input.
        swap_rb: reverse the channel axis (BGR -> RGB). Darknet weights are
            trained on RGB input, so keep this on for them.

    Returns:
        float32 array of shape (1, 3, height, width).
    """

    if image is None or not hasattr(image, "shape"):
        raise InvalidImage("image must be a NumPy array (H, W, 3).")
    if image.ndim != 3 or image.shape[2] != 3:
        raise InvalidImage(f"Expected image shape (H, W, 3), got {image.shape}")

    h, w = image.shape[:2]
    if h == 0 or w == 0:
        raise InvalidImage(f"Image has zero area ({w}x{h}).")

    target_w, target_h = size
    logger.debug("Resizing %dx%d image to %dx%d (swap_rb=%s)", w, h, target_w, target_h, swap_rb)

    resized = cv2.resize(image, (target_w, target_h), interpolation=cv2.INTER_LINEAR)
    if swap_rb:
        resized = resized[:, :, ::-1]

    blob = resized.astype(np.float32) / 255.0
    blob = np.transpose(blob, (2, 0, 1))[None, ...]
    return np.ascontiguousarray(blob)
