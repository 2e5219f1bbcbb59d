from __future__ import annotations

from typing import Dict, Iterable, Optional, Tuple

import cv2
import numpy as np

from .types import Detection


def format_label(det: Detection, class_names: Optional[Dict[int, str]] = None) -> str:
    name = (class_names or {}).get(det.class_id, "Unknown")
    return f"{name} Confidence: {det.confidence:.2f}"


def draw_detections(
    image_bgr: np.ndarray,
    detections: Iterable[Detection],
    *,
    class_names: Optional[Dict[int, str]] = None,
    color: Tuple[int, int, int] = (0, 255, 0),
    box_thickness: int = 2,
    font_scale: float = 0.5,
    font_thickness: int = 1,
) -> np.ndarray:
    """
    Draw boxes + "<name> Confidence: 0.87" labels on a copy of a BGR image.

    Boxes are drawn where they were decoded; OpenCV clips anything that falls
    outside the canvas.
    """

    if image_bgr is None or not hasattr(image_bgr, "shape"):
        raise TypeError("image_bgr must be a NumPy array (BGR).")
    if image_bgr.ndim != 3 or image_bgr.shape[2] != 3:
        raise ValueError(f"Expected image shape (H, W, 3), got {getattr(image_bgr, 'shape', None)}")

    out = image_bgr.copy()
    for det in detections:
        box = det.box
        top_left = (int(box.x), int(box.y))
        bottom_right = (int(box.x2), int(box.y2))
        cv2.rectangle(out, top_left, bottom_right, color, thickness=box_thickness)
        cv2.putText(
            out,
            format_label(det, class_names),
            (int(box.x), int(box.y) - 5),
            cv2.FONT_HERSHEY_SIMPLEX,
            font_scale,
            color,
            thickness=font_thickness,
        )

    return out
