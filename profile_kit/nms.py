import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np

from .types import Box, Detection

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NMSConfig:
    iou_threshold: float = 0.4
    # None keeps every survivor.
    max_detections: Optional[int] = None


def iou(a: Box, b: Box) -> float:
    """
    Intersection-over-union of two unclipped boxes. Empty or inverted boxes
    give 0.
    """

    inter_w = min(a.x2, b.x2) - max(a.x, b.x)
    inter_h = min(a.y2, b.y2) - max(a.y, b.y)
    if inter_w <= 0 or inter_h <= 0:
        return 0.0
    inter = inter_w * inter_h
    union = a.area + b.area - inter
    if union <= 0:
        return 0.0
    return float(inter / union)


def nms(boxes: np.ndarray, scores: np.ndarray, cfg: NMSConfig) -> np.ndarray:
    """
    Greedy NumPy NMS. Expects boxes shape (N,4) in xyxy and scores shape (N,).
    Returns indices of kept boxes, highest score first.

    Equal scores keep their input order. A box is dropped when its IoU with an
    already kept box is strictly greater than `cfg.iou_threshold`.
    """

    if boxes.size == 0:
        return np.empty((0,), dtype=np.int64)

    x1 = boxes[:, 0]
    y1 = boxes[:, 1]
    x2 = boxes[:, 2]
    y2 = boxes[:, 3]
    areas = np.maximum(0.0, x2 - x1) * np.maximum(0.0, y2 - y1)

    order = np.argsort(-scores, kind="stable")
    keep: List[int] = []

    while order.size > 0:
        if cfg.max_detections is not None and len(keep) >= cfg.max_detections:
            break
        i = order[0]
        keep.append(int(i))

        rest = order[1:]
        xx1 = np.maximum(x1[i], x1[rest])
        yy1 = np.maximum(y1[i], y1[rest])
        xx2 = np.minimum(x2[i], x2[rest])
        yy2 = np.minimum(y2[i], y2[rest])

        w = np.maximum(0.0, xx2 - xx1)
        h = np.maximum(0.0, yy2 - yy1)
        inter = w * h
        union = areas[i] + areas[rest] - inter
        overlap = np.where(union > 0, inter / np.where(union > 0, union, 1.0), 0.0)

        order = rest[overlap <= cfg.iou_threshold]

    return np.array(keep, dtype=np.int64)


def suppress(
    candidates: Sequence[Detection],
    conf_threshold: float,
    overlap_threshold: float,
) -> List[Detection]:
    """
    Drop weak and duplicate candidates.

    Suppression ignores class ids: a confident box removes any weaker box
    that overlaps it too much, whatever its label.
    """

    if not candidates:
        logger.warning("No candidates to suppress; image has no detections.")
        return []

    kept = [c for c in candidates if c.confidence > conf_threshold]
    if not kept:
        return []

    boxes = np.array([c.box.as_xyxy() for c in kept], dtype=np.float64)
    scores = np.array([c.confidence for c in kept], dtype=np.float64)
    keep_idx = nms(boxes, scores, NMSConfig(iou_threshold=overlap_threshold))

    logger.debug("NMS kept %d of %d candidates", keep_idx.size, len(candidates))
    return [kept[i] for i in keep_idx]
