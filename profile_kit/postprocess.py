import logging
from dataclasses import dataclass
from typing import List, Sequence, Tuple

import numpy as np

from .nms import suppress
from .types import Box, Candidate, Detection

logger = logging.getLogger(__name__)

# cx, cy, w, h, objectness
_BOX_COLUMNS = 5


@dataclass(frozen=True)
class YoloPostConfig:
    """
    Thresholds for YOLO post processing.
    """

    conf_threshold: float = 0.5
    iou_threshold: float = 0.4


def _as_rows(preds: np.ndarray) -> np.ndarray:
    p = np.asarray(preds, dtype=np.float32)
    if p.ndim == 3:
        if p.shape[0] != 1:
            raise ValueError(f"Batch > 1 is not supported (got shape {p.shape}). Pass one image at a time.")
        p = p[0]
    if p.ndim == 1:
        p = p[None, :]
    if p.ndim != 2:
        raise ValueError(f"Unsupported YOLO output shape: {p.shape}")
    if p.shape[0] > 0 and p.shape[1] <= _BOX_COLUMNS:
        raise ValueError(f"Expected rows of 5 + num_classes values, got shape {p.shape}")
    return p


def decode(
    raw_outputs: Sequence[np.ndarray],
    image_width: int,
    image_height: int,
    conf_threshold: float,
) -> List[Candidate]:
    """
    Decode raw YOLO head outputs into candidates in image pixel coordinates.

    Each row is [cx, cy, w, h, objectness, class_scores...] with box values
    normalized to the network input. Confidence is the best class score
    (objectness is not folded in). Rows at or below `conf_threshold` are
    dropped.

    The top-left corner is truncated toward zero, not rounded, which shifts
    boxes slightly toward the origin. Boxes are not clipped to the image.
    """

    candidates: List[Candidate] = []

    for preds in raw_outputs:
        p = _as_rows(preds)
        if p.shape[0] == 0:
            continue

        class_scores = p[:, _BOX_COLUMNS:]
        # argmax returns the first maximum, so ties go to the lowest class id.
        class_ids = np.argmax(class_scores, axis=1)
        scores = class_scores[np.arange(class_scores.shape[0]), class_ids]

        keep = scores > conf_threshold
        if not np.any(keep):
            continue

        rows = p[keep]
        cx = rows[:, 0] * image_width
        cy = rows[:, 1] * image_height
        w_box = rows[:, 2] * image_width
        h_box = rows[:, 3] * image_height
        x = np.trunc(cx - w_box / 2).astype(np.int64)
        y = np.trunc(cy - h_box / 2).astype(np.int64)

        for xi, yi, wi, hi, cls_id, score in zip(x, y, w_box, h_box, class_ids[keep], scores[keep]):
            candidates.append(
                Candidate(
                    box=Box(x=int(xi), y=int(yi), width=float(wi), height=float(hi)),
                    class_id=int(cls_id),
                    confidence=float(score),
                )
            )

    logger.debug("Decoded %d candidates from %d output(s)", len(candidates), len(raw_outputs))
    return candidates


class YoloPostprocessor:
    """
    Raw network outputs -> deduplicated detections for one image.

    Supported layout (per head): (N, 5 + C) rows of
    [cx, cy, w, h, objectness, class_scores...], as emitted by Darknet YOLO
    layers through OpenCV DNN or by an equivalent ONNX export. Torch outputs
    must be converted to NumPy first.
    """

    def __init__(self, cfg: YoloPostConfig):
        self.cfg = cfg

    def process(self, raw_outputs: Sequence[np.ndarray], orig_size: Tuple[int, int]) -> List[Detection]:
        """
        Args:
            raw_outputs: one array per detection head.
            orig_size: (width, height) of the original image.
        """

        orig_w, orig_h = orig_size
        candidates = decode(raw_outputs, orig_w, orig_h, self.cfg.conf_threshold)
        return suppress(candidates, self.cfg.conf_threshold, self.cfg.iou_threshold)
