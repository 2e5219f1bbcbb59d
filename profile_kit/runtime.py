from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np

from .backends import InferenceBackend
from .config import DetectorConfig, config_summary
from .postprocess import YoloPostConfig, YoloPostprocessor
from .preprocess import preprocess
from .types import Detection, ValidationResult
from .validate import evaluate_profile_picture

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


def find_project_root(
    start: Optional[PathLike] = None,
    markers: Sequence[str] = ("pyproject.toml", ".git"),
) -> Path:
    """
    Best-effort project root discovery, used to resolve relative model paths.
    """

    p = Path(start) if start is not None else Path.cwd()
    p = p.resolve()

    if p.is_file():
        p = p.parent

    for parent in (p, *p.parents):
        for m in markers:
            if (parent / m).exists():
                return parent
    return p


def resolve_path(path: PathLike, root: Optional[PathLike] = "auto") -> Path:
    """
    Resolve `path` to an absolute Path.

    - Absolute paths are returned as-is.
    - Relative paths are resolved against `root` if provided, the project
      root otherwise.
    """

    p = Path(path)
    if p.is_absolute():
        return p

    if root == "auto" or root is None:
        base = find_project_root()
    else:
        base = Path(root).resolve()

    return (base / p).resolve()


class ProfilePictureDetector:
    """
    Pipeline: preprocess (resize) -> inference -> decode + NMS -> profile rule.

    The detector expects BGR images (OpenCV-style) as `np.ndarray`. Detections
    are returned in original image coordinates. Nothing is cached between
    calls, so one instance may serve several threads as long as its backend
    tolerates concurrent forward passes.
    """

    def __init__(self, backend: InferenceBackend, config: DetectorConfig):
        self.backend = backend
        self.config = config
        self.post = YoloPostprocessor(
            YoloPostConfig(conf_threshold=config.conf_threshold, iou_threshold=config.nms_threshold)
        )
        logger.info("Initialized ProfilePictureDetector with %s", config_summary(config))

    def preprocess(self, image_bgr: np.ndarray) -> np.ndarray:
        return preprocess(image_bgr, size=self.config.input_size, swap_rb=self.config.swap_rb)

    def detect(self, image_bgr: np.ndarray) -> List[Detection]:
        logger.debug("Starting object detection.")
        blob = self.preprocess(image_bgr)
        raw_outputs = self.backend.forward(blob)
        orig_h, orig_w = image_bgr.shape[:2]
        detections = self.post.process(raw_outputs, orig_size=(orig_w, orig_h))
        logger.info("Detected %d objects.", len(detections))
        return detections

    def evaluate(self, image_bgr: np.ndarray) -> ValidationResult:
        return self.evaluate_detections(self.detect(image_bgr), image_bgr)

    def evaluate_detections(self, detections: Sequence[Detection], image_bgr: np.ndarray) -> ValidationResult:
        """Apply the profile rule to detections already computed for `image_bgr`."""
        orig_h, orig_w = image_bgr.shape[:2]
        return evaluate_profile_picture(
            detections,
            orig_w,
            orig_h,
            self.config.min_face_percentage,
            self.config.max_face_percentage,
            self.config.human_class_id,
        )

    def is_valid_profile_picture(self, image_bgr: np.ndarray) -> bool:
        return self.evaluate(image_bgr).valid

    def __call__(self, image_bgr: np.ndarray) -> List[Detection]:
        return self.detect(image_bgr)


def build_backend(config: DetectorConfig, root: Optional[PathLike] = "auto") -> InferenceBackend:
    """
    Load the inference backend named by `config` (or inferred from the model
    file extension). Raises ModelInitializationError if the model can't load.
    """

    chosen = config.resolved_backend
    model_configuration = resolve_path(config.model_configuration, root=root)

    if chosen == "opencv_dnn":
        from .backends.opencv_dnn_backend import OpenCvDnnBackend, OpenCvDnnBackendConfig

        return OpenCvDnnBackend(
            model_configuration,
            resolve_path(config.model_weights, root=root),
            OpenCvDnnBackendConfig(
                preferable_backend=config.preferable_backend,
                preferable_target=config.preferable_target,
            ),
        )

    if chosen == "onnxruntime":
        from .backends.onnxruntime_backend import OnnxRuntimeBackend, OnnxRuntimeBackendConfig

        return OnnxRuntimeBackend(
            model_configuration,
            OnnxRuntimeBackendConfig(providers=config.onnx_providers),
        )

    raise ValueError(f"Unsupported backend: {config.backend!r}")


def load_detector(config: DetectorConfig, root: Optional[PathLike] = "auto") -> ProfilePictureDetector:
    """
    Create a ready detector for a model on disk.

    Typical usage:
        detector = load_detector(DetectorConfig("models/yolov3.cfg", "models/yolov3.weights"))
        ok = detector.is_valid_profile_picture(cv2.imread("me.jpg"))
    """

    return ProfilePictureDetector(build_backend(config, root=root), config)
