"""
YOLO-based profile picture checks.

Preprocess an image, run a single-pass YOLO network through a pluggable
backend, decode + suppress its raw outputs, then decide whether the image
shows exactly one person at an acceptable size. Core steps need only NumPy
and OpenCV; ONNX Runtime is optional.
"""

from .types import Box, Candidate, Detection, ValidationResult
from .errors import InvalidImage, ModelInitializationError, ProfileKitError
from .preprocess import preprocess
from .nms import NMSConfig, iou, nms, suppress
from .postprocess import YoloPostConfig, YoloPostprocessor, decode
from .validate import evaluate_profile_picture, is_valid_profile_picture
from .config import DetectorConfig, load_detector_config
from .runtime import ProfilePictureDetector, build_backend, load_detector, resolve_path
from .labels import COCO_CLASS_NAMES, coco_label_map, load_class_names
from .image_io import list_images, read_image, write_image
from .visualize import draw_detections

__all__ = [
    "Box",
    "Candidate",
    "Detection",
    "ValidationResult",
    "InvalidImage",
    "ModelInitializationError",
    "ProfileKitError",
    "preprocess",
    "NMSConfig",
    "iou",
    "nms",
    "suppress",
    "YoloPostConfig",
    "YoloPostprocessor",
    "decode",
    "evaluate_profile_picture",
    "is_valid_profile_picture",
    "DetectorConfig",
    "load_detector_config",
    "ProfilePictureDetector",
    "build_backend",
    "load_detector",
    "resolve_path",
    "COCO_CLASS_NAMES",
    "coco_label_map",
    "load_class_names",
    "list_images",
    "read_image",
    "write_image",
    "draw_detections",
]
