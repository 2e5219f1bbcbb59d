from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple

from .backends.opencv_dnn_backend import DNN_BACKEND_NAMES, DNN_TARGET_NAMES

_DARKNET_SUFFIXES = {".cfg"}
_ONNX_SUFFIXES = {".onnx"}
_BACKEND_NAMES = {"opencv_dnn", "onnxruntime"}


def infer_backend_name(model_configuration: str) -> str:
    suffix = Path(model_configuration).suffix.lower()
    if suffix in _DARKNET_SUFFIXES:
        return "opencv_dnn"
    if suffix in _ONNX_SUFFIXES:
        return "onnxruntime"
    raise ValueError(f"Could not infer backend from extension '{suffix}'. Pass backend=... explicitly.")


@dataclass(frozen=True)
class DetectorConfig:
    """
    Everything needed to build a ProfilePictureDetector. Immutable once built.

    For Darknet models `model_configuration` is the .cfg and `model_weights`
    the .weights file. For ONNX models `model_configuration` is the .onnx file
    and `model_weights` may stay empty.
    """

    model_configuration: str
    model_weights: str = ""
    backend: Optional[str] = None
    preferable_backend: str = "opencv"
    preferable_target: str = "cpu"
    onnx_providers: Optional[Tuple[str, ...]] = None
    conf_threshold: float = 0.5
    nms_threshold: float = 0.4
    min_face_percentage: float = 70.0
    max_face_percentage: float = 90.0
    human_class_id: int = 0
    input_size: Tuple[int, int] = (416, 416)
    swap_rb: bool = True

    def __post_init__(self) -> None:
        if not self.model_configuration:
            raise ValueError("model_configuration must be provided and cannot be empty")
        backend = self.resolved_backend
        if backend not in _BACKEND_NAMES:
            raise ValueError(f"backend must be one of {sorted(_BACKEND_NAMES)}, got {self.backend!r}")
        if backend == "opencv_dnn" and not self.model_weights:
            raise ValueError("model_weights must be provided and cannot be empty for Darknet models")
        if self.preferable_backend.lower() not in DNN_BACKEND_NAMES:
            raise ValueError(
                f"preferable_backend must be one of {sorted(DNN_BACKEND_NAMES)}, got {self.preferable_backend!r}"
            )
        if self.preferable_target.lower() not in DNN_TARGET_NAMES:
            raise ValueError(
                f"preferable_target must be one of {sorted(DNN_TARGET_NAMES)}, got {self.preferable_target!r}"
            )
        if not 0.0 <= self.conf_threshold <= 1.0:
            raise ValueError("conf_threshold must be within [0, 1]")
        if not 0.0 <= self.nms_threshold <= 1.0:
            raise ValueError("nms_threshold must be within [0, 1]")
        if self.min_face_percentage < 0:
            raise ValueError("min_face_percentage must be >= 0")
        if self.max_face_percentage < self.min_face_percentage:
            raise ValueError("max_face_percentage must be >= min_face_percentage")
        if self.human_class_id < 0:
            raise ValueError("human_class_id must be >= 0")
        if len(self.input_size) != 2 or min(self.input_size) < 1:
            raise ValueError("input_size must be a (width, height) pair of positive ints")

    @property
    def resolved_backend(self) -> str:
        if self.backend is not None:
            return self.backend.lower()
        return infer_backend_name(self.model_configuration)


_ALLOWED_KEYS = {
    "model_configuration",
    "model_weights",
    "backend",
    "preferable_backend",
    "preferable_target",
    "onnx_providers",
    "conf_threshold",
    "nms_threshold",
    "min_face_percentage",
    "max_face_percentage",
    "human_class_id",
    "input_size",
    "swap_rb",
}

_FLOAT_KEYS = ("conf_threshold", "nms_threshold", "min_face_percentage", "max_face_percentage")
_STR_KEYS = ("model_configuration", "model_weights", "backend", "preferable_backend", "preferable_target")


def _resolve_model_path(value: str, base: Path) -> str:
    if not value:
        return value
    p = Path(value)
    if p.is_absolute():
        return str(p)
    return str((base / p).resolve())


def _coerce_str_tuple(value: object, key: str) -> Tuple[str, ...]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise ValueError(f"{key} must be a string or list of strings")
    return tuple(item.strip() for item in value)


def _parse_payload(payload: Dict[str, Any], base: Path) -> Dict[str, Any]:
    kwargs: Dict[str, Any] = {}
    for key in _STR_KEYS:
        if key in payload:
            value = payload[key]
            if value is not None and not isinstance(value, str):
                raise ValueError(f"{key} must be a string")
            kwargs[key] = value
    for key in _FLOAT_KEYS:
        if key in payload:
            value = payload[key]
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise ValueError(f"{key} must be a number")
            kwargs[key] = float(value)
    if "human_class_id" in payload:
        value = payload["human_class_id"]
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError("human_class_id must be an integer")
        kwargs["human_class_id"] = value
    if "swap_rb" in payload:
        if not isinstance(payload["swap_rb"], bool):
            raise ValueError("swap_rb must be a boolean")
        kwargs["swap_rb"] = payload["swap_rb"]
    if "input_size" in payload:
        value = payload["input_size"]
        if isinstance(value, int) and not isinstance(value, bool):
            value = [value, value]
        if not isinstance(value, list) or len(value) != 2 or not all(isinstance(v, int) for v in value):
            raise ValueError("input_size must be an integer or a [width, height] list")
        kwargs["input_size"] = (value[0], value[1])
    if payload.get("onnx_providers") is not None:
        kwargs["onnx_providers"] = _coerce_str_tuple(payload["onnx_providers"], "onnx_providers")

    if "model_configuration" not in kwargs:
        raise ValueError("Missing required key: model_configuration")
    kwargs["model_configuration"] = _resolve_model_path(kwargs["model_configuration"] or "", base)
    kwargs["model_weights"] = _resolve_model_path(kwargs.get("model_weights") or "", base)
    return kwargs


def load_detector_config(path: Path, overrides: Optional[Dict[str, Any]] = None) -> DetectorConfig:
    """
    Read a DetectorConfig from a JSON object.

    Relative model paths resolve against the folder holding the config file.
    `overrides` (e.g. from CLI flags) replace file values after parsing.
    """

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Detector config not found: {path}")
    raw = path.read_text(encoding="utf-8")
    try:
        payload = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Invalid detector config JSON: {path}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Detector config must be a JSON object")

    unknown = sorted(set(payload.keys()) - _ALLOWED_KEYS)
    if unknown:
        raise ValueError(f"Unknown detector config keys: {unknown}")

    kwargs = _parse_payload(payload, path.resolve().parent)
    if overrides:
        kwargs.update({k: v for k, v in overrides.items() if v is not None})
    return DetectorConfig(**kwargs)


def config_summary(cfg: DetectorConfig, keys: Sequence[str] = _FLOAT_KEYS) -> Dict[str, float]:
    return {key: getattr(cfg, key) for key in keys}
