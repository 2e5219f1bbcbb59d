from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Union

import cv2
import numpy as np

from ..errors import ModelInitializationError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

_BACKENDS: Dict[str, str] = {
    "default": "DNN_BACKEND_DEFAULT",
    "opencv": "DNN_BACKEND_OPENCV",
    "inference_engine": "DNN_BACKEND_INFERENCE_ENGINE",
    "cuda": "DNN_BACKEND_CUDA",
}

_TARGETS: Dict[str, str] = {
    "cpu": "DNN_TARGET_CPU",
    "opencl": "DNN_TARGET_OPENCL",
    "opencl_fp16": "DNN_TARGET_OPENCL_FP16",
    "cuda": "DNN_TARGET_CUDA",
    "cuda_fp16": "DNN_TARGET_CUDA_FP16",
}

DNN_BACKEND_NAMES = frozenset(_BACKENDS)
DNN_TARGET_NAMES = frozenset(_TARGETS)


def _dnn_constant(table: Dict[str, str], name: str, kind: str) -> int:
    key = name.lower()
    if key not in table:
        raise ValueError(f"Unknown DNN {kind} {name!r}. Choose one of: {sorted(table)}")
    return int(getattr(cv2.dnn, table[key]))


@dataclass(frozen=True)
class OpenCvDnnBackendConfig:
    """
    Configuration for OpenCV DNN inference.

    - preferable_backend: "opencv", "cuda", "inference_engine" or "default"
    - preferable_target: "cpu", "opencl", "opencl_fp16", "cuda" or "cuda_fp16"
    - output_names: heads to read; None uses the net's unconnected output layers

    Backend and target only change speed, never the values produced.
    """

    preferable_backend: str = "opencv"
    preferable_target: str = "cpu"
    output_names: Optional[Sequence[str]] = None


class OpenCvDnnBackend:
    """
    Darknet YOLO network (.cfg + .weights) run through cv2.dnn.

    Expects an NCHW float32 blob shaped (1, 3, H, W). A cv2.dnn.Net keeps its
    input as state, so `forward` holds a lock across setInput/forward.
    """

    def __init__(
        self,
        model_configuration: PathLike,
        model_weights: PathLike,
        cfg: OpenCvDnnBackendConfig = OpenCvDnnBackendConfig(),
    ):
        self.model_configuration = Path(model_configuration)
        self.model_weights = Path(model_weights)
        for path in (self.model_configuration, self.model_weights):
            if not path.is_file():
                logger.error("Model artifact not found: %s", path)
                raise ModelInitializationError(f"Model artifact not found: {path}")

        backend_id = _dnn_constant(_BACKENDS, cfg.preferable_backend, "backend")
        target_id = _dnn_constant(_TARGETS, cfg.preferable_target, "target")

        read_darknet = getattr(cv2.dnn, "readNetFromDarknet", None)
        if read_darknet is None:
            raise ModelInitializationError(
                f"This OpenCV build ({cv2.__version__}) cannot read Darknet models. Install opencv-python 4.x."
            )
        try:
            net = read_darknet(str(self.model_configuration), str(self.model_weights))
        except cv2.error as e:
            logger.error(
                "Could not read Darknet model %s / %s. Check that both files are valid.",
                self.model_configuration,
                self.model_weights,
            )
            raise ModelInitializationError(f"Failed to load Darknet model: {e}") from e
        if net is None or net.empty():
            raise ModelInitializationError(f"Darknet model is empty: {self.model_configuration}")

        net.setPreferableBackend(backend_id)
        net.setPreferableTarget(target_id)
        self.net = net
        self._lock = threading.Lock()

        if cfg.output_names is not None:
            self.output_names = tuple(cfg.output_names)
        else:
            self.output_names = tuple(net.getUnconnectedOutLayersNames())
        logger.info(
            "Loaded Darknet model %s (backend=%s, target=%s, outputs=%s)",
            self.model_configuration.name,
            cfg.preferable_backend,
            cfg.preferable_target,
            list(self.output_names),
        )

    def forward(self, tensor: np.ndarray, output_names: Optional[Sequence[str]] = None) -> List[np.ndarray]:
        names = list(output_names) if output_names is not None else list(self.output_names)
        with self._lock:
            self.net.setInput(tensor)
            outputs = self.net.forward(names)
        return [np.asarray(o) for o in outputs]
