from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Union

import numpy as np

from ..errors import ModelInitializationError

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


@dataclass(frozen=True)
class OnnxRuntimeBackendConfig:
    """
    Configuration for ONNX Runtime inference.

    - providers: ORT execution providers (e.g., ["CUDAExecutionProvider", "CPUExecutionProvider"])
    - input_name/output_names: override auto-selected I/O names if needed
    """

    providers: Optional[Sequence[str]] = None
    input_name: Optional[str] = None
    output_names: Optional[Sequence[str]] = None


class OnnxRuntimeBackend:
    """
    ONNX Runtime backend for YOLO exports whose heads emit (N, 5 + C) rows.

    The ONNX file holds both graph and weights, so a single path is enough.
    """

    def __init__(self, model_path: PathLike, cfg: OnnxRuntimeBackendConfig = OnnxRuntimeBackendConfig()):
        try:
            import onnxruntime as ort  # type: ignore
        except ImportError as e:
            raise ModelInitializationError(
                "onnxruntime is required for the ONNX backend. Install it with `pip install onnxruntime` "
                "(or `onnxruntime-gpu`)."
            ) from e

        self.model_path = Path(model_path)
        if not self.model_path.is_file():
            logger.error("Model artifact not found: %s", self.model_path)
            raise ModelInitializationError(f"Model artifact not found: {self.model_path}")

        sess_opts = ort.SessionOptions()
        providers = list(cfg.providers) if cfg.providers is not None else None
        try:
            self.session = ort.InferenceSession(str(self.model_path), sess_options=sess_opts, providers=providers)
        except Exception as e:
            logger.error("Could not create ONNX Runtime session for %s", self.model_path)
            raise ModelInitializationError(f"Failed to load ONNX model: {e}") from e

        self.input_name = cfg.input_name or self.session.get_inputs()[0].name
        if cfg.output_names is not None:
            self.output_names = tuple(cfg.output_names)
        else:
            self.output_names = tuple(o.name for o in self.session.get_outputs())
        logger.info("Loaded ONNX model %s (providers=%s)", self.model_path.name, list(self.providers_in_use))

    @property
    def providers_in_use(self) -> Sequence[str]:
        # ORT returns providers in priority order for this session.
        return tuple(self.session.get_providers())

    def forward(self, tensor: np.ndarray, output_names: Optional[Sequence[str]] = None) -> List[np.ndarray]:
        names = list(output_names) if output_names is not None else list(self.output_names)
        return [np.asarray(o) for o in self.session.run(names, {self.input_name: tensor})]
