"""
Inference backends for profile_kit.

A backend owns a loaded network and turns a preprocessed blob into the raw
per-head output tables. Everything before and after the forward pass lives in
the core modules, so backends stay thin.
"""

from __future__ import annotations

from typing import List, Optional, Protocol, Sequence

import numpy as np


class InferenceBackend(Protocol):
    output_names: Sequence[str]

    def forward(self, tensor: np.ndarray, output_names: Optional[Sequence[str]] = None) -> List[np.ndarray]:
        ...


__all__ = ["InferenceBackend"]
