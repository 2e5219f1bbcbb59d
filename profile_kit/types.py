from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class Box:
    """
    Axis-aligned rectangle in image pixel coordinates.

    `x`/`y` are the truncated top-left corner; `width`/`height` keep the
    decoder's float precision. Boxes are never clipped to the image, so any
    field may be negative or lie past the image edge.
    """

    x: int
    y: int
    width: float
    height: float

    @property
    def x2(self) -> float:
        return self.x + self.width

    @property
    def y2(self) -> float:
        return self.y + self.height

    @property
    def area(self) -> float:
        return self.width * self.height

    def as_xywh(self) -> Tuple[float, float, float, float]:
        return float(self.x), float(self.y), self.width, self.height

    def as_xyxy(self) -> Tuple[float, float, float, float]:
        return float(self.x), float(self.y), self.x2, self.y2


@dataclass(frozen=True)
class Detection:
    """
    One labeled box produced by the detector.
    """

    box: Box
    class_id: int
    confidence: float


# Decoded rows and suppression survivors share a shape.
Candidate = Detection


@dataclass(frozen=True)
class ValidationResult:
    """
    Outcome of the profile-picture rule plus the values that drove it.
    """

    valid: bool
    reason: str
    detection_count: int
    face_percentage: Optional[float] = None
    class_id: Optional[int] = None

    def __bool__(self) -> bool:
        return self.valid
