import logging
from typing import Sequence

from .errors import InvalidImage
from .types import Detection, ValidationResult

logger = logging.getLogger(__name__)

REASON_OK = "ok"
REASON_WRONG_FACE_COUNT = "wrong_face_count"
REASON_FACE_TOO_SMALL = "face_too_small"
REASON_FACE_TOO_LARGE = "face_too_large"
REASON_NOT_HUMAN = "not_human"


def _require_image_area(image_width: int, image_height: int) -> None:
    if image_width <= 0 or image_height <= 0:
        raise InvalidImage(f"Image has zero area ({image_width}x{image_height}).")


def face_percentage(detection: Detection, image_width: int, image_height: int) -> float:
    """Box area as a percentage of the image area."""
    _require_image_area(image_width, image_height)
    return (detection.box.width * detection.box.height) / (image_width * image_height) * 100


def evaluate_profile_picture(
    detections: Sequence[Detection],
    image_width: int,
    image_height: int,
    min_face_percentage: float,
    max_face_percentage: float,
    human_class_id: int,
) -> ValidationResult:
    """
    Apply the profile-picture rule: exactly one detection, of the human class,
    covering between `min_face_percentage` and `max_face_percentage` of the
    image (both bounds inclusive).

    Boxes are used as decoded; a box reaching past the image edge counts its
    full area. A zero-area image raises InvalidImage.
    """

    _require_image_area(image_width, image_height)
    count = len(detections)
    if count != 1:
        logger.warning("Invalid number of faces detected. Expected 1 face but found %d.", count)
        return ValidationResult(valid=False, reason=REASON_WRONG_FACE_COUNT, detection_count=count)

    det = detections[0]
    pct = face_percentage(det, image_width, image_height)

    if pct < min_face_percentage:
        reason = REASON_FACE_TOO_SMALL
    elif pct > max_face_percentage:
        reason = REASON_FACE_TOO_LARGE
    elif det.class_id != human_class_id:
        reason = REASON_NOT_HUMAN
    else:
        reason = REASON_OK

    valid = reason == REASON_OK
    if valid:
        logger.info(
            "Detected face occupies %.2f%% of the image, within the accepted range (%.2f%% - %.2f%%).",
            pct,
            min_face_percentage,
            max_face_percentage,
        )
    else:
        logger.warning(
            "Rejected (%s): face occupies %.2f%% of the image with class id %d; accepted range %.2f%% - %.2f%%.",
            reason,
            pct,
            det.class_id,
            min_face_percentage,
            max_face_percentage,
        )

    return ValidationResult(
        valid=valid,
        reason=reason,
        detection_count=count,
        face_percentage=pct,
        class_id=det.class_id,
    )


def is_valid_profile_picture(
    detections: Sequence[Detection],
    image_width: int,
    image_height: int,
    min_face_percentage: float,
    max_face_percentage: float,
    human_class_id: int,
) -> bool:
    return evaluate_profile_picture(
        detections,
        image_width,
        image_height,
        min_face_percentage,
        max_face_percentage,
        human_class_id,
    ).valid
