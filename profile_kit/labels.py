from __future__ import annotations

from typing import Dict, Tuple

COCO_CLASS_NAMES: Tuple[str, ...] = (
    "person", "bicycle", "car", "motorbike", "aeroplane", "bus", "train", "truck", "boat",
    "traffic light", "fire hydrant", "stop sign", "parking meter", "bench", "bird", "cat", "dog",
    "horse", "sheep", "cow", "elephant", "bear", "zebra", "giraffe", "backpack", "umbrella",
    "handbag", "tie", "suitcase", "frisbee", "skis", "snowboard", "sports ball", "kite",
    "baseball bat", "baseball glove", "skateboard", "surfboard", "tennis racket", "bottle",
    "wine glass", "cup", "fork", "knife", "spoon", "bowl", "banana", "apple", "sandwich",
    "orange", "broccoli", "carrot", "hot dog", "pizza", "donut", "cake", "chair", "couch",
    "potted plant", "bed", "dining table", "toilet", "TV", "laptop", "mouse", "remote",
    "keyboard", "cell phone", "microwave", "oven", "toaster", "sink", "refrigerator", "book",
    "clock", "vase", "scissors", "teddy bear", "hair drier", "toothbrush",
)


def coco_label_map() -> Dict[int, str]:
    return dict(enumerate(COCO_CLASS_NAMES))


def load_class_names(path: str) -> Dict[int, str]:
    """
    Load a {class_id: name} mapping.

    Two formats are understood:

    - Darknet `.names` files: one name per line, the line index is the id.
    - A `names:` block of `id: label` lines, as written by YOLO exports:

        names:
          0: person
          1: bicycle

    Blank lines and `#` comments are skipped in both.
    """

    with open(path, "r", encoding="utf-8") as f:
        lines = [raw.strip() for raw in f]
    lines = [line for line in lines if line and not line.startswith("#")]

    if "names:" not in lines:
        return dict(enumerate(lines))

    names: Dict[int, str] = {}
    for line in lines[lines.index("names:") + 1:]:
        if ":" not in line:
            continue
        left, right = line.split(":", 1)
        left = left.strip()
        if not left.isdigit():
            continue
        names[int(left)] = right.strip().strip("'").strip('"')
    return names
