import argparse
import logging
from pathlib import Path

from profile_kit import (
    DetectorConfig,
    InvalidImage,
    coco_label_map,
    draw_detections,
    list_images,
    load_class_names,
    load_detector,
    load_detector_config,
    read_image,
    write_image,
)

logger = logging.getLogger("check_profile_pictures")


def setup_logging(log_level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main() -> int:
    parser = argparse.ArgumentParser(description="Check which images in a folder are valid profile pictures.")
    parser.add_argument("input_dir", help="Folder with .jpg/.png images.")
    parser.add_argument("--out-dir", default=None, help="Write annotated copies of valid images here.")
    parser.add_argument("--config", default=None, help="JSON detector config; CLI flags override its values.")
    parser.add_argument("--model-cfg", default=None, help="Darknet .cfg (or .onnx) model definition.")
    parser.add_argument("--model-weights", default=None, help="Darknet .weights file.")
    parser.add_argument("--names", default=None, help="Class names file (.names or names: mapping). Default: COCO.")
    parser.add_argument("--conf", type=float, default=None, help="Confidence threshold (default 0.5).")
    parser.add_argument("--nms", type=float, default=None, help="NMS IoU threshold (default 0.4).")
    parser.add_argument("--min-face", type=float, default=None, help="Minimum face percentage (default 70).")
    parser.add_argument("--max-face", type=float, default=None, help="Maximum face percentage (default 90).")
    parser.add_argument("--target", default=None, help="OpenCV DNN target: cpu / opencl / cuda ...")
    parser.add_argument("--log-level", default="INFO", help="Logging level.")
    args = parser.parse_args()

    setup_logging(args.log_level)

    overrides = {
        "model_configuration": args.model_cfg,
        "model_weights": args.model_weights,
        "conf_threshold": args.conf,
        "nms_threshold": args.nms,
        "min_face_percentage": args.min_face,
        "max_face_percentage": args.max_face,
        "preferable_target": args.target,
    }
    if args.config:
        cfg = load_detector_config(Path(args.config), overrides=overrides)
    else:
        if not args.model_cfg:
            parser.error("--model-cfg is required without --config")
        cfg = DetectorConfig(**{k: v for k, v in overrides.items() if v is not None})

    class_names = load_class_names(args.names) if args.names else coco_label_map()
    detector = load_detector(cfg)

    images = list_images(args.input_dir)
    if not images:
        logger.error("No image files found in the input folder: %s", args.input_dir)
        return 1

    out_dir = Path(args.out_dir) if args.out_dir else None
    if out_dir is not None:
        out_dir.mkdir(parents=True, exist_ok=True)

    valid_count = 0
    for image_path in images:
        logger.info("Processing image: %s", image_path)
        try:
            image = read_image(image_path)
        except InvalidImage:
            continue

        detections = detector.detect(image)
        result = detector.evaluate_detections(detections, image)
        if not result:
            logger.warning("The image %s is not valid for Profile Picture (%s).", image_path, result.reason)
            continue

        valid_count += 1
        logger.info("The image %s is valid for Profile Picture.", image_path)
        if out_dir is not None:
            write_image(out_dir / image_path.name, draw_detections(image, detections, class_names=class_names))

    logger.info("%d of %d images are valid profile pictures.", valid_count, len(images))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
