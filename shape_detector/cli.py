"""Command-line interface for Shape Detector."""

import argparse
import json
import logging
import sys
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from .adapters.image_loader import list_image_files, load_pixel_buffer
from .adapters.overlay import save_overlay
from .application.services.batch_detection import BatchDetector
from .application.services.reference_suite import format_suite_report, run_reference_suite
from .application.services.shape_detection import ShapeDetectionService
from .config import DEFAULT_MAX_DIMENSION, DETECTION_DEFAULTS
from .domain.value_objects.config import DetectionConfig, PerimeterMethod
from .exceptions import ConfigurationError, ShapeDetectorError
from .utils.env import setup_logging

logger = logging.getLogger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Create argument parser."""
    parser = argparse.ArgumentParser(
        prog="shape-detector",
        description="Detect and classify filled shapes in raster images"
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--log-file",
        help="Also write logs to this file"
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    detect = subparsers.add_parser("detect", help="Detect shapes in an image or folder")
    detect.add_argument("input", help="Input image or folder")
    detect.add_argument(
        "-o", "--output",
        help="Folder for overlay images (no overlays if omitted)"
    )
    detect.add_argument(
        "--json",
        dest="json_path",
        help="Write detection results to this JSON file"
    )
    detect.add_argument(
        "--max-dimension",
        type=int,
        default=DEFAULT_MAX_DIMENSION,
        help=f"Scale the larger image side to this many pixels "
             f"(default: {DEFAULT_MAX_DIMENSION}, 0 keeps native size)"
    )
    detect.add_argument(
        "--workers",
        type=int,
        default=1,
        metavar="N",
        help="Number of images processed in parallel; needs --continue-on-error "
             "(default: 1)"
    )
    detect.add_argument(
        "--continue-on-error",
        action="store_true",
        help="Continue processing remaining images if one fails"
    )

    tuning = detect.add_argument_group("Detection options")
    tuning.add_argument(
        "-t", "--threshold",
        type=int,
        default=DETECTION_DEFAULTS.brightness_threshold,
        help="Brightness threshold; darker channels are foreground "
             f"(default: {DETECTION_DEFAULTS.brightness_threshold})"
    )
    tuning.add_argument(
        "--min-region",
        type=int,
        default=DETECTION_DEFAULTS.min_region_pixels,
        metavar="PIXELS",
        help=f"Minimum region size (default: {DETECTION_DEFAULTS.min_region_pixels})"
    )
    tuning.add_argument(
        "--min-confidence",
        type=float,
        default=DETECTION_DEFAULTS.min_confidence,
        help=f"Drop shapes below this confidence (default: {DETECTION_DEFAULTS.min_confidence})"
    )
    tuning.add_argument(
        "--perimeter",
        choices=[m.value for m in PerimeterMethod],
        default=PerimeterMethod.CONTOUR.value,
        help="Perimeter estimator used for circularity (default: contour)"
    )

    selftest = subparsers.add_parser("selftest", help="Run the synthetic reference suite")
    selftest.add_argument(
        "--report",
        help="Write a markdown report to this file"
    )

    return parser


def build_config(parsed: argparse.Namespace) -> DetectionConfig:
    """Build detection config from CLI arguments.

    Raises:
        ConfigurationError: If an option is out of range
    """
    try:
        return DetectionConfig(
            brightness_threshold=parsed.threshold,
            min_region_pixels=parsed.min_region,
            min_confidence=parsed.min_confidence,
            perimeter_method=PerimeterMethod(parsed.perimeter),
        )
    except PydanticValidationError as e:
        raise ConfigurationError(f"Invalid detection options: {e}") from e


def _run_detect(parsed: argparse.Namespace) -> int:
    input_path = Path(parsed.input)
    if not input_path.exists():
        logger.error(f"Input not found: {input_path}")
        return 1

    try:
        config = build_config(parsed)
    except ConfigurationError as e:
        logger.error(str(e))
        return 1

    files = [input_path] if input_path.is_file() else list_image_files(input_path)
    if not files:
        logger.error("No image files found")
        return 1

    max_dimension = parsed.max_dimension or None
    logger.info(f"Processing {len(files)} image(s)...")

    def progress(current: int, total: int, message: str) -> None:
        logger.info(f"[{current}/{total}] {message}")

    service = ShapeDetectionService(config)
    batch = BatchDetector(service, max_dimension=max_dimension, workers=max(1, parsed.workers))
    result = batch.detect_files(
        files,
        progress_callback=progress,
        stop_on_error=not parsed.continue_on_error
    )

    report = {}
    for outcome in result.results:
        if not outcome.success:
            report[str(outcome.path)] = {"error": outcome.error_message}
            continue

        detection = outcome.result
        report[str(outcome.path)] = detection.to_dict()
        for index, shape in enumerate(detection.shapes, 1):
            logger.info(
                f"  {outcome.path.name} #{index}: {shape.shape_type.value} "
                f"{shape.confidence * 100:.1f}% at "
                f"({shape.centroid.x:.0f}, {shape.centroid.y:.0f}) "
                f"{shape.bounding_box.width}x{shape.bounding_box.height}px "
                f"area={shape.area}"
            )

        if parsed.output:
            try:
                pixels = load_pixel_buffer(outcome.path, max_dimension=max_dimension)
                save_overlay(
                    Path(parsed.output) / f"detected_{outcome.path.stem}.png",
                    pixels,
                    detection.shapes
                )
            except ShapeDetectorError as e:
                logger.error(f"  Could not save overlay for {outcome.path.name}: {e}")

    if parsed.json_path:
        json_path = Path(parsed.json_path)
        json_path.parent.mkdir(parents=True, exist_ok=True)
        json_path.write_text(json.dumps(report, indent=2), encoding="utf-8")
        logger.info(f"Saved results to {json_path}")

    if result.successful < result.total:
        logger.warning(f"Completed: {result.successful}/{result.total} succeeded")
        if not parsed.continue_on_error:
            logger.error("Use --continue-on-error to process remaining images")
        return 1

    logger.info(f"Completed: All {result.total} images processed successfully")
    return 0


def _run_selftest(parsed: argparse.Namespace) -> int:
    outcomes = run_reference_suite()

    if parsed.report:
        report_path = Path(parsed.report)
        report_path.parent.mkdir(parents=True, exist_ok=True)
        report_path.write_text(format_suite_report(outcomes), encoding="utf-8")
        logger.info(f"Saved report to {report_path}")

    return 0 if all(o.passed for o in outcomes) else 1


def main(args: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    setup_logging(logging.DEBUG if parsed.verbose else logging.INFO, log_file=parsed.log_file)

    try:
        if parsed.command == "detect":
            return _run_detect(parsed)
        return _run_selftest(parsed)
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 1


if __name__ == "__main__":
    sys.exit(main())
