"""Synthetic reference suite - drawn canvases with known shape counts."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass, field
from typing import Callable

from PIL import Image, ImageDraw, ImageFont

from ...adapters.image_loader import pixel_buffer_from_image
from ...domain.entities.shape import ClassifiedShape, DetectionResult
from ...domain.value_objects.config import ShapeType
from ...exceptions import ShapeDetectorError
from .shape_detection import ShapeDetectionService

logger = logging.getLogger(__name__)

Color = tuple[int, int, int, int]

DEFAULT_COLOR: Color = (52, 152, 219, 255)
WHITE: Color = (255, 255, 255, 255)


@dataclass(frozen=True, slots=True)
class ExpectedCount:
    """How many shapes of a type a canvas should yield, and their area range."""
    shape_type: ShapeType
    min_area: int
    max_area: int
    count: int


@dataclass
class ReferenceCase:
    """A drawn canvas with its expected detections."""
    id: str
    name: str
    description: str
    expected: list[ExpectedCount]
    build: Callable[[], Image.Image]


@dataclass
class ReferenceOutcome:
    """Result of running one reference case."""
    case_id: str
    name: str
    passed: bool
    processing_time_ms: float
    detected_shapes: list[ClassifiedShape] = field(default_factory=list)
    expected: list[ExpectedCount] = field(default_factory=list)
    error: str | None = None


def regular_polygon_points(
    cx: float, cy: float, radius: float, sides: int
) -> list[tuple[float, float]]:
    """Vertices of a regular polygon with the first vertex pointing up."""
    points = []
    for i in range(sides):
        angle = (i * 2 * math.pi) / sides - math.pi / 2
        points.append((cx + radius * math.cos(angle), cy + radius * math.sin(angle)))
    return points


def draw_shape(
    draw: ImageDraw.ImageDraw,
    shape_type: ShapeType,
    x: float,
    y: float,
    width: float,
    height: float,
    color: Color = DEFAULT_COLOR
) -> None:
    """Draw a filled shape inside the box ``(x, y, width, height)``."""
    cx = x + width / 2
    cy = y + height / 2
    radius = min(width, height) / 2

    if shape_type == ShapeType.CIRCLE:
        draw.ellipse([cx - radius, cy - radius, cx + radius, cy + radius], fill=color)
    elif shape_type == ShapeType.SQUARE:
        size = min(width, height)
        left = x + (width - size) / 2
        top = y + (height - size) / 2
        draw.rectangle([left, top, left + size - 1, top + size - 1], fill=color)
    elif shape_type == ShapeType.RECTANGLE:
        draw.rectangle([x, y, x + width - 1, y + height - 1], fill=color)
    elif shape_type == ShapeType.TRIANGLE:
        draw.polygon([(cx, y), (x, y + height), (x + width, y + height)], fill=color)
    elif shape_type == ShapeType.PENTAGON:
        draw.polygon(regular_polygon_points(cx, cy, radius, 5), fill=color)


def _blank_canvas(width: int, height: int) -> Image.Image:
    return Image.new("RGBA", (width, height), WHITE)


def _draw_layered(
    canvas: Image.Image,
    shapes: list[tuple[ShapeType, float, float, float, float, Color]]
) -> Image.Image:
    """Alpha-composite each shape onto the canvas in order."""
    for shape_type, x, y, w, h, color in shapes:
        layer = Image.new("RGBA", canvas.size, (0, 0, 0, 0))
        draw_shape(ImageDraw.Draw(layer), shape_type, x, y, w, h, color)
        canvas = Image.alpha_composite(canvas, layer)
    return canvas


def single_shape_case(shape_type: ShapeType) -> ReferenceCase:
    """One shape centred on a 200x200 canvas."""

    def build() -> Image.Image:
        canvas = _blank_canvas(200, 200)
        draw_shape(ImageDraw.Draw(canvas), shape_type, 50, 50, 100, 100)
        return canvas

    return ReferenceCase(
        id=f"single_{shape_type.value}",
        name=f"Single {shape_type.value}",
        description=f"A single {shape_type.value} in the center of the image",
        expected=[ExpectedCount(shape_type, 8000, 12000, 1)],
        build=build,
    )


def multiple_shapes_case() -> ReferenceCase:
    def build() -> Image.Image:
        canvas = _blank_canvas(400, 300)
        draw = ImageDraw.Draw(canvas)
        draw_shape(draw, ShapeType.CIRCLE, 50, 50, 80, 80)
        draw_shape(draw, ShapeType.SQUARE, 150, 50, 80, 80)
        draw_shape(draw, ShapeType.TRIANGLE, 250, 50, 80, 80)
        draw_shape(draw, ShapeType.RECTANGLE, 50, 180, 120, 60)
        draw_shape(draw, ShapeType.PENTAGON, 250, 160, 100, 100)
        return canvas

    return ReferenceCase(
        id="multiple_shapes",
        name="Multiple Shapes",
        description="Multiple shapes of different types",
        expected=[
            ExpectedCount(ShapeType.CIRCLE, 4000, 6000, 1),
            ExpectedCount(ShapeType.SQUARE, 5000, 7000, 1),
            ExpectedCount(ShapeType.TRIANGLE, 2500, 4000, 1),
            ExpectedCount(ShapeType.RECTANGLE, 6000, 8000, 1),
            ExpectedCount(ShapeType.PENTAGON, 7000, 9000, 1),
        ],
        build=build,
    )


def overlapping_shapes_case() -> ReferenceCase:
    def build() -> Image.Image:
        return _draw_layered(_blank_canvas(300, 300), [
            (ShapeType.CIRCLE, 100, 100, 150, 150, (52, 152, 219, 179)),
            (ShapeType.SQUARE, 50, 50, 200, 200, (231, 76, 60, 179)),
        ])

    return ReferenceCase(
        id="overlapping_shapes",
        name="Overlapping Shapes",
        description="Two overlapping shapes (circle and square)",
        expected=[
            ExpectedCount(ShapeType.CIRCLE, 10000, 20000, 1),
            ExpectedCount(ShapeType.SQUARE, 30000, 45000, 1),
        ],
        build=build,
    )


def no_shapes_case() -> ReferenceCase:
    def build() -> Image.Image:
        canvas = _blank_canvas(200, 200)
        draw = ImageDraw.Draw(canvas)
        font = ImageFont.load_default()
        text = "No shapes here"
        left, top, right, bottom = draw.textbbox((0, 0), text, font=font)
        position = (100 - (right - left) / 2, 100 - (bottom - top))
        draw.text(position, text, fill=(0, 0, 0, 255), font=font)
        return canvas

    return ReferenceCase(
        id="no_shapes",
        name="No Shapes",
        description="An image with no detectable shapes",
        expected=[],
        build=build,
    )


def build_reference_cases() -> list[ReferenceCase]:
    """All reference cases in run order."""
    return [
        single_shape_case(ShapeType.CIRCLE),
        single_shape_case(ShapeType.SQUARE),
        single_shape_case(ShapeType.TRIANGLE),
        single_shape_case(ShapeType.RECTANGLE),
        single_shape_case(ShapeType.PENTAGON),
        multiple_shapes_case(),
        overlapping_shapes_case(),
        no_shapes_case(),
    ]


def check_expectations(expected: list[ExpectedCount], result: DetectionResult) -> bool:
    """Per-type counts must match and areas must fall in the expected range."""
    counts = result.count_by_type()
    for exp in expected:
        if counts.get(exp.shape_type, 0) != exp.count:
            return False

    by_type = {exp.shape_type: exp for exp in expected}
    for shape in result.shapes:
        exp = by_type.get(shape.shape_type)
        if exp and not exp.min_area <= shape.area <= exp.max_area:
            return False

    return True


def run_reference_case(
    case: ReferenceCase,
    service: ShapeDetectionService
) -> ReferenceOutcome:
    """Draw, detect and check one case."""
    start_time = time.perf_counter()
    pixels = pixel_buffer_from_image(case.build())

    try:
        result = service.detect_shapes(pixels)
    except ShapeDetectorError as e:
        logger.error(f"Error running reference case {case.id}: {e}")
        return ReferenceOutcome(
            case_id=case.id,
            name=case.name,
            passed=False,
            processing_time_ms=(time.perf_counter() - start_time) * 1000,
            expected=case.expected,
            error=str(e),
        )

    return ReferenceOutcome(
        case_id=case.id,
        name=case.name,
        passed=check_expectations(case.expected, result),
        processing_time_ms=(time.perf_counter() - start_time) * 1000,
        detected_shapes=list(result.shapes),
        expected=case.expected,
    )


def run_reference_suite(
    service: ShapeDetectionService | None = None,
    cases: list[ReferenceCase] | None = None
) -> list[ReferenceOutcome]:
    """Run every reference case and log a per-case summary."""
    service = service or ShapeDetectionService()
    outcomes = []

    for case in cases if cases is not None else build_reference_cases():
        outcome = run_reference_case(case, service)
        status = "PASSED" if outcome.passed else "FAILED"
        logger.info(f"{case.name}: {status} ({outcome.processing_time_ms:.1f}ms)")
        for shape in outcome.detected_shapes:
            logger.debug(
                f"  {shape.shape_type.value} {shape.confidence * 100:.1f}% "
                f"area={shape.area} box={shape.bounding_box.to_dict()}"
            )
        outcomes.append(outcome)

    passed = sum(1 for o in outcomes if o.passed)
    logger.info(f"Reference suite: {passed}/{len(outcomes)} passed")
    return outcomes


def format_suite_report(outcomes: list[ReferenceOutcome]) -> str:
    """Render reference outcomes as markdown."""
    passed = sum(1 for o in outcomes if o.passed)
    lines = [
        "# Reference Suite Report",
        f"- **Passed**: {passed}/{len(outcomes)}",
        "",
    ]
    for outcome in outcomes:
        lines.append(f"## {outcome.name}: {'PASSED' if outcome.passed else 'FAILED'}")
        lines.append(f"- Processing time: {outcome.processing_time_ms:.2f}ms")
        if outcome.error:
            lines.append(f"- Error: {outcome.error}")
        lines.append("- Expected:")
        if not outcome.expected:
            lines.append("  - None")
        for exp in outcome.expected:
            lines.append(
                f"  - {exp.count}x {exp.shape_type.value} "
                f"(area: {exp.min_area}-{exp.max_area})"
            )
        lines.append("- Detected:")
        if not outcome.detected_shapes:
            lines.append("  - None")
        for shape in outcome.detected_shapes:
            lines.append(
                f"  - {shape.shape_type.value} {shape.confidence * 100:.1f}% "
                f"(area: {shape.area})"
            )
        lines.append("")
    return "\n".join(lines)
