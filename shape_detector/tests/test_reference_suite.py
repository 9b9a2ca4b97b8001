"""Tests for the synthetic reference suite."""

import pytest
from PIL import Image, ImageDraw

from ..application.services.reference_suite import (
    ExpectedCount,
    ReferenceOutcome,
    build_reference_cases,
    check_expectations,
    draw_shape,
    format_suite_report,
    regular_polygon_points,
    run_reference_suite,
    single_shape_case,
)
from ..domain.entities.shape import ClassifiedShape, DetectionResult
from ..domain.value_objects.config import ShapeType
from ..domain.value_objects.geometry import BoundingBox, Point


def _result(*shapes):
    return DetectionResult(
        shapes=tuple(
            ClassifiedShape(t, 0.9, BoundingBox(0, 0, 10, 10), Point(5, 5), area)
            for t, area in shapes
        ),
        image_width=100,
        image_height=100,
    )


class TestCases:
    """Tests for case construction."""

    def test_case_ids(self):
        assert [c.id for c in build_reference_cases()] == [
            "single_circle",
            "single_square",
            "single_triangle",
            "single_rectangle",
            "single_pentagon",
            "multiple_shapes",
            "overlapping_shapes",
            "no_shapes",
        ]

    def test_builds_rgba_canvases(self):
        for case in build_reference_cases():
            image = case.build()
            assert image.mode == "RGBA"

    def test_regular_polygon_points(self):
        points = regular_polygon_points(0, 0, 10, 4)
        assert len(points) == 4
        assert points[0] == pytest.approx((0, -10))

    def test_draw_square_is_centred(self):
        image = Image.new("RGBA", (100, 100), (255, 255, 255, 255))
        draw_shape(ImageDraw.Draw(image), ShapeType.SQUARE, 0, 20, 100, 60)
        assert image.getpixel((19, 50))[0] == 255
        assert image.getpixel((20, 50))[0] != 255


class TestCheckExpectations:
    """Tests for check_expectations."""

    def test_matching_counts_and_areas(self):
        expected = [ExpectedCount(ShapeType.SQUARE, 100, 200, 1)]
        assert check_expectations(expected, _result((ShapeType.SQUARE, 150)))

    def test_wrong_count(self):
        expected = [ExpectedCount(ShapeType.SQUARE, 100, 200, 1)]
        assert not check_expectations(
            expected, _result((ShapeType.SQUARE, 150), (ShapeType.SQUARE, 150))
        )

    def test_area_out_of_range(self):
        expected = [ExpectedCount(ShapeType.SQUARE, 100, 200, 1)]
        assert not check_expectations(expected, _result((ShapeType.SQUARE, 250)))

    def test_unexpected_type_is_ignored(self):
        expected = [ExpectedCount(ShapeType.SQUARE, 100, 200, 1)]
        assert check_expectations(
            expected, _result((ShapeType.SQUARE, 150), (ShapeType.TRIANGLE, 5))
        )

    def test_empty_expectations(self):
        assert check_expectations([], _result())


class TestRunSuite:
    """Tests for running the suite."""

    def test_single_square_passes(self):
        outcomes = run_reference_suite(cases=[single_shape_case(ShapeType.SQUARE)])

        assert len(outcomes) == 1
        outcome = outcomes[0]
        assert outcome.passed
        assert outcome.error is None
        assert [s.shape_type for s in outcome.detected_shapes] == [ShapeType.SQUARE]
        assert outcome.detected_shapes[0].area == 10000

    def test_full_suite_runs(self):
        outcomes = run_reference_suite()
        assert len(outcomes) == 8
        assert all(o.processing_time_ms >= 0 for o in outcomes)

    def test_report(self):
        outcomes = [
            ReferenceOutcome(
                case_id="no_shapes",
                name="No Shapes",
                passed=True,
                processing_time_ms=1.5,
            ),
            ReferenceOutcome(
                case_id="single_square",
                name="Single square",
                passed=False,
                processing_time_ms=2.0,
                expected=[ExpectedCount(ShapeType.SQUARE, 8000, 12000, 1)],
                error="[PIXEL_BUFFER_ERROR] bad",
            ),
        ]
        report = format_suite_report(outcomes)

        assert report.startswith("# Reference Suite Report")
        assert "- **Passed**: 1/2" in report
        assert "## Single square: FAILED" in report
        assert "  - 1x square (area: 8000-12000)" in report
        assert "- Error: [PIXEL_BUFFER_ERROR] bad" in report
