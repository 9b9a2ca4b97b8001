"""Tests for the evaluation harness."""

import json

import pytest

from ..application.services.evaluation import (
    EvaluationCase,
    EvaluationManager,
    ExpectedShape,
    calculate_iou,
    calculate_metrics,
    is_shape_match,
)
from ..domain.entities.shape import ClassifiedShape
from ..domain.value_objects.config import ShapeType
from ..domain.value_objects.geometry import BoundingBox, Point
from ..exceptions import EvaluationError


def _detected(shape_type, x, y, w, h, confidence=0.9):
    bbox = BoundingBox(x, y, w, h)
    return ClassifiedShape(shape_type, confidence, bbox, bbox.center, w * h)


def _expected(shape_type, x, y, w, h):
    bbox = BoundingBox(x, y, w, h)
    return ExpectedShape(shape_type, bbox.center, bbox)


@pytest.fixture
def two_shape_case():
    return EvaluationCase(
        id="pair",
        description="Circle and square",
        expected_shapes=[
            _expected(ShapeType.CIRCLE, 10, 10, 50, 50),
            _expected(ShapeType.SQUARE, 100, 100, 40, 40),
        ],
    )


class TestIoU:
    """Tests for calculate_iou."""

    def test_identical(self):
        box = BoundingBox(0, 0, 10, 10)
        assert calculate_iou(box, box) == pytest.approx(1.0)

    def test_half_overlap(self):
        iou = calculate_iou(BoundingBox(0, 0, 10, 10), BoundingBox(5, 0, 10, 10))
        assert iou == pytest.approx(1 / 3)

    def test_disjoint(self):
        assert calculate_iou(BoundingBox(0, 0, 10, 10), BoundingBox(20, 20, 5, 5)) == 0.0

    def test_empty_boxes(self):
        assert calculate_iou(BoundingBox(0, 0, 0, 0), BoundingBox(0, 0, 0, 0)) == 0.0


class TestShapeMatch:
    """Tests for is_shape_match."""

    def test_match(self):
        assert is_shape_match(
            _detected(ShapeType.CIRCLE, 10, 10, 50, 50),
            _expected(ShapeType.CIRCLE, 12, 12, 50, 50),
        )

    def test_wrong_type(self):
        assert not is_shape_match(
            _detected(ShapeType.SQUARE, 10, 10, 50, 50),
            _expected(ShapeType.CIRCLE, 10, 10, 50, 50),
        )

    def test_low_overlap(self):
        assert not is_shape_match(
            _detected(ShapeType.CIRCLE, 0, 0, 10, 10),
            _expected(ShapeType.CIRCLE, 5, 0, 10, 10),
        )


class TestCalculateMetrics:
    """Tests for calculate_metrics."""

    def test_perfect(self, two_shape_case):
        detected = [
            _detected(ShapeType.CIRCLE, 10, 10, 50, 50),
            _detected(ShapeType.SQUARE, 100, 100, 40, 40),
        ]
        result = calculate_metrics(two_shape_case, detected)

        assert result.passed
        assert result.true_positives == 2
        assert result.precision == pytest.approx(1.0)
        assert result.recall == pytest.approx(1.0)
        assert result.f1_score == pytest.approx(1.0)
        assert result.shape_wise_results[ShapeType.CIRCLE].correct == 1

    def test_false_positive_and_negative(self, two_shape_case):
        detected = [
            _detected(ShapeType.CIRCLE, 10, 10, 50, 50),
            _detected(ShapeType.TRIANGLE, 300, 300, 20, 20),
        ]
        result = calculate_metrics(two_shape_case, detected)

        assert not result.passed
        assert result.true_positives == 1
        assert result.false_positives == 1
        assert result.false_negatives == 1
        assert result.precision == pytest.approx(0.5)
        assert result.recall == pytest.approx(0.5)
        assert result.details[1].expected is None

    def test_wrong_type_is_recorded_only(self, two_shape_case):
        detected = [_detected(ShapeType.SQUARE, 10, 10, 50, 50)]
        result = calculate_metrics(two_shape_case, detected)

        assert result.true_positives == 0
        assert result.false_positives == 0
        assert result.false_negatives == 2
        assert result.details[0].expected == ShapeType.CIRCLE
        assert not result.details[0].is_correct

    def test_no_detections(self, two_shape_case):
        result = calculate_metrics(two_shape_case, [])

        assert result.precision == 0.0
        assert result.recall == 0.0
        assert result.f1_score == 0.0

    def test_empty_case_passes(self):
        result = calculate_metrics(EvaluationCase(id="blank", description=""), [])
        assert result.passed

    def test_to_dict_keys(self, two_shape_case):
        detected = [_detected(ShapeType.TRIANGLE, 300, 300, 20, 20)]
        data = calculate_metrics(two_shape_case, detected).to_dict()

        assert data["testCaseId"] == "pair"
        assert data["details"][0]["expected"] == "none"
        assert data["shapeWiseResults"]["triangle"] == {
            "detected": 1, "expected": 0, "correct": 0
        }


class TestEvaluationManager:
    """Tests for EvaluationManager."""

    def test_evaluate_by_id(self, two_shape_case):
        manager = EvaluationManager([two_shape_case])
        result = manager.evaluate([], case_id="pair")

        assert result.case_id == "pair"
        assert manager.results == [result]

    def test_evaluate_selected_case(self, two_shape_case):
        manager = EvaluationManager()
        manager.add_case(two_shape_case)
        manager.select_case(0)

        assert manager.evaluate([]).case_id == "pair"
        assert [case.id for case in manager.cases] == ["pair"]

    def test_no_case(self):
        manager = EvaluationManager()
        with pytest.raises(EvaluationError):
            manager.evaluate([])
        with pytest.raises(EvaluationError):
            manager.select_case(3)

    def test_unknown_case_id(self, two_shape_case):
        manager = EvaluationManager([two_shape_case])
        with pytest.raises(EvaluationError):
            manager.evaluate([], case_id="missing")

    def test_overall_metrics(self, two_shape_case):
        manager = EvaluationManager([two_shape_case, EvaluationCase(id="blank", description="")])
        manager.evaluate([], case_id="pair")
        manager.evaluate([], case_id="blank")

        overall = manager.overall_metrics()
        assert overall.total_tests == 2
        assert overall.passed_tests == 1
        assert overall.success_rate == pytest.approx(0.5)

    def test_overall_metrics_empty(self):
        assert EvaluationManager().overall_metrics().total_tests == 0

    def test_report(self, two_shape_case):
        manager = EvaluationManager([two_shape_case])
        manager.evaluate([_detected(ShapeType.CIRCLE, 10, 10, 50, 50)], case_id="pair")
        report = manager.generate_report()

        assert report.startswith("# Shape Detection Evaluation Report")
        assert "- **Passed Tests**: 0" in report
        assert "### Test Case 1: Circle and square" in report
        assert "- **Status**: Failed" in report

    def test_save_results(self, tmp_path, two_shape_case):
        manager = EvaluationManager([two_shape_case])
        manager.evaluate([], case_id="pair")
        path = manager.save_results(tmp_path / "out" / "results.json")

        data = json.loads(path.read_text(encoding="utf-8"))
        assert set(data) == {"timestamp", "overallMetrics", "results"}
        assert data["overallMetrics"]["totalTests"] == 1
        assert data["results"][0]["testCaseId"] == "pair"
