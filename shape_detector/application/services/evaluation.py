"""Evaluation harness - score detections against annotated ground truth."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Sequence

from shapely.geometry import box

from ...domain.entities.shape import ClassifiedShape
from ...domain.value_objects.config import ShapeType
from ...domain.value_objects.geometry import BoundingBox, Point
from ...exceptions import EvaluationError

logger = logging.getLogger(__name__)

DEFAULT_IOU_THRESHOLD = 0.5


@dataclass(frozen=True, slots=True)
class ExpectedShape:
    """One annotated shape."""
    shape_type: ShapeType
    center: Point
    bounding_box: BoundingBox


@dataclass
class EvaluationCase:
    """Annotated image used to score the detector."""
    id: str
    description: str
    expected_shapes: list[ExpectedShape] = field(default_factory=list)
    image_path: str | None = None


@dataclass
class TypeTally:
    """Per-type counters."""
    detected: int = 0
    expected: int = 0
    correct: int = 0


@dataclass(frozen=True, slots=True)
class MatchDetail:
    """How one detection was scored. ``expected`` is None for a false positive."""
    expected: ShapeType | None
    detected: ShapeType
    confidence: float
    is_correct: bool


@dataclass
class EvaluationResult:
    """Metrics for one evaluation case."""
    case_id: str
    passed: bool = False
    detected_shapes: int = 0
    expected_shapes: int = 0
    true_positives: int = 0
    false_positives: int = 0
    false_negatives: int = 0
    precision: float = 0.0
    recall: float = 0.0
    f1_score: float = 0.0
    shape_wise_results: dict[ShapeType, TypeTally] = field(default_factory=dict)
    details: list[MatchDetail] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "testCaseId": self.case_id,
            "passed": self.passed,
            "detectedShapes": self.detected_shapes,
            "expectedShapes": self.expected_shapes,
            "truePositives": self.true_positives,
            "falsePositives": self.false_positives,
            "falseNegatives": self.false_negatives,
            "precision": self.precision,
            "recall": self.recall,
            "f1Score": self.f1_score,
            "shapeWiseResults": {
                shape_type.value: asdict(tally)
                for shape_type, tally in self.shape_wise_results.items()
            },
            "details": [
                {
                    "expected": d.expected.value if d.expected else "none",
                    "detected": d.detected.value,
                    "confidence": d.confidence,
                    "isCorrect": d.is_correct,
                }
                for d in self.details
            ],
        }


@dataclass(frozen=True, slots=True)
class OverallMetrics:
    """Averages over every evaluated case."""
    total_tests: int = 0
    passed_tests: int = 0
    success_rate: float = 0.0
    average_precision: float = 0.0
    average_recall: float = 0.0
    average_f1_score: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalTests": self.total_tests,
            "passedTests": self.passed_tests,
            "successRate": self.success_rate,
            "averagePrecision": self.average_precision,
            "averageRecall": self.average_recall,
            "averageF1Score": self.average_f1_score,
        }


def _to_polygon(bbox: BoundingBox):
    return box(bbox.x, bbox.y, bbox.x + bbox.width, bbox.y + bbox.height)


def calculate_iou(box1: BoundingBox, box2: BoundingBox) -> float:
    """Intersection over union of two boxes (0 when both are empty)."""
    poly1 = _to_polygon(box1)
    poly2 = _to_polygon(box2)
    intersection = poly1.intersection(poly2).area
    union = poly1.area + poly2.area - intersection
    if union <= 0:
        return 0.0
    return intersection / union


def is_shape_match(
    detected: ClassifiedShape,
    expected: ExpectedShape,
    iou_threshold: float = DEFAULT_IOU_THRESHOLD
) -> bool:
    """Check type, overlap and centre distance.

    Centres must lie within half the detected box diagonal of each other.
    """
    iou = calculate_iou(detected.bounding_box, expected.bounding_box)
    center_distance = detected.centroid.distance_to(expected.center)
    max_center_distance = detected.bounding_box.diagonal * 0.5

    return (
        iou >= iou_threshold
        and center_distance <= max_center_distance
        and detected.shape_type == expected.shape_type
    )


def _safe_ratio(numerator: float, denominator: float) -> float:
    return numerator / denominator if denominator else 0.0


def calculate_metrics(
    case: EvaluationCase,
    detected_shapes: Sequence[ClassifiedShape],
    iou_threshold: float = DEFAULT_IOU_THRESHOLD
) -> EvaluationResult:
    """Score detections against one case.

    Each detection is paired with the unmatched expected shape it overlaps
    most. A pairing at or above ``iou_threshold`` with the same type is a
    true positive. A pairing with the wrong type is recorded in the details
    but is neither a true nor a false positive, and the expected shape stays
    unmatched. A detection with no pairing is a false positive.
    """
    result = EvaluationResult(
        case_id=case.id,
        detected_shapes=len(detected_shapes),
        expected_shapes=len(case.expected_shapes),
    )

    for shape_type in [s.shape_type for s in case.expected_shapes] + \
            [s.shape_type for s in detected_shapes]:
        result.shape_wise_results.setdefault(shape_type, TypeTally())

    for expected in case.expected_shapes:
        result.shape_wise_results[expected.shape_type].expected += 1

    matched: set[int] = set()

    for detected in detected_shapes:
        result.shape_wise_results[detected.shape_type].detected += 1

        best_index = -1
        best_iou = 0.0
        for j, expected in enumerate(case.expected_shapes):
            if j in matched:
                continue
            iou = calculate_iou(detected.bounding_box, expected.bounding_box)
            if iou > best_iou:
                best_iou = iou
                best_index = j

        if best_index >= 0 and best_iou >= iou_threshold:
            expected = case.expected_shapes[best_index]
            is_correct = detected.shape_type == expected.shape_type
            if is_correct:
                result.true_positives += 1
                result.shape_wise_results[detected.shape_type].correct += 1
                matched.add(best_index)
            result.details.append(MatchDetail(
                expected=expected.shape_type,
                detected=detected.shape_type,
                confidence=detected.confidence,
                is_correct=is_correct,
            ))
        else:
            result.false_positives += 1
            result.details.append(MatchDetail(
                expected=None,
                detected=detected.shape_type,
                confidence=detected.confidence,
                is_correct=False,
            ))

    result.false_negatives = len(case.expected_shapes) - len(matched)

    result.precision = _safe_ratio(
        result.true_positives, result.true_positives + result.false_positives
    )
    result.recall = _safe_ratio(
        result.true_positives, result.true_positives + result.false_negatives
    )
    result.f1_score = _safe_ratio(
        2 * result.precision * result.recall, result.precision + result.recall
    )
    result.passed = result.false_positives == 0 and result.false_negatives == 0

    return result


class EvaluationManager:
    """Collect evaluation cases and results, and report on them."""

    def __init__(self, cases: list[EvaluationCase] | None = None):
        self._cases: list[EvaluationCase] = list(cases or [])
        self._results: list[EvaluationResult] = []
        self.current_case_index = -1

    def add_case(self, case: EvaluationCase) -> None:
        self._cases.append(case)

    def get_case(self, case_id: str) -> EvaluationCase | None:
        return next((c for c in self._cases if c.id == case_id), None)

    def select_case(self, index: int) -> EvaluationCase:
        """Make the case at ``index`` the default for :meth:`evaluate`."""
        if not 0 <= index < len(self._cases):
            raise EvaluationError(f"No evaluation case at index {index}")
        self.current_case_index = index
        return self._cases[index]

    @property
    def cases(self) -> list[EvaluationCase]:
        return list(self._cases)

    @property
    def results(self) -> list[EvaluationResult]:
        return list(self._results)

    def evaluate(
        self,
        detected_shapes: Sequence[ClassifiedShape],
        case_id: str | None = None
    ) -> EvaluationResult:
        """Score detections against a case and record the result.

        Raises:
            EvaluationError: If no matching case exists
        """
        if case_id is not None:
            case = self.get_case(case_id)
        elif 0 <= self.current_case_index < len(self._cases):
            case = self._cases[self.current_case_index]
        else:
            case = None

        if case is None:
            raise EvaluationError("No evaluation case found", case_id=case_id)

        result = calculate_metrics(case, detected_shapes)
        self._results.append(result)
        logger.debug(
            f"Case {case.id}: precision={result.precision:.2f} "
            f"recall={result.recall:.2f} passed={result.passed}"
        )
        return result

    def overall_metrics(self) -> OverallMetrics:
        if not self._results:
            return OverallMetrics()

        count = len(self._results)
        passed = sum(1 for r in self._results if r.passed)
        return OverallMetrics(
            total_tests=count,
            passed_tests=passed,
            success_rate=passed / count,
            average_precision=sum(r.precision for r in self._results) / count,
            average_recall=sum(r.recall for r in self._results) / count,
            average_f1_score=sum(r.f1_score for r in self._results) / count,
        )

    def generate_report(self) -> str:
        """Render a markdown summary of all results."""
        overall = self.overall_metrics()

        lines = [
            "# Shape Detection Evaluation Report",
            "## Summary",
            f"- **Total Tests**: {overall.total_tests}",
            f"- **Passed Tests**: {overall.passed_tests}",
            f"- **Success Rate**: {overall.success_rate * 100:.2f}%",
            f"- **Average Precision**: {overall.average_precision * 100:.2f}%",
            f"- **Average Recall**: {overall.average_recall * 100:.2f}%",
            f"- **Average F1 Score**: {overall.average_f1_score:.4f}",
            "",
            "## Detailed Results",
        ]

        for index, result in enumerate(self._results, 1):
            case = self.get_case(result.case_id)
            title = case.description if case and case.description else result.case_id
            lines.extend([
                f"### Test Case {index}: {title}",
                f"- **Status**: {'Passed' if result.passed else 'Failed'}",
                f"- **Shapes Detected**: {result.detected_shapes} "
                f"(Expected: {result.expected_shapes})",
                f"- **Precision**: {result.precision * 100:.2f}%",
                f"- **Recall**: {result.recall * 100:.2f}%",
                f"- **F1 Score**: {result.f1_score:.4f}",
                "",
            ])

        return "\n".join(lines) + "\n"

    def save_results(self, path: Path | str) -> Path:
        """Write overall metrics and per-case results as JSON."""
        path = Path(path)
        report = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "overallMetrics": self.overall_metrics().to_dict(),
            "results": [r.to_dict() for r in self._results],
        }
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(report, indent=2), encoding="utf-8")
        logger.info(f"Saved evaluation results to {path}")
        return path
