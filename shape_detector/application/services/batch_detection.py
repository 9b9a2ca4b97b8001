"""Batch detector for processing multiple images."""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from ...config import DEFAULT_MAX_DIMENSION
from ...domain.entities.shape import DetectionResult
from ...exceptions import ShapeDetectorError
from .shape_detection import ShapeDetectionService

logger = logging.getLogger(__name__)


@dataclass
class FileDetection:
    """Outcome for one file in a batch."""
    path: Path
    result: DetectionResult | None = None
    error_message: str | None = None

    @property
    def success(self) -> bool:
        return self.result is not None


@dataclass
class BatchResult:
    """Result of batch processing."""
    total: int
    successful: int
    failed: int
    processing_time_ms: float
    results: list[FileDetection]

    @property
    def success_rate(self) -> float:
        """Calculate success rate."""
        if self.total == 0:
            return 0.0
        return self.successful / self.total


class BatchDetector:
    """Detect shapes in many image files.

    With ``workers > 1`` each file runs through its own pipeline on a thread
    pool; runs share configuration only.
    """

    def __init__(
        self,
        service: ShapeDetectionService | None = None,
        max_dimension: int | None = DEFAULT_MAX_DIMENSION,
        workers: int = 1
    ):
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self._service = service or ShapeDetectionService()
        self._max_dimension = max_dimension
        self._workers = workers

    def _detect_one(self, path: Path) -> FileDetection:
        try:
            result = self._service.detect_file(path, max_dimension=self._max_dimension)
        except ShapeDetectorError as e:
            logger.error(f"Failed to process {path.name}: {e}")
            return FileDetection(path=path, error_message=str(e))
        return FileDetection(path=path, result=result)

    def detect_files(
        self,
        files: list[Path],
        progress_callback: Callable[[int, int, str], None] | None = None,
        stop_on_error: bool = False
    ) -> BatchResult:
        """Process multiple files.

        Args:
            files: Image files to process
            progress_callback: Optional callback(current, total, message)
            stop_on_error: Stop after the first failed file (sequential only)

        Returns:
            Batch processing result, in input order
        """
        start_time = time.perf_counter()
        results: list[FileDetection] = []

        if self._workers > 1 and stop_on_error:
            logger.warning(
                f"stop_on_error processes files sequentially; ignoring workers={self._workers}"
            )

        if self._workers > 1 and not stop_on_error:
            with ThreadPoolExecutor(max_workers=self._workers) as pool:
                for i, outcome in enumerate(pool.map(self._detect_one, files), 1):
                    if progress_callback:
                        progress_callback(i, len(files), f"Processed {outcome.path.name}")
                    results.append(outcome)
        else:
            for i, path in enumerate(files, 1):
                if progress_callback:
                    progress_callback(i, len(files), f"Processing {path.name}")
                outcome = self._detect_one(path)
                results.append(outcome)
                if not outcome.success and stop_on_error:
                    break

        successful = sum(1 for r in results if r.success)
        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(f"Batch complete: {successful}/{len(files)} succeeded ({elapsed_ms:.0f}ms)")

        return BatchResult(
            total=len(files),
            successful=successful,
            failed=len(results) - successful,
            processing_time_ms=elapsed_ms,
            results=results,
        )
