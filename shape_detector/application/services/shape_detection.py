"""Shape detection service - orchestrates the detection pipeline."""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from pathlib import Path

from ...config import DEFAULT_MAX_DIMENSION
from ...domain.entities.image import ForegroundMask, PixelBuffer
from ...domain.entities.shape import ClassifiedShape, DetectionResult, Region
from ...domain.services.binarization import binarize
from ...domain.services.classification import classify
from ...domain.services.feature_extraction import compute_features
from ...domain.services.region_extraction import VisitedMask, extract_regions
from ...domain.value_objects.config import DetectionConfig

logger = logging.getLogger(__name__)


@dataclass
class PipelineContext:
    """State owned by a single detection run.

    Masks are allocated per run and dropped with the context, so concurrent
    runs never share mutable grids.
    """
    pixels: PixelBuffer
    config: DetectionConfig
    mask: ForegroundMask | None = None
    visited: VisitedMask | None = None
    regions: list[Region] = field(default_factory=list)
    shapes: list[ClassifiedShape] = field(default_factory=list)


class PipelineStep:
    """Base class for pipeline steps."""

    def __init__(self, name: str):
        self.name = name

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        """Execute this step and return updated context."""
        raise NotImplementedError


class BinarizeStep(PipelineStep):
    """Step 1: Build the foreground mask."""

    def __init__(self):
        super().__init__("binarize")

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        ctx.mask = binarize(ctx.pixels, ctx.config.brightness_threshold)
        logger.debug(f"Foreground pixels: {ctx.mask.count}")
        return ctx


class ExtractRegionsStep(PipelineStep):
    """Step 2: Flood fill connected foreground regions."""

    def __init__(self):
        super().__init__("extract_regions")

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        ctx.visited = VisitedMask(ctx.mask.width, ctx.mask.height)
        ctx.regions = extract_regions(
            ctx.mask,
            min_region_pixels=ctx.config.min_region_pixels,
            visited=ctx.visited
        )
        return ctx


class ClassifyRegionsStep(PipelineStep):
    """Step 3: Measure and classify each region in discovery order."""

    def __init__(self):
        super().__init__("classify_regions")

    def execute(self, ctx: PipelineContext) -> PipelineContext:
        dropped = 0
        for region in ctx.regions:
            features = compute_features(
                region,
                perimeter_method=ctx.config.perimeter_method,
                min_pixels=ctx.config.min_feature_pixels
            )
            if features is None:
                dropped += 1
                continue

            classification = classify(features, ctx.config)
            if classification is None:
                dropped += 1
                continue

            ctx.shapes.append(ClassifiedShape(
                shape_type=classification.shape_type,
                confidence=classification.confidence,
                bounding_box=features.bounding_box,
                centroid=features.centroid,
                area=features.area,
            ))

        logger.debug(f"Classified {len(ctx.shapes)} shapes, dropped {dropped} regions")
        return ctx


class ShapeDetectionService:
    """Detect and classify shapes in pixel buffers.

    The service holds configuration only; every call builds its own
    pipeline context.
    """

    def __init__(self, config: DetectionConfig | None = None):
        self.config = config or DetectionConfig()
        self._steps: list[PipelineStep] = [
            BinarizeStep(),
            ExtractRegionsStep(),
            ClassifyRegionsStep(),
        ]

    def detect_shapes(self, pixels: PixelBuffer) -> DetectionResult:
        """Run the full pipeline over one image.

        Args:
            pixels: Decoded RGB or RGBA buffer

        Returns:
            Detected shapes with image dimensions and elapsed time

        Raises:
            PixelBufferError: If the buffer is absent or malformed
        """
        start_time = time.perf_counter()

        ctx = PipelineContext(pixels=pixels, config=self.config)
        for step in self._steps:
            ctx = step.execute(ctx)

        elapsed_ms = (time.perf_counter() - start_time) * 1000
        logger.info(
            f"Detected {len(ctx.shapes)} shapes in "
            f"{pixels.width}x{pixels.height} image ({elapsed_ms:.1f}ms)"
        )

        return DetectionResult(
            shapes=tuple(ctx.shapes),
            image_width=pixels.width,
            image_height=pixels.height,
            processing_time_ms=elapsed_ms,
        )

    def detect_file(
        self,
        path: Path | str,
        max_dimension: int | None = DEFAULT_MAX_DIMENSION
    ) -> DetectionResult:
        """Load an image file and detect shapes in it."""
        from ...adapters.image_loader import load_pixel_buffer
        return self.detect_shapes(load_pixel_buffer(path, max_dimension=max_dimension))


def detect_shapes(pixels: PixelBuffer, config: DetectionConfig | None = None) -> DetectionResult:
    """Detect shapes with a one-off service."""
    return ShapeDetectionService(config).detect_shapes(pixels)
