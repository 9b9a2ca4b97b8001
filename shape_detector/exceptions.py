"""Custom exceptions for Shape Detector."""

from typing import Optional


class ShapeDetectorError(Exception):
    """Base exception for all application errors.

    Attributes:
        message: Human-readable error description
        error_code: Optional error code for programmatic handling
    """

    def __init__(self, message: str, error_code: Optional[str] = None):
        super().__init__(message)
        self.message = message
        self.error_code = error_code

    def __str__(self) -> str:
        if self.error_code:
            return f"[{self.error_code}] {self.message}"
        return self.message


class ConfigurationError(ShapeDetectorError):
    """Error in configuration or settings.

    Attributes:
        config_key: The configuration key that caused the error (if applicable)
    """

    def __init__(self, message: str, config_key: Optional[str] = None):
        super().__init__(message, error_code="CONFIG_ERROR")
        self.config_key = config_key


class PixelBufferError(ShapeDetectorError):
    """Malformed or absent pixel buffer handed to the pipeline.

    Attributes:
        field: The buffer attribute that failed validation (if applicable)
    """

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message, error_code="PIXEL_BUFFER_ERROR")
        self.field = field


class ImageIOError(ShapeDetectorError):
    """Error reading or writing an image file.

    Attributes:
        image_path: Path to the image file involved
    """

    def __init__(self, message: str, image_path: Optional[str] = None):
        super().__init__(message, error_code="IMAGE_ERROR")
        self.image_path = image_path

    def __str__(self) -> str:
        if self.image_path:
            return f"{super().__str__()} (image: {self.image_path})"
        return super().__str__()


class EvaluationError(ShapeDetectorError):
    """Error in the evaluation harness.

    Attributes:
        case_id: The evaluation case that caused the error (if applicable)
    """

    def __init__(self, message: str, case_id: Optional[str] = None):
        super().__init__(message, error_code="EVALUATION_ERROR")
        self.case_id = case_id
