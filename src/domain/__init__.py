"""Domain layer: errors, constants and schemas."""

from .errors import (
    CameraAccessError,
    DeliveryError,
    DraftStoreError,
    ErrorCodes,
    FormCaptureError,
    PdfGenerationError,
    ValidationError,
)
from .schemas import (
    CapturedImage,
    DeliveryOutcome,
    DraftSnapshot,
    FormFields,
    PdfDocument,
    SubmissionResult,
    SubmissionState,
)

__all__ = [
    "FormCaptureError",
    "ValidationError",
    "CameraAccessError",
    "DeliveryError",
    "PdfGenerationError",
    "DraftStoreError",
    "ErrorCodes",
    "CapturedImage",
    "FormFields",
    "DraftSnapshot",
    "PdfDocument",
    "DeliveryOutcome",
    "SubmissionResult",
    "SubmissionState",
]
