"""
Error definitions for form capture.

규칙:
- 조용한 실패 금지 → 코드가 붙은 FormCaptureError로 명시적 실패
- 제출 경로의 에러는 모두 잡아서 단일 상태 메시지로 변환
- 사용자에게는 서비스별 상세를 노출하지 않음 (로그에만 기록)
"""

from typing import Any


class FormCaptureError(Exception):
    """
    폼 캡처 전반에서 사용하는 기본 에러.

    Usage:
        raise ValidationError(ErrorCodes.IMAGE_NOT_FOUND, image_id="abc123def")
    """

    default_code = "FORM_CAPTURE_ERROR"

    def __init__(self, code: str | None = None, **context: Any) -> None:
        self.code = code or self.default_code
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"[{self.code}] {ctx_str}" if ctx_str else f"[{self.code}]"

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            **self.context,
        }


class ValidationError(FormCaptureError):
    """필수 필드/이미지 누락 등 입력 문제. 인라인 표시, 제출 차단."""

    default_code = "MISSING_REQUIRED_FIELD"


class CameraAccessError(FormCaptureError):
    """카메라 스냅샷 실패. 캡처 흐름만 중단, 폼은 유지."""

    default_code = "CAMERA_CAPTURE_FAILED"


class DeliveryError(FormCaptureError):
    """외부 전송 실패. 사용자에게는 통합 실패 메시지만 표시."""

    default_code = "DELIVERY_FAILED"


class PdfGenerationError(FormCaptureError):
    """PDF 생성 실패 (지원하지 않는 포맷, 디코드 실패)."""

    default_code = "PDF_RENDER_FAILED"


class DraftStoreError(FormCaptureError):
    """임시 저장소 읽기/쓰기 실패."""

    default_code = "DRAFT_STORE_CORRUPT"


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Validation ===
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    IMAGE_REQUIRED = "IMAGE_REQUIRED"
    UNSUPPORTED_IMAGE_TYPE = "UNSUPPORTED_IMAGE_TYPE"
    IMAGE_TOO_LARGE = "IMAGE_TOO_LARGE"
    IMAGE_NOT_FOUND = "IMAGE_NOT_FOUND"

    # === Camera ===
    CAMERA_CAPTURE_FAILED = "CAMERA_CAPTURE_FAILED"

    # === Delivery ===
    DELIVERY_NOT_CONFIGURED = "DELIVERY_NOT_CONFIGURED"
    DELIVERY_FAILED = "DELIVERY_FAILED"
    SUBMISSION_IN_PROGRESS = "SUBMISSION_IN_PROGRESS"

    # === PDF ===
    NO_IMAGES = "NO_IMAGES"
    IMAGE_DECODE_FAILED = "IMAGE_DECODE_FAILED"
    PDF_RENDER_FAILED = "PDF_RENDER_FAILED"

    # === Draft ===
    DRAFT_STORE_CORRUPT = "DRAFT_STORE_CORRUPT"
    DRAFT_LOCK_TIMEOUT = "DRAFT_LOCK_TIMEOUT"
