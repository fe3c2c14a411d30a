"""
Data schemas for form capture.

규칙:
- 필드명 통일: FORM_FIELDS 키와 동일하게 사용
- 외부 전송 키는 WIRE_FIELD_NAMES로만 변환
- quantity는 편집 중 자유 텍스트, 제출 시에만 숫자로 변환
"""

import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from src.domain.constants import FORM_FIELDS, WIRE_FIELD_NAMES

# parseInt와 같은 규칙: 앞 공백 무시, 선행 정수만
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_leading_int(value: str) -> int | None:
    """
    문자열 앞부분의 정수 파싱.

    "5" → 5, "12kg" → 12, " -3" → -3, "abc" → None
    """
    match = _LEADING_INT.match(value or "")
    if not match:
        return None
    return int(match.group(1))


# =============================================================================
# Image Schemas
# =============================================================================

@dataclass
class CapturedImage:
    """
    세션에 첨부된 이미지 1장.

    release() 이후에는 바이트가 비워지고 preview URL은 404를 반환.
    """
    image_id: str
    filename: str
    content_type: str
    data: bytes = field(repr=False)
    source: str = "upload"  # upload, camera
    created_at: str = ""
    released: bool = False

    @property
    def preview_url(self) -> str:
        return f"/api/form/images/{self.image_id}/preview"

    @property
    def size(self) -> int:
        return len(self.data)

    def release(self) -> None:
        """미리보기 리소스 해제."""
        self.data = b""
        self.released = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "image_id": self.image_id,
            "filename": self.filename,
            "content_type": self.content_type,
            "size": self.size,
            "source": self.source,
            "created_at": self.created_at,
            "preview_url": self.preview_url,
        }


# =============================================================================
# Form Schemas
# =============================================================================

@dataclass
class FormFields:
    """
    폼 필드 6개.

    바인딩 레이어(routes)가 채우고, core 로직은 이 구조체에만 의존.
    """
    date: str = ""
    article: str = ""
    client: str = ""
    order_number: str = ""
    ticket_number: str = ""
    quantity: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FormFields":
        """dict/폼 데이터에서 생성. 알 수 없는 키는 무시."""
        values = {}
        for name in FORM_FIELDS:
            raw = data.get(name)
            values[name] = "" if raw is None else str(raw)
        return cls(**values)

    def get(self, name: str) -> str:
        value: str = getattr(self, name)
        return value

    def to_dict(self) -> dict[str, str]:
        return {name: self.get(name) for name in FORM_FIELDS}

    def to_wire(self) -> dict[str, str]:
        """편집 중 값 그대로, 외부 키 이름으로 변환 (draft용)."""
        return {WIRE_FIELD_NAMES[name]: self.get(name) for name in FORM_FIELDS}

    def to_payload(self) -> dict[str, Any]:
        """
        제출용 payload.

        quantity만 정수로 변환 (변환 불가 시 None → JSON null).
        """
        payload: dict[str, Any] = self.to_wire()
        payload[WIRE_FIELD_NAMES["quantity"]] = parse_leading_int(self.quantity)
        return payload


@dataclass
class DraftSnapshot:
    """
    임시 저장 스냅샷.

    저장 형식은 {"formData": {...}, "timestamp": ISO 8601}.
    """
    form_data: dict[str, str]
    saved_at: str  # ISO 8601

    def to_dict(self) -> dict[str, Any]:
        return {
            "formData": dict(self.form_data),
            "timestamp": self.saved_at,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "DraftSnapshot":
        return cls(
            form_data=dict(data.get("formData") or {}),
            saved_at=str(data.get("timestamp", "")),
        )


# =============================================================================
# PDF Schemas
# =============================================================================

@dataclass
class PagePlacement:
    """이미지 1장의 페이지 배치 정보."""
    image_id: str
    embed_format: str  # JPEG, PNG
    source_width: int
    source_height: int
    scale: float
    x: float
    y: float
    width: float
    height: float


@dataclass
class PdfDocument:
    """생성된 PDF. placements 순서 = 페이지 순서."""
    content: bytes = field(repr=False)
    placements: list[PagePlacement] = field(default_factory=list)

    @property
    def page_count(self) -> int:
        return len(self.placements)


# =============================================================================
# Submission Schemas
# =============================================================================

class SubmissionState(str, Enum):
    """
    제출 상태.

    idle → submitting → (success | failed) → idle
    """
    IDLE = "idle"
    SUBMITTING = "submitting"
    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class DeliveryOutcome:
    """
    외부 서비스 1건의 전송 결과.

    스프레드시트는 "예외 없이 완료됨", 메신저는 응답 JSON의 ok 플래그.
    """
    service: str  # sheets, messenger
    success: bool
    detail: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "service": self.service,
            "success": self.success,
            "detail": self.detail,
        }


@dataclass
class SubmissionResult:
    """제출 1회의 결과 (화면 상태 메시지 포함)."""
    success: bool
    state: SubmissionState
    message: str
    errors: list[str] = field(default_factory=list)
    deliveries: list[DeliveryOutcome] = field(default_factory=list)
    pdf_filename: str | None = None
    run_id: str | None = None


@dataclass
class SubmissionLog:
    """
    제출 실행 로그.

    성공/실패/검증 차단 모두 기록.
    """
    run_id: str
    session_id: str
    started_at: str  # ISO 8601
    finished_at: str | None = None
    result: str = "pending"  # pending, success, failed, rejected

    image_count: int = 0
    pdf_filename: str | None = None
    validation_errors: list[str] = field(default_factory=list)
    deliveries: list[DeliveryOutcome] = field(default_factory=list)

    # Error (if failed)
    error_code: str | None = None
    error_context: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "session_id": self.session_id,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "result": self.result,
            "image_count": self.image_count,
            "pdf_filename": self.pdf_filename,
            "validation_errors": list(self.validation_errors),
            "deliveries": [d.to_dict() for d in self.deliveries],
            "error_code": self.error_code,
            "error_context": self.error_context,
        }
