"""
Validation Service: 제출 전 필수 입력 검사.

규칙:
- 순수 함수: 상태 변경 없음
- 필수 필드(date, article, client, quantity) 누락 1건당 메시지 1개
- 이미지가 없으면 메시지 1개 추가
- 유효하면 빈 목록
"""

from src.domain.constants import MSG_IMAGE_REQUIRED, REQUIRED_FIELDS
from src.domain.errors import ErrorCodes, ValidationError
from src.domain.schemas import FormFields


def field_label(name: str) -> str:
    """필드 식별자 → 표시 이름 (첫 글자만 대문자)."""
    return name[:1].upper() + name[1:]


def missing_fields(fields: FormFields) -> list[str]:
    """비어 있는 필수 필드 목록 (공백만 있는 값도 누락)."""
    return [name for name in REQUIRED_FIELDS if not fields.get(name).strip()]


def validate_submission(fields: FormFields, image_count: int) -> list[str]:
    """
    제출 가능 여부 검사.

    Args:
        fields: 현재 폼 필드
        image_count: 첨부 이미지 수

    Returns:
        에러 메시지 목록 (필드 순서 → 이미지), 유효하면 []
    """
    errors = [f"{field_label(name)} is required" for name in missing_fields(fields)]

    if image_count == 0:
        errors.append(MSG_IMAGE_REQUIRED)

    return errors


def ensure_submittable(fields: FormFields, image_count: int) -> None:
    """
    validate_submission의 예외 버전.

    Raises:
        ValidationError: MISSING_REQUIRED_FIELD 또는 IMAGE_REQUIRED
    """
    missing = missing_fields(fields)
    if missing:
        raise ValidationError(
            ErrorCodes.MISSING_REQUIRED_FIELD,
            fields=missing,
            errors=validate_submission(fields, image_count),
        )
    if image_count == 0:
        raise ValidationError(ErrorCodes.IMAGE_REQUIRED, errors=[MSG_IMAGE_REQUIRED])
