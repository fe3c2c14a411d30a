"""
ID 생성: image_id, session_id, run_id

규칙:
- image_id는 세션 내에서만 고유하면 됨 (충돌 복구 없음)
- run_id는 제출 1회마다 새로 발급
"""

import secrets
import string
import uuid
from datetime import UTC, datetime

from src.domain.constants import IMAGE_ID_LENGTH

_BASE36 = string.digits + string.ascii_lowercase


def generate_image_id(length: int = IMAGE_ID_LENGTH) -> str:
    """
    이미지 로컬 ID 생성.

    포맷: base36 소문자/숫자 {length}자 (예: k3j9x0a2b)

    Note:
        충돌 가능성은 알려진 한계 (세션당 이미지 수가 적어 무시).
    """
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def generate_session_id() -> str:
    """세션 ID 생성 (UUID v4)."""
    return str(uuid.uuid4())


def generate_run_id() -> str:
    """
    Run ID 생성.

    고유성 보장: UUID v4
    포맷: RUN-{timestamp}-{uuid[:8]}

    Returns:
        run_id 문자열
    """
    now = datetime.now(UTC)
    timestamp = now.strftime("%Y%m%d%H%M%S")
    unique = uuid.uuid4().hex[:8]

    return f"RUN-{timestamp}-{unique}"
