"""
이미지 수집: 업로드/카메라 스냅샷 → 세션 이미지 목록

규칙:
- 삽입 순서 유지 (PDF 페이지 순서 = 목록 순서)
- 제거/초기화 시 미리보기 리소스 해제
- 목록이 비면 "At least one image is required" 표시
"""

import base64
import binascii
import logging
import re
from collections.abc import Iterator
from datetime import UTC, datetime

from src.core.ids import generate_image_id
from src.domain.constants import (
    MSG_IMAGE_REQUIRED,
    PHOTO_MAX_SIZE_MB,
    SUPPORTED_IMAGE_TYPES,
)
from src.domain.errors import CameraAccessError, ErrorCodes, ValidationError
from src.domain.schemas import CapturedImage

logger = logging.getLogger(__name__)

# data:image/jpeg;base64,....
_DATA_URL = re.compile(
    r"^data:(?P<mime>image/[a-zA-Z0-9.+-]+);base64,(?P<payload>.+)$",
    re.DOTALL,
)


# =============================================================================
# Upload / Snapshot Guards
# =============================================================================

def normalize_content_type(content_type: str | None) -> str:
    """MIME 타입 정규화 (파라미터 제거, 소문자, image/jpg → image/jpeg)."""
    value = (content_type or "").split(";")[0].strip().lower()
    if value == "image/jpg":
        return "image/jpeg"
    return value


def check_upload(filename: str, content_type: str, data: bytes) -> None:
    """
    업로드 이미지 검사.

    Raises:
        ValidationError: UNSUPPORTED_IMAGE_TYPE, IMAGE_TOO_LARGE
    """
    if content_type not in SUPPORTED_IMAGE_TYPES:
        raise ValidationError(
            ErrorCodes.UNSUPPORTED_IMAGE_TYPE,
            filename=filename,
            content_type=content_type,
        )

    max_bytes = PHOTO_MAX_SIZE_MB * 1024 * 1024
    if len(data) > max_bytes:
        raise ValidationError(
            ErrorCodes.IMAGE_TOO_LARGE,
            filename=filename,
            size=len(data),
            max_size=max_bytes,
        )


def decode_snapshot(data_url: str) -> tuple[str, bytes]:
    """
    카메라 스냅샷(canvas.toDataURL 결과) 디코드.

    Args:
        data_url: "data:image/jpeg;base64,..." 형태

    Returns:
        (content_type, image bytes)

    Raises:
        CameraAccessError: 형식 오류, base64 오류, 빈 프레임
    """
    match = _DATA_URL.match((data_url or "").strip())
    if not match:
        raise CameraAccessError(
            ErrorCodes.CAMERA_CAPTURE_FAILED,
            reason="snapshot is not a base64 image data URL",
        )

    try:
        data = base64.b64decode(match.group("payload"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise CameraAccessError(
            ErrorCodes.CAMERA_CAPTURE_FAILED,
            reason="invalid base64 payload",
            error=str(e),
        ) from e

    if not data:
        raise CameraAccessError(
            ErrorCodes.CAMERA_CAPTURE_FAILED,
            reason="empty frame",
        )

    return normalize_content_type(match.group("mime")), data


# =============================================================================
# Image Collection
# =============================================================================

class ImageCollection:
    """
    세션 이미지 목록.

    Usage:
        images = ImageCollection()
        image = images.add("photo.jpg", "image/jpeg", data)
        images.remove(image.image_id)
    """

    def __init__(self) -> None:
        self._images: list[CapturedImage] = []

    def __len__(self) -> int:
        return len(self._images)

    def __iter__(self) -> Iterator[CapturedImage]:
        return iter(list(self._images))

    @property
    def images(self) -> tuple[CapturedImage, ...]:
        """현재 목록 스냅샷 (삽입 순서)."""
        return tuple(self._images)

    @property
    def error_line(self) -> str:
        """목록이 비었을 때 표시할 안내 문구."""
        return MSG_IMAGE_REQUIRED if not self._images else ""

    def add(
        self,
        filename: str,
        content_type: str,
        data: bytes,
        source: str = "upload",
    ) -> CapturedImage:
        """
        이미지 추가.

        Args:
            filename: 원본 파일명
            content_type: MIME 타입
            data: 이미지 바이트
            source: upload 또는 camera

        Returns:
            추가된 CapturedImage
        """
        image = CapturedImage(
            image_id=generate_image_id(),
            filename=filename,
            content_type=normalize_content_type(content_type),
            data=data,
            source=source,
            created_at=datetime.now(UTC).isoformat(),
        )
        self._images.append(image)
        logger.debug("Image added: %s (%s, %d bytes)", image.image_id, filename, len(data))
        return image

    def get(self, image_id: str) -> CapturedImage | None:
        for image in self._images:
            if image.image_id == image_id:
                return image
        return None

    def remove(self, image_id: str) -> bool:
        """
        이미지 제거 + 미리보기 해제.

        Returns:
            제거 여부 (없는 ID면 False)
        """
        image = self.get(image_id)
        if image is None:
            return False

        image.release()
        self._images = [img for img in self._images if img.image_id != image_id]
        return True

    def clear(self) -> None:
        """전체 제거 (제출 성공 시)."""
        for image in self._images:
            image.release()
        self._images = []
