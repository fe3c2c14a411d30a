"""
Pytest fixtures for form capture tests.

구성:
- 정상 폼 필드 (date, article, client, order_number, ticket_number, quantity)
- Pillow로 만든 실제 JPEG/PNG 바이트
- 외부 엔드포인트 대체용 httpx.MockTransport
- 저장된 제출 로그 읽기 (최신순)
"""

import json
from collections.abc import Callable
from io import BytesIO
from pathlib import Path

import httpx
import pytest
from PIL import Image

from src.app.config import DeliverySettings
from src.domain.schemas import FormFields

SHEETS_URL = "https://sheets.example.test/macros/exec"
TELEGRAM_API_BASE = "https://telegram.example.test"
BOT_TOKEN = "123456:TEST-TOKEN"
CHAT_ID = "-1001234567890"


# =============================================================================
# Path Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """프로젝트 루트 경로."""
    return Path(__file__).parent.parent


@pytest.fixture
def default_config_path(project_root: Path) -> Path:
    """default.yaml 경로."""
    return project_root / "default.yaml"


# =============================================================================
# Form Fixtures
# =============================================================================

@pytest.fixture
def sample_fields() -> FormFields:
    """정상 케이스 폼 필드."""
    return FormFields(
        date="2024-01-01",
        article="A1",
        client="C1",
        order_number="B1",
        ticket_number="T1",
        quantity="5",
    )


@pytest.fixture
def sample_form_data(sample_fields: FormFields) -> dict[str, str]:
    """POST용 폼 데이터."""
    return sample_fields.to_dict()


# =============================================================================
# Image Fixtures
# =============================================================================

@pytest.fixture
def make_image() -> Callable[..., bytes]:
    """
    실제 이미지 바이트 생성기.

    Usage:
        data = make_image("JPEG", (800, 1200))
    """

    def _make(
        fmt: str = "JPEG",
        size: tuple[int, int] = (100, 80),
        mode: str = "RGB",
        color: tuple[int, ...] | int = (200, 30, 30),
    ) -> bytes:
        buffer = BytesIO()
        Image.new(mode, size, color).save(buffer, format=fmt)
        return buffer.getvalue()

    return _make


@pytest.fixture
def jpeg_bytes(make_image: Callable[..., bytes]) -> bytes:
    return make_image("JPEG", (120, 90))


@pytest.fixture
def png_bytes(make_image: Callable[..., bytes]) -> bytes:
    return make_image("PNG", (64, 64), mode="RGBA", color=(0, 128, 255, 128))


# =============================================================================
# Delivery Fixtures
# =============================================================================

@pytest.fixture
def delivery_settings() -> DeliverySettings:
    """테스트용 전송 설정."""
    return DeliverySettings(
        sheets_url=SHEETS_URL,
        telegram_api_base=TELEGRAM_API_BASE,
        bot_token=BOT_TOKEN,
        chat_id=CHAT_ID,
        caption_template="{client}",
    )


class EndpointRecorder:
    """
    MockTransport 핸들러 + 호출 기록.

    sheets_ok=False → 스프레드시트 호출에서 연결 에러
    messenger_ok=False → 메신저가 {"ok": false} 응답
    """

    def __init__(self, sheets_ok: bool = True, messenger_ok: bool = True) -> None:
        self.sheets_ok = sheets_ok
        self.messenger_ok = messenger_ok
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)

        if request.url.host == "sheets.example.test":
            if not self.sheets_ok:
                raise httpx.ConnectError("connection refused", request=request)
            return httpx.Response(200, text="ok")

        if request.url.path.endswith("/sendDocument"):
            if self.messenger_ok:
                return httpx.Response(200, json={"ok": True, "result": {"message_id": 1}})
            return httpx.Response(
                400, json={"ok": False, "description": "Bad Request: chat not found"}
            )

        return httpx.Response(404)

    @property
    def sheets_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == "sheets.example.test"]

    @property
    def messenger_requests(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/sendDocument")]

    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self)


@pytest.fixture
def endpoints() -> EndpointRecorder:
    """둘 다 성공하는 외부 엔드포인트."""
    return EndpointRecorder()


@pytest.fixture
def make_endpoints() -> Callable[..., EndpointRecorder]:
    """실패 조합을 지정한 외부 엔드포인트 생성기."""
    return EndpointRecorder


# =============================================================================
# Submission Log Fixtures
# =============================================================================

@pytest.fixture
def read_submission_logs() -> Callable[[Path], list[dict]]:
    """logs/ 디렉터리의 run_*.json 로드 (최신순, 디렉터리 없으면 빈 목록)."""

    def _read(logs_dir: Path) -> list[dict]:
        if not logs_dir.exists():
            return []
        paths = sorted(
            logs_dir.glob("run_*.json"),
            key=lambda p: p.stat().st_mtime,
            reverse=True,
        )
        return [json.loads(p.read_text(encoding="utf-8")) for p in paths]

    return _read
