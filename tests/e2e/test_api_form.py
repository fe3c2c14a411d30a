"""
test_api_form.py - HTTP 경로 전체 흐름 테스트

FastAPI TestClient + httpx.MockTransport (외부 엔드포인트 대체).

DoD:
- 필드 입력 + JPEG 1장 → 제출 → 시트 1건 + 메신저 1건 → 성공 메시지, 목록 비움
- 이미지 0장 → 외부 호출 없이 안내 문구
- 메신저 실패 → 통합 실패 메시지, 이미지 유지
- draft 저장, 이미지 추가/제거/미리보기, 카메라 스냅샷
"""

import base64
import json
import re
from collections.abc import Iterator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from src.app.main import app
from src.app.services.dispatch import SubmissionDispatcher
from src.core.drafts import DraftStore
from src.domain.constants import (
    DRAFT_KEY,
    MSG_CAMERA_FAILED,
    MSG_DRAFT_SAVED,
    MSG_IMAGE_REQUIRED,
    MSG_PROCESSING,
    MSG_SUBMIT_FAILED,
    MSG_SUBMIT_SUCCESS,
    PHOTO_MAX_SIZE_MB,
    SESSION_COOKIE_NAME,
)
from src.render.pdf import PdfAssembler

pytestmark = pytest.mark.e2e

_IMAGE_ID = re.compile(r'data-image-id="([0-9a-z]+)"')


@pytest.fixture
def client(tmp_path: Path) -> Iterator[TestClient]:
    """앱 클라이언트 (draft/log 경로는 tmp_path)."""
    with TestClient(app) as test_client:
        app.state.draft_store = DraftStore(tmp_path / "drafts.json")
        test_client.get("/")
        yield test_client


@pytest.fixture
def use_endpoints(delivery_settings, tmp_path: Path):
    """외부 엔드포인트를 MockTransport로 교체."""

    def _use(endpoints) -> None:
        app.state.dispatcher = SubmissionDispatcher(
            delivery_settings,
            PdfAssembler(),
            logs_dir=tmp_path / "logs",
            transport=endpoints.transport(),
        )

    return _use


def upload(client: TestClient, *files: tuple[str, bytes, str]):
    return client.post(
        "/api/form/images",
        files=[("files", file) for file in files],
    )


def image_ids(html: str) -> list[str]:
    return _IMAGE_ID.findall(html)


# =============================================================================
# Page
# =============================================================================

class TestPage:
    """폼 화면 테스트."""

    def test_page_sets_session_cookie(self):
        with TestClient(app) as fresh:
            response = fresh.get("/")

        assert response.status_code == 200
        assert SESSION_COOKIE_NAME in response.cookies
        for name in ("date", "article", "client", "order_number", "ticket_number", "quantity"):
            assert f'name="{name}"' in response.text

    def test_page_rendered_from_template(self, client: TestClient):
        response = client.get("/")

        assert response.headers["content-type"].startswith("text/html")
        assert MSG_PROCESSING in response.text
        assert json.dumps(MSG_CAMERA_FAILED) in response.text
        assert "{{" not in response.text

    def test_status_uses_single_timer(self, client: TestClient):
        text = client.get("/").text

        assert "clearTimeout(statusTimer)" in text
        assert text.count("setTimeout(") == 1

    def test_health(self, client: TestClient):
        assert client.get("/health").json() == {"status": "ok"}

    def test_reload_clears_images(self, client: TestClient, jpeg_bytes: bytes):
        upload(client, ("a.jpg", jpeg_bytes, "image/jpeg"))

        client.get("/")

        assert image_ids(client.get("/api/form/images").text) == []


# =============================================================================
# Images
# =============================================================================

class TestImages:
    """이미지 추가/제거/미리보기 테스트."""

    def test_empty_panel_shows_error_line(self, client: TestClient):
        response = client.get("/api/form/images")

        assert MSG_IMAGE_REQUIRED in response.text

    def test_upload_order_and_preview(
        self, client: TestClient, jpeg_bytes: bytes, png_bytes: bytes
    ):
        response = upload(
            client,
            ("a.jpg", jpeg_bytes, "image/jpeg"),
            ("b.png", png_bytes, "image/png"),
        )

        ids = image_ids(response.text)
        assert len(ids) == 2
        assert MSG_IMAGE_REQUIRED not in response.text

        preview = client.get(f"/api/form/images/{ids[1]}/preview")
        assert preview.status_code == 200
        assert preview.headers["content-type"] == "image/png"
        assert preview.content == png_bytes

    def test_unsupported_upload_rejected(self, client: TestClient, jpeg_bytes: bytes):
        response = upload(
            client,
            ("a.jpg", jpeg_bytes, "image/jpeg"),
            ("doc.gif", b"GIF89a", "image/gif"),
        )

        assert len(image_ids(response.text)) == 1
        assert "doc.gif" in response.text
        assert 'hx-swap-oob="true"' in response.text

    def test_oversized_upload_rejected(self, client: TestClient, jpeg_bytes: bytes):
        oversized = b"\xff\xd8" + b"\0" * (PHOTO_MAX_SIZE_MB * 1024 * 1024)

        response = upload(
            client,
            ("a.jpg", jpeg_bytes, "image/jpeg"),
            ("huge.jpg", oversized, "image/jpeg"),
        )

        assert len(image_ids(response.text)) == 1
        assert "huge.jpg" in response.text

    def test_remove_releases_preview(self, client: TestClient, jpeg_bytes: bytes):
        upload(client, ("a.jpg", jpeg_bytes, "image/jpeg"))
        image_id = image_ids(upload(client, ("b.jpg", jpeg_bytes, "image/jpeg")).text)[1]

        response = client.delete(f"/api/form/images/{image_id}")

        assert image_id not in image_ids(response.text)
        assert len(image_ids(response.text)) == 1

        preview = client.get(f"/api/form/images/{image_id}/preview")
        assert preview.status_code == 404
        assert preview.json()["detail"]["code"] == "IMAGE_NOT_FOUND"

    def test_camera_snapshot_added(self, client: TestClient, jpeg_bytes: bytes):
        snapshot = "data:image/jpeg;base64," + base64.b64encode(jpeg_bytes).decode()

        response = client.post("/api/form/capture", data={"snapshot": snapshot})

        ids = image_ids(response.text)
        assert len(ids) == 1
        assert client.get(f"/api/form/images/{ids[0]}/preview").content == jpeg_bytes

    def test_camera_failure_keeps_list(self, client: TestClient, jpeg_bytes: bytes):
        upload(client, ("a.jpg", jpeg_bytes, "image/jpeg"))

        response = client.post("/api/form/capture", data={"snapshot": "garbage"})

        assert MSG_CAMERA_FAILED in response.text
        assert len(image_ids(response.text)) == 1


# =============================================================================
# Sessions
# =============================================================================

class TestSessions:
    """세션 생성 범위 테스트."""

    def test_read_only_requests_create_no_session(self):
        with TestClient(app) as fresh:
            for _ in range(50):
                response = fresh.get("/api/form/images")
                assert MSG_IMAGE_REQUIRED in response.text
                assert SESSION_COOKIE_NAME not in response.cookies

            assert fresh.get("/api/form/images/abc123def/preview").status_code == 404
            assert len(app.state.sessions) == 0

    def test_page_creates_one_session(self):
        with TestClient(app) as fresh:
            fresh.get("/")
            fresh.get("/api/form/images")
            fresh.get("/")

            assert len(app.state.sessions) == 1


# =============================================================================
# Draft
# =============================================================================

class TestDraft:
    def test_save_draft(self, client: TestClient, sample_form_data, tmp_path: Path):
        response = client.post("/api/form/draft", data=sample_form_data)

        assert MSG_DRAFT_SAVED in response.text

        raw = json.loads((tmp_path / "drafts.json").read_text(encoding="utf-8"))
        stored = json.loads(raw[DRAFT_KEY])
        assert stored["formData"]["nBon"] == "B1"
        assert stored["formData"]["quantite"] == "5"


# =============================================================================
# Submit
# =============================================================================

class TestSubmit:
    """제출 흐름 테스트."""

    def test_submit_end_to_end(
        self, client: TestClient, use_endpoints, endpoints, sample_form_data, jpeg_bytes
    ):
        use_endpoints(endpoints)
        upload(client, ("photo.jpg", jpeg_bytes, "image/jpeg"))

        response = client.post("/api/form/submit", data=sample_form_data)

        assert response.status_code == 200
        assert MSG_SUBMIT_SUCCESS in response.text
        assert response.headers["HX-Trigger"] == "form-submitted"

        assert len(endpoints.sheets_requests) == 1
        assert json.loads(endpoints.sheets_requests[0].content) == {
            "date": "2024-01-01",
            "article": "A1",
            "client": "C1",
            "nBon": "B1",
            "nTicket": "T1",
            "quantite": 5,
        }

        assert len(endpoints.messenger_requests) == 1
        body = endpoints.messenger_requests[0].content
        assert b'filename="B1.pdf"' in body
        assert b"%PDF" in body

        assert image_ids(client.get("/api/form/images").text) == []

    def test_zero_images_blocks_submit(
        self, client: TestClient, use_endpoints, endpoints, sample_form_data
    ):
        use_endpoints(endpoints)

        response = client.post("/api/form/submit", data=sample_form_data)

        assert MSG_IMAGE_REQUIRED in response.text
        assert "HX-Trigger" not in response.headers
        assert endpoints.requests == []

    def test_missing_fields_listed(
        self, client: TestClient, use_endpoints, endpoints, jpeg_bytes
    ):
        use_endpoints(endpoints)
        upload(client, ("photo.jpg", jpeg_bytes, "image/jpeg"))

        response = client.post("/api/form/submit", data={"date": "2024-01-01"})

        assert "Article is required, Client is required, Quantity is required" in response.text
        assert endpoints.requests == []

    def test_messenger_failure_keeps_images(
        self, client: TestClient, use_endpoints, make_endpoints, sample_form_data, jpeg_bytes
    ):
        endpoints = make_endpoints(messenger_ok=False)
        use_endpoints(endpoints)
        upload(client, ("photo.jpg", jpeg_bytes, "image/jpeg"))

        response = client.post("/api/form/submit", data=sample_form_data)

        assert MSG_SUBMIT_FAILED in response.text
        assert "chat not found" not in response.text
        assert len(image_ids(client.get("/api/form/images").text)) == 1
