"""
Form Routes: 폼 화면 + HTMX 조각 API.

- GET / → 폼 화면 (templates/form.html)
- GET /api/form/images → 썸네일 조각
- POST /api/form/images → 파일 업로드 (여러 개)
- POST /api/form/capture → 카메라 스냅샷 (data URL)
- DELETE /api/form/images/{image_id} → 이미지 제거
- GET /api/form/images/{image_id}/preview → 미리보기 바이트
- POST /api/form/draft → 임시 저장
- POST /api/form/submit → 제출

바인딩 규칙:
- 폼 값은 bind_form_fields에서만 FormFields로 변환
- 세션은 쿠키로 찾고 get_session으로 주입
- 조회 전용 엔드포인트는 find_session (세션을 만들지 않음)
"""

import html
import logging
from datetime import UTC, datetime
from pathlib import Path

from fastapi import APIRouter, Depends, File, Form, HTTPException, Request, UploadFile
from fastapi.responses import HTMLResponse, Response
from fastapi.templating import Jinja2Templates

from src.app.services.dispatch import SubmissionDispatcher
from src.app.services.session import CaptureSession, SessionRegistry
from src.core.drafts import DraftStore
from src.core.images import (
    ImageCollection,
    check_upload,
    decode_snapshot,
    normalize_content_type,
)
from src.domain.constants import (
    MSG_CAMERA_FAILED,
    MSG_DRAFT_SAVED,
    MSG_PROCESSING,
    PHOTO_MAX_SIZE_MB,
    SESSION_COOKIE_NAME,
)
from src.domain.errors import (
    CameraAccessError,
    DraftStoreError,
    ErrorCodes,
    ValidationError,
)
from src.domain.schemas import FormFields

logger = logging.getLogger(__name__)

# Routers
router = APIRouter()  # HTML pages
api_router = APIRouter()  # API endpoints

# Jinja2 templates
_templates_dir = Path(__file__).parent.parent / "templates"
jinja_templates = Jinja2Templates(directory=_templates_dir)

SUBMITTED_EVENT = "form-submitted"
UPLOAD_MAX_BYTES = PHOTO_MAX_SIZE_MB * 1024 * 1024


# =============================================================================
# Dependencies (바인딩 레이어)
# =============================================================================


def get_session(request: Request) -> CaptureSession:
    """쿠키의 세션 ID로 세션 조회 (없으면 생성)."""
    registry: SessionRegistry = request.app.state.sessions
    return registry.get_or_create(request.cookies.get(SESSION_COOKIE_NAME))


def find_session(request: Request) -> CaptureSession | None:
    """쿠키의 세션 ID로 세션 조회만 (없으면 None)."""
    registry: SessionRegistry = request.app.state.sessions
    return registry.get(request.cookies.get(SESSION_COOKIE_NAME))


def get_dispatcher(request: Request) -> SubmissionDispatcher:
    dispatcher: SubmissionDispatcher = request.app.state.dispatcher
    return dispatcher


def get_draft_store(request: Request) -> DraftStore:
    store: DraftStore = request.app.state.draft_store
    return store


async def bind_form_fields(
    date: str = Form(""),
    article: str = Form(""),
    client: str = Form(""),
    order_number: str = Form(""),
    ticket_number: str = Form(""),
    quantity: str = Form(""),
) -> FormFields:
    """폼 값 → FormFields."""
    return FormFields(
        date=date,
        article=article,
        client=client,
        order_number=order_number,
        ticket_number=ticket_number,
        quantity=quantity,
    )


# =============================================================================
# HTML Fragments
# =============================================================================


def escape_html(text: str) -> str:
    """HTML 이스케이프."""
    return html.escape(text, quote=True)


def build_image_panel_html(images: ImageCollection) -> str:
    """썸네일 목록 + 이미지 에러 줄."""
    items = "".join(
        f"""
        <div class="image-preview-item" data-image-id="{escape_html(image.image_id)}">
            <img src="{escape_html(image.preview_url)}" alt="Preview">
            <button type="button"
                    hx-delete="/api/form/images/{escape_html(image.image_id)}"
                    hx-target="#image-panel"
                    hx-swap="innerHTML"
                    title="Remove image">×</button>
        </div>"""
        for image in images
    )

    return (
        f'<div id="image-preview" class="image-preview">{items}</div>'
        f'<div id="image-error" class="error-message">'
        f"{escape_html(images.error_line)}</div>"
    )


def build_status_html(message: str, status_type: str, *, oob: bool = False) -> str:
    """상태 메시지 (success / error)."""
    oob_attr = ' hx-swap-oob="true"' if oob else ""
    return (
        f'<div id="status" class="status-message {escape_html(status_type)}"'
        f'{oob_attr}>{escape_html(message)}</div>'
    )


def _respond(
    request: Request,
    session: CaptureSession,
    content: str,
    headers: dict[str, str] | None = None,
) -> HTMLResponse:
    """HTML 응답 + 세션 쿠키."""
    response = HTMLResponse(content=content, headers=headers)
    _set_session_cookie(request, session, response)
    return response


def _set_session_cookie(request: Request, session: CaptureSession, response: Response) -> None:
    """세션 쿠키 설정 (요청 쿠키와 다를 때만)."""
    if request.cookies.get(SESSION_COOKIE_NAME) != session.session_id:
        response.set_cookie(
            SESSION_COOKIE_NAME, session.session_id, httponly=True, samesite="lax"
        )


# =============================================================================
# Page Routes (HTML)
# =============================================================================

@router.get("/", response_class=HTMLResponse)
async def form_page(
    request: Request,
    session: CaptureSession = Depends(get_session),
) -> HTMLResponse:
    """폼 화면. 페이지 로드마다 세션 상태를 새로 시작."""
    if not session.is_submitting:
        session.reset()

    response = jinja_templates.TemplateResponse(
        request,
        "form.html",
        {
            "processing": MSG_PROCESSING,
            "camera_failed": MSG_CAMERA_FAILED,
        },
    )
    _set_session_cookie(request, session, response)
    return response


# =============================================================================
# API Routes
# =============================================================================


@api_router.get("/images", response_class=HTMLResponse)
async def list_images(
    request: Request,
    session: CaptureSession | None = Depends(find_session),
) -> HTMLResponse:
    """썸네일 조각. 세션이 없으면 빈 목록 (세션 생성 안 함)."""
    if session is None:
        return HTMLResponse(content=build_image_panel_html(ImageCollection()))
    return _respond(request, session, build_image_panel_html(session.images))


@api_router.post("/images", response_class=HTMLResponse)
async def upload_images(
    request: Request,
    files: list[UploadFile] = File(...),
    session: CaptureSession = Depends(get_session),
) -> HTMLResponse:
    """
    파일 업로드 (여러 개).

    JPEG/PNG만 목록에 추가. 거절된 파일은 상태 메시지로 표시.
    크기 제한을 넘는 파일은 제한 + 1바이트까지만 읽음.
    """
    rejected: list[str] = []

    for upload in files:
        filename = upload.filename or "upload"
        content_type = normalize_content_type(upload.content_type)

        if upload.size is not None and upload.size > UPLOAD_MAX_BYTES:
            logger.info("Upload rejected before read: %s (%d bytes)", filename, upload.size)
            rejected.append(filename)
            continue

        data = await upload.read(UPLOAD_MAX_BYTES + 1)
        try:
            check_upload(filename, content_type, data)
        except ValidationError as e:
            logger.info("Upload rejected: %s", e)
            rejected.append(filename)
            continue

        session.images.add(filename, content_type, data, source="upload")

    content = build_image_panel_html(session.images)
    if rejected:
        content += build_status_html(
            f"Only JPEG or PNG images up to the size limit are accepted: "
            f"{', '.join(rejected)}",
            "error",
            oob=True,
        )
    return _respond(request, session, content)


@api_router.post("/capture", response_class=HTMLResponse)
async def capture_image(
    request: Request,
    snapshot: str = Form(""),
    session: CaptureSession = Depends(get_session),
) -> HTMLResponse:
    """카메라 스냅샷 추가. 실패 시 목록은 그대로, 상태 메시지만 표시."""
    try:
        content_type, data = decode_snapshot(snapshot)
        timestamp = datetime.now(UTC).strftime("%Y%m%d_%H%M%S")
        extension = "png" if content_type == "image/png" else "jpg"
        filename = f"camera_{timestamp}.{extension}"
        try:
            check_upload(filename, content_type, data)
        except ValidationError as e:
            raise CameraAccessError(
                ErrorCodes.CAMERA_CAPTURE_FAILED, reason=e.code, content_type=content_type
            ) from e
    except CameraAccessError as e:
        logger.warning("Camera capture failed: %s", e)
        content = build_image_panel_html(session.images) + build_status_html(
            MSG_CAMERA_FAILED, "error", oob=True
        )
        return _respond(request, session, content)

    session.images.add(filename, content_type, data, source="camera")
    return _respond(request, session, build_image_panel_html(session.images))


@api_router.delete("/images/{image_id}", response_class=HTMLResponse)
async def remove_image(
    request: Request,
    image_id: str,
    session: CaptureSession = Depends(get_session),
) -> HTMLResponse:
    """이미지 제거 후 썸네일 다시 그림."""
    if not session.images.remove(image_id):
        logger.debug("Remove ignored, unknown image id: %s", image_id)
    return _respond(request, session, build_image_panel_html(session.images))


@api_router.get("/images/{image_id}/preview")
async def preview_image(
    image_id: str,
    session: CaptureSession | None = Depends(find_session),
) -> Response:
    """미리보기 이미지 바이트. 세션이 없거나 해제된 이미지는 404."""
    image = session.images.get(image_id) if session is not None else None
    if image is None or image.released:
        raise HTTPException(
            status_code=404,
            detail={"code": ErrorCodes.IMAGE_NOT_FOUND, "image_id": image_id},
        )
    return Response(content=image.data, media_type=image.content_type)


@api_router.post("/draft", response_class=HTMLResponse)
async def save_draft(
    request: Request,
    fields: FormFields = Depends(bind_form_fields),
    session: CaptureSession = Depends(get_session),
    store: DraftStore = Depends(get_draft_store),
) -> HTMLResponse:
    """현재 필드 값 임시 저장 (이전 draft 덮어쓰기)."""
    session.fields = fields
    try:
        store.save(fields)
    except (DraftStoreError, OSError) as e:
        logger.error("Draft save failed: %s", e)
        return _respond(
            request, session, build_status_html("Could not save the draft", "error")
        )

    return _respond(request, session, build_status_html(MSG_DRAFT_SAVED, "success"))


@api_router.post("/submit", response_class=HTMLResponse)
async def submit_form(
    request: Request,
    fields: FormFields = Depends(bind_form_fields),
    session: CaptureSession = Depends(get_session),
    dispatcher: SubmissionDispatcher = Depends(get_dispatcher),
) -> HTMLResponse:
    """
    제출.

    성공 시 HX-Trigger: form-submitted → 화면의 폼/썸네일 초기화.
    """
    result = await dispatcher.submit(session, fields)

    content = build_status_html(result.message, "success" if result.success else "error")
    headers = {"HX-Trigger": SUBMITTED_EVENT} if result.success else None
    return _respond(request, session, content, headers=headers)
