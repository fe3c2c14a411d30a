"""
FastAPI 애플리케이션 진입점.

실행:
- 개발: uv run uvicorn src.app.main:app --reload
- 프로덕션: uv run uvicorn src.app.main:app
"""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from src.app.config import build_settings, load_config
from src.app.routes import form
from src.app.services.dispatch import SubmissionDispatcher
from src.app.services.session import SessionRegistry
from src.core.drafts import DraftStore
from src.render.pdf import PdfAssembler

# =============================================================================
# Lifespan
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    애플리케이션 생명주기 관리.

    시작 시: 설정 로드, 세션 저장소/draft 저장소/제출 처리기 생성
    """
    # Startup
    app.state.config = load_config()
    settings = build_settings(app.state.config)
    app.state.settings = settings

    app.state.sessions = SessionRegistry(idle_ttl=settings.session_idle_ttl)
    app.state.draft_store = DraftStore(settings.drafts_path)
    app.state.dispatcher = SubmissionDispatcher(
        settings=settings.delivery,
        assembler=PdfAssembler(
            page_width=settings.pdf.page_width,
            page_height=settings.pdf.page_height,
            margin=settings.pdf.margin,
        ),
        logs_dir=settings.logs_dir,
    )

    yield

    # Shutdown
    # (세션은 메모리에만 있으므로 정리할 리소스 없음)


# =============================================================================
# App Instance
# =============================================================================

app = FastAPI(
    title="Form Capture",
    description="폼 입력 + 사진 첨부 → PDF → 스프레드시트/메신저 전송",
    version="0.1.0",
    lifespan=lifespan,
)


# =============================================================================
# Routes
# =============================================================================

# 페이지 라우트 (HTML)
app.include_router(form.router, prefix="", tags=["Form"])

# API 라우트
app.include_router(form.api_router, prefix="/api/form", tags=["Form API"])


# =============================================================================
# Root Endpoints
# =============================================================================


@app.get("/health")
async def health() -> dict[str, str]:
    """헬스 체크."""
    return {"status": "ok"}


# =============================================================================
# CLI Entry Point
# =============================================================================

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "src.app.main:app",
        host="127.0.0.1",
        port=8000,
        reload=True,
    )
