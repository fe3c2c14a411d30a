"""
설정 로드: default.yaml + 환경변수.

우선순위: 환경변수 > default.yaml > 코드 기본값
비밀값(봇 토큰, chat id, 스프레드시트 URL)은 환경변수로만 주입 권장.
"""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from src.domain.constants import (
    PDF_PAGE_HEIGHT,
    PDF_PAGE_MARGIN,
    PDF_PAGE_WIDTH,
    SESSION_IDLE_TTL_SECONDS,
)

PROJECT_ROOT = Path(__file__).parent.parent.parent

ENV_SHEETS_URL = "FORM_CAPTURE_SHEETS_URL"
ENV_BOT_TOKEN = "FORM_CAPTURE_BOT_TOKEN"
ENV_CHAT_ID = "FORM_CAPTURE_CHAT_ID"
ENV_DRAFTS_PATH = "FORM_CAPTURE_DRAFTS_PATH"


@dataclass
class DeliverySettings:
    """외부 전송 설정."""
    sheets_url: str = ""
    telegram_api_base: str = "https://api.telegram.org"
    bot_token: str = field(default="", repr=False)
    chat_id: str = ""
    caption_template: str = "{client}"


@dataclass
class PdfSettings:
    """PDF 페이지 설정 (pt)."""
    page_width: float = PDF_PAGE_WIDTH
    page_height: float = PDF_PAGE_HEIGHT
    margin: float = PDF_PAGE_MARGIN


@dataclass
class AppSettings:
    """애플리케이션 전체 설정."""
    delivery: DeliverySettings = field(default_factory=DeliverySettings)
    pdf: PdfSettings = field(default_factory=PdfSettings)
    drafts_path: Path = PROJECT_ROOT / "data" / "drafts.json"
    logs_dir: Path | None = PROJECT_ROOT / "logs"
    session_idle_ttl: float = SESSION_IDLE_TTL_SECONDS


def load_config(config_path: Path | None = None) -> dict:
    """설정 파일 로드."""
    if config_path is None:
        # 프로젝트 루트의 default.yaml
        config_path = PROJECT_ROOT / "default.yaml"

    if not config_path.exists():
        return {}

    with open(config_path, encoding="utf-8") as f:
        data: dict[Any, Any] = yaml.safe_load(f) or {}
        return data


def _resolve_path(value: str | None, default: Path | None) -> Path | None:
    if not value:
        return default
    path = Path(value)
    return path if path.is_absolute() else PROJECT_ROOT / path


def build_settings(config: dict, env: dict[str, str] | None = None) -> AppSettings:
    """
    설정 dict + 환경변수 → AppSettings.

    Args:
        config: load_config() 결과
        env: 환경변수 (None이면 .env 로드 후 os.environ)

    Returns:
        AppSettings
    """
    if env is None:
        load_dotenv()
        env = dict(os.environ)

    delivery_cfg = config.get("delivery", {}) or {}
    telegram_cfg = delivery_cfg.get("telegram", {}) or {}
    pdf_cfg = config.get("pdf", {}) or {}
    drafts_cfg = config.get("drafts", {}) or {}
    logs_cfg = config.get("logs", {}) or {}
    sessions_cfg = config.get("sessions", {}) or {}

    defaults = AppSettings()

    delivery = DeliverySettings(
        sheets_url=env.get(ENV_SHEETS_URL) or delivery_cfg.get("sheets_url") or "",
        telegram_api_base=str(
            telegram_cfg.get("api_base") or defaults.delivery.telegram_api_base
        ).rstrip("/"),
        bot_token=env.get(ENV_BOT_TOKEN) or telegram_cfg.get("bot_token") or "",
        chat_id=str(env.get(ENV_CHAT_ID) or telegram_cfg.get("chat_id") or ""),
        caption_template=telegram_cfg.get(
            "caption_template", defaults.delivery.caption_template
        ),
    )

    pdf = PdfSettings(
        page_width=float(pdf_cfg.get("page_width", PDF_PAGE_WIDTH)),
        page_height=float(pdf_cfg.get("page_height", PDF_PAGE_HEIGHT)),
        margin=float(pdf_cfg.get("margin", PDF_PAGE_MARGIN)),
    )

    drafts_path = _resolve_path(
        env.get(ENV_DRAFTS_PATH) or drafts_cfg.get("path"),
        defaults.drafts_path,
    )

    # logs.dir: null이면 제출 로그 파일 저장 안 함
    if "dir" in logs_cfg:
        logs_dir = _resolve_path(logs_cfg.get("dir"), None)
    else:
        logs_dir = defaults.logs_dir

    return AppSettings(
        delivery=delivery,
        pdf=pdf,
        drafts_path=drafts_path or defaults.drafts_path,
        logs_dir=logs_dir,
        session_idle_ttl=float(
            sessions_cfg.get("idle_ttl_seconds", defaults.session_idle_ttl)
        ),
    )
