"""
Delivery Service: 외부 서비스 전송.

- SheetsClient: 스프레드시트 웹훅 (best-effort, 응답 무시)
- MessengerClient: Telegram sendDocument (응답 JSON의 ok로 판정)

규칙:
- 두 클라이언트 모두 예외를 던지지 않고 DeliveryOutcome으로 결과 반환
- 재시도 없음
- 봇 토큰은 로그/결과에 노출 금지
"""

import json
import logging
import time
from typing import Any

import httpx

from src.app.config import DeliverySettings
from src.domain.errors import DeliveryError, ErrorCodes
from src.domain.schemas import DeliveryOutcome, FormFields

logger = logging.getLogger(__name__)

SERVICE_SHEETS = "sheets"
SERVICE_MESSENGER = "messenger"


class _BlankDict(dict):
    """format_map용: 없는 키는 빈 문자열."""

    def __missing__(self, key: str) -> str:
        return ""


def build_caption(template: str, fields: FormFields) -> str:
    """캡션 템플릿에 폼 필드 채우기 ({client} 등)."""
    return template.format_map(_BlankDict(fields.to_dict()))


def build_document_name(fields: FormFields, now_ms: int | None = None) -> str:
    """
    PDF 파일명 결정.

    주문번호가 있으면 "<주문번호>.pdf", 없으면 "submission_<epoch ms>.pdf".
    """
    order_number = fields.order_number.strip()
    if order_number:
        return f"{order_number}.pdf"

    if now_ms is None:
        now_ms = int(time.time() * 1000)
    return f"submission_{now_ms}.pdf"


# =============================================================================
# Spreadsheet
# =============================================================================

class SheetsClient:
    """
    스프레드시트 수집 엔드포인트 클라이언트.

    opaque 요청: 응답 상태/본문을 읽지 않음.
    결과 = 전송이 예외 없이 완료되었는지.
    """

    def __init__(self, url: str, client: httpx.AsyncClient):
        """
        Raises:
            DeliveryError: DELIVERY_NOT_CONFIGURED (URL 없음)
        """
        if not url:
            raise DeliveryError(
                ErrorCodes.DELIVERY_NOT_CONFIGURED,
                service=SERVICE_SHEETS,
                setting="delivery.sheets_url",
            )
        self.url = url
        self.client = client

    async def send(self, fields: FormFields) -> DeliveryOutcome:
        """
        폼 필드를 JSON 본문으로 전송.

        Returns:
            DeliveryOutcome (success = 전송 완료 여부)
        """
        body = json.dumps(fields.to_payload(), ensure_ascii=False)

        try:
            await self.client.post(
                self.url,
                content=body.encode("utf-8"),
                headers={"Content-Type": "text/plain;charset=utf-8"},
                follow_redirects=True,
            )
        except httpx.HTTPError as e:
            logger.warning("Error sending to spreadsheet: %s", e)
            return DeliveryOutcome(
                service=SERVICE_SHEETS,
                success=False,
                detail=f"{type(e).__name__}: {e}",
            )

        return DeliveryOutcome(service=SERVICE_SHEETS, success=True)


# =============================================================================
# Messenger
# =============================================================================

class MessengerClient:
    """
    Telegram Bot API sendDocument 클라이언트.

    Usage:
        messenger = MessengerClient.from_settings(settings.delivery, client)
        outcome = await messenger.send_document(pdf_bytes, "B1.pdf", fields)
    """

    def __init__(
        self,
        api_base: str,
        bot_token: str,
        chat_id: str,
        client: httpx.AsyncClient,
        caption_template: str = "{client}",
    ):
        """
        Raises:
            DeliveryError: DELIVERY_NOT_CONFIGURED (토큰/chat id 없음)
        """
        missing = [
            name
            for name, value in (("bot_token", bot_token), ("chat_id", chat_id))
            if not value
        ]
        if missing:
            raise DeliveryError(
                ErrorCodes.DELIVERY_NOT_CONFIGURED,
                service=SERVICE_MESSENGER,
                missing=missing,
            )

        self.api_base = api_base.rstrip("/")
        self._bot_token = bot_token
        self.chat_id = chat_id
        self.client = client
        self.caption_template = caption_template

    @classmethod
    def from_settings(
        cls, settings: DeliverySettings, client: httpx.AsyncClient
    ) -> "MessengerClient":
        return cls(
            api_base=settings.telegram_api_base,
            bot_token=settings.bot_token,
            chat_id=settings.chat_id,
            client=client,
            caption_template=settings.caption_template,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.api_base}/bot{self._bot_token}/sendDocument"

    def _mask(self, text: str) -> str:
        return text.replace(self._bot_token, "***")

    async def send_document(
        self,
        pdf: bytes,
        filename: str,
        fields: FormFields,
    ) -> DeliveryOutcome:
        """
        PDF 첨부 + 캡션 전송.

        Args:
            pdf: PDF 바이트
            filename: 첨부 파일명
            fields: 캡션 생성용 폼 필드

        Returns:
            DeliveryOutcome (success = 응답 JSON의 ok가 true)
        """
        data = {
            "chat_id": self.chat_id,
            "caption": build_caption(self.caption_template, fields),
        }
        files = {"document": (filename, pdf, "application/pdf")}

        try:
            response = await self.client.post(self.endpoint, data=data, files=files)
            result: Any = response.json()
        except (httpx.HTTPError, ValueError) as e:
            detail = self._mask(f"{type(e).__name__}: {e}")
            logger.warning("Error sending to messenger: %s", detail)
            return DeliveryOutcome(service=SERVICE_MESSENGER, success=False, detail=detail)

        ok = isinstance(result, dict) and result.get("ok") is True
        if not ok:
            description = result.get("description") if isinstance(result, dict) else None
            logger.warning(
                "Messenger rejected document %s (status=%s): %s",
                filename, response.status_code, description,
            )
            return DeliveryOutcome(
                service=SERVICE_MESSENGER,
                success=False,
                detail=str(description) if description else f"HTTP {response.status_code}",
            )

        return DeliveryOutcome(service=SERVICE_MESSENGER, success=True)
