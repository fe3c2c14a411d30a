"""
Submission Dispatcher: 검증 → PDF → 외부 전송 2건 (동시) → 결과.

상태: idle → submitting → (success | failed) → idle

규칙:
- 검증 실패 시 외부 호출 없이 idle 복귀 (에러 메시지 ", "로 연결)
- 두 전송이 모두 끝난 뒤(성공 여부 무관) 전체 결과 판정
- 둘 다 성공해야 성공 → 세션 reset
- 그 외/예외는 통합 실패 메시지, 이미지 목록 유지
- 재시도/취소 없음
"""

import asyncio
import logging
from pathlib import Path

import httpx

from src.app.config import DeliverySettings
from src.app.services.delivery import (
    MessengerClient,
    SheetsClient,
    build_document_name,
)
from src.app.services.session import CaptureSession
from src.app.services.validate import ensure_submittable
from src.core.logging import (
    complete_submission_log,
    create_submission_log,
    record_delivery,
    save_submission_log,
)
from src.domain.constants import (
    MSG_SUBMIT_FAILED,
    MSG_SUBMIT_IN_PROGRESS,
    MSG_SUBMIT_SUCCESS,
)
from src.domain.errors import (
    DeliveryError,
    ErrorCodes,
    FormCaptureError,
    ValidationError,
)
from src.domain.schemas import (
    DeliveryOutcome,
    FormFields,
    SubmissionLog,
    SubmissionResult,
    SubmissionState,
)
from src.render.pdf import PdfAssembler

logger = logging.getLogger(__name__)


class SubmissionDispatcher:
    """
    제출 처리기.

    Usage:
        dispatcher = SubmissionDispatcher(settings.delivery, PdfAssembler())
        result = await dispatcher.submit(session, fields)
    """

    def __init__(
        self,
        settings: DeliverySettings,
        assembler: PdfAssembler,
        logs_dir: Path | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            settings: 외부 전송 설정
            assembler: PDF 생성기
            logs_dir: 제출 로그 저장 위치 (None이면 저장 안 함)
            transport: httpx transport (테스트에서 MockTransport 주입)
        """
        self.settings = settings
        self.assembler = assembler
        self.logs_dir = logs_dir
        self._transport = transport

    async def submit(self, session: CaptureSession, fields: FormFields) -> SubmissionResult:
        """
        제출 실행.

        Args:
            session: 이미지 목록을 가진 세션
            fields: 바인딩된 폼 필드

        Returns:
            SubmissionResult (화면 상태 메시지 포함)
        """
        if session.is_submitting:
            return SubmissionResult(
                success=False,
                state=SubmissionState.SUBMITTING,
                message=MSG_SUBMIT_IN_PROGRESS,
                errors=[ErrorCodes.SUBMISSION_IN_PROGRESS],
            )

        session.fields = fields
        session.state = SubmissionState.SUBMITTING
        log = create_submission_log(session.session_id, image_count=len(session.images))

        try:
            return await self._run(session, fields, log)
        finally:
            session.state = SubmissionState.IDLE
            self._save_log(log)

    async def _run(
        self,
        session: CaptureSession,
        fields: FormFields,
        log: SubmissionLog,
    ) -> SubmissionResult:
        # === 1. 검증 ===
        try:
            ensure_submittable(fields, len(session.images))
        except ValidationError as e:
            errors = list(e.context.get("errors", []))
            log.validation_errors = errors
            complete_submission_log(log, "rejected", e.code, e.to_dict())
            return SubmissionResult(
                success=False,
                state=SubmissionState.IDLE,
                message=", ".join(errors),
                errors=errors,
                run_id=log.run_id,
            )

        pdf_filename = build_document_name(fields)
        log.pdf_filename = pdf_filename

        try:
            # === 2. PDF 생성 (이벤트 루프 밖) ===
            document = await asyncio.to_thread(
                self.assembler.assemble, session.images.images
            )

            # === 3. 외부 전송 2건 동시 ===
            deliveries = await self._deliver(document.content, pdf_filename, fields)
            for outcome in deliveries:
                record_delivery(log, outcome)

            failed = [o.service for o in deliveries if not o.success]
            if failed:
                raise DeliveryError(ErrorCodes.DELIVERY_FAILED, failed=failed)

        except FormCaptureError as e:
            logger.error("Submission error: %s", e)
            complete_submission_log(log, "failed", e.code, e.to_dict())
            return self._failed(log)
        except Exception as e:
            logger.exception("Unexpected submission error")
            complete_submission_log(
                log, "failed", "UNEXPECTED_ERROR", {"error": f"{type(e).__name__}: {e}"}
            )
            return self._failed(log)

        # === 4. 성공 → 세션 초기화 ===
        session.reset()
        complete_submission_log(log, "success")
        logger.info(
            "Submission %s delivered (%d image(s), %s)",
            log.run_id, log.image_count, pdf_filename,
        )
        return SubmissionResult(
            success=True,
            state=SubmissionState.SUCCESS,
            message=MSG_SUBMIT_SUCCESS,
            deliveries=list(log.deliveries),
            pdf_filename=pdf_filename,
            run_id=log.run_id,
        )

    async def _deliver(
        self,
        pdf: bytes,
        pdf_filename: str,
        fields: FormFields,
    ) -> list[DeliveryOutcome]:
        """스프레드시트 + 메신저 동시 전송. 둘 다 끝날 때까지 대기."""
        async with httpx.AsyncClient(transport=self._transport) as client:
            sheets = SheetsClient(self.settings.sheets_url, client)
            messenger = MessengerClient.from_settings(self.settings, client)

            sheets_outcome, messenger_outcome = await asyncio.gather(
                sheets.send(fields),
                messenger.send_document(pdf, pdf_filename, fields),
            )

        return [sheets_outcome, messenger_outcome]

    def _failed(self, log: SubmissionLog) -> SubmissionResult:
        return SubmissionResult(
            success=False,
            state=SubmissionState.FAILED,
            message=MSG_SUBMIT_FAILED,
            deliveries=list(log.deliveries),
            pdf_filename=log.pdf_filename,
            run_id=log.run_id,
        )

    def _save_log(self, log: SubmissionLog) -> None:
        if self.logs_dir is None:
            return
        try:
            save_submission_log(log, self.logs_dir)
        except OSError as e:
            logger.warning("Failed to save submission log %s: %s", log.run_id, e)
