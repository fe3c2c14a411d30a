"""
Capture Session: 페이지 1개에 대응하는 상태 객체.

- 페이지 로드 시 생성, 제출 성공 시 reset
- 이미지 목록, 마지막 폼 필드, 제출 상태를 보유
- 라우트 핸들러에는 의존성으로 주입 (전역 변수 없음)
- idle_ttl 동안 접근이 없는 세션은 다음 조회/생성 시 제거
"""

import logging
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime

from src.core.ids import generate_session_id
from src.core.images import ImageCollection
from src.domain.constants import SESSION_IDLE_TTL_SECONDS
from src.domain.schemas import FormFields, SubmissionState

logger = logging.getLogger(__name__)


@dataclass
class CaptureSession:
    """세션 상태."""
    session_id: str
    images: ImageCollection = field(default_factory=ImageCollection)
    fields: FormFields = field(default_factory=FormFields)
    state: SubmissionState = SubmissionState.IDLE
    created_at: str = field(default_factory=lambda: datetime.now(UTC).isoformat())
    last_seen: float = 0.0  # registry clock 기준

    @property
    def is_submitting(self) -> bool:
        return self.state == SubmissionState.SUBMITTING

    def reset(self) -> None:
        """제출 성공 후 초기화: 이미지 해제 + 필드 비움."""
        self.images.clear()
        self.fields = FormFields()


class SessionRegistry:
    """
    세션 저장소 (in-memory).

    다중 사용자 동시성 보장은 범위 밖. 세션 ID는 쿠키로 전달.

    Usage:
        registry = SessionRegistry(idle_ttl=1800)
        session = registry.get_or_create(request.cookies.get(SESSION_COOKIE_NAME))
    """

    def __init__(
        self,
        idle_ttl: float = SESSION_IDLE_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Args:
            idle_ttl: 마지막 접근 후 세션 유지 시간 (초)
            clock: 단조 시계 (테스트에서 교체)
        """
        self.idle_ttl = idle_ttl
        self._clock = clock
        self._sessions: dict[str, CaptureSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def evict_idle(self) -> int:
        """
        만료된 세션 제거 (제출 중인 세션은 유지).

        Returns:
            제거된 세션 수
        """
        now = self._clock()
        expired = [
            session_id
            for session_id, session in self._sessions.items()
            if not session.is_submitting and now - session.last_seen > self.idle_ttl
        ]
        for session_id in expired:
            self._sessions.pop(session_id).reset()

        if expired:
            logger.debug("Evicted %d idle session(s)", len(expired))
        return len(expired)

    def get(self, session_id: str | None) -> CaptureSession | None:
        """세션 조회. 찾으면 last_seen 갱신."""
        self.evict_idle()
        if not session_id:
            return None

        session = self._sessions.get(session_id)
        if session is not None:
            session.last_seen = self._clock()
        return session

    def create(self) -> CaptureSession:
        self.evict_idle()
        session = CaptureSession(session_id=generate_session_id(), last_seen=self._clock())
        self._sessions[session.session_id] = session
        return session

    def get_or_create(self, session_id: str | None) -> CaptureSession:
        """기존 세션 반환, 없으면 새로 생성."""
        session = self.get(session_id)
        if session is None:
            session = self.create()
        return session
