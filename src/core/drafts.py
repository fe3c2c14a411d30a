"""
Draft 저장: 단일 슬롯 key-value 저장소

규칙:
- 키 하나(formDraft)에 가장 최근 draft만 보관 (덮어쓰기)
- 값은 JSON 인코딩된 문자열 (브라우저 localStorage와 같은 형태)
- 같은 파일의 다른 키는 건드리지 않음
- 동시 쓰기는 FileLock으로 직렬화
"""

import json
import logging
from collections.abc import Generator
from contextlib import contextmanager
from datetime import UTC, datetime
from pathlib import Path

from filelock import FileLock, Timeout

from src.core.storage import atomic_write_json, read_json
from src.domain.constants import DRAFT_KEY, DRAFT_LOCK_TIMEOUT
from src.domain.errors import DraftStoreError, ErrorCodes
from src.domain.schemas import DraftSnapshot, FormFields

logger = logging.getLogger(__name__)


class DraftStore:
    """
    Draft 저장소.

    Usage:
        store = DraftStore(Path("data/drafts.json"))
        snapshot = store.save(fields)
    """

    def __init__(
        self,
        path: Path,
        key: str = DRAFT_KEY,
        lock_timeout: float = DRAFT_LOCK_TIMEOUT,
    ):
        """
        Args:
            path: key-value JSON 파일 경로
            key: draft를 저장할 키
            lock_timeout: 락 대기 시간 (초)
        """
        self.path = path
        self.key = key
        self.lock_timeout = lock_timeout
        self.lock_path = path.with_name(path.name + ".lock")

    @contextmanager
    def _locked(self) -> Generator[None, None, None]:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        lock = FileLock(self.lock_path, timeout=self.lock_timeout)
        try:
            lock.acquire()
        except Timeout:
            raise DraftStoreError(
                ErrorCodes.DRAFT_LOCK_TIMEOUT,
                path=str(self.path),
                timeout=self.lock_timeout,
            ) from None
        try:
            yield
        finally:
            lock.release()

    def _read_all(self) -> dict[str, str]:
        try:
            data = read_json(self.path)
        except json.JSONDecodeError as e:
            raise DraftStoreError(
                ErrorCodes.DRAFT_STORE_CORRUPT,
                path=str(self.path),
                error=str(e),
            ) from e

        if not isinstance(data, dict):
            raise DraftStoreError(
                ErrorCodes.DRAFT_STORE_CORRUPT,
                path=str(self.path),
                error="top-level value is not an object",
            )
        return data

    def save(self, fields: FormFields) -> DraftSnapshot:
        """
        현재 필드 값을 draft로 저장 (이전 draft 덮어쓰기).

        Args:
            fields: 현재 폼 필드

        Returns:
            저장된 DraftSnapshot
        """
        snapshot = DraftSnapshot(
            form_data=fields.to_wire(),
            saved_at=datetime.now(UTC).isoformat(),
        )

        with self._locked():
            data = self._read_all()
            data[self.key] = json.dumps(snapshot.to_dict(), ensure_ascii=False)
            atomic_write_json(self.path, data)

        logger.info("Draft saved to %s (key=%s)", self.path, self.key)
        return snapshot

    def load(self) -> DraftSnapshot | None:
        """
        저장된 draft 로드.

        Returns:
            DraftSnapshot 또는 None (저장된 draft 없음)
        """
        with self._locked():
            data = self._read_all()

        raw = data.get(self.key)
        if raw is None:
            return None

        try:
            return DraftSnapshot.from_dict(json.loads(raw))
        except (AttributeError, TypeError, json.JSONDecodeError) as e:
            raise DraftStoreError(
                ErrorCodes.DRAFT_STORE_CORRUPT,
                path=str(self.path),
                key=self.key,
                error=str(e),
            ) from e
