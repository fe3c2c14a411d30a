"""
Core layer: UI와 무관한 핵심 모듈.

역할:
- 이미지 목록, draft 저장, ID, 원자적 쓰기, 제출 로그
- FastAPI/HTMX에 의존하지 않음 (페이지 없이 단위 테스트 가능)
"""

from .drafts import DraftStore
from .ids import generate_image_id, generate_run_id, generate_session_id
from .images import ImageCollection, check_upload, decode_snapshot
from .logging import (
    complete_submission_log,
    create_submission_log,
    save_submission_log,
)
from .storage import atomic_write_json

__all__ = [
    # images
    "ImageCollection",
    "check_upload",
    "decode_snapshot",
    # drafts
    "DraftStore",
    # ids
    "generate_image_id",
    "generate_run_id",
    "generate_session_id",
    # storage
    "atomic_write_json",
    # logging
    "create_submission_log",
    "complete_submission_log",
    "save_submission_log",
]
