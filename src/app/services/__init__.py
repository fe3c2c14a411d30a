"""
Application Services.

역할:
- session: 페이지 세션 상태 (이미지 목록, 제출 상태)
- validate: 필수 입력 검사
- delivery: 스프레드시트/메신저 전송
- dispatch: 제출 전체 흐름
"""

from .delivery import MessengerClient, SheetsClient
from .dispatch import SubmissionDispatcher
from .session import CaptureSession, SessionRegistry
from .validate import validate_submission

__all__ = [
    "CaptureSession",
    "SessionRegistry",
    "validate_submission",
    "SheetsClient",
    "MessengerClient",
    "SubmissionDispatcher",
]
