"""
Submission logging: 제출 1회 단위 실행 로그

규칙:
- 제출마다 run_id 새로 발급
- 성공/실패/검증 차단 모두 기록
- 서비스별 상세는 로그에만 (사용자 메시지는 통합 문구)
"""

from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from src.core.ids import generate_run_id
from src.core.storage import atomic_write_json
from src.domain.schemas import DeliveryOutcome, SubmissionLog

# =============================================================================
# Submission Log Management
# =============================================================================


def create_submission_log(session_id: str, image_count: int = 0) -> SubmissionLog:
    """
    새 SubmissionLog 생성.

    Args:
        session_id: 세션 ID
        image_count: 제출 시점 이미지 수

    Returns:
        초기화된 SubmissionLog
    """
    return SubmissionLog(
        run_id=generate_run_id(),
        session_id=session_id,
        started_at=datetime.now(UTC).isoformat(),
        image_count=image_count,
        result="pending",
    )


def record_delivery(log: SubmissionLog, outcome: DeliveryOutcome) -> None:
    """외부 전송 결과 기록."""
    log.deliveries.append(outcome)


def complete_submission_log(
    log: SubmissionLog,
    result: str,
    error_code: str | None = None,
    error_context: dict[str, Any] | None = None,
) -> None:
    """
    SubmissionLog 완료 처리.

    Args:
        log: SubmissionLog 인스턴스
        result: success, failed, rejected
        error_code: 에러 코드 (실패 시)
        error_context: 에러 컨텍스트 (실패 시)
    """
    log.finished_at = datetime.now(UTC).isoformat()
    log.result = result

    if result != "success":
        log.error_code = error_code
        log.error_context = error_context


def save_submission_log(log: SubmissionLog, logs_dir: Path) -> Path:
    """
    SubmissionLog를 파일로 저장.

    Args:
        log: SubmissionLog 인스턴스
        logs_dir: logs/ 디렉터리 경로

    Returns:
        저장된 파일 경로
    """
    logs_dir.mkdir(parents=True, exist_ok=True)
    log_path = logs_dir / f"run_{log.run_id}.json"
    atomic_write_json(log_path, log.to_dict())
    return log_path
