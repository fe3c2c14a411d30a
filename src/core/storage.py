"""
JSON 파일 저장소 헬퍼 (draft 파일, 제출 로그 공용).

쓰기 규칙:
- 같은 디렉터리의 임시 파일에 쓴 뒤 os.replace로 교체
- 교체 전 실패하면 기존 파일은 그대로 남음
- fsync는 가능한 환경에서만 (실패하면 경고 후 계속)
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


def _fsync_dir(dir_path: Path) -> None:
    """rename 결과를 디렉터리 엔트리까지 디스크에 반영."""
    try:
        fd = os.open(str(dir_path), os.O_RDONLY | os.O_DIRECTORY)
    except (OSError, AttributeError) as e:
        logger.warning("Cannot open %s for fsync: %s", dir_path, e)
        return

    try:
        os.fsync(fd)
    except OSError as e:
        logger.warning("Directory fsync failed for %s: %s", dir_path, e)
    finally:
        os.close(fd)


def atomic_write_json(path: Path, data: dict[str, Any]) -> None:
    """
    dict를 JSON 파일로 원자적으로 저장.

    Args:
        path: 대상 파일
        data: 직렬화할 dict (UTF-8, indent=2)
    """
    path.parent.mkdir(parents=True, exist_ok=True)

    fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.flush()
            try:
                os.fsync(f.fileno())
            except OSError as e:
                logger.warning("File fsync failed for %s: %s", path, e)

        os.replace(temp_path, path)
    except BaseException:
        temp_path.unlink(missing_ok=True)
        raise

    _fsync_dir(path.parent)


def read_json(path: Path) -> dict[str, Any]:
    """
    JSON 파일 로드. 파일이 없으면 빈 dict.

    Raises:
        json.JSONDecodeError: 손상된 파일
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return {}
    data: dict[str, Any] = json.loads(text)
    return data
