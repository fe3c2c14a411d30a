"""
App layer: UI 서버 (FastAPI + HTMX).

역할:
- 폼 화면, 파일 업로드/카메라 스냅샷, 세션 관리
- 폼 값 → FormFields 바인딩
- 제출 흐름은 services/dispatch에 위임
"""
