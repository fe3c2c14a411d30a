"""
Domain Constants: 폼 캡처 전역 상수.

필드 정의, PDF 페이지 규격, 사용자 메시지 등
시스템 전반에서 사용되는 값들.
"""

# =============================================================================
# Form Fields (폼 필드)
# =============================================================================
# 6개 평면 필드. 순서는 화면/검증 메시지 순서와 동일.

FORM_FIELDS = (
    "date",
    "article",
    "client",
    "order_number",
    "ticket_number",
    "quantity",
)

REQUIRED_FIELDS = ("date", "article", "client", "quantity")

# 스프레드시트 스크립트가 읽는 원래 키 이름
WIRE_FIELD_NAMES = {
    "date": "date",
    "article": "article",
    "client": "client",
    "order_number": "nBon",
    "ticket_number": "nTicket",
    "quantity": "quantite",
}

# =============================================================================
# PDF Page (PDF 페이지 규격, pt 단위)
# =============================================================================

PDF_PAGE_WIDTH = 600
PDF_PAGE_HEIGHT = 800
PDF_PAGE_MARGIN = 20

# =============================================================================
# Images (이미지 정책)
# =============================================================================

IMAGE_ID_LENGTH = 9
SUPPORTED_IMAGE_TYPES = ("image/jpeg", "image/png")
PHOTO_MAX_SIZE_MB = 10

# =============================================================================
# Draft Storage
# =============================================================================

DRAFT_KEY = "formDraft"
DRAFT_LOCK_TIMEOUT = 5.0

# =============================================================================
# Session
# =============================================================================

SESSION_COOKIE_NAME = "form_capture_session"
SESSION_IDLE_TTL_SECONDS = 30 * 60

# =============================================================================
# User Messages (사용자 메시지)
# =============================================================================

MSG_IMAGE_REQUIRED = "At least one image is required"
MSG_DRAFT_SAVED = "Draft saved successfully!"
MSG_SUBMIT_SUCCESS = "Form submitted successfully!"
MSG_SUBMIT_FAILED = "An error occurred while submitting the form"
MSG_SUBMIT_IN_PROGRESS = "A submission is already being processed"
MSG_CAMERA_FAILED = "Could not capture an image from the camera"
MSG_PROCESSING = "Processing..."
