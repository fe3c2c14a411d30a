"""
PDF 렌더러: Pillow 디코드 + reportlab 페이지 배치.

규칙:
- 이미지 1장 = 페이지 1장, 목록 순서 그대로
- 고정 페이지 크기, 여백 안으로 축소만 (확대 금지), 가운데 정렬
- 지원 포맷: JPEG, PNG (MIME 타입으로 embed 포맷 결정)
"""

import logging
from collections.abc import Sequence
from io import BytesIO

from PIL import Image, UnidentifiedImageError
from reportlab.lib.utils import ImageReader
from reportlab.pdfgen import canvas

from src.domain.constants import PDF_PAGE_HEIGHT, PDF_PAGE_MARGIN, PDF_PAGE_WIDTH
from src.domain.errors import ErrorCodes, PdfGenerationError
from src.domain.schemas import CapturedImage, PagePlacement, PdfDocument

logger = logging.getLogger(__name__)

EMBED_JPEG = "JPEG"
EMBED_PNG = "PNG"


def resolve_embed_format(content_type: str) -> str:
    """
    MIME 타입 → embed 포맷.

    jpeg/jpg가 포함되면 JPEG, 그 외는 모두 PNG 경로.
    """
    value = (content_type or "").lower()
    if "jpeg" in value or "jpg" in value:
        return EMBED_JPEG
    return EMBED_PNG


def fit_scale(
    width: float,
    height: float,
    page_width: float = PDF_PAGE_WIDTH,
    page_height: float = PDF_PAGE_HEIGHT,
    margin: float = PDF_PAGE_MARGIN,
) -> float:
    """
    여백 안에 맞추는 축소 비율.

    scale = min((W - 2m) / w, (H - 2m) / h, 1)
    """
    return min(
        (page_width - 2 * margin) / width,
        (page_height - 2 * margin) / height,
        1.0,
    )


class PdfAssembler:
    """
    이미지 목록 → PDF.

    Usage:
        assembler = PdfAssembler()
        document = assembler.assemble(session.images.images)
        document.content  # PDF bytes
    """

    def __init__(
        self,
        page_width: float = PDF_PAGE_WIDTH,
        page_height: float = PDF_PAGE_HEIGHT,
        margin: float = PDF_PAGE_MARGIN,
    ):
        """
        Args:
            page_width: 페이지 너비 (pt)
            page_height: 페이지 높이 (pt)
            margin: 네 방향 여백 (pt)
        """
        if page_width - 2 * margin <= 0 or page_height - 2 * margin <= 0:
            raise ValueError(
                f"margin {margin} leaves no drawable area on "
                f"{page_width}x{page_height} page"
            )

        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin

    def fit_scale(self, width: float, height: float) -> float:
        return fit_scale(width, height, self.page_width, self.page_height, self.margin)

    def layout(
        self,
        image_id: str,
        embed_format: str,
        width: int,
        height: int,
    ) -> PagePlacement:
        """이미지 크기 → 페이지 중앙 배치 정보."""
        scale = self.fit_scale(width, height)
        draw_width = width * scale
        draw_height = height * scale

        return PagePlacement(
            image_id=image_id,
            embed_format=embed_format,
            source_width=width,
            source_height=height,
            scale=scale,
            x=(self.page_width - draw_width) / 2,
            y=(self.page_height - draw_height) / 2,
            width=draw_width,
            height=draw_height,
        )

    def _decode(self, image: CapturedImage) -> tuple[Image.Image, str]:
        """
        이미지 디코드 + embed 포맷 확인.

        Raises:
            PdfGenerationError: IMAGE_DECODE_FAILED
        """
        embed_format = resolve_embed_format(image.content_type)

        try:
            decoded = Image.open(BytesIO(image.data))
            decoded.load()
        except (UnidentifiedImageError, OSError) as e:
            raise PdfGenerationError(
                ErrorCodes.IMAGE_DECODE_FAILED,
                image_id=image.image_id,
                content_type=image.content_type,
                error=str(e),
            ) from e

        # 일부 카메라 JPEG는 Pillow에서 MPO로 인식됨
        actual = EMBED_JPEG if decoded.format == "MPO" else decoded.format
        if actual != embed_format:
            raise PdfGenerationError(
                ErrorCodes.IMAGE_DECODE_FAILED,
                image_id=image.image_id,
                expected=embed_format,
                actual=decoded.format,
            )

        return decoded, embed_format

    def _draw(
        self,
        pdf: canvas.Canvas,
        decoded: Image.Image,
        placement: PagePlacement,
    ) -> None:
        mask = None
        if decoded.mode in ("RGBA", "LA") or (
            decoded.mode == "P" and "transparency" in decoded.info
        ):
            decoded = decoded.convert("RGBA")
            mask = "auto"
        elif decoded.mode not in ("RGB", "L", "CMYK"):
            decoded = decoded.convert("RGB")

        pdf.drawImage(
            ImageReader(decoded),
            placement.x,
            placement.y,
            width=placement.width,
            height=placement.height,
            mask=mask,
        )
        pdf.showPage()

    def assemble(self, images: Sequence[CapturedImage]) -> PdfDocument:
        """
        이미지 목록으로 PDF 생성.

        Args:
            images: 삽입 순서의 이미지 목록

        Returns:
            PdfDocument (content + 페이지별 배치)

        Raises:
            PdfGenerationError: NO_IMAGES, IMAGE_DECODE_FAILED, PDF_RENDER_FAILED
        """
        if not images:
            raise PdfGenerationError(ErrorCodes.NO_IMAGES)

        buffer = BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=(self.page_width, self.page_height))
        pdf.setCreator("form-capture")
        placements: list[PagePlacement] = []

        try:
            for image in images:
                decoded, embed_format = self._decode(image)
                placement = self.layout(
                    image.image_id, embed_format, decoded.width, decoded.height
                )
                self._draw(pdf, decoded, placement)
                placements.append(placement)

            pdf.save()

        except PdfGenerationError:
            raise
        except Exception as e:
            raise PdfGenerationError(
                ErrorCodes.PDF_RENDER_FAILED,
                page=len(placements) + 1,
                error=str(e),
            ) from e

        logger.info("PDF assembled: %d page(s)", len(placements))
        return PdfDocument(content=buffer.getvalue(), placements=placements)
