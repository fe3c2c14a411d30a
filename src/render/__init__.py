"""
Render layer: PDF 출력 생성.

역할:
- 이미지 목록 → 이미지당 1페이지 PDF
- Pillow (디코드), reportlab (배치/직렬화)
"""

from .pdf import PdfAssembler, fit_scale, resolve_embed_format

__all__ = [
    "PdfAssembler",
    "fit_scale",
    "resolve_embed_format",
]
