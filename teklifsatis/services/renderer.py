"""
Teklif belgesi PDF olusturucu.

Belge modeli Jinja2 sablonu ile HTML'e, HTML xhtml2pdf ile PDF'e cevrilir.
reportlab "invariant" modunda calisir; ayni belge her zaman ayni byte'lari uretir.
"""
import logging
from io import BytesIO
from pathlib import Path
from typing import Protocol

from fastapi.templating import Jinja2Templates
from reportlab import rl_config
from xhtml2pdf import pisa

from teklifsatis.config import settings
from teklifsatis.schemas.document import QuoteDocument, LineGroup, RenderLine
from teklifsatis.services.line_codec import to_render_line
from teklifsatis.services.pricing import format_currency

logger = logging.getLogger(__name__)

# PDF icine zaman damgasi ve rastgele ID yazilmasin
rl_config.invariant = 1

TEMPLATE_DIR = Path(__file__).resolve().parent.parent / "templates"
TEMPLATE_NAME = "quote_document.html"

templates = Jinja2Templates(directory=str(TEMPLATE_DIR))
templates.env.filters["money"] = format_currency


class RenderError(RuntimeError):
    """PDF olusturulamadi."""


class DocumentRenderer(Protocol):
    def render(self, document: QuoteDocument) -> bytes: ...


def group_rows(group: LineGroup) -> list[RenderLine]:
    return [to_render_line(line) for line in group.lines]


class PdfRenderer:
    """QuoteDocument -> PDF byte'lari."""

    def __init__(self, font_path: str | None = None):
        self.font_path = font_path

    def render_html(self, document: QuoteDocument) -> str:
        return templates.get_template(TEMPLATE_NAME).render(
            document=document,
            groups=[(group, group_rows(group)) for group in document.groups],
            company_name=settings.COMPANY_NAME,
            font_path=self.font_path,
        )

    def render(self, document: QuoteDocument) -> bytes:
        html_content = self.render_html(document)

        pdf_buffer = BytesIO()
        result = pisa.CreatePDF(html_content, dest=pdf_buffer, encoding="utf-8")
        if result.err:
            logger.error(
                "PDF olusturulamadi: %s (%d hata)", document.document_number, result.err
            )
            raise RenderError(f"PDF olusturulamadi ({result.err} hata)")

        pdf_bytes = pdf_buffer.getvalue()
        logger.debug("PDF olusturuldu: %s (%d byte)", document.document_number, len(pdf_bytes))
        return pdf_bytes
