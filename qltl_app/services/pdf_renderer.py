from __future__ import annotations
from typing import List
import logging

import fitz  # PyMuPDF
from PIL import Image

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"

def is_pdf(content_type: str, name: str = "") -> bool:
    return content_type == PDF_CONTENT_TYPE or name.lower().endswith(".pdf")

def render_pdf_pages(file_bytes: bytes, dpi: int, max_pages: int = 1) -> List[Image.Image]:
    """Rasterize the first pages of a downloaded evidence PDF for preview."""
    pages: List[Image.Image] = []
    try:
        with fitz.open(stream=file_bytes, filetype="pdf") as doc:
            for page in doc:
                if len(pages) >= max_pages:
                    break
                mat = fitz.Matrix(dpi / 72.0, dpi / 72.0)
                pix = page.get_pixmap(matrix=mat, alpha=False)
                pages.append(Image.frombytes("RGB", [pix.width, pix.height], pix.samples))
    except (fitz.FileDataError, RuntimeError) as e:
        logger.warning("Could not render PDF preview: %s", e)
        return []
    return pages
