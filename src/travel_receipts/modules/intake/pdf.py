from __future__ import annotations

from io import BytesIO

import pymupdf
from pypdf import PdfReader

from travel_receipts.core.errors import InputError
from travel_receipts.modules.extraction.prompt import normalize_text


def extract_pdf_pages(body: bytes) -> list[str]:
    try:
        reader = PdfReader(BytesIO(body))
        return [(page.extract_text() or "") for page in reader.pages]
    except Exception as e:
        raise InputError(f"Could not read PDF: {e}") from e


def extract_pdf_text(body: bytes) -> str:
    """All page texts, blank-line separated, with whitespace normalized."""
    pages = extract_pdf_pages(body)
    joined = "".join(page + "\n\n" for page in pages)
    return normalize_text(joined, max_chars=None)


def open_pdf_document(body: bytes) -> pymupdf.Document:
    """Open a PDF for rasterizing; the caller closes it (``with doc:``)."""
    try:
        return pymupdf.open(stream=body, filetype="pdf")
    except Exception as e:
        raise InputError(f"Could not open PDF for rendering: {e}") from e


def render_page_png(doc: pymupdf.Document, page_index: int, *, scale: float = 2.0) -> bytes:
    try:
        page = doc.load_page(page_index)
        pix = page.get_pixmap(matrix=pymupdf.Matrix(scale, scale), alpha=False)
        png = pix.tobytes("png")
    except Exception as e:
        raise InputError(f"Could not render page {page_index + 1}: {e}") from e
    return png
