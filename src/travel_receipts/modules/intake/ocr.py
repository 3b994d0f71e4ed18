from __future__ import annotations

from io import BytesIO

import pytesseract
from PIL import Image, UnidentifiedImageError

from travel_receipts.core.config import settings
from travel_receipts.core.errors import InputError, UpstreamError


def ocr_image_bytes(
    body: bytes, *, lang: str | None = None, timeout: float | None = None
) -> str:
    """Run Tesseract on an encoded image; the call is bounded by ``timeout`` seconds."""
    tesseract_lang = lang or settings.tesseract_lang
    timeout_s = settings.ocr_timeout_seconds if timeout is None else timeout

    try:
        image = Image.open(BytesIO(body))
        image.load()
    except (UnidentifiedImageError, OSError) as e:
        raise InputError(f"Could not read image: {e}") from e

    try:
        prepared = image if image.mode in {"RGB", "L"} else image.convert("RGB")
        return pytesseract.image_to_string(prepared, lang=tesseract_lang, timeout=timeout_s) or ""
    except pytesseract.TesseractNotFoundError as e:
        raise UpstreamError("OCR engine is not installed") from e
    except pytesseract.TesseractError as e:
        raise UpstreamError(f"OCR failed: {e.message}") from e
    except RuntimeError as e:
        # pytesseract signals a killed process with a bare RuntimeError
        raise UpstreamError(f"OCR timed out after {timeout_s:g}s") from e
    finally:
        image.close()
