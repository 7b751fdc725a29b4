from __future__ import annotations

import logging
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger(__name__)

PdfSource = Union[str, Path, bytes, bytearray]


@dataclass
class CVTextResult:
    raw_text: str
    method: str
    metadata: dict = field(default_factory=dict)


def _extract_with_pdfplumber(path: str) -> Optional[str]:
    try:
        import pdfplumber
    except Exception as exc:  # pragma: no cover - import guard
        logger.info("pdfplumber unavailable: %s", exc)
        return None

    try:
        with pdfplumber.open(path) as pdf:
            text = "\n".join(page.extract_text() or "" for page in pdf.pages).strip()
        return text or None
    except Exception as exc:  # pragma: no cover - safety
        logger.warning("pdfplumber failed, will fallback: %s", exc)
        return None


def _extract_with_pymupdf(path: str) -> Optional[str]:
    try:
        import fitz  # type: ignore
    except Exception as exc:  # pragma: no cover - import guard
        logger.info("pymupdf unavailable: %s", exc)
        return None

    try:
        with fitz.open(path) as doc:
            text = "\n".join(page.get_text() for page in doc).strip()
        return text or None
    except Exception as exc:  # pragma: no cover - safety
        logger.warning("pymupdf failed: %s", exc)
        return None


def extract_cv_text(source: PdfSource) -> CVTextResult:
    """
    Extract plain text from an uploaded CV, preferring pdfplumber and falling
    back to pymupdf when the first pass looks poor. Accepts a path or raw bytes.
    """
    if isinstance(source, (bytes, bytearray)):
        with tempfile.NamedTemporaryFile(delete=False, suffix=".pdf") as tmp:
            tmp.write(bytes(source))
            path = tmp.name
        try:
            return _extract(path)
        finally:
            Path(path).unlink(missing_ok=True)
    return _extract(str(source))


def _extract(path: str) -> CVTextResult:
    text = _extract_with_pdfplumber(path)
    method_used = "pdfplumber"

    if not text or is_low_quality(text):
        fallback_text = _extract_with_pymupdf(path)
        if fallback_text:
            text = fallback_text
            method_used = "pymupdf"

    if not text:
        raise ValueError("Unable to extract text from PDF with available extractors")

    return CVTextResult(raw_text=text, method=method_used, metadata={"characters": len(text)})


def is_low_quality(text: str) -> bool:
    # Very few unique words implies extraction failed. Japanese text packs
    # more per character, so it gets a shorter minimum length.
    words = [w for w in text.split() if w.isalpha()]
    if words and len(set(words)) / len(words) < 0.15:
        return True
    return len(text) < (100 if text.isascii() else 30)
