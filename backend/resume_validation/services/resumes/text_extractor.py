"""PDF text extraction for uploaded resumes.

Flat, order-preserving: pages 1..N, words of a page joined by single spaces, pages joined by
a space. No layout or font handling.
"""
from __future__ import annotations

import logging
from typing import Optional

import fitz  # PyMuPDF
import requests

from resume_validation.core.errors import ExtractionError

logger = logging.getLogger("resumes.extractor")


def check_resume_size(num_bytes: int, max_bytes: int) -> None:
    """Callers run this before extraction; the extractor itself enforces no limit."""
    if num_bytes > max_bytes:
        raise ExtractionError(
            f"Resume is {num_bytes} bytes; the limit is {max_bytes} bytes ({max_bytes // (1024 * 1024)}MB)"
        )


def extract_text(content: bytes) -> str:
    try:
        doc = fitz.open(stream=content, filetype="pdf")
    except Exception as e:
        raise ExtractionError(f"Document is not a readable PDF: {e}") from e

    with doc:
        if doc.page_count == 0:
            raise ExtractionError("Document has no pages")
        full_text = ""
        for page in doc:
            try:
                # words: (x0, y0, x1, y1, "word", block_no, line_no, word_no) in content order
                words = page.get_text("words")
            except Exception as e:
                raise ExtractionError(f"Page {page.number + 1} could not be read: {e}") from e
            full_text += " ".join(w[4] for w in words) + " "
        logger.debug("Extracted %d chars from %d page(s)", len(full_text), doc.page_count)
    return full_text.strip()


class TextExtractor:
    def __init__(self, *, timeout: Optional[float] = None):
        self.timeout = timeout

    def fetch(self, url: str) -> bytes:
        try:
            response = requests.get(url, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error("Resume download failed: %s", e)
            raise ExtractionError(str(e)) from e
        return response.content

    def extract(self, content: bytes) -> str:
        return extract_text(content)
