"""Tests for PDF text extraction and the resume size gate."""
from unittest.mock import MagicMock

import fitz
import pytest
import requests

from resume_validation.core.errors import ExtractionError
from resume_validation.services.resumes.text_extractor import TextExtractor, check_resume_size, extract_text

MODULE = "resume_validation.services.resumes.text_extractor"


def _pdf(*pages):
    doc = fitz.open()
    for lines in pages:
        page = doc.new_page()
        y = 72
        for line in lines:
            page.insert_text((72, y), line)
            y += 20
    data = doc.tobytes()
    doc.close()
    return data


def test_pages_are_flattened_in_order():
    content = _pdf(["Jane Doe", "jane@example.com"], ["Education", "B.Sc. Physics"], ["Skills: Python"])

    text = extract_text(content)

    assert text == "Jane Doe jane@example.com Education B.Sc. Physics Skills: Python"


def test_blank_pages_yield_empty_text():
    assert extract_text(_pdf([], [])) == ""


def test_garbage_bytes_raise_extraction_error():
    with pytest.raises(ExtractionError):
        extract_text(b"this is not a pdf at all")


def test_unreadable_page_raises_extraction_error(mocker):
    mocker.patch.object(fitz.Page, "get_text", side_effect=RuntimeError("broken content stream"))

    with pytest.raises(ExtractionError, match="Page 1 could not be read: broken content stream"):
        extract_text(_pdf(["Jane Doe"]))


def test_fetch_wraps_network_errors(mocker):
    mocker.patch(f"{MODULE}.requests.get", side_effect=requests.ConnectionError("Connection refused"))

    with pytest.raises(ExtractionError, match="Connection refused"):
        TextExtractor().fetch("https://storage.example/u1.pdf")


def test_fetch_wraps_http_errors(mocker):
    response = MagicMock()
    response.raise_for_status.side_effect = requests.HTTPError("404 Client Error: Not Found")
    mocker.patch(f"{MODULE}.requests.get", return_value=response)

    with pytest.raises(ExtractionError, match="404"):
        TextExtractor().fetch("https://storage.example/missing.pdf")


def test_fetch_returns_body_and_passes_timeout(mocker):
    response = MagicMock()
    response.raise_for_status.return_value = None
    response.content = b"%PDF-1.7 ..."
    get = mocker.patch(f"{MODULE}.requests.get", return_value=response)

    assert TextExtractor(timeout=12).fetch("https://storage.example/u1.pdf") == b"%PDF-1.7 ..."
    get.assert_called_once_with("https://storage.example/u1.pdf", timeout=12)


def test_size_gate():
    check_resume_size(5 * 1024 * 1024, 5 * 1024 * 1024)
    with pytest.raises(ExtractionError, match="limit"):
        check_resume_size(5 * 1024 * 1024 + 1, 5 * 1024 * 1024)
