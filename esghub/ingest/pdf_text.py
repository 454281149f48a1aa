from __future__ import annotations
from typing import List
import io
import re
from pypdf import PdfReader
from esghub.utils.exception import DocumentParseError
from esghub.utils.logger import logger
from esghub.utils.types import ExtractedText

WHITESPACE_RE = re.compile(r"\s+")


def clean_fragment(text: str) -> str:
    text = text.replace("\x00", " ")
    return WHITESPACE_RE.sub(" ", text).strip()


def _page_fragments(page) -> List[str]:
    fragments: List[str] = []

    def visitor(text, cm, tm, font_dict, font_size):
        frag = clean_fragment(text)
        if frag:
            fragments.append(frag)

    plain = page.extract_text(visitor_text=visitor) or ""
    # Some content streams only surface through the plain extraction path
    if not fragments and plain.strip():
        fragments.append(clean_fragment(plain))
    return fragments


def extract_text(data: bytes) -> ExtractedText:
    """Extract page-ordered text from raw PDF bytes.

    Each page becomes the space-joined text fragments pypdf reports for it, in
    content order. No OCR and no layout reconstruction. Anything that keeps the
    whole document from being read raises DocumentParseError; a partially read
    document is never returned.
    """
    if not data:
        raise DocumentParseError("The uploaded file is empty.")
    try:
        reader = PdfReader(io.BytesIO(data))
        if reader.is_encrypted and not reader.decrypt(""):
            raise DocumentParseError("The PDF is password protected.")
        pages: List[str] = []
        for page in reader.pages:
            pages.append(" ".join(_page_fragments(page)))
    except DocumentParseError:
        raise
    except Exception as e:
        raise DocumentParseError(f"Could not read PDF: {e}") from e
    if not pages:
        raise DocumentParseError("The PDF has no pages.")
    logger.debug("Extracted %d page(s), %d characters", len(pages), sum(len(p) for p in pages))
    return ExtractedText(pages=pages)


def load_document(uploaded_file) -> ExtractedText:
    """Read a Streamlit UploadedFile (or any object with .read()) and extract its text."""
    if hasattr(uploaded_file, "getvalue"):
        data = uploaded_file.getvalue()
    else:
        data = uploaded_file.read()
    return extract_text(data)
