"""
Text extraction from uploaded PDF documents.

Pages are read in order; the text runs of a page are joined with single
spaces and pages are joined with newlines, so an N-page document always
yields N newline-separated segments. A page whose text layer cannot be
read contributes an empty segment. Only a document that cannot be opened
at all fails the stage.
"""

import io
import re
from typing import Any

from pypdf import PdfReader

from ..errors import DocumentParseError
from ..logging import get_logger

logger = get_logger(__name__)

_LINE_BREAKS = re.compile(r"[\r\n]+")


class TextExtractor:
    def extract(self, document: bytes) -> str:
        """Return the plain text of every page of ``document``.

        Raises:
            DocumentParseError: If the document cannot be opened
        """
        try:
            reader = PdfReader(io.BytesIO(document))
            pages = list(reader.pages)
        except Exception as e:
            logger.error("Failed to open PDF", error=str(e))
            raise DocumentParseError(f"Failed to extract text from PDF: {e}") from e

        page_texts = [self._page_text(page, number) for number, page in enumerate(pages, start=1)]
        logger.info(
            "Extracted document text",
            page_count=len(page_texts),
            empty_pages=sum(1 for text in page_texts if not text),
            characters=sum(len(text) for text in page_texts),
        )
        return "\n".join(page_texts)

    def _page_text(self, page: Any, number: int) -> str:
        runs: list[str] = []

        def collect(text: str, *_: Any) -> None:
            run = _LINE_BREAKS.sub(" ", text).strip()
            if run:
                runs.append(run)

        try:
            page.extract_text(visitor_text=collect)
        except Exception as e:
            logger.warning("Unreadable text layer, using empty page", page=number, error=str(e))
            return ""

        return " ".join(runs)
