"""PDF helpers built on PyMuPDF."""

import logging

from contractdesk.core.exceptions import UpstreamError

logger = logging.getLogger(__name__)


def merge_pdfs(parts: list[bytes]) -> bytes:
    """Concatenate the pages of *parts* in order into a single PDF.

    Raises :class:`UpstreamError` (stage ``pdf_merge``) when a part cannot be
    opened; the parts come straight from the Drive export.
    """
    import fitz  # PyMuPDF, imported lazily to keep startup fast

    merged = fitz.open()
    try:
        for index, data in enumerate(parts):
            try:
                src = fitz.open(stream=data, filetype="pdf")
            except Exception as exc:
                raise UpstreamError("pdf_merge", f"part {index + 1} is not a readable PDF: {exc}") from exc
            try:
                merged.insert_pdf(src)
            finally:
                src.close()
        logger.debug("Merged %d PDF part(s) into %d page(s)", len(parts), merged.page_count)
        return merged.tobytes()
    finally:
        merged.close()
