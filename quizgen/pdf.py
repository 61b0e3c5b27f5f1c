# pdf.py
import io
import logging

from PyPDF2 import PdfReader
from PyPDF2.errors import PdfReadError

from quizgen.errors import ExternalServiceError

logger = logging.getLogger(__name__)


class PDFError(ExternalServiceError):
    pass


def extract_pdf_text(data: bytes) -> str:
    """
    Returns the text of every page, one page per line block.
    Raises PDFError when the bytes can't be read as a PDF.
    """
    try:
        reader = PdfReader(io.BytesIO(data))
        parts = []
        for page in reader.pages:
            page_text = page.extract_text()
            if page_text:
                parts.append(page_text)
    except (PdfReadError, ValueError, KeyError) as e:
        logger.warning("PDF parsing failed: %s", e)
        raise PDFError(
            "Failed to parse PDF file. Please ensure the PDF contains readable text and is not corrupted."
        ) from e
    return "\n".join(parts)
