"""
PDF Loader Module
Decodes bank statement PDFs into page-ordered text using PyMuPDF (fitz).
Decoding is all-or-nothing: any unreadable page fails the whole document.
"""

import fitz  # PyMuPDF
import logging
import threading
from pathlib import Path
from typing import Union

logger = logging.getLogger(__name__)

# Pages are joined with a single space, in page order
PAGE_SEPARATOR = " "

_backend_lock = threading.Lock()
_backend_ready = False


class PDFLoadError(Exception):
    """Raised when a document cannot be decoded into text."""
    pass


def init_pdf_backend() -> bool:
    """
    One-time, process-wide setup of the PyMuPDF backend.

    MuPDF prints its own errors to stderr by default; those are turned off
    so decode failures surface only through PDFLoadError and logging.

    Returns:
        True if this call performed the initialization, False if it was
        already done.
    """
    global _backend_ready
    if _backend_ready:
        return False

    with _backend_lock:
        if _backend_ready:
            return False
        fitz.TOOLS.mupdf_display_errors(False)
        _backend_ready = True
        logger.debug("PyMuPDF backend initialized")
        return True


def _extract_pages(doc: fitz.Document, source: str) -> str:
    """Read every page of an open document and join the texts."""
    if doc.needs_pass:
        logger.error(f"PDF is encrypted: {source}")
        raise PDFLoadError(f"PDF is password protected: {source}")

    if doc.page_count == 0:
        logger.error(f"PDF has no pages: {source}")
        raise PDFLoadError(f"PDF has no pages: {source}")

    logger.info(f"Loading PDF: {source} ({doc.page_count} pages)")

    page_texts = []
    empty_pages = 0

    for page_num in range(doc.page_count):
        try:
            text = doc[page_num].get_text()
        except Exception as e:
            logger.error(f"Error extracting text from page {page_num + 1}: {e}")
            raise PDFLoadError(
                f"Failed to read page {page_num + 1} of {source}: {e}"
            ) from e

        if not text.strip():
            empty_pages += 1
            logger.warning(f"Page {page_num + 1}: empty or no extractable text")
        else:
            logger.debug(f"Page {page_num + 1}: extracted {len(text)} characters")
        page_texts.append(text)

    combined_text = PAGE_SEPARATOR.join(page_texts)

    logger.info(
        f"Extraction complete: {len(combined_text)} characters from "
        f"{len(page_texts)} pages ({empty_pages} without text)"
    )
    return combined_text


def _open_and_extract(source: str, **open_kwargs) -> str:
    init_pdf_backend()

    doc = None
    try:
        doc = fitz.open(**open_kwargs)
        return _extract_pages(doc, source)

    except PDFLoadError:
        raise

    except fitz.FileDataError as e:
        logger.error(f"Invalid or corrupted PDF file: {source}", exc_info=True)
        raise PDFLoadError(f"Invalid or corrupted PDF file: {source}") from e

    except Exception as e:
        logger.error(f"Unexpected error loading PDF {source}: {e}", exc_info=True)
        raise PDFLoadError(f"Failed to read PDF file {source}: {str(e)}") from e

    finally:
        if doc is not None:
            try:
                doc.close()
                logger.debug(f"PDF document closed: {source}")
            except Exception as e:
                logger.warning(f"Error closing PDF document: {e}")


def load_pdf(file_path: Union[str, Path]) -> str:
    """
    Extract text from all pages of a PDF file.

    Args:
        file_path: Path to the PDF file

    Returns:
        Page texts joined with a single space, in page order

    Raises:
        PDFLoadError: If the PDF cannot be opened or any page cannot be read
    """
    pdf_path = Path(file_path)
    if not pdf_path.exists():
        logger.error(f"PDF file not found: {file_path}")
        raise PDFLoadError(f"PDF file not found: {file_path}")

    if not pdf_path.suffix.lower() == '.pdf':
        logger.error(f"File is not a PDF: {file_path}")
        raise PDFLoadError(f"File is not a PDF: {file_path}")

    return _open_and_extract(str(pdf_path), filename=str(pdf_path), filetype="pdf")


def load_pdf_bytes(content: bytes, name: str = "<upload>") -> str:
    """
    Extract text from an in-memory PDF (e.g. an HTTP upload).

    Args:
        content: Raw PDF bytes
        name: Label used in log and error messages

    Returns:
        Page texts joined with a single space, in page order

    Raises:
        PDFLoadError: If the bytes are not a readable PDF
    """
    if not content:
        logger.error(f"Empty PDF content: {name}")
        raise PDFLoadError(f"PDF file is empty: {name}")

    return _open_and_extract(name, stream=content, filetype="pdf")
