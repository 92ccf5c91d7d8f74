"""
Loaders Module - PDF decoding into page-ordered text.
"""

from .pdf_loader import (
    init_pdf_backend,
    load_pdf,
    load_pdf_bytes,
    PDFLoadError
)

__all__ = [
    'init_pdf_backend',
    'load_pdf',
    'load_pdf_bytes',
    'PDFLoadError',
]
