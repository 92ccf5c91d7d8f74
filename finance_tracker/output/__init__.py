"""
Output Module - PDF import reports and CSV export.
"""

from .writer import (
    PDFReportWriter,
    generate_pdf_report
)

from .csv_export import (
    export_to_csv,
    export_filename,
    transactions_to_csv
)

__all__ = [
    'PDFReportWriter',
    'generate_pdf_report',
    'export_to_csv',
    'export_filename',
    'transactions_to_csv',
]
