"""Shared pytest fixtures.

Statement PDFs are generated on the fly with PyMuPDF so no binary fixtures
live in the repository.
"""

import logging
from datetime import date

import fitz
import pytest

from finance_tracker.extractors.financial_rules import Category


def build_pdf(pages: list[list[str]]) -> bytes:
    """Create a PDF with one page per entry, one text line per string."""
    doc = fitz.open()
    try:
        for lines in pages:
            page = doc.new_page()
            y = 72
            for line in lines:
                page.insert_text((72, y), line, fontsize=10)
                y += 14
        return doc.tobytes()
    finally:
        doc.close()


@pytest.fixture
def make_pdf():
    return build_pdf


@pytest.fixture
def fixed_today():
    """Clock used for date fallbacks."""
    return lambda: date(2024, 6, 30)


@pytest.fixture
def categories() -> list[Category]:
    return [
        Category("1", "Salary", "income"),
        Category("2", "Other Income", "income"),
        Category("3", "Food", "expense"),
        Category("4", "Transportation", "expense"),
        Category("5", "Housing", "expense"),
        Category("6", "Other Expense", "expense"),
    ]


@pytest.fixture
def statement_lines() -> list[str]:
    return [
        "ACME BANK - Monthly Statement",
        "01/02/2023 Payroll direct deposit $2500.00",
        "03/02/2023 Grocery market purchase $84.35",
        "05/02/2023 Rent payment $1200.00",
        "Closing balance",
        "07/02/2023 Uber trip debit $18.90",
    ]


@pytest.fixture(autouse=True)
def restore_root_logging():
    """Entry points reconfigure the root logger; undo that after each test."""
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
