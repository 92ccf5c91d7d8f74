"""
Finance Tracker Statement Importer.
Extracts income/expense transaction drafts from PDF bank statements.
"""

__version__ = "1.0.0"
