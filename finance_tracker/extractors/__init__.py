"""
Extractors Module - Statement segmentation, transaction parsing and categorization.
"""

from .text_segmenter import (
    TextSegmenter,
    segment_text
)

from .regex_extractor import (
    TransactionDraft,
    TransactionExtractor,
    extract_transactions_from_text
)

from .financial_rules import (
    Category,
    TransactionType,
    CATEGORY_KEYWORDS,
    DEFAULT_CATEGORIES,
    classify_transaction_type,
    resolve_category,
    format_amount_display
)

__all__ = [
    'TextSegmenter',
    'segment_text',
    'TransactionDraft',
    'TransactionExtractor',
    'extract_transactions_from_text',
    'Category',
    'TransactionType',
    'CATEGORY_KEYWORDS',
    'DEFAULT_CATEGORIES',
    'classify_transaction_type',
    'resolve_category',
    'format_amount_display',
]
