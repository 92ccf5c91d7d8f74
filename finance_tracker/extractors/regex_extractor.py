"""
Regex Extractor Module
Turns candidate text segments into transaction drafts using regex patterns
for dates and amounts plus keyword rules for type and category.

Each segment is handled independently; the category list is read-only
input, so extraction is a pure function of (segment, categories).
"""

import re
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from typing import Callable, Iterable, Optional, Union
from finance_tracker.config import config
from .financial_rules import (
    Category,
    TransactionType,
    classify_transaction_type,
    format_amount_display,
    resolve_category,
)
from .text_segmenter import TextSegmenter

logger = logging.getLogger(__name__)

# Outcomes of a single segment
EXTRACTED = "extracted"
NO_DATE = "no_date"
NO_AMOUNT = "no_amount"


class TransactionDraft:
    """An extracted transaction that has not been persisted (no id yet)."""

    def __init__(
        self,
        date: str,
        description: str,
        amount: float,
        transaction_type: TransactionType,
        category: str
    ):
        self.date = date
        self.description = description
        self.amount = amount
        self.type = transaction_type
        self.category = category

    @property
    def amount_display(self) -> str:
        return format_amount_display(self.amount, self.type)

    def to_dict(self) -> dict:
        """Convert draft to dictionary."""
        return {
            "description": self.description,
            "amount": self.amount,
            "category": self.category,
            "type": self.type.value,
            "date": self.date,
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, TransactionDraft):
            return NotImplemented
        return self.to_dict() == other.to_dict()

    def __repr__(self) -> str:
        return (
            f"TransactionDraft(date={self.date}, desc={(self.description or '')[:30]}..., "
            f"amount={self.amount_display}, category={self.category})"
        )


def _remove_spans(text: str, spans: list[tuple[int, int]]) -> str:
    """Build a new string from text with the given index ranges left out."""
    pieces = []
    cursor = 0
    for start, end in sorted(spans):
        if start > cursor:
            pieces.append(text[cursor:start])
        cursor = max(cursor, end)
    pieces.append(text[cursor:])
    return "".join(pieces)


class TransactionExtractor:
    """
    Extracts transaction drafts from statement text.

    Known limitations:
    - Dates are always read as day/month/year.
    - By default the amount keeps the literal rule: drop everything but
      digits, commas and periods, turn the first comma into a period, then
      read the leading number. "1.234,56" becomes 1.234 and "1,234.56"
      becomes 1.234. Pass locale_aware_amounts=True to treat the last
      separator as the decimal point instead.
    - With "." as the date separator the date itself can hold the first
      amount-like text ("15.03.23" gives 15.03). Pass
      blank_date_before_amount=True to search for the amount elsewhere.
    """

    # DD/MM/YYYY, DD.MM.YY, DD-MM-YYYY ...
    DATE_PATTERN = re.compile(r'\d{2}[/.\-]\d{2}[/.\-]\d{2,4}')
    DATE_SEPARATORS = re.compile(r'[/.\-]')

    # Optional $, R$ or € then a number ending in two decimals.
    # Grouped thousands (1.234,56 / 1,234.56) are matched as one unit.
    AMOUNT_PATTERN = re.compile(
        r'(?:R\$|\$|€)?\s?'
        r'(?:\d{1,3}(?:[.,]\d{3})+[.,]\d{2}|\d+[.,]\d{2})'
    )
    AMOUNT_NOISE = re.compile(r'[^\d,.]')
    LEADING_NUMBER = re.compile(r'\d+(?:\.\d+)?')

    WHITESPACE = re.compile(r'\s+')

    def __init__(
        self,
        categories: Iterable[Union[Category, dict]] = (),
        max_description_length: Optional[int] = None,
        locale_aware_amounts: Optional[bool] = None,
        blank_date_before_amount: Optional[bool] = None,
        today: Optional[Callable[[], date]] = None,
        max_workers: Optional[int] = None
    ):
        """
        Args:
            categories: Caller categories ({id, name, type} dicts or Category)
            max_description_length: Description cut-off (default from config)
            locale_aware_amounts: Opt-in amount correction (default from config)
            blank_date_before_amount: Opt-in; ignore the date when looking for
                the amount (default from config)
            today: Clock used when a detected date cannot be built
            max_workers: Threads for per-segment extraction (1 = sequential)
        """
        self.categories = tuple(
            c if isinstance(c, Category) else Category.from_dict(c)
            for c in categories
        )
        self.max_description_length = (
            config.MAX_DESCRIPTION_LENGTH if max_description_length is None
            else max_description_length
        )
        self.locale_aware_amounts = (
            config.LOCALE_AWARE_AMOUNTS if locale_aware_amounts is None
            else locale_aware_amounts
        )
        self.blank_date_before_amount = (
            config.BLANK_DATE_BEFORE_AMOUNT if blank_date_before_amount is None
            else blank_date_before_amount
        )
        self.today = today or date.today
        self.max_workers = config.EXTRACTION_WORKERS if max_workers is None else max_workers
        self.segmenter = TextSegmenter()
        self.stats = {
            "segments_processed": 0,
            "transactions_found": 0,
            "skipped_no_date": 0,
            "skipped_no_amount": 0,
        }

    def extract_transactions(self, text: str) -> list[TransactionDraft]:
        """
        Extract all drafts from decoded document text.

        Args:
            text: Full statement text

        Returns:
            Drafts in document order
        """
        if not text or not text.strip():
            logger.warning("Empty text provided for extraction")
            return []

        segments = self.segmenter.segment(text)
        logger.info(f"Starting extraction from {len(segments)} candidate segments")
        return self.extract_from_segments(segments)

    def extract_from_segments(self, segments: list[str]) -> list[TransactionDraft]:
        """Run extraction over already segmented text, keeping input order."""
        if self.max_workers and self.max_workers > 1 and len(segments) > 1:
            with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
                results = list(pool.map(self._extract, segments))
        else:
            results = [self._extract(segment) for segment in segments]

        drafts = []
        for draft, outcome in results:
            self.stats["segments_processed"] += 1
            if outcome == NO_DATE:
                self.stats["skipped_no_date"] += 1
            elif outcome == NO_AMOUNT:
                self.stats["skipped_no_amount"] += 1
            else:
                drafts.append(draft)
        self.stats["transactions_found"] += len(drafts)

        logger.info(
            f"Extraction complete: {len(drafts)} drafts from {len(segments)} segments "
            f"({self.stats['skipped_no_date']} without date, "
            f"{self.stats['skipped_no_amount']} without amount)"
        )
        return drafts

    def extract_segment(self, segment: str) -> Optional[TransactionDraft]:
        """
        Extract one draft from a segment.

        Returns:
            TransactionDraft, or None when no date or no amount is found
        """
        draft, _ = self._extract(segment)
        return draft

    def _extract(self, segment: str) -> tuple[Optional[TransactionDraft], str]:
        date_match = self.DATE_PATTERN.search(segment)
        if not date_match:
            logger.debug(f"No date in segment: {segment[:50]}")
            return None, NO_DATE

        # "15.03.23" yields amount 15.03 unless the date is blanked first
        scan_text = segment
        if self.blank_date_before_amount:
            date_start, date_end = date_match.span()
            scan_text = segment[:date_start] + " " * (date_end - date_start) + segment[date_end:]
        amount_match = self.AMOUNT_PATTERN.search(scan_text)
        if not amount_match:
            logger.debug(f"No amount in segment: {segment[:50]}")
            return None, NO_AMOUNT

        transaction_type = classify_transaction_type(segment)
        description = self._build_description(
            segment, [date_match.span(), amount_match.span()]
        )
        amount = self._parse_amount(amount_match.group(0))
        draft_date = self._parse_date(date_match.group(0))
        category = resolve_category(description, transaction_type, self.categories)

        draft = TransactionDraft(
            date=draft_date,
            description=description,
            amount=amount,
            transaction_type=transaction_type,
            category=category
        )
        logger.debug(f"Extracted: {draft}")
        return draft, EXTRACTED

    def _build_description(self, segment: str, spans: list[tuple[int, int]]) -> str:
        remaining = _remove_spans(segment, spans).strip()
        return self.WHITESPACE.sub(" ", remaining)[:self.max_description_length]

    def _parse_amount(self, amount_str: str) -> float:
        """
        Parse a matched amount substring.

        The substring always ends in a separator and two digits, so a
        leading number is always present.
        """
        cleaned = self.AMOUNT_NOISE.sub("", amount_str)

        if self.locale_aware_amounts:
            decimal_at = max(cleaned.rfind("."), cleaned.rfind(","))
            integer_part = re.sub(r'[.,]', "", cleaned[:decimal_at])
            return float(f"{integer_part}.{cleaned[decimal_at + 1:]}")

        normalized = cleaned.replace(",", ".", 1)
        return float(self.LEADING_NUMBER.match(normalized).group(0))

    def _parse_date(self, date_str: str) -> str:
        """
        Build a YYYY-MM-DD date from day/month/year text.
        Falls back to today's date when the parts do not form a real date.
        """
        parts = self.DATE_SEPARATORS.split(date_str)
        try:
            if len(parts) != 3:
                raise ValueError(f"expected 3 date parts, got {len(parts)}")
            day, month, year = (int(part) for part in parts)
            if year < 100:
                year += 2000
            return date(year, month, day).isoformat()
        except ValueError as e:
            fallback = self.today().isoformat()
            logger.debug(f"Unparseable date '{date_str}' ({e}), using {fallback}")
            return fallback

    def get_stats(self) -> dict:
        """Get extraction statistics."""
        return self.stats.copy()


def extract_transactions_from_text(
    text: str,
    categories: Iterable[Union[Category, dict]] = ()
) -> list[TransactionDraft]:
    """
    Convenience function to extract drafts from text.

    Args:
        text: Decoded statement text
        categories: Caller categories

    Returns:
        List of TransactionDraft objects
    """
    extractor = TransactionExtractor(categories)
    return extractor.extract_transactions(text)
