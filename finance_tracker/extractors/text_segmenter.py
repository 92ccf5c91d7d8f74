"""
Text Segmenter Module
Splits decoded statement text into line-like candidate segments.
"""

import re
import logging
from finance_tracker.config import config

logger = logging.getLogger(__name__)


class TextSegmenter:
    """
    Splits raw document text on line breaks and on ". " (PDF text layers
    often collapse a whole page onto one line), dropping pieces too short
    to hold both a date and an amount.
    """

    SPLIT_PATTERN = re.compile(r'\r\n|\r|\n|\. ')

    def __init__(self, min_length: int = None):
        self.min_length = config.MIN_SEGMENT_LENGTH if min_length is None else min_length

    def segment(self, text: str) -> list[str]:
        """
        Split text into candidate segments.

        Args:
            text: Decoded document text

        Returns:
            Segments of at least min_length characters, in document order
        """
        if not text:
            return []

        pieces = self.SPLIT_PATTERN.split(text)
        segments = [piece for piece in pieces if len(piece) >= self.min_length]

        logger.debug(
            f"Segmented {len(text)} characters into {len(pieces)} pieces, "
            f"{len(segments)} candidates"
        )
        return segments


def segment_text(text: str) -> list[str]:
    """Convenience function using the configured minimum length."""
    return TextSegmenter().segment(text)
