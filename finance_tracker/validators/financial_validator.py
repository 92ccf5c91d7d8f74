"""
Financial Validator Module
Checks extracted drafts for correctness before they reach the store.
"""

import logging
import math
from datetime import datetime
from typing import Iterable
from finance_tracker.extractors.financial_rules import FALLBACK_LABELS, Category, TransactionType
from finance_tracker.extractors.regex_extractor import TransactionDraft

logger = logging.getLogger(__name__)


class ValidationError(Exception):
    """Custom exception for validation errors."""
    pass


class TransactionValidator:
    """Validates transaction drafts."""

    def __init__(
        self,
        categories: Iterable[Category] = (),
        strict_mode: bool = False
    ):
        """
        Initialize validator.

        Args:
            categories: Categories the drafts were resolved against. A draft
                        naming one of them must share its type.
            strict_mode: If True, raise exceptions on invalid data.
                        If False, log warnings and skip invalid drafts.
        """
        self.strict_mode = strict_mode
        self.category_types: dict[str, set[TransactionType]] = {}
        for category in categories:
            self.category_types.setdefault(category.name, set()).add(category.type)
        self.types_present = {t for types in self.category_types.values() for t in types}

        self.validation_stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> dict:
        return {
            "total_validated": 0,
            "valid": 0,
            "invalid": 0,
            "invalid_date": 0,
            "invalid_amount": 0,
            "invalid_description": 0,
            "invalid_category": 0
        }

    def validate_transaction(self, draft: TransactionDraft) -> bool:
        """
        Validate a single draft.

        Returns:
            True if valid, False if invalid

        Raises:
            ValidationError: If strict_mode is True and validation fails
        """
        self.validation_stats["total_validated"] += 1

        checks = (
            ("invalid_date", self._validate_date(draft.date), f"Invalid date: {draft.date}"),
            ("invalid_amount", self._validate_amount(draft.amount), f"Invalid amount: {draft.amount}"),
            ("invalid_description", self._validate_description(draft.description),
             "Invalid description: not a string"),
            ("invalid_category", self._validate_type_and_category(draft.type, draft.category),
             f"Invalid type/category: {draft.type}/{draft.category}"),
        )

        for stat_key, passed, msg in checks:
            if passed:
                continue
            self.validation_stats[stat_key] += 1
            self.validation_stats["invalid"] += 1
            if self.strict_mode:
                raise ValidationError(msg)
            logger.warning(f"{msg} in draft: {draft}")
            return False

        self.validation_stats["valid"] += 1
        return True

    def validate_transactions(self, drafts: list[TransactionDraft]) -> list[TransactionDraft]:
        """
        Validate a list of drafts.

        Returns:
            List of valid drafts (invalid ones filtered out)
        """
        valid_drafts = [draft for draft in drafts if self.validate_transaction(draft)]

        logger.info(
            f"Validation complete: {self.validation_stats['valid']} valid, "
            f"{self.validation_stats['invalid']} invalid out of "
            f"{self.validation_stats['total_validated']} total"
        )
        return valid_drafts

    def _validate_date(self, date_str: str) -> bool:
        """Date must be a real calendar date in YYYY-MM-DD form."""
        if not date_str or not isinstance(date_str, str):
            return False
        try:
            datetime.strptime(date_str, '%Y-%m-%d')
            return True
        except ValueError:
            return False

    def _validate_amount(self, amount: float) -> bool:
        """Amount must be a finite, non-negative number."""
        if isinstance(amount, bool) or not isinstance(amount, (int, float)):
            return False
        return math.isfinite(amount) and amount >= 0

    def _validate_description(self, description: str) -> bool:
        # Removing the date and amount can legitimately leave nothing
        return isinstance(description, str)

    def _validate_type_and_category(self, txn_type: TransactionType, category: str) -> bool:
        """
        Type must be income/expense, category must be non-empty, and a
        category known to the validator must carry the same type. The
        "Income"/"Expense" label is accepted when no category of the
        draft type was supplied, even if the other type uses that name.
        """
        if not isinstance(txn_type, TransactionType):
            return False

        if not isinstance(category, str) or not category.strip():
            return False

        # Literal label used when no category of this type exists
        if category == FALLBACK_LABELS[txn_type] and txn_type not in self.types_present:
            return True

        known_types = self.category_types.get(category)
        if known_types is not None and txn_type not in known_types:
            return False

        return True

    def get_stats(self) -> dict:
        """Get validation statistics."""
        return self.validation_stats.copy()

    def reset_stats(self):
        """Reset validation statistics."""
        self.validation_stats = self._empty_stats()


def validate_transactions(
    drafts: list[TransactionDraft],
    categories: Iterable[Category] = (),
    strict_mode: bool = False
) -> list[TransactionDraft]:
    """
    Convenience function to validate a list of drafts.

    Returns:
        List of valid drafts
    """
    validator = TransactionValidator(categories, strict_mode=strict_mode)
    return validator.validate_transactions(drafts)
