"""
Financial Rules Module
Defines income/expense classification, the category keyword table and
category resolution for extracted transactions.
"""

from enum import Enum
from typing import Iterable, Optional, Union
import logging

logger = logging.getLogger(__name__)


class TransactionType(Enum):
    """Transaction type enumeration."""
    INCOME = "income"
    EXPENSE = "expense"

    @classmethod
    def parse(cls, value: Union[str, "TransactionType"]) -> "TransactionType":
        """Accept either an enum member or its string value (any case)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError as e:
            raise ValueError(f"Unknown transaction type: {value!r}") from e


# Any one of these anywhere in a segment marks it as an expense
EXPENSE_TOKENS = ("debit", "payment", "purchase")

# Category name (lowercased) -> description keywords that select it.
# Only consulted when a category's own name equals the key.
CATEGORY_KEYWORDS: dict[str, tuple[str, ...]] = {
    "salary": ("payroll", "wage", "payment", "direct deposit"),
    "food": ("restaurant", "grocery", "market", "meal", "cafe"),
    "transportation": ("gas", "fuel", "taxi", "uber", "lyft", "train", "transit"),
    "housing": ("rent", "mortgage", "property"),
}

DEFAULT_CATEGORY_NAMES = {
    TransactionType.INCOME: "Other Income",
    TransactionType.EXPENSE: "Other Expense",
}

FALLBACK_LABELS = {
    TransactionType.INCOME: "Income",
    TransactionType.EXPENSE: "Expense",
}


class Category:
    """A user-defined category. Read-only input to extraction."""

    def __init__(self, id: str, name: str, type: Union[str, TransactionType]):
        self.id = str(id)
        self.name = name
        self.type = TransactionType.parse(type)

    @classmethod
    def from_dict(cls, data: dict) -> "Category":
        """Build a category from a {id, name, type} mapping."""
        if not isinstance(data, dict):
            raise ValueError(f"Category must be an object, got {type(data).__name__}")
        name = data.get("name")
        if not isinstance(name, str) or not name.strip():
            raise ValueError("Category name must be a non-empty string")
        return cls(
            id=data.get("id", name),
            name=name,
            type=data.get("type", ""),
        )

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "type": self.type.value}

    def __repr__(self) -> str:
        return f"Category(id={self.id!r}, name={self.name!r}, type={self.type.value})"


DEFAULT_CATEGORIES = (
    Category("1", "Salary", TransactionType.INCOME),
    Category("2", "Freelance", TransactionType.INCOME),
    Category("3", "Investment", TransactionType.INCOME),
    Category("4", "Gift", TransactionType.INCOME),
    Category("5", "Food", TransactionType.EXPENSE),
    Category("6", "Housing", TransactionType.EXPENSE),
    Category("7", "Transportation", TransactionType.EXPENSE),
    Category("8", "Entertainment", TransactionType.EXPENSE),
    Category("9", "Utilities", TransactionType.EXPENSE),
    Category("10", "Health", TransactionType.EXPENSE),
    Category("11", "Education", TransactionType.EXPENSE),
    Category("12", "Shopping", TransactionType.EXPENSE),
)


def classify_transaction_type(text: str) -> TransactionType:
    """
    Classify a segment as income or expense.

    Coarse heuristic: any expense token present (case-insensitive) means
    expense, otherwise income.
    """
    lower_text = text.lower()
    if any(token in lower_text for token in EXPENSE_TOKENS):
        return TransactionType.EXPENSE
    return TransactionType.INCOME


def matches_category(description: str, category: Category) -> bool:
    """
    Check whether a description selects a category, either by containing the
    category name or one of the keywords registered for that name.
    """
    lower_desc = description.lower()
    lower_name = category.name.lower()

    if lower_name in lower_desc:
        return True

    keywords = CATEGORY_KEYWORDS.get(lower_name, ())
    return any(keyword in lower_desc for keyword in keywords)


def resolve_category(
    description: str,
    transaction_type: TransactionType,
    categories: Iterable[Category]
) -> str:
    """
    Pick the category name for a transaction.

    Only categories of the same type are candidates; the first one (in the
    order given) that matches wins. Without a match the "Other Income" /
    "Other Expense" category is used if present, then the first candidate,
    then the literal "Income" / "Expense" label.

    Returns:
        Category name
    """
    candidates = [c for c in categories if c.type == transaction_type]

    for category in candidates:
        if matches_category(description, category):
            return category.name

    default_name = DEFAULT_CATEGORY_NAMES[transaction_type]
    fallback: Optional[Category] = next(
        (c for c in candidates if c.name == default_name),
        candidates[0] if candidates else None
    )
    if fallback is not None:
        logger.debug(f"No category matched '{description[:40]}', using {fallback.name}")
        return fallback.name

    return FALLBACK_LABELS[transaction_type]


def format_amount_display(amount: float, transaction_type: TransactionType) -> str:
    """
    Format amount for display with an explicit sign.

    Income: +1600.00
    Expense: -250.00
    """
    if transaction_type == TransactionType.EXPENSE:
        return f"-{abs(amount):.2f}"
    return f"+{abs(amount):.2f}"
