import math
from datetime import date

import pytest

from finance_tracker.extractors.financial_rules import Category, TransactionType
from finance_tracker.extractors.regex_extractor import (
    TransactionDraft,
    TransactionExtractor,
    extract_transactions_from_text,
)


@pytest.fixture
def extractor(categories, fixed_today):
    return TransactionExtractor(categories, today=fixed_today, locale_aware_amounts=False)


def test_payroll_deposit_in_reais():
    extractor = TransactionExtractor(
        [{"id": "1", "name": "Salary", "type": "income"}],
        locale_aware_amounts=False,
    )

    draft = extractor.extract_segment("01/02/2023 Payroll direct deposit R$ 1.234,56")

    assert draft.date == "2023-02-01"
    assert draft.type == TransactionType.INCOME
    assert draft.category == "Salary"
    assert draft.description == "Payroll direct deposit"
    # "1.234,56" -> "1.234.56" after the comma swap; the leading number is 1.234
    assert draft.amount == pytest.approx(1.234)


def test_payroll_deposit_with_locale_aware_amounts():
    extractor = TransactionExtractor(
        [{"id": "1", "name": "Salary", "type": "income"}],
        locale_aware_amounts=True,
    )

    draft = extractor.extract_segment("01/02/2023 Payroll direct deposit R$ 1.234,56")

    assert draft.amount == pytest.approx(1234.56)
    assert draft.description == "Payroll direct deposit"


def test_us_thousands_separator_limitation():
    plain = TransactionExtractor([], locale_aware_amounts=False)
    aware = TransactionExtractor([], locale_aware_amounts=True)
    segment = "02/03/2023 Wire received $1,234.56"

    assert plain.extract_segment(segment).amount == pytest.approx(1.234)
    assert aware.extract_segment(segment).amount == pytest.approx(1234.56)


def test_uber_ride_with_two_digit_year():
    extractor = TransactionExtractor([Category("1", "Transportation", "expense")])

    draft = extractor.extract_segment("15.03.23 Uber ride $12.50 debit")

    assert draft.type == TransactionType.EXPENSE
    assert draft.date == "2023-03-15"
    assert draft.category == "Transportation"
    # "15.03" inside the date is the first amount-like text
    assert draft.amount == pytest.approx(15.03)
    assert draft.description == "Uber ride $12.50 debit"


def test_blank_date_before_amount():
    extractor = TransactionExtractor(
        [Category("1", "Transportation", "expense")],
        blank_date_before_amount=True
    )

    draft = extractor.extract_segment("15.03.23 Uber ride $12.50 debit")

    assert draft.date == "2023-03-15"
    assert draft.amount == pytest.approx(12.5)
    assert draft.description == "Uber ride debit"
    assert draft.category == "Transportation"


def test_slash_dates_are_unaffected_by_date_blanking():
    segment = "01/02/2023 Payroll direct deposit 2500.00"
    plain = TransactionExtractor([]).extract_segment(segment)
    blanked = TransactionExtractor([], blank_date_before_amount=True).extract_segment(segment)
    assert plain == blanked


def test_short_segment_produces_nothing():
    assert extract_transactions_from_text("x 1 2 3", []) == []


def test_unmatched_expense_goes_to_other_expense():
    extractor = TransactionExtractor([Category("9", "Other Expense", "expense")])

    draft = extractor.extract_segment("10/05/2023 Bookstore purchase 45.90")

    assert draft.type == TransactionType.EXPENSE
    assert draft.category == "Other Expense"
    assert draft.amount == pytest.approx(45.9)


def test_invalid_month_falls_back_to_today(extractor):
    draft = extractor.extract_segment("01/13/2023 Refund received 10.00")

    assert draft is not None
    assert draft.date == "2024-06-30"


def test_impossible_day_falls_back_to_today(extractor):
    draft = extractor.extract_segment("31/02/2023 Refund received 10.00")
    assert draft.date == "2024-06-30"


def test_default_clock_is_todays_date():
    draft = TransactionExtractor([]).extract_segment("00/00/2023 Something odd 5.00")
    assert draft.date == date.today().isoformat()


@pytest.mark.parametrize("segment,expected", [
    ("05/06/2024 Coffee beans 3.50", "2024-06-05"),
    ("05-06-24 Coffee beans 3.50", "2024-06-05"),
    ("05.06.2024 Coffee beans 3.50", "2024-06-05"),
    ("29/02/2024 Leap day lunch 9.00", "2024-02-29"),
])
def test_dates_are_day_month_year(extractor, segment, expected):
    assert extractor.extract_segment(segment).date == expected


def test_missing_date_skips_segment(extractor):
    assert extractor.extract_segment("Opening balance 1500.00 carried") is None


def test_missing_amount_skips_segment(extractor):
    assert extractor.extract_segment("01/02/2023 statement period start") is None


def test_whole_numbers_are_not_amounts(extractor):
    assert extractor.extract_segment("01/02/2023 Reference 123456") is None


def test_euro_amount_with_comma_decimal(extractor):
    draft = extractor.extract_segment("07/08/2023 Hotel €120,00")
    assert draft.amount == pytest.approx(120.0)
    assert draft.description == "Hotel"


def test_only_first_date_and_amount_are_removed(extractor):
    draft = extractor.extract_segment("01/02/2023 transfer 02/03/2023 10.00 fee 1.50")

    assert draft.date == "2023-02-01"
    assert draft.amount == pytest.approx(10.0)
    assert draft.description == "transfer 02/03/2023 fee 1.50"


def test_description_whitespace_is_collapsed(extractor):
    draft = extractor.extract_segment("01/02/2023    Big    Store   purchase   9.99  ")
    assert draft.description == "Big Store purchase"


def test_description_is_truncated(categories):
    segment = "01/02/2023 " + "x" * 150 + " 5.00"
    draft = TransactionExtractor(categories).extract_segment(segment)
    assert len(draft.description) == 100


def test_description_can_be_empty(extractor):
    draft = extractor.extract_segment("01/02/2023 $25.00")
    assert draft.description == ""
    assert draft.category == "Other Income"


@pytest.mark.parametrize("word", ["debit", "PAYMENT", "Purchase"])
def test_expense_tokens_are_case_insensitive(extractor, word):
    draft = extractor.extract_segment(f"01/02/2023 Card {word} 12.00")
    assert draft.type == TransactionType.EXPENSE


def test_income_without_expense_tokens(extractor):
    draft = extractor.extract_segment("01/02/2023 Interest credited 0.42")
    assert draft.type == TransactionType.INCOME


def test_category_name_in_description():
    extractor = TransactionExtractor([Category("8", "Entertainment", "expense")])
    draft = extractor.extract_segment("12/12/2023 Netflix entertainment payment 39.90")
    assert draft.category == "Entertainment"


def test_first_matching_category_wins():
    extractor = TransactionExtractor([
        Category("1", "Shopping", "expense"),
        Category("2", "Food", "expense"),
    ])
    draft = extractor.extract_segment("03/04/2023 Grocery market shopping purchase 80.00")
    assert draft.category == "Shopping"


def test_keywords_only_apply_to_same_type():
    extractor = TransactionExtractor([Category("1", "Salary", "income")])
    draft = extractor.extract_segment("01/01/2023 Salary advance payment 2000.00")

    # "payment" makes it an expense, so the income category is never considered
    assert draft.type == TransactionType.EXPENSE
    assert draft.category == "Expense"


def test_falls_back_to_first_category_of_type():
    extractor = TransactionExtractor([
        Category("1", "Freelance", "income"),
        Category("2", "Investment", "income"),
    ])
    draft = extractor.extract_segment("05/06/2023 Transfer received 300.00")
    assert draft.category == "Freelance"


def test_literal_label_without_categories():
    draft = TransactionExtractor([]).extract_segment("05/06/2023 Transfer received 300.00")
    assert draft.category == "Income"


def test_extracts_document_in_order(extractor, statement_lines):
    drafts = extractor.extract_transactions("\n".join(statement_lines))

    assert [d.to_dict() for d in drafts] == [
        {"description": "Payroll direct deposit", "amount": 2500.0, "category": "Salary",
         "type": "income", "date": "2023-02-01"},
        {"description": "Grocery market purchase", "amount": 84.35, "category": "Food",
         "type": "expense", "date": "2023-02-03"},
        {"description": "Rent payment", "amount": 1200.0, "category": "Housing",
         "type": "expense", "date": "2023-02-05"},
        {"description": "Uber trip debit", "amount": 18.9, "category": "Transportation",
         "type": "expense", "date": "2023-02-07"},
    ]

    stats = extractor.get_stats()
    assert stats["segments_processed"] == 6
    assert stats["transactions_found"] == 4
    assert stats["skipped_no_date"] == 2


def test_parallel_extraction_keeps_order(categories, fixed_today, statement_lines):
    text = "\n".join(statement_lines * 10)
    sequential = TransactionExtractor(categories, today=fixed_today, max_workers=1)
    parallel = TransactionExtractor(categories, today=fixed_today, max_workers=4)

    assert parallel.extract_transactions(text) == sequential.extract_transactions(text)


def test_category_order_never_changes_which_segments_match(categories, statement_lines):
    text = "\n".join(statement_lines)
    forward = TransactionExtractor(categories).extract_transactions(text)
    backward = TransactionExtractor(list(reversed(categories))).extract_transactions(text)

    assert [d.date for d in forward] == [d.date for d in backward]
    assert [d.amount for d in forward] == [d.amount for d in backward]


def test_segment_results_are_independent(extractor, statement_lines):
    text = "\n".join(statement_lines)
    together = extractor.extract_transactions(text)
    alone = [extractor.extract_segment(line) for line in statement_lines]

    assert together == [d for d in alone if d is not None]


def test_category_of_draft_shares_its_type(categories):
    lines = [
        "01/01/2023 Salary payment 10.00",
        "02/01/2023 Food refund 5.00",
        "03/01/2023 Housing deposit 700.00",
    ]
    drafts = TransactionExtractor(categories).extract_transactions("\n".join(lines))
    by_name = {c.name: c.type for c in categories}

    for draft in drafts:
        if draft.category in by_name:
            assert by_name[draft.category] == draft.type


def test_amounts_are_finite_and_non_negative(extractor):
    lines = ["01/01/2023 a -15.00 debit", "02/01/2023 b 0.00", "03/01/2023 c 99999999.99"]
    for draft in extractor.extract_transactions("\n".join(lines)):
        assert math.isfinite(draft.amount)
        assert draft.amount >= 0


def test_draft_has_no_id(extractor):
    draft = extractor.extract_segment("01/02/2023 Interest credited 0.42")
    assert "id" not in draft.to_dict()
    assert not hasattr(draft, "id")


def test_amount_display_is_signed_by_type():
    income = TransactionDraft("2023-01-01", "x", 10.0, TransactionType.INCOME, "Income")
    expense = TransactionDraft("2023-01-01", "x", 10.0, TransactionType.EXPENSE, "Expense")
    assert income.amount_display == "+10.00"
    assert expense.amount_display == "-10.00"


def test_categories_are_not_mutated(categories):
    snapshot = [c.to_dict() for c in categories]
    TransactionExtractor(categories).extract_transactions("01/02/2023 Payroll 100.00")
    assert [c.to_dict() for c in categories] == snapshot
