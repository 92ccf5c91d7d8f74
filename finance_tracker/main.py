"""
Finance Tracker Statement Importer - Main Pipeline
Orchestrates decoding, extraction and validation of a PDF statement, plus
the filtering, summary and export helpers used on the resulting drafts.
"""

import argparse
import json
import logging
import sys
import uuid
from collections import defaultdict
from datetime import date
from pathlib import Path
from typing import Iterable, Optional, Union

from finance_tracker.config import config
from finance_tracker.extractors.financial_rules import (
    Category,
    DEFAULT_CATEGORIES,
    TransactionType,
)
from finance_tracker.extractors.regex_extractor import TransactionDraft, TransactionExtractor
from finance_tracker.loaders.pdf_loader import PDFLoadError, load_pdf, load_pdf_bytes
from finance_tracker.validators.financial_validator import TransactionValidator, ValidationError

logger = logging.getLogger(__name__)


class TransactionFilter:
    """Filters drafts by category, type and date range."""

    @staticmethod
    def filter_by_category(drafts: list[TransactionDraft], category: Optional[str]) -> list[TransactionDraft]:
        """Keep drafts whose category equals the given name exactly."""
        if not category:
            return drafts
        return [d for d in drafts if d.category == category]

    @staticmethod
    def filter_by_type(
        drafts: list[TransactionDraft],
        transaction_type: Optional[Union[str, TransactionType]]
    ) -> list[TransactionDraft]:
        if not transaction_type:
            return drafts
        wanted = TransactionType.parse(transaction_type)
        return [d for d in drafts if d.type == wanted]

    @staticmethod
    def filter_by_date_range(
        drafts: list[TransactionDraft],
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> list[TransactionDraft]:
        """
        Filter drafts by an inclusive date range.
        Either bound may be omitted.
        """
        if start_date is None and end_date is None:
            return drafts

        filtered = []
        for draft in drafts:
            draft_date = date.fromisoformat(draft.date)
            if start_date is not None and draft_date < start_date:
                continue
            if end_date is not None and draft_date > end_date:
                continue
            filtered.append(draft)

        logger.info(
            f"Date range filter ({start_date} to {end_date}): "
            f"{len(filtered)}/{len(drafts)} drafts matched"
        )
        return filtered

    @classmethod
    def apply(
        cls,
        drafts: list[TransactionDraft],
        category: Optional[str] = None,
        transaction_type: Optional[Union[str, TransactionType]] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> list[TransactionDraft]:
        """Apply every given filter; omitted filters match everything."""
        result = cls.filter_by_category(drafts, category)
        result = cls.filter_by_type(result, transaction_type)
        return cls.filter_by_date_range(result, start_date, end_date)


class TransactionSummary:
    """Totals and groupings over drafts."""

    @staticmethod
    def total_by_type(drafts: list[TransactionDraft], transaction_type: TransactionType) -> float:
        return sum(d.amount for d in drafts if d.type == transaction_type)

    @staticmethod
    def calculate_balance(drafts: list[TransactionDraft]) -> float:
        """Income minus expense."""
        return sum(
            d.amount if d.type == TransactionType.INCOME else -d.amount
            for d in drafts
        )

    @classmethod
    def totals(cls, drafts: list[TransactionDraft]) -> dict[str, float]:
        return {
            "income": cls.total_by_type(drafts, TransactionType.INCOME),
            "expense": cls.total_by_type(drafts, TransactionType.EXPENSE),
            "balance": cls.calculate_balance(drafts),
        }

    @staticmethod
    def group_by_month(drafts: list[TransactionDraft]) -> dict[str, list[TransactionDraft]]:
        """
        Group drafts by month, keyed MM/YYYY.

        Returns:
            Dictionary mapping month to drafts, in first-seen order
        """
        grouped = defaultdict(list)
        for draft in drafts:
            grouped[date.fromisoformat(draft.date).strftime("%m/%Y")].append(draft)

        logger.info(f"Grouped {len(drafts)} drafts into {len(grouped)} months")
        return dict(grouped)

    @staticmethod
    def unique_categories(drafts: list[TransactionDraft]) -> list[str]:
        """Category names in first-seen order."""
        return list(dict.fromkeys(d.category for d in drafts))


def assign_ids(drafts: Iterable[TransactionDraft]) -> list[dict]:
    """
    Turn drafts into stored-transaction records by giving each a fresh id.
    This is the store's job; drafts never carry an id themselves.
    """
    return [{"id": str(uuid.uuid4()), **draft.to_dict()} for draft in drafts]


def parse_categories(raw: Union[str, list]) -> list[Category]:
    """
    Parse a JSON list of {id, name, type} objects.

    Raises:
        ValueError: If the payload is not a list of valid categories
    """
    data = json.loads(raw) if isinstance(raw, str) else raw
    if not isinstance(data, list):
        raise ValueError("Categories must be a JSON list")
    return [Category.from_dict(item) for item in data]


def load_categories(path: Union[str, Path]) -> list[Category]:
    """Read categories from a JSON file."""
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except OSError as e:
        raise ValueError(f"Cannot read categories file {path}: {e}") from e
    try:
        return parse_categories(raw)
    except json.JSONDecodeError as e:
        raise ValueError(f"Categories file {path} is not valid JSON: {e}") from e


class StatementImporter:
    """Main orchestrator: decode, segment, extract and validate a statement."""

    def __init__(
        self,
        max_workers: Optional[int] = None,
        strict_mode: Optional[bool] = None,
        locale_aware_amounts: Optional[bool] = None,
        blank_date_before_amount: Optional[bool] = None
    ):
        self.max_workers = config.EXTRACTION_WORKERS if max_workers is None else max_workers
        self.strict_mode = config.STRICT_MODE if strict_mode is None else strict_mode
        self.locale_aware_amounts = locale_aware_amounts
        self.blank_date_before_amount = blank_date_before_amount
        self.stats = {
            "characters": 0,
            "segments": 0,
            "total_extracted": 0,
            "valid_drafts": 0,
            "skipped_segments": 0,
        }

    def import_pdf(
        self,
        pdf_path: Union[str, Path],
        categories: Optional[Iterable[Category]] = None
    ) -> list[TransactionDraft]:
        """
        Import drafts from a PDF file.

        Args:
            pdf_path: Path to the statement
            categories: Caller categories (defaults to DEFAULT_CATEGORIES)

        Returns:
            Drafts in document order

        Raises:
            PDFLoadError: If the document cannot be decoded; no drafts are returned
        """
        logger.info(f"Step 1: Loading PDF - {pdf_path}")
        text = load_pdf(pdf_path)
        return self.import_text(text, categories)

    def import_bytes(
        self,
        content: bytes,
        categories: Optional[Iterable[Category]] = None,
        name: str = "<upload>"
    ) -> list[TransactionDraft]:
        """Import drafts from in-memory PDF bytes."""
        logger.info(f"Step 1: Loading PDF - {name}")
        text = load_pdf_bytes(content, name)
        return self.import_text(text, categories)

    def import_text(
        self,
        text: str,
        categories: Optional[Iterable[Category]] = None
    ) -> list[TransactionDraft]:
        """Run extraction and validation over already decoded text."""
        categories = list(DEFAULT_CATEGORIES if categories is None else categories)
        self.stats["characters"] = len(text)

        logger.info("Step 2: Extracting transactions from text")
        extractor = TransactionExtractor(
            categories,
            locale_aware_amounts=self.locale_aware_amounts,
            blank_date_before_amount=self.blank_date_before_amount,
            max_workers=self.max_workers
        )
        drafts = extractor.extract_transactions(text)
        extract_stats = extractor.get_stats()
        self.stats["segments"] = extract_stats["segments_processed"]
        self.stats["skipped_segments"] = (
            extract_stats["skipped_no_date"] + extract_stats["skipped_no_amount"]
        )
        self.stats["total_extracted"] = len(drafts)

        if not drafts:
            logger.warning("No transactions found. Check that the statement has dated lines with amounts.")

        logger.info("Step 3: Validating drafts")
        validator = TransactionValidator(categories, strict_mode=self.strict_mode)
        valid_drafts = validator.validate_transactions(drafts)
        self.stats["valid_drafts"] = len(valid_drafts)

        logger.info(f"Imported {len(valid_drafts)} transactions")
        return valid_drafts


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="finance-import",
        description="Extract income/expense transactions from a PDF bank statement."
    )
    parser.add_argument("pdf", help="Path to the PDF statement")
    parser.add_argument("--categories", help="JSON file with [{id, name, type}] categories")
    parser.add_argument("--csv", dest="csv_path", help="Write imported transactions to this CSV file or directory")
    parser.add_argument("--report", dest="report_path", help="Write a PDF import report to this path")
    parser.add_argument("--json", action="store_true", help="Print drafts as JSON")
    parser.add_argument("--workers", type=int, default=None, help="Threads for per-segment extraction")
    parser.add_argument(
        "--locale-aware-amounts",
        action="store_true",
        default=None,
        help="Treat the last separator in an amount as the decimal point"
    )
    parser.add_argument(
        "--blank-date-before-amount",
        action="store_true",
        default=None,
        help="Do not read the date (e.g. 15.03.23) as the amount"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Fail on the first invalid draft instead of skipping it"
    )
    parser.add_argument("--log-level", default=None, help="DEBUG, INFO, WARNING, ...")
    parser.add_argument("--log-file", default=None, help="Also log to this file name under LOG_DIR")
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """Command line entry point."""
    from finance_tracker.logging_config import setup_logging
    from finance_tracker.output.csv_export import export_to_csv
    from finance_tracker.output.writer import generate_pdf_report

    args = build_parser().parse_args(argv)
    setup_logging(log_level=args.log_level, log_file=args.log_file)

    try:
        categories = load_categories(args.categories) if args.categories else None
        importer = StatementImporter(
            max_workers=args.workers,
            strict_mode=args.strict,
            locale_aware_amounts=args.locale_aware_amounts,
            blank_date_before_amount=args.blank_date_before_amount
        )
        drafts = importer.import_pdf(args.pdf, categories)

        if args.csv_path:
            csv_file = export_to_csv(assign_ids(drafts), args.csv_path)
            print(f"CSV written: {csv_file}")

        if args.report_path:
            generate_pdf_report(
                output_path=args.report_path,
                grouped_drafts=TransactionSummary.group_by_month(drafts),
                source_name=Path(args.pdf).name,
                totals=TransactionSummary.totals(drafts)
            )
            print(f"Report written: {args.report_path}")

    except PDFLoadError as e:
        logger.error(f"Failed to read PDF: {e}")
        print(f"\n❌ Failed to read PDF file: {e}", file=sys.stderr)
        return 1

    except ValidationError as e:
        logger.error(f"Strict validation failed: {e}")
        print(f"\n❌ Validation Error: {e}", file=sys.stderr)
        return 1

    except ValueError as e:
        logger.error(f"Invalid input: {e}")
        print(f"\n❌ Input Error: {e}", file=sys.stderr)
        return 1

    if args.json:
        print(json.dumps([d.to_dict() for d in drafts], indent=2, ensure_ascii=False))

    print(f"\n✅ Imported {len(drafts)} transactions from {args.pdf}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
