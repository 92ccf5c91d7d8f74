"""
PDF Report Writer Module
Generates a formatted PDF report of the drafts imported from a statement.
"""

import logging
from datetime import datetime
from pathlib import Path
from xml.sax.saxutils import escape
from reportlab.lib.pagesizes import letter
from reportlab.lib import colors
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer
from reportlab.lib.enums import TA_CENTER
from finance_tracker.extractors.financial_rules import TransactionType
from finance_tracker.extractors.regex_extractor import TransactionDraft

logger = logging.getLogger(__name__)

HEADER_COLOR = colors.HexColor('#2c5aa0')
STRIPE_COLOR = colors.HexColor('#eef2f8')
GRID_COLOR = colors.HexColor('#808183')


class PDFReportWriter:
    """Generates PDF reports from imported drafts."""

    def __init__(self, output_path: str, page_size=letter):
        """
        Args:
            output_path: Path where PDF will be saved
            page_size: Page size (default: letter)
        """
        self.output_path = output_path
        self.page_size = page_size
        self.styles = getSampleStyleSheet()
        self._setup_custom_styles()

    def _setup_custom_styles(self):
        """Setup custom paragraph styles."""
        self.styles.add(ParagraphStyle(
            name='CustomTitle',
            parent=self.styles['Heading1'],
            fontSize=22,
            textColor=colors.HexColor('#1a1a1a'),
            spaceAfter=24,
            alignment=TA_CENTER,
            fontName='Helvetica-Bold'
        ))

        self.styles.add(ParagraphStyle(
            name='SectionHeading',
            parent=self.styles['Heading2'],
            fontSize=15,
            textColor=HEADER_COLOR,
            spaceAfter=10,
            spaceBefore=16,
            fontName='Helvetica-Bold'
        ))

        self.styles.add(ParagraphStyle(
            name='InfoText',
            parent=self.styles['Normal'],
            fontSize=11,
            textColor=colors.HexColor('#444444'),
            spaceAfter=6
        ))

    def generate_report(
        self,
        grouped_drafts: dict[str, list[TransactionDraft]],
        source_name: str,
        totals: dict[str, float]
    ):
        """
        Generate the import report.

        Args:
            grouped_drafts: Dict mapping month (MM/YYYY) to drafts
            source_name: Statement the drafts came from
            totals: {"income": ..., "expense": ..., "balance": ...}

        Raises:
            ValueError: If grouped_drafts is not a dict
            OSError: If the file cannot be written
        """
        if not isinstance(grouped_drafts, dict):
            logger.error("grouped_drafts must be a dictionary")
            raise ValueError("grouped_drafts must be a dictionary")

        draft_count = sum(len(drafts) for drafts in grouped_drafts.values())
        logger.info(f"Generating PDF report: {self.output_path}")
        logger.info(f"Report contains {len(grouped_drafts)} months, {draft_count} drafts")

        output_path = Path(self.output_path)
        try:
            output_path.parent.mkdir(parents=True, exist_ok=True)

            doc = SimpleDocTemplate(
                str(output_path),
                pagesize=self.page_size,
                rightMargin=0.75*inch,
                leftMargin=0.75*inch,
                topMargin=0.75*inch,
                bottomMargin=0.75*inch
            )

            story = []
            story.extend(self._create_header(source_name, draft_count))
            story.append(self._create_totals_table(totals))
            story.append(Spacer(1, 0.3 * inch))

            if not grouped_drafts:
                logger.warning("No drafts to include in report")
                story.append(Paragraph("No transactions were found in this statement.", self.styles['InfoText']))
            else:
                for month in sorted(grouped_drafts, key=self._month_sort_key):
                    drafts = grouped_drafts[month]
                    if drafts:
                        logger.debug(f"Adding section for {month} with {len(drafts)} drafts")
                        story.extend(self._create_month_section(month, drafts))

            doc.build(story)
            logger.info(f"PDF report generated successfully: {self.output_path}")

        except PermissionError as e:
            logger.error(f"Permission denied writing to {self.output_path}: {e}")
            raise OSError(f"Cannot write to {self.output_path}. File may be open or directory is read-only.") from e

        except OSError as e:
            logger.error(f"OS error writing PDF: {e}", exc_info=True)
            raise

    def _create_header(self, source_name: str, draft_count: int) -> list:
        """Create report header section."""
        elements = [
            Paragraph("Statement Import Report", self.styles['CustomTitle']),
            Spacer(1, 0.2 * inch),
        ]

        info_lines = [
            f"<b>Statement:</b> {escape(source_name)}",
            f"<b>Generated:</b> {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
            f"<b>Imported Transactions:</b> {draft_count}"
        ]
        for line in info_lines:
            elements.append(Paragraph(line, self.styles['InfoText']))

        elements.append(Spacer(1, 0.2 * inch))
        return elements

    def _create_totals_table(self, totals: dict[str, float]) -> Table:
        """Create income/expense/balance summary table."""
        balance = totals.get("balance", 0.0)
        data = [
            ['Total Income', 'Total Expense', 'Balance'],
            [
                f"+{totals.get('income', 0.0):.2f}",
                f"-{totals.get('expense', 0.0):.2f}",
                f"+{balance:.2f}" if balance >= 0 else f"{balance:.2f}",
            ]
        ]

        table = Table(data, colWidths=[2.3 * inch, 2.3 * inch, 2.3 * inch])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), HEADER_COLOR),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, -1), 'Helvetica-Bold'),
            ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ('FONTSIZE', (0, 0), (-1, -1), 11),
            ('TOPPADDING', (0, 0), (-1, -1), 8),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 8),
            ('GRID', (0, 0), (-1, -1), 1, GRID_COLOR),
        ]))
        return table

    def _create_month_section(self, month: str, drafts: list[TransactionDraft]) -> list:
        """
        Create a section for one month's drafts.

        Args:
            month: Month key (MM/YYYY)
            drafts: Drafts dated in this month
        """
        elements = [
            Paragraph(self._format_month_heading(month), self.styles['SectionHeading']),
            Spacer(1, 0.1 * inch),
            self._create_transaction_table(drafts),
        ]

        net = sum(
            d.amount if d.type == TransactionType.INCOME else -d.amount
            for d in drafts
        )
        net_display = f"+{net:.2f}" if net >= 0 else f"{net:.2f}"
        elements.append(Spacer(1, 0.1 * inch))
        elements.append(Paragraph(f"<b>Month Net: {net_display}</b>", self.styles['InfoText']))
        elements.append(Spacer(1, 0.2 * inch))
        return elements

    def _create_transaction_table(self, drafts: list[TransactionDraft]) -> Table:
        """Create table of drafts: date, description, category, signed amount."""
        data = [['Date', 'Description', 'Category', 'Amount']]
        for draft in drafts:
            data.append([
                draft.date,
                self._truncate_description(draft.description or '[No description]', max_length=50),
                draft.category,
                draft.amount_display
            ])

        table = Table(data, colWidths=[1.0 * inch, 3.4 * inch, 1.4 * inch, 1.1 * inch])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), HEADER_COLOR),
            ('TEXTCOLOR', (0, 0), (-1, 0), colors.white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('ALIGN', (0, 0), (-1, 0), 'CENTER'),
            ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
            ('FONTSIZE', (0, 1), (-1, -1), 9),
            ('ALIGN', (3, 1), (3, -1), 'RIGHT'),
            ('TOPPADDING', (0, 0), (-1, -1), 5),
            ('BOTTOMPADDING', (0, 0), (-1, -1), 5),
            ('GRID', (0, 0), (-1, -1), 0.5, GRID_COLOR),
            *[('BACKGROUND', (0, i), (-1, i), STRIPE_COLOR)
              for i in range(2, len(data), 2)]
        ]))
        return table

    @staticmethod
    def _month_sort_key(month: str) -> tuple:
        """MM/YYYY keys sort chronologically by (year, month)."""
        try:
            parsed = datetime.strptime(month, '%m/%Y')
            return (parsed.year, parsed.month)
        except ValueError:
            return (9999, 99)

    @staticmethod
    def _format_month_heading(month: str) -> str:
        """
        Format month key for display.

        Args:
            month: Month key (MM/YYYY)

        Returns:
            Formatted month name (e.g., "January 2025")
        """
        try:
            return datetime.strptime(month, '%m/%Y').strftime('%B %Y')
        except ValueError:
            return month

    @staticmethod
    def _truncate_description(description: str, max_length: int = 50) -> str:
        if len(description) <= max_length:
            return description
        return description[:max_length - 3] + "..."


def generate_pdf_report(
    output_path: str,
    grouped_drafts: dict[str, list[TransactionDraft]],
    source_name: str,
    totals: dict[str, float]
):
    """
    Convenience function to generate the import report.

    Args:
        output_path: Path where PDF will be saved
        grouped_drafts: Dict mapping month (MM/YYYY) to drafts
        source_name: Statement the drafts came from
        totals: {"income": ..., "expense": ..., "balance": ...}
    """
    writer = PDFReportWriter(output_path)
    writer.generate_report(grouped_drafts, source_name, totals)
