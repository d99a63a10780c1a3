"""
BIR Tax Form Generator Module

Builds BIR Form 2550M (Monthly Value-Added Tax Declaration) data from POS
sales and renders draft PDFs for review.
"""

import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from pathlib import Path
from xml.sax.saxutils import escape

import yaml
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from .bir_calculator import BIRCalculator, FormType, VATTreatment, get_calculator
from .money import sum_amounts
from .records import ReportPeriod, Sale
from .validators import validate_tin

logger = logging.getLogger(__name__)

DEFAULT_BUSINESS = {
    "name": "Filipino Business Management System",
    "address": "123 Business Street, Makati City, Metro Manila 1200",
    "tin": "123-456-789-000",
    "rdo_code": "043",
}


@dataclass(frozen=True)
class Form2550MData:
    """Monthly VAT declaration figures."""

    business_name: str
    business_address: str
    tin: str
    rdo_code: str
    period: ReportPeriod
    gross_sales: Decimal
    exempt_sales: Decimal
    zero_rated_sales: Decimal
    vatable_amount: Decimal
    vat_amount: Decimal
    filing_deadline: date
    sale_count: int = 0

    @property
    def tax_period(self) -> str:
        return self.period.label

    @property
    def total_sales(self) -> Decimal:
        return self.gross_sales

    def to_dict(self) -> dict:
        return {
            "business_name": self.business_name,
            "business_address": self.business_address,
            "tin": self.tin,
            "rdo_code": self.rdo_code,
            "tax_period": self.tax_period,
            "gross_sales": float(self.gross_sales),
            "exempt_sales": float(self.exempt_sales),
            "zero_rated_sales": float(self.zero_rated_sales),
            "vatable_amount": float(self.vatable_amount),
            "vat_amount": float(self.vat_amount),
            "total_sales": float(self.total_sales),
            "filing_deadline": self.filing_deadline.isoformat(),
            "sale_count": self.sale_count,
        }


@dataclass
class GeneratedForm:
    """Generated tax form output."""

    form_type: FormType
    period: str
    filename: str
    file_path: Path | None = None
    generated_at: datetime = field(default_factory=datetime.now)
    data: Form2550MData | None = None
    validation_errors: list[str] = field(default_factory=list)
    is_draft: bool = True

    @property
    def is_valid(self) -> bool:
        return len(self.validation_errors) == 0


class TaxFormGenerator:
    """Generates BIR tax form drafts."""

    def __init__(
        self,
        config_dir: Path | str | None = None,
        calculator: BIRCalculator | None = None
    ):
        """Initialize form generator.

        Args:
            config_dir: Directory holding entity_config.yaml
            calculator: Calculator supplying filing deadlines
        """
        self.config_dir = Path(config_dir) if config_dir else Path(__file__).parent
        self.calculator = calculator or get_calculator()
        self._load_config()

    def _load_config(self) -> None:
        """Load the registered business identity."""
        entity_file = self.config_dir / "entity_config.yaml"
        self.business = dict(DEFAULT_BUSINESS)
        if entity_file.exists():
            with open(entity_file, encoding="utf-8") as f:
                config = yaml.safe_load(f) or {}
            self.business.update(config.get("business", {}))

    def generate_form_2550m(
        self,
        sales: list[Sale | dict],
        period: ReportPeriod | dict
    ) -> Form2550MData:
        """Aggregate sales of a period into Form 2550M figures.

        Gross sales and VAT cover every sale in the period; subtotals are
        split into vatable, exempt and zero-rated sales by VAT treatment.

        Args:
            sales: POS sales
            period: Tax period (month and year, or year only)

        Returns:
            Form2550MData
        """
        period = ReportPeriod.coerce(period)
        in_period = [
            sale for sale in (Sale.coerce(s) for s in sales)
            if period.matches(sale.created_at)
        ]

        def _subtotals(treatment: VATTreatment) -> Decimal:
            return sum_amounts(s.subtotal for s in in_period if s.vat_treatment == treatment)

        data = Form2550MData(
            business_name=self.business["name"],
            business_address=self.business["address"],
            tin=self.business["tin"],
            rdo_code=str(self.business["rdo_code"]),
            period=period,
            gross_sales=sum_amounts(s.total for s in in_period),
            exempt_sales=_subtotals(VATTreatment.EXEMPT),
            zero_rated_sales=_subtotals(VATTreatment.ZERO_RATED),
            vatable_amount=_subtotals(VATTreatment.VATABLE),
            vat_amount=sum_amounts(s.tax for s in in_period),
            filing_deadline=self.calculator.get_filing_deadline(
                FormType.VAT_MONTHLY, period.end_date
            ),
            sale_count=len(in_period),
        )

        logger.info(
            f"Form 2550M for {data.tax_period}: {data.sale_count} sales, "
            f"gross {data.gross_sales}, VAT {data.vat_amount}"
        )
        return data

    def validate_form_data(self, data: Form2550MData) -> list[str]:
        """Validate form data.

        Args:
            data: Form2550MData to validate

        Returns:
            List of validation errors
        """
        errors = []

        if not data.tin:
            errors.append("TIN is required")
        elif not validate_tin(data.tin):
            errors.append("Invalid TIN format")

        if not data.business_name:
            errors.append("Business name is required")

        if not data.business_address:
            errors.append("Business address is required")

        if data.vat_amount < 0:
            errors.append("Output VAT cannot be negative")

        return errors

    def render_form_2550m(
        self,
        data: Form2550MData,
        output_dir: Path | str
    ) -> GeneratedForm:
        """Render a Form 2550M draft PDF.

        Args:
            data: Form figures
            output_dir: Output directory for the PDF

        Returns:
            GeneratedForm
        """
        errors = self.validate_form_data(data)
        if errors:
            logger.warning(f"Form 2550M for {data.tax_period} has errors: {errors}")

        output_dir = Path(output_dir)
        output_dir.mkdir(parents=True, exist_ok=True)

        period_slug = data.tax_period.replace("/", "-")
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"BIR_{FormType.VAT_MONTHLY.value}_{period_slug}_{timestamp}.pdf"
        file_path = output_dir / filename

        self._generate_vat_form(data, file_path)
        logger.info(f"Rendered Form 2550M draft to {file_path}")

        return GeneratedForm(
            form_type=FormType.VAT_MONTHLY,
            period=data.tax_period,
            filename=filename,
            file_path=file_path,
            data=data,
            validation_errors=errors,
        )

    def _generate_vat_form(self, data: Form2550MData, file_path: Path) -> None:
        """Lay out the 2550M draft: taxpayer part, then numbered tax items."""
        doc = SimpleDocTemplate(
            str(file_path),
            pagesize=A4,
            title=f"BIR Form {FormType.VAT_MONTHLY.value} {data.tax_period}",
            leftMargin=0.6*inch,
            rightMargin=0.6*inch,
            topMargin=0.6*inch,
            bottomMargin=0.6*inch
        )

        styles = getSampleStyleSheet()
        small = ParagraphStyle("Small", parent=styles["Normal"], fontSize=8, textColor=colors.grey)
        banner = ParagraphStyle(
            "Banner", parent=styles["Heading1"], alignment=TA_CENTER, spaceAfter=2
        )

        elements = [
            Paragraph("Republic of the Philippines - Bureau of Internal Revenue", small),
            Paragraph(f"BIR Form {FormType.VAT_MONTHLY.value}", banner),
            Paragraph("Monthly Value-Added Tax Declaration", styles["Heading2"]),
            Paragraph(
                f"<font color='red'>UNFILED DRAFT</font> &nbsp; due {data.filing_deadline:%B %d, %Y}",
                styles["Normal"]
            ),
            Spacer(1, 0.2*inch),
        ]

        # Part I - Background Information
        elements.append(self._part_heading("Part I - Background Information"))
        part_one = [
            ["1", "For the month of", data.tax_period],
            ["4", "TIN", data.tin],
            ["5", "RDO Code", data.rdo_code],
            ["7", "Taxpayer's Name", data.business_name],
            ["8", "Registered Address", Paragraph(escape(data.business_address), styles["Normal"])],
            ["", "Sales covered", str(data.sale_count)],
        ]
        elements.append(self._item_table(part_one, amounts=False))
        elements.append(Spacer(1, 0.2*inch))

        # Part II - Computation of Tax
        elements.append(self._part_heading("Part II - Computation of Tax"))
        part_two = [
            ["12A", "Vatable Sales/Receipts - Private", data.vatable_amount],
            ["13", "Zero-Rated Sales/Receipts", data.zero_rated_sales],
            ["14", "Exempt Sales/Receipts", data.exempt_sales],
            ["15", "Total Sales/Receipts", data.gross_sales],
            ["20A", "Output Tax Due", data.vat_amount],
        ]
        elements.append(self._item_table(part_two, amounts=True))

        elements.append(Spacer(1, 0.35*inch))
        elements.append(Paragraph(
            f"Prepared {datetime.now():%Y-%m-%d %H:%M} from point-of-sale records. "
            "Figures must be reviewed before filing.",
            small
        ))

        doc.build(elements)

    def _part_heading(self, text: str) -> Table:
        heading = Table([[text]], colWidths=[7*inch])
        heading.setStyle(TableStyle([
            ("BACKGROUND", (0, 0), (-1, -1), colors.HexColor("#1F3864")),
            ("TEXTCOLOR", (0, 0), (-1, -1), colors.white),
            ("FONTNAME", (0, 0), (-1, -1), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 10),
        ]))
        return heading

    def _item_table(self, rows: list[list], amounts: bool) -> Table:
        """Numbered form items; the last amount row is the tax line."""
        if amounts:
            rows = [[number, label, f"{value:,.2f}"] for number, label, value in rows]

        table = Table(rows, colWidths=[0.5*inch, 3.5*inch, 3*inch])
        style = [
            ("GRID", (0, 0), (-1, -1), 0.5, colors.grey),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
            ("FONTNAME", (0, 0), (0, -1), "Helvetica-Bold"),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]
        if amounts:
            style += [
                ("ALIGN", (2, 0), (2, -1), "RIGHT"),
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ("BACKGROUND", (0, -1), (-1, -1), colors.HexColor("#D9E1F2")),
            ]
        table.setStyle(TableStyle(style))
        return table


def generate_bir_form_2550m(sales: list[Sale | dict], period: ReportPeriod | dict) -> Form2550MData:
    """Build Form 2550M figures using the packaged business identity."""
    return TaxFormGenerator().generate_form_2550m(sales, period)
