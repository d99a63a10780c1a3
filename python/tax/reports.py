"""
BIR Period Report Module

Rolls transaction records up into VAT and income-tax reports for a
calendar month, quarter or year.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum

from .bir_calculator import BIRCalculator, get_calculator
from .money import ZERO, format_philippine_currency, sum_amounts
from .records import ReportPeriod

logger = logging.getLogger(__name__)


class ReportType(Enum):
    """Supported BIR period reports."""
    VAT = "VAT"
    INCOME_TAX = "INCOME_TAX"


@dataclass(frozen=True)
class BIRReport:
    """Period-bounded BIR report totals."""

    report_type: ReportType
    period: ReportPeriod
    total_sales: Decimal = ZERO
    total_vat: Decimal = ZERO
    exempt_sales: Decimal = ZERO
    zero_rated_sales: Decimal = ZERO
    total_revenue: Decimal | None = None
    total_expenses: Decimal | None = None
    taxable_income: Decimal | None = None
    income_tax: Decimal | None = None
    record_count: int = 0
    generated_at: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> dict:
        def _opt(value: Decimal | None) -> float | None:
            return float(value) if value is not None else None

        return {
            "report_type": self.report_type.value,
            "period": self.period.to_dict(),
            "total_sales": float(self.total_sales),
            "total_vat": float(self.total_vat),
            "exempt_sales": float(self.exempt_sales),
            "zero_rated_sales": float(self.zero_rated_sales),
            "total_revenue": _opt(self.total_revenue),
            "total_expenses": _opt(self.total_expenses),
            "taxable_income": _opt(self.taxable_income),
            "income_tax": _opt(self.income_tax),
            "record_count": self.record_count,
            "generated_at": self.generated_at.isoformat(),
        }


def generate_bir_report(
    report_type: ReportType | str,
    records: list[dict],
    period: ReportPeriod | dict,
    calculator: BIRCalculator | None = None
) -> BIRReport:
    """Generate a BIR report for a period.

    VAT reports keep only records whose 'date' falls in the period's
    calendar month (or year) and sum 'amount', 'vat', 'exempt' and
    'zero_rated'. Income-tax reports sum 'revenue' and 'expenses' over
    all records, which the caller filters beforehand, and apply the
    income-tax schedule to the difference.

    Args:
        report_type: VAT or INCOME_TAX
        records: Transaction records
        period: Report period
        calculator: Calculator supplying the income-tax schedule

    Returns:
        BIRReport
    """
    try:
        report_type = ReportType(report_type)
    except ValueError:
        raise ValueError(f"Unknown report type: {report_type}")

    period = ReportPeriod.coerce(period)
    calculator = calculator or get_calculator()

    if report_type == ReportType.VAT:
        in_period = [r for r in records if period.matches(r.get("date"))]
        report = BIRReport(
            report_type=report_type,
            period=period,
            total_sales=sum_amounts(r.get("amount") or 0 for r in in_period),
            total_vat=sum_amounts(r.get("vat") or 0 for r in in_period),
            exempt_sales=sum_amounts(r.get("exempt") or 0 for r in in_period),
            zero_rated_sales=sum_amounts(r.get("zero_rated") or 0 for r in in_period),
            record_count=len(in_period),
        )
    else:
        total_revenue = sum_amounts(r.get("revenue") or 0 for r in records)
        total_expenses = sum_amounts(r.get("expenses") or 0 for r in records)
        taxable_income = total_revenue - total_expenses
        report = BIRReport(
            report_type=report_type,
            period=period,
            total_revenue=total_revenue,
            total_expenses=total_expenses,
            taxable_income=taxable_income,
            income_tax=calculator.compute_income_tax(taxable_income),
            record_count=len(records),
        )

    logger.info(
        f"Generated {report_type.value} report for {period.label} "
        f"from {report.record_count} of {len(records)} records"
    )
    return report


def format_report_summary(report: BIRReport) -> str:
    """Format a BIR report as a plain-text summary.

    Args:
        report: BIRReport to format

    Returns:
        Formatted summary string
    """
    lines = [
        f"BIR {report.report_type.value.replace('_', ' ')} Report",
        f"Period: {report.period.label}",
        "",
    ]

    if report.report_type == ReportType.VAT:
        lines += [
            f"Total Sales: {format_philippine_currency(report.total_sales)}",
            f"Total VAT: {format_philippine_currency(report.total_vat)}",
            f"Exempt Sales: {format_philippine_currency(report.exempt_sales)}",
            f"Zero-Rated Sales: {format_philippine_currency(report.zero_rated_sales)}",
        ]
    else:
        lines += [
            f"Total Revenue: {format_philippine_currency(report.total_revenue)}",
            f"Total Expenses: {format_philippine_currency(report.total_expenses)}",
            f"Taxable Income: {format_philippine_currency(report.taxable_income)}",
            f"Income Tax: {format_philippine_currency(report.income_tax)}",
        ]

    lines += ["", f"Generated: {report.generated_at.strftime('%Y-%m-%d %H:%M')}"]
    return "\n".join(lines)
