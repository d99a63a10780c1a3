"""
BIR Tax Calculator Module

Handles Philippine tax computations: VAT, creditable withholding tax,
employee compensation withholding, the income-tax schedule used by period
reports, and late filing penalties.
"""

import calendar
import logging
from dataclasses import dataclass, field
from datetime import date, timedelta
from decimal import Decimal
from enum import Enum
from pathlib import Path
from typing import Any, ClassVar, Union

import yaml

from .money import ZERO, ensure_amount, round_centavo, to_decimal

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = Decimal("12")

DEFAULT_RULES: dict[str, Any] = {
    "vat": {"standard_rate": 0.12},
    "withholding": {
        "rates": {"goods": 0.01, "services": 0.02, "professional": 0.10, "compensation": 0.00},
        "thresholds": {"goods": 1000, "services": 1000, "professional": 0, "compensation": 0},
    },
    # Exemption-based schedule for monthly employee withholding
    "employee_withholding": {
        "personal_exemption": 50000,
        "additional_exemption": 25000,
        "default_exemptions": 4,
        "brackets": [
            {"over": 0, "up_to": 250000, "rate": 0.00, "base_tax": 0},
            {"over": 250000, "up_to": 400000, "rate": 0.20, "base_tax": 0},
            {"over": 400000, "up_to": 800000, "rate": 0.25, "base_tax": 30000},
            {"over": 800000, "up_to": 2000000, "rate": 0.30, "base_tax": 130000},
            {"over": 2000000, "up_to": 8000000, "rate": 0.32, "base_tax": 490000},
            {"over": 8000000, "rate": 0.35, "base_tax": 2410000},
        ],
    },
    # TRAIN law annual graduated rates on compensation
    "compensation_tax": {
        "brackets": [
            {"over": 0, "up_to": 250000, "rate": 0.00, "base_tax": 0},
            {"over": 250000, "up_to": 400000, "rate": 0.15, "base_tax": 0},
            {"over": 400000, "up_to": 800000, "rate": 0.20, "base_tax": 22500},
            {"over": 800000, "up_to": 2000000, "rate": 0.25, "base_tax": 102500},
            {"over": 2000000, "up_to": 8000000, "rate": 0.30, "base_tax": 402500},
            {"over": 8000000, "rate": 0.35, "base_tax": 2202500},
        ],
    },
    # Schedule for the INCOME_TAX period report; tops out at 35% above 2M
    "corporate_income_tax": {
        "brackets": [
            {"over": 0, "up_to": 250000, "rate": 0.00, "base_tax": 0},
            {"over": 250000, "up_to": 400000, "rate": 0.20, "base_tax": 0},
            {"over": 400000, "up_to": 800000, "rate": 0.25, "base_tax": 30000},
            {"over": 800000, "up_to": 2000000, "rate": 0.30, "base_tax": 130000},
            {"over": 2000000, "rate": 0.35, "base_tax": 490000},
        ],
    },
    "penalties": {"surcharge_rate": 0.25, "annual_interest_rate": 0.20, "days_in_year": 365},
    "filing_deadlines": {"2550M": 20, "2550Q": 25, "0619E": 10, "1601C": 10, "1601EQ": "last_day"},
}


class VATTreatment(Enum):
    """VAT treatment of a transaction."""
    VATABLE = "vatable"
    ZERO_RATED = "zero_rated"
    EXEMPT = "exempt"


class WithholdingCategory(Enum):
    """Income-payment categories subject to creditable withholding."""
    GOODS = "goods"
    SERVICES = "services"
    PROFESSIONAL = "professional"
    COMPENSATION = "compensation"


class FormType(Enum):
    """BIR form types."""
    VAT_MONTHLY = "2550M"
    VAT_QUARTERLY = "2550Q"
    EWT_MONTHLY = "0619E"
    EWT_QUARTERLY = "1601EQ"
    COMPENSATION_MONTHLY = "1601C"


@dataclass(frozen=True)
class StandardVAT:
    """12% VAT computed on a vatable amount."""

    vatable_amount: Decimal
    vat_amount: Decimal
    total_amount: Decimal
    vat_rate: Decimal
    is_inclusive: bool = False

    treatment: ClassVar[VATTreatment] = VATTreatment.VATABLE

    def to_dict(self) -> dict:
        return {
            "treatment": self.treatment.value,
            "vatable_amount": float(self.vatable_amount),
            "vat_amount": float(self.vat_amount),
            "total_amount": float(self.total_amount),
            "vat_rate": float(self.vat_rate),
            "is_inclusive": self.is_inclusive,
        }


@dataclass(frozen=True)
class ExemptVAT:
    """VAT-exempt sale: nothing vatable, the whole amount is exempt."""

    exempt_amount: Decimal
    vatable_amount: Decimal = ZERO
    vat_amount: Decimal = ZERO
    vat_rate: Decimal = ZERO

    treatment: ClassVar[VATTreatment] = VATTreatment.EXEMPT

    @property
    def total_amount(self) -> Decimal:
        return self.exempt_amount

    def to_dict(self) -> dict:
        return {
            "treatment": self.treatment.value,
            "vatable_amount": float(self.vatable_amount),
            "vat_amount": float(self.vat_amount),
            "total_amount": float(self.total_amount),
            "vat_rate": float(self.vat_rate),
            "exempt_amount": float(self.exempt_amount),
        }


@dataclass(frozen=True)
class ZeroRatedVAT:
    """Zero-rated sale: vatable at 0%."""

    zero_rated_amount: Decimal
    vat_amount: Decimal = ZERO
    vat_rate: Decimal = ZERO

    treatment: ClassVar[VATTreatment] = VATTreatment.ZERO_RATED

    @property
    def vatable_amount(self) -> Decimal:
        return self.zero_rated_amount

    @property
    def total_amount(self) -> Decimal:
        return self.zero_rated_amount

    def to_dict(self) -> dict:
        return {
            "treatment": self.treatment.value,
            "vatable_amount": float(self.vatable_amount),
            "vat_amount": float(self.vat_amount),
            "total_amount": float(self.total_amount),
            "vat_rate": float(self.vat_rate),
            "zero_rated_amount": float(self.zero_rated_amount),
        }


VATResult = Union[StandardVAT, ExemptVAT, ZeroRatedVAT]


@dataclass(frozen=True)
class VATPayable:
    """Output VAT less input VAT for a set of sales and purchases."""

    output_vat: Decimal
    input_vat: Decimal
    vat_payable: Decimal
    excess_input_vat: Decimal
    output_details: list[VATResult] = field(default_factory=list)
    input_details: list[VATResult] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "output_vat": float(self.output_vat),
            "input_vat": float(self.input_vat),
            "vat_payable": float(self.vat_payable),
            "excess_input_vat": float(self.excess_input_vat),
        }


@dataclass(frozen=True)
class WithholdingTaxResult:
    """Creditable withholding tax computation result."""

    gross_amount: Decimal
    rate: Decimal
    amount: Decimal  # Tax withheld
    net_amount: Decimal  # Gross less tax withheld
    type: WithholdingCategory

    def to_dict(self) -> dict:
        return {
            "gross_amount": float(self.gross_amount),
            "rate": float(self.rate),
            "amount": float(self.amount),
            "net_amount": float(self.net_amount),
            "type": self.type.value,
        }


@dataclass(frozen=True)
class TaxBracket:
    """One row of a graduated tax table."""

    over: Decimal
    up_to: Decimal | None
    rate: Decimal
    base_tax: Decimal

    @classmethod
    def from_dict(cls, data: dict) -> "TaxBracket":
        up_to = data.get("up_to")
        return cls(
            over=Decimal(str(data.get("over", 0))),
            up_to=Decimal(str(up_to)) if up_to is not None else None,
            rate=Decimal(str(data.get("rate", 0))),
            base_tax=Decimal(str(data.get("base_tax", 0))),
        )

    def contains(self, income: Decimal) -> bool:
        return self.up_to is None or income <= self.up_to

    def tax_for(self, income: Decimal) -> Decimal:
        excess = max(ZERO, income - self.over)
        return self.base_tax + excess * self.rate

    @property
    def label(self) -> str:
        return f"{int(self.rate * 100)}%"


@dataclass(frozen=True)
class CompensationTax:
    """Annual tax on compensation under the graduated TRAIN rates."""

    taxable_income: Decimal
    tax_due: Decimal
    tax_bracket: str
    effective_rate: Decimal

    def to_dict(self) -> dict:
        return {
            "taxable_income": float(self.taxable_income),
            "tax_due": float(self.tax_due),
            "tax_bracket": self.tax_bracket,
            "effective_rate": float(self.effective_rate),
        }


@dataclass(frozen=True)
class PenaltyComputation:
    """Surcharge and interest for a late return."""

    tax_due: Decimal
    days_late: int
    surcharge_rate: Decimal
    surcharge_amount: Decimal
    interest_rate: Decimal
    interest_amount: Decimal

    @property
    def total_penalty(self) -> Decimal:
        return self.surcharge_amount + self.interest_amount

    @property
    def total_amount_due(self) -> Decimal:
        return self.tax_due + self.total_penalty

    def to_dict(self) -> dict:
        return {
            "tax_due": float(self.tax_due),
            "days_late": self.days_late,
            "surcharge_rate": float(self.surcharge_rate),
            "surcharge_amount": float(self.surcharge_amount),
            "interest_rate": float(self.interest_rate),
            "interest_amount": float(self.interest_amount),
            "total_penalty": float(self.total_penalty),
            "total_amount_due": float(self.total_amount_due),
        }


class BIRCalculator:
    """Philippine BIR tax calculator."""

    def __init__(self, config_dir: Path | str | None = None):
        """Initialize calculator with tax rules.

        Args:
            config_dir: Directory holding tax_rules.yaml
        """
        self.config_dir = Path(config_dir) if config_dir else Path(__file__).parent
        self._load_rules()

    def _load_rules(self) -> None:
        """Load tax rules from YAML configuration."""
        self.rules = dict(DEFAULT_RULES)

        rules_file = self.config_dir / "tax_rules.yaml"
        if rules_file.exists():
            with open(rules_file, encoding="utf-8") as f:
                self.rules.update(yaml.safe_load(f) or {})
        else:
            logger.warning(f"Tax rules not found at {rules_file}, using defaults")

        self.employee_brackets = self._brackets("employee_withholding")
        self.compensation_brackets = self._brackets("compensation_tax")
        self.corporate_brackets = self._brackets("corporate_income_tax")

    def _brackets(self, section: str) -> list[TaxBracket]:
        rows = self.rules.get(section, {}).get("brackets", [])
        return [TaxBracket.from_dict(row) for row in rows]

    @property
    def vat_rate(self) -> Decimal:
        return Decimal(str(self.rules["vat"]["standard_rate"]))

    # ==================== VAT Calculations ====================

    def calculate_vat(
        self,
        amount: Any,
        inclusive: bool = False,
        exempt: bool = False,
        zero_rated: bool = False,
        rate: Any = None
    ) -> VATResult:
        """Compute VAT for a transaction.

        Args:
            amount: Transaction amount
            inclusive: Whether amount already contains VAT
            exempt: VAT-exempt sale
            zero_rated: Zero-rated sale
            rate: VAT rate override (defaults to the configured standard rate)

        Returns:
            StandardVAT, ExemptVAT or ZeroRatedVAT

        Raises:
            InvalidAmount: If amount or rate is negative or not a finite number
            ValueError: If both exempt and zero_rated are requested
        """
        value = ensure_amount(amount)
        if exempt and zero_rated:
            raise ValueError("A sale cannot be both VAT-exempt and zero-rated")

        if exempt:
            return ExemptVAT(exempt_amount=round_centavo(value))

        if zero_rated:
            return ZeroRatedVAT(zero_rated_amount=round_centavo(value))

        vat_rate = self.vat_rate if rate is None else ensure_amount(rate, "rate")

        if inclusive:
            # Both parts are rounded independently from the unrounded base
            base = value / (1 + vat_rate)
            return StandardVAT(
                vatable_amount=round_centavo(base),
                vat_amount=round_centavo(value - base),
                total_amount=round_centavo(value),
                vat_rate=vat_rate,
                is_inclusive=True,
            )

        vat_amount = round_centavo(value * vat_rate)
        vatable_amount = round_centavo(value)
        return StandardVAT(
            vatable_amount=vatable_amount,
            vat_amount=vat_amount,
            total_amount=vatable_amount + vat_amount,
            vat_rate=vat_rate,
        )

    def _compute_vat_lines(self, lines: list[dict]) -> tuple[Decimal, list[VATResult]]:
        total_vat = ZERO
        computations = []

        for line in lines:
            treatment = VATTreatment(line.get("vat_treatment", VATTreatment.VATABLE.value))
            comp = self.calculate_vat(
                line.get("amount", 0),
                inclusive=line.get("inclusive", False),
                exempt=treatment == VATTreatment.EXEMPT,
                zero_rated=treatment == VATTreatment.ZERO_RATED,
            )
            total_vat += comp.vat_amount
            computations.append(comp)

        return total_vat, computations

    def compute_vat_payable(self, sales: list[dict], purchases: list[dict]) -> VATPayable:
        """Compute VAT still due after crediting input VAT.

        Args:
            sales: Sales with 'amount' and optional 'vat_treatment'/'inclusive'
            purchases: Purchases in the same shape

        Returns:
            VATPayable; excess input VAT is carried, never negative payable
        """
        output_vat, output_details = self._compute_vat_lines(sales)
        input_vat, input_details = self._compute_vat_lines(purchases)

        net = output_vat - input_vat
        return VATPayable(
            output_vat=output_vat,
            input_vat=input_vat,
            vat_payable=max(ZERO, net),
            excess_input_vat=max(ZERO, -net),
            output_details=output_details,
            input_details=input_details,
        )

    # ==================== Withholding Tax Calculations ====================

    def calculate_withholding_tax(
        self,
        amount: Any,
        category: WithholdingCategory | str
    ) -> WithholdingTaxResult:
        """Compute creditable withholding tax on an income payment.

        Payments below the category threshold are not subject to withholding.

        Args:
            amount: Gross income payment
            category: goods, services, professional or compensation

        Returns:
            WithholdingTaxResult
        """
        try:
            category = WithholdingCategory(category)
        except ValueError:
            raise ValueError(f"Unknown withholding category: {category}")

        gross = ensure_amount(amount)
        withholding = self.rules.get("withholding", {})
        rate = Decimal(str(withholding.get("rates", {}).get(category.value, 0)))
        threshold = Decimal(str(withholding.get("thresholds", {}).get(category.value, 0)))

        tax_amount = ZERO
        if gross >= threshold:
            tax_amount = round_centavo(gross * rate)

        return WithholdingTaxResult(
            gross_amount=round_centavo(gross),
            rate=rate,
            amount=tax_amount,
            net_amount=round_centavo(gross) - tax_amount,
            type=category,
        )

    def calculate_employee_withholding(
        self,
        monthly_gross_pay: Any,
        exemptions: int | None = None
    ) -> Decimal:
        """Compute monthly withholding tax on an employee's pay.

        Pay is annualized, reduced by the personal exemption plus one
        additional exemption per slot, taxed on the employee schedule and
        spread back over twelve months.

        Args:
            monthly_gross_pay: Monthly gross pay
            exemptions: Number of additional exemptions (default from rules)

        Returns:
            Monthly tax rounded to centavos
        """
        gross = ensure_amount(monthly_gross_pay, "monthly_gross_pay")
        rules = self.rules.get("employee_withholding", {})
        if exemptions is None:
            exemptions = int(rules.get("default_exemptions", 4))
        if exemptions < 0:
            raise ValueError(f"Exemptions cannot be negative: {exemptions}")

        total_exemption = (
            Decimal(str(rules.get("personal_exemption", 0)))
            + Decimal(str(rules.get("additional_exemption", 0))) * exemptions
        )
        taxable_income = max(ZERO, gross * MONTHS_PER_YEAR - total_exemption)

        annual_tax, bracket = self._apply_brackets(taxable_income, self.employee_brackets)
        monthly_tax = round_centavo(annual_tax / MONTHS_PER_YEAR)

        logger.debug(
            f"Employee withholding: taxable {taxable_income} in {bracket}, "
            f"monthly tax {monthly_tax}"
        )
        return monthly_tax

    # ==================== Compensation Tax ====================

    def compute_compensation_tax(self, annual_taxable_compensation: Any) -> CompensationTax:
        """Compute annual tax on taxable compensation (TRAIN graduated rates).

        Args:
            annual_taxable_compensation: Compensation net of non-taxable items

        Returns:
            CompensationTax result
        """
        taxable_income = max(ZERO, to_decimal(annual_taxable_compensation))
        tax, bracket = self._apply_brackets(taxable_income, self.compensation_brackets)
        tax_due = round_centavo(tax)

        effective_rate = (tax_due / taxable_income * 100) if taxable_income > 0 else ZERO

        return CompensationTax(
            taxable_income=round_centavo(taxable_income),
            tax_due=tax_due,
            tax_bracket=bracket,
            effective_rate=round_centavo(effective_rate),
        )

    # ==================== Income Tax ====================

    def compute_income_tax(self, taxable_income: Any) -> Decimal:
        """Compute income tax on the period-report schedule.

        Args:
            taxable_income: Revenue less expenses; losses yield zero tax

        Returns:
            Income tax rounded to centavos
        """
        income = to_decimal(taxable_income, "taxable_income")
        tax, _ = self._apply_brackets(max(ZERO, income), self.corporate_brackets)
        return round_centavo(tax)

    def _apply_brackets(
        self,
        income: Decimal,
        brackets: list[TaxBracket]
    ) -> tuple[Decimal, str]:
        for bracket in brackets:
            if bracket.contains(income):
                return bracket.tax_for(income), bracket.label

        return ZERO, "0%"

    # ==================== Penalties ====================

    def compute_late_filing_penalty(self, tax_due: Any, days_late: int) -> PenaltyComputation:
        """Compute surcharge and interest for a return filed late.

        Args:
            tax_due: Basic tax due
            days_late: Days past the filing deadline

        Returns:
            PenaltyComputation
        """
        if days_late < 0:
            raise ValueError(f"days_late cannot be negative: {days_late}")

        basic_tax = round_centavo(ensure_amount(tax_due, "tax_due"))
        rules = self.rules.get("penalties", {})
        surcharge_rate = Decimal(str(rules.get("surcharge_rate", 0.25)))
        interest_rate = Decimal(str(rules.get("annual_interest_rate", 0.20)))
        days_in_year = Decimal(str(rules.get("days_in_year", 365)))

        surcharge = ZERO
        interest = ZERO
        if days_late > 0:
            surcharge = round_centavo(basic_tax * surcharge_rate)
            interest = round_centavo(basic_tax * interest_rate * days_late / days_in_year)

        return PenaltyComputation(
            tax_due=basic_tax,
            days_late=days_late,
            surcharge_rate=surcharge_rate,
            surcharge_amount=surcharge,
            interest_rate=interest_rate,
            interest_amount=interest,
        )

    # ==================== Utility Methods ====================

    def get_filing_deadline(self, form_type: FormType | str, period_end: date) -> date:
        """Get filing deadline for a BIR form.

        Args:
            form_type: FormType or BIR form number (2550M, 2550Q, 0619E, 1601C, 1601EQ)
            period_end: Last day of the covered period

        Returns:
            Filing deadline date
        """
        deadlines = self.rules.get("filing_deadlines", {})
        if isinstance(form_type, FormType):
            form_type = form_type.value
        deadline_day = deadlines.get(form_type, 20)

        next_month = period_end.replace(day=1) + timedelta(days=32)
        year, month = next_month.year, next_month.month
        last_day = calendar.monthrange(year, month)[1]

        if deadline_day == "last_day":
            return date(year, month, last_day)

        return date(year, month, min(int(deadline_day), last_day))


_default_calculator: BIRCalculator | None = None


def get_calculator() -> BIRCalculator:
    """Return the process-wide calculator built from the packaged rules."""
    global _default_calculator
    if _default_calculator is None:
        _default_calculator = BIRCalculator()
    return _default_calculator


def calculate_vat(
    amount: Any,
    inclusive: bool = False,
    exempt: bool = False,
    zero_rated: bool = False,
    rate: Any = None
) -> VATResult:
    """Compute Philippine VAT (12% unless a rate is given)."""
    return get_calculator().calculate_vat(
        amount, inclusive=inclusive, exempt=exempt, zero_rated=zero_rated, rate=rate
    )


def calculate_withholding_tax(amount: Any, category: WithholdingCategory | str) -> WithholdingTaxResult:
    """Compute creditable withholding tax for an income payment category."""
    return get_calculator().calculate_withholding_tax(amount, category)


def calculate_withholding_tax_for_employee(monthly_gross_pay: Any, exemptions: int = 4) -> Decimal:
    """Compute monthly withholding tax on compensation."""
    return get_calculator().calculate_employee_withholding(monthly_gross_pay, exemptions)
