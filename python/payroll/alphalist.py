"""
Alphalist Module

Builds the annual alphabetical list of employees (BIR Alphalist) from HR
employee records.

The withholding figure here is an annual estimate on taxable compensation
using the graduated compensation table. It is computed independently of
tax.calculate_withholding_tax_for_employee, which annualizes gross pay less
personal exemptions, so the two figures can differ for the same employee.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from tax.bir_calculator import BIRCalculator, get_calculator
from tax.money import ZERO, ensure_amount, round_centavo

from .contributions import ContributionCalculator, get_contribution_calculator

logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


@dataclass(frozen=True)
class Employee:
    """Employee fields consumed by payroll reporting."""

    first_name: str
    last_name: str
    basic_salary: Decimal
    middle_name: str = ""
    tin_number: str = ""
    employee_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "Employee":
        """Build from an HR record in snake_case or camelCase."""
        def _get(*keys: str, default: Any = None) -> Any:
            for key in keys:
                if data.get(key) is not None:
                    return data[key]
            return default

        return cls(
            first_name=_get("first_name", "firstName", default=""),
            last_name=_get("last_name", "lastName", default=""),
            basic_salary=ensure_amount(_get("basic_salary", "basicSalary", default=0), "basic_salary"),
            middle_name=_get("middle_name", "middleName", default=""),
            tin_number=_get("tin_number", "tinNumber", default=""),
            employee_id=_get("employee_id", "employeeId", "id"),
        )

    @classmethod
    def coerce(cls, value: "Employee | dict") -> "Employee":
        return value if isinstance(value, cls) else cls.from_dict(value)

    @property
    def full_name(self) -> str:
        name = f"{self.last_name}, {self.first_name}"
        if self.middle_name:
            name += f" {self.middle_name}"
        return name


@dataclass(frozen=True)
class AlphalistEntry:
    """One employee row of the annual Alphalist."""

    tin: str
    last_name: str
    first_name: str
    middle_name: str
    gross_compensation: Decimal
    non_taxable_compensation: Decimal
    taxable_compensation: Decimal
    withholding_tax: Decimal
    year: int

    def to_dict(self) -> dict:
        return {
            "tin": self.tin,
            "last_name": self.last_name,
            "first_name": self.first_name,
            "middle_name": self.middle_name,
            "gross_compensation": float(self.gross_compensation),
            "non_taxable_compensation": float(self.non_taxable_compensation),
            "taxable_compensation": float(self.taxable_compensation),
            "withholding_tax": float(self.withholding_tax),
            "year": self.year,
        }


def build_alphalist_entry(
    employee: Employee | dict,
    year: int,
    contributions: ContributionCalculator | None = None,
    calculator: BIRCalculator | None = None
) -> AlphalistEntry:
    """Compute one Alphalist row.

    Gross compensation is twelve months of basic salary. The employee share
    of SSS, PhilHealth and Pag-IBIG over twelve months is non-taxable.

    Args:
        employee: Employee record
        year: Calendar year covered
        contributions: Contribution calculator (default tables if None)
        calculator: Tax calculator supplying the compensation table

    Returns:
        AlphalistEntry
    """
    employee = Employee.coerce(employee)
    contributions = contributions or get_contribution_calculator()
    calculator = calculator or get_calculator()

    monthly = contributions.calculate_all(employee.basic_salary)
    gross = round_centavo(employee.basic_salary * MONTHS_PER_YEAR)
    non_taxable = round_centavo(monthly.employee_total * MONTHS_PER_YEAR)
    taxable = max(ZERO, gross - non_taxable)

    return AlphalistEntry(
        tin=employee.tin_number or "",
        last_name=employee.last_name,
        first_name=employee.first_name,
        middle_name=employee.middle_name or "",
        gross_compensation=gross,
        non_taxable_compensation=non_taxable,
        taxable_compensation=taxable,
        withholding_tax=calculator.compute_compensation_tax(taxable).tax_due,
        year=year,
    )


def generate_alphalist(
    employees: list[Employee | dict],
    year: int,
    contributions: ContributionCalculator | None = None,
    calculator: BIRCalculator | None = None
) -> list[AlphalistEntry]:
    """Generate Alphalist rows for every employee, in input order."""
    entries = [
        build_alphalist_entry(employee, year, contributions, calculator)
        for employee in employees
    ]

    missing_tin = [e for e in entries if not e.tin]
    if missing_tin:
        logger.warning(f"{len(missing_tin)} Alphalist entries for {year} have no TIN")

    logger.info(f"Generated Alphalist for {year}: {len(entries)} employees")
    return entries
