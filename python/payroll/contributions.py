"""
Statutory Contribution Module

Computes monthly SSS, PhilHealth and Pag-IBIG contributions with their
employee and employer shares.
"""

import logging
from dataclasses import dataclass
from decimal import Decimal
from pathlib import Path
from typing import Any

import yaml

from tax.money import ensure_amount, round_centavo

logger = logging.getLogger(__name__)

# (salary_below, monthly contribution)
_SSS_BRACKETS = [
    (3250, "135"), (3750, "157.5"), (4250, "180"), (4750, "202.5"), (5250, "225"),
    (5750, "247.5"), (6250, "270"), (6750, "292.5"), (7250, "315"), (7750, "337.5"),
    (8250, "360"), (8750, "382.5"), (9250, "405"), (9750, "427.5"), (10250, "450"),
    (10750, "472.5"), (11250, "495"), (11750, "517.5"), (12250, "540"), (12750, "562.5"),
    (13250, "585"), (13750, "607.5"), (14250, "630"), (14750, "652.5"), (15250, "675"),
    (15750, "697.5"), (16250, "720"), (16750, "742.5"), (17250, "765"), (17750, "787.5"),
    (18250, "810"), (18750, "832.5"), (19250, "855"), (19750, "877.5"),
]

DEFAULT_TABLES: dict[str, Any] = {
    "sss": {
        "employee_share": 0.45,
        "max_contribution": 900,
        "brackets": [
            {"salary_below": below, "contribution": contribution}
            for below, contribution in _SSS_BRACKETS
        ],
    },
    "philhealth": {"premium_rate": 0.05, "max_premium": 5000},
    "pagibig": {"employee_rate": 0.02, "employer_rate": 0.02, "max_each": 200},
}


@dataclass(frozen=True)
class StatutoryContribution:
    """Monthly contribution split between employee and employer."""

    employee: Decimal
    employer: Decimal

    @property
    def total(self) -> Decimal:
        return self.employee + self.employer

    def to_dict(self) -> dict:
        return {
            "employee": float(self.employee),
            "employer": float(self.employer),
            "total": float(self.total),
        }


@dataclass(frozen=True)
class PayrollDeductions:
    """All statutory contributions for one monthly salary."""

    sss: StatutoryContribution
    philhealth: StatutoryContribution
    pagibig: StatutoryContribution

    @property
    def employee_total(self) -> Decimal:
        return self.sss.employee + self.philhealth.employee + self.pagibig.employee

    @property
    def employer_total(self) -> Decimal:
        return self.sss.employer + self.philhealth.employer + self.pagibig.employer

    def to_dict(self) -> dict:
        return {
            "sss": self.sss.to_dict(),
            "philhealth": self.philhealth.to_dict(),
            "pagibig": self.pagibig.to_dict(),
            "employee_total": float(self.employee_total),
            "employer_total": float(self.employer_total),
        }


class ContributionCalculator:
    """Computes statutory payroll contributions."""

    def __init__(self, config_dir: Path | str | None = None):
        """Initialize the calculator.

        Args:
            config_dir: Directory holding contribution_tables.yaml
        """
        self.config_dir = Path(config_dir) if config_dir else Path(__file__).parent
        self._load_tables()

    def _load_tables(self) -> None:
        """Load contribution tables from YAML."""
        self.tables = dict(DEFAULT_TABLES)

        tables_file = self.config_dir / "contribution_tables.yaml"
        if tables_file.exists():
            with open(tables_file, encoding="utf-8") as f:
                self.tables.update(yaml.safe_load(f) or {})
        else:
            logger.warning(f"Contribution tables not found at {tables_file}, using defaults")

        sss = self.tables["sss"]
        self.sss_brackets = [
            (Decimal(str(row["salary_below"])), Decimal(str(row["contribution"])))
            for row in sss.get("brackets", [])
        ]

    def calculate_sss(self, monthly_salary: Any) -> StatutoryContribution:
        """Compute the SSS contribution for a monthly salary.

        The bracket contribution is split with the employee paying the
        configured share and the employer the rest.
        """
        salary = ensure_amount(monthly_salary, "monthly_salary")
        sss = self.tables["sss"]

        contribution = Decimal(str(sss.get("max_contribution", 900)))
        for salary_below, bracket_contribution in self.sss_brackets:
            if salary < salary_below:
                contribution = bracket_contribution
                break

        contribution = round_centavo(contribution)
        employee = round_centavo(contribution * Decimal(str(sss.get("employee_share", 0.45))))

        return StatutoryContribution(employee=employee, employer=contribution - employee)

    def calculate_philhealth(self, monthly_salary: Any) -> StatutoryContribution:
        """Compute the PhilHealth premium, shared equally."""
        salary = ensure_amount(monthly_salary, "monthly_salary")
        rules = self.tables["philhealth"]

        premium = min(
            salary * Decimal(str(rules.get("premium_rate", 0.05))),
            Decimal(str(rules.get("max_premium", 5000))),
        )
        # Each half is rounded from the unrounded premium; total is their sum
        share = round_centavo(premium / 2)

        return StatutoryContribution(employee=share, employer=share)

    def calculate_pagibig(self, monthly_salary: Any) -> StatutoryContribution:
        """Compute Pag-IBIG contributions, each side capped separately."""
        salary = ensure_amount(monthly_salary, "monthly_salary")
        rules = self.tables["pagibig"]
        max_each = Decimal(str(rules.get("max_each", 200)))

        employee = min(salary * Decimal(str(rules.get("employee_rate", 0.02))), max_each)
        employer = min(salary * Decimal(str(rules.get("employer_rate", 0.02))), max_each)

        return StatutoryContribution(
            employee=round_centavo(employee),
            employer=round_centavo(employer),
        )

    def calculate_all(self, monthly_salary: Any) -> PayrollDeductions:
        """Compute SSS, PhilHealth and Pag-IBIG for a monthly salary."""
        deductions = PayrollDeductions(
            sss=self.calculate_sss(monthly_salary),
            philhealth=self.calculate_philhealth(monthly_salary),
            pagibig=self.calculate_pagibig(monthly_salary),
        )
        logger.debug(
            f"Contributions for salary {monthly_salary}: "
            f"employee {deductions.employee_total}, employer {deductions.employer_total}"
        )
        return deductions


_default_calculator: ContributionCalculator | None = None


def get_contribution_calculator() -> ContributionCalculator:
    """Return the process-wide calculator built from the packaged tables."""
    global _default_calculator
    if _default_calculator is None:
        _default_calculator = ContributionCalculator()
    return _default_calculator


def calculate_sss_contribution(monthly_salary: Any) -> StatutoryContribution:
    return get_contribution_calculator().calculate_sss(monthly_salary)


def calculate_philhealth_contribution(monthly_salary: Any) -> StatutoryContribution:
    return get_contribution_calculator().calculate_philhealth(monthly_salary)


def calculate_pagibig_contribution(monthly_salary: Any) -> StatutoryContribution:
    return get_contribution_calculator().calculate_pagibig(monthly_salary)
