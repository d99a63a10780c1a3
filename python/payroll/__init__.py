"""
Payroll Compliance Module

Statutory contributions (SSS, PhilHealth, Pag-IBIG) and the annual BIR
Alphalist of employees.
"""

from .contributions import (
    ContributionCalculator,
    PayrollDeductions,
    StatutoryContribution,
    calculate_pagibig_contribution,
    calculate_philhealth_contribution,
    calculate_sss_contribution,
    get_contribution_calculator,
)
from .alphalist import (
    AlphalistEntry,
    Employee,
    build_alphalist_entry,
    generate_alphalist,
)
from .excel_generator import AlphalistExcelGenerator

__all__ = [
    # Contributions
    "ContributionCalculator",
    "PayrollDeductions",
    "StatutoryContribution",
    "calculate_pagibig_contribution",
    "calculate_philhealth_contribution",
    "calculate_sss_contribution",
    "get_contribution_calculator",
    # Alphalist
    "AlphalistEntry",
    "Employee",
    "build_alphalist_entry",
    "generate_alphalist",
    "AlphalistExcelGenerator",
]
