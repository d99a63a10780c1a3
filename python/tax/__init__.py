"""
Tax Support Module

Handles Philippine BIR tax calculations: VAT, withholding tax, income tax,
penalties, period reports and Form 2550M generation.
"""

from .money import (
    InvalidAmount,
    ensure_amount,
    format_philippine_currency,
    round_centavo,
    to_decimal,
)
from .validators import (
    validate_pagibig,
    validate_philhealth,
    validate_sss,
    validate_tin,
)
from .bir_calculator import (
    BIRCalculator,
    CompensationTax,
    ExemptVAT,
    FormType,
    PenaltyComputation,
    StandardVAT,
    TaxBracket,
    VATPayable,
    VATResult,
    VATTreatment,
    WithholdingCategory,
    WithholdingTaxResult,
    ZeroRatedVAT,
    calculate_vat,
    calculate_withholding_tax,
    calculate_withholding_tax_for_employee,
    get_calculator,
)
from .records import ReportPeriod, Sale, SaleItem
from .reports import (
    BIRReport,
    ReportType,
    format_report_summary,
    generate_bir_report,
)
from .form_generator import (
    Form2550MData,
    GeneratedForm,
    TaxFormGenerator,
    generate_bir_form_2550m,
)

__all__ = [
    # Money
    "InvalidAmount",
    "ensure_amount",
    "format_philippine_currency",
    "round_centavo",
    "to_decimal",
    # Validators
    "validate_pagibig",
    "validate_philhealth",
    "validate_sss",
    "validate_tin",
    # BIR Calculator
    "BIRCalculator",
    "CompensationTax",
    "ExemptVAT",
    "PenaltyComputation",
    "StandardVAT",
    "TaxBracket",
    "VATPayable",
    "VATResult",
    "VATTreatment",
    "WithholdingCategory",
    "WithholdingTaxResult",
    "ZeroRatedVAT",
    "calculate_vat",
    "calculate_withholding_tax",
    "calculate_withholding_tax_for_employee",
    "get_calculator",
    # Records
    "ReportPeriod",
    "Sale",
    "SaleItem",
    # Reports
    "BIRReport",
    "ReportType",
    "format_report_summary",
    "generate_bir_report",
    # Form Generator
    "Form2550MData",
    "FormType",
    "GeneratedForm",
    "TaxFormGenerator",
    "generate_bir_form_2550m",
]
