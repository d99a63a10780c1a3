"""
Statutory Identifier Validators

Format checks for BIR TIN, SSS, PhilHealth and Pag-IBIG numbers. Each
validator returns a boolean; callers collect failures into error lists.
"""

import re

TIN_PATTERN = re.compile(r"^[0-9]{3}-[0-9]{3}-[0-9]{3}-[0-9]{3}$")
SSS_PATTERN = re.compile(r"^[0-9]{2}-[0-9]{7}-[0-9]$")
PHILHEALTH_PATTERN = re.compile(r"^[0-9]{2}-[0-9]{9}-[0-9]$")
PAGIBIG_PATTERN = re.compile(r"^[0-9]{4}-[0-9]{4}-[0-9]{4}$")


def _matches(pattern: re.Pattern, value) -> bool:
    if not isinstance(value, str):
        return False
    # $ alone would accept a trailing newline
    return pattern.fullmatch(value) is not None


def validate_tin(tin: str) -> bool:
    """Validate a TIN in XXX-XXX-XXX-BBB form (BBB is the branch code)."""
    if not _matches(TIN_PATTERN, tin):
        return False

    branch_code = int(tin.split("-")[3])
    return 0 <= branch_code <= 999


def validate_sss(sss_number: str) -> bool:
    """Validate an SSS number in XX-XXXXXXX-X form."""
    return _matches(SSS_PATTERN, sss_number)


def validate_philhealth(philhealth_number: str) -> bool:
    """Validate a PhilHealth number in XX-XXXXXXXXX-X form."""
    return _matches(PHILHEALTH_PATTERN, philhealth_number)


def validate_pagibig(pagibig_number: str) -> bool:
    """Validate a Pag-IBIG MID number in XXXX-XXXX-XXXX form."""
    return _matches(PAGIBIG_PATTERN, pagibig_number)
