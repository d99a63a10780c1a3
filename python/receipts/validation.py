"""
BIR Receipt Validation Module

Structural and arithmetic checks of official receipts before issuance.
"""

import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any

from tax.bir_calculator import BIRCalculator, get_calculator
from tax.money import CENTAVO, InvalidAmount, round_centavo, to_decimal
from tax.validators import validate_tin

logger = logging.getLogger(__name__)

# Stated and computed amounts may differ by at most one centavo
TOLERANCE = CENTAVO


def _get(data: dict, *keys: str, default: Any = None) -> Any:
    for key in keys:
        if data.get(key) is not None:
            return data[key]
    return default


def _as_decimal(value: Any) -> Decimal | None:
    """Parse a stated amount, None when it is not a finite number."""
    try:
        return to_decimal(value)
    except InvalidAmount:
        return None


@dataclass
class BIRReceiptItem:
    """Line item printed on a receipt."""

    description: str = ""
    quantity: Any = 0
    unit_price: Any = 0
    amount: Any = 0

    @classmethod
    def from_dict(cls, data: dict) -> "BIRReceiptItem":
        return cls(
            description=_get(data, "description", default=""),
            quantity=_get(data, "quantity", default=0),
            unit_price=_get(data, "unit_price", "unitPrice", default=0),
            amount=_get(data, "amount", default=0),
        )


@dataclass
class BIRReceipt:
    """Official receipt as submitted for validation.

    Fields are left unchecked on construction so validation can report
    every problem at once.
    """

    or_number: str = ""
    tin: str = ""
    business_name: str = ""
    business_address: str = ""
    date: Any = None
    items: list[BIRReceiptItem] = field(default_factory=list)
    vatable_amount: Any = 0
    vat_amount: Any = 0
    total_amount: Any = 0
    exempt_amount: Any = 0
    zero_rated_amount: Any = 0
    customer_name: str | None = None
    customer_tin: str | None = None
    cashier: str | None = None
    payment_method: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "BIRReceipt":
        return cls(
            or_number=_get(data, "or_number", "orNumber", default=""),
            tin=_get(data, "tin", default=""),
            business_name=_get(data, "business_name", "businessName", default=""),
            business_address=_get(data, "business_address", "businessAddress", default=""),
            date=_get(data, "date"),
            items=[
                item if isinstance(item, BIRReceiptItem) else BIRReceiptItem.from_dict(item)
                for item in _get(data, "items", default=[])
            ],
            vatable_amount=_get(data, "vatable_amount", "vatableAmount", default=0),
            vat_amount=_get(data, "vat_amount", "vatAmount", default=0),
            total_amount=_get(data, "total_amount", "totalAmount", default=0),
            exempt_amount=_get(data, "exempt_amount", "exemptAmount", default=0),
            zero_rated_amount=_get(data, "zero_rated_amount", "zeroRatedAmount", default=0),
            customer_name=_get(data, "customer_name", "customerName"),
            customer_tin=_get(data, "customer_tin", "customerTIN", "customerTin"),
            cashier=_get(data, "cashier"),
            payment_method=_get(data, "payment_method", "paymentMethod"),
        )


@dataclass
class ReceiptValidation:
    """Outcome of validating a receipt."""

    errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def to_dict(self) -> dict:
        return {"is_valid": self.is_valid, "errors": list(self.errors)}


def _mismatch(stated: Decimal | None, expected: Decimal) -> bool:
    return stated is None or abs(stated - expected) > TOLERANCE


def _validate_items(items: list[BIRReceiptItem], errors: list[str]) -> None:
    for index, item in enumerate(items, 1):
        if not item.description:
            errors.append(f"Item {index}: Description is required")

        quantity = _as_decimal(item.quantity)
        unit_price = _as_decimal(item.unit_price)

        if quantity is None or quantity <= 0:
            errors.append(f"Item {index}: Quantity must be greater than 0")

        if unit_price is None or unit_price <= 0:
            errors.append(f"Item {index}: Unit price must be greater than 0")

        if quantity is not None and unit_price is not None:
            expected = round_centavo(quantity * unit_price)
            if _mismatch(_as_decimal(item.amount), expected):
                errors.append(f"Item {index}: Amount calculation mismatch")


def validate_bir_receipt(
    receipt: BIRReceipt | dict,
    calculator: BIRCalculator | None = None
) -> ReceiptValidation:
    """Validate a receipt against BIR requirements.

    Every violation is collected; nothing is raised for bad field values.

    Args:
        receipt: Receipt to check
        calculator: Calculator supplying the VAT rate

    Returns:
        ReceiptValidation with all errors found
    """
    if isinstance(receipt, dict):
        receipt = BIRReceipt.from_dict(receipt)
    calculator = calculator or get_calculator()
    errors: list[str] = []

    # Required fields
    if not receipt.or_number:
        errors.append("OR Number is required")

    if not receipt.tin:
        errors.append("TIN is required")
    elif not validate_tin(receipt.tin):
        errors.append("Invalid TIN format")

    if not receipt.business_name:
        errors.append("Business name is required")

    if not receipt.business_address:
        errors.append("Business address is required")

    if not receipt.date:
        errors.append("Date is required")

    if not receipt.items:
        errors.append("At least one item is required")

    if receipt.customer_tin and not validate_tin(receipt.customer_tin):
        errors.append("Invalid customer TIN format")

    # Amounts
    vatable = _as_decimal(receipt.vatable_amount)
    if vatable is None or vatable < 0:
        errors.append("Vatable amount must be a non-negative number")
    else:
        vat = calculator.calculate_vat(vatable)
        other_sales = [
            _as_decimal(receipt.exempt_amount or 0),
            _as_decimal(receipt.zero_rated_amount or 0),
        ]

        if _mismatch(_as_decimal(receipt.vat_amount), vat.vat_amount):
            errors.append("VAT calculation mismatch")

        if None in other_sales:
            errors.append("Exempt and zero-rated amounts must be numbers")
        elif _mismatch(_as_decimal(receipt.total_amount), vat.total_amount + sum(other_sales)):
            errors.append("Total amount calculation mismatch")

    _validate_items(receipt.items or [], errors)

    result = ReceiptValidation(errors=errors)
    if not result.is_valid:
        logger.warning(f"Receipt {receipt.or_number or '(no OR number)'} failed validation: {errors}")
    return result
