"""
Transaction Records Module

Sale records handed over by the point-of-sale module and the reporting
period used by period-bounded BIR reports.
"""

import calendar
from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any

from .bir_calculator import VATTreatment
from .money import ZERO, coerce_date, ensure_amount


def _pick(data: dict, *keys: str, default: Any = None) -> Any:
    """Return the first present key; records arrive in snake_case or camelCase."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass(frozen=True)
class SaleItem:
    """Single line of a sale."""

    product_name: str
    quantity: Decimal
    price: Decimal
    total: Decimal
    product_id: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "SaleItem":
        return cls(
            product_name=_pick(data, "product_name", "productName", default=""),
            quantity=ensure_amount(_pick(data, "quantity", default=0), "quantity"),
            price=ensure_amount(_pick(data, "price", "unit_price", "unitPrice", default=0), "price"),
            total=ensure_amount(_pick(data, "total", "amount", default=0), "total"),
            product_id=_pick(data, "product_id", "productId"),
        )


@dataclass(frozen=True)
class Sale:
    """Completed point-of-sale transaction."""

    id: str
    subtotal: Decimal
    tax: Decimal
    total: Decimal
    payment_method: str
    created_at: datetime
    invoice_number: str = ""
    items: list[SaleItem] = field(default_factory=list)
    discount: Decimal = ZERO
    customer_id: str | None = None
    cashier_id: str | None = None
    vat_treatment: VATTreatment = VATTreatment.VATABLE

    @classmethod
    def from_dict(cls, data: dict) -> "Sale":
        """Build a Sale from an application record.

        Raises:
            InvalidAmount: If a money field is negative or not numeric
            ValueError: If the sale date is missing or unparseable
        """
        created_at = _pick(data, "created_at", "createdAt", "date")
        if isinstance(created_at, str):
            try:
                created_at = datetime.fromisoformat(created_at.strip().replace("Z", "+00:00"))
            except ValueError:
                raise ValueError(f"Cannot parse sale date: {created_at}")
        elif isinstance(created_at, date) and not isinstance(created_at, datetime):
            created_at = datetime(created_at.year, created_at.month, created_at.day)
        if not isinstance(created_at, datetime):
            raise ValueError("Sale date is required")

        return cls(
            id=str(_pick(data, "id", default="")),
            invoice_number=str(_pick(data, "invoice_number", "invoiceNumber", default="")),
            items=[
                item if isinstance(item, SaleItem) else SaleItem.from_dict(item)
                for item in _pick(data, "items", default=[])
            ],
            subtotal=ensure_amount(_pick(data, "subtotal", default=0), "subtotal"),
            tax=ensure_amount(_pick(data, "tax", default=0), "tax"),
            total=ensure_amount(_pick(data, "total", default=0), "total"),
            discount=ensure_amount(_pick(data, "discount", default=0), "discount"),
            payment_method=str(_pick(data, "payment_method", "paymentMethod", default="cash")),
            created_at=created_at,
            customer_id=_pick(data, "customer_id", "customerId"),
            cashier_id=_pick(data, "cashier_id", "cashierId", "created_by", "createdBy"),
            vat_treatment=VATTreatment(_pick(data, "vat_treatment", "vatTreatment", default="vatable")),
        )

    @classmethod
    def coerce(cls, value: "Sale | dict") -> "Sale":
        return value if isinstance(value, cls) else cls.from_dict(value)


@dataclass(frozen=True)
class ReportPeriod:
    """Calendar period of a BIR report: a month, a quarter or a whole year."""

    year: int
    month: int | None = None
    quarter: int | None = None

    def __post_init__(self):
        if self.month is not None and not 1 <= self.month <= 12:
            raise ValueError(f"Invalid period month: {self.month}")
        if self.quarter is not None and not 1 <= self.quarter <= 4:
            raise ValueError(f"Invalid period quarter: {self.quarter}")

    @classmethod
    def from_dict(cls, data: dict) -> "ReportPeriod":
        return cls(year=int(data["year"]), month=data.get("month"), quarter=data.get("quarter"))

    @classmethod
    def coerce(cls, value: "ReportPeriod | dict") -> "ReportPeriod":
        return value if isinstance(value, cls) else cls.from_dict(value)

    def matches(self, value: Any) -> bool:
        """Check whether a record date falls in this period.

        Only the calendar month and year are compared. A period without a
        month covers the whole year.
        """
        record_date = coerce_date(value)
        if record_date is None:
            return False
        if self.month:
            return record_date.month == self.month and record_date.year == self.year
        return record_date.year == self.year

    @property
    def label(self) -> str:
        """Tax period as printed on returns: M/YYYY, or YYYY for a year."""
        if self.month:
            return f"{self.month}/{self.year}"
        return str(self.year)

    @property
    def end_date(self) -> date:
        if self.month:
            last_month = self.month
        elif self.quarter:
            last_month = self.quarter * 3
        else:
            last_month = 12
        return date(self.year, last_month, calendar.monthrange(self.year, last_month)[1])

    def to_dict(self) -> dict:
        return {"year": self.year, "month": self.month, "quarter": self.quarter}
