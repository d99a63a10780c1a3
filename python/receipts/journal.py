"""
Sales Journal Module

Builds double-entry journal entries for completed sales.
"""

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from tax.money import CENTAVO, ZERO, round_centavo, sum_amounts
from tax.records import Sale

logger = logging.getLogger(__name__)

TOLERANCE = CENTAVO

CASH_ACCOUNT = "Cash"
CARD_ACCOUNT = "Card Receivables"
SALES_REVENUE_ACCOUNT = "Sales Revenue"
SALES_DISCOUNTS_ACCOUNT = "Sales Discounts"
VAT_PAYABLE_ACCOUNT = "VAT Payable"


@dataclass(frozen=True)
class JournalLine:
    """Single debit or credit line."""

    account: str
    debit: Decimal = ZERO
    credit: Decimal = ZERO
    description: str = ""

    def to_dict(self) -> dict:
        return {
            "account": self.account,
            "debit": float(self.debit),
            "credit": float(self.credit),
            "description": self.description,
        }


@dataclass(frozen=True)
class JournalEntry:
    """Balanced journal entry."""

    id: str
    date: datetime
    reference: str
    description: str
    lines: list[JournalLine]
    created_by: str | None = None
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def total_debit(self) -> Decimal:
        return sum_amounts(line.debit for line in self.lines)

    @property
    def total_credit(self) -> Decimal:
        return sum_amounts(line.credit for line in self.lines)

    @property
    def is_balanced(self) -> bool:
        return self.total_debit == self.total_credit

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "date": self.date.isoformat(),
            "reference": self.reference,
            "description": self.description,
            "lines": [line.to_dict() for line in self.lines],
            "created_by": self.created_by,
            "created_at": self.created_at.isoformat(),
        }


def create_journal_entry(sale: Sale | dict) -> JournalEntry:
    """Create the journal entry for a sale.

    Debits the sale total to Cash (or Card Receivables for card payments);
    credits the subtotal to Sales Revenue and the tax, when non-zero, to
    VAT Payable. Amounts are rounded to centavos first.

    A discount is debited to Sales Discounts only when the subtotal is
    gross of it (subtotal + tax - discount == total). When the subtotal is
    already discounted the discount is informational and not booked. A
    residual of at most one centavo left by rounding is absorbed by Sales
    Revenue.

    Args:
        sale: Completed sale

    Returns:
        JournalEntry

    Raises:
        ValueError: If the amounts differ by more than one centavo
    """
    sale = Sale.coerce(sale)
    invoice = sale.invoice_number

    subtotal = round_centavo(sale.subtotal)
    tax = round_centavo(sale.tax)
    total = round_centavo(sale.total)
    discount = round_centavo(sale.discount)

    credits = subtotal + tax
    if discount > 0 and abs(credits - discount - total) <= TOLERANCE:
        debits = total + discount
    else:
        discount = ZERO
        debits = total

    residual = debits - credits
    if abs(residual) > TOLERANCE:
        raise ValueError(
            f"Sale {sale.id or invoice} does not balance: "
            f"total {total} (discount {round_centavo(sale.discount)}) vs "
            f"subtotal {subtotal} + tax {tax}"
        )
    revenue = subtotal + residual

    cash_account = CARD_ACCOUNT if sale.payment_method.lower() == "card" else CASH_ACCOUNT

    lines = [
        JournalLine(
            account=cash_account,
            debit=total,
            description=f"{sale.payment_method.upper()} received for sale {invoice}",
        ),
    ]

    if discount > 0:
        lines.append(JournalLine(
            account=SALES_DISCOUNTS_ACCOUNT,
            debit=discount,
            description=f"Discount on invoice {invoice}",
        ))

    lines.append(JournalLine(
        account=SALES_REVENUE_ACCOUNT,
        credit=revenue,
        description=f"Sales revenue for invoice {invoice}",
    ))

    if tax > 0:
        lines.append(JournalLine(
            account=VAT_PAYABLE_ACCOUNT,
            credit=tax,
            description=f"VAT for invoice {invoice}",
        ))

    entry = JournalEntry(
        id=f"journal-{uuid.uuid4()}",
        date=sale.created_at,
        reference=invoice,
        description=f"Sales transaction - {invoice}",
        lines=lines,
        created_by=sale.cashier_id,
    )

    logger.debug(
        f"Journal entry {entry.id} for sale {sale.id}: "
        f"{len(lines)} lines, {entry.total_debit} debit / {entry.total_credit} credit"
    )
    return entry
