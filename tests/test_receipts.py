"""
Tests for Receipts Module

Tests for OR numbering, BIR receipt validation and sales journal entries.
"""

import threading

import pytest
from datetime import datetime
from decimal import Decimal

from sqlalchemy import create_engine

from receipts import sequence
from receipts.sequence import (
    DatabaseSequenceProvider,
    InMemorySequenceProvider,
    ORNumberGenerator,
    SequenceProvider,
    generate_or_number,
    set_default_sequence_provider,
)
from receipts.validation import BIRReceipt, validate_bir_receipt
from receipts.journal import create_journal_entry
from tax.bir_calculator import calculate_vat


class TestORNumberGenerator:
    """Tests for OR numbering with the in-memory provider."""

    def test_zero_padded_sequence(self):
        generator = ORNumberGenerator(InMemorySequenceProvider())

        assert generator.generate() == "0000000001"
        assert generator.generate() == "0000000002"

    def test_rollover(self):
        """Test the counter wraps from 9999999999 back to 1."""
        generator = ORNumberGenerator(InMemorySequenceProvider(start=9_999_999_999))

        assert generator.generate() == "9999999999"
        assert generator.generate() == "0000000001"
        assert generator.generate() == "0000000002"

    def test_monotonic_and_unique(self):
        generator = ORNumberGenerator(InMemorySequenceProvider(start=500))
        numbers = [int(generator.generate()) for _ in range(1000)]

        assert numbers == list(range(500, 1500))

    def test_concurrent_callers_never_share_a_number(self):
        generator = ORNumberGenerator(InMemorySequenceProvider())
        issued = []
        lock = threading.Lock()

        def issue():
            batch = [generator.generate() for _ in range(250)]
            with lock:
                issued.extend(batch)

        threads = [threading.Thread(target=issue) for _ in range(8)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(issued) == 2000
        assert sorted(int(n) for n in issued) == list(range(1, 2001))

    def test_invalid_start(self):
        with pytest.raises(ValueError):
            InMemorySequenceProvider(start=0)

    def test_out_of_range_provider_value(self):
        class BrokenProvider(SequenceProvider):
            def next_sequence(self) -> int:
                return 0

        with pytest.raises(ValueError):
            ORNumberGenerator(BrokenProvider()).generate()

    def test_module_level_generator(self, monkeypatch):
        monkeypatch.setattr(sequence, "_default_generator", None)

        assert generate_or_number() == "0000000001"

        set_default_sequence_provider(InMemorySequenceProvider(start=42))
        assert generate_or_number() == "0000000042"
        assert generate_or_number() == "0000000043"


class TestDatabaseSequenceProvider:
    """Tests for the database-backed provider on SQLite."""

    @pytest.fixture
    def engine(self):
        engine = create_engine("sqlite://")
        yield engine
        engine.dispose()

    def test_sequence_starts_at_one(self, engine):
        provider = DatabaseSequenceProvider(engine)

        assert provider.current_value() == 0
        assert [provider.next_sequence() for _ in range(3)] == [1, 2, 3]
        assert provider.current_value() == 3

    def test_counter_survives_new_provider(self, engine):
        """Test a second provider continues the stored counter."""
        DatabaseSequenceProvider(engine).next_sequence()
        DatabaseSequenceProvider(engine).next_sequence()

        generator = ORNumberGenerator(DatabaseSequenceProvider(engine))
        assert generator.generate() == "0000000003"

    def test_named_counters_are_independent(self, engine):
        receipts = DatabaseSequenceProvider(engine, name="official_receipt")
        invoices = DatabaseSequenceProvider(engine, name="sales_invoice", start=100)

        assert receipts.next_sequence() == 1
        assert invoices.next_sequence() == 100
        assert receipts.next_sequence() == 2

    def test_rollover(self, engine):
        provider = DatabaseSequenceProvider(engine, start=9_999_999_999)

        assert provider.next_sequence() == 9_999_999_999
        assert provider.next_sequence() == 1

    def test_url_argument(self):
        provider = DatabaseSequenceProvider("sqlite://")
        assert provider.next_sequence() == 1


class TestBIRReceiptValidation:
    """Tests for BIR receipt validation."""

    def test_valid_receipt(self, valid_receipt):
        validation = validate_bir_receipt(valid_receipt)

        assert validation.is_valid is True
        assert validation.errors == []

    def test_missing_required_fields(self, valid_receipt):
        del valid_receipt["tin"]
        del valid_receipt["orNumber"]

        validation = validate_bir_receipt(valid_receipt)

        assert validation.is_valid is False
        assert "TIN is required" in validation.errors
        assert "OR Number is required" in validation.errors

    def test_all_errors_reported(self):
        """Test validation collects every violation instead of stopping early."""
        validation = validate_bir_receipt(BIRReceipt())

        assert validation.errors == [
            "OR Number is required",
            "TIN is required",
            "Business name is required",
            "Business address is required",
            "Date is required",
            "At least one item is required",
        ]

    def test_invalid_tin(self, valid_receipt):
        valid_receipt["tin"] = "invalid-tin"
        assert "Invalid TIN format" in validate_bir_receipt(valid_receipt).errors

    def test_invalid_customer_tin(self, valid_receipt):
        valid_receipt["customerTIN"] = "987-654-321"
        assert "Invalid customer TIN format" in validate_bir_receipt(valid_receipt).errors

    def test_vat_mismatch(self, valid_receipt):
        valid_receipt["vatAmount"] = 100

        errors = validate_bir_receipt(valid_receipt).errors
        assert "VAT calculation mismatch" in errors

    def test_total_mismatch(self, valid_receipt):
        valid_receipt["totalAmount"] = 230
        assert validate_bir_receipt(valid_receipt).errors == ["Total amount calculation mismatch"]

    def test_one_centavo_tolerance(self, valid_receipt):
        valid_receipt["vatAmount"] = 24.01
        valid_receipt["totalAmount"] = 223.99

        assert validate_bir_receipt(valid_receipt).is_valid

    def test_exempt_amount_in_total(self, valid_receipt):
        valid_receipt["exemptAmount"] = 100
        assert "Total amount calculation mismatch" in validate_bir_receipt(valid_receipt).errors

        valid_receipt["totalAmount"] = 324
        assert validate_bir_receipt(valid_receipt).is_valid

    def test_item_errors(self, valid_receipt):
        valid_receipt["items"] = [
            {"description": "", "quantity": 0, "unitPrice": 100, "amount": 0},
            {"description": "Widget", "quantity": 2, "unitPrice": 0, "amount": 0},
            {"description": "Gadget", "quantity": 2, "unitPrice": 100, "amount": 250},
        ]

        errors = validate_bir_receipt(valid_receipt).errors
        assert errors == [
            "Item 1: Description is required",
            "Item 1: Quantity must be greater than 0",
            "Item 2: Unit price must be greater than 0",
            "Item 3: Amount calculation mismatch",
        ]

    def test_unparseable_vatable_amount(self, valid_receipt):
        """Test a bad vatable amount is reported rather than raised."""
        valid_receipt["vatableAmount"] = "two hundred"

        validation = validate_bir_receipt(valid_receipt)
        assert validation.errors == ["Vatable amount must be a non-negative number"]

    def test_to_dict(self, valid_receipt):
        assert validate_bir_receipt(valid_receipt).to_dict() == {"is_valid": True, "errors": []}


class TestJournalEntry:
    """Tests for sales journal entries."""

    def test_cash_sale(self, sample_sale):
        """Test a cash sale produces Cash, Sales Revenue and VAT Payable lines."""
        entry = create_journal_entry(sample_sale)

        assert len(entry.lines) == 3
        cash, revenue, vat = entry.lines

        assert cash.account == "Cash"
        assert cash.debit == Decimal("1120")
        assert cash.credit == Decimal("0")
        assert cash.description == "CASH received for sale INV-2024-0001"
        assert revenue.account == "Sales Revenue"
        assert revenue.credit == Decimal("1000")
        assert revenue.debit == Decimal("0")
        assert vat.account == "VAT Payable"
        assert vat.credit == Decimal("120")

        assert entry.is_balanced
        assert entry.total_debit == Decimal("1120.00")

    def test_entry_metadata(self, sample_sale):
        entry = create_journal_entry(sample_sale)

        assert entry.id.startswith("journal-")
        assert entry.reference == "INV-2024-0001"
        assert entry.description == "Sales transaction - INV-2024-0001"
        assert entry.date == datetime(2024, 1, 15, 10, 30)
        assert entry.created_by == "user-1"
        assert entry.id != create_journal_entry(sample_sale).id

    def test_card_sale(self, sample_sale):
        sample_sale["paymentMethod"] = "card"
        entry = create_journal_entry(sample_sale)

        assert entry.lines[0].account == "Card Receivables"
        assert entry.lines[0].debit == Decimal("1120")
        assert entry.lines[0].description.startswith("CARD received")

    def test_zero_tax_has_two_lines(self, sample_sale):
        sample_sale.update(tax=0, total=1000)
        entry = create_journal_entry(sample_sale)

        assert [line.account for line in entry.lines] == ["Cash", "Sales Revenue"]
        assert entry.is_balanced

    def test_discount_line(self, sample_sale):
        """Test a discount is debited to Sales Discounts."""
        sample_sale.update(discount=100, tax=108, total=1008)
        entry = create_journal_entry(sample_sale)

        accounts = [line.account for line in entry.lines]
        assert accounts == ["Cash", "Sales Discounts", "Sales Revenue", "VAT Payable"]
        assert entry.lines[1].debit == Decimal("100")
        assert entry.total_debit == entry.total_credit == Decimal("1108.00")

    def test_unbalanced_sale(self, sample_sale):
        sample_sale["total"] = 1100
        with pytest.raises(ValueError):
            create_journal_entry(sample_sale)

    def test_discount_already_in_subtotal(self, sample_sale):
        """Test a POS sale with a discounted subtotal books no discount line."""
        sample_sale.update(subtotal=900, tax=108, total=1008, discount=100)
        entry = create_journal_entry(sample_sale)

        assert [line.account for line in entry.lines] == ["Cash", "Sales Revenue", "VAT Payable"]
        assert entry.lines[0].debit == Decimal("1008.00")
        assert entry.lines[1].credit == Decimal("900.00")
        assert entry.is_balanced

    def test_float_amounts_rounded_to_centavos(self, sample_sale):
        """Test float arithmetic from the POS does not break the balance."""
        subtotal = 0.1 + 0.2
        tax = subtotal * 0.12
        sample_sale.update(subtotal=subtotal, tax=tax, total=subtotal + tax)
        entry = create_journal_entry(sample_sale)

        assert [line.debit + line.credit for line in entry.lines] == [
            Decimal("0.34"), Decimal("0.30"), Decimal("0.04"),
        ]
        assert entry.is_balanced

    def test_unrounded_tax_lines_have_centavo_precision(self, sample_sale):
        subtotal = 999.99
        tax = subtotal * 0.12
        sample_sale.update(subtotal=subtotal, tax=tax, total=subtotal + tax)
        entry = create_journal_entry(sample_sale)

        assert entry.lines[0].debit == Decimal("1119.99")
        assert entry.lines[2].credit == Decimal("120.00")
        for line in entry.lines:
            assert line.debit == line.debit.quantize(Decimal("0.01"))
            assert line.credit == line.credit.quantize(Decimal("0.01"))

    def test_rounding_residual_goes_to_revenue(self, sample_sale):
        """Test a one-centavo rounding gap is absorbed by Sales Revenue."""
        # 0.125 -> 0.13 and 0.015 -> 0.02, against a stated total of 0.14
        sample_sale.update(subtotal="0.125", tax="0.015", total="0.14")
        entry = create_journal_entry(sample_sale)

        assert entry.lines[1].account == "Sales Revenue"
        assert entry.lines[1].credit == Decimal("0.12")
        assert entry.total_debit == entry.total_credit == Decimal("0.14")

    @pytest.mark.parametrize("subtotal", ["0.01", "99.99", "1234.56", "100000", "999999999.99"])
    def test_balanced_for_computed_vat(self, sample_sale, subtotal):
        vat = calculate_vat(subtotal)
        sample_sale.update(subtotal=vat.vatable_amount, tax=vat.vat_amount, total=vat.total_amount)

        entry = create_journal_entry(sample_sale)
        assert entry.total_debit == entry.total_credit

    def test_to_dict(self, sample_sale):
        data = create_journal_entry(sample_sale).to_dict()

        assert data["lines"][0] == {
            "account": "Cash",
            "debit": 1120.0,
            "credit": 0.0,
            "description": "CASH received for sale INV-2024-0001",
        }
        assert data["created_by"] == "user-1"
