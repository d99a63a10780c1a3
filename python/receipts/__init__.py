"""
Official Receipts Module

OR numbering, BIR receipt validation and sales journal entries.
"""

from .sequence import (
    DatabaseSequenceProvider,
    InMemorySequenceProvider,
    ORNumberGenerator,
    SequenceProvider,
    generate_or_number,
    get_or_number_generator,
    set_default_sequence_provider,
)
from .validation import (
    BIRReceipt,
    BIRReceiptItem,
    ReceiptValidation,
    validate_bir_receipt,
)
from .journal import (
    JournalEntry,
    JournalLine,
    create_journal_entry,
)

__all__ = [
    # Sequence
    "DatabaseSequenceProvider",
    "InMemorySequenceProvider",
    "ORNumberGenerator",
    "SequenceProvider",
    "generate_or_number",
    "get_or_number_generator",
    "set_default_sequence_provider",
    # Validation
    "BIRReceipt",
    "BIRReceiptItem",
    "ReceiptValidation",
    "validate_bir_receipt",
    # Journal
    "JournalEntry",
    "JournalLine",
    "create_journal_entry",
]
