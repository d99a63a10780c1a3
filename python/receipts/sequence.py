"""
Official Receipt Sequence Module

Issues BIR official-receipt (OR) numbers from an injected sequence
provider. Providers return the next integer of a counter that runs from 1
to 9,999,999,999 and wraps back to 1.
"""

import logging
import os
import threading
from abc import ABC, abstractmethod

from sqlalchemy import (
    BigInteger,
    Column,
    MetaData,
    String,
    Table,
    create_engine,
    insert,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.exc import IntegrityError

logger = logging.getLogger(__name__)

OR_NUMBER_WIDTH = 10
MAX_SEQUENCE = 10 ** OR_NUMBER_WIDTH - 1

# Database URL from environment
DATABASE_URL = os.getenv(
    "FBMS_DATABASE_URL",
    f"postgresql://{os.getenv('POSTGRES_USER', 'fbms')}:"
    f"{os.getenv('POSTGRES_PASSWORD', 'password')}@"
    f"{os.getenv('POSTGRES_HOST', 'localhost')}:"
    f"{os.getenv('POSTGRES_PORT', '5432')}/"
    f"{os.getenv('POSTGRES_DB', 'fbms')}"
)

metadata = MetaData()

# One row per named counter; last_value is the most recently issued number
or_sequences = Table(
    "or_sequences",
    metadata,
    Column("name", String(50), primary_key=True),
    Column("last_value", BigInteger, nullable=False),
)


def _advance(current: int, maximum: int, name: str) -> int:
    """Return the number after current, wrapping to 1 past maximum."""
    if current >= maximum:
        logger.warning(f"Sequence '{name}' rolled over after {maximum}, restarting at 1")
        return 1
    return current + 1


class SequenceProvider(ABC):
    """Source of OR sequence values."""

    @abstractmethod
    def next_sequence(self) -> int:
        """Return the next sequence value (1..9,999,999,999)."""
        pass


class InMemorySequenceProvider(SequenceProvider):
    """Process-local counter, safe for concurrent threads.

    Values are lost when the process exits; use DatabaseSequenceProvider
    when several processes or hosts issue receipts.
    """

    def __init__(self, start: int = 1, maximum: int = MAX_SEQUENCE):
        if not 1 <= start <= maximum:
            raise ValueError(f"start must be between 1 and {maximum}, got {start}")
        self.maximum = maximum
        self._next = start
        self._lock = threading.Lock()

    def next_sequence(self) -> int:
        with self._lock:
            value = self._next
            self._next = _advance(value, self.maximum, "in-memory")
        return value


class DatabaseSequenceProvider(SequenceProvider):
    """Counter row in a relational database, locked for each increment.

    Each call runs in its own transaction and takes a row lock
    (SELECT ... FOR UPDATE) so concurrent issuers never share a number.
    """

    def __init__(
        self,
        engine: Engine | str | None = None,
        name: str = "official_receipt",
        start: int = 1,
        maximum: int = MAX_SEQUENCE,
    ):
        """Initialize the provider.

        Args:
            engine: SQLAlchemy engine or database URL (FBMS_DATABASE_URL if None)
            name: Counter name, one row per receipt series
            start: First number issued by a new counter
            maximum: Last number before rollover
        """
        if not 1 <= start <= maximum:
            raise ValueError(f"start must be between 1 and {maximum}, got {start}")

        if engine is None:
            engine = DATABASE_URL
        if isinstance(engine, str):
            engine = create_engine(engine, pool_pre_ping=True)

        self.engine = engine
        self.name = name
        self.maximum = maximum

        metadata.create_all(self.engine, tables=[or_sequences])
        self._ensure_counter(start)

    def _ensure_counter(self, start: int) -> None:
        """Create the counter row unless another issuer already did."""
        with self.engine.connect() as conn:
            exists = conn.execute(
                select(or_sequences.c.name).where(or_sequences.c.name == self.name)
            ).first()
        if exists:
            return

        try:
            with self.engine.begin() as conn:
                conn.execute(insert(or_sequences).values(name=self.name, last_value=start - 1))
            logger.info(f"Created OR sequence '{self.name}' starting at {start}")
        except IntegrityError:
            logger.debug(f"OR sequence '{self.name}' created concurrently")

    def next_sequence(self) -> int:
        with self.engine.begin() as conn:
            current = conn.execute(
                select(or_sequences.c.last_value)
                .where(or_sequences.c.name == self.name)
                .with_for_update()
            ).scalar_one()

            value = _advance(current, self.maximum, self.name)
            conn.execute(
                update(or_sequences)
                .where(or_sequences.c.name == self.name)
                .values(last_value=value)
            )

        logger.debug(f"Allocated OR sequence '{self.name}' value {value}")
        return value

    def current_value(self) -> int:
        """Return the last issued number without allocating (0 if none)."""
        with self.engine.connect() as conn:
            return conn.execute(
                select(or_sequences.c.last_value).where(or_sequences.c.name == self.name)
            ).scalar_one()


class ORNumberGenerator:
    """Formats provider values as 10-digit zero-padded OR numbers."""

    def __init__(self, provider: SequenceProvider | None = None):
        self.provider = provider or InMemorySequenceProvider()

    def generate(self) -> str:
        value = self.provider.next_sequence()
        if not 1 <= value <= MAX_SEQUENCE:
            raise ValueError(f"Sequence value out of range for an OR number: {value}")
        return f"{value:0{OR_NUMBER_WIDTH}d}"


_default_generator: ORNumberGenerator | None = None
_default_lock = threading.Lock()


def set_default_sequence_provider(provider: SequenceProvider) -> None:
    """Replace the provider used by generate_or_number()."""
    global _default_generator
    with _default_lock:
        _default_generator = ORNumberGenerator(provider)


def get_or_number_generator() -> ORNumberGenerator:
    """Return the process-wide generator, creating an in-memory one if unset."""
    global _default_generator
    with _default_lock:
        if _default_generator is None:
            _default_generator = ORNumberGenerator()
        return _default_generator


def generate_or_number() -> str:
    """Issue the next OR number from the process-wide generator."""
    return get_or_number_generator().generate()
