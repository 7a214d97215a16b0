"""
Declarative bases for the ledger tables.

Every model imports from here; this module imports nothing from the rest of
the kernel except the column types.  Annotated ``Decimal`` columns become
MoneyAmount, so a model cannot accidentally store money as a float or a
NUMERIC with the wrong scale.  Rows are keyed by caller-supplied strings
(account codes, deterministic entry ids), so no surrogate key is imposed.
"""

from datetime import date, datetime
from decimal import Decimal
from typing import ClassVar

from sqlalchemy import BigInteger, Date, DateTime, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column

from ledger_kernel.db.types import MoneyAmount


class Base(DeclarativeBase):
    type_annotation_map: ClassVar[dict] = {
        Decimal: MoneyAmount(),
        datetime: DateTime(timezone=True),
        date: Date(),
        int: BigInteger,
    }


class TrackedBase(Base):
    """
    Adds created_at / updated_at.

    The immutability listeners treat these as bookkeeping, not ledger data:
    updated_at may move when a posted entry is marked reversed.
    """

    __abstract__ = True

    created_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )
