"""
Module: ledger_kernel.db.types
Responsibility: Column types and helpers for monetary storage.  Centralizes
    the money scale, the rounding rule, and the minor-unit encoding so that
    every model and service stores amounts identically.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.

Invariants enforced:
    - Amounts are stored as exact integers of minor units (cents at scale 2).
      No binary floating value is ever written or read.
    - round_money() is the only sanctioned rounding function: half-up to
      MONEY_DECIMAL_PLACES.
    - Binding a value with more precision than the scale is refused rather
      than truncated.

Failure modes:
    - ValueError when a bound value carries more than MONEY_DECIMAL_PLACES
      decimal places or is a float.
"""

from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import BigInteger
from sqlalchemy.types import TypeDecorator

MONEY_DECIMAL_PLACES = 2
DEFAULT_ROUNDING = ROUND_HALF_UP

_QUANTUM = Decimal(1).scaleb(-MONEY_DECIMAL_PLACES)


def round_money(
    value: Decimal,
    decimal_places: int = MONEY_DECIMAL_PLACES,
    rounding: str = DEFAULT_ROUNDING,
) -> Decimal:
    """
    Round a monetary value to the given decimal places (half-up by default).

    Callers apply this once at the end of a computation chain, never per
    intermediate step.
    """
    return value.quantize(Decimal(1).scaleb(-decimal_places), rounding=rounding)


def is_at_scale(value: Decimal, decimal_places: int = MONEY_DECIMAL_PLACES) -> bool:
    """True if value has no significant digits beyond decimal_places."""
    return value == value.quantize(Decimal(1).scaleb(-decimal_places))


def to_minor_units(value: Decimal | int) -> int:
    """
    Convert a major-unit amount to an integer count of minor units.

    Example:
        to_minor_units(Decimal("10.50")) -> 1050
    """
    if isinstance(value, float):
        raise ValueError(f"Float amounts are not accepted: {value!r}")
    value = Decimal(value)
    if not is_at_scale(value):
        raise ValueError(
            f"Amount {value} exceeds {MONEY_DECIMAL_PLACES} decimal places"
        )
    return int(value.scaleb(MONEY_DECIMAL_PLACES))


def from_minor_units(value: int) -> Decimal:
    """
    Convert an integer count of minor units back to a major-unit Decimal.

    Example:
        from_minor_units(1050) -> Decimal("10.50")
    """
    return Decimal(value).scaleb(-MONEY_DECIMAL_PLACES).quantize(_QUANTUM)


class MoneyAmount(TypeDecorator):
    """
    Decimal amount stored as a BIGINT of minor units.

    Contract:
        Transparently converts between a Decimal at scale 2 and its integer
        minor-unit representation, giving exact storage and exact SUM()
        aggregation on every backend.

    Guarantees:
        - process_bind_param: Decimal("11.50") -> 1150.
        - process_result_value: 1150 -> Decimal("11.50").
        - cache_ok=True enables SQLAlchemy statement caching.
    """

    impl = BigInteger
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return to_minor_units(value)

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return from_minor_units(int(value))

