"""
Values -- Immutable, self-validating monetary value object.

Responsibility:
    Provides Money, the fixed-point amount used for every monetary field in
    domain logic.  Replaces raw Decimal wherever amounts flow between
    adapters, entries and the posting engine.

Architecture position:
    Kernel > Domain -- pure functional core, zero I/O.

Invariants enforced:
    - Amounts are Decimal, never float.
    - Every Money is exact at MONEY_DECIMAL_PLACES.  A value with more
      precision is rejected (InvalidAmountError), never silently truncated.
    - multiply_by_rate() rounds once, half-up, at the end of the computation.

Failure modes:
    - TypeError when constructed from a float.
    - InvalidAmountError on over-precision or unparseable amounts, and from
      require_non_negative() for negative debit/credit values.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from ledger_kernel.db.types import MONEY_DECIMAL_PLACES, is_at_scale, round_money
from ledger_kernel.exceptions import InvalidAmountError

_QUANTUM = Decimal(1).scaleb(-MONEY_DECIMAL_PLACES)


def _to_decimal(value: Decimal | str | int) -> Decimal:
    if isinstance(value, float):
        raise TypeError(f"Money cannot be built from float: {value!r}")
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip())
    except InvalidOperation as exc:
        raise InvalidAmountError(str(value), "not a decimal number") from exc


@dataclass(frozen=True, slots=True)
class Money:
    """
    Monetary amount at the fixed money scale.

    Contract:
        The amount is a Decimal quantized to MONEY_DECIMAL_PLACES.  Money may
        be negative (balances and differences can be); debit and credit
        fields reject negatives through require_non_negative().

    Guarantees:
        - Immutable and hashable (frozen dataclass with slots).
        - add/subtract are exact.
        - multiply_by_rate rounds half-up exactly once.

    Non-goals:
        - Does NOT carry or convert currencies; the ledger is single-currency
          and the currency code is display-only.
    """

    amount: Decimal

    def __post_init__(self) -> None:
        amount = _to_decimal(self.amount)
        if not amount.is_finite():
            raise InvalidAmountError(str(amount), "amount must be finite")
        try:
            at_scale = is_at_scale(amount)
            quantized = amount.quantize(_QUANTUM)
        except InvalidOperation as exc:
            raise InvalidAmountError(str(amount), "too many digits") from exc
        if not at_scale:
            raise InvalidAmountError(
                str(amount),
                f"more than {MONEY_DECIMAL_PLACES} decimal places",
            )
        object.__setattr__(self, "amount", quantized)

    @classmethod
    def of(cls, amount: Decimal | str | int) -> Money:
        """
        Factory method for creating Money.

        Raises:
            TypeError: If amount is a float.
            InvalidAmountError: If amount has more than two decimal places.
        """
        return cls(_to_decimal(amount))

    @classmethod
    def zero(cls) -> Money:
        return cls(Decimal("0"))

    @classmethod
    def from_computation(cls, value: Decimal) -> Money:
        """
        Round the raw result of a Decimal computation chain into Money.

        This is the single rounding step (half-up) for chained arithmetic:
        compute with plain Decimals, then call this once at the end.
        """
        value = _to_decimal(value)
        try:
            rounded = round_money(value)
        except InvalidOperation as exc:
            raise InvalidAmountError(str(value), "too many digits") from exc
        return cls(rounded)

    # ------------------------------------------------------------------
    # Arithmetic
    # ------------------------------------------------------------------

    def add(self, other: Money) -> Money:
        return Money(self.amount + _coerce(other).amount)

    def subtract(self, other: Money) -> Money:
        return Money(self.amount - _coerce(other).amount)

    def negate(self) -> Money:
        return Money(-self.amount)

    def multiply_by_rate(self, rate: Decimal | str | int) -> Money:
        """
        Multiply by a rate (e.g. Decimal("0.15") for 15%).

        The product is computed exactly and rounded once, half-up, to the
        money scale.
        """
        return Money.from_computation(self.amount * _to_decimal(rate))

    def __add__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: Money) -> Money:
        if not isinstance(other, Money):
            return NotImplemented
        return self.subtract(other)

    def __neg__(self) -> Money:
        return self.negate()

    # ------------------------------------------------------------------
    # Comparison
    # ------------------------------------------------------------------

    @property
    def is_zero(self) -> bool:
        return self.amount == 0

    @property
    def is_positive(self) -> bool:
        return self.amount > 0

    @property
    def is_negative(self) -> bool:
        return self.amount < 0

    def compare(self, other: Money) -> int:
        """Return -1, 0 or 1 as self is less than, equal to or greater than other."""
        other = _coerce(other)
        if self.amount < other.amount:
            return -1
        if self.amount > other.amount:
            return 1
        return 0

    def __lt__(self, other: Money) -> bool:
        return self.compare(other) < 0

    def __le__(self, other: Money) -> bool:
        return self.compare(other) <= 0

    def __gt__(self, other: Money) -> bool:
        return self.compare(other) > 0

    def __ge__(self, other: Money) -> bool:
        return self.compare(other) >= 0

    # ------------------------------------------------------------------
    # Validation / display
    # ------------------------------------------------------------------

    def require_non_negative(self, field: str) -> Money:
        """Return self, or raise InvalidAmountError if negative."""
        if self.is_negative:
            raise InvalidAmountError(str(self.amount), f"{field} must not be negative")
        return self

    def to_display_string(self, currency: str | None = None) -> str:
        """
        Human-readable form with thousands separators.

        Examples:
            Money.of("1150").to_display_string() -> "1,150.00"
            Money.of("-5").to_display_string("SAR") -> "SAR -5.00"
        """
        text = f"{self.amount:,.{MONEY_DECIMAL_PLACES}f}"
        return f"{currency} {text}" if currency else text

    def __str__(self) -> str:
        return str(self.amount)


def _coerce(value: Money | Decimal | str | int) -> Money:
    if isinstance(value, Money):
        return value
    return Money.of(value)
