"""
Currency Value Module

Exact fixed-point money in integer minor units (cents) with two decimal
places. Amounts are parsed from and formatted to decimal text without ever
passing through float or Decimal, and arithmetic is checked against the
unsigned 64-bit range instead of wrapping.
"""

from dataclasses import dataclass
import re

from .errors import AccountOverdraft, AmountOverflow, BalanceOverflow, InvalidAmount

# Largest balance representable in an unsigned 64-bit integer
MAX_CENTS = 2 ** 64 - 1

CENTS_PER_UNIT = 100

_DIGITS = re.compile(r"[0-9]+")
_MAX_DIGITS = len(str(MAX_CENTS))


def _parse_u64(digits: str, text: str) -> int:
    """Parse an integer segment the way an unsigned 64-bit parse would"""
    if not _DIGITS.fullmatch(digits):
        raise InvalidAmount(text)
    significant = digits.lstrip("0") or "0"
    if len(significant) > _MAX_DIGITS:
        raise InvalidAmount(text)
    value = int(significant)
    if value > MAX_CENTS:
        raise InvalidAmount(text)
    return value


@dataclass(frozen=True, order=True)
class Cents:
    """
    Immutable non-negative amount of minor units.

    Equality and ordering follow the underlying integer. Values outside
    ``0..MAX_CENTS`` cannot be constructed.
    """
    value: int

    def __post_init__(self):
        if isinstance(self.value, bool) or not isinstance(self.value, int):
            raise TypeError(f"Cents value must be an int, got {type(self.value).__name__}")
        if self.value < 0 or self.value > MAX_CENTS:
            raise ValueError(f"Cents value {self.value} outside 0..{MAX_CENTS}")

    @classmethod
    def parse(cls, text: str) -> 'Cents':
        """
        Parse decimal text into cents.

        Accepts digits with an optional ``.`` followed by one or two decimal
        digits. The integer part may be omitted (``.5``); a single decimal
        digit counts as tenths (``.1`` is ten cents).

        Args:
            text: Amount as typed by the user

        Returns:
            Parsed Cents

        Raises:
            InvalidAmount: If the text violates the grammar
            AmountOverflow: If the amount exceeds MAX_CENTS
        """
        if "." not in text:
            integer_part = _parse_u64(text, text)
            value = integer_part * CENTS_PER_UNIT
            if value > MAX_CENTS:
                raise AmountOverflow(text)
            return cls(value)

        int_part_str, dec_part_str = text.rsplit(".", 1)

        if int_part_str:
            integer_part = _parse_u64(int_part_str, text)
        else:
            integer_part = 0  # No leading zero, e.g. ".5"

        if len(dec_part_str) < 1 or len(dec_part_str) > 2:
            raise InvalidAmount(text)
        decimal_part = _parse_u64(dec_part_str, text)
        if len(dec_part_str) == 1:
            decimal_part *= 10  # Tenths only

        scaled = integer_part * CENTS_PER_UNIT
        if scaled > MAX_CENTS:
            raise AmountOverflow(text)
        value = scaled + decimal_part
        if value > MAX_CENTS:
            raise AmountOverflow(text)
        return cls(value)

    @classmethod
    def zero(cls) -> 'Cents':
        return cls(0)

    @property
    def units(self) -> int:
        """Whole base-currency units"""
        return self.value // CENTS_PER_UNIT

    @property
    def fraction(self) -> int:
        """Remaining hundredths"""
        return self.value % CENTS_PER_UNIT

    def format(self) -> str:
        """Render as ``<units>.<two digits>`` with no currency symbol"""
        return f"{self.units}.{self.fraction:02d}"

    def display(self, symbol: str = "$") -> str:
        """Render for people, e.g. ``$40.23``"""
        return f"{symbol}{self.format()}"

    def is_zero(self) -> bool:
        return self.value == 0

    def add(self, other: 'Cents', name: str = "") -> 'Cents':
        """
        Overflow-checked addition.

        Raises:
            BalanceOverflow: If the sum exceeds MAX_CENTS. ``name`` is
                reported as the account receiving the deposit.
        """
        total = self.value + other.value
        if total > MAX_CENTS:
            raise BalanceOverflow(name, other)
        return Cents(total)

    def subtract(self, other: 'Cents', name: str = "") -> 'Cents':
        """
        Underflow-checked subtraction.

        Raises:
            AccountOverdraft: If ``other`` is larger than this value. ``name``
                is reported as the account being withdrawn from.
        """
        if other.value > self.value:
            raise AccountOverdraft(name, self, other)
        return Cents(self.value - other.value)

    def __add__(self, other: 'Cents') -> 'Cents':
        if not isinstance(other, Cents):
            return NotImplemented
        return self.add(other)

    def __sub__(self, other: 'Cents') -> 'Cents':
        if not isinstance(other, Cents):
            return NotImplemented
        return self.subtract(other)

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return self.format()


def parse_cents(text: str) -> Cents:
    """Parse decimal text into Cents (see ``Cents.parse``)"""
    return Cents.parse(text)


def format_cents(amount: Cents) -> str:
    """Format Cents as decimal text with exactly two decimal places"""
    return amount.format()
