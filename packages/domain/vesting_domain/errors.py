"""Exception types raised by the vesting engine.

Three kinds of failure are distinguished:
- InvalidAmount: a malformed or out-of-range monetary quantity (input error)
- InvalidScheme / InvalidPriceBand: malformed configuration or reference data
- MissingPriceData: historical data is absent for a year the calculation needs

Callers are expected to let the first two propagate. MissingPriceData is a
legitimate runtime condition: fetch the missing years and retry the whole
calculation, or report the data as unavailable.
"""

from typing import Any, Iterable, List, Optional


class VestingDomainError(Exception):
    """Base class for all engine errors."""
    pass


class InvalidAmount(VestingDomainError, ValueError):
    """Raised when an asset amount or price cannot be used in a calculation.

    Attributes:
        value: The offending value, as received
        context: Short description of the operation that rejected it
    """

    def __init__(self, value: Any, context: str, reason: str = "invalid amount"):
        self.value = value
        self.context = context
        self.reason = reason
        super().__init__(f"Invalid value in {context}: {value!r} ({reason})")


class InvalidScheme(VestingDomainError):
    """Raised when a scheme definition breaks a structural rule."""

    def __init__(self, scheme_id: Optional[str], reason: str):
        self.scheme_id = scheme_id
        self.reason = reason
        super().__init__(f"Invalid scheme '{scheme_id}': {reason}")


class InvalidPriceBand(VestingDomainError):
    """Raised when a yearly price band violates low <= average <= high."""

    def __init__(self, year: Optional[int], reason: str):
        self.year = year
        self.reason = reason
        super().__init__(f"Invalid price band for year {year}: {reason}")


class MissingPriceData(VestingDomainError):
    """Raised when no price band exists for a year the calculation requires."""

    def __init__(self, years: Iterable[int]):
        self.years: List[int] = sorted(set(years))
        listed = ", ".join(str(year) for year in self.years)
        super().__init__(f"No historical price data available for year(s): {listed}")
