"""
Exception hierarchy for smallcat.

Constructors and compositions raise these; law checkers report failures
through their return values instead.
"""


class SmallCatError(RuntimeError):
    """Base class for every error raised by smallcat."""


class CompositionError(SmallCatError):
    """Two morphisms (or a chain of them) are not composable."""


class LawViolationError(SmallCatError):
    """A structural invariant failed while building or combining data."""


class SearchLimitError(SmallCatError):
    """A brute-force enumeration would exceed the configured limit."""


class CarrierMismatchError(SmallCatError, ValueError):
    """Operands live over different carriers (sets, universes)."""
