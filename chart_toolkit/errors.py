"""Error and warning types raised by the chart toolkit.

``DomainError`` and ``DegenerateDomainError`` abort the single operation that
raised them. ``ValidationWarning`` is only ever reported through logging and
:mod:`warnings`; it never interrupts the caller.
"""

from __future__ import annotations


class ChartError(Exception):
    """Base class for chart toolkit errors."""


class DomainError(ChartError, ValueError):
    """Spline input or parameters outside the supported numeric domain.

    Raised for zero-spacing x values and for invalid ``factor`` assignments.
    """


class DegenerateDomainError(ChartError, ValueError):
    """A bounds range with zero width was supplied where scaling needs a span."""


class ValidationWarning(UserWarning):
    """Malformed info/options payload; the store was left unchanged."""


__all__ = ["ChartError", "DomainError", "DegenerateDomainError", "ValidationWarning"]
