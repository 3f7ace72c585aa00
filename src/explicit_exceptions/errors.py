"""Exception hierarchy for explicit-exceptions.

Everything the library itself raises derives from ``ExplicitExceptionsError``.
None of these are ``TaggedException``: they report misuse or escalation and
are never deferred into a ``Maybe``.
"""

from __future__ import annotations


class ExplicitExceptionsError(Exception):
    """Base exception for all library errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint

    def __str__(self) -> str:
        """Return the message, followed by the hint when one is set."""
        msg = super().__str__()
        return f"{msg}. {self.hint}" if self.hint else msg


class ConfigurationError(ExplicitExceptionsError):
    """Settings failed validation or resolution."""


class ContractViolationError(ExplicitExceptionsError):
    """The library API was used in a way its contract forbids."""


class ReservedCodeError(ContractViolationError):
    """A tagged exception was given the reserved success code (or no usable code)."""


class TypeMismatchError(ContractViolationError):
    """A value of the wrong type reached unwrap() or an allow-list."""


class UnsupportedFunctionError(ContractViolationError):
    """wrap() was given a coroutine function."""


class AlreadyUnwrappedError(ContractViolationError):
    """A maybe value was extracted more than once."""


class InternalError(ExplicitExceptionsError):
    """A library invariant was violated (bug)."""


class EscalationError(ExplicitExceptionsError):
    """A tagged exception reached a call site that did not declare its code.

    This is deliberately not a ``TaggedException``: wrap() lets it pass
    through untouched, so it propagates as a program defect.
    """

    def __init__(self, message: str, *, code: str, reason: str | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.reason = reason
