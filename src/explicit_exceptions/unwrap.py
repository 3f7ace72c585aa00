"""Consume a maybe value: return, re-raise or escalate."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from explicit_exceptions.errors import EscalationError, InternalError, TypeMismatchError
from explicit_exceptions.exception import TaggedException
from explicit_exceptions.maybe import Maybe, Ok

if TYPE_CHECKING:
    from collections.abc import Iterable


def normalize_allowed(allowed: Iterable[str]) -> frozenset[str]:
    """Turn an allow-list into a set of codes, rejecting obvious mistakes."""
    if isinstance(allowed, (str, bytes)):
        raise TypeMismatchError(
            f"Allowed exception codes must be a collection of strings, got {allowed!r}",
            hint=f"Did you mean [{allowed!r}]?",
        )
    codes = frozenset(allowed)
    bad = [c for c in codes if not isinstance(c, str)]
    if bad:
        raise TypeMismatchError(f"Allowed exception codes must be strings, got {bad!r}")
    return codes


def escalate(exc: TaggedException) -> EscalationError:
    """Build the fatal error for a tagged exception nobody declared."""
    return EscalationError(str(exc), code=exc.code, reason=exc.reason)


def unwrap(maybe: Maybe, allowed: Iterable[str] = ()) -> Any:
    """Return the value held by ``maybe``, or raise its exception.

    Args:
        maybe: Result of calling a ``wrap()``/``wrap_async()`` function.
        allowed: Exception codes this call site handles. A held exception
            whose code is listed is re-raised as is; any other code is
            escalated.

    Raises:
        TaggedException: The held exception, when its code is allowed.
        EscalationError: The held exception's code is not allowed.
        TypeMismatchError: ``maybe`` is not a ``Maybe``.
        AlreadyUnwrappedError: ``maybe`` was unwrapped before.
    """
    if not isinstance(maybe, Maybe):
        raise TypeMismatchError(
            f"unwrap() expected a Maybe as its first argument, got {type(maybe).__name__}",
            hint="Pass the return value of a wrap()ed function; await wrap_async() results first.",
        )
    codes = normalize_allowed(allowed)

    payload = maybe._extract()
    if isinstance(payload, Ok):
        return payload.value
    if isinstance(payload, TaggedException):
        if payload.code in codes:
            raise payload
        raise escalate(payload) from payload
    raise InternalError(f"Unreachable maybe payload: {type(payload).__name__}")
