"""Adapters that turn functions into ones returning ``Maybe`` values."""

from __future__ import annotations

import functools
import inspect
from typing import TYPE_CHECKING, Any, overload

from explicit_exceptions.errors import TypeMismatchError, UnsupportedFunctionError
from explicit_exceptions.exception import TaggedException
from explicit_exceptions.leaks import capture_context
from explicit_exceptions.maybe import Maybe
from explicit_exceptions.unwrap import escalate, normalize_allowed

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable


def _require_callable(fn: object, adapter: str) -> None:
    if not callable(fn):
        raise TypeMismatchError(
            f"{adapter}() expected a function, got {type(fn).__name__}",
            hint=f"Pass allowed codes by keyword: use {adapter}(allowed=[...]).",
        )


def _classify(exc: BaseException, allowed: frozenset[str] | None, context: str) -> Maybe:
    if not isinstance(exc, TaggedException):
        raise exc
    if allowed is None or exc.code in allowed:
        return Maybe.failure(exc, context)
    raise escalate(exc) from exc


@overload
def wrap(
    fn: Callable[..., Any], allowed: Iterable[str] | None = None
) -> Callable[..., Maybe]: ...
@overload
def wrap(
    fn: None = None, allowed: Iterable[str] | None = None
) -> Callable[[Callable[..., Any]], Callable[..., Maybe]]: ...


def wrap(fn=None, allowed=None):  # type: ignore[no-untyped-def]
    """Make ``fn`` return a ``Maybe`` instead of raising tagged exceptions.

    Usable as ``wrap(fn)``, ``@wrap`` or ``@wrap(allowed=["NotFound"])``.

    Args:
        fn: A regular (non-async) function.
        allowed: Codes ``fn`` may raise. ``None`` allows every code. A tagged
            exception with any other code raises ``EscalationError`` right
            away from the call.

    Raises:
        UnsupportedFunctionError: ``fn`` is a coroutine function.
        TypeMismatchError: ``fn`` is not callable, e.g. an allow-list passed
            positionally to the decorator form.
    """
    codes = None if allowed is None else normalize_allowed(allowed)
    if fn is None:
        return functools.partial(wrap, allowed=codes)
    _require_callable(fn, "wrap")
    if inspect.iscoroutinefunction(fn):
        raise UnsupportedFunctionError(
            f"Attempted to call wrap() on async function {fn.__qualname__}. "
            "Use wrap_async() instead."
        )

    @functools.wraps(fn)
    def wrapped(*args: Any, **kwargs: Any) -> Maybe:
        context = capture_context()
        try:
            value = fn(*args, **kwargs)
        except Exception as exc:
            return _classify(exc, codes, context)
        return Maybe.success(value, context)

    return wrapped


@overload
def wrap_async(
    fn: Callable[..., Awaitable[Any]], allowed: Iterable[str] | None = None
) -> Callable[..., Awaitable[Maybe]]: ...
@overload
def wrap_async(
    fn: None = None, allowed: Iterable[str] | None = None
) -> Callable[[Callable[..., Awaitable[Any]]], Callable[..., Awaitable[Maybe]]]: ...


def wrap_async(fn=None, allowed=None):  # type: ignore[no-untyped-def]
    """Same as ``wrap()``, for functions returning awaitables.

    The call site's stack is captured when the wrapper is called; the result
    is classified once the awaited call completes.
    """
    codes = None if allowed is None else normalize_allowed(allowed)
    if fn is None:
        return functools.partial(wrap_async, allowed=codes)
    _require_callable(fn, "wrap_async")

    async def _run(context: str, args: tuple[Any, ...], kwargs: dict[str, Any]) -> Maybe:
        try:
            value = await fn(*args, **kwargs)
        except Exception as exc:
            return _classify(exc, codes, context)
        return Maybe.success(value, context)

    @functools.wraps(fn)
    def wrapped(*args: Any, **kwargs: Any) -> Awaitable[Maybe]:
        return _run(capture_context(), args, kwargs)

    return inspect.markcoroutinefunction(wrapped)
