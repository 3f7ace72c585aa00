"""Single-use container deferring "value or tagged exception" until unwrap()."""

from __future__ import annotations

import dataclasses
from typing import Any, Final, NoReturn

from explicit_exceptions.errors import AlreadyUnwrappedError, TypeMismatchError
from explicit_exceptions.exception import TaggedException
from explicit_exceptions.leaks import capture_context, get_leak_detector, leak_message


@dataclasses.dataclass(frozen=True, slots=True)
class Ok[T]:
    """A successful return value.

    Keeps a returned ``TaggedException`` instance distinct from a raised one.
    """

    value: T


type Payload = Ok[Any] | TaggedException

_CONSUMED: Final = object()


class Maybe:
    """The result of calling a wrapped function.

    Opaque on purpose: the only way to look inside is ``unwrap()``, and a
    maybe can be unwrapped once. Instances that are dropped without being
    unwrapped are reported by the leak detector.
    """

    __slots__ = ("__weakref__", "_payload")

    def __init__(self, payload: Payload, context: str) -> None:
        if not isinstance(payload, (Ok, TaggedException)):
            raise TypeMismatchError(
                f"Maybe payload must be Ok or TaggedException, got {type(payload).__name__}"
            )
        self._payload: Payload | object = payload
        get_leak_detector().register(self, leak_message(context))

    @classmethod
    def success(cls, value: Any, context: str | None = None) -> Maybe:
        """Wrap a returned value."""
        if context is None:
            context = capture_context()
        return cls(Ok(value), context)

    @classmethod
    def failure(cls, exc: TaggedException, context: str | None = None) -> Maybe:
        """Wrap a raised tagged exception."""
        if context is None:
            context = capture_context()
        return cls(exc, context)

    @property
    def consumed(self) -> bool:
        return self._payload is _CONSUMED

    def _extract(self) -> Payload:
        """Hand out the payload once and stop leak tracking."""
        payload, self._payload = self._payload, _CONSUMED
        if payload is _CONSUMED:
            raise AlreadyUnwrappedError(
                "This maybe value was already unwrapped",
                hint="Each wrapped call result can be passed to unwrap() only once.",
            )
        get_leak_detector().unregister(self)
        return payload  # type: ignore[return-value]

    def __repr__(self) -> str:
        return f"<Maybe {'consumed' if self.consumed else 'pending'}>"

    def _refuse_copy(self, *_: Any) -> NoReturn:
        raise TypeError("Maybe values are single-use and cannot be copied or pickled")

    __copy__ = _refuse_copy
    __deepcopy__ = _refuse_copy
    __reduce_ex__ = _refuse_copy
