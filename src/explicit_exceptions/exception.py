"""The tagged exception type that wrap() intercepts."""

from __future__ import annotations

from typing import Any, Final

from explicit_exceptions.errors import ReservedCodeError

SUCCESS_CODE: Final[str] = "ok"

_FROZEN_FIELDS: Final[frozenset[str]] = frozenset({"code", "reason", "data"})


class TaggedException(Exception):
    """A recoverable failure classified by a string ``code``.

    Raise it (or re-raise it) inside a function decorated with ``wrap()`` or
    ``wrap_async()``; do not raise it anywhere else.

    Args:
        code: Identifier used for allow-list matching, e.g. ``"NotFound"``.
        reason: Optional human-readable reason. It is embedded in the message
            of any ``EscalationError`` this exception turns into.
        data: Arbitrary payload for the handler. Opaque to the library.
    """

    __slots__ = ("_code", "_data", "_reason")

    def __init__(self, code: str, reason: str | None = None, data: Any = None) -> None:
        if not isinstance(code, str) or not code:
            raise ReservedCodeError(
                f"Exception codes must be non-empty strings, got {code!r}"
            )
        if code == SUCCESS_CODE:
            raise ReservedCodeError(f'The exception code "{code}" is reserved.')
        super().__init__(f"{code}: {reason}" if reason else code)
        object.__setattr__(self, "_code", code)
        object.__setattr__(self, "_reason", reason)
        object.__setattr__(self, "_data", data)

    @property
    def code(self) -> str:
        return self._code

    @property
    def reason(self) -> str | None:
        return self._reason

    @property
    def data(self) -> Any:
        return self._data

    def __setattr__(self, name: str, value: Any) -> None:
        if name in _FROZEN_FIELDS or name.lstrip("_") in _FROZEN_FIELDS:
            raise AttributeError(f"TaggedException.{name.lstrip('_')} is read-only")
        super().__setattr__(name, value)

    def __reduce__(self) -> tuple[Any, ...]:
        return (type(self), (self._code, self._reason, self._data))

    def __repr__(self) -> str:
        parts = [repr(self._code)]
        if self._reason is not None:
            parts.append(f"reason={self._reason!r}")
        if self._data is not None:
            parts.append(f"data={self._data!r}")
        return f"{type(self).__name__}({', '.join(parts)})"
