"""explicit-exceptions: declare which exceptions a call site handles.

Public API:
    - TaggedException: A recoverable failure classified by a string code
    - wrap() / wrap_async(): Make a function return a Maybe instead of raising
    - unwrap(): Get the value out of a Maybe, re-raising or escalating
    - get_leak_detector(): The process-wide unhandled-Maybe detector

Example:
    @wrap(allowed=["NotFound"])
    def find_user(user_id):
        if user_id not in users:
            raise TaggedException("NotFound", f"no user {user_id}", user_id)
        return users[user_id]

    try:
        user = unwrap(find_user(7), ["NotFound"])
    except TaggedException as e:
        user = None
"""

from __future__ import annotations

import logging

from explicit_exceptions.config import Settings, resolve_settings
from explicit_exceptions.errors import (
    AlreadyUnwrappedError,
    ConfigurationError,
    ContractViolationError,
    EscalationError,
    ExplicitExceptionsError,
    InternalError,
    ReservedCodeError,
    TypeMismatchError,
    UnsupportedFunctionError,
)
from explicit_exceptions.exception import SUCCESS_CODE, TaggedException
from explicit_exceptions.leaks import (
    LeakDetector,
    UnhandledMaybeWarning,
    get_leak_detector,
)
from explicit_exceptions.maybe import Maybe, Ok
from explicit_exceptions.unwrap import unwrap
from explicit_exceptions.wrap import wrap, wrap_async

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("explicit-exceptions")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("explicit_exceptions").addHandler(logging.NullHandler())

__all__ = [
    "SUCCESS_CODE",
    "AlreadyUnwrappedError",
    "ConfigurationError",
    "ContractViolationError",
    "EscalationError",
    "ExplicitExceptionsError",
    "InternalError",
    "LeakDetector",
    "Maybe",
    "Ok",
    "ReservedCodeError",
    "Settings",
    "TaggedException",
    "TypeMismatchError",
    "UnhandledMaybeWarning",
    "UnsupportedFunctionError",
    "get_leak_detector",
    "resolve_settings",
    "unwrap",
    "wrap",
    "wrap_async",
]
