"""Best-effort detection of maybe values that are never unwrapped.

Each live ``Maybe`` is tracked through ``weakref.finalize``, which observes
reclamation without keeping the object alive. Unwrapping detaches the
finalizer; a ``Maybe`` reclaimed while still attached reports its diagnostic
to the configured sink exactly once.

The report fires whenever the interpreter reclaims the object: immediately
for most objects under reference counting, or on the next cyclic collection
when the object sits in a reference cycle. Treat it as a debugging aid, never
as control flow.
"""

from __future__ import annotations

import logging
import threading
import traceback
from typing import TYPE_CHECKING
import warnings
import weakref

from explicit_exceptions.config import Settings, resolve_settings
from explicit_exceptions.errors import ConfigurationError

if TYPE_CHECKING:
    from collections.abc import Callable

log = logging.getLogger(__name__)

type LeakSink = Callable[[str], None]

_LEAK_MESSAGE = (
    "A maybe type was created, never handled, and garbage collected. "
    "Please follow this stack trace and make sure your wrapped() function gets "
    "unwrapped. (Don't expect this warning to show up consistently, as it "
    "relies on garbage collection timing).\n"
)


class UnhandledMaybeWarning(RuntimeWarning):
    """Emitted when a maybe value is reclaimed without being unwrapped."""


def warn_sink(diagnostic: str) -> None:
    """Write the diagnostic to the warnings stream.

    Every leak shares this call site and often its text, so a fresh registry
    is passed to keep the "default" action from hiding repeats.
    """
    warnings.warn_explicit(
        diagnostic,
        UnhandledMaybeWarning,
        __file__,
        warn_sink.__code__.co_firstlineno,
        module=__name__,
        registry={},
    )


def log_sink(diagnostic: str) -> None:
    """Write the diagnostic as a warning-level log record."""
    log.warning("%s", diagnostic)


_DEFAULT_SINKS: dict[str, LeakSink] = {"warnings": warn_sink, "logging": log_sink}


def leak_message(context: str) -> str:
    """Build the diagnostic text for a maybe created at ``context``."""
    return f"{_LEAK_MESSAGE}{context}\n"


def capture_context(skip: int = 0, *, settings: Settings | None = None) -> str:
    """Return the stack text of the caller of this function's caller.

    Args:
        skip: Extra frames to drop from the top, for helpers that sit
            between user code and this call.
        settings: Settings to honor; defaults to the process-wide detector's.
    """
    s = settings if settings is not None else get_leak_detector().settings
    if not (s.leak_detection and s.capture_stack):
        return ""
    frames = traceback.extract_stack()[: -(2 + skip)]
    if s.stack_limit is not None:
        frames = frames[-s.stack_limit :]
    return "".join(traceback.format_list(frames))


class LeakDetector:
    """Weak registry from a tracked object's identity to its diagnostic text."""

    def __init__(
        self, settings: Settings | None = None, sink: LeakSink | None = None
    ) -> None:
        self.settings = settings if settings is not None else resolve_settings()
        self._default_sink = _DEFAULT_SINKS[self.settings.leak_sink]
        self._sink: LeakSink = sink if sink is not None else self._default_sink
        # Re-entrant: a finalizer may fire from the collector while this
        # thread already holds the lock inside register()/unregister().
        self._lock = threading.RLock()
        self._finalizers: dict[int, weakref.finalize] = {}

    @property
    def sink(self) -> LeakSink:
        return self._sink

    def set_sink(self, sink: LeakSink | None) -> LeakSink:
        """Install ``sink`` (or the default when None); return the previous one."""
        with self._lock:
            previous = self._sink
            self._sink = sink if sink is not None else self._default_sink
            return previous

    def register(self, obj: object, diagnostic: str) -> None:
        """Track ``obj`` until it is unregistered or reclaimed."""
        if not self.settings.leak_detection:
            return
        key = id(obj)
        finalizer = weakref.finalize(obj, self._report, key, diagnostic)
        finalizer.atexit = self.settings.report_at_exit
        with self._lock:
            stale = self._finalizers.pop(key, None)
            self._finalizers[key] = finalizer
        if stale is not None:
            stale.detach()

    def unregister(self, obj: object) -> bool:
        """Stop tracking ``obj``. Returns False when it was not tracked."""
        with self._lock:
            finalizer = self._finalizers.pop(id(obj), None)
        if finalizer is None:
            return False
        return finalizer.detach() is not None

    def is_tracked(self, obj: object) -> bool:
        with self._lock:
            finalizer = self._finalizers.get(id(obj))
        return finalizer is not None and finalizer.alive

    def __len__(self) -> int:
        with self._lock:
            return sum(1 for f in self._finalizers.values() if f.alive)

    def _report(self, key: int, diagnostic: str) -> None:
        # The object is still being torn down, so no new object can own
        # ``key`` yet.
        with self._lock:
            self._finalizers.pop(key, None)
            sink = self._sink
        try:
            sink(diagnostic)
        except Exception as e:
            log.error(
                "Leak diagnostic sink '%s' failed: %s",
                getattr(sink, "__name__", type(sink).__name__),
                e,
                exc_info=True,
            )


_detector: LeakDetector | None = None
_detector_lock = threading.Lock()


def get_leak_detector() -> LeakDetector:
    """Return the process-wide detector, creating it on first use.

    Invalid settings are reported once through the log and replaced by the
    defaults.
    """
    global _detector
    detector = _detector
    if detector is not None:
        return detector
    with _detector_lock:
        if _detector is None:
            try:
                settings = resolve_settings()
            except ConfigurationError as e:
                # Wrapped calls keep working; only leak tracking falls back.
                log.error("%s; using default leak detector settings", e)
                settings = Settings()
            _detector = LeakDetector(settings)
            log.debug("Leak detector initialized: %s", _detector.settings)
        return _detector
