"""Test helpers (small, reusable doubles)."""

from __future__ import annotations

from dataclasses import dataclass, field
import gc

from explicit_exceptions import TaggedException


@dataclass
class RecordingSink:
    """Leak sink test double that keeps every diagnostic it receives."""

    reports: list[str] = field(default_factory=list)

    def __call__(self, diagnostic: str) -> None:
        self.reports.append(diagnostic)


def collect() -> None:
    """Force reclamation of anything unreachable, including cycles."""
    for _ in range(3):
        gc.collect()


def raise_tagged(code: str, reason: str | None = None, data: object = None):
    """Return a zero-arg function that raises the given tagged exception."""

    def fail() -> None:
        raise TaggedException(code, reason, data)

    return fail
