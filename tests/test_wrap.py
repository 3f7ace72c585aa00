from __future__ import annotations

import inspect

from hypothesis import given, settings
from hypothesis import strategies as st
import pytest

from explicit_exceptions import (
    EscalationError,
    Maybe,
    TaggedException,
    TypeMismatchError,
    UnsupportedFunctionError,
    unwrap,
    wrap,
    wrap_async,
)
from tests.helpers import raise_tagged

pytestmark = pytest.mark.unit


def test_catches_tagged_exceptions_with_default_allow_list() -> None:
    maybe = wrap(raise_tagged("NotFound"))()

    assert isinstance(maybe, Maybe)
    with pytest.raises(TaggedException, match="NotFound"):
        unwrap(maybe, ["NotFound"])


def test_catches_tagged_exceptions_with_explicit_allow_list() -> None:
    maybe = wrap(raise_tagged("NotFound"), ["NotFound"])()

    with pytest.raises(TaggedException, match="NotFound"):
        unwrap(maybe, ["NotFound"])


def test_escalates_exceptions_missing_from_allow_list(leak_detector) -> None:
    wrapped = wrap(raise_tagged("NotFound", "gone"), ["SomeOtherException"])

    with pytest.raises(EscalationError) as excinfo:
        wrapped()

    assert "NotFound" in str(excinfo.value)
    assert "gone" in str(excinfo.value)
    assert excinfo.value.code == "NotFound"
    # Escalation happens at call time; no maybe is left behind to unwrap.
    assert len(leak_detector) == 0


def test_does_not_touch_normal_errors() -> None:
    boom = ValueError("Oh no!")

    def fail() -> None:
        raise boom

    with pytest.raises(ValueError, match="Oh no!") as excinfo:
        wrap(fail)()

    assert excinfo.value is boom


def test_escalation_from_inner_unwrap_passes_through_outer_wrap() -> None:
    inner = wrap(raise_tagged("NotFound"))

    @wrap
    def outer() -> int:
        return unwrap(inner(), ["Other"])

    with pytest.raises(EscalationError, match="NotFound"):
        outer()


def test_does_not_allow_async_functions_to_be_wrapped() -> None:
    async def fetch() -> None:
        raise ValueError("Oh no!")

    with pytest.raises(UnsupportedFunctionError, match=r"Use wrap_async\(\) instead"):
        wrap(fetch)


def test_does_not_allow_wrap_async_results_to_be_wrapped() -> None:
    async def fetch() -> int:
        return 1

    with pytest.raises(UnsupportedFunctionError):
        wrap(wrap_async(fetch))


def test_rejects_bare_string_allow_list_at_wrap_time() -> None:
    with pytest.raises(TypeMismatchError):
        wrap(lambda: 1, "NotFound")


def test_decorator_forms() -> None:
    @wrap
    def plain(x: int) -> int:
        return x + 1

    @wrap(allowed=["NotFound"])
    def declared(key: str) -> str:
        raise TaggedException("NotFound", data=key)

    assert unwrap(plain(1)) == 2
    with pytest.raises(TaggedException) as excinfo:
        unwrap(declared("k"), ["NotFound"])
    assert excinfo.value.data == "k"


def test_forwards_arguments_and_keeps_metadata() -> None:
    def greet(name: str, *, punctuation: str = ".") -> str:
        """Say hello."""
        return f"hello {name}{punctuation}"

    wrapped = wrap(greet)

    assert unwrap(wrapped("ada", punctuation="!")) == "hello ada!"
    assert wrapped.__name__ == "greet"
    assert wrapped.__doc__ == "Say hello."
    assert wrapped.__wrapped__ is greet
    assert not inspect.iscoroutinefunction(wrapped)


def test_wrapped_functions_are_reusable() -> None:
    calls = []

    @wrap(allowed=["Odd"])
    def check(n: int) -> int:
        calls.append(n)
        if n % 2:
            raise TaggedException("Odd", data=n)
        return n

    assert unwrap(check(2)) == 2
    with pytest.raises(TaggedException):
        unwrap(check(3), ["Odd"])
    assert calls == [2, 3]


@given(
    value=st.one_of(
        st.none(),
        st.booleans(),
        st.integers(),
        st.floats(allow_nan=False),
        st.text(),
        st.lists(st.integers()),
        st.dictionaries(st.text(), st.integers()),
    )
)
@settings(max_examples=50)
def test_success_round_trip_returns_the_same_object(value: object) -> None:
    assert unwrap(wrap(lambda: value)()) is value


@pytest.mark.parametrize("adapter", [wrap, wrap_async])
def test_positional_allow_list_is_rejected(adapter) -> None:
    with pytest.raises(TypeMismatchError, match=r"allowed=\[\.\.\.\]"):
        adapter(["NotFound"])


@pytest.mark.parametrize("adapter", [wrap, wrap_async])
def test_non_callable_decorator_target_is_rejected(adapter) -> None:
    with pytest.raises(TypeMismatchError, match="expected a function"):
        adapter(allowed=["NotFound"])(42)
