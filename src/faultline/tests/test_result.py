"""Tests for the synchronous Result type.

Validates:
- then_ map/flat_map behaviour and short-circuiting
- catch_, catch_known, catch_known_instance_of recovery
- finally_ cleanup semantics
- Exception capture into unchecked failures
- then_chain history threading
- all/any/compose/wrap/from_func
"""

from __future__ import annotations

from typing import Callable
from unittest.mock import Mock

import pytest

from faultline import (
    AggregateError,
    Err,
    ErrorKind,
    ErrUnchecked,
    Ok,
    Result,
    UnwrapError,
    is_result,
    make_checked,
    make_unchecked,
)


class CustomError(Exception):
    pass


class AnotherError(Exception):
    pass


# ═════════════════════════════════════════════════════════════════════════════
# Laws
# ═════════════════════════════════════════════════════════════════════════════


def test_functor_identity() -> None:
    """then_(id) leaves both variants unchanged."""
    error = CustomError("fail")
    assert Ok(42).then_(lambda x: x) == Ok(42)
    assert Err(error).then_(lambda x: x) == Err(error)


def test_functor_composition() -> None:
    f: Callable[[int], int] = lambda x: x + 1
    g: Callable[[int], int] = lambda x: x * 2

    assert Ok(5).then_(lambda x: f(g(x))) == Ok(5).then_(g).then_(f)


def test_map_law() -> None:
    """Ok(x).then_(f) is Ok(f(x)) for plain f, and f(x) for Result-returning f."""
    error = CustomError("no")
    assert Ok(3).then_(lambda x: x * 2) == Ok(6)
    assert Ok(3).then_(lambda x: Ok(x * 2)) == Ok(6)
    assert Ok(3).then_(lambda _: Err(error)) == Err(error)


def test_monad_associativity() -> None:
    f: Callable[[int], Result[int, CustomError]] = lambda x: Ok(x + 1)
    g: Callable[[int], Result[int, CustomError]] = lambda x: Ok(x * 2)

    assert Ok(5).then_(f).then_(g) == Ok(5).then_(lambda x: f(x).then_(g))


# ═════════════════════════════════════════════════════════════════════════════
# Construction & Inspection
# ═════════════════════════════════════════════════════════════════════════════


def test_ok_construction() -> None:
    result = Ok(42)

    assert result.is_ok()
    assert not result.is_err()
    assert result.ok() == 42
    assert result.err() is None
    assert bool(result) is True
    assert is_result(result)


def test_err_construction() -> None:
    error = CustomError("failed")
    result = Err(error)

    assert result.is_err()
    assert result.ok() is None
    assert result.err() == make_checked(error)
    assert result.err().kind is ErrorKind.CHECKED
    assert bool(result) is False


def test_err_unchecked_construction() -> None:
    error = RuntimeError("boom")
    result = ErrUnchecked(error)

    assert result.is_err()
    assert result.err() == make_unchecked(error)
    assert result != Err(error)


def test_repr() -> None:
    assert repr(Ok(1)) == "Ok(1)"
    assert repr(Err(KeyError("k"))) == "Err(KeyError('k'))"
    assert repr(ErrUnchecked("x")) == "ErrUnchecked('x')"


def test_equality_and_hash() -> None:
    error = CustomError("x")
    assert Ok(1) == Ok(1)
    assert Ok(1) != Ok(2)
    assert Err(error) == Err(error)
    assert Ok(1) != Err(error)
    assert len({Ok(1), Ok(1), Err(error)}) == 2


def test_pattern_matching() -> None:
    match Ok(7):
        case Result(value) if isinstance(value, int):
            matched = value
        case _:
            matched = None
    assert matched == 7


# ═════════════════════════════════════════════════════════════════════════════
# Value Extraction
# ═════════════════════════════════════════════════════════════════════════════


def test_value_or_fallback_ok() -> None:
    fallback = Mock(return_value="fallback")
    assert Ok(42).value_or_fallback(fallback) == 42
    fallback.assert_not_called()


def test_value_or_fallback_checked_err() -> None:
    error = CustomError("Something went wrong")
    fallback = Mock(return_value="fallback")

    assert Err(error).value_or_fallback(fallback) == "fallback"
    fallback.assert_called_once_with(make_checked(error))


def test_value_or_fallback_unchecked_err() -> None:
    error = RuntimeError("Something went wrong")

    def explode(_: int) -> int:
        raise error

    fallback = Mock(return_value=42)
    assert Ok(34).then_(explode).value_or_fallback(fallback) == 42
    fallback.assert_called_once_with(make_unchecked(error))


def test_value_or_raise() -> None:
    assert Ok(42).value_or_raise() == 42

    error = CustomError("checked")
    with pytest.raises(CustomError) as exc_info:
        Err(error).value_or_raise()
    assert exc_info.value is error

    captured = RuntimeError("unchecked")
    with pytest.raises(RuntimeError) as exc_info2:
        ErrUnchecked(captured).value_or_raise()
    assert exc_info2.value is captured


def test_value_or_raise_non_exception_payload() -> None:
    with pytest.raises(UnwrapError) as exc_info:
        Err("not an exception").value_or_raise()  # type: ignore[type-var]
    assert exc_info.value.error == "not an exception"


# ═════════════════════════════════════════════════════════════════════════════
# then_
# ═════════════════════════════════════════════════════════════════════════════


def test_then_on_err_short_circuits() -> None:
    error = CustomError("Something went wrong")
    cb = Mock(side_effect=lambda v: v * 2)

    assert Err(error).then_(cb) == Err(error)
    assert ErrUnchecked(error).then_(cb) == ErrUnchecked(error)
    cb.assert_not_called()


def test_then_on_err_with_err_callback() -> None:
    error = CustomError("x")
    result = Err(error).then_(lambda v: v, lambda holder: f"recovered {holder.error}")
    assert result == Ok("recovered x")


def test_then_captures_raise_as_unchecked() -> None:
    error = ValueError("Something went wrong")

    def explode(_: int) -> int:
        raise error

    assert Ok(42).then_(explode) == ErrUnchecked(error)


def test_then_err_callback_raise_is_captured() -> None:
    error = ValueError("cleanup")

    def explode(_: object) -> int:
        raise error

    assert Err(CustomError()).then_(lambda v: v, explode) == ErrUnchecked(error)


def test_then_does_not_capture_base_exceptions() -> None:
    def interrupt(_: int) -> int:
        raise KeyboardInterrupt

    with pytest.raises(KeyboardInterrupt):
        Ok(1).then_(interrupt)


# ═════════════════════════════════════════════════════════════════════════════
# catch_ / catch_known / catch_known_instance_of
# ═════════════════════════════════════════════════════════════════════════════


def test_catch_on_ok_passes_through() -> None:
    cb = Mock()
    assert Ok(42).catch_(cb) == Ok(42)
    cb.assert_not_called()


def test_catch_plain_return_becomes_ok() -> None:
    error = CustomError("Something went wrong")

    # even though this return value is an exception object, it becomes an Ok
    assert Err(error).catch_(lambda holder: holder.error) == Ok(error)
    assert Err(error).catch_(lambda _: 42) == Ok(42)


def test_catch_returning_result() -> None:
    error = CustomError("one")
    error2 = AnotherError("two")

    assert Err(error).catch_(lambda _: Err(error2)) == Err(error2)
    assert Err(error).catch_(lambda _: Ok(42)) == Ok(42)


def test_catch_receives_holder() -> None:
    error = CustomError("one")
    error2 = AnotherError("two")
    seen: list[object] = []

    def explode(_: object) -> None:
        raise error2

    def record(holder: object) -> int:
        seen.append(holder)
        return 1

    Err(error).catch_(record)
    Err(error).catch_(explode).catch_(record)

    assert seen == [make_checked(error), make_unchecked(error2)]


def test_catch_captures_raise() -> None:
    error2 = AnotherError("two")

    def explode(_: object) -> None:
        raise error2

    assert Err(CustomError()).catch_(explode) == ErrUnchecked(error2)


def test_catch_known_skips_unchecked() -> None:
    error = RuntimeError("Something went wrong")
    cb = Mock()

    result = ErrUnchecked(error)
    assert result.catch_known(cb) == result
    assert Ok(42).catch_known(cb) == Ok(42)
    cb.assert_not_called()


def test_catch_known_receives_unwrapped_error() -> None:
    error = CustomError("known")
    error2 = AnotherError("two")

    assert Err(error).catch_known(lambda e: e) == Ok(error)
    assert Err(error).catch_known(lambda _: Err(error2)) == Err(error2)


def test_catch_known_captures_raise() -> None:
    error2 = AnotherError("two")

    def explode(_: object) -> None:
        raise error2

    assert Err(CustomError()).catch_known(explode) == ErrUnchecked(error2)


def test_catch_known_instance_of_matching() -> None:
    result = Err(CustomError("Something went wrong")).catch_known_instance_of(
        CustomError, lambda e: Ok(str(e))
    )
    assert result == Ok("Something went wrong")

    replacement = CustomError("new message")
    result2 = Err(CustomError("old")).catch_instance_of(CustomError, lambda _: Err(replacement))
    assert result2 == Err(replacement)


def test_catch_known_instance_of_non_matching() -> None:
    cb = Mock()
    other = AnotherError()
    unchecked = CustomError("unchecked")

    assert Err(other).catch_known_instance_of(CustomError, cb) == Err(other)
    assert ErrUnchecked(unchecked).catch_known_instance_of(CustomError, cb) == ErrUnchecked(unchecked)
    assert Ok(CustomError()).catch_known_instance_of(CustomError, cb).is_ok()
    cb.assert_not_called()


def test_catch_known_instance_of_matches_subclasses() -> None:
    class SpecificError(CustomError):
        pass

    assert Err(SpecificError()).catch_known_instance_of(CustomError, lambda _: 1) == Ok(1)


def test_catch_known_instance_of_rejects_tuple() -> None:
    with pytest.raises(TypeError):
        Err(CustomError()).catch_known_instance_of((CustomError, AnotherError), lambda _: 1)  # type: ignore[arg-type]


# ═════════════════════════════════════════════════════════════════════════════
# finally_
# ═════════════════════════════════════════════════════════════════════════════


def test_finally_keeps_result_unless_err() -> None:
    error = CustomError("hi")
    returns_ok = Mock(return_value=Ok(84))
    returns_plain = Mock(return_value=84)

    assert Ok(42).finally_(returns_ok) == Ok(42)
    assert Ok(42).finally_(returns_plain) == Ok(42)
    assert Err(error).finally_(returns_ok) == Err(error)
    assert ErrUnchecked(error).finally_(returns_plain) == ErrUnchecked(error)

    assert returns_ok.call_count == 2
    assert returns_plain.call_count == 2
    for call in returns_ok.call_args_list + returns_plain.call_args_list:
        assert call.args == ()


def test_finally_err_supersedes() -> None:
    error = CustomError("original")
    cleanup_error = AnotherError("cleanup")

    for start in (Ok(1), Err(error), ErrUnchecked(error)):
        assert start.finally_(lambda: Err(cleanup_error)) == Err(cleanup_error)


def test_finally_captures_raise() -> None:
    cleanup_error = RuntimeError("Error during cleanup")

    def explode() -> None:
        raise cleanup_error

    for start in (Ok(42), Err(CustomError()), ErrUnchecked(CustomError())):
        assert start.finally_(explode) == ErrUnchecked(cleanup_error)


def test_finally_ignores_awaitables() -> None:
    async def later() -> int:
        return 84

    coros = []

    def cleanup() -> object:
        coro = later()
        coros.append(coro)
        return coro

    assert Ok(42).finally_(cleanup) == Ok(42)
    for coro in coros:
        coro.close()


# ═════════════════════════════════════════════════════════════════════════════
# then_chain
# ═════════════════════════════════════════════════════════════════════════════


def test_then_chain_threads_history() -> None:
    seen: list[tuple[int, tuple[int, ...]]] = []

    def step(value: int, history: tuple[int, ...]) -> int:
        seen.append((value, history))
        return value + 1

    assert Ok(1).then_chain(step, step, step) == Ok(4)
    assert seen == [(1, ()), (2, (1,)), (3, (1, 2))]


def test_then_chain_short_circuits() -> None:
    error = CustomError("stop")
    later = Mock()

    result = Ok(1).then_chain(lambda v, h: Ok(v * 10), lambda v, h: Err(error), later)

    assert result == Err(error)
    later.assert_not_called()


def test_then_chain_on_err_and_capture() -> None:
    error = CustomError("early")
    cb = Mock()
    assert Err(error).then_chain(cb) == Err(error)
    cb.assert_not_called()

    boom = ValueError("boom")

    def explode(_: int, __: tuple[int, ...]) -> int:
        raise boom

    assert Ok(1).then_chain(explode) == ErrUnchecked(boom)


def test_then_chain_arity() -> None:
    step = lambda v, h: v  # noqa: E731
    assert Ok(0).then_chain(*[step] * 7) == Ok(0)
    with pytest.raises(ValueError):
        Ok(0).then_chain()
    with pytest.raises(ValueError):
        Ok(0).then_chain(*[step] * 8)


# ═════════════════════════════════════════════════════════════════════════════
# Collection Operations
# ═════════════════════════════════════════════════════════════════════════════


def test_all_ok() -> None:
    assert Result.all([Ok(1), Ok(2), Ok(3)]) == Ok([1, 2, 3])
    assert Result.all([]) == Ok([])


def test_all_first_err_wins() -> None:
    e1 = CustomError("e1")
    e2 = AnotherError("e2")

    assert Result.all([Ok(1), Err(e1), Err(e2)]) == Err(e1)
    assert Result.all([Ok(1), Ok(2), ErrUnchecked(e2)]) == ErrUnchecked(e2)


def test_any_first_ok_wins() -> None:
    assert Result.any([Err(CustomError()), Ok(1), Ok(2)]) == Ok(1)


def test_any_all_failed_aggregates_in_order() -> None:
    e1 = CustomError("e1")
    e2 = AnotherError("e2")

    result = Result.any([Err(e1), Err(e2), ErrUnchecked(e2)])

    holder = result.err()
    assert holder is not None and holder.is_checked
    assert isinstance(holder.error, AggregateError)
    assert holder.error.errors == (make_checked(e1), make_checked(e2), make_unchecked(e2))

    with pytest.raises(AggregateError):
        result.value_or_raise()


def test_compose() -> None:
    fn1 = lambda x: Ok("hello" * x)  # noqa: E731
    fn2 = lambda s: Ok(len(s))  # noqa: E731
    error = CustomError()
    fn3 = lambda _: Err(error)  # noqa: E731

    composed = Result.compose(fn1, fn2)
    composed2 = Result.compose(fn2, fn3, fn1)

    assert composed(2) == fn1(2).then_(fn2) == Ok(10)
    assert Ok(2).then_(composed) == Ok(10)
    assert Ok("Hello!").then_(composed2) == Err(error)


def test_compose_arity() -> None:
    with pytest.raises(ValueError):
        Result.compose()
    with pytest.raises(ValueError):
        Result.compose(*[Ok] * 12)
    assert Result.compose(*[Ok] * 11)(1) == Ok(1)


def test_compose_passes_input_to_first_function() -> None:
    error = CustomError()
    seen: list[object] = []

    composed = Result.compose(lambda r: seen.append(r) or r, lambda v: v + 1)

    assert composed(Err(error)) == Err(error)
    assert composed(Ok(1)) == Ok(2)
    assert seen == [Err(error), Ok(1)]


def test_compose_first_function_raise_is_captured() -> None:
    boom = ValueError("first")

    def explode(_: int) -> int:
        raise boom

    assert Result.compose(explode, lambda v: v)(1) == ErrUnchecked(boom)


@pytest.mark.usefixtures("propagate_mode")
def test_compose_first_function_raise_propagates() -> None:
    def explode(_: int) -> int:
        raise CustomError("first")

    with pytest.raises(CustomError):
        Result.compose(explode, lambda v: v)(1)


def test_wrap() -> None:
    error = ValueError("bad")

    @Result.wrap
    def parse(raw: str) -> int:
        if not raw.isdigit():
            raise error
        return int(raw)

    assert parse("43") == Ok(43)
    assert parse("x") == ErrUnchecked(error)
    assert parse.__name__ == "parse"


def test_from_func() -> None:
    error = CustomError()
    boom = RuntimeError("boom")

    def explode() -> int:
        raise boom

    assert Result.from_func(lambda: 1) == Ok(1)
    assert Result.from_func(lambda: Err(error)) == Err(error)
    assert Result.from_func(explode) == ErrUnchecked(boom)


def test_iter_yields_self_once() -> None:
    result = Ok(1)
    gen = iter(result)

    assert next(gen) is result
    with pytest.raises(StopIteration) as stop:
        gen.send(5)
    assert stop.value.value == 5
