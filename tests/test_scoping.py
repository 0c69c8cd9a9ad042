from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import (
    YyReferenceError,
    emitted,
    run_runtime_case,
)

SCENARIOS = [
    pytest.param(
        dedent(
            """\
            x := 1
            yif true {
                x := 2
            }
            x
        """
        ),
        ("number", 1),
        None,
        id="block-declare-shadows",
    ),
    pytest.param(
        dedent(
            """\
            x := 1
            yif true {
                x = 2
            }
            x
        """
        ),
        ("number", 2),
        None,
        id="block-assign-mutates-outer",
    ),
    pytest.param(
        dedent(
            """\
            x := 1
            x := "again"
            x
        """
        ),
        ("string", "again"),
        None,
        id="redeclare-same-scope",
    ),
    pytest.param(
        dedent(
            """\
            x := 1
            yif true {
                x = x + 1
                x := 10
                x = x + 1
            }
            x
        """
        ),
        ("number", 2),
        None,
        id="shadow-from-midblock",
    ),
    pytest.param(
        "y = 5",
        None,
        YyReferenceError,
        id="assign-undeclared",
    ),
    pytest.param(
        "missing + 1",
        None,
        YyReferenceError,
        id="lookup-undeclared",
    ),
    pytest.param(
        dedent(
            """\
            yif true { inner := 1 }
            inner
        """
        ),
        None,
        YyReferenceError,
        id="block-binding-does-not-leak",
    ),
    pytest.param(
        dedent(
            """\
            yall 1..3 { last := yt }
            last
        """
        ),
        None,
        YyReferenceError,
        id="loop-binding-does-not-leak",
    ),
    pytest.param(
        dedent(
            """\
            yall 1..3 { }
            yt
        """
        ),
        None,
        YyReferenceError,
        id="implicit-binder-does-not-leak",
    ),
    pytest.param(
        dedent(
            """\
            n := 0
            f := \\{ n = n + 1 }
            f(); f(); f()
            n
        """
        ),
        ("number", 3),
        None,
        id="closure-mutates-captured",
    ),
    pytest.param(
        dedent(
            """\
            x := "global"
            show := \\{ x }
            wrapper := \\{
                x := "local"
                show()
            }
            wrapper()
        """
        ),
        ("string", "global"),
        None,
        id="lexical-not-dynamic",
    ),
    pytest.param(
        dedent(
            """\
            later := \\{ helper() }
            helper := \\{ "found" }
            later()
        """
        ),
        ("string", "found"),
        None,
        id="late-bound-global",
    ),
    pytest.param(
        dedent(
            """\
            f := \\x { x = x * 2; x }
            x := 5
            f(1)
            x
        """
        ),
        ("number", 5),
        None,
        id="params-are-local",
    ),
    pytest.param(
        dedent(
            """\
            x := y := 7
            x + y
        """
        ),
        ("number", 14),
        None,
        id="chained-declare-shares-value",
    ),
    pytest.param(
        dedent(
            """\
            yolo { fresh = 3 }
            fresh
        """
        ),
        None,
        YyReferenceError,
        id="yolo-declare-stays-in-block",
    ),
    pytest.param(
        dedent(
            """\
            yolo {
                fresh = 3
                fresh + 1
            }
        """
        ),
        ("number", 4),
        None,
        id="yolo-assign-declares",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_scoping_scenarios(source, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_undeclared_assignment_emits_nothing() -> None:
    result = run_runtime_case("yap(1)\ny = 5\nyap(2)", None, YyReferenceError)

    assert result.lines == ["1"]
    assert "y" in result.exception.message


def test_generators_keep_independent_state() -> None:
    lines = emitted(
        dedent(
            """\
            counter := \\{
                n := 0
                \\{ n += 1 }
            }
            a := counter()
            b := counter()
            yap(a(), a(), a())
            yap(b(), a(), b())
        """
        )
    )

    assert lines == ["1 2 3", "1 4 2"]
