from __future__ import annotations

from textwrap import dedent

import pytest

from tests.support.harness import (
    YyArityError,
    YyFn,
    YyTypeError,
    emitted,
    run_program,
    run_runtime_case,
)

SCENARIOS = [
    pytest.param(
        dedent(
            """\
            add := \\a, b { a + b }
            add(2, 3)
        """
        ),
        ("number", 5),
        None,
        id="call-basic",
    ),
    pytest.param(
        dedent(
            """\
            f := \\{ }
            f()
        """
        ),
        ("null", None),
        None,
        id="empty-body-is-null",
    ),
    pytest.param(
        dedent(
            """\
            f := \\x {
                yif x > 0 { yeet "pos" }
                "non-pos"
            }
            [f(1), f(-1)]
        """
        ),
        ("array", ["pos", "non-pos"]),
        None,
        id="early-yeet",
    ),
    pytest.param(
        dedent(
            """\
            f := \\{ yeet }
            f()
        """
        ),
        ("null", None),
        None,
        id="bare-yeet-is-null",
    ),
    pytest.param(
        dedent(
            """\
            find := \\xs, want {
                yall xs {
                    yif yt == want { yeet "hit" }
                }
                "miss"
            }
            [find([1, 2, 3], 2), find([1], 5)]
        """
        ),
        ("array", ["hit", "miss"]),
        None,
        id="yeet-from-nested-loop",
    ),
    pytest.param(
        dedent(
            """\
            fib := \\n {
                yif n < 2 { n } yels { fib(n - 1) + fib(n - 2) }
            }
            fib(15)
        """
        ),
        ("number", 610),
        None,
        id="recursion",
    ),
    pytest.param(
        dedent(
            """\
            down := \\n { yif n == 0 { "done" } yels { down(n - 1) } }
            down(150)
        """
        ),
        ("string", "done"),
        None,
        id="deep-recursion-within-limit",
    ),
    pytest.param(
        dedent(
            """\
            make_adder := \\n { \\x { x + n } }
            add5 := make_adder(5)
            add5(10)
        """
        ),
        ("number", 15),
        None,
        id="closure-captures-param",
    ),
    pytest.param(
        "(\\x { x * 2 })(21)",
        ("number", 42),
        None,
        id="call-literal",
    ),
    pytest.param(
        dedent(
            """\
            apply := \\f, v { f(v) }
            apply(len, "four")
        """
        ),
        ("number", 4),
        None,
        id="native-as-argument",
    ),
    pytest.param(
        dedent(
            """\
            order := []
            note := \\v { order << v; v }
            pair := \\a, b { [a, b] }
            pair(note(1), note(2))
            order
        """
        ),
        ("array", [1, 2]),
        None,
        id="args-left-to-right",
    ),
    pytest.param(
        "\\a, b { a }(1)",
        None,
        YyArityError,
        id="too-few-args",
    ),
    pytest.param(
        "\\a { a }(1, 2)",
        None,
        YyArityError,
        id="too-many-args",
    ),
    pytest.param(
        "x := 3\nx(1)",
        None,
        YyTypeError,
        id="call-non-function",
    ),
    pytest.param(
        dedent(
            """\
            greet := \\name { "hi " + name }
            greet + "bob"
        """
        ),
        None,
        YyTypeError,
        id="bake-outside-yolo",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", SCENARIOS)
def test_function_scenarios(source, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


BAKE_SCENARIOS = [
    pytest.param(
        dedent(
            """\
            greet := \\name, msg { "{name}: {msg}" }
            hi := yolo { greet + "Ann" }
            hi("hey")
        """
        ),
        ("string", "Ann: hey"),
        None,
        id="bake-one-positional",
    ),
    pytest.param(
        dedent(
            """\
            conv := \\sym, factor, offset, input { "{(offset + input) * factor} {sym}" }
            c_to_f := yolo { conv + ["F", 2, 16] }
            c_to_f(4)
        """
        ),
        ("string", "40 F"),
        None,
        id="bake-array",
    ),
    pytest.param(
        dedent(
            """\
            greet := \\name, msg { "{name}: {msg}" }
            rude := yolo { greet + %{ "msg": "go away" } }
            rude("Bob")
        """
        ),
        ("string", "Bob: go away"),
        None,
        id="bake-map-by-name",
    ),
    pytest.param(
        dedent(
            """\
            f := \\a, b, c { [a, b, c] }
            g := yolo { f + 1 + 2 }
            g(3)
        """
        ),
        ("array", [1, 2, 3]),
        None,
        id="bake-twice",
    ),
    pytest.param(
        dedent(
            """\
            xs := [1, 2]
            f := \\list { list }
            g := yolo { f + %{ "list": xs } }
            g()
        """
        ),
        ("array", [1, 2]),
        None,
        id="bake-map-value-is-array",
    ),
    pytest.param(
        dedent(
            """\
            shout := yolo { yap + "!!" }
            shout("hey")
        """
        ),
        ("lines", ["!! hey"]),
        None,
        id="bake-native",
    ),
    pytest.param(
        dedent(
            """\
            f := \\a { a }
            yolo { f + [1, 2] }
        """
        ),
        None,
        YyArityError,
        id="bake-too-many",
    ),
    pytest.param(
        dedent(
            """\
            f := \\a { a }
            yolo { f + %{ "nope": 1 } }
        """
        ),
        None,
        YyArityError,
        id="bake-unknown-name",
    ),
    pytest.param(
        dedent(
            """\
            f := \\a { a }
            g := yolo { f + 1 }
            g(2)
        """
        ),
        None,
        YyArityError,
        id="baked-fn-checks-arity",
    ),
    pytest.param(
        dedent(
            """\
            greet := \\name, msg { "{name}: {msg}" }
            hi := yolo { "Yan" + greet }
            hi("yo")
        """
        ),
        ("string", "Yan: yo"),
        None,
        id="bake-string-on-left",
    ),
    pytest.param(
        dedent(
            """\
            double := \\n { n * 2 }
            g := yolo { 21 + double }
            g()
        """
        ),
        ("number", 42),
        None,
        id="bake-number-on-left",
    ),
    pytest.param(
        dedent(
            """\
            shout := yolo { "!!" + yap }
            shout("hey")
        """
        ),
        ("lines", ["!! hey"]),
        None,
        id="bake-native-on-left",
    ),
    pytest.param(
        dedent(
            """\
            f := \\a { a }
            yolo { f + f }
        """
        ),
        None,
        YyTypeError,
        id="bake-function-into-function",
    ),
]


@pytest.mark.parametrize("source, expectation, expected_exc", BAKE_SCENARIOS)
def test_bake_scenarios(source, expectation, expected_exc) -> None:
    run_runtime_case(source, expectation, expected_exc)


def test_function_values_display() -> None:
    result = run_program("\\a, b { a }")

    assert isinstance(result.value, YyFn)
    assert repr(result.value) == "<fn(a, b)>"
    assert emitted("yap(len)") == ["<native len>"]


def test_baking_leaves_original_untouched() -> None:
    lines = emitted(
        dedent(
            """\
            f := \\a, b { a - b }
            g := yolo { f + 10 }
            yap(g(3), f(10, 3))
        """
        )
    )

    assert lines == ["7 7"]
