from __future__ import annotations

import logging
import os
import sys
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Iterator, List, Optional

from .evaluator import eval_node
from .lexer import LexError
from .parser import ParseError, parse_source
from .runtime import Frame, Limits, RunContext, YyValue, init_stdlib
from .stdlib import seed_random
from .types import Aborted, Returning, YyError, YyResourceExceeded, YyUserAbort
from .utils import env_flag

logger = logging.getLogger(__name__)

LineSink = Callable[[str], None]

# Python frames one yy call can occupy (call, block, statements, operators).
FRAMES_PER_CALL = 40


@contextmanager
def _recursion_headroom(limits: Limits) -> Iterator[None]:
    """Let the call-depth ceiling trip before the host's own recursion limit."""
    prev = sys.getrecursionlimit()
    if limits.max_call_depth is not None:
        sys.setrecursionlimit(max(prev, limits.max_call_depth * FRAMES_PER_CALL + 1000))
    try:
        yield
    finally:
        sys.setrecursionlimit(prev)


@dataclass
class ExecResult:
    """Outcome of one run: what was emitted, the final value and at most one error."""

    output: List[str] = field(default_factory=list)
    value: Optional[YyValue] = None
    error: Optional[str] = None
    exception: Optional[YyError] = None

    @property
    def lines(self) -> List[str]:
        return "".join(self.output).splitlines()

    @property
    def ok(self) -> bool:
        return self.exception is None


def format_error(source: str, exc: YyError) -> str:
    """Render `error: Kind: message` plus the offending line and a caret under the column."""
    head = f"error: {exc.kind}: {exc.message}"
    if exc.line is None:
        return head

    lines = source.splitlines()
    if not 1 <= exc.line <= len(lines):
        return f"{head} (line {exc.line})"

    text = lines[exc.line - 1]
    gutter = f"{exc.line:3d} | "
    column = max((exc.column or 1) - 1, 0)
    # keep tabs so the caret lines up under tab-indented code
    pad = "".join(ch if ch == "\t" else " " for ch in text[:column])
    caret = " " * len(gutter) + pad + " " * (column - len(text[:column])) + "^"
    return "\n".join([head, gutter + text, caret])


class Interpreter:
    """Global frame and run context that persist across `run` calls (used by the REPL)."""

    def __init__(self, limits: Optional[Limits] = None):
        init_stdlib()
        self.limits = limits or Limits()
        self.reset()

    def reset(self) -> None:
        self.ctx = RunContext(self.limits)
        self.globals = Frame(ctx=self.ctx)

    def run(self, source: str, line_sink: Optional[LineSink] = None) -> ExecResult:
        result = ExecResult()

        def sink(text: str) -> None:
            result.output.append(text)
            if line_sink is not None:
                line_sink(text)

        try:
            tree = parse_source(source)
        except (LexError, ParseError) as exc:
            logger.debug("rejected before evaluation: %s", exc)
            return self._fail(result, source, exc)

        logger.debug("running %d top-level statement(s)", len(tree.children))
        self.ctx.begin_run(sink)

        try:
            with _recursion_headroom(self.limits):
                value = eval_node(tree, self.globals)
        except YyError as exc:
            return self._fail(result, source, exc)
        except RecursionError:
            return self._fail(result, source, YyResourceExceeded("maximum recursion depth exceeded"))
        finally:
            logger.debug("run finished after %d step(s)", self.ctx.steps)

        if isinstance(value, Aborted):
            abort = YyUserAbort(value.message, value.line, value.column, value.pos)
            return self._fail(result, source, abort)

        if isinstance(value, Returning):
            value = value.value

        result.value = value
        return result

    def _fail(self, result: ExecResult, source: str, exc: YyError) -> ExecResult:
        logger.debug("%s at line %s, col %s: %s", exc.kind, exc.line, exc.column, exc.message)
        result.exception = exc
        result.error = format_error(source, exc)
        return result


def execute(source: str, line_sink: Optional[LineSink] = None, *, limits: Optional[Limits] = None) -> ExecResult:
    """Run a whole program in a fresh global environment."""
    return Interpreter(limits=limits).run(source, line_sink)


def _load_source(arg: Optional[str]) -> str:
    """
    Resolve CLI input into source text.
    - None or "-" => read stdin.
    - Existing path => read file contents.
    - Otherwise treat the argument as literal source.
    """
    if arg is None or arg == "-":
        data = sys.stdin.read()
        if not data:
            raise SystemExit("No input provided on stdin")
        return data

    candidate = Path(arg)
    if candidate.exists():
        return candidate.read_text(encoding="utf-8")

    return arg


def _seed_from_env() -> None:
    raw = os.environ.get("YY_SEED")
    if raw is None:
        return
    try:
        seed_random(int(raw))
    except ValueError:
        logger.warning("ignoring non-integer YY_SEED=%r", raw)


USAGE = "usage: yy [--debug] [--ast] [FILE | - | CODE]"


def main(argv: Optional[List[str]] = None) -> int:
    debug = env_flag("YY_DEBUG")
    dump_ast = False
    arg = None

    for token in sys.argv[1:] if argv is None else argv:
        if token == "--debug":
            debug = True
            continue
        if token == "--ast":
            dump_ast = True
            continue
        if token in ("-h", "--help"):
            print(USAGE)
            return 0
        if arg is None:
            arg = token
        else:
            raise SystemExit(f"Unexpected argument: {token}")

    if debug:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    _seed_from_env()

    if arg is None and not dump_ast and sys.stdin.isatty():
        from .repl import repl
        repl()
        return 0

    source = _load_source(arg)

    if dump_ast:
        try:
            print(parse_source(source).pretty())
        except (LexError, ParseError) as exc:
            print(format_error(source, exc), file=sys.stderr)
            return 1
        return 0

    def write(text: str) -> None:
        sys.stdout.write(text)
        sys.stdout.flush()

    result = execute(source, write, limits=Limits.from_env())
    if result.error is None:
        return 0

    if result.output and not result.output[-1].endswith("\n"):
        sys.stdout.write("\n")
    print(result.error, file=sys.stderr)
    if env_flag("YY_DEBUG_PY_TRACE") and result.exception is not None:
        traceback.print_exception(type(result.exception), result.exception, result.exception.__traceback__)
    return 1


if __name__ == "__main__":
    sys.exit(main())
