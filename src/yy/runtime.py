from __future__ import annotations

import importlib
import logging
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, replace
from typing import Callable, Iterator, List, Optional, Union

from .types import (
    YyNull, YyNumber, YyString, YyBool, YyArray, YyMap, YyFn, YyNative,
    YyValue, Frame, Builtins, NativeFn, Aborted, Returning,
    YyTypeError, YyArityError, YyResourceExceeded,
)
from .utils import env_float, env_int

logger = logging.getLogger(__name__)

__all__ = [
    "YyNull", "YyNumber", "YyString", "YyBool", "YyArray", "YyMap", "YyFn", "YyNative",
    "YyValue", "Frame", "Limits", "RunContext", "init_stdlib", "register_stdlib",
    "call_fn", "call_native", "bake",
]

DEFAULT_MAX_STEPS = 2_000_000
DEFAULT_MAX_CALL_DEPTH = 1000
DEFAULT_MAX_COLLECTION_SIZE = 10_000_000
CLOCK_CHECK_INTERVAL = 1024

_STDLIB_INITIALIZED = False

def init_stdlib() -> None:
    """Load stdlib modules (idempotent) so register_stdlib hooks run."""
    global _STDLIB_INITIALIZED

    if _STDLIB_INITIALIZED:
        return

    importlib.import_module("yy.stdlib")
    _STDLIB_INITIALIZED = True

def register_stdlib(name: str, *, arity: Optional[int] = None):
    def dec(fn: NativeFn):
        Builtins.stdlib_functions[name] = YyNative(name=name, fn=fn, arity=arity)
        return fn

    return dec

# ---------- Resource ceiling ----------

@dataclass(frozen=True)
class Limits:
    """Budget for one run; None disables a ceiling."""
    max_steps: Optional[int] = DEFAULT_MAX_STEPS
    max_seconds: Optional[float] = None
    max_call_depth: Optional[int] = DEFAULT_MAX_CALL_DEPTH
    max_collection_size: Optional[int] = DEFAULT_MAX_COLLECTION_SIZE

    @classmethod
    def from_env(cls) -> 'Limits':
        return cls(
            max_steps=env_int("YY_MAX_STEPS", DEFAULT_MAX_STEPS),
            max_seconds=env_float("YY_MAX_SECONDS", None),
            max_call_depth=env_int("YY_MAX_CALL_DEPTH", DEFAULT_MAX_CALL_DEPTH),
            max_collection_size=env_int("YY_MAX_COLLECTION_SIZE", DEFAULT_MAX_COLLECTION_SIZE),
        )

LineSink = Callable[[str], None]

class RunContext:
    """Interpreter-wide state shared by every frame of one interpreter."""

    def __init__(self, limits: Optional[Limits] = None, sink: Optional[LineSink] = None):
        self.limits = limits or Limits()
        self.sink = sink
        self.steps = 0
        self.depth = 0
        self.yolo_active = False
        self.started = time.monotonic()

    def begin_run(self, sink: Optional[LineSink]) -> None:
        self.sink = sink
        self.steps = 0
        self.depth = 0
        self.yolo_active = False
        self.started = time.monotonic()

    def tick(self) -> None:
        self.steps += 1
        limits = self.limits

        if limits.max_steps is not None and self.steps > limits.max_steps:
            raise YyResourceExceeded(f"step budget of {limits.max_steps} exceeded")

        if limits.max_seconds is not None and self.steps % CLOCK_CHECK_INTERVAL == 0:
            if time.monotonic() - self.started > limits.max_seconds:
                raise YyResourceExceeded(f"time budget of {limits.max_seconds}s exceeded")

    def check_size(self, size: int, what: str) -> None:
        """Refuse to build a string or array longer than the collection ceiling."""
        limit = self.limits.max_collection_size
        ceiling = sys.maxsize if limit is None else limit
        if size > ceiling:
            raise YyResourceExceeded(f"{what} of length {size} exceeds the size limit of {ceiling}")

    @contextmanager
    def yolo(self) -> Iterator[None]:
        prev = self.yolo_active
        self.yolo_active = True
        try:
            yield
        finally:
            self.yolo_active = prev

    @contextmanager
    def call_scope(self) -> Iterator[None]:
        limit = self.limits.max_call_depth
        if limit is not None and self.depth >= limit:
            raise YyResourceExceeded(f"maximum call depth of {limit} exceeded")

        self.depth += 1
        try:
            yield
        finally:
            self.depth -= 1

    def emit(self, text: str) -> None:
        if self.sink is None:
            return
        try:
            self.sink(text)
        except Exception:
            # A broken sink must not turn into a program error
            logger.exception("line sink failed; output dropped")

def context_of(frame: Frame) -> RunContext:
    if frame.ctx is None:
        raise RuntimeError("frame is not attached to a RunContext; evaluate through Interpreter")
    return frame.ctx

# ---------- Calls ----------

def call_fn(fn: YyFn, args: List[YyValue]) -> Union[YyValue, Aborted]:
    from .evaluator import eval_node  # local import to avoid cycle

    if len(args) != len(fn.params):
        raise YyArityError(
            f"function expects {len(fn.params)} argument(s); got {len(args)}"
        )

    ctx = context_of(fn.frame)
    with ctx.call_scope():
        callee = Frame(parent=fn.frame)
        for name, value in zip(fn.params, args):
            callee.declare(name, value)

        result = eval_node(fn.body, callee)

    if isinstance(result, Returning):
        return result.value

    return result

def call_native(native: YyNative, args: List[YyValue], frame: Frame) -> YyValue:
    full = list(native.bound) + list(args)

    if native.arity is not None and len(full) != native.arity:
        raise YyArityError(f"{native.name} expects {native.arity} argument(s); got {len(full)}")

    return native.fn(frame, full)

# ---------- Baking ----------

def bake(fn: Union[YyFn, YyNative], value: YyValue) -> Union[YyFn, YyNative]:
    """Partially apply `value` to `fn`: an array bakes each element, a map bakes by name."""
    if isinstance(fn, YyNative):
        if isinstance(value, YyMap):
            raise YyTypeError(f"cannot bake named arguments into native {fn.name}")
        extra = tuple(value.items) if isinstance(value, YyArray) else (value,)
        return replace(fn, bound=fn.bound + extra)

    positional: List[YyValue] = []
    named: dict = {}

    match value:
        case YyArray(items=items):
            positional = list(items)
        case YyMap(slots=slots):
            named = dict(slots)
        case YyFn() | YyNative():
            raise YyTypeError("cannot bake a function into a function")
        case _:
            positional = [value]

    if len(positional) > len(fn.params):
        raise YyArityError(
            f"cannot bake {len(positional)} argument(s) into a function of {len(fn.params)} parameter(s)"
        )

    for key in named:
        if key not in fn.params:
            raise YyArityError(f"function has no parameter named '{key}'")

    baked = Frame(parent=fn.frame)
    for name, arg in zip(fn.params, positional):
        baked.declare(name, arg)
    for key, arg in named.items():
        baked.declare(key, arg)

    remaining = [p for p in fn.params[len(positional):] if p not in named]
    logger.debug("baked %d argument(s); %d parameter(s) left", len(fn.params) - len(remaining), len(remaining))
    return YyFn(params=remaining, body=fn.body, frame=baked)
