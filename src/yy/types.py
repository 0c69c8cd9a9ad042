from __future__ import annotations
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional, Tuple, Union
from typing_extensions import TypeAlias, TypeGuard

if TYPE_CHECKING:
    from .runtime import RunContext

Node: TypeAlias = Any  # lark Tree or Token

# ---------- Value Model ----------

@dataclass
class YyNull:
    def __repr__(self) -> str:
        return "null"

@dataclass
class YyNumber:
    value: float

    def __repr__(self) -> str:
        v = self.value
        return str(int(v)) if v.is_integer() else repr(v)

@dataclass
class YyString:
    value: str

    def __repr__(self) -> str:
        return f'"{self.value}"'

@dataclass
class YyBool:
    value: bool

    def __repr__(self) -> str:
        return "true" if self.value else "false"

# Containers compare by identity: two names alias one array only if they hold the same handle.

@dataclass(eq=False)
class YyArray:
    items: List['YyValue']

    def __repr__(self) -> str:
        return "[" + ", ".join(repr(x) for x in self.items) + "]"

@dataclass(eq=False)
class YyMap:
    slots: Dict[str, 'YyValue']

    def __repr__(self) -> str:
        pairs = [f'"{k}": {v!r}' for k, v in self.slots.items()]
        return "%{" + ", ".join(pairs) + "}"

@dataclass(eq=False)
class YyFn:
    params: List[str]
    body: Node                  # block tree
    frame: 'Frame'              # closure frame

    def __repr__(self) -> str:
        return f"<fn({', '.join(self.params)})>"

NativeFn = Callable[['Frame', List['YyValue']], 'YyValue']

@dataclass(frozen=True)
class YyNative:
    name: str
    fn: NativeFn
    arity: Optional[int] = None         # None: variadic or checked by the native
    bound: Tuple['YyValue', ...] = ()   # baked leading arguments

    def __repr__(self) -> str:
        return f"<native {self.name}>"

YyValue: TypeAlias = Union[
    YyNull,
    YyNumber,
    YyString,
    YyBool,
    YyArray,
    YyMap,
    YyFn,
    YyNative,
]

TYPE_NAMES: Dict[type, str] = {
    YyNull: "Null",
    YyNumber: "Number",
    YyString: "String",
    YyBool: "Bool",
    YyArray: "Array",
    YyMap: "Map",
    YyFn: "Function",
    YyNative: "Function",
}

def type_name(value: YyValue) -> str:
    return TYPE_NAMES.get(type(value), type(value).__name__)

# ---------- Completions ----------

@dataclass(frozen=True)
class Returning:
    """`yeet` unwinding toward the nearest call."""
    value: YyValue

@dataclass(frozen=True)
class Aborted:
    """`yikes` unwinding toward execute()."""
    message: str
    line: Optional[int] = None
    column: Optional[int] = None
    pos: Optional[int] = None

Completion: TypeAlias = Union[YyValue, Returning, Aborted]

def is_abrupt(value: Completion) -> TypeGuard[Union[Returning, Aborted]]:
    return isinstance(value, (Returning, Aborted))

# ---------- Environment ----------

class Builtins:
    stdlib_functions: Dict[str, YyNative] = {}

class Frame:
    def __init__(self, parent: Optional['Frame']=None, ctx: Optional['RunContext']=None):
        self.parent = parent
        self.vars: Dict[str, YyValue] = {}
        self.ctx: Optional['RunContext']

        if parent is None and Builtins.stdlib_functions:
            for name, native in Builtins.stdlib_functions.items():
                self.vars[name] = native

        if ctx is not None:
            self.ctx = ctx
        elif parent is not None:
            self.ctx = parent.ctx
        else:
            self.ctx = None

    def child(self) -> 'Frame':
        return Frame(parent=self)

    def declare(self, name: str, val: YyValue) -> None:
        self.vars[name] = val

    def _owner(self, name: str) -> Optional['Frame']:
        frame: Optional[Frame] = self
        while frame is not None:
            if name in frame.vars:
                return frame
            frame = frame.parent
        return None

    def has(self, name: str) -> bool:
        return self._owner(name) is not None

    def lookup(self, name: str) -> YyValue:
        owner = self._owner(name)
        if owner is None:
            raise YyReferenceError(f"identifier not found: {name}")
        return owner.vars[name]

    def assign(self, name: str, val: YyValue) -> None:
        owner = self._owner(name)
        if owner is None:
            raise YyReferenceError(f"cannot assign to undeclared identifier: {name}")
        owner.vars[name] = val

    def names(self) -> List[str]:
        seen: Dict[str, None] = {}
        frame: Optional[Frame] = self
        while frame is not None:
            for name in frame.vars:
                seen.setdefault(name)
            frame = frame.parent
        return list(seen)

# ---------- Exceptions ----------

class YyError(Exception):
    """Base of every fault the interpreter reports."""

    kind = "Error"

    def __init__(self, message: str, line: Optional[int]=None, column: Optional[int]=None, pos: Optional[int]=None):
        super().__init__(message)
        self.message = message
        self.line = line
        self.column = column
        self.pos = pos

    def locate(self, line: Optional[int], column: Optional[int], pos: Optional[int]) -> 'YyError':
        """Attach a source position unless a more precise one is already set."""
        if self.line is None:
            self.line = line
            self.column = column
            self.pos = pos
        return self

    def __str__(self) -> str:
        return self.message

class YyRuntimeError(YyError):
    kind = "RuntimeError"

class YyReferenceError(YyRuntimeError):
    kind = "ReferenceError"

class YyTypeError(YyRuntimeError):
    kind = "TypeError"

class YyArityError(YyRuntimeError):
    kind = "ArityError"

class YyIndexError(YyRuntimeError):
    kind = "IndexError"

    def __init__(self, message: str = "index out of bounds", **kwargs: Any):
        super().__init__(message, **kwargs)

class YyDivideByZero(YyRuntimeError):
    kind = "DivideByZero"

    def __init__(self, message: str = "division by zero", **kwargs: Any):
        super().__init__(message, **kwargs)

class YyUserAbort(YyRuntimeError):
    kind = "UserAbort"

class YyResourceExceeded(YyRuntimeError):
    kind = "ResourceExceeded"
