from __future__ import annotations

from typing import Optional

from lark import Token, Tree

from ..runtime import Frame, RunContext, YyArray, YyBool, YyFn, YyNative, YyNumber, YyString, YyValue, context_of
from ..types import Completion, YyDivideByZero, YyTypeError, is_abrupt, type_name
from ..utils import yy_equals
from .common import EvalFunc
from .helpers import is_truthy
from .yolo import apply_yolo_operator, apply_yolo_unary

def eval_unary(op_tok: Token, operand_node: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    value = eval_func(operand_node, frame)
    if is_abrupt(value):
        return value

    op = str(op_tok.value)
    if context_of(frame).yolo_active:
        coerced = apply_yolo_unary(op, value)
        if coerced is not None:
            return coerced

    match (op, value):
        case ('!', _):
            return YyBool(not is_truthy(value))
        case ('-', YyNumber(value=num)):
            return YyNumber(-num)
        case _:
            raise YyTypeError(f"bad operand type for unary {op}: {type_name(value)}")

def eval_binop(n: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    lhs_node, op_tok, rhs_node = n.children

    lhs = eval_func(lhs_node, frame)
    if is_abrupt(lhs):
        return lhs
    rhs = eval_func(rhs_node, frame)
    if is_abrupt(rhs):
        return rhs

    return apply_binary_operator(str(op_tok.value), lhs, rhs, context_of(frame))

def eval_logical(n: Tree, frame: Frame, eval_func: EvalFunc, is_and: bool) -> Completion:
    lhs_node, rhs_node = n.children

    lhs = eval_func(lhs_node, frame)
    if is_abrupt(lhs):
        return lhs
    if is_truthy(lhs) != is_and:
        return YyBool(not is_and)

    rhs = eval_func(rhs_node, frame)
    if is_abrupt(rhs):
        return rhs
    return YyBool(is_truthy(rhs))

def apply_binary_operator(op: str, lhs: YyValue, rhs: YyValue, ctx: Optional[RunContext] = None) -> YyValue:
    if ctx is not None and ctx.yolo_active:
        coerced = apply_yolo_operator(op, lhs, rhs, ctx)
        if coerced is not None:
            return coerced

    return apply_strict_operator(op, lhs, rhs, ctx)

def _check_size(ctx: Optional[RunContext], size: int, what: str) -> None:
    if ctx is not None:
        ctx.check_size(size, what)

def apply_strict_operator(op: str, lhs: YyValue, rhs: YyValue, ctx: Optional[RunContext] = None) -> YyValue:
    match (op, lhs, rhs):
        case ('==', _, _):
            return YyBool(yy_equals(lhs, rhs))
        case ('!=', _, _):
            return YyBool(not yy_equals(lhs, rhs))
        case ('<<', YyArray(items=items), _):
            items.append(rhs)
            return lhs
        case ('<<', _, _):
            raise YyTypeError(f"cannot append to {type_name(lhs)}")
        case ('+', YyString(value=a), YyString(value=b)):
            _check_size(ctx, len(a) + len(b), "string")
            return YyString(a + b)
        case ('+', YyArray(items=a), YyArray(items=b)):
            _check_size(ctx, len(a) + len(b), "array")
            return YyArray(a + b)
        case (_, YyNumber(value=a), YyNumber(value=b)):
            return _apply_numeric(op, a, b)
        case ('+', YyFn() | YyNative(), _):
            raise YyTypeError("baking arguments into a function is only allowed in yolo mode")
        case _:
            raise YyTypeError(
                f"unsupported operand types for {op}: {type_name(lhs)} and {type_name(rhs)}"
            )

def _apply_numeric(op: str, a: float, b: float) -> YyValue:
    match op:
        case '+':
            return YyNumber(a + b)
        case '-':
            return YyNumber(a - b)
        case '*':
            return YyNumber(a * b)
        case '/':
            if b == 0:
                raise YyDivideByZero()
            return YyNumber(a / b)
        case '%':
            if b == 0:
                raise YyDivideByZero("modulo by zero")
            return YyNumber(a % b)
        case '<':
            return YyBool(a < b)
        case '>':
            return YyBool(a > b)
        case '<=':
            return YyBool(a <= b)
        case '>=':
            return YyBool(a >= b)
        case _:
            raise YyTypeError(f"unknown operator {op}")
