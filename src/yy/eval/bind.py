from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Union

from lark import Tree

from ..runtime import Frame, YyArray, YyMap, YyString, YyValue, context_of
from ..tree import tree_label
from ..types import Completion, Aborted, Returning, YyTypeError, is_abrupt, type_name
from .chains import index_value
from .common import EvalFunc, expect_integer, map_key, resolve_index
from .expr import apply_binary_operator

# ---------- Places ----------

@dataclass
class NamePlace:
    frame: Frame
    name: str

    def get(self) -> YyValue:
        return self.frame.lookup(self.name)

    def set(self, value: YyValue) -> None:
        assign_name(self.frame, self.name, value)

@dataclass
class ItemPlace:
    container: YyValue
    key: YyValue
    parent: Optional[Union[NamePlace, 'ItemPlace']]

    def get(self) -> YyValue:
        return index_value(self.container, self.key)

    def set(self, value: YyValue) -> None:
        store_item(self.container, self.key, value, self.parent)

Place = Union[NamePlace, ItemPlace]

def assign_name(frame: Frame, name: str, value: YyValue) -> None:
    # yolo mode declares instead of failing on unknown names
    if context_of(frame).yolo_active and not frame.has(name):
        frame.declare(name, value)
        return

    frame.assign(name, value)

def store_item(container: YyValue, key: YyValue, value: YyValue, parent: Optional[Place]) -> None:
    match container:
        case YyArray(items=items):
            items[resolve_index(expect_integer(key, "array index"), len(items))] = value
        case YyMap(slots=slots):
            slots[map_key(key)] = value
        case YyString(value=text):
            if not isinstance(value, YyString):
                raise YyTypeError(f"cannot store {type_name(value)} into a string")
            if parent is None:
                raise YyTypeError("cannot assign into a string that is not stored anywhere")
            i = resolve_index(expect_integer(key, "string index"), len(text))
            # strings are values: rebuild and write back to where this one came from
            parent.set(YyString(text[:i] + value.value + text[i + 1:]))
        case _:
            raise YyTypeError(f"{type_name(container)} does not support item assignment")

def resolve_place(node: Tree, frame: Frame, eval_func: EvalFunc) -> Union[Place, Returning, Aborted]:
    """Evaluate the sub-expressions of an assignment target exactly once."""
    if tree_label(node) == 'ident':
        return NamePlace(frame, str(node.children[0].value))

    target_node, key_node = node.children
    parent: Optional[Place] = None

    if tree_label(target_node) in ('ident', 'index'):
        parent_place = resolve_place(target_node, frame, eval_func)
        if is_abrupt(parent_place):
            return parent_place
        parent = parent_place
        container = parent.get()
    else:
        container = eval_func(target_node, frame)
        if is_abrupt(container):
            return container

    key = eval_func(key_node, frame)
    if is_abrupt(key):
        return key

    return ItemPlace(container, key, parent)

# ---------- Statements ----------

def eval_declare(n: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    name_tok, value_node = n.children

    value = eval_func(value_node, frame)
    if is_abrupt(value):
        return value

    frame.declare(str(name_tok.value), value)
    return value

def eval_assign(n: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    target_node, value_node = n.children

    place = resolve_place(target_node, frame, eval_func)
    if is_abrupt(place):
        return place

    value = eval_func(value_node, frame)
    if is_abrupt(value):
        return value

    place.set(value)
    return value

def eval_compound(n: Tree, frame: Frame, eval_func: EvalFunc) -> Completion:
    target_node, op_tok, value_node = n.children

    place = resolve_place(target_node, frame, eval_func)
    if is_abrupt(place):
        return place

    current = place.get()
    rhs = eval_func(value_node, frame)
    if is_abrupt(rhs):
        return rhs

    result = apply_binary_operator(str(op_tok.value), current, rhs, context_of(frame))
    place.set(result)
    return result
