"""Evaluator helper modules for the yy runtime."""

__all__ = [
    "bind",
    "blocks",
    "chains",
    "common",
    "control",
    "expr",
    "fn",
    "helpers",
    "literals",
    "loops",
    "yolo",
]
