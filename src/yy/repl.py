"""Interactive REPL for yy, powered by prompt_toolkit."""

from __future__ import annotations

import os
import re
import sys
import traceback
from typing import List

from prompt_toolkit import PromptSession
from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.history import InMemoryHistory
from prompt_toolkit.key_binding import KeyBindings
from prompt_toolkit.shortcuts import clear

from .lexer import Lexer, LexError, is_ident_start, tokenize
from .repl_highlight import YyLexer
from .runner import Interpreter
from .runtime import Limits
from .token_types import TT
from .types import YyNull
from .utils import env_flag

# Zero-width and invisible characters to strip from input.
_INVISIBLE_RE = re.compile("[\u200b\u200c\u200d\ufeff\u00a0\r]")

_TRACE_VAR = "YY_DEBUG_PY_TRACE"

# Slash commands: name => (description, argument_hint).
_SLASH_CMDS = {
    "/clear": ("Clear the terminal screen", ""),
    "/help": ("Show the commands", ""),
    "/py-traceback": ("Toggle Python traceback on errors", "[on|off]"),
    "/quit": ("Leave the REPL", ""),
    "/reset": ("Reset the REPL environment", ""),
}

_DEPTH_OPEN = {TT.LPAR, TT.LSQB, TT.LBRACE, TT.MAPOPEN}
_DEPTH_CLOSE = {TT.RPAR, TT.RSQB, TT.RBRACE}


def _open_depth(text: str) -> int:
    """Unclosed bracket count; an unterminated string counts as open."""
    try:
        tokens = tokenize(text)
    except LexError as exc:
        return 1 if exc.message.startswith("unterminated") else 0

    depth = 0
    for tok in tokens:
        if tok.type in _DEPTH_OPEN:
            depth += 1
        elif tok.type in _DEPTH_CLOSE:
            depth = max(depth - 1, 0)
    return depth


class _ReplCompleter(Completer):
    """Complete slash commands, keywords and names bound in the session."""

    def __init__(self, interp: Interpreter):
        self.interp = interp

    def get_completions(self, document, complete_event):
        text = document.text_before_cursor

        if text.startswith("/"):
            for cmd, (desc, hint) in _SLASH_CMDS.items():
                if cmd.startswith(text):
                    yield Completion(cmd, start_position=-len(text), display_meta=desc)
            return

        word = document.get_word_before_cursor()
        if not word or not is_ident_start(word[0]):
            return

        candidates = list(Lexer.KEYWORDS) + self.interp.globals.names()
        for name in sorted(set(candidates)):
            if name.startswith(word) and name != word:
                yield Completion(name, start_position=-len(word))


def _handle_slash(line: str, interp: Interpreter) -> bool:
    """Handle slash commands. Returns True if the line was a command."""
    stripped = line.strip()
    if not stripped.startswith("/"):
        return False

    parts = stripped.split(None, 1)
    cmd = parts[0]
    arg = parts[1] if len(parts) > 1 else ""

    if cmd == "/clear":
        clear()
        return True

    if cmd == "/help":
        for name, (desc, hint) in _SLASH_CMDS.items():
            print(f"  {name} {hint}".ljust(24) + desc)
        return True

    if cmd == "/quit":
        raise EOFError

    if cmd == "/py-traceback":
        if arg.lower() in ("on", "1", "true", "yes"):
            os.environ[_TRACE_VAR] = "1"
        elif arg.lower() in ("off", "0", "false", "no"):
            os.environ.pop(_TRACE_VAR, None)
        elif arg == "":
            if env_flag(_TRACE_VAR):
                os.environ.pop(_TRACE_VAR, None)
            else:
                os.environ[_TRACE_VAR] = "1"
        else:
            print("Usage: /py-traceback [on|off]", file=sys.stderr)
            return True

        state = "on" if env_flag(_TRACE_VAR) else "off"
        print(f"Python traceback: {state}")
        return True

    if cmd == "/reset":
        interp.reset()
        print("Environment reset.")
        return True

    print(f"Unknown command: {cmd}", file=sys.stderr)
    return True


def _normalize(text: str) -> str:
    """Strip invisible characters from input."""
    return _INVISIBLE_RE.sub("", text)


def _compute_indent(text: str) -> str:
    """Indent continuation lines four spaces per open bracket."""
    return " " * (4 * _open_depth(text))


def eval_line(interp: Interpreter, text: str) -> None:
    """Run one submission, echoing a non-null result like a calculator."""
    written: List[str] = []

    def sink(chunk: str) -> None:
        written.append(chunk)
        sys.stdout.write(chunk)
        sys.stdout.flush()

    result = interp.run(text, sink)

    if written and not written[-1].endswith("\n"):
        print()

    if result.error is not None:
        print(result.error, file=sys.stderr)
        if env_flag(_TRACE_VAR) and result.exception is not None:
            print("\nPython traceback:", file=sys.stderr)
            print("".join(traceback.format_tb(result.exception.__traceback__)), file=sys.stderr, end="")
        return

    if result.value is not None and not isinstance(result.value, YyNull):
        print(repr(result.value))


def repl() -> None:
    """Interactive read-eval-print loop with prompt_toolkit."""
    interp = Interpreter(limits=Limits.from_env())

    history = InMemoryHistory()
    bindings = KeyBindings()

    @bindings.add("backspace")
    def _backspace(event):
        buf = event.app.current_buffer
        buf.delete_before_cursor(1)
        if buf.text.startswith("/"):
            buf.start_completion()

    @bindings.add("enter")
    def _enter(event):
        buf = event.app.current_buffer
        text = buf.text

        # Keep reading while a bracket, block or string is still open
        if not text.startswith("/") and _open_depth(text) > 0:
            buf.insert_text("\n" + _compute_indent(text))
            return

        buf.validate_and_handle()

    session: PromptSession[str] = PromptSession(
        history=history,
        lexer=YyLexer(),
        completer=_ReplCompleter(interp),
        complete_while_typing=True,
        key_bindings=bindings,
        multiline=True,
        prompt_continuation="... ",
    )

    print("yy repl, Ctrl-D to exit, / for commands")

    while True:
        try:
            text = session.prompt(">>> ")
        except EOFError:
            print()
            break
        except KeyboardInterrupt:
            print("KeyboardInterrupt")
            continue

        text = _normalize(text)
        if not text.strip():
            continue

        try:
            if _handle_slash(text, interp):
                continue
        except EOFError:
            break

        eval_line(interp, text)
