"""Turn a list of tokens into the commands of a pipeline."""

from __future__ import annotations

import errno
import os
import sys
from dataclasses import dataclass, field
from typing import Iterable

from minishellpy.environment import ShellState
from minishellpy.tokens import Token, TokenType

_REDIRECTIONS = frozenset(
    {TokenType.REDIR_IN, TokenType.REDIR_OUT, TokenType.REDIR_APPEND}
)

_OPEN_ERRORS = {
    errno.EISDIR: "Is a directory",
    errno.ENOTDIR: "Not a directory",
    errno.ENOENT: "No such file or directory",
    errno.EACCES: "Permission denied",
}


class ParseError(Exception):
    """Raised when a command line cannot be turned into commands.

    ``status`` is the exit status the error sets, or None when the error
    leaves the status as it was.
    """

    def __init__(self, message: str, status: int | None = 2) -> None:
        self.message = message
        self.status = status
        super().__init__(message)


@dataclass
class Command:
    """One command of a pipeline with its redirections."""

    args: list[str] = field(default_factory=list)
    inputs: list[str] = field(default_factory=list)
    output: str | None = None
    heredocs: list[str] = field(default_factory=list)
    heredoc_file: str | None = None
    append: bool = False
    interrupted: bool = False
    redirect_error: bool = False


def is_redirection(kind: TokenType) -> bool:
    """Return True for ``<``, ``>`` and ``>>``; a heredoc does not count."""
    return kind in _REDIRECTIONS


def _open_error_message(filename: str, exc: OSError) -> str:
    reason = _OPEN_ERRORS.get(exc.errno or 0) or os.strerror(exc.errno or 0)
    return f"minishell: {filename}: {reason}"


def _touch_output(filename: str, append: bool) -> None:
    flags = os.O_WRONLY | os.O_CREAT | (os.O_APPEND if append else os.O_TRUNC)
    fd = os.open(filename, flags, 0o644)
    os.close(fd)


def _target(tokens: list[Token], index: int, state: ShellState) -> str:
    """Return the word after the operator at ``index`` or raise a syntax error."""
    if index + 1 >= len(tokens):
        state.status = 2
        raise ParseError("minishell: syntax error near unexpected token `newline'")
    nxt = tokens[index + 1]
    if nxt.type is not TokenType.WORD:
        state.status = 2
        raise ParseError(f"minishell: syntax error near unexpected token `{nxt.text}'")
    return nxt.text


def _redirect_output(
    command: Command, filename: str, append: bool, state: ShellState
) -> None:
    """Create or truncate the output file now, as the shell does when parsing.

    A failed ``>`` is reported and marks the command; a failed ``>>`` aborts
    the whole line.
    """
    if state.redirect_error:
        return
    try:
        _touch_output(filename, append)
    except OSError as exc:
        state.redirect_error = True
        command.redirect_error = True
        command.output = None
        message = _open_error_message(filename, exc)
        if append:
            raise ParseError(message, status=None) from exc
        print(message, file=sys.stderr)
        return
    command.output = filename
    command.append = append


def parse_commands(tokens: Iterable[Token], state: ShellState) -> list[Command]:
    """Build the commands of a pipeline from ``tokens``.

    Output files are created as they are met. Syntax errors raise
    ParseError and set the status in ``state`` when the error carries one.
    """
    items = list(tokens)
    state.redirect_error = False
    current = Command()
    commands = [current]
    i = 0
    while i < len(items):
        tok = items[i]
        kind = tok.type
        if kind is TokenType.PIPE:
            message = "minishell: syntax error near unexpected token `|'"
            if i == 0:
                state.status = 2
                raise ParseError(message)
            if i + 1 >= len(items):
                raise ParseError(message, status=None)
            current = Command()
            commands.append(current)
            state.redirect_error = False
            i += 1
        elif kind is TokenType.REDIR_IN:
            current.inputs.append(_target(items, i, state))
            i += 2
        elif kind is TokenType.REDIR_OUT:
            _redirect_output(current, _target(items, i, state), False, state)
            i += 2
        elif kind is TokenType.REDIR_APPEND:
            _redirect_output(current, _target(items, i, state), True, state)
            i += 2
        elif kind is TokenType.HEREDOC:
            current.heredocs.append(_target(items, i, state))
            i += 2
        else:
            if not tok.found:
                current.args.append(tok.text)
            i += 1
    return commands