"""The commands the shell runs itself instead of starting a program."""

from __future__ import annotations

import os
import sys
from typing import Sequence, TextIO

from minishellpy.environment import InvalidIdentifierError, ShellState

BUILTINS = frozenset({"exit", "echo", "cd", "pwd", "export", "unset", "env"})

_LONG_MAX = 2**63 - 1
_LONG_MIN = -(2**63)
_GETCWD_ERROR = (
    "cd: error retrieving current directory: getcwd: cannot "
    "access parent directories: No such file or directory"
)


class ShellExit(Exception):
    """Raised when ``exit`` ends the shell; ``status`` is the exit status."""

    def __init__(self, status: int) -> None:
        self.status = status
        super().__init__(f"exit {status}")


def is_builtin(name: str) -> bool:
    """Return True if ``name`` is one of the shell's own commands."""
    return name in BUILTINS


def is_number(text: str | None) -> bool:
    """Return True for an optional sign followed by digits only.

    A lone sign counts as a number, as the shell has always treated it.
    """
    if not text:
        return False
    body = text[1:] if text[0] in "+-" else text
    return all("0" <= ch <= "9" for ch in body)


def _numeric_error(text: str) -> ValueError:
    return ValueError(f"minishell: exit: {text}: numeric argument required")


def parse_int(text: str) -> int:
    """Read an optionally signed decimal number from the start of ``text``.

    Reading stops at the first character that is not a digit. A value
    outside the range of a 64-bit signed integer raises ValueError.
    """
    sign = 1
    body = text
    if text.startswith("-"):
        sign = -1
        body = text[1:]
    elif text.startswith("+"):
        body = text[1:]
    value = 0
    for ch in body:
        if not "0" <= ch <= "9":
            break
        if value > _LONG_MAX or value * sign < _LONG_MIN:
            raise _numeric_error(text)
        value = value * 10 + ord(ch) - ord("0")
    if value * sign > _LONG_MAX or value * sign < _LONG_MIN:
        raise _numeric_error(text)
    return value * sign


def exit_status_from_args(args: Sequence[str]) -> int:
    """Return the status ``exit`` asks for, between 0 and 255.

    ``args`` is the whole command line, ``exit`` included. A first argument
    that is not a number raises ValueError.
    """
    if len(args) < 2:
        return 0
    arg = args[1]
    if not is_number(arg):
        raise _numeric_error(arg)
    return parse_int(arg) % 256


def request_exit(
    args: Sequence[str], state: ShellState, interactive: bool = True
) -> None:
    """Carry out ``exit`` if ``args`` is an exit command.

    Raises ShellExit when the shell is to end. Too many arguments, or a
    computed status of 1, set the status to 1 and keep the shell running.
    A computed status of 0 ends the shell with the previous status.
    ``interactive`` is False inside a pipeline, where nothing is announced
    and any second argument is too many.
    """
    if not args or args[0] != "exit":
        return
    if len(args) > 2 and (not interactive or is_number(args[1])):
        print("minishell: exit: too many arguments", file=sys.stderr)
        state.status = 1
        return
    if interactive:
        print("exit")
    try:
        code = exit_status_from_args(args)
    except ValueError as exc:
        print(exc, file=sys.stderr)
        code = 2
    if code == 1:
        state.status = 1
        return
    if code != 0:
        state.status = code
    raise ShellExit(state.status)


def echo_options(args: Sequence[str]) -> tuple[bool, int]:
    """Read the ``-n`` options of ``echo``.

    Returns whether the trailing newline is suppressed and the index of the
    first argument to print.
    """
    no_newline = False
    index = 1
    for arg in args[1:]:
        if not arg.startswith("-") or set(arg[1:]) != {"n"}:
            break
        no_newline = True
        index += 1
    return no_newline, index


def echo(args: Sequence[str], out: TextIO) -> None:
    """Write the arguments of ``echo`` separated by spaces."""
    if len(args) < 2:
        out.write("\n")
        return
    no_newline, index = echo_options(args)
    out.write(" ".join(args[index:]))
    if not no_newline:
        out.write("\n")


def cd(target: str | None, state: ShellState, out: TextIO, err: TextIO) -> None:
    """Change directory and update ``PWD`` and ``OLDPWD``.

    No target or ``~`` goes to ``HOME``; ``-`` goes to ``OLDPWD`` and
    prints it.
    """
    env = state.env
    if target is None or target == "~":
        dest = env.get("HOME")
        if dest is None:
            err.write("cd: HOME not set\n")
            return
    elif target == "-":
        dest = env.get("OLDPWD")
        if dest is None:
            err.write("cd: OLDPWD not set\n")
            return
        out.write(dest + "\n")
    else:
        dest = target
    try:
        os.chdir(dest)
    except OSError as exc:
        state.status = 1
        reason = exc.strerror or os.strerror(exc.errno or 0)
        err.write(f"{dest}: {reason}\n")
        return
    old = env.get("PWD")
    if old is not None:
        env.set("OLDPWD", old)
    try:
        cwd = os.getcwd()
    except OSError:
        err.write(_GETCWD_ERROR + "\n")
        state.status = 1
        return
    env.set("PWD", cwd)


def pwd(state: ShellState, out: TextIO, err: TextIO) -> None:
    """Print the current directory."""
    try:
        cwd = os.getcwd()
    except OSError as exc:
        reason = exc.strerror or os.strerror(exc.errno or 0)
        err.write(f"pwd: {reason}\n")
        state.status = 1
        return
    out.write(cwd + "\n")


def _export(args: Sequence[str], state: ShellState, out: TextIO, err: TextIO) -> None:
    if len(args) < 2:
        out.writelines(line + "\n" for line in state.env.export_lines())
        return
    for arg in args[1:]:
        try:
            lines = state.env.export(arg)
        except InvalidIdentifierError as exc:
            err.write(f"{exc}\n")
            state.status = 1
            continue
        out.writelines(line + "\n" for line in lines)
        if "=" in arg:
            state.status = 0


def run_builtin(
    args: Sequence[str],
    state: ShellState,
    out: TextIO | None = None,
    err: TextIO | None = None,
) -> int:
    """Run a builtin other than ``exit`` and return the resulting status.

    ``exit`` is handled by request_exit and is ignored here.
    """
    out = sys.stdout if out is None else out
    err = sys.stderr if err is None else err
    if not args:
        return state.status
    name = args[0]
    if name == "echo":
        echo(args, out)
        if len(args) > 1:
            state.status = 0
    elif name == "cd":
        cd(args[1] if len(args) > 1 else None, state, out, err)
    elif name == "env":
        out.writelines(entry + "\n" for entry in state.env.entries())
    elif name == "pwd":
        pwd(state, out, err)
    elif name == "export":
        _export(args, state, out, err)
    elif name == "unset":
        for var in args[1:]:
            state.env.unset(var)
    return state.status