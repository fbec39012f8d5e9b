"""Running parsed commands: builtins in the shell, programs as child processes."""

from __future__ import annotations

import errno
import io
import os
import signal
import stat
import subprocess
import sys
import threading
from contextlib import contextmanager, nullcontext, redirect_stdout
from typing import Iterable, Iterator, Mapping, TextIO, Union

from minishellpy.builtins import ShellExit, is_builtin, request_exit, run_builtin
from minishellpy.environment import Environment, ShellState
from minishellpy.parser import Command

EnvLike = Union[Environment, Mapping[str, str]]

_NO_SUCH_FILE = "No such file or directory"

_INPUT_ERRORS = {
    errno.ENOTDIR: "Not a directory",
    errno.EACCES: "Permission denied",
}

_OUTPUT_ERRORS = {
    errno.ENOTDIR: "Not a directory",
    errno.EACCES: "Permission denied",
    errno.EISDIR: "Is a directory",
}

_PARENT_OUTPUT_ERRORS = {
    errno.EISDIR: "Is a directory",
    errno.ENOTDIR: "Not a directory",
    errno.ENOENT: _NO_SUCH_FILE,
    errno.EACCES: "Permission denied",
}


class CommandError(Exception):
    """A command could not be started; ``status`` is the exit status it gives."""

    def __init__(self, message: str, status: int) -> None:
        self.message = message
        self.status = status
        super().__init__(message)


def _close(fd: int | None) -> None:
    if fd is not None:
        os.close(fd)


def _output_flags(command: Command) -> int:
    return os.O_WRONLY | os.O_CREAT | (os.O_APPEND if command.append else os.O_TRUNC)


def resolve_command(name: str, env: EnvLike) -> str:
    """Find the program ``name`` refers to.

    A name with a slash is used as a path; any other is looked up in the
    directories of ``PATH``. Raises CommandError when nothing runnable is
    found.
    """
    if "/" in name:
        try:
            info = os.stat(name)
        except OSError as exc:
            reason = exc.strerror or os.strerror(exc.errno or 0)
            raise CommandError(f"minishell: : {reason}", 127) from exc
        if stat.S_ISDIR(info.st_mode):
            raise CommandError(f"minishell: {name}: Is a directory", 126)
        return name
    search = env.get("PATH")
    if search is None:
        raise CommandError(f"minishell: {name}: {_NO_SUCH_FILE}", 127)
    for directory in (part for part in search.split(":") if part):
        candidate = f"{directory}/{name}"
        try:
            info = os.stat(candidate)
        except OSError:
            continue
        if not stat.S_ISDIR(info.st_mode):
            return candidate
    raise CommandError(f"minishell: {name}: command not found", 127)


def check_inputs(command: Command, err: TextIO) -> bool:
    """Return True if every input file of ``command`` can be opened for reading."""
    for name in command.inputs:
        try:
            fd = os.open(name, os.O_RDONLY)
        except OSError:
            err.write(f"minishell: {name}: {_NO_SUCH_FILE}\n")
            return False
        os.close(fd)
    return True


def open_inputs(command: Command) -> int | None:
    """Open the input files of ``command`` in turn and return the last one's descriptor.

    Returns None when there are no inputs; a file that cannot be opened
    raises CommandError with status 1.
    """
    current: int | None = None
    for name in command.inputs:
        try:
            fd = os.open(name, os.O_RDONLY)
        except OSError as exc:
            _close(current)
            reason = _INPUT_ERRORS.get(exc.errno or 0, _NO_SUCH_FILE)
            raise CommandError(f"minishell: {name}: {reason}", 1) from exc
        _close(current)
        current = fd
    return current


def open_output(command: Command) -> int | None:
    """Open the output file of ``command`` for writing and return its descriptor.

    Returns None when there is no output file; a directory or a file that
    cannot be opened raises CommandError with status 1.
    """
    name = command.output
    if name is None:
        return None
    if os.path.isdir(name):
        raise CommandError(f"minishell : {name}:  Is a directory", 1)
    try:
        return os.open(name, _output_flags(command), 0o644)
    except OSError as exc:
        reason = _OUTPUT_ERRORS.get(exc.errno or 0, _NO_SUCH_FILE)
        raise CommandError(f"minishell: {name}: {reason}", 1) from exc


def has_command(commands: Iterable[Command], err: TextIO) -> bool:
    """Return True if some command has a non-empty name.

    Each command whose name is empty is reported as not found. An empty
    pipeline counts as having a command.
    """
    items = list(commands)
    if not items:
        return True
    found = False
    for command in items:
        if command.args and command.args[0] == "":
            err.write("command not found\n")
        if command.args and command.args[0] != "":
            found = True
    return found


def _run_parent_builtin(command: Command, state: ShellState) -> None:
    if not check_inputs(command, sys.stderr):
        return
    if command.redirect_error:
        state.status = 1
        return
    target: TextIO | None = None
    if command.output is not None:
        try:
            fd = os.open(command.output, _output_flags(command), 0o644)
        except OSError as exc:
            reason = _PARENT_OUTPUT_ERRORS.get(exc.errno or 0) or os.strerror(
                exc.errno or 0
            )
            print(f"minishell: {command.output}: {reason}", file=sys.stderr)
            state.status = 1
            return
        target = os.fdopen(fd, "w")
    try:
        with redirect_stdout(target) if target is not None else nullcontext():
            request_exit(command.args, state, interactive=True)
            run_builtin(command.args, state)
    finally:
        if target is not None:
            target.close()


def _redirections_only(commands: list[Command], state: ShellState) -> None:
    if not any(c.inputs or c.output is not None or c.heredocs for c in commands):
        return
    first = commands[0]
    try:
        _close(open_inputs(first))
        _close(open_output(first))
    except CommandError as exc:
        print(exc.message, file=sys.stderr)
        state.status = exc.status
        return
    state.status = 0


def _feed(fd: int, data: bytes) -> None:
    try:
        view = memoryview(data)
        while view:
            written = os.write(fd, view)
            view = view[written:]
    except OSError:
        pass
    finally:
        os.close(fd)


def _run_child_builtin(
    command: Command,
    state: ShellState,
    target: int | None,
    feeders: list[threading.Thread],
) -> int:
    child = ShellState(env=Environment(state.env.as_dict()), status=state.status)
    buffer = io.StringIO()
    with redirect_stdout(buffer):
        try:
            request_exit(command.args, child, interactive=False)
            run_builtin(command.args, child, out=buffer, err=sys.stderr)
            status = child.status
        except ShellExit as exc:
            status = exc.status
    text = buffer.getvalue()
    if target is None:
        sys.stdout.write(text)
        sys.stdout.flush()
    else:
        feeder = threading.Thread(
            target=_feed, args=(os.dup(target), text.encode()), daemon=True
        )
        feeder.start()
        feeders.append(feeder)
    return status


def _start_stage(
    command: Command,
    state: ShellState,
    incoming: int | None,
    outgoing: int | None,
    feeders: list[threading.Thread],
) -> Union[int, subprocess.Popen]:
    """Start one command of a pipeline; return its process or its exit status."""
    in_fd: int | None = None
    out_fd: int | None = None
    try:
        if command.heredoc_file is not None and not command.interrupted:
            try:
                in_fd = os.open(command.heredoc_file, os.O_RDONLY)
            except OSError:
                print(f"minishell: {_NO_SUCH_FILE}", file=sys.stderr)
                return 1
        try:
            fd = open_inputs(command)
            if fd is not None:
                _close(in_fd)
                in_fd = fd
            out_fd = open_output(command)
        except CommandError as exc:
            print(exc.message, file=sys.stderr)
            return exc.status
        if command.redirect_error:
            return 1
        args = command.args
        if not args or not args[0]:
            return 0
        source = in_fd if in_fd is not None else incoming
        target = out_fd if out_fd is not None else outgoing
        if is_builtin(args[0]):
            return _run_child_builtin(command, state, target, feeders)
        try:
            path = resolve_command(args[0], state.env)
        except CommandError as exc:
            print(exc.message, file=sys.stderr)
            return exc.status
        sys.stdout.flush()
        sys.stderr.flush()
        try:
            return subprocess.Popen(
                args,
                executable=path,
                stdin=source,
                stdout=target,
                env=state.env.as_dict(),
            )
        except OSError as exc:
            reason = exc.strerror or os.strerror(exc.errno or 0)
            print(f"execve: {reason}", file=sys.stderr)
            return 1
    finally:
        _close(in_fd)
        _close(out_fd)
        _close(outgoing)


def _run_pipeline(
    commands: list[Command], state: ShellState, feeders: list[threading.Thread]
) -> list[Union[int, subprocess.Popen]] | None:
    results: list[Union[int, subprocess.Popen]] = []
    incoming: int | None = None
    count = len(commands)
    for index, command in enumerate(commands):
        read_end: int | None = None
        outgoing: int | None = None
        if index < count - 1:
            try:
                read_end, outgoing = os.pipe()
            except OSError as exc:
                _close(incoming)
                print(f"pipe: {exc.strerror}", file=sys.stderr)
                state.status = 1
                return None
        try:
            results.append(_start_stage(command, state, incoming, outgoing, feeders))
        finally:
            _close(incoming)
        incoming = read_end
    _close(incoming)
    return results


@contextmanager
def _ignoring_interrupts() -> Iterator[None]:
    try:
        previous = signal.signal(signal.SIGINT, signal.SIG_IGN)
    except ValueError:
        installed = False
        previous = None
    else:
        installed = True
    try:
        yield
    finally:
        if installed:
            signal.signal(
                signal.SIGINT, previous if previous is not None else signal.SIG_DFL
            )


def _wait_all(results: list[Union[int, subprocess.Popen]], state: ShellState) -> None:
    last = len(results) - 1
    with _ignoring_interrupts():
        for index, result in enumerate(results):
            code = result if isinstance(result, int) else result.wait()
            if code < 0:
                sig = -code
                state.status = 128 + sig
                if sig == signal.SIGINT:
                    sys.stdout.write("\n")
                    sys.stdout.flush()
                    break
                if sig == signal.SIGQUIT:
                    print("Quit (core dumped)", file=sys.stderr)
            elif index == last:
                state.status = code


def execute(commands: Iterable[Command], state: ShellState) -> int:
    """Run a parsed pipeline and return the resulting exit status.

    A lone builtin runs in the shell itself and may raise ShellExit; every
    other command runs as its own stage, builtins on a copy of the state.
    """
    items = list(commands)
    if not items:
        return state.status
    first = items[0]
    if len(items) == 1 and first.args and is_builtin(first.args[0]):
        _run_parent_builtin(first, state)
        return state.status
    if not has_command(items, sys.stderr):
        _redirections_only(items, state)
        return state.status
    if first.interrupted:
        return state.status
    feeders: list[threading.Thread] = []
    results = _run_pipeline(items, state, feeders)
    if results is not None:
        _wait_all(results, state)
    for feeder in feeders:
        feeder.join()
    return state.status