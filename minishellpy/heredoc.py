"""Reading here-documents into temporary files before a command runs."""

from __future__ import annotations

import os
import sys
from typing import Callable, Optional, TextIO

from minishellpy.environment import ShellState
from minishellpy.expansion import EnvLike, expand_variables
from minishellpy.parser import Command

DEFAULT_DIRECTORY = "/tmp"
_NAME_LENGTH = 10

LineReader = Callable[[], Optional[str]]


def random_name() -> str:
    """Return ten random lower-case letters for a temporary file name."""
    return "".join(chr(ord("a") + byte % 26) for byte in os.urandom(_NAME_LENGTH))


def read_heredoc(
    delimiter: str,
    read_line: LineReader,
    sink: TextIO,
    env: EnvLike,
    status: int = 0,
    expand: bool = True,
) -> bool:
    """Copy lines from ``read_line`` into ``sink`` until ``delimiter``.

    ``read_line`` returns None at end of input. Each line is written with a
    newline, its variables expanded when ``expand`` is set. Returns True if
    the delimiter was met and False at end of input, which is warned about.
    """
    while True:
        line = read_line()
        if line is None:
            print(f"warning: delimited by end-of-file (wanted `{delimiter}')")
            return False
        if line == delimiter:
            return True
        text = expand_variables(line, env, status) if expand else line
        sink.write(text + "\n")


def prepare_heredocs(
    command: Command,
    state: ShellState,
    read_line: LineReader,
    expand: bool = True,
    directory: str = DEFAULT_DIRECTORY,
) -> bool:
    """Read every here-document of ``command`` into a file.

    Only the last one is kept, in ``command.heredoc_file``; the others are
    removed. An interrupt from ``read_line`` marks the command as
    interrupted, sets the status to 130 and returns False. A file that
    cannot be created also ends reading and returns False.
    """
    count = len(command.heredocs)
    for index, delimiter in enumerate(command.heredocs):
        path = os.path.join(directory, random_name())
        try:
            fd = os.open(path, os.O_RDWR | os.O_CREAT, 0o644)
        except OSError:
            return False
        interrupted = False
        with os.fdopen(fd, "w") as sink:
            try:
                read_heredoc(
                    delimiter, read_line, sink, state.env, state.status, expand
                )
            except KeyboardInterrupt:
                interrupted = True
                sys.stdout.write("^C")
        if index == count - 1:
            command.heredoc_file = path
        else:
            os.unlink(path)
        if interrupted:
            command.interrupted = True
            state.status = 130
            return False
    return True