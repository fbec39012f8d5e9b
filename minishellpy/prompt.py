"""The coloured prompt shown before each command line."""

from __future__ import annotations

import os
from typing import Mapping, Union

from minishellpy.environment import Environment

EnvLike = Union[Environment, Mapping[str, str]]

BLUE = "\001\033[4;34m\002"
_USER_TAIL = "@shell\033[0m\033[1;33m | \033[1;32m"
_ARROW = "\033[1;33m ➜ \033[0m"
UNKNOWN = "(unknown)"


def shorten_home(path: str | None, env: EnvLike) -> str:
    """Write ``path`` with the home directory replaced by ``~``."""
    if path is None:
        return UNKNOWN
    home = env.get("HOME")
    if home is not None and path.startswith(home):
        rest = path[len(home):]
        if rest == "" or rest.startswith("/"):
            return "~" + rest
    return path


def _current_directory(env: EnvLike) -> str:
    try:
        cwd = os.getcwd()
    except OSError:
        pwd = env.get("PWD")
        if pwd is None:
            return UNKNOWN
        return shorten_home(pwd, env)
    return shorten_home(cwd, env)


def build_prompt(env: EnvLike) -> str:
    """Return the prompt: user name, then the current directory, then an arrow."""
    user = env.get("USER") or "unknown"
    return BLUE + user + _USER_TAIL + _current_directory(env) + _ARROW