"""Shell variables and the state a session carries from one command to the next."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, Mapping


class InvalidIdentifierError(ValueError):
    """Raised when ``export`` is given a name that is not a valid identifier."""

    def __init__(self, arg: str) -> None:
        self.arg = arg
        super().__init__(f"minishell: export: `{arg}': not a valid identifier")


def _is_ascii_alpha(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


def _is_ascii_alnum(ch: str) -> bool:
    return ch.isascii() and ch.isalnum()


def is_valid_identifier(name: str) -> bool:
    """Return True if ``name`` is a letter or underscore followed by letters, digits or underscores."""
    if not name:
        return False
    if not (_is_ascii_alpha(name[0]) or name[0] == "_"):
        return False
    return all(_is_ascii_alnum(ch) or ch == "_" for ch in name[1:])


class Environment:
    """An ordered set of shell variables.

    New variables go to the end; updating one keeps its place.
    """

    def __init__(self, variables: Mapping[str, str] | None = None) -> None:
        self._vars: dict[str, str] = dict(variables or {})

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, str]) -> Environment:
        """Build an environment holding a copy of ``mapping``."""
        return cls(mapping)

    def get(self, name: str) -> str | None:
        """Return the value of ``name``, or None when it is not set."""
        if not name:
            return None
        return self._vars.get(name)

    def set(self, name: str, value: str) -> None:
        """Give ``name`` the value ``value``, adding it at the end if new."""
        self._vars[name] = value

    def unset(self, name: str) -> None:
        """Remove ``name``; removing a variable that is not set does nothing."""
        self._vars.pop(name, None)

    def declare(self, name: str) -> None:
        """Add ``name`` with an empty value unless it already exists."""
        self._vars.setdefault(name, "")

    def export(self, arg: str) -> list[str]:
        """Apply one ``export`` argument.

        ``NAME=value`` sets a variable, ``NAME`` declares it. An empty
        argument returns the listing that ``export`` alone prints; otherwise
        the returned list is empty. Invalid names raise
        InvalidIdentifierError.
        """
        if not arg:
            return self.export_lines()
        name, sep, value = arg.partition("=")
        if not sep:
            if not is_valid_identifier(arg):
                raise InvalidIdentifierError(arg)
            self.declare(arg)
            return []
        if not is_valid_identifier(name):
            raise InvalidIdentifierError(arg)
        self.set(name, value)
        return []

    def entries(self) -> list[str]:
        """Return the variables as ``NAME=value`` strings, in order."""
        return [f"{name}={value}" for name, value in self._vars.items()]

    def export_lines(self) -> list[str]:
        """Return the sorted ``declare -x`` listing."""
        return [
            'declare -x {}="{}"'.format(*entry.split("=", 1))
            for entry in sorted(self.entries())
        ]

    def as_dict(self) -> dict[str, str]:
        """Return a copy of the variables as a plain dictionary."""
        return dict(self._vars)

    def __contains__(self, name: object) -> bool:
        return name in self._vars

    def __iter__(self) -> Iterator[str]:
        return iter(self._vars)

    def __len__(self) -> int:
        return len(self._vars)

    def __repr__(self) -> str:
        return f"Environment({self._vars!r})"


@dataclass
class ShellState:
    """What a shell session keeps between commands."""

    env: Environment = field(default_factory=Environment)
    status: int = 0
    redirect_error: bool = False