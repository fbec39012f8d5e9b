"""Variable expansion and quote handling for words of a command line."""

from __future__ import annotations

from itertools import groupby
from typing import Mapping, Union

from minishellpy.environment import Environment

EnvLike = Union[Environment, Mapping[str, str]]

_BLANKS = (" ", "\t")


class AmbiguousRedirectError(Exception):
    """Raised when a redirection target expands to anything but one word."""

    def __init__(self, word: str) -> None:
        self.word = word
        super().__init__(f"minishell : {word}: ambiguous redirect")


def _is_name_char(ch: str) -> bool:
    return (ch.isascii() and ch.isalnum()) or ch == "_"


def collapse_blanks(value: str) -> str:
    """Replace every run of spaces and tabs with a single space."""
    return "".join(
        " " if blank else "".join(run)
        for blank, run in groupby(value, key=lambda ch: ch in _BLANKS)
    )


def expand_variables(text: str, env: EnvLike, status: int) -> str:
    """Expand ``$?`` and ``$NAME`` in ``text``.

    Nothing is expanded when the text starts with a single quote. When it
    starts with no quote at all, blanks inside values are collapsed.
    Expansion stops at the first variable that is not set.
    """
    expand = text[:1] != "'"
    collapse = text[:1] not in ("'", '"')
    parts: list[str] = []
    i = 0
    length = len(text)

    def append_value(value: str) -> None:
        parts.append(collapse_blanks(value) if collapse else value)

    while i < length:
        ch = text[i]
        nxt = text[i + 1] if i + 1 < length else ""
        if expand and ch == "$" and nxt == "?":
            append_value(str(status))
            i += 2
            continue
        if expand and ch == "$" and nxt and _is_name_char(nxt):
            start = i + 1
            end = start
            while end < length and _is_name_char(text[end]):
                end += 1
            value = env.get(text[start:end])
            if value is None:
                break
            append_value(value)
            i = end
            continue
        parts.append(ch)
        i += 1
    return "".join(parts)


def remove_quotes(text: str) -> str:
    """Drop the quote characters that open and close quoted sections."""
    in_single = False
    in_double = False
    out: list[str] = []
    for ch in text:
        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        else:
            out.append(ch)
    return "".join(out)


def quotes_closed(text: str) -> bool:
    """Return True if every quoted section in ``text`` is closed."""
    in_single = False
    in_double = False
    for ch in text:
        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
    return not in_single and not in_double


def count_words(text: str) -> int:
    """Count the words of ``text`` as the ambiguity check sees them.

    A word ends at a character other than a space that is followed by a
    space, a tab or the end of the text.
    """
    followers = list(text[1:]) + [None]
    return sum(
        1
        for ch, nxt in zip(text, followers)
        if ch != " " and (nxt is None or nxt in _BLANKS)
    )


def strip_quotes(text: str) -> tuple[str, bool]:
    """Remove quotes from a word that starts with one.

    Returns the resulting text and whether the word was quoted.
    """
    if text[:1] in ("'", '"'):
        return remove_quotes(text), True
    return text, False


def expand_word(
    word: str,
    env: EnvLike,
    status: int,
    ambiguous: bool = False,
    heredoc_delimiter: bool = False,
) -> str:
    """Expand one word of a command line.

    A heredoc delimiter is returned untouched. When ``ambiguous`` is set the
    word is a redirection target, and an expansion that changes it into
    anything but exactly one word raises AmbiguousRedirectError.
    """
    if heredoc_delimiter:
        return word
    expanded = expand_variables(word, env, status)
    if ambiguous and expanded != word and count_words(expanded) != 1:
        raise AmbiguousRedirectError(word)
    return expanded