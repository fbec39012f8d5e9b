"""Tokens of a command line and the helpers the lexer builds them with."""

from __future__ import annotations

import re
from dataclasses import dataclass, replace
from enum import Enum, auto
from typing import Iterable

from minishellpy.environment import ShellState

_METACHARS = frozenset("<>|")
_BLANK_RUN = re.compile(r"[ \t]+")


class TokenType(Enum):
    """The kinds of token a command line is cut into."""

    WORD = auto()
    PIPE = auto()
    REDIR_IN = auto()
    REDIR_OUT = auto()
    REDIR_APPEND = auto()
    HEREDOC = auto()


_REDIRECTIONS = frozenset(
    {TokenType.REDIR_IN, TokenType.REDIR_OUT, TokenType.REDIR_APPEND}
)


@dataclass
class Token:
    """One token.

    ``join`` marks a token that is glued to the one after it, and ``found``
    marks a word that the parser leaves out of the argument list.
    """

    text: str
    type: TokenType = TokenType.WORD
    join: bool = False
    found: bool = False


def token_type(text: str) -> TokenType:
    """Classify ``text`` by the operator it starts with."""
    if text.startswith(">>"):
        return TokenType.REDIR_APPEND
    if text.startswith("<<"):
        return TokenType.HEREDOC
    if text.startswith(">"):
        return TokenType.REDIR_OUT
    if text.startswith("<"):
        return TokenType.REDIR_IN
    if text.startswith("|"):
        return TokenType.PIPE
    return TokenType.WORD


def join_tokens(tokens: Iterable[Token]) -> list[Token]:
    """Merge every token marked ``join`` with the token that follows it.

    The merged token keeps the kind of the first one and stays open for
    joining only if the token it absorbed was. The input is not changed.
    """
    result: list[Token] = []
    for tok in tokens:
        if result and result[-1].join:
            prev = result[-1]
            result[-1] = replace(prev, text=prev.text + tok.text, join=tok.join)
        else:
            result.append(replace(tok))
    return result


def split_on_blanks(word: str) -> list[Token]:
    """Cut ``word`` at runs of spaces and tabs into plain word tokens."""
    return [Token(part) for part in _BLANK_RUN.split(word) if part]


def redirection_context(tokens: list[Token]) -> tuple[bool, bool]:
    """Tell how the next word is to be expanded.

    Returns ``(heredoc_delimiter, ambiguous)``: the first is True when the
    next word follows ``<<``, the second when it is the target of another
    redirection.
    """
    if not tokens:
        return False, False
    first = tokens[0]
    if first.type is TokenType.HEREDOC:
        return True, False
    if len(tokens) == 1:
        return False, first.type in _REDIRECTIONS
    last = tokens[-1]
    if last.type is TokenType.HEREDOC:
        return True, False
    return False, last.type in _REDIRECTIONS


def is_blank(ch: str) -> bool:
    """Return True for a space or a character from tab to carriage return."""
    return ch == " " or (len(ch) == 1 and 9 <= ord(ch) <= 13)


def is_metachar(ch: str) -> bool:
    """Return True for ``<``, ``>`` or ``|``."""
    return ch in _METACHARS and len(ch) == 1


def starts_word(line: str, index: int) -> bool:
    """Return True if a word character stands at ``index`` of ``line``."""
    if index >= len(line):
        return False
    ch = line[index]
    return not is_blank(ch) and not is_metachar(ch)


def expand_exit_status(word: str, state: ShellState) -> str:
    """Replace a word starting with ``$?`` by the last exit status.

    The status is reset to 0 once it has been read.
    """
    if not word.startswith("$?"):
        return word
    text = str(state.status)
    state.status = 0
    return text