"""Building blocks of a small POSIX-style shell: variables, expansion, tokens, parsing, heredocs, builtins and pipeline execution."""

__version__ = "0.1.0"