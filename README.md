# minishellpy

The pieces of a small POSIX-style command shell: shell variables and session
state, `$NAME` / `$?` expansion and quote removal, tokens, a parser that
turns tokens into a pipeline of commands with their redirections,
here-documents, the builtins, and an executor that runs a pipeline with
builtins in-process and other programs as child processes.

## Modules

- `minishellpy.environment` — `Environment` (ordered variables with `get`,
  `set`, `unset`, `declare`, `export`, `entries`, `export_lines`,
  `as_dict`), `ShellState` (`env`, `status`, `redirect_error`),
  `is_valid_identifier` and `InvalidIdentifierError`.
- `minishellpy.expansion` — `expand_variables`, `collapse_blanks`,
  `remove_quotes`, `quotes_closed`, `count_words`, `strip_quotes`, and
  `expand_word`, which raises `AmbiguousRedirectError` when a redirection
  target expands to anything other than exactly one word.
- `minishellpy.tokens` — `TokenType`, `Token`, `token_type`, `join_tokens`,
  `split_on_blanks`, `redirection_context`, `is_blank`, `is_metachar`,
  `starts_word`, `expand_exit_status`.
- `minishellpy.parser` — `Command`, `ParseError`, `parse_commands`,
  `is_redirection`.
- `minishellpy.heredoc` — `random_name`, `read_heredoc`,
  `prepare_heredocs`.
- `minishellpy.builtins` — `echo`, `cd`, `pwd`, `run_builtin` (echo, cd,
  pwd, env, export, unset), `request_exit` and `ShellExit` for `exit`,
  plus `is_builtin`, `is_number`, `parse_int`, `exit_status_from_args`,
  `echo_options`.
- `minishellpy.executor` — `execute`, `resolve_command`, `check_inputs`,
  `open_inputs`, `open_output`, `has_command`, `CommandError`.
- `minishellpy.prompt` — `build_prompt` and `shorten_home`.

## Examples

```python
from minishellpy.environment import Environment, is_valid_identifier
from minishellpy.expansion import expand_variables, remove_quotes, quotes_closed

env = Environment.from_mapping({"HOME": "/home/user", "USER": "user"})
env.set("GREETING", "hello")

print(env.get("GREETING"))                       # hello
print(expand_variables("$HOME/notes", env, 0))   # /home/user/notes
print(remove_quotes("'single'\"double\""))       # singledouble
print(quotes_closed("'unterminated"))            # False
print(is_valid_identifier("1abc"))               # False
```

`Environment.export` takes one argument as the `export` builtin does
(`NAME=value` or `NAME`) and raises `InvalidIdentifierError` for invalid
names; `export_lines` gives the sorted `declare -x NAME="value"` listing.

Parsing and running a pipeline:

```python
from minishellpy.environment import Environment, ShellState
from minishellpy.executor import execute
from minishellpy.parser import parse_commands
from minishellpy.tokens import Token, TokenType

state = ShellState(env=Environment.from_mapping({"PATH": "/usr/bin:/bin"}))
tokens = [Token("echo"), Token("hello"), Token("|", TokenType.PIPE), Token("cat")]
commands = parse_commands(tokens, state)
execute(commands, state)   # prints "hello", returns the exit status
```

`parse_commands` raises `ParseError` on syntax errors such as a leading
pipe or a redirection without a target, and creates or truncates `>` and
`>>` targets as it meets them. `execute` runs a lone builtin in the current
process (where `exit` raises `ShellExit`); every other stage runs on its
own, builtins on a copy of the state. Here-documents are read beforehand
with `prepare_heredocs(command, state, read_line)`, where `read_line`
returns one line at a time and `None` at end of input.

## What it does not do

The package has no interactive read–eval loop and no command to start a
shell, and it has no function that cuts a raw command line into tokens:
callers build the `Token` list themselves, using the helpers in
`minishellpy.tokens` and `minishellpy.expansion`. Signal handling at a
prompt and line editing or history are not provided.

## Tests

The test suite uses pytest; install the `test` extra and run `pytest`.