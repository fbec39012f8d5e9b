import pytest

from minishellpy.environment import (
    Environment,
    InvalidIdentifierError,
    ShellState,
    is_valid_identifier,
)


@pytest.fixture
def env():
    return Environment.from_mapping({"HOME": "/home/user", "PATH": "/bin:/usr/bin"})


@pytest.mark.parametrize("name", ["A", "_", "_x1", "abc_DEF9"])
def test_valid_identifiers(name):
    assert is_valid_identifier(name) is True


@pytest.mark.parametrize("name", ["", "1A", "A-B", "a b", "é", "="])
def test_invalid_identifiers(name):
    assert is_valid_identifier(name) is False


def test_get_returns_value_or_none(env):
    assert env.get("HOME") == "/home/user"
    assert env.get("HOM") is None
    assert env.get("") is None


def test_set_updates_in_place_and_appends(env):
    env.set("HOME", "/tmp")
    env.set("NEW", "v")
    assert list(env) == ["HOME", "PATH", "NEW"]
    assert env.get("HOME") == "/tmp"
    assert env.get("NEW") == "v"


def test_unset_removes_and_ignores_missing(env):
    env.unset("HOME")
    env.unset("MISSING")
    assert "HOME" not in env
    assert len(env) == 1


def test_declare_keeps_existing_value(env):
    env.declare("HOME")
    env.declare("FRESH")
    assert env.get("HOME") == "/home/user"
    assert env.get("FRESH") == ""


def test_export_with_value_sets_variable(env):
    assert env.export("GREETING=hi=there") == []
    assert env.get("GREETING") == "hi=there"


def test_export_without_value_declares(env):
    assert env.export("ONLY") == []
    assert env.get("ONLY") == ""


@pytest.mark.parametrize("arg", ["1A=b", "=value", "bad-name", "a b=c"])
def test_export_rejects_invalid_names(env, arg):
    with pytest.raises(InvalidIdentifierError) as info:
        env.export(arg)
    assert info.value.arg == arg
    assert "not a valid identifier" in str(info.value)
    assert env.as_dict() == {"HOME": "/home/user", "PATH": "/bin:/usr/bin"}


def test_export_empty_argument_lists(env):
    assert env.export("") == env.export_lines()


def test_export_lines_sorted_and_quoted():
    env = Environment.from_mapping({"b": "2", "A": "1", "EMPTY": ""})
    lines = env.export_lines()
    assert lines == sorted(lines)
    assert 'declare -x A="1"' in lines
    assert 'declare -x EMPTY=""' in lines
    assert len(lines) == 3


def test_entries_round_trip(env):
    rebuilt = Environment.from_mapping(
        dict(entry.split("=", 1) for entry in env.entries())
    )
    assert rebuilt.as_dict() == env.as_dict()


def test_as_dict_is_a_copy(env):
    copy = env.as_dict()
    copy["HOME"] = "changed"
    assert env.get("HOME") == "/home/user"


def test_shell_state_defaults():
    state = ShellState()
    assert state.status == 0
    assert state.redirect_error is False
    assert len(state.env) == 0