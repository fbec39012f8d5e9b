import string
from io import StringIO
from pathlib import Path

from minishellpy.environment import Environment, ShellState
from minishellpy.heredoc import prepare_heredocs, random_name, read_heredoc
from minishellpy.parser import Command


def _reader(lines):
    it = iter(lines)
    return lambda: next(it, None)


def _interrupt():
    raise KeyboardInterrupt


def test_random_name_shape():
    name = random_name()
    assert len(name) == 10
    assert set(name) <= set(string.ascii_lowercase)


def test_read_heredoc_expands_variables():
    env = Environment({"NAME": "world"})
    sink = StringIO()
    done = read_heredoc("EOF", _reader(["hello $NAME", "EOF"]), sink, env, 0, True)
    assert done is True
    assert sink.getvalue() == "hello world\n"


def test_read_heredoc_without_expansion():
    env = Environment({"NAME": "world"})
    sink = StringIO()
    read_heredoc("EOF", _reader(["hello $NAME", "EOF"]), sink, env, 0, False)
    assert sink.getvalue() == "hello $NAME\n"


def test_read_heredoc_expands_status():
    sink = StringIO()
    read_heredoc("END", _reader(["$?", "END"]), sink, Environment(), 3, True)
    assert sink.getvalue() == "3\n"


def test_read_heredoc_stops_at_delimiter():
    read_line = _reader(["a", "STOP", "after"])
    sink = StringIO()
    read_heredoc("STOP", read_line, sink, Environment())
    assert sink.getvalue() == "a\n"
    assert read_line() == "after"


def test_read_heredoc_end_of_input_warns(capsys):
    sink = StringIO()
    done = read_heredoc("EOF", _reader(["only"]), sink, Environment())
    assert done is False
    assert sink.getvalue() == "only\n"
    assert "wanted `EOF'" in capsys.readouterr().out


def test_prepare_heredocs_keeps_last(tmp_path):
    command = Command(heredocs=["A", "B"])
    state = ShellState()
    ok = prepare_heredocs(
        command, state, _reader(["one", "A", "two", "B"]), True, str(tmp_path)
    )
    assert ok is True
    assert Path(command.heredoc_file).read_text() == "two\n"
    assert list(tmp_path.iterdir()) == [Path(command.heredoc_file)]
    assert command.interrupted is False


def test_prepare_heredocs_without_heredocs(tmp_path):
    command = Command(args=["cat"])
    assert prepare_heredocs(command, ShellState(), _reader([]), True, str(tmp_path))
    assert command.heredoc_file is None
    assert list(tmp_path.iterdir()) == []


def test_prepare_heredocs_interrupted_on_last(tmp_path):
    command = Command(heredocs=["A"])
    state = ShellState()
    ok = prepare_heredocs(command, state, _interrupt, True, str(tmp_path))
    assert ok is False
    assert command.interrupted is True
    assert state.status == 130
    assert Path(command.heredoc_file).exists()


def test_prepare_heredocs_interrupted_early(tmp_path):
    command = Command(heredocs=["A", "B"])
    state = ShellState()
    ok = prepare_heredocs(command, state, _interrupt, True, str(tmp_path))
    assert ok is False
    assert command.heredoc_file is None
    assert list(tmp_path.iterdir()) == []


def test_prepare_heredocs_missing_directory(tmp_path):
    command = Command(heredocs=["A"])
    missing = str(tmp_path / "nope")
    ok = prepare_heredocs(command, ShellState(), _reader(["A"]), True, missing)
    assert ok is False
    assert command.heredoc_file is None