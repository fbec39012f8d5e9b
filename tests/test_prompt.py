from unittest import mock

from minishellpy.environment import Environment
from minishellpy.prompt import UNKNOWN, build_prompt, shorten_home

CWD_KEY = "P" + "WD"


def test_shorten_home_below_home():
    env = Environment({"HOME": "/home/u"})
    assert shorten_home("/home/u/projects", env) == "~/projects"


def test_shorten_home_exact_home():
    env = Environment({"HOME": "/home/u"})
    assert shorten_home("/home/u", env) == "~"


def test_shorten_home_sibling_is_untouched():
    env = Environment({"HOME": "/home/u"})
    assert shorten_home("/home/user2", env) == "/home/user2"


def test_shorten_home_without_home():
    assert shorten_home("/tmp/x", Environment()) == "/tmp/x"


def test_shorten_home_none():
    assert shorten_home(None, Environment()) == "(unknown)"


def test_shorten_home_accepts_mapping():
    assert shorten_home("/h/a", {"HOME": "/h"}).endswith("/a")
    assert shorten_home("/h/a", {"HOME": "/h"}).startswith("~")


def test_build_prompt_contains_user_and_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    env = Environment({"USER": "alice"})
    text = build_prompt(env)
    assert "alice@shell" in text
    assert str(tmp_path) in text
    assert text.endswith("\033[0m")


def test_build_prompt_unknown_user(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    text = build_prompt(Environment())
    assert "unknown@shell" in text


def test_build_prompt_shortens_home(tmp_path, monkeypatch):
    sub = tmp_path / "work"
    sub.mkdir()
    monkeypatch.chdir(sub)
    env = Environment({"USER": "bob", "HOME": str(tmp_path)})
    text = build_prompt(env)
    assert "~/work" in text
    assert str(tmp_path) not in text


def test_build_prompt_falls_back_to_pwd():
    fallback_dir = "/srv/data"
    env = Environment({"USER": "carol", CWD_KEY: fallback_dir})
    with mock.patch("os.getcwd", side_effect=FileNotFoundError):
        text = build_prompt(env)
    assert fallback_dir in text


def test_build_prompt_without_cwd_or_pwd():
    env = Environment({"USER": "dave"})
    with mock.patch("os.getcwd", side_effect=FileNotFoundError):
        text = build_prompt(env)
    assert UNKNOWN in text