import pytest

from minishell.env import Environment, Variable


@pytest.fixture
def env():
    return Environment.from_envp(["HOME=/home/user", "PATH=/bin:/usr/bin", "EMPTY="])


def test_from_envp_keeps_order(env):
    assert [var.key for var in env] == ["HOME", "PATH", "EMPTY"]
    assert len(env) == 3


def test_from_envp_skips_entries_without_equals():
    env = Environment.from_envp(["NOEQ", "A=1"])
    assert [var.key for var in env] == ["A"]


def test_from_envp_splits_at_first_equals():
    env = Environment.from_envp(["A=b=c"])
    assert env.get("A") == "b=c"


def test_from_envp_none_gives_empty():
    assert len(Environment.from_envp(None)) == 0


def test_empty_value_is_kept(env):
    assert env.get("EMPTY") == ""
    assert "EMPTY=" in env.to_envp()


def test_get_missing_returns_none(env):
    assert env.get("MISSING") is None
    assert env.find("MISSING") is None
    assert env.get(None) is None


def test_find_returns_variable(env):
    var = env.find("HOME")
    assert var == Variable("HOME", "/home/user", True)


def test_set_new_appends_at_end(env):
    env.set("NEW", "x")
    assert [var.key for var in env][-1] == "NEW"
    assert env.get("NEW") == "x"


def test_set_existing_replaces_value(env):
    env.set("HOME", "/tmp")
    assert env.get("HOME") == "/tmp"
    assert len(env) == 3


def test_set_none_keeps_value_and_exports(env):
    env.find("PATH").exported = False
    env.set("PATH", None)
    var = env.find("PATH")
    assert var.exported is True
    assert var.value == "/bin:/usr/bin"


def test_set_new_without_value(env):
    env.set("FLAG", None)
    var = env.find("FLAG")
    assert var.value is None
    assert not any(entry.startswith("FLAG") for entry in env.to_envp())


def test_set_empty_key_is_ignored(env):
    env.set("", "x")
    env.set(None, "x")
    assert len(env) == 3


def test_unset_removes(env):
    env.unset("PATH")
    assert env.get("PATH") is None
    assert [var.key for var in env] == ["HOME", "EMPTY"]


def test_unset_missing_is_noop(env):
    env.unset("MISSING")
    assert len(env) == 3


def test_to_envp_roundtrip(env):
    rebuilt = Environment.from_envp(env.to_envp())
    assert [(v.key, v.value) for v in rebuilt] == [(v.key, v.value) for v in env]


def test_to_envp_skips_unexported(env):
    env.find("HOME").exported = False
    assert env.to_envp() == ["PATH=/bin:/usr/bin", "EMPTY="]


def test_duplicates_find_first():
    env = Environment.from_envp(["A=1", "A=2"])
    assert env.get("A") == "1"
    env.unset("A")
    assert env.get("A") == "2"