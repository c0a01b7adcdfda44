import pytest
from prompt_toolkit.formatted_text import fragment_list_to_text, to_formatted_text

from grid36.config import Config
from grid36.shell import Grid36Shell, ShellExit


def text(out) -> str:
    return fragment_list_to_text(to_formatted_text(out))


@pytest.fixture
def shell(tmp_path):
    return Grid36Shell(Config.load(str(tmp_path / "cfg.json")))


def test_decode_command(shell):
    out = text(shell.handle("decode u"))
    assert out.startswith("U  depth 1")
    assert "1679616 m" in out


def test_encode_uses_default_depth(shell):
    shell.handle("depth 4")
    out = text(shell.handle("encode -47.8825 -15.7942"))
    assert "depth 4" in out
    assert "lon -47." in out


def test_encode_outside_domain_warns(shell):
    assert "outside the indexed area" in text(shell.handle("encode -54 80 3"))


def test_adjust_parent_children(shell):
    assert text(shell.handle("adjust U 2")) == "U0"
    assert text(shell.handle("parent U0")) == "U"
    assert "no parent" in text(shell.handle("parent U"))
    kids = text(shell.handle("children U")).split()
    assert len(kids) == 36


def test_search_command(shell):
    assert "corner" in text(shell.handle("search 7B2"))


def test_errors_are_reported_not_raised(shell):
    assert "invalid tile ID" in text(shell.handle("decode U?"))
    assert "depth must be" in text(shell.handle("encode -47 -15 12"))
    assert "usage" in text(shell.handle("adjust U"))
    assert "unknown command" in text(shell.handle("frobnicate"))
    assert "could not convert" in text(shell.handle("encode east south"))


def test_blank_line_and_help(shell):
    assert text(shell.handle("   ")) == ""
    assert "Commands" in text(shell.handle("help"))


def test_quit(shell):
    with pytest.raises(ShellExit):
        shell.handle("quit")
