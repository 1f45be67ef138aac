from native_complete.trigger import build_trigger
from native_complete.styles import Style


def test_bash():
    assert build_trigger("ls fo", Style.BASH) == "ls fo\x1b*\x01echo '\x05'\n"


def test_zsh_and_csh():
    assert build_trigger("ls fo", Style.ZSH) == "ls foy"
    assert build_trigger("ls fo", Style.CSH) == "ls foy"


def test_generic():
    assert build_trigger("ls fo", Style.GENERIC) == "ls fo\ty"


def test_starts_with_line():
    for style in Style:
        assert build_trigger("cd /usr/lo", style).startswith("cd /usr/lo")
