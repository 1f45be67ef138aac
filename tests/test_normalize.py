from native_complete.normalize import (
    cut_first_paragraph,
    drop_carriage_returns,
    drop_prompt_line,
    normalize_output,
    remove_confirmation_queries,
    remove_echo_command,
    remove_line_echoes,
    separate_confirmation,
    strip_command_stem,
)
from native_complete.styles import STYLE_PROTOCOLS, Style

ZSH = STYLE_PROTOCOLS[Style.ZSH]
BASH = STYLE_PROTOCOLS[Style.BASH]
GENERIC = STYLE_PROTOCOLS[Style.GENERIC]
PROMPT = r"[$#%>] "


def test_drop_carriage_returns():
    assert drop_carriage_returns("a\r\nb\rc\n") == "a\nbc\n"


def test_separate_confirmation():
    assert separate_confirmation("cd /usr/local/y\n", "cd /usr/lo", "y") == "cd /usr/local/ y\n"


def test_separate_confirmation_keeps_spaced_answer():
    text = "cd /usr/local/ y\n"
    assert separate_confirmation(text, "cd /usr/lo", "y") == text


def test_separate_confirmation_ignores_other_lines():
    text = "local/ lost+found/\nmy\n"
    assert separate_confirmation(text, "cd /usr/lo", "y") == text


def test_cut_first_paragraph():
    assert cut_first_paragraph("foo bar\nbaz\n\n$ ls\n\nqux") == "foo bar\nbaz"
    assert cut_first_paragraph("no blank line\n$ ") == "no blank line\n$ "


def test_remove_line_echoes():
    text = "ls fo\nfoo.txt food.sh\nls foo\n"
    assert remove_line_echoes(text, "ls fo") == "foo.txt food.sh\n"


def test_remove_line_echoes_keeps_listing_on_the_same_line():
    text = "ls foo.txt food.sh\n"
    assert remove_line_echoes(text, "ls fo") == text


def test_remove_line_echoes_needs_a_line():
    assert remove_line_echoes("foo\nbar\n", "") == "foo\nbar\n"


def test_remove_echo_command():
    assert remove_echo_command("echo 'ls foo.txt food.sh '\nls foo.txt food.sh \n$ ") == "ls foo.txt food.sh \n$ "


def test_remove_echo_command_with_redraws():
    text = "ls fo\x07o.txt food.sh $ echo 'ls foo.txt food.sh '\nls foo.txt food.sh \n$ "
    assert remove_echo_command(text) == "ls foo.txt food.sh \n$ "


def test_remove_echo_command_not_executed():
    assert remove_echo_command("ls foo.txt food.sh ") == "ls foo.txt food.sh "


def test_drop_prompt_line():
    assert drop_prompt_line("ls foo.txt \nuser@host:~$ ", PROMPT) == "ls foo.txt "
    assert drop_prompt_line("$ ", PROMPT) == ""


def test_drop_prompt_line_keeps_listing():
    assert drop_prompt_line("foo.txt  food.sh\n", PROMPT) == "foo.txt  food.sh\n"
    assert drop_prompt_line("foo.txt  food.sh", PROMPT) == "foo.txt  food.sh"


def test_remove_confirmation_queries():
    for query in (
        "Display all 120 possibilities? (y or n)",
        "zsh: do you wish to see all 312 possibilities (104 lines)? [n/y]",
        "Show all? [y/n] ",
        "list them? (n or y) y",
    ):
        assert remove_confirmation_queries(f"a b\n{query}\nc\n") == "a b\nc\n"


def test_remove_confirmation_queries_keeps_questions():
    text = "what? b\n"
    assert remove_confirmation_queries(text) == text


def test_strip_command_stem():
    assert strip_command_stem("ls foo.txt food.sh", "ls fo", "fo") == "foo.txt food.sh"
    assert strip_command_stem("  cd /usr/local/ y", "cd /usr/lo", "lo") == "local/ y"


def test_strip_command_stem_only_once():
    assert strip_command_stem("ls ls foo", "ls fo", "fo") == "ls foo"


def test_strip_command_stem_empty_prefix():
    assert strip_command_stem("ls foo", "ls ", "") == "foo"


def test_simple_listing():
    assert normalize_output("foo.txt  food.sh\n\n$ ", "ls fo", "fo", GENERIC) == ["foo.txt", "food.sh"]


def test_colors_are_stripped():
    raw = "\x1b[0m\x1b[01;34mfoo\x1b[0m  \x1b[01;32mfood.sh\x1b[0m*\r\n\r\n$ "
    assert normalize_output(raw, "ls fo", "fo", GENERIC) == ["foo", "food.sh*"]


def test_single_directory_match():
    raw = "cd /usr/local/y\r\n\r\n% "
    assert normalize_output(raw, "cd /usr/lo", "lo", ZSH) == ["local/", "y"]


def test_confirmation_query_is_dropped():
    raw = "a.txt b.txt c.txt\nDisplay all 3 possibilities? (y or n)\n\n$ "
    assert normalize_output(raw, "cat ", "", GENERIC) == ["a.txt", "b.txt", "c.txt"]


def test_bash_echo():
    raw = "echo 'ls foo.txt food.sh '\r\nls foo.txt food.sh \r\n$ "
    assert normalize_output(raw, "ls fo", "fo", BASH, prompt=PROMPT) == ["foo.txt", "food.sh"]


def test_bash_echo_empty_prefix():
    raw = "echo 'ls foo.txt food.sh '\r\nls foo.txt food.sh \r\n$ "
    assert normalize_output(raw, "ls ", "", BASH, prompt=PROMPT) == ["foo.txt", "food.sh"]


def test_bash_echo_prefix_of_the_command():
    raw = "echo 'ls lib/ log.txt '\r\nls lib/ log.txt \r\nuser@host:~$ "
    assert normalize_output(raw, "ls l", "l", BASH, prompt=PROMPT) == ["lib/", "log.txt"]


def test_whole_output_when_paragraph_cut_disabled():
    raw = "foo\n\nfood\n"
    assert normalize_output(raw, "ls fo", "fo", GENERIC, first_paragraph_only=False) == ["foo", "food"]


def test_empty_capture():
    assert normalize_output("", "ls fo", "fo", ZSH) == []
