import sys

import pytest

from native_complete import command
from native_complete.command import run_complete, run_validate, use_param
from native_complete.models import ExitCode

from .testtools import FakeShell

BASH_ANSWER = "echo 'ls foo.txt food.sh '\r\nls foo.txt food.sh \r\nuser@host:~$ "


@pytest.fixture(autouse=True)
def keep_loggers(mocker):
    "main() must not replace the test log handlers"
    mocker.patch("native_complete.command.init_logger")


@pytest.fixture
def fake_shell(monkeypatch, mocker):
    mocker.patch("native_complete.command.PtyShell", FakeShell)
    monkeypatch.setattr(FakeShell, "instances", [])
    monkeypatch.setattr(FakeShell, "answer_for_next", BASH_ANSWER)
    return FakeShell


def test_use_param(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["natcomp", "--config", "/tmp/x.toml", "ls", "fo"])
    assert use_param("--config") == "/tmp/x.toml"
    assert sys.argv == ["natcomp", "ls", "fo"]
    assert use_param("--shell") == ""


def test_use_param_without_value(monkeypatch):
    monkeypatch.setattr(sys, "argv", ["natcomp", "ls", "--debug"])
    assert use_param("--debug") == ""
    assert sys.argv == ["natcomp", "ls"]


@pytest.mark.asyncio
async def test_run_complete(fake_shell, config_home, capsys):
    code = await run_complete("ls fo")
    assert code == ExitCode.SUCCESS
    assert capsys.readouterr().out.splitlines() == ["foo.txt", "food.sh"]

    shell = fake_shell.instances[0]
    assert shell.program == "/bin/bash"
    assert shell.writes == ["ls fo\x1b*\x01echo '\x05'\n"]
    shell.add_pre_submit_hook.assert_called_once()
    shell.stop.assert_awaited_once()


@pytest.mark.asyncio
async def test_run_complete_shell_option(fake_shell, config_home, capsys):
    fake_shell.answer_for_next = "ls foo.txt food.sh y\r\n\r\n% "
    await run_complete("ls fo", program="/usr/bin/zsh")
    shell = fake_shell.instances[0]
    assert shell.program == "/usr/bin/zsh"
    assert shell.writes == ["ls foy", "\x15"]


@pytest.mark.asyncio
async def test_run_complete_uses_config(fake_shell, config_home, capsys):
    config_home.parent.mkdir(parents=True)
    config_home.write_text('[native_complete]\nshell = "/bin/zsh"\nterm = "dumb"\nidle_timeout = 0.2\n')
    fake_shell.answer_for_next = "ls foo.txt y\r\n\r\n% "
    await run_complete("ls fo")
    shell = fake_shell.instances[0]
    assert shell.program == "/bin/zsh"
    assert shell.kwargs == {"term": "dumb", "idle_timeout": 0.2}
    assert capsys.readouterr().out.splitlines() == ["foo.txt"]


@pytest.mark.asyncio
async def test_run_complete_disabled_context(fake_shell, config_home, capsys):
    code = await run_complete("ls fo", context="editor")
    assert code == ExitCode.COMMAND_ERROR
    assert capsys.readouterr().out == ""
    fake_shell.instances[0].stop.assert_awaited_once()


@pytest.mark.asyncio
async def test_run_complete_no_prompt(fake_shell, config_home, mocker):
    original_init = FakeShell.__init__

    def silent_init(self, *args, **kwargs):
        original_init(self, *args, **kwargs)
        self.wait_prompt.return_value = False

    mocker.patch.object(FakeShell, "__init__", silent_init)
    code = await run_complete("ls fo")
    assert code == ExitCode.ENV_ERROR
    assert fake_shell.instances[0].writes == []


@pytest.mark.asyncio
async def test_run_complete_start_failure(fake_shell, config_home, mocker):
    original_init = FakeShell.__init__

    def broken_init(self, *args, **kwargs):
        original_init(self, *args, **kwargs)
        self.start.side_effect = FileNotFoundError("no such shell")

    mocker.patch.object(FakeShell, "__init__", broken_init)
    code = await run_complete("ls fo")
    assert code == ExitCode.ENV_ERROR


@pytest.mark.asyncio
async def test_validate_valid(config_home, capsys):
    config_home.parent.mkdir(parents=True)
    config_home.write_text('[native_complete]\ntimeout = 2.5\n')
    assert await run_validate() == ExitCode.SUCCESS
    assert "Configuration is valid!" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_validate_errors(tmp_path, capsys):
    config = tmp_path / "natcomp.toml"
    config.write_text('[native_complete]\ntimeout = "soon"\nprompt = "["\npromt = "$ "\n')
    assert await run_validate(str(config)) == ExitCode.USAGE_ERROR
    out = capsys.readouterr().out
    assert "ERROR" in out
    assert "'timeout'" in out
    assert "Invalid regular expression" in out
    assert "did you mean 'prompt'" in out
    assert "Found 2 error(s) and 1 warning(s)" in out


@pytest.mark.asyncio
async def test_validate_missing_file(tmp_path):
    assert await run_validate(str(tmp_path / "missing.toml")) == ExitCode.ENV_ERROR


def test_main_without_arguments(monkeypatch, capsys):
    monkeypatch.setattr(sys, "argv", ["natcomp"])
    with pytest.raises(SystemExit) as exc:
        command.main()
    assert exc.value.code == ExitCode.USAGE_ERROR
    assert "Usage:" in capsys.readouterr().err


def test_main_validate(monkeypatch, tmp_path, capsys):
    config = tmp_path / "natcomp.toml"
    config.write_text('[native_complete]\ncontexts = ["shell", "repl"]\n')
    monkeypatch.setattr(sys, "argv", ["natcomp", "--config", str(config), "validate"])
    with pytest.raises(SystemExit) as exc:
        command.main()
    assert exc.value.code == ExitCode.SUCCESS


def test_main_invalid_config(monkeypatch, tmp_path, fake_shell):
    config = tmp_path / "natcomp.toml"
    config.write_text('[native_complete]\nexclude = "(("\n')
    monkeypatch.setattr(sys, "argv", ["natcomp", "--config", str(config), "ls", "fo"])
    with pytest.raises(SystemExit) as exc:
        command.main()
    assert exc.value.code == ExitCode.ENV_ERROR


def test_main_completes_validate_after_separator(monkeypatch, mocker):
    run = mocker.patch("native_complete.command.run_complete", return_value=ExitCode.SUCCESS)
    validate = mocker.patch("native_complete.command.run_validate", return_value=ExitCode.SUCCESS)
    monkeypatch.setattr(sys, "argv", ["natcomp", "--", "validate"])
    with pytest.raises(SystemExit) as exc:
        command.main()
    assert exc.value.code == ExitCode.SUCCESS
    run.assert_awaited_once_with("validate", "", "", "shell")
    validate.assert_not_called()


def test_main_validate_subcommand(monkeypatch, mocker):
    run = mocker.patch("native_complete.command.run_complete", return_value=ExitCode.SUCCESS)
    validate = mocker.patch("native_complete.command.run_validate", return_value=ExitCode.SUCCESS)
    monkeypatch.setattr(sys, "argv", ["natcomp", "validate"])
    with pytest.raises(SystemExit):
        command.main()
    validate.assert_awaited_once_with("")
    run.assert_not_called()
