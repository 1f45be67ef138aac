"""natcomp - print the completions an interactive shell would offer.

Usage:
    natcomp [--config FILE] [--debug LOGFILE] [--shell PROGRAM] [--context NAME] LINE...
    natcomp validate [--config FILE]

A lone `validate` argument runs the subcommand, write `natcomp -- validate`
to complete that word instead.
"""

import asyncio
import sys

from .ansi import GREEN, RED, YELLOW, colorize, should_colorize, strip_ansi
from .completer import NativeCompleter
from .config import Configuration
from .config_loader import ConfigLoader
from .constants import CONFIG_SECTION
from .logging_setup import get_logger, init_logger
from .models import ConfigError, ExitCode, NativeCompleteError
from .schema import CONFIG_SCHEMA
from .shell import PtyShell
from .validation import ConfigValidator

__all__ = ["main", "run_complete", "run_validate"]

# Seconds given to the shell to print its first prompt
STARTUP_TIMEOUT = 10.0


def use_param(txt: str) -> str:
    """Check if parameter `txt` is in sys.argv.

    if found, removes it from sys.argv & returns the argument value
    """
    v = ""
    if txt in sys.argv:
        i = sys.argv.index(txt)
        v = sys.argv[i + 1] if i + 1 < len(sys.argv) else ""
        del sys.argv[i : i + 2]
    return v


async def load_configuration(config_filename: str) -> Configuration:
    """Load the config file(s) and return the ``[native_complete]`` section."""
    log = get_logger("config")
    loader = ConfigLoader(log)
    raw = await loader.load(config_filename)
    return Configuration(raw.get(CONFIG_SECTION, {}), logger=log, schema=CONFIG_SCHEMA)


async def run_complete(line: str, config_filename: str = "", program: str = "", context: str = "shell") -> int:
    """Spawn the shell, complete `line` and print the candidates.

    Returns:
        The exit code
    """
    log = get_logger("natcomp")
    config = await load_configuration(config_filename)
    shell = PtyShell(
        program or config.get_str("shell") or None,
        term=config.get_str("term"),
        idle_timeout=config.get_float("idle_timeout", 0.5),
    )
    completer = NativeCompleter.from_config(shell, config)
    completer.attach(shell)

    try:
        await shell.start()
    except OSError as e:
        log.critical("Unable to start %s: %s", shell.program, e)
        return ExitCode.ENV_ERROR

    try:
        if not await shell.wait_prompt(completer.prompt, timeout=STARTUP_TIMEOUT):
            log.critical("No prompt matching /%s/ from %s, check the `prompt` option", completer.prompt, shell.program)
            return ExitCode.ENV_ERROR
        prompt_text = strip_ansi(shell.output)
        text = prompt_text + line
        result = await completer.complete(text, len(prompt_text), len(text), context=context)
    finally:
        await shell.stop()

    if result is None:
        log.warning("Completion is not enabled for context %r", context)
        return ExitCode.COMMAND_ERROR
    for candidate in result.candidates:
        print(candidate)
    return ExitCode.SUCCESS


async def run_validate(config_filename: str = "") -> int:
    """Validate the configuration file without starting any shell.

    Returns:
        The exit code
    """
    log = get_logger("validate")
    try:
        config = await load_configuration(config_filename)
    except ConfigError:
        return ExitCode.ENV_ERROR

    validator = ConfigValidator(config, CONFIG_SECTION, log)
    errors = validator.validate(CONFIG_SCHEMA)
    warnings = validator.warn_unknown_keys(CONFIG_SCHEMA)
    use_colors = should_colorize(sys.stdout)

    def _paint(text: str, code: str) -> str:
        return colorize(text, code) if use_colors else text

    for error in errors:
        print(f"  {_paint('ERROR', RED)}: {error}")
    for warning in warnings:
        print(f"  {_paint('WARNING', YELLOW)}: {warning}")

    if not errors and not warnings:
        print(_paint("Configuration is valid!", GREEN))
        return ExitCode.SUCCESS
    print(f"Found {len(errors)} error(s) and {len(warnings)} warning(s)")
    return ExitCode.USAGE_ERROR if errors else ExitCode.SUCCESS


def main() -> None:
    """Run the command."""
    debug_flag = use_param("--debug")
    if debug_flag:
        init_logger(filename=debug_flag, force_debug=True)
    else:
        init_logger()
    log = get_logger("startup")

    config_filename = use_param("--config")
    program = use_param("--shell")
    context = use_param("--context") or "shell"
    args = sys.argv[1:]

    if not args:
        print(__doc__, file=sys.stderr)
        sys.exit(ExitCode.USAGE_ERROR)

    try:
        if args == ["validate"]:
            code = asyncio.run(run_validate(config_filename))
        else:
            if args[0] == "--":
                args = args[1:]
            code = asyncio.run(run_complete(" ".join(args), config_filename, program, context))
    except KeyboardInterrupt:
        code = ExitCode.COMMAND_ERROR
    except ConfigError:
        log.critical("Invalid configuration.")
        code = ExitCode.ENV_ERROR
    except NativeCompleteError as e:
        log.critical("Command failed: %s", e)
        code = ExitCode.COMMAND_ERROR
    sys.exit(code)


if __name__ == "__main__":
    main()
