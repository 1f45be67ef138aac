"""Configuration file loading utilities.

This module handles loading, parsing, and merging TOML configuration files.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import TYPE_CHECKING, Any

import aiofiles
import aiofiles.os

from .constants import CONFIG_FILE, CONFIG_SECTION
from .models import ConfigError
from .utils import merge

if TYPE_CHECKING:
    import logging

__all__ = ["ConfigLoader"]


class ConfigLoader:
    """Handles loading and merging configuration files.

    Supports:
    - a single TOML file
    - directory-based config (every .toml file, merged in name order)
    - ``include`` directives inside the ``[native_complete]`` section
    """

    def __init__(self, log: logging.Logger) -> None:
        """Initialize the config loader.

        Args:
            log: Logger instance for status and error messages
        """
        self.log = log
        self._config: dict[str, Any] = {}

    @property
    def config(self) -> dict[str, Any]:
        """Return the loaded configuration."""
        return self._config

    async def load(self, config_filename: str = "") -> dict[str, Any]:
        """Load configuration from file or directory.

        Args:
            config_filename: Optional path to config file or directory.
                           If empty, uses the default CONFIG_FILE location,
                           which may be absent.

        Returns:
            The loaded and merged configuration dictionary.

        Raises:
            ConfigError: If an explicit config file is missing or has syntax errors.
        """
        if config_filename:
            config = await self._open_config(Path(os.path.expandvars(config_filename)).expanduser())
        elif await aiofiles.os.path.exists(CONFIG_FILE):
            config = await self._open_config(CONFIG_FILE)
        else:
            self.log.info("No config file at %s, using defaults", CONFIG_FILE)
            config = {}
        merge(self._config, config)
        return self._config

    async def _open_config(self, fname: Path) -> dict[str, Any]:
        """Load a file or a directory, then its includes."""
        if await aiofiles.os.path.isdir(fname):
            config = await self._load_config_directory(fname)
        else:
            config = await self._load_config_file(fname)

        for extra_config in list(config.get(CONFIG_SECTION, {}).pop("include", [])):
            merge(config, await self._open_config(Path(os.path.expandvars(extra_config)).expanduser()))
        return config

    async def _load_config_directory(self, directory: Path) -> dict[str, Any]:
        """Load and merge all .toml files from a directory."""
        config: dict[str, Any] = {}
        for toml_file in sorted(await aiofiles.os.listdir(directory)):
            if not toml_file.endswith(".toml"):
                continue
            merge(config, await self._load_config_file(directory / toml_file))
        return config

    async def _load_config_file(self, fname: Path) -> dict[str, Any]:
        """Load a single configuration file.

        Raises:
            ConfigError: If file not found or has syntax errors
        """
        if not await aiofiles.os.path.exists(fname):
            self.log.critical("Config file not found: %s", fname)
            raise ConfigError(f"Config file not found: {fname}")

        self.log.info("Loading %s", fname)
        async with aiofiles.open(fname, encoding="utf-8") as f:
            content = await f.read()
        try:
            return tomllib.loads(content)
        except tomllib.TOMLDecodeError as e:
            self.log.critical("Problem reading %s: %s", fname, e)
            raise ConfigError(f"Problem reading {fname}: {e}") from e
