" generic fixtures "
import logging

import pytest


def pytest_configure():
    "Runs once before all"
    from native_complete.logging_setup import init_logger

    init_logger("/dev/null", force_debug=True)


@pytest.fixture
def test_logger():
    "A silent logger"
    logger = logging.getLogger("natcomp.tests")
    logger.addHandler(logging.NullHandler())
    logger.propagate = False
    return logger


@pytest.fixture
def config_home(tmp_path, monkeypatch):
    "Points the default config file to an empty temporary folder"
    config_file = tmp_path / "native-complete" / "config.toml"
    monkeypatch.setattr("native_complete.config_loader.CONFIG_FILE", config_file)
    return config_file
