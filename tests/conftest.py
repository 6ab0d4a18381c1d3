# type: ignore
import logging
import os

import pytest


def init_testsuite_env():
    """Initialize testsuite environment."""
    # Ignore the configuration files of the user running the testsuite
    os.environ["TVSPDX_CONFIG"] = os.devnull
    os.environ.pop("TVSPDX_ENABLE_FEATURE", None)

    import tvspdx.log

    # Activate full debug logs
    tvspdx.log.activate(level=logging.DEBUG, tvspdx_debug=True)

    # Force UTC timezone
    os.environ["TZ"] = "UTC"


init_testsuite_env()


@pytest.fixture(autouse=True)
def env_protect(tmp_path, monkeypatch):
    """Run each test in its own directory with a fresh configuration."""
    from tvspdx.config import Config

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("TVSPDX_CONFIG", os.devnull)
    Config.reset()
    yield
    Config.reset()
