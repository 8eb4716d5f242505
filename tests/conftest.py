# tests/conftest.py
import os

import pytest

from pyvider.rpcserver.config import CONFIG_SCHEMA, ServerConfig
from tests.fixtures import *


@pytest.fixture(autouse=True, scope="function")
def reset_server_config_singleton():
    """
    Reset the process-wide ServerConfig and the schema environment variables
    around every test so configuration never leaks between tests.
    """
    ServerConfig._instance = None

    original_env_values = {key: os.environ.get(key) for key in CONFIG_SCHEMA}
    for key in CONFIG_SCHEMA:
        os.environ.pop(key, None)

    yield

    for key, value in original_env_values.items():
        if value is not None:
            os.environ[key] = value
        else:
            os.environ.pop(key, None)

    ServerConfig._instance = None
