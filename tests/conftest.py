"""Root conftest for test suite.

Settings are cached process-wide by get_settings(); every test starts and
ends with a cold cache so environment patches in one test cannot leak into
another.
"""

import pytest

from payout_checker.config import get_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
