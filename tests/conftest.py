"""Shared pytest fixtures for the age_counter test suite.

Fixtures defined here are available to all test modules without any import.

No test touches the real ``~/.config/age-counter`` file: the store path is
redirected to a throwaway directory before ``age_counter.config`` is imported,
and every fixture below builds its own storage.
"""

import datetime
import os
import tempfile

import pytest

# ---------------------------------------------------------------------------
# Redirect the default store path before any test module is collected.
# The module-level ``settings = Settings()`` call in config.py runs at
# collection time and would otherwise resolve to the user's home directory.
# ---------------------------------------------------------------------------
os.environ.setdefault(
    "AGE_COUNTER_STORE_PATH",
    os.path.join(tempfile.mkdtemp(prefix="age-counter-tests-"), "settings.json"),
)

from age_counter import AgeCalculator, BirthdayStore, JsonFileStorage, MemoryStorage  # noqa: E402


# ---------------------------------------------------------------------------
# Storage fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def memory_storage() -> MemoryStorage:
    """Fresh in-memory backend; share it between stores to simulate a restart."""
    return MemoryStorage()


@pytest.fixture
def json_path(tmp_path):
    """Location of a not-yet-created JSON storage file."""
    return tmp_path / "nested" / "settings.json"


@pytest.fixture
def json_storage(json_path) -> JsonFileStorage:
    return JsonFileStorage(json_path)


# ---------------------------------------------------------------------------
# Store and calculator fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def store(memory_storage: MemoryStorage) -> BirthdayStore:
    return BirthdayStore(memory_storage)


@pytest.fixture
def calculator(store: BirthdayStore):
    """Calculator over an unset store; closed again after the test."""
    with AgeCalculator(store) as calc:
        yield calc


# ---------------------------------------------------------------------------
# Date fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def millennium() -> datetime.date:
    """The birthday used as the default and in most formatting checks."""
    return datetime.date(2000, 1, 1)


@pytest.fixture
def leap_day() -> datetime.date:
    """A valid leap-day date (1996 is a leap year)."""
    return datetime.date(1996, 2, 29)
