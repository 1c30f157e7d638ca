"""Shared pytest fixtures for reflectify tests."""

from collections.abc import Iterator

import pytest

from reflectify.settings import get_settings
from tests.structs import Account


@pytest.fixture(autouse=True)
def fresh_settings() -> Iterator[None]:
    """Settings are read from the environment once; re-read them per test."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture()
def account() -> Account:
    return Account(owner="ada", balance=10, active=True, tags=["admin"])


@pytest.fixture(autouse=True)
def clear_account_history() -> Iterator[None]:
    Account.history.clear()
    yield
    Account.history.clear()
