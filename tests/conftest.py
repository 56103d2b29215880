# tests/conftest.py
import shutil
from pathlib import Path

import pytest

from radical.flowcontext.stores.base import BaseContextStore


class SpyStore(BaseContextStore):
    """Store double that records every call and keeps values in a dict."""

    instances = []

    def __init__(self, config=None):
        self.config = config or {}
        self.calls = []
        self.data = {}
        self.opened = False
        self.closed = False
        self.cleaned_with = None
        SpyStore.instances.append(self)

    async def open(self):
        self.calls.append("open")
        self.opened = True

    async def close(self):
        self.calls.append("close")
        self.closed = True

    async def clean(self, active_ids):
        self.calls.append("clean")
        self.cleaned_with = list(active_ids)

    def get(self, scope, key, callback=None):
        self.calls.append(("get", scope, key))
        value = self.data.get(scope, {}).get(key)
        if callback is not None:
            callback(None, value)
        return value

    def set(self, scope, key, value, callback=None):
        self.calls.append(("set", scope, key, value))
        self.data.setdefault(scope, {})[key] = value
        if callback is not None:
            callback(None)

    def keys(self, scope, callback=None):
        self.calls.append(("keys", scope))
        values = list(self.data.get(scope, {}))
        if callback is not None:
            callback(None, values)
        return values


class FailingOpenStore(SpyStore):
    async def open(self):
        self.calls.append("open")
        raise OSError("disk unavailable")


class FailingCleanStore(SpyStore):
    async def clean(self, active_ids):
        self.calls.append("clean")
        raise OSError("clean failed")


@pytest.fixture
def spy_store_class():
    SpyStore.instances = []
    yield SpyStore
    SpyStore.instances = []


@pytest.fixture
def failing_open_store_class():
    return FailingOpenStore


@pytest.fixture
def failing_clean_store_class():
    return FailingCleanStore


def pytest_sessionfinish(session, exitstatus):
    root = Path(__file__).parent
    for pycache_dir in root.rglob('__pycache__'):
        shutil.rmtree(pycache_dir)
