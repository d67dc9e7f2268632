import pytest
from fastapi.testclient import TestClient

from scrim import config
from scrim.api import create_app
from scrim.cache import ResponseCache
from scrim.errors import StoreError
from scrim.repository import ScrimRepository


class FakeRowStore:
    """In-memory stand-in for SheetsManager; rows are lists of strings per tab."""

    def __init__(self):
        self.tabs = {tab: [] for tab in config.SHEET_HEADERS}
        self.fail_with = None

    def _check(self):
        if self.fail_with:
            raise StoreError(self.fail_with)

    def get_rows(self, tab):
        self._check()
        return [list(row) for row in self.tabs[tab]]

    def append_row(self, tab, row):
        self._check()
        self.tabs[tab].append([str(cell) for cell in row])

    def update_row(self, tab, position, row):
        self._check()
        self.tabs[tab][position - 1] = [str(cell) for cell in row]

    def delete_row(self, tab, position):
        self._check()
        del self.tabs[tab][position - 1]


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


@pytest.fixture
def store():
    return FakeRowStore()


@pytest.fixture
def repository(store):
    return ScrimRepository(store)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return ResponseCache(ttl_seconds=30, capacity=10, clock=clock)


@pytest.fixture
def client(repository, cache):
    return TestClient(create_app(repository=repository, cache=cache))


@pytest.fixture
def scrim_form():
    return {
        "fraksi": config.FRAKSI_1,
        "tanggalScrim": "2025-10-01",
        "lawan": "Alpha",
        "map": ["Ascension", "Cyclone"],
        "startMatch": "19:00",
    }
