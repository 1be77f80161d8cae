"""
Pytest configuration and fixtures
"""
from datetime import datetime, timedelta, timezone

import pytest

from easycall.core.exceptions import StorageError
from easycall.db.storage_utils import MemoryStorage
from easycall.models.region_models import AppLanguage
from easycall.services.contact_service import ContactStore
from easycall.services.localization_service import LocalizedStrings
from easycall.services.screen_service import ScreenStateMachine


class FailingStorage(MemoryStorage):
    """Reads work, every write fails."""

    def set(self, key, value):
        raise StorageError(f"disk full while writing {key}")


class CountingStorage(MemoryStorage):
    def __init__(self, initial=None):
        super().__init__(initial)
        self.writes = []

    def set(self, key, value):
        self.writes.append(key)
        super().set(key, value)


class FakeClock:
    def __init__(self):
        self.now = datetime(2024, 1, 1, 9, 0, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now = self.now + timedelta(seconds=seconds)


class RecordingAnnouncer:
    def __init__(self):
        self.spoken = []

    def announce(self, text):
        self.spoken.append(text)


@pytest.fixture
def storage():
    return MemoryStorage()

@pytest.fixture
def strings():
    return LocalizedStrings(AppLanguage.en)

@pytest.fixture
def store(storage):
    """Reset-policy store loaded from empty storage (demo contacts)."""
    contact_store = ContactStore(storage, policy="reset")
    contact_store.load()
    return contact_store

@pytest.fixture
def clock():
    return FakeClock()

@pytest.fixture
def refresh_calls():
    return []

@pytest.fixture
def machine(store, storage, clock, refresh_calls):
    return ScreenStateMachine(
        store,
        storage,
        region_refresher=lambda: refresh_calls.append(True),
        show_hero=False,
        clock=clock,
    )

@pytest.fixture
def announcer():
    return RecordingAnnouncer()
