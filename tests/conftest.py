from datetime import datetime, timezone
from itertools import count

import pytest

from riyl_chat.storage.store import MemoryKeyValueStore


@pytest.fixture
def store():
    return MemoryKeyValueStore()


@pytest.fixture
def id_factory():
    counter = count(1)
    return lambda: f"conv-{next(counter)}"


@pytest.fixture
def clock():
    return lambda: datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc)
