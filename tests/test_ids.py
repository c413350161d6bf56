import re
import uuid

from riyl_chat.core import ids


def test_generate_id_is_a_uuid():
    value = ids.generate_id()
    assert uuid.UUID(value)


def test_generate_id_is_unique():
    assert len({ids.generate_id() for _ in range(100)}) == 100


def test_generate_id_falls_back_without_entropy_source(monkeypatch):
    def no_entropy():
        raise NotImplementedError("no randomness source")

    monkeypatch.setattr(ids.uuid, "uuid4", no_entropy)
    value = ids.generate_id()
    assert re.fullmatch(r"[0-9a-f]+-[0-9a-f]{8}", value)


def test_utcnow_is_timezone_aware():
    assert ids.utcnow().tzinfo is not None
