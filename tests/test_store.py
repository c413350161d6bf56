import json

from riyl_chat.storage.store import FileKeyValueStore, MemoryKeyValueStore


def test_memory_store_read_write():
    store = MemoryKeyValueStore({"a": "1"})
    assert store.read("a") == "1"
    assert store.read("b") is None
    store.write("b", "2")
    assert store.read("b") == "2"


def test_file_store_missing_file_reads_none(tmp_path):
    store = FileKeyValueStore(tmp_path / "nested" / "store.json")
    assert store.read("key") is None


def test_file_store_persists_across_instances(tmp_path):
    path = tmp_path / "nested" / "store.json"
    FileKeyValueStore(path).write("key", "[1, 2]")
    FileKeyValueStore(path).write("other", "x")

    reopened = FileKeyValueStore(path)
    assert reopened.read("key") == "[1, 2]"
    assert reopened.read("other") == "x"
    assert json.loads(path.read_text(encoding="utf-8")) == {"key": "[1, 2]", "other": "x"}
    assert [p.name for p in path.parent.iterdir()] == ["store.json"]


def test_file_store_corrupt_file_reads_none(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("{broken", encoding="utf-8")
    store = FileKeyValueStore(path)
    assert store.read("key") is None

    store.write("key", "value")
    assert store.read("key") == "value"


def test_file_store_non_object_file_reads_none(tmp_path):
    path = tmp_path / "store.json"
    path.write_text("[1, 2, 3]", encoding="utf-8")
    assert FileKeyValueStore(path).read("key") is None


def test_file_store_deeply_nested_file_reads_none(tmp_path):
    path = tmp_path / "store.json"
    path.write_text('{"key": ' + "[" * 100000 + "]" * 100000 + "}", encoding="utf-8")
    store = FileKeyValueStore(path)
    assert store.read("key") is None

    store.write("key", "value")
    assert store.read("key") == "value"
