import pytest

from src.qr_attendance.qr_attendance.core.exceptions import ValidationError
from src.qr_attendance.qr_attendance.database.memory_tree_store import InMemoryTreeStore
from src.qr_attendance.qr_attendance.database.tree_store import assemble, flatten, prune


def test_read_write_and_delete():
    store = InMemoryTreeStore()
    store.write("users/u1/stats/daysPresent", 2)

    assert store.read("users/u1") == {"stats": {"daysPresent": 2}}

    store.write("users/u1/stats/daysPresent", None)
    assert store.read("users") is None


def test_read_returns_a_copy():
    store = InMemoryTreeStore({"users": {"u1": {"name": "Ana"}}})
    value = store.read("users/u1")
    value["name"] = "changed"
    assert store.read("users/u1/name") == "Ana"


def test_batch_applies_in_order():
    store = InMemoryTreeStore()
    store.batch_write({"a/b": {"x": 1, "y": 2}, "a/b/x": 3})
    assert store.read("a/b") == {"x": 3, "y": 2}


def test_batch_with_invalid_path_applies_nothing():
    store = InMemoryTreeStore({"a": {"b": 1}})

    with pytest.raises(ValidationError):
        store.batch_write({"a/c": 2, "a/bad.key": 3})

    assert store.read("a") == {"b": 1}


def test_writing_a_leaf_under_a_scalar_replaces_it():
    store = InMemoryTreeStore({"a": 1})
    store.write("a/b", 2)
    assert store.read("a") == {"b": 2}


def test_prune_and_flatten_round_trip():
    value = prune({"x": {"y": None, "z": [1, 2]}, "empty": {}})
    assert value == {"x": {"z": {"0": 1, "1": 2}}}

    leaves = dict(flatten("root", value))
    assert leaves == {"root/x/z/0": 1, "root/x/z/1": 2}
    assert assemble("root", leaves) == value
    assert assemble("root/x/z/0", leaves) == 1
    assert assemble("other", leaves) is None
