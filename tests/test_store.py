import pytest

from rudis.store import DATA_FILE, Store, StoreError


@pytest.fixture
def store(tmp_path):
    return Store(tmp_path / "db")


def test_insert_get_roundtrip(store):
    assert store.insert("k", "v") is None
    assert store.get("k") == b"v"
    assert store.insert(b"k", b"w") == b"v"
    assert store.get("k") == b"w"


def test_remove_returns_previous(store):
    store.insert("k", "v")
    assert store.remove("k") == b"v"
    assert store.remove("k") is None
    assert store.get("k") is None


def test_items_are_sorted(store):
    for key in ["b", "a", "c"]:
        store.insert(key, key.upper())
    assert [k for k, _ in store.items()] == [b"a", b"b", b"c"]
    assert dict(store.items())[b"b"] == b"B"


def test_tree_bounds_and_len(store):
    tree = store.open_tree("t")
    assert tree.first() is None
    assert tree.last() is None
    assert len(tree) == 0
    tree.insert(b"\x02", b"two")
    tree.insert(b"\x01", b"one")
    tree.insert(b"\x03", b"three")
    assert tree.first() == (b"\x01", b"one")
    assert tree.last() == (b"\x03", b"three")
    assert len(tree) == 3
    assert tree.contains_key(b"\x02")
    assert not tree.contains_key(b"\x04")


def test_items_upto_is_inclusive(store):
    tree = store.open_tree("t")
    for key in ["a", "b", "c"]:
        tree.insert(key, "")
    assert [k for k, _ in tree.items_upto("b")] == [b"a", b"b"]


def test_open_tree_shares_contents(store):
    first = store.open_tree("x")
    first.insert("k", "v")
    second = store.open_tree("x")
    assert second.get("k") == b"v"
    assert len(second) == 1
    assert second.remove("k") == b"v"
    assert first.get("k") is None


def test_trees_are_separate_from_default(store):
    store.open_tree("x").insert("k", "tree")
    store.insert("k", "main")
    assert store.open_tree("x").get("k") == b"tree"
    assert store.get("k") == b"main"


def test_data_survives_reopen(tmp_path):
    path = tmp_path / "db"
    with Store(path) as first:
        first.insert("k", "v")
        first.open_tree("x").insert("f", "g")
    second = Store(path)
    assert second.get("k") == b"v"
    assert second.open_tree("x").get("f") == b"g"


def test_drop_tree(tmp_path):
    path = tmp_path / "db"
    store = Store(path)
    store.open_tree("x").insert("f", "g")
    assert store.drop_tree("x") is True
    assert store.drop_tree("x") is False
    store.flush()
    assert len(Store(path).open_tree("x")) == 0


def test_cannot_drop_default(store):
    with pytest.raises(StoreError):
        store.drop_tree("__default__")


def test_corrupt_file_raises(tmp_path):
    path = tmp_path / "db"
    path.mkdir()
    (path / DATA_FILE).write_text("garbage", encoding="utf-8")
    with pytest.raises(StoreError):
        Store(path)


def test_rejects_non_bytes_key(store):
    with pytest.raises(TypeError):
        store.insert(1, "v")