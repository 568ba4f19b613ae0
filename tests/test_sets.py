import pytest

from rudis.datatypes.sets import sadd, sismember, smembers, srem
from rudis.store import Store


@pytest.fixture
def db(tmp_path):
    return Store(tmp_path / "sdb")


def test_set_basic(db):
    assert sadd(db, "S", "a") == "1"
    assert sadd(db, "S", "a") == "0"
    assert sadd(db, "S", "b") == "1"

    assert sismember(db, "S", "a") == "1"
    assert sismember(db, "S", "x") == "0"

    assert sorted(smembers(db, "S").split(",")) == ["a", "b"]

    assert srem(db, "S", "a") == "1"
    assert srem(db, "S", "a") == "0"
    assert smembers(db, "S") == "b"


def test_empty_set(db):
    assert smembers(db, "none") == ""
    assert sismember(db, "none", "a") == "0"


def test_set_survives_reopen(tmp_path):
    path = tmp_path / "sdb"
    sadd(Store(path), "S", "x")
    assert sismember(Store(path), "S", "x") == "1"