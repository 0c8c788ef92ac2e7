import threading

import pytest

from charon.core.errors import ConfigError
from charon.db import open_store
from charon.db.kv import VAULT, Prefix, RecordStore, vault_key
from charon.db.memory import MemoryStore
from charon.db.sqlite import SQLiteStore, _prefix_hi, open_sqlite_store, path_from_uri


@pytest.fixture(params=["memory", "sqlite-file", "sqlite-mem"])
def kv(request, tmp_path):
    if request.param == "memory":
        s = MemoryStore()
    elif request.param == "sqlite-file":
        s = open_store(f"sqlite:///{tmp_path}/charon.db")
    else:
        s = open_store("sqlite:///:memory:")
    yield s
    s.close()


def test_protocol_conformance(kv):
    assert isinstance(kv, RecordStore)


def test_create_is_once(kv):
    assert kv.create(b"k", b"v1") is True
    assert kv.create(b"k", b"v2") is False
    assert kv.get(b"k") == b"v1"
    assert kv.get(b"missing") is None


def test_compare_and_swap(kv):
    kv.create(b"k", b"a")
    assert kv.compare_and_swap(b"k", b"a", b"b") is True
    assert kv.get(b"k") == b"b"
    # stale expectation loses
    assert kv.compare_and_swap(b"k", b"a", b"c") is False
    assert kv.get(b"k") == b"b"
    # absent key never swaps
    assert kv.compare_and_swap(b"nope", b"", b"x") is False
    assert kv.get(b"nope") is None


def test_iter_prefix_ordered(kv):
    for k in (b"v:2", b"v:1", b"w:0", b"v:3"):
        kv.create(k, k)
    assert [k for k, _ in kv.iter_prefix(b"v:")] == [b"v:1", b"v:2", b"v:3"]


def test_concurrent_cas_has_one_winner(kv):
    kv.create(b"k", b"0")
    wins = []
    barrier = threading.Barrier(8)

    def worker(i):
        barrier.wait()
        if kv.compare_and_swap(b"k", b"0", b"%d" % (i + 1)):
            wins.append(i)

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert len(wins) == 1
    assert kv.get(b"k") == b"%d" % (wins[0] + 1)


def test_sqlite_two_connections_share_atomicity(tmp_path):
    uri = f"sqlite:///{tmp_path}/shared.db"
    a, b = open_sqlite_store(uri), open_sqlite_store(uri)
    try:
        assert a.create(b"k", b"x")
        assert not b.create(b"k", b"y")
        assert b.compare_and_swap(b"k", b"x", b"z")
        assert not a.compare_and_swap(b"k", b"x", b"w")
        assert a.get(b"k") == b"z"
    finally:
        a.close()
        b.close()


def test_sqlite_persists_across_reopen(tmp_path):
    path = tmp_path / "p.db"
    s = open_sqlite_store(path)
    s.create(b"k", b"v")
    s.close()
    s2 = open_sqlite_store(path)
    assert isinstance(s2, SQLiteStore)
    assert s2.get(b"k") == b"v"
    s2.close()


def test_uri_parsing():
    assert path_from_uri("sqlite:////abs/x.db") == "/abs/x.db"
    assert path_from_uri("sqlite:///rel.db") == "rel.db"
    with pytest.raises(ValueError):
        path_from_uri("sqlite:///")


def test_open_store_unknown_scheme():
    with pytest.raises(ConfigError):
        open_store("rocksdb:///tmp/x")


def test_prefix_hi():
    assert _prefix_hi(b"ab\x01") == b"ab\x02"
    assert _prefix_hi(b"a\xff") == b"b"
    assert _prefix_hi(b"\xff\xff") is None


def test_vault_key_layout():
    owner = bytes(range(32))
    k = vault_key(owner)
    assert k.startswith(VAULT.raw)
    assert k == b"v:" + b"\x05vault" + b"\x20" + owner
    assert vault_key(b"\x00" * 32) != k


def test_prefix_key_is_unambiguous():
    p = Prefix("t")
    assert p.key(b"ab", b"c") != p.key(b"a", b"bc")
    assert p.key("x") == p.key(b"x")
    with pytest.raises(ValueError):
        Prefix(b"")
