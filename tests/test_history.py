import gc
import weakref

from multiedit.buffer import Buffer
from multiedit.engine import HistoryStore


def test_save_load_and_forget() -> None:
    store = HistoryStore()
    buffer = Buffer.from_text("foo bar foo")

    assert store.load(buffer) is None

    snapshot = store.save(buffer, [8, 0])

    assert snapshot.starts == (0, 8)
    assert 8 in snapshot and 4 not in snapshot
    assert store.load(buffer) is snapshot

    store.forget(buffer)
    store.forget(buffer)

    assert store.load(buffer) is None


def test_snapshots_are_per_buffer() -> None:
    store = HistoryStore()
    first = Buffer.from_text("a")
    second = Buffer.from_text("a")

    store.save(first, [0])

    assert store.load(second) is None


def test_history_does_not_keep_buffers_alive() -> None:
    store = HistoryStore()
    buffer = Buffer.from_text("foo")
    store.save(buffer, [0])
    ref = weakref.ref(buffer)

    del buffer
    gc.collect()

    assert ref() is None
