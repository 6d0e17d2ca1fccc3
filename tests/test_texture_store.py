"""Tests for the texture store implementations."""

import threading
import time

import pytest

from panopyramid.models import Face, TileAddress
from panopyramid.texture_store import (
    MemoryTextureStore,
    TextureStatus,
    TextureStore,
    ThreadedTextureStore,
)

A = TileAddress(0, Face.FRONT, 0, 0)
B = TileAddress(1, Face.BACK, 1, 0)


class Recorder:
    def __init__(self):
        self.calls = []
        self.threads = []

    def __call__(self, address, status, handle):
        self.calls.append((address, status, handle))
        self.threads.append(threading.current_thread())


def _pump(store, recorder, count, timeout=5.0):
    deadline = time.monotonic() + timeout
    while len(recorder.calls) < count and time.monotonic() < deadline:
        store.dispatch()
        time.sleep(0.005)


class TestMemoryTextureStore:

    def test_satisfies_protocol(self):
        assert isinstance(MemoryTextureStore(), TextureStore)

    def test_unknown_address_not_requested(self):
        assert MemoryTextureStore().status(A) is TextureStatus.NOT_REQUESTED

    def test_query_pending_until_complete(self):
        store = MemoryTextureStore()
        rec = Recorder()
        store.query(A, rec)
        assert store.status(A) is TextureStatus.PENDING
        assert store.pending() == [A]
        assert store.dispatch() == 0
        store.complete(A, "tex")
        assert rec.calls == []
        assert store.dispatch() == 1
        assert rec.calls == [(A, TextureStatus.READY, "tex")]
        assert store.handle(A) == "tex"

    def test_repeated_pending_query_not_reissued(self):
        store = MemoryTextureStore()
        first, second = Recorder(), Recorder()
        store.query(A, first)
        store.query(A, second)
        assert store.queries_issued == 1
        store.fail(A, "gone")
        store.dispatch()
        assert first.calls == [(A, TextureStatus.FAILED, "gone")]
        assert second.calls == [(A, TextureStatus.FAILED, "gone")]

    def test_verdict_cached(self):
        store = MemoryTextureStore()
        store.query(A, Recorder())
        store.complete(A, "tex")
        store.dispatch()
        late = Recorder()
        store.query(A, late)
        assert late.calls == [(A, TextureStatus.READY, "tex")]
        assert store.queries_issued == 1

    def test_preload_default_handle(self):
        store = MemoryTextureStore()
        store.preload(B)
        assert store.status(B) is TextureStatus.READY
        assert store.handle(B) == B


class TestThreadedTextureStore:

    def test_loads_on_worker_delivers_on_caller(self):
        rec = Recorder()
        with ThreadedTextureStore(lambda address: f"tex:{address}") as store:
            store.query(A, rec)
            _pump(store, rec, 1)
        assert rec.calls == [(A, TextureStatus.READY, f"tex:{A}")]
        assert rec.threads == [threading.current_thread()]
        assert store.status(A) is TextureStatus.READY

    def test_loader_exception_fails_tile(self):
        def loader(address):
            raise IOError("no such tile")

        rec = Recorder()
        with ThreadedTextureStore(loader, max_workers=1) as store:
            store.query(B, rec)
            _pump(store, rec, 1)
        assert rec.calls == [(B, TextureStatus.FAILED, "no such tile")]

    def test_nothing_delivered_without_dispatch(self):
        done = threading.Event()

        def loader(address):
            done.set()
            return "tex"

        rec = Recorder()
        with ThreadedTextureStore(loader) as store:
            store.query(A, rec)
            assert done.wait(5.0)
            time.sleep(0.02)
            assert rec.calls == []
            _pump(store, rec, 1)
        assert len(rec.calls) == 1

    def test_closed_store_rejects_new_queries(self):
        store = ThreadedTextureStore(lambda a: None)
        store.close(wait=True)
        with pytest.raises(RuntimeError):
            store.query(A, Recorder())
