"""Texture stores — asynchronous providers of tile textures.

The pyramid never loads textures itself.  It asks a :class:`TextureStore`
for a tile address and is told the verdict later through a callback.  All
callbacks are delivered on the caller's thread: either synchronously from
:meth:`~TextureStore.query` when the verdict is already known, or from
:meth:`~TextureStore.dispatch`, which the renderer calls once per frame.

Implementations
---------------
- :class:`MemoryTextureStore` — completed by hand; used by tests and the
  headless simulation.
- :class:`ThreadedTextureStore` — runs a loader function on a thread pool.
"""

from __future__ import annotations

import concurrent.futures
import logging
import queue
from collections import deque
from enum import Enum
from typing import Any, Callable, Deque, Dict, List, Optional, Protocol, Tuple, runtime_checkable

from .models import TileAddress

logger = logging.getLogger(__name__)


class TextureStatus(Enum):
    NOT_REQUESTED = "not-requested"
    PENDING = "pending"
    READY = "ready"
    FAILED = "failed"


TextureCallback = Callable[[TileAddress, TextureStatus, Any], None]
"""Signature of a query callback: ``(address, status, handle)``.

*handle* is the texture resource when *status* is ``READY``, the failure
reason (a string) when ``FAILED``.
"""


@runtime_checkable
class TextureStore(Protocol):
    """What the pyramid needs from a texture provider."""

    def query(self, address: TileAddress, callback: TextureCallback) -> None:
        """Ask for the texture of *address*; idempotent."""
        ...

    def status(self, address: TileAddress) -> TextureStatus:
        ...

    def dispatch(self) -> int:
        """Deliver completed queries on the calling thread; return the count."""
        ...


class _VerdictBook:
    """Shared bookkeeping: verdicts, handles and callbacks waiting on them."""

    def __init__(self) -> None:
        self._status: Dict[TileAddress, TextureStatus] = {}
        self._handles: Dict[TileAddress, Any] = {}
        self._waiting: Dict[TileAddress, List[TextureCallback]] = {}

    def status(self, address: TileAddress) -> TextureStatus:
        return self._status.get(address, TextureStatus.NOT_REQUESTED)

    def handle(self, address: TileAddress) -> Any:
        """Texture handle of a ready tile (``None`` otherwise)."""
        return self._handles.get(address)

    def _answer_known(self, address: TileAddress, callback: TextureCallback) -> bool:
        status = self.status(address)
        if status in (TextureStatus.READY, TextureStatus.FAILED):
            callback(address, status, self._handles.get(address))
            return True
        if status is TextureStatus.PENDING:
            self._waiting.setdefault(address, []).append(callback)
            return True
        return False

    def _settle(
        self, address: TileAddress, status: TextureStatus, handle: Any
    ) -> List[Tuple[TextureCallback, TileAddress, TextureStatus, Any]]:
        self._status[address] = status
        self._handles[address] = handle
        waiters = self._waiting.pop(address, [])
        return [(cb, address, status, handle) for cb in waiters]


class MemoryTextureStore(_VerdictBook):
    """In-process store whose queries are completed explicitly.

    >>> store = MemoryTextureStore()
    >>> store.query(addr, tile.on_texture)   # -> pending
    >>> store.complete(addr, handle="tex")
    >>> store.dispatch()                      # tile.on_texture(addr, READY, "tex")
    1
    """

    def __init__(self) -> None:
        super().__init__()
        self._outbox: Deque[Tuple[TextureCallback, TileAddress, TextureStatus, Any]] = deque()
        self.queries_issued = 0

    def query(self, address: TileAddress, callback: TextureCallback) -> None:
        if self._answer_known(address, callback):
            return
        self._status[address] = TextureStatus.PENDING
        self._waiting[address] = [callback]
        self.queries_issued += 1

    def pending(self) -> List[TileAddress]:
        """Addresses queried but not completed, in query order."""
        return [a for a, s in self._status.items() if s is TextureStatus.PENDING]

    def preload(self, address: TileAddress, handle: Any = None) -> None:
        """Mark *address* ready without a query (texture already resident)."""
        self._outbox.extend(
            self._settle(address, TextureStatus.READY, address if handle is None else handle)
        )

    def complete(self, address: TileAddress, handle: Any = None) -> None:
        """Resolve *address*; callbacks fire on the next :meth:`dispatch`."""
        self.preload(address, handle)

    def fail(self, address: TileAddress, reason: str = "") -> None:
        self._outbox.extend(self._settle(address, TextureStatus.FAILED, reason))

    def dispatch(self) -> int:
        count = 0
        while self._outbox:
            callback, address, status, handle = self._outbox.popleft()
            callback(address, status, handle)
            count += 1
        return count


Loader = Callable[[TileAddress], Any]


class ThreadedTextureStore(_VerdictBook):
    """Loads textures with *loader* on a thread pool.

    *loader* receives a tile address and returns the texture handle; any
    exception it raises marks the tile failed.  Results are queued by the
    worker threads and only delivered from :meth:`dispatch`.
    """

    def __init__(self, loader: Loader, *, max_workers: int = 4) -> None:
        super().__init__()
        self._loader = loader
        self._executor = concurrent.futures.ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="texture-loader",
        )
        self._results: "queue.Queue[Tuple[TileAddress, TextureStatus, Any]]" = queue.Queue()
        self._closed = False

    def query(self, address: TileAddress, callback: TextureCallback) -> None:
        if self._answer_known(address, callback):
            return
        if self._closed:
            raise RuntimeError("ThreadedTextureStore is closed")
        self._status[address] = TextureStatus.PENDING
        self._waiting[address] = [callback]
        future = self._executor.submit(self._loader, address)
        future.add_done_callback(lambda f, a=address: self._on_done(a, f))

    def _on_done(self, address: TileAddress, future: concurrent.futures.Future) -> None:
        if future.cancelled():
            return
        exc = future.exception()
        if exc is not None:
            self._results.put((address, TextureStatus.FAILED, str(exc) or type(exc).__name__))
        else:
            self._results.put((address, TextureStatus.READY, future.result()))

    def dispatch(self) -> int:
        count = 0
        while True:
            try:
                address, status, handle = self._results.get_nowait()
            except queue.Empty:
                break
            if status is TextureStatus.FAILED:
                logger.debug("Loader failed for %s: %s", address, handle)
            for callback, addr, st, h in self._settle(address, status, handle):
                callback(addr, st, h)
                count += 1
        return count

    def close(self, wait: bool = False) -> None:
        """Stop the workers; queries still queued are dropped."""
        self._closed = True
        self._executor.shutdown(wait=wait, cancel_futures=True)

    def __enter__(self) -> "ThreadedTextureStore":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close(wait=True)
