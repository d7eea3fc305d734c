"""Concurrent piece hashing with in-order reassembly.

Pieces are hashed on a bounded thread pool while the producer keeps reading.
``hashlib`` releases the GIL while digesting large buffers, so the worker
threads hash in parallel. Each task carries the piece index it was submitted
with; completed results are funnelled through a queue back to the calling
thread, which writes each digest into a pre-sized table at that index.
Completion order therefore never affects the result.
"""

from __future__ import annotations

import logging
import os
import queue
import threading
from collections.abc import Callable, Iterable
from concurrent.futures import Future, ThreadPoolExecutor
from types import TracebackType
from typing import Protocol

from maketorrent.piece.hashing import hash_piece
from maketorrent.utils.exceptions import HashingError
from maketorrent.utils.logging_config import get_logger


class HashProgressObserver(Protocol):
    """Receives a callback for every piece whose hash has been collected."""

    def on_piece_hashed(self, index: int, completed: int, total: int) -> None:
        """Piece ``index`` was hashed; ``completed`` of ``total`` are done."""


class HashScheduler:
    """Hash pieces concurrently and return their digests in piece order.

    Usage::

        with HashScheduler(expected_pieces=n) as scheduler:
            for index, data in pieces:
                scheduler.submit(index, data)
            hashes = scheduler.collect()

    At most ``max_pending`` pieces are held in memory at once; ``submit``
    blocks until a slot frees up.
    """

    def __init__(
        self,
        expected_pieces: int,
        workers: int | None = None,
        max_pending: int | None = None,
        hasher: Callable[[bytes], bytes] = hash_piece,
        observer: HashProgressObserver | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            expected_pieces: Number of pieces the content is cut into
            workers: Hashing threads (defaults to the CPU count)
            max_pending: Pieces allowed in flight (defaults to 2 x workers)
            hasher: Digest function applied to each piece
            observer: Optional progress observer
            logger: Logger for scheduling diagnostics

        """
        if expected_pieces < 0:
            msg = f"expected_pieces must be >= 0, got {expected_pieces}"
            raise ValueError(msg)
        self.expected_pieces = expected_pieces
        self.workers = workers or os.cpu_count() or 1
        self.max_pending = max_pending or self.workers * 2
        self.hasher = hasher
        self.observer = observer
        self.logger = logger or get_logger(__name__)

        self._results: list[bytes | None] = [None] * expected_pieces
        self._done: queue.SimpleQueue[Future[tuple[int, bytes]]] = queue.SimpleQueue()
        self._slots = threading.BoundedSemaphore(self.max_pending)
        self._submitted = 0
        self._completed = 0
        self._executor: ThreadPoolExecutor | None = None

    def __enter__(self) -> HashScheduler:
        self.start()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.shutdown(cancel=exc_type is not None)

    def start(self) -> None:
        """Start the worker pool."""
        if self._executor is None:
            self._executor = ThreadPoolExecutor(
                max_workers=self.workers,
                thread_name_prefix="piece-hash",
            )
            self.logger.debug(
                "Started %d hash workers (max %d pieces in flight)",
                self.workers,
                self.max_pending,
            )

    def shutdown(self, cancel: bool = False) -> None:
        """Stop the worker pool, optionally cancelling queued pieces."""
        if self._executor is not None:
            self._executor.shutdown(wait=True, cancel_futures=cancel)
            self._executor = None

    def _hash(self, index: int, data: bytes) -> tuple[int, bytes]:
        return index, self.hasher(data)

    def _on_done(self, future: Future[tuple[int, bytes]]) -> None:
        self._slots.release()
        self._done.put(future)

    def submit(self, index: int, data: bytes) -> None:
        """Queue piece ``index`` for hashing.

        Raises:
            HashingError: If ``index`` is outside the expected piece range
                or pieces are not submitted in stream order

        """
        if self._executor is None:
            msg = "HashScheduler has not been started"
            raise HashingError(msg)
        if index != self._submitted or index >= self.expected_pieces:
            msg = (
                f"Unexpected piece index {index}: submitted {self._submitted} "
                f"of {self.expected_pieces} pieces"
            )
            raise HashingError(msg)

        self._slots.acquire()
        future = self._executor.submit(self._hash, index, data)
        self._submitted += 1
        future.add_done_callback(self._on_done)
        self._drain(block=False)

    def _record(self, future: Future[tuple[int, bytes]]) -> None:
        try:
            index, digest = future.result()
        except Exception as e:
            msg = f"Piece hashing failed: {e}"
            raise HashingError(msg) from e

        if self._results[index] is not None:
            msg = f"Piece {index} was hashed twice"
            raise HashingError(msg)
        self._results[index] = digest
        self._completed += 1
        self.logger.debug(
            "Hashed %d of %d pieces (piece %d)",
            self._completed,
            self.expected_pieces,
            index,
        )
        if self.observer is not None:
            self.observer.on_piece_hashed(index, self._completed, self.expected_pieces)

    def _drain(self, block: bool) -> None:
        while self._completed < self._submitted:
            try:
                future = self._done.get(block=block)
            except queue.Empty:
                return
            self._record(future)

    def collect(self) -> list[bytes]:
        """Wait for every submitted piece and return the ordered digests.

        Raises:
            HashingError: If any piece failed to hash or the number of
                collected pieces differs from ``expected_pieces``

        """
        self._drain(block=True)

        if self._completed != self.expected_pieces:
            msg = (
                f"Collected {self._completed} piece hashes, "
                f"expected {self.expected_pieces}"
            )
            raise HashingError(msg)

        missing = [i for i, digest in enumerate(self._results) if digest is None]
        if missing:
            msg = f"Missing hashes for pieces {missing[:10]}"
            raise HashingError(msg)

        return [digest for digest in self._results if digest is not None]

    def hash_pieces(self, pieces: Iterable[tuple[int, bytes]]) -> list[bytes]:
        """Submit every ``(index, data)`` piece and collect the digests."""
        for index, data in pieces:
            self.submit(index, data)
        return self.collect()
