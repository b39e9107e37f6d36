"""Connection dispatch strategies: how the accept loop hands off work."""

from __future__ import annotations

import queue
import threading
from typing import Callable, Protocol

from loguru import logger

Task = Callable[[], None]


class DispatchStrategy(Protocol):
    def submit(self, task: Task) -> None: ...

    def shutdown(self, wait: bool = True) -> None: ...


def _run(task: Task) -> None:
    try:
        task()
    except Exception as e:
        logger.exception("Connection task failed: {}", e)


class ThreadPerConnection:
    """One daemon thread per accepted connection; submission never blocks."""

    def __init__(self) -> None:
        self._threads: set[threading.Thread] = set()
        self._lock = threading.Lock()

    def submit(self, task: Task) -> None:
        thread = threading.Thread(target=self._run_tracked, args=(task,), daemon=True, name="boxcar-conn")
        with self._lock:
            self._threads.add(thread)
        thread.start()

    def _run_tracked(self, task: Task) -> None:
        try:
            _run(task)
        finally:
            with self._lock:
                self._threads.discard(threading.current_thread())

    @property
    def active(self) -> int:
        with self._lock:
            return len(self._threads)

    def shutdown(self, wait: bool = True) -> None:
        if not wait:
            return
        with self._lock:
            threads = list(self._threads)
        for thread in threads:
            thread.join(timeout=5.0)


class BoundedWorkerPool:
    """
    Fixed set of worker threads fed from a queue.

    With ``queue_size > 0`` the accept loop blocks once that many
    connections are waiting, which bounds memory under load.
    """

    def __init__(self, workers: int = 8, queue_size: int = 0):
        if workers < 1:
            raise ValueError("workers must be >= 1")
        self._q: queue.Queue[Task | None] = queue.Queue(maxsize=max(queue_size, 0))
        self._stop = threading.Event()
        self._threads = [
            threading.Thread(target=self._worker, daemon=True, name=f"boxcar-worker-{i}")
            for i in range(workers)
        ]
        for thread in self._threads:
            thread.start()
        logger.debug("Started {} boxcar workers", workers)

    def _worker(self) -> None:
        while not self._stop.is_set():
            try:
                task = self._q.get(timeout=0.5)
            except queue.Empty:
                continue
            try:
                if task is None:
                    break
                _run(task)
            finally:
                self._q.task_done()

    def submit(self, task: Task) -> None:
        if self._stop.is_set():
            raise RuntimeError("worker pool is shut down")
        self._q.put(task)

    def shutdown(self, wait: bool = True) -> None:
        if self._stop.is_set():
            return
        if not wait:
            # workers notice the flag within one poll interval
            self._stop.set()
            return
        self._q.join()
        for _ in self._threads:
            self._q.put(None)
        self._stop.set()
        for thread in self._threads:
            thread.join(timeout=5.0)
