"""Concurrent directory traversal feeding a bounded queue."""

from __future__ import annotations

import logging
import os
import queue
import threading
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Any, Callable, Generator, Iterator

from .ignore import IgnoreRules, is_hidden

logger = logging.getLogger(__name__)

QUEUE_CAPACITY = 64
_POLL_SECONDS = 0.05
_DONE = object()


def default_workers() -> int:
    return min(12, os.cpu_count() or 1)


class _WalkState:
    """Directory work queue shared by the walker threads."""

    def __init__(self, workers: int, stop: threading.Event) -> None:
        self.workers = workers
        self.stop = stop
        self.aborted = threading.Event()
        self.dirs: queue.SimpleQueue[tuple[Path, IgnoreRules] | None] = (
            queue.SimpleQueue()
        )
        self.error: BaseException | None = None
        self._pending = 0
        self._lock = threading.Lock()

    def halted(self) -> bool:
        return self.stop.is_set() or self.aborted.is_set()

    def push(self, directory: Path, rules: IgnoreRules) -> None:
        with self._lock:
            self._pending += 1
        self.dirs.put((directory, rules))

    def task_done(self) -> None:
        with self._lock:
            self._pending -= 1
            finished = self._pending == 0
        if finished:
            for _ in range(self.workers):
                self.dirs.put(None)

    def fail(self, exc: BaseException) -> None:
        with self._lock:
            if self.error is None:
                self.error = exc
        self.aborted.set()


class PathSource:
    """Lazily yields template files below ``root`` in no particular order.

    A pool of threads walks the tree and hands matching files to the
    consumer through a queue holding at most ``capacity`` paths, so a slow
    consumer throttles the walk. Symbolic links are never followed and
    unreadable directories are skipped. Unless ``include_ignored`` is set,
    hidden entries and anything matched by ``.gitignore``/``.ignore`` files
    are left out. Abandoning the iterator stops the walk.
    """

    def __init__(
        self,
        root: Path,
        suffix: str,
        *,
        include_ignored: bool = False,
        workers: int | None = None,
        capacity: int = QUEUE_CAPACITY,
    ) -> None:
        self.root = root
        self.suffix = suffix
        self.include_ignored = include_ignored
        self.workers = workers or default_workers()
        self.capacity = capacity

    def __iter__(self) -> Iterator[Path]:
        return self.walk()

    def walk(self) -> Generator[Path, None, None]:
        """Start the walk; close the generator to stop it early."""
        out: queue.Queue[Any] = queue.Queue(maxsize=self.capacity)
        stop = threading.Event()
        producer = threading.Thread(
            target=self._produce, args=(out, stop), name="sqlweld-walk", daemon=True
        )
        producer.start()
        try:
            while True:
                item = out.get()
                if item is _DONE:
                    break
                if isinstance(item, BaseException):
                    raise item
                yield item
        finally:
            stop.set()
            producer.join()

    def _produce(self, out: queue.Queue[Any], stop: threading.Event) -> None:
        # The consumer blocks on ``out`` until it sees _DONE or an exception.
        try:
            state = _WalkState(self.workers, stop)
            state.push(self.root, IgnoreRules())

            with ThreadPoolExecutor(
                max_workers=self.workers, thread_name_prefix="sqlweld-walk"
            ) as pool:
                futures = [
                    pool.submit(self._work, state, out) for _ in range(self.workers)
                ]
            for future in futures:
                future.result()

            final = state.error if state.error is not None else _DONE
        except BaseException as exc:
            final = exc
        self._offer(out, stop.is_set, final)

    def _work(self, state: _WalkState, out: queue.Queue[Any]) -> None:
        while True:
            task = state.dirs.get()
            if task is None:
                return
            directory, rules = task
            try:
                if not state.halted():
                    self._scan(directory, rules, state, out)
            except Exception as exc:
                state.fail(exc)
            finally:
                state.task_done()

    def _scan(
        self,
        directory: Path,
        rules: IgnoreRules,
        state: _WalkState,
        out: queue.Queue[Any],
    ) -> None:
        try:
            with os.scandir(directory) as it:
                entries = list(it)
        except OSError as exc:
            logger.debug(f"Skipping unreadable directory {directory}: {exc}")
            return

        if not self.include_ignored:
            rules = rules.descend(directory)

        for entry in entries:
            try:
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = not is_dir and entry.is_file(follow_symlinks=False)
            except OSError as exc:
                logger.debug(f"Skipping unreadable entry {entry.path}: {exc}")
                continue

            if not (is_dir or is_file):
                continue
            if is_file and not entry.name.endswith(self.suffix):
                continue

            path = Path(entry.path)
            if not self.include_ignored and (
                is_hidden(entry.name) or rules.is_ignored(path, is_dir=is_dir)
            ):
                logger.debug(f"Ignoring {path}")
                continue

            if is_dir:
                state.push(path, rules)
            elif not self._offer(out, state.halted, path):
                return

    @staticmethod
    def _offer(
        out: queue.Queue[Any], halted: Callable[[], bool], item: Any
    ) -> bool:
        """Put ``item`` on the queue, giving up once ``halted`` reports true."""
        while not halted():
            try:
                out.put(item, timeout=_POLL_SECONDS)
                return True
            except queue.Full:
                continue
        return False
