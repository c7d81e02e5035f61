from __future__ import annotations

import json
import logging
import os
import queue
import threading
import uuid
from concurrent.futures import Future

from .errors import PersistenceError, StartupError
from .models import Snapshot

logger = logging.getLogger(__name__)

_STOP = object()


class JsonStore:
    """
    Keeps the registry durable in a single JSON file.

    Every write goes through one writer thread that takes jobs from a FIFO
    queue, so files hit the disk in exactly the order persist() was called.
    Each write lands in a temp file next to the canonical one and is then
    os.replace()d over it: a reader or a crash sees either the old or the new
    document, never a partial one.
    """

    def __init__(self, path: str | os.PathLike[str]):
        self.path = os.fspath(path)
        self._queue: queue.Queue = queue.Queue()
        self._closed = False
        self._close_lock = threading.Lock()
        self._writer = threading.Thread(target=self._drain, name="santa-store-writer", daemon=True)
        self._writer.start()

    # ------------------------------------------------------------------ load

    def load(self) -> Snapshot | None:
        try:
            with open(self.path, encoding="utf-8") as fh:
                contents = fh.read()
        except FileNotFoundError:
            logger.info("No store at %s; starting with an empty registry.", self.path)
            return None
        except OSError as e:
            raise StartupError(f"Unable to read {self.path}: {e}") from e

        try:
            data = json.loads(contents)
        except json.JSONDecodeError as e:
            raise StartupError(f"Unable to parse {self.path}: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("participants"), list):
            raise StartupError(f"Invalid participants store format in {self.path}.")

        snapshot = Snapshot.from_dict(data)
        logger.info("Loaded %d participants from %s.", len(snapshot.participants), self.path)
        return snapshot

    # --------------------------------------------------------------- persist

    def persist(self, snapshot: Snapshot) -> None:
        """Queue a write of snapshot and block until it is on disk. Raises PersistenceError."""
        future = self.submit(snapshot)
        try:
            future.result()
        except PersistenceError:
            raise
        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError("Unable to save state.") from e

    def submit(self, snapshot: Snapshot) -> Future:
        payload = json.dumps(snapshot.to_dict(), indent=2)
        future: Future = Future()
        with self._close_lock:
            if self._closed:
                raise PersistenceError("Store is closed.")
            self._queue.put((payload, future))
        return future

    def close(self) -> None:
        """Finish queued writes and stop the writer thread."""
        with self._close_lock:
            if self._closed:
                return
            self._closed = True
            self._queue.put(_STOP)
        self._writer.join()

    # ---------------------------------------------------------------- writer

    def _drain(self) -> None:
        while True:
            job = self._queue.get()
            if job is _STOP:
                return
            payload, future = job
            if not future.set_running_or_notify_cancel():
                continue
            try:
                self._write(payload)
            except BaseException as e:
                logger.error("Failed to write %s: %s", self.path, e)
                if not isinstance(e, Exception):
                    # the writer is about to die; nobody may wait on it again
                    self._abandon()
                    future.set_exception(e)
                    raise
                future.set_exception(e)
            else:
                future.set_result(None)

    def _abandon(self) -> None:
        with self._close_lock:
            self._closed = True
        while True:
            try:
                job = self._queue.get_nowait()
            except queue.Empty:
                return
            if job is not _STOP:
                job[1].set_exception(PersistenceError("Store writer stopped."))

    def _write(self, payload: str) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        temp_path = os.path.join(directory, f"{os.path.basename(self.path)}.{uuid.uuid4().hex}.tmp")
        try:
            with open(temp_path, "w", encoding="utf-8") as fh:
                fh.write(payload)
                fh.flush()
                os.fsync(fh.fileno())
            os.replace(temp_path, self.path)
        except BaseException:
            try:
                os.remove(temp_path)
            except OSError:
                pass
            raise
