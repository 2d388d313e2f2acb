"""Single JSON document holding every table, with transactions.

All tables (``users``, ``products``, ``orders``) live in one file so a
commit is a single atomic ``os.replace`` of a uniquely named temp file.

Between ``begin`` and ``commit`` the store holds an exclusive ``flock`` on
a sibling lock file (``.<name>.lock``) plus an in-process lock, and the
owning thread reads and writes a staged copy taken under that lock.  Any
other transaction or write-through on the same file, from this process
or another, waits until the transaction ends.  Reads outside a
transaction see the last committed file.
"""

from __future__ import annotations

import copy
import fcntl
import json
import logging
import os
import tempfile
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import IO, Iterator

from orderdesk.domain.exceptions import StorageError

logger = logging.getLogger(__name__)

TABLES = ("users", "products", "orders")


class JsonStore:

    def __init__(self, file_path: Path) -> None:
        self._file_path = file_path
        self._lock_path = file_path.with_name(f".{file_path.name}.lock")
        self._lock = threading.RLock()
        self._lock_file: IO[str] | None = None
        self._staged: dict[str, list[dict]] | None = None
        self._owner: int | None = None
        self._ensure_file()

    @property
    def file_path(self) -> Path:
        return self._file_path

    @property
    def in_transaction(self) -> bool:
        return self._staged is not None and self._owner == threading.get_ident()

    # --- Transactions ---------------------------------------------------------

    def begin(self) -> None:
        self._lock.acquire()
        if self._staged is not None:
            self._lock.release()
            raise StorageError("A transaction is already in progress")
        try:
            self._acquire_file_lock()
            self._staged = self._read_file()
        except StorageError:
            self._release_file_lock()
            self._lock.release()
            raise
        self._owner = threading.get_ident()

    def commit(self) -> None:
        self._require_transaction()
        try:
            self._write_file(self._staged)  # type: ignore[arg-type]
        finally:
            self._end()

    def rollback(self) -> None:
        self._require_transaction()
        self._end()
        logger.debug("Transaction rolled back")

    # --- Table access ---------------------------------------------------------

    def load(self, table: str) -> list[dict]:
        if self.in_transaction:
            return copy.deepcopy(self._staged[table])  # type: ignore[index]
        return self._read_file()[table]

    def persist(self, table: str, records: list[dict]) -> None:
        if self.in_transaction:
            self._staged[table] = copy.deepcopy(records)  # type: ignore[index]
            return
        with self._exclusive():
            data = self._read_file()
            data[table] = records
            self._write_file(data)

    # --- Locking --------------------------------------------------------------

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        """Hold both locks for one read-modify-write outside a transaction."""
        with self._lock:
            self._acquire_file_lock()
            try:
                yield
            finally:
                self._release_file_lock()

    def _acquire_file_lock(self) -> None:
        try:
            lock_file = open(self._lock_path, "w")
        except OSError as exc:
            raise StorageError(f"Cannot open lock file {self._lock_path}: {exc}") from exc
        try:
            fcntl.flock(lock_file.fileno(), fcntl.LOCK_EX)
        except OSError as exc:
            lock_file.close()
            raise StorageError(f"Cannot lock {self._lock_path}: {exc}") from exc
        self._lock_file = lock_file

    def _release_file_lock(self) -> None:
        if self._lock_file is None:
            return
        fcntl.flock(self._lock_file.fileno(), fcntl.LOCK_UN)
        self._lock_file.close()
        self._lock_file = None

    def _require_transaction(self) -> None:
        if not self.in_transaction:
            raise StorageError("There is no transaction in progress")

    def _end(self) -> None:
        self._staged = None
        self._owner = None
        try:
            self._release_file_lock()
        finally:
            self._lock.release()

    # --- File helpers ---------------------------------------------------------

    def _read_file(self) -> dict[str, list[dict]]:
        try:
            raw = json.loads(self._file_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise StorageError(f"Cannot read {self._file_path}: {exc}") from exc
        return {table: raw.get(table, []) for table in TABLES}

    def _write_file(self, data: dict[str, list[dict]]) -> None:
        try:
            fd, temp_path = tempfile.mkstemp(
                dir=self._file_path.parent,
                prefix=f".{self._file_path.name}_",
                suffix=".tmp",
            )
        except OSError as exc:
            raise StorageError(f"Cannot write {self._file_path}: {exc}") from exc
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
                f.write("\n")
            os.replace(temp_path, self._file_path)
        except OSError as exc:
            try:
                os.unlink(temp_path)
            except OSError:
                pass
            raise StorageError(f"Cannot write {self._file_path}: {exc}") from exc

    def _ensure_file(self) -> None:
        self._file_path.parent.mkdir(parents=True, exist_ok=True)
        with self._exclusive():
            if not self._file_path.exists():
                self._write_file({table: [] for table in TABLES})
