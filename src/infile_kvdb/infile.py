"""
InFile Module

Purpose:
    Key-value database living in files: every key is its own file on disk,
    and all data is mirrored into an InMemory database that serves reads.
    Intended for tests and development, not particularly optimized.

Disk Layout:
    <root>/<column index>/0x<hex of key>    (file contents = raw value)

Write Path:
    1. Apply every operation of the transaction to disk, in order
    2. Apply the same transaction to the in-memory mirror

    A failing disk operation raises right away. Operations already on disk
    are not rolled back and the mirror is left untouched, so disk and
    mirror may diverge; re-open the store to resynchronize.

Read Path:
    Served from the mirror only, disk is never read after open.
"""

import logging
import os
from typing import Iterator, Optional, Tuple

from . import memorydb
from .errors import NoSuchColumnError
from .pathcodec import column_path, file_name_to_key, key_to_path
from .transaction import DBOp, DBTransaction


logger = logging.getLogger(__name__)


class InFile:
    """
    A key-value database with one file per key and an in-memory mirror

    Usage:
        db = InFile.open("/tmp/db", num_cols=2)
        txn = db.transaction()
        txn.put(0, b"key", b"value")
        db.write(txn)
        db.get(0, b"key")  # b"value"
    """

    def __init__(self, path: str, in_memory: memorydb.InMemory):
        """
        Use InFile.open() to load a store from disk.

        Args:
            path: Store root directory
            in_memory: Mirror already holding the store's data
        """
        self._path = path
        self._in_memory = in_memory

    @classmethod
    def open(cls, path, num_cols: int) -> "InFile":
        """
        Open (or create) a store and load it into memory

        Column directories are created if missing. Files whose names
        don't decode to a key, and entries that aren't files, are skipped.

        Args:
            path: Root directory (str or path-like)
            num_cols: Number of columns

        Raises:
            OSError: if a directory can't be created or listed, or a
                     file can't be read
        """
        if not isinstance(num_cols, int) or isinstance(num_cols, bool):
            raise TypeError("num_cols must be int")
        if num_cols < 0:
            raise ValueError(f"num_cols must be non-negative, got {num_cols}")

        root = os.fspath(path)
        in_memory = memorydb.create(num_cols)
        txn = DBTransaction()

        for col in range(num_cols):
            col_dir = column_path(root, col)
            os.makedirs(col_dir, exist_ok=True)
            loaded = 0
            with os.scandir(col_dir) as entries:
                for entry in entries:
                    if not entry.is_file():
                        logger.debug("Skipping non-file entry %s", entry.path)
                        continue
                    key = file_name_to_key(entry.name)
                    if key is None:
                        logger.debug("Skipping file with undecodable name %s", entry.path)
                        continue
                    with open(entry.path, 'rb') as f:
                        value = f.read()
                    txn.put(col, key, value)
                    loaded += 1
            logger.debug("Column %d: loaded %d keys from %s", col, loaded, col_dir)

        in_memory.write(txn)
        logger.info("Opened store at %s (%d columns, %d keys)", root, num_cols, len(txn))
        return cls(root, in_memory)

    @property
    def path(self) -> str:
        return self._path

    @property
    def num_cols(self) -> int:
        return self._in_memory.num_cols

    def _col_path(self, col: int) -> str:
        return column_path(self._path, col)

    def _key_path(self, col: int, key: bytes) -> str:
        return key_to_path(self._path, col, key)

    def _check_column(self, col: int) -> None:
        if not 0 <= col < self.num_cols:
            raise NoSuchColumnError(col, self.num_cols)

    def transaction(self) -> DBTransaction:
        """Create an empty transaction for this store"""
        return DBTransaction()

    # Reads

    def get(self, col: int, key: bytes) -> Optional[bytes]:
        """
        Get the value stored for a key

        Raises:
            NoSuchColumnError: if col >= num_cols
        """
        return self._in_memory.get(col, key)

    def get_by_prefix(self, col: int, prefix: bytes) -> Optional[bytes]:
        """Get the value of the first key (in key order) starting with prefix"""
        return self._in_memory.get_by_prefix(col, prefix)

    def has_key(self, col: int, key: bytes) -> bool:
        return self._in_memory.has_key(col, key)

    def has_prefix(self, col: int, prefix: bytes) -> bool:
        return self._in_memory.has_prefix(col, prefix)

    # NOTE: both iterators copy the column before yielding
    def iter(self, col: int) -> Iterator[Tuple[bytes, bytes]]:
        return self._in_memory.iter(col)

    def iter_with_prefix(self, col: int, prefix: bytes) -> Iterator[Tuple[bytes, bytes]]:
        return self._in_memory.iter_with_prefix(col, prefix)

    # Writes

    def write(self, transaction: DBTransaction) -> None:
        """
        Apply a transaction to disk, then to the in-memory mirror

        Args:
            transaction: Operations to apply, in order

        Raises:
            OSError: if any disk operation fails. Earlier operations of the
                     transaction stay on disk and the mirror is not updated.
        """
        try:
            for op in transaction.ops:
                self._apply_to_disk(op)
        except OSError as e:
            logger.error("Transaction failed on disk, mirror not updated: %s", e)
            raise

        self._in_memory.write(transaction)
        logger.debug("Applied transaction with %d ops to %s", len(transaction), self._path)

    def _apply_to_disk(self, op: DBOp) -> None:
        self._check_column(op.col)

        if op.kind == DBOp.INSERT:
            with open(self._key_path(op.col, op.key), 'wb') as f:
                f.write(op.value)

        elif op.kind == DBOp.DELETE:
            file = self._key_path(op.col, op.key)
            if os.path.isfile(file):
                os.remove(file)

        elif op.kind == DBOp.DELETE_PREFIX:
            self._delete_prefix_files(op.col, op.prefix)

    def _delete_prefix_files(self, col: int, prefix: bytes) -> None:
        """
        Remove key files whose key starts with prefix

        An empty prefix removes every regular file in the column directory.
        Otherwise files whose names don't decode are left alone.
        """
        with os.scandir(self._col_path(col)) as entries:
            doomed = []
            for entry in entries:
                if not entry.is_file():
                    continue
                if prefix:
                    key = file_name_to_key(entry.name)
                    if key is None or not key.startswith(prefix):
                        continue
                doomed.append(entry.path)

        for file in doomed:
            os.remove(file)

    def __repr__(self):
        return f"InFile(path={self._path!r}, columns={self.num_cols}, entries={len(self._in_memory)})"
