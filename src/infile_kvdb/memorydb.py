"""
In-Memory Database Module

Purpose:
    In-memory, column-partitioned key-value engine. Serves every read of
    the file-backed store and is kept in sync with disk on each write.

Key Features:
    - One SortedDict per column, keys kept in ascending byte order
    - Transactional writes (insert / delete / delete-prefix)
    - Prefix lookups and prefix-bounded iteration via irange
    - Iterators work on a snapshot taken when iteration starts

Design:
    Using sortedcontainers.SortedDict for O(log n) operations, same as
    the memtable it grew out of. Unlike a memtable there are no
    tombstones: a delete removes the entry.
"""

from sortedcontainers import SortedDict
from typing import Dict, Iterator, Optional, Tuple

from .errors import NoSuchColumnError
from .transaction import DBOp, DBTransaction


class InMemory:
    """
    In-memory key-value database with a fixed number of columns
    """

    def __init__(self, num_cols: int = 0):
        """
        Args:
            num_cols: Number of columns, numbered 0..num_cols-1
        """
        if not isinstance(num_cols, int) or isinstance(num_cols, bool):
            raise TypeError("num_cols must be int")
        if num_cols < 0:
            raise ValueError(f"num_cols must be non-negative, got {num_cols}")
        self._columns: Dict[int, SortedDict] = {col: SortedDict() for col in range(num_cols)}

    @property
    def num_cols(self) -> int:
        return len(self._columns)

    def _column(self, col: int) -> SortedDict:
        """Return the column's map, raising if the column doesn't exist"""
        try:
            return self._columns[col]
        except KeyError:
            raise NoSuchColumnError(col, self.num_cols) from None

    def transaction(self) -> DBTransaction:
        return DBTransaction()

    def get(self, col: int, key: bytes) -> Optional[bytes]:
        """
        Retrieve value for a key

        Args:
            col: Column index
            key: The key to lookup

        Returns:
            The value if the key exists, None otherwise

        Raises:
            NoSuchColumnError: if the column doesn't exist
        """
        if not isinstance(key, bytes):
            raise TypeError("Key must be bytes")
        return self._column(col).get(key)

    def get_by_prefix(self, col: int, prefix: bytes) -> Optional[bytes]:
        """
        Retrieve the value of the first key (in key order) starting with prefix

        Returns:
            The value, or None if no key matches
        """
        if not isinstance(prefix, bytes):
            raise TypeError("Prefix must be bytes")
        column = self._column(col)
        for key in column.irange(minimum=prefix):
            if key.startswith(prefix):
                return column[key]
            break
        return None

    def has_key(self, col: int, key: bytes) -> bool:
        return self.get(col, key) is not None

    def has_prefix(self, col: int, prefix: bytes) -> bool:
        return self.get_by_prefix(col, prefix) is not None

    def write(self, transaction: DBTransaction) -> None:
        """
        Apply every operation of a transaction in order

        Operations addressed to a column that doesn't exist are ignored.
        """
        for op in transaction.ops:
            column = self._columns.get(op.col)
            if column is None:
                continue

            if op.kind == DBOp.INSERT:
                column[op.key] = op.value
            elif op.kind == DBOp.DELETE:
                column.pop(op.key, None)
            elif op.kind == DBOp.DELETE_PREFIX:
                self._delete_prefix(column, op.prefix)

    @staticmethod
    def _delete_prefix(column: SortedDict, prefix: bytes) -> None:
        if not prefix:
            column.clear()
            return
        # Keys sharing a prefix form one contiguous run starting at irange(prefix)
        doomed = []
        for key in column.irange(minimum=prefix):
            if not key.startswith(prefix):
                break
            doomed.append(key)
        for key in doomed:
            del column[key]

    def iter(self, col: int) -> Iterator[Tuple[bytes, bytes]]:
        """
        Iterate over all entries of a column in sorted order

        The column is copied up front, so later writes don't affect an
        iterator that is already running. A missing column yields nothing.

        Yields:
            Tuples of (key, value)
        """
        column = self._columns.get(col)
        snapshot = list(column.items()) if column is not None else []
        return iter(snapshot)

    def iter_with_prefix(self, col: int, prefix: bytes) -> Iterator[Tuple[bytes, bytes]]:
        """
        Iterate over entries whose key starts with prefix, in sorted order

        Yields:
            Tuples of (key, value)
        """
        if not isinstance(prefix, bytes):
            raise TypeError("Prefix must be bytes")
        column = self._columns.get(col)
        snapshot = []
        if column is not None:
            for key in column.irange(minimum=prefix):
                if not key.startswith(prefix):
                    break
                snapshot.append((key, column[key]))
        return iter(snapshot)

    def __len__(self):
        return sum(len(column) for column in self._columns.values())

    def __repr__(self):
        return f"InMemory(columns={self.num_cols}, entries={len(self)})"


def create(num_cols: int) -> InMemory:
    """Create an empty in-memory database with num_cols columns"""
    return InMemory(num_cols)
