"""
Transaction Module

Purpose:
    Ordered batch of write operations submitted to a store in one call.

Operations:
    - INSERT: set key to value in a column
    - DELETE: remove a key from a column (no-op if absent)
    - DELETE_PREFIX: remove every key in a column starting with a prefix
      (an empty prefix clears the whole column)

Usage:
    txn = DBTransaction()
    txn.put(0, b"key1", b"value1")
    txn.delete(0, b"key2")
    txn.delete_prefix(1, b"user:")
    db.write(txn)
"""

from typing import Iterator, List, Optional


def _as_bytes(data, what: str) -> bytes:
    """Accept bytes-like objects, reject everything else"""
    if isinstance(data, bytes):
        return data
    if isinstance(data, (bytearray, memoryview)):
        return bytes(data)
    raise TypeError(f"{what} must be bytes")


class DBOp:
    """
    A single write operation

    For DELETE_PREFIX ops the prefix is stored in `key`; use the `prefix`
    property to read it back.
    """

    INSERT = "insert"
    DELETE = "delete"
    DELETE_PREFIX = "delete_prefix"

    __slots__ = ("kind", "col", "key", "value")

    def __init__(self, kind: str, col: int, key: bytes, value: Optional[bytes] = None):
        if kind not in (self.INSERT, self.DELETE, self.DELETE_PREFIX):
            raise ValueError(f"Unknown operation kind: {kind!r}")
        if not isinstance(col, int) or isinstance(col, bool):
            raise TypeError("Column must be int")
        if not isinstance(key, bytes):
            raise TypeError("Key must be bytes")
        if kind == self.INSERT and not isinstance(value, bytes):
            raise TypeError("Value must be bytes")
        self.kind = kind
        self.col = col
        self.key = key
        self.value = value if kind == self.INSERT else None

    @classmethod
    def insert(cls, col: int, key: bytes, value: bytes) -> "DBOp":
        return cls(cls.INSERT, col, key, value)

    @classmethod
    def delete(cls, col: int, key: bytes) -> "DBOp":
        return cls(cls.DELETE, col, key)

    @classmethod
    def delete_prefix(cls, col: int, prefix: bytes) -> "DBOp":
        return cls(cls.DELETE_PREFIX, col, prefix)

    @property
    def prefix(self) -> bytes:
        return self.key

    def __eq__(self, other):
        if not isinstance(other, DBOp):
            return NotImplemented
        return (self.kind, self.col, self.key, self.value) == \
            (other.kind, other.col, other.key, other.value)

    def __hash__(self):
        return hash((self.kind, self.col, self.key, self.value))

    def __repr__(self):
        if self.kind == self.INSERT:
            return f"DBOp.insert(col={self.col}, key={self.key!r}, value={len(self.value)} bytes)"
        if self.kind == self.DELETE:
            return f"DBOp.delete(col={self.col}, key={self.key!r})"
        return f"DBOp.delete_prefix(col={self.col}, prefix={self.key!r})"


class DBTransaction:
    """
    Write transaction: an ordered list of DBOp

    Builder methods return the transaction so calls can be chained.
    Operations are applied in the order they were added.
    """

    def __init__(self, ops: Optional[List[DBOp]] = None):
        self.ops: List[DBOp] = list(ops) if ops else []

    def put(self, col: int, key: bytes, value: bytes) -> "DBTransaction":
        """
        Insert a key-value pair

        Args:
            col: Column index
            key: The key (must be bytes)
            value: The value (must be bytes)
        """
        if not isinstance(key, bytes):
            raise TypeError("Key must be bytes")
        if not isinstance(value, bytes):
            raise TypeError("Value must be bytes")
        self.ops.append(DBOp.insert(col, key, value))
        return self

    def put_vec(self, col: int, key, value) -> "DBTransaction":
        """Insert a key-value pair, taking ownership of any bytes-like value"""
        self.ops.append(DBOp.insert(col, _as_bytes(key, "Key"), _as_bytes(value, "Value")))
        return self

    def delete(self, col: int, key: bytes) -> "DBTransaction":
        """Delete a key (a missing key is not an error)"""
        if not isinstance(key, bytes):
            raise TypeError("Key must be bytes")
        self.ops.append(DBOp.delete(col, key))
        return self

    def delete_prefix(self, col: int, prefix: bytes) -> "DBTransaction":
        """
        Delete every key starting with prefix

        An empty prefix deletes every key in the column.
        """
        if not isinstance(prefix, bytes):
            raise TypeError("Prefix must be bytes")
        self.ops.append(DBOp.delete_prefix(col, prefix))
        return self

    def __len__(self):
        return len(self.ops)

    def __iter__(self) -> Iterator[DBOp]:
        return iter(self.ops)

    def __repr__(self):
        return f"DBTransaction(ops={len(self.ops)})"
