"""
InFile Key-Value Database

A simple key-value store that keeps one file per key on disk and mirrors
everything in memory for reads. Meant for tests and development.

Main components:
    - InFile: file-backed store (load from disk, write-through, reads)
    - InMemory: in-memory column-partitioned mirror
    - DBTransaction: ordered batch of insert/delete/delete-prefix ops
    - pathcodec: (column, key) <-> file path mapping
"""

from .errors import NoSuchColumnError
from .transaction import DBOp, DBTransaction
from .memorydb import InMemory, create
from .infile import InFile

__version__ = "0.1.0"
__all__ = [
    'InFile',
    'InMemory',
    'create',
    'DBOp',
    'DBTransaction',
    'NoSuchColumnError',
]
