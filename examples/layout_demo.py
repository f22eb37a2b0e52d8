"""
Demo: how InFile lays keys out on disk

Writes a few keys, prints the resulting directory tree, then reopens the
store to show that everything is loaded back from the files.
"""

import os
import sys
import tempfile
from pathlib import Path
sys.path.insert(0, str(Path(__file__).parent.parent / 'src'))

from infile_kvdb import InFile


def print_tree(root: str):
    """Print every column directory and its key files"""
    print(f"\n{'='*70}")
    print(f"On disk: {root}")
    print(f"{'='*70}")
    for col in sorted(os.listdir(root), key=int):
        col_dir = os.path.join(root, col)
        print(f"{col}/")
        for name in sorted(os.listdir(col_dir)):
            with open(os.path.join(col_dir, name), 'rb') as f:
                print(f"    {name:<24} -> {f.read()!r}")
    print()


def main():
    root = os.path.join(tempfile.mkdtemp(), "demo-db")

    db = InFile.open(root, 2)
    txn = db.transaction()
    txn.put(0, b"user:alice", b"admin")
    txn.put(0, b"user:bob", b"guest")
    txn.put(0, b"session", b"\x00\x01\x02")
    txn.put(1, b"\xff", b"binary key")
    db.write(txn)
    print_tree(root)

    db.write(db.transaction().delete_prefix(0, b"user:"))
    print("After delete_prefix(0, b'user:')")
    print_tree(root)

    reopened = InFile.open(root, 2)
    for col in range(reopened.num_cols):
        print(f"column {col}: {list(reopened.iter(col))}")


if __name__ == '__main__':
    main()
