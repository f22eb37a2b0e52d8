"""
Path Codec Module

Maps (column, key) pairs to file paths and file paths back to keys.

Layout:
    <root>/<column index>/0x<lowercase hex of key bytes>

Hex encoding is unambiguous, so within a column the mapping is a
bijection and decoding a file name always recovers the original key.
"""

import binascii
import os
from typing import Optional


KEY_FILE_PREFIX = "0x"


def column_path(root, col: int) -> str:
    """Directory holding every key file of a column"""
    return os.path.join(os.fspath(root), str(col))


def key_to_file_name(key: bytes) -> str:
    return KEY_FILE_PREFIX + binascii.hexlify(key).decode("ascii")


def key_to_path(root, col: int, key: bytes) -> str:
    """
    Path of the file storing a key

    Args:
        root: Store root directory
        col: Column index
        key: The key

    Returns:
        <root>/<col>/0x<hex(key)>
    """
    if not isinstance(key, bytes):
        raise TypeError("Key must be bytes")
    return os.path.join(column_path(root, col), key_to_file_name(key))


def file_name_to_key(name: str) -> Optional[bytes]:
    """Decode a key file name, or None if it isn't one"""
    if not name.startswith(KEY_FILE_PREFIX):
        return None
    try:
        # unhexlify rejects odd lengths, whitespace and non-hex characters
        return binascii.unhexlify(name[len(KEY_FILE_PREFIX):])
    except (binascii.Error, ValueError):
        return None


def path_to_key(path) -> Optional[bytes]:
    """
    Recover the key stored at path

    Returns:
        The key, or None if the file name is not a key file name
    """
    return file_name_to_key(os.path.basename(os.fspath(path)))
