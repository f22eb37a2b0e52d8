"""
Errors raised by the store

Filesystem failures are surfaced as the builtin OSError raised by the
failing call. The only store-specific error is NoSuchColumnError, which is
an OSError too so callers can handle every failure with one except clause.
"""


class NoSuchColumnError(OSError):
    """Column index is outside [0, num_cols)"""

    def __init__(self, col: int, num_cols: int):
        super().__init__(f"No such column family: {col} (store has {num_cols} columns)")
        self.col = col
        self.num_cols = num_cols
