"""
Error taxonomy for the benchmark harness.

Every error is fatal and propagates to the immediate caller; nothing in the
package retries or degrades. Each class also derives from the closest
builtin so callers can catch ``ValueError`` / ``IndexError`` generically.
"""


class MtxMultError(Exception):
    """Base class for all harness errors."""


class InvalidParametersError(MtxMultError, ValueError):
    """Malformed or out-of-range dimensions (n < 4, s not dividing n, ...)."""


class InvalidTileSizeError(InvalidParametersError):
    """Tile size s is not positive or does not evenly divide n."""


class FormatError(MtxMultError, ValueError):
    """Malformed textual matrix (row length mismatch, non-integer token)."""


class RangeError(MtxMultError, IndexError):
    """Tile coordinate reaches past the parent matrix."""


class InconsistentTileSizeError(MtxMultError, ValueError):
    """Merge was given a tile grid whose tiles differ in dimension."""


class WorkerError(MtxMultError, RuntimeError):
    """A worker task failed; the whole multiply is aborted."""
