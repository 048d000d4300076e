"""
Matrix buffer for the benchmark harness.

A Matrix owns an n x n grid of signed 64-bit integers stored as one flat,
contiguous NumPy buffer with row stride n:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      FLAT ROW-MAJOR BUFFER                           │
    │                                                                      │
    │   M[i][j]  =  data[i * stride + j]        stride = n                 │
    │                                                                      │
    │   n = 3:   [ m00 m01 m02 | m10 m11 m12 | m20 m21 m22 ]               │
    │              row 0         row 1         row 2                       │
    └─────────────────────────────────────────────────────────────────────┘

Block copies (copy_block / write_block) always copy into or out of an owned
buffer; a tile never aliases its parent, so worker threads can hold tiles
without lifetime or aliasing concerns.

The reference multiply-accumulate is the classic triple loop in i-j-k order
(i outer, j middle, k inner), reading A by row. The NUMPY kernel computes the
same integer product with numpy.matmul.
"""

import re

import numpy as np

from .config import FORMAT_COLS, MAX_INT, FillPolicy, Kernel
from .errors import FormatError, InvalidParametersError

DTYPE = np.int64

_INT_TOKEN = re.compile(r"[+-]?\d+", re.ASCII)

_WRAP = 1 << 64
_HALF = 1 << 63


def _wrap_int64(value: int) -> int:
    """Two's-complement wrap of a Python int to int64, as NumPy arithmetic does."""
    if -_HALF <= value < _HALF:
        return value
    return (value + _HALF) % _WRAP - _HALF


class Matrix:
    """
    Square integer matrix backed by a flat contiguous buffer.

    Example:
        >>> a = Matrix.parse("1 2\\n3 4")
        >>> b = Matrix.parse("5 6\\n7 8")
        >>> print(Matrix.st_multiply(a, b))
          19   22
          43   50
    """

    __slots__ = ("_n", "data")

    def __init__(self, n: int):
        if n < 1:
            raise InvalidParametersError(f"matrix dimension must be >= 1, got {n}")
        self._n = n
        self.data = np.zeros(n * n, dtype=DTYPE)

    # =========================================================================
    # Construction
    # =========================================================================

    @classmethod
    def zeros(cls, n: int) -> "Matrix":
        return cls(n)

    @classmethod
    def ones(cls, n: int) -> "Matrix":
        m = cls(n)
        m.fill(FillPolicy.ONES)
        return m

    @classmethod
    def random(cls, n: int, rng: np.random.Generator | None = None) -> "Matrix":
        m = cls(n)
        m.fill(FillPolicy.RANDOM, rng)
        return m

    @classmethod
    def from_numpy(cls, array: np.ndarray) -> "Matrix":
        """Copy a square 2D array into a new Matrix."""
        if array.ndim != 2 or array.shape[0] != array.shape[1]:
            raise InvalidParametersError(f"expected a square 2D array, got shape {array.shape}")
        m = cls(array.shape[0])
        m.data[:] = np.asarray(array, dtype=DTYPE).ravel()
        return m

    @classmethod
    def parse(cls, text: str) -> "Matrix":
        """
        Parse a matrix from its textual form.

        Rows are separated by newlines and cells by whitespace. The dimension
        is the number of rows, and every row must hold exactly that many
        integers.

        Args:
            text: Newline-separated rows of integers

        Returns:
            Parsed Matrix

        Raises:
            FormatError: Empty input, row length mismatch or non-integer token
        """
        lines = text.strip("\n").split("\n")
        if not text.strip():
            raise FormatError("empty matrix text")

        n = len(lines)
        m = cls(n)
        for i, line in enumerate(lines):
            tokens = line.split()
            if len(tokens) != n:
                raise FormatError(f"row {i} has {len(tokens)} columns, expected {n}")
            for j, token in enumerate(tokens):
                if not _INT_TOKEN.fullmatch(token):
                    raise FormatError(f"row {i}, column {j}: {token!r} is not an integer")
                try:
                    m.data[i * n + j] = int(token)
                except (ValueError, OverflowError) as e:
                    raise FormatError(f"row {i}, column {j}: {token!r} is not an integer") from e
        return m

    def fill(self, policy: FillPolicy, rng: np.random.Generator | None = None) -> None:
        """Overwrite every cell according to the fill policy."""
        if policy is FillPolicy.ZEROS:
            self.data.fill(0)
        elif policy is FillPolicy.ONES:
            self.data.fill(1)
        elif policy is FillPolicy.RANDOM:
            rng = rng if rng is not None else np.random.default_rng()
            self.data[:] = rng.integers(0, MAX_INT, size=self.data.size, dtype=DTYPE)
        else:
            raise InvalidParametersError(f"unknown fill policy: {policy!r}")

    def copy(self) -> "Matrix":
        m = Matrix(self._n)
        m.data[:] = self.data
        return m

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def n(self) -> int:
        """Matrix dimension."""
        return self._n

    @property
    def stride(self) -> int:
        """Distance between the starts of consecutive rows in the buffer."""
        return self._n

    def to_numpy(self) -> np.ndarray:
        """Return an (n, n) copy of the contents."""
        return self.data.reshape(self._n, self._n).copy()

    # =========================================================================
    # Cell Access
    # =========================================================================

    def _offset(self, i: int, j: int) -> int:
        if not (0 <= i < self._n and 0 <= j < self._n):
            raise IndexError(f"cell ({i}, {j}) out of range for {self._n}x{self._n} matrix")
        return i * self.stride + j

    def get(self, i: int, j: int) -> int:
        return int(self.data[self._offset(i, j)])

    def set(self, i: int, j: int, value: int) -> None:
        self.data[self._offset(i, j)] = value

    def __getitem__(self, index: tuple[int, int]) -> int:
        return self.get(*index)

    def __setitem__(self, index: tuple[int, int], value: int) -> None:
        self.set(*index, value)

    # =========================================================================
    # Block Copies
    # =========================================================================

    def copy_block(self, row: int, col: int, size: int) -> "Matrix":
        """Copy the size x size block at (row, col) into a new Matrix."""
        block = Matrix(size)
        src = self.data.reshape(self._n, self._n)
        block.data[:] = src[row : row + size, col : col + size].ravel()
        return block

    def write_block(self, row: int, col: int, block: "Matrix") -> None:
        """Copy a block's contents into this matrix at (row, col)."""
        dst = self.data.reshape(self._n, self._n)
        size = block.n
        dst[row : row + size, col : col + size] = block.data.reshape(size, size)

    # =========================================================================
    # Arithmetic
    # =========================================================================

    def add(self, other: "Matrix") -> None:
        """Elementwise accumulate another matrix into this one."""
        if other.n != self._n:
            raise InvalidParametersError(f"cannot add {other.n}x{other.n} into {self._n}x{self._n}")
        self.data += other.data

    def __iadd__(self, other: "Matrix") -> "Matrix":
        self.add(other)
        return self

    @staticmethod
    def st_multiply(a: "Matrix", b: "Matrix", kernel: Kernel = Kernel.LOOPS) -> "Matrix":
        """
        Single-threaded multiply: return a new matrix C = A x B.

        C is allocated zeroed and then filled with add_multiply, so both entry
        points share one accumulation path.
        """
        c = Matrix(a.n)
        c.add_multiply(a, b, kernel)
        return c

    def add_multiply(self, a: "Matrix", b: "Matrix", kernel: Kernel = Kernel.LOOPS) -> None:
        """
        Accumulate A x B into the existing contents of this matrix.

        The callee is never zeroed first; summing partial products from
        different contraction tiles into one output tile relies on that.
        Cells are fixed-width int64; both kernels wrap on overflow the same way.

        Args:
            a: Left operand (n x n)
            b: Right operand (n x n)
            kernel: Kernel.LOOPS (i-j-k triple loop) or Kernel.NUMPY

        Raises:
            InvalidParametersError: Operand dimensions do not match the callee
        """
        n = self._n
        if a.n != n or b.n != n:
            raise InvalidParametersError(
                f"dimension mismatch: {a.n}x{a.n} @ {b.n}x{b.n} into {n}x{n}"
            )

        if kernel is Kernel.NUMPY:
            self.data += np.matmul(a.data.reshape(n, n), b.data.reshape(n, n)).ravel()
            return

        # Python ints in the inner loop, wrapped to int64 on the single write back
        av = a.data.tolist()
        bv = b.data.tolist()
        cv = self.data.tolist()
        for i in range(n):
            row = i * n
            for j in range(n):
                acc = cv[row + j]
                for k in range(n):
                    acc += av[row + k] * bv[k * n + j]
                cv[row + j] = acc
        self.data[:] = [_wrap_int64(v) for v in cv]

    # =========================================================================
    # Text Form
    # =========================================================================

    def render(self, width: int = FORMAT_COLS) -> str:
        """Right-justify each cell to `width`, one row per line, no trailing newline."""
        n = self._n
        cells = self.data.tolist()
        return "\n".join(
            " ".join(f"{v:>{width}d}" for v in cells[i * n : (i + 1) * n]) for i in range(n)
        )

    def __str__(self) -> str:
        return self.render()

    def __repr__(self) -> str:
        return f"Matrix(n={self._n})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self._n == other._n and bool(np.array_equal(self.data, other.data))

    __hash__ = None
