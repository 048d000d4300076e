"""
Tile partitioner: split a matrix into an s x s tile grid and merge it back.

For an n x n matrix and tile size s, the grid is g x g with g = n / s. Tile
(bi, bj) covers rows [bi*s, (bi+1)*s) and columns [bj*s, (bj+1)*s):

    n = 6, s = 2 (g = 3)

          bj=0    bj=1    bj=2
        ┌───────┬───────┬───────┐
    bi=0│ (0,0) │ (0,1) │ (0,2) │   rows 0-1
        ├───────┼───────┼───────┤
    bi=1│ (1,0) │ (1,1) │ (1,2) │   rows 2-3
        ├───────┼───────┼───────┤
    bi=2│ (2,0) │ (2,1) │ (2,2) │   rows 4-5
        └───────┴───────┴───────┘

Tiles are copies of the parent data, never views.
"""

from .errors import InconsistentTileSizeError, InvalidTileSizeError, RangeError
from .matrix import Matrix

TileGrid = list[list[Matrix]]
"""Tile grid indexed as grid[bi][bj]."""


def grid_shape(n: int, s: int) -> int:
    """
    Width of the tile grid for an n x n matrix cut into s x s tiles.

    Raises:
        InvalidTileSizeError: s < 1 or s does not evenly divide n
    """
    if s < 1:
        raise InvalidTileSizeError(f"tile size must be >= 1, got {s}")
    if n % s != 0:
        raise InvalidTileSizeError(f"tile size {s} does not evenly divide {n}")
    return n // s


def slice_tile(matrix: Matrix, bi: int, bj: int, s: int) -> Matrix:
    """
    Extract the s x s tile at block coordinate (bi, bj).

    Args:
        matrix: Parent matrix
        bi: Block row
        bj: Block column
        s: Tile size

    Returns:
        New s x s Matrix holding a copy of the block

    Raises:
        InvalidTileSizeError: s < 1
        RangeError: The block reaches past the parent
    """
    if s < 1:
        raise InvalidTileSizeError(f"tile size must be >= 1, got {s}")
    if bi < 0 or bj < 0 or (bi + 1) * s > matrix.n or (bj + 1) * s > matrix.n:
        raise RangeError(f"tile ({bi}, {bj}) of size {s} exceeds {matrix.n}x{matrix.n} matrix")
    return matrix.copy_block(bi * s, bj * s, s)


def slice_all(matrix: Matrix, s: int) -> TileGrid:
    """Cut a matrix into its full g x g grid of s x s tiles."""
    g = grid_shape(matrix.n, s)
    return [[slice_tile(matrix, bi, bj, s) for bj in range(g)] for bi in range(g)]


def merge(grid: TileGrid) -> Matrix:
    """
    Reassemble a tile grid into one matrix (inverse of slice_all).

    Raises:
        InconsistentTileSizeError: Empty or non-square grid, or tiles of
            different sizes
    """
    g = len(grid)
    if g == 0 or any(len(row) != g for row in grid):
        raise InconsistentTileSizeError("tile grid must be square and non-empty")

    s = grid[0][0].n
    for bi, row in enumerate(grid):
        for bj, tile in enumerate(row):
            if tile.n != s:
                raise InconsistentTileSizeError(
                    f"tile ({bi}, {bj}) is {tile.n}x{tile.n}, expected {s}x{s}"
                )

    result = Matrix(g * s)
    for bi, row in enumerate(grid):
        for bj, tile in enumerate(row):
            result.write_block(bi * s, bj * s, tile)
    return result
