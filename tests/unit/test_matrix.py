"""
Unit tests for the Matrix buffer.

Tests cover:
- Creation, fill policies and cell access
- Text parsing and rendering
- Single-threaded multiply and add-multiply against a NumPy reference
"""

import numpy as np
import pytest

from mtxmult.config import MAX_INT, FillPolicy, Kernel
from mtxmult.errors import FormatError, InvalidParametersError
from mtxmult.matrix import Matrix


@pytest.fixture
def rng():
    return np.random.default_rng(1234)


@pytest.fixture(params=[Kernel.LOOPS, Kernel.NUMPY], ids=["loops", "numpy"])
def kernel(request):
    return request.param


class TestMatrixCreation:
    """Test allocation, fill and cell access."""

    def test_new_matrix_is_zeroed(self):
        """A fresh buffer holds n*n zeros with stride n."""
        m = Matrix(5)
        assert m.n == 5
        assert m.stride == 5
        assert m.data.shape == (25,)
        assert not m.data.any()

    def test_rejects_non_positive_dimension(self):
        with pytest.raises(InvalidParametersError):
            Matrix(0)

    def test_fill_ones_and_zeros(self):
        m = Matrix.ones(4)
        assert (m.to_numpy() == 1).all()
        m.fill(FillPolicy.ZEROS)
        assert (m.to_numpy() == 0).all()

    def test_fill_random_in_range(self, rng):
        """Random cells are drawn from [0, MAX_INT)."""
        m = Matrix.random(32, rng)
        values = m.to_numpy()
        assert values.min() >= 0
        assert values.max() < MAX_INT

    def test_fill_random_is_seedable(self):
        a = Matrix.random(8, np.random.default_rng(7))
        b = Matrix.random(8, np.random.default_rng(7))
        assert a == b

    def test_get_set(self):
        m = Matrix(3)
        m.set(1, 2, 42)
        m[2, 0] = -7
        assert m.get(1, 2) == 42
        assert m[2, 0] == -7
        # Row-major flat layout
        assert m.data[1 * 3 + 2] == 42

    @pytest.mark.parametrize("i,j", [(3, 0), (0, 3), (-1, 0), (0, -1)])
    def test_out_of_range_access(self, i, j):
        """Negative and too-large indices both raise IndexError."""
        m = Matrix(3)
        with pytest.raises(IndexError):
            m.get(i, j)
        with pytest.raises(IndexError):
            m.set(i, j, 1)

    def test_from_numpy_copies(self):
        array = np.arange(9).reshape(3, 3)
        m = Matrix.from_numpy(array)
        array[0, 0] = 100
        assert m[0, 0] == 0
        assert m[2, 2] == 8

    def test_from_numpy_rejects_non_square(self):
        with pytest.raises(InvalidParametersError):
            Matrix.from_numpy(np.zeros((2, 3)))

    def test_copy_is_independent(self):
        m = Matrix.ones(4)
        c = m.copy()
        c[0, 0] = 5
        assert m[0, 0] == 1


class TestMatrixText:
    """Test parsing and rendering."""

    def test_parse(self):
        m = Matrix.parse("1 2 3\n4 5 6\n7 8 9")
        assert m.n == 3
        np.testing.assert_array_equal(m.to_numpy(), np.arange(1, 10).reshape(3, 3))

    def test_parse_negative_and_padded(self):
        """Extra spaces from fixed-width rendering are accepted."""
        m = Matrix.parse("  -1    2\n   3   -4\n")
        assert m[0, 0] == -1
        assert m[1, 1] == -4

    def test_parse_row_length_mismatch(self):
        with pytest.raises(FormatError):
            Matrix.parse("1 2 3\n4 5\n7 8 9")

    def test_parse_non_integer(self):
        with pytest.raises(FormatError):
            Matrix.parse("1 x\n3 4")

    def test_parse_empty(self):
        with pytest.raises(FormatError):
            Matrix.parse("")

    @pytest.mark.parametrize(
        "token",
        ["1_0", "\u0661", "0x1", "1.0", "+"],
        ids=["underscore", "arabic-indic", "hex", "float", "sign-only"],
    )
    def test_parse_rejects_non_decimal_tokens(self, token):
        """Only plain ASCII decimal integers are accepted."""
        with pytest.raises(FormatError):
            Matrix.parse(f"{token} 2\n3 4")

    def test_parse_signed_tokens(self):
        m = Matrix.parse("+5 -6\n007 0")
        assert m == Matrix.from_numpy(np.array([[5, -6], [7, 0]]))

    def test_parse_out_of_int64_range(self):
        with pytest.raises(FormatError):
            Matrix.parse("99999999999999999999 0\n0 0")

    def test_render(self):
        """Cells are right-justified to width 4 with no trailing newline."""
        m = Matrix.parse("1 22\n333 -4")
        assert m.render() == "   1   22\n 333   -4"
        assert str(m) == m.render()

    def test_render_parses_back(self, rng):
        m = Matrix.random(6, rng)
        assert Matrix.parse(m.render()) == m


class TestMultiply:
    """Test single-threaded multiply and add-multiply."""

    def test_known_product(self, kernel):
        a = Matrix.parse("1 2\n3 4")
        b = Matrix.parse("5 6\n7 8")
        c = Matrix.st_multiply(a, b, kernel)
        assert c == Matrix.parse("19 22\n43 50")

    def test_matches_numpy(self, rng, kernel):
        """Random operands agree with the NumPy reference product."""
        a = Matrix.random(12, rng)
        b = Matrix.random(12, rng)
        c = Matrix.st_multiply(a, b, kernel)
        np.testing.assert_array_equal(c.to_numpy(), a.to_numpy() @ b.to_numpy())

    def test_all_ones(self):
        n = 8
        c = Matrix.st_multiply(Matrix.ones(n), Matrix.ones(n))
        assert (c.to_numpy() == n).all()

    def test_zero_operand(self, rng):
        a = Matrix.random(6, rng)
        zero = Matrix(6)
        zero.fill(FillPolicy.ZEROS)
        assert Matrix.st_multiply(a, zero) == Matrix(6)
        assert Matrix.st_multiply(zero, a) == Matrix(6)

    def test_st_multiply_does_not_modify_operands(self, rng):
        a = Matrix.random(4, rng)
        b = Matrix.random(4, rng)
        a0, b0 = a.copy(), b.copy()
        Matrix.st_multiply(a, b)
        assert a == a0
        assert b == b0

    def test_add_multiply_accumulates(self, kernel):
        """add_multiply adds to existing contents instead of overwriting."""
        a = Matrix.parse("1 2\n3 4")
        b = Matrix.parse("5 6\n7 8")
        c = Matrix.ones(2)
        c.add_multiply(a, b, kernel)
        assert c == Matrix.parse("20 23\n44 51")
        c.add_multiply(a, b, kernel)
        assert c == Matrix.parse("39 45\n87 101")

    def test_kernels_agree_on_int64_overflow(self):
        """Both kernels wrap past int64 the same way instead of raising."""
        a = Matrix.parse("3037000500 0\n0 0")
        loops = Matrix.st_multiply(a, a, Kernel.LOOPS)
        fast = Matrix.st_multiply(a, a, Kernel.NUMPY)
        assert loops == fast
        wrapped = (3037000500**2 + 2**63) % 2**64 - 2**63
        assert loops[0, 0] == wrapped
        assert loops[0, 0] < 0

    def test_add_multiply_wraps_accumulated_cells(self, kernel):
        big = np.iinfo(np.int64).max
        c = Matrix.from_numpy(np.full((2, 2), big))
        c.add_multiply(Matrix.ones(2), Matrix.ones(2), kernel)
        assert (c.to_numpy() == np.iinfo(np.int64).min + 1).all()

    def test_add_multiply_dimension_mismatch(self):
        c = Matrix(2)
        with pytest.raises(InvalidParametersError):
            c.add_multiply(Matrix(2), Matrix(3))

    def test_add_and_iadd(self):
        m = Matrix.ones(3)
        m.add(Matrix.ones(3))
        m += Matrix.ones(3)
        assert (m.to_numpy() == 3).all()

    def test_add_dimension_mismatch(self):
        with pytest.raises(InvalidParametersError):
            Matrix(3).add(Matrix(2))

    def test_equality(self):
        assert Matrix.ones(3) == Matrix.ones(3)
        assert Matrix.ones(3) != Matrix.ones(4)
        assert Matrix.ones(3) != Matrix(3)
