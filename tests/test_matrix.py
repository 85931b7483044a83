"""
Tests for the dense matrix primitives and the LU factorization.
"""
import numpy as np
import pytest

from gaze_pose.linalg import (
    DimensionMismatchError,
    LUDecomposition,
    Matrix,
    MatrixIndexError,
    SingularMatrixError,
)


def test_construction_from_elements():
    m = Matrix([[1, 2, 3], [4, 5, 6]])
    assert m.shape == (2, 3)
    assert m.get(1, 2) == 6.0
    assert m.to_list() == [[1.0, 2.0, 3.0], [4.0, 5.0, 6.0]]


def test_ragged_rows_are_rejected():
    with pytest.raises(DimensionMismatchError):
        Matrix([[1, 2], [3]])


def test_filled_and_column():
    assert Matrix.filled(2, 3, 7.5).to_list() == [[7.5] * 3] * 2
    col = Matrix.column([1, 2, 3])
    assert col.shape == (3, 1)
    assert col.get(2, 0) == 3.0


def test_set_writes_in_place():
    m = Matrix.filled(2, 2)
    m.set(0, 1, 4.0)
    assert m.get(0, 1) == 4.0


@pytest.mark.parametrize("i, j", [(-1, 0), (0, -1), (2, 0), (0, 2)])
def test_out_of_range_access(i, j):
    m = Matrix.identity(2, 2)
    with pytest.raises(MatrixIndexError):
        m.get(i, j)
    with pytest.raises(IndexError):
        m.set(i, j, 1.0)


def test_copy_is_independent():
    m = Matrix.identity(2, 2)
    c = m.copy()
    c.set(0, 0, 5.0)
    assert m.get(0, 0) == 1.0


def test_add_subtract_and_negate():
    a = Matrix([[1, 2], [3, 4]])
    b = Matrix([[4, 3], [2, 1]])
    assert (a + b) == Matrix.filled(2, 2, 5.0)
    assert (a - a) == Matrix.filled(2, 2, 0.0)
    assert (-a).get(1, 1) == -4.0


def test_add_shape_mismatch():
    with pytest.raises(DimensionMismatchError):
        Matrix.identity(2, 2) + Matrix.identity(3, 3)
    with pytest.raises(ValueError):
        Matrix.identity(2, 2) - Matrix.filled(2, 1)


def test_multiply():
    a = Matrix([[1, 2], [3, 4]])
    v = Matrix.column([1, 1])
    assert (a * v) == Matrix.column([3, 7])
    assert (a @ Matrix.identity(2, 2)) == a
    assert (2 * a) == (a * 2) == Matrix([[2, 4], [6, 8]])


def test_multiply_dimension_mismatch():
    with pytest.raises(DimensionMismatchError):
        Matrix.filled(2, 3) * Matrix.filled(2, 3)


def test_transpose():
    m = Matrix([[1, 2, 3], [4, 5, 6]])
    assert m.transpose() == Matrix([[1, 4], [2, 5], [3, 6]])
    assert m.T.T == m


def test_arithmetic_does_not_mutate_operands():
    a = Matrix([[1, 2], [3, 4]])
    before = a.to_list()
    _ = a + a
    _ = a * a
    _ = a.transpose()
    assert a.to_list() == before


@pytest.mark.parametrize("n", [1, 2, 3, 6])
def test_identity_inverse_round_trip(n):
    assert Matrix.identity(n, n).inverse() == Matrix.identity(n, n)


def test_known_inverse():
    m = Matrix([[4, 7], [2, 6]])
    expected = Matrix([[0.6, -0.7], [-0.2, 0.4]])
    assert m.inverse().allclose(expected)


def test_inverse_needs_pivoting():
    # Leading zero forces a row exchange.
    m = Matrix([[0, 2, 1], [1, 1, 0], [3, 0, 1]])
    assert (m * m.inverse()).allclose(Matrix.identity(3, 3))
    assert (m.inverse() * m).allclose(Matrix.identity(3, 3))


def test_zero_matrix_is_singular():
    with pytest.raises(SingularMatrixError):
        Matrix.filled(3, 3, 0.0).inverse()


def test_rank_deficient_matrix_is_singular():
    m = Matrix([[1, 2], [2, 4]])
    assert not m.lu().is_non_singular
    with pytest.raises(ArithmeticError):
        m.inverse()


def test_badly_scaled_matrix_is_invertible():
    m = Matrix.diagonal([1e-10, 1e10])
    assert m.lu().is_non_singular
    inv = m.inverse()
    assert inv.get(0, 0) == pytest.approx(1e10)
    assert inv.get(1, 1) == pytest.approx(1e-10)


def test_non_square_inverse():
    with pytest.raises(DimensionMismatchError):
        Matrix.filled(2, 3, 1.0).inverse()


def test_lu_factors_reproduce_permuted_matrix():
    a = Matrix([[2, -1, 0], [-1, 2, -1], [0, -1, 2]]) + Matrix([[0, 0, 0], [5, 0, 0], [0, 0, 0]])
    lu = LUDecomposition(a)
    permuted = a.to_array()[lu.pivot, :]
    np.testing.assert_allclose((lu.lower * lu.upper).to_array(), permuted, atol=1e-12)
    assert lu.is_non_singular


def test_solve():
    a = Matrix([[3, 1], [1, 2]])
    b = Matrix.column([9, 8])
    x = a.solve(b)
    assert x.allclose(Matrix.column([2, 3]))


def test_solve_row_mismatch():
    with pytest.raises(DimensionMismatchError):
        Matrix.identity(2, 2).solve(Matrix.column([1, 2, 3]))
