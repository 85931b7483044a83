from numbers import Real
from typing import Sequence, Union

import numpy as np

from .errors import DimensionMismatchError, MatrixIndexError
from .lu import LUDecomposition


class Matrix:
    """
    A small dense real matrix.

    Values are immutable by convention: every arithmetic operation returns a
    new Matrix. Only `set` writes in place, and it is meant for building a
    matrix up element by element before handing it out.
    """

    __slots__ = ("_data",)

    def __init__(self, rows: Sequence[Sequence[float]]):
        """
        Builds a matrix from explicit elements.

        Args:
            rows: Row-major nested sequence; every row must have the same length.
        """
        rows = [list(r) for r in rows]
        if rows and any(len(r) != len(rows[0]) for r in rows):
            raise DimensionMismatchError("All rows must have the same length.")
        data = np.array(rows, dtype=float)
        if data.ndim != 2:
            data = data.reshape(len(rows), 0)
        self._data = data

    # --- Constructors ---

    @classmethod
    def from_array(cls, array: np.ndarray) -> "Matrix":
        array = np.asarray(array, dtype=float)
        if array.ndim != 2:
            raise DimensionMismatchError(f"Expected a 2-D array, got {array.ndim}-D.")
        matrix = cls.__new__(cls)
        matrix._data = array.copy()
        return matrix

    @classmethod
    def filled(cls, rows: int, cols: int, value: float = 0.0) -> "Matrix":
        """Returns a rows-by-cols matrix with every element set to `value`."""
        if rows < 0 or cols < 0:
            raise DimensionMismatchError(f"Invalid dimensions {rows}x{cols}.")
        return cls.from_array(np.full((rows, cols), float(value)))

    @classmethod
    def column(cls, values: Sequence[float]) -> "Matrix":
        """Returns an n-by-1 column vector."""
        return cls.from_array(np.asarray(values, dtype=float).reshape(-1, 1))

    @classmethod
    def identity(cls, rows: int, cols: int) -> "Matrix":
        return cls.from_array(np.eye(rows, cols))

    @classmethod
    def diagonal(cls, values: Sequence[float]) -> "Matrix":
        return cls.from_array(np.diag(np.asarray(values, dtype=float)))

    # --- Shape and element access ---

    @property
    def shape(self) -> tuple[int, int]:
        rows, cols = self._data.shape
        return rows, cols

    @property
    def row_dimension(self) -> int:
        return self._data.shape[0]

    @property
    def column_dimension(self) -> int:
        return self._data.shape[1]

    def _check_bounds(self, i: int, j: int) -> None:
        rows, cols = self.shape
        if not (0 <= i < rows and 0 <= j < cols):
            raise MatrixIndexError(
                f"Index ({i}, {j}) out of range for a {rows}x{cols} matrix."
            )

    def get(self, i: int, j: int) -> float:
        self._check_bounds(i, j)
        return float(self._data[i, j])

    def set(self, i: int, j: int, value: float) -> None:
        self._check_bounds(i, j)
        self._data[i, j] = value

    def copy(self) -> "Matrix":
        return Matrix.from_array(self._data)

    def to_array(self) -> np.ndarray:
        """Returns a copy of the underlying array."""
        return self._data.copy()

    def to_list(self) -> list[list[float]]:
        return self._data.tolist()

    # --- Arithmetic ---

    def _check_same_shape(self, other: "Matrix", op: str) -> None:
        if self.shape != other.shape:
            raise DimensionMismatchError(
                f"Cannot {op} a {self.shape[0]}x{self.shape[1]} and a "
                f"{other.shape[0]}x{other.shape[1]} matrix."
            )

    def __add__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check_same_shape(other, "add")
        return Matrix.from_array(self._data + other._data)

    def __sub__(self, other: "Matrix") -> "Matrix":
        if not isinstance(other, Matrix):
            return NotImplemented
        self._check_same_shape(other, "subtract")
        return Matrix.from_array(self._data - other._data)

    def __neg__(self) -> "Matrix":
        return Matrix.from_array(-self._data)

    def __mul__(self, other: Union["Matrix", Real]) -> "Matrix":
        if isinstance(other, Real):
            return Matrix.from_array(self._data * float(other))
        if not isinstance(other, Matrix):
            return NotImplemented
        if self.column_dimension != other.row_dimension:
            raise DimensionMismatchError(
                f"Matrix inner dimensions must agree: {self.shape[0]}x{self.shape[1]} "
                f"* {other.shape[0]}x{other.shape[1]}."
            )
        return Matrix.from_array(self._data @ other._data)

    def __rmul__(self, other: Real) -> "Matrix":
        if isinstance(other, Real):
            return Matrix.from_array(self._data * float(other))
        return NotImplemented

    __matmul__ = __mul__

    def transpose(self) -> "Matrix":
        return Matrix.from_array(self._data.T)

    @property
    def T(self) -> "Matrix":
        return self.transpose()

    # --- Solving ---

    def lu(self) -> LUDecomposition:
        return LUDecomposition(self)

    def solve(self, b: "Matrix") -> "Matrix":
        """Solves self * X = b. Raises SingularMatrixError if self is singular."""
        return LUDecomposition(self).solve(b)

    def inverse(self) -> "Matrix":
        """
        Returns the inverse, computed as the LU solve against the identity.

        Raises:
            DimensionMismatchError: If the matrix is not square.
            SingularMatrixError: If the matrix has no inverse.
        """
        rows, cols = self.shape
        if rows != cols:
            raise DimensionMismatchError(f"Only square matrices can be inverted, got {rows}x{cols}.")
        return self.solve(Matrix.identity(rows, rows))

    # --- Comparison ---

    def allclose(self, other: "Matrix", tol: float = 1e-9) -> bool:
        return self.shape == other.shape and bool(np.allclose(self._data, other._data, atol=tol, rtol=0.0))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Matrix):
            return NotImplemented
        return self.shape == other.shape and bool(np.array_equal(self._data, other._data))

    __hash__ = None

    def __repr__(self) -> str:
        return f"Matrix({self.to_list()!r})"
