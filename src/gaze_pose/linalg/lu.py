import logging
from typing import TYPE_CHECKING

import numpy as np

from .errors import DimensionMismatchError, SingularMatrixError

if TYPE_CHECKING:
    from .matrix import Matrix

logger = logging.getLogger(__name__)


class LUDecomposition:
    """
    LU factorization with partial pivoting of a square matrix.

    For an n-by-n matrix A this computes a unit lower triangular L, an upper
    triangular U and a row permutation ``pivot`` such that A[pivot, :] = L * U.
    The factorization always completes; a zero pivot only marks the result
    as singular, and `solve` then refuses to run instead of dividing by zero.

    A pivot counts as zero when its magnitude is at or below
    ``n * eps * max|A[:, j]|`` for its column j. Scaling per column catches
    rounding noise on singular input without flagging matrices whose columns
    just differ by many orders of magnitude.
    """

    def __init__(self, matrix: "Matrix"):
        rows, cols = matrix.shape
        if rows != cols:
            raise DimensionMismatchError(
                f"LU decomposition requires a square matrix, got {rows}x{cols}."
            )

        lu = matrix.to_array()
        n = rows
        piv = np.arange(n)
        pivsign = 1

        column_scale = np.max(np.abs(lu), axis=0) if lu.size else np.zeros(n)
        self._tolerances = n * np.finfo(float).eps * column_scale
        self._singular = False

        for j in range(n):
            # Largest remaining entry in column j becomes the pivot.
            p = j + int(np.argmax(np.abs(lu[j:, j])))
            if p != j:
                lu[[j, p], :] = lu[[p, j], :]
                piv[[j, p]] = piv[[p, j]]
                pivsign = -pivsign

            if abs(lu[j, j]) <= self._tolerances[j]:
                self._singular = True
                continue

            lu[j + 1:, j] /= lu[j, j]
            lu[j + 1:, j + 1:] -= np.outer(lu[j + 1:, j], lu[j, j + 1:])

        self._lu = lu
        self._piv = piv
        self._pivsign = pivsign
        self._n = n

    @property
    def is_non_singular(self) -> bool:
        return not self._singular

    @property
    def pivot(self) -> list[int]:
        """Row permutation applied during elimination."""
        return [int(p) for p in self._piv]

    @property
    def lower(self) -> "Matrix":
        from .matrix import Matrix

        lower = np.tril(self._lu, k=-1)
        np.fill_diagonal(lower, 1.0)
        return Matrix.from_array(lower)

    @property
    def upper(self) -> "Matrix":
        from .matrix import Matrix

        return Matrix.from_array(np.triu(self._lu))

    def solve(self, b: "Matrix") -> "Matrix":
        """
        Solves A * X = B for X.

        Args:
            b: Right-hand side with as many rows as A.

        Raises:
            DimensionMismatchError: If B's row count differs from A's.
            SingularMatrixError: If A is singular.
        """
        from .matrix import Matrix

        if b.row_dimension != self._n:
            raise DimensionMismatchError(
                f"Matrix row dimensions must agree: {self._n} != {b.row_dimension}."
            )
        if self._singular:
            raise SingularMatrixError("Matrix is singular.")

        lu = self._lu
        x = b.to_array()[self._piv, :]

        # Forward substitution, L has an implicit unit diagonal.
        for k in range(self._n):
            x[k + 1:, :] -= np.outer(lu[k + 1:, k], x[k, :])

        # Back substitution.
        for k in range(self._n - 1, -1, -1):
            x[k, :] /= lu[k, k]
            x[:k, :] -= np.outer(lu[:k, k], x[k, :])

        if not np.all(np.isfinite(x)):
            logger.debug("LU solve produced non-finite values.")
            raise SingularMatrixError("Solve produced non-finite values.")

        return Matrix.from_array(x)
