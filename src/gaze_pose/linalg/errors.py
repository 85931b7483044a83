class MatrixError(Exception):
    """Base class for all errors raised by the matrix primitives."""


class DimensionMismatchError(MatrixError, ValueError):
    """Operands have incompatible shapes for the requested operation."""


class SingularMatrixError(MatrixError, ArithmeticError):
    """A factorization hit a zero pivot; the matrix has no inverse."""


class MatrixIndexError(MatrixError, IndexError):
    """An element access fell outside the matrix bounds."""
