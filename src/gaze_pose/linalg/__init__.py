from .errors import DimensionMismatchError, MatrixError, MatrixIndexError, SingularMatrixError
from .lu import LUDecomposition
from .matrix import Matrix

__all__ = [
    "DimensionMismatchError",
    "LUDecomposition",
    "Matrix",
    "MatrixError",
    "MatrixIndexError",
    "SingularMatrixError",
]
