import logging
from typing import Optional

from ..linalg import DimensionMismatchError, Matrix

logger = logging.getLogger(__name__)


class KalmanFilter:
    """
    Generic linear-Gaussian predict/correct estimator.

    The filter runs indefinitely once constructed: every cycle is one
    `predict` followed by one `correct`. `x0`/`p0` hold the prediction of the
    current cycle and are overwritten by the next `predict`.
    """

    def __init__(
        self,
        f: Matrix,
        b: Matrix,
        u: Matrix,
        q: Matrix,
        h: Matrix,
        r: Matrix,
        state: Matrix,
        covariance: Matrix,
    ):
        """
        Args:
            f: State transition model (n x n).
            b: Control input model (n x k).
            u: Control vector (k x 1).
            q: Process noise covariance (n x n).
            h: Observation model (m x n).
            r: Measurement noise covariance (m x m).
            state: Initial state estimate (n x 1).
            covariance: Initial state covariance (n x n).
        """
        n = state.row_dimension
        if state.column_dimension != 1:
            raise DimensionMismatchError("State must be a column vector.")
        for name, matrix in (("F", f), ("Q", q), ("covariance", covariance)):
            if matrix.shape != (n, n):
                raise DimensionMismatchError(f"{name} must be {n}x{n}, got {matrix.shape}.")
        if h.column_dimension != n:
            raise DimensionMismatchError(f"H must have {n} columns, got {h.column_dimension}.")
        if r.shape != (h.row_dimension, h.row_dimension):
            raise DimensionMismatchError(f"R must match the observation size, got {r.shape}.")

        self.F = f
        self.B = b
        self.U = u
        self.Q = q
        self.H = h
        self.R = r

        self.state = state
        self.covariance = covariance

        self.x0: Optional[Matrix] = None
        self.p0: Optional[Matrix] = None

    def predict(self) -> None:
        """Propagates the state: x0 = F*X + B*U, p0 = F*P*F' + Q."""
        self.x0 = self.F * self.state + (self.B * self.U)
        self.p0 = self.F * self.covariance * self.F.transpose() + self.Q

    def correct(self, z: Matrix) -> None:
        """
        Blends the current prediction with the observation `z`.

        Raises:
            RuntimeError: If called before `predict`.
            SingularMatrixError: If the innovation covariance cannot be
                inverted. State and covariance are left untouched.
        """
        if self.x0 is None or self.p0 is None:
            raise RuntimeError("correct() called before predict().")

        h_t = self.H.transpose()
        s = self.H * self.p0 * h_t + self.R
        k = self.p0 * h_t * s.inverse()

        state = self.x0 + (k * (z - (self.H * self.x0)))
        identity = Matrix.identity(self.p0.row_dimension, self.p0.column_dimension)
        covariance = (identity - k * self.H) * self.p0

        self.state = state
        self.covariance = covariance

    def update_measurement_noise(self, r: Matrix) -> None:
        if r.shape != self.R.shape:
            raise DimensionMismatchError(f"R must be {self.R.shape}, got {r.shape}.")
        self.R = r
