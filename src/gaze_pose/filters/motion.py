import logging
from typing import Sequence, Union

from ..linalg import DimensionMismatchError, Matrix
from ..models import Pose3D, PoseEstimate
from .kalman import KalmanFilter

logger = logging.getLogger(__name__)

MERGE_THRESHOLD = 10.0


def merge_positions(
    pose1: Pose3D,
    confidence1: float,
    pose2: Pose3D,
    confidence2: float,
    threshold: float = MERGE_THRESHOLD,
) -> Pose3D:
    """
    Merges the two per-eye poses using their confidence ratio.

    The first pose wins when the second confidence is zero or the ratio
    confidence1 / confidence2 exceeds `threshold`; the second pose wins under
    the mirrored condition; otherwise the midpoint is returned. When both
    confidences are zero the first pose is returned. confidence2 is tested for
    zero before the ratio is formed, so no division by zero can occur.
    """
    if confidence2 == 0 or confidence1 / confidence2 > threshold:
        return pose1
    if confidence1 == 0 or confidence2 / confidence1 > threshold:
        return pose2
    return pose1.midpoint(pose2)


class MotionFilter:
    """
    A KalmanFilter with a constant-position motion model.

    F and H are the identity and there is no control input, so `predict`
    only inflates the covariance by Q and `correct` is a per-axis blend
    between the previous estimate and the observation.
    """

    def __init__(
        self,
        measurement_accuracy: float = 1.0,
        time_dilution: float = 1.0,
        depth_noise_scale: float = 1.0,
        dim: int = 3,
    ):
        """
        Args:
            measurement_accuracy: Diagonal of R. Larger means noisier
                observations and heavier smoothing.
            time_dilution: Diagonal of Q, the uncertainty added per cycle.
            depth_noise_scale: Extra factor on the last (depth) axis of R.
            dim: Dimension of the filtered position.
        """
        if dim < 1:
            raise ValueError("dim must be positive.")
        self._dim = dim
        self._time_dilution = float(time_dilution)
        self._depth_noise_scale = float(depth_noise_scale)
        self._measurement_accuracy = float(measurement_accuracy)

        f = Matrix.identity(dim, dim)
        b = Matrix.filled(dim, dim, 0.0)
        u = Matrix.filled(dim, 1, 0.0)
        q = Matrix.diagonal([self._time_dilution] * dim)
        h = Matrix.identity(dim, dim)
        r = self._measurement_noise(self._measurement_accuracy)

        # Starts at the origin with unit covariance; the first corrections pull it in.
        state = Matrix.filled(dim, 1, 0.0)
        covariance = Matrix.identity(dim, dim)

        self._kf = KalmanFilter(f, b, u, q, h, r, state, covariance)

    def _measurement_noise(self, accuracy: float) -> Matrix:
        diagonal = [accuracy] * self._dim
        diagonal[-1] *= self._depth_noise_scale
        return Matrix.diagonal(diagonal)

    @property
    def kalman(self) -> KalmanFilter:
        return self._kf

    @property
    def measurement_accuracy(self) -> float:
        return self._measurement_accuracy

    @property
    def time_dilution(self) -> float:
        return self._time_dilution

    def update_smoothing(self, new_accuracy: float) -> None:
        """Retunes R; the new value takes effect on the next `correct`."""
        if new_accuracy <= 0:
            raise ValueError(f"Measurement accuracy must be positive, got {new_accuracy}.")
        self._measurement_accuracy = float(new_accuracy)
        self._kf.update_measurement_noise(self._measurement_noise(self._measurement_accuracy))
        logger.debug(f"Measurement accuracy set to {self._measurement_accuracy:.4f}.")

    def predict(self) -> None:
        self._kf.predict()

    def correct(self, measure: Union[Pose3D, Sequence[float]]) -> None:
        values = measure.as_tuple() if isinstance(measure, Pose3D) else tuple(measure)
        if len(values) != self._dim:
            raise DimensionMismatchError(f"Expected {self._dim} values, got {len(values)}.")
        self._kf.correct(Matrix.column(values))

    def pre_state(self) -> PoseEstimate:
        """Prediction of the current cycle, with p0[0][0] as confidence."""
        if self._kf.x0 is None or self._kf.p0 is None:
            raise RuntimeError("pre_state() called before predict().")
        return self._estimate(self._kf.x0, self._kf.p0)

    def post_state(self) -> PoseEstimate:
        """Corrected estimate, with covariance[0][0] as confidence."""
        return self._estimate(self._kf.state, self._kf.covariance)

    def _estimate(self, state: Matrix, covariance: Matrix) -> PoseEstimate:
        if self._dim != 3:
            raise DimensionMismatchError("Pose estimates are only defined for 3-D filters.")
        return PoseEstimate(
            position=Pose3D.from_matrix(state),
            confidence=covariance.get(0, 0),
        )
