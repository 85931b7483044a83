from dataclasses import dataclass

from ..linalg import DimensionMismatchError, Matrix


@dataclass(slots=True, frozen=True)
class Pose3D:
    """A 3-D position in the camera-relative frame."""
    x: float
    y: float
    z: float

    def __add__(self, other: "Pose3D") -> "Pose3D":
        return Pose3D(self.x + other.x, self.y + other.y, self.z + other.z)

    def __truediv__(self, scalar: float) -> "Pose3D":
        return Pose3D(self.x / scalar, self.y / scalar, self.z / scalar)

    def midpoint(self, other: "Pose3D") -> "Pose3D":
        return (self + other) / 2

    def as_tuple(self) -> tuple[float, float, float]:
        return (self.x, self.y, self.z)

    def to_matrix(self) -> Matrix:
        return Matrix.column(self.as_tuple())

    @classmethod
    def from_matrix(cls, matrix: Matrix) -> "Pose3D":
        if matrix.shape != (3, 1):
            raise DimensionMismatchError(f"Expected a 3x1 column, got {matrix.shape}.")
        return cls(matrix.get(0, 0), matrix.get(1, 0), matrix.get(2, 0))


@dataclass(slots=True, frozen=True)
class PoseEstimate:
    """A filtered position and its confidence proxy (position-x variance)."""
    position: Pose3D
    confidence: float


@dataclass(slots=True, frozen=True)
class HeadPose:
    """
    Per-tick output of the head pose pipeline.

    `position` is the merged filtered pose when filtering is enabled, and the
    raw back-projected user position otherwise. Not retained across ticks.
    """
    position: Pose3D
    raw_position: Pose3D
    left: PoseEstimate
    right: PoseEstimate
    angle: float
    filtered: bool
