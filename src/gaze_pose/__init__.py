"""
Gaze Pose

Stabilizes a noisy eye-tracking frame stream: a frame history validator keeps
the last trustworthy eye and gaze values, and two per-eye Kalman filters turn
back-projected eye positions into a filtered head pose.
"""

from .core import HeadPoseTracker, PoseRunner
from .filters import KalmanFilter, MotionFilter, merge_positions
from .geometry import BackProjection, back_project_depth
from .linalg import DimensionMismatchError, Matrix, MatrixIndexError, SingularMatrixError
from .models import GazeFrame, HeadPose, Point2D, Pose3D, PoseEstimate, TrackingState
from .validation import GazeDataValidator

__all__ = [
    "BackProjection",
    "DimensionMismatchError",
    "GazeDataValidator",
    "GazeFrame",
    "HeadPose",
    "HeadPoseTracker",
    "KalmanFilter",
    "Matrix",
    "MatrixIndexError",
    "MotionFilter",
    "Point2D",
    "Pose3D",
    "PoseEstimate",
    "PoseRunner",
    "SingularMatrixError",
    "TrackingState",
    "back_project_depth",
    "merge_positions",
]
