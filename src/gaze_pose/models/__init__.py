from .gaze import GazeFrame, Point2D, TrackingState, is_present
from .pose import HeadPose, Pose3D, PoseEstimate

__all__ = [
    "GazeFrame",
    "HeadPose",
    "Point2D",
    "Pose3D",
    "PoseEstimate",
    "TrackingState",
    "is_present",
]
