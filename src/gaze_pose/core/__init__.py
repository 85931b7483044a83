from .head_pose import HeadPoseTracker
from .runner import PoseRunner

__all__ = ["HeadPoseTracker", "PoseRunner"]
