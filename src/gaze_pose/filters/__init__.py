from .kalman import KalmanFilter
from .motion import MERGE_THRESHOLD, MotionFilter, merge_positions

__all__ = ["KalmanFilter", "MERGE_THRESHOLD", "MotionFilter", "merge_positions"]
