from typing import Optional

from gaze_pose.models import GazeFrame, Point2D, TrackingState

OK = TrackingState.TRACKING_GAZE | TrackingState.TRACKING_EYES | TrackingState.TRACKING_PRESENCE
ZERO = Point2D(0.0, 0.0)


def make_frame(
    left: Optional[tuple[float, float]] = None,
    right: Optional[tuple[float, float]] = None,
    gaze: Optional[tuple[float, float]] = None,
    smoothed: Optional[tuple[float, float]] = None,
    state: TrackingState = OK,
    stamp: int = 0,
) -> GazeFrame:
    def point(p):
        return Point2D(*p) if p is not None else None

    return GazeFrame(
        state=state,
        left_eye=point(left),
        right_eye=point(right),
        raw_gaze=point(gaze),
        smoothed_gaze=point(smoothed if smoothed is not None else gaze),
        system_time_stamp=stamp,
    )


def lost_frame(stamp: int = 0) -> GazeFrame:
    return GazeFrame(TrackingState.TRACKING_LOST, ZERO, ZERO, ZERO, ZERO, stamp)

