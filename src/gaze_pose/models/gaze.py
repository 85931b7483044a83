import math
from dataclasses import dataclass
from enum import IntFlag
from typing import Any, Mapping, Optional


class TrackingState(IntFlag):
    """
    Tracking-state bitmask reported with every frame.

    Only TRACKING_FAIL and TRACKING_LOST take part in validation; the other
    bits are carried through for the benefit of consumers.
    """
    TRACKING_GAZE = 0x1
    TRACKING_EYES = 0x2
    TRACKING_PRESENCE = 0x4
    TRACKING_FAIL = 0x8
    TRACKING_LOST = 0x10


_TRACKING_PROBLEM = TrackingState.TRACKING_FAIL | TrackingState.TRACKING_LOST


@dataclass(slots=True, frozen=True)
class Point2D:
    """A point in a normalized image-space (or screen-space) frame."""
    x: float
    y: float

    @property
    def is_sentinel(self) -> bool:
        """The tracker reports a missing coordinate with a zero on either axis."""
        return self.x == 0 or self.y == 0

    def distance_to(self, other: "Point2D") -> float:
        return math.hypot(other.x - self.x, other.y - self.y)

    def midpoint(self, other: "Point2D") -> "Point2D":
        return Point2D((self.x + other.x) / 2, (self.y + other.y) / 2)


def is_present(point: Optional[Point2D]) -> bool:
    return point is not None and not point.is_sentinel


@dataclass(slots=True, frozen=True)
class GazeFrame:
    """
    A standardized, immutable container for a single tracker frame.

    This object is the canonical representation of tracking data as it flows
    from a source into the frame history validator.
    """
    state: TrackingState
    left_eye: Optional[Point2D]
    right_eye: Optional[Point2D]
    raw_gaze: Optional[Point2D]
    smoothed_gaze: Optional[Point2D]
    system_time_stamp: int = 0

    @property
    def is_tracking_ok(self) -> bool:
        return not (self.state & _TRACKING_PROBLEM)

    @property
    def has_left_eye(self) -> bool:
        return self.is_tracking_ok and is_present(self.left_eye)

    @property
    def has_right_eye(self) -> bool:
        return self.is_tracking_ok and is_present(self.right_eye)

    @property
    def has_gaze(self) -> bool:
        # Gaze validity deliberately ignores the tracking flags.
        return is_present(self.raw_gaze)

    @classmethod
    def from_tobii(cls, sample: Mapping[str, Any]) -> "GazeFrame":
        """
        Converts a Tobii Pro SDK gaze dictionary into a GazeFrame.

        Eye positions come from the gaze origin in the normalized track box,
        which plays the role of the pupil position in the camera image. The
        SDK does not smooth gaze points, so the smoothed gaze repeats the raw
        one.
        """
        eyes = {}
        for side in ("left", "right"):
            if sample.get(f"{side}_gaze_origin_validity"):
                x, y, *_ = sample[f"{side}_gaze_origin_in_trackbox_coordinate_system"]
                eyes[side] = Point2D(float(x), float(y))
            else:
                eyes[side] = None

        gaze_points = [
            sample[f"{side}_gaze_point_on_display_area"]
            for side in ("left", "right")
            if sample.get(f"{side}_gaze_point_validity")
        ]
        raw_gaze = None
        if gaze_points:
            raw_gaze = Point2D(
                sum(p[0] for p in gaze_points) / len(gaze_points),
                sum(p[1] for p in gaze_points) / len(gaze_points),
            )

        if eyes["left"] is None and eyes["right"] is None:
            state = TrackingState.TRACKING_LOST
        else:
            state = TrackingState.TRACKING_EYES | TrackingState.TRACKING_PRESENCE
            if raw_gaze is not None:
                state |= TrackingState.TRACKING_GAZE

        return cls(
            state=state,
            left_eye=eyes["left"],
            right_eye=eyes["right"],
            raw_gaze=raw_gaze,
            smoothed_gaze=raw_gaze,
            system_time_stamp=int(sample.get("system_time_stamp", 0)),
        )
