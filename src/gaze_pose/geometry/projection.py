from dataclasses import dataclass

from ..models import Point2D, Pose3D


def back_project_depth(
    point: Point2D,
    eyes_distance: float,
    base_distance: float,
    span_x: float = 5.0,
    span_y: float = 3.0,
    depth_gain: float = 2.0,
) -> Pose3D:
    """
    Converts a normalized picture-space coordinate to a 3-D camera pose.

    The picture is mapped onto a span_x by span_y panning plane centred on the
    origin (3:2 aspect by default) and the normalized inter-eye distance
    pushes the pose away from `base_distance` along the depth axis.
    """
    tx = point.x * span_x - span_x / 2
    ty = point.y * span_y - span_y / 2
    return Pose3D(tx, ty, base_distance + depth_gain * eyes_distance)


@dataclass(slots=True, frozen=True)
class BackProjection:
    """Back-projection with its camera parameters bound."""
    base_distance: float = -10.0
    span_x: float = 5.0
    span_y: float = 3.0
    depth_gain: float = 2.0

    def __call__(self, point: Point2D, eyes_distance: float) -> Pose3D:
        return back_project_depth(
            point,
            eyes_distance,
            self.base_distance,
            span_x=self.span_x,
            span_y=self.span_y,
            depth_gain=self.depth_gain,
        )
