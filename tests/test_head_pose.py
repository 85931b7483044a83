"""
Tests for the head pose pipeline that ties the validator, the per-eye
filters and the merge together.
"""
import logging

import pytest

from gaze_pose.configs import AppSettings
from gaze_pose.core import HeadPoseTracker
from gaze_pose.filters import MotionFilter
from gaze_pose.geometry import BackProjection
from gaze_pose.linalg import Matrix
from gaze_pose.models import HeadPose, Point2D, Pose3D
from gaze_pose.validation import GazeDataValidator

from conftest import lost_frame, make_frame


def make_tracker(**kwargs) -> HeadPoseTracker:
    return HeadPoseTracker(
        validator=GazeDataValidator(30),
        left_filter=MotionFilter(measurement_accuracy=1.0, time_dilution=1.0),
        right_filter=MotionFilter(measurement_accuracy=1.0, time_dilution=1.0),
        projection=BackProjection(base_distance=-10.0),
        **kwargs,
    )


def test_no_pose_until_both_eyes_seen():
    tracker = make_tracker()
    assert tracker.tick() is None

    tracker.ingest(lost_frame())
    assert tracker.tick() is None

    tracker.ingest(make_frame(left=(0.3, 0.4)))
    assert tracker.tick() is None


def test_tick_produces_filtered_pose():
    tracker = make_tracker()
    tracker.ingest(make_frame(left=(0.3, 0.4), right=(0.7, 0.4), gaze=(0.5, 0.5)))

    pose = tracker.tick()
    assert isinstance(pose, HeadPose)
    assert pose.filtered
    assert pose.angle == 0.0

    eyes_distance = tracker.validator.last_valid_user_distance
    project = BackProjection(base_distance=-10.0)
    assert pose.raw_position == project(tracker.validator.last_valid_user_position, eyes_distance)

    # First cycle from X=0, P=I, Q=I, R=I: gain 2/3 on x and y.
    left_obs = project(Point2D(0.3, 0.4), eyes_distance)
    assert pose.left.position.x == pytest.approx(left_obs.x * 2 / 3)
    assert pose.left.confidence == pytest.approx(2 / 3)

    # Equal confidences, so the merged pose is the midpoint of both channels.
    assert pose.position == pose.left.position.midpoint(pose.right.position)


def test_filter_converges_on_steady_input():
    tracker = make_tracker()
    frame = make_frame(left=(0.3, 0.4), right=(0.7, 0.4), gaze=(0.5, 0.5))
    for _ in range(200):
        tracker.ingest(frame)
        pose = tracker.tick()

    assert pose.position.x == pytest.approx(pose.raw_position.x, abs=1e-6)
    assert pose.position.y == pytest.approx(pose.raw_position.y, abs=1e-6)
    assert pose.position.z == pytest.approx(pose.raw_position.z, abs=1e-6)


def test_pose_holds_through_dropouts():
    tracker = make_tracker()
    tracker.ingest(make_frame(left=(0.3, 0.4), right=(0.7, 0.4), gaze=(0.5, 0.5)))
    first = tracker.tick()
    for _ in range(40):
        tracker.ingest(lost_frame())
    later = tracker.tick()

    assert later is not None
    assert later.raw_position == first.raw_position


def test_toggle_filtering_exposes_raw_pose():
    tracker = make_tracker(filtered=False)
    tracker.ingest(make_frame(left=(0.3, 0.4), right=(0.7, 0.4)))
    pose = tracker.tick()
    assert not pose.filtered
    assert pose.position == pose.raw_position

    assert tracker.toggle_filtering() is True
    pose = tracker.tick()
    assert pose.filtered
    assert pose.position != pose.raw_position


def test_smoothing_controls_apply_to_both_eyes():
    tracker = make_tracker(smoothing_step=2.0)
    assert tracker.smoothing == 1.0

    assert tracker.increase_smoothing() == 2.0
    assert tracker.left_filter.measurement_accuracy == 2.0
    assert tracker.right_filter.measurement_accuracy == 2.0

    tracker.decrease_smoothing()
    tracker.decrease_smoothing()
    assert tracker.smoothing == 0.5
    assert tracker.right_filter.kalman.R == Matrix.diagonal([0.5, 0.5, 0.5])


def test_invalid_smoothing_step():
    with pytest.raises(ValueError):
        make_tracker(smoothing_step=1.0)


def test_singular_channel_keeps_previous_estimate(caplog):
    tracker = make_tracker()
    kf = tracker.left_filter.kalman
    kf.Q = Matrix.filled(3, 3)
    kf.R = Matrix.filled(3, 3)
    kf.covariance = Matrix.filled(3, 3)

    tracker.ingest(make_frame(left=(0.3, 0.4), right=(0.7, 0.4)))
    with caplog.at_level(logging.WARNING, logger="gaze_pose.core.head_pose"):
        pose = tracker.tick()

    assert pose is not None
    assert pose.left.position == Pose3D(0.0, 0.0, 0.0)
    assert pose.left.confidence == 0.0
    # A zero-confidence left eye defers to the right eye.
    assert pose.position == pose.right.position
    assert "Singular innovation covariance on left eye" in caplog.text


def test_gaze_accessors():
    tracker = make_tracker()
    tracker.ingest(make_frame(gaze=(0.6, 0.6), smoothed=(0.55, 0.55)))
    assert tracker.raw_gaze == Point2D(0.6, 0.6)
    assert tracker.gaze == Point2D(0.55, 0.55)


def test_from_settings():
    settings = AppSettings()
    tracker = HeadPoseTracker.from_settings(settings)
    assert tracker.validator.queue_length == settings.validator.queue_length
    assert tracker.filtered == settings.filter.filtered
    assert tracker.smoothing == settings.filter.measurement_accuracy
    assert tracker.left_filter.kalman.R.get(2, 2) == pytest.approx(
        settings.filter.measurement_accuracy * settings.filter.depth_noise_scale
    )
    assert tracker.left_filter is not tracker.right_filter
