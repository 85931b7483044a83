import logging
from typing import Optional

from ..configs import AppSettings
from ..filters import MERGE_THRESHOLD, MotionFilter, merge_positions
from ..geometry import BackProjection
from ..linalg import SingularMatrixError
from ..models import GazeFrame, HeadPose, Point2D, Pose3D, PoseEstimate
from ..utils import ThrottledLogger
from ..validation import GazeDataValidator

logger = logging.getLogger(__name__)


class HeadPoseTracker:
    """
    The headless core of the head pose pipeline.

    Frames enter through `ingest` (producer side, may be a tracker callback
    thread). Once per display tick the consumer calls `tick`, which reads the
    validator's sticky values, back-projects both eyes, runs one
    predict/correct cycle per eye and merges the two filtered poses.
    """

    def __init__(
        self,
        validator: GazeDataValidator,
        left_filter: MotionFilter,
        right_filter: MotionFilter,
        projection: BackProjection,
        merge_threshold: float = MERGE_THRESHOLD,
        filtered: bool = True,
        smoothing_step: float = 1.1,
        throttle_interval_s: float = 5.0,
    ):
        if smoothing_step <= 1.0:
            raise ValueError("smoothing_step must be greater than 1.")

        self.validator = validator
        self._filters = {"left": left_filter, "right": right_filter}
        self._projection = projection
        self._merge_threshold = merge_threshold
        self._smoothing_step = smoothing_step
        self._smoothing = left_filter.measurement_accuracy
        self.filtered = filtered

        self._singular_warnings = ThrottledLogger(logger, throttle_interval_s)

    @classmethod
    def from_settings(cls, settings: AppSettings) -> "HeadPoseTracker":
        v, f, p = settings.validator, settings.filter, settings.projection

        def make_filter() -> MotionFilter:
            return MotionFilter(
                measurement_accuracy=f.measurement_accuracy,
                time_dilution=f.time_dilution,
                depth_noise_scale=f.depth_noise_scale,
            )

        return cls(
            validator=GazeDataValidator(v.queue_length, v.min_eyes_distance, v.max_eyes_distance),
            left_filter=make_filter(),
            right_filter=make_filter(),
            projection=BackProjection(p.base_distance, p.span_x, p.span_y, p.depth_gain),
            merge_threshold=f.merge_threshold,
            filtered=f.filtered,
            smoothing_step=f.smoothing_step,
            throttle_interval_s=settings.logging.throttle_interval_s,
        )

    # --- Producer side ---

    def ingest(self, frame: GazeFrame) -> None:
        self.validator.update(frame)

    # --- Consumer side ---

    def tick(self) -> Optional[HeadPose]:
        """
        Runs one filter cycle. Returns None until both eyes have been seen.
        """
        user_position = self.validator.last_valid_user_position
        left_eye = self.validator.last_valid_left_eye
        right_eye = self.validator.last_valid_right_eye
        if user_position is None or left_eye is None or right_eye is None:
            return None

        eyes_distance = self.validator.last_valid_user_distance
        raw_position = self._projection(user_position, eyes_distance)

        # Both channels are updated every tick so neither filter goes stale.
        left = self._step("left", self._projection(left_eye, eyes_distance))
        right = self._step("right", self._projection(right_eye, eyes_distance))

        merged = merge_positions(
            left.position, left.confidence,
            right.position, right.confidence,
            threshold=self._merge_threshold,
        )

        return HeadPose(
            position=merged if self.filtered else raw_position,
            raw_position=raw_position,
            left=left,
            right=right,
            angle=self.validator.last_valid_eyes_angle,
            filtered=self.filtered,
        )

    def _step(self, channel: str, observation: Pose3D) -> PoseEstimate:
        motion_filter = self._filters[channel]
        motion_filter.predict()
        try:
            motion_filter.correct(observation)
        except SingularMatrixError:
            self._singular_warnings.warning(
                "Singular innovation covariance on %s eye; observation dropped.", channel
            )
        # A failed correct leaves the filter on its previous estimate.
        return motion_filter.post_state()

    # --- Smoothing controls ---

    @property
    def smoothing(self) -> float:
        return self._smoothing

    def set_smoothing(self, value: float) -> None:
        """Applies a new measurement accuracy to both eye channels."""
        for motion_filter in self._filters.values():
            motion_filter.update_smoothing(value)
        self._smoothing = value
        logger.info(f"Pose smoothing set to {value:.4f}.")

    def increase_smoothing(self) -> float:
        self.set_smoothing(self._smoothing * self._smoothing_step)
        return self._smoothing

    def decrease_smoothing(self) -> float:
        self.set_smoothing(self._smoothing / self._smoothing_step)
        return self._smoothing

    def toggle_filtering(self) -> bool:
        self.filtered = not self.filtered
        logger.info("Pose filtering %s.", "enabled" if self.filtered else "disabled")
        return self.filtered

    # --- Passthrough accessors ---

    @property
    def left_filter(self) -> MotionFilter:
        return self._filters["left"]

    @property
    def right_filter(self) -> MotionFilter:
        return self._filters["right"]

    @property
    def gaze(self) -> Optional[Point2D]:
        return self.validator.last_valid_smoothed_gaze

    @property
    def raw_gaze(self) -> Optional[Point2D]:
        return self.validator.last_valid_raw_gaze
