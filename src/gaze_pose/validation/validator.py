import logging
import math
import threading
from collections import deque
from typing import Optional

from ..models import GazeFrame, Point2D

logger = logging.getLogger(__name__)


class GazeDataValidator:
    """
    Maintains a bounded history of GazeFrames and derives the currently valid
    eye and gaze values from it.

    Every field exposed here is sticky: it holds the most recent value from a
    frame that passed validation and is only replaced by a newer valid value,
    so an occasional badly tracked frame never makes it flicker to "missing".

    `update` is the producer entry point and may run on a tracker callback
    thread; the properties are read by the consumer loop. The user position
    pair is guarded by a lock, every other field is an immutable object
    replaced by a single assignment.
    """

    def __init__(
        self,
        queue_length: int = 30,
        min_eyes_distance: float = 0.1,
        max_eyes_distance: float = 0.3,
    ):
        if queue_length <= 0:
            raise ValueError(f"queue_length must be positive, got {queue_length}.")
        if min_eyes_distance >= max_eyes_distance:
            raise ValueError("min_eyes_distance must be smaller than max_eyes_distance.")

        self._queue_length = queue_length
        self._initial_bounds = (float(min_eyes_distance), float(max_eyes_distance))
        self._position_lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        """Drops the frame window and forgets every sticky value."""
        self._frames: deque[GazeFrame] = deque(maxlen=self._queue_length)

        self._min_eyes_distance, self._max_eyes_distance = self._initial_bounds

        self._last_valid_left_eye: Optional[Point2D] = None
        self._last_valid_right_eye: Optional[Point2D] = None
        self._last_valid_raw_gaze: Optional[Point2D] = None
        self._last_valid_smoothed_gaze: Optional[Point2D] = None

        with self._position_lock:
            self._last_valid_user_position: Optional[Point2D] = None

        self._last_valid_eye_distance = 0.0
        self._last_valid_eye_angle = 0.0

    def update(self, frame: GazeFrame) -> None:
        """
        Adds a frame to the window and refreshes the sticky values.

        The window is scanned from the newest frame backwards and the scan
        stops as soon as a left eye, a right eye and a gaze point have all
        been found.
        """
        # deque(maxlen) evicts the oldest frame once the window is full.
        self._frames.append(frame)

        left: Optional[Point2D] = None
        right: Optional[Point2D] = None
        raw_gaze: Optional[Point2D] = None
        smoothed_gaze: Optional[Point2D] = None

        for gd in reversed(self._frames):
            if left is None and gd.has_left_eye:
                left = gd.left_eye
            if right is None and gd.has_right_eye:
                right = gd.right_eye
            if raw_gaze is None and gd.has_gaze:
                raw_gaze = gd.raw_gaze
                smoothed_gaze = gd.smoothed_gaze

            if left is not None and right is not None and raw_gaze is not None:
                break

        if left is not None:
            self._last_valid_left_eye = left
        if right is not None:
            self._last_valid_right_eye = right
        if raw_gaze is not None:
            self._last_valid_raw_gaze = raw_gaze
            self._last_valid_smoothed_gaze = smoothed_gaze

        left, right = self._last_valid_left_eye, self._last_valid_right_eye
        if left is None or right is None:
            return

        with self._position_lock:
            self._last_valid_user_position = left.midpoint(right)

        # Inter-eye distance is a depth proxy, normalized by the range seen so far.
        dist = left.distance_to(right)
        if dist < self._min_eyes_distance:
            self._min_eyes_distance = dist
        if dist > self._max_eyes_distance:
            self._max_eyes_distance = dist

        self._last_valid_eye_distance = dist / (self._max_eyes_distance - self._min_eyes_distance)
        self._last_valid_eye_angle = math.degrees(math.atan2(right.y - left.y, right.x - left.x))

    # --- Accessors ---

    @property
    def queue_length(self) -> int:
        return self._queue_length

    @property
    def frames(self) -> tuple[GazeFrame, ...]:
        """Snapshot of the window, oldest first."""
        return tuple(self._frames)

    @property
    def last_valid_left_eye(self) -> Optional[Point2D]:
        return self._last_valid_left_eye

    @property
    def last_valid_right_eye(self) -> Optional[Point2D]:
        return self._last_valid_right_eye

    @property
    def last_valid_raw_gaze(self) -> Optional[Point2D]:
        return self._last_valid_raw_gaze

    @property
    def last_valid_smoothed_gaze(self) -> Optional[Point2D]:
        return self._last_valid_smoothed_gaze

    @property
    def last_valid_user_position(self) -> Optional[Point2D]:
        """Midpoint between the eyes, None until both eyes have been seen."""
        with self._position_lock:
            return self._last_valid_user_position

    @property
    def has_user_position(self) -> bool:
        return self.last_valid_user_position is not None

    @property
    def last_valid_user_distance(self) -> float:
        """Inter-eye distance normalized by the observed (max - min) range."""
        return self._last_valid_eye_distance

    @property
    def last_valid_eyes_angle(self) -> float:
        """Angle of the left-to-right eye line, in degrees."""
        return self._last_valid_eye_angle

    @property
    def eye_distance_bounds(self) -> tuple[float, float]:
        return self._min_eyes_distance, self._max_eyes_distance
