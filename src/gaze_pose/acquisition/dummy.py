import asyncio
import logging
import math
import random
import time
from typing import Optional

from ..models import GazeFrame, Point2D, TrackingState
from ..utils import _END
from .base import GazeSource

logger = logging.getLogger(__name__)

_TRACKING_OK = TrackingState.TRACKING_GAZE | TrackingState.TRACKING_EYES | TrackingState.TRACKING_PRESENCE


class DummyGazeSource(GazeSource):
    """
    A GazeSource that simulates tracker frames for development and testing.

    The head moves along a circular path in the camera picture, and the gaze
    follows the same path on screen. To exercise the validator, frames are
    randomly reported as lost (zero coordinates, TRACKING_LOST) and single
    eyes are randomly occluded.
    """

    def __init__(
        self,
        *args,
        frequency: int = 60,
        radius: float = 0.1,
        center: tuple[float, float] = (0.5, 0.5),
        eye_offset: float = 0.1,
        speed: float = 0.25,
        lost_probability: float = 0.05,
        occlusion_probability: float = 0.05,
        seed: Optional[int] = None,
        max_frames: Optional[int] = None,
        **kwargs,
    ):
        """
        Initializes the DummyGazeSource.

        Args:
            frequency: The frequency in Hz to emit frames.
            radius: The radius of the circular path of the eye midpoint.
            center: The (x, y) center of the circular path.
            eye_offset: Horizontal distance between the two eyes.
            speed: Revolutions per second along the circle.
            lost_probability: Chance that a frame is reported as lost.
            occlusion_probability: Chance that one eye is missing from a frame.
            seed: Seed for the random generator, for reproducible streams.
            max_frames: Stop after this many frames; None runs until stopped.
        """
        super().__init__(*args, **kwargs)
        if frequency <= 0:
            raise ValueError("Frequency must be positive.")

        self._frequency = frequency
        self._interval_s = 1.0 / self._frequency
        self._radius = radius
        self._center_x, self._center_y = center
        self._eye_offset = eye_offset
        self._speed = speed
        self._lost_probability = lost_probability
        self._occlusion_probability = occlusion_probability
        self._max_frames = max_frames
        self._rng = random.Random(seed)

        logger.info(
            f"DummyGazeSource initialized to run at {self._frequency} Hz."
        )

    def make_frame(self, t: float, system_time_stamp: int = 0) -> GazeFrame:
        """Builds the simulated frame at `t` seconds into the stream."""
        if self._rng.random() < self._lost_probability:
            zero = Point2D(0.0, 0.0)
            return GazeFrame(TrackingState.TRACKING_LOST, zero, zero, zero, zero, system_time_stamp)

        angle = t * self._speed * 2 * math.pi
        mid_x = self._center_x + self._radius * math.cos(angle)
        mid_y = self._center_y + self._radius * math.sin(angle)
        half = self._eye_offset / 2

        left: Optional[Point2D] = Point2D(mid_x - half, mid_y)
        right: Optional[Point2D] = Point2D(mid_x + half, mid_y)
        if self._rng.random() < self._occlusion_probability:
            if self._rng.random() < 0.5:
                left = None
            else:
                right = None

        gaze = Point2D(mid_x, mid_y)
        return GazeFrame(_TRACKING_OK, left, right, gaze, gaze, system_time_stamp)

    async def run(self) -> None:
        """
        Main execution loop for the dummy source.

        Generates and queues frames at the configured frequency until the
        stop event is set or `max_frames` have been produced.
        """
        start_time = time.monotonic()
        frame_counter = 0

        logger.info("Starting dummy frame stream...")
        try:
            while not self._stop_event.is_set():
                if self._max_frames is not None and frame_counter >= self._max_frames:
                    break

                target_time = start_time + ((frame_counter + 1) * self._interval_s)

                # The simulated clock advances in whole frames so streams are reproducible.
                frame = self.make_frame(
                    frame_counter * self._interval_s,
                    system_time_stamp=time.monotonic_ns() // 1000,
                )
                await self._output_queue.put(frame)

                sleep_duration = target_time - time.monotonic()
                if sleep_duration > 0:
                    await asyncio.sleep(sleep_duration)
                else:
                    await asyncio.sleep(0)

                frame_counter += 1

        except asyncio.CancelledError:
            logger.info("Dummy source run task was cancelled.")
        finally:
            self._output_queue.put_nowait(_END)
            logger.info(f"DummyGazeSource has stopped after {frame_counter} frames.")
