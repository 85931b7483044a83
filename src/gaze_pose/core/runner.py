import asyncio
import logging
from typing import Callable, Optional

from .head_pose import HeadPoseTracker
from ..acquisition import GazeSource
from ..models import HeadPose
from ..utils import ThrottledLogger, _END

logger = logging.getLogger(__name__)


class PoseRunner:
    """
    Orchestrates the data flow from Source -> Tracker -> consumer.

    Two tasks run side by side: the ingest task drains the source queue into
    the tracker as fast as frames arrive, and the tick task runs the filter
    cycle at the render rate. Neither waits on the other.
    """
    def __init__(
        self,
        source: GazeSource,
        tracker: HeadPoseTracker,
        render_rate_hz: float = 30.0,
        on_pose: Optional[Callable[[HeadPose], None]] = None,
        throttle_interval_s: float = 5.0,
    ):
        if render_rate_hz <= 0:
            raise ValueError("render_rate_hz must be positive.")
        self.source = source
        self.tracker = tracker
        self.on_pose = on_pose
        self._tick_interval_s = 1.0 / render_rate_hz

        self.frames_ingested = 0
        self.ticks = 0
        self.last_pose: Optional[HeadPose] = None
        self.tick_errors = 0
        self._tick_warnings = ThrottledLogger(logger, throttle_interval_s)

        self._running = False
        self._source_task: asyncio.Task | None = None
        self._ingest_task: asyncio.Task | None = None
        self._tick_task: asyncio.Task | None = None

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        if self._running:
            return

        logger.info("Starting PoseRunner...")
        self._running = True

        self._source_task = asyncio.create_task(self.source.run())
        self._ingest_task = asyncio.create_task(self._ingest_loop())
        self._tick_task = asyncio.create_task(self._tick_loop())
        logger.info("PoseRunner active.")

    async def wait(self) -> None:
        """Waits until the source has delivered its last frame, then stops."""
        if self._ingest_task:
            await self._ingest_task
        await self.stop()

    async def stop(self) -> None:
        if not self._running:
            return

        logger.info("Stopping PoseRunner...")
        self._running = False

        # Stop source; it puts _END on the queue, which ends the ingest loop.
        await self.source.stop()
        if self._source_task:
            await self._source_task
        if self._ingest_task:
            await self._ingest_task

        if self._tick_task:
            self._tick_task.cancel()
            # Collects the task without re-raising; a tick task that died early is only reported.
            (result,) = await asyncio.gather(self._tick_task, return_exceptions=True)
            if isinstance(result, Exception):
                logger.error("Tick loop had terminated with an error.", exc_info=result)

        logger.info(
            f"PoseRunner stopped. Frames: {self.frames_ingested}, ticks: {self.ticks}, "
            f"failed ticks: {self.tick_errors}."
        )

    async def _ingest_loop(self) -> None:
        """Producer side: every frame goes to the validator, in order."""
        queue = self.source.output_queue

        try:
            while True:
                item = await queue.get()

                if item is _END:
                    break

                self.tracker.ingest(item)
                self.frames_ingested += 1

        except asyncio.CancelledError:
            logger.info("Ingest loop cancelled unexpectedly.")

    async def _tick_loop(self) -> None:
        """Consumer side: one filter cycle per render tick."""
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while True:
            try:
                pose = self.tracker.tick()
                if pose is not None:
                    self.last_pose = pose
                    if self.on_pose is not None:
                        self.on_pose(pose)
            except Exception as e:
                # A failing tick or consumer must not stop the render clock.
                self.tick_errors += 1
                self._tick_warnings.warning("Tick failed: %r", e)
            self.ticks += 1

            next_tick += self._tick_interval_s
            await asyncio.sleep(max(0.0, next_tick - loop.time()))
