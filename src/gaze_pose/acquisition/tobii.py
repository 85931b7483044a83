import asyncio
import logging
from typing import Optional

import tobii_research as tr

from ..models import GazeFrame
from ..utils import ThrottledLogger, _END
from .base import GazeSource

logger = logging.getLogger(__name__)


class TobiiGazeSource(GazeSource):
    """
    A GazeSource that acquires frames from a connected Tobii eye tracker.
    """

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.tracker: Optional[tr.EyeTracker] = None
        self._loop = asyncio.get_running_loop()
        self._callback_errors = ThrottledLogger(logger)

    def _gaze_data_callback(self, gaze_data: dict) -> None:
        """
        Thread-safe callback bridge from the Tobii SDK to the asyncio world.

        This method is called by a background thread from the Tobii SDK.
        It converts the raw dictionary into a GazeFrame and safely puts it
        into the asyncio queue.
        """
        try:
            frame = GazeFrame.from_tobii(gaze_data)
            self._loop.call_soon_threadsafe(self._output_queue.put_nowait, frame)
        except RuntimeError:
            # The event loop was closed during shutdown; nothing left to feed.
            pass
        except (KeyError, TypeError, ValueError):
            self._callback_errors.warning("Malformed gaze sample from Tobii callback.")

    async def _find_tracker(self) -> Optional[tr.EyeTracker]:
        """
        Asynchronously finds the first available Tobii eye tracker.

        Runs the blocking `find_all_eyetrackers` call in a separate thread
        to avoid blocking the asyncio event loop.
        """
        logger.info("Searching for eye trackers...")
        eyetrackers = await asyncio.to_thread(tr.find_all_eyetrackers)

        if not eyetrackers:
            logger.error("No eye trackers found.")
            return None

        tracker = eyetrackers[0]
        logger.info(f"Found tracker: {tracker.device_name} ({tracker.serial_number})")
        return tracker

    async def run(self) -> None:
        """
        Main execution loop for the Tobii source.

        Finds a tracker, subscribes to its gaze data stream, and waits until
        the stop event is set before cleaning up.
        """
        subscribed = False
        try:
            self.tracker = await self._find_tracker()

            if not self.tracker:
                logger.error("Failed to find a Tobii tracker. Stopping source.")
                return

            if self._stop_event.is_set():
                logger.info("Stop event was set during tracker search. Aborting run.")
                return

            logger.info("Subscribing to gaze data stream...")
            self.tracker.subscribe_to(
                tr.EYETRACKER_GAZE_DATA, self._gaze_data_callback, as_dictionary=True
            )
            subscribed = True

            await self._stop_event.wait()

            logger.info("Stop event received, shutting down Tobii source.")

        except tr.EyeTrackerException as e:
            logger.error(f"A Tobii SDK error occurred: {e}", exc_info=True)

        finally:
            if subscribed and self.tracker:
                logger.info("Unsubscribing from gaze data stream...")
                self.tracker.unsubscribe_from(
                    tr.EYETRACKER_GAZE_DATA, self._gaze_data_callback
                )

            self._output_queue.put_nowait(_END)
            logger.info("Tobii source has been cleaned up.")
