from abc import ABC, abstractmethod
from asyncio import Queue, Event
from typing import Optional, Union, final

from ..models import GazeFrame
from ..utils import EndToken


class GazeSource(ABC):
    """
    Abstract Base Class for all gaze frame sources.

    A GazeSource is a runnable component that acquires frames from a specific
    origin (e.g., hardware, simulation) and puts `GazeFrame` objects into an
    output queue. When it finishes it puts `_END` on the queue so consumers
    know the stream is over.
    """

    def __init__(
        self,
        output_queue: Optional[Queue[Union[GazeFrame, EndToken]]] = None,
        stop_event: Optional[Event] = None,
    ):
        self._output_queue = output_queue if output_queue is not None else Queue()
        self._stop_event = stop_event if stop_event is not None else Event()

    @property
    def output_queue(self) -> Queue[Union[GazeFrame, EndToken]]:
        return self._output_queue

    @abstractmethod
    async def run(self) -> None:
        """
        Starts the frame acquisition process.

        This method should run continuously, acquiring frames and placing them
        into the output queue until the `stop_event` is set, and put `_END`
        on the queue before returning.
        """
        raise NotImplementedError

    @final
    async def stop(self) -> None:
        """
        Signals the source to stop acquiring frames.

        This is a final method and should not be overridden. Subclasses can
        perform cleanup in their 'run' method's finally block.
        """
        self._stop_event.set()
