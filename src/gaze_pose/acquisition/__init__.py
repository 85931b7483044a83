from .base import GazeSource
from .dummy import DummyGazeSource

# TobiiGazeSource lives in .tobii and needs the optional `tobii` extra.
__all__ = ["DummyGazeSource", "GazeSource"]
