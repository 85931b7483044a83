from .validator import GazeDataValidator

__all__ = ["GazeDataValidator"]
