from .app import (
    AppSettings,
    DummySourceSettings,
    FilterSettings,
    ProjectionSettings,
    RunnerSettings,
    ValidatorSettings,
)
from .utils import LoggingConfig

__all__ = [
    "AppSettings",
    "DummySourceSettings",
    "FilterSettings",
    "LoggingConfig",
    "ProjectionSettings",
    "RunnerSettings",
    "ValidatorSettings",
]
