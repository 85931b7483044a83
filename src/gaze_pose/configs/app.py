import logging
from typing import Literal, Optional

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, PositiveFloat, PositiveInt, model_validator

from .utils import LoggingConfig

logger = logging.getLogger(__name__)


class ValidatorSettings(BaseModel):
    """Settings for the frame history validator."""
    queue_length: PositiveInt = Field(30, description="Number of frames kept in the history window.")
    min_eyes_distance: float = Field(0.1, ge=0, description="Initial lower bound of the inter-eye distance range.")
    max_eyes_distance: float = Field(0.3, gt=0, description="Initial upper bound of the inter-eye distance range.")

    @model_validator(mode='after')
    def validate_bounds(self) -> "ValidatorSettings":
        if self.min_eyes_distance >= self.max_eyes_distance:
            raise ValueError('min_eyes_distance must be smaller than max_eyes_distance.')
        return self


class FilterSettings(BaseModel):
    """Settings for the per-eye Kalman filters and the pose merge."""
    measurement_accuracy: PositiveFloat = Field(1.0, description="Measurement noise (R). Larger means smoother.")
    time_dilution: PositiveFloat = Field(1.0, description="Process noise (Q) added every cycle.")
    depth_noise_scale: PositiveFloat = Field(10.0, description="Extra factor on the depth axis of R.")
    smoothing_step: float = Field(1.1, gt=1.0, description="Factor applied by increase/decrease smoothing.")
    merge_threshold: PositiveFloat = Field(10.0, description="Confidence ratio above which one eye wins outright.")
    filtered: bool = Field(True, description="Expose the filtered pose instead of the raw back-projection.")


class ProjectionSettings(BaseModel):
    """Camera parameters of the back-projection."""
    base_distance: float = Field(-10.0, description="Depth of the camera when the eye distance is zero.")
    span_x: PositiveFloat = Field(5.0, description="Width of the panning plane.")
    span_y: PositiveFloat = Field(3.0, description="Height of the panning plane.")
    depth_gain: float = Field(2.0, description="Depth change per unit of normalized eye distance.")


class DummySourceSettings(BaseModel):
    """Settings for the simulated frame source."""
    frequency_hz: PositiveInt = 60
    radius: float = Field(0.1, ge=0, description="Radius of the circular head path.")
    center: tuple[float, float] = (0.5, 0.5)
    eye_offset: float = Field(0.1, gt=0, description="Horizontal distance between the eyes.")
    speed: float = Field(0.25, description="Revolutions per second.")
    lost_probability: float = Field(0.05, ge=0, le=1)
    occlusion_probability: float = Field(0.05, ge=0, le=1)
    seed: Optional[int] = None
    max_frames: Optional[PositiveInt] = None


class RunnerSettings(BaseModel):
    render_rate_hz: PositiveInt = 30


class AppSettings(BaseSettings):
    """
    Main application settings, loaded from environment variables and defaults.
    """
    source: Literal["dummy", "tobii"] = "dummy"

    validator: ValidatorSettings = Field(default_factory=ValidatorSettings)
    filter: FilterSettings = Field(default_factory=FilterSettings)
    projection: ProjectionSettings = Field(default_factory=ProjectionSettings)

    dummy: DummySourceSettings = Field(default_factory=DummySourceSettings)
    runner: RunnerSettings = Field(default_factory=RunnerSettings)

    # Logging
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    model_config = SettingsConfigDict(
        env_prefix="GAZE_POSE__",
        env_file=".env",
        env_nested_delimiter='__',
        case_sensitive=False
    )
