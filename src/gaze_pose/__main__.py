import asyncio
import logging
import sys
from importlib.metadata import PackageNotFoundError, version

from pydantic import ValidationError

from gaze_pose.acquisition import DummyGazeSource, GazeSource
from gaze_pose.configs.app import AppSettings
from gaze_pose.core import HeadPoseTracker, PoseRunner
from gaze_pose.models import HeadPose

logger = logging.getLogger("main")


def create_source(settings: AppSettings) -> GazeSource:
    """Source strategy, chosen by settings."""
    if settings.source == "tobii":
        from gaze_pose.acquisition.tobii import TobiiGazeSource

        logger.info("Initializing TOBII source")
        return TobiiGazeSource()

    d = settings.dummy
    logger.warning("Initializing DUMMY source (Simulation Mode)")
    return DummyGazeSource(
        frequency=d.frequency_hz,
        radius=d.radius,
        center=d.center,
        eye_offset=d.eye_offset,
        speed=d.speed,
        lost_probability=d.lost_probability,
        occlusion_probability=d.occlusion_probability,
        seed=d.seed,
        max_frames=d.max_frames,
    )


def log_pose(pose: HeadPose) -> None:
    p = pose.position
    logger.debug(
        f"pose=({p.x:.3f}, {p.y:.3f}, {p.z:.3f}) angle={pose.angle:.1f} "
        f"conf=({pose.left.confidence:.3f}, {pose.right.confidence:.3f})"
    )


async def run(settings: AppSettings) -> None:
    tracker = HeadPoseTracker.from_settings(settings)
    runner = PoseRunner(
        create_source(settings),
        tracker,
        render_rate_hz=settings.runner.render_rate_hz,
        on_pose=log_pose,
        throttle_interval_s=settings.logging.throttle_interval_s,
    )
    await runner.start()
    try:
        await runner.wait()
    finally:
        await runner.stop()

    if runner.last_pose is not None:
        p = runner.last_pose.position
        logger.info(f"Last head pose: ({p.x:.3f}, {p.y:.3f}, {p.z:.3f})")
    else:
        logger.warning("No head pose was estimated; both eyes were never seen.")


def main():
    # 1. Load Configuration
    try:
        settings = AppSettings()
    except ValidationError as e:
        print(f"Configuration Error: {e}")
        sys.exit(1)

    # 2. Setup Logging
    logging.basicConfig(
        level=settings.logging.level.upper(),
        format=settings.logging.format,
        stream=sys.stdout
    )
    try:
        logger.info(f"Starting Gaze Pose v{version('gaze-pose')}")
    except PackageNotFoundError:
        logger.info("Starting Gaze Pose (not installed)")

    # 3. Run the pipeline until the source ends or Ctrl-C
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        logger.info("Interrupted by user.")
    except Exception:
        logger.exception("Fatal Application Error")
        sys.exit(1)
    finally:
        logger.info("Shutdown sequence complete.")

if __name__ == "__main__":
    main()
