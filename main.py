"""
Video barcode decoding: entry point.
Run: python main.py            (prompts for camera or video file)
     python main.py --file clip.mp4 --headless --no-wait
"""

from __future__ import annotations

import argparse
import logging
import sys

from core.camera_list import list_cameras
from core.config import load_settings
from core.console import OVER_BANNER, START_BANNER, Console, prompt_source, strip_quotes, wait_for_enter
from core.exceptions import ConfigurationError, LicenseInitError
from core.models import SourceChoice
from core.session import decode_video
from engine import DEFAULT_ENGINE, available_engines, load_engine

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Decode barcodes from a camera or a video file.")
    source = parser.add_mutually_exclusive_group()
    source.add_argument("--camera", action="store_true", help="decode from the camera, skip the prompt")
    source.add_argument("--file", metavar="PATH", help="decode from a video file, skip the prompt")
    parser.add_argument("--camera-index", type=int, help="camera device index (default 0)")
    parser.add_argument("--license", dest="license_key", help="engine license key")
    parser.add_argument("--engine", default=DEFAULT_ENGINE, choices=available_engines())
    parser.add_argument("--template", help="engine template name (default: read barcodes preset)")
    parser.add_argument("--forget-time", dest="duplicate_forget_time_ms", type=int, metavar="MS",
                        help="duplicate forget time in milliseconds (default 5000)")
    parser.add_argument("--headless", action="store_true", default=None, help="never open a preview window")
    parser.add_argument("--list-cameras", action="store_true", help="list cameras and exit")
    parser.add_argument("--no-wait", action="store_true", help="do not wait for Enter before exiting")
    parser.add_argument("--log-level", help="logging level (default WARNING)")
    return parser.parse_args(argv)


def configure_logging(level_name: str) -> None:
    level = getattr(logging, level_name.upper(), None)
    if not isinstance(level, int):
        raise ConfigurationError(f"Unknown log level: {level_name}")
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )


def _choice_from_args(args: argparse.Namespace, camera_index: int) -> SourceChoice | None:
    if args.camera:
        return SourceChoice.camera(camera_index)
    if args.file:
        return SourceChoice.video_file(strip_quotes(args.file))
    return None


def run(args: argparse.Namespace, console: Console) -> int:
    settings = load_settings(overrides={
        "license_key": args.license_key,
        "camera_index": args.camera_index,
        "template": args.template,
        "duplicate_forget_time_ms": args.duplicate_forget_time_ms,
        "headless": args.headless,
        "log_level": args.log_level,
    })
    configure_logging(settings["log_level"])

    if args.list_cameras:
        cameras = list_cameras()
        if not cameras:
            console.print("No cameras found.")
        for camera in cameras:
            console.print(str(camera))
        return 0

    engine = load_engine(args.engine)
    try:
        engine.init_license(settings["license_key"])
    except LicenseInitError as e:
        console.print(str(e))
        return 1

    choice = _choice_from_args(args, settings["camera_index"])
    if choice is None:
        choice = prompt_source(console, settings["camera_index"])
        if choice is None:
            return 1

    stats = decode_video(choice, engine, console, settings)
    if stats is None:
        return 1
    logger.info("Session finished: %d frames submitted", stats.frames_submitted)
    return 0


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    console = Console()
    console.print(START_BANNER)
    try:
        return run(args, console)
    except ConfigurationError as e:
        console.print(f"Error: {e}")
        return 2
    finally:
        console.print(OVER_BANNER)
        if not args.no_wait:
            wait_for_enter(console)


if __name__ == "__main__":
    sys.exit(main())
