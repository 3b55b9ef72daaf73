import argparse
import logging
from pathlib import Path

from breakfast_finder.replay import ReplayError, ReplayPipeline
from breakfast_finder.tracking import DetectionSmoother, TrackerConfig


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description="Replay recorded detections through the frame-to-frame box smoother"
    )
    parser.add_argument(
        "--input", required=True, help="JSON-lines file, one frame of detections per line."
    )
    parser.add_argument(
        "--output",
        default=None,
        help="Where to write smoothed frames (JSON lines). Defaults to stdout.",
    )
    parser.add_argument(
        "--confidence-threshold",
        type=float,
        default=0.5,
        help="Detections at or below this confidence are dropped.",
    )
    parser.add_argument(
        "--bucket-size",
        type=float,
        default=50.0,
        help="Pixel grid used to build tracking keys.",
    )
    parser.add_argument(
        "--match-distance",
        type=float,
        default=100.0,
        help="Max center distance (pixels) for matching a previous box.",
    )
    parser.add_argument(
        "--smoothing-factor",
        type=float,
        default=0.7,
        help="Weight (0-1) of the previous box in the smoothed result.",
    )
    parser.add_argument(
        "--image-width",
        type=float,
        default=None,
        help="Treat input boxes as normalized (bottom-left origin) for an image this wide.",
    )
    parser.add_argument(
        "--image-height",
        type=float,
        default=None,
        help="Image height paired with --image-width.",
    )
    parser.add_argument("--log-file", default=None, help="Also write logs to this file.")
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="INFO",
    )
    args = parser.parse_args(argv)
    if (args.image_width is None) != (args.image_height is None):
        parser.error("--image-width and --image-height must be given together")
    return args


def configure_logging(level: str = "INFO", log_file: str | None = None):
    fmt = logging.Formatter("%(asctime)s [%(levelname)s] %(message)s")

    stream_handler = logging.StreamHandler()
    stream_handler.setFormatter(fmt)

    root = logging.getLogger()
    root.setLevel(getattr(logging, level))
    # clear previous handlers to avoid duplicates
    root.handlers = []
    root.addHandler(stream_handler)

    if log_file is not None:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(fmt)
        root.addHandler(file_handler)


def main(argv=None):
    args = parse_args(argv)
    configure_logging(args.log_level, args.log_file)

    try:
        config = TrackerConfig(
            confidence_threshold=args.confidence_threshold,
            bucket_size=args.bucket_size,
            match_distance_threshold=args.match_distance,
            smoothing_factor=args.smoothing_factor,
        )
    except ValueError as exc:
        logging.error("Invalid tracker configuration: %s", exc)
        raise SystemExit(1) from exc
    logging.info("Using smoother config %s", config)

    image_size = None
    if args.image_width is not None:
        image_size = (args.image_width, args.image_height)

    pipeline = ReplayPipeline(
        source=args.input,
        smoother=DetectionSmoother(config),
        output=args.output,
        image_size=image_size,
    )
    try:
        pipeline.run()
    except (FileNotFoundError, ReplayError) as exc:
        logging.error("Replay failed: %s", exc)
        raise SystemExit(1) from exc


if __name__ == "__main__":
    main()
