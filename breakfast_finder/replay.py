import json
import logging
import math
import sys
from pathlib import Path
from typing import IO, Any, Iterator, List, Protocol, Tuple

from breakfast_finder.tracking import DetectionSmoother
from breakfast_finder.utils.fps_logger import FPSLogger
from breakfast_finder.utils.geometry import to_detection
from breakfast_finder.utils.types import BoundingBox, Detection, RecognizedObject


class Smoother(Protocol):
    def update(self, detections: list[Detection]) -> list[Detection]: ...


class ReplayError(ValueError):
    def __init__(self, line_no: int, message: str):
        super().__init__(f"line {line_no}: {message}")
        self.line_no = line_no


def _finite(value: Any, name: str) -> float:
    # json.loads accepts NaN and Infinity
    number = float(value)
    if not math.isfinite(number):
        raise ValueError(f"{name} must be finite, got {value!r}")
    return number


def _parse_box(raw: Any) -> BoundingBox:
    if isinstance(raw, dict):
        x, y, w, h = raw["x"], raw["y"], raw["width"], raw["height"]
    else:
        x, y, w, h = raw
    return BoundingBox(
        x=_finite(x, "box x"),
        y=_finite(y, "box y"),
        width=_finite(w, "box width"),
        height=_finite(h, "box height"),
    )


def parse_detection(raw: dict, image_size: Tuple[float, float] | None = None) -> Detection | None:
    """
    Build a Detection from one JSON record.

    Records carry either "label" + "confidence" or a best-first "labels" list of
    [label, confidence] pairs. With image_size the box is read as normalized
    with a bottom-left origin. Returns None for an observation without labels.
    """
    box = _parse_box(raw["box"])
    if "labels" in raw:
        labels = [(str(name), _finite(conf, "label confidence")) for name, conf in raw["labels"]]
        confidence = raw.get("confidence", labels[0][1] if labels else 0.0)
        obj = RecognizedObject(confidence=_finite(confidence, "confidence"), box=box, labels=labels)
    else:
        confidence = _finite(raw["confidence"], "confidence")
        obj = RecognizedObject(
            confidence=confidence,
            box=box,
            labels=[(str(raw["label"]), confidence)],
        )
    return to_detection(obj, image_size)


def detection_to_dict(det: Detection) -> dict:
    return {
        "label": det.label,
        "confidence": det.confidence,
        "box": det.box.as_list(),
    }


def read_frames(
    stream: IO[str], image_size: Tuple[float, float] | None = None
) -> Iterator[Tuple[int, List[Detection]]]:
    frame_idx = 0
    for line_no, line in enumerate(stream, start=1):
        if not line.strip():
            continue
        try:
            record = json.loads(line)
            frame_size = record.get("image_size", image_size)
            if frame_size is not None:
                frame_size = (
                    _finite(frame_size[0], "image width"),
                    _finite(frame_size[1], "image height"),
                )
            detections = []
            for raw in record.get("detections", []):
                det = parse_detection(raw, frame_size)
                if det is None:
                    logging.warning("Line %d: observation without labels skipped.", line_no)
                    continue
                detections.append(det)
            frame = int(record.get("frame", frame_idx))
        except (ValueError, KeyError, TypeError, IndexError, AttributeError) as exc:
            raise ReplayError(line_no, str(exc)) from exc
        frame_idx += 1
        yield frame, detections


class ReplayPipeline:
    def __init__(
        self,
        source: str | Path,
        smoother: Smoother | None = None,
        output: str | Path | None = None,
        image_size: Tuple[float, float] | None = None,
        fps_logger: FPSLogger | None = None,
    ):
        self.source = Path(source)
        self.smoother = smoother or DetectionSmoother()
        self.output = None if output is None else Path(output)
        self.image_size = image_size
        self.fps_logger = fps_logger or FPSLogger()
        self.frames = 0
        self.total_detections = 0

    def _write(self, out: IO[str], frame: int, detections: List[Detection]) -> None:
        record = {
            "frame": frame,
            "count": len(detections),
            "detections": [detection_to_dict(d) for d in detections],
        }
        out.write(json.dumps(record) + "\n")

    def run(self) -> int:
        if not self.source.exists():
            raise FileNotFoundError(f"Replay input not found: {self.source}")

        out = sys.stdout if self.output is None else self.output.open("w", encoding="utf-8")
        try:
            with self.source.open("r", encoding="utf-8") as stream:
                for frame, raw in read_frames(stream, self.image_size):
                    smoothed = self.smoother.update(raw)
                    self._write(out, frame, smoothed)
                    self.frames += 1
                    self.total_detections += len(smoothed)
                    self.fps_logger.tick()
        finally:
            if out is not sys.stdout:
                out.close()

        logging.info(
            "Replayed %d frames from %s (%d detections emitted).",
            self.frames,
            self.source,
            self.total_detections,
        )
        return self.frames
