"""
Frame-to-frame association and exponential smoothing of detection boxes.

Every call takes the boxes kept from the previous frame and returns a fresh
state; nothing survives a frame in which it is not re-detected.
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Mapping, Tuple

import numpy as np

from breakfast_finder.utils.types import BoundingBox, Detection, TrackedState


@dataclass(frozen=True)
class TrackerConfig:
    confidence_threshold: float = 0.5
    bucket_size: float = 50.0
    match_distance_threshold: float = 100.0
    smoothing_factor: float = 0.7

    def __post_init__(self):
        if not 0.0 <= self.confidence_threshold <= 1.0:
            raise ValueError(f"confidence_threshold must be in [0, 1], got {self.confidence_threshold}")
        if not 0 < self.bucket_size < math.inf:
            raise ValueError(f"bucket_size must be positive and finite, got {self.bucket_size}")
        if not self.match_distance_threshold > 0:
            raise ValueError(
                f"match_distance_threshold must be positive, got {self.match_distance_threshold}"
            )
        if not 0.0 <= self.smoothing_factor <= 1.0:
            raise ValueError(f"smoothing_factor must be in [0, 1], got {self.smoothing_factor}")


def _bucket(value: float, bucket_size: float) -> str:
    snapped = math.floor(value / bucket_size) * bucket_size
    if float(snapped).is_integer():
        return str(int(snapped))
    return str(snapped)


def tracking_key(label: str, box: BoundingBox, bucket_size: float) -> str:
    return f"{label}_{_bucket(box.center_x, bucket_size)}_{_bucket(box.center_y, bucket_size)}"


def _center_distance(a: BoundingBox, b: BoundingBox) -> float:
    return float(np.hypot(a.center_x - b.center_x, a.center_y - b.center_y))


def find_best_match(
    detection: Detection,
    previous_state: Mapping[str, BoundingBox],
    max_distance: float,
) -> Tuple[str, BoundingBox, float] | None:
    """
    Nearest previous box whose key starts with "<label>_" and whose center
    lies strictly within max_distance.
    Entries are scanned in mapping order and equal distances keep the earlier entry.
    """
    prefix = detection.label + "_"
    best: Tuple[str, BoundingBox, float] | None = None
    for prev_key, prev_box in previous_state.items():
        if not prev_key.startswith(prefix):
            continue
        distance = _center_distance(prev_box, detection.box)
        if distance >= max_distance:
            continue
        if best is None or distance < best[2]:
            best = (prev_key, prev_box, distance)
    return best


def smooth_box(current: BoundingBox, previous: BoundingBox, factor: float) -> BoundingBox:
    return BoundingBox(
        x=previous.x * factor + current.x * (1 - factor),
        y=previous.y * factor + current.y * (1 - factor),
        width=previous.width * factor + current.width * (1 - factor),
        height=previous.height * factor + current.height * (1 - factor),
    )


def update(
    raw_detections: List[Detection],
    previous_state: Mapping[str, BoundingBox],
    config: TrackerConfig = TrackerConfig(),
) -> Tuple[List[Detection], TrackedState]:
    smoothed: List[Detection] = []
    new_state: TrackedState = {}
    matched = 0

    for det in raw_detections:
        # also drops NaN confidences
        if not det.confidence > config.confidence_threshold:
            continue

        key = tracking_key(det.label, det.box, config.bucket_size)
        box = det.box
        match = find_best_match(det, previous_state, config.match_distance_threshold)
        if match is not None:
            box = smooth_box(det.box, match[1], config.smoothing_factor)
            matched += 1

        # colliding keys within a frame: last write wins
        new_state[key] = box
        smoothed.append(det.with_box(box))

    logging.debug(
        "Smoother: %d raw, %d kept, %d matched, %d keys",
        len(raw_detections),
        len(smoothed),
        matched,
        len(new_state),
    )
    return smoothed, new_state


class DetectionSmoother:
    """
    Owns the previous-frame state for a single caller. Not thread-safe:
    calls must be serialized, one frame at a time.
    """

    def __init__(self, config: TrackerConfig | None = None):
        self.config = config or TrackerConfig()
        self.state: TrackedState = {}
        self.frames_processed = 0

    def update(self, detections: List[Detection]) -> List[Detection]:
        smoothed, self.state = update(detections, self.state, self.config)
        self.frames_processed += 1
        return smoothed

    def reset(self) -> None:
        self.state = {}
        self.frames_processed = 0
