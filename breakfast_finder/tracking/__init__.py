from .smoother import (
    DetectionSmoother,
    TrackerConfig,
    find_best_match,
    smooth_box,
    tracking_key,
    update,
)

__all__ = [
    "DetectionSmoother",
    "TrackerConfig",
    "find_best_match",
    "smooth_box",
    "tracking_key",
    "update",
]
