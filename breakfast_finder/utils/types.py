from dataclasses import dataclass, field, replace
from typing import Dict, List, Tuple


@dataclass(frozen=True)
class BoundingBox:
    """
    Axis-aligned box in display pixels, (x, y) = top-left corner.
    """

    x: float
    y: float
    width: float
    height: float

    @property
    def center_x(self) -> float:
        return self.x + self.width / 2.0

    @property
    def center_y(self) -> float:
        return self.y + self.height / 2.0

    @property
    def center(self) -> Tuple[float, float]:
        return self.center_x, self.center_y

    def as_list(self) -> List[float]:
        return [self.x, self.y, self.width, self.height]


@dataclass(frozen=True)
class Detection:
    label: str
    confidence: float
    box: BoundingBox

    def with_box(self, box: BoundingBox) -> "Detection":
        return replace(self, box=box)


@dataclass
class RecognizedObject:
    """
    Multi-label observation as reported by the detector, labels ordered best first.
    """

    confidence: float
    box: BoundingBox
    labels: List[Tuple[str, float]] = field(default_factory=list)

    @property
    def top_label(self) -> str | None:
        return self.labels[0][0] if self.labels else None


# tracking key -> last smoothed box; insertion order is the match scan order
TrackedState = Dict[str, BoundingBox]
