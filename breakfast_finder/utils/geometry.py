from typing import Tuple

from breakfast_finder.utils.types import BoundingBox, Detection, RecognizedObject


def normalized_to_image_box(box: BoundingBox, image_width: float, image_height: float) -> BoundingBox:
    """
    Map a normalized box with a bottom-left origin (vision framework output)
    to image pixels with a top-left origin.
    """
    x = box.x * image_width
    width = box.width * image_width
    height = box.height * image_height
    # flip the y axis
    y = (1.0 - box.y - box.height) * image_height
    return BoundingBox(x=x, y=y, width=width, height=height)


def to_detection(obj: RecognizedObject, image_size: Tuple[float, float] | None = None) -> Detection | None:
    """
    Reduce an observation to its top label. Returns None when it carries no labels.
    """
    label = obj.top_label
    if label is None:
        return None
    box = obj.box
    if image_size is not None:
        box = normalized_to_image_box(box, image_size[0], image_size[1])
    return Detection(label=label, confidence=obj.confidence, box=box)
