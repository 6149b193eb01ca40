"""Parameters of an image redaction request."""

from dataclasses import dataclass, field
from typing import Literal

RegionFrame = Literal["canvas", "rotated"]


@dataclass(frozen=True, slots=True)
class BlurArea:
    """A rectangular region to blur, in pixels."""

    left: int
    top: int
    width: int
    height: int

    @property
    def box(self) -> tuple[int, int, int, int]:
        return (self.left, self.top, self.left + self.width, self.top + self.height)


@dataclass(frozen=True, slots=True)
class CropBounds:
    """Margins removed from each side of the canvas."""

    left: int = 0
    top: int = 0
    right: int = 0
    bottom: int = 0

    def box(self, width: int, height: int) -> tuple[int, int, int, int]:
        return (self.left, self.top, width - self.right, height - self.bottom)


@dataclass(frozen=True)
class RedactionRequest:
    """Everything the redaction pipeline needs besides the source images.

    Attributes:
        name: Output base name (without extension).
        width: Canvas width the source is drawn at.
        height: Canvas height the source is drawn at.
        blur_areas: Regions to blur.
        crop: Crop margins applied to the composited canvas.
        rotate: Clockwise rotation in degrees, applied after cropping.
        region_frame: Coordinate frame of ``blur_areas``.
    """

    name: str
    width: int
    height: int
    blur_areas: tuple[BlurArea, ...] = ()
    crop: CropBounds = field(default_factory=CropBounds)
    rotate: float = 0
    region_frame: RegionFrame = "canvas"
