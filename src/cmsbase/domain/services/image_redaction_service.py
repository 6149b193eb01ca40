"""Image redaction: canvas composition, region blurring, crop and rotation.

Every coordinate the pipeline works with lives in the canvas frame: the
source image is first scaled to the canvas size, regions are cut from that
scaled copy, blurred and composited back over the unblurred content, and the
crop box is taken from the composited canvas. Rotation is the last step.

Regions may instead be given in the rotated output frame (what a client sees
after rotation); they are then mapped back through the inverse rotation.
"""

import math
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Sequence

from PIL import Image, ImageFilter, UnidentifiedImageError

from cmsbase.core.logging import get_logger
from cmsbase.domain.entities import BlurArea, RedactionRequest, UploadedFile

logger = get_logger(__name__)

OUTPUT_FORMAT = "WEBP"
OUTPUT_EXTENSION = ".webp"
OUTPUT_MIME_TYPE = "image/webp"

Box = tuple[int, int, int, int]


class RedactionError(ValueError):
    """Raised for unusable redaction parameters or undecodable images."""


@dataclass(frozen=True, slots=True)
class RedactedImage:
    """One encoded output file."""

    filename: str
    path: str
    mimetype: str = OUTPUT_MIME_TYPE


def _clip(box: tuple[float, float, float, float], width: int, height: int) -> Box | None:
    left = max(0, math.floor(box[0]))
    top = max(0, math.floor(box[1]))
    right = min(width, math.ceil(box[2]))
    bottom = min(height, math.ceil(box[3]))
    if right <= left or bottom <= top:
        return None
    return (left, top, right, bottom)


def crop_box(request: RedactionRequest) -> Box:
    """Crop rectangle on the canvas.

    Raises:
        RedactionError: If the margins leave no pixels or go outside the canvas.
    """
    crop = request.crop
    if min(crop.left, crop.top, crop.right, crop.bottom) < 0:
        raise RedactionError("Crop margins must not be negative")
    box = crop.box(request.width, request.height)
    if box[2] <= box[0] or box[3] <= box[1]:
        raise RedactionError("Crop margins leave an empty image")
    return box


def rotated_size(width: int, height: int, angle: float) -> tuple[float, float]:
    """Size of the bounding box of a ``width`` x ``height`` image rotated by ``angle`` degrees."""
    radians = math.radians(angle)
    cos, sin = abs(math.cos(radians)), abs(math.sin(radians))
    return (width * cos + height * sin, width * sin + height * cos)


def region_to_canvas(area: BlurArea, request: RedactionRequest) -> Box | None:
    """Map a blur area into canvas pixels, clipped to the canvas.

    For ``region_frame == "rotated"`` the area's corners are taken through
    the inverse of the clockwise output rotation, about the centre of the
    cropped image, then shifted by the crop offset. The result is the
    bounding box of the mapped corners.

    Returns:
        The canvas box, or None when nothing of the area lies on the canvas.
    """
    if request.region_frame == "canvas":
        return _clip(area.box, request.width, request.height)

    left, top, right, bottom = crop_box(request)
    crop_w, crop_h = right - left, bottom - top
    out_w, out_h = rotated_size(crop_w, crop_h, request.rotate)

    radians = math.radians(request.rotate)
    cos, sin = math.cos(radians), math.sin(radians)

    xs: list[float] = []
    ys: list[float] = []
    x0, y0, x1, y1 = area.box
    for px, py in ((x0, y0), (x1, y0), (x0, y1), (x1, y1)):
        dx, dy = px - out_w / 2, py - out_h / 2
        # Inverse of the on-screen clockwise rotation (y axis points down).
        sx = dx * cos + dy * sin
        sy = -dx * sin + dy * cos
        xs.append(sx + crop_w / 2 + left)
        ys.append(sy + crop_h / 2 + top)

    # Rounded so trigonometric noise does not grow the box by a pixel.
    return _clip(
        (round(min(xs), 6), round(min(ys), 6), round(max(xs), 6), round(max(ys), 6)),
        request.width,
        request.height,
    )


class ImageRedactionService:
    """Runs the redaction pipeline and writes WEBP outputs."""

    def __init__(self, output_dir: str | Path, blur_radius: float = 8) -> None:
        self.output_dir = Path(output_dir)
        self.blur_radius = blur_radius

    def output_names(self, name: str, count: int) -> list[str]:
        """File names for ``count`` outputs of one request."""
        base = Path(name).name
        if not base:
            raise RedactionError("An output name is required")
        if count == 1:
            return [f"{base}{OUTPUT_EXTENSION}"]
        return [f"{base}-{index}{OUTPUT_EXTENSION}" for index in range(1, count + 1)]

    def validate(self, request: RedactionRequest) -> None:
        if request.width <= 0 or request.height <= 0:
            raise RedactionError("Canvas width and height must be positive")
        crop_box(request)

    def render(self, source: bytes, request: RedactionRequest) -> Image.Image:
        """Produce the redacted image for one source, without encoding it."""
        try:
            original = Image.open(BytesIO(source))
            original.load()
        except (UnidentifiedImageError, OSError) as e:
            raise RedactionError(f"Unreadable image: {e}") from e

        scaled = original.convert("RGBA").resize((request.width, request.height))
        canvas = Image.new("RGBA", (request.width, request.height), (0, 0, 0, 0))
        canvas.alpha_composite(scaled)

        blur = ImageFilter.GaussianBlur(radius=self.blur_radius)
        for area in request.blur_areas:
            box = region_to_canvas(area, request)
            if box is None:
                continue
            patch = scaled.crop(box).filter(blur)
            canvas.alpha_composite(patch, dest=(box[0], box[1]))

        result = canvas.crop(crop_box(request))
        if request.rotate % 360:
            # PIL rotates counter-clockwise; the request angle is clockwise.
            result = result.rotate(-request.rotate, expand=True, resample=Image.Resampling.BICUBIC)
        return result

    def redact(self, uploads: Sequence[UploadedFile], request: RedactionRequest) -> list[RedactedImage]:
        """Redact every upload and write one WEBP file per upload.

        Raises:
            RedactionError: On invalid parameters or unreadable images.
            OSError: If the output directory or files cannot be written.
        """
        if not uploads:
            raise RedactionError("At least one image is required")
        self.validate(request)

        names = self.output_names(request.name, len(uploads))
        self.output_dir.mkdir(parents=True, exist_ok=True)

        # Every source is decoded before the first file is written.
        images = [self.render(upload.content, request) for upload in uploads]

        outputs: list[RedactedImage] = []
        for upload, image, filename in zip(uploads, images, names):
            destination = self.output_dir / filename
            image.save(destination, OUTPUT_FORMAT)
            logger.info(
                "Redacted image written",
                source=upload.filename,
                path=str(destination),
                regions=len(request.blur_areas),
                rotate=request.rotate,
            )
            outputs.append(RedactedImage(filename=filename, path=str(destination)))
        return outputs
