import math
from dataclasses import dataclass
from io import BytesIO
from typing import Optional, Sequence, Tuple

from PIL import Image

from .mockups import render_composite
from .placement import ComputedBox

FORMATS = {
    "JPEG": ("jpg", "image/jpeg"),
    "PNG": ("png", "image/png"),
    "WEBP": ("webp", "image/webp"),
}
DEFAULT_QUALITY = 85


@dataclass(frozen=True)
class ExportResult:
    encoded_bytes: bytes
    estimated_size_mb: float
    quality: int
    format: str
    filename: str

    @property
    def mimetype(self) -> str:
        return FORMATS[self.format][1]

    def describe_size(self) -> str:
        return describe_size(len(self.encoded_bytes))


def normalize_format(fmt: Optional[str]) -> str:
    name = str(fmt or "JPEG").strip().upper()
    if name == "JPG":
        name = "JPEG"
    if name not in FORMATS:
        raise ValueError(f"format must be one of {sorted(FORMATS)}")
    return name


def clamp_quality(quality) -> int:
    num = float(quality)
    if not math.isfinite(num):
        raise ValueError("quality must be finite")
    return max(1, min(100, int(round(num))))


def size_in_mb(num_bytes: int) -> float:
    return round(num_bytes / (1024 * 1024), 2)


def describe_size(num_bytes: int) -> str:
    if num_bytes >= 1024 * 1024:
        return f"{num_bytes / (1024 * 1024):.2f} MB"
    if num_bytes >= 1024:
        return f"{num_bytes / 1024:.1f} KB"
    return f"{num_bytes} B"


def encode_image(frame: Image.Image, fmt: str, quality: int) -> bytes:
    buf = BytesIO()
    if fmt == "PNG":
        # Lossless; quality has no meaning here.
        frame.save(buf, "PNG", optimize=True)
    elif fmt == "JPEG":
        frame.convert("RGB").save(buf, "JPEG", quality=quality, optimize=True)
    else:
        frame.save(buf, fmt, quality=quality)
    return buf.getvalue()


def export_composite(canvas_size: Tuple[int, int], background: Optional[Image.Image],
                     artwork: Image.Image, boxes: Sequence[ComputedBox], mockup_id: int,
                     quality=DEFAULT_QUALITY, fmt: str = "JPEG") -> ExportResult:
    """Render onto a fresh overlay-free surface and encode it."""
    fmt = normalize_format(fmt)
    quality = clamp_quality(quality)
    frame = render_composite(canvas_size, background, artwork, boxes)
    data = encode_image(frame, fmt, quality)
    ext = FORMATS[fmt][0]
    return ExportResult(
        encoded_bytes=data,
        estimated_size_mb=size_in_mb(len(data)),
        quality=quality,
        format=fmt,
        filename=f"tshirt-mockup-{mockup_id}.{ext}",
    )
