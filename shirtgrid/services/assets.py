import logging
from dataclasses import dataclass
from io import BytesIO
from typing import Generic, Optional, TypeVar, Union

from PIL import Image, UnidentifiedImageError

log = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Pending:
    request_id: int


@dataclass(frozen=True)
class Ready(Generic[T]):
    request_id: int
    value: T


@dataclass(frozen=True)
class Failed:
    request_id: int
    reason: str


LoadState = Union[Pending, Ready, Failed]


class AssetLoader(Generic[T]):
    """
    Tracks one asset (artwork or mockup photo) across loads.

    Each load is tagged with the id handed out by begin(); a resolve() or
    reject() for anything but the newest id is discarded. A failure keeps the
    last Ready value so the editor keeps rendering what it had.
    """

    def __init__(self, name: str):
        self.name = name
        self._next_id = 0
        self.state: Optional[LoadState] = None
        self.current: Optional[T] = None

    @property
    def latest_request(self) -> int:
        return self._next_id

    @property
    def pending(self) -> bool:
        return isinstance(self.state, Pending)

    def begin(self) -> int:
        self._next_id += 1
        self.state = Pending(self._next_id)
        return self._next_id

    def _is_stale(self, request_id: int) -> bool:
        if request_id != self._next_id:
            log.debug("[ASSET] Discarding stale %s load #%s (newest #%s)", self.name, request_id, self._next_id)
            return True
        return False

    def resolve(self, request_id: int, value: T) -> bool:
        if self._is_stale(request_id):
            return False
        self.state = Ready(request_id, value)
        self.current = value
        return True

    def reject(self, request_id: int, reason: str) -> bool:
        if self._is_stale(request_id):
            return False
        self.state = Failed(request_id, reason)
        log.warning("[ASSET] %s load #%s failed: %s", self.name, request_id, reason)
        return True

    def clear(self) -> None:
        self._next_id += 1
        self.state = None
        self.current = None


@dataclass(frozen=True)
class Artwork:
    """Decoded upload. `data` keeps the original encoding for saving into a project."""

    image: Image.Image
    data: bytes
    mimetype: str

    @property
    def width(self) -> int:
        return self.image.width

    @property
    def height(self) -> int:
        return self.image.height

    @property
    def size(self):
        return self.image.size

    @property
    def ratio(self) -> float:
        return self.image.width / self.image.height


def decode_artwork(data: bytes) -> Artwork:
    """Raises ValueError when the bytes are not a decodable, non-empty image."""
    if not data:
        raise ValueError("empty upload")
    try:
        with Image.open(BytesIO(data)) as img:
            img.load()
            fmt = img.format or "PNG"
            image = img.convert("RGBA")
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as e:
        raise ValueError(f"not a readable image: {e}")
    if image.width <= 0 or image.height <= 0:
        raise ValueError("image has no pixels")
    mimetype = Image.MIME.get(fmt, "image/png")
    return Artwork(image=image, data=bytes(data), mimetype=mimetype)
