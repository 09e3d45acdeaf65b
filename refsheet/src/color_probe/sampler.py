from __future__ import annotations

import logging
import math
import threading
from collections import OrderedDict
from collections.abc import Callable, Iterable, Sequence

import numpy as np

from .conversion import color_from_rgb
from .io import ColorExtractionError, DecodeFailure, decode_image, open_image
from .models import Color, ImageHandle, SampledPixel

logger = logging.getLogger(__name__)

CACHE_CAPACITY = 100

CacheKey = tuple[str, int, int]
Decoder = Callable[[ImageHandle], np.ndarray]


class OutOfBounds(ColorExtractionError):
    def __init__(
        self,
        message: str,
        axis: str,
        value: float,
        width: int,
        height: int,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message, cause)
        self.axis = axis
        self.value = value
        self.width = width
        self.height = height


class ExtractionCache:
    """FIFO-bounded map of ``(image, x, y)`` to sampled pixels.

    Reads never refresh an entry; the oldest insert is always evicted first.
    """

    def __init__(self, capacity: int = CACHE_CAPACITY) -> None:
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.capacity = capacity
        self._entries: OrderedDict[CacheKey, SampledPixel] = OrderedDict()
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> SampledPixel | None:
        with self._lock:
            return self._entries.get(key)

    def put(self, key: CacheKey, pixel: SampledPixel) -> None:
        with self._lock:
            if key in self._entries:
                return
            while len(self._entries) >= self.capacity:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug("evicted cached pixel %s", evicted)
            self._entries[key] = pixel

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: object) -> bool:
        with self._lock:
            return key in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


def image_dimensions(image: ImageHandle) -> tuple[int, int]:
    if image.natural_width > 0 and image.natural_height > 0:
        return image.natural_width, image.natural_height
    return image.width, image.height


class PixelSampler:
    def __init__(
        self,
        cache_capacity: int = CACHE_CAPACITY,
        decoder: Decoder | None = None,
    ) -> None:
        self.cache = ExtractionCache(cache_capacity)
        self.decoder = decoder or decode_image
        # decoded images, evicted oldest-first at the pixel cache capacity
        self._surfaces: OrderedDict[str, np.ndarray] = OrderedDict()
        self._surface_lock = threading.Lock()

    def extract_at(self, image: ImageHandle, x: float, y: float) -> Color:
        return self.sample_at(image, x, y).color

    def sample_at(self, image: ImageHandle, x: float, y: float) -> SampledPixel:
        key = _cache_key(image, x, y)
        cached = self.cache.get(key) if key is not None else None
        if cached is not None:
            return cached

        width, height = self._resolve_dimensions(image)
        _check_bounds(x, y, width, height)
        surface = self._surface(image)
        return self._sample(image, surface, x, y)

    def extract_many(
        self, image: ImageHandle, coordinates: Iterable[Sequence[float]]
    ) -> list[Color]:
        points = [(point[0], point[1]) for point in coordinates]
        surface = self._surface(image)
        height, width = surface.shape[:2]

        for x, y in points:
            try:
                _check_bounds(x, y, width, height)
            except OutOfBounds as exc:
                raise OutOfBounds(
                    f"Failed to extract color at coordinates ({_fmt(x)}, {_fmt(y)})",
                    axis=exc.axis,
                    value=exc.value,
                    width=width,
                    height=height,
                    cause=exc,
                ) from exc

        colors: list[Color] = []
        for x, y in points:
            cached = self.cache.get((image.src, int(x), int(y)))
            if cached is None:
                cached = self._sample(image, surface, x, y)
            colors.append(cached.color)
        return colors

    def extract_from_source(self, source: str, x: float, y: float) -> Color:
        return self.extract_at(open_image(source), x, y)

    def clear_cache(self) -> None:
        self.cache.clear()
        with self._surface_lock:
            self._surfaces.clear()

    def cache_size(self) -> int:
        return len(self.cache)

    def surface_count(self) -> int:
        with self._surface_lock:
            return len(self._surfaces)

    def _resolve_dimensions(self, image: ImageHandle) -> tuple[int, int]:
        with self._surface_lock:
            surface = self._surfaces.get(image.src)
        if surface is None:
            width, height = image_dimensions(image)
            if width > 0 and height > 0:
                return width, height
            # size unknown until the pixels are decoded
            surface = self._surface(image)
        height, width = surface.shape[:2]
        return width, height

    def _surface(self, image: ImageHandle) -> np.ndarray:
        with self._surface_lock:
            surface = self._surfaces.get(image.src)
        if surface is not None:
            return surface

        try:
            decoded = self.decoder(image)
        except ColorExtractionError:
            raise
        except Exception as exc:
            raise DecodeFailure(f"Failed to draw image to surface: {image.src}", exc) from exc

        if decoded.ndim < 2 or decoded.shape[0] == 0 or decoded.shape[1] == 0:
            raise DecodeFailure(f"Image has zero intrinsic size: {image.src}")

        with self._surface_lock:
            surface = self._surfaces.setdefault(image.src, decoded)
            while len(self._surfaces) > self.cache.capacity:
                evicted, _ = self._surfaces.popitem(last=False)
                logger.debug("evicted decoded image %s", evicted)
            return surface

    def _sample(
        self, image: ImageHandle, surface: np.ndarray, x: float, y: float
    ) -> SampledPixel:
        height, width = surface.shape[:2]
        # nominal size may exceed what the decoded pixels actually hold
        _check_bounds(x, y, width, height)
        px, py = int(x), int(y)

        try:
            values = surface[py, px]
            if np.ndim(values) == 0:
                rgb = (int(values),) * 3
            else:
                rgb = (int(values[0]), int(values[1]), int(values[2]))
        except (IndexError, TypeError, ValueError) as exc:
            raise DecodeFailure(
                f"Failed to extract pixel data at ({px}, {py}) from {image.src}", exc
            ) from exc

        pixel = SampledPixel(
            color=color_from_rgb(rgb), x=px, y=py, source=image.src
        )
        self.cache.put((image.src, px, py), pixel)
        return pixel


def _cache_key(image: ImageHandle, x: float, y: float) -> CacheKey | None:
    # negative fractions would truncate onto row/column 0
    if not (0 <= x < math.inf and 0 <= y < math.inf):
        return None
    return image.src, int(x), int(y)


def _check_bounds(x: float, y: float, width: int, height: int) -> None:
    if not 0 <= x < width:
        raise OutOfBounds(
            f"X coordinate {_fmt(x)} is out of bounds (image is {width}x{height})",
            axis="x",
            value=x,
            width=width,
            height=height,
        )
    if not 0 <= y < height:
        raise OutOfBounds(
            f"Y coordinate {_fmt(y)} is out of bounds (image is {width}x{height})",
            axis="y",
            value=y,
            width=width,
            height=height,
        )


def _fmt(value: float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)
