from __future__ import annotations

import io
import json
import logging
from pathlib import Path
from typing import Any

import numpy as np
import requests
from PIL import Image

from .models import ImageHandle

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10


class ColorExtractionError(Exception):
    def __init__(self, message: str, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class DecodeFailure(ColorExtractionError):
    pass


def is_url(source: str | Path) -> bool:
    return str(source).startswith(("http://", "https://"))


def open_image(source: str | Path) -> ImageHandle:
    """Build a handle for ``source``, reading the intrinsic size from the header.

    Local files only have their header parsed here; URLs are left for the
    decode step to fetch.
    """
    src = str(source)
    if is_url(src):
        return ImageHandle(src=src)

    try:
        with Image.open(Path(src)) as image:
            width, height = image.size
    except OSError as exc:
        raise DecodeFailure(f"Failed to load image: {src}", exc) from exc
    return ImageHandle(
        src=src,
        width=width,
        height=height,
        natural_width=width,
        natural_height=height,
    )


def read_image_array(source: str | Path, mode: str = "RGB") -> np.ndarray:
    path_str = str(source)
    if is_url(path_str):
        response = requests.get(path_str, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        image_data = io.BytesIO(response.content)
        with Image.open(image_data) as image:
            return np.asarray(image.convert(mode), dtype=np.uint8)

    with Image.open(Path(source)) as image:
        return np.asarray(image.convert(mode), dtype=np.uint8)


def decode_image(image: ImageHandle) -> np.ndarray:
    if image.pixels is not None:
        return as_rgb_surface(image.pixels)

    logger.debug("decoding image %s", image.src)
    return read_surface(image.src, mode="RGB")


def read_surface(source: str | Path, mode: str = "RGB") -> np.ndarray:
    """Like ``read_image_array`` but raises ``DecodeFailure`` on any load error."""
    try:
        return read_image_array(source, mode=mode)
    except requests.RequestException as exc:
        raise DecodeFailure(f"Failed to load image from URL: {source}", exc) from exc
    except (OSError, ValueError) as exc:
        raise DecodeFailure(f"Failed to decode image: {source}", exc) from exc


def as_rgb_surface(pixels: np.ndarray) -> np.ndarray:
    if pixels.ndim == 2:
        pixels = np.stack([pixels] * 3, axis=-1)
    if pixels.ndim != 3 or pixels.shape[2] < 3:
        raise DecodeFailure("pixels must have shape (H, W), (H, W, 3) or (H, W, 4)")
    return np.asarray(pixels[:, :, :3], dtype=np.uint8)


def as_rgba_surface(pixels: np.ndarray) -> np.ndarray:
    if pixels.ndim == 2:
        pixels = np.stack([pixels] * 3, axis=-1)
    if pixels.ndim != 3 or pixels.shape[2] not in (3, 4):
        raise ValueError("pixels must have shape (H, W), (H, W, 3) or (H, W, 4)")
    if pixels.shape[2] == 3:
        alpha = np.full(pixels.shape[:2] + (1,), 255, dtype=np.uint8)
        pixels = np.concatenate([pixels.astype(np.uint8), alpha], axis=2)
    return np.asarray(pixels, dtype=np.uint8)


def write_json(payload: dict[str, Any], output_path: str | Path) -> None:
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
