"""Image discovery, decoding and encoding around :class:`PixelBuffer`."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Sequence, Union

from PIL import Image, UnidentifiedImageError

from .buffer import PixelBuffer
from .errors import DecodeFailure, EncodeFailure

logger = logging.getLogger(__name__)

IMAGE_EXTENSIONS = (".png",)

PathLike = Union[str, Path]


def discover_images(
    directory: PathLike,
    recursive: bool = True,
    extensions: Sequence[str] = IMAGE_EXTENSIONS,
    exclude: Iterable[PathLike] = (),
) -> List[Path]:
    """Collect image files below ``directory`` in a reproducible order.

    Paths are resolved to absolute form, deduplicated and sorted by their
    string form; the blend result depends on this order.
    """
    root = Path(directory)
    if not root.is_dir():
        raise FileNotFoundError(f"Input directory not found: {root}")

    suffixes = {ext.lower() if ext.startswith(".") else f".{ext.lower()}" for ext in extensions}
    excluded = {Path(p).resolve() for p in exclude}

    iterator = root.rglob("*") if recursive else root.iterdir()
    seen: set[Path] = set()
    for candidate in iterator:
        if not candidate.is_file():
            continue
        if candidate.suffix.lower() not in suffixes:
            continue
        resolved = candidate.resolve()
        if resolved in excluded:
            logger.debug("Skipping excluded file %s", resolved)
            continue
        seen.add(resolved)

    return sorted(seen, key=str)


def load_buffer(path: PathLike) -> PixelBuffer:
    """Decode an image file into an RGB buffer.

    Transparent pixels, including colour-keyed ones, are composited over
    opaque black; palette and greyscale images are expanded to RGB.
    """
    path = Path(path)
    try:
        with Image.open(path) as pil:
            pil.load()
            if pil.mode in ("RGBA", "LA", "PA") or "transparency" in pil.info:
                rgba = pil.convert("RGBA")
                background = Image.new("RGBA", rgba.size, (0, 0, 0, 255))
                rgb = Image.alpha_composite(background, rgba).convert("RGB")
            else:
                rgb = pil.convert("RGB")
    except FileNotFoundError as exc:
        raise DecodeFailure(f"Image not found: {path}") from exc
    except (UnidentifiedImageError, OSError, ValueError) as exc:
        raise DecodeFailure(f"Could not decode image {path}: {exc}") from exc

    return PixelBuffer.from_image(rgb)


def iter_buffers(paths: Iterable[PathLike]) -> Iterator[PixelBuffer]:
    """Decode ``paths`` one at a time, in the given order."""
    for path in paths:
        logger.debug("Decoding %s", path)
        yield load_buffer(path)


def save_buffer(buffer: PixelBuffer, path: PathLike, format: Optional[str] = "PNG") -> Path:
    """Encode ``buffer`` to ``path`` (PNG by default) and return the path."""
    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        buffer.to_image().save(path, format=format)
    except (OSError, ValueError, KeyError) as exc:
        raise EncodeFailure(f"Could not write image {path}: {exc}") from exc
    return path
