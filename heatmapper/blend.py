"""Running-average blend of an ordered image sequence.

Images are folded left to right.  The first image seeds the composite; the
``i``-th image (1-based) is then mixed in with weight ``1 / i`` while the
composite keeps ``(i - 1) / i``.  Every step truncates back to 8-bit, so the
rounding bias compounds and the result depends on the order of the inputs:
``[A, B, C]`` and ``[A, C, B]`` generally differ in the last bit or so.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable, Iterable, Optional

import numpy as np

from .buffer import PixelBuffer
from .errors import DimensionMismatch, NullBuffer

BlendObserver = Callable[["BlendState"], None]


@dataclass(frozen=True)
class BlendState:
    """Accumulator threaded through the fold."""

    composed: PixelBuffer
    images_seen: int = 1

    def __post_init__(self):
        if self.images_seen < 1:
            raise ValueError("images_seen must be >= 1")

    @property
    def next_weight(self) -> float:
        """Weight the next folded image will receive."""
        return 1 / (self.images_seen + 1)


def blend_pair(a: Optional[PixelBuffer], b: Optional[PixelBuffer], weight: float) -> PixelBuffer:
    """Blend two equally sized buffers channel by channel.

    Computes ``trunc(a * weight + b * (1 - weight))`` in float64 for every
    sample.  Truncation (not rounding) is intentional.

    Args:
        a: Buffer receiving ``weight``.
        b: Buffer receiving ``1 - weight``.
        weight: Fraction of ``a`` to keep, in [0, 1].

    Raises:
        NullBuffer: if either buffer is ``None``.
        DimensionMismatch: if the buffers differ in width or height.
        ValueError: if ``weight`` lies outside [0, 1].
    """
    if a is None:
        raise NullBuffer("first buffer is None")
    if b is None:
        raise NullBuffer("second buffer is None")
    if a.width != b.width:
        raise DimensionMismatch(f"widths not equal: {a.width} != {b.width}")
    if a.height != b.height:
        raise DimensionMismatch(f"heights not equal: {a.height} != {b.height}")
    if not 0.0 <= weight <= 1.0:
        raise ValueError(f"weight must be in [0, 1], got {weight}")

    mixed = a.pixels.astype(np.float64) * weight + b.pixels.astype(np.float64) * (1.0 - weight)
    return PixelBuffer(np.trunc(mixed).astype(np.uint8))


def start_blend(first: Optional[PixelBuffer]) -> BlendState:
    if first is None:
        raise NullBuffer("no image to start the blend from")
    return BlendState(composed=first, images_seen=1)


def fold(state: BlendState, next_image: Optional[PixelBuffer]) -> BlendState:
    """Fold one more image into the running composite, returning a new state."""
    composed = blend_pair(next_image, state.composed, state.next_weight)
    return BlendState(composed=composed, images_seen=state.images_seen + 1)


def blend_images(
    images: Iterable[PixelBuffer],
    observer: Optional[BlendObserver] = None,
) -> PixelBuffer:
    """Blend an ordered sequence of images into their running average.

    ``images`` is consumed lazily in iteration order, so a generator that
    decodes one file at a time keeps memory flat.  Unordered collections are
    rejected because their iteration order is not reproducible.

    Args:
        images: Ordered, non-empty iterable of equally sized buffers.
        observer: Optional callable invoked with the initial state and after
            every fold step.  Its return value is ignored.

    Returns:
        The composed buffer.  A single image is returned unchanged.
    """
    if isinstance(images, (set, frozenset)):
        raise TypeError("images must be an ordered sequence, not a set")

    iterator = iter(images)
    try:
        first = next(iterator)
    except StopIteration:
        raise NullBuffer("no images to blend") from None

    state = start_blend(first)
    if observer is not None:
        observer(state)

    for image in iterator:
        state = fold(state, image)
        if observer is not None:
            observer(state)

    return state.composed
