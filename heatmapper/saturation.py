"""Global saturation adjustment through a 3x3 luminance-preserving colour matrix.

For a factor ``s`` the matrix interpolates between the grey projection
(every channel replaced by luma) at ``s = 0`` and the identity at ``s = 1``;
``s > 1`` pushes colours away from grey and ``s < 0`` inverts hue around it.

The transform itself never clamps.  Out-of-range samples are only resolved
when :func:`quantize` turns the float result back into an 8-bit buffer.
"""

from __future__ import annotations

from enum import Enum
from typing import Union

import numpy as np

from .buffer import PixelBuffer
from .errors import NonFiniteSample, NullBuffer

# Luma weights for linear RGB.  They sum to 1.0 so grey stays grey.
RW = 0.3086
RG = 0.6094
RB = 0.0820
LUMA_WEIGHTS = (RW, RG, RB)


class ClampPolicy(str, Enum):
    CLIP = "clip"    # saturate to [0, 255]
    WRAP = "wrap"    # keep the low 8 bits, as a packed-int raster would


def color_matrix(s: float) -> np.ndarray:
    """Return the saturation matrix for factor ``s`` (row-major, ``out = M @ in``)."""
    t = 1.0 - s
    return np.array(
        [
            [t * RW + s, t * RG, t * RB],
            [t * RW, t * RG + s, t * RB],
            [t * RW, t * RG, t * RB + s],
        ],
        dtype=np.float64,
    )


def apply_saturation(buffer: PixelBuffer, s: float) -> np.ndarray:
    """Apply the saturation matrix to every pixel.

    Returns a float64 ``(H, W, 3)`` array.  Values are not clamped and may
    be negative or above 255 for ``s`` outside [0, 1].  For a finite ``s``
    so large that the products overflow, samples become ``+inf``/``-inf``
    on the side the exact result lies, never NaN.

    Raises:
        NullBuffer: if ``buffer`` is None.
    """
    if buffer is None:
        raise NullBuffer("Cannot saturate a missing buffer")

    m = color_matrix(s)
    src = buffer.pixels.astype(np.float64)
    r, g, b = src[..., 0], src[..., 1], src[..., 2]

    with np.errstate(over="ignore", invalid="ignore"):
        # Summed term by term so results are identical on every BLAS backend.
        out = np.empty_like(src)
        for row in range(3):
            out[..., row] = m[row, 0] * r + m[row, 1] * g + m[row, 2] * b

        overflowed = ~np.isfinite(out)
        if overflowed.any():
            # luma + s * (c - luma) has no inf - inf term
            luma = (RW * r + RG * g + RB * b)[..., np.newaxis]
            stable = luma + s * (src - luma)
            out[overflowed] = stable[overflowed]
    return out


def quantize(samples: np.ndarray, policy: Union[ClampPolicy, str] = ClampPolicy.CLIP) -> PixelBuffer:
    """Convert float samples back into an 8-bit buffer.

    Values are truncated toward zero first, then brought into range according
    to ``policy``.  ``clip`` sends ``+inf`` to 255 and ``-inf`` to 0.

    Raises:
        NonFiniteSample: on NaN samples, or infinite samples under ``wrap``.
    """
    policy = ClampPolicy(policy)
    samples = np.asarray(samples, dtype=np.float64)
    if np.isnan(samples).any():
        raise NonFiniteSample("Cannot quantize NaN samples")

    truncated = np.trunc(samples)
    if policy is ClampPolicy.CLIP:
        out = np.clip(truncated, 0, 255).astype(np.uint8)
    else:
        if np.isinf(truncated).any():
            raise NonFiniteSample("Cannot wrap infinite samples into 8 bits")
        # float modulo is exact, so huge values keep their true low 8 bits
        out = np.mod(truncated, 256).astype(np.uint8)
    return PixelBuffer(out)


def saturate(
    buffer: PixelBuffer,
    s: float,
    policy: Union[ClampPolicy, str] = ClampPolicy.CLIP,
) -> PixelBuffer:
    """Adjust saturation and quantize in one step."""
    return quantize(apply_saturation(buffer, s), policy)
