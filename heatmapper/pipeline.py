"""
Blend pipeline driver.

Wires the pieces together: discover input files, decode and fold them into a
running average, adjust saturation, and write the result.  Nothing is written
unless every stage before encoding succeeded.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, List, Optional

from .blend import BlendState, blend_images
from .buffer import PixelBuffer
from .config import HeatMapConfig
from .errors import NullBuffer
from .imaging import discover_images, iter_buffers, save_buffer
from .saturation import ClampPolicy, apply_saturation, quantize

logger = logging.getLogger(__name__)

StageObserver = Callable[[str, PixelBuffer], None]


@dataclass
class PipelineResult:
    """Outcome of a single pipeline run."""

    output_path: Path
    blended: PixelBuffer
    final: PixelBuffer
    image_paths: List[Path] = field(default_factory=list)


def _notify(observer: Optional[StageObserver], stage: str, buffer: PixelBuffer) -> None:
    """Forward an intermediate buffer to the observer, if one is registered."""
    if not observer:
        return
    try:
        observer(stage, buffer)
    except Exception as exc:  # pylint: disable=broad-except
        logger.warning("Observer failed during %s stage: %s", stage, exc)


def run_pipeline(cfg: HeatMapConfig, observer: Optional[StageObserver] = None) -> PipelineResult:
    """Blend every image under ``cfg.input_dir`` and save the saturated result.

    Args:
        cfg: Run configuration.
        observer: Optional ``(stage, buffer)`` callable called with stage
            ``"blend"`` after every fold step and ``"saturate"`` once at the end.

    Raises:
        NullBuffer: if no input images are found.
        DimensionMismatch: if the inputs do not share one size.
        DecodeFailure / EncodeFailure: on I/O errors.
    """
    output_path = Path(cfg.output)
    image_paths = discover_images(
        cfg.input_dir,
        recursive=cfg.recursive,
        extensions=cfg.extensions,
        exclude=[output_path],
    )
    if not image_paths:
        raise NullBuffer(f"No images matching {', '.join(cfg.extensions)} found in {cfg.input_dir}")

    logger.info("Found %d image(s) in %s", len(image_paths), cfg.input_dir)

    def _on_fold(state: BlendState) -> None:
        logger.debug("Folded image %d/%d", state.images_seen, len(image_paths))
        _notify(observer, "blend", state.composed)

    blended = blend_images(iter_buffers(image_paths), observer=_on_fold)
    logger.info(
        "Blended %d image(s); saturating with factor %s (clamp=%s)",
        len(image_paths), cfg.saturation, ClampPolicy(cfg.clamp).value,
    )

    final = quantize(apply_saturation(blended, cfg.saturation), cfg.clamp)
    _notify(observer, "saturate", final)

    save_buffer(final, output_path)
    logger.info("Saved blended image to %s", output_path)

    return PipelineResult(
        output_path=output_path,
        blended=blended,
        final=final,
        image_paths=image_paths,
    )
