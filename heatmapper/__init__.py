"""Public interface for the heatmapper image blending toolkit."""

from __future__ import annotations

from .blend import BlendState, blend_images, blend_pair, fold, start_blend
from .buffer import PixelBuffer
from .config import HeatMapConfig, load_config, save_config
from .errors import (
    ConfigError,
    DecodeFailure,
    DimensionMismatch,
    EncodeFailure,
    HeatMapperError,
    NonFiniteSample,
    NullBuffer,
)
from .pipeline import PipelineResult, run_pipeline
from .saturation import (
    LUMA_WEIGHTS,
    ClampPolicy,
    apply_saturation,
    color_matrix,
    quantize,
    saturate,
)

__all__ = [
    "BlendState",
    "ClampPolicy",
    "ConfigError",
    "DecodeFailure",
    "DimensionMismatch",
    "EncodeFailure",
    "HeatMapConfig",
    "HeatMapperError",
    "LUMA_WEIGHTS",
    "NonFiniteSample",
    "NullBuffer",
    "PipelineResult",
    "PixelBuffer",
    "apply_saturation",
    "blend_images",
    "blend_pair",
    "color_matrix",
    "fold",
    "load_config",
    "quantize",
    "run_pipeline",
    "saturate",
    "save_config",
    "start_blend",
]
