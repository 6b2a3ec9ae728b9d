"""Error taxonomy shared by the blend core, the image I/O helpers and the CLI."""

from __future__ import annotations


class HeatMapperError(Exception):
    """Base class for every error raised by heatmapper."""


class DimensionMismatch(HeatMapperError, ValueError):
    """Two buffers that must share a size do not."""


class NullBuffer(HeatMapperError, ValueError):
    """A required buffer is missing (``None`` or an empty image sequence)."""


class DecodeFailure(HeatMapperError, OSError):
    """An input image could not be read or decoded."""


class EncodeFailure(HeatMapperError, OSError):
    """The output image could not be encoded or written."""


class ConfigError(HeatMapperError, ValueError):
    """Configuration values are malformed."""


class NonFiniteSample(HeatMapperError, ValueError):
    """A saturated sample is NaN, or infinite where no clamp can resolve it."""
