"""Configuration loading utilities for spatialconv."""

from .schema import (
    BearingConfig,
    ConversionConfig,
    load_config,
)

__all__ = ["BearingConfig", "ConversionConfig", "load_config"]
