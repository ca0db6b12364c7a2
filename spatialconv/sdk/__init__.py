"""Programmatic entry points mirroring the CLI."""

from .run import ConversionRunResult, convert_from_config

__all__ = ["ConversionRunResult", "convert_from_config"]
