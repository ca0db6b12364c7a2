from .base import Converter, FormatReader, FormatWriter
from .bearing import (
    Bearing2D,
    VelocityToBearingConverter,
    VelocitySequenceToBearingConverter,
    smooth_velocities,
)
from .coordinates import CoordinateTransformer
from .sampling import (
    FixedCount,
    MeshToPointCloudConverter,
    SamplingStrategy,
    UniformSurface,
    VerticesOnly,
)

__all__ = [
    "Converter",
    "FormatReader",
    "FormatWriter",
    "Bearing2D",
    "VelocityToBearingConverter",
    "VelocitySequenceToBearingConverter",
    "smooth_velocities",
    "CoordinateTransformer",
    "FixedCount",
    "MeshToPointCloudConverter",
    "SamplingStrategy",
    "UniformSurface",
    "VerticesOnly",
]
