"""spatialconv – conversions between meshes, point clouds and motion data.

This package contains:
- Immutable geometry values: Point3D, Vector3D, Triangle3D, BoundingBox (core.primitives)
- Mesh, Face and PointCloud aggregates (core.mesh, core.pointcloud)
- Transform3D affine transforms (core.transform)
- Mesh→point-cloud sampling, coordinate transforms and velocity→bearing
  conversion (converter)
- Text codecs for OBJ, ASCII PLY and JSON (formats)
- A YAML-driven pipeline usable from Python (sdk) or the ``spatialconv`` CLI
"""

from .core.errors import (
    ComputationFailure,
    ConversionError,
    InvalidArgument,
    IoError,
    ParseError,
    SpatialError,
    UnsupportedFormat,
    ValidationError,
)
from .core.primitives import BoundingBox, Point3D, Triangle3D, Vector3D
from .core.mesh import Face, Mesh, MeshMetadata
from .core.pointcloud import Color, CoordinateSystem, PointCloud, PointCloudMetadata
from .core.transform import Transform3D
from .converter import (
    Bearing2D,
    CoordinateTransformer,
    FixedCount,
    MeshToPointCloudConverter,
    UniformSurface,
    VelocitySequenceToBearingConverter,
    VelocityToBearingConverter,
    VerticesOnly,
)
from .formats import read_file, write_file
from .sdk import ConversionRunResult, convert_from_config
