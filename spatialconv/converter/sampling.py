from __future__ import annotations
from dataclasses import dataclass
from typing import List, Optional, Union
import math
import numpy as np

from ..core.errors import ComputationFailure, InvalidArgument
from ..core.mesh import Mesh
from ..core.pointcloud import PointCloud, PointCloudMetadata, points_from_array
from ..core.primitives import Triangle3D
from ..core.utils import get_logger

_log = get_logger()


@dataclass(frozen=True)
class VerticesOnly:
    """Emit the mesh vertices verbatim."""


@dataclass(frozen=True)
class UniformSurface:
    """``max(1, floor(area * points_per_unit))`` samples per triangle."""
    points_per_unit: float = 100.0

    def __post_init__(self) -> None:
        if not self.points_per_unit > 0:
            raise InvalidArgument("points_per_unit must be positive")


@dataclass(frozen=True)
class FixedCount:
    """Area-weighted allocation of ``total_points`` samples.

    Each triangle gets ``max(1, floor(total_points * A_i / sum(A)))`` samples
    and the concatenation is truncated to ``total_points``. Many small
    triangles can therefore crowd out the last triangles of the mesh; the
    count is approximate below ``total_points``, never above.
    """
    total_points: int

    def __post_init__(self) -> None:
        if int(self.total_points) != self.total_points or self.total_points <= 0:
            raise InvalidArgument("total_points must be a positive integer")
        object.__setattr__(self, "total_points", int(self.total_points))


SamplingStrategy = Union[VerticesOnly, UniformSurface, FixedCount]


class MeshToPointCloudConverter:
    """Mesh → position-only point cloud.

    Surface strategies draw barycentric samples from ``rng``; pass a seeded
    ``numpy.random.Generator`` for reproducible output.
    """

    def __init__(self, strategy: Optional[SamplingStrategy] = None, rng: Optional[np.random.Generator] = None) -> None:
        self.strategy: SamplingStrategy = strategy if strategy is not None else VerticesOnly()
        self.rng = rng if rng is not None else np.random.default_rng()

    def convert(self, input: Mesh) -> PointCloud:
        mesh = input
        match self.strategy:
            case VerticesOnly():
                points = mesh.vertices
            case UniformSurface(points_per_unit=ppu):
                points = points_from_array(self._sample_surface(mesh, ppu))
            case FixedCount(total_points=total):
                points = points_from_array(self._sample_fixed_count(mesh, total))
            case _:
                raise InvalidArgument(f"Unsupported sampling strategy: {self.strategy!r}")

        _log.debug("Sampled %s: %d vertices → %d points", type(self.strategy).__name__, len(mesh.vertices), len(points))
        return PointCloud(
            points=points,
            metadata=PointCloudMetadata(
                name=mesh.metadata.name,
                source_format="mesh",
                properties={"original_vertices": str(len(mesh.vertices))},
            ),
        )

    # -- strategies --
    def _sample_surface(self, mesh: Mesh, points_per_unit: float) -> np.ndarray:
        self._check_indices(mesh)
        chunks: List[np.ndarray] = []
        n_tris = 0
        for tri in mesh.triangles():
            n_tris += 1
            count = max(1, math.floor(tri.area * points_per_unit))
            chunks.append(self._random_points_in_triangle(tri, count))
        _log.info("Sampler finished: %d triangles → %d points", n_tris, sum(len(c) for c in chunks))
        return np.vstack(chunks) if chunks else np.zeros((0, 3), dtype=np.float64)

    def _sample_fixed_count(self, mesh: Mesh, total_points: int) -> np.ndarray:
        self._check_indices(mesh)
        triangles = list(mesh.triangles())
        if not triangles:
            return np.zeros((0, 3), dtype=np.float64)

        areas = np.array([t.area for t in triangles], dtype=np.float64)
        total_area = float(areas.sum())
        if total_area > 0:
            weights = areas / total_area
        else:
            # all triangles degenerate
            weights = np.full(len(triangles), 1.0 / len(triangles))

        chunks: List[np.ndarray] = []
        drawn = 0
        for tri, weight in zip(triangles, weights):
            if drawn >= total_points:
                break
            count = max(1, math.floor(total_points * float(weight)))
            chunks.append(self._random_points_in_triangle(tri, count))
            drawn += count
        xyz = np.vstack(chunks)[:total_points]
        if len(xyz) < total_points:
            _log.debug("FixedCount(%d) realised %d points", total_points, len(xyz))
        _log.info("Sampler finished: %d triangles → %d points", len(triangles), len(xyz))
        return xyz

    # -- helpers --
    @staticmethod
    def _check_indices(mesh: Mesh) -> None:
        errors = mesh.validate()
        if errors:
            raise ComputationFailure(f"Mesh has {len(errors)} invalid face indices: {errors[0]}")

    def _random_points_in_triangle(self, t: Triangle3D, count: int) -> np.ndarray:
        """Uniform samples inside ``t`` by parallelogram folding."""
        r = self.rng.random((count, 2))
        fold = r.sum(axis=1) > 1.0
        r[fold] = 1.0 - r[fold]
        r1 = r[:, 0:1]
        r2 = r[:, 1:2]
        r3 = np.clip(1.0 - r1 - r2, 0.0, None)
        return r1 * t.v0.to_array() + r2 * t.v1.to_array() + r3 * t.v2.to_array()
