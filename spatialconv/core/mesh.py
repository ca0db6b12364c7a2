from __future__ import annotations
from dataclasses import dataclass, field
from functools import cached_property
from typing import Dict, Iterable, Iterator, List, Sequence, Tuple
import numpy as np

from .errors import ComputationFailure, InvalidArgument
from .primitives import BoundingBox, Point3D, Triangle3D, Vector3D


@dataclass(frozen=True)
class Face:
    """Polygon given by indices into a mesh's vertex list.

    Polygons are split by fan triangulation from the first index, which is
    only correct for convex planar faces.
    """
    indices: Tuple[int, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "indices", tuple(int(i) for i in self.indices))
        if len(self.indices) < 3:
            raise InvalidArgument("Face must have at least 3 vertices")

    @property
    def triangle_count(self) -> int:
        return len(self.indices) - 2

    def to_triangles(self, vertices: Sequence[Point3D]) -> List[Triangle3D]:
        n = len(vertices)
        for idx in self.indices:
            if idx < 0 or idx >= n:
                raise ComputationFailure(f"Face references invalid vertex index {idx}")
        i0 = self.indices[0]
        return [
            Triangle3D(vertices[i0], vertices[self.indices[i]], vertices[self.indices[i + 1]])
            for i in range(1, len(self.indices) - 1)
        ]

    @staticmethod
    def triangle(i0: int, i1: int, i2: int) -> "Face":
        return Face((i0, i1, i2))

    @staticmethod
    def quad(i0: int, i1: int, i2: int, i3: int) -> "Face":
        return Face((i0, i1, i2, i3))


@dataclass(frozen=True)
class MeshMetadata:
    name: str = ""
    source_format: str = ""
    properties: Dict[str, str] = field(default_factory=dict)


class _TriangleView:
    """Restartable lazy iterable over a mesh's fan triangles."""

    def __init__(self, mesh: "Mesh") -> None:
        self._mesh = mesh

    def __iter__(self) -> Iterator[Triangle3D]:
        vertices = self._mesh.vertices
        for face in self._mesh.faces:
            yield from face.to_triangles(vertices)

    def __len__(self) -> int:
        return self._mesh.triangle_count


@dataclass(frozen=True)
class Mesh:
    """Indexed mesh: vertices are stored once and faces refer to them by index.

    Out-of-range face indices are not rejected here; :meth:`validate` lists
    them and :meth:`triangles` raises on the first one it reaches.
    """
    vertices: Tuple[Point3D, ...]
    faces: Tuple[Face, ...]
    normals: Tuple[Vector3D, ...] = ()
    metadata: MeshMetadata = field(default_factory=MeshMetadata)

    def __post_init__(self) -> None:
        object.__setattr__(self, "vertices", tuple(self.vertices))
        object.__setattr__(self, "faces", tuple(self.faces))
        object.__setattr__(self, "normals", tuple(self.normals))

    @property
    def triangle_count(self) -> int:
        return sum(face.triangle_count for face in self.faces)

    @cached_property
    def bounding_box(self) -> BoundingBox:
        return BoundingBox.from_points(self.vertices)

    def triangles(self) -> Iterable[Triangle3D]:
        return _TriangleView(self)

    def validate(self) -> List[str]:
        errors: List[str] = []
        vertex_count = len(self.vertices)
        for face_index, face in enumerate(self.faces):
            for vertex_index in face.indices:
                if vertex_index < 0 or vertex_index >= vertex_count:
                    errors.append(f"Face {face_index} references invalid vertex index {vertex_index}")
        return errors

    def vertex_array(self) -> np.ndarray:
        if not self.vertices:
            return np.zeros((0, 3), dtype=np.float64)
        return np.asarray([tuple(v) for v in self.vertices], dtype=np.float64)

