from __future__ import annotations

from pathlib import Path
from typing import List, Optional, Tuple

import numpy as np

from ..core.mesh import Face, Mesh, MeshMetadata
from ..core.pointcloud import points_from_array, vectors_from_array
from ..core.utils import ensure_unit_vectors
from ..formats.registry import write_file


def _grid_plane(size: float, divisions: int, z: float) -> Tuple[np.ndarray, List[Face]]:
    lin = np.linspace(-size / 2.0, size / 2.0, divisions + 1, dtype=np.float64)
    xv, yv = np.meshgrid(lin, lin, indexing="ij")
    vertices = np.column_stack([xv.ravel(), yv.ravel(), np.full_like(xv.ravel(), z)])

    faces = []
    for i in range(divisions):
        for j in range(divisions):
            idx0 = i * (divisions + 1) + j
            idx1 = idx0 + 1
            idx2 = idx0 + (divisions + 1)
            idx3 = idx2 + 1
            faces.append(Face.quad(idx0, idx2, idx3, idx1))
    return vertices, faces


def _cube(size: float) -> Tuple[np.ndarray, List[Face]]:
    h = size / 2.0
    vertices = np.array([
        [-h, -h, -h],
        [h, -h, -h],
        [h, h, -h],
        [-h, h, -h],
        [-h, -h, h],
        [h, -h, h],
        [h, h, h],
        [-h, h, h],
    ], dtype=np.float64)
    faces = [
        Face.quad(0, 3, 2, 1),  # -z
        Face.quad(5, 6, 7, 4),  # +z
        Face.quad(4, 7, 3, 0),  # -x
        Face.quad(1, 2, 6, 5),  # +x
        Face.quad(3, 7, 6, 2),  # +y
        Face.quad(4, 0, 1, 5),  # -y
    ]
    return vertices, faces


def _compute_vertex_normals(vertices: np.ndarray, faces: List[Face]) -> np.ndarray:
    normals = np.zeros_like(vertices, dtype=np.float64)
    for face in faces:
        idx = np.asarray(face.indices, dtype=np.int64)
        # area-weighted face normal from the fan triangles
        edges = vertices[idx[1:]] - vertices[idx[0]]
        face_normal = np.cross(edges[:-1], edges[1:]).sum(axis=0)
        normals[idx] += face_normal
    return ensure_unit_vectors(normals)


def generate_mesh(preset: str, size: float, path: Optional[Path] = None) -> Mesh:
    preset = preset.lower()
    if preset == "cube":
        vertices, faces = _cube(size)
    elif preset == "plane":
        vertices, faces = _grid_plane(size=size, divisions=10, z=0.0)
    else:
        raise ValueError(f"Unknown synthetic mesh preset '{preset}'.")

    normals = _compute_vertex_normals(vertices, faces)
    mesh = Mesh(
        vertices=points_from_array(vertices),
        faces=faces,
        normals=vectors_from_array(normals),
        metadata=MeshMetadata(name=preset, source_format="synthetic"),
    )
    if path is not None:
        write_file(mesh, path)
    return mesh
