from __future__ import annotations
from typing import List, Optional

from ..converter.base import FormatReader, FormatWriter
from ..core.errors import InvalidArgument, ParseError
from ..core.mesh import Face, Mesh, MeshMetadata
from ..core.primitives import Point3D, Vector3D


class ObjReader(FormatReader[Mesh]):
    """Wavefront OBJ → Mesh.

    Handles ``v``, ``vn``, ``f`` and ``o`` records. Face tokens may carry
    texture/normal references (``1/2/3``, ``1//3``); only the vertex index is
    kept. Indices are 1-based, negative values count back from the last
    vertex read so far. Everything else is ignored.
    """
    supported_extensions = frozenset({"obj"})

    def read(self, content: str) -> Mesh:
        vertices: List[Point3D] = []
        normals: List[Vector3D] = []
        faces: List[Face] = []
        name: Optional[str] = None

        for line_no, raw in enumerate(content.splitlines(), start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            parts = line.split()
            tag = parts[0]
            try:
                if tag == "v":
                    if len(parts) < 4:
                        raise ParseError("Vertex needs 3 coordinates", line=line_no)
                    vertices.append(Point3D(float(parts[1]), float(parts[2]), float(parts[3])))
                elif tag == "vn":
                    if len(parts) < 4:
                        raise ParseError("Normal needs 3 components", line=line_no)
                    normals.append(Vector3D(float(parts[1]), float(parts[2]), float(parts[3])))
                elif tag == "f":
                    indices = [self._vertex_index(tok, len(vertices)) for tok in parts[1:]]
                    faces.append(Face(tuple(indices)))
                elif tag == "o" and name is None:
                    name = " ".join(parts[1:])
            except (ValueError, InvalidArgument) as exc:
                raise ParseError(str(exc), line=line_no) from exc

        # OBJ normals are indexed separately; keep them only when they line up with vertices
        mesh_normals = normals if len(normals) == len(vertices) else []
        return Mesh(vertices, faces, mesh_normals, MeshMetadata(name=name or "", source_format="obj"))

    @staticmethod
    def _vertex_index(token: str, vertex_count: int) -> int:
        idx = int(token.split("/")[0])
        if idx < 0:
            return vertex_count + idx
        if idx == 0:
            raise InvalidArgument("OBJ indices are 1-based; got 0")
        return idx - 1


class ObjWriter(FormatWriter[Mesh]):
    supported_extensions = frozenset({"obj"})

    def write(self, data: Mesh) -> str:
        out: List[str] = []
        if data.metadata.name:
            out.append(f"o {data.metadata.name}")
        for v in data.vertices:
            out.append(f"v {float(v.x)!r} {float(v.y)!r} {float(v.z)!r}")
        for n in data.normals:
            out.append(f"vn {float(n.x)!r} {float(n.y)!r} {float(n.z)!r}")
        for face in data.faces:
            out.append("f " + " ".join(str(i + 1) for i in face.indices))
        return "\n".join(out) + "\n"
