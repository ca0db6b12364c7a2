"""ASCII PLY codecs.

Point clouds use the ``vertex`` element with x/y/z, optional nx/ny/nz,
red/green/blue (or r/g/b) and intensity properties. Meshes additionally read
and write a ``face`` element with a ``vertex_indices`` list property.
Binary PLY is rejected.
"""
from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..converter.base import FormatReader, FormatWriter
from ..core.errors import InvalidArgument, ParseError
from ..core.mesh import Face, Mesh, MeshMetadata
from ..core.pointcloud import Color, PointCloud, PointCloudMetadata
from ..core.primitives import Point3D, Vector3D


@dataclass
class _Element:
    name: str
    count: int
    properties: List[str] = field(default_factory=list)
    first_line: int = 0     # 0-based index of the element's first body line


def _parse_header(lines: List[str]) -> Tuple[List[_Element], Optional[str]]:
    if not lines or lines[0].strip() != "ply":
        raise ParseError("File must start with 'ply'", line=1)

    elements: List[_Element] = []
    name: Optional[str] = None
    line_idx = 1
    while True:
        if line_idx >= len(lines):
            raise ParseError("Unexpected EOF while reading PLY header.", line=line_idx)
        line = lines[line_idx].strip()
        line_idx += 1
        if line == "end_header":
            break
        parts = line.split()
        if not parts:
            continue
        if parts[0] == "format":
            if len(parts) < 2 or parts[1] != "ascii":
                raise ParseError("Only ASCII PLY format is supported.", line=line_idx)
        elif parts[0] == "obj_info" and len(parts) >= 3 and parts[1] == "name":
            name = " ".join(parts[2:])
        elif parts[0] == "element":
            if len(parts) < 3:
                raise ParseError(f"Malformed element line '{line}'", line=line_idx)
            try:
                count = int(parts[2])
            except ValueError as exc:
                raise ParseError(f"Invalid element count '{parts[2]}'", line=line_idx) from exc
            elements.append(_Element(parts[1], count))
        elif parts[0] == "property":
            if not elements:
                raise ParseError("Property declared before any element", line=line_idx)
            elements[-1].properties.append(parts[-1])

    # element bodies follow the header in declaration order
    for el in elements:
        el.first_line = line_idx
        line_idx += el.count
    return elements, name


def _body_rows(lines: List[str], el: _Element, min_values: int):
    for k in range(el.count):
        row = el.first_line + k
        if row >= len(lines):
            raise ParseError(f"Expected {el.count} {el.name} rows, found {k}", line=row + 1)
        parts = lines[row].split()
        if len(parts) < min_values:
            raise ParseError(f"{el.name} line has {len(parts)} values, expected {min_values}", line=row + 1)
        yield row + 1, parts


class _VertexColumns:
    def __init__(self, el: _Element) -> None:
        col: Dict[str, int] = {name: i for i, name in enumerate(el.properties)}
        for axis in ("x", "y", "z"):
            if axis not in col:
                raise ParseError(f"PLY vertex element lacks property '{axis}'")
        self.col = col
        self.rgb = tuple(self._first(*names) for names in (("red", "r"), ("green", "g"), ("blue", "b")))
        self.has_color = all(i is not None for i in self.rgb)
        self.has_normals = all(k in col for k in ("nx", "ny", "nz"))
        self.intensity = col.get("intensity")

    def _first(self, *names: str) -> Optional[int]:
        for nm in names:
            if nm in self.col:
                return self.col[nm]
        return None

    def point(self, parts: List[str]) -> Point3D:
        return Point3D(float(parts[self.col["x"]]), float(parts[self.col["y"]]), float(parts[self.col["z"]]))

    def normal(self, parts: List[str]) -> Vector3D:
        return Vector3D(float(parts[self.col["nx"]]), float(parts[self.col["ny"]]), float(parts[self.col["nz"]]))

    def color(self, parts: List[str]) -> Color:
        r, g, b = self.rgb
        return Color(int(float(parts[r])), int(float(parts[g])), int(float(parts[b])))


def _find(elements: List[_Element], name: str) -> Optional[_Element]:
    for el in elements:
        if el.name == name:
            return el
    return None


class PlyReader(FormatReader[PointCloud]):
    """ASCII PLY vertex element → PointCloud; other elements are skipped."""
    supported_extensions = frozenset({"ply"})

    def read(self, content: str) -> PointCloud:
        lines = content.splitlines()
        elements, name = _parse_header(lines)
        el = _find(elements, "vertex")
        if el is None:
            return PointCloud((), metadata=PointCloudMetadata(name=name or "", source_format="ply"))
        cols = _VertexColumns(el)

        points: List[Point3D] = []
        colors: List[Color] = []
        normals: List[Vector3D] = []
        intensity: List[float] = []
        for line_no, parts in _body_rows(lines, el, len(el.properties)):
            try:
                points.append(cols.point(parts))
                if cols.has_normals:
                    normals.append(cols.normal(parts))
                if cols.has_color:
                    colors.append(cols.color(parts))
                if cols.intensity is not None:
                    intensity.append(float(parts[cols.intensity]))
            except (ValueError, InvalidArgument) as exc:
                raise ParseError(str(exc), line=line_no) from exc

        return PointCloud(
            points=points,
            colors=colors if cols.has_color else None,
            normals=normals if cols.has_normals else None,
            intensity=intensity if cols.intensity is not None else None,
            metadata=PointCloudMetadata(name=name or "", source_format="ply"),
        )


class PlyMeshReader(FormatReader[Mesh]):
    """ASCII PLY vertex + face elements → Mesh."""
    supported_extensions = frozenset({"ply"})

    def read(self, content: str) -> Mesh:
        lines = content.splitlines()
        elements, name = _parse_header(lines)
        vel = _find(elements, "vertex")
        if vel is None:
            raise ParseError("PLY mesh requires a vertex element")
        cols = _VertexColumns(vel)

        vertices: List[Point3D] = []
        normals: List[Vector3D] = []
        for line_no, parts in _body_rows(lines, vel, len(vel.properties)):
            try:
                vertices.append(cols.point(parts))
                if cols.has_normals:
                    normals.append(cols.normal(parts))
            except ValueError as exc:
                raise ParseError(str(exc), line=line_no) from exc

        faces: List[Face] = []
        fel = _find(elements, "face")
        if fel is not None:
            for line_no, parts in _body_rows(lines, fel, 1):
                try:
                    count = int(parts[0])
                    if len(parts) < count + 1:
                        raise ParseError(f"Face lists {count} indices but has {len(parts) - 1}", line=line_no)
                    faces.append(Face(tuple(int(v) for v in parts[1:count + 1])))
                except (ValueError, InvalidArgument) as exc:
                    raise ParseError(str(exc), line=line_no) from exc

        return Mesh(vertices, faces, normals, MeshMetadata(name=name or "", source_format="ply"))


class PlyWriter(FormatWriter[PointCloud]):
    supported_extensions = frozenset({"ply"})

    def write(self, data: PointCloud) -> str:
        out: List[str] = ["ply", "format ascii 1.0"]
        if data.metadata.name:
            out.append(f"obj_info name {data.metadata.name}")
        out.append(f"element vertex {data.size}")
        out += ["property float x", "property float y", "property float z"]
        if data.normals is not None:
            out += ["property float nx", "property float ny", "property float nz"]
        if data.colors is not None:
            out += ["property uchar red", "property uchar green", "property uchar blue"]
        if data.intensity is not None:
            out.append("property float intensity")
        out.append("end_header")

        for i, p in enumerate(data.points):
            row = " ".join(_fmt(v) for v in p)
            if data.normals is not None:
                row += " " + " ".join(_fmt(v) for v in data.normals[i])
            if data.colors is not None:
                c = data.colors[i]
                row += f" {c.r} {c.g} {c.b}"
            if data.intensity is not None:
                row += " " + _fmt(data.intensity[i])
            out.append(row)
        return "\n".join(out) + "\n"


class PlyMeshWriter(FormatWriter[Mesh]):
    supported_extensions = frozenset({"ply"})

    def write(self, data: Mesh) -> str:
        has_normals = len(data.normals) == len(data.vertices) and len(data.normals) > 0
        out: List[str] = ["ply", "format ascii 1.0"]
        if data.metadata.name:
            out.append(f"obj_info name {data.metadata.name}")
        out.append(f"element vertex {len(data.vertices)}")
        out += ["property float x", "property float y", "property float z"]
        if has_normals:
            out += ["property float nx", "property float ny", "property float nz"]
        out.append(f"element face {len(data.faces)}")
        out.append("property list uchar int vertex_indices")
        out.append("end_header")
        for i, v in enumerate(data.vertices):
            row = " ".join(_fmt(c) for c in v)
            if has_normals:
                row += " " + " ".join(_fmt(c) for c in data.normals[i])
            out.append(row)
        for face in data.faces:
            out.append(f"{len(face.indices)} " + " ".join(str(i) for i in face.indices))
        return "\n".join(out) + "\n"


def _fmt(v: float) -> str:
    return repr(float(v))
