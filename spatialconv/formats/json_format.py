"""JSON codecs backed by pydantic models.

Keys are camelCase (``sourceFormat``, ``coordinateSystem``). Points and
vectors are ``{"x":..,"y":..,"z":..}`` objects, colors
``{"r":..,"g":..,"b":..,"a":..}``. Optional attributes are omitted when
absent and unknown keys are ignored on read.
"""
from __future__ import annotations
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic import ValidationError as PydanticValidationError

from ..converter.base import FormatReader, FormatWriter
from ..core.errors import InvalidArgument, ParseError, ValidationError
from ..core.mesh import Face, Mesh, MeshMetadata
from ..core.pointcloud import Color, CoordinateSystem, PointCloud, PointCloudMetadata
from ..core.primitives import Point3D, Vector3D


class _Model(BaseModel):
    model_config = ConfigDict(extra="ignore", alias_generator=to_camel, populate_by_name=True)


class XYZModel(_Model):
    x: float
    y: float
    z: float


class ColorModel(_Model):
    r: int
    g: int
    b: int
    a: int = 255


class PointCloudMetadataModel(_Model):
    name: str = ""
    source_format: str = ""
    coordinate_system: CoordinateSystem = CoordinateSystem.RIGHT_HANDED_Y_UP
    properties: Dict[str, str] = Field(default_factory=dict)


class PointCloudModel(_Model):
    points: List[XYZModel]
    colors: Optional[List[ColorModel]] = None
    normals: Optional[List[XYZModel]] = None
    intensity: Optional[List[float]] = None
    metadata: PointCloudMetadataModel = Field(default_factory=PointCloudMetadataModel)

    @classmethod
    def from_cloud(cls, cloud: PointCloud) -> "PointCloudModel":
        md = cloud.metadata
        return cls(
            points=[XYZModel(x=p.x, y=p.y, z=p.z) for p in cloud.points],
            colors=None if cloud.colors is None else [ColorModel(r=c.r, g=c.g, b=c.b, a=c.a) for c in cloud.colors],
            normals=None if cloud.normals is None else [XYZModel(x=n.x, y=n.y, z=n.z) for n in cloud.normals],
            intensity=None if cloud.intensity is None else [float(v) for v in cloud.intensity],
            metadata=PointCloudMetadataModel(
                name=md.name,
                source_format=md.source_format,
                coordinate_system=md.coordinate_system,
                properties=dict(md.properties),
            ),
        )

    def to_cloud(self) -> PointCloud:
        md = self.metadata
        return PointCloud(
            points=[Point3D(p.x, p.y, p.z) for p in self.points],
            colors=None if self.colors is None else [Color(c.r, c.g, c.b, c.a) for c in self.colors],
            normals=None if self.normals is None else [Vector3D(n.x, n.y, n.z) for n in self.normals],
            intensity=self.intensity,
            metadata=PointCloudMetadata(
                name=md.name,
                source_format=md.source_format,
                coordinate_system=md.coordinate_system,
                properties=dict(md.properties),
            ),
        )


class FaceModel(_Model):
    indices: List[int]


class MeshMetadataModel(_Model):
    name: str = ""
    source_format: str = ""
    properties: Dict[str, str] = Field(default_factory=dict)


class MeshModel(_Model):
    vertices: List[XYZModel]
    faces: List[FaceModel]
    normals: List[XYZModel] = Field(default_factory=list)
    metadata: MeshMetadataModel = Field(default_factory=MeshMetadataModel)

    @classmethod
    def from_mesh(cls, mesh: Mesh) -> "MeshModel":
        md = mesh.metadata
        return cls(
            vertices=[XYZModel(x=v.x, y=v.y, z=v.z) for v in mesh.vertices],
            faces=[FaceModel(indices=list(f.indices)) for f in mesh.faces],
            normals=[XYZModel(x=n.x, y=n.y, z=n.z) for n in mesh.normals],
            metadata=MeshMetadataModel(name=md.name, source_format=md.source_format, properties=dict(md.properties)),
        )

    def to_mesh(self) -> Mesh:
        md = self.metadata
        return Mesh(
            vertices=[Point3D(v.x, v.y, v.z) for v in self.vertices],
            faces=[Face(tuple(f.indices)) for f in self.faces],
            normals=[Vector3D(n.x, n.y, n.z) for n in self.normals],
            metadata=MeshMetadata(name=md.name, source_format=md.source_format, properties=dict(md.properties)),
        )


def _dump(model: BaseModel, pretty: bool) -> str:
    return model.model_dump_json(indent=2 if pretty else None, exclude_none=True, by_alias=True)


def _load(model_cls, content: str):
    try:
        return model_cls.model_validate_json(content)
    except PydanticValidationError as exc:
        errors = exc.errors()
        loc = ".".join(str(p) for p in errors[0]["loc"]) if errors else None
        if errors and errors[0]["type"] == "json_invalid":
            raise ParseError(f"Invalid JSON: {errors[0]['msg']}") from exc
        raise ValidationError(f"Invalid {model_cls.__name__}: {exc.error_count()} error(s), first at '{loc}'", field=loc) from exc


class JsonPointCloudWriter(FormatWriter[PointCloud]):
    supported_extensions = frozenset({"json"})

    def __init__(self, pretty: bool = False) -> None:
        self.pretty = pretty

    def write(self, data: PointCloud) -> str:
        return _dump(PointCloudModel.from_cloud(data), self.pretty)


class JsonPointCloudReader(FormatReader[PointCloud]):
    supported_extensions = frozenset({"json"})

    def read(self, content: str) -> PointCloud:
        model = _load(PointCloudModel, content)
        try:
            return model.to_cloud()
        except InvalidArgument as exc:
            raise ValidationError(str(exc)) from exc


class JsonMeshWriter(FormatWriter[Mesh]):
    supported_extensions = frozenset({"json"})

    def __init__(self, pretty: bool = False) -> None:
        self.pretty = pretty

    def write(self, data: Mesh) -> str:
        return _dump(MeshModel.from_mesh(data), self.pretty)


class JsonMeshReader(FormatReader[Mesh]):
    supported_extensions = frozenset({"json"})

    def read(self, content: str) -> Mesh:
        model = _load(MeshModel, content)
        try:
            return model.to_mesh()
        except InvalidArgument as exc:
            raise ValidationError(str(exc)) from exc
