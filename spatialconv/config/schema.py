from __future__ import annotations

from pathlib import Path
from typing import Annotated, Literal, Optional, Union

import yaml
from pydantic import BaseModel, Field, model_validator

FormatName = Literal["obj", "ply", "json"]
DataKind = Literal["mesh", "pointcloud"]


class InputConfig(BaseModel):
    path: Path
    kind: DataKind = "mesh"
    format: Optional[FormatName] = None


class OutputConfig(BaseModel):
    path: Path
    format: Optional[FormatName] = None
    pretty: bool = False

    @model_validator(mode="after")
    def _validate_format(self) -> "OutputConfig":
        if self.pretty and (self.format or self.path.suffix.lower().lstrip(".")) != "json":
            raise ValueError("pretty output is only available for JSON")
        return self


class VerticesSamplingConfig(BaseModel):
    kind: Literal["vertices"]


class UniformSamplingConfig(BaseModel):
    kind: Literal["uniform"]
    points_per_unit: float = Field(100.0, gt=0)


class FixedSamplingConfig(BaseModel):
    kind: Literal["fixed"]
    total_points: int = Field(..., gt=0)


SamplingConfig = Annotated[
    Union[VerticesSamplingConfig, UniformSamplingConfig, FixedSamplingConfig],
    Field(discriminator="kind"),
]


class TransformConfig(BaseModel):
    """Applied in order: preset, rotate (X, Y, Z), scale, translate."""
    preset: Optional[Literal["y_up_to_z_up", "z_up_to_y_up"]] = None
    rotate_deg: Optional[tuple[float, float, float]] = None
    scale: Optional[float] = None
    translate: Optional[tuple[float, float, float]] = None

    @model_validator(mode="after")
    def _validate_scale(self) -> "TransformConfig":
        if self.scale is not None and self.scale == 0.0:
            raise ValueError("scale must be non-zero")
        return self


class VoxelConfig(BaseModel):
    size: float = Field(..., gt=0)


class BearingConfig(BaseModel):
    minimum_speed: float = Field(0.01, ge=0)
    window_size: Optional[int] = Field(None, ge=1)


class ConversionConfig(BaseModel):
    input: InputConfig
    output: OutputConfig
    sampling: Optional[SamplingConfig] = None
    transform: Optional[TransformConfig] = None
    voxel: Optional[VoxelConfig] = None
    seed: Optional[int] = None

    @model_validator(mode="after")
    def _ensure_pipeline(self) -> "ConversionConfig":
        if self.input.kind == "mesh":
            if self.sampling is None and (self.transform is not None or self.voxel is not None):
                # point-cloud stages need a point cloud; default to the vertices
                self.sampling = VerticesSamplingConfig(kind="vertices")
        elif self.sampling is not None:
            raise ValueError("sampling requires a mesh input")
        return self


def load_config(path: str | Path) -> ConversionConfig:
    path = Path(path)
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError("Configuration root must be a mapping.")
    cfg = ConversionConfig.model_validate(data)
    if not cfg.input.path.is_absolute():
        cfg.input.path = (path.parent / cfg.input.path).resolve()
    cfg.output.path = (path.parent / cfg.output.path).resolve()
    return cfg
