from __future__ import annotations

from pathlib import Path
from typing import Optional

import numpy as np

from ..config import ConversionConfig
from ..config.schema import TransformConfig
from ..converter.base import FormatWriter
from ..converter.coordinates import CoordinateTransformer
from ..converter.sampling import FixedCount, MeshToPointCloudConverter, UniformSurface, VerticesOnly
from ..core.primitives import Vector3D
from ..core.transform import Transform3D
from ..formats.registry import format_from_path, writer_for


def build_sampler(cfg: ConversionConfig, seed: Optional[int] = None) -> Optional[MeshToPointCloudConverter]:
    sampling_cfg = cfg.sampling
    if sampling_cfg is None:
        return None
    run_seed = seed if seed is not None else cfg.seed
    rng = np.random.default_rng(run_seed)
    if sampling_cfg.kind == "vertices":
        return MeshToPointCloudConverter(VerticesOnly(), rng=rng)
    if sampling_cfg.kind == "uniform":
        return MeshToPointCloudConverter(UniformSurface(sampling_cfg.points_per_unit), rng=rng)
    if sampling_cfg.kind == "fixed":
        return MeshToPointCloudConverter(FixedCount(sampling_cfg.total_points), rng=rng)
    raise ValueError(f"Unsupported sampling kind: {sampling_cfg.kind}")


def build_transformer(transform_cfg: Optional[TransformConfig]) -> Optional[CoordinateTransformer]:
    if transform_cfg is None:
        return None
    steps = []
    if transform_cfg.preset == "y_up_to_z_up":
        steps.append(CoordinateTransformer.y_up_to_z_up())
    elif transform_cfg.preset == "z_up_to_y_up":
        steps.append(CoordinateTransformer.z_up_to_y_up())
    if transform_cfg.rotate_deg is not None:
        rotation = Transform3D.from_xyz_rpy((0.0, 0.0, 0.0), transform_cfg.rotate_deg)
        steps.append(CoordinateTransformer(rotation))
    if transform_cfg.scale is not None:
        steps.append(CoordinateTransformer.scale(transform_cfg.scale))
    if transform_cfg.translate is not None:
        steps.append(CoordinateTransformer.translate(Vector3D(*transform_cfg.translate)))

    if not steps:
        return None
    transformer = steps[0]
    for step in steps[1:]:
        transformer = transformer.then(step)
    return transformer


def build_writer(cfg: ConversionConfig) -> FormatWriter:
    out_cfg = cfg.output
    kind = "pointcloud" if cfg.sampling is not None or cfg.input.kind == "pointcloud" else "mesh"
    return writer_for(out_cfg.format or format_from_path(Path(out_cfg.path)), kind, pretty=out_cfg.pretty)
