from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import yaml
from pydantic import ValidationError

from spatialconv.config import BearingConfig, ConversionConfig, load_config
from spatialconv.config.schema import FixedSamplingConfig
from spatialconv.converter.sampling import FixedCount, UniformSurface
from spatialconv.core.pointcloud import CoordinateSystem, PointCloud
from spatialconv.core.primitives import Point3D
from spatialconv.runtime.builders import build_sampler, build_transformer, build_writer
from spatialconv.formats import JsonPointCloudWriter, ObjWriter


def _write_yaml(path: Path, data: dict) -> Path:
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(data, f)
    return path


def test_load_config_resolves_relative_paths(tmp_path: Path) -> None:
    cfg_path = _write_yaml(
        tmp_path / "job.yaml",
        {
            "input": {"path": "cube.obj"},
            "output": {"path": "out/cloud.json", "pretty": True},
            "sampling": {"kind": "fixed", "total_points": 500},
            "seed": 3,
        },
    )
    cfg = load_config(cfg_path)
    assert cfg.input.path == (tmp_path / "cube.obj").resolve()
    assert cfg.output.path == (tmp_path / "out" / "cloud.json").resolve()
    assert cfg.sampling.kind == "fixed"
    assert cfg.sampling.total_points == 500


def test_load_config_rejects_non_mapping(tmp_path: Path) -> None:
    cfg_path = tmp_path / "bad.yaml"
    cfg_path.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(cfg_path)


def test_sampling_is_discriminated_on_kind() -> None:
    with pytest.raises(ValidationError):
        ConversionConfig.model_validate(
            {"input": {"path": "a.obj"}, "output": {"path": "b.ply"}, "sampling": {"kind": "random"}}
        )
    with pytest.raises(ValidationError):
        ConversionConfig.model_validate(
            {"input": {"path": "a.obj"}, "output": {"path": "b.ply"}, "sampling": {"kind": "uniform", "points_per_unit": 0}}
        )


def test_sampling_requires_mesh_input() -> None:
    with pytest.raises(ValidationError):
        ConversionConfig.model_validate(
            {
                "input": {"path": "a.ply", "kind": "pointcloud"},
                "output": {"path": "b.ply"},
                "sampling": {"kind": "vertices"},
            }
        )


def test_mesh_transform_defaults_to_vertex_sampling() -> None:
    cfg = ConversionConfig.model_validate(
        {"input": {"path": "a.obj"}, "output": {"path": "b.ply"}, "transform": {"scale": 2.0}}
    )
    assert cfg.sampling is not None and cfg.sampling.kind == "vertices"


def test_pretty_requires_json_output() -> None:
    with pytest.raises(ValidationError):
        ConversionConfig.model_validate(
            {"input": {"path": "a.obj"}, "output": {"path": "b.ply", "pretty": True}}
        )


def test_bearing_config_bounds() -> None:
    assert BearingConfig().minimum_speed == 0.01
    with pytest.raises(ValidationError):
        BearingConfig(window_size=0)
    with pytest.raises(ValidationError):
        BearingConfig(minimum_speed=-1.0)


def test_build_sampler_uses_seed() -> None:
    cfg = ConversionConfig.model_validate(
        {
            "input": {"path": "a.obj"},
            "output": {"path": "b.json"},
            "sampling": {"kind": "uniform", "points_per_unit": 4.0},
            "seed": 11,
        }
    )
    sampler = build_sampler(cfg)
    assert sampler.strategy == UniformSurface(4.0)
    assert sampler.rng.random() == np.random.default_rng(11).random()
    assert build_sampler(cfg, seed=5).rng.random() == np.random.default_rng(5).random()

    cfg = cfg.model_copy(update={"sampling": FixedSamplingConfig(kind="fixed", total_points=9)})
    assert build_sampler(cfg).strategy == FixedCount(9)


def test_build_transformer_order() -> None:
    cfg = ConversionConfig.model_validate(
        {
            "input": {"path": "a.ply", "kind": "pointcloud"},
            "output": {"path": "b.ply"},
            "transform": {"preset": "y_up_to_z_up", "scale": 2.0, "translate": [1.0, 0.0, 0.0]},
        }
    )
    transformer = build_transformer(cfg.transform)
    out = transformer.convert(PointCloud([Point3D(0.0, 1.0, 0.0)]))
    np.testing.assert_allclose(out.xyz, [[1.0, 0.0, -2.0]], atol=1e-12)
    assert out.metadata.coordinate_system is CoordinateSystem.RIGHT_HANDED_Z_UP
    assert build_transformer(None) is None


def test_build_writer_follows_pipeline_output() -> None:
    cfg = ConversionConfig.model_validate({"input": {"path": "a.ply"}, "output": {"path": "b.obj"}})
    assert isinstance(build_writer(cfg), ObjWriter)
    cfg = ConversionConfig.model_validate(
        {"input": {"path": "a.ply"}, "output": {"path": "b.json", "pretty": True}, "sampling": {"kind": "vertices"}}
    )
    writer = build_writer(cfg)
    assert isinstance(writer, JsonPointCloudWriter) and writer.pretty
