from __future__ import annotations

from pathlib import Path

import numpy as np
import pytest
import yaml

from spatialconv.config import load_config
from spatialconv.core.errors import IoError, UnsupportedFormat
from spatialconv.examples.synthetic import generate_mesh
from spatialconv.formats import read_file
from spatialconv.sdk import convert_from_config


def _write_config(path: Path, mesh_name: str, output_name: str) -> None:
    config = {
        "input": {"path": mesh_name},
        "output": {"path": output_name},
        "sampling": {"kind": "fixed", "total_points": 246},
        "transform": {"preset": "y_up_to_z_up"},
        "seed": 123,
    }
    with open(path, "w", encoding="utf-8") as f:
        yaml.safe_dump(config, f)


def test_convert_from_config_path(tmp_path: Path) -> None:
    generate_mesh("cube", 2.0, tmp_path / "cube.obj")
    cfg_path = tmp_path / "job.yaml"
    _write_config(cfg_path, "cube.obj", "out/cloud.ply")

    result = convert_from_config(cfg_path)

    assert result.output_path == (tmp_path / "out" / "cloud.ply").resolve()
    assert result.output_path.exists()
    # floor(246 / 12) = 20 samples on each of the 12 triangles
    assert result.stats == {"input_points": 8, "triangles": 12, "points": 240}
    cloud = read_file(result.output_path, "pointcloud")
    assert cloud.size == 240
    assert np.all(np.abs(cloud.xyz) <= 1.0 + 1e-9)


def test_convert_is_reproducible_with_seed(tmp_path: Path) -> None:
    generate_mesh("cube", 2.0, tmp_path / "cube.ply")
    cfg_path = tmp_path / "job.yaml"
    _write_config(cfg_path, "cube.ply", "a.json")
    cfg = load_config(cfg_path)

    first = convert_from_config(cfg, output=tmp_path / "a.json", seed=9)
    second = convert_from_config(cfg, output=tmp_path / "b.json", seed=9)

    a = read_file(first.output_path, "pointcloud")
    b = read_file(second.output_path, "pointcloud")
    np.testing.assert_array_equal(a.xyz, b.xyz)
    assert a.metadata.coordinate_system.value == "RIGHT_HANDED_Z_UP"
    # caller's config object is left untouched
    assert cfg.output.path == (tmp_path / "a.json").resolve()


def test_pointcloud_input_with_voxel(tmp_path: Path) -> None:
    cloud_path = tmp_path / "scan.ply"
    cloud_path.write_text(
        "ply\nformat ascii 1.0\nelement vertex 3\nproperty float x\nproperty float y\nproperty float z\n"
        "end_header\n0.1 0.1 0.1\n0.2 0.2 0.2\n3.5 3.5 3.5\n",
        encoding="utf-8",
    )
    cfg_path = tmp_path / "job.yaml"
    with open(cfg_path, "w", encoding="utf-8") as f:
        yaml.safe_dump(
            {
                "input": {"path": "scan.ply", "kind": "pointcloud"},
                "output": {"path": "down.json"},
                "voxel": {"size": 1.0},
            },
            f,
        )

    result = convert_from_config(cfg_path)

    assert result.stats == {"input_points": 3, "points": 2}
    down = read_file(result.output_path, "pointcloud")
    np.testing.assert_allclose(down.xyz, [[0.15, 0.15, 0.15], [3.5, 3.5, 3.5]])


def test_mesh_to_mesh_conversion(tmp_path: Path) -> None:
    generate_mesh("plane", 2.0, tmp_path / "plane.obj")
    cfg_path = tmp_path / "job.yaml"
    with open(cfg_path, "w", encoding="utf-8") as f:
        yaml.safe_dump({"input": {"path": "plane.obj"}, "output": {"path": "plane.ply"}}, f)

    result = convert_from_config(cfg_path)

    mesh = read_file(result.output_path, "mesh")
    assert result.stats["points"] == len(mesh.vertices) == 121
    assert mesh.triangle_count == 200


def test_unsupported_output_extension(tmp_path: Path) -> None:
    generate_mesh("cube", 1.0, tmp_path / "cube.obj")
    cfg_path = tmp_path / "job.yaml"
    _write_config(cfg_path, "cube.obj", "cloud.ply")
    with pytest.raises(UnsupportedFormat):
        convert_from_config(cfg_path, output=tmp_path / "cloud.obj")
    assert not (tmp_path / "cloud.obj").exists()


def test_unwritable_output_raises_io_error(tmp_path: Path) -> None:
    generate_mesh("cube", 1.0, tmp_path / "cube.obj")
    cfg_path = tmp_path / "job.yaml"
    _write_config(cfg_path, "cube.obj", "cloud.ply")
    (tmp_path / "blocker").write_text("", encoding="utf-8")
    with pytest.raises(IoError):
        convert_from_config(cfg_path, output=tmp_path / "blocker" / "cloud.ply")
