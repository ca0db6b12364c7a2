from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

import numpy as np
import typer
from pydantic import ValidationError as PydanticValidationError

from ..config import BearingConfig
from ..config.schema import TransformConfig
from ..converter.bearing import VelocitySequenceToBearingConverter
from ..converter.coordinates import CoordinateTransformer
from ..converter.sampling import FixedCount, MeshToPointCloudConverter, UniformSurface, VerticesOnly
from ..core.errors import SpatialError
from ..core.mesh import Mesh
from ..core.primitives import Vector3D
from ..core.transform import Transform3D
from ..examples.synthetic import generate_mesh
from ..formats.registry import read_file, write_file
from ..runtime.builders import build_transformer
from ..sdk.run import convert_from_config

app = typer.Typer(help="Spatial data conversion utilities")
mesh_app = typer.Typer(help="Synthetic mesh helpers")
app.add_typer(mesh_app, name="mesh")


def _configure_logging(level: str) -> None:
    numeric = getattr(logging, level.upper(), logging.INFO)
    logging.basicConfig(level=numeric, format="[%(levelname)s] %(message)s")
    logging.getLogger("spatialconv").setLevel(numeric)


@contextmanager
def _reporting_errors() -> Iterator[None]:
    try:
        yield
    except SpatialError as exc:
        typer.echo(f"Error: {exc}", err=True)
        raise typer.Exit(code=1) from exc


def _parse_triple(value: Optional[str], param_hint: str) -> Optional[Tuple[float, float, float]]:
    if value is None:
        return None
    parts = value.replace(",", " ").split()
    if len(parts) != 3:
        raise typer.BadParameter("Expected three comma-separated numbers.", param_hint=param_hint)
    try:
        x, y, z = (float(p) for p in parts)
    except ValueError as exc:
        raise typer.BadParameter(f"Not a number in '{value}'.", param_hint=param_hint) from exc
    return x, y, z


def _read_velocities(path: Path) -> List[Vector3D]:
    velocities: List[Vector3D] = []
    with open(path, "r", encoding="utf-8") as f:
        for line_no, raw in enumerate(f, start=1):
            line = raw.split("#", 1)[0].strip()
            if not line:
                continue
            parts = line.replace(",", " ").split()
            try:
                if len(parts) != 3:
                    raise ValueError(f"expected 3 values, got {len(parts)}")
                velocities.append(Vector3D(*(float(p) for p in parts)))
            except ValueError as exc:
                raise typer.BadParameter(f"line {line_no}: {exc}", param_hint="VELOCITIES") from exc
    return velocities


def _execute_convert(config: Path, output: Optional[Path], seed: Optional[int], log_level: str) -> None:
    _configure_logging(log_level)
    with _reporting_errors():
        result = convert_from_config(config, output=output, seed=seed)
    stats = result.stats
    typer.echo(f"Converted {stats['input_points']} → {stats['points']} points → {result.output_path}")


@app.command("convert")
def convert(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML configuration file."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Override output path (extension sets format)."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Override random seed."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Run a conversion pipeline specified by a YAML config."""

    _execute_convert(config, output, seed, log_level)


@app.command("run")
def run(
    config: Path = typer.Argument(..., exists=True, readable=True, help="Path to YAML configuration file."),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="Override output path (extension sets format)."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Override random seed."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Alias for `convert`"""

    _execute_convert(config, output, seed, log_level)


@app.command("sample")
def sample(
    mesh: Path = typer.Argument(..., exists=True, readable=True, help="Input mesh (.obj, .ply, .json)."),
    output: Path = typer.Option(..., "--output", "-o", help="Output point cloud path (.ply or .json)."),
    strategy: str = typer.Option("vertices", "--strategy", help="Sampling strategy: vertices, uniform, or fixed."),
    points_per_unit: float = typer.Option(100.0, "--points-per-unit", help="Density for the uniform strategy."),
    total_points: Optional[int] = typer.Option(None, "--total-points", help="Point budget for the fixed strategy."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for deterministic sampling."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Convert a mesh into a point cloud."""

    _configure_logging(log_level)
    strategy = strategy.lower()
    if strategy == "vertices":
        chosen = VerticesOnly()
    elif strategy == "uniform":
        if points_per_unit <= 0:
            raise typer.BadParameter("points_per_unit must be positive.", param_hint="--points-per-unit")
        chosen = UniformSurface(points_per_unit)
    elif strategy == "fixed":
        if total_points is None or total_points <= 0:
            raise typer.BadParameter("fixed sampling needs a positive --total-points.", param_hint="--total-points")
        chosen = FixedCount(total_points)
    else:
        raise typer.BadParameter("strategy must be one of vertices, uniform, fixed.", param_hint="--strategy")

    with _reporting_errors():
        source = read_file(mesh, "mesh")
        cloud = MeshToPointCloudConverter(chosen, rng=np.random.default_rng(seed)).convert(source)
        out = write_file(cloud, output)
    typer.echo(f"Sampled {cloud.size} points from {source.triangle_count} triangles → {out}")


@app.command("transform")
def transform(
    cloud: Path = typer.Argument(..., exists=True, readable=True, help="Input point cloud (.ply or .json)."),
    output: Path = typer.Option(..., "--output", "-o", help="Output point cloud path (.ply or .json)."),
    preset: Optional[str] = typer.Option(None, "--preset", help="Axis preset: y_up_to_z_up or z_up_to_y_up."),
    rotate_deg: Optional[str] = typer.Option(None, "--rotate-deg", help="Rotation about X,Y,Z in degrees."),
    scale: Optional[float] = typer.Option(None, "--scale", help="Uniform scale factor."),
    translate: Optional[str] = typer.Option(None, "--translate", help="Translation as x,y,z."),
    voxel_size: Optional[float] = typer.Option(None, "--voxel-size", help="Optional voxel downsampling size."),
    log_level: str = typer.Option("INFO", "--log-level", help="Logging level (e.g. INFO, DEBUG)."),
) -> None:
    """Apply an affine transform to a point cloud."""

    _configure_logging(log_level)
    try:
        transform_cfg = TransformConfig(
            preset=preset,
            rotate_deg=_parse_triple(rotate_deg, "--rotate-deg"),
            scale=scale,
            translate=_parse_triple(translate, "--translate"),
        )
    except PydanticValidationError as exc:
        raise typer.BadParameter(str(exc.errors()[0]["msg"])) from exc
    if voxel_size is not None and voxel_size <= 0:
        raise typer.BadParameter("voxel size must be positive.", param_hint="--voxel-size")

    transformer = build_transformer(transform_cfg) or CoordinateTransformer(Transform3D.identity())
    with _reporting_errors():
        source = read_file(cloud, "pointcloud")
        result = transformer.convert(source)
        if voxel_size is not None:
            result = result.voxel_downsample(voxel_size)
        out = write_file(result, output)
    typer.echo(f"Transformed {source.size} → {result.size} points → {out}")


@app.command("bearing")
def bearing(
    velocities: Path = typer.Argument(..., exists=True, readable=True, help="Text file with one 'east north up' velocity per line."),
    window: Optional[int] = typer.Option(None, "--window", help="Moving-average window applied before conversion."),
    minimum_speed: float = typer.Option(0.01, "--minimum-speed", help="Speeds below this are reported as stationary."),
) -> None:
    """Convert ENU velocities to compass bearings."""

    try:
        cfg = BearingConfig(minimum_speed=minimum_speed, window_size=window)
    except PydanticValidationError as exc:
        raise typer.BadParameter(str(exc.errors()[0]["msg"])) from exc

    rows = _read_velocities(velocities)
    converter = VelocitySequenceToBearingConverter(minimum_speed=cfg.minimum_speed)
    with _reporting_errors():
        if cfg.window_size is not None:
            bearings = converter.convert_smoothed(rows, window_size=cfg.window_size)
        else:
            bearings = converter.convert(rows)
    for b in bearings:
        typer.echo(f"{b.bearing:.2f} {b.speed:.3f} {b.cardinal_direction}")


@app.command("demo")
def demo(
    output_dir: Optional[Path] = typer.Option(None, "--output-dir", help="Write cube.obj, cloud.ply and cloud.json here."),
    total_points: int = typer.Option(1000, "--total-points", help="Points sampled from the cube surface."),
    seed: int = typer.Option(7, "--seed", help="Random seed for deterministic sampling."),
) -> None:
    """Sample a cube, rotate it to Z-up and export it."""

    cube: Mesh = generate_mesh("cube", 2.0)
    typer.echo("Created cube mesh:")
    typer.echo(f"  Vertices: {len(cube.vertices)}")
    typer.echo(f"  Faces: {len(cube.faces)}")
    typer.echo(f"  Bounding box: {cube.bounding_box}")

    with _reporting_errors():
        cloud = MeshToPointCloudConverter(FixedCount(total_points), rng=np.random.default_rng(seed)).convert(cube)
        typer.echo(f"Converted to point cloud: {cloud.size} points")
        transformed = CoordinateTransformer.y_up_to_z_up().convert(cloud)
        typer.echo(f"Transformed to {transformed.metadata.coordinate_system.value}")
        if output_dir is not None:
            for path in (
                write_file(cube, output_dir / "cube.obj"),
                write_file(transformed, output_dir / "cloud.ply"),
                write_file(transformed, output_dir / "cloud.json", pretty=True),
            ):
                typer.echo(f"Wrote {path}")


@mesh_app.command("generate")
def mesh_generate(
    output: Path = typer.Argument(..., help="Output mesh path (.obj, .ply, or .json)."),
    preset: str = typer.Option("cube", "--preset", help="Synthetic mesh preset (cube, plane)."),
    size: float = typer.Option(2.0, "--size", help="Edge length of the generated mesh."),
) -> None:
    """Generate a synthetic mesh useful for conversion demos."""

    if size <= 0:
        raise typer.BadParameter("size must be positive.", param_hint="--size")
    out = output.resolve()
    try:
        with _reporting_errors():
            generate_mesh(preset=preset, size=size, path=out)
    except ValueError as exc:
        raise typer.BadParameter(str(exc), param_hint="--preset") from exc
    typer.echo(f"Wrote synthetic mesh to {out}")


def main() -> None:
    app()


if __name__ == "__main__":  # pragma: no cover
    main()
