from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Optional, Union

from ..config import ConversionConfig, load_config
from ..core.mesh import Mesh
from ..core.utils import get_logger
from ..formats.registry import read_file, write_with
from ..runtime.builders import build_sampler, build_transformer, build_writer

_log = get_logger()


@dataclass(frozen=True)
class ConversionRunResult:
    """Summary of a conversion driven by a configuration file."""

    stats: Dict[str, int]
    output_path: Path
    config: ConversionConfig


def convert_from_config(
    config: Union[str, Path, ConversionConfig],
    *,
    output: Optional[Path] = None,
    seed: Optional[int] = None,
) -> ConversionRunResult:
    """Run a conversion described by a configuration file or object.

    Parameters
    ----------
    config:
        Path to a YAML file or a pre-loaded :class:`~spatialconv.config.schema.ConversionConfig`.
    output:
        Optional override for the output file. The extension drives the format
        (``.obj``, ``.ply``, or ``.json``).
    seed:
        Optional RNG seed for surface sampling. Falls back to the value in the
        config, or fresh entropy when neither is set.

    Returns
    -------
    ConversionRunResult
        Includes basic statistics (input and output point counts), the resolved
        output path, and the configuration object used for the run.
    """

    cfg = load_config(config) if not isinstance(config, ConversionConfig) else config.model_copy(deep=True)

    if output is not None:
        cfg.output.path = Path(output).resolve()
        cfg.output.format = None
    else:
        cfg.output.path = Path(cfg.output.path).resolve()

    # resolve the writer before doing any work so a bad extension fails fast
    writer = build_writer(cfg)
    sampler = build_sampler(cfg, seed=seed)
    transformer = build_transformer(cfg.transform)

    data = read_file(cfg.input.path, cfg.input.kind, cfg.input.format)
    stats: Dict[str, int] = {}
    if isinstance(data, Mesh):
        stats["input_points"] = len(data.vertices)
        stats["triangles"] = data.triangle_count
    else:
        stats["input_points"] = data.size

    if sampler is not None:
        data = sampler.convert(data)
    if transformer is not None:
        data = transformer.convert(data)
    if cfg.voxel is not None:
        data = data.voxel_downsample(cfg.voxel.size)

    stats["points"] = len(data.vertices) if isinstance(data, Mesh) else data.size

    out_path = write_with(writer, data, cfg.output.path)

    _log.info("Conversion finished: %d → %d points", stats["input_points"], stats["points"])
    return ConversionRunResult(stats=stats, output_path=out_path, config=cfg)
