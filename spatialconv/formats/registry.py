from __future__ import annotations
from pathlib import Path
from typing import Callable, Dict, Literal, Optional, Tuple, Union

from ..converter.base import FormatReader, FormatWriter
from ..core.errors import IoError, UnsupportedFormat
from ..core.mesh import Mesh
from ..core.pointcloud import PointCloud
from ..core.utils import get_logger
from .json_format import JsonMeshReader, JsonMeshWriter, JsonPointCloudReader, JsonPointCloudWriter
from .obj import ObjReader, ObjWriter
from .ply import PlyMeshReader, PlyMeshWriter, PlyReader, PlyWriter

_log = get_logger()

Kind = Literal["mesh", "pointcloud"]

_READERS: Dict[Tuple[str, str], Callable[[], FormatReader]] = {
    ("obj", "mesh"): ObjReader,
    ("ply", "mesh"): PlyMeshReader,
    ("json", "mesh"): JsonMeshReader,
    ("ply", "pointcloud"): PlyReader,
    ("json", "pointcloud"): JsonPointCloudReader,
}

_WRITERS: Dict[Tuple[str, str], Callable[..., FormatWriter]] = {
    ("obj", "mesh"): ObjWriter,
    ("ply", "mesh"): PlyMeshWriter,
    ("json", "mesh"): JsonMeshWriter,
    ("ply", "pointcloud"): PlyWriter,
    ("json", "pointcloud"): JsonPointCloudWriter,
}


def _normalize(ext: str) -> str:
    return ext.lower().lstrip(".")


def format_from_path(path: Union[str, Path]) -> str:
    ext = _normalize(Path(path).suffix)
    if not ext:
        raise UnsupportedFormat(str(path))
    return ext


def reader_for(extension: str, kind: Kind) -> FormatReader:
    factory = _READERS.get((_normalize(extension), kind))
    if factory is None:
        raise UnsupportedFormat(f"{extension} ({kind} reader)")
    return factory()


def writer_for(extension: str, kind: Kind, pretty: bool = False) -> FormatWriter:
    ext = _normalize(extension)
    factory = _WRITERS.get((ext, kind))
    if factory is None:
        raise UnsupportedFormat(f"{extension} ({kind} writer)")
    if ext == "json":
        return factory(pretty=pretty)
    return factory()


def read_file(path: Union[str, Path], kind: Kind, format: Optional[str] = None) -> Union[Mesh, PointCloud]:
    path = Path(path)
    reader = reader_for(format or format_from_path(path), kind)
    try:
        content = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise IoError(f"Cannot read {path}: {exc}") from exc
    data = reader.read(content)
    _log.info("Read %s (%s)", path.name, type(data).__name__)
    return data


def write_file(
    data: Union[Mesh, PointCloud],
    path: Union[str, Path],
    format: Optional[str] = None,
    pretty: bool = False,
) -> Path:
    path = Path(path)
    kind: Kind = "mesh" if isinstance(data, Mesh) else "pointcloud"
    writer = writer_for(format or format_from_path(path), kind, pretty=pretty)
    return write_with(writer, data, path)


def write_with(writer: FormatWriter, data: Union[Mesh, PointCloud], path: Union[str, Path]) -> Path:
    """Encode ``data`` with an already resolved writer and save it to ``path``."""
    path = Path(path)
    text = writer.write(data)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "w", encoding="utf-8") as f:
            f.write(text)
    except OSError as exc:
        raise IoError(f"Cannot write {path}: {exc}") from exc
    _log.info("Wrote %s", path.name)
    return path
