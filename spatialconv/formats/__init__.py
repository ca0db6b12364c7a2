"""Text codecs (OBJ, ASCII PLY, JSON) for meshes and point clouds."""

from .json_format import JsonMeshReader, JsonMeshWriter, JsonPointCloudReader, JsonPointCloudWriter
from .obj import ObjReader, ObjWriter
from .ply import PlyMeshReader, PlyMeshWriter, PlyReader, PlyWriter
from .registry import format_from_path, read_file, reader_for, write_file, write_with, writer_for

__all__ = [
    "JsonMeshReader",
    "JsonMeshWriter",
    "JsonPointCloudReader",
    "JsonPointCloudWriter",
    "ObjReader",
    "ObjWriter",
    "PlyMeshReader",
    "PlyMeshWriter",
    "PlyReader",
    "PlyWriter",
    "format_from_path",
    "read_file",
    "reader_for",
    "write_file",
    "write_with",
    "writer_for",
]
