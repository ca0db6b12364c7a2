import numpy as np
import pytest

from spatialconv.core.errors import ComputationFailure, InvalidArgument
from spatialconv.core.mesh import Face, Mesh, MeshMetadata
from spatialconv.core.pointcloud import Color, CoordinateSystem, PointCloud, PointCloudMetadata
from spatialconv.core.primitives import Point3D, Vector3D


def _unit_square() -> Mesh:
    vertices = [
        Point3D(0.0, 0.0, 0.0),
        Point3D(1.0, 0.0, 0.0),
        Point3D(1.0, 1.0, 0.0),
        Point3D(0.0, 1.0, 0.0),
    ]
    return Mesh(vertices, [Face.quad(0, 1, 2, 3)], metadata=MeshMetadata(name="square"))


def test_face_requires_three_indices() -> None:
    with pytest.raises(InvalidArgument):
        Face((0, 1))
    assert Face.triangle(0, 1, 2).triangle_count == 1
    assert Face((0, 1, 2, 3, 4)).triangle_count == 3


def test_quad_fan_triangulation() -> None:
    mesh = _unit_square()
    tris = list(mesh.triangles())
    assert mesh.triangle_count == 2
    assert len(tris) == 2
    assert tris[0].v0 == tris[1].v0 == mesh.vertices[0]
    assert sum(t.area for t in tris) == pytest.approx(1.0)


def test_triangles_can_be_iterated_twice() -> None:
    view = _unit_square().triangles()
    assert len(view) == 2
    assert list(view) == list(view)


def test_validate_reports_out_of_range_indices() -> None:
    mesh = Mesh([Point3D(0.0, 0.0, 0.0)] * 3, [Face((0, 1, 5)), Face((0, -1, 2))])
    assert mesh.validate() == [
        "Face 0 references invalid vertex index 5",
        "Face 1 references invalid vertex index -1",
    ]
    assert _unit_square().validate() == []


@pytest.mark.parametrize("bad_index", [-1, 3])
def test_triangles_reject_out_of_range_indices(bad_index: int) -> None:
    mesh = Mesh(
        [Point3D(0.0, 0.0, 0.0), Point3D(1.0, 0.0, 0.0), Point3D(0.0, 1.0, 0.0)],
        [Face((0, 1, bad_index))],
    )
    assert mesh.validate() == [f"Face 0 references invalid vertex index {bad_index}"]
    with pytest.raises(ComputationFailure):
        list(mesh.triangles())


def test_mesh_bounding_box_is_cached() -> None:
    mesh = _unit_square()
    box = mesh.bounding_box
    assert box is mesh.bounding_box
    assert box.max == Point3D(1.0, 1.0, 0.0)


def test_pointcloud_rejects_mismatched_attribute_lengths() -> None:
    pts = [Point3D(0.0, 0.0, 0.0), Point3D(1.0, 0.0, 0.0)]
    with pytest.raises(InvalidArgument, match="intensity"):
        PointCloud(pts, intensity=[1.0])
    with pytest.raises(InvalidArgument):
        PointCloud(pts, colors=[Color.RED])


def test_pointcloud_attributes_and_xyz() -> None:
    cloud = PointCloud([Point3D(1.0, 2.0, 3.0), Point3D(-1.0, 0.0, 1.0)])
    assert cloud.size == len(cloud) == 2
    np.testing.assert_allclose(cloud.xyz, [[1.0, 2.0, 3.0], [-1.0, 0.0, 1.0]])
    assert not cloud.xyz.flags.writeable
    coloured = cloud.with_colors([Color.RED, Color.BLUE])
    assert coloured.colors == (Color.RED, Color.BLUE)
    assert cloud.colors is None
    with_normals = coloured.with_normals([Vector3D.UNIT_Z, Vector3D.UNIT_Z])
    assert with_normals.colors == coloured.colors
    assert cloud.metadata.coordinate_system is CoordinateSystem.RIGHT_HANDED_Y_UP


def test_color_validation_and_hex() -> None:
    assert Color(255, 128, 0).to_hex() == "#FF8000"
    assert Color.from_hex("#0a0B0c") == Color(10, 11, 12)
    assert Color.from_hex("FFFFFF") == Color.WHITE
    with pytest.raises(InvalidArgument):
        Color(256, 0, 0)
    with pytest.raises(InvalidArgument):
        Color(0, -1, 0)
    with pytest.raises(InvalidArgument):
        Color.from_hex("#FFF")
    with pytest.raises(InvalidArgument):
        Color.from_hex("GGGGGG")


def test_voxel_downsample_merges_points_per_cell() -> None:
    cloud = PointCloud(
        [
            Point3D(0.1, 0.1, 0.1),
            Point3D(5.2, 5.2, 5.2),
            Point3D(0.3, 0.3, 0.3),
            Point3D(5.4, 5.4, 5.4),
        ],
        intensity=[1.0, 2.0, 3.0, 4.0],
        metadata=PointCloudMetadata(name="scan"),
    )
    out = cloud.voxel_downsample(1.0)
    assert out.size == 2
    np.testing.assert_allclose(out.xyz, [[0.2, 0.2, 0.2], [5.3, 5.3, 5.3]])
    assert out.intensity is None
    assert out.metadata.name == "scan"
    assert out.metadata.source_format == "downsampled"
    with pytest.raises(InvalidArgument):
        cloud.voxel_downsample(0.0)
