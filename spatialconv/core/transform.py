from __future__ import annotations
from typing import ClassVar, Iterable, Tuple
import numpy as np

from .errors import InvalidArgument
from .utils import radians
from .primitives import Point3D, Vector3D


class Transform3D:
    """4x4 row-major affine transform.

    :meth:`apply` treats its argument as a position (w=1) and picks up the
    translation column; :meth:`apply_to_vector` treats it as a direction
    (w=0) and never does.
    """

    IDENTITY: ClassVar["Transform3D"]

    __slots__ = ("_coefficients", "_m")

    def __init__(self, coefficients: Iterable[float] | np.ndarray) -> None:
        if not isinstance(coefficients, np.ndarray):
            coefficients = list(coefficients)
        try:
            arr = np.asarray(coefficients, dtype=np.float64).reshape(-1)
        except (TypeError, ValueError) as exc:
            raise InvalidArgument(f"Transform coefficients must be numeric: {exc}") from exc
        if arr.size != 16:
            raise InvalidArgument(f"Transform matrix must have 16 elements, got {arr.size}")
        self._m = arr.reshape(4, 4).copy()
        self._m.setflags(write=False)
        self._coefficients: Tuple[float, ...] = tuple(float(v) for v in arr)

    # -- accessors --
    @property
    def coefficients(self) -> Tuple[float, ...]:
        return self._coefficients

    @property
    def matrix(self) -> np.ndarray:
        return self._m.copy()

    # -- application --
    def apply(self, point: Point3D) -> Point3D:
        m = self._coefficients
        x = m[0] * point.x + m[1] * point.y + m[2] * point.z + m[3]
        y = m[4] * point.x + m[5] * point.y + m[6] * point.z + m[7]
        z = m[8] * point.x + m[9] * point.y + m[10] * point.z + m[11]
        return Point3D(x, y, z)

    def apply_to_vector(self, v: Vector3D) -> Vector3D:
        m = self._coefficients
        x = m[0] * v.x + m[1] * v.y + m[2] * v.z
        y = m[4] * v.x + m[5] * v.y + m[6] * v.z
        z = m[8] * v.x + m[9] * v.y + m[10] * v.z
        return Vector3D(x, y, z)

    def apply_points(self, xyz: np.ndarray) -> np.ndarray:
        """Vectorised :meth:`apply` over an (N, 3) array."""
        xyz = np.asarray(xyz, dtype=np.float64)
        if xyz.ndim != 2 or xyz.shape[1] != 3:
            raise InvalidArgument(f"Points must have shape (N, 3), got {xyz.shape}")
        return xyz @ self._m[:3, :3].T + self._m[:3, 3]

    def apply_vectors(self, xyz: np.ndarray) -> np.ndarray:
        """Vectorised :meth:`apply_to_vector` over an (N, 3) array."""
        xyz = np.asarray(xyz, dtype=np.float64)
        if xyz.ndim != 2 or xyz.shape[1] != 3:
            raise InvalidArgument(f"Vectors must have shape (N, 3), got {xyz.shape}")
        return xyz @ self._m[:3, :3].T

    # -- composition --
    def then(self, other: "Transform3D") -> "Transform3D":
        """Transform that applies ``self`` first and ``other`` second.

        Points are column vectors, so the product is ``other @ self``.
        """
        result = [0.0] * 16
        a = other._coefficients
        b = self._coefficients
        for row in range(4):
            for col in range(4):
                s = 0.0
                for k in range(4):
                    s += a[row * 4 + k] * b[k * 4 + col]
                result[row * 4 + col] = s
        return Transform3D(result)

    # -- named constructors --
    @staticmethod
    def identity() -> "Transform3D":
        return Transform3D.IDENTITY

    @staticmethod
    def translation(tx: float, ty: float, tz: float) -> "Transform3D":
        return Transform3D([
            1.0, 0.0, 0.0, tx,
            0.0, 1.0, 0.0, ty,
            0.0, 0.0, 1.0, tz,
            0.0, 0.0, 0.0, 1.0,
        ])

    @staticmethod
    def scale(sx: float, sy: float, sz: float) -> "Transform3D":
        return Transform3D([
            sx, 0.0, 0.0, 0.0,
            0.0, sy, 0.0, 0.0,
            0.0, 0.0, sz, 0.0,
            0.0, 0.0, 0.0, 1.0,
        ])

    @staticmethod
    def rotation_x(radians: float) -> "Transform3D":
        c, s = float(np.cos(radians)), float(np.sin(radians))
        return Transform3D([
            1.0, 0.0, 0.0, 0.0,
            0.0, c, -s, 0.0,
            0.0, s, c, 0.0,
            0.0, 0.0, 0.0, 1.0,
        ])

    @staticmethod
    def rotation_y(radians: float) -> "Transform3D":
        c, s = float(np.cos(radians)), float(np.sin(radians))
        return Transform3D([
            c, 0.0, s, 0.0,
            0.0, 1.0, 0.0, 0.0,
            -s, 0.0, c, 0.0,
            0.0, 0.0, 0.0, 1.0,
        ])

    @staticmethod
    def rotation_z(radians: float) -> "Transform3D":
        c, s = float(np.cos(radians)), float(np.sin(radians))
        return Transform3D([
            c, -s, 0.0, 0.0,
            s, c, 0.0, 0.0,
            0.0, 0.0, 1.0, 0.0,
            0.0, 0.0, 0.0, 1.0,
        ])

    @staticmethod
    def from_xyz_rpy(xyz: tuple[float, float, float], rpy_deg: tuple[float, float, float]) -> "Transform3D":
        """Roll about X, then pitch about Y, then yaw about Z, then translate."""
        rx, ry, rz = (float(radians(a)) for a in rpy_deg)
        return (
            Transform3D.rotation_x(rx)
            .then(Transform3D.rotation_y(ry))
            .then(Transform3D.rotation_z(rz))
            .then(Transform3D.translation(*xyz))
        )

    # -- value semantics --
    def __eq__(self, other: object) -> bool:
        if self is other:
            return True
        if not isinstance(other, Transform3D):
            return NotImplemented
        return self._coefficients == other._coefficients

    def __hash__(self) -> int:
        return hash(self._coefficients)

    def __repr__(self) -> str:
        rows = ", ".join(
            "[" + ", ".join(f"{v:g}" for v in self._coefficients[r * 4:(r + 1) * 4]) + "]" for r in range(4)
        )
        return f"Transform3D([{rows}])"


Transform3D.IDENTITY = Transform3D([
    1.0, 0.0, 0.0, 0.0,
    0.0, 1.0, 0.0, 0.0,
    0.0, 0.0, 1.0, 0.0,
    0.0, 0.0, 0.0, 1.0,
])
