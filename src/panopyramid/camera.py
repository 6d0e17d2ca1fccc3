"""Camera collaborator.

The pyramid needs three things from a camera: its vertical field of view in
degrees, its combined ``projection @ view`` matrix, and a way to be told when
the field of view changes.  :class:`PerspectiveCamera` is a reference
implementation sitting at the cube centre.

Matrices use the column-vector convention: ``clip = M @ [x, y, z, 1]``.
"""

from __future__ import annotations

import math
from typing import Callable, List, Protocol, runtime_checkable

import numpy as np

FovListener = Callable[[float], None]


class Subscription:
    """Handle returned by :meth:`PerspectiveCamera.subscribe`."""

    def __init__(self, listeners: List[FovListener], callback: FovListener) -> None:
        self._listeners = listeners
        self._callback = callback
        self.active = True

    def unsubscribe(self) -> None:
        """Stop notifications.  Safe to call more than once."""
        if not self.active:
            return
        self.active = False
        if self._callback in self._listeners:
            self._listeners.remove(self._callback)


@runtime_checkable
class Camera(Protocol):
    @property
    def fov(self) -> float:
        ...

    @property
    def view_projection(self) -> np.ndarray:
        ...

    def subscribe(self, callback: FovListener) -> Subscription:
        ...


def perspective(fovy: float, aspect: float, near: float, far: float) -> np.ndarray:
    """OpenGL perspective projection; *fovy* in radians."""
    f = 1.0 / math.tan(fovy / 2.0)
    return np.array([
        [f / aspect, 0, 0, 0],
        [0, f, 0, 0],
        [0, 0, (far + near) / (near - far), (2 * far * near) / (near - far)],
        [0, 0, -1, 0],
    ], dtype=np.float64)


def look_at(eye, target, up=(0.0, 1.0, 0.0)) -> np.ndarray:
    eye_v = np.asarray(eye, dtype=np.float64)
    forward = np.asarray(target, dtype=np.float64) - eye_v
    forward /= np.linalg.norm(forward)
    right = np.cross(forward, np.asarray(up, dtype=np.float64))
    right /= np.linalg.norm(right)
    true_up = np.cross(right, forward)
    view = np.identity(4, dtype=np.float64)
    view[0, :3] = right
    view[1, :3] = true_up
    view[2, :3] = -forward
    view[:3, 3] = -view[:3, :3] @ eye_v
    return view


def _check_fov(fov: float) -> None:
    if not 0 < fov < 180:
        raise ValueError(f"Perspective field of view must be in (0, 180), got {fov}")


# Keep away from the poles so look_at's cross product stays defined.
_PITCH_LIMIT = 89.9


class PerspectiveCamera:
    """Camera at the origin, oriented by yaw and pitch (degrees).

    ``yaw = pitch = 0`` looks down ``-Z`` (the front face); positive yaw
    turns left, positive pitch looks up.
    """

    def __init__(
        self,
        fov: float = 90.0,
        *,
        aspect: float = 1.0,
        near: float = 0.1,
        far: float = 10000.0,
        yaw: float = 0.0,
        pitch: float = 0.0,
    ) -> None:
        _check_fov(fov)
        if aspect <= 0:
            raise ValueError("aspect must be > 0")
        if not 0 < near < far:
            raise ValueError("Expected 0 < near < far")
        self._fov = float(fov)
        self.aspect = aspect
        self.near = near
        self.far = far
        self.yaw = yaw
        self.pitch = max(-_PITCH_LIMIT, min(_PITCH_LIMIT, pitch))
        self._listeners: List[FovListener] = []

    # ── field of view ───────────────────────────────────────────────

    @property
    def fov(self) -> float:
        return self._fov

    @fov.setter
    def fov(self, value: float) -> None:
        _check_fov(value)
        value = float(value)
        if value == self._fov:
            return
        self._fov = value
        for callback in list(self._listeners):
            callback(value)

    def subscribe(self, callback: FovListener) -> Subscription:
        self._listeners.append(callback)
        return Subscription(self._listeners, callback)

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    # ── orientation ─────────────────────────────────────────────────

    def look(self, yaw: float, pitch: float) -> None:
        self.yaw = yaw
        self.pitch = max(-_PITCH_LIMIT, min(_PITCH_LIMIT, pitch))

    @property
    def forward(self) -> np.ndarray:
        yaw = math.radians(self.yaw)
        pitch = math.radians(self.pitch)
        return np.array([
            -math.sin(yaw) * math.cos(pitch),
            math.sin(pitch),
            -math.cos(yaw) * math.cos(pitch),
        ])

    # ── matrices ────────────────────────────────────────────────────

    @property
    def projection_matrix(self) -> np.ndarray:
        return perspective(math.radians(self._fov), self.aspect, self.near, self.far)

    @property
    def view_matrix(self) -> np.ndarray:
        return look_at((0.0, 0.0, 0.0), self.forward)

    @property
    def view_projection(self) -> np.ndarray:
        return self.projection_matrix @ self.view_matrix

    def __repr__(self) -> str:
        return (
            f"PerspectiveCamera(fov={self._fov:g}, yaw={self.yaw:g}, "
            f"pitch={self.pitch:g}, aspect={self.aspect:g})"
        )
