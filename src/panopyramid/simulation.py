"""Headless simulation of a zooming camera against a slow texture store.

Useful to watch progressive refinement without a window: each frame the
camera zooms (geometrically from *fov_start* to *fov_end*) and turns, and
texture queries complete after a random number of frames, a fraction of
them failing.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional

from .camera import PerspectiveCamera
from .config import DEFAULT_PYRAMID, PyramidConfig
from .models import TileAddress
from .renderer import PyramidRenderer
from .scene import Scene
from .texture_store import MemoryTextureStore

logger = logging.getLogger(__name__)


@dataclass
class SimulationConfig:
    """Parameters of :func:`simulate`.

    Attributes
    ----------
    frames : int
        Number of frames to run.
    fov_start, fov_end : float
        Field of view at the first and last frame (degrees).
    yaw_per_frame : float
        Camera turn per frame (degrees).
    pitch : float
        Constant camera pitch (degrees).
    max_latency : int
        Texture queries complete 1..max_latency frames after being issued.
    fail_rate : float
        Probability that a query fails.
    seed : int
        Random seed.
    """

    frames: int = 60
    fov_start: float = 90.0
    fov_end: float = 10.0
    yaw_per_frame: float = 1.0
    pitch: float = 0.0
    max_latency: int = 3
    fail_rate: float = 0.0
    seed: int = 0

    def __post_init__(self) -> None:
        if self.frames < 1:
            raise ValueError("frames must be >= 1")
        if self.max_latency < 1:
            raise ValueError("max_latency must be >= 1")
        if not 0.0 <= self.fail_rate <= 1.0:
            raise ValueError("fail_rate must be in [0, 1]")


def _fov_at(sim: SimulationConfig, frame: int) -> float:
    if sim.frames == 1:
        return sim.fov_start
    t = frame / (sim.frames - 1)
    return sim.fov_start * (sim.fov_end / sim.fov_start) ** t


def simulate(
    sim: Optional[SimulationConfig] = None,
    config: PyramidConfig = DEFAULT_PYRAMID,
    *,
    renderer_out: Optional[List[PyramidRenderer]] = None,
) -> List[Dict[str, float]]:
    """Run the simulation and return one stats row per frame.

    If *renderer_out* is given the (still booted) renderer is appended to
    it so the caller can inspect or render the final state.
    """
    sim = sim or SimulationConfig()
    rng = random.Random(sim.seed)
    camera = PerspectiveCamera(sim.fov_start, pitch=sim.pitch)
    scene = Scene()
    store = MemoryTextureStore()
    renderer = PyramidRenderer(camera, scene, store, config)
    renderer.boot()

    due: Dict[TileAddress, int] = {}
    rows: List[Dict[str, float]] = []

    for frame in range(sim.frames):
        camera.fov = _fov_at(sim, frame)
        camera.look(sim.yaw_per_frame * frame, sim.pitch)

        for address in store.pending():
            if address not in due:
                due[address] = frame + rng.randint(1, sim.max_latency)
        for address, when in list(due.items()):
            if when <= frame:
                del due[address]
                if rng.random() < sim.fail_rate:
                    store.fail(address, "simulated failure")
                else:
                    store.complete(address)

        result = renderer.on_frame()
        scene.draw(camera)
        row: Dict[str, float] = {"frame": frame, "fov": round(camera.fov, 4)}
        row.update(result.summary())
        row["cached"] = len(renderer.cache)
        rows.append(row)
        logger.debug("frame %d: %s", frame, row)

    if renderer_out is not None:
        renderer_out.append(renderer)
    else:
        renderer.destroy()
    return rows
