#!/usr/bin/env python3
"""Demo: zoom into the front face while a thread pool "loads" textures.

Usage:
    python scripts/demo_threaded.py [--frames N] [--delay SECONDS] [--out DIR]

Each texture load sleeps for a random delay; the renderer keeps drawing the
best ready tiles meanwhile.  The final draw set is saved as a cube-net PNG.
"""

from __future__ import annotations

import argparse
import logging
import random
import sys
import time
from pathlib import Path

# Ensure src/ is on the path when running as a script
ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"
if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from panopyramid.camera import PerspectiveCamera
from panopyramid.config import DEFAULT_PYRAMID
from panopyramid.logging_config import setup_logging
from panopyramid.renderer import PyramidRenderer
from panopyramid.scene import Scene
from panopyramid.texture_store import ThreadedTextureStore
from panopyramid.visualize import render_draw_set_png


def main() -> None:
    parser = argparse.ArgumentParser(description="Threaded texture loading demo")
    parser.add_argument("--frames", type=int, default=40, help="Frames to run (default: 40)")
    parser.add_argument("--delay", type=float, default=0.05, help="Max load delay in seconds")
    parser.add_argument("--fov-end", type=float, default=8.0, help="Final field of view")
    parser.add_argument("--out", type=str, default="exports", help="Output directory")
    parser.add_argument("--seed", type=int, default=42, help="Random seed")
    args = parser.parse_args()

    setup_logging(logging.INFO)
    rng = random.Random(args.seed)

    def loader(address):
        time.sleep(rng.uniform(0.0, args.delay))
        return f"texture:{address}"

    out_dir = Path(args.out)
    out_dir.mkdir(parents=True, exist_ok=True)

    camera = PerspectiveCamera(90.0)
    scene = Scene()
    with ThreadedTextureStore(loader, max_workers=8) as store:
        renderer = PyramidRenderer(camera, scene, store, DEFAULT_PYRAMID)
        renderer.boot()

        for frame in range(args.frames):
            t = frame / max(1, args.frames - 1)
            camera.fov = 90.0 * (args.fov_end / 90.0) ** t
            result = renderer.on_frame()
            s = result.summary()
            print(f"frame {frame:3d}  fov {camera.fov:7.3f}  level {s['level']:2d}  "
                  f"ready {s['ready']:3d}/{s['visible']:<3d}  "
                  f"sub {s['substituted']:3d}  drawn {s['drawn']:3d}")
            time.sleep(args.delay / 2)

        out = out_dir / "draw_set.png"
        last = renderer.last_resolution
        render_draw_set_png(
            renderer.drawn.values(), out,
            candidates=last.candidates if last is not None else None,
            title=f"level {renderer.level}",
        )
        print(f"Saved {out}")
        renderer.destroy()


if __name__ == "__main__":
    main()
