"""Tests for the headless zoom simulation."""

import pytest

from panopyramid.config import DEFAULT_PYRAMID
from panopyramid.simulation import SimulationConfig, _fov_at, simulate


class TestSimulationConfig:

    @pytest.mark.parametrize("kwargs", [
        {"frames": 0},
        {"max_latency": 0},
        {"fail_rate": 1.5},
    ])
    def test_invalid(self, kwargs):
        with pytest.raises(ValueError):
            SimulationConfig(**kwargs)

    def test_fov_interpolation(self):
        sim = SimulationConfig(frames=3, fov_start=80.0, fov_end=20.0)
        assert _fov_at(sim, 0) == pytest.approx(80.0)
        assert _fov_at(sim, 1) == pytest.approx(40.0)
        assert _fov_at(sim, 2) == pytest.approx(20.0)


class TestSimulate:

    def test_one_row_per_frame(self):
        rows = simulate(SimulationConfig(frames=5))
        assert [r["frame"] for r in rows] == list(range(5))
        assert {"fov", "level", "visible", "drawn", "cached"} <= set(rows[0])

    def test_steady_view_converges(self):
        sim = SimulationConfig(frames=10, fov_start=60.0, fov_end=60.0,
                               yaw_per_frame=0.0, max_latency=1)
        rows = simulate(sim)
        last = rows[-1]
        assert last["level"] == 1
        assert last["ready"] == last["visible"] == 4
        assert last["missing"] == 0

    def test_everything_failing_draws_nothing(self):
        sim = SimulationConfig(frames=8, fail_rate=1.0)
        rows = simulate(sim)
        assert all(r["drawn"] == 0 for r in rows)

    def test_zoom_raises_level(self):
        rows = simulate(SimulationConfig(frames=20, fov_start=90.0, fov_end=5.0))
        assert rows[0]["level"] == 1
        assert rows[-1]["level"] == 5

    def test_deterministic(self):
        sim = SimulationConfig(frames=15, fail_rate=0.2, seed=7)
        assert simulate(sim) == simulate(sim)

    def test_renderer_out(self):
        holder = []
        simulate(SimulationConfig(frames=3), DEFAULT_PYRAMID, renderer_out=holder)
        assert len(holder) == 1
        renderer = holder[0]
        assert renderer.last_resolution is not None
        renderer.destroy()
