"""Tests for the command-line interface."""

import json
import logging

import pytest

from panopyramid.cli import build_parser, main
from panopyramid.config import LOW_MEMORY_PYRAMID, save_config
from panopyramid.logging_config import setup_logging


class TestParser:

    def test_requires_command(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args([])

    def test_simulate_defaults(self):
        args = build_parser().parse_args(["simulate"])
        assert args.frames == 60
        assert args.fov_start == 90.0
        assert args.render_path is None


class TestLevels:

    def test_table(self, capsys):
        main(["levels"])
        out = capsys.readouterr().out
        assert "level" in out.splitlines()[0]

    def test_json(self, capsys):
        main(["levels", "--json"])
        rows = json.loads(capsys.readouterr().out)
        assert len(rows) == 11
        assert rows[0]["tiles_total"] == 6

    def test_config_file(self, capsys, tmp_path):
        path = tmp_path / "pyramid.json"
        save_config(LOW_MEMORY_PYRAMID, path)
        main(["--config", str(path), "levels", "--json"])
        rows = json.loads(capsys.readouterr().out)
        assert len(rows) == LOW_MEMORY_PYRAMID.level_max + 1

    def test_bad_config(self, capsys, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"level_max": 3, "bogus": 1}))
        with pytest.raises(SystemExit):
            main(["--config", str(path), "levels"])
        assert "Invalid config" in capsys.readouterr().out

    def test_missing_config(self, capsys, tmp_path):
        with pytest.raises(SystemExit):
            main(["--config", str(tmp_path / "nope.json"), "levels"])


class TestSimulate:

    def test_json(self, capsys):
        main(["simulate", "--frames", "5", "--json"])
        rows = json.loads(capsys.readouterr().out)
        assert len(rows) == 5

    def test_table(self, capsys):
        main(["simulate", "--frames", "3"])
        lines = capsys.readouterr().out.splitlines()
        assert lines[0].split()[0] == "frame"
        assert len(lines) == 4

    def test_render_out(self, capsys, tmp_path):
        out = tmp_path / "net.png"
        main(["simulate", "--frames", "4", "--render-out", str(out)])
        assert out.exists()
        assert f"Saved {out}" in capsys.readouterr().out

    def test_invalid_simulation(self, capsys):
        with pytest.raises(SystemExit):
            main(["simulate", "--fail-rate", "2"])
        assert "Invalid simulation" in capsys.readouterr().out


class TestLogging:

    def test_setup_logging(self, tmp_path):
        log_file = tmp_path / "run.log"
        logger = setup_logging(logging.DEBUG, str(log_file))
        try:
            assert logger.name == "panopyramid"
            assert len(logger.handlers) == 2
            logging.getLogger("panopyramid.levels").info("hello")
            for handler in logger.handlers:
                handler.flush()
            assert "hello" in log_file.read_text()
        finally:
            for handler in logger.handlers:
                handler.close()
            logger.handlers.clear()

    def test_repeated_setup_replaces_handlers(self):
        setup_logging()
        logger = setup_logging()
        try:
            assert len(logger.handlers) == 1
        finally:
            logger.handlers.clear()
