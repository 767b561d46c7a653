"""
Test Suite: Configuration and CLI
=================================
Tests for the run settings and the headless command line front end.
"""

import logging

import numpy as np
import pytest

import cloth_cli
from cloth_config import SimulationConfig, parse_vector
from cloth_logging import LOGGER_NAMES, setup_logging
from mesh3d import Pinning


class TestSimulationConfig:
    def test_defaults_build_the_demo_cloth(self):
        config = SimulationConfig(density=4)
        cloth = config.build_cloth()

        assert len(cloth.nodes) == 25
        assert len(cloth.forces) == 2
        assert cloth.pinning is Pinning.TOP_ROW

    def test_zero_gravity_is_not_registered(self):
        config = SimulationConfig(density=2, gravity=(0.0, 0.0, 0.0))
        assert len(config.build_cloth().forces) == 1

    def test_vectors_from_text(self):
        config = SimulationConfig(gravity="0, -2, 0", wind="1,0,0", pinning="top-corners")

        np.testing.assert_array_equal(config.gravity, [0.0, -2.0, 0.0])
        np.testing.assert_array_equal(config.wind, [1.0, 0.0, 0.0])
        assert config.pinning is Pinning.TOP_CORNERS

    def test_driver_uses_configured_steps(self):
        config = SimulationConfig(density=2, dt=0.004, max_frame_time=0.05)
        driver = config.build_driver(config.build_cloth())

        assert driver.dt == 0.004
        assert driver.max_frame_time == 0.05

    @pytest.mark.parametrize(
        "kwargs",
        [
            dict(dt=0.0),
            dict(max_frame_time=-1.0),
            dict(frames=-1),
            dict(frame_time=0.0),
            dict(jitter=1.0),
            dict(wind_coefficient=-0.1),
            dict(gravity=(1.0, 2.0)),
            dict(pinning="sideways"),
            dict(dt=float("inf")),
            dict(max_frame_time=float("inf")),
            dict(frame_time=float("nan")),
        ],
    )
    def test_invalid_settings(self, kwargs):
        with pytest.raises(ValueError):
            SimulationConfig(**kwargs)

    @pytest.mark.parametrize("text", ["1,2", "a,b,c", ""])
    def test_parse_vector_rejects_garbage(self, text):
        with pytest.raises(ValueError):
            parse_vector(text)


class TestRun:
    def test_summary(self):
        config = SimulationConfig(density=4, frames=30)

        summary = cloth_cli.run(config, seed=3, report_every=10)

        assert summary["frames"] == 30
        assert summary["steps"] > 0
        assert summary["simulated_time"] == pytest.approx(summary["steps"] * config.dt)
        assert summary["lowest_point"] < -1.5
        assert np.isfinite(summary["kinetic_energy"])

    def test_same_seed_same_result(self):
        config = SimulationConfig(density=3, frames=20)

        first = cloth_cli.run(config, seed=7, report_every=0)
        second = cloth_cli.run(config, seed=7, report_every=0)

        assert first == second


class TestMain:
    def test_main_runs(self, capsys):
        code = cloth_cli.main(
            ["--density", "4", "--frames", "12", "--seed", "1", "--report-every", "6", "--wind", "0,0,2"]
        )

        assert code == 0
        assert "Finished 12 frames" in capsys.readouterr().out

    def test_invalid_configuration_exits_with_usage_error(self):
        with pytest.raises(SystemExit) as excinfo:
            cloth_cli.main(["--density", "2", "--frames", "1", "--max-deformation", "0.5"])
        assert excinfo.value.code == 2

    def test_bad_vector_argument(self):
        with pytest.raises(SystemExit) as excinfo:
            cloth_cli.main(["--gravity", "down"])
        assert excinfo.value.code == 2


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "run.log"

    setup_logging(logging.DEBUG, str(log_file))
    logging.getLogger("cloth3d").info("hello")

    for name in LOGGER_NAMES:
        logger = logging.getLogger(name)
        assert len(logger.handlers) == 2
        for handler in logger.handlers:
            handler.flush()
    assert "cloth3d - INFO - hello" in log_file.read_text(encoding="utf-8")

    setup_logging(logging.WARNING)
    assert len(logging.getLogger("cloth3d").handlers) == 1


def test_setup_logging_closes_previous_file(tmp_path):
    setup_logging(logging.INFO, str(tmp_path / "first.log"))
    first = [
        handler
        for handler in logging.getLogger("cloth3d").handlers
        if isinstance(handler, logging.FileHandler)
    ]
    assert len(first) == 1

    setup_logging(logging.WARNING, str(tmp_path / "second.log"))

    assert first[0].stream is None
    assert first[0] not in logging.getLogger("cloth3d").handlers

    setup_logging(logging.WARNING)
