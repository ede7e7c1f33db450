import json
from pathlib import Path

import pytest

from wavcorr.config import DEFAULT_CONFIG_PATH, AppConfig, load_configuration


def _write(tmp_path: Path, payload: dict) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(payload))
    return path


def test_default_configuration_loads() -> None:
    config = load_configuration(DEFAULT_CONFIG_PATH)
    assert isinstance(config, AppConfig)
    assert config.sample_rate > 0
    assert config.kernels.backend == "auto"
    assert config.benchmark.sizes
    assert 1 <= config.benchmark.window_min <= config.benchmark.window_max


def test_missing_sections_use_defaults(tmp_path: Path) -> None:
    config = load_configuration(_write(tmp_path, {}))
    assert config == AppConfig()


def test_configuration_rejects_unknown_backend(tmp_path: Path) -> None:
    bad = _write(tmp_path, {"kernels": {"backend": "gpu"}})
    with pytest.raises(ValueError) as excinfo:
        load_configuration(bad)
    assert "kernels.backend" in str(excinfo.value)


@pytest.mark.parametrize(
    "benchmark",
    [
        {"sizes": []},
        {"sizes": [128, 0]},
        {"iterations": 0},
        {"window_min": 0},
        {"window_min": 64, "window_max": 32},
    ],
)
def test_configuration_rejects_bad_benchmark_settings(tmp_path: Path, benchmark: dict) -> None:
    with pytest.raises(ValueError) as excinfo:
        load_configuration(_write(tmp_path, {"benchmark": benchmark}))
    assert "benchmark" in str(excinfo.value)


def test_configuration_rejects_bad_sample_rate(tmp_path: Path) -> None:
    with pytest.raises(ValueError):
        load_configuration(_write(tmp_path, {"sample_rate": 0}))
