import numpy as np

from wavcorr import diagnostics, find_splice_window, similarity


def test_logging_disabled_by_default(tmp_path, monkeypatch):
    """No log file is written unless call logging is enabled."""

    log_path = tmp_path / "calls.log"
    monkeypatch.setattr(diagnostics, "_LOG_PATH", log_path)
    monkeypatch.setattr(diagnostics, "_LOG_KERNEL_CALLS", False)
    data = np.arange(8, dtype=np.int16)
    similarity(4, data, 0, data, 2)
    assert not log_path.exists()


def test_enabled_logging_records_checked_calls(tmp_path, monkeypatch):
    log_path = tmp_path / "nested" / "calls.log"
    monkeypatch.setattr(diagnostics, "_LOG_PATH", log_path)
    monkeypatch.setattr(diagnostics, "_LOG_KERNEL_CALLS", False)
    diagnostics.enable_kernel_logging(True)
    assert diagnostics.kernel_logging_enabled()

    data = np.arange(8, dtype=np.int16)
    similarity(4, data, 0, data, 2, backend="python")
    find_splice_window(1, 3, data, data, backend="python")

    lines = log_path.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 2
    assert lines[0].startswith("similarity backend=python")
    assert "offset2=2" in lines[0]
    assert lines[1].startswith("find_splice_window backend=python")


def test_set_log_path_redirects_output(tmp_path, monkeypatch):
    monkeypatch.setattr(diagnostics, "_LOG_PATH", diagnostics._LOG_PATH)
    monkeypatch.setattr(diagnostics, "_LOG_KERNEL_CALLS", True)
    target = tmp_path / "other.log"
    diagnostics.set_log_path(target)
    diagnostics.log_kernel_call("hello")
    assert target.read_text(encoding="utf-8") == "hello\n"
