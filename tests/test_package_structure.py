"""Package surface tests."""

import importlib
import importlib.util

import pytest


def test_checked_api_exposed():
    """The checked operations should be importable from the package root."""

    wavcorr = importlib.import_module("wavcorr")
    for name in ("similarity", "find_loop_window", "find_splice_window", "overlap_add"):
        assert callable(getattr(wavcorr, name))


def test_errors_are_standard_exception_kinds():
    """Library errors remain catchable as the builtin exception kinds."""

    wavcorr = importlib.import_module("wavcorr")
    assert issubclass(wavcorr.InvalidArgumentError, ValueError)
    assert issubclass(wavcorr.InputKindError, TypeError)
    assert issubclass(wavcorr.InvalidArgumentError, wavcorr.WavcorrError)


@pytest.mark.parametrize("module", ["api", "c_kernels", "cli", "config", "pcm", "benchmarks"])
def test_modules_reside_in_wavcorr(module: str):
    """Modules should resolve directly from the wavcorr package."""

    spec = importlib.util.find_spec(f"wavcorr.{module}")
    assert spec is not None, f"wavcorr.{module} should be importable"
