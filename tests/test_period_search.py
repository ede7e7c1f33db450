import numpy as np
import pytest

from wavcorr import NO_MATCH, InvalidArgumentError, c_kernels
from wavcorr.api import find_loop_window

BACKENDS = ["python"] + (["c"] if c_kernels.AVAILABLE else [])

REPEATING = np.tile(np.array([1000, -1000, 500], dtype=np.int16), 4)


@pytest.mark.parametrize("backend", BACKENDS)
def test_repeating_pattern_finds_its_period(backend):
    """A three-sample pattern repeated many times loops at three samples."""

    result = find_loop_window(2, 6, REPEATING, backend=backend)
    # periods 3 and 6 both score exactly 1.0; the smaller one wins
    assert result.window == 3
    assert result.score == pytest.approx(1.0)
    assert result.found


@pytest.mark.parametrize("backend", BACKENDS)
def test_bounds_may_be_given_in_either_order(backend):
    assert find_loop_window(6, 2, REPEATING, backend=backend) == find_loop_window(2, 6, REPEATING, backend=backend)


@pytest.mark.parametrize("backend", BACKENDS)
def test_result_unpacks_like_a_pair(backend):
    window, score = find_loop_window(2, 6, REPEATING, backend=backend)
    assert (window, score) == (3, pytest.approx(1.0))


@pytest.mark.parametrize("backend", BACKENDS)
def test_no_feasible_period_returns_sentinel(backend):
    """No candidate fits the buffer, so the sentinel comes back."""

    # every candidate needs more than twelve samples for its shifted comparison
    result = find_loop_window(7, 12, REPEATING, backend=backend)
    assert result == NO_MATCH
    assert not result.found


@pytest.mark.parametrize("backend", BACKENDS)
def test_kernel_sentinel_when_window_exceeds_length(backend):
    best, score = c_kernels.autocorrelate(13, 13, 12, REPEATING, backend=backend)
    assert (best, score) == (0, -1.0)


def test_offset_skips_leading_samples():
    data = np.concatenate([np.array([9, -31, 4, 400, 0], dtype=np.int16), REPEATING])
    result = find_loop_window(2, 6, data, offset=5)
    assert result.window == 3
    assert result.score == pytest.approx(1.0)


def test_result_is_the_best_candidate():
    rng = np.random.default_rng(42)
    t = np.arange(400)
    seq = (8000 * np.sin(2 * np.pi * t / 37.0) + rng.normal(0, 20, t.size)).astype(np.int16)
    window0, window1 = 20, 60

    scores = {}
    for w in range(window0, window1 + 1):
        span = window1 - window1 % w
        if span + w <= len(seq):
            scores[w] = c_kernels.calc_similarity_py(span, seq, seq[w:])
    best_score = max(scores.values())
    expected_window = min(w for w, s in scores.items() if s == best_score)

    result = find_loop_window(window0, window1, seq, backend="python")
    assert result.window == expected_window
    assert result.score == best_score
    assert result.window == 37


@pytest.mark.parametrize("bounds", [(0, 4), (4, 0), (0, 0)])
def test_zero_period_bound_is_rejected(bounds):
    with pytest.raises(InvalidArgumentError):
        find_loop_window(bounds[0], bounds[1], REPEATING)


@pytest.mark.parametrize(
    "window0, window1, offset",
    [(-1, 4, 0), (2, -4, 0), (2, 4, -1), (2, 13, 0), (2, 8, 5)],
)
def test_out_of_range_arguments_are_rejected(window0, window1, offset):
    with pytest.raises(InvalidArgumentError, match="Invalid offset/window"):
        find_loop_window(window0, window1, REPEATING, offset)


def test_rejected_arguments_never_reach_kernel(monkeypatch):
    """Invalid arguments are refused before any kernel runs."""

    def _fail(*_args, **_kwargs):
        raise AssertionError("kernel should not run for invalid arguments")

    monkeypatch.setattr(c_kernels, "autocorrelate", _fail)
    with pytest.raises(InvalidArgumentError):
        find_loop_window(2, 20, REPEATING)
