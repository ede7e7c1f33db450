import numpy as np
import pytest

from wavcorr import NO_MATCH, InputKindError, InvalidArgumentError, c_kernels
from wavcorr.api import find_splice_window

BACKENDS = ["python"] + (["c"] if c_kernels.AVAILABLE else [])


@pytest.mark.parametrize("backend", BACKENDS)
def test_matching_tail_and_head_are_found(backend):
    """The overlap where the tail equals the head wins."""

    head = np.array([7, 10, 20, 30], dtype=np.int16)
    tail = np.array([10, 20, 30, 40, 50], dtype=np.int16)
    result = find_splice_window(2, 4, head, tail, backend=backend)
    assert result.window == 3
    assert result.score == pytest.approx(1.0)


@pytest.mark.parametrize("backend", BACKENDS)
def test_ties_keep_the_smallest_overlap(backend):
    """Equal scores keep the first, smallest overlap."""

    flat = np.full(4, 5, dtype=np.int16)
    assert find_splice_window(2, 4, flat, flat, backend=backend).window == 2
    assert find_splice_window(4, 2, flat, flat, backend=backend).window == 2


@pytest.mark.parametrize("backend", BACKENDS)
def test_zero_overlap_scores_zero(backend):
    data = np.array([1, 2, 3], dtype=np.int16)
    result = find_splice_window(0, 0, data, data, backend=backend)
    assert result == (0, 0.0)
    assert result.found


@pytest.mark.parametrize("backend", BACKENDS)
def test_kernel_sentinel_when_no_overlap_fits(backend):
    a = np.array([1, 2, 3], dtype=np.int16)
    b = np.array([1, 2], dtype=np.int16)
    best, score = c_kernels.autosplice(3, 5, len(a), a, len(b), b, backend=backend)
    assert (best, score) == NO_MATCH


def test_result_is_the_best_candidate():
    rng = np.random.default_rng(7)
    a = rng.integers(-20000, 20000, size=50, dtype=np.int16)
    b = rng.integers(-20000, 20000, size=40, dtype=np.int16)

    scores = {w: c_kernels.calc_similarity_py(w, a[len(a) - w:], b) for w in range(1, 41)}
    best_score = max(scores.values())
    expected_window = min(w for w, s in scores.items() if s == best_score)

    result = find_splice_window(1, 40, a, b, backend="python")
    assert result == (expected_window, best_score)


@pytest.mark.parametrize("window0, window1", [(-1, 2), (2, -1), (1, 5), (5, 1)])
def test_windows_longer_than_either_buffer_are_rejected(window0, window1):
    a = np.arange(10, dtype=np.int16)
    b = np.arange(4, dtype=np.int16)
    with pytest.raises(InvalidArgumentError, match="Invalid offset/window"):
        find_splice_window(window0, window1, a, b)


def test_non_buffer_input_is_rejected():
    with pytest.raises(InputKindError):
        find_splice_window(1, 2, [1, 2, 3], np.arange(3, dtype=np.int16))
    with pytest.raises(TypeError):
        find_splice_window(1.5, 2, b"\x00\x01" * 4, b"\x00\x01" * 4)
