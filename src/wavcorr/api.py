"""Checked entry points around the unchecked kernels.

Each function reinterprets its buffers as int16 samples, enforces the window
and offset preconditions the kernels rely on, and only then calls into
:mod:`wavcorr.c_kernels`.  Violations raise
:class:`~wavcorr.errors.InvalidArgumentError` or
:class:`~wavcorr.errors.InputKindError` without touching the kernel.
"""

from __future__ import annotations

import operator
from typing import NamedTuple

import numpy as np

from . import c_kernels
from .diagnostics import kernel_logging_enabled, log_kernel_call
from .errors import InputKindError, InvalidArgumentError
from .pcm import as_samples

__all__ = [
    "NO_MATCH",
    "SearchResult",
    "find_loop_window",
    "find_splice_window",
    "overlap_add",
    "similarity",
]

_INVALID_WINDOW = "Invalid offset/window"
_INVALID_OUTLEN = "Invalid outlen"


class SearchResult(NamedTuple):
    """Best window size found by a window search and its similarity score."""

    window: int
    score: float

    @property
    def found(self) -> bool:
        """``False`` for the ``(0, -1.0)`` result of a search where nothing fitted."""

        return not (self.window == 0 and self.score == -1.0)


NO_MATCH = SearchResult(0, -1.0)


def _as_int(name: str, value) -> int:
    try:
        return operator.index(value)
    except TypeError as exc:
        raise InputKindError(f"{name} must be an integer, got {type(value).__name__}") from exc


def _log(operation: str, backend: str, **fields) -> None:
    if not kernel_logging_enabled():
        return
    args = " ".join(f"{key}={value}" for key, value in fields.items())
    log_kernel_call(f"{operation} backend={backend} {args}")


def similarity(window, data1, offset1, data2, offset2, *, backend: str = "auto") -> float:
    """Similarity of ``window`` samples of ``data1`` at ``offset1`` and ``data2`` at ``offset2``.

    Returns the cosine similarity of the two windows in ``[-1, 1]``, or ``0.0``
    when either window is silent.
    """

    window = _as_int("window", window)
    offset1 = _as_int("offset1", offset1)
    offset2 = _as_int("offset2", offset2)
    seq1 = as_samples(data1, name="data1")
    seq2 = as_samples(data2, name="data2")
    if (
        window < 0
        or offset1 < 0
        or len(seq1) < offset1 + window
        or offset2 < 0
        or len(seq2) < offset2 + window
    ):
        raise InvalidArgumentError(_INVALID_WINDOW)

    resolved = c_kernels.resolve_backend(backend)
    _log("similarity", resolved, window=window, offset1=offset1, offset2=offset2)
    return c_kernels.calc_similarity(window, seq1[offset1:], seq2[offset2:], backend=resolved)


def find_loop_window(window0, window1, data, offset=0, *, backend: str = "auto") -> SearchResult:
    """Search ``[window0, window1]`` for the period under which ``data`` repeats best.

    The buffer is considered from ``offset`` onwards.  The bounds may be given
    in either order but both must be at least one, since every candidate period
    is used as a divisor.
    """

    window0 = _as_int("window0", window0)
    window1 = _as_int("window1", window1)
    offset = _as_int("offset", offset)
    seq = as_samples(data)
    length = len(seq)
    if (
        window0 < 0
        or window1 < 0
        or offset < 0
        or length < offset + window0
        or length < offset + window1
    ):
        raise InvalidArgumentError(_INVALID_WINDOW)
    if min(window0, window1) < 1:
        raise InvalidArgumentError("Loop window bounds must be at least 1")

    resolved = c_kernels.resolve_backend(backend)
    _log("find_loop_window", resolved, window0=window0, window1=window1, offset=offset, length=length)
    best, score = c_kernels.autocorrelate(window0, window1, length - offset, seq[offset:], backend=resolved)
    return SearchResult(best, score)


def find_splice_window(window0, window1, data1, data2, *, backend: str = "auto") -> SearchResult:
    """Search ``[window0, window1]`` for the overlap where ``data1``'s tail best matches ``data2``'s head."""

    window0 = _as_int("window0", window0)
    window1 = _as_int("window1", window1)
    seq1 = as_samples(data1, name="data1")
    seq2 = as_samples(data2, name="data2")
    length1 = len(seq1)
    length2 = len(seq2)
    if (
        window0 < 0
        or window1 < 0
        or length1 < window0
        or length1 < window1
        or length2 < window0
        or length2 < window1
    ):
        raise InvalidArgumentError(_INVALID_WINDOW)

    resolved = c_kernels.resolve_backend(backend)
    _log("find_splice_window", resolved, window0=window0, window1=window1, length1=length1, length2=length2)
    best, score = c_kernels.autosplice(window0, window1, length1, seq1, length2, seq2, backend=resolved)
    return SearchResult(best, score)


def overlap_add(
    outlen,
    offset1,
    window1,
    data1,
    offset2,
    window2,
    data2,
    *,
    backend: str = "auto",
) -> np.ndarray:
    """Crossfade ``window1`` samples of ``data1`` into ``window2`` samples of ``data2``.

    The first segment fades out and the second fades in across ``outlen``
    output samples; either window may be empty.  Returns a newly allocated
    int16 array owned by the caller.
    """

    outlen = _as_int("outlen", outlen)
    offset1 = _as_int("offset1", offset1)
    window1 = _as_int("window1", window1)
    offset2 = _as_int("offset2", offset2)
    window2 = _as_int("window2", window2)
    seq1 = as_samples(data1, name="data1")
    seq2 = as_samples(data2, name="data2")
    if (
        window1 < 0
        or window2 < 0
        or offset1 < 0
        or len(seq1) < offset1 + window1
        or offset2 < 0
        or len(seq2) < offset2 + window2
    ):
        raise InvalidArgumentError(_INVALID_WINDOW)
    if outlen <= 0:
        raise InvalidArgumentError(_INVALID_OUTLEN)

    resolved = c_kernels.resolve_backend(backend)
    _log(
        "overlap_add",
        resolved,
        outlen=outlen,
        offset1=offset1,
        window1=window1,
        offset2=offset2,
        window2=window2,
    )
    return c_kernels.psola(outlen, window1, seq1[offset1:], window2, seq2[offset2:], backend=resolved)
