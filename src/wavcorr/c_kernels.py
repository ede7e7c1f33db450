"""Unchecked similarity, window-search, and overlap-add kernels.

Every kernel comes in two flavours with the same semantics: a compiled C
implementation built via cffi at import time (``*_c``) and a numpy
implementation (``*_py``).  The dispatchers without a suffix pick one of them.

Nothing in this module validates windows, offsets, or lengths.  Callers hand in
sequences that already start at the right sample and are long enough for the
requested windows; :mod:`wavcorr.api` is the checked layer that guarantees it.
"""
from __future__ import annotations

import importlib.util
import math
import sys
import traceback
from pathlib import Path
from typing import Tuple

import numpy as np

from . import native_build

native_build.ensure_toolchain_env()
_BUILD_CONFIG = native_build.get_build_config()

AVAILABLE = False
_impl = None
UNAVAILABLE_REASON: str | None = None

PCM_SCALE = 32768.0
DTYPE_FLOAT = np.dtype(np.float64)
DTYPE_SAMPLE = np.dtype(np.int16)

BACKENDS = ("auto", "c", "python")

_MODULE_NAME = "_wavcorr_cffi"


def _native_root() -> Path:
    return Path(__file__).resolve().parent / "native"


def _build_dir() -> Path:
    return native_build.native_build_dir(_native_root())


try:
    if native_build.native_disabled():
        raise ImportError(f"disabled via {native_build.DISABLE_ENV}")
    import cffi

    ffi = cffi.FFI()
    ffi.cdef("""
    double wc_similarity(int window, const int16_t *seq1, const int16_t *seq2);
    int wc_autocorrelate(double *psim, int window0, int window1, int length, const int16_t *seq);
    int wc_autosplice(double *psim, int window0, int window1, int length1, const int16_t *seq1, int length2, const int16_t *seq2);
    void wc_psola(int outlen, int16_t *out, int length1, const int16_t *seq1, int length2, const int16_t *seq2);
    """)
    try:
        native_dir = _native_root()
        kernels_source = native_dir / "wavcorr_kernels.c"
        if not kernels_source.exists():
            raise FileNotFoundError(f"native kernel source missing: {kernels_source}")
        build_dir = _build_dir()
        build_dir.mkdir(parents=True, exist_ok=True)
        ffi.set_source(
            _MODULE_NAME,
            '#include "wavcorr_native.h"\n',
            sources=[str(kernels_source)],
            include_dirs=[str(native_dir / "include")],
            extra_compile_args=list(_BUILD_CONFIG.compile_args),
            extra_link_args=list(_BUILD_CONFIG.link_args),
        )
        # compiles only when the generated wrapper or the kernel source changed
        module_path = ffi.compile(tmpdir=str(build_dir), verbose=False)
        spec = importlib.util.spec_from_file_location(_MODULE_NAME, module_path)
        if spec is None or spec.loader is None:
            raise ImportError(f"Unable to load compiled module from {module_path}")
        module = importlib.util.module_from_spec(spec)
        sys.modules[_MODULE_NAME] = module
        spec.loader.exec_module(module)
        _impl = module
        AVAILABLE = True
        UNAVAILABLE_REASON = None
    except Exception as exc:
        AVAILABLE = False
        detail = traceback.format_exc()
        UNAVAILABLE_REASON = f"Failed to compile C kernels via cffi: {exc}\n{detail}"
except ModuleNotFoundError as exc:
    AVAILABLE = False
    UNAVAILABLE_REASON = f"cffi is not installed ({exc})"
except ImportError as exc:
    AVAILABLE = False
    UNAVAILABLE_REASON = f"C kernels {exc}"
except Exception as exc:
    AVAILABLE = False
    UNAVAILABLE_REASON = f"Unexpected error initialising cffi for C kernels: {exc}"


def _require_ctypes_ready(arr: np.ndarray, dtype: np.dtype, *, writable: bool) -> np.ndarray:
    """Validate that ``arr`` can be passed directly to a C kernel."""

    if arr.dtype != dtype:
        raise TypeError(f"expected dtype {dtype}, got {arr.dtype}")
    if not arr.flags.c_contiguous:
        raise ValueError("arrays passed to C kernels must be C-contiguous")
    if writable and not arr.flags.writeable:
        raise ValueError("writable arrays passed to C kernels must be writeable")
    return arr


def _sample_ptr(seq: np.ndarray):
    buf = _require_ctypes_ready(np.asarray(seq), DTYPE_SAMPLE, writable=False)
    return ffi.cast("const int16_t *", buf.ctypes.data), buf


def _require_native() -> None:
    if not AVAILABLE or _impl is None:
        raise RuntimeError("C kernel not available")


def resolve_backend(backend: str = "auto") -> str:
    """Map a requested backend name onto ``"c"`` or ``"python"``."""

    if backend not in BACKENDS:
        raise ValueError(f"unknown kernel backend {backend!r}; expected one of {', '.join(BACKENDS)}")
    if backend == "auto":
        return "c" if AVAILABLE else "python"
    if backend == "c" and not AVAILABLE:
        reason = UNAVAILABLE_REASON or "unknown reason"
        raise RuntimeError(f"C kernels requested but unavailable ({reason.splitlines()[0]})")
    return backend


# ---------------------------------------------------------------------------
# Shared helpers


def hann(i, n):
    """Raised-cosine weight ``(1 - cos(2*pi*i/n)) / 2``; ``i`` may be an array."""

    return (1.0 - np.cos(2.0 * np.pi * np.asarray(i) / n)) / 2.0


def wrap_int16(values) -> np.ndarray:
    """Truncate toward zero and narrow to int16 with two's-complement wraparound.

    No saturation: ``32768.0`` becomes ``-32768`` and ``-32769.0`` becomes
    ``32767``.
    """

    truncated = np.trunc(np.asarray(values, dtype=DTYPE_FLOAT)).astype(np.int64)
    return truncated.astype(DTYPE_SAMPLE)


# ---------------------------------------------------------------------------
# Similarity


def calc_similarity_c(window: int, seq1: np.ndarray, seq2: np.ndarray) -> float:
    """Normalised cross-correlation of ``seq1[:window]`` and ``seq2[:window]`` in C."""

    _require_native()
    p1, _keep1 = _sample_ptr(seq1)
    p2, _keep2 = _sample_ptr(seq2)
    return float(_impl.lib.wc_similarity(int(window), p1, p2))


def calc_similarity_py(window: int, seq1: np.ndarray, seq2: np.ndarray) -> float:
    """Normalised cross-correlation of the first ``window`` samples of each sequence.

    Samples are scaled by ``1/32768`` before accumulating the two energies and
    the dot product.  Returns exactly ``0.0`` when either window is silent.
    """

    x1 = np.asarray(seq1[:window], dtype=DTYPE_FLOAT) / PCM_SCALE
    x2 = np.asarray(seq2[:window], dtype=DTYPE_FLOAT) / PCM_SCALE
    n1 = float(np.sum(x1 * x1))
    n2 = float(np.sum(x2 * x2))
    dot = float(np.sum(x1 * x2))
    energy = n1 * n2
    return dot / math.sqrt(energy) if energy else 0.0


def calc_similarity(window: int, seq1: np.ndarray, seq2: np.ndarray, *, backend: str = "auto") -> float:
    if resolve_backend(backend) == "c":
        return calc_similarity_c(window, seq1, seq2)
    return calc_similarity_py(window, seq1, seq2)


# ---------------------------------------------------------------------------
# Period search


def autocorrelate_c(window0: int, window1: int, length: int, seq: np.ndarray) -> Tuple[int, float]:
    _require_native()
    ptr, _keep = _sample_ptr(seq)
    psim = ffi.new("double *")
    best = _impl.lib.wc_autocorrelate(psim, int(window0), int(window1), int(length), ptr)
    return int(best), float(psim[0])


def autocorrelate_py(window0: int, window1: int, length: int, seq: np.ndarray) -> Tuple[int, float]:
    """Find the period in ``[window0, window1]`` under which ``seq`` repeats best.

    Each candidate ``w`` compares the longest multiple of ``w`` not exceeding
    ``window1`` against the same span shifted by ``w``.  Candidates that would
    read past ``length`` are skipped.  Ties keep the smallest ``w``; ``(0, -1.0)``
    means no candidate fitted.
    """

    if window1 < window0:
        window0, window1 = window1, window0
    best_window = 0
    best_score = -1.0
    for w in range(window0, window1 + 1):
        span = window1 - (window1 % w)
        if span + w <= length:
            score = calc_similarity_py(span, seq, seq[w:])
            if best_score < score:
                best_window = w
                best_score = score
    return best_window, best_score


def autocorrelate(
    window0: int, window1: int, length: int, seq: np.ndarray, *, backend: str = "auto"
) -> Tuple[int, float]:
    if resolve_backend(backend) == "c":
        return autocorrelate_c(window0, window1, length, seq)
    return autocorrelate_py(window0, window1, length, seq)


# ---------------------------------------------------------------------------
# Splice search


def autosplice_c(
    window0: int, window1: int, length1: int, seq1: np.ndarray, length2: int, seq2: np.ndarray
) -> Tuple[int, float]:
    _require_native()
    p1, _keep1 = _sample_ptr(seq1)
    p2, _keep2 = _sample_ptr(seq2)
    psim = ffi.new("double *")
    best = _impl.lib.wc_autosplice(psim, int(window0), int(window1), int(length1), p1, int(length2), p2)
    return int(best), float(psim[0])


def autosplice_py(
    window0: int, window1: int, length1: int, seq1: np.ndarray, length2: int, seq2: np.ndarray
) -> Tuple[int, float]:
    """Find the overlap in ``[window0, window1]`` where the tail of ``seq1`` best matches the head of ``seq2``."""

    if window1 < window0:
        window0, window1 = window1, window0
    best_window = 0
    best_score = -1.0
    for w in range(window0, window1 + 1):
        if w <= length1 and w <= length2:
            score = calc_similarity_py(w, seq1[length1 - w:], seq2)
            if best_score < score:
                best_window = w
                best_score = score
    return best_window, best_score


def autosplice(
    window0: int,
    window1: int,
    length1: int,
    seq1: np.ndarray,
    length2: int,
    seq2: np.ndarray,
    *,
    backend: str = "auto",
) -> Tuple[int, float]:
    if resolve_backend(backend) == "c":
        return autosplice_c(window0, window1, length1, seq1, length2, seq2)
    return autosplice_py(window0, window1, length1, seq1, length2, seq2)


# ---------------------------------------------------------------------------
# Overlap-add


def psola_c(outlen: int, length1: int, seq1: np.ndarray, length2: int, seq2: np.ndarray) -> np.ndarray:
    """Call the compiled ``wc_psola`` kernel; returns a new int16 array."""

    _require_native()
    out = np.empty(int(outlen), dtype=DTYPE_SAMPLE)
    out_ptr = ffi.cast("int16_t *", _require_ctypes_ready(out, DTYPE_SAMPLE, writable=True).ctypes.data)
    p1, _keep1 = _sample_ptr(seq1)
    p2, _keep2 = _sample_ptr(seq2)
    _impl.lib.wc_psola(int(outlen), out_ptr, int(length1), p1, int(length2), p2)
    return out


def psola_py(outlen: int, length1: int, seq1: np.ndarray, length2: int, seq2: np.ndarray) -> np.ndarray:
    """Crossfade ``seq1`` (fading out) into ``seq2`` (fading in) over ``outlen`` samples.

    Source samples are picked by floor-scaling the output index onto each
    source length; there is no interpolation.  The two halves of a Hann window
    of period ``2 * outlen`` weight the sources, and the sum is truncated and
    wrapped to int16.  A zero length drops that source entirely.
    """

    idx = np.arange(outlen, dtype=np.int64)
    acc = np.zeros(outlen, dtype=DTYPE_FLOAT)
    if 0 < length1:
        src1 = np.asarray(seq1, dtype=DTYPE_FLOAT)[idx * length1 // outlen]
        acc += src1 * hann(idx + outlen, 2 * outlen)
    if 0 < length2:
        src2 = np.asarray(seq2, dtype=DTYPE_FLOAT)[idx * length2 // outlen]
        acc += src2 * hann(idx, 2 * outlen)
    return wrap_int16(acc)


def psola(
    outlen: int,
    length1: int,
    seq1: np.ndarray,
    length2: int,
    seq2: np.ndarray,
    *,
    backend: str = "auto",
) -> np.ndarray:
    if resolve_backend(backend) == "c":
        return psola_c(outlen, length1, seq1, length2, seq2)
    return psola_py(outlen, length1, seq1, length2, seq2)


__all__ = [
    "AVAILABLE",
    "BACKENDS",
    "PCM_SCALE",
    "UNAVAILABLE_REASON",
    "autocorrelate",
    "autocorrelate_c",
    "autocorrelate_py",
    "autosplice",
    "autosplice_c",
    "autosplice_py",
    "calc_similarity",
    "calc_similarity_c",
    "calc_similarity_py",
    "hann",
    "psola",
    "psola_c",
    "psola_py",
    "resolve_backend",
    "wrap_int16",
]
