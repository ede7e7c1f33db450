"""Marshaling between raw PCM byte buffers and int16 sample arrays."""

from __future__ import annotations

import numpy as np

from .errors import InputKindError

SAMPLE_DTYPE = np.dtype(np.int16)
SAMPLE_WIDTH = SAMPLE_DTYPE.itemsize

__all__ = ["SAMPLE_DTYPE", "SAMPLE_WIDTH", "as_samples", "to_bytes"]


def as_samples(data, *, name: str = "data") -> np.ndarray:
    """Return ``data`` viewed as a 1-D array of native-endian int16 samples.

    Bytes-like objects are reinterpreted without copying; a trailing odd byte
    is ignored.  int16 arrays pass through unchanged.  Anything else raises
    :class:`~wavcorr.errors.InputKindError`.
    """

    if isinstance(data, np.ndarray):
        if data.dtype != SAMPLE_DTYPE:
            raise InputKindError(f"{name} must have dtype int16, got {data.dtype}")
        if data.ndim != 1:
            raise InputKindError(f"{name} must be one-dimensional, got shape {data.shape}")
        return np.ascontiguousarray(data)
    if isinstance(data, (bytes, bytearray, memoryview)):
        try:
            view = memoryview(data).cast("B")
        except TypeError as exc:
            raise InputKindError(f"{name} must be a C-contiguous PCM buffer: {exc}") from exc
        count = view.nbytes // SAMPLE_WIDTH
        return np.frombuffer(view[: count * SAMPLE_WIDTH], dtype=SAMPLE_DTYPE)
    raise InputKindError(f"{name} must be a bytes-like PCM buffer or an int16 array")


def to_bytes(samples: np.ndarray) -> bytes:
    """Serialise ``samples`` back into a raw native-endian int16 buffer."""

    return np.asarray(samples, dtype=SAMPLE_DTYPE).tobytes()
