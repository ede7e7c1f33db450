"""Similarity, window-search, and overlap-add kernels for 16-bit PCM audio."""

from __future__ import annotations

from .api import NO_MATCH, SearchResult, find_loop_window, find_splice_window, overlap_add, similarity
from .errors import InputKindError, InvalidArgumentError, WavcorrError

__all__ = [
    "InputKindError",
    "InvalidArgumentError",
    "NO_MATCH",
    "SearchResult",
    "WavcorrError",
    "find_loop_window",
    "find_splice_window",
    "overlap_add",
    "similarity",
]
