"""Exceptions raised by the checked wavcorr entry points.

The kernels in :mod:`wavcorr.c_kernels` never raise these; they trust their
callers.  :mod:`wavcorr.api` raises them before any kernel runs.
"""

from __future__ import annotations

__all__ = ["WavcorrError", "InvalidArgumentError", "InputKindError"]


class WavcorrError(Exception):
    """Base class for argument errors reported by :mod:`wavcorr.api`."""


class InvalidArgumentError(WavcorrError, ValueError):
    """A window, offset, or output length is negative or out of range."""


class InputKindError(WavcorrError, TypeError):
    """An argument is not a sample buffer or not an integer."""
