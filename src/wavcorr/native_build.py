"""Helpers for configuring the native wavcorr toolchain.

This module centralises detection of the C compiler, optimisation flags, and
shared build arguments so the cffi build and the ``info`` command report the
same choices.  It prefers explicit environment configuration but falls back to
probing the local PATH for a suitable compiler when nothing is configured.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os
import shlex
import shutil
import sys
from pathlib import Path
from typing import Iterable

_DEBUG_ENV = "WAVCORR_NATIVE_DEBUG"
_EXTRA_COMPILE_ENV = "WAVCORR_NATIVE_EXTRA_COMPILE_ARGS"
_EXTRA_LINK_ENV = "WAVCORR_NATIVE_EXTRA_LINK_ARGS"
_CC_OVERRIDE_ENV = "WAVCORR_NATIVE_CC"
_BUILD_DIR_ENV = "WAVCORR_NATIVE_BUILD_DIR"
DISABLE_ENV = "WAVCORR_DISABLE_NATIVE"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class NativeBuildConfig:
    """Canonical toolchain configuration shared across build paths."""

    compile_args: tuple[str, ...]
    link_args: tuple[str, ...]
    debug: bool
    c_compiler: str | None


def _flag(env_var: str) -> bool:
    return os.environ.get(env_var, "").strip().lower() in _TRUTHY


def _parse_extra_args(env_var: str) -> tuple[str, ...]:
    value = os.environ.get(env_var, "").strip()
    if not value:
        return ()
    return tuple(shlex.split(value))


def _candidate_compilers() -> tuple[str, ...]:
    if sys.platform == "win32":
        # MSVC by default; clang-cl or mingw can be selected via WAVCORR_NATIVE_CC.
        return ("cl",)
    return ("cc", "clang", "gcc")


def _select_compiler(env_name: str, override_env: str, candidates: Iterable[str]) -> str | None:
    override = os.environ.get(override_env, "").strip()
    if override:
        return override
    existing = os.environ.get(env_name, "").strip()
    if existing:
        return existing
    for candidate in candidates:
        if shutil.which(candidate):
            return candidate
    return None


def native_disabled() -> bool:
    """Return ``True`` when the user asked to skip the compiled kernels."""

    return _flag(DISABLE_ENV)


@lru_cache(maxsize=1)
def get_build_config() -> NativeBuildConfig:
    debug = _flag(_DEBUG_ENV)

    compile_args: list[str] = []
    if sys.platform == "win32":
        compile_args.append("/Od" if debug else "/O2")
    else:
        compile_args.extend(["-std=c99", "-O0" if debug else "-O2"])
        if debug:
            compile_args.append("-g")
    compile_args.extend(_parse_extra_args(_EXTRA_COMPILE_ENV))

    link_args: list[str] = []
    if sys.platform != "win32":
        link_args.append("-lm")
    link_args.extend(_parse_extra_args(_EXTRA_LINK_ENV))

    c_compiler = _select_compiler("CC", _CC_OVERRIDE_ENV, _candidate_compilers())

    return NativeBuildConfig(
        compile_args=tuple(compile_args),
        link_args=tuple(link_args),
        debug=debug,
        c_compiler=c_compiler,
    )


def ensure_toolchain_env() -> None:
    """Guarantee that CC is exported for the distutils compiler used by cffi."""

    config = get_build_config()
    if config.c_compiler and not os.environ.get("CC"):
        os.environ["CC"] = config.c_compiler


def _user_cache_dir() -> Path:
    if sys.platform == "win32":
        root = os.environ.get("LOCALAPPDATA") or str(Path.home() / "AppData" / "Local")
    else:
        root = os.environ.get("XDG_CACHE_HOME") or str(Path.home() / ".cache")
    return Path(root) / "wavcorr" / "native-build"


def native_build_dir(native_dir: Path) -> Path:
    """Pick the directory the cffi extension is compiled into.

    ``WAVCORR_NATIVE_BUILD_DIR`` wins when set.  Otherwise the ``build``
    directory next to the kernel sources is used, unless the installed package
    is read-only, in which case the build lands in a per-user cache directory.
    """

    override = os.environ.get(_BUILD_DIR_ENV, "").strip()
    if override:
        return Path(override)
    local = native_dir / "build"
    probe = local if local.exists() else native_dir
    if os.access(probe, os.W_OK):
        return local
    return _user_cache_dir()
