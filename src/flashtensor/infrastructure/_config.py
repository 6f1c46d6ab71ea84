"""
Runtime configuration for flashtensor.

The only tunable today is bounds checking. When enabled (the default), the
view constructor validates that every reachable element of a layout lies
inside its storage, and element access validates each index against its
dimension. When disabled, those checks are skipped and only the resolved flat
position is checked by `Storage` itself.

The default is read once from the `FLASHTENSOR_CHECK_BOUNDS` environment
variable. Set it to "0" (or "false") to opt out, e.g. in tight loops that are
already known to be in range.
"""

from __future__ import annotations

import os
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

_ENV_CHECK_BOUNDS = "FLASHTENSOR_CHECK_BOUNDS"
_FALSY = ("0", "", "false", "False", "FALSE")


def _env_flag(name: str, default: bool) -> bool:
    """Parse a boolean feature flag from the environment."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    return raw not in _FALSY


@dataclass
class RuntimeConfig:
    """
    Process-wide runtime settings.

    Attributes
    ----------
    check_bounds : bool
        Validate views at construction time and indices at access time.
    """

    check_bounds: bool = True

    @classmethod
    def from_env(cls) -> "RuntimeConfig":
        return cls(check_bounds=_env_flag(_ENV_CHECK_BOUNDS, True))


_config = RuntimeConfig.from_env()


def get_config() -> RuntimeConfig:
    """Return the live process-wide configuration object."""
    return _config


def set_check_bounds(enabled: bool) -> None:
    """Enable or disable bounds checking for subsequent operations."""
    _config.check_bounds = bool(enabled)


@contextmanager
def bounds_checking(enabled: bool) -> Iterator[RuntimeConfig]:
    """
    Temporarily override bounds checking.

    The previous value is restored on exit, even if the body raises.
    """
    previous = _config.check_bounds
    _config.check_bounds = bool(enabled)
    try:
        yield _config
    finally:
        _config.check_bounds = previous
