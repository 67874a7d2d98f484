"""Runtime settings read from environment variables."""
import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .linalg import DEFAULT_RIDGE

# Environment variable names
ENV_RIDGE = "ALLOCATION_RIDGE"
ENV_DEFAULT_EXPECTED_RETURN = "ALLOCATION_DEFAULT_EXPECTED_RETURN"
ENV_MAX_ASSETS = "ALLOCATION_MAX_ASSETS"
ENV_LOG_LEVEL = "ALLOCATION_LOG_LEVEL"

# Defaults
DEFAULT_EXPECTED_RETURN = 0.01
DEFAULT_LOG_LEVEL = "INFO"


@dataclass(frozen=True)
class Settings:
    ridge: float = DEFAULT_RIDGE
    default_expected_return: float = DEFAULT_EXPECTED_RETURN
    # None leaves the O(n^3) inversion unbounded
    max_assets: Optional[int] = None
    log_level: str = DEFAULT_LOG_LEVEL


def _read_float(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}")
    if not math.isfinite(value):
        raise ValueError(f"{name} must be finite, got {raw!r}")
    return value


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Build `Settings` from the environment.

    Reads:
    - ALLOCATION_RIDGE: diagonal ridge added before inversion (default 1e-8)
    - ALLOCATION_DEFAULT_EXPECTED_RETURN: per-asset return used when a
      request carries none (default 0.01)
    - ALLOCATION_MAX_ASSETS: optional upper bound on the number of assets
    - ALLOCATION_LOG_LEVEL: logging level name (default INFO)
    """
    env = os.environ if env is None else env

    ridge = _read_float(env, ENV_RIDGE, DEFAULT_RIDGE)
    if ridge < 0:
        raise ValueError(f"{ENV_RIDGE} must be non-negative")

    max_assets_str = env.get(ENV_MAX_ASSETS, "").strip()
    max_assets = None
    if max_assets_str:
        try:
            max_assets = int(max_assets_str)
        except ValueError:
            raise ValueError(f"{ENV_MAX_ASSETS} must be an integer, got {max_assets_str!r}")
        if max_assets < 1:
            raise ValueError(f"{ENV_MAX_ASSETS} must be at least 1")

    return Settings(
        ridge=ridge,
        default_expected_return=_read_float(env, ENV_DEFAULT_EXPECTED_RETURN, DEFAULT_EXPECTED_RETURN),
        max_assets=max_assets,
        log_level=env.get(ENV_LOG_LEVEL, "").strip().upper() or DEFAULT_LOG_LEVEL,
    )
