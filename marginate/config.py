# marginate/config.py
from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Tuple

from dotenv import load_dotenv

# Local dev convenience: loads from .env if present.
# In a container, values come straight from the environment.
load_dotenv()

DEFAULT_CORS_ORIGINS = (
    "http://localhost:3000",
    "http://127.0.0.1:3000",
    "http://localhost:5173",
    "http://127.0.0.1:5173",
)


@dataclass(frozen=True)
class Settings:
    # Directory (or base URL) serving the pre-authored margin templates
    asset_root: str = "public"
    # Relative prefix used when building background locators
    background_base: str = "./pdf-backgrounds"
    # "auto" lets each transport pick its own policy
    fetch_policy: str = "auto"
    fetch_timeout: float = 30.0
    # Inset (points) kept free around the foreground on every side
    margin: float = 20.0
    cors_origins: Tuple[str, ...] = DEFAULT_CORS_ORIGINS


def _float_env(name: str, default: float) -> float:
    raw = (os.getenv(name) or "").strip()
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        raise RuntimeError(f"{name} must be a number, got {raw!r}")


def load_settings() -> Settings:
    policy = (os.getenv("MARGINATE_FETCH_POLICY") or "auto").strip().lower()
    if policy not in ("auto", "strict", "lenient"):
        raise RuntimeError(f"MARGINATE_FETCH_POLICY must be auto|strict|lenient, got {policy!r}")

    origins_raw = os.getenv("MARGINATE_CORS_ORIGINS")
    if origins_raw:
        origins = tuple(o.strip() for o in origins_raw.split(",") if o.strip())
    else:
        origins = DEFAULT_CORS_ORIGINS

    return Settings(
        asset_root=os.getenv("MARGINATE_ASSET_ROOT") or "public",
        background_base=(os.getenv("MARGINATE_BACKGROUND_BASE") or "./pdf-backgrounds").rstrip("/"),
        fetch_policy=policy,
        fetch_timeout=_float_env("MARGINATE_FETCH_TIMEOUT", 30.0),
        margin=_float_env("MARGINATE_MARGIN", 20.0),
        cors_origins=origins,
    )


_settings_singleton: Settings | None = None


def get_settings() -> Settings:
    global _settings_singleton
    if _settings_singleton is None:
        _settings_singleton = load_settings()
    return _settings_singleton
