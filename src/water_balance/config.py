"""
Connection settings for the hosted Supabase project.
"""

from __future__ import annotations

import os
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from pydantic import BaseModel

from .exceptions import ConfigurationError

MISSING_ENV_MESSAGE = "Missing Supabase environment variables. Please check your .env files."


class SupabaseConfig(BaseModel):
    url: str
    anon_key: str
    functions_path: str = "/functions/v1"
    auth_path: str = "/auth/v1"
    timeout_seconds: float = 30.0
    water_balance_function: str = "waterBalance"
    require_success: bool = False


def _env_first(*names: str) -> Optional[str]:
    for name in names:
        raw = os.getenv(name)
        if raw:
            return raw
    return None


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.lower() in {"1", "true", "yes", "on"}


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def load_supabase_config(
    overrides: Optional[Mapping[str, Any]] = None,
    use_dotenv: bool = True,
) -> SupabaseConfig:
    """
    Resolve settings from the environment, falling back to ``overrides``.

    ``SUPABASE_*`` variables win over the ``VITE_SUPABASE_*`` names the
    browser build reads, so one ``.env`` file can serve both.
    """

    if use_dotenv:
        load_dotenv()
    values = dict(overrides or {})

    url = _env_first("SUPABASE_URL", "VITE_SUPABASE_URL") or values.get("url")
    anon_key = _env_first("SUPABASE_ANON_KEY", "VITE_SUPABASE_ANON_KEY") or values.get("anon_key")
    if not url or not anon_key:
        raise ConfigurationError(MISSING_ENV_MESSAGE)

    defaults = SupabaseConfig(url=url, anon_key=anon_key)
    return SupabaseConfig(
        url=url.rstrip("/"),
        anon_key=anon_key,
        functions_path=values.get("functions_path", defaults.functions_path),
        auth_path=values.get("auth_path", defaults.auth_path),
        timeout_seconds=_env_float(
            "SUPABASE_TIMEOUT_SECONDS", values.get("timeout_seconds", defaults.timeout_seconds)
        ),
        water_balance_function=os.getenv(
            "WATER_BALANCE_FUNCTION", values.get("water_balance_function", defaults.water_balance_function)
        ),
        require_success=_env_bool(
            "WATER_BALANCE_REQUIRE_SUCCESS", values.get("require_success", defaults.require_success)
        ),
    )
