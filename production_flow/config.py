"""Runtime settings for the production flow tracker."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .logging_config import LOG_LEVEL_ENV

DATABASE_ENV = "PRODUCTION_FLOW_DB"
DEMO_DATA_ENV = "PRODUCTION_FLOW_DEMO_DATA"

DEFAULT_DATABASE_PATH = "production_flow.sqlite3"

_TRUTHY = {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class FlowSettings:
    """Simple container for the values the web app needs at startup."""

    database_path: str = DEFAULT_DATABASE_PATH
    log_level: str = "INFO"
    seed_demo_data: bool = True

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "FlowSettings":
        """Build settings from environment variables.

        Unset variables fall back to the dataclass defaults; the demo data
        flag accepts ``1/true/yes/on`` (case-insensitive) as enabled.
        """

        env = os.environ if environ is None else environ
        demo_flag = env.get(DEMO_DATA_ENV)
        return cls(
            database_path=env.get(DATABASE_ENV) or DEFAULT_DATABASE_PATH,
            log_level=(env.get(LOG_LEVEL_ENV) or "INFO").upper(),
            seed_demo_data=(
                cls.seed_demo_data
                if demo_flag is None
                else demo_flag.strip().lower() in _TRUTHY
            ),
        )


__all__ = ["FlowSettings", "DEFAULT_DATABASE_PATH"]
