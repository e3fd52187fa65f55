from __future__ import annotations

from dataclasses import dataclass
import os
from pathlib import Path

from engine.export import DEFAULT_EXPORT_PREFIX
from engine.types import DEFAULT_BOUNDARY_RADIUS_M, MIN_DESCRIPTION_LENGTH

# Keep settings extremely boring and predictable.
# Anything path-related should come from api.config.paths to ensure one source of truth.
from .paths import STATE_DIR


@dataclass(frozen=True)
class Settings:
    env: str = "dev"
    db_url: str = ""
    state_dir: Path = STATE_DIR
    log_level: str = "INFO"

    # JSON array of missions; unset or missing file -> built-in catalog
    mission_config_path: str = ""

    default_boundary_radius_m: float = DEFAULT_BOUNDARY_RADIUS_M
    min_description_length: int = MIN_DESCRIPTION_LENGTH
    export_prefix: str = DEFAULT_EXPORT_PREFIX


def load_settings() -> Settings:
    """Read Settings from the environment. Called at app build time, not per request."""
    return Settings(
        env=os.getenv("FG_ENV", os.getenv("ENV", "dev")).strip() or "dev",
        db_url=os.getenv("FG_DB_URL", "").strip(),
        state_dir=Path(os.getenv("FG_STATE_DIR", str(STATE_DIR))).resolve(),
        log_level=os.getenv("FG_LOG_LEVEL", "INFO").strip().upper(),
        mission_config_path=os.getenv("FG_MISSION_CONFIG_PATH", "").strip(),
        default_boundary_radius_m=float(
            os.getenv("FG_DEFAULT_BOUNDARY_RADIUS_M", str(DEFAULT_BOUNDARY_RADIUS_M))
        ),
        min_description_length=int(
            os.getenv("FG_MIN_DESCRIPTION_LENGTH", str(MIN_DESCRIPTION_LENGTH))
        ),
        export_prefix=os.getenv("FG_EXPORT_PREFIX", "").strip() or DEFAULT_EXPORT_PREFIX,
    )


settings = load_settings()
