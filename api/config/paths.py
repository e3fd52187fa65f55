from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

def _env_path(name: str, default: str) -> Path:
    return Path(os.getenv(name, default)).resolve()

STATE_DIR: Path = _env_path("FG_STATE_DIR", "/var/lib/fieldgate/state")

def ensure_runtime_dirs(state_dir: Optional[Path] = None) -> None:
    (state_dir or STATE_DIR).mkdir(parents=True, exist_ok=True)
