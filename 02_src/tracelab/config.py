"""Project-level configuration and path helpers."""

import os
from pathlib import Path
from typing import Union

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
LOGS_DIR = PROJECT_ROOT / "04_logs"
DEFAULT_LOG_PATH = LOGS_DIR / "app.log"

PathLike = Union[str, Path]

# Playback
DEFAULT_AUTO_ADVANCE_MS = int(os.getenv("AUTO_ADVANCE_MS", "1500"))
MIN_AUTO_ADVANCE_MS = 1

# Diagnostics thresholds
FAST_LATENCY_MS = 50
SLOW_LATENCY_MS = 200
MIN_REDUNDANT_NAMESERVERS = 2
GOOD_REDUNDANT_NAMESERVERS = 4
RATING_BANDS_MS = (50, 150, 300)  # excellent / good / moderate / poor


def resolve_log_path(env_value: PathLike | None = None) -> Path:
    """Resolve LOG_FILE to an absolute path."""
    if not env_value:
        return DEFAULT_LOG_PATH

    candidate = Path(env_value)
    return candidate if candidate.is_absolute() else PROJECT_ROOT / candidate
