"""Wall Switcher - Configuration

All times are milliseconds. Deadlines are milliseconds since the epoch.

Settings here are defaults; a wall.yaml next to the entry point (or the
file given with --config) overrides them section by section:

    wall:
      transition_window_ms: 5000
      lead_time_ms: 2000
    geometry:
      width: 3840
      height: 2160
      rows: 2
      cols: 2
    monitor:
      enabled: true
    modules:
      - {name: clock, type: clock}
      - {name: hello, type: message, text: "Hello, wall"}
    playlist:
      - {module: clock, duration_ms: 30000}
      - {module: hello, duration_ms: 15000}
"""

import copy
import logging
from typing import Dict

import yaml

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Timing
# ---------------------------------------------------------------------------
TRANSITION_WINDOW_MS = 5000   # old and new module overlap this long
LEAD_TIME_MS = 2000           # how far ahead of "now" a switch is scheduled
TICK_INTERVAL_MS = 250        # ticker cadence for active modules
EVENT_POLL_MS = 50            # cross-thread bus drain interval

# ---------------------------------------------------------------------------
# Geometry of the virtual wall
# ---------------------------------------------------------------------------
WALL_GEOMETRY = {
    "x": 0,
    "y": 0,
    "width": 1920,
    "height": 1080,
    "rows": 1,
    "cols": 1,
}

# ---------------------------------------------------------------------------
# Monitoring
# ---------------------------------------------------------------------------
MONITOR_ENABLED = False
MONITOR_HISTORY = 200

# ---------------------------------------------------------------------------
# Web
# ---------------------------------------------------------------------------
WEB_HOST = "0.0.0.0"
WEB_PORT = 5000

# ---------------------------------------------------------------------------
# Theme (GUI mode)
# ---------------------------------------------------------------------------
THEME = {
    "bg": "#1a1a2e",
    "card_bg": "#16213e",
    "border": "#0f3460",
    "text": "#e0e0e0",
    "text_dim": "#8899aa",
    "accent": "#00b894",
    "warn": "#fdcb6e",
}

# ---------------------------------------------------------------------------
# Built-in modules and playlist, used when no config file is found
# ---------------------------------------------------------------------------
BUILTIN_MODULES = [
    {"name": "clock", "type": "clock", "title": "Clock"},
    {"name": "welcome", "type": "message", "title": "Welcome",
     "text": "Welcome to the wall"},
    {"name": "countdown", "type": "countdown", "title": "Countdown",
     "seconds": 30},
]

BUILTIN_PLAYLIST = [
    {"module": "clock", "duration_ms": 30000},
    {"module": "welcome", "duration_ms": 15000},
    {"module": "countdown", "duration_ms": 30000},
]


def get_builtin_config() -> Dict:
    """Return the built-in default configuration."""
    return {
        "wall": {
            "transition_window_ms": TRANSITION_WINDOW_MS,
            "lead_time_ms": LEAD_TIME_MS,
            "tick_interval_ms": TICK_INTERVAL_MS,
            "event_poll_ms": EVENT_POLL_MS,
        },
        "geometry": dict(WALL_GEOMETRY),
        "monitor": {"enabled": MONITOR_ENABLED, "history_len": MONITOR_HISTORY},
        "web": {"host": WEB_HOST, "port": WEB_PORT},
        "modules": copy.deepcopy(BUILTIN_MODULES),
        "playlist": copy.deepcopy(BUILTIN_PLAYLIST),
    }


def merge_config(base: Dict, override: Dict) -> Dict:
    """Overlay override onto base. Dict sections merge, everything else replaces."""
    merged = copy.deepcopy(base)
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key].update(value)
        else:
            merged[key] = copy.deepcopy(value)
    return merged


def load_config(path: str) -> Dict:
    """Load wall config from a YAML file, merged over the built-in defaults."""
    builtin = get_builtin_config()
    try:
        with open(path) as f:
            loaded = yaml.safe_load(f) or {}
    except FileNotFoundError:
        logger.warning("Config file not found: %s", path)
        logger.info("Using built-in configuration")
        return builtin

    if not isinstance(loaded, dict):
        logger.warning("Ignoring config %s: expected a mapping", path)
        return builtin

    logger.info("Loaded config from %s", path)
    return merge_config(builtin, loaded)
