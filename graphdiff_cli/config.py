"""Configuration paths and defaults for GraphDiff."""

from __future__ import annotations

import os
from pathlib import Path

BASE_DIR = Path(os.environ.get("GRAPHDIFF_HOME", str(Path.home() / ".graphdiff"))).expanduser()
CONFIG_FILE = BASE_DIR / "config.toml"

DEFAULT_CONFIG = {
    "watch": {
        "interval": 1.0,
    },
    "parser": {
        "sigil": "v",
        "rank_marker": "rank = same",
        "delimiter": ";",
    },
    "similarity": {
        "eps": 0.01,
        "weights": [1 / 3, 1 / 3, 1 / 3],
    },
}

