import json
import logging
import os
from dataclasses import dataclass, field, fields, replace
from typing import Optional

logger = logging.getLogger(__name__)

# ============================================================
# ===================== USER SETTINGS ========================
# ============================================================

_PKG_DIR        = os.path.dirname(os.path.abspath(__file__))
DEFAULT_JSON    = os.path.join(_PKG_DIR, "quicksort_visualizer.json")

BACKGROUND_COLOR = (238, 238, 238)
BAR_COLOR        = (0, 0, 0)
PIVOT_COLOR      = (255, 0, 0)
LOW_COLOR        = (0, 255, 0)
SCAN_COLOR       = (0, 0, 255)


@dataclass
class Settings:
    """
    Presentation parameters owned by the UI.

    The core never reads these directly: bar_count() and value_range() are
    passed into ArrayModel.initialize and PlaybackClock is built from
    minimum_delay / speed.
    """
    width:          int   = 800
    height:         int   = 600
    bar_width:      int   = 10
    bar_spacing:    int   = 1
    bottom_margin:  int   = 100      # bars never reach the bottom 100 px
    value_floor:    int   = 10
    controls_height: int  = 64
    fps:            int   = 60
    speed:          int   = 50
    minimum_delay:  int   = 5
    seed:           Optional[int] = None
    colors:         dict  = field(default_factory=lambda: {
        "background": BACKGROUND_COLOR,
        "bar":        BAR_COLOR,
        "pivot":      PIVOT_COLOR,
        "low":        LOW_COLOR,
        "scan":       SCAN_COLOR,
    })

    def bar_count(self) -> int:
        return self.width // self.bar_width if self.bar_width > 0 else 0

    def value_range(self):
        """Half-open [low, high) range of bar heights that fit the drawing area."""
        return self.value_floor, self.value_floor + self.height - self.bottom_margin

    def window_size(self):
        return self.width, self.height + self.controls_height


def _is_int(v) -> bool:
    return isinstance(v, int) and not isinstance(v, bool)


def _coerce_colors(raw: dict, base: dict) -> dict:
    merged = dict(base)
    for k, v in raw.items():
        if k in merged and isinstance(v, (list, tuple)) and len(v) == 3 and all(_is_int(c) for c in v):
            merged[k] = tuple(v)
        else:
            logger.warning(f"Ignoring colour setting {k!r}: {v!r}")
    return merged


def load_settings(path: Optional[str] = None, **overrides) -> Settings:
    """
    Build Settings from defaults, an optional JSON file and keyword overrides.

    A missing file is silently skipped; a malformed one is logged and skipped.
    Unknown keys are ignored and values of the wrong type are logged and
    skipped, so a bad file never reaches the geometry helpers. Overrides whose value is None are not applied.
    """
    settings = Settings()
    path = path or DEFAULT_JSON
    data = {}
    if os.path.exists(path):
        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("top level must be an object")
            logger.info(f"Loaded settings from {path}")
        except (OSError, ValueError) as e:
            logger.warning(f"Could not read settings file {path}: {e}")
            data = {}

    known = {f.name for f in fields(Settings)}
    values = {}
    for k, v in data.items():
        if k not in known:
            logger.debug(f"Unknown setting {k!r} ignored")
        elif k == "colors":
            if isinstance(v, dict):
                values[k] = _coerce_colors(v, settings.colors)
            else:
                logger.warning(f"Ignoring setting {k!r}: expected an object, got {v!r}")
        elif not (_is_int(v) or (k == "seed" and v is None)):
            logger.warning(f"Ignoring setting {k!r}: expected an integer, got {v!r}")
        else:
            values[k] = v
    values.update({k: v for k, v in overrides.items() if v is not None})
    return replace(settings, **values)
