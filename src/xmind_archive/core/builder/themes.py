"""Named sheet theme presets.

Bundles are opaque to the builder; each style entry gets a fresh id per use.
"""

import copy
from typing import Any

from xmind_archive.core.archive.ids import generate_id

_CENTRAL_BASE = {
    "fo:font-family": "NeverMind",
    "line-pattern": "solid",
    "shape-class": "org.xmind.topicShape.roundedRect",
    "line-class": "org.xmind.branchConnection.curve",
}
_BRANCH_BASE = {
    "fo:font-family": "NeverMind",
    "shape-class": "org.xmind.topicShape.roundedRect",
    "line-class": "org.xmind.branchConnection.roundedElbow",
}

_PRESETS: dict[str, dict[str, dict[str, str]]] = {
    "default": {},
    "business": {
        "centralTopic": {
            **_CENTRAL_BASE,
            "fo:font-size": "30pt",
            "fo:font-weight": "800",
            "svg:fill": "#0D0D0D",
            "fill-pattern": "none",
            "line-width": "2pt",
            "line-color": "#0D0D0D",
        },
        "mainTopic": {
            **_BRANCH_BASE,
            "fo:font-size": "18pt",
            "fo:font-weight": "500",
            "fill-pattern": "solid",
            "line-width": "2pt",
        },
        "subTopic": {
            **_BRANCH_BASE,
            "fo:font-size": "14pt",
            "fo:font-weight": "400",
            "fill-pattern": "none",
            "line-width": "2pt",
        },
        "importantTopic": {
            "fo:font-weight": "bold",
            "svg:fill": "#dff116ff",
            "fill-pattern": "solid",
            "border-line-color": "#dff116ff",
            "border-line-width": "0",
        },
        "minorTopic": {
            "fo:font-weight": "bold",
            "svg:fill": "#3bf115ff",
            "fill-pattern": "solid",
            "border-line-color": "#3bf115ff",
            "border-line-width": "0",
        },
        "expiredTopic": {"fo:text-decoration": "line-through", "fill-pattern": "none"},
        "map": {
            "svg:fill": "#FFFFFF",
            "multi-line-colors": "#F22816 #F2B807 #233ED9",
            "color-list": "#FFFFFF #F2F2F2 #F22816 #F2B807 #233ED9 #0D0D0D",
            "line-tapered": "none",
        },
    },
    "dark": {
        "centralTopic": {
            **_CENTRAL_BASE,
            "fo:font-size": "30pt",
            "fo:font-weight": "800",
            "fo:color": "#FFFFFF",
            "svg:fill": "#2D2D2D",
            "fill-pattern": "solid",
            "line-width": "2pt",
            "line-color": "#FFFFFF",
        },
        "mainTopic": {
            **_BRANCH_BASE,
            "fo:font-size": "18pt",
            "fo:font-weight": "500",
            "fo:color": "#FFFFFF",
            "fill-pattern": "solid",
            "line-width": "2pt",
        },
        "subTopic": {
            **_BRANCH_BASE,
            "fo:font-size": "14pt",
            "fo:font-weight": "400",
            "fo:color": "#CCCCCC",
            "fill-pattern": "none",
            "line-width": "2pt",
        },
        "map": {
            "svg:fill": "#1A1A1A",
            "multi-line-colors": "#FF6B6B #FFD93D #6BCB77",
            "color-list": "#1A1A1A #2D2D2D #FF6B6B #FFD93D #6BCB77 #FFFFFF",
            "line-tapered": "none",
        },
    },
    "simple": {
        "centralTopic": {
            **_CENTRAL_BASE,
            "fo:font-size": "24pt",
            "fo:font-weight": "600",
            "svg:fill": "#FFFFFF",
            "fill-pattern": "solid",
            "line-width": "1pt",
            "line-color": "#333333",
        },
        "mainTopic": {
            **_BRANCH_BASE,
            "fo:font-size": "16pt",
            "fo:font-weight": "400",
            "fill-pattern": "solid",
            "line-width": "1pt",
        },
        "subTopic": {
            **_BRANCH_BASE,
            "fo:font-size": "13pt",
            "fo:font-weight": "400",
            "fill-pattern": "none",
            "line-width": "1pt",
        },
        "map": {
            "svg:fill": "#FFFFFF",
            "multi-line-colors": "#4A90D9 #50C878 #FF8C42",
            "color-list": "#FFFFFF #F5F5F5 #4A90D9 #50C878 #FF8C42 #333333",
            "line-tapered": "none",
        },
    },
}

THEME_NAMES: tuple[str, ...] = tuple(_PRESETS)


def resolve_theme(name: str | None) -> dict[str, Any]:
    """Return the theme bundle for name; unknown or missing names give {}."""
    preset = _PRESETS.get(name or "", {})
    return {
        key: {"id": generate_id(), "properties": copy.deepcopy(props)}
        for key, props in preset.items()
    }
