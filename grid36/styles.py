#!/usr/bin/env python3
# grid36/styles.py
"""
Style definitions for the Grid36 shell.
Provides light, dark, and auto themes for prompt_toolkit.
"""

import os

from prompt_toolkit.styles import Style

from grid36.config import Config

BASE_DARK = {
    "prompt": "fg:#00ff00 bold",
    "tile": "fg:#ffd700 bold",
    "label": "fg:#888888",
    "value": "#ffffff",
    "warn": "fg:#ffaf00",
    "error": "fg:#ff5f5f bold",
}

BASE_LIGHT = {
    "prompt": "fg:#006600 bold",
    "tile": "fg:#875f00 bold",
    "label": "fg:#555555",
    "value": "#000000",
    "warn": "fg:#af5f00",
    "error": "fg:#d70000 bold",
}


def make_style(cfg: Config) -> Style:
    theme = cfg["shell"].get("theme", "auto")

    if theme == "light":
        return Style.from_dict(BASE_LIGHT)
    if theme == "dark":
        return Style.from_dict(BASE_DARK)

    # Auto-detect via environment
    if os.getenv("TERM_THEME", "").lower() == "light":
        return Style.from_dict(BASE_LIGHT)
    return Style.from_dict(BASE_DARK)
