#!/usr/bin/env python3
# grid36/config.py
"""
Config loader/saver and defaults for the Grid36 command line tools.

Goals:
- Single JSON file per user.
- Safe atomic writes.
- Deep-merge of user config over defaults.
- Basic validation with sane fallbacks.

The tile functions in grid36.tiles never read this file. Only the CLI and
the interactive shell do.

Usage:
    from grid36.config import Config
    cfg = Config.load()                 # ~/.config/grid36/grid36.json or OS-specific
    depth = cfg["grid"]["default_depth"]
    cfg["shell"]["theme"] = "dark"
    cfg.save()
"""

from __future__ import annotations

import copy
import json
import logging
import os
import platform
import shutil
import tempfile
from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple

from grid36.geodesy import STRATEGIES, Projection, make_projection
from grid36.grid import MAX_DEPTH

log = logging.getLogger(__name__)

# ----------------------------
# Defaults
# ----------------------------

DEFAULT_CONFIG: Dict[str, Any] = {
    "projection": {
        "strategy": "pyproj",             # pyproj | albers | linear
        "fallback": "albers",             # same names, or null for none
    },
    "grid": {
        "default_depth": 9,               # 1..9, 9 is one metre
    },
    "shell": {
        "theme": "auto",                  # auto | light | dark
        "coord_precision": 6,             # decimals for lon/lat output
        "history_file": None,             # path or None for in-memory history
    },
    "logging": {
        "level": "WARNING",
        "pyproj_debug": False,
        "file": None,                     # path or None
        "rotate_bytes": 5 * 1024 * 1024,
        "rotate_keep": 3,
    },
}

# ----------------------------
# Helpers
# ----------------------------

def _os_config_home() -> str:
    """Return per-OS config base directory."""
    if platform.system() == "Windows":
        base = os.environ.get("APPDATA") or os.path.expanduser("~\\AppData\\Roaming")
        return os.path.join(base, "Grid36")
    if platform.system() == "Darwin":
        return os.path.join(os.path.expanduser("~/Library/Application Support"), "Grid36")
    return os.path.join(os.path.expanduser("~/.config"), "grid36")

def _default_config_path() -> str:
    """Resolve default config path, honoring GRID36_CONFIG env override."""
    env = os.environ.get("GRID36_CONFIG")
    if env:
        return os.path.expanduser(env)
    return os.path.join(_os_config_home(), "grid36.json")

def _deep_merge(a: Dict[str, Any], b: Dict[str, Any]) -> Dict[str, Any]:
    """Return deep-merged copy of dicts: values in b override a."""
    out = copy.deepcopy(a)
    for k, v in b.items():
        if isinstance(v, dict) and isinstance(out.get(k), dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out

def _atomic_write_json(path: str, data: Dict[str, Any]) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".tmp_cfg_", dir=os.path.dirname(path) or ".")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, sort_keys=True)
            f.write("\n")
        os.replace(tmp, path)
    except BaseException:
        try:
            os.remove(tmp)
        except OSError:
            pass
        raise

def _coerce_int(v: Any, default: int, minmax: Optional[Tuple[int, int]] = None) -> int:
    try:
        x = int(v)
    except (TypeError, ValueError):
        return int(default)
    if minmax:
        lo, hi = minmax
        x = max(lo, min(hi, x))
    return x

def _coerce_bool(v: Any, default: bool) -> bool:
    if isinstance(v, bool):
        return v
    if isinstance(v, str):
        s = v.strip().lower()
        if s in ("1", "true", "yes", "on"): return True
        if s in ("0", "false", "no", "off"): return False
    return default

# ----------------------------
# Validation
# ----------------------------

def _validate(cfg: Dict[str, Any]) -> Dict[str, Any]:
    """Return validated copy with fallbacks applied."""
    c = _deep_merge(DEFAULT_CONFIG, cfg or {})

    # projection
    p = c["projection"]
    if p.get("strategy") not in STRATEGIES:
        p["strategy"] = DEFAULT_CONFIG["projection"]["strategy"]
    if p.get("fallback") not in STRATEGIES:
        p["fallback"] = None
    if p["fallback"] == p["strategy"]:
        p["fallback"] = None

    # grid
    g = c["grid"]
    g["default_depth"] = _coerce_int(g.get("default_depth"), DEFAULT_CONFIG["grid"]["default_depth"], (1, MAX_DEPTH))

    # shell
    sh = c["shell"]
    if sh.get("theme") not in ("auto", "light", "dark"):
        sh["theme"] = DEFAULT_CONFIG["shell"]["theme"]
    sh["coord_precision"] = _coerce_int(sh.get("coord_precision"), 6, (0, 12))
    hf = sh.get("history_file")
    sh["history_file"] = os.path.expanduser(str(hf)) if hf else None

    # logging
    lg = c["logging"]
    level = str(lg.get("level") or "").upper()
    if level not in ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"):
        level = DEFAULT_CONFIG["logging"]["level"]
    lg["level"] = level
    lg["pyproj_debug"] = _coerce_bool(lg.get("pyproj_debug"), DEFAULT_CONFIG["logging"]["pyproj_debug"])
    lf = lg.get("file")
    lg["file"] = str(lf) if lf else None
    lg["rotate_bytes"] = _coerce_int(lg.get("rotate_bytes"), DEFAULT_CONFIG["logging"]["rotate_bytes"], (256 * 1024, 50 * 1024 * 1024))
    lg["rotate_keep"]  = _coerce_int(lg.get("rotate_keep"), DEFAULT_CONFIG["logging"]["rotate_keep"], (0, 50))

    return c

# ----------------------------
# Public API
# ----------------------------

@dataclass
class Config:
    """Thin wrapper around a nested dict with load/save/merge."""
    data: Dict[str, Any] = field(default_factory=lambda: _validate({}))
    path: str = field(default_factory=_default_config_path)

    # --- Mapping-style access
    def __getitem__(self, k: str) -> Any:
        return self.data[k]

    def __setitem__(self, k: str, v: Any) -> None:
        self.data[k] = v

    def get(self, k: str, default: Any = None) -> Any:
        return self.data.get(k, default)

    # --- Ops
    @classmethod
    def load(cls, path: Optional[str] = None, create_if_missing: bool = False) -> "Config":
        cfg_path = os.path.expanduser(path) if path else _default_config_path()
        if not os.path.exists(cfg_path):
            cfg = _validate({})
            if create_if_missing:
                _atomic_write_json(cfg_path, cfg)
            return cls(cfg, cfg_path)

        try:
            with open(cfg_path, "r", encoding="utf-8") as f:
                user_cfg = json.load(f)
            if not isinstance(user_cfg, dict):
                raise ValueError("top-level JSON value must be an object")
        except (OSError, ValueError) as exc:
            # Corrupt file. Backup and fall back to defaults.
            backup = cfg_path + ".corrupt.bak"
            log.warning("config %s unreadable (%s); backing up to %s", cfg_path, exc, backup)
            try:
                shutil.copyfile(cfg_path, backup)
            except OSError:
                pass
            user_cfg = {}

        return cls(_validate(user_cfg), cfg_path)

    def save(self) -> None:
        """Persist to JSON atomically."""
        full = _validate(_deep_merge(DEFAULT_CONFIG, _diff(DEFAULT_CONFIG, self.data)))
        _atomic_write_json(self.path, full)
        self.data = full  # sync in-memory with normalized values

    def update(self, partial: Dict[str, Any]) -> None:
        """Deep-merge a partial config then validate."""
        self.data = _validate(_deep_merge(self.data, partial))

    # Convenience getters
    @property
    def default_depth(self) -> int:
        return self.data["grid"]["default_depth"]

    def projection(self) -> Projection:
        p = self.data["projection"]
        return make_projection(p["strategy"], p["fallback"])


def _diff(base: Dict[str, Any], cur: Dict[str, Any]) -> Dict[str, Any]:
    """Return nested dictionary of keys where cur differs from base."""
    out: Dict[str, Any] = {}
    for k in cur.keys() | base.keys():
        if k not in base:
            out[k] = cur[k]
            continue
        if k not in cur:
            continue
        vb = base[k]
        vc = cur[k]
        if isinstance(vb, dict) and isinstance(vc, dict):
            d = _diff(vb, vc)
            if d:
                out[k] = d
        elif vb != vc:
            out[k] = vc
    return out

__all__ = [
    "Config",
    "DEFAULT_CONFIG",
    "_default_config_path",
]
