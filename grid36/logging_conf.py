#!/usr/bin/env python3
# grid36/logging_conf.py
"""
Central logging setup for Grid36.
Supports console and optional rotating file logs.
"""

import logging
from logging.handlers import RotatingFileHandler

from grid36.config import Config

FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def setup_logging(cfg: Config) -> None:
    level_name = cfg["logging"].get("level", "WARNING").upper()
    level = getattr(logging, level_name, logging.WARNING)
    logging.basicConfig(level=level, format=FORMAT)

    log_file = cfg["logging"].get("file")
    if log_file:
        handler = RotatingFileHandler(
            log_file,
            maxBytes=int(cfg["logging"].get("rotate_bytes", 5 * 1024 * 1024)),
            backupCount=int(cfg["logging"].get("rotate_keep", 3)),
            encoding="utf-8",
        )
        handler.setFormatter(logging.Formatter(FORMAT))
        logging.getLogger().addHandler(handler)

    if cfg["logging"].get("pyproj_debug"):
        logging.getLogger("pyproj").setLevel(logging.DEBUG)
