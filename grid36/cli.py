#!/usr/bin/env python3
# grid36/cli.py
"""
Entry point for the grid36 command.
One-shot subcommands print JSON; `grid36 shell` starts the interactive converter.
"""

import argparse
import json
import sys
from typing import List, Optional

from grid36.config import Config
from grid36.errors import Grid36Error
from grid36.logging_conf import setup_logging
from grid36.tiles import adjust_tile_depth, decode_tile, encode_tile, search_tile
from grid36.version import version_info


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="grid36", description="Grid36 tile ID converter")
    parser.add_argument("--version", action="version", version=version_info())
    parser.add_argument("--config", help="path to config JSON (default: per-user file)")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("encode", help="longitude/latitude to tile ID")
    p.add_argument("lon", type=float)
    p.add_argument("lat", type=float)
    p.add_argument("-d", "--depth", type=int, default=None)

    p = sub.add_parser("decode", help="tile ID to centre and bounds")
    p.add_argument("tile_id")

    p = sub.add_parser("adjust", help="change the depth of a tile ID")
    p.add_argument("tile_id")
    p.add_argument("depth", type=int)

    p = sub.add_parser("search", help="tile lookup with corner coordinates")
    p.add_argument("tile_id")

    sub.add_parser("shell", help="interactive converter")
    return parser


def run(args: argparse.Namespace, cfg: Config) -> object:
    projection = cfg.projection()
    if args.command == "encode":
        depth = args.depth if args.depth is not None else cfg.default_depth
        return encode_tile(args.lon, args.lat, depth, projection).to_dict()
    if args.command == "decode":
        return decode_tile(args.tile_id, projection).to_dict()
    if args.command == "adjust":
        return {"id": adjust_tile_depth(args.tile_id, args.depth)}
    if args.command == "search":
        return search_tile(args.tile_id, projection).to_dict()
    raise ValueError(f"unknown command {args.command!r}")


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    cfg = Config.load(args.config)
    setup_logging(cfg)

    if args.command == "shell":
        from grid36.shell import Grid36Shell
        Grid36Shell(cfg).run()
        return 0

    try:
        result = run(args, cfg)
    except Grid36Error as exc:
        print(f"grid36: {exc}", file=sys.stderr)
        return 2
    json.dump(result, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
