#!/usr/bin/env python3
# grid36/shell.py
"""Interactive prompt_toolkit converter for Grid36 tile IDs."""

from __future__ import annotations

import shlex
from typing import Callable, Dict, List

from prompt_toolkit import PromptSession, print_formatted_text
from prompt_toolkit.completion import WordCompleter
from prompt_toolkit.formatted_text import HTML, merge_formatted_text
from prompt_toolkit.history import FileHistory, InMemoryHistory

from grid36.config import Config
from grid36.errors import Grid36Error
from grid36.grid import MAX_DEPTH, check_depth
from grid36.styles import make_style
from grid36.tiles import (
    TileRecord,
    adjust_tile_depth,
    child_tiles,
    decode_tile,
    encode_tile,
    parent_tile,
    search_tile,
)

HELP_TEXT = (
    "Commands:\n"
    "  encode LON LAT [DEPTH]   GPS point to tile ID\n"
    "  decode ID                tile ID to centre and bounds\n"
    "  adjust ID DEPTH          coarsen or refine a tile ID\n"
    "  search ID                tile corner and centre, planar and GPS\n"
    "  parent ID | children ID  walk the tile hierarchy\n"
    "  depth [N]                show or set the default depth (1..9)\n"
    "  help                     this text\n"
    "  quit                     leave the shell\n"
    "\n"
    "Tile IDs are case-insensitive. Refining with adjust picks the child\n"
    "under the tile centre, so it is approximate.\n"
)


class ShellExit(Exception):
    pass


class Grid36Shell:
    def __init__(self, cfg: Config):
        self.cfg = cfg
        self.projection = cfg.projection()
        self.depth = cfg.default_depth
        self.precision = cfg["shell"]["coord_precision"]
        self.style = make_style(cfg)
        self.commands: Dict[str, Callable[[List[str]], HTML]] = {
            "encode": self._encode,
            "decode": self._decode,
            "adjust": self._adjust,
            "search": self._search,
            "parent": self._parent,
            "children": self._children,
            "depth": self._depth,
            "help": self._help,
            "quit": self._quit,
            "exit": self._quit,
        }

    # ------------- formatting -------------

    def _deg(self, v: float) -> str:
        return f"{v:.{self.precision}f}"

    def _record(self, rec: TileRecord):
        parts = [
            HTML("<tile>{}</tile>  <label>depth</label> {}  <label>size</label> {} m\n").format(
                rec.id, rec.depth, f"{rec.tile_size:.0f}"
            ),
            HTML("  <label>centre</label> E {} N {}\n").format(
                f"{rec.centroid.x:.1f}", f"{rec.centroid.y:.1f}"
            ),
        ]
        if rec.centroid_geo is not None:
            parts.append(HTML("  <label>centre</label> lon {} lat {}\n").format(
                self._deg(rec.centroid_geo.lon), self._deg(rec.centroid_geo.lat)
            ))
        b = rec.bounds
        parts.append(HTML("  <label>bounds</label> E {}..{} N {}..{}").format(
            f"{b.x_min:.0f}", f"{b.x_max:.0f}", f"{b.y_min:.0f}", f"{b.y_max:.0f}"
        ))
        if rec.outside_domain:
            parts.append(HTML("\n  <warn>point outside the indexed area, clamped to the edge</warn>"))
        return merge_formatted_text(parts)

    # ------------- commands -------------

    @staticmethod
    def _need(args: List[str], lo: int, hi: int, usage: str) -> None:
        if not lo <= len(args) <= hi:
            raise ValueError(f"usage: {usage}")

    def _encode(self, args):
        self._need(args, 2, 3, "encode LON LAT [DEPTH]")
        depth = int(args[2]) if len(args) == 3 else self.depth
        return self._record(encode_tile(float(args[0]), float(args[1]), depth, self.projection))

    def _decode(self, args):
        self._need(args, 1, 1, "decode ID")
        return self._record(decode_tile(args[0], self.projection))

    def _adjust(self, args):
        self._need(args, 2, 2, "adjust ID DEPTH")
        new_id = adjust_tile_depth(args[0], int(args[1]))
        return HTML("<tile>{}</tile>").format(new_id)

    def _search(self, args):
        self._need(args, 1, 1, "search ID")
        res = search_tile(args[0], self.projection)
        corner = HTML("\n  <label>corner</label> E {} N {}  lon {} lat {}").format(
            f"{res.corner.x:.1f}", f"{res.corner.y:.1f}",
            self._deg(res.corner_geo.lon), self._deg(res.corner_geo.lat),
        )
        return merge_formatted_text([self._record(res.record), corner])

    def _parent(self, args):
        self._need(args, 1, 1, "parent ID")
        p = parent_tile(args[0])
        if p is None:
            return HTML("<label>depth 1 tiles have no parent</label>")
        return HTML("<tile>{}</tile>").format(p)

    def _children(self, args):
        self._need(args, 1, 1, "children ID")
        kids = child_tiles(args[0])
        if not kids:
            return HTML("<label>depth {} tiles have no children</label>").format(MAX_DEPTH)
        rows = [" ".join(kids[n:n + 6]) for n in range(0, len(kids), 6)]
        return HTML("<tile>{}</tile>").format("\n".join(rows))

    def _depth(self, args):
        self._need(args, 0, 1, "depth [N]")
        if args:
            self.depth = check_depth(int(args[0]))
        return HTML("<label>default depth</label> {}").format(self.depth)

    def _help(self, args):
        return HTML("{}").format(HELP_TEXT)

    def _quit(self, args):
        raise ShellExit()

    # ------------- loop -------------

    def handle(self, line: str):
        """Run one command line and return formatted output."""
        try:
            words = shlex.split(line)
        except ValueError as exc:
            return HTML("<error>{}</error>").format(str(exc))
        if not words:
            return HTML("")
        cmd = self.commands.get(words[0].lower())
        if cmd is None:
            return HTML("<error>unknown command {!r}, try 'help'</error>").format(words[0])
        try:
            return cmd(words[1:])
        except (Grid36Error, ValueError) as exc:
            return HTML("<error>{}</error>").format(str(exc))

    def _session(self) -> PromptSession:
        hist_path = self.cfg["shell"].get("history_file")
        history = FileHistory(hist_path) if hist_path else InMemoryHistory()
        return PromptSession(
            history=history,
            completer=WordCompleter(sorted(self.commands), ignore_case=True),
            style=self.style,
        )

    def run(self) -> None:
        session = self._session()
        while True:
            try:
                line = session.prompt(HTML("<prompt>grid36&gt; </prompt>"))
            except (EOFError, KeyboardInterrupt):
                break
            try:
                out = self.handle(line)
            except ShellExit:
                break
            print_formatted_text(out, style=self.style)
