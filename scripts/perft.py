#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import os
import sys
import time
from typing import List, Optional

# Allow running this script directly via `python scripts/perft.py`
# by adding the repo root (which contains `src/`) to sys.path.
REPO_ROOT = os.path.dirname(os.path.dirname(__file__))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from src.engine.board import STARTPOS_FEN
from src.engine.game import Game
from src.engine.move import parse_uci
from src.engine.perft import divide, perft


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Count legal move tree leaves (perft)")
    parser.add_argument(
        "--fen", type=str, default=STARTPOS_FEN, help="Starting position (default: startpos)"
    )
    parser.add_argument("--depth", type=int, default=3, help="Perft depth in plies (default: 3)")
    parser.add_argument(
        "--moves",
        nargs="*",
        default=[],
        help="Long algebraic moves to play first, e.g. e2e4 d7d5; keeps en passant rights",
    )
    parser.add_argument("--divide", action="store_true", help="Print counts per root move")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    game = Game.from_fen(args.fen)
    for uci in args.moves:
        mv = parse_uci(uci)
        if not game.attempt_move(mv.from_sq, mv.to_sq).applied:
            print(f"illegal move in --moves: {uci}", file=sys.stderr)
            return 2

    start = time.perf_counter()
    if args.divide and args.depth >= 1:
        split = divide(game.board, game.current_player, args.depth, game.last_move)
        for uci, count in sorted(split.items()):
            print(f"{uci}: {count}")
        nodes = sum(split.values())
    else:
        nodes = perft(game.board, game.current_player, args.depth, game.last_move)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt * 1000)} nps={int(nodes / max(dt, 1e-9))}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
