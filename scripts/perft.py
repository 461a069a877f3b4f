#!/usr/bin/env python3
# ruff: noqa: E402
from __future__ import annotations

import argparse
import time
import os
import sys

# Allow running this script directly via `python scripts/perft.py`
# by adding the repo root (which contains `chessrules/`) to sys.path.
REPO_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)

from chessrules.engine.layout import STANDARD_LAYOUT, parse_layout
from chessrules.engine.perft import divide, perft


def main() -> None:
    parser = argparse.ArgumentParser(description="Count legal move-tree leaves for a layout")
    parser.add_argument(
        "--layout",
        type=str,
        default=STANDARD_LAYOUT,
        help="FEN-style layout (default: standard start)",
    )
    parser.add_argument("--depth", type=int, default=2, help="Perft depth (default: 2)")
    parser.add_argument(
        "--divide", action="store_true", help="Print node counts per root move"
    )
    args = parser.parse_args()

    board = parse_layout(args.layout)
    start = time.perf_counter()
    if args.divide:
        counts = divide(board, args.depth)
        for uci in sorted(counts):
            print(f"{uci}: {counts[uci]}")
        nodes = sum(counts.values())
    else:
        nodes = perft(board, args.depth)
    dt = time.perf_counter() - start
    print(f"nodes={nodes} depth={args.depth} time_ms={int(dt*1000)} nps={int(nodes/max(dt,1e-9))}")


if __name__ == "__main__":
    main()
