#!/usr/bin/env python3
"""Replay a game into a position file, the way a live board repaints.

Pair with ``fenwatch watch``:

    fenwatch watch /tmp/board.txt &
    python scripts/replay_game.py /tmp/board.txt e2e4 e7e5 g1f3

Each move is written as a short burst: an intermediate frame with only the
moving piece lifted, then the final placement. The watcher should print one
settled position per move and never the intermediate frame.
"""

import sys
import time
from pathlib import Path

import chess
from loguru import logger
from rich.console import Console

console = Console()


def lifted_placement(board: chess.Board, move: chess.Move) -> str:
    """Placement with the moving piece removed from its origin square."""
    scratch = board.copy(stack=False)
    scratch.remove_piece_at(move.from_square)
    return scratch.board_fen()


def replay(path: Path, moves: list[str], gap: float = 1.0, repaint: float = 0.05) -> None:
    board = chess.Board()
    path.write_text(board.fen())
    logger.info(f"Start position written to {path}")

    for uci in moves:
        time.sleep(gap)
        move = chess.Move.from_uci(uci)
        if move not in board.legal_moves:
            console.print(f"[red]Illegal move {uci} in {board.fen()}[/red]")
            sys.exit(1)

        path.write_text(lifted_placement(board, move))
        time.sleep(repaint)
        board.push(move)
        path.write_text(board.fen())
        console.print(f"[cyan]{uci}[/cyan] -> {board.fen()}")


def main() -> None:
    if len(sys.argv) < 2:
        console.print("Usage: replay_game.py <position-file> [uci moves...] [--gap SECONDS]")
        sys.exit(1)

    args = sys.argv[1:]
    gap = 1.0
    if "--gap" in args:
        idx = args.index("--gap")
        gap = float(args[idx + 1])
        del args[idx : idx + 2]

    path, moves = Path(args[0]), args[1:]
    replay(path, moves or ["e2e4", "e7e5", "g1f3", "b8c6"], gap=gap)


if __name__ == "__main__":
    main()
