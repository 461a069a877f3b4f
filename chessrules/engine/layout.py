from __future__ import annotations

from typing import Dict, List, Optional

from .board import BoardState, normalize_castling
from .errors import LayoutError
from .pieces import PieceKind, PieceType, Side
from .square import Square


STANDARD_LAYOUT = "rnbqkbnr/pppppppp/8/8/8/8/PPPPPPPP/RNBQKBNR w KQkq - 0 1"


def parse_layout(text: str) -> BoardState:
    """Create a board from a FEN-style layout string.

    Args:
        text (str): Piece placement, optionally followed by side to move,
            castling rights, en passant target and move counters.

    Returns:
        BoardState: Board with an empty history and no moved pieces.

    Raises:
        LayoutError: If the placement is malformed, a side has more than one
            king, a pawn stands on a back rank, or an optional field is
            invalid.

    Notes:
        A missing castling field grants all four rights; ``-`` grants none.
        Move counters are accepted but ignored so that the history length
        matches the move counter.
    """
    if not text or not isinstance(text, str):
        raise LayoutError("layout must be a non-empty string")
    parts = text.strip().split()
    if len(parts) > 6:
        raise LayoutError("layout has too many fields")
    placement = _parse_placement(parts[0])

    stm = parts[1] if len(parts) > 1 else "w"
    if stm not in ("w", "b"):
        raise LayoutError("side to move must be 'w' or 'b'")

    castling = parts[2] if len(parts) > 2 else "KQkq"
    if castling == "-":
        castling = ""
    elif any(ch not in "KQkq" for ch in castling):
        raise LayoutError("invalid castling rights")

    board = BoardState(
        placement=placement,
        active_side=Side(stm),
        castling=normalize_castling(castling),
    )

    ep = parts[3] if len(parts) > 3 else "-"
    if ep != "-":
        board.pawn_double_stepped.add(_hopped_pawn(board, ep))
    return board


def format_layout(board: BoardState) -> str:
    """Serialize placement, side to move, castling and en passant fields."""
    ranks: List[str] = []
    for rank_idx in range(7, -1, -1):
        run = 0
        row: List[str] = []
        for file_idx in range(8):
            piece = board.piece_at(Square.at(file_idx, rank_idx))
            if piece is None:
                run += 1
                continue
            if run > 0:
                row.append(str(run))
                run = 0
            row.append(piece.value)
        if run > 0:
            row.append(str(run))
        ranks.append("".join(row))

    ep = "-"
    for sq in sorted(board.pawn_double_stepped, key=lambda s: s.value):
        piece = board.piece_at(sq)
        if piece is not None:
            ep = str(Square.at(sq.file, sq.rank - piece.side.pawn_direction))
            break
    castling = board.castling or "-"
    return f"{'/'.join(ranks)} {board.active_side.value} {castling} {ep}"


def _parse_placement(field: str) -> Dict[Square, PieceKind]:
    ranks = field.split("/")
    if len(ranks) != 8:
        raise LayoutError("layout board must have 8 ranks")
    placement: Dict[Square, PieceKind] = {}
    kings = {Side.WHITE: 0, Side.BLACK: 0}
    for rank_idx, rank in enumerate(ranks[::-1]):  # start from rank 1 (bottom)
        file_idx = 0
        for ch in rank:
            if ch.isdigit():
                n = int(ch)
                if n < 1 or n > 8:
                    raise LayoutError("invalid empty count in layout rank")
                file_idx += n
                continue
            try:
                piece = PieceKind.from_char(ch)
            except ValueError as e:
                raise LayoutError(str(e)) from e
            if file_idx >= 8:
                raise LayoutError("too many squares in layout rank")
            if piece.type is PieceType.PAWN and rank_idx in (0, 7):
                raise LayoutError("pawn on a back rank")
            if piece.type is PieceType.KING:
                kings[piece.side] += 1
            placement[Square.at(file_idx, rank_idx)] = piece
            file_idx += 1
        if file_idx != 8:
            raise LayoutError("rank does not sum to 8 squares in layout")
    for side, count in kings.items():
        if count > 1:
            raise LayoutError(f"more than one {side} king")
    return placement


def _hopped_pawn(board: BoardState, ep: str) -> Square:
    """Return the square of the pawn that just double-stepped past ``ep``."""
    target: Optional[Square] = Square.coerce(ep)
    if target is None or target.rank not in (2, 5):
        raise LayoutError("invalid en passant square")
    # Rank 3 target: white pawn on rank 4; rank 6 target: black pawn on rank 5.
    side = Side.WHITE if target.rank == 2 else Side.BLACK
    pawn_sq = Square.at(target.file, target.rank + side.pawn_direction)
    if board.piece_at(pawn_sq) is not PieceKind.of(side, PieceType.PAWN):
        raise LayoutError("en passant square has no pawn behind it")
    return pawn_sq
