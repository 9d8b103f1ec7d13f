"""Playfield model: collision, locking, line clears and column statistics.

The board is BOARD_HEIGHT rows by BOARD_WIDTH columns; row 0 is the top.
A cell is None (empty) or the PieceType that was locked there. Grids are
tuples of row tuples and every function returns a new grid, so a board can
be shared freely between the committed round state and speculative search.
"""
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..models.tetromino import PieceType, piece_cells, shape_width

BOARD_WIDTH = 10
BOARD_HEIGHT = 20

Cell = Optional[PieceType]
Row = Tuple[Cell, ...]
BoardGrid = Tuple[Row, ...]

EMPTY_ROW: Row = (None,) * BOARD_WIDTH


@dataclass(frozen=True)
class FallingPiece:
    """The unlocked piece; row/col is its bounding-box top-left corner."""
    piece_type: PieceType
    rotation: int
    row: int
    col: int

    def shifted(self, rows: int = 1) -> "FallingPiece":
        return FallingPiece(self.piece_type, self.rotation, self.row + rows, self.col)

    def to_dict(self) -> dict:
        return {
            "piece_type": self.piece_type.value,
            "rotation": self.rotation,
            "row": self.row,
            "col": self.col,
        }


# ===== Construction =====

def empty_board() -> BoardGrid:
    return (EMPTY_ROW,) * BOARD_HEIGHT


def piece_absolute_cells(piece: FallingPiece) -> List[Tuple[int, int]]:
    """Absolute (row, col) positions of every filled cell of a piece."""
    return [
        (r + piece.row, c + piece.col)
        for r, c in piece_cells(piece.piece_type, piece.rotation)
    ]


def spawn_position(piece_type: PieceType) -> Tuple[int, int]:
    """Starting (row, col) so the piece appears centred at the top."""
    return 0, (BOARD_WIDTH - shape_width(piece_type, 0)) // 2


# ===== Collision =====

def is_valid_placement(board: BoardGrid, piece: FallingPiece) -> bool:
    """
    True when the piece fits without leaving the horizontal bounds, going
    below the floor, or overlapping a locked cell. Cells above row 0 are
    allowed while a piece enters the board.
    """
    for r, c in piece_absolute_cells(piece):
        if c < 0 or c >= BOARD_WIDTH:
            return False
        if r >= BOARD_HEIGHT:
            return False
        if r >= 0 and board[r][c] is not None:
            return False
    return True


# ===== Locking =====

def lock_piece(board: BoardGrid, piece: FallingPiece) -> BoardGrid:
    """Burn the piece into a copy of the board; cells above row 0 are dropped."""
    rows = [list(row) for row in board]
    for r, c in piece_absolute_cells(piece):
        if 0 <= r < BOARD_HEIGHT:
            rows[r][c] = piece.piece_type
    return tuple(tuple(row) for row in rows)


# ===== Line clearing =====

def _row_complete(row: Row) -> bool:
    return all(cell is not None for cell in row)


def find_complete_rows(board: BoardGrid) -> List[int]:
    """Row indices of every completely filled row, top to bottom."""
    return [r for r, row in enumerate(board) if _row_complete(row)]


def clear_rows(board: BoardGrid, rows: Iterable[int]) -> BoardGrid:
    """Remove rows and prepend the same number of blank rows at the top."""
    doomed = set(rows)
    remaining = tuple(row for r, row in enumerate(board) if r not in doomed)
    return (EMPTY_ROW,) * (len(board) - len(remaining)) + remaining


def count_complete_lines(board: BoardGrid) -> int:
    """Number of fully filled rows; used for scoring before the clear."""
    return sum(1 for row in board if _row_complete(row))


# ===== Game-over detection =====

def is_top_out(board: BoardGrid) -> bool:
    """True when any locked cell sits in the top two rows."""
    return any(cell is not None for cell in board[0]) or any(
        cell is not None for cell in board[1]
    )


# ===== Analysis helpers used by placement scoring =====

def column_heights(board: BoardGrid) -> List[int]:
    """Height of each column measured from the floor to its topmost cell."""
    heights = [0] * BOARD_WIDTH
    for c in range(BOARD_WIDTH):
        for r in range(BOARD_HEIGHT):
            if board[r][c] is not None:
                heights[c] = BOARD_HEIGHT - r
                break
    return heights


def count_holes(board: BoardGrid) -> int:
    """Empty cells with at least one filled cell above them in the column."""
    holes = 0
    for c in range(BOARD_WIDTH):
        covered = False
        for r in range(BOARD_HEIGHT):
            if board[r][c] is not None:
                covered = True
            elif covered:
                holes += 1
    return holes


def filled_cell_count(board: BoardGrid) -> int:
    return sum(1 for row in board for cell in row if cell is not None)
