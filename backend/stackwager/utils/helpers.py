"""Utility helper functions."""
from typing import List, Optional, Tuple

from ..core.board import BOARD_HEIGHT, BOARD_WIDTH, BoardGrid
from ..models.tetromino import PieceType

EMPTY_CHAR = "."
# Generic filled cell for hand-written boards; stored as an I cell
FILLED_CHAR = "#"


def validate_board_rows(rows: List[str]) -> Tuple[bool, Optional[str]]:
    """
    Validate a text board.

    Args:
        rows: BOARD_HEIGHT strings of BOARD_WIDTH characters each; '.' is
            empty, a piece letter or '#' is filled.

    Returns:
        Tuple of (is_valid, error_message).
    """
    if len(rows) != BOARD_HEIGHT:
        return False, f"Board must have {BOARD_HEIGHT} rows, got {len(rows)}"

    allowed = {EMPTY_CHAR, FILLED_CHAR} | {p.value for p in PieceType}
    for r, row in enumerate(rows):
        if len(row) != BOARD_WIDTH:
            return False, f"Row {r} must have {BOARD_WIDTH} cells, got {len(row)}"
        for ch in row:
            if ch.upper() not in allowed:
                return False, f"Invalid cell '{ch}' in row {r}"

    return True, None


def parse_board_rows(rows: List[str]) -> BoardGrid:
    """
    Convert text rows into a board grid.

    Raises:
        ValueError: if the rows are not a valid board.
    """
    is_valid, error = validate_board_rows(rows)
    if not is_valid:
        raise ValueError(error)

    def cell(ch: str):
        ch = ch.upper()
        if ch == EMPTY_CHAR:
            return None
        if ch == FILLED_CHAR:
            return PieceType.I
        return PieceType(ch)

    return tuple(tuple(cell(ch) for ch in row) for row in rows)


def format_board_rows(board: BoardGrid) -> List[str]:
    """Convert a board grid into text rows, one string per row."""
    return [
        "".join(EMPTY_CHAR if c is None else c.value for c in row)
        for row in board
    ]
