"""Exhaustive placement search with heuristic scoring.

For a piece, every (rotation x column) combination is hard-dropped, locked
onto a copy of the board and scored:

    score = complete_lines * lines + holes * hole_count
          + aggregate_height * sum(heights) + bumpiness * sum(|h[i] - h[i+1]|)
          + max_height * max(heights)
"""
from dataclasses import dataclass
from typing import Dict, List, Optional

from ..models.tetromino import PieceType, rotation_count, shape_width
from ..models.weights import HeuristicWeights
from .board import (
    BOARD_WIDTH,
    BoardGrid,
    FallingPiece,
    column_heights,
    count_complete_lines,
    count_holes,
    is_valid_placement,
    lock_piece,
)


@dataclass(frozen=True)
class Placement:
    """A resolved resting position for a piece and its heuristic score."""
    rotation: int
    col: int
    row: int
    score: float

    def to_dict(self) -> Dict:
        return {
            "rotation": self.rotation,
            "col": self.col,
            "row": self.row,
            "score": self.score,
        }


def evaluate_board(board: BoardGrid, weights: HeuristicWeights) -> float:
    """Score a board with the given weights. Higher is better."""
    heights = column_heights(board)
    aggregate_height = sum(heights)
    max_height = max(heights)
    holes = count_holes(board)
    lines = count_complete_lines(board)

    bumpiness = 0
    for c in range(BOARD_WIDTH - 1):
        bumpiness += abs(heights[c] - heights[c + 1])

    return (
        weights.complete_lines * lines
        + weights.holes * holes
        + weights.aggregate_height * aggregate_height
        + weights.bumpiness * bumpiness
        + weights.max_height * max_height
    )


def hard_drop(board: BoardGrid, piece: FallingPiece) -> FallingPiece:
    """Translate the piece down while the next row is still valid."""
    current = piece
    while is_valid_placement(board, current.shifted()):
        current = current.shifted()
    return current


def _could_fit_horizontally(width: int, col: int) -> bool:
    # Bounding box wholly off either edge; exact bounds are left to
    # is_valid_placement because shapes have empty columns.
    if col >= BOARD_WIDTH:
        return False
    if col + width - 1 < 0:
        return False
    return True


def find_all_placements(
    board: BoardGrid,
    piece_type: PieceType,
    weights: HeuristicWeights,
) -> List[Placement]:
    """
    Collect every legal resting placement for a piece type, scored.

    Args:
        board: Board to search on (not modified)
        piece_type: Piece to place
        weights: Heuristic coefficients

    Returns:
        Placements sorted by score, best first. Ties keep enumeration order
        (rotation ascending, then column ascending). An empty list means the
        piece cannot be placed anywhere.
    """
    results: List[Placement] = []

    for rotation in range(rotation_count(piece_type)):
        width = shape_width(piece_type, rotation)

        for col in range(-(width - 1), BOARD_WIDTH):
            if not _could_fit_horizontally(width, col):
                continue

            candidate = FallingPiece(piece_type, rotation, 0, col)
            dropped = hard_drop(board, candidate)
            if not is_valid_placement(board, dropped):
                continue

            score = evaluate_board(lock_piece(board, dropped), weights)
            results.append(Placement(rotation=rotation, col=col, row=dropped.row, score=score))

    # sorted() is stable with reverse=True, so equal scores keep their order
    return sorted(results, key=lambda p: p.score, reverse=True)


def find_best_placement(
    board: BoardGrid,
    piece_type: PieceType,
    weights: HeuristicWeights,
) -> Optional[Placement]:
    """Single best placement, or None when the piece cannot be placed."""
    placements = find_all_placements(board, piece_type, weights)
    return placements[0] if placements else None
