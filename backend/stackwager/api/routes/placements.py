"""Placement analysis API routes."""
from fastapi import APIRouter, HTTPException

from ...models.schemas import (
    PlacementRequest,
    PlacementResponse,
    PlacementItem,
    ErrorResponse,
)
from ...models.tetromino import PieceType
from ...models.weights import get_heuristic_preset, create_custom_weights
from ...core.board import FallingPiece, count_complete_lines, lock_piece
from ...core.placement import find_all_placements
from ...utils.helpers import parse_board_rows

router = APIRouter(prefix="/api", tags=["Placements"])


@router.post(
    "/placements",
    response_model=PlacementResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Score every placement of a piece",
)
async def analyze_placements(request: PlacementRequest) -> PlacementResponse:
    """
    Enumerate and score every legal resting placement of a piece on the
    given board.

    Args:
        request: PlacementRequest with board rows, piece type and weights.

    Returns:
        PlacementResponse with placements sorted best first.
    """
    try:
        piece_type = PieceType(request.piece_type.upper())
    except ValueError:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid piece type: {request.piece_type}. "
                   f"Valid types: {[t.value for t in PieceType]}"
        )

    try:
        weights = get_heuristic_preset(request.preset)
    except KeyError:
        raise HTTPException(status_code=400, detail=f"Unknown preset: {request.preset}")

    if request.weights is not None:
        weights = create_custom_weights(weights, **request.weights.model_dump())

    try:
        board = parse_board_rows(request.board)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=f"Invalid board: {str(e)}")

    placements = find_all_placements(board, piece_type, weights)
    total = len(placements)
    if request.limit is not None:
        placements = placements[:request.limit]

    items = [
        PlacementItem(
            **p.to_dict(),
            lines_cleared=count_complete_lines(
                lock_piece(board, FallingPiece(piece_type, p.rotation, p.row, p.col))
            ),
        )
        for p in placements
    ]

    return PlacementResponse(
        piece_type=piece_type.value,
        total=total,
        lock_out=total == 0,
        placements=items,
    )
