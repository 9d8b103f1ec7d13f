"""Weight preset API routes."""
from fastapi import APIRouter

from ...models.schemas import PresetListResponse
from ...models.weights import HEURISTIC_PRESETS, PIECE_WEIGHT_PRESETS
from ...core.game import BOUGHT_BLOCK_OPTIONS
from ...core.outcome_controller import WIN_THRESHOLD

router = APIRouter(prefix="/api", tags=["Presets"])


@router.get("/presets", response_model=PresetListResponse)
async def list_presets() -> PresetListResponse:
    """List heuristic and piece weight presets and economy constants."""
    return PresetListResponse(
        heuristic_presets={name: w.to_dict() for name, w in HEURISTIC_PRESETS.items()},
        piece_weight_presets={name: w.to_dict() for name, w in PIECE_WEIGHT_PRESETS.items()},
        win_threshold=WIN_THRESHOLD,
        bought_block_options=list(BOUGHT_BLOCK_OPTIONS),
    )
