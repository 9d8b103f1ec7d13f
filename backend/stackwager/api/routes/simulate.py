"""Headless simulation and round replay API routes."""
from fastapi import APIRouter, Depends, HTTPException

from ...config import get_settings
from ...models.schemas import (
    SimulateRequest,
    SimulateResponse,
    RoundSummaryItem,
    ReplayRequest,
    ReplayResponse,
    ErrorResponse,
)
from ...core.game import BOUGHT_BLOCK_OPTIONS
from ...core.simulation import BatchSimulator, SimulationConfig
from ...utils.helpers import format_board_rows
from ..deps import get_simulator

router = APIRouter(prefix="/api", tags=["Simulation"])


def _check_bought_blocks(bought_blocks: int) -> None:
    if bought_blocks not in BOUGHT_BLOCK_OPTIONS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid bought_blocks: {bought_blocks}. "
                   f"Valid options: {list(BOUGHT_BLOCK_OPTIONS)}"
        )


@router.post(
    "/simulate",
    response_model=SimulateResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Batch round simulation",
    description="""
    Play many rounds headlessly and compare the observed win rate with the
    configured win probability.

    A round is a **win** when it clears at least 5 lines. Results are
    deterministic for a given seed, probability and block count.
    """,
)
def simulate_rounds(
    request: SimulateRequest,
    simulator: BatchSimulator = Depends(get_simulator),
) -> SimulateResponse:
    """
    Run a batch simulation.

    Returns:
        SimulateResponse with aggregate statistics and, if requested,
        per-round summaries.
    """
    _check_bought_blocks(request.bought_blocks)

    max_rounds = get_settings().max_simulation_rounds
    if request.rounds > max_rounds:
        raise HTTPException(
            status_code=400,
            detail=f"rounds must be at most {max_rounds}",
        )

    result = simulator.run(SimulationConfig(
        rounds=request.rounds,
        win_probability=request.win_probability,
        bought_blocks=request.bought_blocks,
        seed=request.seed,
    ))

    data = result.to_dict(include_rounds=False)
    rounds = []
    if request.include_rounds:
        rounds = [RoundSummaryItem(**r.to_dict()) for r in result.rounds]
    return SimulateResponse(**data, rounds=rounds)


@router.post(
    "/rounds/replay",
    response_model=ReplayResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Replay one round",
)
def replay_round(
    request: ReplayRequest,
    simulator: BatchSimulator = Depends(get_simulator),
) -> ReplayResponse:
    """
    Play a single round from a fresh seed and return its event log:
    round start, every spawned piece with its chosen placement, every
    clear event with its payout, and the round end.
    """
    _check_bought_blocks(request.bought_blocks)

    replay = simulator.replay_round(
        seed=request.seed,
        win_probability=request.win_probability,
        bought_blocks=request.bought_blocks,
    )
    final = replay["final_state"]

    return ReplayResponse(
        seed=replay["seed"],
        phase=final.phase.value,
        round_lines=final.round_lines,
        round_payout=final.round_payout,
        played_blocks=final.played_blocks,
        designated_win=final.round_is_designated_win,
        won=final.won,
        board=format_board_rows(final.board),
        events=replay["events"],
    )
