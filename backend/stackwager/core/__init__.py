"""Core engine package.

This package contains the generator, board model, placement search,
outcome controller, round state machine and headless batch runner.
"""
from .rng import Mulberry32
from .errors import StackwagerError, ContractViolationError
from .board import BOARD_WIDTH, BOARD_HEIGHT, BoardGrid, FallingPiece
from .placement import Placement, find_all_placements, find_best_placement
from .outcome_controller import RoundOutcomeController, WIN_THRESHOLD
from .game import Game, GameObserver, GamePhase, RoundState
from .simulation import BatchSimulator, SimulationConfig, SimulationResult, get_batch_simulator, run_simulation

__all__ = [
    "Mulberry32",
    "StackwagerError",
    "ContractViolationError",
    "BOARD_WIDTH",
    "BOARD_HEIGHT",
    "BoardGrid",
    "FallingPiece",
    "Placement",
    "find_all_placements",
    "find_best_placement",
    "RoundOutcomeController",
    "WIN_THRESHOLD",
    "Game",
    "GameObserver",
    "GamePhase",
    "RoundState",
    "BatchSimulator",
    "SimulationConfig",
    "SimulationResult",
    "get_batch_simulator",
    "run_simulation",
]
