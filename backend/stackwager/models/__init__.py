"""Data models package.

This package contains piece geometry, weight presets and API schemas.
"""
from .tetromino import (
    PieceType,
    TETROMINO_SHAPES,
    piece_cells,
    rotation_count,
    shape_width,
)
from .weights import (
    HeuristicWeights,
    PieceWeights,
    RoundBiasConfig,
    DEFAULT_WEIGHTS,
    AGGRESSIVE_WEIGHTS,
    WIN_WEIGHTS,
    PASSIVE_WEIGHTS,
    SABOTAGE_WEIGHTS,
    UNIFORM_PIECE_WEIGHTS,
    WIN_PIECE_WEIGHTS,
    LOSE_PIECE_WEIGHTS,
    HEURISTIC_PRESETS,
    PIECE_WEIGHT_PRESETS,
    get_heuristic_preset,
    create_custom_weights,
)

__all__ = [
    # Geometry
    "PieceType",
    "TETROMINO_SHAPES",
    "piece_cells",
    "rotation_count",
    "shape_width",
    # Weights
    "HeuristicWeights",
    "PieceWeights",
    "RoundBiasConfig",
    "DEFAULT_WEIGHTS",
    "AGGRESSIVE_WEIGHTS",
    "WIN_WEIGHTS",
    "PASSIVE_WEIGHTS",
    "SABOTAGE_WEIGHTS",
    "UNIFORM_PIECE_WEIGHTS",
    "WIN_PIECE_WEIGHTS",
    "LOSE_PIECE_WEIGHTS",
    "HEURISTIC_PRESETS",
    "PIECE_WEIGHT_PRESETS",
    "get_heuristic_preset",
    "create_custom_weights",
]
