"""Heuristic and piece weight presets used to bias each round."""
from dataclasses import dataclass, fields, replace
from typing import Dict

from .tetromino import PieceType


@dataclass(frozen=True)
class HeuristicWeights:
    """
    Coefficients scoring a locked (not yet cleared) board.

    Positive terms are rewarded and negative terms penalised by the
    placement search. A strongly negative `complete_lines` makes the
    search avoid completing rows.
    """
    complete_lines: float
    holes: float
    aggregate_height: float
    bumpiness: float
    max_height: float

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary."""
        return {
            "complete_lines": self.complete_lines,
            "holes": self.holes,
            "aggregate_height": self.aggregate_height,
            "bumpiness": self.bumpiness,
            "max_height": self.max_height,
        }


@dataclass(frozen=True)
class PieceWeights:
    """One positive sampling weight per piece type."""
    I: float
    O: float
    T: float
    S: float
    Z: float
    J: float
    L: float

    def weight_of(self, piece_type: PieceType) -> float:
        return getattr(self, piece_type.value)

    def total(self) -> float:
        """Sum of weights in enumeration order."""
        total = 0.0
        for piece_type in PieceType.all_types():
            total += self.weight_of(piece_type)
        return total

    def to_dict(self) -> Dict[str, float]:
        """Convert to dictionary keyed by piece letter."""
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class RoundBiasConfig:
    """Per-round bundle chosen by the outcome controller."""
    heuristic_weights: HeuristicWeights
    piece_weights: PieceWeights
    is_winning_round: bool

    def to_dict(self) -> Dict:
        return {
            "heuristic_weights": self.heuristic_weights.to_dict(),
            "piece_weights": self.piece_weights.to_dict(),
            "is_winning_round": self.is_winning_round,
        }


# ===== Heuristic presets =====

# Balanced default, reasonable play quality
DEFAULT_WEIGHTS = HeuristicWeights(
    complete_lines=100,
    holes=-35,
    aggregate_height=-0.5,
    bumpiness=-3,
    max_height=-7,
)

# Biased toward clearing lines and keeping the board flat
AGGRESSIVE_WEIGHTS = HeuristicWeights(
    complete_lines=200,
    holes=-50,
    aggregate_height=-0.3,
    bumpiness=-2,
    max_height=-5,
)

# Good but imperfect play for winning rounds
WIN_WEIGHTS = HeuristicWeights(
    complete_lines=120,
    holes=-38,
    aggregate_height=-0.5,
    bumpiness=-2.5,
    max_height=-6,
)

# Tolerates holes and fills up quickly
PASSIVE_WEIGHTS = HeuristicWeights(
    complete_lines=50,
    holes=-15,
    aggregate_height=-2,
    bumpiness=-6,
    max_height=-20,
)

# Stacks without completing rows; used for losing rounds
SABOTAGE_WEIGHTS = HeuristicWeights(
    complete_lines=-500,
    holes=-3,
    aggregate_height=-0.4,
    bumpiness=-0.5,
    max_height=-1.5,
)

HEURISTIC_PRESETS: Dict[str, HeuristicWeights] = {
    "default": DEFAULT_WEIGHTS,
    "aggressive": AGGRESSIVE_WEIGHTS,
    "win": WIN_WEIGHTS,
    "passive": PASSIVE_WEIGHTS,
    "sabotage": SABOTAGE_WEIGHTS,
}


# ===== Piece weight presets =====

UNIFORM_PIECE_WEIGHTS = PieceWeights(I=1, O=1, T=1, S=1, Z=1, J=1, L=1)

# I/O/T moderately favoured, S/Z slightly reduced; close to neutral
WIN_PIECE_WEIGHTS = PieceWeights(
    I=2.0,
    O=1.6,
    T=1.6,
    S=0.45,
    Z=0.45,
    J=1.2,
    L=1.2,
)

# S/Z dominate (~55% of draws), I/O/T are rare
LOSE_PIECE_WEIGHTS = PieceWeights(
    I=0.15,
    O=0.25,
    T=0.50,
    S=3.50,
    Z=3.50,
    J=2.00,
    L=2.00,
)

PIECE_WEIGHT_PRESETS: Dict[str, PieceWeights] = {
    "uniform": UNIFORM_PIECE_WEIGHTS,
    "win": WIN_PIECE_WEIGHTS,
    "lose": LOSE_PIECE_WEIGHTS,
}


def get_heuristic_preset(name: str) -> HeuristicWeights:
    """Get heuristic preset by name. Raises KeyError for unknown names."""
    return HEURISTIC_PRESETS[name.lower()]


def create_custom_weights(base: HeuristicWeights, **overrides) -> HeuristicWeights:
    """
    Create heuristic weights based on a preset with overrides.

    Args:
        base: Preset to derive from
        **overrides: Coefficients to override (None values are ignored)

    Returns:
        New HeuristicWeights
    """
    return replace(base, **{k: v for k, v in overrides.items() if v is not None})
