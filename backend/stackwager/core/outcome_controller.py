"""Round outcome controller.

Steers the expected win probability of each round without forcing
outcomes. Influence levers:

1. Piece distribution bias (easy pieces on winning rounds, S/Z on losing).
2. Heuristic weight bias (WIN_WEIGHTS vs SABOTAGE_WEIGHTS).
3. Placement selection (random top-K on winning rounds, random worst-K on
   losing rounds).
4. Long-run RTP correction: a small nudge to the win probability so that
   lifetime payout / lifetime bet converges toward TARGET_RTP.

A round only counts as a win when its cleared lines reach WIN_THRESHOLD;
the controller biases the odds, it never enforces that result.
"""
import logging
from typing import List, Optional

from ..models.tetromino import PieceType
from ..models.weights import (
    LOSE_PIECE_WEIGHTS,
    SABOTAGE_WEIGHTS,
    WIN_PIECE_WEIGHTS,
    WIN_WEIGHTS,
    PieceWeights,
    RoundBiasConfig,
)
from .errors import ContractViolationError
from .placement import Placement
from .rng import Mulberry32

logger = logging.getLogger(__name__)

# Lines needed in one round for it to count as a win
WIN_THRESHOLD = 5

# Winning rounds pick among the best K placements; larger K looks less robotic
WIN_TOP_K = 3
# Losing rounds pick among the worst K placements
LOSE_WORST_K = 4

# Long-run payout / bet the correction converges toward
TARGET_RTP = 0.95
# Feedback gain of the RTP error into the win probability, in (0, 1]
RTP_CORRECTION_FACTOR = 0.15

MIN_EFFECTIVE_PROBABILITY = 0.01
MAX_EFFECTIVE_PROBABILITY = 0.99


def _clamp(value: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, value))


class RoundOutcomeController:
    """Owns the generator and decides per-round bias, pieces and placements."""

    def __init__(self, rng: Mulberry32, win_probability: float = 0.5):
        self._rng = rng
        self._win_probability = _clamp(win_probability, 0.0, 1.0)
        self._debug = False

        # Lifetime RTP accumulator
        self._total_bet = 0.0
        self._total_payout = 0.0

        self._last_effective_probability: Optional[float] = None
        self._current_bias = RoundBiasConfig(
            heuristic_weights=WIN_WEIGHTS,
            piece_weights=WIN_PIECE_WEIGHTS,
            is_winning_round=False,
        )

    # ===== Configuration =====

    def set_win_probability(self, p: float) -> None:
        """Set the operator target as a fraction in [0, 1]; out-of-range values clamp."""
        self._win_probability = _clamp(p, 0.0, 1.0)

    @property
    def win_probability(self) -> float:
        return self._win_probability

    def set_debug(self, enabled: bool) -> None:
        self._debug = enabled

    # ===== RTP tracking =====

    def record_round_result(self, bet: float, payout: float) -> None:
        """Add a finished round to the lifetime totals. Call once per round."""
        self._total_bet += bet
        self._total_payout += payout

    @property
    def total_bet(self) -> float:
        return self._total_bet

    @property
    def total_payout(self) -> float:
        return self._total_payout

    @property
    def rtp(self) -> float:
        """Lifetime payout / bet, 0 before any bet was recorded."""
        if self._total_bet <= 0:
            return 0.0
        return self._total_payout / self._total_bet

    def effective_win_probability(self) -> float:
        """Target probability after the RTP correction term."""
        if self._total_bet <= 0:
            return self._win_probability

        current_rtp = self._total_payout / self._total_bet
        error = TARGET_RTP - current_rtp  # positive when underpaying
        corrected = _clamp(
            self._win_probability + error * RTP_CORRECTION_FACTOR,
            MIN_EFFECTIVE_PROBABILITY,
            MAX_EFFECTIVE_PROBABILITY,
        )
        self._log(
            f"RTP correction: rtp={current_rtp * 100:.1f}%, error={error:.3f}, "
            f"win_prob {self._win_probability:.3f} -> {corrected:.3f}"
        )
        return corrected

    # ===== Per-round decisions =====

    def start_round(self) -> RoundBiasConfig:
        """Roll the generator once and build the bias config for a new round."""
        effective = self.effective_win_probability()
        self._last_effective_probability = effective

        roll = self._rng.next()
        is_winning = roll < effective

        self._log(
            f"Round start: roll={roll:.3f}, threshold={effective:.3f}, "
            f"outcome={'WIN' if is_winning else 'LOSE'}"
        )

        self._current_bias = RoundBiasConfig(
            heuristic_weights=WIN_WEIGHTS if is_winning else SABOTAGE_WEIGHTS,
            piece_weights=WIN_PIECE_WEIGHTS if is_winning else LOSE_PIECE_WEIGHTS,
            is_winning_round=is_winning,
        )
        return self._current_bias

    @property
    def current_bias(self) -> RoundBiasConfig:
        return self._current_bias

    @property
    def current_round_is_winning(self) -> bool:
        return self._current_bias.is_winning_round

    @property
    def last_effective_probability(self) -> Optional[float]:
        """Threshold used by the most recent start_round(), None before the first."""
        return self._last_effective_probability

    def pick_piece(self, weights: PieceWeights) -> PieceType:
        """Weighted draw of the next piece type."""
        order = PieceType.all_types()
        draw = self._rng.next() * weights.total()
        for piece_type in order:
            draw -= weights.weight_of(piece_type)
            if draw <= 0:
                return piece_type
        # Floating-point leftovers
        return order[-1]

    def pick_placement(self, placements: List[Placement]) -> Placement:
        """
        Choose one placement from a list sorted best first.

        Winning rounds pick uniformly among the top WIN_TOP_K; losing rounds
        among the worst LOSE_WORST_K.

        Raises:
            ContractViolationError: if `placements` is empty.
        """
        if not placements:
            raise ContractViolationError(
                "pick_placement called with no candidates; check for lock-out first"
            )
        if len(placements) == 1:
            return placements[0]

        if self._current_bias.is_winning_round:
            k = min(WIN_TOP_K, len(placements))
            idx = self._rng.next_int(k)
            self._log(f"Win-mode placement: rank {idx + 1}/{len(placements)} (top-{k} pool)")
        else:
            k = min(LOSE_WORST_K, len(placements))
            idx = len(placements) - k + self._rng.next_int(k)
            self._log(f"Lose-mode placement: rank {idx + 1}/{len(placements)} (worst-{k} pool)")
        return placements[idx]

    def _log(self, msg: str) -> None:
        if self._debug:
            logger.info(f"[RoundOutcomeController] {msg}")
