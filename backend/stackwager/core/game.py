"""Round state machine.

Phases:
    IDLE       waiting for a round to be started
    DROPPING   a piece is animating toward its hard-drop target row
    CLEARING   completed rows flash before being removed
    GAME_OVER  the board topped out or the piece could not be placed
    FINISHED   the purchased block count was played out

Timing is driven by the caller through `update(delta_ms)`. `resolve_round()`
runs the same lock/clear/spawn steps without timers, so a headless batch
run consumes the generator exactly like the animated loop and produces the
same lines and payouts.
"""
import logging
import secrets
from dataclasses import dataclass, replace
from enum import Enum
from typing import List, Optional, Tuple

from ..config import get_settings
from ..models.weights import (
    DEFAULT_WEIGHTS,
    UNIFORM_PIECE_WEIGHTS,
    HeuristicWeights,
    PieceWeights,
    RoundBiasConfig,
)
from .board import (
    BoardGrid,
    FallingPiece,
    clear_rows,
    empty_board,
    find_complete_rows,
    is_top_out,
    is_valid_placement,
    lock_piece,
    spawn_position,
)
from .outcome_controller import WIN_THRESHOLD, RoundOutcomeController
from .placement import Placement, find_all_placements, hard_drop
from .rng import Mulberry32

logger = logging.getLogger(__name__)


# ===== Payout progression =====

# Base geometric ratio of the payout progression
PROGRESSION_R = 1.08
# After this many clear events the ratio is eased toward the floor
PAYOUT_CAP_START = 8
# Ratio reached 10 events after the soft cap starts
PROGRESSION_R_FLOOR = 1.02
# payout = bet * PAYOUT_COEFF_A * r ** clear_event_index * cleared_lines
PAYOUT_COEFF_A = 0.24

# ===== Timing =====

DROP_ROW_INTERVAL_MS = 45
CLEAR_ANIM_DURATION_MS = 450
CLEAR_FLASH_INTERVAL_MS = 90

# ===== Economy =====

BOUGHT_BLOCK_OPTIONS: Tuple[int, ...] = (30, 50, 75)
# Bet = bought blocks * BLOCK_PRICE
BLOCK_PRICE = 1


def compute_effective_r(clear_event_index: int) -> float:
    """Geometric ratio for a clear event, softly capped on long chains."""
    if clear_event_index <= PAYOUT_CAP_START:
        return PROGRESSION_R
    t = min((clear_event_index - PAYOUT_CAP_START) / 10, 1)
    return PROGRESSION_R + (PROGRESSION_R_FLOOR - PROGRESSION_R) * t


def compute_payout(bet: float, clear_event_index: int, lines: int) -> float:
    """Payout for one clear event."""
    effective_r = compute_effective_r(clear_event_index)
    return bet * PAYOUT_COEFF_A * effective_r ** clear_event_index * lines


class GamePhase(str, Enum):
    """Round life-cycle phase."""
    IDLE = "IDLE"
    DROPPING = "DROPPING"
    CLEARING = "CLEARING"
    GAME_OVER = "GAME_OVER"
    FINISHED = "FINISHED"

    @classmethod
    def restart_phases(cls) -> Tuple["GamePhase", ...]:
        """Phases from which a new round may start."""
        return (cls.IDLE, cls.GAME_OVER, cls.FINISHED)

    @property
    def is_terminal(self) -> bool:
        return self in (GamePhase.GAME_OVER, GamePhase.FINISHED)


@dataclass(frozen=True)
class RoundState:
    """Snapshot of a game; replaced wholesale on every transition."""
    phase: GamePhase
    board: BoardGrid
    # Piece animating downward; None in IDLE and between pieces
    current_piece: Optional[FallingPiece]
    # Hard-drop destination row of the current piece
    target_row: int
    # Rows flashing during CLEARING
    clearing_rows: Tuple[int, ...]

    # Economy
    balance: float
    bought_blocks: int
    bet: float
    played_blocks: int
    # 0-based index of the next clear event in this round
    clear_event_index: int
    round_lines: int
    round_payout: float
    round_is_designated_win: bool

    # Bias active this round
    weights: HeuristicWeights = DEFAULT_WEIGHTS
    piece_weights: PieceWeights = UNIFORM_PIECE_WEIGHTS

    debug: bool = False

    @property
    def won(self) -> bool:
        """Whether this round's cleared lines reach the win threshold."""
        return self.round_lines >= WIN_THRESHOLD


class GameObserver:
    """
    Receives notifications from a Game, synchronously inside the call that
    triggered them. Subclasses override only the hooks they need.
    """

    def on_round_start(self, state: RoundState) -> None:
        pass

    def on_piece_spawned(self, piece: FallingPiece, placement: Placement, target_row: int) -> None:
        pass

    def on_lines_cleared(self, count: int, payout: float, balance: float) -> None:
        pass

    def on_round_end(self, state: RoundState) -> None:
        pass

    def on_state_change(self, state: RoundState) -> None:
        pass


def _resolve_seed(seed: Optional[int]) -> int:
    if seed is None:
        return secrets.randbits(32)
    return int(seed) & 0xFFFFFFFF


class Game:
    """Orchestrates spawn -> drop -> lock -> clear for one player."""

    def __init__(
        self,
        seed: Optional[int] = None,
        starting_balance: Optional[float] = None,
        win_probability: Optional[float] = None,
    ):
        settings = get_settings()
        if win_probability is None:
            win_probability = settings.default_win_probability
        if starting_balance is None:
            starting_balance = settings.starting_balance

        self._seed = _resolve_seed(seed)
        self._rng = Mulberry32(self._seed)
        self._controller = RoundOutcomeController(self._rng, win_probability)
        self._observers: List[GameObserver] = []

        # Internal timers
        self._drop_accum_ms = 0.0
        self._clear_accum_ms = 0.0
        # Block limit reached during a clear; finish once the animation ends
        self._finish_after_clear = False
        self._speed_multiplier = 1.0

        bought_blocks = settings.default_bought_blocks
        if bought_blocks not in BOUGHT_BLOCK_OPTIONS:
            bought_blocks = BOUGHT_BLOCK_OPTIONS[0]
        self._state = RoundState(
            phase=GamePhase.IDLE,
            board=empty_board(),
            current_piece=None,
            target_row=0,
            clearing_rows=(),
            balance=float(starting_balance),
            bought_blocks=bought_blocks,
            bet=float(bought_blocks * BLOCK_PRICE),
            played_blocks=0,
            clear_event_index=0,
            round_lines=0,
            round_payout=0.0,
            round_is_designated_win=False,
            debug=settings.debug_log,
        )
        self._controller.set_debug(self._state.debug)

    # ===== Read access =====

    @property
    def state(self) -> RoundState:
        return self._state

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def controller(self) -> RoundOutcomeController:
        return self._controller

    @property
    def speed_multiplier(self) -> float:
        return self._speed_multiplier

    @property
    def clear_flash_phase(self) -> int:
        """0 or 1, toggling every CLEAR_FLASH_INTERVAL_MS of the clear animation."""
        return int(self._clear_accum_ms // CLEAR_FLASH_INTERVAL_MS) % 2

    # ===== Observers =====

    def add_observer(self, observer: GameObserver) -> None:
        self._observers.append(observer)

    def remove_observer(self, observer: GameObserver) -> None:
        if observer in self._observers:
            self._observers.remove(observer)

    # ===== Configuration =====

    def set_seed(self, seed: Optional[int] = None) -> None:
        """
        Replace the generator and controller. Lifetime RTP history is
        discarded; an in-flight round is abandoned back to IDLE and a new
        round must be started explicitly. Rows flashing in CLEARING are
        removed from the abandoned board.
        """
        self._seed = _resolve_seed(seed)
        self._rng = Mulberry32(self._seed)
        win_probability = self._controller.win_probability
        self._controller = RoundOutcomeController(self._rng, win_probability)
        self._controller.set_debug(self._state.debug)

        self._drop_accum_ms = 0.0
        self._clear_accum_ms = 0.0
        self._finish_after_clear = False
        if self._state.phase in (GamePhase.DROPPING, GamePhase.CLEARING):
            self._state = replace(
                self._state,
                phase=GamePhase.IDLE,
                board=clear_rows(self._state.board, self._state.clearing_rows),
                current_piece=None,
                clearing_rows=(),
            )
            self._notify()

        self._log(f"RNG seed set to {self._seed}")

    def set_win_probability(self, p: float) -> None:
        self._controller.set_win_probability(p)

    def set_bought_blocks(self, n: int) -> None:
        """Set the block count (and bet) for the next round."""
        if self._state.phase not in GamePhase.restart_phases():
            logger.warning(f"[Game] Cannot change bought blocks during phase {self._state.phase.value}")
            return
        if n not in BOUGHT_BLOCK_OPTIONS:
            logger.warning(f"[Game] Unsupported block count {n}; choose one of {BOUGHT_BLOCK_OPTIONS}")
            return
        self._state = replace(self._state, bought_blocks=n, bet=float(n * BLOCK_PRICE))
        self._notify()

    def set_debug(self, on: bool) -> None:
        self._state = replace(self._state, debug=on)
        self._controller.set_debug(on)

    def set_speed_multiplier(self, m: float) -> None:
        """Tick-rate multiplier; 1 = normal, 10 = 10x fast-forward."""
        self._speed_multiplier = max(1.0, m)

    # ===== Round control =====

    def start_round(self) -> bool:
        """
        Debit the bet and begin a new round.

        Returns:
            True if the round started; False (with a warning) when the phase
            does not allow a restart or the balance cannot cover the bet.
        """
        if self._state.phase not in GamePhase.restart_phases():
            logger.warning(f"[Game] Round already in progress (phase={self._state.phase.value})")
            return False
        if self._state.balance < self._state.bet:
            logger.warning("[Game] Insufficient balance to place bet")
            return False

        bias: RoundBiasConfig = self._controller.start_round()

        self._state = replace(
            self._state,
            phase=GamePhase.DROPPING,
            board=empty_board(),
            current_piece=None,
            target_row=0,
            clearing_rows=(),
            balance=self._state.balance - self._state.bet,
            played_blocks=0,
            clear_event_index=0,
            round_lines=0,
            round_payout=0.0,
            round_is_designated_win=bias.is_winning_round,
            weights=bias.heuristic_weights,
            piece_weights=bias.piece_weights,
        )
        self._drop_accum_ms = 0.0
        self._clear_accum_ms = 0.0
        self._finish_after_clear = False

        self._log(
            f"Round started: bought_blocks={self._state.bought_blocks}, bet={self._state.bet}, "
            f"designated_win={bias.is_winning_round}"
        )

        for observer in list(self._observers):
            observer.on_round_start(self._state)
        self._spawn_next_piece()
        return True

    def update(self, delta_ms: float) -> None:
        """Advance the simulation; call once per frame with elapsed ms."""
        effective = delta_ms * self._speed_multiplier
        if self._state.phase == GamePhase.DROPPING:
            self._tick_drop(effective)
        elif self._state.phase == GamePhase.CLEARING:
            self._tick_clear(effective)

    def resolve_round(self) -> RoundState:
        """
        Play the current round to a terminal phase without timers.

        Each piece goes straight to its target row and each clear completes
        immediately; decisions and payouts match the animated path.
        """
        while self._state.phase in (GamePhase.DROPPING, GamePhase.CLEARING):
            if self._state.phase == GamePhase.CLEARING:
                self._finish_line_clear()
                continue
            piece = self._state.current_piece
            if piece is None:
                break
            self._state = replace(self._state, current_piece=replace(piece, row=self._state.target_row))
            self._lock_current_piece()
        return self._state

    # ===== Spawning =====

    def _spawn_next_piece(self) -> None:
        state = self._state
        piece_type = self._controller.pick_piece(state.piece_weights)
        spawn_row, _ = spawn_position(piece_type)

        placements = find_all_placements(state.board, piece_type, state.weights)
        if not placements:
            self._log(f"No placement for {piece_type.value}")
            self._trigger_game_over()
            return

        placement = self._controller.pick_placement(placements)
        piece = FallingPiece(piece_type, placement.rotation, spawn_row, placement.col)

        if not is_valid_placement(state.board, piece):
            self._log(f"Spawn blocked for {piece_type.value}")
            self._trigger_game_over()
            return

        target_row = hard_drop(state.board, piece).row
        self._state = replace(state, current_piece=piece, target_row=target_row)
        self._drop_accum_ms = 0.0

        self._log(
            f"Spawned {piece_type.value} -> col={placement.col}, rot={placement.rotation}, "
            f"target_row={target_row}, score={placement.score:.1f}"
        )
        for observer in list(self._observers):
            observer.on_piece_spawned(piece, placement, target_row)
        self._notify()

    # ===== Drop animation =====

    def _tick_drop(self, delta_ms: float) -> None:
        self._drop_accum_ms += delta_ms

        while self._drop_accum_ms >= DROP_ROW_INTERVAL_MS and self._state.current_piece is not None:
            self._drop_accum_ms -= DROP_ROW_INTERVAL_MS
            piece = self._state.current_piece

            if piece.row < self._state.target_row:
                self._state = replace(self._state, current_piece=piece.shifted())
            else:
                self._lock_current_piece()
                return

        self._notify()

    # ===== Locking =====

    def _lock_current_piece(self) -> None:
        state = self._state
        piece = state.current_piece
        new_board = lock_piece(state.board, piece)
        played = state.played_blocks + 1

        self._log(
            f"Locked {piece.piece_type.value} at row={piece.row}, col={piece.col} "
            f"(block {played}/{state.bought_blocks})"
        )

        if is_top_out(new_board):
            self._state = replace(state, board=new_board, current_piece=None, played_blocks=played)
            self._trigger_game_over()
            return

        complete_rows = find_complete_rows(new_board)
        block_limit_reached = played >= state.bought_blocks

        if complete_rows:
            payout = compute_payout(state.bet, state.clear_event_index, len(complete_rows))
            new_balance = state.balance + payout

            self._state = replace(
                state,
                phase=GamePhase.CLEARING,
                board=new_board,
                current_piece=None,
                clearing_rows=tuple(complete_rows),
                balance=new_balance,
                played_blocks=played,
                clear_event_index=state.clear_event_index + 1,
                round_lines=state.round_lines + len(complete_rows),
                round_payout=state.round_payout + payout,
            )
            self._finish_after_clear = block_limit_reached
            self._clear_accum_ms = 0.0

            self._log(f"Lines cleared: {len(complete_rows)}, payout: {payout:.2f}")
            for observer in list(self._observers):
                observer.on_lines_cleared(len(complete_rows), payout, new_balance)
        else:
            self._state = replace(state, board=new_board, current_piece=None, played_blocks=played)
            if block_limit_reached:
                self._trigger_finished()
                return
            self._spawn_next_piece()
            return

        self._notify()

    # ===== Line-clear animation =====

    def _tick_clear(self, delta_ms: float) -> None:
        self._clear_accum_ms += delta_ms
        if self._clear_accum_ms >= CLEAR_ANIM_DURATION_MS:
            self._finish_line_clear()
        else:
            # Renderers read clear_flash_phase on every frame
            self._notify()

    def _finish_line_clear(self) -> None:
        """Remove the flashed rows, then spawn the next piece or end the round."""
        new_board = clear_rows(self._state.board, self._state.clearing_rows)
        should_finish = self._finish_after_clear
        self._finish_after_clear = False

        self._state = replace(
            self._state,
            board=new_board,
            clearing_rows=(),
            phase=GamePhase.DROPPING,
        )
        self._clear_accum_ms = 0.0

        if should_finish:
            self._trigger_finished()
        else:
            self._spawn_next_piece()

    # ===== Round end =====

    def _end_round(self, phase: GamePhase) -> None:
        self._speed_multiplier = 1.0
        # Long-run correction sees every round exactly once
        self._controller.record_round_result(self._state.bet, self._state.round_payout)
        self._state = replace(self._state, phase=phase, current_piece=None)

        s = self._state
        self._log(
            f"Round {phase.value.lower()}: blocks={s.played_blocks}/{s.bought_blocks}, "
            f"lines={s.round_lines}, payout={s.round_payout:.2f}, won={s.won} "
            f"(designated_win={s.round_is_designated_win})"
        )
        for observer in list(self._observers):
            observer.on_round_end(self._state)
        self._notify()

    def _trigger_game_over(self) -> None:
        self._end_round(GamePhase.GAME_OVER)

    def _trigger_finished(self) -> None:
        self._end_round(GamePhase.FINISHED)

    # ===== Helpers =====

    def _notify(self) -> None:
        for observer in list(self._observers):
            observer.on_state_change(self._state)

    def _log(self, msg: str) -> None:
        if self._state.debug:
            logger.info(f"[Game] {msg}")
