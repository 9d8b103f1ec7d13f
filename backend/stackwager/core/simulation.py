"""Headless batch simulation.

Runs complete rounds through the same Game logic as the animated loop,
using `Game.resolve_round()` instead of timed updates, and reports the
observed win rate against the configured probability. A win is a round
whose cleared lines reach WIN_THRESHOLD.
"""
import logging
import statistics
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from ..config import get_settings
from ..models.weights import RoundBiasConfig
from .board import FallingPiece
from .game import BLOCK_PRICE, BOUGHT_BLOCK_OPTIONS, Game, GameObserver, GamePhase, RoundState
from .placement import Placement

logger = logging.getLogger(__name__)


@dataclass
class SimulationConfig:
    """Parameters of a batch run."""
    rounds: int
    win_probability: float
    bought_blocks: int = 30
    seed: Optional[int] = None
    debug_log: bool = False

    @property
    def bet(self) -> float:
        return float(self.bought_blocks * BLOCK_PRICE)


@dataclass
class RoundSummary:
    """Outcome of one simulated round."""
    index: int
    lines: int
    payout: float
    won: bool
    designated_win: bool
    phase: GamePhase
    played_blocks: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "lines": self.lines,
            "payout": round(self.payout, 4),
            "won": self.won,
            "designated_win": self.designated_win,
            "phase": self.phase.value,
            "played_blocks": self.played_blocks,
        }


@dataclass
class SimulationResult:
    """Aggregated result of a batch run."""
    total_rounds: int
    wins: int
    win_rate: float
    designated_wins: int
    avg_lines: float
    avg_payout: float
    avg_net: float
    std_lines: float
    total_bet: float
    total_payout: float
    # Return-to-player: total_payout / total_bet
    rtp: float
    seed: int
    rounds: List[RoundSummary] = field(default_factory=list)

    def to_dict(self, include_rounds: bool = True) -> Dict[str, Any]:
        data = {
            "total_rounds": self.total_rounds,
            "wins": self.wins,
            "win_rate": round(self.win_rate, 4),
            "designated_wins": self.designated_wins,
            "avg_lines": round(self.avg_lines, 2),
            "avg_payout": round(self.avg_payout, 4),
            "avg_net": round(self.avg_net, 4),
            "std_lines": round(self.std_lines, 2),
            "total_bet": self.total_bet,
            "total_payout": round(self.total_payout, 4),
            "rtp": round(self.rtp, 4),
            "seed": self.seed,
        }
        if include_rounds:
            data["rounds"] = [r.to_dict() for r in self.rounds]
        return data


@dataclass
class RoundEvent:
    """One entry of a replay log."""
    kind: str
    data: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {"kind": self.kind, **self.data}


class RoundRecorder(GameObserver):
    """Collects round results and, optionally, a per-event log."""

    def __init__(self, record_events: bool = False):
        self.record_events = record_events
        self.events: List[RoundEvent] = []
        self.finished: List[RoundState] = []

    def on_round_start(self, state: RoundState) -> None:
        if self.record_events:
            bias = RoundBiasConfig(
                heuristic_weights=state.weights,
                piece_weights=state.piece_weights,
                is_winning_round=state.round_is_designated_win,
            )
            self.events.append(RoundEvent("round_start", {
                "bet": state.bet,
                "balance": state.balance,
                "designated_win": state.round_is_designated_win,
                "bias": bias.to_dict(),
            }))

    def on_piece_spawned(self, piece: FallingPiece, placement: Placement, target_row: int) -> None:
        if self.record_events:
            self.events.append(RoundEvent("spawn", {
                **piece.to_dict(),
                "target_row": target_row,
                "score": placement.score,
            }))

    def on_lines_cleared(self, count: int, payout: float, balance: float) -> None:
        if self.record_events:
            self.events.append(RoundEvent("lines_cleared", {
                "count": count,
                "payout": payout,
                "balance": balance,
            }))

    def on_round_end(self, state: RoundState) -> None:
        self.finished.append(state)
        if self.record_events:
            self.events.append(RoundEvent("round_end", {
                "phase": state.phase.value,
                "lines": state.round_lines,
                "payout": state.round_payout,
                "played_blocks": state.played_blocks,
                "won": state.won,
            }))


class BatchSimulator:
    """Runs many rounds headlessly; each run builds its own Game."""

    def run(self, config: SimulationConfig) -> SimulationResult:
        """Run `config.rounds` rounds and aggregate the outcomes."""
        if config.bought_blocks not in BOUGHT_BLOCK_OPTIONS:
            raise ValueError(
                f"bought_blocks must be one of {BOUGHT_BLOCK_OPTIONS}, got {config.bought_blocks}"
            )
        seed = config.seed if config.seed is not None else get_settings().simulation_default_seed
        bet = config.bet

        game = Game(
            seed=seed,
            starting_balance=bet * max(config.rounds, 1),
            win_probability=config.win_probability,
        )
        game.set_debug(config.debug_log)
        game.set_bought_blocks(config.bought_blocks)

        recorder = RoundRecorder()
        game.add_observer(recorder)

        for _ in range(config.rounds):
            game.start_round()
            game.resolve_round()

        summaries = [
            RoundSummary(
                index=i,
                lines=s.round_lines,
                payout=s.round_payout,
                won=s.won,
                designated_win=s.round_is_designated_win,
                phase=s.phase,
                played_blocks=s.played_blocks,
            )
            for i, s in enumerate(recorder.finished)
        ]
        if config.debug_log:
            for summary in summaries:
                logger.info(
                    f"[Sim] Round {summary.index + 1}: lines={summary.lines}, "
                    f"payout={summary.payout:.2f}, win={summary.won}"
                )

        result = self._aggregate(summaries, bet, game.seed)
        logger.info(
            f"[Simulation] P(win) configured={config.win_probability * 100:.0f}% "
            f"observed={result.win_rate * 100:.1f}% avg_lines={result.avg_lines:.2f} "
            f"RTP={result.rtp * 100:.1f}%"
        )
        return result

    def replay_round(
        self,
        seed: int,
        win_probability: float,
        bought_blocks: int = 30,
    ) -> Dict[str, Any]:
        """Play one round from a fresh game and return its full event log."""
        game = Game(seed=seed, win_probability=win_probability)
        game.set_bought_blocks(bought_blocks)
        recorder = RoundRecorder(record_events=True)
        game.add_observer(recorder)

        game.start_round()
        final = game.resolve_round()
        return {
            "seed": game.seed,
            "final_state": final,
            "events": [e.to_dict() for e in recorder.events],
        }

    def _aggregate(self, summaries: List[RoundSummary], bet: float, seed: int) -> SimulationResult:
        total = len(summaries)
        lines = [s.lines for s in summaries]
        total_payout = sum(s.payout for s in summaries)
        total_bet = bet * total
        wins = sum(1 for s in summaries if s.won)

        avg_payout = total_payout / total if total else 0.0
        return SimulationResult(
            total_rounds=total,
            wins=wins,
            win_rate=wins / total if total else 0.0,
            designated_wins=sum(1 for s in summaries if s.designated_win),
            avg_lines=statistics.mean(lines) if lines else 0.0,
            avg_payout=avg_payout,
            avg_net=avg_payout - bet,
            std_lines=statistics.stdev(lines) if len(lines) > 1 else 0.0,
            total_bet=total_bet,
            total_payout=total_payout,
            rtp=total_payout / total_bet if total_bet > 0 else 0.0,
            seed=seed,
            rounds=summaries,
        )


def run_simulation(config: SimulationConfig) -> SimulationResult:
    """Convenience wrapper around the shared BatchSimulator."""
    return get_batch_simulator().run(config)


# Singleton instance
_batch_simulator: Optional[BatchSimulator] = None


def get_batch_simulator() -> BatchSimulator:
    """Get or create batch simulator singleton instance."""
    global _batch_simulator
    if _batch_simulator is None:
        _batch_simulator = BatchSimulator()
    return _batch_simulator
