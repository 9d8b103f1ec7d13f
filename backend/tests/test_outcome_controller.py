"""Tests for the round outcome controller."""
import logging

import pytest

from stackwager.models.tetromino import PieceType
from stackwager.models.weights import (
    LOSE_PIECE_WEIGHTS,
    SABOTAGE_WEIGHTS,
    UNIFORM_PIECE_WEIGHTS,
    WIN_PIECE_WEIGHTS,
    WIN_WEIGHTS,
)
from stackwager.core.errors import ContractViolationError
from stackwager.core.outcome_controller import (
    LOSE_WORST_K,
    RTP_CORRECTION_FACTOR,
    TARGET_RTP,
    WIN_TOP_K,
    RoundOutcomeController,
)
from stackwager.core.placement import Placement
from stackwager.core.rng import Mulberry32


def make_placements(n):
    """n placements with strictly decreasing scores."""
    return [Placement(rotation=0, col=i, row=10, score=float(n - i)) for i in range(n)]


@pytest.fixture
def rng():
    return Mulberry32(42)


class TestWinProbability:
    """Operator target and RTP correction."""

    def test_clamped(self, rng):
        controller = RoundOutcomeController(rng, 1.5)
        assert controller.win_probability == 1.0
        controller.set_win_probability(-0.2)
        assert controller.win_probability == 0.0

    def test_no_history_uses_target(self, rng):
        controller = RoundOutcomeController(rng, 0.3)
        assert controller.effective_win_probability() == 0.3

    def test_underpaying_raises_probability(self, rng):
        """Zero payout pushes the threshold up by the full target RTP error."""
        controller = RoundOutcomeController(rng, 0.5)
        controller.record_round_result(100, 0)
        expected = 0.5 + TARGET_RTP * RTP_CORRECTION_FACTOR
        assert controller.effective_win_probability() == pytest.approx(expected)

    def test_overpaying_clamps_to_floor(self, rng):
        controller = RoundOutcomeController(rng, 0.5)
        controller.record_round_result(100, 1000)
        assert controller.effective_win_probability() == pytest.approx(0.01)

    def test_correction_lifts_zero_target(self, rng):
        """A 0% target still wins occasionally while underpaying."""
        controller = RoundOutcomeController(rng, 0.0)
        controller.record_round_result(30, 0)
        assert controller.effective_win_probability() == pytest.approx(0.1425)


class TestRtpTracking:
    """Lifetime totals."""

    def test_rtp_zero_before_any_bet(self, rng):
        assert RoundOutcomeController(rng).rtp == 0.0

    def test_rtp_ratio(self, rng):
        controller = RoundOutcomeController(rng)
        controller.record_round_result(30, 15)
        controller.record_round_result(30, 60)
        assert controller.total_bet == 60
        assert controller.total_payout == 75
        assert controller.rtp == 75 / 60


class TestStartRound:
    """Per-round bias selection."""

    def test_zero_probability_loses(self, rng):
        """Seed 42 at 0%: a losing round with sabotage weights."""
        controller = RoundOutcomeController(rng, 0.0)
        bias = controller.start_round()
        assert controller.last_effective_probability == 0.0
        assert not bias.is_winning_round
        assert bias.heuristic_weights == SABOTAGE_WEIGHTS
        assert bias.piece_weights == LOSE_PIECE_WEIGHTS

    def test_full_probability_wins(self, rng):
        controller = RoundOutcomeController(rng, 1.0)
        bias = controller.start_round()
        assert bias.is_winning_round
        assert controller.current_round_is_winning
        assert bias.heuristic_weights == WIN_WEIGHTS
        assert bias.piece_weights == WIN_PIECE_WEIGHTS

    def test_single_draw_per_round(self, rng):
        """start_round consumes exactly one value."""
        expected = rng.clone()
        expected.next()
        RoundOutcomeController(rng, 0.5).start_round()
        assert rng.state == expected.state

    def test_last_effective_probability_unset_before_first_round(self, rng):
        assert RoundOutcomeController(rng).last_effective_probability is None


class TestPickPiece:
    """Weighted piece draws."""

    def test_deterministic(self):
        a = RoundOutcomeController(Mulberry32(5))
        b = RoundOutcomeController(Mulberry32(5))
        seq_a = [a.pick_piece(UNIFORM_PIECE_WEIGHTS) for _ in range(50)]
        seq_b = [b.pick_piece(UNIFORM_PIECE_WEIGHTS) for _ in range(50)]
        assert seq_a == seq_b

    def test_lose_weights_favour_s_and_z(self, rng):
        """S and Z make up roughly 7/11.9 of draws under lose weights."""
        controller = RoundOutcomeController(rng)
        draws = [controller.pick_piece(LOSE_PIECE_WEIGHTS) for _ in range(3000)]
        share = sum(1 for p in draws if p in (PieceType.S, PieceType.Z)) / len(draws)
        assert 0.5 < share < 0.68

    def test_all_types_reachable(self, rng):
        controller = RoundOutcomeController(rng)
        draws = {controller.pick_piece(UNIFORM_PIECE_WEIGHTS) for _ in range(500)}
        assert draws == set(PieceType.all_types())


class TestPickPlacement:
    """Placement selection from a best-first list."""

    def test_empty_list_raises(self, rng):
        with pytest.raises(ContractViolationError):
            RoundOutcomeController(rng).pick_placement([])

    def test_single_candidate_consumes_nothing(self, rng):
        controller = RoundOutcomeController(rng)
        only = make_placements(1)
        state = rng.state
        assert controller.pick_placement(only) is only[0]
        assert rng.state == state

    def test_winning_round_picks_from_top(self, rng):
        controller = RoundOutcomeController(rng, 1.0)
        controller.start_round()
        placements = make_placements(10)
        for _ in range(200):
            idx = placements.index(controller.pick_placement(placements))
            assert idx < WIN_TOP_K

    def test_losing_round_picks_from_bottom(self, rng):
        controller = RoundOutcomeController(rng, 0.0)
        controller.start_round()
        placements = make_placements(10)
        picked = set()
        for _ in range(200):
            picked.add(placements.index(controller.pick_placement(placements)))
        assert picked == set(range(10 - LOSE_WORST_K, 10))

    def test_short_list_clamps_pool(self, rng):
        """With fewer candidates than K, the pool is the whole list."""
        controller = RoundOutcomeController(rng, 0.0)
        controller.start_round()
        placements = make_placements(2)
        picked = {placements.index(controller.pick_placement(placements)) for _ in range(100)}
        assert picked == {0, 1}

    def test_pick_matches_generator(self):
        """The chosen index is next_int(K) on the shared generator."""
        rng = Mulberry32(3)
        controller = RoundOutcomeController(rng, 1.0)
        controller.start_round()
        placements = make_placements(6)
        expected = placements[rng.clone().next_int(WIN_TOP_K)]
        assert controller.pick_placement(placements) == expected


class TestDebugLogging:
    """Trace messages are gated by the debug flag."""

    def test_silent_by_default(self, rng, caplog):
        caplog.set_level(logging.INFO, logger="stackwager")
        RoundOutcomeController(rng, 0.5).start_round()
        assert "[RoundOutcomeController]" not in caplog.text

    def test_debug_logs_round_start(self, rng, caplog):
        caplog.set_level(logging.INFO, logger="stackwager")
        controller = RoundOutcomeController(rng, 0.5)
        controller.set_debug(True)
        controller.start_round()
        assert "[RoundOutcomeController] Round start" in caplog.text


class TestReferenceSequence:
    """Seeded piece draws are pinned to the reference generator output."""

    def test_seed_42_uniform_pieces(self):
        """Draws 0.6018, 0.1572, 0.4761 over seven equal weights give Z, O, S."""
        controller = RoundOutcomeController(Mulberry32(42))
        pieces = [controller.pick_piece(UNIFORM_PIECE_WEIGHTS) for _ in range(3)]
        assert pieces == [PieceType.Z, PieceType.O, PieceType.S]
