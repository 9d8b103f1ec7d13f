"""Tests for the headless batch simulator and round replay."""
import pytest

from stackwager.core.game import Game, GamePhase
from stackwager.core.simulation import (
    BatchSimulator,
    SimulationConfig,
    get_batch_simulator,
    run_simulation,
)


@pytest.fixture
def simulator():
    return BatchSimulator()


class TestBatchRun:
    """BatchSimulator.run."""

    def test_deterministic(self, simulator):
        config = SimulationConfig(rounds=5, win_probability=0.5, seed=123)
        first = simulator.run(config).to_dict()
        second = simulator.run(config).to_dict()
        assert first == second

    def test_aggregates(self, simulator):
        result = simulator.run(SimulationConfig(rounds=6, win_probability=0.5, seed=7))
        assert result.total_rounds == 6
        assert len(result.rounds) == 6
        assert result.seed == 7
        assert result.total_bet == 6 * 30
        assert result.win_rate == result.wins / 6
        assert result.rtp == pytest.approx(result.total_payout / result.total_bet)
        assert result.avg_net == pytest.approx(result.avg_payout - 30)
        assert result.wins == sum(1 for r in result.rounds if r.won)
        for summary in result.rounds:
            assert summary.phase in (GamePhase.GAME_OVER, GamePhase.FINISHED)
            assert summary.won == (summary.lines >= 5)

    def test_block_count_sets_bet(self, simulator):
        result = simulator.run(SimulationConfig(rounds=2, win_probability=0.5, bought_blocks=50, seed=3))
        assert result.total_bet == 100
        assert all(r.played_blocks <= 50 for r in result.rounds)

    def test_invalid_block_count(self, simulator):
        with pytest.raises(ValueError):
            simulator.run(SimulationConfig(rounds=1, win_probability=0.5, bought_blocks=40))

    def test_default_seed_from_settings(self, simulator):
        result = simulator.run(SimulationConfig(rounds=1, win_probability=0.5))
        assert result.seed == 42

    def test_to_dict_without_rounds(self, simulator):
        data = simulator.run(SimulationConfig(rounds=2, win_probability=0.5, seed=1)).to_dict(
            include_rounds=False
        )
        assert "rounds" not in data
        assert data["total_rounds"] == 2

    def test_probability_steers_outcomes(self, simulator):
        """A 100% target wins far more rounds than a 0% target."""
        high = simulator.run(SimulationConfig(rounds=20, win_probability=1.0, seed=99))
        low = simulator.run(SimulationConfig(rounds=20, win_probability=0.0, seed=99))
        assert high.designated_wins > low.designated_wins
        assert high.wins > low.wins
        assert high.avg_lines > low.avg_lines


class TestBatchMatchesAnimatedPlay:
    """A batch run reproduces the frame-driven game round for round."""

    def test_rounds_identical(self, simulator):
        seed, rounds = 11, 3
        result = simulator.run(SimulationConfig(rounds=rounds, win_probability=0.5, seed=seed))

        game = Game(seed=seed, starting_balance=30 * rounds, win_probability=0.5)
        game.set_debug(False)
        for summary in result.rounds:
            assert game.start_round()
            while game.state.phase in (GamePhase.DROPPING, GamePhase.CLEARING):
                game.update(16)
            state = game.state
            assert state.round_lines == summary.lines
            assert state.round_payout == summary.payout
            assert state.played_blocks == summary.played_blocks
            assert state.phase == summary.phase
            assert state.round_is_designated_win == summary.designated_win


class TestReplay:
    """BatchSimulator.replay_round."""

    def test_event_log_shape(self, simulator):
        replay = simulator.replay_round(seed=17, win_probability=1.0)
        events = replay["events"]
        final = replay["final_state"]

        assert replay["seed"] == 17
        assert events[0]["kind"] == "round_start"
        assert events[-1]["kind"] == "round_end"
        assert events[-1]["lines"] == final.round_lines
        assert sum(1 for e in events if e["kind"] == "spawn") == final.played_blocks
        cleared = sum(e["count"] for e in events if e["kind"] == "lines_cleared")
        assert cleared == final.round_lines

    def test_event_payloads(self, simulator):
        """Round start carries the bias bundle; spawns carry the piece position."""
        replay = simulator.replay_round(seed=17, win_probability=0.0)
        start = replay["events"][0]
        assert start["bias"]["is_winning_round"] == start["designated_win"]
        assert start["bias"]["heuristic_weights"]["complete_lines"] == -500
        assert set(start["bias"]["piece_weights"]) == {"I", "O", "T", "S", "Z", "J", "L"}

        spawns = [e for e in replay["events"] if e["kind"] == "spawn"]
        assert spawns
        for spawn in spawns:
            assert spawn["row"] == 0
            assert spawn["piece_type"] in {"I", "O", "T", "S", "Z", "J", "L"}
            assert spawn["target_row"] >= spawn["row"]

    def test_replay_deterministic(self, simulator):
        a = simulator.replay_round(seed=8, win_probability=0.5, bought_blocks=50)
        b = simulator.replay_round(seed=8, win_probability=0.5, bought_blocks=50)
        assert a["events"] == b["events"]
        assert a["final_state"].board == b["final_state"].board


class TestSingleton:
    def test_shared_instance(self):
        assert get_batch_simulator() is get_batch_simulator()

    def test_run_simulation_wrapper(self):
        result = run_simulation(SimulationConfig(rounds=1, win_probability=0.5, seed=2))
        assert result.total_rounds == 1
