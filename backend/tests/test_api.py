"""Tests for API endpoints."""
import pytest
from fastapi.testclient import TestClient
from stackwager.main import app


@pytest.fixture
def client():
    """Create test client."""
    return TestClient(app)


@pytest.fixture
def empty_rows():
    """Empty 20x10 text board."""
    return ["." * 10 for _ in range(20)]


@pytest.fixture
def well_rows():
    """Ten filled rows with the rightmost column open."""
    return ["." * 10 for _ in range(10)] + ["#########." for _ in range(10)]


class TestRootEndpoint:
    """Tests for root endpoint."""

    def test_root_returns_info(self, client):
        """Test root endpoint returns API info."""
        response = client.get("/")
        assert response.status_code == 200
        data = response.json()
        assert "name" in data
        assert "version" in data
        assert "endpoints" in data
        assert data["endpoints"]["simulate"] == "/api/simulate"


class TestHealthEndpoint:
    """Tests for health check endpoint."""

    def test_health_check(self, client):
        """Test health check returns healthy status."""
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestPresetsEndpoint:
    """Tests for preset listing."""

    def test_lists_presets(self, client):
        response = client.get("/api/presets")
        assert response.status_code == 200
        data = response.json()
        assert set(data["heuristic_presets"]) == {"default", "aggressive", "win", "passive", "sabotage"}
        assert set(data["piece_weight_presets"]) == {"uniform", "win", "lose"}
        assert data["heuristic_presets"]["sabotage"]["complete_lines"] == -500
        assert data["win_threshold"] == 5
        assert data["bought_block_options"] == [30, 50, 75]


class TestPlacementsEndpoint:
    """Tests for placement analysis."""

    def test_empty_board(self, client, empty_rows):
        """Every T placement on an empty board is listed best first."""
        response = client.post("/api/placements", json={"board": empty_rows, "piece_type": "T"})
        assert response.status_code == 200
        data = response.json()
        assert data["piece_type"] == "T"
        assert data["total"] == 34
        assert not data["lock_out"]
        scores = [p["score"] for p in data["placements"]]
        assert scores == sorted(scores, reverse=True)

    def test_limit_keeps_total(self, client, empty_rows):
        response = client.post(
            "/api/placements", json={"board": empty_rows, "piece_type": "o", "limit": 3}
        )
        data = response.json()
        assert data["total"] == 9
        assert len(data["placements"]) == 3

    def test_well_reports_lines(self, client, well_rows):
        """The vertical I into the well clears four lines."""
        response = client.post("/api/placements", json={"board": well_rows, "piece_type": "I"})
        best = response.json()["placements"][0]
        assert (best["rotation"], best["col"], best["row"]) == (1, 7, 16)
        assert best["lines_cleared"] == 4

    def test_weight_overrides(self, client, well_rows):
        """Overriding complete_lines flips the ranking away from the well."""
        response = client.post(
            "/api/placements",
            json={"board": well_rows, "piece_type": "I", "weights": {"complete_lines": -500}},
        )
        assert response.json()["placements"][0]["lines_cleared"] == 0

    def test_lock_out(self, client):
        rows = ["".join("#" if (r + c) % 2 else "." for c in range(10)) for r in range(20)]
        response = client.post("/api/placements", json={"board": rows, "piece_type": "L"})
        data = response.json()
        assert data["total"] == 0
        assert data["lock_out"]
        assert data["placements"] == []

    def test_invalid_piece(self, client, empty_rows):
        response = client.post("/api/placements", json={"board": empty_rows, "piece_type": "Q"})
        assert response.status_code == 400

    def test_unknown_preset(self, client, empty_rows):
        response = client.post(
            "/api/placements", json={"board": empty_rows, "piece_type": "T", "preset": "chaos"}
        )
        assert response.status_code == 400

    def test_invalid_board(self, client):
        response = client.post("/api/placements", json={"board": ["." * 10] * 3, "piece_type": "T"})
        assert response.status_code == 400
        assert "Invalid board" in response.json()["detail"]


class TestSimulateEndpoint:
    """Tests for batch simulation endpoint."""

    def test_simulate_basic(self, client):
        response = client.post(
            "/api/simulate",
            json={"rounds": 3, "win_probability": 0.5, "seed": 5, "include_rounds": True},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["total_rounds"] == 3
        assert data["seed"] == 5
        assert data["total_bet"] == 90
        assert 0 <= data["win_rate"] <= 1
        assert len(data["rounds"]) == 3

    def test_simulate_deterministic(self, client):
        payload = {"rounds": 2, "win_probability": 0.3, "seed": 77}
        first = client.post("/api/simulate", json=payload).json()
        second = client.post("/api/simulate", json=payload).json()
        assert first == second

    def test_simulate_without_rounds(self, client):
        data = client.post("/api/simulate", json={"rounds": 1, "win_probability": 0.5, "seed": 1}).json()
        assert data["rounds"] == []

    def test_simulate_negative_seed_wraps(self, client):
        response = client.post(
            "/api/simulate", json={"rounds": 1, "win_probability": 0.5, "seed": -2}
        )
        assert response.status_code == 200
        assert response.json()["seed"] == 0xFFFFFFFE

    def test_simulate_invalid_blocks(self, client):
        response = client.post(
            "/api/simulate", json={"rounds": 1, "win_probability": 0.5, "bought_blocks": 40}
        )
        assert response.status_code == 400

    def test_simulate_probability_out_of_range(self, client):
        response = client.post("/api/simulate", json={"rounds": 1, "win_probability": 1.5})
        assert response.status_code == 422

    def test_simulate_missing_probability(self, client):
        response = client.post("/api/simulate", json={"rounds": 1})
        assert response.status_code == 422


class TestReplayEndpoint:
    """Tests for round replay endpoint."""

    def test_replay(self, client):
        response = client.post("/api/rounds/replay", json={"seed": 21, "win_probability": 1.0})
        assert response.status_code == 200
        data = response.json()
        assert data["seed"] == 21
        assert data["phase"] in ("GAME_OVER", "FINISHED")
        assert len(data["board"]) == 20
        assert all(len(row) == 10 for row in data["board"])
        assert data["events"][0]["kind"] == "round_start"
        assert data["won"] == (data["round_lines"] >= 5)

    def test_replay_negative_seed_wraps(self, client):
        """Negative seeds wrap to 32 bits instead of being rejected."""
        response = client.post("/api/rounds/replay", json={"seed": -1})
        assert response.status_code == 200
        assert response.json()["seed"] == 0xFFFFFFFF

    def test_replay_invalid_blocks(self, client):
        response = client.post("/api/rounds/replay", json={"seed": 1, "bought_blocks": 10})
        assert response.status_code == 400
