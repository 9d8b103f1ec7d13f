"""Pydantic schemas for API request/response validation."""
from pydantic import BaseModel, Field
from typing import Dict, List, Any, Optional


class ErrorResponse(BaseModel):
    """Error response schema."""
    error: str = Field(..., description="Error message")
    detail: Optional[str] = Field(default=None, description="Detailed error information")


# ===== Batch Simulation Schemas =====

class SimulateRequest(BaseModel):
    """Request schema for a headless batch simulation."""
    rounds: int = Field(default=100, ge=1, le=5000, description="Number of rounds to play")
    win_probability: float = Field(..., ge=0.0, le=1.0, description="Target win probability (0.0-1.0)")
    bought_blocks: int = Field(default=30, description="Blocks bought per round (30/50/75)")
    seed: Optional[int] = Field(default=None, description="Generator seed, wrapped to 32 bits (default from settings)")
    include_rounds: bool = Field(default=False, description="Include per-round summaries")


class RoundSummaryItem(BaseModel):
    """Per-round line in a simulation response."""
    index: int
    lines: int
    payout: float
    won: bool
    designated_win: bool
    phase: str
    played_blocks: int


class SimulateResponse(BaseModel):
    """Response schema for a batch simulation."""
    total_rounds: int = Field(..., description="Rounds played")
    wins: int = Field(..., description="Rounds reaching the win line threshold")
    win_rate: float = Field(..., ge=0, le=1, description="Observed win rate (0-1)")
    designated_wins: int = Field(..., description="Rounds the controller biased toward winning")
    avg_lines: float = Field(..., description="Average lines per round")
    avg_payout: float = Field(..., description="Average payout per round")
    avg_net: float = Field(..., description="Average payout minus bet")
    std_lines: float = Field(..., description="Standard deviation of lines per round")
    total_bet: float = Field(..., description="Total amount bet")
    total_payout: float = Field(..., description="Total amount paid out")
    rtp: float = Field(..., description="Return-to-player ratio (payout / bet)")
    seed: int = Field(..., description="Seed used")
    rounds: List[RoundSummaryItem] = Field(default=[], description="Per-round summaries")


# ===== Replay Schemas =====

class ReplayRequest(BaseModel):
    """Request schema for replaying a single round."""
    seed: int = Field(..., description="Generator seed, wrapped to 32 bits")
    win_probability: float = Field(default=0.5, ge=0.0, le=1.0, description="Target win probability")
    bought_blocks: int = Field(default=30, description="Blocks bought for the round (30/50/75)")


class ReplayResponse(BaseModel):
    """Response schema for a round replay."""
    seed: int = Field(..., description="Seed used")
    phase: str = Field(..., description="Terminal phase (GAME_OVER/FINISHED)")
    round_lines: int = Field(..., description="Lines cleared this round")
    round_payout: float = Field(..., description="Total payout this round")
    played_blocks: int = Field(..., description="Pieces locked this round")
    designated_win: bool = Field(..., description="Whether the controller biased the round toward winning")
    won: bool = Field(..., description="Whether the round reached the win line threshold")
    board: List[str] = Field(..., description="Final board, one string per row")
    events: List[Dict[str, Any]] = Field(default=[], description="Ordered event log")


# ===== Placement Analysis Schemas =====

class WeightsConfig(BaseModel):
    """Explicit heuristic weights; unset fields fall back to the preset."""
    complete_lines: Optional[float] = None
    holes: Optional[float] = None
    aggregate_height: Optional[float] = None
    bumpiness: Optional[float] = None
    max_height: Optional[float] = None


class PlacementRequest(BaseModel):
    """Request schema for placement analysis."""
    board: List[str] = Field(..., description="20 rows of 10 chars; '.' empty, piece letter or '#' filled")
    piece_type: str = Field(..., description="Piece type (I/O/T/S/Z/J/L)")
    preset: str = Field(default="default", description="Heuristic preset name")
    weights: Optional[WeightsConfig] = Field(default=None, description="Overrides on top of the preset")
    limit: Optional[int] = Field(default=None, ge=1, description="Return at most this many placements")


class PlacementItem(BaseModel):
    """Single scored placement."""
    rotation: int
    col: int
    row: int
    score: float
    lines_cleared: int


class PlacementResponse(BaseModel):
    """Response schema for placement analysis."""
    piece_type: str
    total: int = Field(..., description="Number of legal placements")
    lock_out: bool = Field(..., description="True when the piece cannot be placed anywhere")
    placements: List[PlacementItem] = Field(default=[], description="Placements, best first")


# ===== Preset Schemas =====

class PresetListResponse(BaseModel):
    """Response schema listing weight presets."""
    heuristic_presets: Dict[str, Dict[str, float]]
    piece_weight_presets: Dict[str, Dict[str, float]]
    win_threshold: int
    bought_block_options: List[int]
