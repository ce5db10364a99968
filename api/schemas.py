"""Pydantic schemas for API requests and responses."""

from pydantic import BaseModel, Field, field_validator

from core.cards import Rank


# Shoe schemas
class NewShoeRequest(BaseModel):
    """Request to start tracking a new shoe."""

    num_decks: int | None = Field(default=None, ge=1, le=8)


class RecordCardRequest(BaseModel):
    """Request to record a dealt card."""

    rank: str = Field(..., description="Card rank: A, 2-9, 10/T, J, Q, K")

    @field_validator("rank")
    @classmethod
    def _valid_rank(cls, value: str) -> str:
        Rank.parse(value)
        return value


class HistoryEntryResponse(BaseModel):
    """One entry of the card history."""

    rank: str | None
    side: str | None
    separator: bool


class ShoeStateResponse(BaseModel):
    """Current tracker state."""

    num_decks: int
    counts: dict[str, int]
    total_cards: int
    cards_dealt: int
    next_side: str
    history: list[HistoryEntryResponse]
    version: int


class UndoResponse(BaseModel):
    """Result of an undo."""

    undone: HistoryEntryResponse | None
    state: ShoeStateResponse


# Analysis schemas
class PayoutTableModel(BaseModel):
    """Net odds per bet."""

    banker: float = Field(default=0.95, gt=0)
    player: float = Field(default=1.0, gt=0)
    tie: float = Field(default=8.0, gt=0)
    player_pair: float = Field(default=11.0, gt=0)
    banker_pair: float = Field(default=11.0, gt=0)
    super6: float = Field(default=12.0, gt=0)
    tie_bonus: dict[int, float] = Field(default_factory=dict)


class AnalysisSettings(BaseModel):
    """Settings for an analysis; omitted fields use the configured defaults."""

    payouts: PayoutTableModel | None = None
    commission_rate: float | None = Field(default=None, ge=0, le=100)
    capital: int | None = Field(default=None, ge=0)
    kelly_fraction: float | None = Field(default=None, gt=0, le=1)
    min_win_probability: float | None = Field(default=None, ge=0, lt=1)


class EvaluateRequest(AnalysisSettings):
    """Stateless analysis of explicit shoe counts."""

    counts: dict[str, int] = Field(..., description="Remaining cards per rank label")
    num_decks: int | None = Field(default=None, ge=1, le=8)


class ProbabilitiesResponse(BaseModel):
    """Outcome probabilities for the next coup."""

    player_win: float
    banker_win: float
    tie: float
    player_pair: float
    banker_pair: float
    super6: float
    super6_two_card: float
    super6_three_card: float
    tie_by_point: list[float]


class BetEVResponse(BaseModel):
    """EV of one bet."""

    bet: str
    probability: float
    payout: float
    ev: float


class TieBonusResponse(BaseModel):
    """EV of a tie-on-a-total side bet."""

    point: int
    probability: float
    payout: float
    ev: float


class RecommendationResponse(BaseModel):
    """Stake recommendation for one bet."""

    bet: str
    probability: float
    ev: float
    kelly: float
    stake: int
    should_bet: bool


class AnalysisResponse(BaseModel):
    """Full analysis of a shoe."""

    total_cards: int
    probabilities: ProbabilitiesResponse
    evs: list[BetEVResponse]
    tie_bonuses: list[TieBonusResponse]
    recommendations: list[RecommendationResponse]
    version: int | None = None
