"""Shoe analysis API endpoints."""

import asyncio
from typing import Annotated

from fastapi import APIRouter, HTTPException, Header

from api.routes.shoe import get_tracker
from api.schemas import (
    AnalysisResponse,
    AnalysisSettings,
    BetEVResponse,
    EvaluateRequest,
    ProbabilitiesResponse,
    RecommendationResponse,
    TieBonusResponse,
)
from config import config
from core.analysis import ShoeAnalysis, analyze_shoe
from core.cards import Rank
from core.shoe import CARDS_PER_RANK_PER_DECK, ShoeState
from core.statistics import KellyAllocator, PayoutTable

router = APIRouter()


def run_analysis(shoe: ShoeState, settings: AnalysisSettings | None = None) -> ShoeAnalysis:
    """
    Analyze a shoe, filling unset settings from the configuration.

    Raises:
        ValueError: If the settings are rejected by the core
    """
    settings = settings or AnalysisSettings()
    defaults = config.advisor

    payouts = PayoutTable(**settings.payouts.model_dump()) if settings.payouts else PayoutTable()
    allocator = KellyAllocator(
        kelly_fraction=(
            settings.kelly_fraction
            if settings.kelly_fraction is not None
            else defaults.kelly_fraction
        ),
        min_win_probability=(
            settings.min_win_probability
            if settings.min_win_probability is not None
            else defaults.min_win_probability
        ),
    )

    return analyze_shoe(
        shoe,
        payouts=payouts,
        commission_rate=(
            settings.commission_rate
            if settings.commission_rate is not None
            else defaults.commission_rate
        ),
        capital=settings.capital if settings.capital is not None else defaults.capital,
        allocator=allocator,
    )


def analysis_to_response(analysis: ShoeAnalysis, version: int | None = None) -> AnalysisResponse:
    """Convert a ShoeAnalysis to AnalysisResponse."""
    p = analysis.probabilities
    return AnalysisResponse(
        total_cards=analysis.total_cards,
        probabilities=ProbabilitiesResponse(
            player_win=p.player_win,
            banker_win=p.banker_win,
            tie=p.tie,
            player_pair=p.player_pair,
            banker_pair=p.banker_pair,
            super6=p.super6,
            super6_two_card=p.super6_two_card,
            super6_three_card=p.super6_three_card,
            tie_by_point=list(p.tie_by_point),
        ),
        evs=[
            BetEVResponse(bet=str(e.bet), probability=e.probability, payout=e.payout, ev=e.ev)
            for e in analysis.evs.values()
        ],
        tie_bonuses=[
            TieBonusResponse(point=t.point, probability=t.probability, payout=t.payout, ev=t.ev)
            for t in analysis.tie_bonuses
        ],
        recommendations=[
            RecommendationResponse(
                bet=str(r.bet),
                probability=r.probability,
                ev=r.ev,
                kelly=r.kelly,
                stake=r.stake,
                should_bet=r.should_bet,
            )
            for r in analysis.recommendations
        ],
        version=version,
    )


@router.post("/evaluate")
async def evaluate(request: EvaluateRequest) -> AnalysisResponse:
    """Analyze explicit shoe counts without a session."""
    num_decks = request.num_decks or config.advisor.num_decks
    try:
        counts: dict[Rank, int] = {}
        for label, count in request.counts.items():
            rank = Rank.parse(label)
            if rank in counts:
                raise ValueError(f"Duplicate count for rank {rank}")
            counts[rank] = count
        shoe = ShoeState.from_mapping(counts, deck_count=CARDS_PER_RANK_PER_DECK * num_decks)
        analysis = await asyncio.to_thread(run_analysis, shoe, request)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return analysis_to_response(analysis)


@router.post("")
async def analyze_session(
    session_id: Annotated[str, Header(alias="X-Session-ID")],
    settings: AnalysisSettings | None = None,
) -> AnalysisResponse:
    """Analyze the session's shoe."""
    tracker = await get_tracker(session_id)
    shoe, version = tracker.shoe, tracker.version
    try:
        analysis = await asyncio.to_thread(run_analysis, shoe, settings)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return analysis_to_response(analysis, version=version)
