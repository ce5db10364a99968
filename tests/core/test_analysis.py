"""Tests for the shoe analysis pipeline."""

import pytest

from core.analysis import analyze_shoe
from core.cards import BetType, Rank
from core.shoe import ShoeState
from core.statistics import KellyAllocator, PayoutTable


class TestAnalyzeShoe:
    """Tests for analyze_shoe."""

    def test_nines_only_backs_the_tie(self, nines_only_shoe):
        analysis = analyze_shoe(nines_only_shoe, capital=10000)
        tie = analysis.recommendations[0]

        assert analysis.total_cards == 10
        assert analysis.evs[BetType.TIE].ev == pytest.approx(8.01)
        assert tie.bet == BetType.TIE
        assert tie.kelly == pytest.approx(8.01 / 8)
        assert tie.stake == 2503
        assert {r.bet for r in analysis.recommendations if r.should_bet} == {
            BetType.TIE,
            BetType.BANKER_PAIR,
            BetType.PLAYER_PAIR,
        }

    def test_rebate_alone_does_not_trigger_a_bet(self, nines_only_shoe):
        """Player EV is positive from the rebate but the player never wins."""
        analysis = analyze_shoe(nines_only_shoe, capital=10000)
        player = next(r for r in analysis.recommendations if r.bet == BetType.PLAYER)

        assert player.ev > 0
        assert player.should_bet is False

    def test_empty_shoe(self):
        analysis = analyze_shoe(ShoeState.from_mapping({}), capital=10000)

        assert analysis.total_cards == 0
        assert analysis.probabilities.total == 0.0
        assert not any(r.should_bet for r in analysis.recommendations)
        assert analysis.evs[BetType.BANKER].ev == pytest.approx(0.01)
        assert len(analysis.recommendations) == len(BetType)

    def test_settings_flow_through(self, nines_only_shoe):
        analysis = analyze_shoe(
            nines_only_shoe,
            payouts=PayoutTable(tie=9.0, tie_bonus={8: 25.0}),
            commission_rate=0.0,
            capital=1000,
            allocator=KellyAllocator(kelly_fraction=0.5),
        )

        assert analysis.evs[BetType.TIE].ev == pytest.approx(9.0)
        assert analysis.evs[BetType.TIE].payout == 9.0
        assert [b.point for b in analysis.tie_bonuses] == [8]
        assert analysis.tie_bonuses[0].ev == pytest.approx(25.0)
        assert analysis.recommendations[0].stake == 500

    def test_zero_capital_never_stakes(self, nines_only_shoe):
        analysis = analyze_shoe(nines_only_shoe)
        assert all(r.stake == 0 for r in analysis.recommendations)

    def test_analysis_tracks_removed_cards(self, tens_and_nines_shoe):
        """Ten zeros with five nines, then four: ties only from matching deals."""
        before = analyze_shoe(tens_and_nines_shoe)
        after = analyze_shoe(tens_and_nines_shoe.deal(Rank.NINE))

        assert after.total_cards == before.total_cards - 1
        assert before.probabilities.tie == pytest.approx((210 * 50 / 110 + 300 + 5) / 1365)
        assert after.probabilities.tie == pytest.approx((210 * 42 / 90 + 180 + 1) / 1001)
