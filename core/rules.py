"""Baccarat drawing rules (Punto Banco)."""

from typing import Iterable, NamedTuple

from core.cards import Side

NATURAL_MIN = 8
PLAYER_STANDS_ON = 6

# Banker total -> player third-card values on which the banker draws.
# Banker always draws on 0-2 and always stands on 7-9.
BANKER_TABLEAU: dict[int, frozenset[int]] = {
    3: frozenset({0, 1, 2, 3, 4, 5, 6, 7, 9}),
    4: frozenset(range(2, 8)),
    5: frozenset(range(4, 8)),
    6: frozenset({6, 7}),
}

DEAL_ORDER: tuple[Side, ...] = (Side.PLAYER, Side.BANKER, Side.PLAYER, Side.BANKER)


def hand_total(values: Iterable[int]) -> int:
    """Return the baccarat total (sum of point values modulo 10)."""
    return sum(values) % 10


def is_natural(total: int) -> bool:
    """Check if a two-card total is a natural 8 or 9."""
    return total >= NATURAL_MIN


def player_draws(player_total: int) -> bool:
    """Player draws a third card on 0-5 and stands on 6-7."""
    return player_total < PLAYER_STANDS_ON


def banker_draws(banker_total: int, player_third: int | None) -> bool:
    """
    Decide whether the banker draws a third card.

    Args:
        banker_total: Banker's two-card total
        player_third: Point value of the player's third card, or None if the
            player stood

    Returns:
        True if the banker draws
    """
    if player_third is None:
        return banker_total < PLAYER_STANDS_ON
    if banker_total <= 2:
        return True
    if banker_total >= 7:
        return False
    return player_third in BANKER_TABLEAU[banker_total]


def winner(player_total: int, banker_total: int) -> Side | None:
    """Return the winning side, or None for a tie."""
    if player_total > banker_total:
        return Side.PLAYER
    if banker_total > player_total:
        return Side.BANKER
    return None


class HandState(NamedTuple):
    """
    A coup in progress, reduced to what the drawing rules look at.

    Totals are already taken modulo 10. ``player_third`` is the point value
    of the player's third card once drawn.
    """

    player_total: int = 0
    banker_total: int = 0
    player_cards: int = 0
    banker_cards: int = 0
    player_third: int | None = None

    def draw(self, side: Side, value: int) -> "HandState":
        """Return the hand after ``side`` receives a card of point ``value``."""
        if side is Side.PLAYER:
            return HandState(
                (self.player_total + value) % 10,
                self.banker_total,
                self.player_cards + 1,
                self.banker_cards,
                value if self.player_cards == 2 else None,
            )
        return HandState(
            self.player_total,
            (self.banker_total + value) % 10,
            self.player_cards,
            self.banker_cards + 1,
            self.player_third,
        )

    @property
    def cards_dealt(self) -> int:
        """Return the number of cards dealt so far."""
        return self.player_cards + self.banker_cards

    @property
    def is_complete(self) -> bool:
        """Check if the rules call for no further cards."""
        return next_draw(self) is None


def next_draw(hand: HandState) -> Side | None:
    """
    Return the side that receives the next card, or None if the coup is over.

    The first four cards alternate player, banker, player, banker. After
    that a natural on either side ends the coup, otherwise the player rule
    and then the banker tableau decide the third cards.
    """
    if hand.cards_dealt < len(DEAL_ORDER):
        return DEAL_ORDER[hand.cards_dealt]

    if hand.player_cards == 2 and hand.banker_cards == 2:
        if is_natural(hand.player_total) or is_natural(hand.banker_total):
            return None
        if player_draws(hand.player_total):
            return Side.PLAYER
        if banker_draws(hand.banker_total, None):
            return Side.BANKER
        return None

    if hand.player_cards == 3 and hand.banker_cards == 2:
        if banker_draws(hand.banker_total, hand.player_third):
            return Side.BANKER
        return None

    return None
