"""Card ranks and bet identities - immutable representations."""

from enum import Enum


class Rank(Enum):
    """Card ranks with baccarat values."""

    ACE = 1
    TWO = 2
    THREE = 3
    FOUR = 4
    FIVE = 5
    SIX = 6
    SEVEN = 7
    EIGHT = 8
    NINE = 9
    TEN = 10
    JACK = 11
    QUEEN = 12
    KING = 13

    def __str__(self) -> str:
        if 2 <= self.value <= 10:
            return str(self.value)
        return {
            Rank.ACE: "A",
            Rank.JACK: "J",
            Rank.QUEEN: "Q",
            Rank.KING: "K",
        }[self]

    @property
    def baccarat_value(self) -> int:
        """Return the baccarat point value (tens and face cards = 0)."""
        if self.value >= 10:
            return 0
        return self.value

    @classmethod
    def parse(cls, s: str | int) -> "Rank":
        """Create a rank from a label like 'A', '10', 'T', 'k' or an int 1-13."""
        if isinstance(s, int):
            try:
                return cls(s)
            except ValueError:
                raise ValueError(f"Invalid rank: {s}") from None

        label = s.strip().upper()
        rank_map = {
            "A": Rank.ACE,
            "1": Rank.ACE,
            "2": Rank.TWO,
            "3": Rank.THREE,
            "4": Rank.FOUR,
            "5": Rank.FIVE,
            "6": Rank.SIX,
            "7": Rank.SEVEN,
            "8": Rank.EIGHT,
            "9": Rank.NINE,
            "10": Rank.TEN,
            "T": Rank.TEN,
            "0": Rank.TEN,
            "J": Rank.JACK,
            "Q": Rank.QUEEN,
            "K": Rank.KING,
        }
        if label not in rank_map:
            raise ValueError(f"Invalid rank: {s}")
        return rank_map[label]


class Side(Enum):
    """The two hands dealt in a baccarat coup."""

    PLAYER = "player"
    BANKER = "banker"

    def __str__(self) -> str:
        return self.value


class BetType(Enum):
    """
    Bets offered on the layout.

    Member order is the enumeration order used to break ties when
    recommendations are ranked by stake.
    """

    BANKER = "banker"
    PLAYER = "player"
    TIE = "tie"
    BANKER_PAIR = "banker_pair"
    PLAYER_PAIR = "player_pair"
    SUPER6 = "super6"

    def __str__(self) -> str:
        return self.value
