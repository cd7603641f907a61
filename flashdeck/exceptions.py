class FlashdeckError(Exception):
    """Base class for recoverable errors raised by the study core"""


class InvalidGrade(FlashdeckError, ValueError):
    """Grade outside Again/Hard/Good/Easy (0-3)"""

    def __init__(self, grade):
        super().__init__(f"Invalid grade {grade!r}; expected 0 (Again) to 3 (Easy)")
        self.grade = grade


class UnknownDeck(FlashdeckError, KeyError):
    """Operation referenced a deck that does not exist"""

    def __init__(self, deck_id: str):
        super().__init__(f"Deck {deck_id!r} not found")
        self.deck_id = deck_id

    def __str__(self):
        return self.args[0]


class UnknownCard(FlashdeckError, KeyError):
    """Operation referenced a card that does not exist"""

    def __init__(self, card_id: str):
        super().__init__(f"Card {card_id!r} not found")
        self.card_id = card_id

    def __str__(self):
        return self.args[0]
