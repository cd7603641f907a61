import math
from datetime import datetime, timedelta
from enum import IntEnum
from typing import List, NamedTuple, Optional, Tuple

from flashdeck.exceptions import InvalidGrade

# Interval bounds in days
MIN_INTERVAL = 1
MAX_INTERVAL = 365

# Ease factor bounds
MIN_EASE = 1.3
MAX_EASE = 2.5

# Ease factor for new cards
DEFAULT_EASE = 2.5


class Grade(IntEnum):
    """Review feedback given after revealing the answer"""
    AGAIN = 0
    HARD = 1
    GOOD = 2
    EASY = 3


class GradingChoice(NamedTuple):
    value: Grade
    label: str
    description: str


def get_grading_choices() -> List[GradingChoice]:
    """Grading choices in the order they are offered to the learner"""
    return [
        GradingChoice(Grade.AGAIN, "Again", "Completely forgot"),
        GradingChoice(Grade.HARD, "Hard", "Remembered with difficulty"),
        GradingChoice(Grade.GOOD, "Good", "Remembered with some effort"),
        GradingChoice(Grade.EASY, "Easy", "Remembered easily"),
    ]


def _round_half_up(value: float) -> int:
    # round() would send 2.5 to 2
    return int(math.floor(value + 0.5))


class SM2Algorithm:
    """
    SM-2 style spaced repetition scheduling on a four-button grade scale.
    Based on SuperMemo 2 algorithm by Piotr Wozniak.
    """

    @staticmethod
    def validate_grade(grade) -> Grade:
        """Coerce an integer grade to Grade, raising InvalidGrade otherwise"""
        if isinstance(grade, bool) or not isinstance(grade, int):
            raise InvalidGrade(grade)
        try:
            return Grade(grade)
        except ValueError:
            raise InvalidGrade(grade) from None

    @staticmethod
    def calculate_next_review(
        grade: int,
        interval: int,
        ease_factor: float,
        reference_time: Optional[datetime] = None  # Optional: use custom time instead of now
    ) -> Tuple[int, float, datetime]:
        """
        Calculate the next review time and update SM-2 parameters.

        Args:
            grade: Review grade, 0=Again, 1=Hard, 2=Good, 3=Easy
            interval: Current interval in days (0 for a card never reviewed)
            ease_factor: Current ease factor, 1.3-2.5
            reference_time: Optional reference time (defaults to now)

        Returns:
            (new_interval, new_ease_factor, next_review)
        """
        grade = SM2Algorithm.validate_grade(grade)

        new_ease = ease_factor
        if grade == Grade.AGAIN:
            new_ease = max(MIN_EASE, ease_factor - 0.2)
            new_interval = MIN_INTERVAL
        elif grade == Grade.HARD:
            new_ease = max(MIN_EASE, ease_factor - 0.15)
            new_interval = max(MIN_INTERVAL, _round_half_up(interval * 1.2))
        elif grade == Grade.GOOD:
            if interval == 0:
                new_interval = 1
            elif interval == 1:
                new_interval = 3
            else:
                new_interval = _round_half_up(interval * ease_factor)
        else:
            new_ease = min(MAX_EASE, ease_factor + 0.15)
            if interval == 0:
                new_interval = 3
            elif interval == 1:
                new_interval = 5
            else:
                new_interval = _round_half_up(interval * ease_factor * 1.3)

        # Enforce bounds
        new_interval = min(MAX_INTERVAL, max(MIN_INTERVAL, new_interval))
        new_ease = min(MAX_EASE, max(MIN_EASE, new_ease))

        # Calendar-day arithmetic on local wall-clock time
        base_time = reference_time if reference_time else datetime.now()
        next_review = base_time + timedelta(days=new_interval)

        return new_interval, new_ease, next_review

    @staticmethod
    def initialize_card() -> dict:
        """Scheduling fields for a newly created card"""
        return {
            "ease_factor": DEFAULT_EASE,
            "interval": 0,
            "next_review": None,
            "last_reviewed": None,
            "reviews": 0,
            "correct": 0,
            "streak": 0,
        }

    @staticmethod
    def is_correct(grade: int) -> bool:
        return grade >= Grade.GOOD

    @staticmethod
    def is_due(next_review: Optional[datetime], reference_time: Optional[datetime] = None) -> bool:
        """Check if a card is due for review. A card never scheduled is always due."""
        if next_review is None:
            return True
        now = reference_time if reference_time else datetime.now()
        return now >= next_review

    @staticmethod
    def get_days_overdue(next_review: Optional[datetime], reference_time: Optional[datetime] = None) -> int:
        """Calculate how many whole days overdue a review is"""
        if next_review is None:
            return 0
        now = reference_time if reference_time else datetime.now()
        if now < next_review:
            return 0
        return (now.date() - next_review.date()).days
